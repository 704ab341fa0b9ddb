# llm_tools.py
"""
Anthropic Claude access for the P4 error explainer.

One request per user action: the client is built with an explicit timeout and
``max_retries=0`` unless configured otherwise, and every SDK failure surfaces
as an LLMError subclass so the CLI can report it and exit cleanly.

Usage:
    from utils.common.llm_tools import LLMTools

    tools = LLMTools()                      # settings from global_config.yaml
    text = tools.llm_call("Explain this P4 compiler error ...", system="...")
"""

from __future__ import annotations

import abc
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import anthropic
from dotenv import load_dotenv

# LLM_API_KEY and friends may live in .env
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "anthropic::claude-sonnet-4-20250514"

TRUNCATION_MARKER = "\n\n[... truncated due to token limit ...]"


@dataclass
class LLMConfig:
    """Model, credentials and request limits for the explainer."""

    # "anthropic::<model>" or a bare model name
    raw_model: str = DEFAULT_MODEL
    llm_api_key: Optional[str] = None
    max_tokens: int = 2048
    temperature: float = 0.1
    timeout: int = 60
    max_retries: int = 0
    # Source text beyond this budget is cut before prompting
    max_prompt_tokens: int = 50_000
    explain_prompt_file_path: Optional[str] = None

    @property
    def model(self) -> str:
        return self.raw_model.split("::", 1)[-1].strip()

    @classmethod
    def from_env(cls, global_config=None) -> "LLMConfig":
        """Read the ``llm`` section (plus the prompt path) of GlobalConfig."""
        if global_config is None:
            from utils.parsers.global_config_parser import GlobalConfig
            global_config = GlobalConfig()
        gc = global_config

        return cls(
            raw_model=gc.get("llm.model") or DEFAULT_MODEL,
            llm_api_key=gc.get("llm.llm_api_key") or None,
            max_tokens=gc.get_int("llm.max_tokens", 2048),
            temperature=gc.get_float("llm.temperature", 0.1),
            timeout=gc.get_int("llm.timeout", 60),
            max_retries=gc.get_int("llm.max_retries", 0),
            max_prompt_tokens=gc.get_int("llm.max_prompt_tokens", 50_000),
            explain_prompt_file_path=gc.get("paths.explain_prompt_file_path"),
        )


class LLMError(Exception):
    """Base error for LLM operations."""


class LLMProviderError(LLMError):
    """The request failed or timed out."""


class LLMResponseError(LLMError):
    """The response carried no usable text."""


class ProviderNotAvailableError(LLMError):
    """No client can be built (missing API key)."""


class BaseLLMProvider(abc.ABC):
    """Sends one prompt and returns the completion text."""

    def __init__(self, config: LLMConfig):
        self.config = config

    @abc.abstractmethod
    def complete(self, prompt: str, system: Optional[str] = None) -> str:
        ...


# Output-token ceilings by model family
_MODEL_MAX_OUTPUT = {
    "claude-sonnet": 64000,
    "claude-haiku": 64000,
    "claude-opus": 32000,
}
_DEFAULT_MAX_OUTPUT = 16384


def _clamp_max_tokens(model: str, requested: int) -> int:
    model_lower = model.lower()
    limit = next(
        (cap for family, cap in _MODEL_MAX_OUTPUT.items() if family in model_lower),
        _DEFAULT_MAX_OUTPUT,
    )
    return min(requested, limit)


class AnthropicProvider(BaseLLMProvider):
    """Claude Messages API through the official ``anthropic`` SDK."""

    def __init__(self, config: LLMConfig):
        super().__init__(config)
        self._client: Optional[anthropic.Anthropic] = None
        if not config.llm_api_key:
            logger.warning(
                "No LLM API key configured; set LLM_API_KEY in .env or llm.llm_api_key."
            )

    @property
    def client(self) -> anthropic.Anthropic:
        if self._client is None:
            if not self.config.llm_api_key:
                raise ProviderNotAvailableError(
                    "No Anthropic API key configured (LLM_API_KEY / llm.llm_api_key)."
                )
            self._client = anthropic.Anthropic(
                api_key=self.config.llm_api_key,
                timeout=float(self.config.timeout),
                max_retries=self.config.max_retries,
            )
        return self._client

    def complete(self, prompt: str, system: Optional[str] = None) -> str:
        request = {
            "model": self.config.model,
            "max_tokens": _clamp_max_tokens(self.config.model, self.config.max_tokens),
            "temperature": self.config.temperature,
            "messages": [{"role": "user", "content": prompt}],
            "timeout": float(self.config.timeout),
        }
        if system:
            request["system"] = system

        client = self.client
        started = time.monotonic()
        try:
            response = client.messages.create(**request)
        except anthropic.APITimeoutError as e:
            logger.error("Anthropic request timed out after %ss", self.config.timeout)
            raise LLMProviderError(
                f"Anthropic API call timed out after {self.config.timeout}s"
            ) from e
        except anthropic.APIError as e:
            logger.error("Anthropic request failed: %s", e)
            raise LLMProviderError(f"Anthropic API call failed: {e}") from e

        logger.debug(
            "Anthropic %s answered in %.2fs (%d in / %d out tokens)",
            self.config.model,
            time.monotonic() - started,
            response.usage.input_tokens,
            response.usage.output_tokens,
        )

        text = "\n".join(
            block.text for block in response.content if getattr(block, "text", None)
        )
        if not text:
            raise LLMResponseError("Anthropic API returned no text content")
        return text


def create_provider(config: LLMConfig) -> BaseLLMProvider:
    logger.info("LLM provider: Anthropic, model: %s", config.model)
    return AnthropicProvider(config)


class LLMTools:
    """
    Facade used by the agents: one call, prompt templates and token budgeting.

    Args:
        config: LLMConfig; read from GlobalConfig when omitted.
        model: Overrides ``config.raw_model``.
        provider: Pre-built provider (tests pass an in-memory one).
    """

    def __init__(
        self,
        config: Optional[LLMConfig] = None,
        model: Optional[str] = None,
        provider: Optional[BaseLLMProvider] = None,
    ):
        self.config = config if config else LLMConfig.from_env()
        if model:
            self.config.raw_model = model
        self.provider = provider if provider is not None else create_provider(self.config)

    @staticmethod
    def get_repo_root() -> Path:
        return Path(__file__).resolve().parent.parent.parent

    @classmethod
    def resolve_relative_path(cls, path: Union[str, Path]) -> Path:
        """Relative paths are taken from the project root."""
        p = Path(path)
        return p if p.is_absolute() else cls.get_repo_root() / p

    def llm_call(self, prompt: str, system: Optional[str] = None) -> str:
        """
        Send ``prompt`` in a single request.

        Raises:
            ProviderNotAvailableError: no API key.
            LLMProviderError: the request failed or timed out.
            LLMResponseError: the response carried no text.
        """
        return self.provider.complete(prompt, system=system)

    @staticmethod
    def format_llm_response(response: Optional[str]) -> str:
        if response is None:
            return "No response."
        return response.strip()

    @staticmethod
    def update_markdown_prompt(md_filepath: Union[str, Path], **template_vars) -> Optional[str]:
        """Render a markdown template with ``str.format``; None if it cannot be used."""
        try:
            content = Path(md_filepath).read_text(encoding="utf-8").strip()
            return content.format(**template_vars)
        except FileNotFoundError:
            logger.error("Prompt template not found: %s", md_filepath)
        except (KeyError, IndexError, ValueError) as e:
            logger.error("Error rendering prompt template %s: %s", md_filepath, e)
        return None

    @staticmethod
    def count_tokens_approx(text: str) -> int:
        # ~4 characters per token
        return len(text) // 4

    def truncate_to_token_budget(self, text: str, max_tokens: Optional[int] = None) -> str:
        budget = max_tokens or self.config.max_prompt_tokens
        if self.count_tokens_approx(text) <= budget:
            return text
        return text[:budget * 4] + TRUNCATION_MARKER
