"""
Error Explainer Agent: "explain this error" assistance for P4 programs.

Builds a prompt from an error message, the extracted program structure and
a line-numbered copy of the source, then sends it to the configured LLM in a
single request (explicit timeout, no retry).
"""

import logging
from typing import Optional

from extractors import DeclarationTable
from extractors.declaration_extractor import DeclarationExtractor
from prompts.explain_error_prompt import EXPLAIN_ERROR_PROMPT, EXPLAIN_ERROR_SYSTEM_PROMPT
from reports.description_renderer import DescriptionRenderer
from utils.common.llm_tools import LLMTools

logger = logging.getLogger(__name__)


class ErrorExplainerAgent:
    """
    Asks the LLM to explain a P4 error in the context of one source document.

    Usage:
        agent = ErrorExplainerAgent(LLMTools())
        answer = agent.explain("error: Could not find declaration for ipv4_lpm",
                               source=p4_text, source_name="basic.p4")
    """

    def __init__(
        self,
        llm_tools: Optional[LLMTools] = None,
        extractor: Optional[DeclarationExtractor] = None,
    ) -> None:
        self.llm_tools = llm_tools if llm_tools is not None else LLMTools()
        self.extractor = extractor if extractor is not None else DeclarationExtractor()

    def build_prompt(
        self,
        error_text: str,
        source: str = "",
        declarations: Optional[DeclarationTable] = None,
        source_name: str = "",
    ) -> str:
        """
        Render the user prompt for one explanation request.

        Declarations are extracted from ``source`` when not supplied. A custom
        markdown template (llm.explain_prompt_file_path) takes precedence over
        the built-in one when it renders successfully.
        """
        if declarations is None:
            declarations = self.extractor.extract(source)

        if declarations.is_empty():
            structure_summary = "No controls or tables were recognized."
        else:
            structure_summary = DescriptionRenderer(declarations).generate_text().strip()

        numbered_source = self._number_lines(
            self.llm_tools.truncate_to_token_budget(source or "")
        )

        template_vars = {
            "error_text": error_text.strip(),
            "structure_summary": structure_summary,
            "source_name": source_name or "untitled.p4",
            "numbered_source": numbered_source or "(no source provided)",
        }

        template_path = self.llm_tools.config.explain_prompt_file_path
        if template_path:
            rendered = self.llm_tools.update_markdown_prompt(
                self.llm_tools.resolve_relative_path(template_path), **template_vars
            )
            if rendered:
                return rendered
            logger.warning("Falling back to the built-in explain prompt")

        return EXPLAIN_ERROR_PROMPT.format(**template_vars)

    def explain(
        self,
        error_text: str,
        source: str = "",
        declarations: Optional[DeclarationTable] = None,
        source_name: str = "",
    ) -> str:
        """
        Explain ``error_text``.

        Raises:
            ValueError: error_text is empty.
            LLMError: the request failed, timed out or returned no text.
        """
        if not error_text or not error_text.strip():
            raise ValueError("error_text must not be empty")

        prompt = self.build_prompt(error_text, source, declarations, source_name)
        logger.info(
            "Requesting explanation (%d approx. prompt tokens)",
            self.llm_tools.count_tokens_approx(prompt),
        )
        response = self.llm_tools.llm_call(prompt, system=EXPLAIN_ERROR_SYSTEM_PROMPT)
        return self.llm_tools.format_llm_response(response)

    @staticmethod
    def _number_lines(text: str) -> str:
        if not text:
            return ""
        return "\n".join(
            f"{idx:5d} | {line}" for idx, line in enumerate(text.splitlines(), start=1)
        )
