"""Tests for the ErrorExplainerAgent prompt assembly and request flow."""

from __future__ import annotations

from pathlib import Path

import pytest

from agents.error_explainer_agent import ErrorExplainerAgent
from extractors import DeclarationTable
from prompts.explain_error_prompt import EXPLAIN_ERROR_SYSTEM_PROMPT
from utils.common.llm_tools import LLMConfig, LLMProviderError, LLMTools

from conftest import FakeProvider


class TestBuildPrompt:
    def test_includes_error_structure_and_numbered_source(
        self, llm_tools: LLMTools, basic_p4: str
    ) -> None:
        prompt = ErrorExplainerAgent(llm_tools).build_prompt(
            'error: ipv4_lpm: no such table', source=basic_p4, source_name='basic.p4'
        )

        assert 'error: ipv4_lpm: no such table' in prompt
        assert '• Control: MyIngress' in prompt
        assert '    1 | #include <core.p4>' in prompt
        assert 'SOURCE (basic.p4):' in prompt

    def test_no_structure(self, llm_tools: LLMTools) -> None:
        prompt = ErrorExplainerAgent(llm_tools).build_prompt(
            'syntax error', source='', declarations=DeclarationTable()
        )

        assert 'No controls or tables were recognized.' in prompt
        assert '(no source provided)' in prompt

    def test_custom_template(self, tmp_path: Path, fake_provider: FakeProvider) -> None:
        template = tmp_path / 'explain.md'
        template.write_text('E={error_text} N={source_name}', encoding='utf-8')
        config = LLMConfig(llm_api_key='test-key', explain_prompt_file_path=str(template))
        tools = LLMTools(config=config, provider=fake_provider)

        prompt = ErrorExplainerAgent(tools).build_prompt('boom', source_name='basic.p4')

        assert prompt == 'E=boom N=basic.p4'

    def test_broken_template_falls_back(self, tmp_path: Path, fake_provider: FakeProvider) -> None:
        config = LLMConfig(llm_api_key='test-key', explain_prompt_file_path=str(tmp_path / 'absent.md'))
        tools = LLMTools(config=config, provider=fake_provider)

        prompt = ErrorExplainerAgent(tools).build_prompt('boom')

        assert prompt.startswith('Explain the following error')


class TestExplain:
    def test_single_request(
        self, llm_tools: LLMTools, fake_provider: FakeProvider, basic_p4: str
    ) -> None:
        answer = ErrorExplainerAgent(llm_tools).explain('error: bad key', source=basic_p4)

        assert answer == fake_provider.reply
        assert len(fake_provider.calls) == 1
        assert fake_provider.calls[0]['system'] == EXPLAIN_ERROR_SYSTEM_PROMPT

    def test_empty_error_text(self, llm_tools: LLMTools, fake_provider: FakeProvider) -> None:
        with pytest.raises(ValueError):
            ErrorExplainerAgent(llm_tools).explain('   ')
        assert fake_provider.calls == []

    def test_provider_failure_propagates(self, llm_config: LLMConfig) -> None:
        provider = FakeProvider(llm_config, error=LLMProviderError('timed out'))
        agent = ErrorExplainerAgent(LLMTools(config=llm_config, provider=provider))

        with pytest.raises(LLMProviderError):
            agent.explain('error: x')
