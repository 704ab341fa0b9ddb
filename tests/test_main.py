"""Tests for the command-line host."""

from __future__ import annotations

from pathlib import Path

import pytest

import main
from utils.common.llm_tools import LLMProviderError, LLMTools

from conftest import FakeProvider


@pytest.fixture
def p4_file(tmp_path: Path, basic_p4: str) -> Path:
    path = tmp_path / 'basic.p4'
    path.write_text(basic_p4, encoding='utf-8')
    return path


@pytest.fixture
def run(config_file: Path, clean_env):
    def _run(*args: str) -> int:
        return main.main([*args, '--config-file', str(config_file)])
    return _run


class TestValidation:
    def test_missing_file(self, run, tmp_path: Path) -> None:
        assert run(str(tmp_path / 'absent.p4')) == 1

    def test_rejects_non_p4_document(self, run, tmp_path: Path, basic_p4: str) -> None:
        path = tmp_path / 'basic.txt'
        path.write_text(basic_p4, encoding='utf-8')

        assert run(str(path)) == 1

    def test_language_override(self, run, tmp_path: Path, basic_p4: str) -> None:
        path = tmp_path / 'basic.txt'
        path.write_text(basic_p4, encoding='utf-8')

        assert run(str(path), '--language', 'p4') == 0

    def test_bad_config_file(self, p4_file: Path, tmp_path: Path, clean_env) -> None:
        assert main.main([str(p4_file), '--config-file', str(tmp_path / 'absent.yaml')]) == 1

    def test_detect_language(self) -> None:
        assert main.detect_language(Path('prog.p4')) == 'p4'
        assert main.detect_language(Path('prog.P4')) == 'p4'
        assert main.detect_language(Path('prog.c')) == 'c'


class TestOutput:
    def test_text_description(self, run, p4_file: Path, capsys) -> None:
        assert run(str(p4_file)) == 0

        out = capsys.readouterr().out
        assert 'The system consists of the following components:' in out
        assert 'Control: MyIngress' in out

    def test_json(self, run, p4_file: Path, capsys) -> None:
        assert run(str(p4_file), '--json') == 0

        out = capsys.readouterr().out
        assert '"ipv4_lpm"' in out
        assert '"MyParser"' in out

    def test_html_explicit_path(self, run, p4_file: Path, tmp_path: Path) -> None:
        target = tmp_path / 'report' / 'summary.html'

        assert run(str(p4_file), '--html', str(target)) == 0
        assert 'MyIngress' in target.read_text(encoding='utf-8')

    def test_html_default_path(self, run, p4_file: Path, tmp_path: Path) -> None:
        assert run(str(p4_file), '--html') == 0
        assert (tmp_path / 'out' / main.DEFAULT_HTML_NAME).is_file()

    def test_action_lookup(self, run, p4_file: Path, capsys) -> None:
        assert run(str(p4_file), '--action', 'drop') == 0

        out = capsys.readouterr().out
        assert 'mark_to_drop(standard_metadata);' in out
        assert 'The system consists' not in out

    def test_action_not_found(self, run, p4_file: Path, capsys) -> None:
        assert run(str(p4_file), '--action', 'missing') == 0
        assert 'Action not found' in capsys.readouterr().out

    def test_locate(self, run, p4_file: Path, capsys) -> None:
        assert run(str(p4_file), '--locate', 'table', 'ipv4_lpm') == 0
        assert 'table ipv4_lpm: offset' in capsys.readouterr().out

    def test_markup_in_names_is_printed_literally(self, run, p4_file: Path, capsys) -> None:
        assert run(str(p4_file), '--action', '[/x]') == 0
        assert run(str(p4_file), '--locate', 'table', '[bold]t[/]') == 0

        out = capsys.readouterr().out
        assert 'Action not found: [/x]' in out
        assert 'table [bold]t[/] not found' in out


class TestExplain:
    def test_explain(self, run, p4_file: Path, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
        providers = []

        def _tools(config):
            provider = FakeProvider(config, reply='Undefined table reference.')
            providers.append(provider)
            return LLMTools(config=config, provider=provider)

        monkeypatch.setattr(main, 'LLMTools', _tools)

        assert run(str(p4_file), '--explain', 'error: ipv4_lpm undefined') == 0
        assert 'Undefined table reference.' in capsys.readouterr().out
        assert len(providers[0].calls) == 1

    def test_explain_failure(self, run, p4_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(
            main,
            'LLMTools',
            lambda config: LLMTools(
                config=config, provider=FakeProvider(config, error=LLMProviderError('timed out'))
            ),
        )

        assert run(str(p4_file), '--explain', 'error: x') == 1
