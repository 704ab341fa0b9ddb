"""Pytest configuration and shared fixtures.

Provides sample P4 programs and an in-memory LLM provider.
"""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from utils.common.llm_tools import BaseLLMProvider, LLMConfig, LLMTools

BASIC_P4 = textwrap.dedent(
    """\
    #include <core.p4>
    #include <v1model.p4>

    const bit<16> TYPE_IPV4 = 0x800;

    header ethernet_t {
        bit<48>   dstAddr;
        bit<48>   srcAddr;
        bit<16>   etherType;
    }

    struct metadata {
        /* empty */
    }

    struct headers {
        ethernet_t   ethernet;
    }

    parser MyParser(packet_in packet,
                    out headers hdr,
                    inout metadata meta,
                    inout standard_metadata_t standard_metadata) {
        state start {
            packet.extract(hdr.ethernet);
            transition accept;
        }
    }

    control MyIngress(inout headers hdr,
                      inout metadata meta,
                      inout standard_metadata_t standard_metadata) {
        action drop() {
            mark_to_drop(standard_metadata);
        }

        action ipv4_forward(bit<48> dstAddr, bit<9> port) {
            standard_metadata.egress_spec = port;
            hdr.ethernet.srcAddr = hdr.ethernet.dstAddr;
            hdr.ethernet.dstAddr = dstAddr;
            if (port == 0) {
                drop();
            }
        }

        table ipv4_lpm {
            key = {
                hdr.ipv4.dstAddr: lpm;
            }
            actions = {
                ipv4_forward;
                drop;
                NoAction;
            }
            size = 1024;
            default_action = drop();
        }

        apply {
            if (hdr.ipv4.isValid()) {
                ipv4_lpm.apply();
            }
        }
    }

    control MyEgress(inout headers hdr,
                     inout metadata meta,
                     inout standard_metadata_t standard_metadata) {
        apply {  }
    }
    """
)

ONE_LINE_P4 = (
    "control C(){ table T { key={ a:exact; } actions={ act1; } size=64; "
    "default_action=act1; } }"
)


class FakeProvider(BaseLLMProvider):
    """Records requests and answers with a canned reply."""

    def __init__(self, config: LLMConfig, reply: str = "It means the table is undefined.",
                 error: Optional[Exception] = None) -> None:
        super().__init__(config)
        self.reply = reply
        self.error = error
        self.calls: List[Dict] = []

    def complete(self, prompt, system=None) -> str:
        self.calls.append({"prompt": prompt, "system": system})
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def basic_p4() -> str:
    return BASIC_P4


@pytest.fixture
def one_line_p4() -> str:
    return ONE_LINE_P4


@pytest.fixture
def llm_config() -> LLMConfig:
    return LLMConfig(llm_api_key="test-key", max_prompt_tokens=50_000)


@pytest.fixture
def fake_provider(llm_config: LLMConfig) -> FakeProvider:
    return FakeProvider(llm_config)


@pytest.fixture
def llm_tools(llm_config: LLMConfig, fake_provider: FakeProvider) -> LLMTools:
    return LLMTools(config=llm_config, provider=fake_provider)


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Minimal isolated global_config.yaml."""
    path = tmp_path / "global_config.yaml"
    path.write_text(
        textwrap.dedent(
            f"""\
            paths:
              out_dir: {tmp_path / 'out'}
            extraction:
              split_statements: true
              key_field_mode: verbatim
            llm:
              model: anthropic::claude-sonnet-4-20250514
              llm_api_key: test-key
              timeout: 5
            logging:
              level: WARNING
            """
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove environment overrides that would leak into GlobalConfig."""
    from utils.parsers.global_config_parser import ENV_OVERRIDES

    for key in ENV_OVERRIDES:
        monkeypatch.delenv(key, raising=False)
