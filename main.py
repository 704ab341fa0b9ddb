#!/usr/bin/env python
"""
main.py

Command-line entry point for P4 Structure Lens.

Key stages:
1. Configuration (global_config.yaml + environment) and input validation:
   the document must exist and be a P4 file
2. Structural extraction:
   - DeclarationExtractor: controls -> tables/actions (line scan)
   - DeclarationEnumerator: flat parser/control/struct/header lists
3. Output:
   - plain-text system description (default), JSON, or HTML summary page
   - action body / declaration location lookups
4. Optional LLM explanation of a compiler error (ErrorExplainerAgent)
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.markup import escape

from extractors.declaration_enumerator import DeclarationEnumerator
from extractors.declaration_extractor import DeclarationExtractor
from extractors.declaration_locator import DeclarationLocator
from extractors import ACTION_NOT_FOUND
from reports.description_renderer import DescriptionRenderer
from utils.common.llm_tools import LLMConfig, LLMError, LLMTools
from utils.parsers.global_config_parser import ConfigError, GlobalConfig

console = Console()

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

P4_EXTENSIONS = {".p4", ".p4_16", ".p4inc"}
DEFAULT_HTML_NAME = "system_description.html"
LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def detect_language(path: Path) -> str:
    """Map a file name to a document language kind ("p4" or the bare suffix)."""
    suffix = path.suffix.lower()
    if suffix in P4_EXTENSIONS:
        return "p4"
    return suffix.lstrip(".") or "plaintext"


class P4LensFramework:
    """Host layer: validates the document, runs extraction and writes output."""

    def __init__(self, args):
        """Initialize the framework with parsed CLI arguments."""
        self.args = args
        self.config: Optional[GlobalConfig] = None
        self.source_path: Optional[Path] = None
        self.source = ""

    def setup(self) -> bool:
        """Load configuration and the source document."""
        try:
            self.config = GlobalConfig(config_file=self.args.config_file)
        except ConfigError as e:
            console.print(f"[red]Error: could not load configuration: {escape(str(e))}[/red]")
            return False

        level = str(self.config.get("logging.level", "") or "").upper()
        if level in LOG_LEVELS and not (self.args.verbose or self.args.debug):
            logging.getLogger().setLevel(level)
        if self.config.get_bool("logging.debug"):
            logging.getLogger().setLevel(logging.DEBUG)

        self.source_path = Path(self.args.source).expanduser()
        if not self.source_path.is_file():
            console.print(f"[red]Error: source file does not exist: {escape(str(self.source_path))}[/red]")
            return False

        language = (self.args.language or detect_language(self.source_path)).lower()
        if language != "p4":
            console.print(f"[red]Error: {escape(self.source_path.name)} is not a P4 file (language: {escape(language)}).[/red]")
            return False

        try:
            self.source = self.source_path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            console.print(f"[red]Error: could not read {escape(str(self.source_path))}: {escape(str(e))}[/red]")
            return False

        return True

    def _extraction_config(self) -> Dict[str, Any]:
        return {
            "split_statements": self.config.get_bool("extraction.split_statements", True),
            "strip_comments": self.config.get_bool("extraction.strip_comments", True),
            "key_field_mode": self.config.get("extraction.key_field_mode", "verbatim"),
            "debug": self.args.debug,
        }

    def run(self) -> bool:
        """Execute extraction and produce the requested output."""
        if not self.setup():
            return False

        extractor = DeclarationExtractor(self._extraction_config())
        enumerator = DeclarationEnumerator({"debug": self.args.debug})
        locator = DeclarationLocator({"debug": self.args.debug})

        declarations = extractor.extract(self.source)
        top_level = enumerator.enumerate(self.source)
        renderer = DescriptionRenderer(declarations, top_level, source_name=self.source_path.name)

        if self.args.action:
            body = locator.get_action_body(self.source, self.args.action)
            location = locator.locate("action", self.source, self.args.action)
            if body == ACTION_NOT_FOUND:
                console.print(f"[yellow]{ACTION_NOT_FOUND}: {escape(self.args.action)}[/yellow]")
            else:
                console.print(f"[cyan]action {escape(self.args.action)}[/cyan] (offset {location.offset}, line {location.line})")
                console.print(body, markup=False, highlight=False)

        if self.args.locate:
            kind, name = self.args.locate
            location = locator.locate(kind, self.source, name)
            if location.found:
                console.print(f"{escape(kind)} {escape(name)}: offset {location.offset}, line {location.line}")
            else:
                console.print(f"[yellow]{escape(kind)} {escape(name)} not found[/yellow]")

        if self.args.json:
            payload = {
                "source": str(self.source_path),
                "controls": declarations.to_dict(),
                "top_level": top_level.to_dict(),
            }
            console.print_json(json.dumps(payload))
        elif not (self.args.action or self.args.locate or self.args.explain):
            console.print(renderer.generate_text(), markup=False, highlight=False)

        if self.args.html is not None:
            output_path = self.args.html or self._default_html_path()
            written = renderer.save_html(output_path)
            console.print(f"[green]System description written to {escape(str(written))}[/green]")

        if self.args.explain:
            return self._explain(declarations)

        return True

    def _default_html_path(self) -> str:
        return str(Path(self.config.get_path("paths.out_dir", "out")) / DEFAULT_HTML_NAME)

    def _explain(self, declarations) -> bool:
        from agents.error_explainer_agent import ErrorExplainerAgent

        llm_config = LLMConfig.from_env(self.config)
        if self.args.llm_model:
            llm_config.raw_model = self.args.llm_model

        agent = ErrorExplainerAgent(LLMTools(config=llm_config))
        console.print("\n[bold green]Explaining error...[/bold green]")
        try:
            answer = agent.explain(
                self.args.explain,
                source=self.source,
                declarations=declarations,
                source_name=self.source_path.name,
            )
        except (LLMError, ValueError) as e:
            logger.error("Explanation failed: %s", e, exc_info=self.args.debug)
            console.print(f"[red]Error explaining error: {escape(str(e))}[/red]")
            return False

        console.print(answer, markup=False, highlight=False)
        return True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Summarize the structure of a P4 program (controls, tables, actions, parsers, structs)."
    )
    parser.add_argument("source", help="Path to the P4 source file")
    parser.add_argument(
        "--language",
        default=None,
        help="Override the document language kind (derived from the file extension)"
    )
    parser.add_argument(
        "--config-file",
        default=None,
        help="Path to global_config.yaml (auto-discovered when omitted)"
    )

    # ─────────────────────────────────────────────────────────────────────────
    # Output
    # ─────────────────────────────────────────────────────────────────────────
    output_group = parser.add_argument_group("Output")
    output_group.add_argument(
        "--json",
        action="store_true",
        help="Print extracted declarations as JSON"
    )
    output_group.add_argument(
        "--html",
        nargs="?",
        const="",
        default=None,
        metavar="PATH",
        help=f"Write the HTML summary page (default: <paths.out_dir>/{DEFAULT_HTML_NAME})"
    )

    # ─────────────────────────────────────────────────────────────────────────
    # Lookups
    # ─────────────────────────────────────────────────────────────────────────
    lookup_group = parser.add_argument_group("Lookups")
    lookup_group.add_argument(
        "--action",
        metavar="NAME",
        help="Print the body and location of an action"
    )
    lookup_group.add_argument(
        "--locate",
        nargs=2,
        metavar=("KIND", "NAME"),
        help=f"Print where a declaration starts (KIND: {', '.join(DeclarationLocator.kinds())})"
    )

    # ─────────────────────────────────────────────────────────────────────────
    # LLM
    # ─────────────────────────────────────────────────────────────────────────
    llm_group = parser.add_argument_group("LLM Assistance")
    llm_group.add_argument(
        "--explain",
        metavar="ERROR_TEXT",
        help="Ask the LLM to explain a compiler error for this program"
    )
    llm_group.add_argument(
        "--llm-model",
        default=None,
        help="Override llm.model (e.g. anthropic::claude-sonnet-4-20250514)"
    )

    # ─────────────────────────────────────────────────────────────────────────
    # Debugging & Verbosity
    # ─────────────────────────────────────────────────────────────────────────
    debug_group = parser.add_argument_group("Debugging & Verbosity")
    debug_group.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable detailed logging"
    )
    debug_group.add_argument(
        "-D", "--debug",
        action="store_true",
        help="Enable debug mode with full tracebacks"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # Setup logging level
    if args.verbose or args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    framework = P4LensFramework(args)
    try:
        success = framework.run()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow]")
        return 130

    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
