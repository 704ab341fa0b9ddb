"""
Renders extracted P4 structure as a plain-text description or an HTML page.
"""

from __future__ import annotations

import logging
from html import escape
from pathlib import Path
from typing import List, Optional

from extractors import DeclarationTable, TableInfo, TopLevelDeclarations

logger = logging.getLogger(__name__)


class DescriptionRenderer:
    """
    DescriptionRenderer

    Usage:
        renderer = DescriptionRenderer(declarations, top_level)
        print(renderer.generate_text())
        renderer.save_html("out/system_description.html")

    The renderer only reads the extraction results it is given.
    """

    TITLE = "System Description"

    def __init__(
        self,
        declarations: DeclarationTable,
        top_level: Optional[TopLevelDeclarations] = None,
        source_name: str = "",
    ) -> None:
        self.declarations = declarations if declarations is not None else DeclarationTable()
        self.top_level = top_level
        self.source_name = source_name

    # ----------------- Text -----------------

    def generate_text(self) -> str:
        lines: List[str] = ["The system consists of the following components:"]
        for control_name, control in self.declarations.controls.items():
            lines.append(f"• Control: {control_name}")
            if control.tables:
                lines.append("  ◦ Tables:")
                for table_name, table in control.tables.items():
                    lines.append(f"    ▪ {table_name}")
                    lines.extend(self._table_detail_lines(table))
            if control.actions:
                lines.append("  ◦ Actions:")
                for action in control.actions:
                    lines.append(f"    ▪ {action}")

        if self.top_level is not None:
            for label, names in (
                ("Parsers", self.top_level.parsers),
                ("Structs", self.top_level.structs),
                ("Headers", self.top_level.headers),
            ):
                if names:
                    lines.append(f"• {label}: {', '.join(names)}")

        return "\n".join(lines) + "\n"

    @staticmethod
    def _table_detail_lines(table: TableInfo) -> List[str]:
        details: List[str] = []
        if table.key_fields:
            details.append(f"      key: {', '.join(table.key_fields)}")
        if table.action_names:
            details.append(f"      actions: {', '.join(table.action_names)}")
        if table.size is not None:
            details.append(f"      size: {table.size}")
        if table.default_action:
            details.append(f"      default_action: {table.default_action}")
        return details

    # ----------------- HTML -----------------

    def generate_html(self) -> str:
        """
        Generate a full HTML summary page.
        """
        title = self.TITLE
        if self.source_name:
            title = f"{self.TITLE}: {self.source_name}"

        html_parts: List[str] = []
        html_parts.append(f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>{escape(title)}</title>
<style>
  body {{ font-family: sans-serif; margin: 16px; color: #222; }}
  h1 {{ font-size: 1.6em; }}
  h2 {{ font-size: 1.3em; margin-top: 1.2em; }}
  ul {{ list-style: disc; padding-left: 20px; }}
  table {{ border-collapse: collapse; margin: 6px 0 12px 0; }}
  th, td {{ border: 1px solid #ddd; padding: 4px 8px; font-size: 0.9em; vertical-align: top; }}
  th {{ background: #f0f0f0; text-align: left; }}
  code {{ font-family: Consolas, monospace; background: #f6f6f6; padding: 1px 4px; }}
  .empty {{ color: #777; font-style: italic; }}
</style>
</head>
<body>
""")
        html_parts.append(f"<h1>{escape(title)}</h1>\n")

        html_parts.append("<h2>Controls</h2>\n")
        if self.declarations.is_empty():
            html_parts.append("<p class='empty'>No controls found.</p>\n")
        for control_name, control in self.declarations.controls.items():
            html_parts.append(f"<h3>Control: <code>{escape(control_name)}</code></h3>\n")
            if control.tables:
                html_parts.append(
                    "<table>\n<tr><th>Table</th><th>Key</th><th>Actions</th>"
                    "<th>Size</th><th>Default action</th></tr>\n"
                )
                for table_name, table in control.tables.items():
                    size = "" if table.size is None else str(table.size)
                    html_parts.append(
                        f"<tr><td><code>{escape(table_name)}</code></td>"
                        f"<td>{self._html_list(table.key_fields)}</td>"
                        f"<td>{self._html_list(table.action_names)}</td>"
                        f"<td>{escape(size)}</td>"
                        f"<td>{escape(table.default_action or '')}</td></tr>\n"
                    )
                html_parts.append("</table>\n")
            if control.actions:
                html_parts.append(f"<p>Actions:</p>\n{self._html_list(control.actions)}\n")

        if self.top_level is not None:
            for label, names in (
                ("Parsers", self.top_level.parsers),
                ("Structs", self.top_level.structs),
                ("Headers", self.top_level.headers),
            ):
                html_parts.append(f"<h2>{label}</h2>\n")
                if names:
                    html_parts.append(self._html_list(names) + "\n")
                else:
                    html_parts.append(f"<p class='empty'>No {label.lower()} found.</p>\n")

        html_parts.append("</body>\n</html>\n")
        return "".join(html_parts)

    @staticmethod
    def _html_list(items: List[str]) -> str:
        if not items:
            return ""
        entries = "".join(f"<li><code>{escape(item)}</code></li>" for item in items)
        return f"<ul>{entries}</ul>"

    def save_html(self, output_path: str) -> str:
        """
        Generate HTML and save it to the given file path.

        Returns the absolute path of the written file.
        """
        html = self.generate_html()
        out_path = Path(output_path)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(html, encoding="utf-8")
        logger.info("System description written to: %s", out_path)
        return str(out_path.resolve())
