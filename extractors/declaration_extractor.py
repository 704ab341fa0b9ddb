"""
Declaration Extractor: line-scanning structure recovery for P4 programs.

Walks the source one line at a time and attributes tables, table metadata
(key fields, candidate actions, size, default action) and action declarations
to the most recently seen control. There is no grammar behind this: it is a
best-effort scan that never raises and simply yields less structure when the
input is malformed.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

from . import ControlInfo, DeclarationTable, TableInfo

logger = logging.getLogger(__name__)


class DeclarationExtractor:
    """
    Builds a DeclarationTable from a single P4 source document.

    Handles:
    - Control declarations (each one opens a fresh scope)
    - Tables nested in the current control
    - ``key = { ... }`` and ``actions = { ... }`` blocks of the current table
    - ``size = N;`` and ``default_action = NAME;`` table properties
    - Action declarations nested in the current control

    Anything seen before the first control is dropped. When a control or a
    table name repeats, the later declaration replaces the earlier one.
    Table properties are only read until the brace that closes the table
    body, and an opening brace on its own line counts as part of the line
    before it.
    """

    _CONTROL_RE = re.compile(r"\bcontrol\s+(\w+)\s*(?:<[^>]*>)?\s*\(")
    _TABLE_RE = re.compile(r"\btable\s+(\w+)\s*\{")
    _ACTION_RE = re.compile(r"\baction\s+(\w+)\s*\(")
    # Table properties; a preceding "." means a header or metadata field instead
    _KEY_OPEN_RE = re.compile(r"(?<![\w.])key\s*=\s*\{")
    _ACTIONS_OPEN_RE = re.compile(r"(?<![\w.])actions\s*=\s*\{")
    _SIZE_RE = re.compile(r"(?<![\w.])size\s*=\s*(\d+)\s*;")
    _DEFAULT_ACTION_RE = re.compile(r"(?<![\w.])default_action\s*=\s*(\w+)")

    # Narrower per-field patterns used inside key/actions blocks
    _KEY_FIELD_RE = re.compile(r"^(.+)\s*:\s*(\w+)\s*(?:@\w+(?:\([^)]*\))?\s*)*;")
    _ACTION_ENTRY_RE = re.compile(r"^(?:@\w+(?:\([^)]*\))?\s+)*(\w+)")

    _OPEN_BRACE_ON_NEXT_LINE_RE = re.compile(r"[ \t]*\n\s*(?=\{)")

    KEY_FIELD_MODES = ("verbatim", "field")

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize the extractor.

        Args:
            config: Optional dict with keys:
                - split_statements (bool): break lines after ``{`` and ``;``
                  and around ``}`` before scanning (default True)
                - strip_comments (bool): remove // and /* */ comments first
                  (default True)
                - key_field_mode (str): "verbatim" keeps each key line as
                  written, "field" reduces it to ``name: match_kind``
                - debug (bool): verbose debug logging
        """
        config = config or {}
        self.split_statements = bool(config.get("split_statements", True))
        self.strip_comments = bool(config.get("strip_comments", True))
        self.debug = bool(config.get("debug", False))

        mode = str(config.get("key_field_mode") or "verbatim").strip().lower()
        if mode not in self.KEY_FIELD_MODES:
            logger.warning("Unknown key_field_mode '%s'; falling back to 'verbatim'", mode)
            mode = "verbatim"
        self.key_field_mode = mode

        if self.debug:
            logger.setLevel(logging.DEBUG)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def extract(self, source: str) -> DeclarationTable:
        """
        Scan ``source`` and return the declarations found.

        Args:
            source: Complete text of one P4 document.

        Returns:
            A freshly built DeclarationTable (empty when nothing matched).
        """
        result = DeclarationTable()
        if not isinstance(source, str) or not source.strip():
            return result

        current_control = ""
        current_table = ""
        parsing_keys = False
        parsing_actions = False
        table_depth = 0
        table_closed = False

        for line in self._split_lines(source):
            stripped = line.strip()

            # The line holding a table's final "}" still belongs to the table
            if table_closed:
                current_table = ""
                parsing_keys = False
                parsing_actions = False
                table_closed = False
            if current_table:
                table_depth += line.count("{") - line.count("}")
                table_closed = table_depth <= 0

            # An open key/actions block consumes every line up to a sole "}"
            if parsing_keys or parsing_actions:
                if stripped == "}":
                    parsing_keys = False
                    parsing_actions = False
                    continue
                if not stripped:
                    continue
                info = result.controls[current_control].tables[current_table]
                if parsing_keys:
                    info.key_fields.append(self._reduce_key_field(stripped))
                else:
                    name = self._reduce_action_entry(stripped)
                    if name:
                        info.action_names.append(name)
                continue

            control_match = self._CONTROL_RE.search(line)
            if control_match:
                current_control = control_match.group(1)
                current_table = ""
                table_closed = False
                if current_control in result.controls:
                    logger.debug("Control '%s' redeclared; keeping the later one", current_control)
                result.controls[current_control] = ControlInfo()
                continue

            table_match = self._TABLE_RE.search(line)
            if table_match:
                if not current_control:
                    logger.debug("Dropping table '%s' declared outside a control", table_match.group(1))
                    continue
                current_table = table_match.group(1)
                tables = result.controls[current_control].tables
                if current_table in tables:
                    logger.debug(
                        "Table '%s' redeclared in control '%s'; keeping the later one",
                        current_table, current_control,
                    )
                tables[current_table] = TableInfo()
                rest = line[table_match.end() - 1:]
                table_depth = rest.count("{") - rest.count("}")
                table_closed = table_depth <= 0
                continue

            if current_control and current_table:
                info = result.controls[current_control].tables[current_table]
                key_open = self._KEY_OPEN_RE.search(line)
                if key_open:
                    parsing_keys = not self._read_inline_block(
                        line[key_open.end():], self._reduce_key_field, info.key_fields
                    )
                    continue
                actions_open = self._ACTIONS_OPEN_RE.search(line)
                if actions_open:
                    parsing_actions = not self._read_inline_block(
                        line[actions_open.end():], self._reduce_action_entry, info.action_names
                    )
                    continue
                size_match = self._SIZE_RE.search(line)
                if size_match:
                    info.size = int(size_match.group(1))
                    continue
                default_match = self._DEFAULT_ACTION_RE.search(line)
                if default_match:
                    info.default_action = default_match.group(1)
                    continue

            action_match = self._ACTION_RE.search(line)
            if action_match:
                if current_control:
                    result.controls[current_control].actions.append(action_match.group(1))
                else:
                    logger.debug("Dropping action '%s' declared outside a control", action_match.group(1))

        logger.debug(
            "Extracted %d control(s), %d table(s)", len(result), result.table_count()
        )
        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _split_lines(self, source: str) -> List[str]:
        """Break the source into the lines the scanner walks over."""
        if self.strip_comments:
            source = self._strip_comments(source)
        # "table T\n{" scans like "table T {"
        source = self._OPEN_BRACE_ON_NEXT_LINE_RE.sub(" ", source)
        if self.split_statements:
            source = (
                source.replace("{", "{\n")
                .replace("}", "\n}\n")
                .replace(";", ";\n")
            )
        return source.split("\n")

    @staticmethod
    def _strip_comments(source: str) -> str:
        """Remove // line comments and /* */ block comments."""
        source = re.sub(r"/\*.*?\*/", "", source, flags=re.DOTALL)
        return re.sub(r"//.*?$", "", source, flags=re.MULTILINE)

    @staticmethod
    def _read_inline_block(text: str, reduce, into: List[str]) -> bool:
        """Collect ``a; b; }`` entries of a block closed on its opening line.

        Returns False, collecting nothing, when the block stays open.
        """
        if "}" not in text:
            return False
        for entry in text.split("}", 1)[0].split(";"):
            entry = entry.strip()
            if entry:
                value = reduce(entry + ";")
                if value:
                    into.append(value)
        return True

    def _reduce_key_field(self, line: str) -> str:
        if self.key_field_mode == "verbatim":
            return line
        match = self._KEY_FIELD_RE.match(line)
        if not match:
            return line
        return f"{match.group(1).strip()}: {match.group(2)}"

    def _reduce_action_entry(self, line: str) -> str:
        match = self._ACTION_ENTRY_RE.match(line)
        return match.group(1) if match else ""
