"""
Declaration Locator: action-body slicing and declaration offset lookup.

Used by the host layer to show an action's body and to jump to the place where
a table, control or action is declared. Lookups are independent re-scans of
the source text; nothing is shared with the extractors.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, Optional, Tuple

from . import ACTION_NOT_FOUND, DeclarationLocation

logger = logging.getLogger(__name__)


class DeclarationLocator:
    """
    Finds declarations by name in raw P4 source.

    Absence is reported through values, never exceptions:
    - ``get_action_body`` returns ``ACTION_NOT_FOUND``
    - ``find_*_offset`` return -1
    """

    # kind -> (prefix, suffix) wrapped around the escaped declaration name
    _DECLARATION_PATTERNS: Dict[str, Tuple[str, str]] = {
        "action": (r"\baction\s+", r"\s*\("),
        "table": (r"\btable\s+", r"\s*\{"),
        "control": (r"\bcontrol\s+", r"\s*(?:<[^>]*>)?\s*\("),
        "parser": (r"\bparser\s+", r"\s*(?:<[^>]*>)?\s*\("),
        "struct": (r"\bstruct\s+", r"\s*\{"),
        "header": (r"\bheader\s+", r"\s*\{"),
    }

    def __init__(self, config: Optional[Dict] = None) -> None:
        config = config or {}
        self.debug = config.get("debug", False)
        if self.debug:
            logger.setLevel(logging.DEBUG)

    # ------------------------------------------------------------------
    # Action bodies
    # ------------------------------------------------------------------

    def get_action_body(self, source: str, action_name: str) -> str:
        """
        Return the body of ``action <action_name>(...) { ... }``.

        The slice starts right after the opening brace and ends with the
        matching closing brace (inclusive).

        Args:
            source: Complete P4 source text.
            action_name: Name of the action to look up.

        Returns:
            The body text, or ACTION_NOT_FOUND when the action is missing or
            its braces never balance.
        """
        if not isinstance(source, str) or not action_name:
            return ACTION_NOT_FOUND

        pattern = re.compile(
            r"\baction\s+" + re.escape(action_name) + r"\s*\(.*?\).*?\{",
            re.DOTALL,
        )
        match = pattern.search(source)
        if not match:
            logger.debug("Action '%s' not found", action_name)
            return ACTION_NOT_FOUND

        body = self.slice_balanced(source, match.end())
        if body is None:
            logger.debug("Action '%s' has unbalanced braces", action_name)
            return ACTION_NOT_FOUND
        return body

    @staticmethod
    def slice_balanced(source: str, start: int) -> Optional[str]:
        """
        Depth-counted scan from just after an opening brace.

        Args:
            source: Text to scan.
            start: Offset of the first character after the opening brace.

        Returns:
            ``source[start:end + 1]`` where ``end`` is the matching closing
            brace, or None if the depth never returns to zero.
        """
        depth = 1
        for index in range(max(start, 0), len(source)):
            char = source[index]
            if char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return source[start:index + 1]
        return None

    # ------------------------------------------------------------------
    # Offsets
    # ------------------------------------------------------------------

    def find_offset(self, kind: str, source: str, name: str) -> int:
        """Character offset of the first ``kind`` declaration named ``name``, or -1."""
        affixes = self._DECLARATION_PATTERNS.get(kind)
        if affixes is None or not isinstance(source, str) or not name:
            return -1
        prefix, suffix = affixes
        match = re.search(prefix + re.escape(name) + suffix, source)
        return match.start() if match else -1

    def find_action_offset(self, source: str, action_name: str) -> int:
        return self.find_offset("action", source, action_name)

    def find_table_offset(self, source: str, table_name: str) -> int:
        return self.find_offset("table", source, table_name)

    def find_control_offset(self, source: str, control_name: str) -> int:
        return self.find_offset("control", source, control_name)

    def find_parser_offset(self, source: str, parser_name: str) -> int:
        return self.find_offset("parser", source, parser_name)

    def find_struct_offset(self, source: str, struct_name: str) -> int:
        return self.find_offset("struct", source, struct_name)

    def locate(self, kind: str, source: str, name: str) -> DeclarationLocation:
        """Offset plus 1-based line number of a declaration."""
        offset = self.find_offset(kind, source, name)
        line = source.count("\n", 0, offset) + 1 if offset >= 0 else 0
        return DeclarationLocation(kind=kind, name=name, offset=offset, line=line)

    @classmethod
    def kinds(cls):
        return list(cls._DECLARATION_PATTERNS)
