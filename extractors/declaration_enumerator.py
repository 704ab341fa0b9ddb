"""
Declaration Enumerator: whole-text regex enumeration of P4 declarations.

Applies one global pattern per declaration kind and collects every captured
name in order of appearance. Nesting is ignored and duplicates are kept.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Pattern

from . import TopLevelDeclarations

logger = logging.getLogger(__name__)


class DeclarationEnumerator:
    """
    Lists parser, control, struct, header, action and table names found anywhere
    in a P4 document.

    Usage:
        enumerator = DeclarationEnumerator()
        enumerator.find_all("parser", source)   # -> ["MyParser"]
        enumerator.enumerate(source).controls   # -> ["MyIngress", "MyEgress"]
    """

    PATTERNS: Dict[str, Pattern[str]] = {
        "parser": re.compile(r"\bparser\s+(\w+)\s*(?:<[^>]*>)?\s*\("),
        "control": re.compile(r"\bcontrol\s+(\w+)\s*(?:<[^>]*>)?\s*\("),
        "struct": re.compile(r"\bstruct\s+(\w+)\s*\{"),
        "header": re.compile(r"\bheader\s+(\w+)\s*\{"),
        "action": re.compile(r"\baction\s+(\w+)\s*\("),
        "table": re.compile(r"\btable\s+(\w+)\s*\{"),
    }

    def __init__(self, config: Optional[Dict] = None) -> None:
        config = config or {}
        self.debug = config.get("debug", False)
        if self.debug:
            logger.setLevel(logging.DEBUG)

    @classmethod
    def kinds(cls) -> List[str]:
        return list(cls.PATTERNS)

    def find_all(self, kind: str, source: str) -> List[str]:
        """
        Return every name declared with ``kind`` in ``source``.

        Args:
            kind: One of ``kinds()``; anything else yields an empty list.
            source: Complete P4 source text.

        Returns:
            Captured names ordered by their character offset.
        """
        pattern = self.PATTERNS.get(kind)
        if pattern is None:
            logger.debug("Unknown declaration kind '%s'", kind)
            return []
        if not isinstance(source, str) or not source:
            return []
        return [m.group(1) for m in pattern.finditer(source)]

    def enumerate(self, source: str) -> TopLevelDeclarations:
        """Collect the flat name lists for all supported kinds."""
        result = TopLevelDeclarations(
            parsers=self.find_all("parser", source),
            controls=self.find_all("control", source),
            structs=self.find_all("struct", source),
            headers=self.find_all("header", source),
            actions=self.find_all("action", source),
            tables=self.find_all("table", source),
        )
        logger.debug(
            "Enumerated %d parser(s), %d control(s), %d struct(s)",
            len(result.parsers), len(result.controls), len(result.structs),
        )
        return result
