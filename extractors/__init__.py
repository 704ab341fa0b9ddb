"""
P4 Structure Extraction: Data Models.

Canonical dataclass definitions for the declaration structures produced by the
P4 structural extractors and consumed by the description renderer and the
error explainer.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterator, List, Optional

logger = logging.getLogger(__name__)

# Returned by action-body lookups when no declaration (or no balanced body) exists
ACTION_NOT_FOUND = "Action not found"

# ---------------------------------------------------------------------------
# Declaration Table
# ---------------------------------------------------------------------------

@dataclass
class TableInfo:
    """Match-action table metadata collected inside a control."""
    key_fields: List[str] = field(default_factory=list)
    action_names: List[str] = field(default_factory=list)
    size: Optional[int] = None
    default_action: Optional[str] = None


@dataclass
class ControlInfo:
    """Tables and action declarations attributed to a single control."""
    tables: Dict[str, TableInfo] = field(default_factory=dict)
    actions: List[str] = field(default_factory=list)


@dataclass
class DeclarationTable:
    """Result of one line-scanning extraction pass: control name -> ControlInfo."""
    controls: Dict[str, ControlInfo] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.controls)

    def __contains__(self, name: object) -> bool:
        return name in self.controls

    def __iter__(self) -> Iterator[str]:
        return iter(self.controls)

    def __getitem__(self, name: str) -> ControlInfo:
        return self.controls[name]

    def get(self, name: str) -> Optional[ControlInfo]:
        return self.controls.get(name)

    def is_empty(self) -> bool:
        return not self.controls

    def table_count(self) -> int:
        return sum(len(c.tables) for c in self.controls.values())

    def to_dict(self) -> Dict[str, Any]:
        return {name: asdict(info) for name, info in self.controls.items()}


# ---------------------------------------------------------------------------
# Top-level enumeration
# ---------------------------------------------------------------------------

@dataclass
class TopLevelDeclarations:
    """Flat, nesting-independent name lists in source order (duplicates kept)."""
    parsers: List[str] = field(default_factory=list)
    controls: List[str] = field(default_factory=list)
    structs: List[str] = field(default_factory=list)
    headers: List[str] = field(default_factory=list)
    actions: List[str] = field(default_factory=list)
    tables: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not any(self.to_dict().values())

    def to_dict(self) -> Dict[str, List[str]]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------

@dataclass
class DeclarationLocation:
    """Where a declaration starts. offset == -1 means it was not found."""
    kind: str
    name: str
    offset: int = -1
    line: int = 0

    @property
    def found(self) -> bool:
        return self.offset >= 0
