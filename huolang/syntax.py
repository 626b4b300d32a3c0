"""Syntax tree nodes produced by the parser."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from .values import Value


class AstType(enum.Enum):
    STATEMENT = "statement"
    ARRAY = "array"
    KEYWORD = "keyword"
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"


@dataclass
class AstNode:
    """A node of the syntax tree: a kind, a literal value and children."""

    type: AstType
    value: Value = field(default_factory=Value.undefined)
    children: list["AstNode"] = field(default_factory=list)

    def copy(self) -> "AstNode":
        """Return a deep copy of this node and everything below it."""
        return AstNode(
            self.type,
            self.value.copy(),
            [child.copy() for child in self.children],
        )

    def push(self, child: "AstNode") -> None:
        """Append a child node."""
        self.children.append(child)

    def __len__(self) -> int:
        return len(self.children)