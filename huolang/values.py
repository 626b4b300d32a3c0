"""Runtime values of the Huo language."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

RECURSE_MAX = 250
LOOP_MAX = -1
OPERATOR_CHARS = "*+-/!=<>|&"


class HuoError(Exception):
    """Raised for any error detected while parsing or running a program."""


class ValueType(enum.Enum):
    KEYWORD = "keyword"
    STRING = "string"
    LONG = "long"
    FLOAT = "float"
    BOOL = "bool"
    ARRAY = "array"
    UNDEF = "undef"
    AST = "ast"


_TYPE_NAMES = {
    ValueType.KEYWORD: "keyword",
    ValueType.STRING: "string",
    ValueType.LONG: "number",
    ValueType.FLOAT: "number",
    ValueType.BOOL: "boolean",
    ValueType.ARRAY: "array",
    ValueType.UNDEF: "undefined",
    ValueType.AST: "ast",
}


@dataclass
class Value:
    """A tagged runtime value.

    Arrays hold a list of ``Value`` objects that may be shared between
    values, so mutating operations on an array are visible to every holder.
    """

    type: ValueType
    data: Any = None

    @classmethod
    def of_long(cls, number: int) -> "Value":
        return cls(ValueType.LONG, int(number))

    @classmethod
    def of_float(cls, number: float) -> "Value":
        return cls(ValueType.FLOAT, float(number))

    @classmethod
    def of_bool(cls, flag: bool) -> "Value":
        return cls(ValueType.BOOL, bool(flag))

    @classmethod
    def of_string(cls, text: str) -> "Value":
        return cls(ValueType.STRING, str(text))

    @classmethod
    def of_keyword(cls, name: str) -> "Value":
        return cls(ValueType.KEYWORD, str(name))

    @classmethod
    def of_array(cls, items: list["Value"]) -> "Value":
        return cls(ValueType.ARRAY, items)

    @classmethod
    def of_ast(cls, node: Any) -> "Value":
        return cls(ValueType.AST, node)

    @classmethod
    def undefined(cls) -> "Value":
        return cls(ValueType.UNDEF)

    def copy(self) -> "Value":
        """Return a deep copy; arrays and syntax trees are copied recursively."""
        if self.type is ValueType.ARRAY:
            return Value(self.type, [item.copy() for item in self.data])
        if self.type is ValueType.AST:
            return Value(self.type, self.data.copy())
        return Value(self.type, self.data)

    def negate(self) -> None:
        """Flip the sign of a numeric value in place."""
        if self.type not in (ValueType.LONG, ValueType.FLOAT):
            raise HuoError(f"Cannot negate a value of type {self.type.name}")
        self.data = -self.data

    def type_name(self) -> str:
        """The name that ``typeof`` reports for this value."""
        return _TYPE_NAMES[self.type]