"""Variable and function bindings, arranged as a stack of scopes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from .syntax import AstNode
from .values import HuoError, Value, ValueType

Name = Union[str, Value]


def _name_of(name: Name) -> str:
    if isinstance(name, Value):
        if name.type is not ValueType.KEYWORD:
            raise HuoError(f"Invalid name: {name.type.name} is not a keyword")
        return name.data
    return name


@dataclass
class Definition:
    """What a name is bound to: a value, or a function's ``def`` node."""

    value: Optional[Value] = None
    function: Optional[AstNode] = None

    @property
    def is_function(self) -> bool:
        return self.function is not None


class Scopes:
    """A stack of scopes; lookups search from the innermost outwards."""

    def __init__(self) -> None:
        self._scopes: list[dict[str, Definition]] = [{}]

    def __len__(self) -> int:
        return len(self._scopes)

    @property
    def current(self) -> int:
        """Index of the innermost scope."""
        return len(self._scopes) - 1

    def push(self) -> dict[str, Definition]:
        """Open a new innermost scope and return its bindings."""
        scope: dict[str, Definition] = {}
        self._scopes.append(scope)
        return scope

    def pop(self) -> None:
        """Close the innermost scope."""
        if len(self._scopes) <= 1:
            raise HuoError("Cannot pop the global scope")
        self._scopes.pop()

    def store_let(self, name: Name, value: Value) -> None:
        """Bind a copy of ``value`` in the innermost scope."""
        self._scopes[-1][_name_of(name)] = Definition(value=value.copy())

    def store_def(self, name: Name, function: AstNode) -> None:
        """Bind a function definition in the innermost scope."""
        self._scopes[-1][_name_of(name)] = Definition(function=function)

    def lookup(self, name: Name) -> Optional[Definition]:
        key = _name_of(name)
        for scope in reversed(self._scopes):
            definition = scope.get(key)
            if definition is not None:
                return definition
        return None

    def get_function(self, name: Name) -> Optional[AstNode]:
        """The nearest binding of ``name`` if it is a function, else None."""
        definition = self.lookup(name)
        if definition is None or not definition.is_function:
            return None
        return definition.function

    def get_value(self, name: Name) -> Optional[Value]:
        """The nearest binding of ``name`` if it is a value, else None."""
        definition = self.lookup(name)
        if definition is None or definition.is_function:
            return None
        return definition.value


def substitute_variables(value: Value, scopes: Scopes, max_depth: int) -> Value:
    """Resolve keywords to their bound values.

    Array elements are replaced in place. ``true`` and ``false`` resolve to
    booleans unless rebound; any other unbound keyword is an error.
    """
    if max_depth <= 0:
        raise HuoError("Max depth exceeded in computation")
    if value.type is ValueType.ARRAY:
        items = value.data
        for position, item in enumerate(items):
            items[position] = substitute_variables(item, scopes, max_depth)
    elif value.type is ValueType.KEYWORD:
        bound = scopes.get_value(value.data)
        if bound is not None:
            return Value(bound.type, bound.data)
        if value.data == "true":
            return Value.of_bool(True)
        if value.data == "false":
            return Value.of_bool(False)
        raise HuoError(f"Undefined variable: {value.data}")
    return Value(value.type, value.data)


def function_body(function: AstNode) -> AstNode:
    """A copy of the body, the last child, of a ``def`` node."""
    if len(function) <= 1:
        raise HuoError("No function body!")
    body = function.children[-1]
    if len(body) == 0:
        raise HuoError("No function body!")
    return body.copy()