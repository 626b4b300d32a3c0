"""Control-flow forms, loops and input helpers of the interpreter.

Each form takes the running interpreter and the statement node that invoked
it. The interpreter must provide ``execute(node)``, ``scopes`` (a
:class:`~huolang.scopes.Scopes`) and ``max_depth`` (the remaining recursion
budget).
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Optional, TextIO, Union

from .core import format_value
from .syntax import AstNode, AstType
from .values import LOOP_MAX, HuoError, Value, ValueType


def _check_depth(interpreter: Any) -> None:
    if interpreter.max_depth <= 0:
        raise HuoError("Max depth exceeded in computation")


def _as_bool(value: Value) -> bool:
    if value.type is not ValueType.BOOL:
        raise HuoError(f"Expected a boolean, got {value.type.name}")
    return value.data


def _as_long(value: Value, form: str) -> int:
    if value.type is not ValueType.LONG:
        raise HuoError(f"{form} expects a number, got {value.type.name}")
    return value.data


def _iteration_layout(node: AstNode, form: str) -> tuple[bool, int]:
    """Whether an index name is given, and where the body sits."""
    if len(node) == 5:
        return True, 4
    if len(node) == 4:
        return False, 3
    raise HuoError(f"Wrong number of arguments for {form}: {len(node)} != [4,5]")


def if_block(interpreter: Any, node: AstNode) -> Value:
    """``(if cond then [else])``: undefined when false and no else is given."""
    _check_depth(interpreter)
    if len(node) not in (3, 4):
        raise HuoError(f"Wrong number of arguments for if: {len(node)} != [3,4]")
    condition = interpreter.execute(node.children[1])
    if _as_bool(condition):
        return interpreter.execute(node.children[2])
    if len(node) == 4:
        return interpreter.execute(node.children[3])
    return Value.undefined()


def for_each(interpreter: Any, node: AstNode) -> Value:
    """``(each iterable item [index] body)`` over an array or a string."""
    _check_depth(interpreter)
    use_index, body_at = _iteration_layout(node, "each")
    iterable = interpreter.execute(node.children[1])
    if iterable.type is ValueType.STRING:
        items = [Value.of_string(char) for char in iterable.data]
    elif iterable.type is ValueType.ARRAY:
        items = list(iterable.data)
    else:
        raise HuoError(
            f"Invalid type for each iterable: {iterable.type.name} is not an array"
        )
    scopes = interpreter.scopes
    for position, item in enumerate(items):
        scopes.store_let(node.children[2].value, item)
        if use_index:
            scopes.store_let(node.children[3].value, Value.of_long(position))
        interpreter.execute(node.children[body_at].copy())
    return iterable


def for_loop(interpreter: Any, node: AstNode) -> None:
    """``(for start end body)``: run the body ``|end - start|`` times."""
    _check_depth(interpreter)
    if len(node) != 4:
        raise HuoError(f"Wrong number of arguments for for: {len(node)} != 4")
    start = _as_long(interpreter.execute(node.children[1]), "for")
    end = _as_long(interpreter.execute(node.children[2]), "for")
    for _ in range(abs(end - start)):
        interpreter.execute(node.children[3].copy())


def map_array(interpreter: Any, node: AstNode) -> Value:
    """``(map array item [index] body)``: replace each element with the body's result."""
    _check_depth(interpreter)
    use_index, body_at = _iteration_layout(node, "map")
    array = interpreter.execute(node.children[1])
    if array.type is not ValueType.ARRAY:
        raise HuoError(f"Wrong type for map: {array.type.name} is not an array")
    items = array.data
    scopes = interpreter.scopes
    for position, item in enumerate(items):
        scopes.store_let(node.children[2].value, item.copy())
        if use_index:
            scopes.store_let(node.children[3].value, Value.of_long(position))
        result = interpreter.execute(node.children[body_at].copy())
        items[position] = result.copy()
    return array


def reduce_array(interpreter: Any, node: AstNode) -> Value:
    """``(reduce array acc item body [initial])``."""
    _check_depth(interpreter)
    if len(node) not in (5, 6):
        raise HuoError(f"Wrong number of arguments for reduce: {len(node)} != [5, 6]")
    for name_node in node.children[2:4]:
        if name_node.type is not AstType.KEYWORD:
            raise HuoError(
                f"Invalid type for reduce: {name_node.type.name} is not a keyword"
            )
    array = interpreter.execute(node.children[1])
    if array.type is not ValueType.ARRAY:
        raise HuoError(f"Invalid type for reduce: {array.type.name} is not an array")
    items = array.data
    if not items:
        return array.copy()
    if len(node) == 6:
        result = interpreter.execute(node.children[5])
        rest = items
    else:
        result = items[0]
        rest = items[1:]
    scopes = interpreter.scopes
    for item in rest:
        scopes.store_let(node.children[2].value, result)
        scopes.store_let(node.children[3].value, item)
        result = interpreter.execute(node.children[4].copy())
    return result


def reduce_ast(interpreter: Any, node: AstNode) -> Value:
    """Execute every child in order and return the last result."""
    _check_depth(interpreter)
    if len(node) < 1:
        raise HuoError(f"Not enough arguments for a statement list: {len(node)} < 1")
    result = Value.undefined()
    for child in node.children:
        result = interpreter.execute(child)
    return result


def switch_case(interpreter: Any, node: AstNode) -> Value:
    """``(switch value (op case result) ... [(default result)])``.

    Each case is evaluated as ``(op case value)``; the first true one
    selects its result. ``default`` must be the last case.
    """
    _check_depth(interpreter)
    last = len(node) - 1
    for position, routine in enumerate(node.children[2:], start=2):
        if not routine.children:
            raise HuoError("Invalid syntax for switch case: empty case")
        head = routine.children[0].value
        if head.type is ValueType.KEYWORD and head.data == "default":
            if position != last:
                raise HuoError("Default not last case!")
            if len(routine) < 2:
                raise HuoError("Invalid syntax for switch default: no result")
            return interpreter.execute(routine.children[1])
        if len(routine) != 3:
            raise HuoError(f"Invalid syntax for switch case: {len(routine)} != 3")
        test = AstNode(
            routine.type,
            routine.value,
            [routine.children[0], routine.children[1], node.children[1]],
        )
        if _as_bool(interpreter.execute(test)):
            return interpreter.execute(routine.children[2])
    return Value.undefined()


def while_loop(interpreter: Any, node: AstNode) -> None:
    """``(while cond body)``; ``LOOP_MAX`` of -1 means no iteration limit."""
    if len(node) != 3:
        raise HuoError(f"Not enough arguments for while: {len(node)} < 3")
    iterations = 0
    while LOOP_MAX == -1 or iterations < LOOP_MAX:
        iterations += 1
        if not _as_bool(interpreter.execute(node.children[1])):
            return
        interpreter.execute(node.children[2])
    raise HuoError("Max loops exceeded")


def parallel_execution(interpreter: Any, node: AstNode) -> None:
    """Execute each argument in turn; runs on a single thread."""
    _check_depth(interpreter)
    for child in node.children[1:]:
        _check_depth(interpreter)
        interpreter.execute(child)


def read_file(path: Union[str, Path]) -> str:
    """Return the contents of a file; null bytes are rejected."""
    try:
        with open(path, encoding="utf-8", newline="") as handle:
            contents = handle.read()
    except OSError as exc:
        raise HuoError(f'Cannot find file: "{path}"') from exc
    if "\0" in contents:
        raise HuoError("Null byte in input file")
    return contents


def read_line(
    prompt: Union[Value, str],
    infile: Optional[TextIO] = None,
    outfile: Optional[TextIO] = None,
) -> str:
    """Show ``prompt`` without quotes and read one non-empty line."""
    infile = sys.stdin if infile is None else infile
    outfile = sys.stdout if outfile is None else outfile
    if isinstance(prompt, Value):
        text = prompt.data if prompt.type is ValueType.STRING else format_value(prompt)
    else:
        text = prompt
    outfile.write(text)
    outfile.flush()
    line = infile.readline()
    if line.endswith("\n"):
        line = line[:-1]
    if "\0" in line:
        raise HuoError("Null byte in input file")
    if not line:
        raise HuoError("Input closed")
    return line