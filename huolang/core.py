"""Built-in operations on values."""

from __future__ import annotations

from typing import Callable

from .values import HuoError, Value, ValueType

_NUMERIC = (ValueType.LONG, ValueType.FLOAT)


def _wrap_int64(number: int) -> int:
    number &= (1 << 64) - 1
    return number - (1 << 64) if number >= 1 << 63 else number


def _as_long(value: Value, operation: str) -> int:
    if value.type is not ValueType.LONG:
        raise HuoError(f"{operation} expects a number, got {value.type.name}")
    return value.data


def _as_string(value: Value, operation: str) -> str:
    if value.type is not ValueType.STRING:
        raise HuoError(f"{operation} expects a string, got {value.type.name}")
    return value.data


def format_value(value: Value) -> str:
    """Render a value the way ``print`` shows it."""
    kind = value.type
    if kind is ValueType.STRING:
        return f'"{value.data}"'
    if kind is ValueType.KEYWORD:
        return value.data
    if kind is ValueType.LONG:
        return str(value.data)
    if kind is ValueType.FLOAT:
        return f"{value.data:f}"
    if kind is ValueType.BOOL:
        return "True" if value.data else "False"
    if kind is ValueType.ARRAY:
        return "[ " + ", ".join(format_value(item) for item in value.data) + " ]"
    if kind is ValueType.UNDEF:
        return "undefined"
    return ""


def _arithmetic(name: str, op: Callable, a: Value, b: Value) -> Value:
    if a.type is ValueType.LONG and b.type is ValueType.LONG:
        return Value.of_long(_wrap_int64(op(a.data, b.data)))
    if a.type in _NUMERIC and b.type in _NUMERIC:
        return Value.of_float(op(float(a.data), float(b.data)))
    raise HuoError(f"Mismatched types for {name}: {a.type.name} != {b.type.name}")


def add(a: Value, b: Value) -> Value:
    return _arithmetic("add", lambda x, y: x + y, a, b)


def mul(a: Value, b: Value) -> Value:
    return _arithmetic("mul", lambda x, y: x * y, a, b)


def sub(a: Value, b: Value) -> Value:
    return _arithmetic("sub", lambda x, y: x - y, a, b)


def divide(a: Value, b: Value) -> Value:
    """Divide two numbers; a float divisor is truncated to an integer first."""
    if a.type is ValueType.LONG and b.type is ValueType.LONG:
        if b.data == 0:
            raise HuoError("Division by 0")
        return long_divide(a.data, b.data)
    if a.type in _NUMERIC and b.type in _NUMERIC:
        divisor = int(b.data)
        if divisor == 0:
            raise HuoError("Division by 0")
        return Value.of_float(float(a.data) / divisor)
    raise HuoError(f"Mismatched types for divide: {a.type.name} != {b.type.name}")


def long_divide(a: int, b: int) -> Value:
    """Integer result when the division is exact, float otherwise."""
    if b == 0:
        raise HuoError("Division by 0")
    if a % b == 0:
        return Value.of_long(_wrap_int64(a // b))
    return Value.of_float(a / b)


def concat(a: Value, b: Value) -> Value:
    if a.type is ValueType.STRING and b.type is ValueType.STRING:
        return Value.of_string(a.data + b.data)
    if a.type is ValueType.ARRAY and b.type is ValueType.ARRAY:
        return Value.of_array([item.copy() for item in (*a.data, *b.data)])
    raise HuoError(f"Tried to concat {a.type.name} and {b.type.name}")


_COMPARABLE = (
    ValueType.BOOL,
    ValueType.FLOAT,
    ValueType.LONG,
    ValueType.STRING,
    ValueType.ARRAY,
)


def not_(a: Value, b: Value) -> Value:
    """True when two values of the same type differ."""
    if a.type is b.type and a.type in _COMPARABLE:
        return Value.of_bool(a.data != b.data)
    raise HuoError(f"Mismatched types: {a.type.name} != {b.type.name}")


def equals(a: Value, b: Value) -> Value:
    if a.type is b.type and a.type in _COMPARABLE:
        return Value.of_bool(a.data == b.data)
    if a.type in _NUMERIC and b.type in _NUMERIC:
        return Value.of_bool(float(a.data) == float(b.data))
    raise HuoError(f"Mismatched types: {a.type.name} != {b.type.name}")


def and_(a: Value, b: Value) -> Value:
    if a.type is ValueType.BOOL and b.type is ValueType.BOOL:
        return Value.of_bool(a.data and b.data)
    raise HuoError(
        f"& operator only takes boolean values: {a.type.name} | {b.type.name}"
    )


def or_(a: Value, b: Value) -> Value:
    if a.type is ValueType.BOOL and b.type is ValueType.BOOL:
        return Value.of_bool(a.data or b.data)
    raise HuoError(
        f"| operator only takes boolean values: {a.type.name} | {b.type.name}"
    )


def greater_than(a: Value, b: Value) -> Value:
    if a.type is b.type and a.type in (ValueType.BOOL, ValueType.FLOAT, ValueType.LONG):
        return Value.of_bool(a.data > b.data)
    raise HuoError(f"Mismatched types: {a.type.name} != {b.type.name}")


def set_item(index: Value, item: Value, target: Value) -> Value:
    """Set position ``index`` of an array (in place) or a string (new value).

    Arrays grow as needed, padding with undefined values; a string may be
    extended by exactly one character at its end.
    """
    position = _as_long(index, "set")
    if position < 0:
        raise HuoError(f"Index out of range for set: should be 0 <= {position}")
    if target.type is ValueType.ARRAY:
        items = target.data
        copied = item.copy()
        if position >= len(items):
            items.extend(Value.undefined() for _ in range(position + 1 - len(items)))
        items[position] = copied
        return Value.of_array(items)
    if target.type is ValueType.STRING:
        char_text = _as_string(item, "set")
        if not char_text:
            raise HuoError("Cannot set a string position from an empty string")
        text = target.data
        if position == len(text):
            return Value.of_string(text + char_text[0])
        if position < len(text):
            return Value.of_string(text[:position] + char_text[0] + text[position + 1:])
        raise HuoError(f"Invalid index: {position} > {len(text)}")
    raise HuoError(f"Set type invalid: {target.type.name} is not an array or string")


def push(what: Value, where: Value) -> Value:
    """Append to an array in place, or a single character to a string."""
    if where.type is ValueType.ARRAY:
        where.data.append(what.copy())
        return Value.of_array(where.data)
    if where.type is ValueType.STRING:
        char_text = _as_string(what, "push")
        if len(char_text) != 1:
            raise HuoError("Character does not have length 1")
        return Value.of_string(where.data + char_text)
    raise HuoError(f"Push type invalid: {where.type.name} is not an array or string")


def length(value: Value) -> int:
    if value.type in (ValueType.STRING, ValueType.ARRAY):
        return len(value.data)
    raise HuoError(f"Cannot take the length of {value.type.name}")


def substring(start: Value, end: Value, what: Value) -> Value:
    """Characters from ``start`` up to, not including, ``end``.

    Both indexes must lie inside the string.
    """
    start_i = _as_long(start, "substring")
    end_i = _as_long(end, "substring")
    size = length(what)
    if not 0 <= start_i < size:
        raise HuoError(
            f"Start index out of range for substring: should be 0 <= {start_i} < {size}"
        )
    if not 0 <= end_i < size:
        raise HuoError(
            f"End index out of range for substring: should be 0 <= {end_i} < {size}"
        )
    if what.type is not ValueType.STRING:
        raise HuoError(f"Substring type invalid: {what.type.name} is not a string")
    return Value.of_string(what.data[start_i:end_i] if end_i > start_i else "")


def split(sep: Value, what: Value) -> Value:
    """Split on the first character of ``sep``.

    An empty separator matches at every position, giving one empty piece
    more than the string has characters.
    """
    separator = _as_string(sep, "split")
    text = _as_string(what, "split")
    if separator:
        pieces = text.split(separator[0])
    else:
        pieces = [""] * (len(text) + 1)
    return Value.of_array([Value.of_string(piece) for piece in pieces])


def index(index: Value, target: Value) -> Value:
    """The element of an array, or a one-character string, at ``index``."""
    position = _as_long(index, "index")
    if target.type is ValueType.ARRAY:
        if position < 0:
            raise HuoError(f"Negative index: {position}")
        if position >= len(target.data):
            raise HuoError(f"Invalid index: {position} (len {len(target.data)})")
        return target.data[position]
    if target.type is ValueType.STRING:
        if not 0 <= position < len(target.data):
            raise HuoError(f"Invalid index: {position} (len {len(target.data)})")
        return Value.of_string(target.data[position])
    raise HuoError(
        f"Index takes a string or array, but got {target.type.name}"
    )