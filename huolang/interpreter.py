"""The evaluator that walks syntax trees and runs Huo programs."""

from __future__ import annotations

import sys
from contextlib import contextmanager
from typing import Callable, Iterable, Iterator, Optional, TextIO, Union

from . import control, core
from .parser import Token, parse
from .scopes import Scopes, function_body, substitute_variables
from .syntax import AstNode, AstType
from .values import RECURSE_MAX, HuoError, Value, ValueType

Keyword = Union[str, Value]
Tokenizer = Callable[[str], Iterable[Token]]

_NAMED_BINARY = {
    "cat": core.concat,
    "index": core.index,
    "push": core.push,
    "split": core.split,
}

_OPERATORS = {
    "*": core.mul,
    "+": core.add,
    "-": core.sub,
    "/": core.divide,
    "!": core.not_,
    "=": core.equals,
    ">": core.greater_than,
    "<": lambda a, b: core.greater_than(b, a),
    "&": core.and_,
    "|": core.or_,
}

# Python frames used per level of Huo recursion, with room to spare.
_FRAMES_PER_LEVEL = 8


def _keyword_name(keyword: Keyword) -> str:
    if isinstance(keyword, Value):
        if keyword.type is not ValueType.KEYWORD:
            raise HuoError(f"Expected a keyword, got {keyword.type.name}")
        return keyword.data
    return keyword


def _as_string(value: Value, form: str) -> str:
    if value.type is not ValueType.STRING:
        raise HuoError(f"{form} expects a string, got {value.type.name}")
    return value.data


@contextmanager
def _recursion_room(levels: int) -> Iterator[None]:
    wanted = levels * _FRAMES_PER_LEVEL + 200
    previous = sys.getrecursionlimit()
    if wanted > previous:
        sys.setrecursionlimit(wanted)
    try:
        yield
    finally:
        sys.setrecursionlimit(previous)


class Interpreter:
    """Runs syntax trees against a stack of scopes.

    ``out`` receives everything the program prints, ``infile`` supplies
    lines to ``readline``. ``tokenizer``, when set, turns source text into
    tokens so that ``eval`` and ``import`` can run code given as text.
    """

    def __init__(self, out: Optional[TextIO] = None, infile: Optional[TextIO] = None):
        self.out = sys.stdout if out is None else out
        self.infile = sys.stdin if infile is None else infile
        self.scopes = Scopes()
        self.max_depth = RECURSE_MAX
        self.tokenizer: Optional[Tokenizer] = None
        self._forms: dict[str, Callable[[AstNode], Value]] = {
            "if": lambda node: control.if_block(self, node),
            "each": lambda node: self._discard(control.for_each, node),
            "map": lambda node: control.map_array(self, node),
            "while": lambda node: self._discard(control.while_loop, node),
            "reduce": lambda node: control.reduce_array(self, node),
            "set": self._set,
            "for": lambda node: self._discard(control.for_loop, node),
            "do": self._do,
            "substring": self._substring,
            "switch": lambda node: control.switch_case(self, node),
            "parallel": lambda node: self._discard(control.parallel_execution, node),
            "let": self._let,
            "def": self._def,
            "run": self._run,
            "ast": self._ast,
        }

    # -- evaluation ----------------------------------------------------

    def execute(self, node: AstNode) -> Value:
        """Evaluate one node and return its value."""
        self.max_depth -= 1
        try:
            if self.max_depth <= 0:
                raise HuoError("Max depth exceeded in computation")
            return self._evaluate(node)
        finally:
            self.max_depth += 1

    def _evaluate(self, node: AstNode) -> Value:
        if node.type is AstType.ARRAY:
            return Value.of_array([self.execute(child).copy() for child in node.children])
        if not node.children:
            return substitute_variables(node.value, self.scopes, self.max_depth - 1)

        head = node.children[0].value
        is_keyword = head.type is ValueType.KEYWORD
        if is_keyword:
            result = self.apply_execution_function(head, node)
            if result is not None:
                return result
            function = self.scopes.get_function(head.data)
            if function is not None:
                self.bind_arguments(node, function)
                try:
                    return self.execute(function_body(function))
                finally:
                    self.scopes.pop()
        if len(node) == 1:
            return self.execute(node.children[0])
        if is_keyword and len(node) == 2:
            value = self.execute(node.children[1])
            return self.apply_single_value_function(head, value)
        if is_keyword and len(node) == 3:
            a = self.execute(node.children[1])
            b = self.execute(node.children[2])
            return self.apply_core_function(head, a, b)
        return control.reduce_ast(self, node)

    def run(self, root: AstNode) -> Value:
        """Run each top-level statement with a fresh depth budget.

        Returns the value of the last statement, or undefined if none.
        """
        result = Value.undefined()
        with _recursion_room(RECURSE_MAX):
            for statement in root.children:
                self.max_depth = RECURSE_MAX
                result = self.execute(statement)
        return result

    # -- built-in dispatch ---------------------------------------------

    def apply_core_function(self, keyword: Keyword, a: Value, b: Value) -> Value:
        """Apply a two-argument built-in.

        Two arrays are combined element by element, writing into ``a``.
        An unknown keyword yields ``a`` unchanged.
        """
        name = _keyword_name(keyword)
        named = _NAMED_BINARY.get(name)
        if named is not None:
            return named(a, b)
        if a.type is ValueType.ARRAY and b.type is ValueType.ARRAY:
            left, right = a.data, b.data
            if len(left) != len(right):
                raise HuoError(
                    "Tried to map over arrays of different sizes: "
                    f"{len(left)} != {len(right)}"
                )
            for position, (x, y) in enumerate(zip(left, right)):
                left[position] = self.apply_core_function(name, x, y)
            return a
        operator = _OPERATORS.get(name)
        if operator is not None:
            return operator(a, b)
        return a

    def apply_execution_function(self, keyword: Keyword, node: AstNode) -> Optional[Value]:
        """Run a special form named by ``keyword``; None if it names none."""
        form = self._forms.get(_keyword_name(keyword))
        if form is None:
            return None
        return form(node)

    def apply_single_value_function(self, keyword: Keyword, value: Value) -> Value:
        """Apply a one-argument built-in; unknown keywords yield undefined."""
        name = _keyword_name(keyword)
        if name == "print":
            self.out.write(core.format_value(value) + "\n")
            return Value.undefined()
        if name == "length":
            return Value.of_long(core.length(value))
        if name == "return":
            return value
        if name == "eval":
            return self._eval(_as_string(value, "eval"))
        if name == "readline":
            return Value.of_string(control.read_line(value, self.infile, self.out))
        if name == "read":
            return Value.of_string(control.read_file(_as_string(value, "read")))
        if name == "import":
            contents = control.read_file(_as_string(value, "import"))
            return self.execute(parse(self._tokenize(contents)))
        if name == "typeof":
            return Value.of_string(value.type_name())
        return Value.undefined()

    def bind_arguments(self, node: AstNode, function: AstNode) -> None:
        """Evaluate a call's arguments and bind them in a new scope."""
        if len(function) != len(node) + 2:
            expected = max(len(function) - 2, 0)
            raise HuoError(f"Wrong number of arguments!: {expected} != {len(node)}")
        values = [self.execute(child) for child in node.children[1:]]
        params = function.children[2 : 2 + len(values)]
        for param in params:
            if param.value.type is not ValueType.KEYWORD:
                raise HuoError(
                    f"Invalid type for argument: {param.value.type.name} is not a keyword"
                )
        self.scopes.push()
        for param, value in zip(params, values):
            self.scopes.store_let(param.value, value)

    # -- special forms -------------------------------------------------

    def _discard(self, form: Callable[["Interpreter", AstNode], object], node: AstNode) -> Value:
        form(self, node)
        return Value.undefined()

    def _set(self, node: AstNode) -> Value:
        if len(node) != 4:
            raise HuoError(f"Not enough arguments for set: {len(node)} < 4")
        index = self.execute(node.children[1])
        item = self.execute(node.children[2])
        target = self.execute(node.children[3])
        return core.set_item(index, item, target)

    def _do(self, node: AstNode) -> Value:
        if len(node) <= 1:
            raise HuoError(f"Not enough arguments for do: {len(node)} < 1")
        result = Value.undefined()
        for child in node.children[1:]:
            result = self.execute(child)
        return result

    def _substring(self, node: AstNode) -> Value:
        if len(node) != 4:
            raise HuoError(f"Not enough arguments for substring: {len(node)} < 4")
        start = self.execute(node.children[1])
        end = self.execute(node.children[2])
        text = self.execute(node.children[3])
        return core.substring(start, end, text)

    def _let(self, node: AstNode) -> Value:
        if len(node) < 3:
            raise HuoError(f"Not enough arguments for let: {len(node)} < 3")
        value = self.execute(node.children[2].copy())
        self.scopes.store_let(node.children[1].value, value)
        return Value.undefined()

    def _def(self, node: AstNode) -> Value:
        if len(node) < 2:
            raise HuoError(f"Not enough arguments for def: {len(node)} < 2")
        self.scopes.store_def(node.children[1].value, node)
        return Value.undefined()

    def _run(self, node: AstNode) -> Value:
        if len(node) < 2:
            raise HuoError(f"Not enough arguments for run: {len(node)} < 2")
        fn_value = self.execute(node.children[1])
        if fn_value.type is not ValueType.AST:
            raise HuoError(f"run expects an ast, got {fn_value.type.name}")
        function = fn_value.data.copy()
        for position, argument in enumerate(node.children[2:], start=1):
            if position >= len(function):
                raise HuoError(
                    f"Too many arguments for run: {len(node) - 2} >= {len(function)}"
                )
            function.children[position] = argument
        return self.execute(function)

    def _ast(self, node: AstNode) -> Value:
        if len(node) < 2:
            raise HuoError(f"Not enough arguments for ast: {len(node)} < 2")
        return Value.of_ast(node.children[1].copy())

    # -- source text ---------------------------------------------------

    def _tokenize(self, text: str) -> Iterable[Token]:
        if self.tokenizer is None:
            raise HuoError("No tokenizer configured to read source text")
        return self.tokenizer(text)

    def _eval(self, text: str) -> Value:
        root = parse(self._tokenize(text))
        result = Value.undefined()
        for child in root.children:
            result = self.execute(child)
        return result