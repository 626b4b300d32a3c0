# huolang

A parser and interpreter for Huo, a small language written as parenthesised
expressions. It has integers, floats, strings, booleans, arrays, variables,
user-defined functions and syntax trees as values.

## The language

- Arithmetic and comparison: `+ - * / = ! > < & |`. `!` is "not equal".
  Integer arithmetic wraps at 64 bits. Dividing two integers gives an integer
  when the division is exact and a float when it is not. When both operands
  of a binary operator are arrays of the same length, the operator is applied
  element by element and the results are written into the first array.
- Strings and arrays: `cat`, `index`, `push`, `set`, `split`, `substring`,
  `length`. `push` and `set` change an array in place. `split` splits on the
  first character of its separator.
- Control flow: `if`, `do`, `switch` with an optional `default` last case,
  `while`, `for`, `each`, `map` and `reduce`. `parallel` runs its arguments
  one after another on a single thread.
- Bindings: `let` binds a value and `def` defines a function. Each function
  call gets its own scope. `true` and `false` are the boolean literals.
- Code as data: `ast` captures an unevaluated expression, `run` runs one with
  arguments put in place, and `eval` runs source text.
- Input and output: `print`, `readline` (shows a prompt, reads one non-empty
  line), `read` (returns the contents of a file), `import` (runs a file) and
  `typeof`, which reports `number`, `string`, `boolean`, `array`, `keyword`,
  `undefined` or `ast`.

Recursion depth is limited to 250 levels. Going past that limit raises an
error.

## Modules

- `huolang.values` defines `Value`, `ValueType` and `HuoError`. Every error
  in parsing or running a program is raised as `HuoError`.
- `huolang.syntax` defines the syntax tree, `AstNode` and `AstType`.
- `huolang.parser` defines `Token` and `TokenType`. `parse(tokens)` turns a
  sequence of tokens into a tree. If the sequence does not end with an `EOF`
  token, `parse` adds one.
- `huolang.core` holds the built-in operations on values: `add`, `sub`, `mul`,
  `divide`, `concat`, `equals`, `not_`, `greater_than`, `and_`, `or_`,
  `set_item`, `push`, `index`, `split`, `substring`, `length` and
  `format_value`, which renders a value the way `print` shows it.
- `huolang.scopes` holds `Scopes`, the stack of variable and function
  bindings.
- `huolang.control` implements the control-flow forms and the `read_file` and
  `read_line` helpers.
- `huolang.interpreter` provides `Interpreter`. Its `run(root)` method runs
  each top-level statement and returns the value of the last one.

## Example

```python
import io

from huolang.interpreter import Interpreter
from huolang.parser import Token, TokenType, parse

T = TokenType
tokens = [
    Token(T.OPEN_BRACKET, "("),
    Token(T.WORD, "print"),
    Token(T.WHITESPACE, " "),
    Token(T.OPEN_BRACKET, "("),
    Token(T.PLUS, "+"),
    Token(T.WHITESPACE, " "),
    Token(T.NUMBER, "1"),
    Token(T.WHITESPACE, " "),
    Token(T.NUMBER, "2"),
    Token(T.CLOSE_BRACKET, ")"),
    Token(T.CLOSE_BRACKET, ")"),
]

out = io.StringIO()
Interpreter(out=out).run(parse(tokens))
print(out.getvalue())  # 3
```

`print` writes to the interpreter's `out` stream, and `readline` reads from
its `infile` stream. Both default to standard output and standard input. A
string token's data includes its surrounding quotes, for example
`Token(T.QUOTE, '"hi"')`.

## What the package does not do

- It has no tokenizer. Source text must already be split into `Token`
  objects before it is passed to `parse`.
- Because of that, `eval` and `import` work only after you give the
  interpreter a tokenizer. Set `Interpreter.tokenizer` to a callable that
  takes a string and returns tokens. Without one, `eval` and `import` raise
  `HuoError`.
- It installs no command-line program and has no interactive prompt.

## Running the tests

```
pip install -e ".[test]"
pytest
```