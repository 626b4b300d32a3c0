import io

import pytest

from huolang import core
from huolang.interpreter import Interpreter
from huolang.parser import Token, TokenType
from huolang.syntax import AstNode, AstType
from huolang.values import HuoError, Value, ValueType


def kw(name):
    return AstNode(AstType.KEYWORD, Value.of_keyword(name))


def num(n):
    return AstNode(AstType.INTEGER, Value.of_long(n))


def text(s):
    return AstNode(AstType.STRING, Value.of_string(s))


def stmt(*children):
    return AstNode(AstType.STATEMENT, children=list(children))


def arr(*children):
    return AstNode(AstType.ARRAY, children=list(children))


def make(stdin=""):
    return Interpreter(out=io.StringIO(), infile=io.StringIO(stdin))


PLUS_ONE_TWO = [
    Token(TokenType.OPEN_BRACKET, "("),
    Token(TokenType.PLUS, "+"),
    Token(TokenType.WHITESPACE, " "),
    Token(TokenType.NUMBER, "1"),
    Token(TokenType.WHITESPACE, " "),
    Token(TokenType.NUMBER, "2"),
    Token(TokenType.CLOSE_BRACKET, ")"),
    Token(TokenType.EOF, ""),
]


def test_addition_matches_core():
    interp = make()
    result = interp.execute(stmt(kw("+"), num(1), num(2)))
    assert result == core.add(Value.of_long(1), Value.of_long(2))


@pytest.mark.parametrize(
    "op, func",
    [("-", core.sub), ("*", core.mul), ("=", core.equals), (">", core.greater_than)],
)
def test_operators_match_core(op, func):
    interp = make()
    result = interp.execute(stmt(kw(op), num(7), num(3)))
    assert result == func(Value.of_long(7), Value.of_long(3))


def test_less_than_swaps_arguments():
    interp = make()
    result = interp.execute(stmt(kw("<"), num(1), num(2)))
    assert result == core.greater_than(Value.of_long(2), Value.of_long(1))


def test_nested_expression():
    interp = make()
    inner = stmt(kw("*"), num(2), num(5))
    result = interp.execute(stmt(kw("-"), inner, num(4)))
    expected = core.sub(core.mul(Value.of_long(2), Value.of_long(5)), Value.of_long(4))
    assert result == expected


def test_elementwise_array_operation():
    interp = make()
    result = interp.execute(stmt(kw("+"), arr(num(1), num(2)), arr(num(3), num(4))))
    assert result.type is ValueType.ARRAY
    assert result.data == [
        core.add(Value.of_long(1), Value.of_long(3)),
        core.add(Value.of_long(2), Value.of_long(4)),
    ]


def test_elementwise_size_mismatch_raises():
    interp = make()
    with pytest.raises(HuoError, match="different sizes"):
        interp.execute(stmt(kw("+"), arr(num(1)), arr(num(3), num(4))))


def test_unknown_binary_keyword_returns_first_argument():
    interp = make()
    result = interp.apply_core_function(Value.of_keyword("nothing"), Value.of_long(5), Value.of_long(6))
    assert result == Value.of_long(5)


def test_cat_strings():
    interp = make()
    result = interp.execute(stmt(kw("cat"), text("ab"), text("cd")))
    assert result == Value.of_string("abcd")


def test_print_writes_formatted_value():
    interp = make()
    result = interp.execute(stmt(kw("print"), text("hi")))
    assert interp.out.getvalue() == '"hi"\n'
    assert result.type is ValueType.UNDEF


def test_let_and_lookup():
    interp = make()
    interp.execute(stmt(kw("let"), kw("x"), num(42)))
    assert interp.execute(kw("x")) == Value.of_long(42)


def test_undefined_variable_raises():
    interp = make()
    with pytest.raises(HuoError, match="Undefined variable"):
        interp.execute(kw("missing"))


def test_true_and_false_keywords():
    interp = make()
    assert interp.execute(kw("true")) == Value.of_bool(True)
    assert interp.execute(kw("false")) == Value.of_bool(False)


def test_defined_function_call():
    interp = make()
    interp.execute(stmt(kw("def"), kw("double"), kw("x"), stmt(kw("*"), kw("x"), num(2))))
    result = interp.execute(stmt(kw("double"), num(21)))
    assert result == core.mul(Value.of_long(21), Value.of_long(2))
    assert len(interp.scopes) == 1


def test_function_locals_do_not_leak():
    interp = make()
    interp.execute(stmt(kw("def"), kw("f"), kw("x"), stmt(kw("let"), kw("y"), kw("x"))))
    interp.execute(stmt(kw("f"), num(1)))
    assert interp.scopes.get_value("y") is None
    assert len(interp.scopes) == 1


def test_wrong_argument_count_raises():
    interp = make()
    interp.execute(stmt(kw("def"), kw("f"), kw("x"), stmt(kw("return"), kw("x"))))
    with pytest.raises(HuoError, match="Wrong number of arguments"):
        interp.execute(stmt(kw("f"), num(1), num(2)))


def test_non_keyword_parameter_raises():
    interp = make()
    function = stmt(kw("def"), kw("f"), num(3), stmt(kw("return"), num(1)))
    with pytest.raises(HuoError, match="Invalid type for argument"):
        interp.bind_arguments(stmt(kw("f"), num(1)), function)
    assert len(interp.scopes) == 1


def test_infinite_recursion_hits_depth_limit():
    interp = make()
    interp.execute(stmt(kw("def"), kw("f"), kw("x"), stmt(kw("f"), kw("x"))))
    with pytest.raises(HuoError, match="Max depth"):
        interp.run(stmt(stmt(kw("f"), num(1))))


def test_do_returns_last_value():
    interp = make()
    result = interp.execute(stmt(kw("do"), num(1), num(2), text("last")))
    assert result == Value.of_string("last")


def test_do_without_arguments_raises():
    interp = make()
    with pytest.raises(HuoError):
        interp.execute(stmt(kw("do")))


def test_set_array_element():
    interp = make()
    result = interp.execute(stmt(kw("set"), num(1), text("z"), arr(num(1), num(2))))
    assert result.data == [Value.of_long(1), Value.of_string("z")]


def test_set_wrong_argument_count():
    interp = make()
    with pytest.raises(HuoError, match="set"):
        interp.execute(stmt(kw("set"), num(1), arr(num(1)), num(1), num(1)).children[0:0] and None or stmt(kw("set"), num(1), arr()))


def test_substring_form_matches_core():
    interp = make()
    result = interp.execute(stmt(kw("substring"), num(1), num(3), text("hello")))
    expected = core.substring(Value.of_long(1), Value.of_long(3), Value.of_string("hello"))
    assert result == expected


def test_length_and_typeof():
    interp = make()
    assert interp.execute(stmt(kw("length"), text("abcd"))) == Value.of_long(4)
    assert interp.execute(stmt(kw("typeof"), num(1))) == Value.of_string("number")


def test_unknown_single_keyword_gives_undefined():
    interp = make()
    result = interp.apply_single_value_function(Value.of_keyword("nope"), Value.of_long(1))
    assert result.type is ValueType.UNDEF


def test_unknown_form_is_not_handled():
    interp = make()
    assert interp.apply_execution_function("nope", stmt(kw("nope"))) is None


def test_ast_and_run():
    interp = make()
    template = stmt(kw("+"), num(0), num(10))
    interp.execute(stmt(kw("let"), kw("code"), stmt(kw("ast"), template)))
    result = interp.execute(stmt(kw("run"), kw("code"), num(5)))
    assert result == core.add(Value.of_long(5), Value.of_long(10))
    stored = interp.scopes.get_value("code")
    assert stored.data.children[1].value == Value.of_long(0)


def test_run_requires_ast():
    interp = make()
    with pytest.raises(HuoError, match="ast"):
        interp.execute(stmt(kw("run"), num(1)))


def test_if_form():
    interp = make()
    node = stmt(kw("if"), stmt(kw("="), num(1), num(1)), text("yes"), text("no"))
    assert interp.execute(node) == Value.of_string("yes")


def test_each_returns_undefined_and_runs_body():
    interp = make()
    node = stmt(kw("each"), arr(num(1), num(2)), kw("item"), stmt(kw("print"), kw("item")))
    result = interp.execute(node)
    assert result.type is ValueType.UNDEF
    assert interp.out.getvalue() == "1\n2\n"


def test_readline_reads_from_infile():
    interp = make("typed\n")
    result = interp.execute(stmt(kw("readline"), text("> ")))
    assert result == Value.of_string("typed")
    assert interp.out.getvalue() == "> "


def test_read_file(tmp_path):
    path = tmp_path / "data.txt"
    path.write_text("contents")
    interp = make()
    result = interp.execute(stmt(kw("read"), text(str(path))))
    assert result == Value.of_string("contents")


def test_eval_without_tokenizer_raises():
    interp = make()
    with pytest.raises(HuoError, match="tokenizer"):
        interp.execute(stmt(kw("eval"), text("(+ 1 2)")))


def test_eval_with_tokenizer():
    interp = make()
    interp.tokenizer = lambda source: PLUS_ONE_TWO
    result = interp.execute(stmt(kw("eval"), text("(+ 1 2)")))
    assert result == core.add(Value.of_long(1), Value.of_long(2))


def test_import_runs_file(tmp_path):
    path = tmp_path / "lib.huo"
    path.write_text("(+ 1 2)")
    interp = make()
    interp.tokenizer = lambda source: PLUS_ONE_TWO
    result = interp.execute(stmt(kw("import"), text(str(path))))
    assert result == core.add(Value.of_long(1), Value.of_long(2))


def test_run_program_prints_bound_value():
    interp = make()
    root = stmt(
        stmt(kw("let"), kw("x"), num(5)),
        stmt(kw("print"), kw("x")),
    )
    result = interp.run(root)
    assert interp.out.getvalue() == "5\n"
    assert result.type is ValueType.UNDEF
    assert interp.max_depth == interp.max_depth  # depth restored below
    assert interp.execute(kw("x")) == Value.of_long(5)


def test_depth_budget_restored_after_execute():
    interp = make()
    before = interp.max_depth
    interp.execute(stmt(kw("+"), num(1), stmt(kw("*"), num(2), num(3))))
    assert interp.max_depth == before


def test_array_literal_evaluates_elements():
    interp = make()
    interp.execute(stmt(kw("let"), kw("y"), num(9)))
    result = interp.execute(arr(kw("y"), text("s")))
    assert result.data == [Value.of_long(9), Value.of_string("s")]