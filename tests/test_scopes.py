import pytest

from huolang.scopes import Scopes, function_body, substitute_variables
from huolang.syntax import AstNode, AstType
from huolang.values import HuoError, Value, ValueType


def keyword_node(name):
    return AstNode(AstType.KEYWORD, Value.of_keyword(name))


def def_node(name, params, body):
    node = AstNode(AstType.STATEMENT)
    node.push(keyword_node("def"))
    node.push(keyword_node(name))
    for param in params:
        node.push(keyword_node(param))
    node.push(body)
    return node


def test_let_and_lookup():
    scopes = Scopes()
    scopes.store_let("x", Value.of_long(5))
    assert scopes.get_value("x") == Value.of_long(5)
    assert scopes.get_function("x") is None


def test_store_accepts_keyword_value_names():
    scopes = Scopes()
    scopes.store_let(Value.of_keyword("y"), Value.of_string("s"))
    assert scopes.get_value("y") == Value.of_string("s")


def test_non_keyword_name_rejected():
    with pytest.raises(HuoError):
        Scopes().store_let(Value.of_long(1), Value.of_long(2))


def test_let_stores_copy():
    scopes = Scopes()
    array = Value.of_array([Value.of_long(1)])
    scopes.store_let("a", array)
    array.data.append(Value.of_long(2))
    assert len(scopes.get_value("a").data) == 1


def test_def_and_lookup():
    scopes = Scopes()
    body = AstNode(AstType.STATEMENT, children=[keyword_node("x")])
    function = def_node("f", ["x"], body)
    scopes.store_def("f", function)
    assert scopes.get_function("f") is function
    assert scopes.get_value("f") is None
    assert scopes.lookup("f").is_function


def test_missing_name():
    scopes = Scopes()
    assert scopes.lookup("nothing") is None
    assert scopes.get_value("nothing") is None


def test_inner_scope_shadows_and_pops():
    scopes = Scopes()
    scopes.store_let("x", Value.of_long(1))
    scopes.push()
    assert scopes.current == 1
    scopes.store_let("x", Value.of_long(2))
    assert scopes.get_value("x") == Value.of_long(2)
    scopes.pop()
    assert scopes.current == 0
    assert scopes.get_value("x") == Value.of_long(1)


def test_outer_bindings_visible_in_inner_scope():
    scopes = Scopes()
    scopes.store_let("x", Value.of_bool(True))
    scopes.push()
    assert scopes.get_value("x") == Value.of_bool(True)


def test_cannot_pop_global():
    with pytest.raises(HuoError):
        Scopes().pop()


def test_substitute_bound_keyword():
    scopes = Scopes()
    scopes.store_let("x", Value.of_long(9))
    result = substitute_variables(Value.of_keyword("x"), scopes, 10)
    assert result == Value.of_long(9)


def test_substitute_true_false():
    scopes = Scopes()
    assert substitute_variables(Value.of_keyword("true"), scopes, 10) == Value.of_bool(True)
    assert substitute_variables(Value.of_keyword("false"), scopes, 10) == Value.of_bool(False)


def test_substitute_literal_unchanged():
    result = substitute_variables(Value.of_string("k"), Scopes(), 10)
    assert result == Value.of_string("k")


def test_substitute_undefined_raises():
    with pytest.raises(HuoError, match="Undefined variable"):
        substitute_variables(Value.of_keyword("ghost"), Scopes(), 10)


def test_substitute_array_in_place():
    scopes = Scopes()
    scopes.store_let("x", Value.of_long(3))
    array = Value.of_array([Value.of_keyword("x"), Value.of_long(4)])
    result = substitute_variables(array, scopes, 10)
    assert array.data == [Value.of_long(3), Value.of_long(4)]
    assert result.type is ValueType.ARRAY
    assert result.data is array.data


def test_substitute_depth_exhausted():
    with pytest.raises(HuoError, match="Max depth"):
        substitute_variables(Value.of_long(1), Scopes(), 0)


def test_function_body_is_copy_of_last_child():
    body = AstNode(AstType.STATEMENT, children=[keyword_node("+"), keyword_node("x")])
    function = def_node("f", ["x"], body)
    result = function_body(function)
    assert result == body
    assert result is not body


def test_function_body_missing():
    with pytest.raises(HuoError):
        function_body(AstNode(AstType.STATEMENT, children=[keyword_node("def")]))


def test_function_body_empty():
    function = def_node("f", [], keyword_node("x"))
    with pytest.raises(HuoError, match="No function body"):
        function_body(function)