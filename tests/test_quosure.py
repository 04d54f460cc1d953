import pytest

from tidyeval.errors import TidyTypeError
from tidyeval.evaluation.evaluator import eval_tidy, evaluate
from tidyeval.reader.parser import parse_expr
from tidyeval.types.environment import Environment
from tidyeval.types.nodes import Call, Constant
from tidyeval.types.quosure import (
    Quosure,
    is_quosure,
    new_quosure,
    quo_get_env,
    quo_get_expr,
    quo_set_expr,
    quo_squash,
)
from tidyeval.types.symbol import Symbol


def test_quosure_resolves_names_where_it_was_captured(session):
    session.eval(
        "make <- function(a) quo(x + a)\n"
        "q <- make(10)\n"
        "a <- 1000"
    )
    q = session.global_env.lookup("q")
    assert eval_tidy(q, {"x": [1, 2, 3]}).tolist() == [11, 12, 13]
    # The same code captured as a bare expression sees the global `a`
    assert session.eval_tidy("x + a", data={"x": [1, 2, 3]}).tolist() == [1001, 1002, 1003]


def test_quosure_ignores_the_callers_environment(session):
    elsewhere = Environment(session.base_env)
    elsewhere.define("a", 1)
    here = Environment(session.base_env)
    here.define("a", 2)
    q = Quosure(parse_expr("a * 10"), elsewhere)
    assert evaluate(q, here) == 10


def test_equality_requires_the_same_environment():
    e1, e2 = Environment(), Environment()
    assert Quosure(Symbol("x"), e1) == Quosure(Symbol("x"), e1)
    assert Quosure(Symbol("x"), e1) != Quosure(Symbol("x"), e2)
    assert Quosure(Symbol("x"), e1) != Quosure(Symbol("y"), e1)


def test_quosures_are_frozen():
    q = Quosure(Symbol("x"), Environment())
    with pytest.raises(AttributeError):
        q.env = Environment()
    with pytest.raises(AttributeError):
        q.expr = Symbol("y")


def test_quosure_needs_an_environment():
    with pytest.raises(TidyTypeError):
        Quosure(Symbol("x"), {"x": 1})


def test_printing():
    q = Quosure(parse_expr("x + a"), Environment(name="global"))
    assert repr(q) == "<quosure>\nexpr: ^x + a\nenv:  global"


def test_accessors():
    env = Environment()
    q = new_quosure(parse_expr("x + 1"), env)
    assert is_quosure(q) and not is_quosure(parse_expr("x"))
    assert quo_get_expr(q) == parse_expr("x + 1")
    assert quo_get_env(q) is env
    changed = quo_set_expr(q, Symbol("y"))
    assert changed == Quosure(Symbol("y"), env)
    assert q.expr == parse_expr("x + 1")
    assert new_quosure(3, env).expr == Constant(3)
    with pytest.raises(TidyTypeError):
        quo_get_expr(Symbol("x"))


def test_quo_squash():
    env = Environment()
    tree = Call(Symbol("+"), [Quosure(Quosure(Symbol("x"), env), env), Constant(1)])
    assert quo_squash(tree) == parse_expr("x + 1")


def test_embedded_quosures_use_their_own_environments(session):
    env_a = Environment(session.base_env, bindings={"a": 1})
    env_b = Environment(session.base_env, bindings={"a": 2})
    tree = Call(Symbol("+"), [Quosure(Symbol("a"), env_a), Quosure(Symbol("a"), env_b)])
    assert evaluate(tree, session.global_env) == 3


def test_embedded_quosures_keep_the_mask(session):
    scaled = Quosure(parse_expr("x * k"), Environment(session.base_env, bindings={"k": 2}))
    tree = Call(Symbol("+"), [scaled, Constant(1)])
    assert evaluate(tree, session.global_env, {"x": [1, 2]}).tolist() == [3, 5]


def test_enquo_and_eval_tidy_in_the_language(session):
    session.eval(
        "my_mean <- function(df, col) {\n"
        "  q <- enquo(col)\n"
        "  mean(eval_tidy(q, df))\n"
        "}"
    )
    assert session.eval("my_mean(list(x = c(1, 2, 3)), x * 2)") == 4.0


def test_quosures_compose_across_functions(session):
    session.eval(
        "scale_by <- function(col, k) { q <- enquo(col); quo(!!q * k) }\n"
        "k <- 100\n"
        "q <- scale_by(x, 3)"
    )
    q = session.global_env.lookup("q")
    assert str(q.expr) == "^x * k"
    assert eval_tidy(q, {"x": [1, 2]}).tolist() == [3, 6]


def test_tilde_is_a_quosure(session, env):
    assert session.eval("~x + 1") == Quosure(parse_expr("x + 1"), env)
