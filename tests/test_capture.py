import pytest

from tidyeval.capture import capture_argument, capture_argument_with_env, capture_dots, expr, exprs, quo
from tidyeval.errors import TidyTypeError, UnboundArgument
from tidyeval.reader.parser import parse_expr
from tidyeval.types.bind import bind_arguments
from tidyeval.types.closure import Promise
from tidyeval.types.environment import Environment
from tidyeval.types.nodes import MISSING, Arg, PairList
from tidyeval.types.quosure import Quosure
from tidyeval.types.symbol import Symbol


def test_direct_capture_does_not_evaluate():
    assert expr("a + b") == parse_expr("a + b")
    assert exprs("a", "b + 1") == [Symbol("a"), parse_expr("b + 1")]


def test_quo_bundles_the_environment():
    env = Environment(name="here")
    captured = quo("x + 1", env)
    assert captured.expr == parse_expr("x + 1")
    assert captured.env is env
    with pytest.raises(TidyTypeError):
        quo("x", None)


def test_enexpr_returns_the_callers_expression(session):
    result = session.eval("f <- function(x) enexpr(x)\nf(a + b)")
    assert result == parse_expr("a + b")


def test_enquo_captures_the_callers_environment(session, env):
    result = session.eval("g <- function(x) enquo(x)\ng(a * 2)")
    assert result == Quosure(parse_expr("a * 2"), env)


@pytest.mark.parametrize(
    "program",
    [
        "h <- function(x) enexpr(x)\nh()",
        "h <- function(x = 1) enexpr(x)\nh()",
        "h <- function(x) enexpr(y)\nh(1)",
        "h <- function(x) { x; enexpr(x) }\nh(1 + 1)",
        "h <- function(...) enexpr(...)\nh(1)",
        "enexpr(x)",
    ],
)
def test_unbound_arguments(session, program):
    with pytest.raises((UnboundArgument, TidyTypeError)):
        session.eval(program)


def test_unsupplied_argument_is_unbound(session):
    with pytest.raises(UnboundArgument, match="not supplied"):
        session.eval("h <- function(x) enexpr(x)\nh()")


def test_forced_argument_is_unbound(session):
    with pytest.raises(UnboundArgument, match="already been evaluated"):
        session.eval("h <- function(x) { x; enexpr(x) }\nh(1 + 1)")


def test_capture_from_a_frame():
    env = Environment(name="caller")
    formals = PairList([Arg("x", MISSING), Arg("y", MISSING)])
    frame = bind_arguments(formals, [Arg(None, Promise(parse_expr("a + 1"), env))], env)
    assert capture_argument(frame, "x") == parse_expr("a + 1")
    assert capture_argument_with_env(frame, "x") == Quosure(parse_expr("a + 1"), env)
    with pytest.raises(UnboundArgument):
        capture_argument(frame, "y")


def test_enexprs_keeps_names(session):
    result = session.eval("f <- function(...) enexprs(...)\nf(a, b = c + 1)")
    assert result == [Arg(None, Symbol("a")), Arg("b", parse_expr("c + 1"))]


def test_enquos_all_named(session, env):
    result = session.eval("f <- function(...) enquos(...)\nf(x = a, y = b + 1)")
    assert result == {"x": Quosure(Symbol("a"), env), "y": Quosure(parse_expr("b + 1"), env)}


def test_capture_dots_without_dots():
    with pytest.raises(UnboundArgument):
        capture_dots(Environment())


def test_dots_forwarding_keeps_the_original_expression(session):
    result = session.eval(
        "f <- function(...) enexprs(...)\n"
        "g <- function(...) f(...)\n"
        "g(a + 1)"
    )
    assert result == [parse_expr("a + 1")]


def test_splicing_into_dots(session):
    result = session.eval(
        "f <- function(...) enexprs(...)\n"
        "xs <- list(quote(a), quote(b))\n"
        "f(!!!xs, c)"
    )
    assert result == [Symbol("a"), Symbol("b"), Symbol("c")]


def test_forwarding_a_quosure_with_unquote(session, env):
    result = session.eval(
        "inner <- function(x) enquo(x)\n"
        "outer <- function(y) { q <- enquo(y); inner(!!q) }\n"
        "outer(z + 1)"
    )
    assert result == Quosure(parse_expr("z + 1"), env)


def test_forwarding_an_expression_with_unquote(session):
    result = session.eval(
        "inner <- function(x) enexpr(x)\n"
        "outer <- function(y) { e <- enexpr(y); inner(!!e * 2) }\n"
        "outer(a + b)"
    )
    assert str(result) == "(a + b) * 2"
