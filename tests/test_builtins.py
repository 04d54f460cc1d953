import math

import numpy as np
import pytest

from tidyeval.builtins import BUILTINS, plus
from tidyeval.errors import EvaluationError, TidyTypeError
from tidyeval.types.closure import Closure
from tidyeval.types.environment import Environment
from tidyeval.types.special_form import SpecialForm
from tidyeval.types.symbol import Symbol


@pytest.mark.parametrize(
    "source, expected",
    [
        ("1 + 2", 3),
        ("5 - 7", -2),
        ("-3", -3),
        ("+3", 3),
        ("6 * 7", 42),
        ("10 / 4", 2.5),
        ("2^10", 1024.0),
        ("7 %% 3", 1),
        ("-7 %% 3", 2),
        ("7 %/% 2", 3),
        ("TRUE + TRUE", 2),
        ("sqrt(16)", 4.0),
        ("abs(-2)", 2),
        ("exp(0)", 1.0),
        ("sum(1:4)", 10),
        ("sum(c(1, 2), 3)", 6),
        ("mean(c(1, 2, 3, 4))", 2.5),
        ("min(c(4, 2, 8))", 2),
        ("max(3, c(1, 9))", 9),
        ("length(c(1, 2, 3))", 3),
        ("length(NULL)", 0),
        ("length(quote(f(a, b)))", 3),
        ("1 == 1", True),
        ("'a' != 'b'", True),
        ("2 < 1", False),
        ("!TRUE", False),
        ("TRUE & FALSE", False),
        ("TRUE | FALSE", True),
        ("TRUE || stop('not evaluated')", True),
        ("FALSE && stop('not evaluated')", False),
        ("is.null(NULL)", True),
        ("is.null(1)", False),
        ("identical(quote(x + 1), quote(x + 1))", True),
        ("identical(1, TRUE)", False),
        ("paste('a', 'b')", "a b"),
        ("paste(c('a', 'b'), collapse = '+')", "a+b"),
        ("paste0('x', TRUE)", "xTRUE"),
        ("list(a = 1, b = 2)[['b']]", 2),
        ("list(a = 1)$a", 1),
        ("c(10, 20, 30)[[2]]", 20),
        ("as_string(quote(x))", "x"),
        ("expr_text(quote(x + y))", "x + y"),
        ("is_call(quote(f(x)), 'f')", True),
        ("is_call(quote(f(x)), 'g')", False),
        ("is_symbol(quote(x))", True),
        ("if (2 > 1) 'yes' else 'no'", "yes"),
        ("if (FALSE) 'yes'", None),
        ("{ 1; 2 }", 2),
    ],
)
def test_scalar_results(session, source, expected):
    assert session.eval(source) == expected


@pytest.mark.parametrize(
    "source, expected",
    [
        ("c(1, 2, 3) * 2", [2, 4, 6]),
        ("c(1, 2) + c(10, 20)", [11, 22]),
        ("c(1, 5) > 2", [False, True]),
        ("!c(TRUE, FALSE)", [False, True]),
        ("1:4", [1, 2, 3, 4]),
        ("3:1", [3, 2, 1]),
        ("c(1, c(2, 3), NULL)", [1, 2, 3]),
        ("paste0('x', 1:3)", ["x1", "x2", "x3"]),
        ("round(c(1.25, 2.5), 1)", [1.2, 2.5]),
    ],
)
def test_vector_results(session, source, expected):
    result = session.eval(source)
    assert isinstance(result, np.ndarray)
    assert result.tolist() == expected


def test_division_by_zero_follows_ieee(session):
    assert session.eval("1 / 0") == math.inf
    assert math.isnan(session.eval("0 / 0"))


def test_na_rm(session):
    assert session.eval("mean(c(1, 2, NaN), na.rm = TRUE)") == 1.5
    assert math.isnan(session.eval("mean(c(1, 2, NaN))"))
    with pytest.raises(Exception, match="unused argument"):
        session.eval("sum(1, trim = 1)")


def test_lists(session):
    assert session.eval("list(1, 2)") == [1, 2]
    assert session.eval("list(a = 1, b = 2)") == {"a": 1, "b": 2}
    assert session.eval("list()") == []


@pytest.mark.parametrize("source", ["'a' + 1", "-'a'", "sum('a')", "!'a'"])
def test_non_numeric_arguments(session, source):
    with pytest.raises(TidyTypeError):
        session.eval(source)


@pytest.mark.parametrize("source", ["if (c(TRUE, FALSE)) 1", "if (NULL) 1", "c(TRUE, TRUE) && TRUE", "if ('a') 1"])
def test_conditions_must_be_single_flags(session, source):
    with pytest.raises(TidyTypeError):
        session.eval(source)


def test_stop(session):
    with pytest.raises(EvaluationError, match="bad thing"):
        session.eval("stop('bad ', 'thing')")


def test_print_writes_and_returns(session, capsys):
    result = session.eval("print(quote(x + 1))")
    assert str(result) == "x + 1"
    assert capsys.readouterr().out == "x + 1\n"


def test_metaprogramming_builders(session):
    assert session.eval("sym('a')") == Symbol("a")
    assert str(session.eval("call2('f', 1, b = quote(z))")) == "f(1, b = z)"
    assert str(session.eval("call2(quote(g), 1, 2)")) == "g(1, 2)"
    assert session.eval("syms(c('a', 'b'))") == [Symbol("a"), Symbol("b")]
    assert session.eval("quo_get_expr(quo(x + 1))") == session.eval("quote(x + 1)")
    assert session.eval("quo_get_env(quo(x))") is session.global_env
    assert str(session.eval("quo_squash(quo(f(!!quo(y))))")) == "f(y)"


def test_eval_and_environments(session):
    assert session.eval("eval(quote(1 + 2))") == 3
    assert session.eval("eval(quote(a * 2), list(a = 4))") == 8
    assert session.eval("e <- new_environment(list(a = 5), current_env())\neval(quote(a + 1), e)") == 6
    assert session.eval("env_parent(e)") is session.global_env
    assert session.eval("current_env()") is session.global_env
    assert session.eval("f <- function() global_env()\nf()") is session.global_env
    session.eval("a <- 'global'")
    assert session.eval("eval(quo(a), e)") == "global"


def test_eval_tidy_in_the_language(session):
    assert session.eval("eval_tidy(quote(x * 2), list(x = 21))") == 42
    assert session.eval("eval_tidy(quote(.data$x), list(x = 1))") == 1
    assert session.eval("eval_tidy(3)") == 3


def test_builtins_can_be_shadowed(session):
    assert session.eval("`+` <- function(e1, e2) paste(e1, e2)\n1 + 2") == "1 2"
    assert session.base_env.lookup("+") is plus
    fresh = Environment(session.base_env)
    assert fresh.lookup("if").name == "if"


def test_registry_contents(session):
    assert isinstance(session.base_env.lookup("quote"), SpecialForm)
    assert isinstance(session.base_env.lookup("function"), SpecialForm)
    assert session.base_env.lookup("c") is BUILTINS["c"]
    assert not isinstance(session.base_env.lookup("c"), Closure)


def test_logarithms(session):
    assert session.eval("log(100, 10)") == pytest.approx(2.0)
    assert session.eval("log(exp(1))") == pytest.approx(1.0)
    assert session.eval("log(0)") == -math.inf


def test_call2_inlines_function_values(session):
    built = session.eval("inc <- function(x) x + 1\ncl <- call2(inc, 1)\ncl")
    assert str(built) == "(function(x) x + 1)(1)"
    assert session.eval("eval(cl)") == 2
