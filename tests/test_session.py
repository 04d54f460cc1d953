import logging

import pytest

from tidyeval.errors import (
    AmbiguousReference,
    ArityOrBindingError,
    EvaluationError,
    NotCallable,
    TidyError,
    TidySyntaxError,
    TidyTypeError,
    UnboundArgument,
    UnresolvedSymbol,
)
from tidyeval.printer import deparse
from tidyeval.reader.parser import parse_expr
from tidyeval.session import Session, base_env
from tidyeval.types.quosure import Quosure
from tidyeval.types.symbol import Symbol


def test_eval_returns_the_last_value(session):
    assert session.eval("x <- 1\ny <- x + 1\ny * 10") == 20
    assert session.eval("") is None


def test_prelude_is_loaded(caplog):
    with caplog.at_level(logging.INFO, logger="tidyeval"):
        session = Session(prelude="double <- function(x) x * 2")
    assert session.eval("double(21)") == 42
    assert any("Loading prelude" in r.getMessage() for r in caplog.records)


def test_sessions_are_isolated():
    first, second = Session(), Session()
    first.eval("x <- 1")
    assert not second.global_env.has("x")
    assert first.base_env is not second.base_env


def test_environment_layout(session):
    assert session.global_env.parent is session.base_env
    assert session.global_env.name == "global"
    assert base_env().has("quote")


def test_parse_and_capture(session):
    assert session.parse("a\nb") == [Symbol("a"), Symbol("b")]
    session.define("a", parse_expr("x + y"))
    assert deparse(session.expr("f(!!a)")) == "f(x + y)"
    q = session.quo("x + 1")
    assert q == Quosure(parse_expr("x + 1"), session.global_env)


def test_eval_tidy_accepts_nodes_and_explicit_env(session):
    session.define("k", 2)
    assert session.eval_tidy(parse_expr("x * k"), data={"x": 3}) == 6
    other = base_env()
    other.define("k", 5)
    assert session.eval_tidy("x * k", data={"x": 3}, env=other) == 15


def test_debug_logging(session, caplog):
    with caplog.at_level(logging.DEBUG, logger="tidyeval"):
        session.eval("f <- function(x) x\nf(1)")
    messages = [r.getMessage() for r in caplog.records]
    assert any("Applying closure f" in m for m in messages)
    assert any("Forcing promise" in m for m in messages)


@pytest.mark.parametrize(
    "error",
    [
        TidySyntaxError,
        TidyTypeError,
        UnboundArgument,
        UnresolvedSymbol,
        NotCallable,
        ArityOrBindingError,
        AmbiguousReference,
        EvaluationError,
    ],
)
def test_errors_share_a_base_class(error):
    assert issubclass(error, TidyError)


def test_errors_propagate_from_session(session):
    with pytest.raises(TidySyntaxError):
        session.eval("f(")
    with pytest.raises(EvaluationError):
        session.eval("stop('boom')")
