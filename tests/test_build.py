import pytest

from tidyeval.build import build_call, call2, sym, syms
from tidyeval.errors import TidyTypeError
from tidyeval.printer import deparse
from tidyeval.reader.parser import parse_expr
from tidyeval.types.environment import Environment
from tidyeval.types.nodes import Arg, Call, Constant
from tidyeval.types.quosure import Quosure
from tidyeval.types.symbol import Symbol


def test_call2_builds_in_order():
    built = call2("f", 1, x=Symbol("y"))
    assert built == Call(Symbol("f"), [Arg(None, Constant(1)), Arg("x", Symbol("y"))])
    assert deparse(built) == "f(1, x = y)"


def test_call2_matches_parsed_code():
    assert call2("+", Symbol("x"), call2("*", Symbol("y"), 2)) == parse_expr("x + y * 2")


def test_call2_callee_kinds():
    assert call2(Symbol("g")).fn == Symbol("g")
    nested = call2(call2("f", 1), 2)
    assert deparse(nested) == "f(1)(2)"
    assert call2(len, "abc").fn is len
    with pytest.raises(TidyTypeError):
        call2(42)


def test_call2_keeps_quosure_arguments():
    q = Quosure(Symbol("x"), Environment())
    assert call2("f", q).args[0].value is q


def test_sym_does_not_parse():
    assert sym(")") == Symbol(")")
    assert deparse(sym(")")) == "`)`"
    assert sym("x + y") == Symbol("x + y")
    with pytest.raises(TidyTypeError):
        sym(1)


def test_syms():
    assert syms(["a", "b"]) == [Symbol("a"), Symbol("b")]
    assert syms("a") == [Symbol("a")]


def test_build_call_with_pairs():
    built = build_call("f", [1, ("b", 2), Arg("c", Symbol("z"))])
    assert deparse(built) == "f(1, b = 2, c = z)"
