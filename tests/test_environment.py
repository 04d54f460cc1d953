import pytest
from hypothesis import given, strategies as st

from tidyeval.errors import TidyTypeError, UnresolvedSymbol
from tidyeval.types.environment import Environment, new_environment
from tidyeval.types.symbol import Symbol


def test_define_and_lookup():
    env = Environment()
    env.define("x", 1)
    env.define(Symbol("y"), 2)
    assert env.lookup("x") == 1
    assert env.lookup(Symbol("y")) == 2
    assert "x" in env


def test_lookup_walks_parents():
    parent = Environment(name="parent")
    child = Environment(parent)
    parent.define("x", 1)
    assert child.lookup("x") == 1
    assert child.find("x") is parent
    assert child.has("x")
    assert not child.has("x", inherit=False)


def test_unbound_lookup_is_an_error():
    with pytest.raises(UnresolvedSymbol, match="object 'nope' not found"):
        Environment().lookup("nope")


def test_set_rebinds_nearest_binding():
    parent = Environment()
    child = Environment(parent)
    parent.define("x", 1)
    child.set("x", 2)
    assert parent.lookup("x") == 2
    assert not child.has("x", inherit=False)
    with pytest.raises(UnresolvedSymbol):
        child.set("nope", 1)


def test_parents_and_labels():
    base = Environment(name="base")
    glob = Environment(base, name="global")
    frame = Environment(glob)
    assert list(frame.parents()) == [frame, glob, base]
    assert repr(glob) == "<environment: global>"
    assert repr(frame).startswith("<environment: 0x")


def test_new_environment_accepts_string_keys():
    env = new_environment(bindings={"a": 1, Symbol("b"): 2})
    assert sorted(env.local_names()) == ["a", "b"]
    assert env.parent is None


def test_invalid_names_and_parents():
    with pytest.raises(TidyTypeError):
        Environment().define(1, "x")
    with pytest.raises(TidyTypeError):
        Environment(parent={"a": 1})


def test_str_shows_frame():
    env = Environment(Environment())
    env.define("x", 1)
    assert str(env) == "{x: 1} -> ..."


NAMES = st.sampled_from(["x", "y", "z", "df", ".data2", "my var"])


@given(st.lists(NAMES, min_size=1, unique=True), st.integers(), st.integers())
def test_child_binding_shadows_parent(names, outer, inner):
    parent = Environment(name="parent")
    child = Environment(parent)
    for name in names:
        parent.define(name, outer)
    child.define(names[0], inner)
    assert child.lookup(names[0]) == inner
    assert parent.lookup(names[0]) == outer
    for name in names[1:]:
        assert child.lookup(name) == outer
