import pytest

from tidyeval.runtime_context import reset_eval_depth
from tidyeval.session import Session
from tidyeval.types.environment import Environment


@pytest.fixture
def session():
    """A fresh session: base environment with builtins, and a global child."""
    return Session()


@pytest.fixture
def env(session):
    """The global environment of a fresh session."""
    return session.global_env


@pytest.fixture
def bare_env():
    """An empty environment with no builtins at all."""
    return Environment(name="bare")


@pytest.fixture(autouse=True)
def _reset_depth():
    # A test that ends in an error must not leak evaluation depth into the next
    reset_eval_depth()
    yield
    reset_eval_depth()
