import numpy as np
import pytest

from tidyeval.config import default_max_depth, get_deparse_width, get_max_depth, int_from_env
from tidyeval.printer import format_value


def test_defaults(monkeypatch):
    monkeypatch.delenv("TIDYEVAL_MAX_DEPTH", raising=False)
    monkeypatch.delenv("TIDYEVAL_DEPARSE_WIDTH", raising=False)
    assert get_max_depth() == default_max_depth() >= 1000
    assert get_deparse_width() == 60


def test_default_depth_follows_the_recursion_limit(monkeypatch):
    monkeypatch.setattr("tidyeval.config.sys.getrecursionlimit", lambda: 1000)
    assert default_max_depth() == 1000
    monkeypatch.setattr("tidyeval.config.sys.getrecursionlimit", lambda: 30250)
    assert default_max_depth() == 5000


@pytest.mark.parametrize(
    "raw, expected",
    [("50", 50), (" 7 ", 7), ("", 3), ("abc", 3), ("0", 3), ("-5", 3)],
)
def test_int_from_env(monkeypatch, raw, expected):
    monkeypatch.setenv("TIDYEVAL_TEST_SETTING", raw)
    assert int_from_env("TIDYEVAL_TEST_SETTING", 3) == expected


def test_settings_are_read_at_call_time(monkeypatch):
    monkeypatch.setenv("TIDYEVAL_MAX_DEPTH", "25")
    assert get_max_depth() == 25


def test_deparse_width_elides_long_vectors(monkeypatch):
    monkeypatch.delenv("TIDYEVAL_DEPARSE_WIDTH", raising=False)
    assert format_value(np.array([1, 2, 3])) == "c(1, 2, 3)"
    monkeypatch.setenv("TIDYEVAL_DEPARSE_WIDTH", "10")
    assert format_value(np.arange(20)) == f"<{np.arange(20).dtype.name}[20]>"
