import pytest
from sqlalchemy.exc import OperationalError

from booklend.errors import ConcurrencyConflict, Unavailable
from booklend.utils import retry
from booklend.utils.retry import with_retry


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr(retry.time, "sleep", lambda s: None)


def _flaky(failures):
    calls = {"n": 0}

    def fn():
        calls["n"] += 1
        if calls["n"] <= len(failures):
            raise failures[calls["n"] - 1]
        return "done"

    return fn, calls


def test_retries_lost_race_then_succeeds():
    fn, calls = _flaky([ConcurrencyConflict("book", 1), ConcurrencyConflict("book", 1)])
    rollbacks = []
    assert with_retry(fn, attempts=3, backoff=0.01, on_retry=lambda: rollbacks.append(1)) == "done"
    assert calls["n"] == 3
    assert len(rollbacks) == 2


def test_retries_operational_error():
    fn, calls = _flaky([OperationalError("SELECT 1", {}, Exception("connection reset"))])
    assert with_retry(fn, attempts=2) == "done"
    assert calls["n"] == 2


def test_gives_up_after_attempts():
    fn, calls = _flaky([ConcurrencyConflict("book", 1)] * 5)
    with pytest.raises(ConcurrencyConflict):
        with_retry(fn, attempts=3)
    assert calls["n"] == 3


def test_business_outcomes_are_not_retried():
    fn, calls = _flaky([Unavailable(1)])
    with pytest.raises(Unavailable):
        with_retry(fn, attempts=5)
    assert calls["n"] == 1


def test_backoff_grows():
    assert retry.backoff_delay(0, 1.0) <= 1.25
    assert retry.backoff_delay(3, 1.0) >= 6.0
