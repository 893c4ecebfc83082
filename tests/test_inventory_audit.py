import importlib
from datetime import datetime

from sqlalchemy import update

from booklend import config
from booklend.extensions import db
from booklend.models.book import Book
from booklend.tasks.inventory_audit import find_drift, run_inventory_audit
from booklend.tasks.scheduler import start_scheduler

LOAN_DAY = datetime(2025, 1, 1)


def _corrupt(book_id, available):
    db.session.execute(update(Book).where(Book.id == book_id).values(available=available))
    db.session.commit()


def test_no_drift_after_normal_lending(app, ledger, make_book):
    book = make_book(copies=2)
    ledger.issue_loan(book.id, LOAN_DAY)

    checked, drift = find_drift(db.session)
    assert checked == 1
    assert drift == []


def test_audit_reports_without_repair(app, ledger, make_book):
    book = make_book(copies=3)
    ledger.issue_loan(book.id, LOAN_DAY)
    _corrupt(book.id, 3)

    summary = run_inventory_audit(app)
    assert summary == {"checked": 1, "drift": 1, "repaired": 0}

    db.session.expire_all()
    assert db.session.get(Book, book.id).available == 3


def test_audit_repairs_drift(app, catalog, ledger, make_book):
    good = make_book(copies=1)
    bad = make_book(copies=3)
    ledger.issue_loan(bad.id, LOAN_DAY)
    _corrupt(bad.id, 0)

    summary = run_inventory_audit(app, repair=True)
    assert summary == {"checked": 2, "drift": 1, "repaired": 1}

    db.session.expire_all()
    assert catalog.find_book(bad.isbn).available == 2
    assert catalog.find_book(good.isbn).available == 1


def test_audit_cli(app, make_book):
    book = make_book(copies=2)
    _corrupt(book.id, 1)

    result = app.test_cli_runner().invoke(args=["audit-inventory", "--repair"])
    assert result.exit_code == 0
    assert "drift=1 repaired=1" in result.output


def test_scheduler_disabled_in_tests(app):
    assert start_scheduler(app) is None
    assert "apscheduler" not in app.extensions


def test_scheduler_off_unless_enabled(monkeypatch):
    monkeypatch.delenv("SCHEDULER_ENABLED", raising=False)
    assert importlib.reload(config).Config.SCHEDULER_ENABLED is False

    monkeypatch.setenv("SCHEDULER_ENABLED", "1")
    assert importlib.reload(config).Config.SCHEDULER_ENABLED is True

    monkeypatch.delenv("SCHEDULER_ENABLED")
    importlib.reload(config)
