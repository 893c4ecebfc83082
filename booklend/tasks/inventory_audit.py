# booklend/tasks/inventory_audit.py
from flask import current_app

from booklend.extensions import db
from booklend.repositories.book_repo import BookRepo
from booklend.services.catalog_service import CatalogService


def find_drift(session):
    """
    Books whose available counter disagrees with their open loans.
    Returns (books checked, [(book, expected_available)]).
    """
    rows = BookRepo(session).inventory_rows()
    drift = []
    for book, open_loans in rows:
        expected = max(0, book.copies - open_loans)
        if book.available != expected:
            drift.append((book, expected))
    return len(rows), drift


def run_inventory_audit(app, repair: bool = False) -> dict:
    """
    Compare every book's available counter with copies - open loans.
    - drift is logged per book
    - repair=True reconciles each drifted book through the catalog
    """
    with app.app_context():
        try:
            checked, drift = find_drift(db.session)
            repaired = 0

            for book, expected in drift:
                current_app.logger.warning(
                    f"[inventory_audit] drift isbn={book.isbn} available={book.available} "
                    f"expected={expected} copies={book.copies}"
                )

            if repair:
                catalog = CatalogService(db.session)
                for isbn in [book.isbn for book, _ in drift]:
                    catalog.reconcile_availability(isbn)
                    repaired += 1

            summary = {"checked": checked, "drift": len(drift), "repaired": repaired}
            current_app.logger.info(
                f"[inventory_audit] checked={summary['checked']} drift={summary['drift']} "
                f"repaired={summary['repaired']}"
            )
            return summary

        except Exception as e:
            db.session.rollback()
            current_app.logger.exception(f"[inventory_audit] failed: {e}")
            raise
