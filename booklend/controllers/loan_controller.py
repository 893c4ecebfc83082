# booklend/controllers/loan_controller.py

from datetime import datetime

from flask import Blueprint, current_app, request, jsonify

from booklend.errors import LibraryError
from booklend.extensions import db
from booklend.models.loan import BookLoan
from booklend.services.loan_service import LoanService
from booklend.utils.responses import bad_request, error_response
from booklend.utils.retry import with_retry

loan_bp = Blueprint("loans", __name__, url_prefix="/loans")


def _ledger() -> LoanService:
    cfg = current_app.config
    return LoanService(db.session, max_days=cfg["LOAN_MAX_DAYS"], default_days=cfg["DEFAULT_LOAN_DAYS"])


def _retrying(fn, *args):
    cfg = current_app.config
    return with_retry(
        fn, *args,
        attempts=cfg["STORE_RETRY_ATTEMPTS"],
        backoff=cfg["STORE_RETRY_BACKOFF"],
        on_retry=db.session.rollback,
    )


def _parse_dt(value):
    if value is None:
        return None
    return datetime.fromisoformat(str(value))


def _loan_dict(x: BookLoan) -> dict:
    return {
        "id": x.id,
        "book_id": x.book_id,
        "loan_date": x.loan_date.isoformat(),
        "due_date": x.due_date.isoformat(),
        "returned": x.returned,
        "return_date": x.return_date.isoformat() if x.return_date else None,
        "status": x.status.value,
    }


@loan_bp.post("/")
def issue_loan():
    data = request.get_json(silent=True) or {}
    try:
        book_id = int(data["book_id"])
        loan_date = _parse_dt(data.get("loan_date"))
        due_date = _parse_dt(data.get("due_date"))
    except KeyError:
        return bad_request("book_id is required")
    except (TypeError, ValueError) as e:
        return bad_request(str(e))

    try:
        loan = _retrying(_ledger().issue_loan, book_id, loan_date, due_date)
        return jsonify({"success": True, "data": _loan_dict(loan)}), 201
    except LibraryError as e:
        return error_response(e)


@loan_bp.post("/<int:loan_id>/return")
def return_loan(loan_id: int):
    try:
        loan = _retrying(_ledger().return_loan, loan_id)
        return jsonify({"success": True, "data": _loan_dict(loan)})
    except LibraryError as e:
        return error_response(e)


@loan_bp.get("/<int:loan_id>")
def get_loan(loan_id: int):
    try:
        loan = _ledger().get_loan(loan_id)
        return jsonify({"success": True, "data": _loan_dict(loan)})
    except LibraryError as e:
        return error_response(e)


@loan_bp.get("/")
def list_loans():
    book_id = request.args.get("book_id", type=int)
    open_only = request.args.get("open", "0") == "1"
    loans = _ledger().list_loans(book_id=book_id, open_only=open_only)
    return jsonify({"success": True, "data": [_loan_dict(x) for x in loans]})
