# booklend/controllers/book_controller.py

from flask import Blueprint, request, jsonify

from booklend.errors import LibraryError
from booklend.extensions import db
from booklend.models.book import Book
from booklend.services.catalog_service import CatalogService
from booklend.utils.responses import bad_request, error_response

book_bp = Blueprint("books", __name__, url_prefix="/books")


def _book_dict(b: Book) -> dict:
    return {
        "id": b.id,
        "isbn": b.isbn,
        "title": b.title,
        "publication_year": b.publication_year,
        "copies": b.copies,
        "available": b.available,
        "publisher_id": b.publisher_id,
        "authors": [a.id for a in b.authors],
        "categories": [c.id for c in b.categories],
        "created_at": b.created_at.isoformat() if b.created_at else None,
        "last_modified": b.last_modified.isoformat() if b.last_modified else None,
    }


@book_bp.get("/")
def list_books():
    books = CatalogService(db.session).list_books()
    return jsonify({"success": True, "data": [_book_dict(b) for b in books]})


@book_bp.get("/<isbn>")
def find_book(isbn: str):
    try:
        b = CatalogService(db.session).find_book(isbn)
        return jsonify({"success": True, "data": _book_dict(b)})
    except LibraryError as e:
        return error_response(e)


@book_bp.post("/")
def add_book():
    data = request.get_json(silent=True) or {}
    try:
        book = Book(
            isbn=data.get("isbn"),
            title=data.get("title"),
            publication_year=data.get("publication_year"),
            copies=data.get("copies", 0),
            publisher_id=data.get("publisher_id"),
        )
        b = CatalogService(db.session).add_book(
            book,
            author_ids=data.get("author_ids") or (),
            category_ids=data.get("category_ids") or (),
        )
        return jsonify({"success": True, "data": _book_dict(b)}), 201
    except LibraryError as e:
        return error_response(e)


@book_bp.delete("/<isbn>")
def remove_book(isbn: str):
    try:
        CatalogService(db.session).remove_book(isbn)
        return jsonify({"success": True})
    except LibraryError as e:
        return error_response(e)


@book_bp.put("/<isbn>/copies")
def update_copies(isbn: str):
    data = request.get_json(silent=True) or {}
    if "copies" not in data:
        return bad_request("copies is required")
    try:
        b = CatalogService(db.session).update_book_copies(isbn, data["copies"])
        return jsonify({"success": True, "data": _book_dict(b)})
    except LibraryError as e:
        return error_response(e)


@book_bp.post("/<isbn>/reconcile")
def reconcile(isbn: str):
    try:
        b = CatalogService(db.session).reconcile_availability(isbn)
        return jsonify({"success": True, "data": _book_dict(b)})
    except LibraryError as e:
        return error_response(e)


@book_bp.post("/<isbn>/authors/<int:author_id>")
def link_author(isbn: str, author_id: int):
    try:
        b = CatalogService(db.session).link_author(isbn, author_id)
        return jsonify({"success": True, "data": _book_dict(b)}), 201
    except LibraryError as e:
        return error_response(e)


@book_bp.post("/<isbn>/categories/<int:category_id>")
def link_category(isbn: str, category_id: int):
    try:
        b = CatalogService(db.session).link_category(isbn, category_id)
        return jsonify({"success": True, "data": _book_dict(b)}), 201
    except LibraryError as e:
        return error_response(e)
