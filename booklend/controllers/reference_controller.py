# booklend/controllers/reference_controller.py

from flask import Blueprint, request, jsonify

from booklend.errors import LibraryError
from booklend.extensions import db
from booklend.services.reference_service import ReferenceService
from booklend.utils.responses import error_response

reference_bp = Blueprint("reference", __name__)


def _author_dict(a):
    return {"id": a.id, "name": a.name, "biography": a.biography, "birth_year": a.birth_year}


def _publisher_dict(p):
    return {"id": p.id, "name": p.name, "address": p.address}


def _category_dict(c):
    return {"id": c.id, "name": c.name}


def _review_dict(r):
    return {
        "id": r.id,
        "rating": r.rating,
        "comment": r.comment,
        "customer_id": r.customer_id,
        "product_id": r.product_id,
    }


# -----------------------------
# Authors
# -----------------------------
@reference_bp.get("/authors/")
def list_authors():
    rows = ReferenceService(db.session).list_authors()
    return jsonify({"success": True, "data": [_author_dict(a) for a in rows]})


@reference_bp.post("/authors/")
def create_author():
    data = request.get_json(silent=True) or {}
    try:
        a = ReferenceService(db.session).create_author(
            data.get("name"), data.get("biography"), data.get("birth_year")
        )
        return jsonify({"success": True, "data": _author_dict(a)}), 201
    except LibraryError as e:
        return error_response(e)


# -----------------------------
# Publishers
# -----------------------------
@reference_bp.get("/publishers/")
def list_publishers():
    rows = ReferenceService(db.session).list_publishers()
    return jsonify({"success": True, "data": [_publisher_dict(p) for p in rows]})


@reference_bp.post("/publishers/")
def create_publisher():
    data = request.get_json(silent=True) or {}
    try:
        p = ReferenceService(db.session).create_publisher(data.get("name"), data.get("address"))
        return jsonify({"success": True, "data": _publisher_dict(p)}), 201
    except LibraryError as e:
        return error_response(e)


# -----------------------------
# Categories
# -----------------------------
@reference_bp.get("/categories/")
def list_categories():
    rows = ReferenceService(db.session).list_categories()
    return jsonify({"success": True, "data": [_category_dict(c) for c in rows]})


@reference_bp.post("/categories/")
def create_category():
    data = request.get_json(silent=True) or {}
    try:
        c = ReferenceService(db.session).create_category(data.get("name"))
        return jsonify({"success": True, "data": _category_dict(c)}), 201
    except LibraryError as e:
        return error_response(e)


# -----------------------------
# Reviews
# -----------------------------
@reference_bp.post("/reviews/")
def create_review():
    data = request.get_json(silent=True) or {}
    try:
        r = ReferenceService(db.session).create_review(
            data.get("rating"),
            comment=data.get("comment"),
            customer_id=data.get("customer_id"),
            product_id=data.get("product_id"),
        )
        return jsonify({"success": True, "data": _review_dict(r)}), 201
    except LibraryError as e:
        return error_response(e)


@reference_bp.get("/reviews/<int:review_id>")
def get_review(review_id: int):
    try:
        r = ReferenceService(db.session).get_review(review_id)
        return jsonify({"success": True, "data": _review_dict(r)})
    except LibraryError as e:
        return error_response(e)
