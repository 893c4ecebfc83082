from flask import current_app, jsonify

from booklend.errors import LibraryError


def error_response(e: LibraryError):
    current_app.logger.info(f"[api] {e.code}: {e.message}")
    return jsonify(e.to_response()), e.http_status


def bad_request(message: str):
    return jsonify({"success": False, "code": "bad_request", "message": message}), 400
