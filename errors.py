"""
Error taxonomy and the JSON error handlers registered on the app.
"""
from flask import Flask, current_app, jsonify
from werkzeug.exceptions import HTTPException

from index import db


class ApiError(Exception):
    status_code = 500
    default_message = "Server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class ValidationError(ApiError):
    default_message = "Invalid request"


class NotFoundError(ApiError):
    status_code = 404
    default_message = "Not found"


class AuthError(ApiError):
    status_code = 401
    default_message = "Unauthorized"


class StorageError(ApiError):
    default_message = "Storage unavailable"


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(NotFoundError)
    def not_found(error: NotFoundError):
        return jsonify({"message": error.message}), 404

    @app.errorhandler(AuthError)
    def unauthorized(error: AuthError):
        return jsonify({"message": error.message}), 401

    @app.errorhandler(HTTPException)
    def http_error(error: HTTPException):
        return jsonify({"message": error.description}), error.code

    @app.errorhandler(Exception)
    def internal_error(error: Exception):
        current_app.logger.exception("Request failed: %s", error)
        db.session.rollback()
        return jsonify({"message": "Server error"}), 500
