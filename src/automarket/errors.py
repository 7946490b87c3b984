from flask import current_app, jsonify, request
from werkzeug.exceptions import HTTPException
from .extensions import db


class ApiError(Exception):
    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ApiError):
    status_code = 400


class Unauthenticated(ApiError):
    status_code = 401


class Forbidden(ApiError):
    status_code = 403


class NotFound(ApiError):
    status_code = 404


class Conflict(ApiError):
    # duplicate favorites / emails are reported as a bad request
    status_code = 400


def _error(message, status):
    return jsonify({"error": message}), status


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(e):
        return _error(e.message, e.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        if e.code == 404:
            return _error("Route not found", 404)
        return _error(e.description, e.code)

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        db.session.rollback()
        current_app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        if current_app.config.get("APP_ENV") == "development":
            return _error(str(e), 500)
        return _error("Internal server error.", 500)
