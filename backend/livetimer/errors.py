"""Error types raised by routes and their JSON rendering.

Routes raise these instead of building error responses by hand; the
handlers registered here turn them into ``{"error": message}`` bodies with
the matching status code. Anything unexpected becomes a 500 whose message
is passed through to the caller.
"""
from flask import jsonify
from werkzeug.exceptions import HTTPException

from livetimer import db


class ApiError(Exception):
    status_code = 500
    default_message = 'Internal server error'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class ValidationError(ApiError):
    status_code = 400
    default_message = 'Bad request'


class AuthError(ApiError):
    status_code = 401
    default_message = 'Unauthorized'


class NotFoundError(ApiError):
    status_code = 404
    default_message = 'Not found'


class ConflictError(ApiError):
    status_code = 409
    default_message = 'Conflict'


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(exc):
        return jsonify({'error': exc.message}), exc.status_code

    @app.errorhandler(Exception)
    def handle_unexpected(exc):
        if isinstance(exc, HTTPException):
            return exc
        db.session.rollback()
        app.logger.exception(f"[error] unhandled {type(exc).__name__}: {exc}")
        return jsonify({'error': str(exc)}), 500
