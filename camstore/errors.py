from flask import jsonify
from werkzeug.exceptions import HTTPException


class StoreError(Exception):
    """Base error carrying a user-facing message and an HTTP status."""

    status = 500

    def __init__(self, message: str, status: int = None):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status


class ValidationError(StoreError):
    status = 400


class AuthError(StoreError):
    status = 401


class ForbiddenError(StoreError):
    status = 403


class NotFoundError(StoreError):
    status = 404


class ServiceUnavailable(StoreError):
    status = 503


def register_error_handlers(app):
    @app.errorhandler(StoreError)
    def handle_store_error(exc):
        if exc.status >= 500:
            app.logger.warning('%s: %s', type(exc).__name__, exc.message)
        return jsonify({'success': False, 'message': exc.message}), exc.status

    @app.errorhandler(HTTPException)
    def handle_http_error(exc):
        return jsonify({'success': False, 'message': exc.description}), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected(exc):
        app.logger.exception('Unhandled error: %s', exc)
        return jsonify({'success': False, 'message': 'Internal server error'}), 500
