"""Domain exceptions and their mapping to JSON error responses.

Services raise these; routes let them propagate and the handlers registered
in ``register_error_handlers`` turn them into ``{"message": ...}`` bodies.
"""
from flask import jsonify
from werkzeug.exceptions import HTTPException


class GroupPlayError(Exception):
    """Base class for errors that carry an HTTP status."""
    status_code = 500
    default_message = 'Internal server error'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(GroupPlayError):
    status_code = 404
    default_message = 'Not found'


class Conflict(GroupPlayError):
    status_code = 400
    default_message = 'Conflict'


class Forbidden(GroupPlayError):
    # Out-of-turn moves surface as 400 on the HTTP API
    status_code = 400
    default_message = 'Forbidden'


class ValidationError(GroupPlayError):
    status_code = 400
    default_message = 'Invalid request'


class IllegalMove(ValidationError):
    """Raised by rule modules when a move breaks the game's rules."""
    default_message = 'Illegal move'


class InternalError(GroupPlayError):
    pass


def register_error_handlers(flask_app):
    from groupplay import db

    @flask_app.errorhandler(GroupPlayError)
    def handle_domain_error(exc):
        return jsonify({'message': exc.message}), exc.status_code

    @flask_app.errorhandler(HTTPException)
    def handle_http_error(exc):
        return jsonify({'message': exc.description}), exc.code

    @flask_app.errorhandler(Exception)
    def handle_unexpected_error(exc):
        db.session.rollback()
        flask_app.logger.exception("Unhandled error: %s", exc)
        return jsonify({'message': InternalError.default_message}), 500

    from groupplay import login_manager

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'message': 'Authentication required'}), 401
