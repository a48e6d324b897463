from flask import jsonify
from werkzeug.exceptions import HTTPException


class ShelterError(Exception):
    """Base exception for game and lobby errors."""
    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(ShelterError):
    """Referenced lobby, game, player, card, invite or minute request is missing."""
    status_code = 404


class ValidationError(ShelterError):
    """Request conflicts with the current persisted state."""
    status_code = 400


def register_error_handlers(app) -> None:
    @app.errorhandler(ShelterError)
    def handle_shelter_error(exc: ShelterError):
        app.logger.info(f"[error] status={exc.status_code} {exc.__class__.__name__}: {exc.message}")
        return jsonify({'error': exc.message}), exc.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return jsonify({'error': exc.description}), exc.code
