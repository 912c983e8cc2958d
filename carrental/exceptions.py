"""
Erreurs metier / Domain errors.
Chaque erreur porte son code HTTP ; les handlers de main.py les traduisent
en enveloppe JSON. Each error carries its HTTP status code.
"""


class AppError(Exception):
    """Erreur metier de base / Base domain error."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Entree invalide, avec le detail par champ / Invalid input with field-level detail."""

    status_code = 422
    default_message = "Validation failed"

    def __init__(self, errors: dict[str, list[str]], message: str | None = None):
        super().__init__(message)
        self.errors = errors


class AuthenticationError(AppError):
    status_code = 401
    default_message = "Unauthenticated"


class AuthorizationError(AppError):
    status_code = 403
    default_message = "Unauthorized"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = 400
    default_message = "Resource already exists"


class UnavailableError(AppError):
    status_code = 400
    default_message = "This time slot is no longer available"


class InvalidStateError(AppError):
    status_code = 400
    default_message = "Invalid state transition"
