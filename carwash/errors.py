"""
Error taxonomy shared by services and routers.

Services raise these; the handlers registered in ``main.py`` turn them into
the ``{"success": false, "error": ...}`` envelope with the matching status.
"""

from starlette import status


class CarWashError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(CarWashError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input data"


class AuthError(CarWashError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class NotFoundError(CarWashError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(CarWashError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Conflict"


class InvalidStateError(ConflictError):
    default_message = "Operation not allowed in the record's current state"


class UnexpectedError(CarWashError):
    pass
