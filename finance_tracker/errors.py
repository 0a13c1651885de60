"""Error taxonomy shared by the API routes and the query layer.

Each error carries the HTTP status it maps to; the handlers registered in
``main`` turn them into JSON responses.
"""

from fastapi import status


class FinanceTrackerError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {"error": self.message}


class ValidationError(FinanceTrackerError):
    """Malformed or out-of-range input, reported per field."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, errors):
        # errors: list of {"field": ..., "message": ...}
        super().__init__("Invalid input")
        self.errors = errors

    @classmethod
    def for_field(cls, field: str, message: str):
        return cls([{"field": field, "message": message}])

    def to_dict(self):
        return {"errors": self.errors}


class NotFoundError(FinanceTrackerError):
    status_code = status.HTTP_404_NOT_FOUND


class UnauthorizedError(FinanceTrackerError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class InternalError(FinanceTrackerError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
