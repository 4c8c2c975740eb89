from fastapi.responses import JSONResponse
from typing import Any

from prwarden.review.errors import ErrorKind, ReviewError

ERROR_STATUS_CODES = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INVALID_STATE: 409,
    ErrorKind.REMOTE_FATAL: 502,
    ErrorKind.REMOTE_RETRYABLE_EXHAUSTED: 502,
}


class BaseController:
    def success(
        self, data: Any, message: str = "Request was successful", status_code: int = 200
    ) -> JSONResponse:
        """Return a success response with status code and JSON data"""
        response = {"status": "success", "message": message, "data": data}
        return JSONResponse(content=response, status_code=status_code)

    def failure(
        self, error: str, message: str = "An error occurred", status_code: int = 400
    ) -> JSONResponse:
        """Return a failure response with status code and error message"""
        response = {"status": "error", "message": message, "error": error}
        return JSONResponse(content=response, status_code=status_code)

    def handle_error(self, exception: Exception) -> JSONResponse:
        """Map review errors onto HTTP statuses; anything else is a 500."""
        if isinstance(exception, ReviewError):
            return self.failure(
                exception.message,
                message=exception.kind.value,
                status_code=ERROR_STATUS_CODES.get(exception.kind, 500),
            )
        return self.failure(str(exception), status_code=500)
