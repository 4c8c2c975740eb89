from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from prwarden.controllers.base_controller import BaseController
from prwarden.review.errors import ReviewError


async def unprocessable_entity_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"]) if error["loc"] else "general"
        errors.append({"field": field, "message": error["msg"]})

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": "The received data is invalid. Please check the fields below for details.",
            "errors": errors,
        },
    )


async def review_error_handler(request: Request, exc: ReviewError) -> JSONResponse:
    return BaseController().handle_error(exc)
