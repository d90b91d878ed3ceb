"""API exceptions and the handlers that render them as JSON."""

from __future__ import annotations

from dataclasses import asdict, dataclass

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


@dataclass(frozen=True)
class FieldError:
    """One failed rule, reported back to the caller."""

    field: str
    message: str


class ApiError(Exception):
    """Base class for errors rendered as ``{"message": ...}``."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ProductNotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, product_id: int):
        super().__init__("Product not found")
        self.product_id = product_id


class OriginNotAllowedError(ApiError):
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, origin: str):
        super().__init__("Not allowed by CORS")
        self.origin = origin


class RequestValidationFailed(Exception):
    """Raised by the validation dependency when any rule fails."""

    def __init__(self, errors: list[FieldError]):
        super().__init__(f"{len(errors)} validation error(s)")
        self.errors = errors


def validation_error_response(errors: list[FieldError]) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"errors": [asdict(error) for error in errors]},
    )


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def validation_failed_handler(
    request: Request, exc: RequestValidationFailed
) -> JSONResponse:
    return validation_error_response(exc.errors)


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render FastAPI's own validation errors in the same 400 shape."""
    errors = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ())]
        # Drop the "body" / "path" / "query" prefix FastAPI puts first
        if location and location[0] in ("body", "path", "query", "header"):
            location = location[1:]
        errors.append(
            FieldError(
                field=".".join(location) or "body",
                message=error.get("msg", "Invalid value"),
            )
        )
    return validation_error_response(errors)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationFailed, validation_failed_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
