# Third-party imports
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import sentry_sdk

# Local application imports
from civic_issues.core.monitoring.logging import get_logger
from civic_issues.schemas.common import BaseResponse
from civic_issues.services.issues.exceptions import IssueError
from civic_issues.services.weather.exceptions import WeatherUnavailableError

logger = get_logger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    # Map specific HTTP status codes to custom error codes
    error_map = {
        400: "bad_request",
        401: "unauthorized",
        403: "forbidden",
        404: "not_found",
        405: "method_not_allowed",
        409: "conflict",
        422: "unprocessable_entity",
        429: "too_many_requests",
        500: "internal_server_error",
        502: "bad_gateway",
        503: "service_unavailable",
    }

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request,  # noqa
        exc: HTTPException,
    ) -> JSONResponse:
        error_code = error_map.get(exc.status_code, "error")
        # Ensure the detail is a string; if not, convert it
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        response = BaseResponse.failure(code=error_code, message=detail)
        return JSONResponse(status_code=exc.status_code, content=response.model_dump(), headers=exc.headers)

    @app.exception_handler(IssueError)
    async def issue_exception_handler(
        request: Request,  # noqa
        exc: IssueError,
    ) -> JSONResponse:
        details = {"issue_id": exc.issue_id} if exc.issue_id else None
        response = BaseResponse.failure(code=exc.code, message=exc.message, details=details)
        return JSONResponse(status_code=exc.status_code, content=response.model_dump())

    @app.exception_handler(WeatherUnavailableError)
    async def weather_exception_handler(
        request: Request,  # noqa
        exc: WeatherUnavailableError,
    ) -> JSONResponse:
        response = BaseResponse.failure(code=exc.code, message=exc.message)
        return JSONResponse(status_code=exc.status_code, content=response.model_dump())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,  # noqa
        exc: RequestValidationError,
    ) -> JSONResponse:
        # Format validation errors into a more readable message
        error_details = []
        for error in exc.errors():
            message = error.get("msg", "")

            # Remove "Value error, " prefix added by pydantic
            val_error_prefix = "Value error, "
            if message.startswith(val_error_prefix):
                message = message[len(val_error_prefix) :]

            location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
            error_details.append(f"{location}: {message}" if location else message)

        max_errors = 5
        shown = error_details[:max_errors]

        if len(error_details) > max_errors:
            shown.append("and more errors")
        detail = "; ".join(shown) if shown else "Invalid request data"

        response = BaseResponse.failure(code="bad_request", message=detail)
        return JSONResponse(status_code=400, content=response.model_dump())

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request,  # noqa
        exc: Exception,
    ) -> JSONResponse:
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc!r}")
        sentry_sdk.capture_exception(exc)
        response = BaseResponse.failure(
            code="internal_server_error",
            message="An unexpected error occurred. Please try again later.",
        )
        return JSONResponse(status_code=500, content=response.model_dump())
