"""Exception handlers mapping the IoT Hub error taxonomy to HTTP responses."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from iothub.utils.exceptions import (
    AuthError,
    ConflictError,
    InternalError,
    IoTHubError,
    NotFoundError,
    OwnershipError,
    QuotaExceededError,
    ValidationError,
)
from iothub.utils.logger import get_logger

logger = get_logger(__name__)

GENERIC_ERROR = "Internal Server Error"

# NotFoundError before its parent OwnershipError
STATUS_BY_ERROR = (
    (NotFoundError, 404),
    (OwnershipError, 403),
    (ValidationError, 400),
    (AuthError, 401),
    (QuotaExceededError, 403),
    (ConflictError, 409),
    (InternalError, 500),
)


def status_for(exc: IoTHubError) -> int:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


def _error_response(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
        headers=headers,
    )


async def iothub_error_handler(request: Request, exc: IoTHubError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("Request failed", path=request.url.path, error=str(exc))
        return _error_response(status_code, GENERIC_ERROR)
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return _error_response(status_code, str(exc), headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        problems.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    message = "Invalid request body."
    if problems:
        message = f"Invalid request body: {'; '.join(problems)}"
    return _error_response(400, message)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", path=request.url.path, error=str(exc))
    return _error_response(500, GENERIC_ERROR)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(IoTHubError, iothub_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
