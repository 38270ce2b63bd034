from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.exceptions import RequestValidationError
from typing import Any, Optional
import traceback
import logging
from app.core.exceptions import FestivaError

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Every error body carries an "error" message the client can show as is
def create_error_response(message: str, details: Optional[Any] = None) -> dict:
    response = {"error": message}
    if details:
        response["details"] = details
    return response

async def festiva_exception_handler(request: Request, exc: FestivaError):
    """Handles domain errors using the status code each error class carries."""
    logger.warning(f"{type(exc).__name__}: {exc.detail} for {request.method} {request.url.path}")
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.detail),
    )

async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handles StarletteHTTPException (which includes FastAPI's HTTPException)."""
    logger.warning(f"HTTP Exception: {exc.status_code} - {exc.detail} for {request.method} {request.url.path}")
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.detail),
        headers=getattr(exc, "headers", None),
    )

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handles RequestValidationError for input validation errors."""
    logger.warning(f"Validation Error: {exc.errors()} for {request.method} {request.url.path}")
    error_details = []
    for error in exc.errors():
        field = ".".join(map(str, error["loc"]))
        msg = error["msg"]
        error_details.append(f"Field '{field}': {msg}")

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=create_error_response(
            message="Validation failed",
            details={"errors": error_details}
        ),
    )

async def general_exception_handler(request: Request, exc: Exception):
    """Handles any other unhandled exceptions."""
    logger.error(f"Unhandled Exception: {exc}\n{traceback.format_exc()} for {request.method} {request.url.path}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=create_error_response("An unexpected internal server error occurred."),
    )

# Function to register all handlers with the FastAPI app
def register_global_exception_handlers(app: FastAPI):
    app.exception_handler(FestivaError)(festiva_exception_handler)
    app.exception_handler(StarletteHTTPException)(http_exception_handler)
    app.exception_handler(RequestValidationError)(validation_exception_handler)
    app.exception_handler(Exception)(general_exception_handler)
