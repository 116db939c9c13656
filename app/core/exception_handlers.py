import logging
from typing import Any, Dict, List, Sequence

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


def describe_validation_errors(errors: Sequence[Dict[str, Any]]) -> str:
    """Turn pydantic error dicts into one message naming the offending fields"""
    missing: List[str] = []
    invalid: List[str] = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query")]
        field = ".".join(loc) or "body"
        if error.get("type") == "missing":
            missing.append(field)
        else:
            invalid.append(f"{field} ({error.get('msg', 'invalid')})")

    parts = []
    if missing:
        parts.append("Missing required field(s): " + ", ".join(missing))
    if invalid:
        parts.append("Invalid field(s): " + ", ".join(invalid))
    return "; ".join(parts) or "Invalid request"


def setup_exception_handlers(app: FastAPI):
    """Map validation and database failures onto the API error taxonomy"""

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": describe_validation_errors(exc.errors())}
        )

    @app.exception_handler(ValidationError)
    async def body_validation_handler(request: Request, exc: ValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": describe_validation_errors(exc.errors())}
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception(f"Database error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"}
        )
