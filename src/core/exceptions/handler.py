"""
Centralized error handling for the local HTTP surface.
Turns client errors into one consistent response envelope.
"""

import traceback
from typing import Dict, Any, Optional
from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from datetime import datetime, timezone

from src.core.exceptions.base import ClientError, ClientErrorCode
from src.core.logger.logger import get_logger
from src.infra.config.settings import get_settings

logger = get_logger(__name__)
settings = get_settings()


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class ErrorResponseBuilder:
    """Builds standardized error responses"""

    @staticmethod
    def build_error_response(
        error_code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        request_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """Build standardized error response"""

        response = {
            "success": False,
            "error": {
                "code": error_code,
                "message": message,
                "timestamp": _utc_timestamp()
            }
        }

        if details:
            response["error"]["details"] = details

        if request_id:
            response["error"]["request_id"] = request_id

        return response


class GlobalErrorHandler:
    """Global error handler for all application errors"""

    @staticmethod
    async def client_error_handler(request: Request, exc: ClientError) -> JSONResponse:
        """Handle ClientError exceptions raised by the core"""

        request_id = request.headers.get("X-Request-ID", "unknown")

        logger.warning(
            f"Client error: {exc.code}",
            extra={
                "error_code": exc.code,
                "error": exc.message,
                "status_code": exc.status_code,
                "request_id": request_id
            }
        )

        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponseBuilder.build_error_response(
                error_code=exc.code,
                message=exc.message,
                details=exc.details,
                request_id=request_id
            )
        )

    @staticmethod
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Handle request body validation errors"""

        request_id = request.headers.get("X-Request-ID", "unknown")

        validation_errors = []
        for error in exc.errors():
            validation_errors.append({
                "field": ".".join(str(loc) for loc in error["loc"]),
                "message": error["msg"]
            })

        logger.warning(
            f"Validation error: {len(validation_errors)} errors",
            extra={"request_id": request_id}
        )

        return JSONResponse(
            status_code=422,
            content=ErrorResponseBuilder.build_error_response(
                error_code=ClientErrorCode.INVALID_INPUT,
                message="Validation failed",
                details={"validation_errors": validation_errors},
                request_id=request_id
            )
        )

    @staticmethod
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions"""

        request_id = request.headers.get("X-Request-ID", "unknown")

        logger.error(
            f"Unexpected error: {type(exc).__name__}",
            extra={
                "error": str(exc),
                "request_id": request_id
            },
            exc_info=True
        )

        if settings.DEBUG:
            message = f"Internal error: {str(exc)}"
            details = {"traceback": traceback.format_exc()}
        else:
            message = "An unexpected error occurred. Please try again."
            details = {}

        return JSONResponse(
            status_code=500,
            content=ErrorResponseBuilder.build_error_response(
                error_code=ClientErrorCode.INTERNAL_ERROR,
                message=message,
                details=details,
                request_id=request_id
            )
        )
