from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import time
import logging

from app.core.exceptions import DomainError, format_error_list
from app.shared.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)

def setup_logging(level: str = "INFO"):
    """Configure the root logger once for the process"""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
    )

def setup_middleware(app: FastAPI):
    """Configure all middleware for the application"""

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure properly for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request, call_next):
        start_time = time.time()

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(
            f"{request.method} {request.url.path} - "
            f"Status: {response.status_code} - "
            f"Time: {process_time:.4f}s"
        )

        return response

def error_response(status_code: int, message: str, error_code: str, errors=None) -> JSONResponse:
    body = ErrorResponse(message=message, error_code=error_code, errors=errors or [])
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", exclude_none=True)
    )

def setup_exception_handlers(app: FastAPI):
    """Uniform error bodies: {success, message, error_code, errors, timestamp}"""

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        return error_response(
            exc.status_code,
            exc.detail["message"],
            exc.detail["error_code"],
            exc.detail.get("errors")
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            "Validation error",
            "validation_error",
            format_error_list(exc.errors())
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"❌ Unhandled error on {request.method} {request.url.path}: {str(exc)}")
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error",
            "internal_error"
        )
