"""
Inkwell - threaded comments for a blogging platform
Main FastAPI application
"""
import os
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import OperationalError

from src.api.router import router as api_router
from src.core.errors import InkwellError, ValidationError
from src.core.logger import configure_app_logging, get_logger
from src.core.middleware import SecurityHeadersMiddleware, RequestLoggingMiddleware
from src.core.rate_limit import limiter

configure_app_logging()

logger = get_logger(__name__)

DEBUG = os.getenv("INKWELL_DEBUG", "false").lower() == "true"
app = FastAPI(title="Inkwell", debug=DEBUG)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(api_router)

logger.info("Inkwell application initialized")


@app.exception_handler(InkwellError)
async def inkwell_error_handler(request: Request, exc: InkwellError):
    """Render domain errors as {detail, kind}"""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "kind": exc.kind},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Body and query validation failures share the validation_error kind"""
    return JSONResponse(
        status_code=ValidationError.status_code,
        content={"detail": jsonable_encoder(exc.errors()), "kind": ValidationError.kind},
    )


@app.exception_handler(OperationalError)
async def database_error_handler(request: Request, exc: OperationalError):
    """Database connectivity failures are logged and not retried"""
    logger.exception(f"Database error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Database unavailable", "kind": "server_error"},
    )
