"""
FastAPI application factory
"""
import logging
import time
import traceback
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.config import get_settings
from app.infrastructure.db.session import check_db_connection, ensure_schema
from app.logging_config import setup_logging
from app.api.v1 import subscriptions

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Assigns a request id and logs method, path, status and duration"""

    async def dispatch(self, request, call_next):
        req_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.req_id = req_id
        start = time.perf_counter()
        response = await call_next(request)
        dur_ms = (time.perf_counter() - start) * 1000
        response.headers[REQUEST_ID_HEADER] = req_id
        logger.info(
            "handled request req_id=%s method=%s path=%s status=%d dur_ms=%.1f",
            req_id, request.method, request.url.path, response.status_code, dur_ms,
        )
        return response


class ErrorLoggingMiddleware(BaseHTTPMiddleware):
    """Catches everything the routes did not handle (storage failures included)"""

    async def dispatch(self, request, call_next):
        try:
            return await call_next(request)
        except Exception:
            req_id = getattr(request.state, "req_id", "-")
            logger.error(
                "ERROR on %s %s req_id=%s\n%s",
                request.method, request.url.path, req_id, traceback.format_exc(),
            )
            return JSONResponse({"detail": "internal server error"}, status_code=500)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed body / path / query -> 400"""
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    logger.warning("invalid request %s %s: %s", request.method, request.url.path, errors)
    return JSONResponse({"detail": errors}, status_code=400)


def create_app(create_schema: bool | None = None) -> FastAPI:
    """
    Application factory

    Args:
        create_schema: run ensure_schema() on startup;
            None -> Settings.AUTO_CREATE_SCHEMA

    Returns:
        Configured FastAPI app
    """
    settings = get_settings()
    if create_schema is None:
        create_schema = settings.AUTO_CREATE_SCHEMA

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if create_schema:
            ensure_schema()
        logger.info("subscriptions service started")
        yield
        logger.info("subscriptions service stopped")

    app = FastAPI(
        title="Subscriptions",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    # Order matters: the last added middleware runs first
    app.add_middleware(ErrorLoggingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(subscriptions.router)

    # Health checks
    @app.get("/health", response_class=PlainTextResponse, tags=["system"])
    def health():
        """Health check endpoint"""
        return "ok"

    @app.get("/ready", response_class=PlainTextResponse, tags=["system"])
    def ready():
        """Readiness check endpoint (проверяет доступность БД)"""
        try:
            check_db_connection()
        except Exception as exc:
            logger.warning("readiness check failed: %s", exc)
            return Response(content="database unavailable", status_code=503, media_type="text/plain")
        return "ok"

    return app


setup_logging()

# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
    )
