"""
Application factory.

`create_app` builds the storage handle, the mailer and the router once per
process and installs the handlers that turn every failure into
`{"success": false, "message": ...}`. Run with::

    uvicorn --factory whisperbox.main:create_app
"""

import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from whisperbox.api.fast_api import router
from whisperbox.database.config.config import Settings, get_settings
from whisperbox.database.core.errors import WhisperboxError
from whisperbox.database.core.mailer import VerificationMailer
from whisperbox.database.core.session import build_engine, build_sessionmaker, init_schema

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    logging.getLogger().setLevel(level.upper())

    for noisy in ("uvicorn.access", "aiosmtplib", "httpx", "httpcore", "openai"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def _error_body(message, category: str) -> dict:
    return {"success": False, "message": message, "error": category}


def install_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(WhisperboxError)
    async def handle_service_error(request: Request, exc: WhisperboxError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.detail, exc.category),
            headers=exc.headers,
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.detail, "http"),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        fields: dict[str, list[str]] = {}
        for error in exc.errors():
            loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
            fields.setdefault(".".join(loc) or "request", []).append(error.get("msg", "Invalid value"))
        return JSONResponse(status_code=400, content=_error_body(fields, "validation"))

    @app.exception_handler(SQLAlchemyError)
    async def handle_storage_error(request: Request, exc: SQLAlchemyError):
        logger.error("Storage failure on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content=_error_body("Internal server error", "internal"))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content=_error_body("Internal server error", "internal"))


def create_app(settings: Settings | None = None, mailer: VerificationMailer | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Defaults to the environment-backed `get_settings()`.
        mailer: Defaults to an SMTP `VerificationMailer` built from `settings`.

    Returns:
        FastAPI: The app, with `settings`, `engine`, `sessionmaker` and `mailer`
        on `app.state`.
    """
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    engine = build_engine(settings.DATABASE_URL)
    init_schema(engine)

    app = FastAPI(title="Whisperbox", version="0.1.0")
    app.state.settings = settings
    app.state.engine = engine
    app.state.sessionmaker = build_sessionmaker(engine)
    app.state.mailer = mailer or VerificationMailer(settings)
    app.state.suggestion_model = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_exception_handlers(app)
    app.include_router(router)

    logger.info("Whisperbox application created")
    return app


def run() -> None:
    uvicorn.run("whisperbox.main:create_app", factory=True, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
