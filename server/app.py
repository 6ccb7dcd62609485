"""
Social Engagement API: FastAPI app factory.

Use: uvicorn server.app:app
Or:  from server import app
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from engagement.errors import EngagementError

try:
    from .config import ServerConfig, get_config
    from .routes import register_routes
    from .state import AppState, get_state, set_state
except ImportError:
    from config import ServerConfig, get_config
    from routes import register_routes
    from state import AppState, get_state, set_state

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"{loc}: {first.get('msg', 'invalid value')}" if loc else first.get("msg", "Invalid request")


def register_error_handlers(app: FastAPI) -> None:
    """Render domain errors and request validation failures as {"message", "error"}."""

    @app.exception_handler(EngagementError)
    async def _engagement_error(request: Request, exc: EngagementError):
        if exc.status_code >= 500:
            logger.error("[error] %s %s: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.message, "error": exc.code},
        )

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception):
        logger.exception("[error] %s %s: unhandled %s", request.method, request.url.path, type(exc).__name__)
        return JSONResponse(
            status_code=500,
            content={"message": f"Internal server error: {exc}", "error": "internal"},
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={
                "message": _validation_message(exc),
                "error": "invalid_input",
                "details": jsonable_encoder(exc.errors()),
            },
        )


def create_app(config: Optional[ServerConfig] = None, state: Optional[AppState] = None) -> FastAPI:
    """Build FastAPI app with CORS, error handlers, routes and startup checks."""
    config = state.config if state is not None else (config or get_config())
    _configure_logging(config.log_level)
    if state is not None:
        set_state(state)

    app = FastAPI(
        title="Social Engagement API",
        description="Users, posts, comments, bookmarks, follows and votes over a document store",
        version="1.0.0",
    )
    # credentials cannot be combined with a wildcard origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials="*" not in config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)
    register_routes(app)

    @app.on_event("startup")
    def _startup_check():
        ok, errors = config.validate()
        for err in errors:
            logger.warning("[startup] config: %s", err)
        current = get_state()
        logger.info(
            "[startup] Social Engagement API ready (store=%s, mode=%s, valid_config=%s)",
            type(current.store).__name__,
            current.engagement.mode,
            ok,
        )

    return app


app = create_app()
