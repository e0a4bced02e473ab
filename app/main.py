"""FastAPI app factory: health endpoint, logout route, and service wiring."""
from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable
from uuid import uuid4

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from app.api import logout_router
from app.config import AppConfig, StaticConfig, load_app_config, load_static_config
from app.db import Database
from app.logging_conf import get_logger, setup_logging
from app.service import SettingsService, TokenAuthority

# Configure logging before anything else.
setup_logging()
logger = get_logger("app")


def create_app(
    app_config: AppConfig | None = None,
    static_config: StaticConfig | None = None,
) -> FastAPI:
    app_config = app_config or load_app_config()
    static_config = static_config or load_static_config(app_config.config_path)

    app = FastAPI(
        title="Gateway Settings",
        version=os.getenv("APP_VERSION", "0.1.0"),
    )

    db = Database(app_config.db_path)
    app.state.app_config = app_config
    app.state.db = db
    app.state.settings_service = SettingsService(
        db, config=static_config, debug=app_config.debug
    )
    app.state.token_authority = TokenAuthority(db, secret=app_config.token_secret)

    @app.on_event("startup")
    async def _on_startup() -> None:
        db.open()
        logger.info("startup", extra={"event": "startup", "env": app_config.env})

    @app.on_event("shutdown")
    async def _on_shutdown() -> None:
        db.close()
        logger.info("shutdown", extra={"event": "shutdown"})

    @app.middleware("http")
    async def request_logger(request: Request, call_next: Callable[[Request], Response]):
        """One JSON line per request, tagged with X-Request-ID and the caller's key id.

        Routes behind require_token leave the verified key id on request.state;
        responses of 400 and above are logged as warnings.
        """
        request_id = request.headers.get("X-Request-ID", str(uuid4()))
        request.state.request_id = request_id
        fields = {"method": request.method, "path": request.url.path, "request_id": request_id}

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "request.error",
                extra={
                    "event": "request_error",
                    "key_id": getattr(request.state, "key_id", None),
                    **fields,
                },
            )
            raise

        response.headers["X-Request-ID"] = request_id
        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(
            level,
            "request.end",
            extra={
                "event": "request_end",
                "status_code": response.status_code,
                "elapsed_ms": round((time.perf_counter() - start) * 1000.0, 2),
                "key_id": getattr(request.state, "key_id", None),
                **fields,
            },
        )
        return response

    @app.get("/health", summary="Liveness/readiness check")
    async def health() -> JSONResponse:
        return JSONResponse(content={"ok": True})

    app.include_router(logout_router, prefix="/logout")

    return app


# ASGI entrypoint for uvicorn: `uvicorn app.main:app --port 8000`
app = create_app()
