"""CloudMgr FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.types import ASGIApp, Receive, Scope, Send

from cloudmgr import __version__
from cloudmgr.config import settings
from cloudmgr.database import init_db
from cloudmgr.exceptions import FileServiceError
from cloudmgr.services import init_services, shutdown_services

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    # === STARTUP ===
    _setup_logging()

    for d in (settings.data_dir, settings.local_root):
        Path(d).mkdir(parents=True, exist_ok=True)

    await init_db()
    await init_services()
    logger.info("CloudMgr v%s started, listening on %s:%s", __version__, settings.host, settings.port)

    try:
        yield
    finally:
        # === SHUTDOWN ===
        await shutdown_services()
        logger.info("CloudMgr shutting down")


def _setup_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    for noisy in ("aiosqlite", "httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


class ApiCORSMiddleware(CORSMiddleware):
    """CORS for the JSON API; the WebDAV proxy answers CORS on its own."""

    def __init__(self, app: ASGIApp, *, skip_prefix: str, **kwargs: Any) -> None:
        super().__init__(app, **kwargs)
        self.skip_prefix = skip_prefix

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["path"].startswith(self.skip_prefix):
            await self.app(scope, receive, send)
            return
        await super().__call__(scope, receive, send)


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(FileServiceError)
    async def file_service_error_handler(request: Request, exc: FileServiceError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s in %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
        else:
            logger.warning("%s in %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
        return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


def create_app() -> FastAPI:
    """Application factory."""
    from cloudmgr.api.routes import api_router

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        debug=settings.debug,
        lifespan=_lifespan,
    )

    app.add_middleware(
        ApiCORSMiddleware,
        skip_prefix=f"{settings.api_prefix}/proxy",
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.api_prefix)

    # Serve the built web client (dist/) when present
    static_dir = Path(__file__).resolve().parent.parent.parent / "dist"
    if static_dir.is_dir() and (static_dir / "index.html").exists():
        app.mount("/assets", StaticFiles(directory=static_dir / "assets"), name="frontend-assets")

        _index = static_dir / "index.html"

        @app.get("/", include_in_schema=False)
        async def _spa_root():
            return FileResponse(_index)

        @app.get("/{full_path:path}", include_in_schema=False)
        async def _spa_fallback(full_path: str):
            file_path = (static_dir / full_path).resolve()
            if full_path and file_path.is_file() and file_path.is_relative_to(static_dir.resolve()):
                return FileResponse(file_path)
            return FileResponse(_index)

        logger.info("Frontend mounted from %s", static_dir)
    else:
        logger.info("No frontend found at %s, API-only mode", static_dir)

    return app


app = create_app()


def run(**kwargs: Any) -> None:
    import uvicorn

    uvicorn.run(
        "cloudmgr.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        workers=settings.uvicorn_workers,
        log_level=settings.log_level.lower(),
        **kwargs,
    )


if __name__ == "__main__":
    run()
