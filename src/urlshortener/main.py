from contextlib import asynccontextmanager
from typing import Optional

import logging

from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from urlshortener.api.routes import router as api_router
from urlshortener.core.config import Settings, get_settings
from urlshortener.core.errors import (
    ApiError,
    NotFound,
    ShortenerError,
    StorageError,
    error_body,
    normalize_http_exception,
)
from urlshortener.core.logging import configure_logging
from urlshortener.db.base import Base
from urlshortener.db.session import build_engine, build_session_factory, get_db
from urlshortener.services import links

logger = logging.getLogger("urlshortener")

NOT_FOUND_HTML = "<h2>404 - Short URL not found</h2>"


def _wants_json(request: Request) -> bool:
    return "application/json" in request.headers.get("accept", "")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings

    logger.info("Connecting to %s", make_url(settings.database_url).render_as_string(hide_password=True))
    engine = build_engine(settings)
    Base.metadata.create_all(bind=engine)

    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    if not settings.admin_token:
        logger.warning("ADMIN_TOKEN is not set; /api/admin/urls is open to anyone")

    try:
        yield
    finally:
        engine.dispose()
        logger.info("Storage connections closed")


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(ApiError(code=exc.code, message="Server error")),
        )

    @app.exception_handler(NotFound)
    async def not_found_handler(request: Request, exc: NotFound):
        logger.debug("Not found: %s", request.url.path)
        if request.method == "HEAD" or _wants_json(request):
            return JSONResponse(status_code=exc.status_code, content=error_body(exc.to_api_error()))
        return HTMLResponse(status_code=exc.status_code, content=NOT_FOUND_HTML)

    @app.exception_handler(ShortenerError)
    async def shortener_error_handler(request: Request, exc: ShortenerError):
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.to_api_error()))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content=error_body(ApiError(code="VALIDATION_ERROR", message="Invalid request body")),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(normalize_http_exception(exc)),
            headers=getattr(exc, "headers", None),
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="URL Shortener API", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _register_error_handlers(app)
    app.include_router(api_router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.head("/{code}")
    def peek(code: str, db: Session = Depends(get_db)):
        return RedirectResponse(url=links.get_original_url(db, code), status_code=302)

    @app.get("/{code}")
    def redirect(code: str, db: Session = Depends(get_db)):
        return RedirectResponse(url=links.resolve_short_code(db, code), status_code=302)

    return app


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
