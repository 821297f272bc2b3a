"""FastAPI entrypoint for the quotation import backend."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from quote_importer import __version__
from quote_importer.errors import (
    ConfirmationError,
    PdfParseError,
    StoreError,
    WorkbookParseError,
)
from quote_importer.logging_config import get_logger, setup_logging
from quote_importer.presets import list_presets

from .config import Settings, get_settings
from .middleware import APIKeyMiddleware
from .routers import cases, excel, pdf, presets

logger = get_logger("backend")

API_TITLE = "Quotation Import API"


def _register_error_handlers(app: FastAPI) -> None:
    """Domain errors raised inside routes become JSON error responses."""

    @app.exception_handler(WorkbookParseError)
    @app.exception_handler(PdfParseError)
    async def unreadable_document(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ConfirmationError)
    async def import_not_ready(request: Request, exc: ConfirmationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc), "issues": exc.issues})

    @app.exception_handler(StoreError)
    async def store_failure(request: Request, exc: StoreError) -> JSONResponse:
        logger.error("Store failure on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=502, content={"detail": str(exc)})


def _register_info_routes(app: FastAPI, settings: Settings, allow_origins: list[str]) -> None:
    @app.get("/", tags=["info"])
    def root() -> dict[str, str]:
        return {"message": API_TITLE, "version": __version__, "docs": "/docs"}

    @app.get("/health", tags=["health"])
    def healthcheck() -> dict[str, object]:
        return {"status": "ok", "presets": len(list_presets())}

    @app.get("/debug/cors", tags=["debug"])
    def debug_cors():
        return {"allow_origins": allow_origins, "cors_env_var": settings.cors_origins}


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title=API_TITLE, version=__version__)
    allow_origins = settings.cors_origins or ["*"]

    # Clients authenticate with the X-API-Key header, never cookies
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(APIKeyMiddleware)
    _register_error_handlers(app)

    for router in (presets.router, excel.router, pdf.router, cases.router):
        app.include_router(router, prefix="/api")
    _register_info_routes(app, settings, allow_origins)

    logger.info("%s %s ready (origins: %s)", API_TITLE, __version__, allow_origins)
    return app


app = create_app()
