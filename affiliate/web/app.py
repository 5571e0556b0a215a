"""FastAPI приложение партнёрской программы."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from affiliate.context import build_services
from affiliate.services.errors import AffiliateError
from affiliate.storage import LedgerStore, create_store
from config.settings import AppSettings, get_settings

from .routes import router


def _first_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    error = errors[0]
    location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    message = error.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AffiliateError)
    async def affiliate_error_handler(request: Request, exc: AffiliateError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("{path}: {error}", path=request.url.path, error=exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": _first_error(exc)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Необработанная ошибка на {path}: {error}", path=request.url.path, error=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )


def create_app(
    store: LedgerStore | None = None,
    settings: AppSettings | None = None,
) -> FastAPI:
    """Собирает приложение. Хранилище открывается на старте и закрывается на остановке."""

    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        backend = store if store is not None else create_store(settings)
        await backend.open()
        app.state.services = build_services(backend, settings)
        logger.info(
            "API стартует в окружении {env}, хранилище {store}",
            env=settings.environment,
            store=type(backend).__name__,
        )
        try:
            yield
        finally:
            await backend.close()
            logger.info("API корректно остановлен")

    app = FastAPI(title=settings.web.title, lifespan=lifespan)
    app.state.settings = settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.web.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _register_error_handlers(app)
    app.include_router(router)
    return app


app = create_app()


__all__ = ["app", "create_app"]
