import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.api.v1 import degradation, rates, roi, sizing
from app.core.deps import build_provider
from app.core.logging import RequestLoggingMiddleware, setup_logging
from engine.errors import ConfigurationError, DataLoadError, SolverError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info("Time-series data: %s", app.state.provider.describe())
    yield
    app.state.provider.clear_cache()


def _register_error_handlers(application: FastAPI) -> None:
    @application.exception_handler(ConfigurationError)
    async def _configuration_error(request: Request, exc: ConfigurationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @application.exception_handler(DataLoadError)
    async def _data_load_error(request: Request, exc: DataLoadError) -> JSONResponse:
        logger.error("Data load failed: %s", exc)
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @application.exception_handler(SolverError)
    async def _solver_error(request: Request, exc: SolverError) -> JSONResponse:
        logger.warning("Solver failed: %s", exc, extra={"solver_status": exc.status})
        return JSONResponse(
            status_code=409,
            content={"detail": str(exc), "solver_status": exc.status},
        )


def create_app() -> FastAPI:
    setup_logging(json_format=settings.log_json, level=logging.DEBUG if settings.debug else logging.INFO)

    application = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        lifespan=lifespan,
    )
    application.state.provider = build_provider(settings)

    application.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(RequestLoggingMiddleware)
    _register_error_handlers(application)

    application.include_router(sizing.router, prefix="/api/v1/sizing", tags=["sizing"])
    application.include_router(
        degradation.router, prefix="/api/v1/degradation", tags=["degradation"]
    )
    application.include_router(roi.router, prefix="/api/v1/roi", tags=["roi"])
    application.include_router(rates.router, prefix="/api/v1/rates", tags=["rates"])

    @application.get("/health")
    async def health_check() -> dict:
        result: dict = {"status": "ok", "services": {}}

        provider = application.state.provider
        missing = provider.missing_files()
        if missing:
            result["services"]["data"] = f"missing: {', '.join(missing)}"
            result["status"] = "degraded"
        else:
            result["services"]["data"] = "ok"
        result["services"]["cache"] = provider.cache_info()

        return result

    return application


app = create_app()
