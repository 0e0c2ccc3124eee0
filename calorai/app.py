from __future__ import annotations

# Standard library
import logging as _logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Optional

# Third-party
import structlog
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

# Local application imports
from calorai.api.analyze_food import analysis_error_handler, router as analysis_router
from calorai.domain.meal.analysis.errors import AnalysisError
from calorai.domain.meal.analysis.ports import IVisionProvider
from calorai.domain.meal.analysis.service import FoodAnalysisService
from calorai.infrastructure.ai.factory import create_vision_provider
from calorai.infrastructure.config import Settings

STATIC_DIR = Path(__file__).parent / "static"
ENV_FILE = Path.cwd() / ".env"


def configure_logging(level_name: str) -> None:
    """Configure stdlib logging and structlog level filtering."""
    level = getattr(_logging, level_name.upper(), _logging.INFO)
    _logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(level))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the vision provider for the lifetime of the server.

    STARTUP: log configuration (masked key), enter the provider context.
    SHUTDOWN: the provider context closes its HTTP session.
    """
    logger = structlog.get_logger("startup")
    settings: Settings = app.state.settings

    logger.info(
        "startup.config",
        vision_provider=settings.vision_provider,
        model=settings.openai_model,
        timeout_s=settings.timeout_s,
        openai_key_present=settings.has_api_key,
        openai_key_masked=settings.masked_api_key(),
    )
    if settings.vision_provider == "openai" and not settings.has_api_key:
        logger.warning(
            "startup.missing_api_key",
            hint="Set OPENAI_API_KEY; analysis requests will fail until then",
        )

    provider: IVisionProvider = app.state.vision_provider
    async with provider:
        logger.info("lifespan.ready", provider=type(provider).__name__)
        yield
        logger.info("lifespan.shutdown")


def create_app(
    settings: Optional[Settings] = None,
    provider: Optional[IVisionProvider] = None,
) -> FastAPI:
    """Build the CalorIA application.

    Args:
        settings: Relay configuration (read from the environment if None)
        provider: Vision provider override (built from settings if None)
    """
    if settings is None:
        settings = Settings.from_env(env_file=ENV_FILE)
    configure_logging(settings.log_level)

    if provider is None:
        provider = create_vision_provider(settings)

    app = FastAPI(
        title="CalorIA",
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.vision_provider = provider
    app.state.analysis_service = FoodAnalysisService(provider, settings)

    app.add_exception_handler(AnalysisError, analysis_error_handler)
    app.include_router(analysis_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/version")
    async def version() -> dict[str, str]:
        return {"version": settings.app_version}

    # Single-page client; mounted last so API routes take precedence
    app.mount("/", StaticFiles(directory=STATIC_DIR, html=True), name="static")

    return app


def main() -> None:  # pragma: no cover
    import uvicorn

    uvicorn.run("calorai.app:create_app", factory=True, host="0.0.0.0", port=8000)


if __name__ == "__main__":  # pragma: no cover
    main()
