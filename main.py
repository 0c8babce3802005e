import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from preference_api.config import settings
from preference_api.exception_handlers import register_exception_handlers
from preference_api.middleware.language import LanguageMiddleware
from preference_api.middleware.logging import StructuredLoggingMiddleware, setup_structured_logging
from preference_api.routes import i18n, preference

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create the FastAPI application."""
    setup_structured_logging(log_level=settings.log_level, json_format=settings.log_json)

    app = FastAPI(
        title=settings.app_name,
        description="Preference resolution and locale negotiation",
        debug=settings.debug,
        version=settings.app_version,
    )

    # Starlette runs middleware LIFO: logging wraps language detection
    app.add_middleware(LanguageMiddleware)
    app.add_middleware(StructuredLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(preference.router, prefix="/api/v1")
    app.include_router(i18n.router, prefix="/api/v1")

    @app.get("/health", tags=["Health"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    logger.info(f"{settings.app_name} {settings.app_version} running in {settings.environment} mode")
    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.debug)
