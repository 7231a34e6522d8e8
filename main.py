import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fieldkit.config import settings
from fieldkit.database import create_tables
from fieldkit.exception_handlers import register_exception_handlers
from fieldkit.fieldtypes.loader import initialize_fieldtypes
from fieldkit.fieldtypes.registry import fieldtype_registry
from fieldkit.middleware.logging import StructuredLoggingMiddleware, setup_structured_logging
from fieldkit.routes import fieldtypes, forms

setup_structured_logging(log_level=settings.log_level, json_format=settings.log_json)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Tasks to run at application startup and shutdown."""
    logger.info("Starting up the application...")
    initialize_fieldtypes(fieldtype_registry)
    await create_tables()
    yield
    logger.info("Shutting down the application...")


def create_app() -> FastAPI:
    """Create the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        description="Pluggable fieldtypes for a CMS backend",
        debug=settings.debug,
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(StructuredLoggingMiddleware)

    register_exception_handlers(app)

    app.include_router(fieldtypes.router, prefix="/api/v1/fieldtypes")
    app.include_router(forms.router, prefix="/api/v1/forms")

    if settings.debug:
        logger.info("Running in %s mode", settings.environment)

    return app


app = create_app()


@app.get("/health", tags=["Root"])
async def health():
    return {"status": "ok", "fieldtypes": len(fieldtype_registry.all_entries())}


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.debug)
