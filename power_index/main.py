"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from power_index.config import get_settings
from power_index.routers import health_router, schema_router, scores_router
from power_index.routers.dependencies import get_schema
from power_index.scoring.normalizer import Normalizer, NormalizerConfig

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    # Startup: schema and log-scale configuration errors are fatal
    logger.info("Starting Power Index Scoring Engine...")
    settings = get_settings()
    schema = get_schema()
    Normalizer(schema, NormalizerConfig.from_settings(settings))
    logger.info(f"Schema {schema.name} v{schema.version} loaded ({schema.fingerprint})")
    logger.info(f"Environment: {'DEBUG' if settings.debug else 'PRODUCTION'}")
    yield
    logger.info("Shutting down Power Index Scoring Engine...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="""
        ## Power Index Scoring API

        Composite power scores for historical states, normalized per era.

        ### Features:
        - 8-domain / 38-indicator PPI schema
        - Era-cohort normalization with percentile outlier capping
        - Optional log scaling for skewed indicators
        - Contribution breakdown and weight sensitivity analysis
        - Pairwise comparison with leading-domain insight
        - Exploratory "what-if" domain weights
        """,
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json"
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(schema_router)
    app.include_router(scores_router)

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "error": str(exc)}
        )

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("power_index.main:app", host="0.0.0.0", port=8000, reload=True)
