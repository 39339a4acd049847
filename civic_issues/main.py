# Standard library imports
from contextlib import asynccontextmanager

# Third-party imports
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute

# Local application imports
from civic_issues.api.internal.utils.exceptions import register_exception_handlers
from civic_issues.core.db import build_async_engine, build_session_factory, create_tables, ping_database
from civic_issues.core.monitoring.logging import get_logger
from civic_issues.core.monitoring.sentry import setup_sentry
from civic_issues.core.realtime.change_feed import build_change_feed
from civic_issues.services.issues.store import SqlIssueStore
from civic_issues.services.weather.weather_client import build_weather_client
from civic_issues.settings import settings

# Set up the main application logger
logger = get_logger("civic_issues")

APP_VERSION = "1.0.0"


# ---- FASTAPI APP CREATION ----
def custom_generate_unique_id(route: APIRoute) -> str:
    # Handle routes without tags
    if route.tags and len(route.tags) > 0:
        return f"{route.tags[0]}-{route.name}"
    else:
        return route.name or "unnamed_route"


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting up FastAPI application")
    engine = build_async_engine()

    if await ping_database(engine):
        if settings.AUTO_CREATE_TABLES:
            await create_tables(engine)
    else:
        # Keep serving: /health reports the outage and store calls answer 503
        logger.error("Issue store is unreachable at startup")

    feed = build_change_feed(settings.REDIS_URL, settings.CHANGE_FEED_CHANNEL)
    app.state.engine = engine
    app.state.change_feed = feed
    app.state.issue_store = SqlIssueStore(build_session_factory(engine), feed, settings.PLACEHOLDER_IMAGE_URL)
    app.state.weather_client = build_weather_client()

    yield

    # Shutdown
    logger.info("Shutting down FastAPI application")
    await feed.close()
    await engine.dispose()


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    setup_sentry()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=APP_VERSION,
        description="Civic issue reporting: live issue feed, votes, comments and status workflow",
        openapi_url=f"{settings.API_V1_STR}/openapi.json" if settings.ENVIRONMENT != "production" else None,
        docs_url=f"{settings.API_V1_STR}/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url=f"{settings.API_V1_STR}/redoc" if settings.ENVIRONMENT != "production" else None,
        generate_unique_id_function=custom_generate_unique_id,
        lifespan=lifespan,
    )

    if settings.all_cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.all_cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        store_ok = await app.state.issue_store.ping()
        return JSONResponse(
            status_code=200 if store_ok else 503,
            content={
                "status": "healthy" if store_ok else "degraded",
                "version": APP_VERSION,
                "database": "connected" if store_ok else "unreachable",
            },
        )

    # Local application imports
    from civic_issues.api.internal.routes.v1.routes import router as v1_router

    app.include_router(v1_router, prefix=settings.API_V1_STR)

    return app


# Create the app instance
app = create_app()
