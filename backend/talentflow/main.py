from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from talentflow.core.config import settings
from talentflow.core.logging import get_logger
from talentflow.db.store import EntityStore, open_store
from talentflow.services import seed_store

# Import API router
from talentflow.api.api import api_router
from talentflow.api.errors import setup_error_handlers

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the store (creating tables) and seed it once on startup."""
    if app.state.store is None:
        app.state.store = open_store()
    if app.state.seed:
        seed_store(app.state.store)
    yield


def create_app(store: Optional[EntityStore] = None, seed: Optional[bool] = None) -> FastAPI:
    """
    Build the API application.

    The store is process-scoped state owned by the app; pass one in to share it
    with other components (tests, the simulated transport). Without one, a
    store on ``settings.DATABASE_URL`` is opened at startup.
    """
    app = FastAPI(
        title=settings.APP_NAME,
        description="Hiring pipeline data service: jobs, candidates, timelines and assessments",
        version="1.0.0",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )
    app.state.store = store
    app.state.seed = settings.SEED_ON_STARTUP if seed is None else seed

    # CORS Middleware - allowlist from env (comma-separated)
    allowed_origins = [
        origin.strip()
        for origin in settings.BACKEND_CORS_ORIGINS.split(",")
        if origin.strip()
    ]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    setup_error_handlers(app)

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint."""
        return {"message": f"Welcome to {settings.APP_NAME} API"}

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    # Include API router with /api prefix
    app.include_router(api_router, prefix="/api")

    return app


app = create_app()
