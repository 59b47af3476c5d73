# api/main.py
from typing import Optional
import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routes import ROUTERS
from core.auth import SupabaseTokenVerifier, TokenVerifier
from core.errors import ContentError
from core.ingestion import IngestionLimits
from core.sa.database import Database
from core.storage import ObjectStorage, SupabaseStorage

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def create_app(
    database: Optional[Database] = None,
    storage: Optional[ObjectStorage] = None,
    verifier: Optional[TokenVerifier] = None,
    limits: Optional[IngestionLimits] = None,
) -> FastAPI:
    """Build the API application.

    Collaborators that are not passed in are constructed from the environment.

    Args:
        database: Database wrapper; its schema is created if missing
        storage: Object storage for uploaded files
        verifier: Bearer token verifier
        limits: Upload size ceilings
    """
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())

    app = FastAPI(title="Read Verse API")
    app.state.database = database or Database()
    app.state.storage = storage or SupabaseStorage.from_env()
    app.state.verifier = verifier or SupabaseTokenVerifier.from_env()
    app.state.limits = limits or IngestionLimits.from_env()
    app.state.database.init_db()

    # CORS configuration
    origins = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",") if origin.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ContentError)
    async def content_error_handler(request: Request, exc: ContentError):
        if exc.http_status >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.http_status, content={"message": exc.message})

    @app.get("/")
    async def root():
        return {"message": "Read Verse API"}

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    for router in ROUTERS:
        app.include_router(router, prefix=API_PREFIX)

    return app
