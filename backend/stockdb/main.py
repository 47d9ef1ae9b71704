# backend/stockdb/main.py
import logging
import os
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .database import StorageContext
from .exceptions import InvalidInput
from .apps.inventory import services as inventory_services
from .apps.inventory.router import router as inventory_router

logger = logging.getLogger(__name__)


def _allowed_origins() -> List[str]:
    """
    Parse CORS_ALLOWED_ORIGINS from env.

    Accepts comma-separated origins. If unset, defaults to local dev ports.
    """
    raw = os.getenv("CORS_ALLOWED_ORIGINS", "")
    if raw:
        origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
        if origins:
            return origins
    return [
        "http://127.0.0.1:5173",
        "http://localhost:5173",
        "http://localhost:4173",
    ]


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        parts.append(f"{field}: {error.get('msg')}" if field else str(error.get("msg")))
    return "; ".join(parts) or "Invalid request."


def create_app(
    storage: Optional[StorageContext] = None,
    *,
    unknown_product_policy: Optional[inventory_services.UnknownProductPolicy] = None,
) -> FastAPI:
    """
    Build the API around one storage context.

    The context is owned by the app for its lifetime; pass one in to run
    against another store (tests use in-memory SQLite).
    """
    storage = storage or StorageContext.from_env()
    policy = unknown_product_policy or inventory_services.policy_from_env()

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        logger.info("Inventory API using %s (unknown products: %s)", storage.write_engine.url, policy.value)
        yield
        storage.dispose()

    app = FastAPI(title="Pouch Inventory API", version="1.0.0", lifespan=lifespan)
    app.state.storage = storage
    app.state.unknown_product_policy = policy

    cors_origins = _allowed_origins()
    allow_credentials = "*" not in cors_origins

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def invalid_request(_request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": {"code": InvalidInput.code, "message": _validation_message(exc)}},
        )

    @app.get("/", tags=["health"])
    def read_root():
        return {"status": "ok", "message": "Inventory backend is running"}

    @app.get("/health", tags=["health"])
    def health():
        return {"status": "ok"}

    app.include_router(inventory_router)
    return app


app = create_app()
