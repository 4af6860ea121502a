"""
Main API module for the Link Directory Platform.

Responsibilities:
    - Expose JSON endpoints for categories and links (admin CRUD)
    - Expose the public navigation listing (all categories + joined links)
    - Map storage-layer errors onto HTTP status codes

Architecture:
    - App Factory pattern (create_app) for test isolation and DI.
    - Storage backend chosen by `get_storage()` from LINKDIR_DATABASE_TYPE,
      or injected directly (tests).
    - The adapter is connected once at startup and closed at shutdown, so
      every request shares one pool/client instead of reconnecting.

LLM Prompt Example:
    "Explain how to structure a FastAPI service with an application factory,
    a lifespan-managed storage adapter, and exception handlers that turn
    domain errors into HTTP responses."
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from linkdir_platform.config import settings
from linkdir_platform.models import (
    Category,
    CategoryCreate,
    CategoryUpdate,
    LinkCreate,
    LinkItem,
    LinkUpdate,
)
from linkdir_platform.storage import (
    NotFoundError,
    StorageConnectionError,
    StorageError,
    ValidationError,
    get_storage,
)
from linkdir_platform.storage.base import BaseStorage

log = logging.getLogger("linkdir")


def create_app(storage: Optional[BaseStorage] = None) -> FastAPI:
    """
    Factory function to build and configure a new FastAPI app instance.

    Args:
        storage: adapter to serve from. When omitted, `get_storage()` picks
            one from the environment.

    Returns:
        FastAPI: a configured application whose lifespan connects and
                 disconnects the adapter.
    """
    # basic console logging (optional)
    if not logging.getLogger().handlers:
        logging.basicConfig(level=settings.LOG_LEVEL)

    storage = storage if storage is not None else get_storage()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await storage.connect()
        log.info("Link directory storage backend: %s", storage.backend_name)
        try:
            yield
        finally:
            await storage.disconnect()

    app = FastAPI(
        title="Link Directory Platform",
        description="Categories and links over a relational or document storage backend",
        docs_url="/docs",  # Swagger UI endpoint
        lifespan=lifespan,
    )
    app.state.storage = storage

    # ----------------------------------------------------------------
    # Error mapping
    # ----------------------------------------------------------------
    def _error(status_code: int, exc: Exception) -> JSONResponse:
        return JSONResponse({"detail": str(exc)}, status_code=status_code)

    @app.exception_handler(ValidationError)
    async def _on_validation(request: Request, exc: ValidationError) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, exc)

    @app.exception_handler(NotFoundError)
    async def _on_not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return _error(status.HTTP_404_NOT_FOUND, exc)

    @app.exception_handler(StorageConnectionError)
    async def _on_unavailable(request: Request, exc: StorageConnectionError) -> JSONResponse:
        log.error("Storage unavailable on %s %s: %s", request.method, request.url.path, exc)
        return _error(status.HTTP_503_SERVICE_UNAVAILABLE, exc)

    @app.exception_handler(StorageError)
    async def _on_storage_error(request: Request, exc: StorageError) -> JSONResponse:
        log.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, exc)

    # ----------------------------------------------------------------
    # Routes
    # ----------------------------------------------------------------
    @app.get("/health")
    async def health() -> Dict[str, Any]:
        return {"status": "ok", "backend": storage.backend_name}

    @app.get("/api/navigation")
    async def navigation() -> Dict[str, Any]:
        """Public listing: every category plus every link with its category name."""
        categories, links = await asyncio.gather(storage.get_categories(), storage.get_links())
        return {
            "categories": [c.model_dump(mode="json", by_alias=True) for c in categories],
            "links": [link.model_dump(mode="json", by_alias=True) for link in links],
        }

    # -- categories --

    @app.get("/api/categories", response_model=List[Category])
    async def list_categories() -> List[Category]:
        return await storage.get_categories()

    @app.post("/api/categories", response_model=Category, status_code=status.HTTP_201_CREATED)
    async def create_category(req: CategoryCreate) -> Category:
        return await storage.add_category(req)

    @app.api_route("/api/categories/{category_id}", methods=["PATCH", "PUT"], response_model=Category)
    async def update_category(category_id: str, req: CategoryUpdate) -> Category:
        return await storage.update_category(category_id, req)

    @app.delete("/api/categories/{category_id}")
    async def delete_category(category_id: str) -> Dict[str, bool]:
        await storage.delete_category(category_id)
        return {"success": True}

    # -- links --

    @app.get("/api/links", response_model=List[LinkItem])
    async def list_links() -> List[LinkItem]:
        return await storage.get_links()

    @app.post("/api/links", response_model=LinkItem, status_code=status.HTTP_201_CREATED)
    async def create_link(req: LinkCreate) -> LinkItem:
        return await storage.add_link(req)

    @app.api_route("/api/links/{link_id}", methods=["PATCH", "PUT"], response_model=LinkItem)
    async def update_link(link_id: str, req: LinkUpdate) -> LinkItem:
        return await storage.update_link(link_id, req)

    @app.delete("/api/links/{link_id}")
    async def delete_link(link_id: str) -> Dict[str, bool]:
        await storage.delete_link(link_id)
        return {"success": True}

    return app


# `uvicorn main:app` and `from main import app` keep working.
app = create_app()
