"""PhotoAI — FastAPI Application.

This module defines the REST API through which a UI drives the prompt
catalog and user settings, the :func:`create_app` factory, and the
``main()`` CLI function that launches the uvicorn server.

Architecture
------------
- **State** is owned by one :class:`~photoai.core.store.PromptCatalogStore`
  and one :class:`~photoai.core.settings_store.SettingsStore`, created in the
  lifespan handler and kept on ``app.state``.  Routes reach them through the
  request; nothing is a hidden module-level singleton.
- **Serialization of access**: every route is a coroutine, so all store calls
  run one at a time on the event loop thread.  The stores themselves do no
  locking.
- **Errors**: :class:`~photoai.core.errors.CatalogError` subclasses are
  mapped to HTTP status codes by a single exception handler.

Endpoints
---------
========  ============================  ====================================
Method    Path                          Purpose
========  ============================  ====================================
GET       ``/api/config``               Version, category names, settings
GET       ``/api/prompts``              Full catalog
GET       ``/api/prompts/names``        Flat "Category: label" list
POST      ``/api/categories``           Add a category
POST      ``/api/prompts``              Add a prompt
PUT       ``/api/prompts``              Replace a prompt
DELETE    ``/api/prompts``              Delete a prompt
POST      ``/api/prompts/reset``        Restore default prompts
GET       ``/api/settings``             Current settings
PUT       ``/api/settings``             Partial settings update
POST      ``/api/settings/reset``       Restore default settings
POST      ``/api/prompt/compile``       Base prompt + selected body
========  ============================  ====================================

Usage
-----
CLI (installed entry point)::

    photoai

Direct invocation::

    python -m photoai.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from photoai import __version__
from photoai.api.models import (
    CategoryRequest,
    CompileRequest,
    PromptCreateRequest,
    PromptUpdateRequest,
    SettingsUpdateRequest,
)
from photoai.core.catalog import Catalog
from photoai.core.config import PhotoAIConfig, config
from photoai.core.defaults import DefaultCatalogSource
from photoai.core.errors import (
    CatalogError,
    CategoryNotFoundError,
    DuplicateNameError,
    InvalidNameError,
    PromptNotFoundError,
)
from photoai.core.prompt_builder import build_prompt, resolve_prompt_body
from photoai.core.settings_store import SettingsStore
from photoai.core.storage import open_blob_stores
from photoai.core.store import PromptCatalogStore

logger = logging.getLogger(__name__)

# Exception type -> HTTP status.  Checked in order; anything else derived
# from CatalogError is a server-side storage problem.
_ERROR_STATUS: tuple[tuple[type[CatalogError], int], ...] = (
    (DuplicateNameError, 409),
    (CategoryNotFoundError, 404),
    (PromptNotFoundError, 404),
    (InvalidNameError, 400),
)

router = APIRouter()


# ---------------------------------------------------------------------------
# Application factory.
# ---------------------------------------------------------------------------


def create_app(app_config: PhotoAIConfig | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        app_config: Configuration to use.  Defaults to the global
            :data:`~photoai.core.config.config`.

    Returns:
        A configured :class:`FastAPI` instance.  Stores are created when the
        application starts, not here.
    """
    settings = app_config or config

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Create the stores on startup.

        The catalog is not loaded here; the first request that needs it
        triggers the lazy load (and, on a fresh install, the migration of
        the bundled defaults).
        """
        catalog_blob, settings_blob = open_blob_stores(settings)
        app.state.catalog_store = PromptCatalogStore(
            DefaultCatalogSource(settings.defaults_path), catalog_blob
        )
        app.state.settings_store = SettingsStore(settings_blob)
        logger.info(f"Stores initialised ({settings.storage_backend} backend at {settings.data_dir})")

        yield

        logger.info("PhotoAI API shutting down.")

    app = FastAPI(
        title="PhotoAI",
        description="Prompt catalog and settings API for AI photo transformation.",
        version=__version__,
        lifespan=lifespan,
    )

    # The UI may be served from a different origin during development.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(CatalogError, _catalog_error_handler)
    app.include_router(router)
    return app


async def _catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    """Translate catalog errors into JSON error responses."""
    status_code = 500
    for error_type, code in _ERROR_STATUS:
        if isinstance(exc, error_type):
            status_code = code
            break

    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.debug(f"{request.method} {request.url.path} rejected: {exc}")

    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


# ---------------------------------------------------------------------------
# Helpers.
# ---------------------------------------------------------------------------


def _catalog_store(request: Request) -> PromptCatalogStore:
    return request.app.state.catalog_store


def _settings_store(request: Request) -> SettingsStore:
    return request.app.state.settings_store


def _catalog_payload(catalog: Catalog) -> dict:
    """Serialise a catalog as an ordered list of categories.

    A list (rather than an object keyed by name) keeps category order
    explicit for every JSON client.
    """
    return {
        "total_categories": len(catalog),
        "total_prompts": catalog.prompt_count,
        "categories": [
            {
                "name": category.name,
                "prompts": [{"label": p.label, "body": p.body} for p in category.prompts],
            }
            for category in catalog
        ],
    }


# ---------------------------------------------------------------------------
# Routes.
# ---------------------------------------------------------------------------


@router.get("/api/config")
async def get_config(request: Request) -> dict:
    """Return what the UI needs on start-up.

    Returns:
        Dictionary with ``version``, ``categories`` (names in display order)
        and ``settings``.
    """
    catalog = _catalog_store(request).load()
    return {
        "version": __version__,
        "categories": catalog.category_names(),
        "settings": _settings_store(request).load().model_dump(),
    }


@router.get("/api/prompts")
async def get_prompts(request: Request) -> dict:
    """Return the full catalog."""
    return _catalog_payload(_catalog_store(request).load())


@router.get("/api/prompts/names")
async def get_prompt_names(request: Request) -> dict:
    """Return every prompt as ``"<Category>: <label>"`` in display order."""
    return {"names": _catalog_store(request).load().all_prompt_names()}


@router.post("/api/categories", status_code=201)
async def add_category(req: CategoryRequest, request: Request) -> dict:
    """Create an empty category at the end of the catalog.

    Raises:
        400 for a blank name, 409 if the name is taken.
    """
    category = _catalog_store(request).add_category(req.name)
    return {"success": True, "category": {"name": category.name, "prompts": []}}


@router.post("/api/prompts", status_code=201)
async def add_prompt(req: PromptCreateRequest, request: Request) -> dict:
    """Append a prompt to a category.

    Returns:
        Dictionary with ``success``, ``category``, ``index`` (position of
        the new prompt) and ``prompt``.

    Raises:
        404 if the category does not exist.
    """
    store = _catalog_store(request)
    prompt = store.add_prompt(req.category, req.label, req.body)
    index = len(store.load().category(req.category)) - 1
    return {
        "success": True,
        "category": req.category,
        "index": index,
        "prompt": {"label": prompt.label, "body": prompt.body},
    }


@router.put("/api/prompts")
async def update_prompt(req: PromptUpdateRequest, request: Request) -> dict:
    """Replace the prompt at ``index`` without moving it.

    Raises:
        404 if the category or index does not exist.
    """
    _catalog_store(request).update_prompt(req.category, req.index, req.label, req.body)
    return {
        "success": True,
        "category": req.category,
        "index": req.index,
        "prompt": {"label": req.label, "body": req.body},
    }


@router.delete("/api/prompts")
async def delete_prompt(category: str, index: int, request: Request) -> dict:
    """Delete one prompt; later prompts move up by one.

    Args:
        category: Category name (query parameter).
        index: Zero-based prompt index (query parameter).

    Raises:
        404 if the category or index does not exist.
    """
    _catalog_store(request).delete_prompt(category, index)
    return {"success": True, "category": category, "deleted": index}


@router.post("/api/prompts/reset")
async def reset_prompts(request: Request, include_settings: bool = False) -> dict:
    """Discard all prompt edits and restore the bundled defaults.

    Args:
        include_settings: Also reset the base prompt and processing
            preferences.

    Returns:
        Dictionary with ``success``, ``settings_reset`` and the restored
        ``total_categories`` / ``total_prompts``.
    """
    catalog = _catalog_store(request).reset_to_defaults()
    if include_settings:
        _settings_store(request).reset()
    return {
        "success": True,
        "settings_reset": include_settings,
        "total_categories": len(catalog),
        "total_prompts": catalog.prompt_count,
    }


@router.get("/api/settings")
async def get_settings(request: Request) -> dict:
    """Return the current settings."""
    return _settings_store(request).load().model_dump()


@router.put("/api/settings")
async def update_settings(req: SettingsUpdateRequest, request: Request) -> dict:
    """Change only the settings present in the request body.

    Raises:
        400 if no setting was supplied.
    """
    changes = req.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No settings supplied")
    return _settings_store(request).update(**changes).model_dump()


@router.post("/api/settings/reset")
async def reset_settings(request: Request) -> dict:
    """Restore default settings."""
    return _settings_store(request).reset().model_dump()


@router.post("/api/prompt/compile")
async def compile_prompt(req: CompileRequest, request: Request) -> dict:
    """Return the exact text that would be sent to the transformation API.

    Returns:
        Dictionary with ``prompt_body`` and ``compiled_prompt``.

    Raises:
        400 if neither a manual prompt nor a catalog selection is given,
        404 if the selection does not exist.
    """
    catalog = _catalog_store(request).load()
    try:
        body = resolve_prompt_body(
            catalog, req.category, req.index, manual_prompt=req.manual_prompt
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    base_prompt = _settings_store(request).load().base_prompt
    return {"prompt_body": body, "compiled_prompt": build_prompt(base_prompt, body)}


# ---------------------------------------------------------------------------
# Default application and CLI entry point.
# ---------------------------------------------------------------------------

app = create_app()


def main() -> None:
    """Configure logging and launch the uvicorn ASGI server.

    Host, port and log level come from :data:`~photoai.core.config.config`
    (``PHOTOAI_SERVER_HOST``, ``PHOTOAI_SERVER_PORT``, ``PHOTOAI_LOG_LEVEL``).

    This function is registered as the ``photoai`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    uvicorn.run(
        "photoai.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
