"""
Application wiring.

build_services() connects the infrastructure clients (URLs from Vault) and
the stores; create_app() mounts the data and actions routers on a FastAPI
app; create_editor() gives a QuoteEditor whose edits autosave to the
Valkey draft.
"""

import logging

from fastapi import FastAPI

from api.actions import create_actions_router
from api.data import create_data_router
from api.errors import register_error_handlers
from api.middleware import RequestIDMiddleware
from core.autosave import DebouncedSaver
from core.config import QuoteConfig
from core.editor import QuoteEditor
from core.event_bus import EventBus
from core.handlers.autosave_handler import handle_draft_cleared, handle_quote_changed

logger = logging.getLogger(__name__)


def build_services(config: QuoteConfig | None = None) -> dict:
    """
    Connect to PostgreSQL and Valkey and build every store.

    Raises:
        ValueError / PermissionError: If Vault configuration is missing or rejected
    """
    from clients.postgres_client import PostgresClient
    from clients.valkey_client import ValkeyClient
    from clients.vault_client import get_database_url, get_valkey_url
    from core.services.catalog_service import CatalogService
    from core.services.draft_service import DraftService
    from core.services.saved_quote_service import SavedQuoteService

    config = config or QuoteConfig()
    postgres = PostgresClient(get_database_url())
    valkey = ValkeyClient(get_valkey_url())

    catalog = CatalogService(postgres)
    catalog.seed_defaults()

    return {
        "config": config,
        "catalog": catalog,
        "saved_quote": SavedQuoteService(postgres),
        "draft": DraftService(valkey, config.draft_key),
    }


def create_app(services: dict) -> FastAPI:
    """FastAPI app with request IDs, error handlers, and data/actions routes."""
    app = FastAPI(title="Quote Builder")
    app.add_middleware(RequestIDMiddleware)
    register_error_handlers(app)

    app.include_router(create_data_router(services), prefix="/api")
    app.include_router(create_actions_router(services), prefix="/api")
    return app


def create_editor(services: dict, restore_draft: bool = True) -> tuple[QuoteEditor, DebouncedSaver]:
    """
    QuoteEditor wired to debounced draft autosave.

    Restores the stored draft first when asked and one exists.
    """
    config = services["config"]
    draft_service = services["draft"]

    event_bus = EventBus()
    saver = DebouncedSaver(draft_service.save, delay=config.autosave_delay_seconds)
    on_change = handle_quote_changed(saver)
    event_bus.subscribe("QuoteChanged", on_change)
    event_bus.subscribe("QuoteLoaded", on_change)
    event_bus.subscribe("DraftCleared", handle_draft_cleared(saver, draft_service))

    editor = QuoteEditor(services["catalog"].lookup(), event_bus, config)

    if restore_draft:
        draft = draft_service.load()
        if draft is not None:
            try:
                editor.load(draft.quote, draft.current_quote_name)
                logger.info("Restored quote draft")
            except ValueError as e:
                # Draft references services no longer in the catalog
                logger.warning(f"Discarding quote draft: {e}")
                draft_service.clear()

    return editor, saver
