"""
Handlers that keep the Valkey draft in step with the editor.

On QuoteChanged or QuoteLoaded, schedules a debounced draft write of the
new document. On DraftCleared, drops any pending write and deletes the
stored draft.
"""

import logging
from typing import Callable

from core.events import DraftCleared, QuoteChanged, QuoteLoaded
from core.models import QuoteDraft

logger = logging.getLogger(__name__)


def handle_quote_changed(saver) -> Callable:
    """
    Factory that returns a QuoteChanged / QuoteLoaded handler.

    Dependencies are captured at wiring time via closure.

    Args:
        saver: DebouncedSaver wrapping DraftService.save

    Returns:
        Handler callable that schedules a draft write
    """

    def handler(event: QuoteChanged | QuoteLoaded):
        saver.schedule(QuoteDraft(
            quote=event.quote,
            current_quote_name=event.current_quote_name,
            last_saved=event.occurred_at,
        ))

    return handler


def handle_draft_cleared(saver, draft_service) -> Callable:
    """
    Factory that returns a DraftCleared handler.

    Args:
        saver: DebouncedSaver whose pending write is discarded
        draft_service: DraftService holding the stored draft

    Returns:
        Handler callable that removes the stored draft
    """

    def handler(event: DraftCleared):
        saver.cancel()
        draft_service.clear()
        logger.info(f"Cleared quote draft (event_id={event.event_id})")

    return handler
