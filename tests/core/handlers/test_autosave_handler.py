"""Tests for the draft autosave event handlers."""

from unittest.mock import Mock

from core.autosave import DebouncedSaver
from core.editor import QuoteEditor
from core.event_bus import EventBus
from core.events import DraftCleared, QuoteChanged
from core.handlers.autosave_handler import handle_draft_cleared, handle_quote_changed
from core.models import Quote, QuoteDraft
from core.services.draft_service import DraftService


class TestHandleQuoteChanged:

    def test_schedules_draft_of_new_document(self):
        saver = Mock(spec=DebouncedSaver)
        quote = Quote(client_name="Acme")
        event = QuoteChanged.create("set_details", quote, None, "Acme Gala")

        handle_quote_changed(saver)(event)

        draft = saver.schedule.call_args[0][0]
        assert isinstance(draft, QuoteDraft)
        assert draft.quote == quote
        assert draft.current_quote_name == "Acme Gala"
        assert draft.last_saved == event.occurred_at


class TestHandleDraftCleared:

    def test_cancels_pending_write_and_clears(self):
        saver = Mock(spec=DebouncedSaver)
        draft_service = Mock(spec=DraftService)

        handle_draft_cleared(saver, draft_service)(DraftCleared.create())

        saver.cancel.assert_called_once()
        draft_service.clear.assert_called_once()


class TestWiring:
    """Editor -> bus -> handler -> saver -> draft service."""

    def test_edits_reach_the_draft_store(self, catalog, catalog_services, timers):
        draft_service = Mock(spec=DraftService)
        saver = DebouncedSaver(draft_service.save, delay=1.0, timer_factory=timers)
        bus = EventBus()
        bus.subscribe("QuoteChanged", handle_quote_changed(saver))
        bus.subscribe("DraftCleared", handle_draft_cleared(saver, draft_service))
        editor = QuoteEditor(catalog, bus)

        editor.add_service(catalog_services["photo"].id, 0)
        editor.set_discount(10)
        timers.last.fire()

        draft_service.save.assert_called_once()
        saved = draft_service.save.call_args[0][0]
        assert saved.quote.discount_percentage == 10

        editor.add_day()
        editor.new_quote()
        timers.last.fire()

        assert draft_service.save.call_count == 1
        draft_service.clear.assert_called_once()
