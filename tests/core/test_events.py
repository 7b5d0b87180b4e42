"""Tests for domain event models."""

from dataclasses import FrozenInstanceError
from datetime import timezone
from uuid import UUID

import pytest

from core.events import (
    QuoteEvent,
    QuoteChanged, MutationRejected, OverrideModeChanged, QuoteLoaded, DraftCleared,
)
from core.models import Quote
from core.pricing import QuoteTotals
from utils.timezone import now_utc


@pytest.fixture
def _quote():
    return Quote(client_name="Acme")


@pytest.fixture
def _totals():
    return QuoteTotals(
        lines=[], day_totals=[0], subtotal=0, service_discounts=0, markups_total=0,
        discount_percentage=0, discount_amount=0, total=0,
        tentative_subtotal=0, tentative_total=0,
    )


# =============================================================================
# CONSTRUCTION VIA .create() FACTORY
# =============================================================================


class TestFactories:

    def test_quote_changed_stores_document_by_identity(self, _quote, _totals):
        event = QuoteChanged.create("add_day", _quote, _totals, "Acme Gala")
        assert event.quote is _quote
        assert event.totals is _totals
        assert event.action == "add_day"
        assert event.current_quote_name == "Acme Gala"

    def test_mutation_rejected_carries_reason(self):
        event = MutationRejected.create("remove_service", "Cannot remove")
        assert event.action == "remove_service"
        assert event.reason == "Cannot remove"

    def test_override_mode_changed(self):
        assert OverrideModeChanged.create(True).enabled

    def test_quote_loaded(self, _quote):
        event = QuoteLoaded.create(_quote, "Acme Gala")
        assert event.quote is _quote
        assert event.current_quote_name == "Acme Gala"


# =============================================================================
# AUTO-GENERATED METADATA
# =============================================================================


class TestMetadata:

    def test_event_id_is_valid_uuid4_string(self):
        event = DraftCleared.create()
        assert str(UUID(event.event_id, version=4)) == event.event_id

    def test_event_ids_unique(self):
        assert len({DraftCleared.create().event_id for _ in range(10)}) == 10

    def test_occurred_at_bounded_by_wall_clock(self):
        before = now_utc()
        event = DraftCleared.create()
        after = now_utc()
        assert before <= event.occurred_at <= after
        assert event.occurred_at.tzinfo == timezone.utc

    def test_every_event_type_is_a_quote_event(self, _quote, _totals):
        events = [
            QuoteChanged.create("add_day", _quote, _totals),
            MutationRejected.create("add_day", "no"),
            OverrideModeChanged.create(False),
            QuoteLoaded.create(_quote),
            DraftCleared.create(),
        ]
        for event in events:
            assert isinstance(event, QuoteEvent)
            assert event.occurred_at.tzinfo == timezone.utc


# =============================================================================
# IMMUTABILITY
# =============================================================================


class TestFrozenFields:

    def test_cannot_reassign_quote(self, _quote, _totals):
        event = QuoteChanged.create("add_day", _quote, _totals)
        with pytest.raises(FrozenInstanceError):
            event.quote = None
