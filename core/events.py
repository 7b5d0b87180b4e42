"""
Domain events for the quote builder.

Immutable event objects describing what happened to the in-progress quote.
The editor publishes; handlers (autosave, logging) react without the editor
knowing who's listening.

Event Categories:
- QuoteChanged: a mutation was committed (carries the new quote and totals)
- MutationRejected: a mutation was refused; state is unchanged
- OverrideModeChanged: dependency validation was switched off or back on
- QuoteLoaded / DraftCleared: the editor document was replaced or reset

Events carry the full document so handlers don't need to read editor state
back, which might already have moved on.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import uuid4

from utils.timezone import now_utc


@dataclass(frozen=True, kw_only=True)
class QuoteEvent:
    """Base class for all quote builder events."""
    event_id: str = field(default_factory=lambda: str(uuid4()))
    occurred_at: datetime = field(default_factory=now_utc)


@dataclass(frozen=True)
class QuoteChanged(QuoteEvent):
    """An editor mutation was committed."""
    action: str = ""
    quote: Any = None   # Quote, Any to avoid circular import
    totals: Any = None  # QuoteTotals
    current_quote_name: str | None = None

    @classmethod
    def create(
        cls,
        action: str,
        quote: Any,
        totals: Any,
        current_quote_name: str | None = None,
    ) -> "QuoteChanged":
        return cls(
            action=action,
            quote=quote,
            totals=totals,
            current_quote_name=current_quote_name,
        )


@dataclass(frozen=True)
class MutationRejected(QuoteEvent):
    """An editor mutation was refused."""
    action: str = ""
    reason: str = ""

    @classmethod
    def create(cls, action: str, reason: str) -> "MutationRejected":
        return cls(action=action, reason=reason)


@dataclass(frozen=True)
class OverrideModeChanged(QuoteEvent):
    """Dependency override mode was toggled."""
    enabled: bool = False

    @classmethod
    def create(cls, enabled: bool) -> "OverrideModeChanged":
        return cls(enabled=enabled)


@dataclass(frozen=True)
class QuoteLoaded(QuoteEvent):
    """A saved quote or draft replaced the editor document."""
    quote: Any = None
    current_quote_name: str | None = None

    @classmethod
    def create(cls, quote: Any, current_quote_name: str | None = None) -> "QuoteLoaded":
        return cls(quote=quote, current_quote_name=current_quote_name)


@dataclass(frozen=True)
class DraftCleared(QuoteEvent):
    """The editor was reset to an empty quote."""

    @classmethod
    def create(cls) -> "DraftCleared":
        return cls()
