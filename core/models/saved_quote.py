"""Saved quote domain models.

A saved quote stores the full quote document under a unique, user-chosen
name. Client, location and total are denormalized for listing.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field

from core.models.quote import Quote


class SavedQuoteCreate(BaseModel):
    """Data required to save a quote under a new name."""

    name: str = Field(..., min_length=1, max_length=255)
    quote: Quote
    total: float = Field(0, ge=0)


class SavedQuote(BaseModel):
    """Full saved quote as stored."""

    id: UUID
    name: str
    quote: Quote
    client_name: str | None
    location: str | None
    booked: bool
    archived: bool
    total: float
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @property
    def display_title(self) -> str:
        return self.quote.title or self.name

    @property
    def service_count(self) -> int:
        return sum(len(day.services) for day in self.quote.days)


class QuoteSort(str, Enum):
    """Sort options for the saved quote listing."""

    NEWEST = "newest"
    OLDEST = "oldest"
    NAME_ASC = "name-asc"
    NAME_DESC = "name-desc"


class QuoteDraft(BaseModel):
    """In-progress editor state persisted between sessions."""

    quote: Quote
    current_quote_name: str | None = None
    last_saved: datetime | None = None
