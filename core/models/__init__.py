"""Core domain models."""

from core.models.service import (
    Service, ServiceCreate, ServiceUpdate, DependencyType, SortOrderUpdate,
)
from core.models.quote import (
    Quote, Day, SelectedService, ServiceDiscount, DiscountType, Markup, Position,
)
from core.models.saved_quote import SavedQuote, SavedQuoteCreate, QuoteSort, QuoteDraft

__all__ = [
    # Service catalog
    "Service", "ServiceCreate", "ServiceUpdate", "DependencyType", "SortOrderUpdate",
    # Quote document
    "Quote", "Day", "SelectedService", "ServiceDiscount", "DiscountType", "Markup", "Position",
    # Saved quotes
    "SavedQuote", "SavedQuoteCreate", "QuoteSort", "QuoteDraft",
]
