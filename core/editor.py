"""
Quote editor.

QuoteEditor owns the in-progress quote (EditorState) and is the only way
to mutate it. Every operation works on a deep copy and commits it only
when validation passes, so a rejected operation leaves state exactly as
it was. After each commit totals are recomputed and QuoteChanged is
published; a refused operation publishes MutationRejected and raises.

Usage:
    editor = QuoteEditor(catalog, event_bus)
    editor.add_service(photography_id, day_index=0)
    editor.reorder(Position(day=0, index=1), Position(day=1, index=0), insert_after=False)
    editor.totals.total
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Callable
from uuid import UUID

from core.catalog import CatalogLookup
from core.config import QuoteConfig
from core.dependencies import DependencyCheck, DependencyValidator
from core.event_bus import EventBus
from core.events import (
    DraftCleared, MutationRejected, OverrideModeChanged, QuoteChanged, QuoteLoaded,
)
from core.exceptions import DateOrderError, DependencyViolationError, QuoteError
from core.models import (
    Day, DiscountType, Position, Quote, SelectedService, ServiceDiscount,
)
from core.pricing import PricingAggregator, QuoteTotals
from core.reorder import move_service
from utils.timezone import format_display_date, parse_stored_date

logger = logging.getLogger(__name__)


@dataclass
class DragSession:
    """The one drag in progress: where it started and which input drives it."""

    source: Position
    input: str = "pointer"


@dataclass
class EditorState:
    """Everything the editor owns."""

    quote: Quote = field(default_factory=Quote)
    current_quote_name: str | None = None
    override_mode: bool = False
    modified: bool = False
    drag: DragSession | None = None
    totals: QuoteTotals | None = None


class QuoteEditor:
    """Validated, copy-on-write mutations of one quote."""

    def __init__(
        self,
        catalog: CatalogLookup,
        event_bus: EventBus | None = None,
        config: QuoteConfig | None = None,
        state: EditorState | None = None,
    ):
        self.catalog = catalog
        self.event_bus = event_bus or EventBus()
        self.config = config or QuoteConfig()
        self.state = state or EditorState()
        self.pricing = PricingAggregator(catalog)
        self.state.totals = self.pricing.totals(self.state.quote)

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def quote(self) -> Quote:
        return self.state.quote

    @property
    def totals(self) -> QuoteTotals:
        return self.state.totals

    @property
    def override_mode(self) -> bool:
        return self.state.override_mode

    @property
    def validator(self) -> DependencyValidator:
        return DependencyValidator(self.catalog, override=self.state.override_mode)

    def set_catalog(self, catalog: CatalogLookup):
        """Swap in a refreshed catalog (after admin edits) and reprice."""
        self.catalog = catalog
        self.pricing = PricingAggregator(catalog)
        self.state.totals = self.pricing.totals(self.state.quote)

    # -------------------------------------------------------------------------
    # Days
    # -------------------------------------------------------------------------

    def add_day(self, day_date: date | None = None) -> Quote:
        """Append a day, optionally dated after every existing dated day."""
        quote = self._working_copy()
        index = len(quote.days)
        if day_date is not None:
            self._check_date_order(quote, index, day_date, "add_day")
        quote.days.append(Day(date=day_date))
        return self._commit("add_day", quote)

    def remove_day(self, day_index: int) -> Quote:
        """
        Remove a day and every service on it.

        Raises:
            ValueError: If the day does not exist or is the only day
            DependencyViolationError: If services on other days depend on it
        """
        quote = self._working_copy()
        if len(quote.days) <= 1:
            self._reject("remove_day", QuoteError("A quote must keep at least one day"))

        check = self._guard(
            "remove_day", lambda: self.validator.check_remove_day(quote, day_index)
        )
        del quote.days[day_index]
        return self._commit("remove_day", quote, check)

    def set_day_date(self, day_index: int, value: date | str | None) -> Quote:
        """
        Set or clear a day's date.

        Raises:
            ValueError: If the day does not exist
            DateOrderError: If the date breaks the strictly increasing day order
        """
        quote = self._working_copy()
        self._require_day(quote, day_index, "set_day_date")
        try:
            day_date = parse_stored_date(value)
        except ValueError as e:
            self._reject("set_day_date", e)
        if day_date is not None:
            self._check_date_order(quote, day_index, day_date, "set_day_date")
        quote.days[day_index].date = day_date
        return self._commit("set_day_date", quote)

    # -------------------------------------------------------------------------
    # Selected services
    # -------------------------------------------------------------------------

    def add_service(self, service_id: UUID, day_index: int) -> SelectedService:
        """
        Append a catalog service to a day.

        Raises:
            ValueError: If the service or day does not exist
            DependencyViolationError: If its prerequisite is missing
        """
        quote = self._working_copy()
        check = self._guard(
            "add_service", lambda: self.validator.check_add(quote, service_id, day_index)
        )
        instance = SelectedService(service_id=service_id)
        quote.days[day_index].services.append(instance)
        self._commit("add_service", quote, check)
        return instance

    def remove_service(self, day_index: int, service_index: int) -> Quote:
        """
        Remove one service instance.

        Raises:
            ValueError: If the position does not exist
            DependencyViolationError: If a dependent would lose its prerequisite
        """
        quote = self._working_copy()
        check = self._guard(
            "remove_service",
            lambda: self.validator.check_remove(quote, day_index, service_index),
        )
        del quote.days[day_index].services[service_index]
        return self._commit("remove_service", quote, check)

    def update_quantity(self, position: Position, quantity: int) -> Quote:
        """Set quantity, clamped to 1..max_quantity."""
        quote = self._working_copy()
        instance = self._instance(quote, position, "update_quantity")
        instance.quantity = max(1, min(self.config.max_quantity, int(quantity)))
        return self._commit("update_quantity", quote)

    def set_tentative(self, position: Position, tentative: bool) -> Quote:
        quote = self._working_copy()
        self._instance(quote, position, "set_tentative").tentative = tentative
        return self._commit("set_tentative", quote)

    def set_service_discount(
        self,
        position: Position,
        discount_type: DiscountType,
        value: float,
    ) -> Quote:
        """Apply a per-service discount (fixed amount or percentage)."""
        quote = self._working_copy()
        instance = self._instance(quote, position, "set_service_discount")
        try:
            instance.discount = ServiceDiscount(type=discount_type, value=value, applied=True)
        except ValueError as e:
            self._reject("set_service_discount", e)
        return self._commit("set_service_discount", quote)

    def clear_service_discount(self, position: Position) -> Quote:
        quote = self._working_copy()
        self._instance(quote, position, "clear_service_discount").discount = ServiceDiscount()
        return self._commit("clear_service_discount", quote)

    def set_overrides(
        self,
        position: Position,
        name: str | None = None,
        price: float | None = None,
        description: str | None = None,
    ) -> Quote:
        """
        Override display name, unit price or description of one instance.

        None leaves the current override in place; use clear_overrides to
        fall back to catalog values.
        """
        quote = self._working_copy()
        instance = self._instance(quote, position, "set_overrides")
        if price is not None and price < 0:
            self._reject("set_overrides", QuoteError("Price override cannot be negative"))

        if name is not None:
            instance.name_override = name.strip() or None
        if price is not None:
            instance.price_override = price
        if description is not None:
            instance.description_override = description.strip() or None
        return self._commit("set_overrides", quote)

    def clear_overrides(self, position: Position) -> Quote:
        quote = self._working_copy()
        instance = self._instance(quote, position, "clear_overrides")
        instance.name_override = None
        instance.price_override = None
        instance.description_override = None
        return self._commit("clear_overrides", quote)

    # -------------------------------------------------------------------------
    # Quote-level pricing
    # -------------------------------------------------------------------------

    def set_discount(self, percentage: float) -> Quote:
        """Set the quote discount, clamped to 0..100."""
        quote = self._working_copy()
        quote.discount_percentage = max(0.0, min(100.0, float(percentage)))
        return self._commit("set_discount", quote)

    def remove_discount(self) -> Quote:
        quote = self._working_copy()
        quote.discount_percentage = 0
        return self._commit("remove_discount", quote)

    def add_markup(self, name: str, percentage: float, instance_ids: list[UUID]) -> Quote:
        """
        Add a markup snapshot over the chosen services.

        Raises:
            ValueError: If no services are chosen or an id is unknown
        """
        quote = self._working_copy()
        quote.markups.append(self._build_markup(quote, name, percentage, instance_ids, "add_markup"))
        return self._commit("add_markup", quote)

    def update_markup(
        self,
        markup_index: int,
        name: str,
        percentage: float,
        instance_ids: list[UUID],
    ) -> Quote:
        """Replace a markup, re-snapshotting its amounts at current prices."""
        quote = self._working_copy()
        self._require_markup(quote, markup_index, "update_markup")
        quote.markups[markup_index] = self._build_markup(
            quote, name, percentage, instance_ids, "update_markup"
        )
        return self._commit("update_markup", quote)

    def remove_markup(self, markup_index: int) -> Quote:
        quote = self._working_copy()
        self._require_markup(quote, markup_index, "remove_markup")
        del quote.markups[markup_index]
        return self._commit("remove_markup", quote)

    def set_details(self, **details) -> Quote:
        """
        Update client_name, location, booked, created_by or title.

        Unknown fields are ignored with a warning.
        """
        allowed = {"client_name", "location", "booked", "created_by", "title"}
        quote = self._working_copy()
        for key, value in details.items():
            if key not in allowed:
                logger.warning(f"Ignoring unknown quote detail: {key}")
                continue
            setattr(quote, key, value)
        return self._commit("set_details", quote)

    # -------------------------------------------------------------------------
    # Reorder
    # -------------------------------------------------------------------------

    def reorder(self, source: Position, target: Position, insert_after: bool) -> DependencyCheck:
        """
        Move a service (a parent with its subservices) to a new position.

        Raises:
            ValueError: If a position does not exist
            InvalidMoveError: If the drop is not allowed
        """
        try:
            quote, check = move_service(
                self.state.quote, self.catalog, self.validator, source, target, insert_after
            )
        except ValueError as e:
            self._reject("reorder", e)
        self._commit("reorder", quote, check)
        return check

    def begin_drag(self, source: Position, input: str = "pointer") -> DragSession:
        """Start a drag session; a previous session is replaced."""
        self.state.quote.instance_at(source)
        if self.state.drag is not None:
            logger.debug(f"Replacing {self.state.drag.input} drag session")
        self.state.drag = DragSession(source=source, input=input)
        return self.state.drag

    def end_drag(self) -> DragSession | None:
        session, self.state.drag = self.state.drag, None
        return session

    # -------------------------------------------------------------------------
    # Override mode
    # -------------------------------------------------------------------------

    def set_override_mode(self, enabled: bool):
        if enabled == self.state.override_mode:
            return
        self.state.override_mode = enabled
        if enabled:
            logger.warning("Dependency override mode enabled; validation is bypassed")
        else:
            logger.info("Dependency override mode disabled")
        self.event_bus.publish(OverrideModeChanged.create(enabled))

    # -------------------------------------------------------------------------
    # Document lifecycle
    # -------------------------------------------------------------------------

    def load(self, quote: Quote, name: str | None = None):
        """Replace the document with a saved quote or a restored draft."""
        loaded = quote.model_copy(deep=True)
        totals = self.pricing.totals(loaded)
        self.state.quote = loaded
        self.state.totals = totals
        self.state.current_quote_name = name
        self.state.modified = False
        self.state.drag = None
        self.event_bus.publish(QuoteLoaded.create(loaded, name))

    def new_quote(self):
        """Start over with an empty quote and drop the stored draft."""
        self.state.quote = Quote()
        self.state.totals = self.pricing.totals(self.state.quote)
        self.state.current_quote_name = None
        self.state.modified = False
        self.state.drag = None
        self.event_bus.publish(DraftCleared.create())

    def mark_saved(self, name: str):
        """Record that the document was saved (or overwritten) under name."""
        self.state.current_quote_name = name
        self.state.modified = False

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _working_copy(self) -> Quote:
        return self.state.quote.model_copy(deep=True)

    def _commit(self, action: str, quote: Quote, check: DependencyCheck | None = None) -> Quote:
        try:
            totals = self.pricing.totals(quote)
        except ValueError as e:
            self._reject(action, e)

        self.state.quote = quote
        self.state.totals = totals
        self.state.modified = True
        if check is not None and check.overridden:
            logger.info(f"{action} committed with dependency validation overridden")

        self.event_bus.publish(
            QuoteChanged.create(action, quote, totals, self.state.current_quote_name)
        )
        return quote

    def _reject(self, action: str, error: ValueError):
        self.event_bus.publish(MutationRejected.create(action, str(error)))
        raise error

    def _guard(self, action: str, run_check: Callable[[], DependencyCheck]) -> DependencyCheck:
        try:
            check = run_check()
        except ValueError as e:
            self._reject(action, e)
        if not check.allowed:
            self._reject(action, DependencyViolationError(check))
        return check

    def _require_day(self, quote: Quote, day_index: int, action: str):
        if day_index < 0 or day_index >= len(quote.days):
            self._reject(action, ValueError(f"Day {day_index + 1} not found"))

    def _require_markup(self, quote: Quote, markup_index: int, action: str):
        if markup_index < 0 or markup_index >= len(quote.markups):
            self._reject(action, ValueError(f"Markup {markup_index + 1} not found"))

    def _instance(self, quote: Quote, position: Position, action: str) -> SelectedService:
        try:
            return quote.instance_at(position)
        except ValueError as e:
            self._reject(action, e)

    def _build_markup(self, quote, name, percentage, instance_ids, action):
        if not instance_ids:
            self._reject(action, QuoteError("Select at least one service for the markup"))
        try:
            return self.pricing.build_markup(quote, name, percentage, instance_ids)
        except ValueError as e:
            self._reject(action, e)

    def _check_date_order(self, quote: Quote, day_index: int, day_date: date, action: str):
        for i, day in enumerate(quote.days):
            if i == day_index or day.date is None:
                continue
            if i < day_index and day.date >= day_date:
                self._reject(action, DateOrderError(
                    f"Date must be after Day {i + 1} ({format_display_date(day.date)})"
                ))
            if i > day_index and day.date <= day_date:
                self._reject(action, DateOrderError(
                    f"Date must be before Day {i + 1} ({format_display_date(day.date)})"
                ))
