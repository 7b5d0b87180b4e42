"""
Quote pricing.

Totals are derived from quote state and the catalog only; nothing is
cached on the quote except markup snapshots. Arithmetic runs at full float
precision and only format_currency rounds, for display.

    subtotal        = sum of non-tentative (line total - service discount)
    markups total   = sum of frozen markup amounts
    quote discount  = (subtotal + markups total) * discount% / 100
    total           = subtotal + markups total - quote discount
    tentative total = tentative subtotal * (1 - discount% / 100)
"""

from uuid import UUID

from pydantic import BaseModel

from core.catalog import CatalogLookup
from core.models import DiscountType, Markup, Quote, SelectedService


class LineTotal(BaseModel):
    """Priced view of one selected service."""

    instance_id: UUID
    day: int
    name: str
    unit_price: float
    quantity: int
    gross: float
    discount: float
    net: float
    tentative: bool


class QuoteTotals(BaseModel):
    """Everything the totals panel and exports show."""

    lines: list[LineTotal]
    day_totals: list[float]
    subtotal: float
    service_discounts: float
    markups_total: float
    discount_percentage: float
    discount_amount: float
    total: float
    tentative_subtotal: float
    tentative_total: float

    @property
    def has_tentative(self) -> bool:
        return self.tentative_subtotal > 0


class PricingAggregator:
    """Computes line, day and quote totals against an injected catalog."""

    def __init__(self, catalog: CatalogLookup):
        self.catalog = catalog

    def unit_price(self, instance: SelectedService) -> float:
        """
        Instance price override, else the current catalog price.

        Raises:
            ValueError: If there is no override and the service is not in the catalog
        """
        if instance.price_override is not None:
            return instance.price_override
        return self.catalog.require(instance.service_id).price

    def line_total(self, instance: SelectedService) -> float:
        return self.unit_price(instance) * instance.quantity

    def service_discount(self, instance: SelectedService) -> float:
        """Applied per-service discount, capped at the line total."""
        discount = instance.discount
        if not discount.applied:
            return 0.0
        line_total = self.line_total(instance)
        if discount.type == DiscountType.FIXED:
            declared = discount.value
        else:
            declared = line_total * discount.value / 100
        return min(declared, line_total)

    def totals(self, quote: Quote) -> QuoteTotals:
        lines = []
        day_totals = [0.0] * len(quote.days)
        subtotal = 0.0
        service_discounts = 0.0
        tentative_subtotal = 0.0

        for day_index, _, instance in quote.iter_instances():
            gross = self.line_total(instance)
            discount = self.service_discount(instance)
            net = gross - discount
            lines.append(LineTotal(
                instance_id=instance.id,
                day=day_index + 1,
                name=self._name(instance),
                unit_price=self.unit_price(instance),
                quantity=instance.quantity,
                gross=gross,
                discount=discount,
                net=net,
                tentative=instance.tentative,
            ))

            if instance.tentative:
                tentative_subtotal += net
                continue
            subtotal += net
            service_discounts += discount
            day_totals[day_index] += net

        markups_total = sum(m.markup_amount for m in quote.markups)
        rate = quote.discount_percentage / 100
        discount_amount = (subtotal + markups_total) * rate

        return QuoteTotals(
            lines=lines,
            day_totals=day_totals,
            subtotal=subtotal,
            service_discounts=service_discounts,
            markups_total=markups_total,
            discount_percentage=quote.discount_percentage,
            discount_amount=discount_amount,
            total=subtotal + markups_total - discount_amount,
            tentative_subtotal=tentative_subtotal,
            tentative_total=tentative_subtotal - tentative_subtotal * rate,
        )

    def build_markup(
        self,
        quote: Quote,
        name: str,
        percentage: float,
        instance_ids: list[UUID],
    ) -> Markup:
        """
        Snapshot a markup over the chosen instances.

        The base is the sum of price x quantity of the chosen instances as
        they are right now.

        Raises:
            ValueError: If an instance id is not in the quote
        """
        by_id = {instance.id: instance for _, _, instance in quote.iter_instances()}
        missing = [str(i) for i in instance_ids if i not in by_id]
        if missing:
            raise ValueError(f"Selected services not found in quote: {', '.join(missing)}")

        base = sum(self.line_total(by_id[i]) for i in instance_ids)
        return Markup(
            name=name,
            percentage=percentage,
            service_instance_ids=list(instance_ids),
            base_amount=base,
            markup_amount=base * percentage / 100,
        )

    def _name(self, instance: SelectedService) -> str:
        if instance.name_override:
            return instance.name_override
        service = self.catalog.get(instance.service_id)
        return service.name if service is not None else str(instance.service_id)


def format_currency(amount: float) -> str:
    """USD for display: '$1,200' for whole amounts, '$1,200.50' otherwise."""
    amount = round(float(amount), 2)
    sign = "-" if amount < 0 else ""
    amount = abs(amount)
    if amount.is_integer():
        return f"{sign}${amount:,.0f}"
    return f"{sign}${amount:,.2f}"
