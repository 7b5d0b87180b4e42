"""Quote document models.

A quote is an ordered list of days, each holding an ordered list of
selected services. Instances reference the catalog by service_id; the
catalog entry supplies name and price unless the instance overrides them.
"""

from datetime import date as date_type
from enum import Enum
from typing import Iterator
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator, model_validator

from utils.timezone import parse_stored_date


class DiscountType(str, Enum):
    """How a per-service discount is expressed."""

    PERCENTAGE = "percentage"
    FIXED = "fixed"


class ServiceDiscount(BaseModel):
    """Discount attached to one selected service."""

    type: DiscountType = DiscountType.PERCENTAGE
    value: float = Field(0, ge=0)
    applied: bool = False

    @model_validator(mode="after")
    def validate_percentage(self) -> "ServiceDiscount":
        if self.type == DiscountType.PERCENTAGE and self.value > 100:
            raise ValueError("Percentage discount cannot exceed 100")
        return self


class SelectedService(BaseModel):
    """One service instance placed on a day."""

    id: UUID = Field(default_factory=uuid4)
    service_id: UUID
    quantity: int = Field(1, ge=1)
    discount: ServiceDiscount = Field(default_factory=ServiceDiscount)
    tentative: bool = False
    name_override: str | None = Field(None, max_length=255)
    price_override: float | None = Field(None, ge=0)
    description_override: str | None = Field(None, max_length=1000)


class Position(BaseModel):
    """Location of a row: day index and index within that day."""

    day: int = Field(..., ge=0)
    index: int = Field(..., ge=0)

    model_config = {"frozen": True}


class Day(BaseModel):
    """A quote day with an optional calendar date."""

    date: date_type | None = None
    services: list[SelectedService] = Field(default_factory=list)

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, value):
        """Accept stored YYYY-MM-DD strings and legacy ISO timestamps."""
        if isinstance(value, str):
            return parse_stored_date(value)
        return value


class Markup(BaseModel):
    """
    Named percentage over a chosen subset of selected services.

    base_amount and markup_amount are a snapshot taken when the markup is
    created or edited. They are not recomputed when prices change later.
    """

    name: str = Field(..., min_length=1, max_length=255)
    percentage: float = Field(..., ge=0)
    service_instance_ids: list[UUID] = Field(default_factory=list)
    base_amount: float = Field(0, ge=0)
    markup_amount: float = Field(0, ge=0)


class Quote(BaseModel):
    """In-progress quote document."""

    days: list[Day] = Field(default_factory=lambda: [Day()], min_length=1)
    discount_percentage: float = Field(0, ge=0, le=100)
    markups: list[Markup] = Field(default_factory=list)
    client_name: str | None = None
    location: str | None = None
    booked: bool = False
    created_by: str | None = None
    title: str | None = None

    @model_validator(mode="after")
    def validate_day_order(self) -> "Quote":
        """Dated days must be strictly increasing in day order."""
        previous: date_type | None = None
        for day in self.days:
            if day.date is None:
                continue
            if previous is not None and day.date <= previous:
                raise ValueError(
                    f"Day dates must be strictly increasing ({day.date} follows {previous})"
                )
            previous = day.date
        return self

    def iter_instances(self) -> Iterator[tuple[int, int, SelectedService]]:
        """Yield (day_index, service_index, instance) in document order."""
        for day_index, day in enumerate(self.days):
            for service_index, instance in enumerate(day.services):
                yield day_index, service_index, instance

    def find_instance(self, instance_id: UUID) -> Position | None:
        for day_index, service_index, instance in self.iter_instances():
            if instance.id == instance_id:
                return Position(day=day_index, index=service_index)
        return None

    def instance_at(self, position: Position) -> SelectedService:
        """
        Get the instance at a position.

        Raises:
            ValueError: If the position does not exist
        """
        if position.day >= len(self.days):
            raise ValueError(f"Day {position.day + 1} not found")
        services = self.days[position.day].services
        if position.index >= len(services):
            raise ValueError(
                f"Service {position.index + 1} on Day {position.day + 1} not found"
            )
        return services[position.index]

    @property
    def has_services(self) -> bool:
        return any(day.services for day in self.days)

    @property
    def dated_days(self) -> list[date_type]:
        return [day.date for day in self.days if day.date is not None]
