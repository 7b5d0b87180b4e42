"""Service catalog domain models.

Prices are plain currency units (dollars) as floats; quote arithmetic
runs at full precision and only display is rounded to cents.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, model_validator


class DependencyType(str, Enum):
    """Where a service's prerequisite must appear in a quote."""

    SAME_DAY = "same_day"      # Prerequisite on the same day
    SAME_QUOTE = "same_quote"  # Prerequisite anywhere in the quote
    NONE = "none"


def check_dependency_fields(
    is_subservice: bool,
    depends_on: UUID | None,
    dependency_type: DependencyType,
    service_id: UUID | None = None,
) -> None:
    """
    Enforce the catalog dependency invariants.

    Raises:
        ValueError: If the combination of fields is inconsistent
    """
    if service_id is not None and depends_on == service_id:
        raise ValueError("A service cannot depend on itself")
    if depends_on is not None and dependency_type == DependencyType.NONE:
        raise ValueError("A dependency requires dependency_type same_day or same_quote")
    if depends_on is None and dependency_type != DependencyType.NONE:
        raise ValueError(f"dependency_type '{dependency_type.value}' requires depends_on")
    if is_subservice:
        if depends_on is None:
            raise ValueError("Subservices must have a parent service in depends_on")
        if dependency_type != DependencyType.SAME_DAY:
            raise ValueError("Subservices must use a same_day dependency")


class ServiceCreate(BaseModel):
    """Data required to create a catalog service."""

    name: str = Field(..., min_length=1, max_length=255)
    price: float = Field(..., ge=0)
    category: str = Field("photography", max_length=100)
    description: str = Field("", max_length=200)
    is_subservice: bool = False
    depends_on: UUID | None = None
    dependency_type: DependencyType = DependencyType.NONE
    sort_order: int | None = Field(None, ge=0)

    @model_validator(mode="after")
    def validate_dependency(self) -> "ServiceCreate":
        """Ensure dependency fields are consistent."""
        check_dependency_fields(self.is_subservice, self.depends_on, self.dependency_type)
        return self


class ServiceUpdate(BaseModel):
    """
    Data that can be updated on a service. All fields optional.

    Dependency consistency is checked against the merged entity by
    CatalogService.update since a partial update cannot be judged alone.
    """

    name: str | None = Field(None, min_length=1, max_length=255)
    price: float | None = Field(None, ge=0)
    category: str | None = Field(None, max_length=100)
    description: str | None = Field(None, max_length=200)
    is_subservice: bool | None = None
    depends_on: UUID | None = None
    dependency_type: DependencyType | None = None
    sort_order: int | None = Field(None, ge=0)
    clear_dependency: bool = False


class Service(BaseModel):
    """Full catalog service as stored."""

    id: UUID
    name: str
    price: float
    category: str
    description: str
    is_subservice: bool
    depends_on: UUID | None
    dependency_type: DependencyType
    sort_order: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @model_validator(mode="after")
    def validate_dependency(self) -> "Service":
        check_dependency_fields(
            self.is_subservice, self.depends_on, self.dependency_type, self.id
        )
        return self

    @property
    def has_dependency(self) -> bool:
        return self.depends_on is not None


class SortOrderUpdate(BaseModel):
    """A single bulk reorder entry."""

    id: UUID
    sort_order: int = Field(..., ge=1)
