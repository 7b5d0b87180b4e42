"""
Reorder engine for selected services.

One operation, move_service(source, target, insert_after), serves every
input path (pointer drag, touch drag, API). It works on a copy of the
quote and returns the new document; the caller's quote is never touched,
so a rejected move leaves state exactly as it was.
"""

import logging

from pydantic import BaseModel

from core.blocks import RowInfo, block_indices, insertion_index, is_valid_drop, split_block
from core.catalog import CatalogLookup
from core.dependencies import DependencyCheck, DependencyValidator
from core.exceptions import InvalidMoveError
from core.models import Position, Quote, SelectedService

logger = logging.getLogger(__name__)


class ReorderRequest(BaseModel):
    """A drop: where the row came from, where it landed, which half."""

    source: Position
    target: Position
    insert_after: bool = False


def day_rows(catalog: CatalogLookup, services: list[SelectedService]) -> list[RowInfo]:
    """Block metadata for one day's rows."""
    return [catalog.row_info(s.id, s.service_id) for s in services]


def drop_target(quote: Quote, target: Position) -> SelectedService | None:
    """
    The row a drop landed on, or None for a drop zone / empty day.

    Raises:
        ValueError: If the target day or index does not exist
    """
    if target.day >= len(quote.days):
        raise ValueError(f"Day {target.day + 1} not found")
    services = quote.days[target.day].services
    if target.index > len(services):
        raise ValueError(f"Service {target.index + 1} on Day {target.day + 1} not found")
    if target.index == len(services):
        return None
    return services[target.index]


def is_valid_day_drop(
    quote: Quote,
    catalog: CatalogLookup,
    source: Position,
    target: Position,
) -> bool:
    """Whether the row at source may be dropped on target (structure only)."""
    dragged = quote.instance_at(source)
    landed_on = drop_target(quote, target)

    dragged_row = catalog.row_info(dragged.id, dragged.service_id)
    target_row = None
    if landed_on is not None:
        target_row = catalog.row_info(landed_on.id, landed_on.service_id)
    return is_valid_drop(dragged_row, target_row)


def move_service(
    quote: Quote,
    catalog: CatalogLookup,
    validator: DependencyValidator,
    source: Position,
    target: Position,
    insert_after: bool,
) -> tuple[Quote, DependencyCheck]:
    """
    Move a selected service (a parent with its subservices) to a new spot.

    Args:
        quote: Current quote (not modified)
        catalog: Catalog lookup for parent/subservice relations
        validator: Dependency validator (carries override mode)
        source: Position of the dragged row
        target: Position of the row dropped on; index == day length means
            the day's drop zone (append)
        insert_after: Dropped on the lower half of the target row

    Returns:
        (new quote, dependency check of the move)

    Raises:
        ValueError: If a position does not exist
        InvalidMoveError: If the target is not allowed or the move would
            break a dependency
    """
    dragged = quote.instance_at(source)
    landed_on = drop_target(quote, target)

    if landed_on is not None and landed_on.id == dragged.id:
        return quote.model_copy(deep=True), DependencyCheck.ok(overridden=validator.override)

    name = validator.instance_name(dragged)
    if not is_valid_day_drop(quote, catalog, source, target):
        raise InvalidMoveError(
            f'Cannot move "{name}" there. Subservices stay directly under their parent '
            "and services cannot be placed inside another service's group."
        )

    after = quote.model_copy(deep=True)
    source_services = after.days[source.day].services
    source_rows = day_rows(catalog, source_services)
    dragged_row = source_rows[source.index]

    indices = block_indices(source_rows, source.index)
    block, remaining = split_block(source_services, indices)
    after.days[source.day].services = remaining

    if landed_on is not None and landed_on.id in {b.id for b in block}:
        raise InvalidMoveError(f'Cannot move "{name}" onto its own group')

    target_services = after.days[target.day].services
    insert_at = insertion_index(
        day_rows(catalog, target_services),
        landed_on.id if landed_on is not None else None,
        dragged_row,
        insert_after,
    )
    after.days[target.day].services = target_services[:insert_at] + block + target_services[insert_at:]

    if source.day == target.day:
        return after, DependencyCheck.ok(overridden=validator.override)

    check = validator.check_move(quote, after, [b.id for b in block])
    if not check.allowed:
        logger.info(f"Rejected move of {name} from Day {source.day + 1} to Day {target.day + 1}")
        raise InvalidMoveError(check.reason, check)

    return after, check
