"""
Service catalog lookup and ordering.

CatalogLookup is the pure id -> Service capability injected into the
validator, reorder engine and pricing aggregator. Display order always
groups subservices directly under their parent regardless of raw
sort_order.
"""

import logging
from typing import Iterable, Iterator
from uuid import UUID

from core.blocks import RowInfo, block_indices, insertion_index, is_valid_drop, split_block
from core.exceptions import InvalidMoveError
from core.models import Service, SortOrderUpdate

logger = logging.getLogger(__name__)


class CatalogLookup:
    """
    Read-only view of the service catalog keyed by id.

    Usage:
        catalog = CatalogLookup(catalog_service.list_all())
        service = catalog.require(instance.service_id)
    """

    def __init__(self, services: Iterable[Service]):
        self._services = {service.id: service for service in services}

    def get(self, service_id: UUID) -> Service | None:
        return self._services.get(service_id)

    def require(self, service_id: UUID) -> Service:
        """
        Get a service that must exist.

        Raises:
            ValueError: If the service is not in the catalog
        """
        service = self._services.get(service_id)
        if service is None:
            raise ValueError(f"Service {service_id} not found")
        return service

    def dependents_of(self, service_id: UUID) -> list[Service]:
        """Catalog services that declare a dependency on service_id."""
        return [s for s in self._services.values() if s.depends_on == service_id]

    def row_info(self, key: UUID, service_id: UUID) -> RowInfo:
        """Block metadata for a row referencing service_id."""
        service = self._services.get(service_id)
        if service is None or not service.is_subservice:
            return RowInfo(key=key, kind=service_id, is_subservice=False, parent=None)
        return RowInfo(key=key, kind=service_id, is_subservice=True, parent=service.depends_on)

    def __contains__(self, service_id: object) -> bool:
        return service_id in self._services

    def __iter__(self) -> Iterator[Service]:
        return iter(self._services.values())

    def __len__(self) -> int:
        return len(self._services)


def sort_with_subservices(services: Iterable[Service]) -> list[Service]:
    """
    Order services for display.

    Parents by sort_order, each followed by its subservices by sort_order.
    Subservices whose parent is missing (or is itself a subservice) go last.
    """
    services = list(services)
    parents = sorted((s for s in services if not s.is_subservice), key=lambda s: s.sort_order)
    subservices = sorted((s for s in services if s.is_subservice), key=lambda s: s.sort_order)

    parent_ids = {p.id for p in parents}
    result = []
    for parent in parents:
        result.append(parent)
        result.extend(s for s in subservices if s.depends_on == parent.id)

    result.extend(s for s in subservices if s.depends_on not in parent_ids)
    return result


def _catalog_row(service: Service) -> RowInfo:
    return RowInfo(
        key=service.id,
        kind=service.id,
        is_subservice=service.is_subservice,
        parent=service.depends_on if service.is_subservice else None,
    )


def is_valid_catalog_drop(dragged: Service, target: Service) -> bool:
    """Whether the admin may drop dragged onto target."""
    return is_valid_drop(_catalog_row(dragged), _catalog_row(target))


def reorder_catalog(
    services: list[Service],
    dragged_id: UUID,
    target_id: UUID,
    insert_after: bool,
) -> list[SortOrderUpdate]:
    """
    Move a catalog service (with its subservices) next to a target service.

    Args:
        services: Catalog in display order
        dragged_id: Service being dragged
        target_id: Service it was dropped on
        insert_after: Dropped on the lower half of the target row

    Returns:
        Bulk sort_order updates (1-based) for every service in the new order

    Raises:
        ValueError: If either service is not in the list
        InvalidMoveError: If the drop target is not allowed
    """
    by_id = {s.id: s for s in services}
    for service_id in (dragged_id, target_id):
        if service_id not in by_id:
            raise ValueError(f"Service {service_id} not found")

    if dragged_id == target_id:
        return [SortOrderUpdate(id=s.id, sort_order=i + 1) for i, s in enumerate(services)]

    dragged = by_id[dragged_id]
    target = by_id[target_id]
    if not is_valid_catalog_drop(dragged, target):
        raise InvalidMoveError(
            f'Cannot move "{dragged.name}" there. Subservices stay with their parent '
            "and parents cannot be placed inside another service's group."
        )

    rows = [_catalog_row(s) for s in services]
    dragged_index = next(i for i, s in enumerate(services) if s.id == dragged_id)
    indices = block_indices(rows, dragged_index)
    if target_id in {services[i].id for i in indices}:
        raise InvalidMoveError(f'Cannot move "{dragged.name}" onto its own group')

    block, remaining = split_block(services, indices)
    remaining_rows = [_catalog_row(s) for s in remaining]
    insert_at = insertion_index(remaining_rows, target_id, rows[dragged_index], insert_after)

    new_order = remaining[:insert_at] + block + remaining[insert_at:]
    logger.info(f"Reordered catalog: moved {dragged.name} ({len(block)} rows)")

    return [SortOrderUpdate(id=s.id, sort_order=i + 1) for i, s in enumerate(new_order)]
