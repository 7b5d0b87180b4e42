"""
Catalog service for the service catalog (pricing and dependencies).

Manages the services staff can put on a quote: price, category,
dependency on another service, subservice nesting and display order.
Dependency invariants are enforced on create and re-checked against the
merged entity on update.
"""

import logging
from uuid import UUID, uuid4

from clients.postgres_client import PostgresClient
from core.catalog import CatalogLookup, reorder_catalog, sort_with_subservices
from core.dependencies import DependencyCheck, DependencyValidator
from core.exceptions import ServiceInUseError
from core.models import DependencyType, Quote, Service, ServiceCreate, ServiceUpdate, SortOrderUpdate
from core.models.service import check_dependency_fields
from utils.timezone import now_utc

logger = logging.getLogger(__name__)

_UPDATABLE_COLUMNS = {
    "name", "price", "category", "description",
    "is_subservice", "depends_on", "dependency_type", "sort_order",
}

DEFAULT_SERVICES = [
    ServiceCreate(name="Event Photography", price=800, category="Photography", sort_order=1),
    ServiceCreate(name="Event Videography", price=1200, category="Videography", sort_order=2),
    ServiceCreate(name="Headshot Booth", price=500, category="Headshot Booth", sort_order=3),
    ServiceCreate(name="Drone Photography", price=400, category="Photography", sort_order=4),
    ServiceCreate(name="Photo Editing", price=300, category="Other", sort_order=5),
]


class CatalogService:
    """Service for service catalog operations."""

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def create(self, data: ServiceCreate) -> Service:
        """
        Create a new service in the catalog.

        Args:
            data: Service creation data; sort_order defaults to last

        Returns:
            Created service

        Raises:
            ValueError: If depends_on references a missing service
        """
        if data.depends_on is not None and self.get_by_id(data.depends_on) is None:
            raise ValueError(f"Service {data.depends_on} not found")

        sort_order = data.sort_order
        if sort_order is None:
            sort_order = self._next_sort_order()

        service_id = uuid4()
        now = now_utc()

        row = self.postgres.execute_returning(
            """
            INSERT INTO services (
                id, name, price, category, description,
                is_subservice, depends_on, dependency_type, sort_order,
                created_at, updated_at
            ) VALUES (
                %s, %s, %s, %s, %s,
                %s, %s, %s, %s,
                %s, %s
            )
            RETURNING *
            """,
            (
                service_id, data.name, data.price, data.category, data.description,
                data.is_subservice, data.depends_on, data.dependency_type.value, sort_order,
                now, now,
            )
        )[0]

        service = Service.model_validate(row)
        logger.info(f"Created service {service.name} ({service.id})")
        return service

    def get_by_id(self, service_id: UUID) -> Service | None:
        """
        Get service by ID.

        Returns:
            Service if found, None otherwise.
        """
        row = self.postgres.execute_single(
            "SELECT * FROM services WHERE id = %s",
            (service_id,)
        )

        if row is None:
            return None

        return Service.model_validate(row)

    def list_all(self) -> list[Service]:
        """
        List the catalog in display order.

        Parents by sort_order, each followed by its subservices; orphaned
        subservices last.
        """
        rows = self.postgres.execute(
            "SELECT * FROM services ORDER BY sort_order ASC, created_at ASC"
        )
        return sort_with_subservices(Service.model_validate(row) for row in rows)

    def lookup(self) -> CatalogLookup:
        """Snapshot of the catalog for validation, pricing and reorder."""
        return CatalogLookup(self.list_all())

    def update(self, service_id: UUID, data: ServiceUpdate) -> Service:
        """
        Update service fields.

        The dependency invariants are checked on the merged result, so
        partial updates cannot leave an inconsistent service behind.

        Raises:
            ValueError: If the service (or its new dependency) is not found,
                or the merged fields are inconsistent
        """
        current = self.get_by_id(service_id)
        if current is None:
            raise ValueError(f"Service {service_id} not found")

        updates = data.model_dump(exclude_none=True, exclude={"clear_dependency"})
        if data.clear_dependency:
            updates.update(depends_on=None, dependency_type=DependencyType.NONE, is_subservice=False)
        if not updates:
            return current

        for field in updates:
            if field not in _UPDATABLE_COLUMNS:
                logger.warning(
                    f"Attempted to update unknown field '{field}' on service {service_id}"
                )

        valid_updates = {k: v for k, v in updates.items() if k in _UPDATABLE_COLUMNS}
        if not valid_updates:
            return current

        merged = current.model_copy(update=valid_updates)
        check_dependency_fields(
            merged.is_subservice, merged.depends_on, merged.dependency_type, service_id
        )
        if "depends_on" in valid_updates and merged.depends_on is not None:
            if self.get_by_id(merged.depends_on) is None:
                raise ValueError(f"Service {merged.depends_on} not found")

        if "dependency_type" in valid_updates:
            valid_updates["dependency_type"] = DependencyType(valid_updates["dependency_type"]).value

        set_parts = []
        params = []
        for field, value in valid_updates.items():
            set_parts.append(f"{field} = %s")
            params.append(value)

        set_parts.append("updated_at = %s")
        params.append(now_utc())
        params.append(service_id)

        row = self.postgres.execute_returning(
            f"""
            UPDATE services
            SET {', '.join(set_parts)}
            WHERE id = %s
            RETURNING *
            """,
            tuple(params)
        )[0]

        return Service.model_validate(row)

    def delete(self, service_id: UUID) -> bool:
        """
        Delete a service.

        Returns:
            True if deleted, False if not found

        Raises:
            ServiceInUseError: If other services depend on it
        """
        current = self.get_by_id(service_id)
        if current is None:
            return False

        dependents = self.postgres.execute(
            "SELECT name FROM services WHERE depends_on = %s ORDER BY sort_order ASC",
            (service_id,)
        )
        if dependents:
            raise ServiceInUseError(current.name, [row["name"] for row in dependents])

        self.postgres.execute_returning(
            "DELETE FROM services WHERE id = %s RETURNING id",
            (service_id,)
        )
        logger.info(f"Deleted service {current.name} ({service_id})")
        return True

    def apply_sort_orders(self, updates: list[SortOrderUpdate]) -> None:
        """
        Write bulk sort orders in one transaction.

        Raises:
            ValueError: If updates is empty
        """
        if not updates:
            raise ValueError("Service updates are required")

        now = now_utc()
        self.postgres.execute_batch(
            "UPDATE services SET sort_order = %s, updated_at = %s WHERE id = %s",
            [(u.sort_order, now, u.id) for u in updates]
        )

    def reorder(self, dragged_id: UUID, target_id: UUID, insert_after: bool) -> list[Service]:
        """
        Drag a service (with its subservices) next to another and persist.

        Returns:
            The catalog in its new display order

        Raises:
            ValueError: If either service is not found
            InvalidMoveError: If the drop is not allowed
        """
        updates = reorder_catalog(self.list_all(), dragged_id, target_id, insert_after)
        self.apply_sort_orders(updates)
        return self.list_all()

    def validate_dependency(self, service_id: UUID, quote: Quote, day_index: int) -> DependencyCheck:
        """Server-side mirror of the editor's add check."""
        return DependencyValidator(self.lookup()).check_add(quote, service_id, day_index)

    def seed_defaults(self) -> list[Service]:
        """
        Insert the default catalog when the table is empty.

        Returns:
            Services created (empty when the catalog already had entries)
        """
        count = self.postgres.execute_scalar("SELECT COUNT(*) FROM services")
        if count:
            logger.info(f"Using existing catalog ({count} services)")
            return []

        created = [self.create(data) for data in DEFAULT_SERVICES]
        logger.info(f"Seeded {len(created)} default services")
        return created

    def _next_sort_order(self) -> int:
        current_max = self.postgres.execute_scalar("SELECT MAX(sort_order) FROM services")
        return (current_max or 0) + 1
