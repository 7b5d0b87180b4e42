"""
Dependency validation for quote edits.

Decides whether a service may be added to a day, removed from a day,
whether a whole day may be removed, and whether a cross-day move keeps
every dependency intact. Checks are pure: they never mutate the quote.

Removal checks compare the quote before and after the candidate edit, so a
dependent only blocks when it is satisfied now and would not be afterwards.
Override mode admits everything and marks the result as overridden so the
caller can show that validation was bypassed.
"""

from typing import Iterable
from uuid import UUID

from pydantic import BaseModel, Field

from core.catalog import CatalogLookup
from core.models import DependencyType, Position, Quote, SelectedService

_SCOPE_TEXT = {
    DependencyType.SAME_DAY: "on the same day",
    DependencyType.SAME_QUOTE: "somewhere in the quote",
}

_TYPE_LABEL = {
    DependencyType.SAME_DAY: "Same Day",
    DependencyType.SAME_QUOTE: "Same Quote",
}


class DependencyConflict(BaseModel):
    """A selected service whose prerequisite is (or would be) missing."""

    instance_id: UUID | None = None
    service_id: UUID
    name: str
    day: int = Field(..., ge=1, description="1-based day number")
    dependency_type: DependencyType
    required_service_id: UUID
    required_name: str


class DependencyCheck(BaseModel):
    """Outcome of a validation: pass/fail, reason and every conflict."""

    allowed: bool
    reason: str | None = None
    conflicts: list[DependencyConflict] = Field(default_factory=list)
    overridden: bool = False

    @classmethod
    def ok(cls, overridden: bool = False) -> "DependencyCheck":
        return cls(allowed=True, overridden=overridden)


class DependencyValidator:
    """
    Validates add/remove/day-removal/move edits against the catalog.

    Usage:
        validator = DependencyValidator(catalog)
        check = validator.check_add(quote, service_id, day_index=0)
        if not check.allowed:
            show(check.reason)
    """

    def __init__(self, catalog: CatalogLookup, override: bool = False):
        self.catalog = catalog
        self.override = override

    # -------------------------------------------------------------------------
    # Public checks
    # -------------------------------------------------------------------------

    def check_add(self, quote: Quote, service_id: UUID, day_index: int) -> DependencyCheck:
        """
        Check whether a service may be added to a day.

        Raises:
            ValueError: If the service or day does not exist
        """
        service = self.catalog.require(service_id)
        if day_index >= len(quote.days) or day_index < 0:
            raise ValueError(f"Day {day_index + 1} not found")

        if self.override:
            return DependencyCheck.ok(overridden=True)

        if not service.has_dependency:
            return DependencyCheck.ok()

        if self._prerequisite_present(quote, day_index, service.depends_on, service.dependency_type):
            return DependencyCheck.ok()

        required_name = self._catalog_name(service.depends_on)
        reason = (
            f'Cannot add "{service.name}". It requires "{required_name}" to be added '
            f"{_SCOPE_TEXT[service.dependency_type]} first."
        )
        return DependencyCheck(
            allowed=False,
            reason=reason,
            conflicts=[
                DependencyConflict(
                    service_id=service.id,
                    name=service.name,
                    day=day_index + 1,
                    dependency_type=service.dependency_type,
                    required_service_id=service.depends_on,
                    required_name=required_name,
                )
            ],
        )

    def check_remove(self, quote: Quote, day_index: int, service_index: int) -> DependencyCheck:
        """
        Check whether one service instance may be removed.

        Blocked only when this is the last instance of the service in the
        quote and a dependent it currently satisfies would be left without it.

        Raises:
            ValueError: If the position does not exist
        """
        instance = quote.instance_at(Position(day=day_index, index=service_index))

        if self.override:
            return DependencyCheck.ok(overridden=True)

        after = quote.model_copy(deep=True)
        del after.days[day_index].services[service_index]

        # Only the last instance in the quote can block
        if any(s.service_id == instance.service_id for _, _, s in after.iter_instances()):
            return DependencyCheck.ok()

        conflicts = self.broken_dependencies(quote, after)
        if not conflicts:
            return DependencyCheck.ok()

        dependent_list = ", ".join(
            f'"{c.name}" on Day {c.day} ({_TYPE_LABEL[c.dependency_type]} dependency)'
            for c in conflicts
        )
        reason = (
            f'Cannot remove "{self.instance_name(instance)}". The following services depend '
            f"on it: {dependent_list}. Please remove these services first."
        )
        return DependencyCheck(allowed=False, reason=reason, conflicts=conflicts)

    def check_remove_day(self, quote: Quote, day_index: int) -> DependencyCheck:
        """
        Check whether a whole day may be removed.

        Dependents on the removed day go with it; only dependents on other
        days can block.

        Raises:
            ValueError: If the day does not exist
        """
        if day_index >= len(quote.days) or day_index < 0:
            raise ValueError(f"Day {day_index + 1} not found")

        if self.override:
            return DependencyCheck.ok(overridden=True)

        after = quote.model_copy(deep=True)
        del after.days[day_index]

        conflicts = self.broken_dependencies(quote, after)
        if not conflicts:
            return DependencyCheck.ok()

        lines = [f"Cannot remove Day {day_index + 1}. The following services have dependencies:", ""]
        for required_name, group in _group_by_requirement(conflicts):
            dependents = ", ".join(f'"{c.name}" on Day {c.day}' for c in group)
            lines.append(f'• "{required_name}" is required by: {dependents}')
        lines.extend(["", "Please remove the dependent services first."])

        return DependencyCheck(allowed=False, reason="\n".join(lines), conflicts=conflicts)

    def check_move(
        self,
        before: Quote,
        after: Quote,
        moved_ids: Iterable[UUID],
    ) -> DependencyCheck:
        """
        Check a move as a remove-then-add pair.

        Dependents left behind must keep their prerequisite, and every moved
        instance must have its own prerequisite at its new location.
        """
        if self.override:
            return DependencyCheck.ok(overridden=True)

        moved = set(moved_ids)
        conflicts = self.broken_dependencies(before, after)
        reported = {c.instance_id for c in conflicts}

        for day_index, _, instance in after.iter_instances():
            if instance.id not in moved or instance.id in reported:
                continue
            if not self.is_satisfied(after, day_index, instance):
                conflicts.append(self._conflict(instance, day_index))

        if not conflicts:
            return DependencyCheck.ok()

        details = "; ".join(
            f'"{c.name}" requires "{c.required_name}" '
            f"{_SCOPE_TEXT[c.dependency_type]}"
            for c in conflicts
        )
        return DependencyCheck(
            allowed=False,
            reason=f"Cannot move this service. {details}.",
            conflicts=conflicts,
        )

    # -------------------------------------------------------------------------
    # Building blocks
    # -------------------------------------------------------------------------

    def is_satisfied(self, quote: Quote, day_index: int, instance: SelectedService) -> bool:
        """Whether the instance's own dependency holds at day_index."""
        service = self.catalog.get(instance.service_id)
        if service is None or not service.has_dependency:
            return True
        return self._prerequisite_present(
            quote, day_index, service.depends_on, service.dependency_type
        )

    def broken_dependencies(self, before: Quote, after: Quote) -> list[DependencyConflict]:
        """
        Dependents satisfied in before that are unsatisfied in after.

        Instances are matched by instance id; day numbers are reported as
        they are in before.
        """
        satisfied = set()
        day_of = {}
        for day_index, _, instance in before.iter_instances():
            day_of[instance.id] = day_index
            if self.is_satisfied(before, day_index, instance):
                satisfied.add(instance.id)

        conflicts = []
        for day_index, _, instance in after.iter_instances():
            if instance.id not in satisfied:
                continue
            if not self.is_satisfied(after, day_index, instance):
                conflicts.append(self._conflict(instance, day_of.get(instance.id, day_index)))
        return conflicts

    def instance_name(self, instance: SelectedService) -> str:
        if instance.name_override:
            return instance.name_override
        return self._catalog_name(instance.service_id)

    def _prerequisite_present(
        self,
        quote: Quote,
        day_index: int,
        required_id: UUID,
        dependency_type: DependencyType,
    ) -> bool:
        if dependency_type == DependencyType.SAME_DAY:
            return any(s.service_id == required_id for s in quote.days[day_index].services)
        return any(inst.service_id == required_id for _, _, inst in quote.iter_instances())

    def _conflict(self, instance: SelectedService, day_index: int) -> DependencyConflict:
        service = self.catalog.require(instance.service_id)
        return DependencyConflict(
            instance_id=instance.id,
            service_id=service.id,
            name=self.instance_name(instance),
            day=day_index + 1,
            dependency_type=service.dependency_type,
            required_service_id=service.depends_on,
            required_name=self._catalog_name(service.depends_on),
        )

    def _catalog_name(self, service_id: UUID) -> str:
        service = self.catalog.get(service_id)
        return service.name if service is not None else str(service_id)


def _group_by_requirement(
    conflicts: list[DependencyConflict],
) -> list[tuple[str, list[DependencyConflict]]]:
    groups: dict[UUID, list[DependencyConflict]] = {}
    for conflict in conflicts:
        groups.setdefault(conflict.required_service_id, []).append(conflict)
    return [(group[0].required_name, group) for group in groups.values()]
