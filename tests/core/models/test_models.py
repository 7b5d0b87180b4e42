"""Tests for core domain models - custom validators only."""

from datetime import date
from uuid import uuid4

import pytest
from pydantic import ValidationError


class TestServiceCreate:
    """Tests for ServiceCreate dependency validators."""

    def test_plain_service_defaults(self):
        """No dependency, photography category, empty description."""
        from core.models import ServiceCreate, DependencyType

        s = ServiceCreate(name="Event Photography", price=800)
        assert s.dependency_type == DependencyType.NONE
        assert s.category == "photography"
        assert s.description == ""

    def test_dependency_without_type_rejected(self):
        """depends_on needs a dependency_type."""
        from core.models import ServiceCreate

        with pytest.raises(ValidationError, match="dependency_type"):
            ServiceCreate(name="Drone", price=400, depends_on=uuid4())

    def test_type_without_dependency_rejected(self):
        """A dependency_type needs depends_on."""
        from core.models import ServiceCreate, DependencyType

        with pytest.raises(ValidationError, match="requires depends_on"):
            ServiceCreate(name="Drone", price=400, dependency_type=DependencyType.SAME_DAY)

    def test_subservice_requires_parent(self):
        from core.models import ServiceCreate

        with pytest.raises(ValidationError, match="parent"):
            ServiceCreate(name="Album", price=200, is_subservice=True)

    def test_subservice_must_be_same_day(self):
        from core.models import ServiceCreate, DependencyType

        with pytest.raises(ValidationError, match="same_day"):
            ServiceCreate(
                name="Album", price=200, is_subservice=True,
                depends_on=uuid4(), dependency_type=DependencyType.SAME_QUOTE,
            )

    def test_negative_price_rejected(self):
        from core.models import ServiceCreate

        with pytest.raises(ValidationError):
            ServiceCreate(name="Free", price=-1)

    def test_description_limited_to_200_chars(self):
        from core.models import ServiceCreate

        with pytest.raises(ValidationError):
            ServiceCreate(name="Wordy", price=1, description="x" * 201)


class TestService:
    """Tests for the stored Service entity."""

    def test_self_dependency_rejected(self, service_factory):
        """A service cannot depend on itself."""
        from core.models import Service, DependencyType

        base = service_factory("Photo", 800)
        with pytest.raises(ValidationError, match="itself"):
            Service(**{
                **base.model_dump(),
                "depends_on": base.id,
                "dependency_type": DependencyType.SAME_DAY,
            })

    def test_has_dependency(self, catalog_services):
        assert catalog_services["drone"].has_dependency
        assert not catalog_services["photo"].has_dependency


class TestServiceDiscount:

    def test_percentage_over_100_rejected(self):
        from core.models import ServiceDiscount, DiscountType

        with pytest.raises(ValidationError, match="exceed 100"):
            ServiceDiscount(type=DiscountType.PERCENTAGE, value=150)

    def test_fixed_over_100_allowed(self):
        from core.models import ServiceDiscount, DiscountType

        d = ServiceDiscount(type=DiscountType.FIXED, value=150, applied=True)
        assert d.value == 150


class TestDay:

    def test_parses_storage_date(self):
        from core.models import Day

        assert Day(date="2024-06-01").date == date(2024, 6, 1)

    def test_parses_legacy_iso_timestamp(self):
        """Old drafts stored full ISO timestamps."""
        from core.models import Day

        assert Day(date="2024-06-01T00:00:00.000Z").date == date(2024, 6, 1)

    def test_empty_string_is_undated(self):
        from core.models import Day

        assert Day(date="").date is None


class TestQuote:
    """Tests for the Quote document."""

    def test_new_quote_has_one_empty_day(self):
        from core.models import Quote

        q = Quote()
        assert len(q.days) == 1
        assert q.days[0].services == []
        assert not q.has_services

    def test_requires_at_least_one_day(self):
        from core.models import Quote

        with pytest.raises(ValidationError):
            Quote(days=[])

    def test_discount_bounds(self):
        from core.models import Quote

        with pytest.raises(ValidationError):
            Quote(discount_percentage=101)

    def test_dated_days_must_increase(self):
        from core.models import Quote, Day

        with pytest.raises(ValidationError, match="strictly increasing"):
            Quote(days=[Day(date="2024-06-02"), Day(date="2024-06-01")])

    def test_undated_days_ignored_for_order(self):
        from core.models import Quote, Day

        q = Quote(days=[Day(date="2024-06-01"), Day(), Day(date="2024-06-03")])
        assert q.dated_days == [date(2024, 6, 1), date(2024, 6, 3)]

    def test_same_date_twice_rejected(self):
        from core.models import Quote, Day

        with pytest.raises(ValidationError):
            Quote(days=[Day(date="2024-06-01"), Day(date="2024-06-01")])

    def test_find_and_fetch_instance(self, build_quote):
        from core.models import Position

        q = build_quote(["photo"], ["video", "broll"])
        broll = q.days[1].services[1]

        assert q.find_instance(broll.id) == Position(day=1, index=1)
        assert q.instance_at(Position(day=1, index=1)) is broll
        assert q.find_instance(uuid4()) is None

    def test_instance_at_missing_position(self, build_quote):
        from core.models import Position

        q = build_quote(["photo"])
        with pytest.raises(ValueError, match="not found"):
            q.instance_at(Position(day=0, index=3))
        with pytest.raises(ValueError, match="Day 2 not found"):
            q.instance_at(Position(day=1, index=0))

    def test_round_trips_through_json(self, build_quote):
        """Drafts and saved quotes store the JSON form."""
        from core.models import Quote

        q = build_quote(["photo", "drone"], discount_percentage=5, client_name="Acme")
        assert Quote.model_validate(q.model_dump(mode="json")) == q


class TestSavedQuote:

    def test_display_title_falls_back_to_name(self, build_quote):
        from core.models import SavedQuote
        from utils.timezone import now_utc

        now = now_utc()
        saved = SavedQuote(
            id=uuid4(), name="Smith Wedding", quote=build_quote(["photo"], ["video"]),
            client_name=None, location=None, booked=False, archived=False,
            total=2000, created_at=now, updated_at=now,
        )
        assert saved.display_title == "Smith Wedding"
        assert saved.service_count == 2
