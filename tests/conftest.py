"""Shared test fixtures for the quote builder test suite."""

import pytest
from pathlib import Path
from uuid import uuid4

from dotenv import load_dotenv

# Load .env file BEFORE any other imports that might use env vars
# override=True ensures .env takes precedence over shell env vars
load_dotenv(Path(__file__).parent.parent / ".env", override=True)

# Reset vault client singleton to pick up env vars
from clients.vault_client import clear_secret_cache
clear_secret_cache()

from core.catalog import CatalogLookup
from core.models import DependencyType, Day, Quote, SavedQuote, SelectedService, Service
from utils.timezone import now_utc


# =============================================================================
# CATALOG FIXTURES: in-memory, no DB needed
# =============================================================================


def make_service(
    name: str,
    price: float,
    depends_on=None,
    dependency_type: DependencyType = DependencyType.NONE,
    is_subservice: bool = False,
    sort_order: int = 1,
) -> Service:
    now = now_utc()
    return Service(
        id=uuid4(), name=name, price=price, category="photography", description="",
        is_subservice=is_subservice, depends_on=depends_on,
        dependency_type=dependency_type, sort_order=sort_order,
        created_at=now, updated_at=now,
    )


@pytest.fixture
def catalog_services() -> dict[str, Service]:
    """
    A small catalog keyed by short name.

    photo, video: plain services
    drone: same_day dependency on photo
    editing: same_quote dependency on photo
    second, album: subservices of photo
    broll: subservice of video
    """
    photo = make_service("Event Photography", 800, sort_order=1)
    video = make_service("Event Videography", 1200, sort_order=2)
    return {
        "photo": photo,
        "video": video,
        "drone": make_service(
            "Drone Photography", 400, photo.id, DependencyType.SAME_DAY, sort_order=3
        ),
        "editing": make_service(
            "Photo Editing", 300, photo.id, DependencyType.SAME_QUOTE, sort_order=4
        ),
        "second": make_service(
            "Second Shooter", 150, photo.id, DependencyType.SAME_DAY, True, sort_order=5
        ),
        "album": make_service(
            "Photo Album", 200, photo.id, DependencyType.SAME_DAY, True, sort_order=6
        ),
        "broll": make_service(
            "B-Roll Package", 250, video.id, DependencyType.SAME_DAY, True, sort_order=7
        ),
    }


@pytest.fixture
def catalog(catalog_services) -> CatalogLookup:
    return CatalogLookup(catalog_services.values())


@pytest.fixture
def build_quote(catalog_services):
    """
    Build a quote from lists of catalog keys, one list per day.

        build_quote(["photo", "drone"], ["editing"])
    """

    def build(*days: list[str], **quote_fields) -> Quote:
        built = [
            Day(services=[SelectedService(service_id=catalog_services[key].id) for key in day])
            for day in days
        ]
        return Quote(days=built or [Day()], **quote_fields)

    return build


@pytest.fixture
def names(catalog_services):
    """Catalog key for each instance of a day, for readable order assertions."""
    by_id = {s.id: key for key, s in catalog_services.items()}

    def day_names(quote: Quote, day_index: int = 0) -> list[str]:
        return [by_id[s.service_id] for s in quote.days[day_index].services]

    return day_names


@pytest.fixture
def service_factory():
    """make_service for tests that need their own catalog entries."""
    return make_service


# =============================================================================
# SAVED QUOTE FIXTURES
# =============================================================================


def make_saved_quote(
    name: str,
    dates: list[str] = (),
    archived: bool = False,
    total: float = 0,
    updated_at=None,
    **quote_fields,
) -> SavedQuote:
    """A saved quote with one day per date string."""
    now = updated_at or now_utc()
    quote = Quote(days=[Day(date=d) for d in dates] or [Day()], **quote_fields)
    return SavedQuote(
        id=uuid4(), name=name, quote=quote,
        client_name=quote.client_name, location=quote.location,
        booked=quote.booked, archived=archived, total=total,
        created_at=now, updated_at=now,
    )


@pytest.fixture
def saved_quote_factory():
    return make_saved_quote


# =============================================================================
# TIMERS: deterministic stand-in for threading.Timer
# =============================================================================


class FakeTimer:
    """Records its callback; the test fires it with fire()."""

    def __init__(self, interval, function):
        self.interval = interval
        self.function = function
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.function()


@pytest.fixture
def timers():
    """Timer factory that keeps every timer it creates in .created."""

    class Factory:
        def __init__(self):
            self.created: list[FakeTimer] = []

        def __call__(self, interval, function):
            timer = FakeTimer(interval, function)
            self.created.append(timer)
            return timer

        @property
        def last(self) -> FakeTimer:
            return self.created[-1]

    return Factory()
