"""GET /api/data: unified read endpoint."""

from fastapi import APIRouter, Query, Request

from api.base import success_response
from api.middleware import get_request_id
from core.calendar import build_month, events_from_quotes
from core.models import QuoteSort
from core.services.saved_quote_service import filter_quotes
from utils.timezone import now_utc, parse_stored_date


VALID_TYPES = {"services", "quotes", "calendar"}


def create_data_router(services: dict) -> APIRouter:
    router = APIRouter()

    catalog_svc = services["catalog"]
    saved_quote_svc = services["saved_quote"]
    config = services["config"]

    @router.get("/data")
    async def get_data(
        request: Request,
        type: str | None = Query(None),
        name: str | None = Query(None),
        search: str | None = Query(None),
        date: str | None = Query(None),
        sort: QuoteSort = Query(QuoteSort.NEWEST),
        archived: bool = Query(False),
        year: int | None = Query(None, ge=1, le=9999),
        month: int | None = Query(None, ge=1, le=12),
    ):
        if type is None:
            raise ValueError("'type' query parameter is required")

        if type not in VALID_TYPES:
            raise ValueError(f"Unknown type '{type}'. Valid types: {', '.join(sorted(VALID_TYPES))}")

        request_id = get_request_id(request)

        if type == "services":
            data = [s.model_dump(mode="json") for s in catalog_svc.list_all()]
        elif type == "quotes":
            data = _handle_quotes(saved_quote_svc, name, search, date, sort, archived)
        else:
            data = _handle_calendar(saved_quote_svc, year, month, config.calendar_max_visible)

        return success_response(data, request_id).model_dump(mode="json")

    return router


def _handle_quotes(saved_quote_svc, name, search, date, sort, archived):
    if name:
        return saved_quote_svc.load(name).model_dump(mode="json")

    quotes = filter_quotes(
        saved_quote_svc.list_all(),
        search=search,
        on_date=parse_stored_date(date),
        sort=sort,
        archived=archived,
    )
    return [
        {
            **q.model_dump(mode="json", exclude={"quote"}),
            "title": q.display_title,
            "service_count": q.service_count,
            "dates": [d.isoformat() for d in q.quote.dated_days],
        }
        for q in quotes
    ]


def _handle_calendar(saved_quote_svc, year, month, max_visible):
    today = now_utc().date()
    events = events_from_quotes(saved_quote_svc.list_active())
    layout = build_month(year or today.year, month or today.month, events, max_visible)
    return layout.model_dump(mode="json")
