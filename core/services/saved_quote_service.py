"""
Saved quote service.

Named, persisted quotes: save under a unique name, overwrite, load,
delete, archive and unarchive. The quote document is stored as JSONB;
client, location, booked and total are denormalized for the listing and
calendar.
"""

import logging
from datetime import date
from typing import Iterable
from uuid import uuid4

from psycopg2.extras import Json

from clients.postgres_client import PostgresClient
from core.exceptions import QuoteNameConflictError
from core.models import Quote, QuoteSort, SavedQuote, SavedQuoteCreate
from utils.timezone import now_utc

logger = logging.getLogger(__name__)


class SavedQuoteService:
    """Service for saved quote operations, keyed by quote name."""

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def save(self, data: SavedQuoteCreate) -> SavedQuote:
        """
        Save a quote under a new name.

        Raises:
            QuoteNameConflictError: If the name is already taken
        """
        if self.get_by_name(data.name) is not None:
            raise QuoteNameConflictError(data.name)

        now = now_utc()
        row = self.postgres.execute_returning(
            """
            INSERT INTO saved_quotes (
                id, name, quote, client_name, location, booked,
                archived, total, created_at, updated_at
            ) VALUES (
                %s, %s, %s, %s, %s, %s,
                false, %s, %s, %s
            )
            RETURNING *
            """,
            (
                uuid4(), data.name, Json(data.quote.model_dump(mode="json")),
                data.quote.client_name, data.quote.location, data.quote.booked,
                data.total, now, now,
            )
        )[0]

        saved = SavedQuote.model_validate(row)
        logger.info(f"Saved quote '{saved.name}' ({saved.id})")
        return saved

    def overwrite(self, name: str, quote: Quote, total: float) -> SavedQuote:
        """
        Replace the document stored under an existing name.

        Raises:
            ValueError: If no quote has this name
        """
        rows = self.postgres.execute_returning(
            """
            UPDATE saved_quotes
            SET quote = %s, client_name = %s, location = %s, booked = %s,
                total = %s, updated_at = %s
            WHERE name = %s
            RETURNING *
            """,
            (
                Json(quote.model_dump(mode="json")), quote.client_name, quote.location,
                quote.booked, total, now_utc(), name,
            )
        )
        if not rows:
            raise ValueError(f"Quote '{name}' not found")
        return SavedQuote.model_validate(rows[0])

    def get_by_name(self, name: str) -> SavedQuote | None:
        row = self.postgres.execute_single(
            "SELECT * FROM saved_quotes WHERE name = %s",
            (name,)
        )
        if row is None:
            return None
        return SavedQuote.model_validate(row)

    def load(self, name: str) -> SavedQuote:
        """
        Load a saved quote by name.

        Raises:
            ValueError: If no quote has this name
        """
        saved = self.get_by_name(name)
        if saved is None:
            raise ValueError(f"Quote '{name}' not found")
        return saved

    def list_all(self) -> list[SavedQuote]:
        """All saved quotes, most recently updated first."""
        rows = self.postgres.execute(
            "SELECT * FROM saved_quotes ORDER BY updated_at DESC"
        )
        return [SavedQuote.model_validate(row) for row in rows]

    def list_active(self) -> list[SavedQuote]:
        """Non-archived quotes (the calendar's source)."""
        rows = self.postgres.execute(
            "SELECT * FROM saved_quotes WHERE archived = false ORDER BY updated_at DESC"
        )
        return [SavedQuote.model_validate(row) for row in rows]

    def delete(self, name: str) -> bool:
        """
        Delete a saved quote.

        Returns:
            True if deleted, False if not found
        """
        rows = self.postgres.execute_returning(
            "DELETE FROM saved_quotes WHERE name = %s RETURNING id",
            (name,)
        )
        if rows:
            logger.info(f"Deleted saved quote '{name}'")
        return bool(rows)

    def archive(self, name: str) -> SavedQuote:
        return self._set_archived(name, True)

    def unarchive(self, name: str) -> SavedQuote:
        return self._set_archived(name, False)

    def _set_archived(self, name: str, archived: bool) -> SavedQuote:
        rows = self.postgres.execute_returning(
            """
            UPDATE saved_quotes
            SET archived = %s, updated_at = %s
            WHERE name = %s
            RETURNING *
            """,
            (archived, now_utc(), name)
        )
        if not rows:
            raise ValueError(f"Quote '{name}' not found")
        logger.info(f"{'Archived' if archived else 'Unarchived'} quote '{name}'")
        return SavedQuote.model_validate(rows[0])


def filter_quotes(
    quotes: Iterable[SavedQuote],
    search: str | None = None,
    on_date: date | None = None,
    sort: QuoteSort = QuoteSort.NEWEST,
    archived: bool = False,
) -> list[SavedQuote]:
    """
    Listing filter for the saved quotes page.

    Args:
        quotes: Saved quotes to filter
        search: Case-insensitive substring of name, client or location
        on_date: Keep quotes with a day on exactly this date
        sort: newest / oldest (by last update) or name-asc / name-desc
        archived: Show the archived view instead of active quotes
    """
    result = [q for q in quotes if q.archived == archived]

    if search:
        term = search.casefold()
        result = [
            q for q in result
            if term in q.name.casefold()
            or (q.client_name and term in q.client_name.casefold())
            or (q.location and term in q.location.casefold())
        ]

    if on_date is not None:
        result = [q for q in result if on_date in q.quote.dated_days]

    if sort == QuoteSort.OLDEST:
        result.sort(key=lambda q: q.updated_at)
    elif sort == QuoteSort.NAME_ASC:
        result.sort(key=lambda q: q.name.casefold())
    elif sort == QuoteSort.NAME_DESC:
        result.sort(key=lambda q: q.name.casefold(), reverse=True)
    else:
        result.sort(key=lambda q: q.updated_at, reverse=True)
    return result
