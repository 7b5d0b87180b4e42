"""
Draft service.

Keeps the in-progress quote in Valkey under a single key so it survives a
reload. Writes replace the whole draft. A draft that cannot be read back
(corrupt JSON, outdated shape) is logged, removed and treated as absent.
"""

import logging

from pydantic import ValidationError

from clients.valkey_client import ValkeyClient
from core.models import QuoteDraft

logger = logging.getLogger(__name__)


class DraftService:
    """Single-key draft store."""

    def __init__(self, valkey: ValkeyClient, key: str = "quote_calculator_draft"):
        self.valkey = valkey
        self.key = key

    def save(self, draft: QuoteDraft) -> None:
        self.valkey.set_json(self.key, draft.model_dump(mode="json"))

    def load(self) -> QuoteDraft | None:
        """Stored draft, or None when there is none or it is unreadable."""
        try:
            data = self.valkey.get_json(self.key)
            if data is None:
                return None
            return QuoteDraft.model_validate(data)
        except (ValueError, ValidationError) as e:
            logger.warning(f"Discarding unreadable quote draft: {e}")
            self.clear()
            return None

    def clear(self) -> None:
        self.valkey.delete(self.key)
