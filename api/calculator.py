"""
Calculator action handler.

Stateless: each request carries the whole quote, the handler replays one
editor operation against the current catalog and returns the resulting
quote with fresh totals. Rejections raise the same typed errors the
editor raises locally, so the error envelope carries every conflict.
"""

from uuid import UUID

from api.base import require_field
from core.config import QuoteConfig
from core.editor import QuoteEditor
from core.models import Position, Quote


def _position(data: dict, key: str) -> Position:
    return Position.model_validate(require_field(data, key))


class CalculatorHandler:
    ALLOWED_ACTIONS = {
        "totals", "add_service", "remove_service", "remove_day", "move", "add_markup",
    }

    def __init__(self, catalog_service, config: QuoteConfig):
        self.catalog_service = catalog_service
        self.config = config

    def _editor(self, data: dict) -> QuoteEditor:
        editor = QuoteEditor(self.catalog_service.lookup(), config=self.config)
        editor.load(Quote.model_validate(require_field(data, "quote")))
        editor.set_override_mode(bool(data.get("override", False)))
        return editor

    def _result(self, editor: QuoteEditor, **extra) -> dict:
        return {
            "quote": editor.quote.model_dump(mode="json"),
            "totals": editor.totals.model_dump(mode="json"),
            **extra,
        }

    def _handle_totals(self, data: dict):
        return self._result(self._editor(data))

    def _handle_add_service(self, data: dict):
        editor = self._editor(data)
        instance = editor.add_service(
            UUID(require_field(data, "service_id")),
            int(data.get("day_index", 0)),
        )
        return self._result(editor, instance_id=str(instance.id))

    def _handle_remove_service(self, data: dict):
        editor = self._editor(data)
        editor.remove_service(
            int(require_field(data, "day_index")),
            int(require_field(data, "service_index")),
        )
        return self._result(editor)

    def _handle_remove_day(self, data: dict):
        editor = self._editor(data)
        editor.remove_day(int(require_field(data, "day_index")))
        return self._result(editor)

    def _handle_move(self, data: dict):
        editor = self._editor(data)
        check = editor.reorder(
            _position(data, "source"),
            _position(data, "target"),
            bool(data.get("insert_after", False)),
        )
        return self._result(editor, check=check.model_dump(mode="json"))

    def _handle_add_markup(self, data: dict):
        editor = self._editor(data)
        editor.add_markup(
            require_field(data, "name"),
            float(require_field(data, "percentage")),
            [UUID(i) for i in data.get("service_instance_ids", [])],
        )
        return self._result(editor)
