"""POST /api/actions: unified mutation endpoint."""

from uuid import UUID

from fastapi import APIRouter, Request
from pydantic import BaseModel

from api.base import require_field, success_response
from api.calculator import CalculatorHandler
from api.middleware import get_request_id
from core.models import Quote


class ActionRequest(BaseModel):
    domain: str
    action: str
    data: dict


def create_actions_router(services: dict) -> APIRouter:
    router = APIRouter()

    handlers = {
        "catalog": CatalogHandler(services["catalog"]),
        "calculator": CalculatorHandler(services["catalog"], services["config"]),
    }

    @router.post("/actions")
    async def perform_action(request: Request, body: ActionRequest):
        handler = handlers.get(body.domain)
        if handler is None:
            raise ValueError(
                f"Unknown domain '{body.domain}'. "
                f"Valid domains: {', '.join(sorted(handlers.keys()))}"
            )

        if body.action not in handler.ALLOWED_ACTIONS:
            raise ValueError(
                f"Action '{body.action}' not allowed on '{body.domain}'. "
                f"Allowed: {', '.join(sorted(handler.ALLOWED_ACTIONS))}"
            )

        method = getattr(handler, f"_handle_{body.action}")
        result = method(body.data)
        return success_response(result, get_request_id(request)).model_dump(mode="json")

    return router


# =============================================================================
# HANDLER CLASSES
# =============================================================================


class CatalogHandler:
    ALLOWED_ACTIONS = {"reorder", "validate_dependency"}

    def __init__(self, service):
        self.service = service

    def _handle_reorder(self, data: dict):
        services = self.service.reorder(
            UUID(require_field(data, "dragged_id")),
            UUID(require_field(data, "target_id")),
            bool(data.get("insert_after", False)),
        )
        return [s.model_dump(mode="json") for s in services]

    def _handle_validate_dependency(self, data: dict):
        check = self.service.validate_dependency(
            UUID(require_field(data, "service_id")),
            Quote.model_validate(require_field(data, "quote")),
            int(data.get("day_index", 0)),
        )
        return check.model_dump(mode="json")
