"""HTTP interface for the quote builder: data reads and action mutations."""

from api.app import build_services, create_app, create_editor

__all__ = ["build_services", "create_app", "create_editor"]
