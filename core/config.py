"""
Quote builder tunables.

Secrets (database and Valkey URLs) come from Vault; these are the
non-secret knobs for the editor, gestures and calendar.
"""

from pydantic import BaseModel, Field


class QuoteConfig(BaseModel):
    """Editor, gesture and calendar settings."""

    autosave_delay_seconds: float = Field(1.0, ge=0)
    draft_key: str = Field("quote_calculator_draft", min_length=1)

    touch_hold_ms: int = Field(300, ge=0)
    touch_move_threshold_px: int = Field(10, ge=0)

    max_quantity: int = Field(99, ge=1)
    calendar_max_visible: int = Field(3, ge=1)
