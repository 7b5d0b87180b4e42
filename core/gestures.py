"""
Pointer and touch drag controllers.

Both controllers only translate input into (source, target, insert_after)
and hand it to QuoteEditor.reorder, so the same drop gives the same result
whichever input produced it. Geometry comes from the caller as DropTarget
rows (top and height of the row under the pointer); nothing here renders.

Touch drags arm after a press-and-hold; moving more than the threshold
(Manhattan distance) before that cancels the gesture as a tap or scroll.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable

from core.config import QuoteConfig
from core.dependencies import DependencyCheck
from core.models import Position
from core.reorder import is_valid_day_drop

logger = logging.getLogger(__name__)

HAPTIC_ARMED = [50]
HAPTIC_DROPPED = [100]
HAPTIC_REJECTED = [50, 50, 50]

GHOST_OFFSET_X = 100
GHOST_OFFSET_Y = 30


@dataclass(frozen=True)
class DropTarget:
    """The row (or drop zone) under the pointer and its vertical extent."""

    position: Position
    top: float = 0
    height: float = 0
    is_drop_zone: bool = False


@dataclass(frozen=True)
class HoverState:
    """Drop indicator to show while dragging."""

    target: Position
    insert_after: bool
    valid: bool


@dataclass(frozen=True)
class DropResult:
    """Outcome of a drop."""

    accepted: bool
    reason: str | None = None
    check: DependencyCheck | None = None


def insert_after_from_pointer(y: float, target: DropTarget) -> bool:
    """Lower half of a row inserts after it; drop zones always append."""
    if target.is_drop_zone:
        return True
    return y >= target.top + target.height / 2


class _DragController:
    """Shared hover/drop handling for both input kinds."""

    input_kind = "pointer"

    def __init__(self, editor, on_error: Callable[[str], Any] | None = None):
        self.editor = editor
        self.on_error = on_error
        self.source: Position | None = None
        self.hover: HoverState | None = None

    @property
    def dragging(self) -> bool:
        return self.source is not None

    def _start(self, source: Position):
        self.editor.begin_drag(source, self.input_kind)
        self.source = source
        self.hover = None

    def _track(self, target: DropTarget | None, y: float) -> HoverState | None:
        if target is None or target.position == self.source:
            self.hover = None
            return None
        try:
            valid = is_valid_day_drop(self.editor.quote, self.editor.catalog, self.source, target.position)
        except ValueError:
            valid = False
        self.hover = HoverState(
            target=target.position,
            insert_after=insert_after_from_pointer(y, target),
            valid=valid,
        )
        return self.hover

    def _drop(self, target: DropTarget | None, y: float) -> DropResult:
        source = self.source
        self._reset()

        if source is None or target is None or target.position == source:
            return DropResult(accepted=False)

        try:
            check = self.editor.reorder(source, target.position, insert_after_from_pointer(y, target))
        except ValueError as e:
            logger.info(f"Drop rejected: {e}")
            if self.on_error is not None:
                self.on_error(str(e))
            return DropResult(accepted=False, reason=str(e), check=getattr(e, "check", None))
        return DropResult(accepted=True, check=check)

    def _reset(self):
        self.editor.end_drag()
        self.source = None
        self.hover = None

    def cancel(self):
        if self.dragging:
            self._reset()


class PointerDragController(_DragController):
    """
    Mouse drag: start on the handle, track continuously, drop on release.

    Usage:
        drag = PointerDragController(editor)
        drag.start(Position(day=0, index=2))
        drag.over(row_under_pointer, y)
        drag.drop(row_under_pointer, y)
    """

    input_kind = "pointer"

    def start(self, source: Position):
        self._start(source)

    def over(self, target: DropTarget | None, y: float) -> HoverState | None:
        if not self.dragging:
            return None
        return self._track(target, y)

    def drop(self, target: DropTarget | None, y: float) -> DropResult:
        return self._drop(target, y)


class TouchDragController(_DragController):
    """
    Touch drag: press-and-hold arms the drag, the ghost follows the finger.

    Haptic patterns go to the injected haptics callback (navigator.vibrate
    on the client). The hold delay runs on the caller's scheduler, called
    as schedule(delay_seconds, callback) and returning a handle with
    cancel(), e.g. asyncio's loop.call_later. Arming and finger movement
    are serialized, so a hold that fires while the finger moves either arms
    first or not at all.

    Usage:
        touch = TouchDragController(editor, loop.call_later, haptics=vibrate)
        touch.touch_start(Position(day=0, index=2), x, y)
        touch.touch_move(x, y, row_under_finger)
        touch.touch_end(x, y, row_under_finger)
    """

    input_kind = "touch"

    def __init__(
        self,
        editor,
        schedule: Callable[[float, Callable[[], Any]], Any],
        config: QuoteConfig | None = None,
        haptics: Callable[[list[int]], Any] | None = None,
        on_error: Callable[[str], Any] | None = None,
    ):
        super().__init__(editor, on_error)
        self.config = config or getattr(editor, "config", None) or QuoteConfig()
        self.haptics = haptics
        self._schedule = schedule
        self._lock = threading.Lock()
        self._timer = None
        self._press_id = 0
        self._pressed: Position | None = None
        self._start_point: tuple[float, float] = (0, 0)
        self._moved = False
        self.ghost: tuple[float, float] | None = None

    def touch_start(self, source: Position, x: float, y: float):
        """Finger down on a drag handle; any earlier gesture is dropped."""
        with self._lock:
            self._cancel_timer()
            if self.dragging:
                self._reset()
            self._press_id += 1
            self._pressed = source
            self._start_point = (x, y)
            self._moved = False

            press_id = self._press_id
            self._timer = self._schedule(
                self.config.touch_hold_ms / 1000, lambda: self.arm(press_id)
            )

    def arm(self, press_id: int | None = None):
        """Hold elapsed: start dragging unless the finger already moved away."""
        with self._lock:
            if press_id is not None and press_id != self._press_id:
                return
            self._timer = None
            if self._pressed is None or self._moved or self.dragging:
                return
            self._start(self._pressed)
            self.ghost = self._ghost_at(*self._start_point)
        self._vibrate(HAPTIC_ARMED)

    def touch_move(self, x: float, y: float, target: DropTarget | None = None) -> HoverState | None:
        with self._lock:
            start_x, start_y = self._start_point
            if not self.dragging and abs(x - start_x) + abs(y - start_y) > self.config.touch_move_threshold_px:
                self._moved = True
                self._cancel_timer()

            if not self.dragging:
                return None
            self.ghost = self._ghost_at(x, y)
            return self._track(target, y)

    def touch_end(self, x: float, y: float, target: DropTarget | None = None) -> DropResult | None:
        """
        Finger up. Returns None when no drag was armed (a tap or scroll).
        """
        with self._lock:
            self._cancel_timer()
            self._pressed = None
            if not self.dragging:
                return None

            self.ghost = None
            result = self._drop(target, y)
        self._vibrate(HAPTIC_DROPPED if result.accepted else HAPTIC_REJECTED)
        return result

    def cancel(self):
        with self._lock:
            self._cancel_timer()
            self._pressed = None
            self.ghost = None
            super().cancel()

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _vibrate(self, pattern: list[int]):
        if self.haptics is not None:
            self.haptics(list(pattern))

    @staticmethod
    def _ghost_at(x: float, y: float) -> tuple[float, float]:
        return (x - GHOST_OFFSET_X, y - GHOST_OFFSET_Y)
