"""Mapping keyboard and mouse input to viewer actions."""

from __future__ import annotations

from dataclasses import replace
from enum import Enum
from typing import List, MutableMapping, Tuple

from .shortcuts import InputEvent, KeyboardState, SimultaneousKeypresses, key_pressed
from .view import ImageGeometry, limit_offset

PAN_DELTA = 40.0

# Fullscreen reacts to a released key, the rest to keys going down,
# checked in this order.
_EVENT_ORDER = (
    InputEvent.Fullscreen,
    InputEvent.PanRight,
    InputEvent.PanUp,
    InputEvent.PanLeft,
    InputEvent.PanDown,
    InputEvent.CompareNext,
    InputEvent.ResetView,
    InputEvent.ZenMode,
    InputEvent.ZoomActualSize,
    InputEvent.ZoomDouble,
    InputEvent.ZoomThree,
    InputEvent.ZoomFour,
    InputEvent.ZoomFive,
    InputEvent.Copy,
    InputEvent.Paste,
    InputEvent.Quit,
    InputEvent.LosslessRotateRight,
    InputEvent.LosslessRotateLeft,
    InputEvent.Browse,
    InputEvent.NextImage,
    InputEvent.PreviousImage,
    InputEvent.FirstImage,
    InputEvent.LastImage,
    InputEvent.AlwaysOnTop,
    InputEvent.InfoMode,
    InputEvent.EditMode,
    InputEvent.DeleteFile,
    InputEvent.ClearImage,
    InputEvent.ZoomIn,
    InputEvent.ZoomOut,
)

_PAN_STEPS = {
    InputEvent.PanRight: (-PAN_DELTA, 0.0),
    InputEvent.PanUp: (0.0, PAN_DELTA),
    InputEvent.PanLeft: (PAN_DELTA, 0.0),
    InputEvent.PanDown: (0.0, -PAN_DELTA),
}


class WheelAction(Enum):
    """What a turn of the mouse wheel does."""

    NONE = "none"
    PREVIOUS_IMAGE = "previous_image"
    NEXT_IMAGE = "next_image"
    ZOOM = "zoom"


def triggered_events(
    keyboard: KeyboardState,
    shortcuts: MutableMapping[InputEvent, SimultaneousKeypresses],
    key_grab: bool = False,
) -> List[InputEvent]:
    """All viewer actions the keyboard state triggers, in processing order."""
    if key_grab:
        return []
    return [event for event in _EVENT_ORDER if key_pressed(keyboard, shortcuts, event)]


def pan_for(
    event: InputEvent, geometry: ImageGeometry, window_size: Tuple[float, float]
) -> ImageGeometry:
    """Geometry after a keyboard pan, kept within the window."""
    try:
        dx, dy = _PAN_STEPS[event]
    except KeyError:
        raise ValueError(f"{event!r} is not a pan event") from None
    x, y = geometry.offset
    return limit_offset(replace(geometry, offset=(x + dx, y + dy)), window_size)


def wheel_action(delta_y: float, ctrl: bool, pointer_over_ui: bool) -> WheelAction:
    """Action for a wheel turn; with Ctrl, scrolling down moves to the next image."""
    if pointer_over_ui:
        return WheelAction.NONE
    if ctrl:
        return WheelAction.PREVIOUS_IMAGE if delta_y > 0.0 else WheelAction.NEXT_IMAGE
    return WheelAction.ZOOM


def drag_enabled_after(button: str, pressed: bool, mouse_grab: bool, current: bool) -> bool:
    """Whether image dragging is on after a mouse button goes down or up.

    ``button`` is ``"Left"``, ``"Middle"`` or another button name.
    """
    name = str(button).lower()
    if pressed:
        if name == "left":
            return True if not mouse_grab else current
        if name == "middle":
            return True
        return current
    if name in ("left", "middle"):
        return False
    return current