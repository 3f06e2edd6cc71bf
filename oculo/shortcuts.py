"""Keyboard shortcut tables and matching of key presses against them."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Mapping, MutableMapping, Optional

log = logging.getLogger(__name__)


class InputEvent(Enum):
    """Actions that can be bound to a keyboard shortcut."""

    AlwaysOnTop = "AlwaysOnTop"
    Fullscreen = "Fullscreen"
    InfoMode = "InfoMode"
    EditMode = "EditMode"
    NextImage = "NextImage"
    FirstImage = "FirstImage"
    LastImage = "LastImage"
    PreviousImage = "PreviousImage"
    RedChannel = "RedChannel"
    GreenChannel = "GreenChannel"
    BlueChannel = "BlueChannel"
    AlphaChannel = "AlphaChannel"
    RGBChannel = "RGBChannel"
    RGBAChannel = "RGBAChannel"
    ResetView = "ResetView"
    ZoomOut = "ZoomOut"
    ZoomIn = "ZoomIn"
    ZoomActualSize = "ZoomActualSize"
    ZoomDouble = "ZoomDouble"
    ZoomThree = "ZoomThree"
    ZoomFour = "ZoomFour"
    ZoomFive = "ZoomFive"
    CompareNext = "CompareNext"
    PanLeft = "PanLeft"
    PanRight = "PanRight"
    PanUp = "PanUp"
    PanDown = "PanDown"
    DeleteFile = "DeleteFile"
    ClearImage = "ClearImage"
    LosslessRotateRight = "LosslessRotateRight"
    LosslessRotateLeft = "LosslessRotateLeft"
    Copy = "Copy"
    Paste = "Paste"
    Browse = "Browse"
    Quit = "Quit"
    ZenMode = "ZenMode"


_EVENT_ORDER = {event: index for index, event in enumerate(InputEvent)}

SimultaneousKeypresses = FrozenSet[str]
Shortcuts = Dict[InputEvent, SimultaneousKeypresses]

_MODIFIER_KEYS = frozenset(
    {"LShift", "LControl", "LAlt", "RAlt", "RControl", "RShift", "LWin", "Rwin"}
)

# Keys that fire while held down, not only on the initial press.
_REPEATING = frozenset(
    {
        InputEvent.NextImage,
        InputEvent.PreviousImage,
        InputEvent.PanRight,
        InputEvent.PanLeft,
        InputEvent.PanDown,
        InputEvent.PanUp,
        InputEvent.ZoomIn,
        InputEvent.ZoomOut,
    }
)


@dataclass(frozen=True)
class KeyboardState:
    """Snapshot of the keyboard: keys held, newly pressed and just released."""

    down: FrozenSet[str] = field(default_factory=frozenset)
    pressed: FrozenSet[str] = field(default_factory=frozenset)
    released: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        for name in ("down", "pressed", "released"):
            object.__setattr__(self, name, frozenset(getattr(self, name)))

    @property
    def shift(self) -> bool:
        return bool({"LShift", "RShift"} & self.down)

    @property
    def ctrl(self) -> bool:
        return bool({"LControl", "RControl"} & self.down)

    @property
    def alt(self) -> bool:
        return bool({"LAlt", "RAlt"} & self.down)

    @property
    def logo(self) -> bool:
        return bool({"LWin", "RWin"} & self.down)


def is_key_modifier(key: str) -> bool:
    """Return True if the key name denotes a modifier key."""
    return key in _MODIFIER_KEYS


def modifiers(keys: Iterable[str]) -> FrozenSet[str]:
    """The modifier keys of a key combination."""
    return frozenset(k for k in keys if is_key_modifier(k))


def alphanumeric(keys: Iterable[str]) -> FrozenSet[str]:
    """The non-modifier keys of a key combination."""
    return frozenset(k for k in keys if not is_key_modifier(k))


def _sorted_shortcuts(shortcuts: Mapping[InputEvent, SimultaneousKeypresses]) -> Shortcuts:
    return dict(sorted(shortcuts.items(), key=lambda item: _EVENT_ORDER[item[0]]))


def add_key(
    shortcuts: Mapping[InputEvent, SimultaneousKeypresses], function: InputEvent, key: str
) -> Shortcuts:
    """Return a copy of the shortcuts with ``function`` bound to a single key."""
    return add_keys(shortcuts, function, [key])


def add_keys(
    shortcuts: Mapping[InputEvent, SimultaneousKeypresses],
    function: InputEvent,
    keys: Iterable[str],
) -> Shortcuts:
    """Return a copy of the shortcuts with ``function`` bound to a key combination."""
    updated = dict(shortcuts)
    updated[function] = frozenset(keys)
    return _sorted_shortcuts(updated)


def default_keys(platform: Optional[str] = None) -> Shortcuts:
    """The default shortcut table; on macOS Control is replaced by the Command key."""
    if platform is None:
        platform = sys.platform
    bindings = [
        (InputEvent.AlwaysOnTop, ["T"]),
        (InputEvent.Fullscreen, ["F"]),
        (InputEvent.ResetView, ["V"]),
        (InputEvent.Quit, ["Q"]),
        (InputEvent.InfoMode, ["I"]),
        (InputEvent.EditMode, ["E"]),
        (InputEvent.RedChannel, ["R"]),
        (InputEvent.GreenChannel, ["G"]),
        (InputEvent.BlueChannel, ["B"]),
        (InputEvent.AlphaChannel, ["A"]),
        (InputEvent.RGBChannel, ["U"]),
        (InputEvent.RGBAChannel, ["C"]),
        (InputEvent.CompareNext, ["LShift", "C"]),
        (InputEvent.PreviousImage, ["Left"]),
        (InputEvent.FirstImage, ["Home"]),
        (InputEvent.LastImage, ["End"]),
        (InputEvent.NextImage, ["Right"]),
        (InputEvent.ZoomIn, ["Equals"]),
        (InputEvent.ZoomOut, ["Minus"]),
        (InputEvent.ZoomActualSize, ["Key1"]),
        (InputEvent.ZoomDouble, ["Key2"]),
        (InputEvent.ZoomThree, ["Key3"]),
        (InputEvent.ZoomFour, ["Key4"]),
        (InputEvent.ZoomFive, ["Key5"]),
        (InputEvent.LosslessRotateLeft, ["LBracket"]),
        (InputEvent.LosslessRotateRight, ["RBracket"]),
        (InputEvent.ZenMode, ["Z"]),
        (InputEvent.DeleteFile, ["Delete"]),
        (InputEvent.ClearImage, ["LShift", "Delete"]),
        (InputEvent.Browse, ["LControl", "O"]),
        (InputEvent.PanRight, ["LShift", "Right"]),
        (InputEvent.PanLeft, ["LShift", "Left"]),
        (InputEvent.PanDown, ["LShift", "Down"]),
        (InputEvent.PanUp, ["LShift", "Up"]),
        (InputEvent.Paste, ["LControl", "V"]),
        (InputEvent.Copy, ["LControl", "C"]),
    ]
    shortcuts: Shortcuts = {}
    for event, keys in bindings:
        shortcuts = add_keys(shortcuts, event, keys)
    if platform == "darwin":
        shortcuts = {
            event: frozenset(k.replace("LControl", "LWin") for k in keys)
            for event, keys in shortcuts.items()
        }
    return shortcuts


def key_pressed(
    keyboard: KeyboardState,
    shortcuts: MutableMapping[InputEvent, SimultaneousKeypresses],
    command: InputEvent,
    key_grab: bool = False,
) -> bool:
    """Return True if the keyboard state triggers ``command``.

    A command missing from ``shortcuts`` is added with its default binding.
    """
    if key_grab:
        return False
    if not keyboard.down and not keyboard.released:
        return False
    if (keyboard.alt or keyboard.shift or keyboard.ctrl) and len(keyboard.down) == 1:
        log.debug("alt/shift/ctrl modifier down")
        return False

    keys = shortcuts.get(command)
    if keys is None:
        log.warning("Command not registered: %r", command)
        default = default_keys().get(command)
        if default is not None:
            log.info("Inserted command: %r", default)
            shortcuts[command] = default
        else:
            log.error("Failed to insert command.")
        return False

    if len(keyboard.down) != len(keys) and command is not InputEvent.Fullscreen:
        return False

    required = {
        "Shift": keyboard.shift,
        "Alt": keyboard.alt,
        "Control": keyboard.ctrl,
        "Win": keyboard.logo,
    }
    for modifier in modifiers(keys):
        if any(part in modifier and not held for part, held in required.items()):
            return False

    for key in sorted(alphanumeric(keys)):
        if command is InputEvent.Fullscreen:
            if key in keyboard.released:
                log.debug("Matched %r / %r", command, key)
                return True
            continue
        if command in _REPEATING and key in keyboard.down:
            log.debug("Matched repeating %r / %r", command, key)
            return True
        if key in keyboard.pressed:
            log.debug("Matched %r / %r", command, key)
            return True
    return False


def _ordered_keys(keys: Iterable[str]) -> list:
    keys = list(keys)
    return sorted(modifiers(keys)) + sorted(alphanumeric(keys))


def lookup(shortcuts: Mapping[InputEvent, SimultaneousKeypresses], command: InputEvent) -> str:
    """Human-readable binding of ``command``, or ``"None"`` if unbound."""
    keys = shortcuts.get(command)
    if keys is None:
        return "None"
    return keypresses_as_string(keys)


def keypresses_as_string(keys: Iterable[str]) -> str:
    """Modifiers first, then other keys, each group sorted, joined by ' + '."""
    return " + ".join(_ordered_keys(keys))


def keypresses_as_markdown(keys: Iterable[str]) -> str:
    """Like :func:`keypresses_as_string`, with each key wrapped in <kbd> tags."""
    return " + ".join(f"<kbd>{k}</kbd>" for k in _ordered_keys(keys))