"""Persistent and volatile application settings stored as JSON."""

from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, MutableMapping, Optional, Set, Tuple

import platformdirs

from .channels import ColorChannel
from .shortcuts import InputEvent, Shortcuts, default_keys

log = logging.getLogger(__name__)

_APP_NAME = "oculo"
_HEIF_ENV = "LIBHEIF_SECURITY_LIMITS"
_U32_MAX = 2**32 - 1
_U64_MAX = 2**64 - 1


def get_config_dir() -> Path:
    """Folder holding the configuration files."""
    return Path(platformdirs.user_data_path(_APP_NAME, appauthor=False))


def _legacy_config_path() -> Path:
    return Path(platformdirs.user_config_dir(appauthor=False)) / f".{_APP_NAME}"


class ColorTheme(Enum):
    """UI colour theme."""

    Light = "Light"
    Dark = "Dark"
    System = "System"


class _LimitKind(Enum):
    DEFAULT = "Default"
    NO_LIMIT = "NoLimit"
    U64 = "U64"
    U32 = "U32"


@dataclass(frozen=True)
class Limit:
    """A decoder limit as stored in the configuration.

    ``kind`` is one of ``"Default"``, ``"NoLimit"``, ``"U64"`` and ``"U32"``;
    ``value`` is only set for the two numeric kinds.
    """

    kind: str = "Default"
    value: Optional[int] = None

    def __post_init__(self) -> None:
        kind = _LimitKind(self.kind)
        if kind in (_LimitKind.U64, _LimitKind.U32):
            if not isinstance(self.value, int) or isinstance(self.value, bool):
                raise ValueError(f"{kind.value} limit needs an integer value, got {self.value!r}")
            upper = _U64_MAX if kind is _LimitKind.U64 else _U32_MAX
            if not 0 <= self.value <= upper:
                raise ValueError(f"{kind.value} limit out of range: {self.value}")
        elif self.value is not None:
            raise ValueError(f"{kind.value} limit takes no value")

    @classmethod
    def default(cls) -> "Limit":
        return cls("Default")

    @classmethod
    def no_limit(cls) -> "Limit":
        return cls("NoLimit")

    @classmethod
    def u64(cls, value: int) -> "Limit":
        return cls("U64", value)

    @classmethod
    def u32(cls, value: int) -> "Limit":
        return cls("U32", value)

    def __str__(self) -> str:
        if self.kind == "Default":
            return ""
        if self.kind == "NoLimit":
            return "0"
        return str(self.value)

    def to_json(self) -> Any:
        if self.value is None:
            return self.kind
        return {self.kind: self.value}

    @classmethod
    def from_json(cls, value: Any) -> "Limit":
        if isinstance(value, str):
            return cls(value)
        if isinstance(value, dict) and len(value) == 1:
            (kind, number), = value.items()
            return cls(kind, number)
        raise ValueError(f"invalid limit: {value!r}")

    def resolve(self, numeric_kind: str) -> Optional[int]:
        """The number to hand to the decoder, or None to keep its default."""
        if self.kind == "NoLimit":
            return 0
        if self.kind == numeric_kind:
            return self.value
        return None


# Field name and the numeric width the decoder expects for it.
_HEIF_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("image_size_pixels", "U64"),
    ("number_of_tiles", "U64"),
    ("bayer_pattern_pixels", "U32"),
    ("items", "U32"),
    ("color_profile_size", "U32"),
    ("memory_block_size", "U64"),
    ("components", "U32"),
    ("iloc_extents_per_item", "U32"),
    ("size_entity_group", "U32"),
    ("children_per_box", "U32"),
)

_override_lock = threading.Lock()
_override_decisions: List[Tuple[MutableMapping[str, str], bool]] = []


@dataclass
class HeifLimits:
    """Security limits for the HEIF decoder."""

    image_size_pixels: Limit = field(default_factory=Limit)
    number_of_tiles: Limit = field(default_factory=Limit)
    bayer_pattern_pixels: Limit = field(default_factory=Limit)
    items: Limit = field(default_factory=Limit)
    color_profile_size: Limit = field(default_factory=Limit)
    memory_block_size: Limit = field(default_factory=Limit)
    components: Limit = field(default_factory=Limit)
    iloc_extents_per_item: Limit = field(default_factory=Limit)
    size_entity_group: Limit = field(default_factory=Limit)
    children_per_box: Limit = field(default_factory=Limit)
    override_all: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {name: getattr(self, name).to_json() for name, _ in _HEIF_FIELDS}
        data["override_all"] = self.override_all
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HeifLimits":
        kwargs: Dict[str, Any] = {
            name: Limit.from_json(data[name]) for name, _ in _HEIF_FIELDS if name in data
        }
        if "override_all" in data:
            kwargs["override_all"] = bool(data["override_all"])
        return cls(**kwargs)

    def _decide_override(self, environ: MutableMapping[str, str]) -> bool:
        with _override_lock:
            for known, decision in _override_decisions:
                if known is environ:
                    return decision
            var = environ.get(_HEIF_ENV)
            override_all = var.lower() == "on" if var is not None else self.override_all
            environ[_HEIF_ENV] = "off" if override_all else "on"
            _override_decisions.append((environ, override_all))
            return override_all

    def maybe_limits(
        self, environ: Optional[MutableMapping[str, str]] = None
    ) -> Optional[Dict[str, int]]:
        """Limits to apply, or None when overridden by the environment or the settings.

        The decision is taken once per environment mapping; the environment
        variable is then set so the decoder sees it.
        """
        if environ is None:
            environ = os.environ
        if self._decide_override(environ):
            return None
        limits: Dict[str, int] = {}
        for name, numeric_kind in _HEIF_FIELDS:
            resolved = getattr(self, name).resolve(numeric_kind)
            if resolved is not None:
                limits[name] = resolved
        return limits


@dataclass
class DecoderSettings:
    """Tunables for image decoders."""

    heif: HeifLimits = field(default_factory=HeifLimits)

    def to_dict(self) -> Dict[str, Any]:
        return {"heif": self.heif.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DecoderSettings":
        if "heif" in data:
            return cls(heif=HeifLimits.from_dict(data["heif"]))
        return cls()


def _u8_triplet(value: Any) -> Tuple[int, int, int]:
    items = tuple(value)
    if len(items) != 3 or not all(isinstance(v, int) and 0 <= v <= 255 for v in items):
        raise ValueError(f"expected three values 0..255, got {value!r}")
    return items  # type: ignore[return-value]


def _pair(value: Any) -> Tuple[int, int]:
    items = tuple(int(v) for v in value)
    if len(items) != 2:
        raise ValueError(f"expected two values, got {value!r}")
    return items  # type: ignore[return-value]


def _shortcuts_to_json(shortcuts: Shortcuts) -> Dict[str, List[str]]:
    order = {event: i for i, event in enumerate(InputEvent)}
    return {
        event.value: sorted(keys)
        for event, keys in sorted(shortcuts.items(), key=lambda item: order[item[0]])
    }


def _shortcuts_from_json(data: Dict[str, Any]) -> Shortcuts:
    return {InputEvent(name): frozenset(keys) for name, keys in data.items()}


_PERSISTENT_CONVERTERS = {
    "accent_color": _u8_triplet,
    "background_color": _u8_triplet,
    "shortcuts": _shortcuts_from_json,
    "max_cache": int,
    "title_format": str,
    "svg_scale": float,
    "zoom_multiplier": float,
    "theme": ColorTheme,
    "min_window_size": _pair,
    "decoders": DecoderSettings.from_dict,
}

_PERSISTENT_SERIALIZERS = {
    "accent_color": list,
    "background_color": list,
    "shortcuts": _shortcuts_to_json,
    "theme": lambda theme: theme.value,
    "min_window_size": list,
    "decoders": lambda decoders: decoders.to_dict(),
}


@dataclass
class PersistentSettings:
    """Settings the user chose; kept between sessions."""

    accent_color: Tuple[int, int, int] = (255, 0, 75)
    background_color: Tuple[int, int, int] = (30, 30, 30)
    vsync: bool = True
    force_redraw: bool = False
    shortcuts: Shortcuts = field(default_factory=default_keys)
    keep_view: bool = False
    max_cache: int = 30
    show_scrub_bar: bool = False
    wrap_folder: bool = True
    keep_edits: bool = False
    title_format: str = "{APP} | {VERSION} | {FULLPATH}"
    info_enabled: bool = False
    edit_enabled: bool = False
    show_checker_background: bool = False
    show_minimap: bool = False
    show_frame: bool = False
    current_channel: ColorChannel = ColorChannel.Rgba
    svg_scale: float = 1.0
    zen_mode: bool = False
    theme: ColorTheme = ColorTheme.Dark
    linear_mag_filter: bool = False
    linear_min_filter: bool = True
    use_mipmaps: bool = True
    fit_image_on_window_resize: bool = False
    zoom_multiplier: float = 1.0
    borderless: bool = False
    min_window_size: Tuple[int, int] = (100, 100)
    experimental_features: bool = False
    decoders: DecoderSettings = field(default_factory=DecoderSettings)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for f in fields(self):
            if f.name == "current_channel":
                continue  # not persisted
            value = getattr(self, f.name)
            data[f.name] = _PERSISTENT_SERIALIZERS.get(f.name, lambda v: v)(value)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PersistentSettings":
        """Build settings from JSON data; missing keys keep their defaults."""
        kwargs: Dict[str, Any] = {}
        for f in fields(cls):
            if f.name == "current_channel" or f.name not in data:
                continue
            convert = _PERSISTENT_CONVERTERS.get(f.name, bool)
            kwargs[f.name] = convert(data[f.name])
        return cls(**kwargs)

    @classmethod
    def load(cls, config_dir: Optional[Path] = None) -> "PersistentSettings":
        """Read ``config.json``; without a folder, fall back to the legacy location."""
        if config_dir is None:
            config_path = get_config_dir() / "config.json"
            if not config_path.exists():
                config_path = _legacy_config_path()
        else:
            config_path = Path(config_dir) / "config.json"
        log.debug("Loading persistent settings: %s", config_path)
        with open(config_path, encoding="utf-8") as fh:
            return cls.from_dict(json.load(fh))

    def save_blocking(self, config_dir: Optional[Path] = None) -> Path:
        """Write ``config.json`` and return its path."""
        folder = Path(config_dir) if config_dir is not None else get_config_dir()
        if not folder.exists():
            log.info("Created %s", folder)
            folder.mkdir(parents=True, exist_ok=True)
        config_path = folder / "config.json"
        with open(config_path, "w", encoding="utf-8") as fh:
            json.dump(self.to_dict(), fh, indent=2)
        log.debug("Saved to %s", config_path)
        return config_path


def _default_encoding_options() -> List[Any]:
    return [
        {"Jpg": {"quality": 75}},
        "WebP",
        {"Png": {"compressionlevel": "Default"}},
        "Bmp",
    ]


WindowGeometry = Tuple[Tuple[int, int], Tuple[int, int]]


@dataclass
class VolatileSettings:
    """State remembered between sessions without the user setting it."""

    favourite_images: Set[Path] = field(default_factory=set)
    recent_images: List[Path] = field(default_factory=list)
    window_geometry: WindowGeometry = ((0, 0), (0, 0))
    last_open_directory: Optional[Path] = None
    folder_bookmarks: Set[Path] = field(default_factory=set)
    # Encoder choices in their stored JSON form.
    encoding_options: List[Any] = field(default_factory=_default_encoding_options)

    def to_dict(self) -> Dict[str, Any]:
        position, size = self.window_geometry
        return {
            "favourite_images": sorted(str(p) for p in self.favourite_images),
            "recent_images": [str(p) for p in self.recent_images],
            "window_geometry": [list(position), list(size)],
            "last_open_directory": (
                str(self.last_open_directory) if self.last_open_directory is not None else ""
            ),
            "folder_bookmarks": sorted(str(p) for p in self.folder_bookmarks),
            "encoding_options": list(self.encoding_options),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VolatileSettings":
        kwargs: Dict[str, Any] = {}
        if "favourite_images" in data:
            kwargs["favourite_images"] = {Path(p) for p in data["favourite_images"]}
        if "recent_images" in data:
            kwargs["recent_images"] = [Path(p) for p in data["recent_images"]]
        if "window_geometry" in data:
            position, size = data["window_geometry"]
            kwargs["window_geometry"] = (_pair(position), _pair(size))
        if "last_open_directory" in data:
            value = data["last_open_directory"]
            kwargs["last_open_directory"] = Path(value) if value else None
        if "folder_bookmarks" in data:
            kwargs["folder_bookmarks"] = {Path(p) for p in data["folder_bookmarks"]}
        if "encoding_options" in data:
            kwargs["encoding_options"] = list(data["encoding_options"])
        return cls(**kwargs)

    @classmethod
    def load(cls, config_dir: Optional[Path] = None) -> "VolatileSettings":
        folder = Path(config_dir) if config_dir is not None else get_config_dir()
        with open(folder / "config_volatile.json", encoding="utf-8") as fh:
            settings = cls.from_dict(json.load(fh))
        log.info("Loaded volatile settings.")
        return settings

    def save_blocking(self, config_dir: Optional[Path] = None) -> Path:
        folder = Path(config_dir) if config_dir is not None else get_config_dir()
        folder.mkdir(parents=True, exist_ok=True)
        path = folder / "config_volatile.json"
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(self.to_dict(), fh, indent=2)
        log.debug("Saved volatile settings")
        return path