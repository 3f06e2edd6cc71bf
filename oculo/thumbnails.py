"""Thumbnail images kept in a disk cache and generated in the background."""

from __future__ import annotations

import hashlib
import logging
import math
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Set, Union

import platformdirs
from PIL import Image

log = logging.getLogger(__name__)

THUMB_SIZE = (120, 90)
THUMB_CAPTION_HEIGHT = 24
MAX_THREADS = 4

PathLike = Union[str, Path]


class ThumbnailPending(Exception):
    """The thumbnail is not available (yet)."""


def _round_half_away(value: float) -> int:
    return int(math.floor(value + 0.5)) if value >= 0 else -int(math.floor(-value + 0.5))


def path_to_id(path: PathLike) -> Path:
    """Cache file name derived from the path and the file's size."""
    digest = hashlib.blake2b(str(Path(path)).encode("utf-8", "surrogateescape"), digest_size=8)
    try:
        size = Path(path).stat().st_size
    except OSError:
        size = 0
    return Path(f"{int.from_bytes(digest.digest(), 'big')}_{size}.png")


def get_disk_cache_path() -> Path:
    """Folder where thumbnails are stored."""
    return Path(platformdirs.user_cache_path("oculo", appauthor=False, opinion=False)) / "thumbnails"


def get_cached_path(path: PathLike) -> Path:
    """Location of the cached thumbnail for ``path``."""
    return get_disk_cache_path() / path_to_id(path)


def from_existing(dest_path: PathLike, image: Image.Image) -> None:
    """Centre-crop ``image`` to the thumbnail aspect, scale it and save it."""
    target_width, target_height = THUMB_SIZE
    orig_width, orig_height = image.size
    if orig_width == 0 or orig_height == 0:
        raise ValueError("cannot make a thumbnail of an empty image")
    desired_aspect = target_width / target_height
    orig_aspect = orig_width / orig_height

    if orig_aspect > desired_aspect:
        crop_width = min(_round_half_away(desired_aspect * orig_height), orig_width)
        crop_height = orig_height
    else:
        crop_width = orig_width
        crop_height = min(_round_half_away(orig_width / desired_aspect), orig_height)

    x_offset = (orig_width - crop_width) // 2
    y_offset = (orig_height - crop_height) // 2
    cropped = image.convert("RGBA").crop(
        (x_offset, y_offset, x_offset + crop_width, y_offset + crop_height)
    )
    thumb = cropped.resize((target_width, target_height), Image.Resampling.BILINEAR)
    thumb.save(dest_path)


def generate(source_path: PathLike) -> Path:
    """Create the cached thumbnail for ``source_path`` and return where it went."""
    dest_path = get_cached_path(source_path)
    log.debug("Generating thumbnail for %s to %s", source_path, dest_path)
    with Image.open(source_path) as image:
        image.load()
        from_existing(dest_path, image)
    return dest_path


@dataclass
class Thumbnails:
    """Hands out cached thumbnails and schedules the missing ones."""

    # Known thumbnail ids, so that failed or running ones are not requested again.
    ids: Set[Path] = field(default_factory=set)
    _pool: threading.BoundedSemaphore = field(
        default_factory=lambda: threading.BoundedSemaphore(MAX_THREADS), repr=False
    )

    def _work(self, source: Path) -> None:
        with self._pool:
            try:
                generate(source)
            except Exception as exc:  # a broken image must not kill the worker
                log.error("Error generating thumbnail: %s", exc)

    def get(self, path: PathLike) -> Path:
        """Path of the cached thumbnail; raises ThumbnailPending if not ready."""
        cache_dir = get_disk_cache_path()
        if not cache_dir.exists():
            log.warning("Thumbnail cache dir missing, creating it")
            cache_dir.mkdir(parents=True, exist_ok=True)
        cached_path = get_cached_path(path)
        if cached_path.exists():
            return cached_path
        if cached_path in self.ids:
            raise ThumbnailPending("Thumbnail is still processing or failed in the past.")
        threading.Thread(target=self._work, args=(Path(path),), daemon=True).start()
        self.ids.add(cached_path)
        raise ThumbnailPending("Thumbnail not yet present.")