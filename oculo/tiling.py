"""Splitting images into texture tiles and converting them to texture formats."""

from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np

log = logging.getLogger(__name__)

TEXTURE_R8 = "R8"
TEXTURE_RGBA32 = "Rgba32"
TEXTURE_RGBA32_FLOAT = "Rgba32Float"

Offset = Tuple[int, int]
Size = Tuple[int, int]


class PixelFormat(Enum):
    """Pixel layout of an image: channels and sample type."""

    L8 = "L8"
    La8 = "La8"
    Rgb8 = "Rgb8"
    Rgba8 = "Rgba8"
    L16 = "L16"
    La16 = "La16"
    Rgb16 = "Rgb16"
    Rgba16 = "Rgba16"
    Rgb32F = "Rgb32F"
    Rgba32F = "Rgba32F"

    @property
    def channel_count(self) -> int:
        return _INFO[self][0]

    @property
    def dtype(self) -> np.dtype:
        return _INFO[self][1]

    @property
    def depth(self) -> int:
        """Bytes per sample."""
        return self.dtype.itemsize

    @property
    def bytes_per_pixel(self) -> int:
        return self.channel_count * self.depth


_INFO = {
    PixelFormat.L8: (1, np.dtype(np.uint8)),
    PixelFormat.La8: (2, np.dtype(np.uint8)),
    PixelFormat.Rgb8: (3, np.dtype(np.uint8)),
    PixelFormat.Rgba8: (4, np.dtype(np.uint8)),
    PixelFormat.L16: (1, np.dtype(np.uint16)),
    PixelFormat.La16: (2, np.dtype(np.uint16)),
    PixelFormat.Rgb16: (3, np.dtype(np.uint16)),
    PixelFormat.Rgba16: (4, np.dtype(np.uint16)),
    PixelFormat.Rgb32F: (3, np.dtype(np.float32)),
    PixelFormat.Rgba32F: (4, np.dtype(np.float32)),
}

_SUPPORTED = frozenset({PixelFormat.L8, PixelFormat.Rgba8, PixelFormat.Rgba32F})


def image_color_supported(fmt: PixelFormat) -> bool:
    """True if textures can be made from this format without conversion."""
    return fmt in _SUPPORTED


def texture_format_for(fmt: PixelFormat) -> str:
    """Texture format used for images of ``fmt`` (after any conversion)."""
    if fmt is PixelFormat.L8:
        return TEXTURE_R8
    if fmt is PixelFormat.Rgba32F:
        return TEXTURE_RGBA32_FLOAT
    # Unsupported formats deeper than one byte per sample become float textures.
    if fmt.depth > 1:
        return TEXTURE_RGBA32_FLOAT
    return TEXTURE_RGBA32


def expected_byte_size(width: int, height: int, fmt: PixelFormat) -> int:
    """Number of bytes a packed image of this size and format occupies."""
    return width * height * fmt.bytes_per_pixel


def image_bytes_slice(data: bytes, width: int, height: int, fmt: PixelFormat) -> bytes:
    """The pixel bytes of an image, cut to the expected size.

    Raises ValueError if the buffer is smaller than the image needs.
    """
    byte_count = expected_byte_size(width, height, fmt)
    if len(data) < byte_count:
        raise ValueError("Pixel buffer is smaller than expected!")
    if len(data) > byte_count:
        log.warning("Image byte buffer is bigger than expected. Will truncate.")
    return bytes(data[:byte_count])


def _as_pixels(pixels: np.ndarray, fmt: PixelFormat) -> np.ndarray:
    arr = np.asarray(pixels)
    if arr.ndim == 2:
        arr = arr[..., np.newaxis]
    if arr.ndim != 3 or arr.shape[2] != fmt.channel_count:
        raise ValueError(
            f"{fmt.value} pixels need {fmt.channel_count} channels, got shape {arr.shape}"
        )
    if arr.dtype != fmt.dtype:
        raise ValueError(f"{fmt.value} pixels need dtype {fmt.dtype}, got {arr.dtype}")
    return arr


def image_tile(pixels: np.ndarray, offset: Offset, size: Size) -> np.ndarray:
    """Copy of the ``size`` (width, height) region of ``pixels`` starting at ``offset``."""
    arr = np.asarray(pixels)
    height, width = arr.shape[:2]
    x, y = offset
    w, h = size
    if x < 0 or y < 0 or w < 0 or h < 0 or x + w > width or y + h > height:
        raise ValueError(
            f"tile at {offset} of size {size} does not fit an image of {width}x{height}"
        )
    return arr[y : y + h, x : x + w].copy()


def _expand_to_rgba(values: np.ndarray, opaque) -> np.ndarray:
    channels = values.shape[2]
    full = np.full(values.shape[:2] + (1,), opaque, dtype=values.dtype)
    if channels == 1:
        return np.concatenate([values, values, values, full], axis=2)
    if channels == 2:
        luma = values[..., :1]
        return np.concatenate([luma, luma, luma, values[..., 1:2]], axis=2)
    if channels == 3:
        return np.concatenate([values, full], axis=2)
    return values


def _to_rgba8(arr: np.ndarray, fmt: PixelFormat) -> np.ndarray:
    if fmt.depth == 1:
        values = arr
    elif fmt.depth == 2:
        values = np.rint(arr.astype(np.float64) / 257.0).astype(np.uint8)
    else:
        values = np.clip(np.rint(arr.astype(np.float64) * 255.0), 0, 255).astype(np.uint8)
    return np.ascontiguousarray(_expand_to_rgba(values, 255))


def _to_rgba32f(arr: np.ndarray, fmt: PixelFormat) -> np.ndarray:
    if fmt.depth == 1:
        values = arr.astype(np.float32) / np.float32(255)
    elif fmt.depth == 2:
        values = arr.astype(np.float32) / np.float32(65535)
    else:
        values = arr.astype(np.float32)
    return np.ascontiguousarray(_expand_to_rgba(values, np.float32(1.0)))


def get_image_part(
    pixels: np.ndarray, fmt: PixelFormat, offset: Offset, size: Size
) -> Optional[Tuple[np.ndarray, PixelFormat]]:
    """Region of an image in a format textures accept.

    Returns None when the whole image is requested and can be used as it is.
    """
    arr = _as_pixels(pixels, fmt)
    height, width = arr.shape[:2]
    whole = tuple(offset) == (0, 0) and tuple(size) == (width, height)

    if whole:
        if image_color_supported(fmt):
            return None
        if fmt.depth == 1:
            log.debug("Pixel type %s is not supported, converting to rgba8", fmt.value)
            return _to_rgba8(arr, fmt), PixelFormat.Rgba8
        log.debug("Pixel type %s is not supported, converting to rgba32f", fmt.value)
        return _to_rgba32f(arr, fmt), PixelFormat.Rgba32F

    tile = image_tile(arr, offset, size)
    log.debug("tiling %s", fmt.value)
    if fmt is PixelFormat.L8:
        return tile, PixelFormat.L8
    if fmt.depth == 1:
        return _to_rgba8(tile, fmt), PixelFormat.Rgba8
    return _to_rgba32f(tile, fmt), PixelFormat.Rgba32F


def tile_grid(width: int, height: int, max_texture_size: int) -> List[Tuple[Offset, Size]]:
    """Offsets and sizes of the texture tiles covering an image, row by row."""
    if width < 1 or height < 1:
        raise ValueError("Image width smaller than 1!")
    if max_texture_size < 1:
        raise ValueError(f"max texture size must be positive, got {max_texture_size}")
    col_count = -(-width // max_texture_size)
    row_count = -(-height // max_texture_size)
    col_increment = min(max_texture_size, width)
    row_increment = min(max_texture_size, height)
    return [
        (
            (col * col_increment, row * row_increment),
            (
                min(col_increment, width - col * col_increment),
                min(row_increment, height - row * row_increment),
            ),
        )
        for row in range(row_count)
        for col in range(col_count)
    ]