"""Colour channel selection applied to displayed pixels."""

from __future__ import annotations

from enum import Enum
from typing import Tuple

import numpy as np


class ColorChannel(Enum):
    """Which channel or channels of the image to show."""

    Red = "Red"
    Green = "Green"
    Blue = "Blue"
    Alpha = "Alpha"
    Rgb = "Rgb"
    Rgba = "Rgba"


_ONE_ROW = np.array([1.0, 1.0, 1.0, 0.0], dtype=np.float32)
_CHANNEL_INDEX = {
    ColorChannel.Red: 0,
    ColorChannel.Green: 1,
    ColorChannel.Blue: 2,
    ColorChannel.Alpha: 3,
}


def channel_transform(channel: ColorChannel, is_gray: bool = False) -> Tuple[np.ndarray, np.ndarray]:
    """Swizzle matrix and offset vector that isolate ``channel``.

    The result of a pixel ``v`` (RGBA, 0..1) is ``matrix @ v + offset``.
    Gray textures carry their luminance in the first component only.
    """
    matrix = np.zeros((4, 4), dtype=np.float32)
    offset = np.zeros(4, dtype=np.float32)

    if is_gray:
        if channel is ColorChannel.Alpha:
            offset[:] = 1.0  # plain white
        else:
            matrix[:, 0] = _ONE_ROW
            offset[3] = 1.0
        return matrix, offset

    if channel in _CHANNEL_INDEX:
        matrix[:, _CHANNEL_INDEX[channel]] = _ONE_ROW
        offset[3] = 1.0
    elif channel is ColorChannel.Rgb:
        matrix = np.eye(4, dtype=np.float32)
        matrix[:, 3] = 0.0  # drop alpha
        offset[3] = 1.0
    else:
        matrix = np.eye(4, dtype=np.float32)
    return matrix, offset


def apply_channel(pixels: np.ndarray, matrix: np.ndarray, offset: np.ndarray) -> np.ndarray:
    """Apply a channel transform to an array of RGBA pixels (last axis of size 4).

    Float input is taken as 0..1 and returned as float32; uint8 input is scaled
    to 0..1, transformed, clipped and returned as uint8.
    """
    pixels = np.asarray(pixels)
    if pixels.shape[-1:] != (4,):
        raise ValueError(f"pixels must have 4 components in the last axis, got shape {pixels.shape}")
    matrix = np.asarray(matrix, dtype=np.float32)
    offset = np.asarray(offset, dtype=np.float32)
    if matrix.shape != (4, 4) or offset.shape != (4,):
        raise ValueError("matrix must be 4x4 and offset of length 4")

    is_bytes = pixels.dtype == np.uint8
    values = pixels.astype(np.float32)
    if is_bytes:
        values = values / np.float32(255)
    result = values @ matrix.T + offset
    if is_bytes:
        return np.clip(np.rint(result * 255), 0, 255).astype(np.uint8)
    return result.astype(np.float32)