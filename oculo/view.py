"""Geometry of the displayed image: offset, scale and fitting to the window."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import List, Tuple

Vec2 = Tuple[float, float]


@dataclass(frozen=True)
class ImageGeometry:
    """Where and how large the image is drawn."""

    offset: Vec2 = (0.0, 0.0)
    scale: float = 1.0
    dimensions: Tuple[int, int] = (0, 0)


def limit_offset(geometry: ImageGeometry, window_size: Tuple[float, float]) -> ImageGeometry:
    """Keep the offset within the window so the image cannot drift away forever."""
    win_w, win_h = window_size
    scaled_w = geometry.dimensions[0] * geometry.scale
    scaled_h = geometry.dimensions[1] * geometry.scale
    x = max(min(geometry.offset[0], float(win_w)), -scaled_w)
    y = max(min(geometry.offset[1], float(win_h)), -scaled_h)
    return replace(geometry, offset=(x, y))


def fit_to_window(
    geometry: ImageGeometry,
    image_size: Tuple[float, float],
    draw_area: Tuple[float, float, float, float],
    window_size: Tuple[float, float],
) -> ImageGeometry:
    """Scale the image to fit the free draw area (never enlarging) and centre it.

    ``draw_area`` is ``(left, top, width, height)`` of the space left by the UI.
    """
    img_w, img_h = image_size
    if img_w <= 0 or img_h <= 0:
        raise ValueError(f"image size must be positive, got {image_size!r}")
    left, top, area_w, area_h = draw_area
    view_w = min(area_w, float(window_size[0]))
    view_h = min(area_h, float(window_size[1]))
    scale = min(view_w / img_w, view_h / img_h, 1.0)
    x = view_w / 2.0 - img_w * scale / 2.0 + left
    y = view_h / 2.0 - img_h * scale / 2.0 + top
    return replace(geometry, scale=scale, offset=(x, y))


def aligned_offset(geometry: ImageGeometry) -> Vec2:
    """Offset truncated to whole pixels to avoid distortion."""
    return (float(math.trunc(geometry.offset[0])), float(math.trunc(geometry.offset[1])))


def tile_offsets(
    geometry: ImageGeometry, texture_size: Tuple[float, float], tiling: int
) -> List[Vec2]:
    """Draw positions of the image repeated ``tiling`` x ``tiling`` times, row by row."""
    if tiling < 2:
        return [aligned_offset(geometry)]
    tex_w, tex_h = texture_size
    return [
        (
            float(math.trunc(xi * tex_w * geometry.scale + geometry.offset[0])),
            float(math.trunc(yi * tex_h * geometry.scale + geometry.offset[1])),
        )
        for yi in range(tiling)
        for xi in range(tiling)
    ]