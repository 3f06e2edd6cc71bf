"""Brush strokes painted onto RGBA images."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field, replace
from typing import List, Sequence, Tuple

import numpy as np
from PIL import Image

Point = Tuple[float, float]


def _as_unsigned(value: float) -> int:
    """Float to unsigned integer the saturating way: negatives and NaN become 0."""
    if value != value or value <= 0:
        return 0
    return int(value)


def _saturate_u8(values: np.ndarray) -> np.ndarray:
    values = np.nan_to_num(values, nan=0.0, posinf=255.0, neginf=0.0)
    return np.clip(values, 0, 255).astype(np.uint8)


def _blend(bg: np.ndarray, fg: np.ndarray) -> np.ndarray:
    """Source-over compositing of ``fg`` onto ``bg`` (both uint8 RGBA)."""
    bgf = bg.astype(np.float32) / np.float32(255)
    fgf = fg.astype(np.float32) / np.float32(255)
    bg_a = bgf[..., 3:4]
    fg_a = fgf[..., 3:4]
    alpha = bg_a + fg_a - bg_a * fg_a
    with np.errstate(divide="ignore", invalid="ignore"):
        rgb = (fgf[..., :3] * fg_a + bgf[..., :3] * bg_a * (np.float32(1) - fg_a)) / alpha
    mixed = _saturate_u8(np.concatenate([rgb, alpha], axis=-1) * np.float32(255))
    out = np.where(fg[..., 3:4] == 255, fg, mixed)
    return np.where((fg[..., 3:4] == 0) | (alpha == 0), bg, out)


def _resize(brush: np.ndarray, size: int) -> np.ndarray:
    if size <= 0:
        return np.zeros((0, 0, 4), dtype=np.uint8)
    image = Image.fromarray(np.asarray(brush, dtype=np.uint8), "RGBA")
    return np.asarray(image.resize((size, size), Image.Resampling.BILINEAR))


def dotted_line(points: Sequence[Point], spacing: float) -> List[Point]:
    """Evenly spaced dots along a polyline, the spacing carried across segments."""
    if spacing <= 0:
        raise ValueError(f"spacing must be positive, got {spacing!r}")
    points = list(points)
    dots: List[Point] = []
    position = 0.0
    for (sx, sy), (ex, ey) in zip(points, points[1:]):
        dx, dy = ex - sx, ey - sy
        length = math.hypot(dx, dy)
        while position < length:
            t = position / length
            dots.append((sx + dx * t, sy + dy * t))
            position += spacing
        position -= length
    return dots


def paint_at(img: np.ndarray, brush: np.ndarray, pos: Point, color: Sequence[float]) -> None:
    """Blend ``brush``, tinted by ``color``, onto ``img`` centred at ``pos``, in place."""
    brush = np.asarray(brush, dtype=np.uint8)
    brush_h, brush_w = brush.shape[:2]
    img_h, img_w = img.shape[:2]
    x0 = _as_unsigned(pos[0] - brush_w / 2.0)
    y0 = _as_unsigned(pos[1] - brush_h / 2.0)
    x1 = min(x0 + brush_w, img_w)
    y1 = min(y0 + brush_h, img_h)
    if x0 >= x1 or y0 >= y1:
        return
    patch = brush[: y1 - y0, : x1 - x0].astype(np.float32)
    tinted = _saturate_u8(patch * np.asarray(color, dtype=np.float32))
    img[y0:y1, x0:x1] = _blend(img[y0:y1, x0:x1], tinted)


@dataclass
class PaintStroke:
    """A brush stroke; points are in UV space (0..1 of the image size)."""

    points: List[Point] = field(default_factory=list)
    fade: bool = False
    color: List[float] = field(default_factory=lambda: [0.0, 0.0, 0.0, 0.0])
    # 1.0 equals the smallest image dimension
    width: float = 0.0
    brush_index: int = 0
    highlight: bool = False
    committed: bool = False
    flip_random: bool = False

    @classmethod
    def new(cls) -> "PaintStroke":
        """A white stroke of width 0.05."""
        return cls(color=[1.0, 1.0, 1.0, 1.0], width=0.05)

    def without_points(self) -> "PaintStroke":
        return replace(self, points=[], color=list(self.color))

    def is_empty(self) -> bool:
        return not self.points

    def render(self, img: np.ndarray, brushes: Sequence[np.ndarray]) -> None:
        """Paint the stroke onto ``img`` (an H x W x 4 uint8 array) in place."""
        img_h, img_w = img.shape[:2]
        size = _as_unsigned(self.width * min(img_w, img_h))
        brush = _resize(brushes[self.brush_index], size)
        abs_points = [(img_w * x, img_h * y) for x, y in self.points]
        dots = dotted_line(abs_points, max(brush.shape[1] / 4.0, 1.5))

        for i, pos in enumerate(dots):
            if self.flip_random:
                # Seeded by position so the flip only changes per brush instance.
                rng = random.Random(_as_unsigned(pos[0]) + _as_unsigned(pos[1]))
                if rng.getrandbits(1):
                    brush = brush[:, ::-1]
                if rng.getrandbits(1):
                    brush = brush[::-1, :]
            color = list(self.color)
            if self.fade:
                color[3] *= 1.0 - i / len(dots)
            if self.highlight:
                color = [c * 2.5 for c in color]
            paint_at(img, brush, pos, color)