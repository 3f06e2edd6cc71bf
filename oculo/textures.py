"""Image textures split into tiles that fit the graphics hardware limits."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from .channels import ColorChannel, channel_transform
from .tiling import PixelFormat, get_image_part, texture_format_for, tile_grid

log = logging.getLogger(__name__)

# Images with this many pixels or more get no mipmaps.
MAX_PIXEL_COUNT = 8192 * 8192
DEFAULT_MAX_TEXTURE_SIZE = 8192

ZoomedTile = Tuple["TileResponse", Tuple[int, int], Tuple[float, float], Tuple[float, float]]


def _is_gray(fmt: PixelFormat) -> bool:
    return fmt in (PixelFormat.L8, PixelFormat.L16)


def _as_array(pixels: np.ndarray) -> np.ndarray:
    arr = np.asarray(pixels)
    if arr.ndim == 2:
        arr = arr[..., np.newaxis]
    if arr.ndim != 3:
        raise ValueError(f"pixels must be a height x width (x channels) array, got {arr.shape}")
    return arr


def _tile_data(arr: np.ndarray, fmt: PixelFormat, offset, size) -> np.ndarray:
    part = get_image_part(arr, fmt, offset, size)
    if part is None:
        # The whole image can be used as it is.
        return np.array(arr, copy=True)
    return part[0]


@dataclass(frozen=True)
class TileResponse:
    """The tile covering an image coordinate.

    ``tile_index`` is None for the boundary tile outside the image.
    """

    tile_index: Optional[int]
    x_offset_texture: int
    y_offset_texture: int
    x_tex_right_global: int
    y_tex_bottom_global: int
    is_boundary: bool


@dataclass
class TexWrap:
    """An image held as a grid of texture tiles, row by row."""

    textures: List[np.ndarray]
    col_count: int
    row_count: int
    col_translation: int
    row_translation: int
    size_vec: Tuple[float, float]
    format: str
    image_format: PixelFormat
    swizzle_matrix: np.ndarray
    offset_vector: np.ndarray
    allow_mipmap: bool = True

    @property
    def texture_count(self) -> int:
        return len(self.textures)

    @classmethod
    def from_image(
        cls,
        pixels: np.ndarray,
        fmt: PixelFormat,
        max_texture_size: int = DEFAULT_MAX_TEXTURE_SIZE,
        channel: ColorChannel = ColorChannel.Rgba,
    ) -> "TexWrap":
        """Split ``pixels`` into tiles of at most ``max_texture_size`` per side."""
        arr = _as_array(pixels)
        height, width = arr.shape[:2]
        if width < 1 or height < 1:
            raise ValueError("Image width smaller than 1!")
        grid = tile_grid(width, height, max_texture_size)

        allow_mipmap = width * height < MAX_PIXEL_COUNT
        if not allow_mipmap:
            log.warning(
                "Image with %d pixels too large (max %d pixels), disabling mipmaps",
                width * height,
                MAX_PIXEL_COUNT,
            )

        textures = [_tile_data(arr, fmt, offset, size) for offset, size in grid]
        matrix, vector = channel_transform(channel, _is_gray(fmt))
        return cls(
            textures=textures,
            col_count=-(-width // max_texture_size),
            row_count=-(-height // max_texture_size),
            col_translation=min(max_texture_size, width),
            row_translation=min(max_texture_size, height),
            size_vec=(float(width), float(height)),
            format=texture_format_for(fmt),
            image_format=fmt,
            swizzle_matrix=matrix,
            offset_vector=vector,
            allow_mipmap=allow_mipmap,
        )

    def update_textures(self, pixels: np.ndarray, fmt: PixelFormat) -> None:
        """Replace the tile contents with an image of the same size and format."""
        arr = _as_array(pixels)
        height, width = arr.shape[:2]
        if (float(width), float(height)) != self.size_vec or fmt is not self.image_format:
            raise ValueError("Could not get slice from image: size or format differs")
        updated = []
        for row in range(self.row_count):
            start_y = row * self.row_translation
            tile_h = min(self.row_translation, height - start_y)
            for col in range(self.col_count):
                start_x = col * self.col_translation
                tile_w = min(self.col_translation, width - start_x)
                updated.append(_tile_data(arr, fmt, (start_x, start_y), (tile_w, tile_h)))
        self.textures = updated

    def set_channel_transform(self, matrix: np.ndarray, vector: np.ndarray) -> None:
        self.swizzle_matrix = matrix
        self.offset_vector = vector

    def _boundary_at(self, x: int, y: int) -> TileResponse:
        width = abs(x) if x < 0 else int(self.width())
        height = abs(y) if y < 0 else int(self.height())
        return TileResponse(None, 0, 0, x + width - 1, y + height - 1, True)

    def texture_at(self, x: int, y: int) -> TileResponse:
        """The tile that holds image pixel (x, y), or a boundary tile outside it."""
        width_int = int(self.width())
        height_int = int(self.height())
        if x < 0 or y < 0 or x >= width_int or y >= height_int:
            return self._boundary_at(x, y)

        x_idx = x // self.col_translation
        y_idx = y // self.row_translation
        tile_index = min(y_idx * self.col_count + x_idx, len(self.textures) - 1)
        tile = self.textures[tile_index]
        tile_h, tile_w = tile.shape[:2]

        left = x_idx * self.col_translation
        top = y_idx * self.row_translation
        return TileResponse(
            tile_index=tile_index,
            x_offset_texture=x - left,
            y_offset_texture=y - top,
            x_tex_right_global=left + tile_w - 1,
            y_tex_bottom_global=top + tile_h - 1,
            is_boundary=False,
        )

    def draw_positions(
        self, translation_x: float, translation_y: float, scale: float
    ) -> List[Tuple[int, float, float]]:
        """Where each tile is drawn: (tile index, x, y) at the given scale."""
        positions = []
        for row in range(self.row_count):
            y = translation_y + scale * row * self.row_translation
            for col in range(self.col_count):
                x = translation_x + scale * col * self.col_translation
                positions.append((row * self.col_count + col, x, y))
        return positions

    def zoomed_tiles(
        self,
        translation_x: float,
        translation_y: float,
        width: float,
        center: Tuple[float, float],
        scale: float,
    ) -> List[ZoomedTile]:
        """Pieces of a magnified view around ``center`` filling a ``width`` square.

        Each piece is (tile, crop size in pixels, display size, display position).
        """
        if scale <= 0 or width < 0:
            raise ValueError("zoom scale must be positive and width not negative")
        width_tex = int(width / scale)
        span = 2 * width_tex + 1
        cx, cy = int(center[0]), int(center[1])
        x_end = cx + width_tex
        y = cy - width_tex
        y_end = cy + width_tex

        pieces: List[ZoomedTile] = []
        ui_y = float(translation_y)
        while y <= y_end:
            y_next: Optional[int] = None
            x = cx - width_tex
            ui_x = float(translation_x)
            row_height = math.inf
            while x <= x_end:
                response = self.texture_at(x, y)
                end_x = min(response.x_tex_right_global, x_end)
                end_y = min(response.y_tex_bottom_global, y_end)
                crop = (end_x - x + 1, end_y - y + 1)
                display = (crop[0] / span * width, crop[1] / span * width)
                pieces.append((response, crop, display, (ui_x, ui_y)))

                x = response.x_tex_right_global + 1
                bottom = response.y_tex_bottom_global + 1
                y_next = bottom if y_next is None else min(y_next, bottom)
                ui_x += display[0]
                row_height = min(row_height, display[1])
            y = y_next
            ui_y += row_height
        return pieces

    def size(self) -> Tuple[float, float]:
        return self.size_vec

    def width(self) -> float:
        return self.size_vec[0]

    def height(self) -> float:
        return self.size_vec[1]


@dataclass
class TextureManager:
    """Keeps the texture of the current image, reusing it when possible."""

    max_texture_size: int = DEFAULT_MAX_TEXTURE_SIZE
    current_texture: Optional[TexWrap] = field(default=None)

    def set_image(
        self,
        pixels: np.ndarray,
        fmt: PixelFormat,
        channel: ColorChannel = ColorChannel.Rgba,
    ) -> TexWrap:
        """Show ``pixels``; the existing texture is updated if size and format match."""
        arr = _as_array(pixels)
        height, width = arr.shape[:2]
        tex = self.current_texture
        if tex is not None and tex.size() == (float(width), float(height)) and fmt is tex.image_format:
            try:
                tex.update_textures(arr, fmt)
            except ValueError as exc:
                self.clear()
                log.error("%s", exc)
                raise
            return tex

        self.clear()
        log.debug("Updating or creating texture with new size.")
        try:
            tex = TexWrap.from_image(arr, fmt, self.max_texture_size, channel)
        except ValueError as exc:
            self.clear()
            log.error("%s", exc)
            raise
        self.current_texture = tex
        return tex

    def update_color_selection(self, channel: ColorChannel) -> None:
        """Switch the displayed channel of the current texture."""
        if self.current_texture is not None:
            matrix, vector = channel_transform(channel, _is_gray(self.current_texture.image_format))
            self.current_texture.set_channel_transform(matrix, vector)

    def get(self) -> Optional[TexWrap]:
        return self.current_texture

    def clear(self) -> None:
        self.current_texture = None