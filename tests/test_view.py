import math

import pytest

from oculo.view import (
    ImageGeometry,
    aligned_offset,
    fit_to_window,
    limit_offset,
    tile_offsets,
)


def test_limit_offset_clamps_to_window_and_image():
    geo = ImageGeometry(offset=(5000.0, -5000.0), scale=2.0, dimensions=(100, 50))
    limited = limit_offset(geo, (800, 600))
    assert limited.offset[0] == 800.0
    assert limited.offset[1] == -(50 * 2.0)
    assert limited.scale == geo.scale
    assert limited.dimensions == geo.dimensions


def test_limit_offset_keeps_valid_offset():
    geo = ImageGeometry(offset=(10.0, 20.0), scale=1.0, dimensions=(100, 100))
    assert limit_offset(geo, (800, 600)) == geo


def test_fit_small_image_not_enlarged():
    geo = fit_to_window(ImageGeometry(), (100, 50), (0, 0, 800, 600), (800, 600))
    assert geo.scale == 1.0
    assert geo.offset[0] + 100 / 2 == 800 / 2
    assert geo.offset[1] + 50 / 2 == 600 / 2


def test_fit_large_image_fits_and_is_centred():
    geo = fit_to_window(ImageGeometry(), (4000, 1000), (20, 36, 800, 600), (1000, 700))
    w, h = 4000 * geo.scale, 1000 * geo.scale
    assert w <= 800 + 1e-6 and h <= 600 + 1e-6
    assert math.isclose(w, 800) or math.isclose(h, 600)
    assert math.isclose(geo.offset[0] - 20 + w / 2, 400)
    assert math.isclose(geo.offset[1] - 36 + h / 2, 300)


def test_fit_uses_smaller_of_area_and_window():
    geo = fit_to_window(ImageGeometry(), (1000, 1000), (0, 0, 2000, 2000), (500, 500))
    assert math.isclose(1000 * geo.scale, 500)


def test_fit_rejects_empty_image():
    with pytest.raises(ValueError):
        fit_to_window(ImageGeometry(), (0, 10), (0, 0, 800, 600), (800, 600))


def test_aligned_offset_truncates():
    geo = ImageGeometry(offset=(10.7, -3.9))
    x, y = aligned_offset(geo)
    assert x == math.trunc(10.7)
    assert y == math.trunc(-3.9)


def test_tile_offsets_single():
    geo = ImageGeometry(offset=(12.5, 7.25), scale=1.5)
    assert tile_offsets(geo, (64, 32), 1) == [aligned_offset(geo)]


def test_tile_offsets_grid():
    geo = ImageGeometry(offset=(3.3, 4.4), scale=0.5)
    offsets = tile_offsets(geo, (64, 32), 3)
    assert len(offsets) == 9
    assert offsets[0] == aligned_offset(geo)
    assert all(x == math.trunc(x) and y == math.trunc(y) for x, y in offsets)
    xs = sorted({x for x, _ in offsets})
    ys = sorted({y for _, y in offsets})
    assert len(xs) == 3 and len(ys) == 3
    assert offsets[1][1] == offsets[0][1]
    assert offsets[3][0] == offsets[0][0]