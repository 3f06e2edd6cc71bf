import math

import numpy as np
import pytest

from oculo.paint import PaintStroke, dotted_line, paint_at


def white_brush(size=2):
    return np.full((size, size, 4), 255, dtype=np.uint8)


def blank(size=4):
    return np.zeros((size, size, 4), dtype=np.uint8)


def test_new_stroke_defaults():
    stroke = PaintStroke.new()
    assert stroke.color == [1.0, 1.0, 1.0, 1.0]
    assert stroke.width == pytest.approx(0.05)
    assert stroke.is_empty()


def test_without_points_keeps_other_fields():
    stroke = PaintStroke(points=[(0.1, 0.2)], color=[0.5, 0.5, 0.5, 1.0], width=0.3)
    copy = stroke.without_points()
    assert copy.is_empty()
    assert copy.color == stroke.color
    assert copy.width == stroke.width
    assert stroke.points == [(0.1, 0.2)]


def test_dotted_line_spacing_is_even():
    dots = dotted_line([(0.0, 0.0), (3.0, 0.0), (9.0, 0.0)], 2.0)
    assert dots[0] == (0.0, 0.0)
    gaps = [b[0] - a[0] for a, b in zip(dots, dots[1:])]
    assert all(math.isclose(g, 2.0) for g in gaps)
    assert all(d[0] < 9.0 for d in dots)


def test_dotted_line_needs_two_points():
    assert dotted_line([(1.0, 1.0)], 1.0) == []
    assert dotted_line([], 1.0) == []


def test_dotted_line_rejects_zero_spacing():
    with pytest.raises(ValueError):
        dotted_line([(0.0, 0.0), (1.0, 0.0)], 0.0)


def test_paint_at_opaque_replaces_pixels():
    img = blank()
    paint_at(img, white_brush(), (2.0, 2.0), [1.0, 0.0, 0.0, 1.0])
    assert img[1:3, 1:3].tolist() == [[[255, 0, 0, 255]] * 2] * 2
    assert img[0, 0].tolist() == [0, 0, 0, 0]
    assert img[3, 3].tolist() == [0, 0, 0, 0]


def test_paint_at_clips_to_image_edge():
    img = blank()
    paint_at(img, white_brush(), (0.0, 0.0), [0.0, 1.0, 0.0, 1.0])
    assert img[0:2, 0:2].tolist() == [[[0, 255, 0, 255]] * 2] * 2
    assert img[2, 2].tolist() == [0, 0, 0, 0]


def test_paint_at_transparent_color_changes_nothing():
    img = blank()
    img[...] = [10, 20, 30, 255]
    before = img.copy()
    paint_at(img, white_brush(), (2.0, 2.0), [1.0, 1.0, 1.0, 0.0])
    assert np.array_equal(img, before)


def test_paint_at_half_alpha_mixes():
    img = blank()
    img[...] = [0, 0, 0, 255]
    paint_at(img, white_brush(), (2.0, 2.0), [1.0, 1.0, 1.0, 0.5])
    r, g, b, a = img[1, 1].tolist()
    assert r == g == b
    assert 100 < r < 160
    assert a >= 254


def stroke_across(**kwargs):
    return PaintStroke(points=[(0.2, 0.5), (0.8, 0.5)], width=0.25, **kwargs)


def test_render_paints_along_stroke():
    img = blank(20)
    stroke_across(color=[1.0, 0.0, 0.0, 1.0]).render(img, [white_brush(8)])
    assert img[10, 10].tolist() == [255, 0, 0, 255]
    assert img[0, 0].tolist() == [0, 0, 0, 0]
    assert img[19, 19].tolist() == [0, 0, 0, 0]


def test_render_without_points_leaves_image():
    img = blank(20)
    PaintStroke.new().render(img, [white_brush(8)])
    assert not img.any()


def test_render_highlight_strengthens_color():
    plain = blank(20)
    lit = blank(20)
    stroke_across(color=[0.4, 0.0, 0.0, 0.4]).render(plain, [white_brush(8)])
    stroke_across(color=[0.4, 0.0, 0.0, 0.4], highlight=True).render(lit, [white_brush(8)])
    assert lit[10, 10].tolist() == [255, 0, 0, 255]
    assert plain[10, 10, 3] < 255


def test_render_flip_random_is_deterministic():
    brush = np.zeros((8, 8, 4), dtype=np.uint8)
    brush[:4, :4] = 255
    first = blank(20)
    second = blank(20)
    stroke_across(color=[1.0, 1.0, 1.0, 1.0], flip_random=True).render(first, [brush])
    stroke_across(color=[1.0, 1.0, 1.0, 1.0], flip_random=True).render(second, [brush])
    assert np.array_equal(first, second)
    assert first.any()