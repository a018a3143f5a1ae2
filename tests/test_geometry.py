import math

import pytest

from imagemark.geometry import logo_extent, resolve_geometry
from imagemark.settings import WatermarkKind, WatermarkSpec


def test_text_geometry():
    spec = WatermarkSpec(font_size_pct=14, position_x_pct=50, position_y_pct=50, rotation_deg=-45)
    g = resolve_geometry(1000, 500, spec)
    assert g.anchor == (500, 250)
    assert g.size_px == pytest.approx(140)
    assert g.rotation_rad == pytest.approx(-math.pi / 4)
    assert g.rotation_deg == pytest.approx(-45)
    with pytest.raises(ValueError):
        g.top_left


def test_logo_geometry_is_centered_on_anchor():
    spec = WatermarkSpec(kind=WatermarkKind.LOGO, logo_size_pct=25)
    g = resolve_geometry(800, 600, spec, logo_size=(200, 100))
    assert (g.logo_width, g.logo_height) == (200, 100)
    assert g.anchor == (400, 300)
    assert g.top_left == (300, 250)


@pytest.mark.parametrize("pct", range(5, 51, 5))
def test_logo_aspect_ratio_is_preserved(pct):
    spec = WatermarkSpec(kind=WatermarkKind.LOGO, logo_size_pct=pct)
    w, h = logo_extent(1237, spec, (317, 211))
    assert h / w == pytest.approx(211 / 317)


def test_placement_scales_with_image_size():
    spec = WatermarkSpec(position_x_pct=30, position_y_pct=70, font_size_pct=10)
    for width, height in [(1000, 500), (333, 777), (4096, 2160)]:
        g = resolve_geometry(width, height, spec)
        assert g.anchor_x / width == pytest.approx(0.3)
        assert g.anchor_y / height == pytest.approx(0.7)
        assert g.size_px / width == pytest.approx(0.1)


def test_font_size_follows_width_not_height():
    spec = WatermarkSpec(font_size_pct=20)
    assert resolve_geometry(100, 5000, spec).size_px == pytest.approx(20)
