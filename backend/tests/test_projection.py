from __future__ import annotations

import pytest

from geo.projection import LonLat, WebMercatorProjection, feature_lonlat
from geo.region import ProjectedPoint
from tiles.types import Feature, TileCoord, TilePoint, TileSize


def test_world_center_unprojects_to_null_island():
    ll = WebMercatorProjection(zoom=0).unproject(ProjectedPoint(128, 128))
    assert ll.lon == pytest.approx(0.0, abs=1e-9)
    assert ll.lat == pytest.approx(0.0, abs=1e-9)


def test_world_corner_unprojects_to_mercator_limits():
    ll = WebMercatorProjection(zoom=0).unproject(ProjectedPoint(0, 0))
    assert ll.lon == pytest.approx(-180.0, abs=1e-6)
    assert ll.lat == pytest.approx(85.0511287798, abs=1e-6)


def test_project_unproject_roundtrip_at_zoom():
    proj = WebMercatorProjection(zoom=5)
    p = proj.project(LonLat(lon=14.4378, lat=50.0755))
    back = proj.unproject(p)
    assert back.lon == pytest.approx(14.4378, abs=1e-7)
    assert back.lat == pytest.approx(50.0755, abs=1e-7)


def test_project_clamps_polar_latitudes():
    proj = WebMercatorProjection(zoom=0)
    assert proj.project(LonLat(lon=0, lat=90)).y == pytest.approx(0.0, abs=1e-6)


def test_feature_lonlat_goes_through_tile_offset():
    proj = WebMercatorProjection(zoom=1)
    f = Feature(id="a", point=TilePoint(0, 0), properties={})
    # Top-left of tile (1, 1) at zoom 1 is the world center.
    ll = feature_lonlat(f, TileSize(), TileCoord(1, 1, 1), proj)
    assert ll.lon == pytest.approx(0.0, abs=1e-9)
    assert ll.lat == pytest.approx(0.0, abs=1e-9)
