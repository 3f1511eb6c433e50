from __future__ import annotations

import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Protocol

from pyproj import Transformer

from geo.region import ProjectedPoint
from geo.tiles import tile_point_to_projected
from tiles.types import Feature, TileCoord, TileSize

EARTH_RADIUS_M = 6378137.0
_MAX_MERCATOR_LAT = 85.05112878


@dataclass(frozen=True)
class LonLat:
    lon: float
    lat: float


class ProjectionService(Protocol):
    """
    Map projection between global pixel space and geographic coordinates.
    """

    def unproject(self, point: ProjectedPoint) -> LonLat: ...

    def project(self, lonlat: LonLat) -> ProjectedPoint: ...


@lru_cache(maxsize=1)
def transformer_3857_to_4326() -> Transformer:
    return Transformer.from_crs("EPSG:3857", "EPSG:4326", always_xy=True)


@lru_cache(maxsize=1)
def transformer_4326_to_3857() -> Transformer:
    return Transformer.from_crs("EPSG:4326", "EPSG:3857", always_xy=True)


@dataclass(frozen=True)
class WebMercatorProjection:
    """
    Spherical-Mercator pixel space at a fixed zoom.

    Pixel (0, 0) is the north-west corner of the world; the world is
    `tile_size * 2**zoom` pixels wide. Pixels map linearly onto EPSG:3857 metres,
    which pyproj converts to lon/lat.
    """

    zoom: float
    tile_size: float = 256.0

    @property
    def scale(self) -> float:
        return float(self.tile_size) * (2.0 ** float(self.zoom))

    def unproject(self, point: ProjectedPoint) -> LonLat:
        half_world = math.pi * EARTH_RADIUS_M
        mx = (float(point.x) / self.scale - 0.5) * 2.0 * half_world
        my = (0.5 - float(point.y) / self.scale) * 2.0 * half_world
        lon, lat = transformer_3857_to_4326().transform(mx, my)
        return LonLat(lon=float(lon), lat=float(lat))

    def project(self, lonlat: LonLat) -> ProjectedPoint:
        lat = max(-_MAX_MERCATOR_LAT, min(_MAX_MERCATOR_LAT, float(lonlat.lat)))
        mx, my = transformer_4326_to_3857().transform(float(lonlat.lon), lat)
        half_world = math.pi * EARTH_RADIUS_M
        return ProjectedPoint(
            x=(float(mx) / (2.0 * half_world) + 0.5) * self.scale,
            y=(0.5 - float(my) / (2.0 * half_world)) * self.scale,
        )


def feature_lonlat(
    feature: Feature,
    tile_size: TileSize,
    tile_coord: TileCoord,
    projection: ProjectionService,
) -> LonLat:
    """
    Tile-local feature point -> global pixels -> lon/lat.
    """
    projected = tile_point_to_projected(feature.point, tile_size, tile_coord)
    return projection.unproject(projected)
