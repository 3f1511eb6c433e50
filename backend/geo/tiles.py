from __future__ import annotations

from geo.region import ProjectedPoint
from tiles.types import TileCoord, TilePoint, TileSize

# Canonical tile pixel size that feature coordinates are extent-normalized against.
REFERENCE_SIZE = 256.0


def tile_offset(tile_size: TileSize, tile_coord: TileCoord) -> ProjectedPoint:
    """
    Global pixel position of a tile's top-left corner.
    """
    return ProjectedPoint(
        x=float(tile_coord.x) * float(tile_size.x),
        y=float(tile_coord.y) * float(tile_size.y),
    )


def tile_point_to_projected(
    point: TilePoint, tile_size: TileSize, tile_coord: TileCoord
) -> ProjectedPoint:
    """
    Convert a tile-local point into the map's global pixel space.

    Tiles are assumed square; only `tile_size.x` scales the local coordinates.
    """
    px_per_extent = float(tile_size.x) / REFERENCE_SIZE
    offset = tile_offset(tile_size, tile_coord)
    return ProjectedPoint(
        x=offset.x + float(point.x) * px_per_extent,
        y=offset.y + float(point.y) * px_per_extent,
    )
