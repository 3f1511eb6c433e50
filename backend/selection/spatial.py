from __future__ import annotations

from geo.region import Region
from geo.tiles import tile_point_to_projected
from tiles.types import TileCollection, TileSize


def select_within(
    region: Region, tiles: TileCollection, tile_size: TileSize | None = None
) -> list[str]:
    """
    Ids of every loaded point feature whose projected position lies inside `region`.

    Full scan over the loaded tiles (no spatial index: only tiles resident for
    rendering are ever scanned). Each match appears once, in discovery order.
    """
    size = tile_size or TileSize()
    out: list[str] = []
    seen: set[str] = set()

    # Snapshot: the tile loader may add/evict tiles independently of us.
    for tile in list(tiles.values()):
        for fid, feature in list(tile.features.items()):
            p = tile_point_to_projected(feature.point, size, tile.coord)
            if not region.contains(p.x, p.y):
                continue
            if fid in seen:
                continue
            seen.add(fid)
            out.append(fid)

    return out
