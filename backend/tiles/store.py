from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Mapping

from loguru import logger

from tiles.types import Feature, Tile


@dataclass
class TileStore:
    """
    The host's collection of currently loaded tiles.

    Tiles load in and evict out independently of selection. Feature ids are expected
    to be unique across loaded tiles; when a newly loaded tile repeats an id, the new
    copy shadows the older one until its tile is evicted, then the older copy is
    visible again. Loaded tiles themselves are never modified.
    """

    _tiles: dict[str, Tile] = field(default_factory=dict, repr=False)
    # Per feature id: keys of the tiles carrying it, current owner last.
    _owners: dict[str, list[str]] = field(default_factory=dict, repr=False)

    @property
    def tiles(self) -> Mapping[str, Tile]:
        return OwnedTilesView(self)

    def __len__(self) -> int:
        return len(self._tiles)

    def __contains__(self, key: object) -> bool:
        return key in self._tiles

    def get(self, key: str) -> Tile | None:
        return self._tiles.get(key)

    def owner_of(self, feature_id: str) -> str | None:
        keys = self._owners.get(feature_id)
        return keys[-1] if keys else None

    def load_tile(self, tile: Tile) -> Tile:
        key = tile.key
        if key in self._tiles:
            self.evict_tile(key)

        self._tiles[key] = tile
        for fid in tile.features:
            keys = self._owners.setdefault(fid, [])
            if keys:
                logger.warning(
                    f"Feature id collision: {fid!r} in tile {key} shadows tile {keys[-1]}"
                )
            keys.append(key)
        return tile

    def evict_tile(self, key: str) -> Tile | None:
        tile = self._tiles.pop(key, None)
        if tile is None:
            return None
        for fid in tile.features:
            keys = self._owners.get(fid)
            if not keys:
                continue
            if key in keys:
                keys.remove(key)
            if not keys:
                del self._owners[fid]
        return tile

    def find_feature(self, feature_id: str) -> tuple[Tile, Feature] | None:
        key = self.owner_of(feature_id)
        tile = self._tiles.get(key) if key is not None else None
        if tile is None:
            return None
        feature = tile.features.get(feature_id)
        if feature is None:
            return None
        return tile, feature

    def clear(self) -> None:
        self._tiles.clear()
        self._owners.clear()


class OwnedTilesView(Mapping[str, Tile]):
    """
    Live read-only view of a store's tiles where each id shows up only in the tile
    that currently owns it.
    """

    def __init__(self, store: TileStore) -> None:
        self._store = store

    def __getitem__(self, key: str) -> Tile:
        tile = self._store._tiles[key]
        shadowed = {fid for fid in tile.features if self._store.owner_of(fid) != key}
        if not shadowed:
            return tile
        return Tile(
            coord=tile.coord,
            features={
                fid: f for fid, f in tile.features.items() if fid not in shadowed
            },
        )

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._store._tiles))

    def __len__(self) -> int:
        return len(self._store._tiles)
