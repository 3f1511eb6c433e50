from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, TypeAlias


@dataclass(frozen=True)
class TileCoord:
    x: int
    y: int
    z: int

    @property
    def key(self) -> str:
        return tile_key(self.x, self.y, self.z)


@dataclass(frozen=True)
class TileSize:
    x: float = 256.0
    y: float = 256.0


@dataclass(frozen=True)
class TilePoint:
    """
    Point in tile-pixel units, relative to the tile's top-left corner.
    """

    x: float
    y: float


@dataclass(frozen=True)
class Feature:
    id: str
    point: TilePoint
    # Attribute record; ingestion guarantees `id` is present, `sourcefile` usually is.
    properties: dict[str, Any] = field(default_factory=dict)

    @property
    def sourcefile(self) -> Any:
        return self.properties.get("sourcefile")


@dataclass
class Tile:
    """
    A loaded vector tile: its coordinate and the point features it carries.

    Tiles are owned by the tile collection; selection code only reads them.
    """

    coord: TileCoord
    features: dict[str, Feature] = field(default_factory=dict)

    @property
    def key(self) -> str:
        return self.coord.key


# Whatever the host keeps its loaded tiles in, keyed by tile key.
TileCollection: TypeAlias = Mapping[str, Tile]


def tile_key(x: int, y: int, z: int) -> str:
    return f"{int(x)}:{int(y)}:{int(z)}"
