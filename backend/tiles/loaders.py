from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from tiles.types import Feature, Tile, TileCoord, TilePoint


def tile_from_payload(payload: dict[str, Any]) -> Tile:
    """
    Build a `Tile` from a decoded vector-tile payload:

        {"coord": {"x": 0, "y": 0, "z": 0},
         "features": [{"id": "a", "properties": {...}, "point": {"x": 3, "y": 4}}, ...]}

    Features without a usable point are dropped; ids fall back to `properties.id`.
    """
    coord_raw = payload.get("coord") or {}
    coord = TileCoord(
        x=int(coord_raw.get("x", 0)),
        y=int(coord_raw.get("y", 0)),
        z=int(coord_raw.get("z", 0)),
    )

    features: dict[str, Feature] = {}
    for i, raw in enumerate(payload.get("features") or []):
        feature = feature_from_payload(raw or {}, fallback_id=f"{coord.key}/{i}")
        if feature is None:
            continue
        # Later duplicates inside one tile replace earlier ones.
        features[feature.id] = feature

    return Tile(coord=coord, features=features)


def feature_from_payload(raw: dict[str, Any], *, fallback_id: str) -> Feature | None:
    props = dict(raw.get("properties") or {})
    point = _to_point(raw.get("point"))
    if point is None:
        return None

    fid = raw.get("id")
    if fid is None:
        fid = props.get("id")
    fid = str(fid) if fid is not None else fallback_id

    # Exported records read the id from the attribute record.
    props["id"] = fid
    return Feature(id=fid, point=point, properties=props)


def load_tiles_json(path: Path) -> list[Tile]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("tiles") or []
    if not isinstance(data, list):
        raise ValueError(f"Invalid tiles json root: {path}")
    return [tile_from_payload(t) for t in data if isinstance(t, dict)]


def _to_point(raw: Any) -> TilePoint | None:
    if raw is None:
        return None
    if isinstance(raw, dict):
        x, y = raw.get("x"), raw.get("y")
    elif isinstance(raw, (list, tuple)) and len(raw) >= 2:
        x, y = raw[0], raw[1]
    else:
        return None
    if x is None or y is None:
        return None
    return TilePoint(x=float(x), y=float(y))
