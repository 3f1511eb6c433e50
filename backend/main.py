from __future__ import annotations

import time
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import BaseModel, Field

from api.runtime import LayerRuntime, get_runtime
from geo.projection import LonLat
from geo.region import Region
from layers.registry import list_layers
from telemetry.logging import setup_logging
from telemetry.singleton import get_store, reset_store
from tiles.loaders import tile_from_payload

setup_logging()

app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ApiPoint(BaseModel):
    x: float
    y: float


class ApiCoord(BaseModel):
    x: int
    y: int
    z: int = 0


class ApiFeature(BaseModel):
    id: str | int | None = None
    properties: dict[str, Any] = Field(default_factory=dict)
    point: ApiPoint


class ApiTile(BaseModel):
    coord: ApiCoord
    features: list[ApiFeature] = Field(default_factory=list)


class ApiClick(BaseModel):
    featureId: str | int


class ApiSelectMany(BaseModel):
    featureIds: list[str | int] = Field(default_factory=list)


class ApiBounds(BaseModel):
    minLon: float
    minLat: float
    maxLon: float
    maxLat: float


class ApiRegion(BaseModel):
    """
    One of: two projected corners, a projected vertex ring (drawn shape),
    or a lon/lat bbox projected at `zoom`.
    """

    corners: list[ApiPoint] | None = None
    ring: list[ApiPoint] | None = None
    bounds: ApiBounds | None = None
    zoom: float | None = None


def _runtime(layer_id: str) -> LayerRuntime:
    rt = get_runtime(layer_id)
    if rt is None:
        raise HTTPException(status_code=404, detail=f"Unknown layer: {layer_id}")
    return rt


def _selection_payload(rt: LayerRuntime, *, t0: float) -> dict[str, Any]:
    return {
        "layerId": rt.config.id,
        "selected": list(rt.layer.selected_ids),
        "count": len(rt.layer.selection),
        "clearShape": rt.take_clear_shape(),
        "timingsMs": {"total": (time.perf_counter() - t0) * 1000.0},
    }


def _record(
    rt: LayerRuntime,
    operation: str,
    payload: dict[str, Any],
    *,
    region: Region | None = None,
) -> None:
    store = get_store()
    if store is None:
        return
    store.record(
        operation=operation,
        layer_id=rt.config.id,
        selected_count=int(payload.get("count") or 0),
        region=region.as_tuple() if region is not None else None,
        stats={"timingsMs": payload.get("timingsMs") or {}, "tiles": len(rt.store)},
    )


@app.get("/layers")
def get_layers():
    return {"layers": [cfg.model_dump() for cfg in list_layers()]}


@app.post("/layers/{layer_id}/tiles")
def load_tile(layer_id: str, body: ApiTile):
    rt = _runtime(layer_id)
    with rt.lock:
        tile = rt.store.load_tile(tile_from_payload(body.model_dump()))
        rt.set_zoom(tile.coord.z)
        return {"key": tile.key, "features": len(tile.features), "tiles": len(rt.store)}


@app.delete("/layers/{layer_id}/tiles/{key}")
def evict_tile(layer_id: str, key: str):
    rt = _runtime(layer_id)
    with rt.lock:
        tile = rt.store.evict_tile(key)
        return {"key": key, "evicted": tile is not None, "tiles": len(rt.store)}


@app.post("/layers/{layer_id}/click")
def click(layer_id: str, body: ApiClick):
    rt = _runtime(layer_id)
    with rt.lock:
        t0 = time.perf_counter()
        rt.layer.on_click(str(body.featureId))
        out = _selection_payload(rt, t0=t0)
    _record(rt, "click", out)
    return out


@app.post("/layers/{layer_id}/select")
def select_many(layer_id: str, body: ApiSelectMany):
    rt = _runtime(layer_id)
    with rt.lock:
        t0 = time.perf_counter()
        rt.layer.select_features([str(fid) for fid in body.featureIds])
        out = _selection_payload(rt, t0=t0)
    _record(rt, "select", out)
    return out


@app.post("/layers/{layer_id}/region")
def select_region(layer_id: str, body: ApiRegion):
    rt = _runtime(layer_id)
    with rt.lock:
        t0 = time.perf_counter()
        if body.zoom is not None:
            rt.set_zoom(body.zoom)

        if body.corners is not None:
            if len(body.corners) != 2:
                raise HTTPException(
                    status_code=422, detail="`corners` needs exactly two points"
                )
            a, b = body.corners
            region = Region.from_corners((a.x, a.y), (b.x, b.y))
        elif body.ring:
            region = Region.from_ring([(p.x, p.y) for p in body.ring])
        elif body.bounds is not None:
            projection = rt.layer.projection
            if projection is None:
                raise HTTPException(
                    status_code=409, detail="Layer has no projection for `bounds`"
                )
            sw = projection.project(LonLat(lon=body.bounds.minLon, lat=body.bounds.minLat))
            ne = projection.project(LonLat(lon=body.bounds.maxLon, lat=body.bounds.maxLat))
            region = Region.from_corners(sw, ne)
        else:
            raise HTTPException(
                status_code=422, detail="Region needs `corners`, `ring` or `bounds`"
            )

        rt.layer.select_region(region)
        out = _selection_payload(rt, t0=t0)
        out["region"] = list(region.as_tuple())
    _record(rt, "region", out, region=region)
    return out


@app.post("/layers/{layer_id}/clear")
def clear(layer_id: str):
    rt = _runtime(layer_id)
    with rt.lock:
        t0 = time.perf_counter()
        rt.layer.clear_selected()
        out = _selection_payload(rt, t0=t0)
    _record(rt, "clear", out)
    return out


@app.get("/layers/{layer_id}/selection")
def get_selection(layer_id: str):
    rt = _runtime(layer_id)
    with rt.lock:
        lonlats = rt.layer.selected_lonlats()
        records = []
        for r in rt.layer.selected_records():
            ll = lonlats.get(r.id)
            records.append(
                {
                    "id": r.id,
                    "sourcefile": r.sourcefile,
                    "x": r.x,
                    "y": r.y,
                    "lon": ll.lon if ll is not None else None,
                    "lat": ll.lat if ll is not None else None,
                }
            )
        return {
            "layerId": rt.config.id,
            "selected": list(rt.layer.selected_ids),
            "records": records,
            "styles": {
                fid: rt.styles.style_for(fid).to_dict() for fid in rt.layer.selected_ids
            },
        }


def _export(rt: LayerRuntime):
    with rt.lock:
        t0 = time.perf_counter()
        rt.last_artifact = None
        artifact = rt.layer.export_selected_csv()
        delivered = rt.last_artifact
        out = {
            "count": artifact.record_count if artifact is not None else 0,
            "timingsMs": {"total": (time.perf_counter() - t0) * 1000.0},
        }
    _record(rt, "export", out)
    return delivered


@app.get("/layers/{layer_id}/export.csv")
def export_csv(layer_id: str):
    rt = _runtime(layer_id)
    artifact = _export(rt)
    if artifact is None:
        return Response(status_code=204)
    return Response(content=artifact.text, media_type=artifact.media_type)


@app.get("/layers/{layer_id}/export")
def export_uri(layer_id: str):
    rt = _runtime(layer_id)
    artifact = _export(rt)
    if artifact is None:
        return Response(status_code=204)
    return {"uri": artifact.uri, "count": artifact.record_count}


@app.delete("/layers/{layer_id}")
def teardown_layer(layer_id: str):
    rt = _runtime(layer_id)
    with rt.lock:
        rt.teardown()
    return {"layerId": rt.config.id, "tiles": len(rt.store)}


@app.get("/telemetry/summary")
def telemetry_summary(
    operation: str | None = None,
    layerId: str | None = None,
    sinceMs: int | None = None,
):
    store = get_store()
    if store is None:
        return {"enabled": False, "summary": []}
    summary = store.summary(operation=operation, layer_id=layerId, since_ms=sinceMs)
    return {"enabled": True, "summary": summary}


@app.post("/telemetry/reset")
def telemetry_reset():
    reset_store()
    return {"ok": True}

