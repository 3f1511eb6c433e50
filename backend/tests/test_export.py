from __future__ import annotations

from urllib.parse import unquote

from export.csv import (
    CSV_MEDIA_TYPE,
    ExportRecord,
    csv_data_uri,
    export_selected_csv,
    serialize_csv,
    to_records,
)
from tiles.types import Feature, Tile, TileCoord, TilePoint


def _feature(fid: str, sourcefile, x: float, y: float) -> Feature:
    return Feature(
        id=fid, point=TilePoint(x, y), properties={"id": fid, "sourcefile": sourcefile}
    )


def _tiles(*tiles: Tile) -> dict[str, Tile]:
    return {t.key: t for t in tiles}


def test_single_selected_feature_becomes_one_record():
    tiles = _tiles(Tile(TileCoord(0, 0, 0), {"a": _feature("a", "s1", 3, 4)}))
    records = to_records(["a"], tiles)
    assert records == [("a", "s1", 3, 4)]
    assert serialize_csv(records) == "a,s1,3,4"


def test_records_follow_selection_order_across_tiles():
    tiles = _tiles(
        Tile(TileCoord(0, 0, 1), {"a": _feature("a", "s1", 1, 2)}),
        Tile(TileCoord(1, 0, 1), {"b": _feature("b", "s2", 5.5, 6)}),
    )
    records = to_records(["b", "a"], tiles)
    assert [r.id for r in records] == ["b", "a"]
    assert serialize_csv(records) == "b,s2,5.5,6\na,s1,1,2"


def test_ids_missing_from_store_are_skipped():
    tiles = _tiles(Tile(TileCoord(0, 0, 0), {"a": _feature("a", "s1", 3, 4)}))
    assert to_records(["gone", "a", "also-gone"], tiles) == [("a", "s1", 3, 4)]
    assert to_records(["a"], {}) == []


def test_serialize_does_not_quote_delimiters():
    records = [ExportRecord(id="a", sourcefile="x,y.cub", x=1, y=2)]
    assert serialize_csv(records) == "a,x,y.cub,1,2"


def test_missing_sourcefile_serializes_as_empty_field():
    records = [ExportRecord(id="a", sourcefile=None, x=1, y=2)]
    assert serialize_csv(records) == "a,,1,2"


def test_numbers_serialize_like_javascript():
    records = [
        ExportRecord(id="a", sourcefile="s", x=1e-7, y=0.000001),
        ExportRecord(id="b", sourcefile="s", x=1e21, y=1.5e-10),
        ExportRecord(id="c", sourcefile="s", x=-12.25, y=3.0),
    ]
    assert serialize_csv(records) == (
        "a,s,1e-7,0.000001\nb,s,1e+21,1.5e-10\nc,s,-12.25,3"
    )


def test_data_uri_is_uri_encoded_csv():
    uri = csv_data_uri("a,s 1,3,4\nb,s2,5,6")
    assert uri.startswith(f"data:{CSV_MEDIA_TYPE},")
    assert "%0A" in uri
    assert "%20" in uri
    assert unquote(uri) == f"data:{CSV_MEDIA_TYPE},a,s 1,3,4\nb,s2,5,6"


def test_export_with_nothing_resolving_delivers_nothing():
    delivered = []
    assert export_selected_csv([], {}, delivered.append) is None
    assert export_selected_csv(["gone"], {}, delivered.append) is None
    assert delivered == []


def test_export_delivers_artifact():
    tiles = _tiles(Tile(TileCoord(0, 0, 0), {"a": _feature("a", "s1", 3, 4)}))
    delivered = []
    artifact = export_selected_csv(["a"], tiles, delivered.append)
    assert artifact is not None
    assert delivered == [artifact]
    assert artifact.text == "a,s1,3,4"
    assert artifact.record_count == 1
    assert artifact.uri == "data:text/csv;charset=utf-8,a,s1,3,4"
