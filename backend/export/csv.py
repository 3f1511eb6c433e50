from __future__ import annotations

from dataclasses import dataclass
import math
from decimal import Decimal
from typing import Any, Callable, Iterable, NamedTuple
from urllib.parse import quote

from loguru import logger

from tiles.types import Feature, TileCollection

CSV_MEDIA_TYPE = "text/csv;charset=utf-8"

# Characters encodeURI leaves alone (besides ASCII letters and digits).
_URI_SAFE = ";,/?:@&=+$-_.!~*'()#"


class ExportRecord(NamedTuple):
    id: str
    sourcefile: Any
    x: float
    y: float


@dataclass(frozen=True)
class CsvArtifact:
    text: str
    uri: str
    record_count: int
    media_type: str = CSV_MEDIA_TYPE


def to_records(selection: Iterable[str], tiles: TileCollection) -> list[ExportRecord]:
    """
    One record per selected id that still resolves to a loaded feature.

    Ids whose tile has been evicted are skipped; records follow selection order.
    """
    live: dict[str, Feature] = {}
    for tile in list(tiles.values()):
        for fid, feature in list(tile.features.items()):
            live.setdefault(fid, feature)

    out: list[ExportRecord] = []
    for fid in selection:
        feature = live.get(str(fid))
        if feature is None:
            logger.debug(f"Export skips {fid!r}: not in any loaded tile")
            continue
        out.append(
            ExportRecord(
                id=feature.properties.get("id", feature.id),
                sourcefile=feature.sourcefile,
                x=feature.point.x,
                y=feature.point.y,
            )
        )
    return out


def serialize_csv(records: Iterable[ExportRecord]) -> str:
    """
    `id,sourcefile,x,y` rows joined by newlines. No header, no quoting: values that
    contain commas or newlines are written as-is.
    """
    return "\n".join(",".join(_field(v) for v in record) for record in records)


def csv_data_uri(text: str) -> str:
    return quote(f"data:{CSV_MEDIA_TYPE},{text}", safe=_URI_SAFE)


def export_selected_csv(
    selection: Iterable[str],
    tiles: TileCollection,
    deliver: Callable[[CsvArtifact], None] | None = None,
) -> CsvArtifact | None:
    """
    Build the CSV artifact for the current selection and hand it to `deliver`.

    Nothing is built or delivered when no selected id resolves.
    """
    records = to_records(selection, tiles)
    if not records:
        logger.debug("Export skipped: no selected feature resolves")
        return None

    text = serialize_csv(records)
    artifact = CsvArtifact(text=text, uri=csv_data_uri(text), record_count=len(records))
    if deliver is not None:
        deliver(artifact)
    return artifact


def _field(v: Any) -> str:
    if v is None:
        return ""
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, float):
        return _js_number(v)
    return str(v)


def _js_number(v: float) -> str:
    """
    Format a float the way JavaScript stringifies numbers (`3`, `0.5`, `1e-7`, `1e+21`).
    """
    if math.isnan(v):
        return "NaN"
    if math.isinf(v):
        return "Infinity" if v > 0 else "-Infinity"
    if v == 0:
        return "0"

    sign = "-" if v < 0 else ""
    _, digit_tuple, exp = Decimal(repr(abs(v))).as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    stripped = digits.rstrip("0")
    exp += len(digits) - len(stripped)
    digits = stripped
    k = len(digits)
    # Decimal point position relative to the start of `digits`.
    n = k + exp

    if k <= n <= 21:
        return sign + digits + "0" * (n - k)
    if 0 < n <= 21:
        return sign + digits[:n] + "." + digits[n:]
    if -6 < n <= 0:
        return sign + "0." + "0" * (-n) + digits
    e = n - 1
    mantissa = digits[0] + ("." + digits[1:] if k > 1 else "")
    return f"{sign}{mantissa}e{'+' if e > 0 else '-'}{abs(e)}"
