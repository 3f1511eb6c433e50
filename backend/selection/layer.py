from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, Sequence

from loguru import logger

from export.csv import CsvArtifact, ExportRecord, export_selected_csv, to_records
from geo.projection import LonLat, ProjectionService, feature_lonlat
from geo.region import ProjectedPoint, Region
from selection.spatial import select_within
from selection.state import SelectionState
from selection.style import SELECTED_STYLE, StyleApplier, StyleSpec
from tiles.types import TileCollection, TileSize

ClearShapeListener = Callable[[], None]
DeliverArtifact = Callable[[CsvArtifact], None]


@dataclass
class SelectableLayer:
    """
    Click / draw-a-box selection over a vector-tile point layer.

    The layer owns the selection; tiles, styling and projection belong to the host.
    Each public method runs to completion synchronously within one event.
    """

    tiles: TileCollection
    styles: StyleApplier
    projection: ProjectionService | None = None
    tile_size: TileSize = field(default_factory=TileSize)
    selected_style: StyleSpec = SELECTED_STYLE
    deliver: DeliverArtifact | None = None
    _clear_shape_listeners: list[ClearShapeListener] = field(
        default_factory=list, repr=False
    )
    _selection: SelectionState = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._selection = SelectionState(
            styles=self.styles, selected_style=self.selected_style
        )

    @property
    def selection(self) -> SelectionState:
        return self._selection

    @property
    def selected_ids(self) -> tuple[str, ...]:
        return self.selection.ids

    def on_clear_shape(self, listener: ClearShapeListener) -> None:
        """
        Register a listener for "remove any drawn shape" (e.g. the draw tool).
        """
        self._clear_shape_listeners.append(listener)

    # Event handlers

    def on_click(self, feature_id: str) -> None:
        self.select_feature(feature_id)

    def on_region_drawn(
        self,
        corner_a: ProjectedPoint | Sequence[float],
        corner_b: ProjectedPoint | Sequence[float],
    ) -> list[str]:
        return self.select_region(Region.from_corners(corner_a, corner_b))

    # Operations exposed to the host

    def select_feature(self, feature_id: str) -> None:
        """
        Select a single clicked point; clicking the only selected point deselects it.
        """
        fid = str(feature_id)
        if self.selection.ids == (fid,):
            self.selection.select(fid)
            logger.info(f"Deselected feature {fid}")
            return
        self._notify_clear_shape()
        self.selection.select(fid)
        logger.info(f"Selected feature {fid}")

    def select_features(self, feature_ids: Iterable[str]) -> None:
        self.selection.select_many(feature_ids)

    def select_region(self, region: Region) -> list[str]:
        ids = select_within(region, self.tiles, self.tile_size)
        self.selection.select_many(ids)
        logger.info(
            f"Region {region.as_tuple()} matched {len(ids)} feature(s) "
            f"across {len(self.tiles)} tile(s)"
        )
        return ids

    def select_geo_bounds(self, corner_a: LonLat, corner_b: LonLat) -> list[str]:
        """
        Region selection from a lon/lat box (as drawing tools usually report it).
        """
        if self.projection is None:
            raise ValueError("Geographic bounds need a projection service")
        a = self.projection.project(corner_a)
        b = self.projection.project(corner_b)
        return self.select_region(Region.from_corners(a, b))

    def clear_selected(self) -> None:
        self.selection.clear()

    def selected_records(self) -> list[ExportRecord]:
        return to_records(self.selection.ids, self.tiles)

    def selected_lonlats(self) -> dict[str, LonLat]:
        if self.projection is None:
            return {}
        wanted = set(self.selection.ids)
        out: dict[str, LonLat] = {}
        for tile in list(self.tiles.values()):
            for fid, feature in list(tile.features.items()):
                if fid not in wanted or fid in out:
                    continue
                out[fid] = feature_lonlat(
                    feature, self.tile_size, tile.coord, self.projection
                )
        return out

    def export_selected_csv(self) -> CsvArtifact | None:
        return export_selected_csv(self.selection.ids, self.tiles, self.deliver)

    def teardown(self) -> None:
        self.selection.clear()
        self._clear_shape_listeners.clear()

    def _notify_clear_shape(self) -> None:
        for listener in list(self._clear_shape_listeners):
            listener()
