from __future__ import annotations

import threading
from dataclasses import dataclass, field

from export.csv import CsvArtifact
from geo.projection import WebMercatorProjection
from layers.registry import get_layer_config
from layers.types import LayerConfig
from selection.layer import SelectableLayer
from selection.style import FeatureStyles
from tiles.store import TileStore


@dataclass
class LayerRuntime:
    """
    Server-side stand-in for one map layer: its loaded tiles, per-feature styles and
    selection, plus the outbound notifications the frontend should act on.
    """

    config: LayerConfig
    store: TileStore = field(default_factory=TileStore)
    styles: FeatureStyles = field(init=False)
    layer: SelectableLayer = field(init=False)
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    clear_shape_pending: bool = False
    last_artifact: CsvArtifact | None = None

    def __post_init__(self) -> None:
        self.styles = FeatureStyles(default=self.config.defaultStyle.to_style())
        self.layer = SelectableLayer(
            tiles=self.store.tiles,
            styles=self.styles,
            projection=WebMercatorProjection(zoom=0, tile_size=self.config.tileSize),
            tile_size=self.config.tile_size(),
            selected_style=self.config.selectedStyle.to_style(),
            deliver=self._deliver,
        )
        self.layer.on_clear_shape(self._clear_shape)

    def set_zoom(self, zoom: float) -> None:
        self.layer.projection = WebMercatorProjection(
            zoom=float(zoom), tile_size=self.config.tileSize
        )

    def take_clear_shape(self) -> bool:
        pending = self.clear_shape_pending
        self.clear_shape_pending = False
        return pending

    def teardown(self) -> None:
        self.layer.teardown()
        self.store.clear()
        self.last_artifact = None

    def _clear_shape(self) -> None:
        self.clear_shape_pending = True

    def _deliver(self, artifact: CsvArtifact) -> None:
        self.last_artifact = artifact


_RUNTIMES: dict[str, LayerRuntime] = {}
_RUNTIMES_LOCK = threading.RLock()


def get_runtime(layer_id: str) -> LayerRuntime | None:
    with _RUNTIMES_LOCK:
        rt = _RUNTIMES.get(layer_id)
        if rt is not None:
            return rt
        cfg = get_layer_config(layer_id)
        if cfg is None:
            return None
        rt = LayerRuntime(config=cfg)
        _RUNTIMES[cfg.id] = rt
        return rt


def reset_runtimes() -> None:
    with _RUNTIMES_LOCK:
        for rt in _RUNTIMES.values():
            rt.teardown()
        _RUNTIMES.clear()
