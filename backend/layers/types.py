from __future__ import annotations

from pydantic import BaseModel, Field

from selection.style import StyleSpec
from tiles.types import TileSize


class LayerStyle(BaseModel):
    """
    Point style as written in YAML (renderer field names).
    """

    weight: float = 1
    fillColor: str = "red"
    color: str = "red"
    opacity: float = Field(default=1, ge=0.0, le=1.0)
    fillOpacity: float = Field(default=1, ge=0.0, le=1.0)
    fill: bool = True
    radius: float = Field(default=3, ge=0.0)

    def to_style(self) -> StyleSpec:
        return StyleSpec(
            weight=self.weight,
            fill_color=self.fillColor,
            color=self.color,
            opacity=self.opacity,
            fill_opacity=self.fillOpacity,
            fill=self.fill,
            radius=self.radius,
        )


def _selected_style() -> LayerStyle:
    return LayerStyle(fillColor="yellow", color="yellow")


class LayerConfig(BaseModel):
    """
    A selectable vector-tile point layer.

    `vectorLayer` is the layer name inside the vector tiles that `defaultStyle` applies to.
    """

    id: str
    title: str = ""
    enabled: bool = True
    vectorLayer: str = "points"
    tileSize: float = Field(default=256.0, gt=0.0)
    maxZoom: int = Field(default=8, ge=0, le=24)
    noWrap: bool = True
    interactive: bool = True
    defaultStyle: LayerStyle = Field(default_factory=LayerStyle)
    selectedStyle: LayerStyle = Field(default_factory=_selected_style)

    def tile_size(self) -> TileSize:
        return TileSize(x=self.tileSize, y=self.tileSize)


class LayersFile(BaseModel):
    layers: list[LayerConfig] = Field(default_factory=list)
