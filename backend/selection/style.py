from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True)
class StyleSpec:
    """
    Point style as understood by the renderer.
    """

    weight: float = 1
    fill_color: str = "red"
    color: str = "red"
    opacity: float = 1
    fill_opacity: float = 1
    fill: bool = True
    radius: float = 3

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        return {
            "weight": d["weight"],
            "fillColor": d["fill_color"],
            "color": d["color"],
            "opacity": d["opacity"],
            "fillOpacity": d["fill_opacity"],
            "fill": d["fill"],
            "radius": d["radius"],
        }


DEFAULT_STYLE = StyleSpec()
SELECTED_STYLE = StyleSpec(fill_color="yellow", color="yellow")


class StyleApplier(Protocol):
    """
    Renderer hook for per-feature styling.

    `reset` restores whatever the layer's default style is for that feature.
    """

    def apply(self, style: StyleSpec, feature_id: str) -> None: ...

    def reset(self, feature_id: str) -> None: ...


@dataclass
class FeatureStyles:
    """
    In-memory StyleApplier: keeps per-feature overrides on top of a default style.

    The HTTP adapter reports these to the frontend, which does the actual drawing.
    """

    default: StyleSpec = DEFAULT_STYLE
    _overrides: dict[str, StyleSpec] = field(default_factory=dict, repr=False)

    def apply(self, style: StyleSpec, feature_id: str) -> None:
        self._overrides[str(feature_id)] = style

    def reset(self, feature_id: str) -> None:
        self._overrides.pop(str(feature_id), None)

    def style_for(self, feature_id: str) -> StyleSpec:
        return self._overrides.get(str(feature_id), self.default)

    def overridden_ids(self) -> list[str]:
        return list(self._overrides.keys())
