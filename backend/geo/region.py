from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from shapely.geometry import MultiPoint


@dataclass(frozen=True)
class ProjectedPoint:
    """
    Point in the map's global pixel space at the current zoom.
    """

    x: float
    y: float


@dataclass(frozen=True)
class Region:
    """
    Axis-aligned box in projected (global pixel) coordinates.

    Always normalized: build it with `from_corners` / `from_ring` so callers never depend
    on which corner was listed first.
    """

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    def __post_init__(self) -> None:
        if self.min_x > self.max_x:
            lo, hi = self.max_x, self.min_x
            object.__setattr__(self, "min_x", lo)
            object.__setattr__(self, "max_x", hi)
        if self.min_y > self.max_y:
            lo, hi = self.max_y, self.min_y
            object.__setattr__(self, "min_y", lo)
            object.__setattr__(self, "max_y", hi)

    @classmethod
    def from_corners(
        cls, a: ProjectedPoint | Sequence[float], b: ProjectedPoint | Sequence[float]
    ) -> "Region":
        ax, ay = _xy(a)
        bx, by = _xy(b)
        return cls(
            min_x=min(ax, bx), min_y=min(ay, by), max_x=max(ax, bx), max_y=max(ay, by)
        )

    @classmethod
    def from_ring(cls, ring: Iterable[ProjectedPoint | Sequence[float]]) -> "Region":
        """
        Bounding box of a drawn shape's vertex ring (rectangle or any polygon).
        """
        coords = [_xy(p) for p in ring]
        if not coords:
            raise ValueError("Region ring needs at least one vertex")
        min_x, min_y, max_x, max_y = MultiPoint(coords).bounds
        return cls(min_x=min_x, min_y=min_y, max_x=max_x, max_y=max_y)

    @property
    def is_empty_area(self) -> bool:
        return self.min_x == self.max_x or self.min_y == self.max_y

    def contains(self, x: float, y: float) -> bool:
        # Inclusive on every edge, so a zero-area region still matches its own point.
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.min_x, self.min_y, self.max_x, self.max_y)


def _xy(p: ProjectedPoint | Sequence[float]) -> tuple[float, float]:
    if isinstance(p, ProjectedPoint):
        return float(p.x), float(p.y)
    return float(p[0]), float(p[1])
