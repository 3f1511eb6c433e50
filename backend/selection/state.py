from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from loguru import logger

from selection.style import SELECTED_STYLE, StyleApplier, StyleSpec


@dataclass
class SelectionState:
    """
    Ordered set of selected feature ids (first-selected first, no duplicates).

    Every change goes through `styles`: all resets for the outgoing selection are
    issued before any apply for the incoming one.
    """

    styles: StyleApplier
    selected_style: StyleSpec = SELECTED_STYLE
    _ids: list[str] = field(default_factory=list, repr=False)

    @property
    def ids(self) -> tuple[str, ...]:
        return tuple(self._ids)

    @property
    def is_empty(self) -> bool:
        return not self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, feature_id: object) -> bool:
        return feature_id in self._ids

    def select(self, feature_id: str) -> None:
        fid = str(feature_id)
        if self._ids == [fid]:
            # Clicking the only selected point again deselects it.
            self.clear()
            return
        self._replace([fid])

    def select_many(self, feature_ids: Iterable[str]) -> None:
        # No toggle-off here: repeating the same set re-applies the selected style.
        self._replace(_dedupe(feature_ids))

    def clear(self) -> None:
        if not self._ids:
            return
        for fid in self._ids:
            self.styles.reset(fid)
        self._ids = []

    def _replace(self, feature_ids: list[str]) -> None:
        self.clear()
        for fid in feature_ids:
            self.styles.apply(self.selected_style, fid)
        self._ids = feature_ids
        logger.debug(f"Selection replaced: {len(feature_ids)} feature(s)")


def _dedupe(feature_ids: Iterable[str]) -> list[str]:
    out: list[str] = []
    seen: set[str] = set()
    for raw in feature_ids or []:
        fid = str(raw)
        if fid in seen:
            continue
        seen.add(fid)
        out.append(fid)
    return out
