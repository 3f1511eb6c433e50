from .layer import SelectableLayer
from .spatial import select_within
from .state import SelectionState
from .style import (
    DEFAULT_STYLE,
    SELECTED_STYLE,
    FeatureStyles,
    StyleApplier,
    StyleSpec,
)

__all__ = [
    "DEFAULT_STYLE",
    "SELECTED_STYLE",
    "FeatureStyles",
    "SelectableLayer",
    "SelectionState",
    "StyleApplier",
    "StyleSpec",
    "select_within",
]
