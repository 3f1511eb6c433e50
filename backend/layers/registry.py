from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

import yaml

from layers.types import LayerConfig, LayersFile

DEFAULT_LAYER_ID = "points"


def _repo_root() -> Path:
    # .../backend/layers/registry.py -> repo root is 2 levels up
    return Path(__file__).resolve().parents[2]


def layers_config_path() -> Path:
    return Path(
        os.getenv("VGRID_LAYER_CONFIG") or (_repo_root() / "config" / "layers.yaml")
    )


def _load_yaml(path: Path) -> dict:
    raw = path.read_text(encoding="utf-8")
    data = yaml.safe_load(raw) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid layers yaml root: {path}")
    return data


@lru_cache(maxsize=1)
def get_registry() -> dict[str, LayerConfig]:
    path = layers_config_path()
    if not path.exists():
        # No config on disk: a single layer with the built-in styles.
        return {DEFAULT_LAYER_ID: LayerConfig(id=DEFAULT_LAYER_ID, title="Points")}

    parsed = LayersFile.model_validate(_load_yaml(path))
    out: dict[str, LayerConfig] = {}
    for cfg in parsed.layers:
        if not cfg.enabled:
            continue
        if cfg.id in out:
            raise ValueError(f"Duplicate layer id {cfg.id!r} in {path}")
        out[cfg.id] = cfg
    if not out:
        raise ValueError(f"No enabled layers in {path}")
    return out


def list_layers() -> list[LayerConfig]:
    return list(get_registry().values())


def get_layer_config(layer_id: str | None) -> LayerConfig | None:
    lid = (layer_id or "").strip()
    return get_registry().get(lid)


def clear_registry_cache() -> None:
    """
    Forget the parsed layer config so YAML edits (or a changed env path) are picked up.
    """
    get_registry.cache_clear()
