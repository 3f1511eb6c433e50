from __future__ import annotations

import pytest

from layers.registry import clear_registry_cache, get_layer_config, list_layers
from selection.style import SELECTED_STYLE


@pytest.fixture(autouse=True)
def _fresh_registry():
    clear_registry_cache()
    yield
    clear_registry_cache()


def test_repo_layers_yaml_defines_points_layer():
    cfg = get_layer_config("points")
    assert cfg is not None
    assert cfg.vectorLayer == "points_test2"
    assert cfg.maxZoom == 8
    assert cfg.selectedStyle.to_style() == SELECTED_STYLE
    assert cfg.defaultStyle.fillColor == "red"


def test_missing_config_falls_back_to_default_layer(tmp_path, monkeypatch):
    monkeypatch.setenv("VGRID_LAYER_CONFIG", str(tmp_path / "nope.yaml"))
    layers = list_layers()
    assert [cfg.id for cfg in layers] == ["points"]
    assert layers[0].tile_size().x == 256.0


def test_disabled_layers_are_skipped(tmp_path, monkeypatch):
    p = tmp_path / "layers.yaml"
    p.write_text(
        "layers:\n"
        "  - id: craters\n"
        "    tileSize: 512\n"
        "  - id: hidden\n"
        "    enabled: false\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("VGRID_LAYER_CONFIG", str(p))
    assert [cfg.id for cfg in list_layers()] == ["craters"]
    assert get_layer_config("hidden") is None
    assert get_layer_config("craters").tile_size().x == 512.0


def test_duplicate_layer_ids_are_rejected(tmp_path, monkeypatch):
    p = tmp_path / "layers.yaml"
    p.write_text("layers:\n  - id: a\n  - id: a\n", encoding="utf-8")
    monkeypatch.setenv("VGRID_LAYER_CONFIG", str(p))
    with pytest.raises(ValueError):
        list_layers()
