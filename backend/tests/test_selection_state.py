from __future__ import annotations

from selection.state import SelectionState
from selection.style import SELECTED_STYLE, FeatureStyles, StyleSpec


class RecordingStyles:
    def __init__(self):
        self.calls: list[tuple[str, str]] = []
        self.styled: set[str] = set()

    def apply(self, style: StyleSpec, feature_id: str) -> None:
        self.calls.append(("apply", feature_id))
        self.styled.add(feature_id)

    def reset(self, feature_id: str) -> None:
        self.calls.append(("reset", feature_id))
        self.styled.discard(feature_id)


def test_starts_empty():
    s = SelectionState(styles=RecordingStyles())
    assert s.is_empty
    assert s.ids == ()


def test_select_twice_toggles_back_to_empty():
    styles = RecordingStyles()
    s = SelectionState(styles=styles)
    s.select("a")
    assert s.ids == ("a",)
    s.select("a")
    assert s.is_empty
    assert styles.calls == [("apply", "a"), ("reset", "a")]
    assert styles.styled == set()


def test_select_other_id_replaces_selection():
    styles = RecordingStyles()
    s = SelectionState(styles=styles)
    s.select("a")
    s.select("b")
    assert s.ids == ("b",)
    assert styles.calls == [("apply", "a"), ("reset", "a"), ("apply", "b")]


def test_select_inside_multi_selection_narrows_to_that_id():
    styles = RecordingStyles()
    s = SelectionState(styles=styles)
    s.select_many(["a", "b"])
    s.select("a")
    assert s.ids == ("a",)
    assert styles.styled == {"a"}


def test_select_many_dedupes_keeping_first_occurrence():
    s = SelectionState(styles=RecordingStyles())
    s.select_many(["c", "a", "c", "b", "a"])
    assert s.ids == ("c", "a", "b")


def test_replacement_resets_old_ids_before_applying_new():
    styles = RecordingStyles()
    s = SelectionState(styles=styles)
    s.select_many(["a", "b"])
    styles.calls.clear()

    s.select_many(["b", "c"])

    assert s.ids == ("b", "c")
    assert styles.styled == {"b", "c"}
    kinds = [k for k, _ in styles.calls]
    assert kinds == ["reset", "reset", "apply", "apply"]
    assert ("reset", "a") in styles.calls


def test_repeating_select_many_reapplies_instead_of_clearing():
    styles = RecordingStyles()
    s = SelectionState(styles=styles)
    s.select_many(["a", "b"])
    s.select_many(["a", "b"])
    assert s.ids == ("a", "b")
    assert styles.styled == {"a", "b"}


def test_select_many_empty_clears_selection():
    styles = RecordingStyles()
    s = SelectionState(styles=styles)
    s.select("a")
    s.select_many([])
    assert s.is_empty
    assert styles.styled == set()


def test_clear_is_idempotent():
    styles = RecordingStyles()
    s = SelectionState(styles=styles)
    s.select_many(["a", "b"])
    s.clear()
    n = len(styles.calls)
    s.clear()
    assert s.is_empty
    assert len(styles.calls) == n


def test_feature_styles_applier_tracks_overrides():
    styles = FeatureStyles()
    s = SelectionState(styles=styles)
    s.select_many(["a", "b"])
    assert styles.style_for("a") == SELECTED_STYLE
    assert styles.style_for("zzz") == styles.default
    s.select_many(["b"])
    assert styles.overridden_ids() == ["b"]
    assert styles.style_for("a") == styles.default


def test_custom_selected_style_is_used():
    styles = FeatureStyles()
    blue = StyleSpec(color="blue", fill_color="blue")
    s = SelectionState(styles=styles, selected_style=blue)
    s.select("a")
    assert styles.style_for("a").to_dict()["fillColor"] == "blue"
