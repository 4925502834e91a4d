"""SketchConfig の検証と YAML 読み込みのテスト。"""

from __future__ import annotations

from pathlib import Path

import pytest

from shapegrid.core.color import Palette
from shapegrid.core.config import (
    AxisAnimation,
    SketchConfig,
    load_sketch_config,
    sketch_config_from_mapping,
)


def test_defaults_describe_three_by_four_grid() -> None:
    config = SketchConfig()
    assert (config.cols, config.rows) == (3, 4)
    assert config.canvas_size == (600, 800)
    assert config.palette_active is False


@pytest.mark.parametrize(
    "changes",
    [
        {"cols": 0},
        {"rows": -1},
        {"aspect_ratio": "2:1"},
        {"gradient_kind": "conic"},
        {"fill_policy": "zero"},
        {"stroke_weight": -1.0},
        {"background_color": "#XYZ"},
    ],
)
def test_invalid_values_raise_value_error(changes) -> None:
    with pytest.raises(ValueError):
        SketchConfig(**changes)


def test_unknown_waveform_raises() -> None:
    with pytest.raises(ValueError):
        AxisAnimation(waveform="square")


def test_with_changes_returns_new_instance() -> None:
    config = SketchConfig()
    changed = config.with_changes(cols=5, foreground_color="#FFFFFF")
    assert changed is not config
    assert changed.cols == 5
    assert changed.foreground_color == (255, 255, 255)
    assert config.cols == 3


def test_palette_active_requires_flag_and_colors() -> None:
    config = SketchConfig(use_palette=True)
    assert config.palette_active is False
    config = config.with_changes(palette=Palette(("#FF0000",)))
    assert config.palette_active is True


def test_sketch_config_from_mapping_parses_nested_sections() -> None:
    config = sketch_config_from_mapping(
        {
            "cols": 6,
            "rows": 6,
            "aspect_ratio": "1:1",
            "background_color": "#101010",
            "palette": ["#FF0000", [0, 255, 0]],
            "use_palette": True,
            "animation": {
                "row": {"enabled": True, "waveform": "noise", "amplitude": 4},
                "cycle": {"enabled": True, "speed": 0.5},
            },
        }
    )
    assert config.canvas_size == (600, 600)
    assert config.background_color == (16, 16, 16)
    assert config.palette.colors == ((255, 0, 0), (0, 255, 0))
    assert config.animation.row.enabled is True
    assert config.animation.row.waveform == "noise"
    assert config.animation.row.amplitude == 4.0
    assert config.animation.col.enabled is False
    assert config.animation.cycle.speed == 0.5


def test_sketch_config_from_mapping_rejects_unknown_keys() -> None:
    with pytest.raises(ValueError, match="colums"):
        sketch_config_from_mapping({"colums": 3})


def test_load_sketch_config_reads_yaml(tmp_path: Path) -> None:
    path = tmp_path / "sketch.yaml"
    path.write_text("cols: 8\nrows: 2\nstroke_mode: true\n", encoding="utf-8")

    config = load_sketch_config(path)
    assert (config.cols, config.rows) == (8, 2)
    assert config.stroke_mode is True

    empty = tmp_path / "empty.yaml"
    empty.write_text("", encoding="utf-8")
    assert load_sketch_config(empty) == SketchConfig()


def test_load_sketch_config_rejects_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_sketch_config(path)
