from __future__ import annotations

import pytest

from shapegrid.core.config import SketchConfig
from shapegrid.core.layout import GridLayout


def test_tile_size_follows_canvas_and_grid() -> None:
    layout = GridLayout.from_config(SketchConfig(cols=3, rows=4))
    assert layout.canvas_size == (600, 800)
    assert layout.tile_size == (200.0, 200.0)

    scaled = GridLayout.from_config(SketchConfig(cols=3, rows=4), scale=2)
    assert scaled.canvas_size == (1200, 1600)
    assert scaled.tile_size == (400.0, 400.0)


def test_non_positive_scale_raises() -> None:
    with pytest.raises(ValueError):
        GridLayout.from_config(SketchConfig(), scale=0)


def test_cell_at_hits_tile_half_open() -> None:
    config = SketchConfig(cols=3, rows=4)
    layout = GridLayout.from_config(config)
    assert layout.cell_at(config, 0, 0, frame=0) == (0, 0)
    assert layout.cell_at(config, 199.9, 399.9, frame=0) == (0, 1)
    assert layout.cell_at(config, 200, 400, frame=0) == (1, 2)
    assert layout.cell_at(config, 600, 10, frame=0) is None


def test_cell_at_uses_shear_offset() -> None:
    config = SketchConfig(cols=3, rows=4, row_shear=50.0)
    layout = GridLayout.from_config(config)
    # row 1 は右へ 50px ずれる。
    assert layout.cell_at(config, 20, 250, frame=0) is None
    assert layout.cell_at(config, 60, 250, frame=0) == (0, 1)
    assert layout.cell_origin(config, 1, 1, frame=0) == (250.0, 200.0)


def test_overlap_returns_topmost_cell() -> None:
    config = SketchConfig(cols=3, rows=4, row_shear=100.0, col_shear=100.0)
    layout = GridLayout.from_config(config)
    # (1, 0) と (0, 1) が x,y ∈ [200, 300) で重なる。行優先で後に描く (0, 1) が前面。
    assert layout.contains(config, 1, 0, 0, 250, 250)
    assert layout.contains(config, 0, 1, 0, 250, 250)
    assert layout.cell_at(config, 250, 250, frame=0) == (0, 1)
