"""SketchSession の設定変更・ファイル投入・保存のテスト。"""

from __future__ import annotations

import logging
import math
import subprocess
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from shapegrid.core import assets
from shapegrid.core.assets import AssetDecodeError
from shapegrid.core.config import AnimationConfig, AxisAnimation, SketchConfig
from shapegrid.core.runtime_config import set_config_path
from shapegrid.core.shapes import EMPTY_SHAPE_ID
from shapegrid.interactive.session import SketchSession

_SVG = '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 10 10"><circle cx="5" cy="5" r="5"/></svg>'


@pytest.fixture(autouse=True)
def _isolate_runtime_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    set_config_path(None)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    yield
    set_config_path(None)


@pytest.fixture
def fake_resvg(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(cmd, *, capture_output: bool, text: bool, check: bool):
        w = int(cmd[cmd.index("--width") + 1])
        h = int(cmd[cmd.index("--height") + 1])
        Image.new("RGBA", (w, h), (0, 0, 0, 255)).save(cmd[-1], format="PNG")
        return subprocess.CompletedProcess(args=cmd, returncode=0, stdout="", stderr="")

    monkeypatch.setattr(assets.subprocess, "run", fake_run)


def test_new_session_matches_config_dimensions() -> None:
    session = SketchSession(SketchConfig(cols=5, rows=2))
    assert session.grid.shape == (5, 2)
    assert session.config_version == 0
    assert np.all(session.grid.shape_ids() == EMPTY_SHAPE_ID)


def test_update_config_bumps_version_only_on_change() -> None:
    session = SketchSession()
    session.update_config(cols=3)
    assert session.config_version == 0

    session.update_config(stroke_mode=True)
    assert session.config_version == 1
    assert session.config.stroke_mode is True


def test_set_cols_resizes_grid_and_round_trips() -> None:
    session = SketchSession(SketchConfig(fill_policy="empty"))
    session.grid.set_cell(2, 3, 4)

    session.set_cols(2)
    assert session.grid.shape == (2, 4)
    session.set_cols(3)
    assert session.grid.cell(2, 3).shape_id == 4

    with pytest.raises(ValueError):
        session.set_rows(0)
    assert session.grid.shape == (3, 4)


def test_lock_aspect_keeps_cols_and_rows_equal() -> None:
    session = SketchSession()
    session.set_lock_aspect(True)
    assert (session.config.cols, session.config.rows) == (3, 3)
    assert session.grid.shape == (3, 3)

    session.set_rows(6)
    assert session.grid.shape == (6, 6)

    session.set_lock_aspect(False)
    session.set_cols(2)
    assert session.grid.shape == (2, 6)


def test_aspect_ratio_change_keeps_grid() -> None:
    session = SketchSession()
    session.grid.set_cell(0, 0, 1)
    session.set_aspect_ratio("16:9")
    assert session.config.canvas_size == (800, 450)
    assert session.grid.cell(0, 0).shape_id == 1
    with pytest.raises(ValueError):
        session.set_aspect_ratio("5:4")


def test_palette_editing_toggles_palette_use() -> None:
    session = SketchSession()
    assert session.add_color("#FF0000") is True
    assert session.config.use_palette is True
    for color in ("#00FF00", "#0000FF", "#FFFFFF"):
        session.add_color(color)
    assert session.add_color("#123456") is False
    assert len(session.config.palette) == 4

    assert session.remove_color(9) is False
    for _ in range(4):
        assert session.remove_color(0) is True
    assert session.config.use_palette is False

    session.add_color("#FF0000")
    session.clear_palette()
    assert len(session.config.palette) == 0
    assert session.config.use_palette is False


def test_fill_randomly_and_clear_canvas() -> None:
    session = SketchSession(SketchConfig(random_seed=3))
    session.fill_randomly()
    assert not np.all(session.grid.shape_ids() == EMPTY_SHAPE_ID)

    session.clear_canvas()
    assert np.all(session.grid.shape_ids() == EMPTY_SHAPE_ID)


def test_toggle_shape_delegates_to_grid() -> None:
    session = SketchSession()
    assert session.toggle_shape(3, False) is True
    assert 3 not in session.catalog


def test_drop_svg_adds_custom_shape_and_notifies(tmp_path: Path) -> None:
    path = tmp_path / "blob.svg"
    path.write_text(_SVG, encoding="utf-8")
    added: list[int] = []

    session = SketchSession()
    session.on_asset_added(added.append)

    assert session.drop_file(path) is True
    assert added == [11]
    assert 11 in session.catalog
    assert session.catalog.custom_names == ("blob.svg",)


def test_remove_custom_asset_empties_cells(fake_resvg: None) -> None:
    session = SketchSession()
    sid = session.add_svg_asset(_SVG)
    session.grid.set_cell(0, 0, sid)
    assert session.remove_custom_asset(0) == 1
    assert session.grid.cell(0, 0).is_empty


def test_drop_raster_samples_image(tmp_path: Path) -> None:
    path = tmp_path / "white.png"
    Image.new("RGB", (30, 40), (255, 255, 255)).save(path)

    session = SketchSession()
    assert session.drop_file(path) is True
    assert np.all(session.grid.shape_ids() == 10)


def test_drop_raster_with_extraction_applies_palette(tmp_path: Path) -> None:
    path = tmp_path / "teal.png"
    Image.new("RGB", (16, 16), (0, 128, 128)).save(path, format="PNG")

    session = SketchSession(SketchConfig(extract_palette=True))
    version = session.config_version
    session.drop_file(path)

    assert session.config.use_palette is True
    assert len(session.config.palette) == 4
    assert session.config_version == version + 1


def test_drop_unsupported_file_is_ignored(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = tmp_path / "notes.txt"
    path.write_text("hello", encoding="utf-8")

    session = SketchSession()
    with caplog.at_level(logging.WARNING, logger="shapegrid.interactive.session"):
        assert session.drop_file(path) is False
    assert any("notes.txt" in r.getMessage() for r in caplog.records)


def test_drop_broken_image_leaves_grid_untouched(tmp_path: Path) -> None:
    path = tmp_path / "broken.png"
    path.write_bytes(b"\x89PNG broken")

    session = SketchSession()
    session.grid.set_cell(1, 1, 2)
    before = session.grid.shape_ids().copy()

    with pytest.raises(AssetDecodeError):
        session.drop_file(path)
    assert np.array_equal(session.grid.shape_ids(), before)


def test_pointer_click_through_session() -> None:
    session = SketchSession()
    session.press(50, 50)
    assert session.release(50, 50) is True
    assert session.grid.cell(0, 0).shape_id == 0


def test_render_advances_frame() -> None:
    session = SketchSession()
    image = session.render()
    assert image.size == (600, 800)
    assert session.clock.frame == 1


def test_save_png_uses_runtime_scale(tmp_path: Path) -> None:
    session = SketchSession()
    session.grid.set_cell(0, 0, 0)
    path = session.save_png(output_dir=tmp_path / "out")
    assert path == tmp_path / "out" / "shape-grid-2x.png"
    with Image.open(path) as img:
        assert img.size == (1200, 1600)


def test_save_svg_writes_file(tmp_path: Path) -> None:
    session = SketchSession()
    session.grid.set_cell(0, 0, 3)
    path = session.save_svg(tmp_path / "grid.svg")
    assert path.read_text(encoding="utf-8").startswith("<?xml")


def _swaying_rows() -> SketchConfig:
    # frame 0 は offset 0、frame 1 は行全体が右へ 50px ずれる。
    row = AxisAnimation(enabled=True, amplitude=50.0, frequency=0.0, speed=math.pi / 2)
    return SketchConfig(animation=AnimationConfig(row=row))


def test_click_hits_tile_of_rendered_frame() -> None:
    session = SketchSession(_swaying_rows())
    session.render()
    assert session.clock.frame == 1
    assert session.shown_frame == 0

    session.press(20, 50)
    assert session.release(20, 50) is True
    assert session.grid.cell(0, 0).shape_id == 0


def test_save_exports_rendered_frame(tmp_path: Path) -> None:
    session = SketchSession(_swaying_rows())
    session.grid.set_cell(0, 0, 5)
    live = session.render()

    path = session.save_png(1, output_dir=tmp_path)
    with Image.open(path) as img:
        exported = img.convert("RGB")
    assert live.getpixel((20, 50)) == (220, 220, 220)
    assert exported.getpixel((20, 50)) == live.getpixel((20, 50))
