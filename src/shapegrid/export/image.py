"""
どこで: `src/shapegrid/export/image.py`。
何を: グリッドを整数倍率で再描画して PNG として保存する関数を提供する。
なぜ: ライブ表示と同じ描画経路で高解像度画像を書き出せるようにするため。
"""

from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image

from shapegrid.core.config import SketchConfig
from shapegrid.core.grid import ShapeGrid
from shapegrid.core.runtime_config import output_root_dir, runtime_config
from shapegrid.render.renderer import GridRenderer

_logger = logging.getLogger(__name__)


def _coerce_scale(scale: int | None) -> int:
    if scale is None:
        return int(runtime_config().png_scale)
    if isinstance(scale, bool) or int(scale) != scale:
        raise ValueError(f"scale は整数である必要がある: got={scale!r}")
    if int(scale) <= 0:
        raise ValueError(f"scale は正の値である必要がある: got={scale!r}")
    return int(scale)


def png_filename(scale: int) -> str:
    """倍率に対応する PNG ファイル名 `shape-grid-<scale>x.png` を返す。"""

    return f"shape-grid-{_coerce_scale(scale)}x.png"


def default_png_output_dir() -> Path:
    """PNG の既定保存ディレクトリ `{output_root}/png` を返す。"""

    return output_root_dir() / "png"


def render_export_image(
    grid: ShapeGrid,
    config: SketchConfig,
    *,
    scale: int | None = None,
    frame: int = 0,
    renderer: GridRenderer | None = None,
) -> Image.Image:
    """export 用に倍率 scale で描画した画像を返す（ホバー表示なし）。"""

    s = _coerce_scale(scale)
    r = renderer if renderer is not None else GridRenderer()
    return r.render_frame(grid, config, frame=int(frame), scale=float(s), interactive=False)


def export_png(
    grid: ShapeGrid,
    config: SketchConfig,
    *,
    scale: int | None = None,
    output_dir: str | Path | None = None,
    frame: int = 0,
    renderer: GridRenderer | None = None,
) -> Path:
    """グリッドを PNG として保存し、保存先パスを返す。

    Parameters
    ----------
    grid : ShapeGrid
        描画対象。
    config : SketchConfig
        描画設定。
    scale : int or None, optional
        等倍キャンバスに対する整数倍率。None なら config.yaml の `export.png.scale`。
    output_dir : str or Path or None, optional
        保存ディレクトリ。None なら `{output_root}/png`。
    frame : int, optional
        アニメーション offset を評価するフレーム番号。

    Returns
    -------
    Path
        `output_dir/shape-grid-<scale>x.png`。

    Raises
    ------
    ValueError
        scale が正の整数でない場合。
    """

    s = _coerce_scale(scale)
    out_dir = Path(output_dir) if output_dir is not None else default_png_output_dir()
    image = render_export_image(grid, config, scale=s, frame=frame, renderer=renderer)

    path = out_dir / png_filename(s)
    path.parent.mkdir(parents=True, exist_ok=True)
    image.save(path, format="PNG")
    _logger.info("Saved PNG: %s", path)
    return path


__all__ = [
    "default_png_output_dir",
    "export_png",
    "png_filename",
    "render_export_image",
]
