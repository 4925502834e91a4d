"""
どこで: `src/shapegrid/export/svg.py`。
何を: グリッドを SVG（塗りパス・グラデーション・カスタム形状のマスク）として保存する関数を提供する。
なぜ: 解像度に依存しないベクタ出力を、ライブ描画と同じ頂点定義から生成するため。
"""

from __future__ import annotations

import base64
import logging
from pathlib import Path

import numpy as np

from shapegrid.core.animation import cycle_steps
from shapegrid.core.color import rgb255_to_hex
from shapegrid.core.config import SketchConfig
from shapegrid.core.grid import ShapeGrid
from shapegrid.core.layout import GridLayout
from shapegrid.core.shapes import is_builtin, shape_polygon
from shapegrid.render.fill import Fill, FillKind, resolve_fill

_logger = logging.getLogger(__name__)

_SVG_NS = "http://www.w3.org/2000/svg"
_FLOAT_DECIMALS = 3


def _fmt(value: float, *, decimals: int = _FLOAT_DECIMALS) -> str:
    """SVG 出力向けに float を決定的な文字列へ変換して返す。"""
    text = f"{float(value):.{int(decimals)}f}"
    if text.startswith("-0") and float(text) == 0.0:
        return text[1:]
    return text


def _polygon_to_d(points: np.ndarray, *, ox: float, oy: float) -> str:
    """多角形（shape (N,2)）を閉じた SVG path の d 属性へ変換して返す。"""
    x0 = _fmt(points[0, 0] + ox)
    y0 = _fmt(points[0, 1] + oy)
    parts = [f"M {x0} {y0}"]
    for x, y in points[1:]:
        parts.append(f"L {_fmt(x + ox)} {_fmt(y + oy)}")
    parts.append("Z")
    return " ".join(parts)


def _gradient_def(
    gid: str, fill: Fill, *, ox: float, oy: float, tile_w: float, tile_h: float
) -> str:
    start = rgb255_to_hex(fill.color)
    end = rgb255_to_hex(fill.end_color if fill.end_color is not None else fill.color)
    stops = (
        f'<stop offset="0" stop-color="{start}" />'
        f'<stop offset="1" stop-color="{end}" />'
    )
    if fill.gradient_kind == "radial":
        r = max(tile_w, tile_h) / 2.0
        return (
            f'<radialGradient id="{gid}" gradientUnits="userSpaceOnUse" '
            f'cx="{_fmt(ox + tile_w / 2.0)}" cy="{_fmt(oy + tile_h / 2.0)}" r="{_fmt(r)}">'
            f"{stops}</radialGradient>"
        )
    if fill.gradient_kind == "diagonal":
        x2, y2 = ox + tile_w, oy + tile_h
    else:
        x2, y2 = ox, oy + tile_h
    return (
        f'<linearGradient id="{gid}" gradientUnits="userSpaceOnUse" '
        f'x1="{_fmt(ox)}" y1="{_fmt(oy)}" x2="{_fmt(x2)}" y2="{_fmt(y2)}">'
        f"{stops}</linearGradient>"
    )


def export_svg(
    grid: ShapeGrid,
    config: SketchConfig,
    path: str | Path,
    *,
    frame: int = 0,
) -> Path:
    """グリッドを等倍キャンバス寸法の SVG として保存する。

    Parameters
    ----------
    grid : ShapeGrid
        描画対象。寸法は config の (cols, rows) と一致している必要がある。
    config : SketchConfig
        描画設定。
    path : str or Path
        出力先パス。
    frame : int, optional
        アニメーション offset / サイクル表示を評価するフレーム番号。

    Returns
    -------
    Path
        保存先パス。
    """
    _path = Path(path)
    layout = GridLayout.from_config(config)
    if grid.shape != (layout.cols, layout.rows):
        raise ValueError(
            f"grid 寸法 {grid.shape} が config ({layout.cols}, {layout.rows}) と一致しない"
        )

    canvas_w, canvas_h = layout.canvas_size
    tile_w, tile_h = layout.tile_size
    steps = cycle_steps(config, frame)
    stroke_width = _fmt(float(config.stroke_weight))

    lines: list[str] = []
    lines.append('<?xml version="1.0" encoding="UTF-8"?>')
    lines.append(
        (
            f'<svg xmlns="{_SVG_NS}" viewBox="0 0 {int(canvas_w)} {int(canvas_h)}" '
            f'width="{int(canvas_w)}" height="{int(canvas_h)}">'
        )
    )
    lines.append(
        f'  <rect x="0" y="0" width="{int(canvas_w)}" height="{int(canvas_h)}" '
        f'fill="{rgb255_to_hex(config.background_color)}" />'
    )

    def_index = 0
    for col, row, cell in grid.iter_cells():
        if cell.locked or cell.is_empty:
            continue
        display_id = grid.catalog.offset(cell.shape_id, steps) if steps else cell.shape_id
        fill = resolve_fill(config, cell.color_index)
        ox, oy = layout.cell_origin(config, col, row, frame)

        if not is_builtin(display_id):
            asset = grid.catalog.custom_asset(display_id)
            if asset is None:
                continue
            mid = f"m{def_index}"
            def_index += 1
            payload = base64.b64encode(asset.svg_text.encode("utf-8")).decode("ascii")
            lines.append(
                f'  <defs><mask id="{mid}" mask-type="alpha">'
                f'<image href="data:image/svg+xml;base64,{payload}" '
                f'x="{_fmt(ox)}" y="{_fmt(oy)}" width="{_fmt(tile_w)}" height="{_fmt(tile_h)}" '
                f'preserveAspectRatio="none" /></mask></defs>'
            )
            lines.append(
                f'  <rect x="{_fmt(ox)}" y="{_fmt(oy)}" width="{_fmt(tile_w)}" '
                f'height="{_fmt(tile_h)}" fill="{rgb255_to_hex(fill.representative_color())}" '
                f'mask="url(#{mid})" />'
            )
            continue

        d = _polygon_to_d(shape_polygon(display_id, tile_w, tile_h), ox=ox, oy=oy)
        if fill.kind is FillKind.STROKE:
            lines.append(
                f'  <path d="{d}" fill="none" stroke="{rgb255_to_hex(fill.color)}" '
                f'stroke-width="{stroke_width}" stroke-linejoin="round" />'
            )
        elif fill.kind is FillKind.GRADIENT:
            gid = f"g{def_index}"
            def_index += 1
            lines.append(
                "  <defs>"
                + _gradient_def(gid, fill, ox=ox, oy=oy, tile_w=tile_w, tile_h=tile_h)
                + "</defs>"
            )
            lines.append(f'  <path d="{d}" fill="url(#{gid})" />')
        else:
            lines.append(f'  <path d="{d}" fill="{rgb255_to_hex(fill.color)}" />')

    lines.append("</svg>")

    _path.parent.mkdir(parents=True, exist_ok=True)
    with _path.open("w", encoding="utf-8", newline="\n") as f:
        f.write("\n".join(lines) + "\n")

    _logger.info("Saved SVG: %s", _path)
    return _path


__all__ = ["export_svg"]
