# どこで: `src/shapegrid/render/renderer.py`。
# 何を: グリッドを 1 フレーム分 Pillow 画像へ描画する（offset・ホバー切り替え・サイクル表示・塗り）。
# なぜ: ライブ表示と PNG export が同じ描画経路を通り、見た目を一致させるため。

from __future__ import annotations

import math
from dataclasses import dataclass

from PIL import Image, ImageDraw

from shapegrid.core.animation import cycle_steps
from shapegrid.core.catalog import ShapeCatalog
from shapegrid.core.config import SketchConfig
from shapegrid.core.grid import Cell, ShapeGrid
from shapegrid.core.layout import GridLayout
from shapegrid.core.runtime_config import runtime_config
from shapegrid.core.shapes import is_builtin, shape_polygon
from shapegrid.render.fill import Fill, FillKind, fill_image, resolve_fill

FILL_CACHE_MAX = 32


@dataclass(frozen=True, slots=True)
class HoverState:
    """ポインタのホバー位置（等倍キャンバス座標）と修飾キー状態。"""

    x: float
    y: float
    cycle_modifier: bool = False


class GridRenderer:
    """ShapeGrid を Pillow 画像に描画するレンダラ。

    Notes
    -----
    interactive=True の描画では、ホバー中セルの枠線とホバー + 修飾キーでの
    形状切り替え（セル状態を更新する）を行う。export では両方とも行わない。
    """

    def __init__(
        self,
        *,
        cycle_delay: int | None = None,
        hover_outline_width: int | None = None,
    ) -> None:
        if cycle_delay is None or hover_outline_width is None:
            cfg = runtime_config()
            cycle_delay = cfg.cycle_delay if cycle_delay is None else cycle_delay
            if hover_outline_width is None:
                hover_outline_width = cfg.hover_outline_width
        self.cycle_delay = int(cycle_delay)
        self.hover_outline_width = int(hover_outline_width)
        self._fill_cache: dict[tuple[Fill, tuple[int, int]], Image.Image] = {}

    def render_frame(
        self,
        grid: ShapeGrid,
        config: SketchConfig,
        *,
        frame: int,
        hover: HoverState | None = None,
        scale: float = 1.0,
        interactive: bool = True,
    ) -> Image.Image:
        """1 フレームを描画して RGB 画像を返す。

        Parameters
        ----------
        grid : ShapeGrid
            描画対象。寸法は config の (cols, rows) と一致している必要がある。
        config : SketchConfig
            色・shear・アニメーション等。
        frame : int
            フレーム番号。アニメーションとホバー切り替えの間隔判定に使う。
        hover : HoverState or None
            等倍キャンバス座標でのポインタ位置。
        scale : float
            出力倍率。
        interactive : bool
            ライブ表示なら True。

        Raises
        ------
        ValueError
            grid と config の寸法が一致しない場合。
        """

        layout = GridLayout.from_config(config, scale=scale)
        if grid.shape != (layout.cols, layout.rows):
            raise ValueError(
                f"grid 寸法 {grid.shape} が config ({layout.cols}, {layout.rows}) と一致しない"
            )

        canvas = Image.new("RGB", layout.canvas_size, config.background_color)
        draw = ImageDraw.Draw(canvas)
        tile_w, tile_h = layout.tile_size
        steps = cycle_steps(config, frame)
        stroke_width = max(1, int(round(float(config.stroke_weight) * layout.scale)))

        hover_xy: tuple[float, float] | None = None
        if interactive and hover is not None:
            hover_xy = (float(hover.x) * layout.scale, float(hover.y) * layout.scale)

        for col, row, cell in grid.iter_cells():
            ox, oy = layout.cell_origin(config, col, row, frame)

            hovered = hover_xy is not None and layout.contains(
                config, col, row, frame, hover_xy[0], hover_xy[1]
            )
            if hovered:
                draw.rectangle(
                    (ox, oy, ox + tile_w - 1, oy + tile_h - 1),
                    outline=config.stroke_color,
                    width=self.hover_outline_width,
                )

            if cell.locked or cell.is_empty:
                continue

            if hovered and hover is not None and hover.cycle_modifier:
                self._hover_cycle(grid.catalog, cell, frame)

            display_id = grid.catalog.offset(cell.shape_id, steps) if steps else cell.shape_id
            fill = resolve_fill(config, cell.color_index)
            self._draw_shape(
                canvas,
                draw,
                grid.catalog,
                display_id,
                fill,
                origin=(ox, oy),
                tile_size=(tile_w, tile_h),
                stroke_width=stroke_width,
            )

        return canvas

    def _hover_cycle(self, catalog: ShapeCatalog, cell: Cell, frame: int) -> None:
        if catalog.is_empty():
            return
        if int(frame) - int(cell.last_cycle_frame) < self.cycle_delay:
            return
        cell.shape_id = catalog.next_after(cell.shape_id)
        cell.last_cycle_frame = int(frame)

    def _fill_source(self, fill: Fill, size: tuple[int, int]) -> Image.Image:
        key = (fill, size)
        img = self._fill_cache.pop(key, None)
        if img is None:
            img = fill_image(fill, size)
            while len(self._fill_cache) >= FILL_CACHE_MAX:
                # 最も長く使われていないものから捨てる。
                del self._fill_cache[next(iter(self._fill_cache))]
        self._fill_cache[key] = img
        return img

    def _draw_shape(
        self,
        canvas: Image.Image,
        draw: ImageDraw.ImageDraw,
        catalog: ShapeCatalog,
        shape_id: int,
        fill: Fill,
        *,
        origin: tuple[float, float],
        tile_size: tuple[float, float],
        stroke_width: int,
    ) -> None:
        ox, oy = origin
        tile_w, tile_h = tile_size

        if not is_builtin(shape_id):
            asset = catalog.custom_asset(shape_id)
            if asset is None:
                return
            size = (max(1, int(round(tile_w))), max(1, int(round(tile_h))))
            mask = asset.alpha_mask(size)
            tint = Image.new("RGB", size, fill.representative_color())
            canvas.paste(tint, (int(round(ox)), int(round(oy))), mask)
            return

        points = shape_polygon(shape_id, tile_w, tile_h)

        if fill.kind is FillKind.STROKE:
            closed = [(float(x) + ox, float(y) + oy) for x, y in points]
            closed.append(closed[0])
            draw.line(closed, fill=fill.color, width=stroke_width, joint="curve")
            return

        ix = int(math.floor(ox))
        iy = int(math.floor(oy))
        fx = ox - ix
        fy = oy - iy
        size = (int(math.ceil(fx + tile_w)), int(math.ceil(fy + tile_h)))
        mask = Image.new("L", size, 0)
        ImageDraw.Draw(mask).polygon(
            [(float(x) + fx, float(y) + fy) for x, y in points],
            fill=255,
        )
        canvas.paste(self._fill_source(fill, size), (ix, iy), mask)


__all__ = ["GridRenderer", "HoverState"]
