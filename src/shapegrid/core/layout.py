# どこで: `src/shapegrid/core/layout.py`。
# 何を: キャンバス寸法とグリッド寸法からタイル矩形を求め、座標→セルのヒットテストを行う。
# なぜ: 描画・export・ポインタ操作が同じタイル配置（shear + アニメーション込み）を共有するため。

from __future__ import annotations

from dataclasses import dataclass

from shapegrid.core.animation import cell_offset
from shapegrid.core.config import SketchConfig


@dataclass(frozen=True, slots=True)
class GridLayout:
    """スケール済みキャンバス上のタイル配置。

    Parameters
    ----------
    canvas_size : tuple[int, int]
        スケール済みキャンバス寸法 (width, height)。
    cols, rows : int
        グリッド寸法。
    scale : float
        等倍キャンバスに対する倍率。offset（shear/振幅）にも掛ける。
    """

    canvas_size: tuple[int, int]
    cols: int
    rows: int
    scale: float = 1.0

    @classmethod
    def from_config(cls, config: SketchConfig, *, scale: float = 1.0) -> "GridLayout":
        w, h = config.canvas_size
        s = float(scale)
        if s <= 0:
            raise ValueError(f"scale は正の値である必要がある: got={scale}")
        return cls(
            canvas_size=(int(round(w * s)), int(round(h * s))),
            cols=config.cols,
            rows=config.rows,
            scale=s,
        )

    @property
    def tile_size(self) -> tuple[float, float]:
        w, h = self.canvas_size
        return float(w) / float(self.cols), float(h) / float(self.rows)

    def cell_origin(
        self, config: SketchConfig, col: int, row: int, frame: int
    ) -> tuple[float, float]:
        """セル (col, row) の左上座標（offset 込み）を返す。"""

        tile_w, tile_h = self.tile_size
        dx, dy = cell_offset(config, col, row, frame)
        return (
            float(col) * tile_w + dx * self.scale,
            float(row) * tile_h + dy * self.scale,
        )

    def contains(
        self, config: SketchConfig, col: int, row: int, frame: int, x: float, y: float
    ) -> bool:
        """点 (x, y) がセル (col, row) のタイル矩形（右/下端は含まない）内なら True。"""

        tile_w, tile_h = self.tile_size
        ox, oy = self.cell_origin(config, col, row, frame)
        return ox <= float(x) < ox + tile_w and oy <= float(y) < oy + tile_h

    def cell_at(
        self, config: SketchConfig, x: float, y: float, frame: int
    ) -> tuple[int, int] | None:
        """点 (x, y) にあるセル (col, row) を返す。

        Notes
        -----
        offset でタイルが重なる場合は、描画順（行優先）で最後に描かれる
        （= 最前面の）セルを返す。該当が無ければ None。
        """

        hit: tuple[int, int] | None = None
        for row in range(self.rows):
            for col in range(self.cols):
                if self.contains(config, col, row, frame, x, y):
                    hit = (col, row)
        return hit


__all__ = ["GridLayout"]
