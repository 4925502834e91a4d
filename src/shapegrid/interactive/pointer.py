# どこで: `src/shapegrid/interactive/pointer.py`。
# 何を: ポインタ（マウス/タッチ）の press/move/release をセル操作（クリックで切り替え・ドラッグで塗り・修飾キーで消去）へ写す。
# なぜ: UI 配線から切り離した状態機械として、操作規則を単体で検証できるようにするため。

from __future__ import annotations

import logging
import math
from enum import Enum

from shapegrid.core.config import SketchConfig
from shapegrid.core.grid import ShapeGrid
from shapegrid.core.layout import GridLayout
from shapegrid.core.runtime_config import runtime_config
from shapegrid.render.renderer import HoverState

_logger = logging.getLogger(__name__)


class PointerState(Enum):
    IDLE = "idle"
    PRESSED = "pressed"
    DRAGGING = "dragging"


class PointerController:
    """ポインタ入力の状態機械。

    Notes
    -----
    状態は idle → pressed → (dragging | release)。
    press 位置から drag_threshold [px] を超えて動くと dragging になり、
    空かつ非ロックのセルをランダムな形状で塗る。
    clear_modifier を押しながらの移動は、閾値に関係なく通過したセルを消去する。
    ドラッグ/消去をせずに release した場合は、そのセルの形状を 1 つ進める。
    座標は等倍キャンバス座標で受け取り、ヒットテストは描画と同じ offset を使う。
    """

    def __init__(self, *, drag_threshold: float | None = None) -> None:
        if drag_threshold is None:
            drag_threshold = runtime_config().drag_threshold
        self.drag_threshold = float(drag_threshold)
        self.state = PointerState.IDLE
        self.hover: HoverState | None = None
        self._start: tuple[float, float] | None = None
        self._acted = False

    def _cell_at(
        self, grid: ShapeGrid, config: SketchConfig, x: float, y: float, frame: int
    ) -> tuple[int, int] | None:
        layout = GridLayout.from_config(config)
        hit = layout.cell_at(config, x, y, frame)
        if hit is None or not grid.in_bounds(*hit):
            return None
        return hit

    @staticmethod
    def _palette_size(config: SketchConfig) -> int:
        return len(config.palette) if config.palette_active else 0

    def press(self, x: float, y: float) -> None:
        """押下位置を記録して pressed に遷移する。"""

        self.state = PointerState.PRESSED
        self._start = (float(x), float(y))
        self._acted = False
        self.hover = HoverState(float(x), float(y), cycle_modifier=False)

    def move(
        self,
        x: float,
        y: float,
        grid: ShapeGrid,
        config: SketchConfig,
        *,
        frame: int = 0,
        clear_modifier: bool = False,
        cycle_modifier: bool = False,
    ) -> bool:
        """ポインタ移動を処理する。セルを変更したら True を返す。"""

        self.hover = HoverState(float(x), float(y), cycle_modifier=bool(cycle_modifier))
        if self.state is PointerState.IDLE:
            return False

        if clear_modifier:
            self._acted = True
            hit = self._cell_at(grid, config, x, y, frame)
            if hit is None:
                return False
            grid.clear_cell(*hit)
            return True

        if self.state is PointerState.PRESSED and self._start is not None:
            sx, sy = self._start
            if math.hypot(float(x) - sx, float(y) - sy) > self.drag_threshold:
                self.state = PointerState.DRAGGING
                _logger.debug("drag 開始: start=(%.1f, %.1f)", sx, sy)

        if self.state is not PointerState.DRAGGING:
            return False

        self._acted = True
        hit = self._cell_at(grid, config, x, y, frame)
        if hit is None:
            return False
        return grid.paint_cell(*hit, palette_size=self._palette_size(config))

    def release(
        self,
        x: float,
        y: float,
        grid: ShapeGrid,
        config: SketchConfig,
        *,
        frame: int = 0,
    ) -> bool:
        """release を処理する。ドラッグしていなければセルを切り替え、変更したら True を返す。"""

        acted = self._acted or self.state is PointerState.DRAGGING
        was_pressed = self.state is not PointerState.IDLE
        self.state = PointerState.IDLE
        self._start = None
        self._acted = False
        if not was_pressed or acted:
            return False

        hit = self._cell_at(grid, config, x, y, frame)
        if hit is None:
            return False
        return grid.cycle_cell(*hit, palette_size=self._palette_size(config))

    def leave(self) -> None:
        """ポインタがキャンバス外へ出たときにホバーを解除する。"""

        self.hover = None


__all__ = ["PointerController", "PointerState"]
