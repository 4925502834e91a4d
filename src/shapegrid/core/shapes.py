# どこで: `src/shapegrid/core/shapes.py`。
# 何を: 組み込み 11 形状の単位タイル上の頂点定義と、そのレジストリを提供する。
# なぜ: ライブ描画・PNG/SVG export・アイコン生成が同じ頂点列を共有し、見た目を一致させるため。

from __future__ import annotations

import math
from collections.abc import ItemsView
from dataclasses import dataclass
from typing import Callable

import numpy as np

EMPTY_SHAPE_ID = -1
CUSTOM_SHAPE_BASE = 11

ELLIPSE_SEGMENTS = 64
ARC_SEGMENTS = 32

ShapeFunc = Callable[[], np.ndarray]


@dataclass(frozen=True, slots=True)
class TileShape:
    """単位タイル [0,1]x[0,1]（y 下向き）上の閉多角形として表した組み込み形状。

    Parameters
    ----------
    shape_id : int
        0..10 の組み込み形状 id。
    name : str
        表示名。
    vertices : np.ndarray
        float64 型 shape (N, 2) の頂点配列。終端は始点に戻さない。
    """

    shape_id: int
    name: str
    vertices: np.ndarray

    def scaled(self, width: float, height: float) -> np.ndarray:
        """タイル寸法 (width, height) に拡大した頂点配列を返す。"""

        return self.vertices * np.array([float(width), float(height)], dtype=np.float64)


class ShapeRegistry:
    """組み込み形状 id と頂点生成関数を対応付けるレジストリ。"""

    def __init__(self) -> None:
        self._items: dict[int, TileShape] = {}

    def _register(self, shape_id: int, name: str, func: ShapeFunc) -> None:
        if shape_id in self._items:
            raise ValueError(f"shape id {shape_id} は既に登録されている")
        vertices = np.asarray(func(), dtype=np.float64)
        if vertices.ndim != 2 or vertices.shape[1] != 2 or vertices.shape[0] < 3:
            raise ValueError(f"shape '{name}' の頂点は shape (N>=3, 2) である必要がある")
        vertices.setflags(write=False)
        self._items[shape_id] = TileShape(shape_id=shape_id, name=name, vertices=vertices)

    def get(self, shape_id: int) -> TileShape:
        """id に対応する TileShape を返す。

        Raises
        ------
        KeyError
            組み込み形状でない id が指定された場合。
        """
        return self._items[int(shape_id)]

    def __contains__(self, shape_id: object) -> bool:
        return shape_id in self._items

    def __getitem__(self, shape_id: int) -> TileShape:
        return self.get(shape_id)

    def items(self) -> ItemsView[int, TileShape]:
        return self._items.items()

    def ids(self) -> tuple[int, ...]:
        """登録済み id を昇順で返す。"""
        return tuple(sorted(self._items))


shape_registry = ShapeRegistry()
"""グローバルな組み込み形状レジストリインスタンス。"""


def tile_shape(shape_id: int, name: str):
    """組み込み形状を登録するデコレータ。

    Examples
    --------
    @tile_shape(0, "circle")
    def _circle() -> np.ndarray:
        ...
    """

    def decorator(func: ShapeFunc) -> ShapeFunc:
        shape_registry._register(int(shape_id), str(name), func)
        return func

    return decorator


def _pie(cx: float, cy: float, start: float, stop: float) -> np.ndarray:
    """中心 (cx, cy)・半径 1 の扇形（中心点 + 円弧）を返す。"""

    angles = np.linspace(start, stop, num=ARC_SEGMENTS + 1, dtype=np.float64)
    arc = np.stack([cx + np.cos(angles), cy + np.sin(angles)], axis=1)
    return np.concatenate([np.array([[cx, cy]], dtype=np.float64), arc], axis=0)


@tile_shape(0, "circle")
def _circle() -> np.ndarray:
    angles = np.linspace(0.0, 2.0 * math.pi, num=ELLIPSE_SEGMENTS, endpoint=False)
    return np.stack([0.5 + 0.5 * np.cos(angles), 0.5 + 0.5 * np.sin(angles)], axis=1)


@tile_shape(1, "half_rect_bottom")
def _half_rect_bottom() -> np.ndarray:
    return np.array([[0.0, 0.5], [1.0, 0.5], [1.0, 1.0], [0.0, 1.0]])


@tile_shape(2, "half_rect_top")
def _half_rect_top() -> np.ndarray:
    return np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 0.5], [0.0, 0.5]])


@tile_shape(3, "trapezoid_left")
def _trapezoid_left() -> np.ndarray:
    return np.array([[0.0, 0.0], [0.5, 0.0], [1.0, 1.0], [0.5, 1.0]])


@tile_shape(4, "trapezoid_right")
def _trapezoid_right() -> np.ndarray:
    return np.array([[1.0, 0.0], [0.5, 0.0], [0.0, 1.0], [0.5, 1.0]])


@tile_shape(5, "half_left")
def _half_left() -> np.ndarray:
    return np.array([[0.0, 0.0], [0.5, 0.0], [0.5, 1.0], [0.0, 1.0]])


@tile_shape(6, "half_right")
def _half_right() -> np.ndarray:
    return np.array([[1.0, 0.0], [0.5, 0.0], [0.5, 1.0], [1.0, 1.0]])


@tile_shape(7, "quarter_top_left")
def _quarter_top_left() -> np.ndarray:
    return _pie(0.0, 0.0, 0.0, 0.5 * math.pi)


@tile_shape(8, "quarter_top_right")
def _quarter_top_right() -> np.ndarray:
    return _pie(1.0, 0.0, 0.5 * math.pi, math.pi)


@tile_shape(9, "quarter_bottom_right")
def _quarter_bottom_right() -> np.ndarray:
    return _pie(1.0, 1.0, math.pi, 1.5 * math.pi)


@tile_shape(10, "quarter_bottom_left")
def _quarter_bottom_left() -> np.ndarray:
    return _pie(0.0, 1.0, 1.5 * math.pi, 2.0 * math.pi)


BUILTIN_SHAPE_IDS: tuple[int, ...] = shape_registry.ids()


def is_builtin(shape_id: int) -> bool:
    """組み込み形状 id（0..10）なら True を返す。"""

    return 0 <= int(shape_id) < CUSTOM_SHAPE_BASE


def is_custom(shape_id: int) -> bool:
    """カスタム形状 id（11 以上）なら True を返す。"""

    return int(shape_id) >= CUSTOM_SHAPE_BASE


def shape_polygon(shape_id: int, width: float, height: float) -> np.ndarray:
    """組み込み形状をタイル寸法に拡大した頂点配列 (N, 2) を返す。"""

    return shape_registry.get(shape_id).scaled(width, height)


__all__ = [
    "ARC_SEGMENTS",
    "BUILTIN_SHAPE_IDS",
    "CUSTOM_SHAPE_BASE",
    "ELLIPSE_SEGMENTS",
    "EMPTY_SHAPE_ID",
    "TileShape",
    "is_builtin",
    "is_custom",
    "shape_polygon",
    "shape_registry",
    "tile_shape",
]
