# どこで: `src/shapegrid/core/animation.py`。
# 何を: 行/列の揺れに使う波形（sine / cosine / 平滑化ノイズ）と、セル単位の offset 計算を提供する。
# なぜ: 描画とポインタのヒットテストが同じ offset を使い、見た目と操作位置を一致させるため。

from __future__ import annotations

import math

import numpy as np

from shapegrid.core.config import AxisAnimation, SketchConfig

_NOISE_TABLE_SIZE = 256


class SmoothNoise1D:
    """格子点の乱数値を smoothstep 補間する 1 次元ノイズ。

    Notes
    -----
    出力は [-1, 1]。同じ seed なら同じ値列になる。
    """

    def __init__(self, seed: int = 0) -> None:
        rng = np.random.default_rng(int(seed))
        self._values = rng.uniform(-1.0, 1.0, size=_NOISE_TABLE_SIZE)

    def __call__(self, x: float) -> float:
        xf = float(x)
        x0 = math.floor(xf)
        frac = xf - x0
        i0 = int(x0) % _NOISE_TABLE_SIZE
        i1 = (i0 + 1) % _NOISE_TABLE_SIZE
        t = frac * frac * (3.0 - 2.0 * frac)
        v0 = float(self._values[i0])
        v1 = float(self._values[i1])
        return v0 + (v1 - v0) * t


_NOISE_CACHE: dict[int, SmoothNoise1D] = {}


def _noise_for_seed(seed: int) -> SmoothNoise1D:
    noise = _NOISE_CACHE.get(int(seed))
    if noise is None:
        noise = SmoothNoise1D(seed)
        _NOISE_CACHE[int(seed)] = noise
    return noise


def waveform_value(kind: str, x: float, *, seed: int = 0) -> float:
    """波形 kind の x における値（[-1, 1]）を返す。

    Raises
    ------
    ValueError
        未対応の kind が指定された場合。
    """

    if kind == "sine":
        return math.sin(float(x))
    if kind == "cosine":
        return math.cos(float(x))
    if kind == "noise":
        return _noise_for_seed(seed)(float(x))
    raise ValueError(f"未対応の waveform: {kind!r}")


def axis_oscillation(axis: AxisAnimation, index: int, frame: int, *, seed: int = 0) -> float:
    """軸 index の振動項 `amplitude * waveform(speed*frame + frequency*index)` を返す。"""

    if not axis.enabled:
        return 0.0
    phase = float(axis.speed) * float(frame) + float(axis.frequency) * float(index)
    return float(axis.amplitude) * waveform_value(axis.waveform, phase, seed=seed)


def cell_offset(config: SketchConfig, col: int, row: int, frame: int) -> tuple[float, float]:
    """セル (col, row) の表示 offset (dx, dy) [px, 等倍] を返す。

    Notes
    -----
    dx = row * row_shear + 行アニメーション(row)、
    dy = col * col_shear + 列アニメーション(col)。
    """

    anim = config.animation
    dx = float(row) * float(config.row_shear)
    dy = float(col) * float(config.col_shear)
    dx += axis_oscillation(anim.row, row, frame, seed=config.random_seed)
    dy += axis_oscillation(anim.col, col, frame, seed=config.random_seed + 1)
    return dx, dy


def cycle_steps(config: SketchConfig, frame: int) -> int:
    """形状サイクルアニメーションの送り量 `floor(frame * speed)` を返す（無効なら 0）。"""

    cycle = config.animation.cycle
    if not cycle.enabled:
        return 0
    return int(math.floor(float(frame) * float(cycle.speed)))


__all__ = [
    "SmoothNoise1D",
    "axis_oscillation",
    "cell_offset",
    "cycle_steps",
    "waveform_value",
]
