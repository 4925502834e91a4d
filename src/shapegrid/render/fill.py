# どこで: `src/shapegrid/render/fill.py`。
# 何を: セルの塗り方（線のみ / パレット色 / グラデーション / 単色）の決定と、塗り画像の生成を行う。
# なぜ: 優先順位の規則を 1 か所に置き、ライブ描画と export で同じ結果にするため。

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np
from PIL import Image

from shapegrid.core.color import RGB255, lerp_rgb255
from shapegrid.core.config import SketchConfig


class FillKind(Enum):
    STROKE = "stroke"
    PALETTE = "palette"
    GRADIENT = "gradient"
    FLAT = "flat"


@dataclass(frozen=True, slots=True)
class Fill:
    """1 セル分の塗り指定。

    Parameters
    ----------
    kind : FillKind
        塗りの種類。
    color : RGB255
        単色/パレット色/線色、またはグラデーション始点色。
    end_color : RGB255 or None
        グラデーション終点色。
    gradient_kind : str or None
        `"linear"`, `"diagonal"`, `"radial"`。
    """

    kind: FillKind
    color: RGB255
    end_color: RGB255 | None = None
    gradient_kind: str | None = None

    def representative_color(self) -> RGB255:
        """単色で近似するときの色を返す（グラデーションは中間色）。"""

        if self.kind is FillKind.GRADIENT and self.end_color is not None:
            return lerp_rgb255(self.color, self.end_color, 0.5)
        return self.color


def resolve_fill(config: SketchConfig, color_index: int) -> Fill:
    """設定とセルの色 index から塗りを決める。

    Notes
    -----
    優先順位は 線のみ > パレット > グラデーション > 単色（前景色）。
    """

    if config.stroke_mode:
        return Fill(kind=FillKind.STROKE, color=config.stroke_color)
    if config.palette_active:
        return Fill(kind=FillKind.PALETTE, color=config.palette.resolve(color_index))
    if config.use_gradient:
        return Fill(
            kind=FillKind.GRADIENT,
            color=config.foreground_color,
            end_color=config.gradient_color,
            gradient_kind=config.gradient_kind,
        )
    return Fill(kind=FillKind.FLAT, color=config.foreground_color)


def gradient_weights(size: tuple[int, int], kind: str) -> np.ndarray:
    """タイル寸法のグラデーション係数（0..1）を shape (H, W) で返す。

    Notes
    -----
    linear は上→下、diagonal は左上→右下、radial は中心から半径 max(w, h)/2。
    """

    w, h = int(size[0]), int(size[1])
    if w <= 0 or h <= 0:
        raise ValueError("size は正の (width, height) である必要がある")
    ys, xs = np.mgrid[0:h, 0:w].astype(np.float64)
    xs += 0.5
    ys += 0.5
    if kind == "linear":
        t = ys / float(h)
    elif kind == "diagonal":
        # (0,0)→(w,h) の方向ベクトルへの射影。
        dx, dy = float(w), float(h)
        t = (xs * dx + ys * dy) / (dx * dx + dy * dy)
    elif kind == "radial":
        radius = max(w, h) / 2.0
        t = np.hypot(xs - w / 2.0, ys - h / 2.0) / radius
    else:
        raise ValueError(f"未対応の gradient kind: {kind!r}")
    return np.clip(t, 0.0, 1.0)


def fill_image(fill: Fill, size: tuple[int, int]) -> Image.Image:
    """塗り指定をタイル寸法の RGB 画像にして返す。"""

    w, h = int(size[0]), int(size[1])
    if fill.kind is not FillKind.GRADIENT or fill.end_color is None:
        return Image.new("RGB", (w, h), fill.color)
    t = gradient_weights((w, h), fill.gradient_kind or "linear")[..., None]
    start = np.asarray(fill.color, dtype=np.float64)
    end = np.asarray(fill.end_color, dtype=np.float64)
    rgb = start + (end - start) * t
    return Image.fromarray(np.clip(np.rint(rgb), 0, 255).astype(np.uint8))


__all__ = ["Fill", "FillKind", "fill_image", "gradient_weights", "resolve_fill"]
