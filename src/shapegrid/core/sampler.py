"""
どこで: `src/shapegrid/core/sampler.py`。
何を: ラスタ画像をグリッド解像度へ最近傍サンプリングし、明度から形状（と色 index）を決める。
なぜ: 画像のドロップで、写真やロゴをタイル形状のパターンへ変換できるようにするため。
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np
from PIL import Image

from shapegrid.core.color import MAX_PALETTE_COLORS, RGB255, Palette
from shapegrid.core.config import SketchConfig
from shapegrid.core.grid import ShapeGrid
from shapegrid.core.shapes import EMPTY_SHAPE_ID

_logger = logging.getLogger(__name__)

BRIGHTNESS_THRESHOLD = 50.0
BRIGHTNESS_MAX = 255.0


@dataclass(frozen=True, slots=True)
class SampleResult:
    """サンプリング結果。

    Parameters
    ----------
    filled : int
        形状を割り当てたセル数。
    emptied : int
        空にしたセル数。
    palette : Palette or None
        パレット抽出を行った場合の新しいパレット。
    """

    filled: int
    emptied: int
    palette: Palette | None = None


def image_to_rgb_array(image: Image.Image) -> np.ndarray:
    """画像を uint8 型 shape (H, W, 3) の配列として返す。"""

    return np.asarray(image.convert("RGB"), dtype=np.uint8)


def sample_brightness(pixels: np.ndarray, cols: int, rows: int, *, invert: bool = False) -> np.ndarray:
    """各セル位置の明度を shape (cols, rows) の float 配列で返す。

    Notes
    -----
    セル (c, r) は画素 `(floor(c*W/cols), floor(r*H/rows))` を最近傍で参照する。
    明度は R/G/B の単純平均。invert=True なら `255 - 明度`。
    """

    h, w = int(pixels.shape[0]), int(pixels.shape[1])
    xs = np.floor(np.arange(cols, dtype=np.float64) * w / float(cols)).astype(np.int64)
    ys = np.floor(np.arange(rows, dtype=np.float64) * h / float(rows)).astype(np.int64)
    xs = np.clip(xs, 0, w - 1)
    ys = np.clip(ys, 0, h - 1)
    sampled = pixels[ys[None, :], xs[:, None], :3].astype(np.float64)
    brightness = sampled.sum(axis=2) / 3.0
    if invert:
        brightness = BRIGHTNESS_MAX - brightness
    return brightness


def brightness_to_index(brightness: float, count: int) -> int:
    """明度 [50, 255] を [0, count-1] の index へ線形に写して返す（50 未満は -1）。"""

    if brightness < BRIGHTNESS_THRESHOLD or count <= 0:
        return -1
    t = (float(brightness) - BRIGHTNESS_THRESHOLD) / (BRIGHTNESS_MAX - BRIGHTNESS_THRESHOLD)
    idx = int(math.floor(t * count))
    return 0 if idx < 0 else count - 1 if idx > count - 1 else idx


def extract_random_palette(pixels: np.ndarray, rng: np.random.Generator) -> Palette:
    """一様ランダムな画素位置から 4 色を拾ってパレットを作る。

    Notes
    -----
    支配色抽出ではなく、位置をランダムに選ぶだけの簡易版。
    """

    h, w = int(pixels.shape[0]), int(pixels.shape[1])
    colors: list[RGB255] = []
    for _ in range(MAX_PALETTE_COLORS):
        x = int(rng.integers(w))
        y = int(rng.integers(h))
        r, g, b = (int(v) for v in pixels[y, x, :3])
        colors.append((r, g, b))
    return Palette(tuple(colors))


def sample_image_to_grid(
    image: Image.Image,
    grid: ShapeGrid,
    config: SketchConfig,
) -> SampleResult:
    """画像をグリッドへ写す。

    Parameters
    ----------
    image : PIL.Image.Image
        入力ラスタ画像。
    grid : ShapeGrid
        書き込み先。カタログの現在の順序で形状を選ぶ。
    config : SketchConfig
        `invert_pixels` / `extract_palette` / `use_palette` / `palette` を参照する。

    Returns
    -------
    SampleResult
        パレット抽出を行った場合は新パレットを含む（config への反映は呼び出し側）。

    Notes
    -----
    カタログが空ならセルもパレットも変更しない。
    明度 < 50 のセルは空にする。50 以上は `[50, 255]` をカタログ長へ線形に写した
    index の形状にする。パレット抽出時は各セルの色 index をランダムに選ぶ。
    抽出なしでパレット使用中なら、色 index も明度から同じ規則で決める。
    """

    pixels = image_to_rgb_array(image)
    if pixels.size == 0:
        raise ValueError("空の画像はサンプリングできない")

    brightness = sample_brightness(pixels, grid.cols, grid.rows, invert=config.invert_pixels)
    catalog_ids = grid.catalog.ids
    if not catalog_ids:
        _logger.debug("カタログが空のためサンプリングを行いません")
        return SampleResult(filled=0, emptied=0)

    new_palette: Palette | None = None
    if config.extract_palette:
        new_palette = extract_random_palette(pixels, grid.rng)

    palette_len = len(config.palette) if config.palette_active else 0

    filled = 0
    emptied = 0
    for col, row, cell in grid.iter_cells():
        b = float(brightness[col, row])
        idx = brightness_to_index(b, len(catalog_ids))
        if idx < 0:
            cell.shape_id = EMPTY_SHAPE_ID
            emptied += 1
            continue
        cell.shape_id = catalog_ids[idx]
        filled += 1
        if new_palette is not None:
            cell.color_index = int(grid.rng.integers(len(new_palette)))
        elif palette_len > 0:
            cell.color_index = brightness_to_index(b, palette_len)

    return SampleResult(filled=filled, emptied=emptied, palette=new_palette)


__all__ = [
    "BRIGHTNESS_THRESHOLD",
    "SampleResult",
    "brightness_to_index",
    "extract_random_palette",
    "image_to_rgb_array",
    "sample_brightness",
    "sample_image_to_grid",
]
