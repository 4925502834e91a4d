# どこで: `src/shapegrid/export/icons.py`。
# 何を: カタログの各形状を小さなアイコン画像として描画する。
# なぜ: 形状の有効/無効を選ぶ UI 向けに、ライブ描画と同じ頂点定義のサムネイルを用意するため。

from __future__ import annotations

from PIL import Image, ImageDraw

from shapegrid.core.catalog import ShapeCatalog
from shapegrid.core.color import RGB255
from shapegrid.core.shapes import BUILTIN_SHAPE_IDS, CUSTOM_SHAPE_BASE, is_builtin, shape_polygon


def render_shape_icon(
    catalog: ShapeCatalog,
    shape_id: int,
    *,
    size: int = 32,
    color: RGB255 = (220, 220, 220),
    background: RGB255 = (0, 0, 0),
) -> Image.Image:
    """形状 1 つを size×size の RGB アイコンとして返す。

    Raises
    ------
    KeyError
        組み込みでも現存カスタムでもない id の場合。
    """

    s = int(size)
    if s <= 0:
        raise ValueError(f"size は正の値である必要がある: got={size}")
    icon = Image.new("RGB", (s, s), background)

    if is_builtin(shape_id):
        points = shape_polygon(shape_id, s, s)
        ImageDraw.Draw(icon).polygon([(float(x), float(y)) for x, y in points], fill=color)
        return icon

    asset = catalog.custom_asset(shape_id)
    if asset is None:
        raise KeyError(f"未知の shape id: {shape_id}")
    icon.paste(Image.new("RGB", (s, s), color), (0, 0), asset.alpha_mask((s, s)))
    return icon


def render_catalog_icons(catalog: ShapeCatalog, *, size: int = 32) -> dict[int, Image.Image]:
    """組み込み全形状と現存カスタム形状のアイコンを id→画像 で返す。"""

    ids = list(BUILTIN_SHAPE_IDS)
    ids.extend(CUSTOM_SHAPE_BASE + i for i in range(len(catalog.custom_assets)))
    return {sid: render_shape_icon(catalog, sid, size=size) for sid in ids}


__all__ = ["render_catalog_icons", "render_shape_icon"]
