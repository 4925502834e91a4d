# どこで: `src/shapegrid/__init__.py`。
# 何を: ルート `shapegrid` パッケージを定義し、主要な公開 API を再公開する。
# なぜ: import 起点を `shapegrid` に統一するため。

from __future__ import annotations

from shapegrid.core.assets import AssetDecodeError, CustomAsset
from shapegrid.core.catalog import ShapeCatalog
from shapegrid.core.color import Palette
from shapegrid.core.config import SketchConfig, load_sketch_config
from shapegrid.core.grid import Cell, ShapeGrid
from shapegrid.export.image import export_png
from shapegrid.export.svg import export_svg
from shapegrid.interactive.session import SketchSession
from shapegrid.render.renderer import GridRenderer

__all__ = [
    "AssetDecodeError",
    "Cell",
    "CustomAsset",
    "GridRenderer",
    "Palette",
    "ShapeCatalog",
    "ShapeGrid",
    "SketchConfig",
    "SketchSession",
    "export_png",
    "export_svg",
    "load_sketch_config",
]
