# どこで: `src/shapegrid/interactive/session.py`。
# 何を: 設定・グリッド・ポインタ・描画・export をまとめ、UI から呼ぶ操作面（SketchSession）を提供する。
# なぜ: UI 配線を薄く保ち、設定変更の副作用（リサイズ・ロック比率等）を 1 か所で扱うため。

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

from PIL import Image

from shapegrid.core.assets import load_raster_image, load_svg_asset
from shapegrid.core.catalog import ShapeCatalog
from shapegrid.core.color import Palette
from shapegrid.core.config import ASPECT_RATIOS, SketchConfig
from shapegrid.core.grid import ShapeGrid
from shapegrid.core.runtime_config import runtime_config
from shapegrid.core.sampler import SampleResult, sample_image_to_grid
from shapegrid.export.image import export_png
from shapegrid.export.svg import export_svg
from shapegrid.interactive.frame_clock import FrameClock
from shapegrid.interactive.pointer import PointerController
from shapegrid.render.renderer import GridRenderer

_logger = logging.getLogger(__name__)

RASTER_SUFFIXES = frozenset({".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp", ".tif", ".tiff"})
SVG_SUFFIXES = frozenset({".svg"})

AssetAddedCallback = Callable[[int], None]


class SketchSession:
    """1 枚のスケッチの編集セッション。

    Notes
    -----
    設定は不変の SketchConfig として保持し、変更のたびに差し替えて
    `config_version` を進める。グリッド寸法は常に config の (cols, rows) に揃える。
    """

    def __init__(
        self,
        config: SketchConfig | None = None,
        *,
        catalog: ShapeCatalog | None = None,
        renderer: GridRenderer | None = None,
        pointer: PointerController | None = None,
        clock: FrameClock | None = None,
    ) -> None:
        self._config = config if config is not None else SketchConfig()
        self.config_version = 0
        self.grid = ShapeGrid(
            self._config.cols,
            self._config.rows,
            catalog=catalog,
            seed=self._config.random_seed,
            fill_policy="empty",
        )
        self.renderer = renderer if renderer is not None else GridRenderer()
        self.pointer = pointer if pointer is not None else PointerController()
        self.clock = clock if clock is not None else FrameClock()
        self._shown_frame = self.clock.frame
        self._asset_added: list[AssetAddedCallback] = []

    # --- config --------------------------------------------------------

    @property
    def config(self) -> SketchConfig:
        return self._config

    @property
    def shown_frame(self) -> int:
        """直近に描画したフレーム番号（未描画なら時計の現在値）を返す。"""

        return self._shown_frame

    @property
    def catalog(self) -> ShapeCatalog:
        return self.grid.catalog

    def update_config(self, **changes: Any) -> SketchConfig:
        """設定を差し替える。寸法が変われば fill_policy に従ってグリッドをリサイズする。"""

        new_config = self._config.with_changes(**changes)
        if new_config == self._config:
            return self._config
        resized = (new_config.cols, new_config.rows) != self.grid.shape
        self._config = new_config
        self.config_version += 1
        if resized:
            self.grid.resize(new_config.cols, new_config.rows, fill_policy=new_config.fill_policy)
        return self._config

    def set_cols(self, cols: int) -> SketchConfig:
        """列数を変える（lock_aspect 中は行数も揃える）。"""

        if self._config.lock_aspect:
            return self.update_config(cols=int(cols), rows=int(cols))
        return self.update_config(cols=int(cols))

    def set_rows(self, rows: int) -> SketchConfig:
        """行数を変える（lock_aspect 中は列数も揃える）。"""

        if self._config.lock_aspect:
            return self.update_config(cols=int(rows), rows=int(rows))
        return self.update_config(rows=int(rows))

    def set_lock_aspect(self, locked: bool) -> SketchConfig:
        """行列数ロックを切り替える。有効化時は行数を列数に揃える。"""

        if locked:
            return self.update_config(lock_aspect=True, rows=self._config.cols)
        return self.update_config(lock_aspect=False)

    def set_aspect_ratio(self, ratio: str) -> SketchConfig:
        """キャンバスの縦横比を変える（グリッド状態は保持）。"""

        if ratio not in ASPECT_RATIOS:
            raise ValueError(f"未対応の aspect_ratio: {ratio!r}")
        return self.update_config(aspect_ratio=ratio)

    # --- catalog -------------------------------------------------------

    def toggle_shape(self, shape_id: int, enabled: bool) -> bool:
        """形状の有効/無効を切り替える。"""

        return self.grid.toggle_shape_availability(shape_id, enabled)

    def on_asset_added(self, callback: AssetAddedCallback) -> None:
        """カスタム形状追加時に新 id で呼ばれるコールバックを登録する。"""

        self._asset_added.append(callback)

    def add_svg_asset(self, source: str | Path, *, name: str | None = None) -> int:
        """SVG をカスタム形状として追加し、その id を返す。

        Raises
        ------
        AssetDecodeError
            SVG を読み込めない場合（グリッドとカタログは変更しない）。
        """

        asset = load_svg_asset(source, name=name)
        shape_id = self.grid.add_custom_asset(asset)
        _logger.info("カスタム形状を追加しました: id=%d name=%s", shape_id, asset.name)
        for callback in list(self._asset_added):
            callback(shape_id)
        return shape_id

    def remove_custom_asset(self, index: int, *, relink: bool = False) -> int:
        """位置 index のカスタム形状を削除し、空にしたセル数を返す。"""

        return self.grid.remove_custom_asset(index, relink=relink)

    # --- palette -------------------------------------------------------

    def add_color(self, color: object) -> bool:
        """パレットに色を追加してパレット使用を有効にする。満杯なら False を返す。"""

        palette = self._config.palette.with_color(color)
        if palette is self._config.palette:
            return False
        self.update_config(palette=palette, use_palette=True)
        return True

    def remove_color(self, index: int) -> bool:
        """パレットから色を除く。空になればパレット使用を無効にする。"""

        palette = self._config.palette.without_index(index)
        if palette is self._config.palette:
            return False
        self.update_config(palette=palette, use_palette=bool(palette) and self._config.use_palette)
        return True

    def clear_palette(self) -> None:
        self.update_config(palette=Palette(), use_palette=False)

    # --- bulk edits ----------------------------------------------------

    def _palette_size(self) -> int:
        return len(self._config.palette) if self._config.palette_active else 0

    def fill_randomly(self) -> None:
        """random_seed で既存セルをシャッフルする（空グリッドならランダムに埋める）。"""

        self.grid.fill_randomly(self._config.random_seed, palette_size=self._palette_size())

    def clear_canvas(self) -> None:
        self.grid.clear_all()

    # --- files ---------------------------------------------------------

    def load_image(self, source: str | Path | Image.Image) -> SampleResult:
        """ラスタ画像をグリッドへサンプリングする。

        Raises
        ------
        AssetDecodeError
            画像をデコードできない場合（グリッドは変更しない）。
        """

        image = load_raster_image(source)
        result = sample_image_to_grid(image, self.grid, self._config)
        if result.palette is not None:
            self.update_config(palette=result.palette, use_palette=True)
        return result

    def drop_file(self, path: str | Path) -> bool:
        """ドロップされたファイルを種類に応じて処理する。

        Notes
        -----
        SVG はカスタム形状として追加、ラスタ画像はグリッドへサンプリングする。
        それ以外は無視して False を返す。デコード失敗は AssetDecodeError を送出する。
        """

        p = Path(path)
        suffix = p.suffix.lower()
        if suffix in SVG_SUFFIXES:
            self.add_svg_asset(p)
            return True
        if suffix in RASTER_SUFFIXES:
            self.load_image(p)
            return True
        _logger.warning("未対応のファイル形式のため無視します: %s", p)
        return False

    # --- pointer -------------------------------------------------------

    def press(self, x: float, y: float) -> None:
        self.pointer.press(x, y)

    def move(
        self,
        x: float,
        y: float,
        *,
        clear_modifier: bool = False,
        cycle_modifier: bool = False,
    ) -> bool:
        return self.pointer.move(
            x,
            y,
            self.grid,
            self._config,
            frame=self._shown_frame,
            clear_modifier=clear_modifier,
            cycle_modifier=cycle_modifier,
        )

    def release(self, x: float, y: float) -> bool:
        return self.pointer.release(x, y, self.grid, self._config, frame=self._shown_frame)

    # --- render / export ---------------------------------------------

    def render(self) -> Image.Image:
        """現在のフレームを描画し、フレームを 1 つ進めて画像を返す。

        Notes
        -----
        描画したフレーム番号を保持し、以降のヒットテストと保存はそのフレームで行う。
        """

        self._shown_frame = self.clock.frame
        image = self.renderer.render_frame(
            self.grid,
            self._config,
            frame=self._shown_frame,
            hover=self.pointer.hover,
        )
        self.clock.tick()
        return image

    def save_png(self, scale: int | None = None, *, output_dir: str | Path | None = None) -> Path:
        """表示中のフレームを PNG として保存し、保存先パスを返す。"""

        s = runtime_config().png_scale if scale is None else scale
        try:
            return export_png(
                self.grid,
                self._config,
                scale=s,
                output_dir=output_dir,
                frame=self._shown_frame,
                renderer=self.renderer,
            )
        except OSError:
            _logger.exception("Failed to save PNG")
            raise

    def save_svg(self, path: str | Path) -> Path:
        """表示中のフレームを SVG として保存し、保存先パスを返す。"""

        try:
            return export_svg(self.grid, self._config, path, frame=self._shown_frame)
        except OSError:
            _logger.exception("Failed to save SVG: %s", path)
            raise


__all__ = ["SketchSession"]
