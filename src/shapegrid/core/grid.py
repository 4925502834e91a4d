"""
どこで: `src/shapegrid/core/grid.py`。
何を: cols×rows のセル状態（形状 id・色 index・ロック）を保持し、編集操作を提供する。
なぜ: ポインタ操作・描画・画像サンプリングが同じグリッド状態を同期的に更新するため。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator

import numpy as np

from shapegrid.core.assets import CustomAsset
from shapegrid.core.catalog import ShapeCatalog
from shapegrid.core.shapes import EMPTY_SHAPE_ID, is_custom

_logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Cell:
    """グリッドの 1 スロット。

    Parameters
    ----------
    shape_id : int
        -1 は空、0..10 は組み込み、11 以上はカスタム。
    color_index : int
        パレット上の色 index（解決はパレット長の剰余）。
    locked : bool
        True なら描画とポインタ編集の対象外。
    last_cycle_frame : int
        ホバーによる形状切り替えを最後に行ったフレーム。
    """

    shape_id: int = EMPTY_SHAPE_ID
    color_index: int = 0
    locked: bool = False
    last_cycle_frame: int = 0

    @property
    def is_empty(self) -> bool:
        return self.shape_id == EMPTY_SHAPE_ID

    def copy(self) -> "Cell":
        return Cell(
            shape_id=self.shape_id,
            color_index=self.color_index,
            locked=self.locked,
            last_cycle_frame=self.last_cycle_frame,
        )


class ShapeGrid:
    """`[col][row]` で索引するセル 2 次元配列とカタログの組。

    Notes
    -----
    可視配列の寸法は常に (cols, rows) と一致する。
    縮小で可視範囲外に出たセルは退避し、再拡大時に復元する（reset で破棄）。
    """

    def __init__(
        self,
        cols: int,
        rows: int,
        *,
        catalog: ShapeCatalog | None = None,
        seed: int | None = None,
        fill_policy: str = "empty",
    ) -> None:
        self.catalog = catalog if catalog is not None else ShapeCatalog()
        self.rng = np.random.default_rng(seed)
        self._cols = 0
        self._rows = 0
        self._cells: list[list[Cell]] = []
        self._stash: dict[tuple[int, int], Cell] = {}
        self.resize(cols, rows, fill_policy=fill_policy)

    # --- shape ----------------------------------------------------------

    @property
    def cols(self) -> int:
        return self._cols

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def shape(self) -> tuple[int, int]:
        return self._cols, self._rows

    def in_bounds(self, col: int, row: int) -> bool:
        return 0 <= int(col) < self._cols and 0 <= int(row) < self._rows

    def cell(self, col: int, row: int) -> Cell:
        """(col, row) のセルを返す。

        Raises
        ------
        IndexError
            範囲外の場合。
        """
        if not self.in_bounds(col, row):
            raise IndexError(f"cell ({col}, {row}) は範囲外: grid={self.shape}")
        return self._cells[int(col)][int(row)]

    def iter_cells(self) -> Iterator[tuple[int, int, Cell]]:
        """(col, row, cell) を行優先（row 外側・col 内側）で列挙する。"""

        for row in range(self._rows):
            for col in range(self._cols):
                yield col, row, self._cells[col][row]

    def shape_ids(self) -> np.ndarray:
        """形状 id を shape (cols, rows) の int 配列で返す。"""

        out = np.full((self._cols, self._rows), EMPTY_SHAPE_ID, dtype=np.int64)
        for col, row, cell in self.iter_cells():
            out[col, row] = cell.shape_id
        return out

    def _all_cells(self) -> Iterator[Cell]:
        """可視セルと退避セルをすべて列挙する。"""

        for column in self._cells:
            yield from column
        yield from self._stash.values()

    def random_shape(self) -> int:
        """カタログから一様に 1 つ選んだ id を返す（空なら EMPTY_SHAPE_ID）。"""

        if self.catalog.is_empty():
            return EMPTY_SHAPE_ID
        return self.catalog[int(self.rng.integers(len(self.catalog)))]

    def _new_cell(self, fill_policy: str) -> Cell:
        if fill_policy == "random":
            return Cell(shape_id=self.random_shape())
        if fill_policy == "empty":
            return Cell()
        raise ValueError(f"未対応の fill_policy: {fill_policy!r}")

    def resize(self, cols: int, rows: int, *, fill_policy: str = "random") -> None:
        """グリッドを (cols, rows) に作り直す。

        Parameters
        ----------
        cols, rows : int
            新しい寸法。
        fill_policy : str
            新規セルの埋め方。`"random"` はカタログからランダム（空カタログなら空セル）、
            `"empty"` は空セル。

        Raises
        ------
        ValueError
            寸法が正でない場合。
        """
        new_cols = int(cols)
        new_rows = int(rows)
        if new_cols <= 0 or new_rows <= 0:
            raise ValueError(f"grid の寸法は正である必要がある: got=({cols}, {rows})")

        for c in range(self._cols):
            for r in range(self._rows):
                if c >= new_cols or r >= new_rows:
                    self._stash[(c, r)] = self._cells[c][r]

        old = self._cells
        cells: list[list[Cell]] = []
        for c in range(new_cols):
            column: list[Cell] = []
            for r in range(new_rows):
                if c < self._cols and r < self._rows:
                    column.append(old[c][r])
                elif (c, r) in self._stash:
                    column.append(self._stash.pop((c, r)))
                else:
                    column.append(self._new_cell(fill_policy))
            cells.append(column)

        self._cells = cells
        self._cols = new_cols
        self._rows = new_rows

    def reset(self) -> None:
        """全セルを空セルで作り直し、退避セルも破棄する。"""

        self._stash.clear()
        self._cells = [[Cell() for _ in range(self._rows)] for _ in range(self._cols)]

    # --- cell edits ----------------------------------------------------

    def set_cell(self, col: int, row: int, shape_id: int, color_index: int = 0) -> None:
        """セルの形状 id と色 index を設定する。"""

        cell = self.cell(col, row)
        sid = int(shape_id)
        if sid != EMPTY_SHAPE_ID and not self.catalog.is_known(sid):
            raise ValueError(f"未知の shape id: {sid}")
        cell.shape_id = sid
        cell.color_index = int(color_index)

    def clear_cell(self, col: int, row: int) -> None:
        """セルを空にしてロックを外す（色 index は保持する）。"""

        cell = self.cell(col, row)
        cell.shape_id = EMPTY_SHAPE_ID
        cell.locked = False

    def set_locked(self, col: int, row: int, locked: bool) -> None:
        self.cell(col, row).locked = bool(locked)

    def clear_all(self) -> None:
        """全セルを空・非ロック・色 0 にする。"""

        for column in self._cells:
            for cell in column:
                cell.shape_id = EMPTY_SHAPE_ID
                cell.locked = False
                cell.color_index = 0

    def cycle_cell(self, col: int, row: int, *, palette_size: int = 0) -> bool:
        """セルの形状をカタログ順で 1 つ進める。

        Notes
        -----
        空セルはカタログ先頭になる。palette_size > 0 なら色 index も巡回で進める。
        ロック中のセル、または空カタログでは何もせず False を返す。
        """

        cell = self.cell(col, row)
        if cell.locked:
            return False
        if self.catalog.is_empty():
            _logger.debug("カタログが空のため cycle を無視します: cell=(%d, %d)", col, row)
            return False
        if cell.is_empty:
            cell.shape_id = self.catalog.first()
        else:
            cell.shape_id = self.catalog.next_after(cell.shape_id)
        if palette_size > 0:
            cell.color_index = (cell.color_index + 1) % int(palette_size)
        return True

    def paint_cell(self, col: int, row: int, *, palette_size: int = 0) -> bool:
        """空かつ非ロックのセルをランダムな形状で埋める。埋めたら True を返す。"""

        cell = self.cell(col, row)
        if cell.locked or not cell.is_empty:
            return False
        if self.catalog.is_empty():
            _logger.debug("カタログが空のため paint を無視します: cell=(%d, %d)", col, row)
            return False
        cell.shape_id = self.random_shape()
        if palette_size > 0:
            cell.color_index = int(self.rng.integers(int(palette_size)))
        return True

    # --- catalog edits ---------------------------------------------------

    def toggle_shape_availability(self, shape_id: int, enabled: bool) -> bool:
        """形状の有効/無効を切り替え、既存セルへ反映する。

        Notes
        -----
        無効化: その id を持つ全セルを残りのカタログからランダムに選び直す
        （カタログが空になれば空セルにする）。
        有効化: 既存の非空セルを確率 `1/|catalog|` でその id に置き換える。

        Returns
        -------
        bool
            カタログが変化したら True。
        """

        sid = int(shape_id)
        if enabled:
            if not self.catalog.enable(sid):
                return False
            probability = 1.0 / float(len(self.catalog))
            for cell in self._all_cells():
                if not cell.is_empty and self.rng.random() < probability:
                    cell.shape_id = sid
            return True

        if not self.catalog.disable(sid):
            return False
        for cell in self._all_cells():
            if cell.shape_id == sid:
                cell.shape_id = self.random_shape()
        return True

    def add_custom_asset(self, asset: CustomAsset, name: str | None = None) -> int:
        """カスタムアセットをカタログに追加し、その id を返す。"""

        return self.catalog.add_custom(asset, name)

    def remove_custom_asset(self, index: int, *, relink: bool = False) -> int:
        """位置 index のカスタムアセットを削除する。

        Notes
        -----
        既定ではカスタム id（11 以上）を持つ全セルを空にする。
        relink=True の場合は、生き残ったアセットを参照するセルを新しい id へ付け替え、
        削除されたアセットを参照するセルだけを空にする。

        Returns
        -------
        int
            空にしたセルの数。
        """

        removal = self.catalog.remove_custom(index)
        emptied = 0
        for cell in self._all_cells():
            if not is_custom(cell.shape_id):
                continue
            if relink and cell.shape_id in removal.id_map:
                cell.shape_id = removal.id_map[cell.shape_id]
                continue
            cell.shape_id = EMPTY_SHAPE_ID
            emptied += 1
        return emptied

    # --- bulk -----------------------------------------------------------

    def fill_randomly(self, seed: int, *, palette_size: int = 0) -> None:
        """既存の非空セルをシャッフルして先頭から詰め直す。

        Notes
        -----
        seed で RNG を初期化し直す。非空セルが無ければ、各セルを確率 0.7 で
        ランダムな形状で埋める（palette_size > 0 なら色 index もランダム）。
        セルの並びは `[col][row]`（col 外側）で走査する。
        """

        self.rng = np.random.default_rng(int(seed))

        pairs = [
            (cell.shape_id, cell.color_index)
            for column in self._cells
            for cell in column
            if not cell.is_empty
        ]

        if not pairs:
            for column in self._cells:
                for cell in column:
                    if self.rng.random() > 0.3:
                        cell.shape_id = self.random_shape()
                        if palette_size > 0:
                            cell.color_index = int(self.rng.integers(int(palette_size)))
                    else:
                        cell.shape_id = EMPTY_SHAPE_ID
            return

        order = self.rng.permutation(len(pairs))
        shuffled = [pairs[int(i)] for i in order]

        for column in self._cells:
            for cell in column:
                cell.shape_id = EMPTY_SHAPE_ID
                cell.color_index = 0

        it = iter(shuffled)
        for column in self._cells:
            for cell in column:
                pair = next(it, None)
                if pair is None:
                    return
                cell.shape_id, cell.color_index = pair


__all__ = ["Cell", "ShapeGrid"]
