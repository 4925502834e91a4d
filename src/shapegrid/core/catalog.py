# どこで: `src/shapegrid/core/catalog.py`。
# 何を: 選択可能な形状 id の順序付き集合（カタログ）とカスタムアセット列を管理する。
# なぜ: クリック/ホバー/ペイント/サンプリングが同じ「有効形状の順序」を参照するため。

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

from shapegrid.core.assets import CustomAsset
from shapegrid.core.shapes import BUILTIN_SHAPE_IDS, CUSTOM_SHAPE_BASE, EMPTY_SHAPE_ID


@dataclass(frozen=True, slots=True)
class CustomRemoval:
    """カスタムアセット削除の結果。

    Parameters
    ----------
    removed_id : int
        削除されたアセットが持っていた id。
    id_map : dict[int, int]
        生き残ったアセットの旧 id → 新 id。
    """

    removed_id: int
    id_map: dict[int, int]


class ShapeCatalog:
    """有効な形状 id の順序付き集合。

    Notes
    -----
    組み込み id は 0..10、カスタム id は `11 + カスタム列内の位置`。
    有効 id 列は常に昇順に保つ。
    """

    def __init__(self, enabled: Iterable[int] | None = None) -> None:
        self._custom: list[CustomAsset] = []
        ids = BUILTIN_SHAPE_IDS if enabled is None else tuple(enabled)
        self._enabled: list[int] = []
        for shape_id in ids:
            self._check_known(int(shape_id))
            if int(shape_id) not in self._enabled:
                self._enabled.append(int(shape_id))
        self._enabled.sort()

    def _check_known(self, shape_id: int) -> None:
        if not self.is_known(shape_id):
            raise ValueError(f"未知の shape id: {shape_id}")

    def is_known(self, shape_id: int) -> bool:
        """組み込み、または現存するカスタムアセットの id なら True を返す。"""

        sid = int(shape_id)
        if sid in BUILTIN_SHAPE_IDS:
            return True
        return CUSTOM_SHAPE_BASE <= sid < CUSTOM_SHAPE_BASE + len(self._custom)

    @property
    def ids(self) -> tuple[int, ...]:
        """有効 id を順序どおりに返す。"""

        return tuple(self._enabled)

    def __len__(self) -> int:
        return len(self._enabled)

    def __iter__(self) -> Iterator[int]:
        return iter(tuple(self._enabled))

    def __contains__(self, shape_id: object) -> bool:
        return shape_id in self._enabled

    def __getitem__(self, index: int) -> int:
        return self._enabled[index]

    def is_empty(self) -> bool:
        return not self._enabled

    def position(self, shape_id: int) -> int:
        """有効 id 列での位置を返す（無効なら -1）。"""

        try:
            return self._enabled.index(int(shape_id))
        except ValueError:
            return -1

    def first(self) -> int:
        """先頭の有効 id を返す（空なら EMPTY_SHAPE_ID）。"""

        return self._enabled[0] if self._enabled else EMPTY_SHAPE_ID

    def next_after(self, shape_id: int) -> int:
        """shape_id の次の有効 id を巡回で返す。

        Notes
        -----
        shape_id が有効 id 列に無い（空セルを含む）場合は先頭を返す。
        カタログが空なら EMPTY_SHAPE_ID を返す。
        """

        if not self._enabled:
            return EMPTY_SHAPE_ID
        pos = self.position(shape_id)
        return self._enabled[(pos + 1) % len(self._enabled)]

    def offset(self, shape_id: int, steps: int) -> int:
        """shape_id の位置から steps だけ進めた有効 id を返す（無効 id はそのまま返す）。"""

        pos = self.position(shape_id)
        if pos < 0:
            return int(shape_id)
        return self._enabled[(pos + int(steps)) % len(self._enabled)]

    def enable(self, shape_id: int) -> bool:
        """id を有効化する。既に有効なら False を返す。"""

        sid = int(shape_id)
        self._check_known(sid)
        if sid in self._enabled:
            return False
        self._enabled.append(sid)
        self._enabled.sort()
        return True

    def disable(self, shape_id: int) -> bool:
        """id を無効化する。もともと無効なら False を返す。"""

        sid = int(shape_id)
        if sid not in self._enabled:
            return False
        self._enabled.remove(sid)
        return True

    # --- custom assets -------------------------------------------------

    @property
    def custom_assets(self) -> tuple[CustomAsset, ...]:
        return tuple(self._custom)

    @property
    def custom_names(self) -> tuple[str, ...]:
        return tuple(a.name for a in self._custom)

    def custom_asset(self, shape_id: int) -> CustomAsset | None:
        """カスタム id に対応するアセットを返す（範囲外なら None）。"""

        idx = int(shape_id) - CUSTOM_SHAPE_BASE
        if 0 <= idx < len(self._custom):
            return self._custom[idx]
        return None

    def id_for_key(self, key: str) -> int | None:
        """アセットの不変キーから現在の id を返す。"""

        for idx, asset in enumerate(self._custom):
            if asset.key == key:
                return CUSTOM_SHAPE_BASE + idx
        return None

    def add_custom(self, asset: CustomAsset, name: str | None = None) -> int:
        """カスタムアセットを末尾に追加して有効化し、割り当てた id を返す。"""

        if name is not None:
            asset.name = str(name)
        self._custom.append(asset)
        shape_id = CUSTOM_SHAPE_BASE + len(self._custom) - 1
        self._enabled.append(shape_id)
        self._enabled.sort()
        return shape_id

    def remove_custom(self, index: int) -> CustomRemoval:
        """位置 index のカスタムアセットを削除し、後続 id を詰め直す。

        Raises
        ------
        IndexError
            index が範囲外の場合。
        """

        idx = int(index)
        if idx < 0 or idx >= len(self._custom):
            raise IndexError(f"custom asset index が範囲外: {index}")

        removed_id = CUSTOM_SHAPE_BASE + idx
        id_map: dict[int, int] = {}
        for pos in range(idx + 1, len(self._custom)):
            id_map[CUSTOM_SHAPE_BASE + pos] = CUSTOM_SHAPE_BASE + pos - 1
        for pos in range(idx):
            id_map[CUSTOM_SHAPE_BASE + pos] = CUSTOM_SHAPE_BASE + pos
        del self._custom[idx]

        remapped: list[int] = []
        for sid in self._enabled:
            if sid == removed_id:
                continue
            remapped.append(id_map.get(sid, sid))
        self._enabled = sorted(remapped)
        return CustomRemoval(removed_id=removed_id, id_map=id_map)


__all__ = ["CustomRemoval", "ShapeCatalog"]
