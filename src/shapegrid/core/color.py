"""
どこで: `src/shapegrid/core/color.py`。
何を: 色表現（RGB255 タプル）の正規化・変換と、最大 4 色のパレットを定義する。
なぜ: 設定・描画・サンプリングで同じ色表現と同じ index 解決規則を共有するため。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence, cast

RGB255 = tuple[int, int, int]

MAX_PALETTE_COLORS = 4


def coerce_rgb255(value: object) -> RGB255:
    """値を RGB255 タプル `(r, g, b)`（0..255）に正規化して返す。

    Parameters
    ----------
    value : object
        `(r, g, b)` の 3 要素シーケンス。

    Returns
    -------
    tuple[int, int, int]
        `int()` 化 + 0..255 clamp 済みの RGB。

    Raises
    ------
    ValueError
        長さ 3 のシーケンスでない場合。
    """

    try:
        r, g, b = value  # type: ignore[misc]
    except Exception as exc:
        raise ValueError(f"rgb value must be a length-3 sequence: {value!r}") from exc

    def _clamp(v: object) -> int:
        iv = int(cast(Any, v))
        return 0 if iv < 0 else 255 if iv > 255 else iv

    return _clamp(r), _clamp(g), _clamp(b)


def parse_color(value: object) -> RGB255:
    """`#RRGGBB` / `#RGB` 文字列または RGB シーケンスを RGB255 に変換して返す。"""

    if isinstance(value, str):
        text = value.strip().lstrip("#")
        if len(text) == 3:
            text = "".join(ch * 2 for ch in text)
        if len(text) != 6:
            raise ValueError(f"color は #RRGGBB 形式である必要がある: got={value!r}")
        try:
            return int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16)
        except ValueError as exc:
            raise ValueError(f"color は #RRGGBB 形式である必要がある: got={value!r}") from exc
    return coerce_rgb255(value)


def rgb255_to_hex(rgb: RGB255) -> str:
    """RGB255 を `#RRGGBB` に変換して返す。"""

    r, g, b = coerce_rgb255(rgb)
    return f"#{r:02X}{g:02X}{b:02X}"


def lerp_rgb255(a: RGB255, b: RGB255, t: float) -> RGB255:
    """a→b を t（0..1）で線形補間した RGB255 を返す。"""

    tf = 0.0 if t < 0.0 else 1.0 if t > 1.0 else float(t)
    return cast(
        RGB255,
        tuple(int(round(float(x) + (float(y) - float(x)) * tf)) for x, y in zip(a, b)),
    )


@dataclass(frozen=True, slots=True)
class Palette:
    """最大 4 色の順序付きパレット。

    Notes
    -----
    セルの color_index は `colors[index % len(colors)]` で解決する。
    パレット長が変わると同じ index が別の色を指す（剰余による再マップ）。
    """

    colors: tuple[RGB255, ...] = ()

    def __post_init__(self) -> None:
        colors = tuple(parse_color(c) for c in self.colors)
        if len(colors) > MAX_PALETTE_COLORS:
            raise ValueError(
                f"palette は最大 {MAX_PALETTE_COLORS} 色: got={len(colors)}"
            )
        object.__setattr__(self, "colors", colors)

    def __len__(self) -> int:
        return len(self.colors)

    def __bool__(self) -> bool:
        return bool(self.colors)

    def resolve(self, index: int) -> RGB255:
        """color_index を色に解決して返す。

        Raises
        ------
        ValueError
            パレットが空の場合。
        """

        if not self.colors:
            raise ValueError("空の palette では色を解決できない")
        return self.colors[int(index) % len(self.colors)]

    def with_color(self, color: object) -> "Palette":
        """色を末尾に追加した Palette を返す（満杯なら自身を返す）。"""

        if len(self.colors) >= MAX_PALETTE_COLORS:
            return self
        return Palette(self.colors + (parse_color(color),))

    def without_index(self, index: int) -> "Palette":
        """index の色を除いた Palette を返す（範囲外なら自身を返す）。"""

        i = int(index)
        if i < 0 or i >= len(self.colors):
            return self
        return Palette(self.colors[:i] + self.colors[i + 1 :])

    @classmethod
    def from_colors(cls, colors: Sequence[object]) -> "Palette":
        """色のシーケンスから先頭 4 色までの Palette を作る。"""

        return cls(tuple(parse_color(c) for c in list(colors)[:MAX_PALETTE_COLORS]))


__all__ = [
    "MAX_PALETTE_COLORS",
    "Palette",
    "RGB255",
    "coerce_rgb255",
    "lerp_rgb255",
    "parse_color",
    "rgb255_to_hex",
]
