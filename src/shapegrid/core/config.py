"""
どこで: `src/shapegrid/core/config.py`。
何を: スケッチ設定（グリッド寸法・色・グラデーション・アニメーション等）を不変 dataclass として定義する。
なぜ: 描画・ポインタ操作・サンプリングへ明示的に渡し、隠れた共有可変状態を持たないため。
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping

from shapegrid.core.color import RGB255, Palette, parse_color

ASPECT_RATIOS: dict[str, tuple[int, int]] = {
    "1:1": (600, 600),
    "3:4": (600, 800),
    "4:3": (800, 600),
    "16:9": (800, 450),
    "9:16": (450, 800),
}

GRADIENT_KINDS = ("linear", "diagonal", "radial")
WAVEFORMS = ("sine", "cosine", "noise")
FILL_POLICIES = ("random", "empty")


@dataclass(frozen=True, slots=True)
class AxisAnimation:
    """1 軸分（row または col）の揺れアニメーション設定。

    Parameters
    ----------
    enabled : bool
        有効なら offset に振動項を加える。
    waveform : str
        `"sine"`, `"cosine"`, `"noise"` のいずれか。
    amplitude : float
        振幅 [px]。
    frequency : float
        軸 index あたりの位相差。
    speed : float
        フレームあたりの位相の進み。
    """

    enabled: bool = False
    waveform: str = "sine"
    amplitude: float = 10.0
    frequency: float = 0.5
    speed: float = 0.05

    def __post_init__(self) -> None:
        if self.waveform not in WAVEFORMS:
            raise ValueError(f"未対応の waveform: {self.waveform!r}（{', '.join(WAVEFORMS)}）")


@dataclass(frozen=True, slots=True)
class CycleAnimation:
    """カタログ順に表示形状を送る表示専用アニメーション設定。"""

    enabled: bool = False
    speed: float = 0.1


@dataclass(frozen=True, slots=True)
class AnimationConfig:
    """row/col の揺れと形状サイクルをまとめたアニメーション設定。"""

    row: AxisAnimation = field(default_factory=AxisAnimation)
    col: AxisAnimation = field(default_factory=AxisAnimation)
    cycle: CycleAnimation = field(default_factory=CycleAnimation)


@dataclass(frozen=True, slots=True)
class SketchConfig:
    """1 枚のスケッチを描くための設定一式。

    Notes
    -----
    インスタンスは不変とし、変更は `with_changes()` で新しいインスタンスを作る。
    色は RGB255 タプルで保持する。
    """

    cols: int = 3
    rows: int = 4
    aspect_ratio: str = "3:4"
    row_shear: float = 0.0
    col_shear: float = 0.0
    background_color: RGB255 = (0, 0, 0)
    foreground_color: RGB255 = (220, 220, 220)
    stroke_color: RGB255 = (0, 220, 0)
    gradient_color: RGB255 = (255, 107, 107)
    gradient_kind: str = "linear"
    use_gradient: bool = False
    use_palette: bool = False
    palette: Palette = field(default_factory=Palette)
    invert_pixels: bool = False
    stroke_mode: bool = False
    stroke_weight: float = 2.0
    extract_palette: bool = False
    lock_aspect: bool = False
    random_seed: int = 0
    fill_policy: str = "random"
    animation: AnimationConfig = field(default_factory=AnimationConfig)

    def __post_init__(self) -> None:
        cols = int(self.cols)
        rows = int(self.rows)
        if cols <= 0 or rows <= 0:
            raise ValueError(f"cols/rows は正の整数である必要がある: got=({self.cols}, {self.rows})")
        if self.aspect_ratio not in ASPECT_RATIOS:
            raise ValueError(f"未対応の aspect_ratio: {self.aspect_ratio!r}")
        if self.gradient_kind not in GRADIENT_KINDS:
            raise ValueError(f"未対応の gradient_kind: {self.gradient_kind!r}")
        if self.fill_policy not in FILL_POLICIES:
            raise ValueError(f"未対応の fill_policy: {self.fill_policy!r}")
        if float(self.stroke_weight) < 0:
            raise ValueError(f"stroke_weight は 0 以上である必要がある: got={self.stroke_weight}")
        object.__setattr__(self, "cols", cols)
        object.__setattr__(self, "rows", rows)
        for name in ("background_color", "foreground_color", "stroke_color", "gradient_color"):
            object.__setattr__(self, name, parse_color(getattr(self, name)))

    @property
    def canvas_size(self) -> tuple[int, int]:
        """aspect_ratio に対応するキャンバス寸法 (width, height) を返す。"""

        return ASPECT_RATIOS[self.aspect_ratio]

    @property
    def palette_active(self) -> bool:
        """パレット色で塗る状態なら True を返す。"""

        return bool(self.use_palette) and len(self.palette) > 0

    def with_changes(self, **changes: Any) -> "SketchConfig":
        """指定フィールドを差し替えた新しい SketchConfig を返す。"""

        return replace(self, **changes)


def _axis_from_mapping(data: Mapping[str, Any] | None) -> AxisAnimation:
    if not data:
        return AxisAnimation()
    return AxisAnimation(
        enabled=bool(data.get("enabled", False)),
        waveform=str(data.get("waveform", "sine")),
        amplitude=float(data.get("amplitude", 10.0)),
        frequency=float(data.get("frequency", 0.5)),
        speed=float(data.get("speed", 0.05)),
    )


def _as_section(value: Any, *, key: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if isinstance(value, Mapping):
        return value
    raise ValueError(f"{key} は mapping である必要がある: got={value!r}")


def sketch_config_from_mapping(data: Mapping[str, Any] | None) -> SketchConfig:
    """YAML 等から読んだ mapping を SketchConfig に変換して返す。

    Parameters
    ----------
    data : Mapping[str, Any] or None
        トップレベルのキーは SketchConfig のフィールド名。
        `palette` は色のリスト、`animation` は `row`/`col`/`cycle` を持つ mapping。

    Raises
    ------
    ValueError
        未知のキー、または不正な値を含む場合。
    """

    payload = dict(data or {})
    known = set(SketchConfig.__dataclass_fields__.keys())
    unknown = sorted(set(payload.keys()) - known)
    if unknown:
        raise ValueError(f"未知の設定キー: {unknown}")

    kwargs: dict[str, Any] = {}
    for key, value in payload.items():
        if key == "palette":
            kwargs[key] = Palette.from_colors(list(value or []))
        elif key == "animation":
            section = _as_section(value, key="animation")
            cycle = _as_section(section.get("cycle"), key="animation.cycle")
            kwargs[key] = AnimationConfig(
                row=_axis_from_mapping(_as_section(section.get("row"), key="animation.row")),
                col=_axis_from_mapping(_as_section(section.get("col"), key="animation.col")),
                cycle=CycleAnimation(
                    enabled=bool(cycle.get("enabled", False)),
                    speed=float(cycle.get("speed", 0.1)),
                ),
            )
        elif key.endswith("_color"):
            kwargs[key] = parse_color(value)
        else:
            kwargs[key] = value
    return SketchConfig(**kwargs)


def load_sketch_config(path: str | Path) -> SketchConfig:
    """YAML ファイルから SketchConfig をロードして返す。"""

    import yaml

    text = Path(path).read_text(encoding="utf-8")
    data = yaml.safe_load(text)
    if data is not None and not isinstance(data, dict):
        raise ValueError(f"スケッチ設定は mapping である必要がある: source={path}")
    return sketch_config_from_mapping(data)


__all__ = [
    "ASPECT_RATIOS",
    "AnimationConfig",
    "AxisAnimation",
    "CycleAnimation",
    "FILL_POLICIES",
    "GRADIENT_KINDS",
    "SketchConfig",
    "WAVEFORMS",
    "load_sketch_config",
    "sketch_config_from_mapping",
]
