"""
どこで: `src/shapegrid/core/assets.py`。
何を: ユーザーが追加する SVG 形状（カスタムアセット）の検証・ラスタライズ・マスク生成を提供する。
なぜ: カスタム形状をタイル寸法のアルファマスクとして扱い、色付け（tint-mask）を描画側に任せるため。
"""

from __future__ import annotations

import io
import logging
import subprocess
import tempfile
import uuid
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path

from PIL import Image

_logger = logging.getLogger(__name__)


class AssetDecodeError(RuntimeError):
    """アセット（SVG / ラスタ画像）のデコードに失敗した。"""


def _new_asset_key() -> str:
    return uuid.uuid4().hex


def validate_svg_text(svg_text: str) -> None:
    """SVG テキストとして解釈できるか検証する。

    Raises
    ------
    AssetDecodeError
        XML として壊れている、またはルート要素が `<svg>` でない場合。
    """

    try:
        root = ET.fromstring(svg_text)
    except ET.ParseError as exc:
        raise AssetDecodeError(f"SVG の解析に失敗しました: {exc}") from exc
    tag = str(root.tag)
    if tag.rsplit("}", 1)[-1] != "svg":
        raise AssetDecodeError(f"ルート要素が <svg> ではありません: got={tag!r}")


def _resvg_command(*, input_svg: Path, output_png: Path, size: tuple[int, int]) -> list[str]:
    w, h = size
    if int(w) <= 0 or int(h) <= 0:
        raise ValueError("size は正の (width, height) である必要がある")
    return [
        "resvg",
        "--width",
        str(int(w)),
        "--height",
        str(int(h)),
        str(input_svg),
        str(output_png),
    ]


def rasterize_svg(svg_text: str, size: tuple[int, int]) -> Image.Image:
    """SVG テキストを resvg で size ピクセルの RGBA 画像にラスタライズして返す。

    Raises
    ------
    RuntimeError
        resvg が見つからない、またはラスタライズに失敗した場合。
    """

    with tempfile.TemporaryDirectory(prefix="shapegrid-") as tmp:
        svg_path = Path(tmp) / "asset.svg"
        png_path = Path(tmp) / "asset.png"
        svg_path.write_text(svg_text, encoding="utf-8")
        cmd = _resvg_command(input_svg=svg_path, output_png=png_path, size=size)
        try:
            proc = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except FileNotFoundError as e:
            raise RuntimeError(
                "resvg が見つかりません（`resvg` をインストールして PATH を通してください）"
            ) from e

        if proc.returncode != 0:
            details = (proc.stderr or proc.stdout or "").strip()
            raise RuntimeError(f"resvg が失敗しました (code={proc.returncode}). {details}".strip())

        with Image.open(io.BytesIO(png_path.read_bytes())) as img:
            return img.convert("RGBA")


@dataclass(eq=False, slots=True)
class CustomAsset:
    """カスタム SVG 形状。

    Parameters
    ----------
    name : str
        表示名（通常は元ファイル名）。
    svg_text : str
        SVG ソース。
    key : str
        カタログ位置に依存しない不変の識別子。

    Notes
    -----
    ラスタライズ結果はタイル寸法ごとにアルファマスクとしてキャッシュする。
    resvg が使えない環境ではタイル全面のマスクで代替する。
    """

    name: str
    svg_text: str
    key: str = field(default_factory=_new_asset_key)
    _mask_cache: dict[tuple[int, int], Image.Image] = field(default_factory=dict, repr=False)
    _fallback_logged: bool = field(default=False, repr=False)

    def alpha_mask(self, size: tuple[int, int]) -> Image.Image:
        """size ピクセルのアルファマスク（mode "L"）を返す。"""

        w, h = int(size[0]), int(size[1])
        cached = self._mask_cache.get((w, h))
        if cached is not None:
            return cached
        try:
            mask = rasterize_svg(self.svg_text, (w, h)).getchannel("A")
        except RuntimeError:
            if not self._fallback_logged:
                _logger.warning(
                    "SVG アセットをラスタライズできないため矩形で代替します: %s",
                    self.name,
                    exc_info=True,
                )
                self._fallback_logged = True
            mask = Image.new("L", (w, h), 255)
        self._mask_cache[(w, h)] = mask
        return mask


def load_svg_asset(source: str | Path, *, name: str | None = None) -> CustomAsset:
    """SVG ファイルパスまたは SVG テキストから CustomAsset を作る。

    Raises
    ------
    AssetDecodeError
        読み込みまたは SVG 検証に失敗した場合。
    """

    if isinstance(source, Path) or (isinstance(source, str) and "<" not in source):
        path = Path(source)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise AssetDecodeError(f"SVG ファイルを読み込めません: {path}") from exc
        asset_name = name if name is not None else path.name
    else:
        text = str(source)
        asset_name = name if name is not None else "custom.svg"
    validate_svg_text(text)
    return CustomAsset(name=asset_name, svg_text=text)


def load_raster_image(source: str | Path | Image.Image) -> Image.Image:
    """ラスタ画像を RGB に変換して返す。

    Raises
    ------
    AssetDecodeError
        Pillow がデコードできない場合。
    """

    if isinstance(source, Image.Image):
        return source.convert("RGB")
    try:
        with Image.open(Path(source)) as img:
            img.load()
            return img.convert("RGB")
    except (OSError, ValueError) as exc:
        raise AssetDecodeError(f"画像をデコードできません: {source}") from exc


__all__ = [
    "AssetDecodeError",
    "CustomAsset",
    "load_raster_image",
    "load_svg_asset",
    "rasterize_svg",
    "validate_svg_text",
]
