# どこで: `src/shapegrid/cli.py`。
# 何を: スケッチ設定から 1 フレームを描いて PNG/SVG に書き出す `shapegrid render` を提供する。
# なぜ: 対話 UI なしでも設定ファイルと入力画像から同じ描画経路で出力できるようにするため。

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from shapegrid.core.assets import AssetDecodeError
from shapegrid.core.config import SketchConfig, load_sketch_config
from shapegrid.core.runtime_config import output_root_dir, set_config_path
from shapegrid.interactive.frame_clock import FrameClock
from shapegrid.interactive.session import SketchSession

_logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="shapegrid")
    sub = p.add_subparsers(dest="command", required=True)

    r = sub.add_parser("render", help="スケッチを描画して PNG/SVG に保存する")
    r.add_argument("--config", default="", help="スケッチ設定 YAML（省略時は既定値）")
    r.add_argument("--runtime-config", default="", help="実行時設定 config.yaml の明示パス")
    r.add_argument("--image", default="", help="グリッドへサンプリングするラスタ画像")
    r.add_argument(
        "--svg",
        action="append",
        default=[],
        help="カスタム形状として追加する SVG（複数指定可）",
    )
    r.add_argument(
        "--fill-random",
        action="store_true",
        help="random_seed でグリッドをランダムに埋める（--image より先に適用）",
    )
    r.add_argument("--frame", type=int, default=0, help="描画するフレーム番号")
    r.add_argument("--scale", type=int, default=None, help="PNG の整数倍率（省略時は config.yaml）")
    r.add_argument("--output", default="", help="出力ディレクトリ（省略時は {output_root}/png|svg）")
    r.add_argument("--format", choices=("png", "svg"), default="png", help="出力形式")
    return p.parse_args(argv)


def _build_session(args: argparse.Namespace) -> SketchSession:
    config = load_sketch_config(args.config) if args.config else SketchConfig()
    session = SketchSession(config, clock=FrameClock(start_frame=int(args.frame)))
    for svg in args.svg:
        session.add_svg_asset(Path(svg))
    if args.fill_random:
        session.fill_randomly()
    if args.image:
        session.load_image(Path(args.image))
    return session


def _render(args: argparse.Namespace) -> int:
    if args.runtime_config:
        set_config_path(args.runtime_config)

    try:
        session = _build_session(args)
    except (AssetDecodeError, FileNotFoundError, ValueError) as exc:
        _logger.error("入力を読み込めませんでした: %s", exc)
        return 2

    if args.format == "svg":
        out_dir = Path(args.output) if args.output else output_root_dir() / "svg"
        path = session.save_svg(out_dir / "shape-grid.svg")
    else:
        out_dir = Path(args.output) if args.output else None
        path = session.save_png(args.scale, output_dir=out_dir)

    print(path)  # noqa: T201
    return 0


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    args = _parse_args(argv)
    if args.command == "render":
        return _render(args)
    return 2


__all__ = ["main"]
