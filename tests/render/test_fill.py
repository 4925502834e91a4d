from __future__ import annotations

import numpy as np
import pytest

from shapegrid.core.color import Palette
from shapegrid.core.config import SketchConfig
from shapegrid.render.fill import FillKind, fill_image, gradient_weights, resolve_fill


def test_fill_priority_stroke_palette_gradient_flat() -> None:
    palette = Palette(("#FF0000", "#00FF00"))
    config = SketchConfig(
        stroke_mode=True, use_palette=True, palette=palette, use_gradient=True
    )
    assert resolve_fill(config, 1).kind is FillKind.STROKE

    config = config.with_changes(stroke_mode=False)
    fill = resolve_fill(config, 3)
    assert fill.kind is FillKind.PALETTE
    assert fill.color == (0, 255, 0)

    config = config.with_changes(use_palette=False)
    fill = resolve_fill(config, 0)
    assert fill.kind is FillKind.GRADIENT
    assert fill.end_color == config.gradient_color

    config = config.with_changes(use_gradient=False)
    assert resolve_fill(config, 0).color == config.foreground_color


def test_use_palette_without_colors_falls_through() -> None:
    config = SketchConfig(use_palette=True)
    assert resolve_fill(config, 2).kind is FillKind.FLAT


def test_gradient_representative_color_is_midpoint() -> None:
    config = SketchConfig(
        use_gradient=True, foreground_color=(0, 0, 0), gradient_color=(200, 100, 0)
    )
    assert resolve_fill(config, 0).representative_color() == (100, 50, 0)


@pytest.mark.parametrize("kind", ["linear", "diagonal", "radial"])
def test_gradient_weights_are_clipped(kind: str) -> None:
    t = gradient_weights((20, 10), kind)
    assert t.shape == (10, 20)
    assert float(t.min()) >= 0.0
    assert float(t.max()) <= 1.0


def test_gradient_directions() -> None:
    linear = gradient_weights((10, 10), "linear")
    assert np.all(np.diff(linear[:, 0]) > 0)
    assert np.allclose(linear[0, :], linear[0, 0])

    diagonal = gradient_weights((10, 10), "diagonal")
    assert diagonal[0, 0] < diagonal[5, 5] < diagonal[9, 9]

    radial = gradient_weights((10, 10), "radial")
    assert radial[5, 5] < radial[0, 0]

    with pytest.raises(ValueError):
        gradient_weights((10, 10), "conic")


def test_fill_image_builds_gradient_pixels() -> None:
    config = SketchConfig(
        use_gradient=True, foreground_color=(0, 0, 0), gradient_color=(255, 255, 255)
    )
    image = fill_image(resolve_fill(config, 0), (4, 100))
    assert image.mode == "RGB"
    assert image.size == (4, 100)
    top = image.getpixel((0, 0))[0]
    bottom = image.getpixel((0, 99))[0]
    assert top < 5
    assert bottom > 250

    flat = fill_image(resolve_fill(SketchConfig(), 0), (3, 3))
    assert flat.getpixel((1, 1)) == (220, 220, 220)
