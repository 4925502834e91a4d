from __future__ import annotations

import numpy as np
import pytest

from shapegrid.core.shapes import (
    BUILTIN_SHAPE_IDS,
    ELLIPSE_SEGMENTS,
    is_builtin,
    is_custom,
    shape_polygon,
    shape_registry,
    tile_shape,
)


def test_eleven_builtin_shapes_are_registered() -> None:
    assert BUILTIN_SHAPE_IDS == tuple(range(11))
    assert shape_registry[0].name == "circle"
    assert shape_registry[0].vertices.shape == (ELLIPSE_SEGMENTS, 2)


def test_all_vertices_stay_inside_unit_tile() -> None:
    for _sid, shape in shape_registry.items():
        assert np.all(shape.vertices >= -1e-9)
        assert np.all(shape.vertices <= 1.0 + 1e-9)


def test_shape_polygon_scales_to_tile_size() -> None:
    points = shape_polygon(1, 200.0, 100.0)
    np.testing.assert_allclose(points, [[0, 50], [200, 50], [200, 100], [0, 100]])


def test_quarter_pies_start_at_their_corner() -> None:
    corners = {7: (0.0, 0.0), 8: (1.0, 0.0), 9: (1.0, 1.0), 10: (0.0, 1.0)}
    for sid, corner in corners.items():
        np.testing.assert_allclose(shape_registry[sid].vertices[0], corner)


def test_vertices_are_read_only() -> None:
    with pytest.raises(ValueError):
        shape_registry[2].vertices[0, 0] = 5.0


def test_duplicate_registration_raises() -> None:
    with pytest.raises(ValueError):

        @tile_shape(0, "dup")
        def _dup() -> np.ndarray:
            return np.zeros((3, 2))


def test_id_ranges() -> None:
    assert is_builtin(0) and is_builtin(10)
    assert not is_builtin(-1) and not is_builtin(11)
    assert is_custom(11) and not is_custom(10)
    with pytest.raises(KeyError):
        shape_polygon(11, 10, 10)
