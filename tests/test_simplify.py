import pytest

from penplot.filter import Path, PathSet
from penplot.simplify import (
    SimplifyFilter,
    merge_colinear,
    rdp_simplify_closed,
    rdp_simplify_open,
)

SQUARE_WITH_MIDPOINTS = [
    (0.0, 0.0), (5.0, 0.0), (10.0, 0.0), (10.0, 5.0),
    (10.0, 10.0), (5.0, 10.0), (0.0, 10.0), (0.0, 5.0),
]


def test_rdp_open_collapses_straight_line():
    pts = [(float(i), 0.0) for i in range(10)]
    assert rdp_simplify_open(pts, 0.1) == [(0.0, 0.0), (9.0, 0.0)]


def test_rdp_open_keeps_significant_corner():
    pts = [(0.0, 0.0), (5.0, 0.0), (5.0, 5.0)]
    assert rdp_simplify_open(pts, 0.1) == pts


def test_rdp_open_short_inputs_copied():
    assert rdp_simplify_open([], 1.0) == []
    pts = [(0.0, 0.0), (1.0, 1.0)]
    out = rdp_simplify_open(pts, 1.0)
    assert out == pts and out is not pts


def test_rdp_open_result_is_subsequence():
    pts = [(float(i), (i % 3) * 0.4) for i in range(20)]
    out = rdp_simplify_open(pts, 0.5)
    it = iter(pts)
    assert all(p in it for p in out)
    assert out[0] == pts[0] and out[-1] == pts[-1]


def test_merge_colinear_open():
    assert merge_colinear([(0.0, 0.0), (1.0, 0.0), (2.0, 0.0)], False, 0.01) == [(0.0, 0.0), (2.0, 0.0)]


def test_merge_colinear_closed_drops_midpoints():
    out = merge_colinear(SQUARE_WITH_MIDPOINTS, True, 0.1)
    assert out == [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (0.0, 10.0)]


def test_rdp_closed_square_reduces_to_corners():
    out = rdp_simplify_closed(SQUARE_WITH_MIDPOINTS, 0.1)
    assert sorted(out) == sorted([(0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (0.0, 10.0)])


def test_rdp_closed_small_inputs_copied():
    tri = [(0.0, 0.0), (1.0, 0.0), (0.0, 1.0)]
    assert rdp_simplify_closed(tri, 5.0) == tri


def test_set_tolerance_clamps_negative():
    f = SimplifyFilter()
    f.set_tolerance(-3.0)
    assert f.param("toleranceMm") == 0.0
    f.set_tolerance(0.5)
    assert f.param("toleranceMm") == 0.5


def test_filter_removes_short_paths():
    f = SimplifyFilter()
    src = PathSet([Path([(0.0, 0.0), (0.5, 0.0)]), Path([(0.0, 0.0), (5.0, 0.0)])])
    out = f.apply(src)
    assert out.paths == [Path([(0.0, 0.0), (5.0, 0.0)])]


def test_filter_min_length_parameter_clamped_to_ten():
    f = SimplifyFilter()
    f.set_parameter("minPathLengthMm", 100.0)
    src = PathSet([Path([(0.0, 0.0), (10.0, 0.0)]), Path([(0.0, 0.0), (9.0, 0.0)])])
    out = f.apply(src)
    assert [p.length() for p in out.paths] == [pytest.approx(10.0)]


def test_filter_simplifies_open_and_closed():
    f = SimplifyFilter()
    f.set_tolerance(0.1)
    line = Path([(float(i), 0.0) for i in range(6)])
    square = Path(list(SQUARE_WITH_MIDPOINTS), closed=True)
    out = f.apply(PathSet([line, square]))
    assert out.paths[0].points == [(0.0, 0.0), (5.0, 0.0)]
    assert out.paths[1].closed is True
    assert len(out.paths[1].points) == 4
    assert out.paths[1].length() == pytest.approx(square.length())
    assert out.aabb == (0.0, 0.0, 10.0, 10.0)