import pytest

from penplot.filter import FilterParameter, Path, PathSet, PathSetFilter


def test_open_path_length():
    assert Path([(0.0, 0.0), (3.0, 0.0), (3.0, 4.0)]).length() == pytest.approx(7.0)


def test_closed_path_includes_closing_segment():
    assert Path([(0.0, 0.0), (3.0, 0.0), (3.0, 4.0)], closed=True).length() == pytest.approx(12.0)


def test_short_paths_have_zero_length():
    assert Path().length() == 0.0
    assert Path([(1.0, 1.0)], closed=True).length() == 0.0


def test_compute_aabb():
    ps = PathSet([Path([(1.0, 5.0), (-2.0, 3.0)]), Path([(4.0, -1.0)])])
    assert ps.compute_aabb() == (-2.0, -1.0, 4.0, 5.0)
    assert ps.aabb == (-2.0, -1.0, 4.0, 5.0)


def test_compute_aabb_empty():
    ps = PathSet([Path()])
    assert ps.compute_aabb() is None


def _filter_with_param():
    f = PathSetFilter()
    f.parameters["k"] = FilterParameter("K", 0.0, 1.0, 0.25)
    return f


def test_param_and_set_parameter_bumps_version():
    f = _filter_with_param()
    assert f.param("k") == 0.25
    start = f.version
    f.set_parameter("k", 0.75)
    assert f.param("k") == 0.75
    assert f.version == start + 1


def test_unknown_parameter_raises():
    f = PathSetFilter()
    with pytest.raises(KeyError):
        f.set_parameter("missing", 1.0)
    with pytest.raises(KeyError):
        f.param("missing")


def test_base_apply_copies_paths():
    src = PathSet([Path([(0.0, 0.0), (2.0, 2.0)], closed=True)], color=(1.0, 0.0, 0.0, 1.0))
    out = PathSetFilter().apply(src)
    assert out.paths == src.paths
    assert out.paths[0] is not src.paths[0]
    assert out.color == src.color
    assert out.aabb == (0.0, 0.0, 2.0, 2.0)