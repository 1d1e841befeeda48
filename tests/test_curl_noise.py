import math

import pytest

from penplot.curl_noise import CurlNoiseFilter, fbm2, noise_gradient, perlin2
from penplot.filter import Path, PathSet


@pytest.mark.parametrize("x,y", [(0, 0), (3, -2), (-7, 11)])
def test_perlin_zero_on_lattice(x, y):
    assert perlin2(float(x), float(y), 42) == pytest.approx(0.0, abs=1e-12)


def test_perlin_deterministic_and_bounded():
    samples = [perlin2(i * 0.37, i * 0.91, 5) for i in range(200)]
    assert samples == [perlin2(i * 0.37, i * 0.91, 5) for i in range(200)]
    assert all(abs(s) <= 2.0 for s in samples)
    assert any(abs(s) > 1e-3 for s in samples)


def test_perlin_seed_changes_field():
    a = [perlin2(i * 0.31 + 0.5, 0.25, 1) for i in range(50)]
    b = [perlin2(i * 0.31 + 0.5, 0.25, 2) for i in range(50)]
    assert a != b


def test_fbm_single_octave_equals_perlin():
    assert fbm2(1.3, 2.7, 1, 2.0, 0.5, 9) == perlin2(1.3, 2.7, 9)


def test_fbm_zero_gain_keeps_first_octave():
    assert fbm2(0.4, 0.8, 5, 2.0, 0.0, 3) == pytest.approx(perlin2(0.4, 0.8, 3))


def test_noise_gradient_matches_central_difference():
    dx, dy = noise_gradient(0.3, 0.6, 2, 2.0, 0.5, 1, 0.01)
    ex = (fbm2(0.31, 0.6, 2, 2.0, 0.5, 1) - fbm2(0.29, 0.6, 2, 2.0, 0.5, 1)) / 0.02
    assert dx == pytest.approx(ex, rel=1e-6)
    assert math.isfinite(dy)


def test_zero_amplitude_passes_through():
    f = CurlNoiseFilter()
    f.set_parameter("amplitudeMm", 0.0)
    src = PathSet([Path([(1.0, 2.0), (3.0, 4.0)], closed=True)])
    out = f.apply(src)
    assert out.paths == src.paths


def test_filter_preserves_structure_and_is_deterministic():
    f = CurlNoiseFilter()
    src = PathSet([Path([(float(i) * 7.3, float(i) * 3.1) for i in range(10)], closed=True)])
    out1 = f.apply(src)
    out2 = f.apply(src)
    assert out1.paths == out2.paths
    assert len(out1.paths[0].points) == 10
    assert out1.paths[0].closed is True
    assert out1.paths[0].points != src.paths[0].points


def test_displacement_scales_with_amplitude():
    src = PathSet([Path([(13.7, 21.9)])])
    f = CurlNoiseFilter()
    f.set_parameter("amplitudeMm", 1.0)
    small = f.apply(src).paths[0].points[0]
    f.set_parameter("amplitudeMm", 4.0)
    large = f.apply(src).paths[0].points[0]
    ox, oy = src.paths[0].points[0]
    assert large[0] - ox == pytest.approx(4.0 * (small[0] - ox))
    assert large[1] - oy == pytest.approx(4.0 * (small[1] - oy))