"""Gradient noise and a curl-noise displacement filter for paths."""

from __future__ import annotations

import math

from penplot.filter import FilterParameter, Path, PathSet, PathSetFilter

_MASK = 0xFFFFFFFF
_DIAG = 0.70710678
_GRADIENTS = (
    (1.0, 0.0), (_DIAG, _DIAG), (0.0, 1.0), (-_DIAG, _DIAG),
    (-1.0, 0.0), (-_DIAG, -_DIAG), (0.0, -1.0), (_DIAG, -_DIAG),
)


def _hash32(x: int) -> int:
    x ^= x >> 16
    x = (x * 0x7FEB352D) & _MASK
    x ^= x >> 15
    x = (x * 0x846CA68B) & _MASK
    x ^= x >> 16
    return x


def _hash3i(x: int, y: int, z: int) -> int:
    ux = ((x & _MASK) * 0x8DA6B343) & _MASK
    uy = ((y & _MASK) * 0xD8163841) & _MASK
    uz = ((z & _MASK) * 0xCB1AB31F) & _MASK
    return _hash32(ux ^ uy ^ uz)


def _fade(t: float) -> float:
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def _grad(gx: int, gy: int, seed: int, dx: float, dy: float) -> float:
    vx, vy = _GRADIENTS[_hash3i(gx, gy, seed) & 7]
    return vx * dx + vy * dy


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def perlin2(x: float, y: float, seed: int) -> float:
    """2D gradient noise, roughly in [-1, 1], zero on integer lattice points."""
    x0, y0 = math.floor(x), math.floor(y)
    fx, fy = x - x0, y - y0
    n00 = _grad(x0, y0, seed, fx, fy)
    n10 = _grad(x0 + 1, y0, seed, fx - 1.0, fy)
    n01 = _grad(x0, y0 + 1, seed, fx, fy - 1.0)
    n11 = _grad(x0 + 1, y0 + 1, seed, fx - 1.0, fy - 1.0)
    u, v = _fade(fx), _fade(fy)
    return _lerp(_lerp(n00, n10, u), _lerp(n01, n11, u), v) * 1.41421356


def fbm2(x: float, y: float, octaves: int, lacunarity: float, gain: float, seed: int) -> float:
    """Fractal sum of noise octaves, each with its own seed offset."""
    total, amp, freq = 0.0, 1.0, 1.0
    for i in range(octaves):
        total += perlin2(x * freq, y * freq, seed + i * 1013) * amp
        freq *= lacunarity
        amp *= gain
    return total


def noise_gradient(
    x: float, y: float, octaves: int, lacunarity: float, gain: float, seed: int, eps: float
) -> tuple[float, float]:
    """Central-difference gradient of :func:`fbm2`."""

    def f(px: float, py: float) -> float:
        return fbm2(px, py, octaves, lacunarity, gain, seed)

    e2 = eps * 2.0
    return (f(x + eps, y) - f(x - eps, y)) / e2, (f(x, y + eps) - f(x, y - eps)) / e2


class CurlNoiseFilter(PathSetFilter):
    """Displaces every point along a divergence-free curl-noise field."""

    name = "Curl Noise Displace"

    def _default_parameters(self) -> dict[str, FilterParameter]:
        return {
            "amplitudeMm": FilterParameter("Amplitude (mm)", 0.0, 50.0, 5.0),
            "scaleMm": FilterParameter("Scale (mm)", 1.0, 200.0, 50.0),
            "octaves": FilterParameter("Octaves", 1.0, 8.0, 3.0),
            "lacunarity": FilterParameter("Lacunarity", 1.0, 4.0, 2.0),
            "gain": FilterParameter("Gain", 0.0, 1.0, 0.5),
            "seed": FilterParameter("Seed", 0.0, 1000.0, 0.0),
        }

    def apply(self, pathset: PathSet) -> PathSet:
        amplitude = max(0.0, self.param("amplitudeMm"))
        if amplitude <= 0.0:
            return super().apply(pathset)
        scale = max(1.0, self.param("scaleMm"))
        octaves = max(1, min(8, _round_half_away(self.param("octaves"))))
        lacunarity = max(1.0, self.param("lacunarity"))
        gain = max(0.0, min(1.0, self.param("gain")))
        seed = _round_half_away(self.param("seed"))

        def displace(x: float, y: float) -> tuple[float, float]:
            dnx, dny = noise_gradient(x / scale, y / scale, octaves, lacunarity, gain, seed, 0.01)
            return x + dny * amplitude, y - dnx * amplitude

        return self._build(
            pathset,
            (Path([displace(x, y) for x, y in p.points], p.closed) for p in pathset.paths),
        )