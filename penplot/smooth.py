"""Chaikin corner-cutting and Laplacian smoothing of paths."""

from __future__ import annotations

from penplot.filter import FilterParameter, Path, PathSet, PathSetFilter, Point

_MAX_ITERATIONS = 50


def _lerp(a: Point, b: Point, t: float) -> Point:
    return (a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t)


def _iterations(value: float) -> int:
    return max(0, min(_MAX_ITERATIONS, int(value + 0.5)))


def chaikin_once(path: Path) -> Path:
    """One round of Chaikin corner cutting; open paths keep their endpoints."""
    pts = path.points
    n = len(pts)
    if n <= 1:
        return Path(list(pts), path.closed)
    if path.closed:
        edges = zip(pts, pts[1:] + pts[:1])
    else:
        edges = zip(pts, pts[1:])
    cut = [q for p0, p1 in edges for q in (_lerp(p0, p1, 0.25), _lerp(p0, p1, 0.75))]
    if not path.closed:
        cut = [pts[0], *cut, pts[-1]]
    return Path(cut, path.closed)


def laplacian_once(path: Path, weight: float) -> Path:
    """Move each point towards the midpoint of its neighbours by ``weight``."""
    pts = path.points
    n = len(pts)
    if n <= 1:
        return Path(list(pts), path.closed)
    w = max(0.0, min(1.0, weight))

    def smoothed(prev: Point, cur: Point, nxt: Point) -> Point:
        avg = ((prev[0] + nxt[0]) * 0.5, (prev[1] + nxt[1]) * 0.5)
        return _lerp(cur, avg, w)

    if path.closed:
        out = [smoothed(pts[i - 1], pts[i], pts[(i + 1) % n]) for i in range(n)]
    else:
        inner = [smoothed(a, b, c) for a, b, c in zip(pts, pts[1:], pts[2:])]
        out = [pts[0], *inner, pts[-1]]
    return Path(out, path.closed)


class SmoothFilter(PathSetFilter):
    """Chaikin smoothing repeated a number of times."""

    name = "Smooth"

    def _default_parameters(self) -> dict[str, FilterParameter]:
        return {"iterations": FilterParameter("Iterations", 0.0, 10.0, 1.0)}

    def apply(self, pathset: PathSet) -> PathSet:
        iterations = _iterations(self.param("iterations"))

        def run(path: Path) -> Path:
            cur = Path(list(path.points), path.closed)
            if len(path.points) < 2:
                return cur
            for _ in range(iterations):
                cur = chaikin_once(cur)
            return cur

        return self._build(pathset, map(run, pathset.paths))


class LaplacianSmoothFilter(PathSetFilter):
    """Weighted Laplacian smoothing repeated a number of times."""

    name = "Laplacian Smooth"

    def _default_parameters(self) -> dict[str, FilterParameter]:
        return {
            "iterations": FilterParameter("Iterations", 0.0, 50.0, 5.0),
            "weight": FilterParameter("Weight", 0.0, 1.0, 0.5),
        }

    def apply(self, pathset: PathSet) -> PathSet:
        iterations = _iterations(self.param("iterations"))
        weight = max(0.0, min(1.0, self.param("weight")))

        def run(path: Path) -> Path:
            cur = Path(list(path.points), path.closed)
            if len(path.points) < 2 or weight <= 0.0:
                return cur
            for _ in range(iterations):
                cur = laplacian_once(cur, weight)
            return cur

        return self._build(pathset, map(run, pathset.paths))