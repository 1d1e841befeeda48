"""Ramer-Douglas-Peucker simplification and short-path removal."""

from __future__ import annotations

import math

from penplot.filter import FilterParameter, Path, PathSet, PathSetFilter, Point


def _distance_to_segment(p: Point, a: Point, b: Point) -> float:
    vx, vy = b[0] - a[0], b[1] - a[1]
    wx, wy = p[0] - a[0], p[1] - a[1]
    len2 = vx * vx + vy * vy
    if len2 <= 1e-12:
        return math.hypot(wx, wy)
    t = max(0.0, min(1.0, (wx * vx + wy * vy) / len2))
    return math.hypot(p[0] - (a[0] + t * vx), p[1] - (a[1] + t * vy))


def rdp_simplify_open(points: list[Point], eps: float) -> list[Point]:
    """Simplify an open polyline, always keeping its endpoints."""
    n = len(points)
    if n <= 2:
        return list(points)
    keep = [False] * n
    keep[0] = keep[-1] = True
    spans = [(0, n - 1)]
    while spans:
        first, last = spans.pop()
        if last <= first + 1:
            continue
        a, b = points[first], points[last]
        index, max_dist = first, -1.0
        for i in range(first + 1, last):
            d = _distance_to_segment(points[i], a, b)
            if d > max_dist:
                index, max_dist = i, d
        if max_dist > eps:
            keep[index] = True
            spans.append((first, index))
            spans.append((index, last))
    return [p for p, k in zip(points, keep) if k]


def merge_colinear(points: list[Point], closed: bool, eps: float) -> list[Point]:
    """Drop points lying within ``eps`` of the line through their neighbours."""
    n = len(points)
    if n <= 2:
        return list(points)
    if not closed:
        out = [points[0]]
        for m, b in zip(points[1:-1], points[2:]):
            if _distance_to_segment(m, out[-1], b) > eps:
                out.append(m)
        out.append(points[-1])
        return out
    out = []
    for i, m in enumerate(points):
        a, b = points[i - 1], points[(i + 1) % n]
        if _distance_to_segment(m, a, b) > eps or not out:
            out.append(m)
    if len(out) >= 2 and out[0] == out[-1]:
        out.pop()
    return out


def rdp_simplify_closed(points: list[Point], eps: float) -> list[Point]:
    """Simplify a closed polygon, starting from the point farthest from its centroid."""
    n = len(points)
    if n <= 3:
        return list(points)
    cx = sum(p[0] for p in points) / n
    cy = sum(p[1] for p in points) / n
    start, max_d2 = 0, -1.0
    for i, (x, y) in enumerate(points):
        d2 = (x - cx) ** 2 + (y - cy) ** 2
        if d2 > max_d2:
            start, max_d2 = i, d2
    seq = points[start:] + points[:start]
    merged = merge_colinear(rdp_simplify_open(seq, eps), True, eps)
    return list(points) if len(merged) < 3 else merged


class SimplifyFilter(PathSetFilter):
    """Simplifies paths within a tolerance and drops paths that are too short."""

    name = "Simplify"

    def _default_parameters(self) -> dict[str, FilterParameter]:
        return {
            "toleranceMm": FilterParameter("Tolerance (mm)", 0.0, 1.0, 0.0),
            "minPathLengthMm": FilterParameter("Min Path Length (mm)", 1.0, 10.0, 1.0),
        }

    def set_tolerance(self, tolerance: float) -> None:
        """Set the tolerance in millimetres; negative values become zero."""
        self.set_parameter("toleranceMm", max(0.0, tolerance))

    def _simplify(self, path: Path, eps: float) -> Path:
        if path.closed:
            simplified = Path(rdp_simplify_closed(path.points, eps), True)
        elif len(path.points) <= 2:
            simplified = Path(list(path.points), False)
        else:
            simplified = Path(merge_colinear(rdp_simplify_open(path.points, eps), False, eps), False)
        if len(simplified.points) < (3 if simplified.closed else 2):
            return Path(list(path.points), path.closed)
        return simplified

    def apply(self, pathset: PathSet) -> PathSet:
        eps = max(0.0, self.param("toleranceMm"))
        min_len = max(1.0, min(10.0, self.param("minPathLengthMm")))
        simplified = (self._simplify(p, eps) for p in pathset.paths)
        return self._build(pathset, (p for p in simplified if p.length() >= min_len))