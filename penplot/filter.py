"""Path geometry containers and the parameterised path-set filter base."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, Optional

Point = tuple[float, float]
Color = tuple[float, float, float, float]
BoundingBox = tuple[float, float, float, float]


@dataclass
class Path:
    """A polyline in millimetres, optionally closed back onto its first point."""

    points: list[Point] = field(default_factory=list)
    closed: bool = False

    def length(self) -> float:
        """Total length, including the closing segment of a closed path."""
        if len(self.points) < 2:
            return 0.0
        total = sum(math.dist(a, b) for a, b in zip(self.points, self.points[1:]))
        if self.closed:
            total += math.dist(self.points[-1], self.points[0])
        return total


@dataclass
class PathSet:
    """A collection of paths drawn in one colour."""

    paths: list[Path] = field(default_factory=list)
    color: Color = (0.0, 0.0, 0.0, 1.0)
    aabb: Optional[BoundingBox] = None

    def compute_aabb(self) -> Optional[BoundingBox]:
        """Recompute and return the bounding box (min_x, min_y, max_x, max_y)."""
        points = [pt for path in self.paths for pt in path.points]
        if not points:
            self.aabb = None
        else:
            xs = [x for x, _ in points]
            ys = [y for _, y in points]
            self.aabb = (min(xs), min(ys), max(xs), max(ys))
        return self.aabb


@dataclass
class FilterParameter:
    """A tunable filter value together with its label and suggested range."""

    label: str
    min_value: float
    max_value: float
    value: float


class PathSetFilter:
    """A filter turning one path set into another; the base passes paths through."""

    name = "Pass Through"

    def __init__(self) -> None:
        self.parameters: dict[str, FilterParameter] = self._default_parameters()
        self.version = 0

    def _default_parameters(self) -> dict[str, FilterParameter]:
        return {}

    def param(self, key: str) -> float:
        """Current value of a parameter; raises KeyError for unknown keys."""
        return self.parameters[key].value

    def set_parameter(self, key: str, value: float) -> None:
        """Set a parameter and bump the filter's version."""
        if key not in self.parameters:
            raise KeyError(key)
        self.parameters[key].value = float(value)
        self.version += 1

    def apply(self, pathset: PathSet) -> PathSet:
        """Return a copy of the input."""
        return self._build(pathset, (Path(list(p.points), p.closed) for p in pathset.paths))

    @staticmethod
    def _build(source: PathSet, paths: Iterable[Path]) -> PathSet:
        out = PathSet(paths=list(paths), color=source.color)
        out.compute_aabb()
        return out