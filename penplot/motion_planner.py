"""Time-sliced CoreXY motion planning with junction-deviation cornering."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence

from penplot.filter import Point


@dataclass
class PlannerSettings:
    """Kinematic limits and machine constants for the planner (mm units)."""

    speed_pen_down_mm_per_s: float = 60.0
    speed_pen_up_mm_per_s: float = 120.0
    accel_pen_down_mm_per_s2: float = 600.0
    accel_pen_up_mm_per_s2: float = 1000.0
    cornering: float = 100.0
    junction_speed_floor_percent: int = 50
    time_slice_ms: int = 10
    max_step_rate_per_axis: int = 8000
    min_segment_mm: float = 0.05
    steps_per_mm: int = 80


@dataclass(frozen=True)
class MoveSlice:
    """Motor step deltas for one timed move."""

    a_steps: int = 0
    b_steps: int = 0
    dt_ms: int = 1


def _round_to_int(v: float) -> int:
    return int(v + 0.5) if v >= 0.0 else int(v - 0.5)


def _clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


@dataclass
class _Profile:
    """Accumulates (cumulative ms, distance) marks along a segment."""

    vel: float
    elapsed: float = 0.0
    pos: float = 0.0
    marks: list[tuple[int, float]] = field(default_factory=list)

    def mark(self) -> None:
        self.marks.append((max(1, _round_to_int(self.elapsed * 1000.0)), self.pos))

    def step(self, dt: float, dv: float = 0.0) -> None:
        self.vel += dv
        self.elapsed += dt
        self.pos += self.vel * dt
        self.mark()

    def ramp(self, duration: float, time_slice: float, dv_total: float, sign: float) -> None:
        ratio = duration / time_slice
        if not math.isfinite(ratio):
            return
        intervals = math.floor(ratio)
        if intervals <= 0:
            return
        per = duration / intervals
        dv = sign * dv_total / (intervals + 1.0)
        for _ in range(intervals):
            self.step(per, dv)


def _vertices(points: Sequence[Point], min_dist: float) -> list[Point]:
    verts = [points[0]]
    for p in points[1:]:
        if math.dist(verts[-1], p) >= min_dist:
            verts.append(p)
    return verts


def plan_path(
    settings: PlannerSettings, points: Sequence[Point], pen_up: bool, start: Point
) -> list[MoveSlice]:
    """Plan motor step slices that move from ``start`` along ``points``."""
    if settings.max_step_rate_per_axis <= 0:
        raise ValueError("max_step_rate_per_axis must be positive")
    if settings.time_slice_ms <= 0:
        raise ValueError("time_slice_ms must be positive")
    if len(points) < 2:
        return []
    verts = _vertices(points, settings.min_segment_mm)
    if len(verts) < 2:
        return []

    speed_limit = settings.speed_pen_up_mm_per_s if pen_up else settings.speed_pen_down_mm_per_s
    accel = settings.accel_pen_up_mm_per_s2 if pen_up else settings.accel_pen_down_mm_per_s2
    jd = max(0.0, settings.cornering)
    junction_floor = settings.junction_speed_floor_percent / 100.0 * speed_limit
    time_slice = settings.time_slice_ms / 1000.0

    seg_len: list[float] = []
    seg_dir: list[Point] = []
    for a, b in zip(verts, verts[1:]):
        dx, dy = b[0] - a[0], b[1] - a[1]
        d = math.hypot(dx, dy)
        seg_len.append(d)
        seg_dir.append((dx / d, dy / d) if d > 0.0 else (1.0, 0.0))

    n = len(verts)
    v_junction = [speed_limit] * n
    for i in range(1, n - 1):
        din, dout = seg_dir[i - 1], seg_dir[i]
        dot = _clamp(din[0] * dout[0] + din[1] * dout[1], -1.0, 1.0)
        sin_half = math.sqrt(max(0.0, 0.5 * (1.0 - dot)))
        v_max = speed_limit
        if sin_half > 1e-6 and jd > 0.0:
            radius = jd * (1.0 + sin_half) / (1.0 - sin_half)
            v_max = math.sqrt(max(0.0, accel * radius))
        v_junction[i] = _clamp(max(v_max, junction_floor), 0.0, speed_limit)

    v_at = [0.0] * n
    for i in range(1, n):
        v_from = math.sqrt(max(0.0, v_at[i - 1] ** 2 + 2.0 * accel * seg_len[i - 1]))
        cap = min(speed_limit, v_junction[i]) if i < n - 1 else 0.0
        v_at[i] = min(v_from, cap)
    for i in range(n - 1, 0, -1):
        v_from = math.sqrt(max(0.0, v_at[i] ** 2 + 2.0 * accel * seg_len[i - 1]))
        cap = min(speed_limit, v_junction[i - 1]) if i - 1 > 0 else 0.0
        v_at[i - 1] = min(v_at[i - 1], v_from, cap)

    moves: list[MoveSlice] = []
    current = start
    safe_accel = max(1e-6, accel)
    for i, target in enumerate(verts[1:]):
        vi = _clamp(v_at[i], 0.0, speed_limit)
        vf = _clamp(v_at[i + 1], 0.0, speed_limit)
        dx, dy = target[0] - current[0], target[1] - current[1]
        seg_in = math.hypot(dx, dy)
        if seg_in <= 0.0:
            continue

        a_total = _round_to_int(settings.steps_per_mm * (dx + dy))
        b_total = _round_to_int(settings.steps_per_mm * (dx - dy))
        if abs(a_total) < 1 and abs(b_total) < 1:
            current = target
            continue

        a_round = a_total / settings.steps_per_mm
        b_round = b_total / settings.steps_per_mm
        seg_round = math.hypot(0.5 * (a_round + b_round), 0.5 * (a_round - b_round))
        if seg_round <= 0.0:
            seg_round = seg_in

        t_accel = (speed_limit - vi) / safe_accel
        t_decel = (speed_limit - vf) / safe_accel
        accel_dist = vi * t_accel + 0.5 * accel * t_accel * t_accel
        decel_dist = vf * t_decel + 0.5 * accel * t_decel * t_decel
        prof = _Profile(vel=vi)

        if seg_round > accel_dist + decel_dist + time_slice * speed_limit:
            prof.ramp(t_accel, time_slice, speed_limit - vi, 1.0)
            coast = seg_round - (accel_dist + decel_dist)
            if coast > time_slice * speed_limit:
                prof.vel = speed_limit
                ct = coast / speed_limit
                cruise_interval = 20.0 * time_slice
                while ct > cruise_interval:
                    ct -= cruise_interval
                    prof.step(cruise_interval)
                prof.step(ct)
            prof.ramp(t_decel, time_slice, speed_limit - vf, -1.0)
        else:
            if accel > 0:
                disc = max(0.0, 2 * vi * vi + 2 * vf * vf + 4 * accel * seg_round)
                ta = (math.sqrt(disc) - 2 * vi) / (2 * accel)
                td = ta - (vf - vi) / accel
            else:
                ta = td = 0.0
            v_peak = vi + accel * ta
            prof.ramp(ta, time_slice, v_peak - vi, 1.0)
            prof.ramp(td, time_slice, v_peak - vf, -1.0)
            if not prof.marks:
                v = max(vi, vf, speed_limit * 0.1)
                prof.elapsed = seg_round / max(1e-6, v)
                prof.pos = seg_round
                prof.mark()

        prev1 = prev2 = prev_t = 0
        for t_ms, dist in prof.marks:
            frac = dist / prof.pos if prof.pos > 0.0 else 1.0
            dest1 = _round_to_int(frac * a_total)
            dest2 = _round_to_int(frac * b_total)
            sa, sb = dest1 - prev1, dest2 - prev2
            dt = max(1, t_ms - prev_t)
            while max(abs(sa), abs(sb)) > math.floor(settings.max_step_rate_per_axis * dt / 1000.0):
                dt += 1
            prev1, prev2, prev_t = dest1, dest2, t_ms
            if sa or sb:
                moves.append(MoveSlice(sa, -sb, dt))

        current = target
    return moves