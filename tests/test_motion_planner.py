import math

import pytest

from penplot.motion_planner import MoveSlice, PlannerSettings, plan_path


def totals(moves):
    return sum(m.a_steps for m in moves), sum(m.b_steps for m in moves)


def test_too_few_points():
    assert plan_path(PlannerSettings(), [(0.0, 0.0)], False, (0.0, 0.0)) == []


def test_points_closer_than_min_segment():
    s = PlannerSettings(min_segment_mm=1.0)
    assert plan_path(s, [(0.0, 0.0), (0.2, 0.1)], False, (0.0, 0.0)) == []


def test_move_along_x_totals():
    s = PlannerSettings()
    moves = plan_path(s, [(0.0, 0.0), (10.0, 0.0)], False, (0.0, 0.0))
    assert totals(moves) == (10 * s.steps_per_mm, -10 * s.steps_per_mm)


def test_move_along_y_totals():
    s = PlannerSettings()
    moves = plan_path(s, [(0.0, 0.0), (0.0, 10.0)], True, (0.0, 0.0))
    assert totals(moves) == (10 * s.steps_per_mm, 10 * s.steps_per_mm)


def test_short_segment_totals():
    s = PlannerSettings()
    moves = plan_path(s, [(0.0, 0.0), (1.0, 0.0)], False, (0.0, 0.0))
    assert len(moves) >= 1
    assert totals(moves) == (s.steps_per_mm, -s.steps_per_mm)


def test_polyline_reaches_endpoint():
    s = PlannerSettings()
    pts = [(0.0, 0.0), (10.0, 0.0), (10.0, 5.0), (3.0, 8.0)]
    moves = plan_path(s, pts, False, (0.0, 0.0))
    end_x, end_y = pts[-1]
    assert totals(moves) == (
        round(s.steps_per_mm * (end_x + end_y)),
        -round(s.steps_per_mm * (end_x - end_y)),
    )


def test_first_segment_starts_from_start():
    s = PlannerSettings()
    moves = plan_path(s, [(0.0, 0.0), (10.0, 0.0)], False, (5.0, 0.0))
    assert totals(moves) == (5 * s.steps_per_mm, -5 * s.steps_per_mm)


def test_step_rate_respected():
    s = PlannerSettings(max_step_rate_per_axis=3000)
    moves = plan_path(s, [(0.0, 0.0), (80.0, 30.0), (20.0, 90.0)], True, (0.0, 0.0))
    assert moves
    for m in moves:
        assert isinstance(m, MoveSlice)
        assert m.dt_ms >= 1
        allowed = math.floor(s.max_step_rate_per_axis * m.dt_ms / 1000.0)
        assert abs(m.a_steps) <= allowed and abs(m.b_steps) <= allowed


def test_duration_not_faster_than_speed_limit():
    s = PlannerSettings()
    length = 100.0
    moves = plan_path(s, [(0.0, 0.0), (length, 0.0)], False, (0.0, 0.0))
    assert sum(m.dt_ms for m in moves) >= 1000.0 * length / s.speed_pen_down_mm_per_s


def test_pen_up_travel_is_faster():
    s = PlannerSettings()
    pts = [(0.0, 0.0), (100.0, 0.0)]
    up = sum(m.dt_ms for m in plan_path(s, pts, True, (0.0, 0.0)))
    down = sum(m.dt_ms for m in plan_path(s, pts, False, (0.0, 0.0)))
    assert up < down


def test_no_empty_slices():
    s = PlannerSettings()
    moves = plan_path(s, [(0.0, 0.0), (3.0, 4.0), (7.0, 1.0)], False, (0.0, 0.0))
    assert len(moves) >= 2
    empty = [m for m in moves if m.a_steps == 0 and m.b_steps == 0]
    assert empty == []
    assert totals(moves) == (8 * s.steps_per_mm, -6 * s.steps_per_mm)


def test_invalid_step_rate():
    with pytest.raises(ValueError):
        plan_path(PlannerSettings(max_step_rate_per_axis=0), [(0.0, 0.0), (1.0, 0.0)], False, (0.0, 0.0))


def test_invalid_time_slice():
    with pytest.raises(ValueError):
        plan_path(PlannerSettings(time_slice_ms=0), [(0.0, 0.0), (1.0, 0.0)], False, (0.0, 0.0))