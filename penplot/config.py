"""User-facing plotter settings."""

from __future__ import annotations

from dataclasses import dataclass

from penplot.motion_planner import PlannerSettings


@dataclass
class PlotterConfig:
    """Servo positions, speeds and motion-planner limits for a plot job."""

    pen_up_pos: int = 17548
    pen_down_pos: int = 14058
    draw_speed_percent: int = 128
    travel_speed_percent: int = 154
    draw_speed_mm_per_s: float = 38.20000076293945
    travel_speed_mm_per_s: float = 121.9000015258789
    accel_draw_mm_per_s2: float = 1132.0
    accel_travel_mm_per_s2: float = 3112.0
    cornering: float = 0.3100000023841858
    junction_speed_floor_percent: int = 50
    time_slice_ms: int = 50
    max_step_rate_per_axis: int = 5296
    min_segment_mm: float = 0.5099999904632568

    def planner_settings(self, steps_per_mm: int = 80) -> PlannerSettings:
        """Planner settings derived from this configuration."""
        return PlannerSettings(
            speed_pen_down_mm_per_s=self.draw_speed_mm_per_s,
            speed_pen_up_mm_per_s=self.travel_speed_mm_per_s,
            accel_pen_down_mm_per_s2=self.accel_draw_mm_per_s2,
            accel_pen_up_mm_per_s2=self.accel_travel_mm_per_s2,
            cornering=self.cornering,
            junction_speed_floor_percent=self.junction_speed_floor_percent,
            time_slice_ms=self.time_slice_ms,
            max_step_rate_per_axis=self.max_step_rate_per_axis,
            min_segment_mm=self.min_segment_mm,
            steps_per_mm=steps_per_mm,
        )