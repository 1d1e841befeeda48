"""Streams path sets to an AxiDraw as a short, continuously refilled command queue."""

from __future__ import annotations

import dataclasses
import enum
import logging
import math
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

from penplot.axidraw import AxiDrawController, AxiDrawError, SerialLink
from penplot.config import PlotterConfig
from penplot.filter import Path, PathSet, Point
from penplot.motion_planner import MoveSlice, plan_path

logger = logging.getLogger(__name__)

STEPS_PER_MM = 80
LOW_WATER_MS = 300
HIGH_WATER_MS = 1200
_PEN_TOGGLE_PAUSE_S = 0.005


def _round_to_int(v: float) -> int:
    return int(v + 0.5) if v >= 0.0 else int(v - 0.5)


def _dist2(a: Point, b: Point) -> float:
    return (a[0] - b[0]) ** 2 + (a[1] - b[1]) ** 2


def reorder_paths_nearest(paths: Sequence[Path], start: Point) -> list[Path]:
    """Order paths greedily by nearest start, reversing open paths when their end is closer."""
    remaining = [p for p in paths if p.points]
    ordered: list[Path] = []
    last = start
    while remaining:
        best_idx, best_flip, best_d2 = -1, False, math.inf
        for i, path in enumerate(remaining):
            d_start = _dist2(last, path.points[0])
            d_end = _dist2(last, path.points[-1])
            cand, flip = d_start, False
            if not path.closed and d_end < d_start:
                cand, flip = d_end, True
            if cand < best_d2:
                best_idx, best_flip, best_d2 = i, flip, cand
        if best_idx < 0:
            break
        chosen = remaining.pop(best_idx)
        points = list(reversed(chosen.points)) if best_flip else list(chosen.points)
        ordered.append(Path(points, chosen.closed))
        last = points[-1]
    return ordered


def mm_delta_to_corexy_steps(dx_mm: float, dy_mm: float) -> tuple[int, int]:
    """Convert a page-space delta in millimetres to CoreXY motor steps (A, B)."""
    dx_steps = _round_to_int(dx_mm * STEPS_PER_MM)
    dy_steps = _round_to_int(dy_mm * STEPS_PER_MM)
    return dx_steps + dy_steps, -dx_steps + dy_steps


@dataclass
class PlotStats:
    """Progress counters of the current or last job."""

    commands_queued: int = 0
    commands_sent: int = 0
    planned_pen_down_mm: float = 0.0
    done_pen_down_mm: float = 0.0
    queued_ms: int = 0
    elapsed_ms: int = 0
    percent_complete: float = 0.0
    eta_ms: int = 0


class CommandKind(enum.Enum):
    PEN_UP = "pen_up"
    PEN_DOWN = "pen_down"
    STEPPER_MOVE = "stepper_move"


@dataclass(frozen=True)
class Command:
    """One queued plotter command."""

    kind: CommandKind
    duration_ms: int = 0
    a_steps: int = 0
    b_steps: int = 0


@dataclass
class _JobState:
    ordered_paths: list[Path] = field(default_factory=list)
    path_index: int = 0
    active_moves: list[MoveSlice] = field(default_factory=list)
    move_index: int = 0
    drawing: bool = False
    prepared: bool = False
    sent_initial_pen_up: bool = False
    returned_home: bool = False
    current_pos: Point = (0.0, 0.0)
    lift_pen: bool = True


class PlotSpooler:
    """Plans and streams a plot job on a background thread.

    Entities are given as a mapping of entity id to a path set whose points
    are already in page millimetres.
    """

    def __init__(self, serial: SerialLink, axidraw: AxiDrawController) -> None:
        self.serial = serial
        self.axidraw = axidraw
        self._config = PlotterConfig()
        self._worker: Optional[threading.Thread] = None
        self._running = threading.Event()
        self._paused = threading.Event()
        self._cancel = threading.Event()
        self._lock = threading.Lock()
        self._cond = threading.Condition(self._lock)
        self._queue: deque[Command] = deque()
        self._stats = PlotStats()
        self._queued_ms = 0
        self._job = _JobState()
        self._start_time = time.monotonic()
        self._only_entity_id: Optional[int] = None

    def start_job(
        self, entities: Mapping[int, PathSet], config: PlotterConfig, lift_pen: bool = True
    ) -> bool:
        """Start plotting every entity; returns False if busy, disconnected or empty."""
        return self._start(entities, config, lift_pen, None)

    def start_job_single(
        self,
        entities: Mapping[int, PathSet],
        entity_id: int,
        config: PlotterConfig,
        lift_pen: bool = True,
    ) -> bool:
        """Start plotting only the entity with ``entity_id``."""
        return self._start(entities, config, lift_pen, entity_id)

    def pause(self) -> None:
        self._paused.set()

    def resume(self) -> None:
        if self._paused.is_set():
            with self._cond:
                self._paused.clear()
                self._cond.notify_all()

    def cancel(self) -> None:
        """Stop the job and wait for the worker to finish."""
        with self._cond:
            self._cancel.set()
            self._cond.notify_all()
        self._join_worker()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Wait for the worker to finish; True if it is no longer running."""
        worker = self._worker
        if worker is not None and worker is not threading.current_thread():
            worker.join(timeout)
        return not self._running.is_set()

    def update_config(self, config: PlotterConfig) -> None:
        """Use new motion parameters for chunks planned from now on."""
        with self._lock:
            self._config = config

    def is_running(self) -> bool:
        return self._running.is_set()

    def is_paused(self) -> bool:
        return self._paused.is_set()

    def stats(self) -> PlotStats:
        with self._lock:
            return dataclasses.replace(self._stats)

    def _join_worker(self) -> None:
        worker = self._worker
        if worker is not None and worker is not threading.current_thread():
            worker.join()

    def _start(
        self,
        entities: Mapping[int, PathSet],
        config: PlotterConfig,
        lift_pen: bool,
        only_entity_id: Optional[int],
    ) -> bool:
        if self._running.is_set():
            logger.warning("PlotSpooler already running")
            return False
        if not self.serial.is_connected():
            logger.warning("Serial not connected; cannot start plot job")
            return False
        self._join_worker()
        with self._lock:
            self._stats = PlotStats()
            self._queued_ms = 0
            self._job = _JobState()
            self._queue.clear()
            self._config = config
            self._only_entity_id = only_entity_id
            if not self._prepare_job(entities, lift_pen):
                logger.warning("PlotSpooler: nothing to plot")
                return False
            self._refill_locked(HIGH_WATER_MS)
        self._start_time = time.monotonic()
        self._cancel.clear()
        self._paused.clear()
        self._running.set()
        self._worker = threading.Thread(target=self._run, name="plot-spooler", daemon=True)
        self._worker.start()
        return True

    def _prepare_job(self, entities: Mapping[int, PathSet], lift_pen: bool) -> bool:
        page_paths: list[Path] = []
        total = 0.0
        for entity_id, pathset in entities.items():
            if self._only_entity_id is not None and entity_id != self._only_entity_id:
                continue
            for path in pathset.paths:
                if not path.points:
                    continue
                copy = Path(list(path.points), path.closed)
                total += sum(math.dist(a, b) for a, b in zip(copy.points, copy.points[1:]))
                page_paths.append(copy)
        if not page_paths:
            return False
        self._job = _JobState(
            ordered_paths=reorder_paths_nearest(page_paths, (0.0, 0.0)),
            prepared=True,
            lift_pen=lift_pen,
        )
        self._stats.planned_pen_down_mm = total
        self._stats.done_pen_down_mm = 0.0
        self._stats.queued_ms = 0
        self._queued_ms = 0
        return True

    def _push(self, command: Command) -> None:
        self._queue.append(command)
        self._stats.commands_queued += 1
        if command.kind is CommandKind.STEPPER_MOVE:
            dt = max(1, command.duration_ms)
            self._stats.queued_ms += dt
            self._queued_ms += dt

    def _push_moves(self, moves: Sequence[MoveSlice]) -> None:
        for mv in moves:
            self._push(Command(CommandKind.STEPPER_MOVE, mv.dt_ms, mv.a_steps, mv.b_steps))

    def _refill_locked(self, high_water_ms: int) -> None:
        job = self._job
        if not job.prepared:
            return
        settings = self._config.planner_settings(STEPS_PER_MM)
        if job.lift_pen and not job.sent_initial_pen_up:
            self._push(Command(CommandKind.PEN_UP))
            job.sent_initial_pen_up = True

        while self._queued_ms < high_water_ms:
            if job.path_index >= len(job.ordered_paths):
                if not job.returned_home:
                    home = (0.0, 0.0)
                    self._push_moves(plan_path(settings, [job.current_pos, home], True, job.current_pos))
                    job.current_pos = home
                    job.returned_home = True
                break

            path = job.ordered_paths[job.path_index]
            if not path.points:
                job.path_index += 1
                continue

            if not job.drawing:
                first = path.points[0]
                if _dist2(job.current_pos, first) > 0.0:
                    self._push_moves(plan_path(settings, [job.current_pos, first], True, job.current_pos))
                    job.current_pos = first
                if job.lift_pen:
                    self._push(Command(CommandKind.PEN_DOWN))
                job.active_moves = plan_path(settings, path.points, False, job.current_pos)
                job.move_index = 0
                job.drawing = True

            while job.move_index < len(job.active_moves) and self._queued_ms < high_water_ms:
                self._push_moves([job.active_moves[job.move_index]])
                job.move_index += 1

            if job.move_index >= len(job.active_moves):
                if job.lift_pen:
                    self._push(Command(CommandKind.PEN_UP))
                job.current_pos = path.points[-1]
                job.drawing = False
                job.active_moves = []
                job.move_index = 0
                job.path_index += 1
            else:
                break

    def _execute(self, command: Command) -> None:
        if command.kind is CommandKind.PEN_UP:
            self.axidraw.pen_up()
        elif command.kind is CommandKind.PEN_DOWN:
            self.axidraw.pen_down()
        else:
            self.axidraw.stepper_move(command.duration_ms, command.a_steps, command.b_steps)

    def _record_move(self, command: Command, pen_down: bool) -> None:
        with self._lock:
            stats = self._stats
            if pen_down:
                dx = 0.5 * (command.a_steps - command.b_steps) / STEPS_PER_MM
                dy = 0.5 * (command.a_steps + command.b_steps) / STEPS_PER_MM
                stats.done_pen_down_mm += math.hypot(dx, dy)
            dt = max(1, command.duration_ms)
            self._queued_ms = max(0, self._queued_ms - dt)
            stats.queued_ms = max(0, stats.queued_ms - dt)
            stats.elapsed_ms = int((time.monotonic() - self._start_time) * 1000)
            frac = 0.0
            if stats.planned_pen_down_mm > 0.0:
                frac = max(0.0, min(1.0, stats.done_pen_down_mm / stats.planned_pen_down_mm))
            stats.percent_complete = frac
            if frac > 0.0:
                total_ms = stats.elapsed_ms / frac
                stats.eta_ms = int(max(0.0, total_ms - stats.elapsed_ms))
            else:
                stats.eta_ms = 0
            if self._queued_ms < LOW_WATER_MS:
                self._refill_locked(HIGH_WATER_MS)

    def _run(self) -> None:
        logger.info("PlotSpooler worker started")
        try:
            self.axidraw.initialize()
        except AxiDrawError as exc:
            logger.warning("AxiDraw initialize failed: %s", exc)
        try:
            self.axidraw.enable_motors(True, True)
        except AxiDrawError as exc:
            logger.warning("Failed to enable motors: %s", exc)

        pen_down = False
        try:
            while not self._cancel.is_set():
                if self._paused.is_set():
                    with self._cond:
                        self._cond.wait_for(
                            lambda: not self._paused.is_set() or self._cancel.is_set()
                        )
                    if self._cancel.is_set():
                        break

                with self._lock:
                    if not self._queue:
                        self._refill_locked(HIGH_WATER_MS)
                        if not self._queue:
                            break
                    command = self._queue.popleft()

                try:
                    self._execute(command)
                except AxiDrawError as exc:
                    logger.error("Command failed: %s", exc)
                    break
                if command.kind is CommandKind.PEN_UP:
                    pen_down = False
                elif command.kind is CommandKind.PEN_DOWN:
                    pen_down = True

                with self._lock:
                    self._stats.commands_sent += 1

                if command.kind is CommandKind.STEPPER_MOVE:
                    self._record_move(command, pen_down)
                    self._cancel.wait(max(1, command.duration_ms) / 1000.0)
                else:
                    self._cancel.wait(_PEN_TOGGLE_PAUSE_S)
        finally:
            if not self._cancel.is_set():
                try:
                    self.axidraw.pen_up()
                except AxiDrawError:
                    pass
            try:
                self.axidraw.enable_motors(False, False)
            except AxiDrawError:
                pass
            self._running.clear()
            logger.info("PlotSpooler worker finished")