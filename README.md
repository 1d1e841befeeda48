# penplot

Tools for getting vector artwork onto paper with a pen plotter: path filters,
a time-sliced CoreXY motion planner, and a command layer plus background
spooler for an EiBotBoard-driven AxiDraw.

The package needs no third-party libraries.

```
pip install .
```

## Paths and filters

`penplot.filter` holds the geometry containers:

- `Path` is a polyline of `(x, y)` points in millimetres, open or `closed`.
  `length()` includes the closing segment of a closed path.
- `PathSet` is a list of paths with a `color`. `compute_aabb()` stores and
  returns `(min_x, min_y, max_x, max_y)`, or `None` when there are no points.
- `PathSetFilter` is the filter base. Its settings live in `parameters`, a dict
  of `FilterParameter` entries (label, range and value). `param(key)` reads a
  value and `set_parameter(key, value)` sets it and increments `version`. Both
  raise `KeyError` for an unknown key. `apply(pathset)` returns a new `PathSet`
  and leaves the input alone.

The filters:

| Class | Module | Parameters |
|---|---|---|
| `SmoothFilter` | `penplot.smooth` | `iterations` |
| `LaplacianSmoothFilter` | `penplot.smooth` | `iterations`, `weight` |
| `SimplifyFilter` | `penplot.simplify` | `toleranceMm`, `minPathLengthMm` |
| `CurlNoiseFilter` | `penplot.curl_noise` | `amplitudeMm`, `scaleMm`, `octaves`, `lacunarity`, `gain`, `seed` |

What each filter does:

- **`SmoothFilter`** runs Chaikin corner cutting (`chaikin_once`).
  - Open paths keep their endpoints.
  - Iterations are clamped to 0–50.
- **`LaplacianSmoothFilter`** moves each point toward the midpoint of its
  neighbours (`laplacian_once`).
  - Open paths keep their endpoints.
  - Closed paths wrap around.
- **`SimplifyFilter`** runs Ramer–Douglas–Peucker (`rdp_simplify_open`,
  `rdp_simplify_closed`) and then `merge_colinear`.
  - It drops paths shorter than `minPathLengthMm`, which is clamped to 1–10 mm.
  - `set_tolerance()` turns negative tolerances into zero.
- **`CurlNoiseFilter`** displaces every point along the curl of fractal
  gradient noise. The noise functions `perlin2`, `fbm2` and `noise_gradient`
  are public. An amplitude of zero returns an unchanged copy.

```python
from penplot.filter import Path, PathSet
from penplot.smooth import SmoothFilter
from penplot.simplify import SimplifyFilter

paths = PathSet(paths=[Path(points=[(0.0, 0.0), (10.0, 0.0), (10.0, 10.0)])])

smooth = SmoothFilter()
smooth.set_parameter("iterations", 3)
smoothed = smooth.apply(paths)

simplify = SimplifyFilter()
simplify.set_tolerance(0.1)
result = simplify.apply(smoothed)
```

## Planning moves

`plan_path(settings, points, pen_up, start)` in `penplot.motion_planner`
returns a list of `MoveSlice(a_steps, b_steps, dt_ms)`.

How it plans:

- It drops vertices closer than `min_segment_mm`.
- It caps corner speeds by junction deviation (`cornering`), never below
  `junction_speed_floor_percent` of the speed limit.
- It runs forward and backward acceleration passes, then cuts each segment
  into timed slices.
- It stretches any slice that would exceed `max_step_rate_per_axis`.
- Pen-up moves use the travel speed and acceleration. Pen-down moves use the
  draw values.
- Fewer than two usable points give an empty list.
- A non-positive `time_slice_ms` or `max_step_rate_per_axis` raises
  `ValueError`.

`PlannerSettings` holds the limits. `PlotterConfig` in `penplot.config` holds
the user-facing settings: servo positions, speeds, accelerations and planner
limits. `planner_settings(steps_per_mm)` turns them into `PlannerSettings`.

```python
from penplot.config import PlotterConfig
from penplot.motion_planner import plan_path

settings = PlotterConfig().planner_settings(80)
moves = plan_path(settings, [(0.0, 0.0), (50.0, 0.0), (50.0, 50.0)], False, (0.0, 0.0))
for move in moves:
    print(move.a_steps, move.b_steps, move.dt_ms)
```

## Driving a plotter

`AxiDrawController(serial, state)` in `penplot.axidraw` formats EBB commands
and writes them to a `SerialLink`. A `SerialLink` is any object with
`is_connected()` and `write_line(line)`, where `write_line` raises `OSError`
on failure.

| Method | Command sent |
|---|---|
| `set_pen_up_value` | `SC,4,…` |
| `set_pen_down_value` | `SC,5,…` |
| `initialize` | both of the above |
| `pen_up` | `SP,1,…` |
| `pen_down` | `SP,0,…` |
| `stepper_move` | `SM,…` |
| `low_level_move` | `LM,…` |
| `enable_motors` | `EM,…` |
| `disengage_motors` | `EM,0,0` |
| `reset` | `R` |

`AxiDrawState` keeps the servo positions and the derived pen lift time
(`|up - down| * 0.06` ms, at least 1). `pen_up` and `pen_down` use this lift
time when no duration is given.

If the link is not connected, or a write fails, the controller raises
`AxiDrawError`.

```python
from penplot.axidraw import AxiDrawController, AxiDrawState

class PrintLink:
    def is_connected(self):
        return True

    def write_line(self, line):
        print(line)

controller = AxiDrawController(PrintLink(), AxiDrawState())
controller.pen_up()            # SP,1,209
controller.stepper_move(100, 80, -80)
```

### Streaming a job

`PlotSpooler(serial, axidraw)` in `penplot.spooler` runs a job on a background
thread.

To start a job, call `start_job(entities, config, lift_pen=True)` or
`start_job_single(entities, entity_id, config, lift_pen=True)`.

- `entities` maps entity ids to `PathSet`s whose points are already in page
  millimetres.
- It returns `False` if a job is already running, the link is not connected,
  or there is nothing to plot.

While the job runs, the spooler:

- orders paths by nearest neighbour from the origin (`reorder_paths_nearest`),
  reversing open paths when that is shorter;
- plans moves with `plan_path`, keeping about 1.2 s of moves queued and
  refilling when the queue drops below 0.3 s;
- returns to the origin at the end;
- raises the pen and releases the motors when it finishes. If the job was
  cancelled, it releases the motors but leaves the pen where it is.

To control and watch the job:

- `pause()`, `resume()` and `cancel()` control the worker. `cancel()` waits
  for the worker to stop.
- `wait(timeout)` blocks until the job finishes.
- `is_running()` and `is_paused()` report the worker's state.
- `update_config(config)` changes the motion parameters for moves planned from
  then on.
- `stats()` returns a copy of `PlotStats`:
  - commands queued and sent;
  - planned and completed pen-down millimetres;
  - queued and elapsed milliseconds;
  - `percent_complete`, as a fraction from 0 to 1;
  - `eta_ms`.

`mm_delta_to_corexy_steps(dx_mm, dy_mm)` converts a page-space delta to CoreXY
steps at 80 steps/mm.

## What it does not do

- There is no command-line program, viewer or editor.
- There is no serial port implementation. You supply the `SerialLink`.
- There is no file import. Artwork must already be in `PathSet`s.
- The spooler applies no entity transforms. Points are taken as page
  millimetres as given.