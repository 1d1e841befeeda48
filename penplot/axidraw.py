"""Command layer for an EiBotBoard-driven AxiDraw pen plotter."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Protocol

logger = logging.getLogger(__name__)

_PEN_UP_STATE = 1
_PEN_DOWN_STATE = 0
_SC_PEN_UP_PARAM = 4
_SC_PEN_DOWN_PARAM = 5


class SerialLink(Protocol):
    """A line-oriented serial connection to the plotter."""

    def is_connected(self) -> bool:
        """Whether the link is open."""

    def write_line(self, line: str) -> None:
        """Send one command line; raises OSError on failure."""


class AxiDrawError(Exception):
    """A command could not be delivered to the plotter."""


@dataclass
class AxiDrawState:
    """Servo positions and the derived pen lift/lower time."""

    pen_up_pos: int = 17548
    pen_down_pos: int = 14058
    up_down_ms: int = 100


class AxiDrawController:
    """Formats EBB commands and sends them over a serial link."""

    def __init__(self, serial: SerialLink, state: AxiDrawState) -> None:
        self.serial = serial
        self.state = state

    def initialize(self) -> None:
        """Push both configured servo positions to the board."""
        self.set_pen_up_value(self.state.pen_up_pos)
        self.set_pen_down_value(self.state.pen_down_pos)

    def set_pen_up_value(self, value: int) -> None:
        """Set the pen-up servo position."""
        self.state.pen_up_pos = value
        self._recompute_up_down_ms()
        self._send(f"SC,{_SC_PEN_UP_PARAM},{value}")

    def set_pen_down_value(self, value: int) -> None:
        """Set the pen-down servo position."""
        self.state.pen_down_pos = value
        self._recompute_up_down_ms()
        self._send(f"SC,{_SC_PEN_DOWN_PARAM},{value}")

    def _duration(self, duration_ms: Optional[int]) -> int:
        if duration_ms is None or duration_ms < 0:
            return self.state.up_down_ms
        return duration_ms

    def pen_up(self, duration_ms: Optional[int] = None) -> None:
        """Raise the pen; a missing or negative duration uses the computed one."""
        self._send(f"SP,{_PEN_UP_STATE},{self._duration(duration_ms)}")

    def pen_down(self, duration_ms: Optional[int] = None) -> None:
        """Lower the pen; a missing or negative duration uses the computed one."""
        self._send(f"SP,{_PEN_DOWN_STATE},{self._duration(duration_ms)}")

    def stepper_move(self, duration_ms: int, a_steps: int, b_steps: int) -> None:
        """Timed move of both steppers."""
        self._send(f"SM,{duration_ms},{a_steps},{b_steps}")

    def low_level_move(self, rate_steps_per_second: int, a_steps: int, b_steps: int) -> None:
        """Rate-based move of both steppers."""
        self._send(f"LM,{rate_steps_per_second},{a_steps},{b_steps}")

    def enable_motors(self, enable1: bool, enable2: bool) -> None:
        """Energise or release each motor."""
        self._send(f"EM,{int(bool(enable1))},{int(bool(enable2))}")

    def disengage_motors(self) -> None:
        """Release both motors."""
        self.enable_motors(False, False)

    def reset(self) -> None:
        """Reset the board."""
        self._send("R")

    def _send(self, command: str) -> None:
        if not self.serial.is_connected():
            logger.warning("AxiDraw send failed (not connected): %s", command)
            raise AxiDrawError("Serial not connected")
        try:
            self.serial.write_line(command)
        except OSError as exc:
            logger.error("AxiDraw write failed: %s", exc)
            raise AxiDrawError(str(exc)) from exc

    def _recompute_up_down_ms(self) -> None:
        diff = abs(self.state.pen_up_pos - self.state.pen_down_pos)
        self.state.up_down_ms = max(1, math.floor(diff * 0.06 + 0.5))