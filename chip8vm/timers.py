"""Delay and sound timers.

Timers count down at a fixed rate measured in wall-clock time, independent
of how many instructions run. The host samples `TimerClock` once per loop
iteration and applies the whole ticks that have elapsed.
"""

import time
from typing import Callable

import jax.numpy as jnp

from chip8vm.constants import TIMER_FREQUENCY
from chip8vm.state import EmulatorState


def decrement_timers(state: EmulatorState, ticks) -> EmulatorState:
    """Count both timers down by `ticks`, stopping at zero."""
    ticks = jnp.asarray(ticks, dtype=jnp.int32)
    return state.replace(
        delay_timer=jnp.maximum(jnp.astype(state.delay_timer, jnp.int32) - ticks, 0).astype(jnp.uint8),
        sound_timer=jnp.maximum(jnp.astype(state.sound_timer, jnp.int32) - ticks, 0).astype(jnp.uint8),
    )


def sound_active(state: EmulatorState) -> bool:
    """Whether the buzzer should be sounding."""
    return bool(state.sound_timer > 0)


class TimerClock:
    """Turns elapsed wall-clock time into whole timer ticks.

    The fractional part of a tick is carried over to the next sample so the
    long-run rate stays exact however irregularly the clock is sampled.
    """

    # Absorbs float error so that exactly 1/60 s counts as one tick
    _EPSILON = 1e-9

    def __init__(self, frequency: float = TIMER_FREQUENCY, time_fn: Callable[[], float] = time.monotonic):
        if frequency <= 0:
            raise ValueError(f"timer frequency must be positive, got {frequency}")
        self.frequency = frequency
        self.time_fn = time_fn
        self._last_time = None
        self._residual = 0.0

    def start(self):
        """Begin measuring from now."""
        self._last_time = self.time_fn()
        self._residual = 0.0

    def elapsed_ticks(self) -> int:
        """Whole ticks since the previous sample."""
        now = self.time_fn()
        if self._last_time is None:
            self._last_time = now
            return 0
        total = max(now - self._last_time, 0.0) * self.frequency + self._residual
        self._last_time = now
        ticks = int(total + self._EPSILON)
        self._residual = max(total - ticks, 0.0)
        return ticks

    def tick(self, state: EmulatorState) -> EmulatorState:
        """Apply the ticks elapsed since the previous sample."""
        ticks = self.elapsed_ticks()
        if ticks == 0:
            return state
        return decrement_timers(state, ticks)
