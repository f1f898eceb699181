"""Host-side CHIP-8 machine.

`Machine` owns an `EmulatorState` and drives it through its lifecycle::

    RESET -> LOADED -> RUNNING -> HALTED | FAULTED

It batches instructions per host frame, applies wall-clock timer ticks,
publishes key state and the display across the host boundary, and turns
fault codes recorded by the core into exceptions.
"""

import enum
import threading
import time
from typing import Callable, Optional, Sequence

import jax
import jax.numpy as jnp
import numpy as np
from tqdm import tqdm

from chip8vm.config import MachineConfig
from chip8vm.constants import FONT_DATA, NUM_KEYS, PROGRAM_START
from chip8vm.emulator import CycleEffect, step, run_cycles, load_program, read_rom, dump_memory
from chip8vm.errors import FAULT_ERRORS, Fault, MachineStateError, UnknownOpcode
from chip8vm.fonts import load_font, load_font_file
from chip8vm.logging import MachineLogger
from chip8vm.state import create_state
from chip8vm.timers import TimerClock, sound_active


class Status(enum.Enum):
    RESET = "reset"
    LOADED = "loaded"
    RUNNING = "running"
    HALTED = "halted"
    FAULTED = "faulted"


class Machine:
    """A CHIP-8 machine with its host-side controls.

    Args:
        config: Runtime configuration
        logger: Logger for lifecycle events (defaults to a `MachineLogger`)
        display_sink: Called with the display after each frame that changed it
        input_source: Polled once per frame for the 16 key states
        time_fn: Monotonic clock in seconds, injectable for tests
    """

    def __init__(
        self,
        config: Optional[MachineConfig] = None,
        logger: Optional[MachineLogger] = None,
        display_sink: Optional[Callable[[np.ndarray], None]] = None,
        input_source: Optional[Callable[[], Sequence[bool]]] = None,
        time_fn: Callable[[], float] = time.monotonic,
    ):
        self.config = config or MachineConfig()
        self.logger = logger or MachineLogger(log_level=self.config.log_level)
        self.display_sink = display_sink
        self.input_source = input_source
        self.time_fn = time_fn
        self.clock = TimerClock(self.config.timer_frequency, time_fn)
        self._lock = threading.Lock()
        self.status = Status.RESET
        self.reset()

    # Lifecycle

    def reset(self):
        """Zero memory, registers and stack; back to RESET."""
        with self._lock:
            self._keys = np.zeros(NUM_KEYS, dtype=np.bool_)
            self._keys_changed = True
            self._stop_requested = False
        self.state = create_state(jax.random.PRNGKey(self.config.seed), with_font=False)
        self.error = None
        self.cycles = 0
        self.unknown_opcodes = 0
        self.program_size = 0
        self._set_status(Status.RESET)

    def load(self, program: bytes, font: Optional[Sequence[int]] = None,
             source: str = None, font_source: str = None):
        """Load font glyphs and a program image, moving to LOADED.

        Loading into a machine that has already been loaded resets it first.
        Load errors leave the machine in RESET.
        """
        if self.status is not Status.RESET:
            self.reset()
        state = load_font(self.state, FONT_DATA if font is None else font)
        state = load_program(state, program)
        self.state = state
        self.program_size = len(program)
        self._set_status(Status.LOADED)
        self.logger.log_loaded(self.program_size, source, font_source)
        self.logger.log_memory_dump(dump_memory(self.state, 0, PROGRAM_START + self.program_size))

    def load_files(self, rom_path: str, font_path: str = None):
        """Load a program file and, optionally, a hex text font file."""
        font = load_font_file(font_path) if font_path else None
        self.load(read_rom(rom_path), font, source=str(rom_path), font_source=font_path)

    def start(self):
        """Move from LOADED to RUNNING and start the timer clock."""
        self._require(Status.LOADED)
        self.clock.start()
        self._set_status(Status.RUNNING)

    def request_stop(self):
        """Ask the run loop to halt before the next frame. Thread-safe."""
        with self._lock:
            self._stop_requested = True

    def halt(self):
        """Stop a running machine normally (host-driven exit)."""
        self._require(Status.RUNNING)
        self._set_status(Status.HALTED)

    @property
    def stop_requested(self) -> bool:
        with self._lock:
            return self._stop_requested

    # Execution

    def step(self) -> CycleEffect:
        """Run a single instruction, then apply elapsed timer ticks."""
        self._require(Status.RUNNING)
        self._apply_keys()
        self.state, effect = step(self.state)
        self._settle(effect)
        if self.status is Status.RUNNING:
            self.state = self.clock.tick(self.state)
        if self.display_sink is not None and bool(effect.display_changed):
            self.display_sink(self.display)
        return effect

    def run_frame(self) -> CycleEffect:
        """Run one host frame worth of instructions.

        Returns the effects of the frame stacked along the first axis.
        """
        self._require(Status.RUNNING)
        if self.input_source is not None:
            self.set_keys(self.input_source())
        self._apply_keys()

        count = self.config.instructions_per_frame
        if self.config.halt_on_unknown_opcode:
            # One instruction at a time so nothing runs past the bad opcode
            effects = []
            for _ in range(count):
                self.state, effect = step(self.state)
                effects.append(effect)
                self._settle(effect)
                if self.status is not Status.RUNNING:
                    break
            effects = jax.tree.map(lambda *xs: jnp.stack(xs), *effects)
        else:
            self.state, effects = run_cycles(self.state, count)
            self._settle(effects)

        if self.status is Status.RUNNING:
            self.state = self.clock.tick(self.state)
        if self.display_sink is not None and bool(np.any(effects.display_changed)):
            self.display_sink(self.display)
        return effects

    def run(self, max_cycles: Optional[int] = None, progress: bool = False) -> Status:
        """Run frames until the machine halts, faults or is asked to stop.

        `max_cycles` is checked between frames, so the last frame may run a
        few instructions past it. Faults propagate as exceptions.
        """
        if self.status is Status.LOADED:
            self.start()
        self._require(Status.RUNNING)

        started_at = self.time_fn()
        start_cycles = self.cycles
        frame_time = 1.0 / self.config.fps
        bar = tqdm(total=max_cycles, unit="instr", desc="Running") if progress and max_cycles else None

        try:
            while self.status is Status.RUNNING:
                if self.stop_requested or (
                    max_cycles is not None and self.cycles - start_cycles >= max_cycles
                ):
                    self.halt()
                    break

                frame_start = self.time_fn()
                before = self.cycles
                self.run_frame()
                if bar is not None:
                    bar.update(self.cycles - before)

                if self.config.realtime:
                    remaining = frame_time - (self.time_fn() - frame_start)
                    if remaining > 0:
                        time.sleep(remaining)
        finally:
            if bar is not None:
                bar.close()
            self.logger.log_run_summary(self.cycles - start_cycles, self.time_fn() - started_at, self.status)
        return self.status

    # Host boundary

    def press_key(self, key: int):
        self._update_key(key, True)

    def release_key(self, key: int):
        self._update_key(key, False)

    def set_keys(self, keys: Sequence[bool]):
        """Replace the whole keypad state. Thread-safe."""
        keys = np.asarray(keys, dtype=np.bool_)
        if keys.shape != (NUM_KEYS,):
            raise ValueError(f"Expected {NUM_KEYS} key states, got shape {keys.shape}")
        with self._lock:
            if not np.array_equal(keys, self._keys):
                self._keys = keys.copy()
                self._keys_changed = True

    @property
    def display(self) -> np.ndarray:
        """Read-only copy of the 64x32 display, indexed `[x, y]`."""
        display = np.array(self.state.display, dtype=np.bool_)
        display.flags.writeable = False
        return display

    @property
    def sound_active(self) -> bool:
        return sound_active(self.state)

    # Internals

    def _update_key(self, key: int, pressed: bool):
        if not 0 <= key < NUM_KEYS:
            raise ValueError(f"Key must be in 0x0-0xF, got {key}")
        with self._lock:
            if self._keys[key] != pressed:
                self._keys[key] = pressed
                self._keys_changed = True

    def _apply_keys(self):
        with self._lock:
            if not self._keys_changed:
                return
            keys = self._keys.copy()
            self._keys_changed = False
        self.state = self.state.replace(keypad=jnp.asarray(keys))

    def _set_status(self, status: Status):
        if status is not self.status:
            self.logger.log_status(self.status, status)
        self.status = status

    def _require(self, *allowed: Status):
        if self.status not in allowed:
            expected = " or ".join(status.name for status in allowed)
            raise MachineStateError(f"machine is {self.status.name}, expected {expected}")

    def _settle(self, effects: CycleEffect):
        """Account for executed cycles and report unknown opcodes, faults and halts."""
        pcs = np.atleast_1d(np.asarray(effects.pc))
        opcodes = np.atleast_1d(np.asarray(effects.opcode))
        unknown = np.atleast_1d(np.asarray(effects.unknown_opcode))
        faults = np.atleast_1d(np.asarray(effects.fault))
        halted = np.atleast_1d(np.asarray(effects.halted))

        for i in range(len(pcs)):
            if halted[i]:
                self.cycles += i
                self._set_status(Status.HALTED)
                self.logger.info(f"Program counter ran off the end of memory at 0x{int(pcs[i]):03X}")
                return
            if unknown[i]:
                self.unknown_opcodes += 1
                self.logger.log_unknown_opcode(int(opcodes[i]), int(pcs[i]))
                if self.config.halt_on_unknown_opcode:
                    self.cycles += i + 1
                    self._fail(UnknownOpcode(int(opcodes[i]), int(pcs[i])))
            if faults[i] != 0:
                self.cycles += i + 1
                self._fail(FAULT_ERRORS[Fault(int(faults[i]))](pc=int(pcs[i]), opcode=int(opcodes[i])))
        self.cycles += len(pcs)

    def _fail(self, error: Exception):
        self.error = error
        self._set_status(Status.FAULTED)
        self.logger.log_fault(error)
        raise error
