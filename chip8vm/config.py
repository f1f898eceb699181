"""Machine configuration."""

import dataclasses

from chip8vm.constants import DEFAULT_INSTRUCTION_FREQUENCY, DEFAULT_FPS, TIMER_FREQUENCY
from chip8vm.rendering import COLOR_SCHEMES

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclasses.dataclass(frozen=True)
class MachineConfig:
    """Runtime knobs for a `Machine`.

    Attributes:
        instruction_frequency: Instructions executed per second
        timer_frequency: Delay/sound timer rate in Hz
        fps: Host frames per second; instructions are batched per frame
        seed: Seed for the CXNN random generator
        halt_on_unknown_opcode: Fault instead of skipping undefined opcodes
        realtime: Pace `Machine.run` to `fps` with sleeps
        log_level: Console logger level
        render_scale: Window upscaling factor
        color_scheme: Color scheme name for rendering
    """
    instruction_frequency: int = DEFAULT_INSTRUCTION_FREQUENCY
    timer_frequency: float = TIMER_FREQUENCY
    fps: int = DEFAULT_FPS
    seed: int = 0
    halt_on_unknown_opcode: bool = False
    realtime: bool = True
    log_level: str = "INFO"
    render_scale: int = 8
    color_scheme: str = "classic"

    def __post_init__(self):
        for name in ("instruction_frequency", "timer_frequency", "fps", "render_scale"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level '{self.log_level}'. Available: {list(LOG_LEVELS)}")
        if self.color_scheme not in COLOR_SCHEMES:
            raise ValueError(
                f"Unknown color scheme '{self.color_scheme}'. Available: {list(COLOR_SCHEMES.keys())}"
            )

    @property
    def instructions_per_frame(self) -> int:
        """Number of instructions to execute per host frame (at least one)."""
        return max(1, self.instruction_frequency // self.fps)

    def replace(self, **changes) -> "MachineConfig":
        return dataclasses.replace(self, **changes)
