"""Console logging utilities for the CHIP-8 machine.

A small level-filtered console logger with timestamps and colours, plus a
machine-specific logger with helpers for load, fault and run reporting.
"""

import time
import sys
from typing import Iterable


class ConsoleLogger:
    """Flexible console logger with level filtering and colours."""

    def __init__(
        self,
        name: str = "chip8vm",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
        stream=None,
    ):
        self.name = name
        self.log_level = log_level.upper()
        self.stream = stream if stream is not None else sys.stdout
        self.use_colors = (
            use_colors and hasattr(self.stream, "isatty") and self.stream.isatty()
        )
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

        self.colors = (
            {
                "DEBUG": "\033[36m",
                "INFO": "\033[32m",
                "WARNING": "\033[33m",
                "ERROR": "\033[31m",
                "CRITICAL": "\033[35m",
                "RESET": "\033[0m"
            }
            if self.use_colors
            else {
                k: ""
                for k in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "RESET"]
            }
        )

        self.level_order = {
            "DEBUG": 0,
            "INFO": 1,
            "WARNING": 2,
            "ERROR": 3,
            "CRITICAL": 4,
        }

    def _should_log(self, level: str) -> bool:
        """Check if message should be logged based on current log level."""
        return self.level_order.get(level.upper(), 1) >= self.level_order.get(
            self.log_level, 1
        )

    def _format_message(self, level: str, message: str) -> str:
        """Format log message with timestamp, level, and colors."""
        timestamp = (
            f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        )
        level_str = f"[{level:>8s}]"
        name_str = f"[{self.name}]"

        if self.use_colors:
            color = self.colors.get(level.upper(), "")
            reset = self.colors["RESET"]
            level_str = f"{color}{level_str}{reset}"

        return f"{timestamp}{level_str}{name_str} {message}"

    def log(self, level: str, message: str):
        """Log a message at the specified level."""
        if self._should_log(level):
            formatted = self._format_message(level, message)
            print(formatted, file=self.stream, flush=True)

    def debug(self, message: str):
        """Log debug message."""
        self.log("DEBUG", message)

    def info(self, message: str):
        """Log info message."""
        self.log("INFO", message)

    def warning(self, message: str):
        """Log warning message."""
        self.log("WARNING", message)

    def error(self, message: str):
        """Log error message."""
        self.log("ERROR", message)

    def critical(self, message: str):
        """Log critical message."""
        self.log("CRITICAL", message)


class MachineLogger(ConsoleLogger):
    """Logger with helpers for machine lifecycle events."""

    def __init__(self, name: str = "chip8vm", **kwargs):
        super().__init__(name, **kwargs)

    def log_loaded(self, program_size: int, source: str = None, font_source: str = None):
        origin = f" from {source}" if source else ""
        self.info(f"Loaded {program_size} byte program{origin}")
        self.debug(f"Font glyphs from {font_source or 'built-in table'}")

    def log_status(self, old, new):
        self.debug(f"Status {old.name} -> {new.name}")

    def log_unknown_opcode(self, opcode: int, pc: int):
        self.warning(f"Unknown opcode 0x{opcode:04X} at 0x{pc:03X}, skipped")

    def log_fault(self, error: Exception):
        self.error(f"Machine faulted: {error}")

    def log_memory_dump(self, lines: Iterable[str]):
        """Log a memory dump at debug level."""
        if not self._should_log("DEBUG"):
            return
        self.debug("*" * 10 + " MEMORY " + "*" * 10)
        for line in lines:
            self.debug(line)
        self.debug("*" * 8 + " END MEMORY " + "*" * 8)

    def log_run_summary(self, cycles: int, elapsed: float, status):
        rate = cycles / elapsed if elapsed > 0 else 0.0
        self.info(
            f"Stopped ({status.name}) after {cycles} instructions "
            f"in {elapsed:.2f}s ({rate:.0f} Hz)"
        )
