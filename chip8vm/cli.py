"""Command line entry point."""

import argparse
import sys

from chip8vm.config import MachineConfig
from chip8vm.constants import DEFAULT_INSTRUCTION_FREQUENCY, DEFAULT_FPS
from chip8vm.errors import LoadError, MachineFault, UnknownOpcode
from chip8vm.machine import Machine
from chip8vm.rendering import COLOR_SCHEMES, display_to_text

EXIT_OK = 0
EXIT_LOAD_ERROR = 1
EXIT_FAULT = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run a CHIP-8 program")
    parser.add_argument("rom", type=str, help="Path to the CHIP-8 program image")
    parser.add_argument(
        "--font",
        type=str,
        default=None,
        help="Hex text font file (default: built-in glyphs)",
    )
    parser.add_argument(
        "--frequency",
        type=int,
        default=DEFAULT_INSTRUCTION_FREQUENCY,
        help=f"Instructions per second (default: {DEFAULT_INSTRUCTION_FREQUENCY})",
    )
    parser.add_argument(
        "--fps",
        type=int,
        default=DEFAULT_FPS,
        help=f"Host frames per second (default: {DEFAULT_FPS})",
    )
    parser.add_argument("--scale", type=int, default=8, help="Window scale factor (default: 8)")
    parser.add_argument(
        "--colors",
        type=str,
        default="classic",
        choices=sorted(COLOR_SCHEMES),
        help="Color scheme (default: classic)",
    )
    parser.add_argument("--seed", type=int, default=0, help="Random seed for CXNN (default: 0)")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fault on unknown opcodes instead of skipping them",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Run without a window and print the final display",
    )
    parser.add_argument(
        "--cycles",
        type=int,
        default=None,
        help="Stop after this many instructions (headless default: 10000)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Console log level (default: INFO)",
    )
    parser.add_argument(
        "--dump-memory",
        action="store_true",
        help="Dump memory after loading (same as --log-level DEBUG)",
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = MachineConfig(
            instruction_frequency=args.frequency,
            fps=args.fps,
            seed=args.seed,
            halt_on_unknown_opcode=args.strict,
            realtime=not args.headless,
            log_level="DEBUG" if args.dump_memory else args.log_level,
            render_scale=args.scale,
            color_scheme=args.colors,
        )
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_LOAD_ERROR

    machine = Machine(config)
    try:
        machine.load_files(args.rom, args.font)
    except LoadError as e:
        machine.logger.error(str(e))
        return EXIT_LOAD_ERROR

    try:
        if args.headless:
            machine.run(max_cycles=args.cycles or 10000, progress=True)
            print(display_to_text(machine.display))
        else:
            from chip8vm.frontend import run_pygame
            run_pygame(machine)
    except (MachineFault, UnknownOpcode):
        # Already logged by the machine
        return EXIT_FAULT
    except KeyboardInterrupt:
        machine.logger.info("Interrupted")
    return EXIT_OK
