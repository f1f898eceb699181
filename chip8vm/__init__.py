"""CHIP-8 virtual machine package."""

from chip8vm.state import EmulatorState, StackState, create_state
from chip8vm.emulator import CycleEffect, execute, fetch, step, run_cycles, load_program, load_rom, dump_memory
from chip8vm.decode import DecodedInstruction, decode, is_defined
from chip8vm.constants import *
from chip8vm.errors import (
    Fault, Chip8Error, LoadError, ProgramTooLarge, FontError, MachineStateError,
    UnknownOpcode, MachineFault, StackOverflow, StackUnderflow, AddressOutOfRange,
    raise_for_fault,
)
from chip8vm.fonts import load_font, load_font_file, parse_font_text
from chip8vm.timers import TimerClock, decrement_timers
from chip8vm.config import MachineConfig
from chip8vm.machine import Machine, Status
from chip8vm.rendering import chip8_display_to_rgb, create_color_scheme, display_to_text

__all__ = [
    "EmulatorState",
    "StackState",
    "create_state",
    "CycleEffect",
    "fetch",
    "execute",
    "step",
    "run_cycles",
    "load_program",
    "load_rom",
    "dump_memory",
    "DecodedInstruction",
    "decode",
    "is_defined",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "Fault",
    "Chip8Error",
    "LoadError",
    "ProgramTooLarge",
    "FontError",
    "MachineStateError",
    "UnknownOpcode",
    "MachineFault",
    "StackOverflow",
    "StackUnderflow",
    "AddressOutOfRange",
    "raise_for_fault",
    "load_font",
    "load_font_file",
    "parse_font_text",
    "TimerClock",
    "decrement_timers",
    "MachineConfig",
    "Machine",
    "Status",
    "chip8_display_to_rgb",
    "create_color_scheme",
    "display_to_text",
]
