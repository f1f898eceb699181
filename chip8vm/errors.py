"""CHIP-8 error kinds and fault codes."""

import enum


class Fault(enum.IntEnum):
    """Fault codes recorded on the emulator state by the core."""
    NONE = 0
    STACK_OVERFLOW = 1
    STACK_UNDERFLOW = 2
    ADDRESS_OUT_OF_RANGE = 3


class Chip8Error(Exception):
    """Base class for all CHIP-8 errors."""


class LoadError(Chip8Error):
    """Font or program data could not be loaded."""


class ProgramTooLarge(LoadError):
    """Program image does not fit in program space."""


class FontError(LoadError):
    """Font data is missing or malformed."""


class MachineStateError(Chip8Error):
    """Operation not allowed in the machine's current lifecycle state."""


class UnknownOpcode(Chip8Error):
    """Opcode outside the CHIP-8 instruction set."""

    def __init__(self, opcode: int, pc: int):
        self.opcode = opcode
        self.pc = pc
        super().__init__(f"unknown opcode 0x{opcode:04X} at 0x{pc:03X}")


class MachineFault(Chip8Error):
    """Unrecoverable error raised while executing an instruction."""
    fault = Fault.NONE
    description = "machine fault"

    def __init__(self, pc: int = None, opcode: int = None):
        self.pc = pc
        self.opcode = opcode
        message = self.description
        if opcode is not None and pc is not None:
            message = f"{message} executing 0x{opcode:04X} at 0x{pc:03X}"
        super().__init__(message)


class StackOverflow(MachineFault):
    fault = Fault.STACK_OVERFLOW
    description = "call stack overflow"


class StackUnderflow(MachineFault):
    fault = Fault.STACK_UNDERFLOW
    description = "return with empty call stack"


class AddressOutOfRange(MachineFault):
    fault = Fault.ADDRESS_OUT_OF_RANGE
    description = "memory access outside 0x000-0xFFF"


FAULT_ERRORS = {
    Fault.STACK_OVERFLOW: StackOverflow,
    Fault.STACK_UNDERFLOW: StackUnderflow,
    Fault.ADDRESS_OUT_OF_RANGE: AddressOutOfRange,
}


def raise_for_fault(fault: int, pc: int = None, opcode: int = None) -> None:
    """Raise the exception matching a fault code, if any."""
    fault = Fault(int(fault))
    if fault is Fault.NONE:
        return
    raise FAULT_ERRORS[fault](pc=pc, opcode=opcode)
