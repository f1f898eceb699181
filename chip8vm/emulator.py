"""Main CHIP-8 emulator execution engine."""

from functools import partial
from pathlib import Path
from typing import Iterator

import jax
import jax.lax
import jax.numpy as jnp
import numpy as np
from flax.struct import PyTreeNode

from chip8vm.state import EmulatorState
from chip8vm.decode import decode, is_defined
from chip8vm.constants import PROGRAM_START, MAX_PROGRAM_SIZE, MEMORY_SIZE
from chip8vm.errors import LoadError, ProgramTooLarge
from chip8vm.instructions.system import execute_system_instruction
from chip8vm.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
)
from chip8vm.instructions.keypad import execute_skip_if_key
from chip8vm.instructions.alu import execute_alu_operation
from chip8vm.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chip8vm.instructions.display import execute_display
from chip8vm.instructions.misc import execute_misc_instruction


class CycleEffect(PyTreeNode):
    """What one fetch/decode/execute cycle did, for the host to report on."""
    pc: jnp.ndarray
    opcode: jnp.ndarray
    display_changed: jnp.ndarray
    waiting_for_key: jnp.ndarray
    unknown_opcode: jnp.ndarray
    fault: jnp.ndarray
    halted: jnp.ndarray


def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction.

    Expects `state.pc` to already point past the instruction (see `fetch`).
    """
    decoded_instruction = decode(instruction)

    return jax.lax.switch(
        decoded_instruction.opcode,
        [
            execute_system_instruction,
            execute_jump,
            execute_call,
            execute_skip_if_equal_immediate,
            execute_skip_if_not_equal_immediate,
            execute_skip_if_equal_register,
            execute_set,
            execute_add,
            execute_alu_operation,
            execute_skip_if_not_equal_register,
            execute_set_index,
            execute_jump_with_offset,
            execute_random,
            execute_display,
            execute_skip_if_key,
            execute_misc_instruction,
        ],
        state, decoded_instruction
    )


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch next instruction from memory."""
    instruction = _pack_u16(state.memory[state.pc], state.memory[state.pc + 1])
    return state.replace(pc=state.pc + 2), instruction


@jax.jit
def step(state: EmulatorState) -> tuple[EmulatorState, CycleEffect]:
    """Run one fetch/decode/execute cycle.

    A faulted or halted state is left untouched. Fetching with the pc past
    the last full word of memory halts the machine.
    """
    off_the_end = jnp.astype(state.pc, jnp.int32) > MEMORY_SIZE - 2
    stopped = (state.fault != 0) | state.halted | off_the_end

    def idle(state):
        return state.replace(halted=state.halted | off_the_end), jnp.zeros((), dtype=jnp.uint16)

    def cycle(state):
        state, instruction = fetch(state)
        return execute(state, instruction), instruction

    new_state, instruction = jax.lax.cond(stopped, idle, cycle, state)
    running = ~stopped
    effect = CycleEffect(
        pc=state.pc,
        opcode=instruction,
        display_changed=jnp.any(new_state.display != state.display),
        waiting_for_key=running & new_state.waiting_for_key,
        unknown_opcode=running & ~is_defined(instruction),
        fault=new_state.fault,
        halted=new_state.halted,
    )
    return new_state, effect


@partial(jax.jit, static_argnums=1)
def run_cycles(state: EmulatorState, n: int) -> tuple[EmulatorState, CycleEffect]:
    """Run `n` cycles; effects come back stacked along the first axis."""
    return jax.lax.scan(lambda state, _: step(state), state, length=n)


def load_program(state: EmulatorState, data: bytes) -> EmulatorState:
    """Copy a program image into memory starting at 0x200."""
    if len(data) == 0:
        raise LoadError("program image is empty")
    if len(data) > MAX_PROGRAM_SIZE:
        raise ProgramTooLarge(
            f"program image is {len(data)} bytes, program space holds {MAX_PROGRAM_SIZE}"
        )
    rom_array = jnp.array(list(data), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(data)].set(rom_array)
    return state.replace(memory=new_memory)


def read_rom(filename: str) -> bytes:
    """Read a program image from disk."""
    try:
        return Path(filename).read_bytes()
    except OSError as e:
        raise LoadError(f"could not read program '{filename}': {e}") from e


def load_rom(state: EmulatorState, filename: str) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    return load_program(state, read_rom(filename))


def dump_memory(state: EmulatorState, start: int = 0, end: int = MEMORY_SIZE) -> Iterator[str]:
    """Yield hex dump lines of 16 bytes each for `[start, end)`."""
    memory = np.asarray(state.memory)
    start = max(start - start % 16, 0)
    end = min(end, MEMORY_SIZE)
    for address in range(start, end, 16):
        row = memory[address:min(address + 16, end)]
        yield f"0x{address:03X}: " + " ".join(f"{byte:02X}" for byte in row)
