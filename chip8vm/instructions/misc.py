"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import FONT_START, FONT_GLYPH_SIZE, MEMORY_SIZE, NUM_REGISTERS
from chip8vm.errors import Fault
from chip8vm.instructions.system import no_op, record_fault


def _address_fault(state: EmulatorState, last_address: jnp.ndarray) -> tuple[EmulatorState, jnp.ndarray]:
    """Record ADDRESS_OUT_OF_RANGE when `last_address` lies past the end of memory."""
    out_of_range = last_address >= MEMORY_SIZE
    state = record_fault(
        state, jnp.where(out_of_range, int(Fault.ADDRESS_OUT_OF_RANGE), int(Fault.NONE))
    )
    return state, out_of_range


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX1E - Add VX to I register. VF is untouched."""
    return state.replace(I=jnp.astype(state.I + state.V[instruction.x], jnp.uint16))


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX0A - Wait for a key press, store the key in VX.

    Keys already held when the wait begins do not count; the wait ends when
    some key goes from released to pressed. While waiting the pc is rewound
    so the instruction runs again next cycle.
    """
    baseline = jnp.where(state.waiting_for_key, state.key_snapshot, state.keypad)
    newly_pressed = state.keypad & ~baseline

    def key_pressed_action(state):
        pressed_key = jnp.astype(jnp.argmax(newly_pressed), jnp.uint8)
        return state.replace(
            V=state.V.at[instruction.x].set(pressed_key),
            waiting_for_key=jnp.zeros((), dtype=jnp.bool_),
            key_snapshot=jnp.zeros_like(state.key_snapshot),
        )

    def wait_action(state):
        return state.replace(
            pc=state.pc - 2,
            waiting_for_key=jnp.ones((), dtype=jnp.bool_),
            key_snapshot=baseline & state.keypad,
        )

    return jax.lax.cond(jnp.any(newly_pressed), key_pressed_action, wait_action, state)


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX29 - Set I to location of sprite for digit VX (low nibble)."""
    digit = jnp.astype(state.V[instruction.x] & 0xF, jnp.uint16)
    font_address = FONT_START + digit * FONT_GLYPH_SIZE
    return state.replace(I=jnp.astype(font_address, jnp.uint16))


def execute_bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    value = state.V[instruction.x]
    index = jnp.astype(state.I, jnp.int32)
    state, out_of_range = _address_fault(state, index + 2)

    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    # Out-of-bounds scatter indices are dropped, and the fault guards the rest
    indices = jnp.arange(3) + index
    new_memory = state.memory.at[indices].set(digits, mode="drop")
    return state.replace(memory=jnp.where(out_of_range, state.memory, new_memory))


def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX55 - Store V0 through VX in memory starting at I. I is unchanged."""
    index = jnp.astype(state.I, jnp.int32)
    state, out_of_range = _address_fault(state, index + jnp.astype(instruction.x, jnp.int32))

    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    base_indices = index + jnp.arange(NUM_REGISTERS)
    current_memory_values = state.memory[jnp.clip(base_indices, 0, MEMORY_SIZE - 1)]
    new_memory_values = jnp.where(register_mask, state.V, current_memory_values)
    new_memory = state.memory.at[base_indices].set(new_memory_values, mode="drop")
    return state.replace(memory=jnp.where(out_of_range, state.memory, new_memory))


def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX65 - Load V0 through VX from memory starting at I. I is unchanged."""
    index = jnp.astype(state.I, jnp.int32)
    state, out_of_range = _address_fault(state, index + jnp.astype(instruction.x, jnp.int32))

    register_mask = (jnp.arange(NUM_REGISTERS) <= instruction.x) & ~out_of_range
    base_indices = jnp.clip(index + jnp.arange(NUM_REGISTERS), 0, MEMORY_SIZE - 1)
    memory_values = state.memory[base_indices]
    return state.replace(V=jnp.where(register_mask, memory_values, state.V))


def execute_misc_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Dispatch misc instructions using arithmetic switch."""
    is_0x07 = instruction.nn == 0x07
    is_0x0A = instruction.nn == 0x0A
    is_0x15 = instruction.nn == 0x15
    is_0x18 = instruction.nn == 0x18
    is_0x1E = instruction.nn == 0x1E
    is_0x29 = instruction.nn == 0x29
    is_0x33 = instruction.nn == 0x33
    is_0x55 = instruction.nn == 0x55
    is_0x65 = instruction.nn == 0x65

    switch_index = (
        is_0x07 * 0 +
        is_0x0A * 1 +
        is_0x15 * 2 +
        is_0x18 * 3 +
        is_0x1E * 4 +
        is_0x29 * 5 +
        is_0x33 * 6 +
        is_0x55 * 7 +
        is_0x65 * 8 +
        (~(is_0x07 | is_0x0A | is_0x15 | is_0x18 | is_0x1E | is_0x29 | is_0x33 | is_0x55 | is_0x65)) * 9
    )

    return jax.lax.switch(
        switch_index,
        [
            execute_get_delay_timer,
            execute_wait_for_key,
            execute_set_delay_timer,
            execute_set_sound_timer,
            execute_add_to_index,
            execute_font_character,
            execute_bcd_conversion,
            execute_store_registers,
            execute_load_registers,
            no_op,
        ],
        state, instruction
    )
