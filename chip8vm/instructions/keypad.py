"""CHIP-8 keypad skip instructions (Exxx)."""

import jax
import jax.lax
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction


def execute_skip_if_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """EX9E/EXA1 - Skip if key VX pressed/not pressed."""
    key_index = state.V[instruction.x] & 0xF
    key_pressed = state.keypad[key_index]
    condition = (
        ((instruction.nn == 0x9E) & key_pressed)
        | ((instruction.nn == 0xA1) & ~key_pressed)
    )

    return jax.lax.cond(
        condition,
        lambda state: state.replace(pc=state.pc + 2),
        lambda state: state,
        state
    )
