"""CHIP-8 display operations."""

import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import SCREEN_WIDTH, SCREEN_HEIGHT, MEMORY_SIZE, FLAG_REGISTER
from chip8vm.errors import Fault
from chip8vm.instructions.system import record_fault

# Pre-computed coordinate grids for display operations
xx, yy = jnp.meshgrid(jnp.arange(SCREEN_WIDTH), jnp.arange(SCREEN_HEIGHT), indexing='ij')


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N.

    The start position wraps around the screen, the sprite itself is clipped
    at the right and bottom edges. VF is set when any lit pixel is erased.
    """
    sprite_x = state.V[instruction.x] % SCREEN_WIDTH
    sprite_y = state.V[instruction.y] % SCREEN_HEIGHT
    height = jnp.astype(instruction.n, jnp.int32)
    index = jnp.astype(state.I, jnp.int32)

    out_of_range = index + height > MEMORY_SIZE
    state = record_fault(
        state, jnp.where(out_of_range, int(Fault.ADDRESS_OUT_OF_RANGE), int(Fault.NONE))
    )

    in_sprite = (xx >= sprite_x) & (xx < sprite_x + 8) & (yy >= sprite_y) & (yy < sprite_y + height)

    row_offset = yy - sprite_y
    col_offset = xx - sprite_x
    sprite_bytes = state.memory[jnp.clip(index + row_offset, 0, MEMORY_SIZE - 1)]
    sprite = ((sprite_bytes >> jnp.clip(7 - col_offset, 0, 7)) & 1).astype(jnp.bool_) & in_sprite & ~out_of_range

    collision = jnp.any(state.display & sprite)
    return state.replace(
        display=state.display ^ sprite,
        V=jnp.where(
            out_of_range,
            state.V,
            state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8)),
        ),
    )
