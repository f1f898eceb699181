"""CHIP-8 register load, immediate add, index and random instructions."""

import jax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction


def _byte(value) -> jnp.ndarray:
    return jnp.astype(value, jnp.uint8)


def _write_register(state: EmulatorState, register, value) -> EmulatorState:
    return state.replace(V=state.V.at[register].set(_byte(value)))


def execute_set(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """6XNN - Set VX = NN."""
    return _write_register(state, instruction.x, instruction.nn)


def execute_add(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """7XNN - VX = (VX + NN) mod 256.

    Unlike 8XY4 there is no carry: VF keeps its value even when VX is VF.
    """
    total = jnp.astype(state.V[instruction.x], jnp.int32) + instruction.nn
    return _write_register(state, instruction.x, total & 0xFF)


def execute_set_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """ANNN - Set I = NNN."""
    return state.replace(I=jnp.astype(instruction.nnn, jnp.uint16))


def random_byte(rng: jax.Array) -> tuple[jax.Array, jnp.ndarray]:
    """Draw one uniform byte; returns the advanced key and the byte.

    The key lives on the state, so a machine seeded the same way replays the
    same CXNN values.
    """
    rng, subkey = jax.random.split(rng)
    return rng, jax.random.bits(subkey, (), dtype=jnp.uint8)


def execute_random(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """CXNN - Set VX = random byte & NN."""
    rng, value = random_byte(state.rng)
    state = _write_register(state, instruction.x, value & _byte(instruction.nn))
    return state.replace(rng=rng)
