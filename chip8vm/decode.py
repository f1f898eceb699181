"""CHIP-8 instruction decoding."""

import jax.numpy as jnp
from chex import dataclass


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    opcode: int  # First nibble
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate / sub-opcode)
    nn: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)


# 8XYN sub-opcodes that exist: 0-7 and E
ALU_DEFINED = jnp.array([1, 1, 1, 1, 1, 1, 1, 1, 0, 0, 0, 0, 0, 0, 1, 0], dtype=jnp.bool_)

# FXNN low bytes that exist
MISC_DEFINED = jnp.array([0x07, 0x0A, 0x15, 0x18, 0x1E, 0x29, 0x33, 0x55, 0x65])


def decode(instruction: int) -> DecodedInstruction:
    """Decode 16-bit instruction into components."""
    return DecodedInstruction(
        raw=instruction,
        opcode=(instruction & 0xF000) >> 12,
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=instruction & 0x000F,
        nn=instruction & 0x00FF,
        nnn=instruction & 0x0FFF
    )


def is_defined(instruction: int) -> jnp.ndarray:
    """Whether an opcode belongs to the CHIP-8 instruction set.

    Works on Python ints and traced values alike.
    """
    decoded = decode(jnp.asarray(instruction, dtype=jnp.uint16))
    group = decoded.opcode
    return (
        ((group == 0x0) & ((decoded.raw == 0x00E0) | (decoded.raw == 0x00EE)))
        | ((group >= 0x1) & (group <= 0x4))
        | (((group == 0x5) | (group == 0x9)) & (decoded.n == 0))
        | (group == 0x6)
        | (group == 0x7)
        | ((group == 0x8) & ALU_DEFINED[decoded.n])
        | ((group >= 0xA) & (group <= 0xD))
        | ((group == 0xE) & ((decoded.nn == 0x9E) | (decoded.nn == 0xA1)))
        | ((group == 0xF) & jnp.any(decoded.nn == MISC_DEFINED))
    )
