"""CHIP-8 call stack operations.

Each operation returns a `Fault` code next to its result instead of raising,
so the stack can be used inside traced code. On a fault the stack comes back
unchanged.
"""

import jax.numpy as jnp
from chip8vm.constants import STACK_SIZE
from chip8vm.errors import Fault
from chip8vm.state import StackState


def _fault_code(condition, fault: Fault) -> jnp.ndarray:
    return jnp.where(condition, int(fault), int(Fault.NONE)).astype(jnp.uint8)


def is_full(stack: StackState) -> jnp.ndarray:
    return stack.pointer >= STACK_SIZE


def is_empty(stack: StackState) -> jnp.ndarray:
    return stack.pointer <= 0


def push(stack: StackState, address: jnp.ndarray) -> tuple[StackState, jnp.ndarray]:
    """Push address onto stack.

    The full 16-bit address is stored: a call from the last word of memory
    returns to 0x1000 and the machine runs off the end.
    """
    full = is_full(stack)
    slot = jnp.minimum(stack.pointer, STACK_SIZE - 1)
    address = jnp.astype(address, jnp.uint16)
    new_data = jnp.where(full, stack.data, stack.data.at[slot].set(address))
    new_pointer = jnp.where(full, stack.pointer, stack.pointer + 1).astype(jnp.int32)
    return stack.replace(data=new_data, pointer=new_pointer), _fault_code(full, Fault.STACK_OVERFLOW)


def pop(stack: StackState) -> tuple[StackState, jnp.ndarray, jnp.ndarray]:
    """Pop address from stack."""
    empty = is_empty(stack)
    slot = jnp.maximum(stack.pointer - 1, 0)
    popped_address = jnp.where(empty, 0, stack.data[slot]).astype(jnp.uint16)
    new_data = jnp.where(empty, stack.data, stack.data.at[slot].set(0))
    new_pointer = jnp.where(empty, stack.pointer, stack.pointer - 1).astype(jnp.int32)
    return (
        stack.replace(data=new_data, pointer=new_pointer),
        popped_address,
        _fault_code(empty, Fault.STACK_UNDERFLOW),
    )


def peek(stack: StackState) -> tuple[jnp.ndarray, jnp.ndarray]:
    """Read the top address without popping it."""
    empty = is_empty(stack)
    top = stack.data[jnp.maximum(stack.pointer - 1, 0)]
    return jnp.where(empty, 0, top).astype(jnp.uint16), _fault_code(empty, Fault.STACK_UNDERFLOW)
