"""Tests for control flow instructions."""

import pytest
import jax.numpy as jnp
from chip8vm import execute, step, Fault, STACK_SIZE


class TestJump:
    """Test jump instructions."""

    def test_execute_jump(self, fresh_state):
        """Test 1NNN - Jump to address."""
        state = execute(fresh_state, 0x1001)
        assert state.pc == 1

    def test_jump_to_top_of_memory(self, fresh_state):
        state = execute(fresh_state, 0x1FFE)
        assert state.pc == 0xFFE


class TestCall:
    """Test subroutine calls."""

    def test_call_pushes_return_address(self, fresh_state):
        """2NNN - Current pc goes on the stack."""
        state = execute(fresh_state, 0x2ABC)

        assert state.pc == 0xABC
        assert state.stack.pointer == 1
        assert state.stack.data[0] == 0x200

    def test_nested_calls(self, fresh_state):
        state = execute(fresh_state, 0x2300)
        state = execute(state, 0x2400)
        state = execute(state, 0x00EE)

        assert state.pc == 0x300
        assert state.stack.pointer == 1

    def test_call_overflow_faults(self, fresh_state):
        """A call with a full stack faults and leaves pc and stack alone."""
        state = fresh_state
        for depth in range(STACK_SIZE):
            state = execute(state, 0x2300 + 2 * depth)
        assert state.stack.pointer == STACK_SIZE
        full_stack = state.stack.data

        faulted = execute(state, 0x2500)

        assert int(faulted.fault) == Fault.STACK_OVERFLOW
        assert faulted.pc == state.pc
        assert faulted.stack.pointer == STACK_SIZE
        assert (faulted.stack.data == full_stack).all()

    def test_return_from_call_in_last_word_runs_off_memory(self, fresh_state):
        """A call at 0xFFE returns to 0x1000, which halts instead of wrapping to 0x000."""
        memory = fresh_state.memory.at[0xFFE].set(0x23).at[0x300].set(0x00).at[0x301].set(0xEE)
        state = fresh_state.replace(memory=memory, pc=jnp.array(0xFFE, dtype=jnp.uint16))

        state, _ = step(state)  # 2300
        assert state.pc == 0x300
        state, _ = step(state)  # 00EE
        assert state.pc == 0x1000
        state, effect = step(state)

        assert state.halted
        assert effect.halted
        assert int(state.fault) == Fault.NONE
        assert state.pc == 0x1000


class TestSkipInstructions:
    """Test all skip instruction variants."""

    def test_skip_if_equal_immediate_true(self, fresh_state):
        """3XNN - Should skip when VX == NN."""
        state = fresh_state.replace(V=fresh_state.V.at[5].set(0x42))
        initial_pc = state.pc

        state = execute(state, 0x3542)  # Skip if V5 == 0x42
        assert state.pc == initial_pc + 2

    def test_skip_if_equal_immediate_false(self, fresh_state):
        """3XNN - Should not skip when VX != NN."""
        state = fresh_state.replace(V=fresh_state.V.at[5].set(0x41))
        initial_pc = state.pc

        state = execute(state, 0x3542)  # Skip if V5 == 0x42
        assert state.pc == initial_pc

    def test_skip_if_not_equal_immediate_true(self, fresh_state):
        """4XNN - Should skip when VX != NN."""
        state = fresh_state.replace(V=fresh_state.V.at[3].set(0x10))
        initial_pc = state.pc

        state = execute(state, 0x4320)  # Skip if V3 != 0x20
        assert state.pc == initial_pc + 2

    def test_skip_if_not_equal_immediate_false(self, fresh_state):
        """4XNN - Should not skip when VX == NN."""
        state = fresh_state.replace(V=fresh_state.V.at[3].set(0x20))
        initial_pc = state.pc

        state = execute(state, 0x4320)  # Skip if V3 != 0x20
        assert state.pc == initial_pc

    def test_skip_if_equal_register_true(self, fresh_state):
        """5XY0 - Should skip when VX == VY."""
        state = fresh_state
        state = state.replace(V=state.V.at[1].set(0x55))
        state = state.replace(V=state.V.at[2].set(0x55))
        initial_pc = state.pc

        state = execute(state, 0x5120)  # Skip if V1 == V2
        assert state.pc == initial_pc + 2

    def test_skip_if_equal_register_false(self, fresh_state):
        """5XY0 - Should not skip when VX != VY."""
        state = fresh_state
        state = state.replace(V=state.V.at[1].set(0x55))
        state = state.replace(V=state.V.at[2].set(0x44))
        initial_pc = state.pc

        state = execute(state, 0x5120)  # Skip if V1 == V2
        assert state.pc == initial_pc

    def test_skip_register_with_nonzero_low_nibble_is_noop(self, fresh_state):
        """5XY1 is not an instruction; nothing happens even when VX == VY."""
        state = execute(fresh_state, 0x5121)
        assert state.pc == fresh_state.pc

    def test_skip_if_not_equal_register_true(self, fresh_state):
        """9XY0 - Should skip when VX != VY."""
        state = fresh_state
        state = state.replace(V=state.V.at[7].set(0xAA))
        state = state.replace(V=state.V.at[8].set(0xBB))
        initial_pc = state.pc

        state = execute(state, 0x9780)  # Skip if V7 != V8
        assert state.pc == initial_pc + 2

    def test_skip_if_not_equal_register_false(self, fresh_state):
        """9XY0 - Should not skip when VX == VY."""
        state = fresh_state
        state = state.replace(V=state.V.at[7].set(0xCC))
        state = state.replace(V=state.V.at[8].set(0xCC))
        initial_pc = state.pc

        state = execute(state, 0x9780)  # Skip if V7 != V8
        assert state.pc == initial_pc

    def test_skip_with_zero_values(self, fresh_state):
        """Test skip instructions with zero values."""
        state = fresh_state
        initial_pc = state.pc

        # V0 == 0, should skip
        state = execute(state, 0x3000)  # Skip if V0 == 0
        assert state.pc == initial_pc + 2

    def test_skip_boundary_values(self, fresh_state):
        """Test skip instructions with boundary values."""
        state = fresh_state.replace(V=fresh_state.V.at[0].set(0xFF))
        initial_pc = state.pc

        state = execute(state, 0x30FF)  # Skip if V0 == 255
        assert state.pc == initial_pc + 2


class TestJumpWithOffset:
    """Test BNNN."""

    def test_jump_with_offset(self, fresh_state):
        """BNNN - Jump with V0 offset."""
        state = execute(fresh_state, 0x6010)  # V0 = 0x10
        state = execute(state, 0xB250)  # Jump to 0x250 + V0
        assert state.pc == 0x260

    def test_jump_with_offset_ignores_other_registers(self, fresh_state):
        state = execute(fresh_state, 0x6010)  # V0 = 0x10
        state = execute(state, 0x6230)  # V2 = 0x30
        state = execute(state, 0xB250)
        assert state.pc == 0x260

    def test_jump_with_offset_past_memory_faults(self, fresh_state):
        state = execute(fresh_state, 0x6020)  # V0 = 0x20
        state = execute(state, 0xBFF0)  # 0xFF0 + 0x20 > 0xFFF

        assert int(state.fault) == Fault.ADDRESS_OUT_OF_RANGE
        assert state.pc == fresh_state.pc
