"""Tests for instruction decoding."""

import pytest
from chip8vm import decode, is_defined


def assemble(group, x=0, y=0, n=0):
    return (group << 12) | (x << 8) | (y << 4) | n


def assert_fields(instruction, group, x, y, n):
    assert instruction.opcode == group
    assert instruction.x == x
    assert instruction.y == y
    assert instruction.n == n
    assert instruction.nn == (y << 4) | n
    assert instruction.nnn == (x << 8) | (y << 4) | n
    assert instruction.raw == assemble(group, x, y, n)


class TestDecode:

    def test_operand_fields(self):
        instruction = decode(0xD12A)
        assert_fields(instruction, 0xD, 0x1, 0x2, 0xA)

    @pytest.mark.parametrize("opcode", [0x00E0, 0x00EE])
    def test_system_forms(self, opcode):
        instruction = decode(opcode)
        assert instruction.opcode == 0
        assert instruction.nn == opcode & 0xFF
        assert instruction.nnn == opcode

    @pytest.mark.parametrize("group", [0x1, 0x2, 0xA, 0xB])
    @pytest.mark.parametrize("nnn", [0x000, 0x00F, 0x0FF, 0xFFF, 0x2A4])
    def test_address_forms(self, group, nnn):
        instruction = decode((group << 12) | nnn)
        assert instruction.opcode == group
        assert instruction.nnn == nnn
        assert_fields(instruction, group, nnn >> 8, (nnn >> 4) & 0xF, nnn & 0xF)

    @pytest.mark.parametrize("group", [0x3, 0x4, 0x6, 0x7, 0xC])
    @pytest.mark.parametrize("x", [0x0, 0x7, 0xF])
    @pytest.mark.parametrize("nn", [0x00, 0x0F, 0xF0, 0xFF])
    def test_register_immediate_forms(self, group, x, nn):
        instruction = decode((group << 12) | (x << 8) | nn)
        assert instruction.x == x
        assert instruction.nn == nn
        assert_fields(instruction, group, x, nn >> 4, nn & 0xF)

    @pytest.mark.parametrize(
        "group, n",
        [(0x5, 0x0), (0x9, 0x0), (0xD, 0x0), (0xD, 0x5), (0xD, 0xF)]
        + [(0x8, sub) for sub in (0x0, 0x1, 0x2, 0x3, 0x4, 0x5, 0x6, 0x7, 0xE)],
    )
    @pytest.mark.parametrize("x, y", [(0x0, 0x0), (0xF, 0x0), (0x0, 0xF), (0xA, 0x3)])
    def test_register_pair_forms(self, group, n, x, y):
        instruction = decode(assemble(group, x, y, n))
        assert_fields(instruction, group, x, y, n)
        assert bool(is_defined(instruction.raw))

    @pytest.mark.parametrize(
        "group, nn",
        [(0xE, 0x9E), (0xE, 0xA1)]
        + [(0xF, low) for low in (0x07, 0x0A, 0x15, 0x18, 0x1E, 0x29, 0x33, 0x55, 0x65)],
    )
    @pytest.mark.parametrize("x", [0x0, 0x9, 0xF])
    def test_register_subop_forms(self, group, nn, x):
        instruction = decode((group << 12) | (x << 8) | nn)
        assert instruction.x == x
        assert instruction.nn == nn
        assert_fields(instruction, group, x, nn >> 4, nn & 0xF)
        assert bool(is_defined(instruction.raw))

    def test_group_is_high_nibble(self):
        for group in range(16):
            assert decode((group << 12) | 0x0FFF).opcode == group


class TestIsDefined:

    @pytest.mark.parametrize(
        "opcode",
        [0x00E0, 0x00EE, 0x1234, 0x2FFF, 0x3A00, 0x4B12, 0x5120, 0x6000, 0x7FFF,
         0x8120, 0x8127, 0x812E, 0x9450, 0xA000, 0xBFFF, 0xC1FF, 0xD125,
         0xE19E, 0xE1A1, 0xF007, 0xF00A, 0xF015, 0xF018, 0xF01E, 0xF029,
         0xF033, 0xF055, 0xF065],
    )
    def test_defined_opcodes(self, opcode):
        assert bool(is_defined(opcode))

    @pytest.mark.parametrize(
        "opcode",
        [0x0000, 0x0123, 0x00E1, 0x5121, 0x912F, 0x8128, 0x812D, 0x812F,
         0xE100, 0xE19F, 0xF000, 0xF0FF, 0xF075],
    )
    def test_undefined_opcodes(self, opcode):
        assert not bool(is_defined(opcode))
