"""Tests for the command line entry point."""

import pytest
from chip8vm.cli import main, build_parser, EXIT_OK, EXIT_LOAD_ERROR, EXIT_FAULT
from conftest import program


@pytest.fixture
def rom(tmp_path):
    def write(*opcodes):
        path = tmp_path / "prog.ch8"
        path.write_bytes(program(*opcodes))
        return str(path)
    return write


def test_defaults():
    args = build_parser().parse_args(["game.ch8"])
    assert args.frequency == 600
    assert args.fps == 60
    assert not args.headless


def test_headless_run_prints_display(rom, capsys):
    path = rom(0xA050, 0xD015, 0x1204)

    code = main([path, "--headless", "--cycles", "20", "--log-level", "ERROR"])

    assert code == EXIT_OK
    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 32
    assert lines[0].startswith("####....")


def test_missing_rom(tmp_path):
    assert main([str(tmp_path / "missing.ch8"), "--headless", "--log-level", "ERROR"]) == EXIT_LOAD_ERROR


def test_bad_font(rom, tmp_path):
    font = tmp_path / "font.txt"
    font.write_text("0xF0 0x90")
    code = main([rom(0x1200), "--font", str(font), "--headless", "--log-level", "ERROR"])
    assert code == EXIT_LOAD_ERROR


def test_fault_exit_code(rom):
    code = main([rom(0x00EE), "--headless", "--log-level", "ERROR"])
    assert code == EXIT_FAULT


def test_strict_unknown_opcode(rom):
    code = main([rom(0x5121), "--headless", "--strict", "--log-level", "ERROR"])
    assert code == EXIT_FAULT


def test_invalid_frequency(rom):
    assert main([rom(0x1200), "--headless", "--frequency", "0"]) == EXIT_LOAD_ERROR
