"""Font glyph loading.

Font files are plain text: whitespace separated hex bytes, with or without a
`0x` prefix, one glyph per line by convention::

    0xF0 0x90 0x90 0x90 0xF0
    0x20 0x60 0x20 0x20 0x70
"""

from pathlib import Path
from typing import Sequence

import jax.numpy as jnp

from chip8vm.constants import FONT_START, FONT_SIZE, FONT_DATA
from chip8vm.errors import FontError
from chip8vm.state import EmulatorState


def parse_font_text(text: str) -> list[int]:
    """Parse hex font text into a list of bytes."""
    glyphs = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        line = line.split("#", 1)[0]
        for token in line.split():
            try:
                value = int(token, 16)
            except ValueError:
                raise FontError(f"line {line_number}: '{token}' is not a hex byte") from None
            if not 0 <= value <= 0xFF:
                raise FontError(f"line {line_number}: {token} does not fit in a byte")
            glyphs.append(value)
    return glyphs


def load_font_file(path: str) -> list[int]:
    """Read and parse a font file."""
    try:
        text = Path(path).read_text()
    except OSError as e:
        raise FontError(f"could not read font file '{path}': {e}") from e
    return parse_font_text(text)


def load_font(state: EmulatorState, glyphs: Sequence[int] = FONT_DATA) -> EmulatorState:
    """Place the 16 five-byte digit glyphs at FONT_START."""
    glyphs = list(glyphs)
    if len(glyphs) != FONT_SIZE:
        raise FontError(f"font must hold {FONT_SIZE} bytes (16 glyphs of 5), got {len(glyphs)}")
    if any(not 0 <= value <= 0xFF for value in glyphs):
        raise FontError("font bytes must be in 0-255")
    font = jnp.array(glyphs, dtype=jnp.uint8)
    return state.replace(memory=state.memory.at[FONT_START:FONT_START + FONT_SIZE].set(font))
