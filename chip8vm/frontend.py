"""Pygame display sink and input source for a `Machine`."""

import os
import time
from typing import Optional

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
import numpy as np
import pygame

from chip8vm.constants import SCREEN_WIDTH, SCREEN_HEIGHT, NUM_KEYS
from chip8vm.machine import Machine, Status
from chip8vm.rendering import chip8_display_to_rgb, create_color_scheme, save_screenshot

# COSMAC VIP keypad on the left side of a QWERTY keyboard:
#   1 2 3 C      1 2 3 4
#   4 5 6 D  ->  Q W E R
#   7 8 9 E      A S D F
#   A 0 B F      Z X C V
KEY_MAP = {
    pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
    pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
    pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
}


class PygameFrontend:
    """Window that renders the display and collects keypad state."""

    def __init__(self, scale: int = 8, color_scheme: str = "classic", title: str = "CHIP-8"):
        self.scale = scale
        self.color_scheme = color_scheme
        self.on_color, self.off_color = create_color_scheme(color_scheme)
        self.keys = np.zeros(NUM_KEYS, dtype=np.bool_)
        self.closed = False
        self.last_display = np.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=np.bool_)

        pygame.init()
        self.screen = pygame.display.set_mode((SCREEN_WIDTH * scale, SCREEN_HEIGHT * scale))
        pygame.display.set_caption(title)

    def poll_keys(self) -> np.ndarray:
        """Drain pygame events; returns the current 16 key states."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.closed = True
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.closed = True
                elif event.key == pygame.K_F12:
                    self.screenshot()
                elif event.key in KEY_MAP:
                    self.keys[KEY_MAP[event.key]] = True
            elif event.type == pygame.KEYUP:
                if event.key in KEY_MAP:
                    self.keys[KEY_MAP[event.key]] = False
        return self.keys.copy()

    def draw(self, display: np.ndarray):
        """Blit a 64x32 display to the window."""
        self.last_display = np.array(display, dtype=np.bool_)
        rgb = chip8_display_to_rgb(self.last_display, self.scale, self.on_color, self.off_color)
        # surfarray expects (width, height, 3)
        surface = pygame.surfarray.make_surface(rgb.transpose(1, 0, 2))
        self.screen.blit(surface, (0, 0))
        pygame.display.flip()

    def screenshot(self, filename: Optional[str] = None) -> str:
        filename = filename or time.strftime("chip8-%Y%m%d-%H%M%S.png")
        save_screenshot(self.last_display, filename, self.scale, self.color_scheme)
        return filename

    def close(self):
        pygame.quit()


def run_pygame(machine: Machine, frontend: Optional[PygameFrontend] = None) -> Status:
    """Drive a loaded machine from a pygame window until it stops.

    Frames are paced with `pygame.time.Clock` at the configured fps. A stop
    request or a closed window halts the machine before the next frame.
    """
    config = machine.config
    frontend = frontend or PygameFrontend(config.render_scale, config.color_scheme)
    machine.display_sink = frontend.draw
    machine.input_source = frontend.poll_keys
    clock = pygame.time.Clock()

    if machine.status is Status.LOADED:
        machine.start()
    frontend.draw(machine.display)

    try:
        while machine.status is Status.RUNNING:
            if machine.stop_requested or frontend.closed:
                machine.halt()
                break
            clock.tick(config.fps)
            machine.run_frame()
    finally:
        frontend.close()
    return machine.status
