"""
Interactive drawing surface with a sonifying scan line.

Strokes are painted onto a persistent off-screen layer. While the
scanner runs, a vertical line sweeps the drawing box and every frame
the column under it is fed to the sonification engine.
"""

import logging
from pathlib import Path
from typing import Any, Union

import pygame
from PIL import Image

from scansynth.audio.backend import AudioBackend
from scansynth.config import ScanConfig
from scansynth.engine import SonificationEngine
from scansynth.raster import SurfaceRaster

logger = logging.getLogger(__name__)

# UI layout
SWATCH_ORIGIN = (200, 50)
SWATCH_SIZE = 30
SWATCH_SPACING = 40
SLIDER_RECT = (20, 55, 140, 14)
CLEAR_RECT = (22, 95, 60, 24)
SCAN_RECT = (90, 95, 60, 24)

UI_BACKGROUND = (220, 220, 220)
BUTTON_FACE = (240, 240, 240)
BUTTON_PRESSED = (187, 187, 187)
INK = (0, 0, 0)


class Sketchpad:
    """
    Drawing application hosting a SonificationEngine.

    Owns the drawing layer, the UI state (color, brush, scanner) and
    the frame loop. The engine only ever reads the drawing layer.
    """

    def __init__(
        self,
        config: ScanConfig | None = None,
        backend: AudioBackend | None = None,
    ):
        """
        Initialize the sketchpad.

        Args:
            config: Engine and layout configuration. Uses defaults if None.
            backend: Audio backend for the engine (silent if None).
        """
        self.config = config or ScanConfig()
        cfg = self.config

        self.layer = pygame.Surface((cfg.width, cfg.height))
        self.layer.fill(pygame.Color(cfg.background))

        self.engine = SonificationEngine(SurfaceRaster(self.layer), cfg, backend)
        # Draw with the palette's resolved RGB so strokes classify exactly
        self.swatches = [entry.rgb for entry in self.engine.palette]

        self.box = pygame.Rect(cfg.box_rect)
        self.color_index = 0
        self.brush_size = cfg.brush_size
        self.scanner_x = self.box.x

        self._last_pos: tuple[int, int] | None = None
        self._dragging_slider = False

    # ── State ─────────────────────────────────────────────────────────

    @property
    def scanning(self) -> bool:
        return self.engine.running

    @property
    def current_color(self) -> tuple[int, int, int]:
        return self.swatches[self.color_index]

    def inside_box(self, x: int, y: int) -> bool:
        b = self.box
        return b.x < x < b.x + b.w and b.y < y < b.y + b.h

    def select_color(self, index: int):
        if 0 <= index < len(self.swatches):
            self.color_index = index

    def set_brush_size(self, size: int):
        cfg = self.config
        self.brush_size = max(cfg.brush_min, min(cfg.brush_max, int(size)))

    def clear(self):
        self.layer.fill(pygame.Color(self.config.background))

    def toggle_scanner(self):
        self.engine.toggle()
        if self.scanning and not (self.box.x <= self.scanner_x <= self.box.x + self.box.w):
            self.scanner_x = self.box.x

    def load_image(self, path: Union[str, Path]):
        """Paint an image file into the drawing box, scaled to fit."""
        with Image.open(path) as img:
            img = img.convert("RGB").resize((self.box.w, self.box.h))
            surface = pygame.image.frombuffer(img.tobytes(), img.size, "RGB")
            self.layer.blit(surface, self.box.topleft)

    # ── Drawing ───────────────────────────────────────────────────────

    def stroke(self, start: tuple[int, int], end: tuple[int, int]):
        """Paint a round-capped segment if the pointer is inside the box."""
        if not self.inside_box(*end):
            return
        color = self.current_color
        pygame.draw.line(self.layer, color, start, end, self.brush_size)
        radius = max(1, self.brush_size // 2)
        pygame.draw.circle(self.layer, color, start, radius)
        pygame.draw.circle(self.layer, color, end, radius)

    def _slider_value_at(self, x: int) -> int:
        sx, _, sw, _ = SLIDER_RECT
        frac = min(1.0, max(0.0, (x - sx) / sw))
        cfg = self.config
        return round(cfg.brush_min + frac * (cfg.brush_max - cfg.brush_min))

    def _swatch_rect(self, index: int) -> pygame.Rect:
        ox, oy = SWATCH_ORIGIN
        return pygame.Rect(ox + index * SWATCH_SPACING, oy, SWATCH_SIZE, SWATCH_SIZE)

    # ── Events ────────────────────────────────────────────────────────

    def click(self, pos: tuple[int, int]) -> bool:
        """Route a click to the UI controls. Returns True if one was hit."""
        for i in range(len(self.swatches)):
            if self._swatch_rect(i).collidepoint(pos):
                self.select_color(i)
                return True
        if pygame.Rect(SLIDER_RECT).collidepoint(pos):
            self._dragging_slider = True
            self.set_brush_size(self._slider_value_at(pos[0]))
            return True
        if pygame.Rect(CLEAR_RECT).collidepoint(pos):
            self.clear()
            return True
        if pygame.Rect(SCAN_RECT).collidepoint(pos):
            self.toggle_scanner()
            return True
        return False

    def handle_event(self, event: Any) -> bool:
        """
        Apply one pygame event.

        Returns:
            False when the application should quit.
        """
        if event.type == pygame.QUIT:
            return False

        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if not self.click(event.pos):
                self._last_pos = event.pos
                self.stroke(event.pos, event.pos)
        elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
            self._last_pos = None
            self._dragging_slider = False
        elif event.type == pygame.MOUSEMOTION and event.buttons[0]:
            if self._dragging_slider:
                self.set_brush_size(self._slider_value_at(event.pos[0]))
            elif self._last_pos is not None:
                self.stroke(self._last_pos, event.pos)
                self._last_pos = event.pos
        elif event.type == pygame.KEYDOWN:
            return self._handle_key(event.key)

        return True

    def _handle_key(self, key: int) -> bool:
        if key == pygame.K_ESCAPE:
            return False
        if key == pygame.K_SPACE:
            self.toggle_scanner()
        elif key == pygame.K_c:
            self.clear()
        elif key == pygame.K_LEFTBRACKET:
            self.set_brush_size(self.brush_size - 2)
        elif key == pygame.K_RIGHTBRACKET:
            self.set_brush_size(self.brush_size + 2)
        elif pygame.K_1 <= key <= pygame.K_9:
            self.select_color(key - pygame.K_1)
        return True

    # ── Frame ─────────────────────────────────────────────────────────

    def advance(self):
        """Move the scan head one step and sonify the column under it."""
        if not self.scanning:
            return None

        self.scanner_x += self.config.scanner_speed
        if self.scanner_x > self.box.x + self.box.w:
            self.scanner_x = self.box.x

        return self.engine.tick(self.scanner_x, self.box.y, self.box.y + self.box.h)

    def render(self, screen: pygame.Surface, font: pygame.font.Font):
        screen.fill(UI_BACKGROUND)
        screen.blit(self.layer, (0, 0))

        pygame.draw.rect(screen, INK, self.box, 2)
        screen.blit(font.render("Brush size", True, INK), (15, 32))
        screen.blit(
            font.render("Please draw inside the canvas! :)", True, INK),
            (self.box.x + 150, self.box.y - 24),
        )

        self._render_controls(screen, font)

        if self.scanning:
            color = pygame.Color(self.config.scanner_color)
            pygame.draw.line(
                screen, color,
                (self.scanner_x, self.box.y),
                (self.scanner_x, self.box.y + self.box.h),
                2,
            )

        mouse = pygame.mouse.get_pos()
        pygame.draw.circle(screen, self.current_color, mouse, max(1, self.brush_size // 2), 1)

    def _render_button(self, screen, rect, face, pressed=False, label=None, font=None):
        rect = pygame.Rect(rect)
        if pressed:
            rect = rect.move(2, 2)
        else:
            pygame.draw.rect(screen, INK, rect.move(3, 3))
        pygame.draw.rect(screen, face, rect)
        pygame.draw.rect(screen, INK, rect, 3)
        if label and font:
            text = font.render(label, True, INK)
            screen.blit(text, text.get_rect(center=rect.center))

    def _render_controls(self, screen: pygame.Surface, font: pygame.font.Font):
        for i, rgb in enumerate(self.swatches):
            self._render_button(screen, self._swatch_rect(i), rgb, pressed=i == self.color_index)

        sx, sy, sw, sh = SLIDER_RECT
        pygame.draw.rect(screen, (221, 221, 221), SLIDER_RECT)
        pygame.draw.rect(screen, INK, SLIDER_RECT, 3)
        cfg = self.config
        frac = (self.brush_size - cfg.brush_min) / max(1, cfg.brush_max - cfg.brush_min)
        knob = pygame.Rect(sx + int(frac * (sw - 10)), sy - 3, 10, sh + 6)
        pygame.draw.rect(screen, INK, knob)

        self._render_button(screen, CLEAR_RECT, BUTTON_FACE, label="CLEAR", font=font)
        face = BUTTON_PRESSED if self.scanning else BUTTON_FACE
        self._render_button(screen, SCAN_RECT, face, pressed=self.scanning, label="SCAN", font=font)

    def run(self):
        """Open the window and run the frame loop until quit."""
        pygame.init()
        try:
            screen = pygame.display.set_mode((self.config.width, self.config.height))
            pygame.display.set_caption("scansynth")
            pygame.mouse.set_visible(False)
            font = pygame.font.Font(None, 18)
            clock = pygame.time.Clock()

            running = True
            while running:
                for event in pygame.event.get():
                    if not self.handle_event(event):
                        running = False
                        break

                self.advance()
                self.render(screen, font)
                pygame.display.flip()
                clock.tick(self.config.fps)
        finally:
            self.engine.deactivate()
            pygame.quit()
