"""
Raster surfaces the scanner can read from.

Both implementations answer point lookups with ``get_pixel`` and a
bulk ``column`` read that the sampler uses when available.
"""

from pathlib import Path
from typing import Protocol, Union

import numpy as np
import pygame
from PIL import Image


class Raster(Protocol):
    """Minimal read interface consumed by the column sampler."""

    def get_pixel(self, x: int, y: int) -> tuple[int, int, int, int]:
        ...


class ArrayRaster:
    """
    In-memory RGBA raster backed by a numpy array.

    The array is indexed (row, column, channel) like any image array.
    """

    def __init__(self, pixels: np.ndarray):
        """
        Initialize from an image array.

        Args:
            pixels: (H, W, 3) or (H, W, 4) uint8 array. RGB input is
                treated as fully opaque.
        """
        arr = np.asarray(pixels, dtype=np.uint8)
        if arr.ndim != 3 or arr.shape[2] not in (3, 4):
            raise ValueError(f"Expected (H, W, 3|4) array, got shape {arr.shape}")

        if arr.shape[2] == 3:
            alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
            arr = np.concatenate([arr, alpha], axis=2)

        self.pixels = arr

    @classmethod
    def from_image(cls, path: Union[str, Path]) -> "ArrayRaster":
        """Load any PIL-readable image file as an RGBA raster."""
        with Image.open(path) as img:
            return cls(np.array(img.convert("RGBA")))

    @classmethod
    def blank(cls, width: int, height: int, rgba=(255, 255, 255, 255)) -> "ArrayRaster":
        arr = np.empty((height, width, 4), dtype=np.uint8)
        arr[:, :] = rgba
        return cls(arr)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    def get_pixel(self, x: int, y: int) -> tuple[int, int, int, int]:
        r, g, b, a = self.pixels[y, x]
        return int(r), int(g), int(b), int(a)

    def column(self, x: int, y_top: int, y_bottom: int) -> np.ndarray:
        """Return the (n, 4) RGBA pixels of rows y_top..y_bottom inclusive."""
        return self.pixels[y_top:y_bottom + 1, x]


class SurfaceRaster:
    """Live view over a ``pygame.Surface`` being drawn on."""

    def __init__(self, surface: pygame.Surface):
        self.surface = surface

    @property
    def width(self) -> int:
        return self.surface.get_width()

    @property
    def height(self) -> int:
        return self.surface.get_height()

    def get_pixel(self, x: int, y: int) -> tuple[int, int, int, int]:
        color = self.surface.get_at((x, y))
        return color.r, color.g, color.b, color.a

    def column(self, x: int, y_top: int, y_bottom: int) -> np.ndarray:
        """Return the (n, 4) RGBA pixels of rows y_top..y_bottom inclusive."""
        strip = self.surface.subsurface((x, y_top, 1, y_bottom - y_top + 1))
        # pygame arrays are indexed (x, y)
        rgb = pygame.surfarray.array3d(strip)[0]
        if self.surface.get_flags() & pygame.SRCALPHA:
            alpha = pygame.surfarray.array_alpha(strip)[0]
        else:
            alpha = np.full(len(rgb), 255, dtype=np.uint8)

        out = np.empty((len(rgb), 4), dtype=np.uint8)
        out[:, :3] = rgb
        out[:, 3] = alpha
        return out
