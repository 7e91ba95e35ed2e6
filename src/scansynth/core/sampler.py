"""
Column sampling module.

Counts, per palette color, the drawn pixels found along one vertical
strip of a raster. This is the dominant per-frame cost of the engine.
"""

import numpy as np

from scansynth.core.palette import Palette
from scansynth.raster import Raster


class ColumnSampler:
    """
    Reads a single raster column and tallies pixels per palette color.

    Pixels below the opacity threshold and pixels that classify as the
    palette's silent color are not counted.
    """

    def __init__(self, raster: Raster, palette: Palette, opacity_threshold: int = 10):
        """
        Initialize the sampler.

        Args:
            raster: Surface to read. Never written to.
            palette: Colors to classify against.
            opacity_threshold: Minimum alpha for a pixel to count as drawn.
        """
        self.raster = raster
        self.palette = palette
        self.opacity_threshold = opacity_threshold

    def sample(self, x: int, y_top: int, y_bottom: int) -> np.ndarray:
        """
        Count palette colors in rows y_top..y_bottom (inclusive) at column x.

        Returns:
            (len(palette),) int64 array of pixel counts.
        """
        column = getattr(self.raster, "column", None)
        if column is not None:
            return self._count_block(column(x, y_top, y_bottom))
        return self._count_pixels(x, y_top, y_bottom)

    def _count_pixels(self, x: int, y_top: int, y_bottom: int) -> np.ndarray:
        """Per-pixel path for rasters that only support point lookups."""
        counts = np.zeros(len(self.palette), dtype=np.int64)
        silent = self.palette.silent_index

        for y in range(y_top, y_bottom + 1):
            r, g, b, a = self.raster.get_pixel(x, y)
            if a < self.opacity_threshold:
                continue

            idx = self.palette.nearest_index(r, g, b)
            if idx == -1 or idx == silent:
                continue

            counts[idx] += 1

        return counts

    def _count_block(self, pixels: np.ndarray) -> np.ndarray:
        """Vectorized path over an (n, 4) RGBA block."""
        n_colors = len(self.palette)
        if n_colors == 0 or len(pixels) == 0:
            return np.zeros(n_colors, dtype=np.int64)

        opaque = pixels[pixels[:, 3] >= self.opacity_threshold]
        indices = self.palette.classify(opaque)
        indices = indices[indices != self.palette.silent_index]

        return np.bincount(indices, minlength=n_colors).astype(np.int64)
