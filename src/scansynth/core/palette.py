"""
Palette classification module.

Maps arbitrary RGB pixels onto the nearest registered drawing color
so that anti-aliased or slightly off-tone strokes still count toward
the color the user picked.
"""

from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np
from PIL import ImageColor


@dataclass(frozen=True)
class PaletteEntry:
    """A named drawing color with its precomputed RGB triple."""

    name: str
    rgb: tuple[int, int, int]


class Palette:
    """
    Ordered, immutable set of registered colors.

    Classification is nearest-neighbour by squared Euclidean distance
    in RGB space. Ties resolve to the entry registered first.
    """

    def __init__(self, entries: Sequence[PaletteEntry], silent: str | None = None):
        """
        Initialize the palette.

        Args:
            entries: Palette entries in registration order.
            silent: Name of the entry whose pixels are never sonified.
        """
        names = [entry.name for entry in entries]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate palette names: {names}")
        if silent is not None and silent not in names:
            raise ValueError(f"Silent color {silent!r} is not in the palette")

        self._entries = tuple(entries)
        self._silent_index = names.index(silent) if silent is not None else -1

        rgb = np.array([entry.rgb for entry in self._entries], dtype=np.int32)
        self._rgb = rgb.reshape(-1, 3)
        self._rgb.flags.writeable = False

    @classmethod
    def from_colors(cls, colors: Iterable[str], silent: str | None = None) -> "Palette":
        """
        Build a palette from CSS color names or hex strings.

        Args:
            colors: Color specifiers understood by ``PIL.ImageColor``.
            silent: Specifier of the silent color, if any.

        Returns:
            Palette with one entry per color, named by its specifier.
        """
        entries = [PaletteEntry(c, ImageColor.getrgb(c)[:3]) for c in colors]
        return cls(entries, silent=silent)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    def __getitem__(self, index: int) -> PaletteEntry:
        return self._entries[index]

    @property
    def names(self) -> list[str]:
        return [entry.name for entry in self._entries]

    @property
    def rgb(self) -> np.ndarray:
        """Read-only (n, 3) int32 array of palette colors."""
        return self._rgb

    @property
    def silent_index(self) -> int:
        """Index of the silent entry, or -1 when every color is audible."""
        return self._silent_index

    def index_of(self, name: str) -> int:
        return self.names.index(name)

    def nearest_index(self, r: int, g: int, b: int) -> int:
        """
        Return the index of the closest palette color.

        A strict less-than comparison keeps the lowest index on exact ties.
        Returns -1 for an empty palette.
        """
        best_idx = -1
        best_dist = None

        for i, (pr, pg, pb) in enumerate(entry.rgb for entry in self._entries):
            dr = r - pr
            dg = g - pg
            db = b - pb
            dist = dr * dr + dg * dg + db * db

            if best_dist is None or dist < best_dist:
                best_dist = dist
                best_idx = i

        return best_idx

    def classify(self, pixels: np.ndarray) -> np.ndarray:
        """
        Vectorized ``nearest_index`` over a block of pixels.

        Args:
            pixels: (n, 3) or (n, 4) array; any alpha column is ignored.

        Returns:
            (n,) int array of palette indices (-1 for an empty palette).
        """
        rgb = np.asarray(pixels, dtype=np.int32)[:, :3]
        if len(self._entries) == 0:
            return np.full(len(rgb), -1, dtype=np.int64)

        diff = rgb[:, np.newaxis, :] - self._rgb[np.newaxis, :, :]
        dist = np.einsum("ijk,ijk->ij", diff, diff)
        # argmin returns the first minimum, matching the linear scan
        return np.argmin(dist, axis=1)
