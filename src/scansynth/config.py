"""
Configuration for the scanner engine and the drawing host.

All tunables live in one ``ScanConfig`` passed to the engine at
construction. JSON files may override any subset of fields.
"""

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from scansynth.core.palette import Palette
from scansynth.core.voice import VoiceParams

DEFAULT_COLORS: Tuple[str, ...] = (
    "black",
    "white",
    "red",
    "purple",
    "blue",
    "green",
    "#00cc44",
    "yellow",
    "#ff9900",
)

DEFAULT_PITCHES: Dict[str, Optional[str]] = {
    "black": "C3",
    "white": None,  # silent
    "red": "E3",
    "purple": "G3",
    "blue": "B3",
    "green": "D4",
    "#00cc44": "F4",
    "yellow": "A4",
    "#ff9900": "C5",
}


@dataclass
class ScanConfig:
    """Engine constants plus the geometry of the drawing host."""

    # Palette
    colors: Tuple[str, ...] = DEFAULT_COLORS
    pitches: Dict[str, Optional[str]] = field(default_factory=lambda: dict(DEFAULT_PITCHES))
    silent_color: Optional[str] = "white"

    # Banding and smoothing
    band_size: int = 10
    max_band: int = 5
    smoothing: float = 0.2
    opacity_threshold: int = 10  # Minimum alpha to count a pixel as drawn

    # Host window
    width: int = 900
    height: int = 600
    fps: int = 60
    pad: int = 20
    box_top: int = 130
    box_bottom_margin: int = 50
    background: str = "white"

    # Scanner and brush
    scanner_speed: int = 2  # Pixels per frame
    scanner_color: str = "#00aaff"
    brush_min: int = 2
    brush_max: int = 40
    brush_size: int = 8

    def __post_init__(self):
        self.colors = tuple(self.colors)

        if self.band_size < 1:
            raise ValueError(f"band_size must be >= 1, got {self.band_size}")
        if self.max_band < 1:
            raise ValueError(f"max_band must be >= 1, got {self.max_band}")
        if not 0.0 <= self.smoothing <= 1.0:
            raise ValueError(f"smoothing must be in [0, 1], got {self.smoothing}")
        if not 0 <= self.opacity_threshold <= 255:
            raise ValueError(f"opacity_threshold must be in [0, 255], got {self.opacity_threshold}")
        if not self.brush_min <= self.brush_size <= self.brush_max:
            raise ValueError(
                f"brush_size {self.brush_size} outside [{self.brush_min}, {self.brush_max}]"
            )

        unknown = set(self.pitches) - set(self.colors)
        if unknown:
            raise ValueError(f"Pitches given for unknown colors: {sorted(unknown)}")
        if self.silent_color is not None and self.silent_color not in self.colors:
            raise ValueError(f"Silent color {self.silent_color!r} is not in colors")

        if self.box_rect[2] <= 0 or self.box_rect[3] <= 0:
            raise ValueError("Drawing box does not fit in the window")

    @property
    def voice_params(self) -> VoiceParams:
        return VoiceParams(
            band_size=self.band_size,
            max_band=self.max_band,
            smoothing=self.smoothing,
        )

    @property
    def box_rect(self) -> Tuple[int, int, int, int]:
        """Drawing box as (x, y, w, h)."""
        return (
            self.pad,
            self.box_top,
            self.width - self.pad * 2,
            self.height - self.box_top - self.box_bottom_margin,
        )

    def build_palette(self) -> Palette:
        return Palette.from_colors(self.colors, silent=self.silent_color)

    def pitch_for(self, name: str) -> Optional[str]:
        """Pitch of a palette color; the silent color never has one."""
        if name == self.silent_color:
            return None
        return self.pitches.get(name)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScanConfig":
        """
        Build a config from a plain dictionary of overrides.

        Args:
            data: Field names mapped to values; missing fields keep defaults.

        Returns:
            Validated ScanConfig.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")

        data = dict(data)
        if "colors" in data:
            colors = tuple(data["colors"])
            data["colors"] = colors
            # Defaults for the other palette fields follow the new color list
            data.setdefault(
                "pitches",
                {c: p for c, p in DEFAULT_PITCHES.items() if c in colors},
            )
            data.setdefault("silent_color", "white" if "white" in colors else None)
        return cls(**data)


def load_config(path: Union[str, Path]) -> ScanConfig:
    """Load a ScanConfig from a JSON file of overrides."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a JSON object: {path}")
    return ScanConfig.from_dict(data)
