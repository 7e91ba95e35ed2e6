"""Core scanline sonification components."""

from scansynth.core.palette import Palette, PaletteEntry
from scansynth.core.sampler import ColumnSampler
from scansynth.core.voice import Voice, VoiceParams, band_target
