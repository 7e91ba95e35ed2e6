"""
Scanline sonification engine.

Orchestrates the per-frame flow from scan position to voice gains:
sample one raster column, fan the per-color counts out to the voices,
and let each voice gate and smooth its output.
"""

import logging

import numpy as np

from scansynth.audio.backend import (
    AudioBackend,
    AudioBackendError,
    NullAudioBackend,
    NullVoiceOutput,
)
from scansynth.config import ScanConfig
from scansynth.core.palette import Palette
from scansynth.core.sampler import ColumnSampler
from scansynth.core.voice import Voice
from scansynth.raster import Raster

logger = logging.getLogger(__name__)


class SonificationEngine:
    """
    Drives one voice per pitched palette color from a scanned raster.

    The host render loop calls ``tick`` once per frame with the current
    scan column. Nothing here raises into the render loop on audio
    failure; the engine drops to logical-only operation instead.
    """

    def __init__(
        self,
        raster: Raster,
        config: ScanConfig | None = None,
        backend: AudioBackend | None = None,
    ):
        """
        Initialize the engine and build its voices.

        Args:
            raster: Surface to scan.
            config: Engine constants. Uses defaults if None.
            backend: Audio backend. Silent no-op backend if None.
        """
        self.config = config or ScanConfig()
        self.backend = backend or NullAudioBackend()

        self.palette: Palette = self.config.build_palette()
        self.sampler = ColumnSampler(
            raster,
            self.palette,
            opacity_threshold=self.config.opacity_threshold,
        )
        self.voices: list[Voice] = self._build_voices()

        self.running = False
        self._audio_started = False

    def _build_voices(self) -> list[Voice]:
        """Create one voice per pitched palette entry, in palette order."""
        params = self.config.voice_params
        voices = []
        for index, entry in enumerate(self.palette):
            pitch = self.config.pitch_for(entry.name)
            if not pitch:
                continue
            voices.append(
                Voice(
                    entry.name,
                    index,
                    pitch,
                    params=params,
                    output=self.backend.voice(pitch),
                )
            )
        return voices

    @property
    def raster(self) -> Raster:
        return self.sampler.raster

    @property
    def audio_available(self) -> bool:
        return self.backend.available

    def voice(self, name: str) -> Voice:
        """Look up a voice by its palette color name."""
        for v in self.voices:
            if v.name == name:
                return v
        raise KeyError(name)

    def _degrade(self, error: Exception):
        """Detach every voice from the backend and continue silently."""
        logger.warning("Audio unavailable, continuing without sound: %s", error)
        self.backend = NullAudioBackend()
        for v in self.voices:
            v.output = NullVoiceOutput()

    def activate(self):
        """Start scanning. The first call also starts the audio backend."""
        if not self._audio_started:
            self._audio_started = True
            try:
                self.backend.start()
            except AudioBackendError as e:
                self._degrade(e)
        self.running = True

    def deactivate(self):
        """Stop scanning and leave every voice released and silent."""
        self.running = False
        for v in self.voices:
            try:
                v.silence()
            except AudioBackendError as e:
                self._degrade(e)

    def toggle(self) -> bool:
        """Flip between running and stopped. Returns the new state."""
        if self.running:
            self.deactivate()
        else:
            self.activate()
        return self.running

    def tick(self, scan_x: int, y_top: int, y_bottom: int) -> np.ndarray | None:
        """
        Process one frame at the given scan column.

        Args:
            scan_x: Column to sample; must lie inside the raster.
            y_top: First row of the scanned band.
            y_bottom: Last row of the scanned band (inclusive).

        Returns:
            Per-palette-color pixel counts, or None when not running.
        """
        if not self.running or not self.voices:
            return None

        counts = self.sampler.sample(scan_x, y_top, y_bottom)

        for v in self.voices:
            try:
                v.update(int(counts[v.index]))
            except AudioBackendError as e:
                self._degrade(e)

        return counts
