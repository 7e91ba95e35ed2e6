"""
Voice state machine.

Turns a per-column pixel count into a quantized loudness target,
glides the applied loudness toward it, and gates the note on the
audio output.
"""

import logging
from dataclasses import dataclass

from scansynth.audio.backend import NullVoiceOutput, VoiceOutput

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VoiceParams:
    """Banding and smoothing constants shared by all voices."""

    band_size: int = 10  # Pixels per loudness step
    max_band: int = 5  # Number of discrete loudness steps
    smoothing: float = 0.2  # 0 = frozen, 1 = instant snap


def band_target(count: int, params: VoiceParams) -> float:
    """
    Quantize a pixel count to a loudness target in [0, 1].

    Counts below ``band_size`` land in band 0; counts at or above
    ``band_size * max_band`` are clamped to full loudness.
    """
    if count <= 0:
        return 0.0
    band_index = min(params.max_band, count // params.band_size)
    return band_index / params.max_band


class Voice:
    """
    Audio state for one pitched palette color.

    Created once per pitched color and reused for the whole session.
    ``is_active`` mirrors whether a note is sounding on the output.
    """

    def __init__(
        self,
        name: str,
        index: int,
        pitch: str,
        params: VoiceParams | None = None,
        output: VoiceOutput | None = None,
    ):
        """
        Initialize a silent voice.

        Args:
            name: Palette color name.
            index: Position of the color in the palette.
            pitch: Fixed pitch symbol, e.g. "C3".
            params: Banding/smoothing constants.
            output: Audio handle; a no-op handle when omitted.
        """
        self.name = name
        self.index = index
        self.pitch = pitch
        self.params = params or VoiceParams()
        self.output = output or NullVoiceOutput()

        self.is_active = False
        self.target_loudness = 0.0
        self.current_loudness = 0.0

    def __repr__(self) -> str:
        return (
            f"Voice({self.name!r}, pitch={self.pitch!r}, active={self.is_active}, "
            f"loudness={self.current_loudness:.3f})"
        )

    def update(self, count: int):
        """
        Advance one frame given this color's pixel count in the column.

        Any nonzero count gates the note on, even when it quantizes to
        band 0 and the target loudness is silent.
        """
        attack = False
        release = False

        if count <= 0:
            self.target_loudness = 0.0
            if self.is_active:
                self.is_active = False
                release = True
        else:
            self.target_loudness = band_target(count, self.params)
            if not self.is_active:
                self.is_active = True
                attack = True

        self.current_loudness += self.params.smoothing * (
            self.target_loudness - self.current_loudness
        )

        # Logical state is settled before touching the output
        if attack:
            logger.debug("attack %s (%s)", self.name, self.pitch)
            self.output.attack(self.pitch)
        elif release:
            logger.debug("release %s (%s)", self.name, self.pitch)
            self.output.release()
        self.output.set_gain(self.current_loudness)

    def silence(self):
        """Release any sounding note and zero all loudness state."""
        was_active = self.is_active
        self.is_active = False
        self.target_loudness = 0.0
        self.current_loudness = 0.0

        if was_active:
            self.output.release()
        self.output.set_gain(0.0)
