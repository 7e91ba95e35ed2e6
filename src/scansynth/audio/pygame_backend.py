"""
pygame.mixer audio backend.

Each voice loops a synthesized tone on its own mixer channel. Note
gating maps to play/fadeout and the gain to the channel volume.
"""

import logging

import librosa
import numpy as np
import pygame

from scansynth.audio.backend import AudioBackend, AudioBackendError, VoiceOutput

logger = logging.getLogger(__name__)


def pitch_to_hz(pitch: str) -> float:
    """Convert scientific pitch notation (e.g. "C3") to Hz."""
    return float(librosa.note_to_hz(pitch))


def render_tone(
    freq: float,
    sample_rate: int = 44100,
    channels: int = 2,
    amplitude: float = 0.3,
    min_duration: float = 0.5,
) -> np.ndarray:
    """
    Synthesize a seamlessly loopable triangle tone.

    The buffer length is rounded to a whole number of periods so the
    loop point does not click.

    Args:
        freq: Tone frequency in Hz.
        sample_rate: Mixer sample rate.
        channels: Mixer channel count (the tone is duplicated per channel).
        amplitude: Peak amplitude in [0, 1].
        min_duration: Minimum buffer length in seconds.

    Returns:
        (n_samples, channels) int16 array, or (n_samples,) when mono.
    """
    cycles = max(1, int(np.ceil(freq * min_duration)))
    n_samples = int(round(cycles * sample_rate / freq))
    t = np.arange(n_samples) / sample_rate

    phase = 2 * np.pi * freq * t
    wave = (2.0 / np.pi) * np.arcsin(np.sin(phase))
    samples = np.int16(np.clip(wave * amplitude, -1.0, 1.0) * 32767)

    if channels == 1:
        return samples
    return np.repeat(samples[:, np.newaxis], channels, axis=1)


class PygameVoiceOutput(VoiceOutput):
    """
    Voice handle bound to one reserved mixer channel.

    The channel index is fixed when the voice is created, so a release
    still fading out is cut off by the next attack of the same voice and
    never holds a channel another voice needs.
    """

    def __init__(self, backend: "PygameAudioBackend", pitch: str, channel_id: int):
        self.backend = backend
        self.pitch = pitch
        self.channel_id = channel_id
        self._sounds: dict[str, pygame.mixer.Sound] = {}
        self._playing = False
        self._gain = 0.0

    @property
    def channel(self) -> pygame.mixer.Channel:
        return self.backend.channel(self.channel_id)

    def _sound(self, pitch: str) -> pygame.mixer.Sound:
        if pitch not in self._sounds:
            self._sounds[pitch] = self.backend.make_sound(pitch)
        return self._sounds[pitch]

    def attack(self, pitch: str):
        sound = self._sound(pitch)
        channel = self.channel
        try:
            channel.play(sound, loops=-1, fade_ms=self.backend.attack_ms)
            channel.set_volume(self._gain)
        except pygame.error as e:
            raise AudioBackendError(f"Failed to start {pitch}: {e}") from e
        self._playing = True

    def release(self):
        if not self._playing:
            return
        self._playing = False
        try:
            self.channel.fadeout(self.backend.release_ms)
        except pygame.error as e:
            raise AudioBackendError(f"Failed to release {self.pitch}: {e}") from e

    def set_gain(self, value: float):
        self._gain = value
        if not self._playing:
            return
        try:
            self.channel.set_volume(value)
        except pygame.error as e:
            raise AudioBackendError(f"Failed to set gain on {self.pitch}: {e}") from e


class PygameAudioBackend(AudioBackend):
    """
    Audio backend on top of ``pygame.mixer``.

    ``start()`` initializes the mixer once; voices created before that
    only synthesize their tone on first attack.
    """

    def __init__(
        self,
        sample_rate: int = 44100,
        buffer: int = 512,
        amplitude: float = 0.3,
        attack_ms: int = 10,
        release_ms: int = 300,
    ):
        self.sample_rate = sample_rate
        self.buffer = buffer
        self.amplitude = amplitude
        self.attack_ms = attack_ms
        self.release_ms = release_ms
        self._n_voices = 0

    def start(self):
        try:
            if not pygame.mixer.get_init():
                pygame.mixer.init(
                    frequency=self.sample_rate,
                    size=-16,
                    channels=2,
                    buffer=self.buffer,
                )
            self._ensure_channels()
        except pygame.error as e:
            raise AudioBackendError(f"pygame.mixer unavailable: {e}") from e

        logger.debug("Mixer started: %s", pygame.mixer.get_init())

    def _ensure_channels(self):
        # Voice channels are reserved so Sound.play() elsewhere never takes them
        if pygame.mixer.get_num_channels() < self._n_voices:
            pygame.mixer.set_num_channels(max(8, self._n_voices))
        pygame.mixer.set_reserved(self._n_voices)

    def voice(self, pitch: str) -> VoiceOutput:
        output = PygameVoiceOutput(self, pitch, channel_id=self._n_voices)
        self._n_voices += 1
        return output

    def channel(self, channel_id: int) -> pygame.mixer.Channel:
        """Return the mixer channel reserved for voice ``channel_id``."""
        if not pygame.mixer.get_init():
            raise AudioBackendError("pygame.mixer is not initialized")
        try:
            if channel_id >= pygame.mixer.get_num_channels():
                self._ensure_channels()
            return pygame.mixer.Channel(channel_id)
        except pygame.error as e:
            raise AudioBackendError(f"No mixer channel {channel_id}: {e}") from e

    def make_sound(self, pitch: str) -> pygame.mixer.Sound:
        """Synthesize the looping tone for ``pitch`` at the mixer's format."""
        init = pygame.mixer.get_init()
        if not init:
            raise AudioBackendError("pygame.mixer is not initialized")
        sample_rate, _, channels = init

        try:
            freq = pitch_to_hz(pitch)
        except librosa.util.exceptions.ParameterError as e:
            raise AudioBackendError(f"Unrecognized pitch {pitch!r}") from e

        tone = render_tone(
            freq,
            sample_rate=sample_rate,
            channels=channels,
            amplitude=self.amplitude,
        )
        return pygame.sndarray.make_sound(np.ascontiguousarray(tone))
