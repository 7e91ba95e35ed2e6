"""
Audio output interface for scanner voices.

Every voice always holds an output handle. When no audio device is
usable the handle is a ``NullVoiceOutput`` and the engine keeps
running on logical state alone.
"""

import abc


class AudioBackendError(RuntimeError):
    """Raised when the audio device cannot be started or driven."""


class VoiceOutput(abc.ABC):
    """Per-voice control surface: note gate plus a linear gain."""

    @abc.abstractmethod
    def attack(self, pitch: str):
        """Begin sounding ``pitch``."""

    @abc.abstractmethod
    def release(self):
        """Stop the sounding note."""

    @abc.abstractmethod
    def set_gain(self, value: float):
        """Set linear gain in [0, 1]."""


class AudioBackend(abc.ABC):
    """Factory for voice outputs plus the process-wide start handshake."""

    available = True

    @abc.abstractmethod
    def start(self):
        """One-time device startup. Raises AudioBackendError on failure."""

    @abc.abstractmethod
    def voice(self, pitch: str) -> VoiceOutput:
        """Create the output handle for one pitched voice."""


class NullVoiceOutput(VoiceOutput):
    """Output that accepts every call and does nothing."""

    def attack(self, pitch: str):
        pass

    def release(self):
        pass

    def set_gain(self, value: float):
        pass


class NullAudioBackend(AudioBackend):
    """Backend used when audio is disabled or unavailable."""

    available = False

    def start(self):
        pass

    def voice(self, pitch: str) -> VoiceOutput:
        return NullVoiceOutput()
