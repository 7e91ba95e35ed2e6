"""Audio outputs for scanner voices."""

from scansynth.audio.backend import (
    AudioBackend,
    AudioBackendError,
    NullAudioBackend,
    NullVoiceOutput,
    VoiceOutput,
)
