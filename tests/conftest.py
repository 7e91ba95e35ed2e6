"""Pytest configuration and shared fixtures."""

import os

# pygame must see the dummy drivers before it is first imported
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import numpy as np
import pytest

from scansynth.audio.backend import AudioBackend, AudioBackendError, VoiceOutput
from scansynth.config import ScanConfig
from scansynth.raster import ArrayRaster

WHITE = (255, 255, 255, 255)
BLACK = (0, 0, 0, 255)
RED = (255, 0, 0, 255)


class RecordingOutput(VoiceOutput):
    """Voice output that records every call it receives."""

    def __init__(self, pitch: str, fail_on: str | None = None):
        self.pitch = pitch
        self.fail_on = fail_on
        self.calls: list[tuple] = []

    def _record(self, *call):
        if self.fail_on == call[0]:
            raise AudioBackendError(f"{call[0]} failed")
        self.calls.append(call)

    def attack(self, pitch: str):
        self._record("attack", pitch)

    def release(self):
        self._record("release")

    def set_gain(self, value: float):
        self._record("gain", value)

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)


class RecordingBackend(AudioBackend):
    """Backend that hands out RecordingOutputs and counts start calls."""

    def __init__(self, fail_start: bool = False, fail_on: str | None = None):
        self.fail_start = fail_start
        self.fail_on = fail_on
        self.start_calls = 0
        self.outputs: dict[str, RecordingOutput] = {}

    def start(self):
        self.start_calls += 1
        if self.fail_start:
            raise AudioBackendError("no audio device")

    def voice(self, pitch: str) -> RecordingOutput:
        output = RecordingOutput(pitch, fail_on=self.fail_on)
        self.outputs[pitch] = output
        return output


@pytest.fixture
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture
def config() -> ScanConfig:
    """Default engine configuration."""
    return ScanConfig()


def make_column_raster(column: list[tuple[int, int, int, int]], width: int = 3) -> ArrayRaster:
    """
    Build a raster whose every column holds the given pixels.

    Args:
        column: RGBA pixels from top to bottom.
        width: Number of identical columns.
    """
    arr = np.array(column, dtype=np.uint8)[:, np.newaxis, :]
    return ArrayRaster(np.repeat(arr, width, axis=1))


@pytest.fixture
def column_raster():
    """Factory fixture wrapping make_column_raster."""
    return make_column_raster


@pytest.fixture
def blank_raster() -> ArrayRaster:
    """A 20x60 all-white raster."""
    return ArrayRaster.blank(20, 60)


@pytest.fixture
def make_backend():
    """Factory for RecordingBackends with failure injection."""
    return RecordingBackend
