"""Tests for the SonificationEngine orchestrator."""

import numpy as np
import pytest

from scansynth.audio.backend import NullVoiceOutput
from scansynth.config import ScanConfig
from scansynth.engine import SonificationEngine
from scansynth.raster import ArrayRaster

WHITE = (255, 255, 255, 255)
BLACK = (0, 0, 0, 255)
RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)


def striped_raster() -> ArrayRaster:
    """
    60-row raster with three distinct columns.

    Column 0: all white. Column 1: 30 black + 12 red. Column 2: 5 blue.
    """
    arr = np.full((60, 3, 4), 255, dtype=np.uint8)
    arr[:30, 1] = BLACK
    arr[30:42, 1] = RED
    arr[:5, 2] = BLUE
    return ArrayRaster(arr)


class TestSonificationEngine:
    """Tests for activation, ticking and teardown."""

    @pytest.fixture
    def engine(self, backend):
        return SonificationEngine(striped_raster(), ScanConfig(), backend)

    def test_one_voice_per_pitched_color(self, engine):
        names = [v.name for v in engine.voices]
        assert "white" not in names
        assert names == ["black", "red", "purple", "blue", "green", "#00cc44", "yellow", "#ff9900"]
        assert [v.pitch for v in engine.voices] == ["C3", "E3", "G3", "B3", "D4", "F4", "A4", "C5"]

    def test_voice_indices_match_palette(self, engine):
        for v in engine.voices:
            assert engine.palette[v.index].name == v.name

    def test_tick_noop_when_stopped(self, engine, backend):
        assert engine.tick(1, 0, 59) is None
        assert all(not o.calls for o in backend.outputs.values())

    def test_tick_updates_voices(self, engine, backend):
        engine.activate()
        counts = engine.tick(1, 0, 59)

        assert counts[engine.palette.index_of("black")] == 30
        assert counts[engine.palette.index_of("red")] == 12
        assert counts[engine.palette.index_of("white")] == 0

        black = engine.voice("black")
        red = engine.voice("red")
        assert black.is_active and black.target_loudness == pytest.approx(0.6)
        assert red.is_active and red.target_loudness == pytest.approx(0.2)
        assert not engine.voice("blue").is_active

        assert backend.outputs["C3"].count("attack") == 1
        assert backend.outputs["E3"].count("attack") == 1
        assert backend.outputs["B3"].count("attack") == 0

    def test_every_voice_gets_gain_each_tick(self, engine, backend):
        engine.activate()
        engine.tick(0, 0, 59)
        engine.tick(1, 0, 59)
        for output in backend.outputs.values():
            assert output.count("gain") == 2

    def test_silent_column_triggers_nothing(self, engine, backend):
        engine.activate()
        counts = engine.tick(0, 0, 59)
        assert counts.sum() == 0
        assert all(o.count("attack") == 0 for o in backend.outputs.values())

    def test_moving_off_color_releases(self, engine, backend):
        engine.activate()
        engine.tick(1, 0, 59)
        engine.tick(2, 0, 59)

        assert not engine.voice("black").is_active
        assert backend.outputs["C3"].count("release") == 1
        # Five blue pixels sit in band 0 but still gate the note on
        assert engine.voice("blue").is_active
        assert engine.voice("blue").target_loudness == 0.0

    def test_start_handshake_once(self, engine, backend):
        engine.activate()
        engine.deactivate()
        engine.activate()
        engine.toggle()
        engine.toggle()
        assert backend.start_calls == 1

    def test_toggle_returns_state(self, engine):
        assert engine.toggle() is True
        assert engine.running
        assert engine.toggle() is False
        assert not engine.running

    def test_deactivate_clears_all_state(self, engine, backend):
        engine.activate()
        for _ in range(4):
            engine.tick(1, 0, 59)
        engine.deactivate()

        for v in engine.voices:
            assert not v.is_active
            assert v.current_loudness == 0.0
            assert v.target_loudness == 0.0
            assert backend.outputs[v.pitch].calls[-1] == ("gain", 0.0)

        assert backend.outputs["C3"].count("release") == 1
        assert backend.outputs["E3"].count("release") == 1
        assert backend.outputs["B3"].count("release") == 0

    def test_deactivate_when_idle_is_safe(self, engine, backend):
        engine.deactivate()
        engine.deactivate()
        assert all(o.count("release") == 0 for o in backend.outputs.values())

    def test_tick_after_deactivate_is_noop(self, engine):
        engine.activate()
        engine.deactivate()
        assert engine.tick(1, 0, 59) is None
        assert not engine.voice("black").is_active

    def test_backend_start_failure_degrades(self, make_backend):
        backend = make_backend(fail_start=True)
        engine = SonificationEngine(striped_raster(), ScanConfig(), backend)

        engine.activate()
        assert engine.running
        assert not engine.audio_available
        assert all(isinstance(v.output, NullVoiceOutput) for v in engine.voices)

        counts = engine.tick(1, 0, 59)
        assert counts is not None
        assert engine.voice("black").is_active
        assert engine.voice("black").current_loudness > 0.0
        assert all(not o.calls for o in backend.outputs.values())

    def test_backend_failure_mid_tick_degrades(self, make_backend):
        backend = make_backend(fail_on="attack")
        engine = SonificationEngine(striped_raster(), ScanConfig(), backend)
        engine.activate()

        counts = engine.tick(1, 0, 59)
        assert counts is not None
        assert engine.voice("black").is_active
        assert engine.voice("red").is_active
        assert all(isinstance(v.output, NullVoiceOutput) for v in engine.voices)

        engine.tick(2, 0, 59)
        engine.deactivate()
        assert not any(v.is_active for v in engine.voices)

    def test_default_backend_is_silent(self):
        engine = SonificationEngine(striped_raster())
        engine.activate()
        engine.tick(1, 0, 59)
        assert not engine.audio_available
        assert engine.voice("black").is_active

    def test_no_pitched_colors_is_inert(self, backend):
        config = ScanConfig(pitches={}, silent_color=None)
        engine = SonificationEngine(striped_raster(), config, backend)
        engine.activate()
        assert engine.voices == []
        assert engine.tick(1, 0, 59) is None

    def test_empty_palette_is_inert(self, backend):
        config = ScanConfig(colors=(), pitches={}, silent_color=None)
        engine = SonificationEngine(striped_raster(), config, backend)
        engine.activate()
        assert engine.tick(1, 0, 59) is None

    def test_unknown_voice_lookup(self, engine):
        with pytest.raises(KeyError):
            engine.voice("white")
