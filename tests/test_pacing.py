"""Tests for the audio pacing buffer."""

import pytest

from spykee_py.core.audio.pacing import AudioPacingBuffer
from spykee_py.core.audio.wave import WAVE_HEADER_SIZE

from conftest import FakeSink

PACKET = bytes(4000)  # 1/8 s of silence


def test_overrun_without_consumer():
    pacing = AudioPacingBuffer()
    for _ in range(20):
        pacing.push(PACKET)
    stats = pacing.stats()
    assert stats.received == 20
    assert stats.skips == 13
    assert stats.slot_reuses == 4
    assert stats.buffered == 7
    assert stats.downloading_index == 20 % 16
    assert stats.playing_index == 13


def test_no_sink_never_starts_playback():
    pacing = AudioPacingBuffer()
    assert pacing.push(PACKET) is False
    assert pacing.play_next() is False


def test_first_clip_starts_playback(fake_sink):
    pacing = AudioPacingBuffer(fake_sink)
    assert pacing.push(PACKET) is True
    assert pacing.play_next() is True
    assert len(fake_sink.clips) == 1
    assert len(fake_sink.clips[0]) == WAVE_HEADER_SIZE + 2000
    # A clip is playing, the next arrival waits for completion
    assert pacing.push(PACKET) is False
    assert pacing.buffered == 1


def test_playing_sink_defers_start(fake_sink):
    fake_sink.playing = True
    pacing = AudioPacingBuffer(fake_sink)
    assert pacing.push(PACKET) is False


def test_completion_pulls_next_clip(fake_sink):
    pacing = AudioPacingBuffer(fake_sink)
    pacing.push(PACKET)
    pacing.play_next()
    pacing.push(b"\xff\x7f" * 10)
    fake_sink.playing = False
    assert pacing.on_playback_finished() is True
    assert fake_sink.clips[1][WAVE_HEADER_SIZE:] == b"\xff" * 10
    assert pacing.stats().played == 2


def test_wait_counted_when_empty(fake_sink):
    pacing = AudioPacingBuffer(fake_sink)
    assert pacing.on_playback_finished() is False
    assert pacing.stats().waits == 1


def test_playback_error_skips_clip():
    sink = FakeSink(failures=1)
    pacing = AudioPacingBuffer(sink)
    pacing.push(b"\x00\x00")
    pacing.push(b"\xff\x7f")
    assert pacing.play_next() is True
    stats = pacing.stats()
    assert stats.playback_errors == 1
    assert stats.played == 1
    assert sink.clips[0][WAVE_HEADER_SIZE:] == b"\xff"


def test_playback_error_with_nothing_left():
    sink = FakeSink(failures=5)
    pacing = AudioPacingBuffer(sink)
    pacing.push(PACKET)
    assert pacing.play_next() is False
    assert pacing.stats().playback_errors == 1


def test_reset():
    pacing = AudioPacingBuffer()
    for _ in range(10):
        pacing.push(PACKET)
    pacing.reset()
    stats = pacing.stats()
    assert (stats.buffered, stats.received, stats.skips) == (0, 0, 0)


def test_invalid_threshold():
    with pytest.raises(ValueError):
        AudioPacingBuffer(capacity=4, drop_threshold=5)
    with pytest.raises(ValueError):
        AudioPacingBuffer(drop_threshold=0)


def test_start_if_idle(fake_sink):
    pacing = AudioPacingBuffer(fake_sink)
    assert pacing.start_if_idle() is False
    assert pacing.stats().waits == 0
    pacing.push(PACKET)
    assert pacing.start_if_idle() is True
    pacing.push(PACKET)
    assert pacing.start_if_idle() is False
    assert len(fake_sink.clips) == 1
    assert pacing.buffered == 1


def test_stale_notifications_do_not_restart_playback(fake_sink):
    pacing = AudioPacingBuffer(fake_sink)
    pacing.push(PACKET)
    pacing.start_if_idle()
    pacing.push(PACKET)
    pacing.push(PACKET)
    # First clip ends; a queued arrival starts the second one before the
    # completion notification is handled
    fake_sink.playing = False
    assert pacing.start_if_idle() is True
    assert pacing.on_playback_finished() is False
    assert pacing.start_if_idle() is False
    assert len(fake_sink.clips) == 2
    assert pacing.buffered == 1
