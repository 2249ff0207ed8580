"""Unit tests for the provider timing and STT adapters.

WHY: Adapters are the boundary with third-party payloads. A malformed
response must degrade to "no timing" on the chunk, never crash playback,
and recognizer output must reach the aligner in spoken order.

HOW: Tests feed representative and broken payloads for each provider
shape and both recognizer shapes, then check the resulting dataclasses
and chunk state.

RULES:
- Malformed payloads return None (timing) or skip entries (STT)
- Unknown provider keys raise ValueError
"""

import pytest

from readalong_sync.adapters.stt_adapter import from_recognizer_result, from_word_timestamps
from readalong_sync.adapters.timing_adapter import (
    attach_timing,
    parse_character_alignment,
    parse_grapheme_alignment,
    parse_timepoints,
    parse_timing,
)
from readalong_sync.core.ir import CharacterTimes, ChunkStatus, GraphemeRanges, NamedMarks
from readalong_sync.core.timing import word_index_at_time


class TestCharacterAlignment:
    """Per-character alignment objects."""

    def test_valid(self):
        payload = {
            "characters": ["H", "i"],
            "character_start_times_seconds": [0.0, 0.1],
            "character_end_times_seconds": [0.1, 0.2],
        }
        timing = parse_character_alignment(payload)
        assert isinstance(timing, CharacterTimes)
        assert timing.start_times == (0.0, 0.1)
        assert timing.end_times == (0.1, 0.2)
        assert timing.count_separators is True

    def test_end_times_optional(self):
        timing = parse_character_alignment({"character_start_times_seconds": [0, 1]})
        assert timing.end_times == ()

    @pytest.mark.parametrize("payload", [
        None,
        {},
        {"character_start_times_seconds": "0.1,0.2"},
        {"character_start_times_seconds": [0.0, "late"]},
        [0.0, 0.1],
    ])
    def test_malformed(self, payload):
        assert parse_character_alignment(payload) is None


class TestTimepoints:
    """SSML mark timepoints."""

    def test_bare_list_sorted_by_time(self):
        timing = parse_timepoints([
            {"markName": "word_1", "timeSeconds": 0.6},
            {"markName": "word_0", "timeSeconds": 0.1},
        ])
        assert isinstance(timing, NamedMarks)
        assert [tp.name for tp in timing.timepoints] == ["word_0", "word_1"]

    def test_wrapped_object(self):
        timing = parse_timepoints({"timepoints": [{"markName": "word_0", "timeSeconds": 0}]})
        assert timing.timepoints[0].time_s == 0.0

    def test_empty_list_is_valid(self):
        assert parse_timepoints([]).timepoints == ()

    @pytest.mark.parametrize("payload", [
        None,
        {"timepoints": [{"markName": "word_0"}]},
        [{"timeSeconds": 1.0}],
        "word_0",
    ])
    def test_malformed(self, payload):
        assert parse_timepoints(payload) is None


class TestGraphemeAlignment:
    """Grapheme time ranges."""

    def test_valid(self):
        timing = parse_grapheme_alignment({
            "graph_chars": ["H", "i"],
            "graph_times": [[0.0, 0.1], [0.1, 0.25]],
        })
        assert isinstance(timing, GraphemeRanges)
        assert timing.ranges == ((0.0, 0.1), (0.1, 0.25))
        assert timing.count_separators is False

    @pytest.mark.parametrize("payload", [
        None,
        {"graph_chars": ["H"]},
        {"graph_times": [[0.0]]},
        {"graph_times": [[0.0, 0.1, 0.2]]},
    ])
    def test_malformed(self, payload):
        assert parse_grapheme_alignment(payload) is None


class TestParseTiming:
    """Provider registry dispatch."""

    def test_provider_key_normalized(self):
        timing = parse_timing(" ElevenLabs ", {"character_start_times_seconds": [0.0]})
        assert isinstance(timing, CharacterTimes)

    def test_resemble_skips_separators(self):
        timing = parse_timing("resemble", {"graph_times": [[0.0, 0.1]]})
        assert timing.count_separators is False

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown provider"):
            parse_timing("acme", {})


class TestAttachTiming:
    """Chunk state after a TTS response resolves."""

    def test_ready(self, sample_chunk):
        payload = [{"markName": "word_{}".format(i), "timeSeconds": i * 0.5} for i in range(4)]
        assert attach_timing(sample_chunk, "google", payload, audio_handle="blob:1") is True
        assert sample_chunk.status == ChunkStatus.ready
        assert sample_chunk.audio_handle == "blob:1"
        assert sample_chunk.error is None
        assert word_index_at_time(sample_chunk, sample_chunk.alignment_metadata, 1.1) == 2

    def test_unusable_payload(self, sample_chunk):
        assert attach_timing(sample_chunk, "elevenlabs", {"bogus": True}, audio_handle="a") is False
        assert sample_chunk.status == ChunkStatus.error
        assert sample_chunk.alignment_metadata is None
        assert sample_chunk.audio_handle == "a"
        assert "elevenlabs" in sample_chunk.error

    def test_unknown_provider_raises(self, sample_chunk):
        with pytest.raises(ValueError):
            attach_timing(sample_chunk, "acme", {})


class TestRecognizerResult:
    """Streaming recognizer results."""

    def test_result_object(self):
        words = from_recognizer_result({
            "result": [
                {"word": "hello", "start": 0.0, "end": 0.4, "conf": 0.9},
                {"word": "world", "start": 0.5, "end": 0.9},
            ],
            "text": "hello world",
        })
        assert [w.word for w in words] == ["hello", "world"]
        assert words[0].conf == pytest.approx(0.9)
        assert words[1].conf == 1.0

    def test_malformed_entries_skipped(self):
        words = from_recognizer_result([
            {"word": "ok", "start": 0, "end": 1},
            {"word": "no-times"},
            {"word": "bad", "start": "soon", "end": 1},
            "junk",
        ])
        assert [w.word for w in words] == ["ok"]

    def test_partial_result_has_no_words(self):
        assert from_recognizer_result({"partial": "hel"}) == []


class TestWordTimestamps:
    """Batch transcription word timestamps."""

    def test_timestamps(self):
        words = from_word_timestamps({"timestamps": [
            {"word": "the", "startTime": 0.1, "endTime": 0.3},
            {"word": "end", "startTime": 0.3, "endTime": 0.6},
        ]}, confidence=0.8)
        assert [(w.word, w.start, w.end) for w in words] == [("the", 0.1, 0.3), ("end", 0.3, 0.6)]
        assert all(w.conf == 0.8 for w in words)

    def test_malformed(self):
        assert from_word_timestamps([{"word": "x", "start": 0, "end": 1}]) == []
        assert from_word_timestamps(None) == []
