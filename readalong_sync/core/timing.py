"""Map playback time to a global word index, and sentences back to time.

WHY: Each TTS provider reports timing in its own shape: per-character
start times, named SSML mark timepoints, or per-grapheme time ranges.
The highlighter wants one thing — which word is being spoken now — so
every shape has to resolve to the same global word index.

HOW: word_index_at_time dispatches on the TimingMetadata variant.
Character-based shapes find the last character whose time is <= the
playback time (binary search), then the word whose character span holds
that character. Mark-based timing finds the last word mark at or before
the playback time and reads the ordinal from its name. Both add the
chunk's global starting word index. seek_time runs the same mapping in
reverse for the first word of a sentence.

RULES:
- Word character spans tile the chunk's flat character stream: each word
  owns its trailing separators, so every character maps to some word
- With count_separators=False the stream holds no whitespace at all
- No timing, malformed timing, or a time before the first anchor → None
- seek_time falls back to 0.0 when no anchor exists for the sentence
- Nothing here raises on data; no-match is a normal outcome
"""

from __future__ import annotations

import logging
from bisect import bisect_right
from typing import List, Optional, Sequence, Tuple

from readalong_sync.config import MARK_PREFIX
from readalong_sync.core.ir import (
    CharacterTimes,
    Chunk,
    Document,
    GraphemeRanges,
    NamedMarks,
    TimingMetadata,
)
from readalong_sync.core.segmenter import build_text_and_map

logger = logging.getLogger(__name__)


def chunk_word_spans(chunk: Chunk, count_separators: bool = True) -> List[Tuple[int, int]]:
    """Character spans [start, end) of each chunk word in the flat stream.

    WHY: Providers time characters of the chunk text they were sent. To go
    from a character back to a word we need each word's extent in that
    same text.

    HOW: With separators, each sentence is rebuilt with build_text_and_map
    (identical to sentence.text) and sentences are joined by one space, as
    the chunker does. Without separators, each word simply contributes its
    non-whitespace characters.

    RULES:
    - One span per chunk word, in chunk order
    - Consecutive spans touch: spans[i][1] == spans[i + 1][0]
    """
    spans: List[Tuple[int, int]] = []
    base = 0

    for sentence in chunk.sentences:
        if not sentence.words:
            continue

        if not count_separators:
            for word in sentence.words:
                size = sum(1 for ch in word.text if not ch.isspace())
                spans.append((base, base + size))
                base += size
            continue

        text, char_map = build_text_and_map(sentence.words)
        starts: List[int] = []
        for position, local_index in enumerate(char_map):
            if local_index == len(starts):
                starts.append(position)
        # The joining space after the sentence belongs to its last word.
        sentence_end = len(text) + 1
        for i, start in enumerate(starts):
            end = starts[i + 1] if i + 1 < len(starts) else sentence_end
            spans.append((base + start, base + end))
        base += sentence_end

    return spans


def _word_at_char(spans: Sequence[Tuple[int, int]], char_index: int) -> Optional[int]:
    if not spans:
        return None
    starts = [s for s, _ in spans]
    i = bisect_right(starts, char_index) - 1
    if i < 0 or char_index >= spans[i][1]:
        return None
    return i


def _mark_ordinal(name: str) -> Optional[int]:
    if not name.startswith(MARK_PREFIX):
        return None
    suffix = name[len(MARK_PREFIX):]
    return int(suffix) if suffix.isdigit() else None


def word_index_at_time(
    chunk: Chunk,
    timing: Optional[TimingMetadata],
    current_time: float,
) -> Optional[int]:
    """Global index of the word being spoken at current_time, or None.

    Args:
        chunk: The chunk whose audio is playing.
        timing: The chunk's timing metadata (usually chunk.alignment_metadata).
        current_time: Playback position in seconds within the chunk's audio.

    Returns:
        The global word index, or None when no word can be determined.
        Callers keep the previous highlight on None.
    """
    if isinstance(timing, CharacterTimes):
        local = _local_from_chars(chunk, list(timing.start_times), timing.count_separators,
                                  current_time)
    elif isinstance(timing, GraphemeRanges):
        starts = [start for start, _ in timing.ranges]
        local = _local_from_chars(chunk, starts, timing.count_separators, current_time)
    elif isinstance(timing, NamedMarks):
        local = _local_from_marks(chunk, timing, current_time)
    else:
        logger.debug("Chunk %d has no usable timing metadata", chunk.id)
        return None

    if local is None:
        return None
    return chunk.start_word_index + local


def _local_from_chars(
    chunk: Chunk,
    char_times: List[float],
    count_separators: bool,
    current_time: float,
) -> Optional[int]:
    char_index = bisect_right(char_times, current_time) - 1
    if char_index < 0:
        return None
    local = _word_at_char(chunk_word_spans(chunk, count_separators), char_index)
    if local is None:
        logger.debug("Character %d of chunk %d is past its last word", char_index, chunk.id)
    return local


def _local_from_marks(chunk: Chunk, timing: NamedMarks, current_time: float) -> Optional[int]:
    times = [tp.time_s for tp in timing.timepoints]
    i = bisect_right(times, current_time) - 1
    # Walk back past any non-word marks to the most recent word mark.
    while i >= 0:
        ordinal = _mark_ordinal(timing.timepoints[i].name)
        if ordinal is not None:
            if ordinal < chunk.word_count:
                return ordinal
            logger.debug("Mark %r is outside chunk %d", timing.timepoints[i].name, chunk.id)
            return None
        i -= 1
    return None


def seek_time(chunk: Chunk, timing: Optional[TimingMetadata], sentence_index: int) -> float:
    """Start time (seconds) of a sentence within the chunk's audio.

    WHY: Jumping playback to a sentence needs the audio offset of its first
    word. This is word_index_at_time in reverse.

    RULES:
    - sentence_index is the document-level Sentence.index
    - A sentence not in this chunk, or with no anchor in the timing, → 0.0
    """
    ordinal = 0
    for sentence in chunk.sentences:
        if sentence.index == sentence_index:
            break
        ordinal += len(sentence.words)
    else:
        return 0.0

    if ordinal >= chunk.word_count:
        return 0.0

    if isinstance(timing, CharacterTimes):
        offset = chunk_word_spans(chunk, timing.count_separators)[ordinal][0]
        if offset < len(timing.start_times):
            return timing.start_times[offset]
    elif isinstance(timing, GraphemeRanges):
        offset = chunk_word_spans(chunk, timing.count_separators)[ordinal][0]
        if offset < len(timing.ranges):
            return timing.ranges[offset][0]
    elif isinstance(timing, NamedMarks):
        target = "{}{}".format(MARK_PREFIX, ordinal)
        for tp in timing.timepoints:
            if tp.name == target:
                return tp.time_s
    return 0.0


def find_chunk_for_sentence(chunks: Sequence[Chunk], sentence_index: int) -> Optional[int]:
    """Position in chunks of the chunk holding a document sentence, or None."""
    for position, chunk in enumerate(chunks):
        if any(s.index == sentence_index for s in chunk.sentences):
            return position
    return None


def word_at_time(document: Document, current_time: float) -> Optional[int]:
    """Global index of the timed word whose [start, end] holds current_time.

    Used when replaying a recorded take whose timing the aligner wrote.
    Words without timing are skipped.
    """
    for index, word in enumerate(document.words()):
        if word.has_timing and word.start <= current_time <= word.end:
            return index
    return None
