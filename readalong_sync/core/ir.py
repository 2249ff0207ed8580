"""Intermediate representation dataclasses for word-indexed documents.

WHY: Extracted page text must stay visually synchronized with audio that
comes from very different sources — a TTS provider returning timing
metadata, or a live reader transcribed by an STT engine. Every component
(segmenter, chunker, aligner, time-to-word mapper) needs to agree on one
word structure and one global word index space. The IR provides that
single, well-typed form.

HOW: The dataclasses form a hierarchy:
  Word           — one reference word with optional timing
  Sentence       — ordered words plus the exact sentence text
  Document       — the whole segmented page; owns every Word
  Chunk          — a run of consecutive sentences sent in one TTS request
  RecognizedWord — one word reported by the STT engine
  CharacterTimes / NamedMarks / GraphemeRanges — the three provider timing
                   shapes, a tagged variant consumed by core.timing

RULES:
- The global word index is the flattening of sentences[].words[] in order
- Word.index is sentence-local; global indices come from the Document
- Words are mutated in place (timing only), never replaced or reordered
- Writers go through Document.set_word_timing / clear_timing
- All times are float seconds from the start of the current audio source
- A Chunk shares its Sentence objects with the Document
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple, Union


@dataclass
class Word:
    """A single reference word as produced by the segmenter.

    WHY: Highlighting works at word granularity. The word text keeps the
    punctuation and trailing whitespace the segmenter attached to it so the
    sentence can be rebuilt exactly from its words.

    RULES:
    - text: word plus attached punctuation and trailing whitespace
    - index: position inside the parent sentence (0-based)
    - start/end/confidence: None until timing is established
    """

    text: str
    index: int
    start: float | None = None
    end: float | None = None
    confidence: float | None = None

    @property
    def has_timing(self) -> bool:
        return self.start is not None and self.end is not None


@dataclass
class Sentence:
    """An ordered run of words forming one sentence.

    RULES:
    - text equals reconstruct_text(words) (see core.segmenter)
    - index: position inside the document (0-based)
    - start/end: rolled up from word timing by Document.refresh_sentence_timing
    """

    text: str
    words: list[Word] = field(default_factory=list)
    index: int = 0
    start: float | None = None
    end: float | None = None


@dataclass
class Document:
    """The complete segmented page: the alignment map.

    WHY: The aligner and the playback mapper both write timing onto the same
    words. Keeping every write behind the Document makes the single-writer
    rule visible: callers hand around global indices, the Document resolves
    them to its own Word objects.

    HOW: Global indices are computed from cumulative sentence word counts.
    The offsets are recomputed on demand since sentence count and order are
    fixed once segmented.

    RULES:
    - full_text: the original untokenized input (diagnostic use only)
    - sentences: immutable in count and order after segmentation
    - Out-of-range global indices raise IndexError (caller misuse)
    """

    full_text: str
    sentences: list[Sentence] = field(default_factory=list)

    @property
    def word_count(self) -> int:
        return sum(len(s.words) for s in self.sentences)

    def words(self) -> List[Word]:
        """Flattened word list in global index order (shared objects)."""
        return [w for s in self.sentences for w in s.words]

    def sentence_offsets(self) -> List[int]:
        """Global index of the first word of each sentence."""
        offsets: List[int] = []
        running = 0
        for sentence in self.sentences:
            offsets.append(running)
            running += len(sentence.words)
        return offsets

    def global_index(self, sentence_index: int, word_index: int) -> int:
        sentence = self.sentences[sentence_index]
        if not 0 <= word_index < len(sentence.words):
            raise IndexError("word index {} out of range for sentence {}".format(
                word_index, sentence_index))
        return self.sentence_offsets()[sentence_index] + word_index

    def sentence_for_word(self, global_index: int) -> int:
        """Return the index of the sentence containing a global word index."""
        if global_index < 0:
            raise IndexError("global word index {} out of range".format(global_index))
        running = 0
        for sentence in self.sentences:
            running += len(sentence.words)
            if global_index < running:
                return sentence.index
        raise IndexError("global word index {} out of range".format(global_index))

    def word_at(self, global_index: int) -> Word:
        sentence_index = self.sentence_for_word(global_index)
        local = global_index - self.sentence_offsets()[sentence_index]
        return self.sentences[sentence_index].words[local]

    def set_word_timing(
        self,
        global_index: int,
        start: float,
        end: float,
        confidence: Optional[float] = None,
    ) -> Word:
        """Write timing onto the word at a global index and return it."""
        word = self.word_at(global_index)
        word.start = start
        word.end = end
        if confidence is not None:
            word.confidence = confidence
        return word

    def clear_timing(self) -> None:
        """Drop all word and sentence timing (e.g. before a new recording)."""
        for sentence in self.sentences:
            sentence.start = None
            sentence.end = None
            for word in sentence.words:
                word.start = None
                word.end = None
                word.confidence = None

    def refresh_sentence_timing(self) -> None:
        """Roll word timing up into each sentence's start and end.

        A sentence starts at its first timed word and ends at its last
        timed word. Sentences without any timed word are reset to None.
        """
        for sentence in self.sentences:
            timed = [w for w in sentence.words if w.has_timing]
            if timed:
                sentence.start = timed[0].start
                sentence.end = timed[-1].end
            else:
                sentence.start = None
                sentence.end = None


class ChunkStatus(str, Enum):
    """Lifecycle of a chunk's TTS request, driven by the TTS client."""

    pending = "pending"
    loading = "loading"
    ready = "ready"
    error = "error"


# ---------------------------------------------------------------------------
# Provider timing metadata (tagged variant)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CharacterTimes:
    """Per-character start times aligned 1:1 with the chunk's characters.

    RULES:
    - start_times[i] is the time the i-th character of the stream starts
    - end_times is optional and informational only
    - count_separators: True when whitespace characters appear in the
      stream (and so in start_times), False when they are skipped
    """

    start_times: Tuple[float, ...]
    end_times: Tuple[float, ...] = ()
    count_separators: bool = True


@dataclass(frozen=True)
class Timepoint:
    """A provider-reported (mark name, time) pair."""

    name: str
    time_s: float


@dataclass(frozen=True)
class NamedMarks:
    """Ordered timepoints for marks emitted before each word.

    RULES:
    - Mark names encode chunk-local word ordinals, e.g. "word_12"
    - Timepoints are ordered by time
    """

    timepoints: Tuple[Timepoint, ...]


@dataclass(frozen=True)
class GraphemeRanges:
    """Per-grapheme [start, end] time ranges.

    RULES:
    - ranges[i] is the (start, end) of the i-th grapheme of the stream
    - count_separators defaults to False: providers of this shape usually
      leave whitespace out of the grapheme stream
    """

    ranges: Tuple[Tuple[float, float], ...]
    count_separators: bool = False


TimingMetadata = Union[CharacterTimes, NamedMarks, GraphemeRanges]


@dataclass
class Chunk:
    """A run of consecutive sentences synthesized by one TTS request.

    WHY: TTS providers cap request size. Chunks bound each request while
    never splitting a sentence, so playback and highlighting stay in step.

    RULES:
    - sentences are shared with the Document (same objects)
    - start_word_index / end_word_index are global and inclusive
    - status is mutated by the TTS client as the request resolves
    - alignment_metadata is one TimingMetadata variant once ready
    """

    id: int
    text: str
    sentences: list[Sentence]
    start_word_index: int
    end_word_index: int
    status: ChunkStatus = ChunkStatus.pending
    audio_handle: Any = None
    alignment_metadata: Optional[TimingMetadata] = None
    error: str | None = None

    @property
    def word_count(self) -> int:
        return sum(len(s.words) for s in self.sentences)

    def words(self) -> List[Word]:
        return [w for s in self.sentences for w in s.words]


@dataclass
class RecognizedWord:
    """One word reported by the speech-to-text engine.

    RULES:
    - word: raw recognized text (any case, may carry punctuation)
    - start/end: float seconds from the start of the recording
    - conf: recognizer confidence 0.0–1.0
    """

    word: str
    start: float
    end: float
    conf: float = 1.0
