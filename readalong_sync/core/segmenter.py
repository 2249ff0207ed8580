"""Sentence and word segmentation of extracted page text.

WHY: Highlighting, chunking, alignment and time-to-word mapping all index
the same words. Segmentation must be deterministic and must let every
sentence be rebuilt exactly from its words, otherwise character offsets
reported by TTS providers drift away from the highlighted word.

HOW: Unicode (UAX #29) sentence boundaries via uniseg give raw sentence
spans. A forward merge pass glues spans that end in a known abbreviation
("Mr.", "Jan.") to the following span. Each merged span is then split
with UAX #29 word boundaries and fed through a small state machine that
attaches punctuation and whitespace to the neighbouring word.

RULES:
- Whitespace-only sentence spans are discarded
- Abbreviation merge concatenates spans verbatim and is re-checked after
  every merge, so "Gen. Dr. Smith" chains correctly
- Trailing punctuation and whitespace stay on the current word ("word, ")
- Leading punctuation (opening quotes, "$") attaches to the next word
- A word ending in a hyphen absorbs the next word ("sub-agents"); en and em
  dashes stay on the preceding word and the next word starts fresh
- Word-like text after non-space punctuation starts a new word, so the
  rebuilt sentence text can differ from full_text ("3:00" → "3: 00")
- Sentences without a word-like segment are dropped
- Never raises: a segmentation failure degrades to a single word
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from uniseg.sentencebreak import sentences as sentence_breaks
from uniseg.wordbreak import words as word_breaks

from readalong_sync.config import ABBREVIATIONS
from readalong_sync.core.ir import Document, Sentence, Word

logger = logging.getLogger(__name__)

# A buffer ending in a hyphen joins with the following word. Dashes do not.
_JOINERS = ("-", "‐", "‑")

# Opening punctuation ignored when testing a token against ABBREVIATIONS.
_OPENERS = "\"'([{“‘"


def segment(text: str, abbreviations: Optional[Iterable[str]] = None) -> Document:
    """Split raw text into a Document of sentences and words.

    Args:
        text: Plain text, already stripped of markup.
        abbreviations: Tokens that must not end a sentence. Defaults to
            config.ABBREVIATIONS.

    Returns:
        A Document whose sentences and words carry sequential indices.
        Empty or whitespace-only input yields a Document with no sentences.
    """
    if not text or not text.strip():
        return Document(full_text=text or "", sentences=[])

    abbrevs = frozenset(abbreviations) if abbreviations is not None else ABBREVIATIONS

    try:
        spans = merge_abbreviations(_sentence_spans(text), abbrevs)
        sentences: List[Sentence] = []
        for span in spans:
            words = assemble_words(_word_segments(span))
            if not words:
                continue
            sentences.append(Sentence(
                text=reconstruct_text(words),
                words=words,
                index=len(sentences),
            ))
    except Exception:
        logger.warning("Segmentation failed; treating input as a single word", exc_info=True)
        stripped = text.strip()
        sentences = [Sentence(text=stripped, words=[Word(text=stripped, index=0)], index=0)]

    return Document(full_text=text, sentences=sentences)


def _sentence_spans(text: str) -> List[str]:
    return [s for s in sentence_breaks(text) if s.strip()]


def _word_segments(span: str) -> List[Tuple[str, bool]]:
    """UAX #29 word segments of a span, each tagged word-like or not."""
    return [(seg, _is_word_like(seg)) for seg in word_breaks(span)]


def _is_word_like(segment_text: str) -> bool:
    return any(ch.isalnum() for ch in segment_text)


def _last_token(span: str) -> str:
    parts = span.split()
    return parts[-1].lstrip(_OPENERS) if parts else ""


def merge_abbreviations(spans: Sequence[str], abbreviations: Iterable[str]) -> List[str]:
    """Glue each span ending in an abbreviation onto the span after it.

    WHY: Unicode sentence boundaries break after "Mr. " and "Jan. " because
    a period followed by a space and a capital or digit looks like a
    sentence end.

    HOW: Walk spans in order holding a current span. While the current
    span's last whitespace-delimited token is an abbreviation, append the
    next span verbatim (original spacing kept).

    RULES:
    - The test runs on the merged span, so chains merge repeatedly
    - An abbreviation at the very end of the text stays where it is
    """
    abbrevs = frozenset(abbreviations)
    merged: List[str] = []
    if not spans:
        return merged

    current = spans[0]
    for span in spans[1:]:
        if _last_token(current) in abbrevs:
            current += span
        else:
            merged.append(current)
            current = span
    merged.append(current)
    return merged


def assemble_words(segments: Iterable[Tuple[str, bool]]) -> List[Word]:
    """Assemble word-break segments into Words.

    WHY: Raw word-break output separates "Hello", ",", " " and quote
    characters. Highlighting and TTS offsets need one token per spoken word
    with its punctuation and spacing attached.

    HOW: A text buffer and a has-word flag. Word-like segments either
    start the buffer's word, continue a hyphenated compound, or flush the
    buffer and start a new one. Non-word segments attach to the buffer,
    except that non-space punctuation after a word that already ended in
    whitespace flushes first and opens the next token (an opening quote).

    RULES:
    - Word-like + buffer has word + buffer ends in a joiner → append
    - Word-like + buffer has word → flush, new buffer
    - Word-like + no word yet → append, mark has-word
    - Whitespace → append
    - Other punctuation + buffer has word ending in whitespace → flush, new buffer
    - Other punctuation → append
    - At the end, a buffer holding a word is flushed; a punctuation-only
      tail is attached to the previous word
    """
    words: List[Word] = []
    buffer = ""
    buffer_has_word = False

    def _flush() -> None:
        nonlocal buffer, buffer_has_word
        words.append(Word(text=buffer, index=len(words)))
        buffer = ""
        buffer_has_word = False

    for seg, word_like in segments:
        if word_like:
            if buffer_has_word and not buffer.endswith(_JOINERS):
                _flush()
            buffer += seg
            buffer_has_word = True
        elif seg.isspace():
            buffer += seg
        elif buffer_has_word and buffer[-1:].isspace():
            _flush()
            buffer = seg
        else:
            buffer += seg

    if buffer_has_word:
        _flush()
    elif buffer and words:
        words[-1].text += buffer

    if words:
        words[0].text = words[0].text.lstrip()
    return words


def build_text_and_map(words: Sequence[Word]) -> Tuple[str, List[int]]:
    """Rebuild text from words with a character → local word index map.

    WHY: Per-sentence synthetic TTS (e.g. browser speech) reports word
    boundaries as character offsets into the utterance text. The map turns
    such an offset straight back into the word being spoken.

    RULES:
    - One space is inserted only after a word not already ending in whitespace
    - Every character, including a word's trailing separator, maps to that word
    - The returned text is trimmed; the map covers exactly the returned text
    """
    parts: List[str] = []
    char_map: List[int] = []
    for index, word in enumerate(words):
        piece = word.text.lstrip() if index == 0 else word.text
        if not piece[-1:].isspace():
            piece += " "
        parts.append(piece)
        char_map.extend([index] * len(piece))

    text = "".join(parts).rstrip()
    return text, char_map[:len(text)]


def reconstruct_text(words: Sequence[Word]) -> str:
    """Rebuild sentence text from its words (see build_text_and_map)."""
    return build_text_and_map(words)[0]
