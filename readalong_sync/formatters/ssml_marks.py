"""SSML formatter with a named mark before every word.

WHY: Mark-based TTS providers only report timing for named marks. Putting
a ``<mark name="word_<n>"/>`` immediately before each word makes the
returned timepoints say exactly when word n starts, which is what
core.timing's NamedMarks lookup expects.

HOW: The document is chunked with create_chunks(); each chunk becomes one
``<speak>`` document. Words are emitted in chunk order with their
chunk-local ordinal in the mark name and a short break after each sentence.

RULES:
- Mark goes BEFORE the word, so its time is the word's start time
- Ordinals are chunk-local and start at 0 in every chunk
- Word text is stripped of surrounding whitespace and XML-escaped
- One output per chunk, suffix "-chunk-<id>.ssml" (id zero-padded to 3)
"""

from __future__ import annotations

from typing import List
from xml.sax.saxutils import escape

from readalong_sync.config import MARK_PREFIX, SENTENCE_BREAK_MS
from readalong_sync.core.chunker import create_chunks
from readalong_sync.core.ir import Chunk, Document
from readalong_sync.formatters.base import BaseFormatter, FormatterOutput

_XML_ENTITIES = {'"': "&quot;"}


def build_ssml(chunk: Chunk, break_ms: int = SENTENCE_BREAK_MS) -> str:
    """Build the SSML request body for one chunk."""
    parts: List[str] = ["<speak>"]
    ordinal = 0
    for sentence in chunk.sentences:
        for word in sentence.words:
            parts.append('<mark name="{}{}"/>{} '.format(
                MARK_PREFIX, ordinal, escape(word.text.strip(), _XML_ENTITIES)))
            ordinal += 1
        parts.append('<break time="{}ms"/> '.format(break_ms))
    parts.append("</speak>")
    return "".join(parts)


class SsmlMarksFormatter(BaseFormatter):
    """Formatter that writes one marked-up SSML request per chunk."""

    @property
    def name(self) -> str:
        return "SSML Word Marks"

    def format(self, document: Document) -> list[FormatterOutput]:
        return [
            FormatterOutput(
                suffix="-chunk-{:03d}.ssml".format(chunk.id),
                content=build_ssml(chunk),
                media_type="application/ssml+xml",
            )
            for chunk in create_chunks(document, self.max_chars)
        ]
