"""Plain text formatter with one reconstructed sentence per line.

WHY: Synthetic per-sentence speech (the browser's built-in voices) is
requested one sentence at a time, and its boundary events report
character offsets into exactly the text it was given. This output is
that text, rebuilt from the words so offsets line up with
build_text_and_map().

RULES:
- One sentence per line, in document order
- Text comes from reconstruct_text(sentence.words)
- Trailing newline only when there is at least one sentence
- Output suffix: "-sentences.txt"
"""

from __future__ import annotations

from typing import List

from readalong_sync.core.ir import Document
from readalong_sync.core.segmenter import reconstruct_text
from readalong_sync.formatters.base import BaseFormatter, FormatterOutput


class PlainTextFormatter(BaseFormatter):
    """Formatter that produces per-sentence plain text."""

    @property
    def name(self) -> str:
        return "Plain Text"

    def format(self, document: Document) -> List[FormatterOutput]:
        lines = [reconstruct_text(s.words) for s in document.sentences]
        content = "\n".join(lines)
        if content:
            content += "\n"
        return [
            FormatterOutput(
                suffix="-sentences.txt",
                content=content,
                media_type="text/plain",
            )
        ]
