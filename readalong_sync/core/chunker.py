"""Greedy bin packing of a segmented document into TTS-sized chunks.

WHY: TTS providers cap the request size, and a request boundary inside a
sentence produces audible glitches and breaks the character-offset
mapping. Chunks group whole sentences under a character budget.

HOW: Walk sentences in order with an accumulator. When the next sentence
would push the running length over max_chars and the accumulator is not
empty, finalize the current chunk first. A finalized chunk joins its
sentence texts with one space and records its global word range.

RULES:
- A sentence is never split; an oversized sentence gets its own chunk
- Every sentence appears in exactly one chunk, in document order
- Chunk word ranges are contiguous: next.start == previous.end + 1
- Chunk ids are sequential from 0; status starts as pending
- The running length counts sentence text only, not the joining spaces
"""

from __future__ import annotations

from typing import List

from readalong_sync.config import DEFAULT_MAX_CHARS
from readalong_sync.core.ir import Chunk, ChunkStatus, Document, Sentence


def create_chunks(document: Document, max_chars: int = DEFAULT_MAX_CHARS) -> List[Chunk]:
    """Pack the document's sentences into ordered chunks.

    Args:
        document: Output of core.segmenter.segment().
        max_chars: Character budget per chunk. Must be at least 1.

    Returns:
        Chunks in document order. An empty document yields no chunks.

    Raises:
        ValueError: If max_chars is below 1.
    """
    if max_chars < 1:
        raise ValueError("max_chars must be >= 1, got {}".format(max_chars))

    chunks: List[Chunk] = []
    pending: List[Sentence] = []
    pending_chars = 0
    next_word_index = 0

    def _finalize() -> None:
        nonlocal pending, pending_chars, next_word_index
        if not pending:
            return
        word_count = sum(len(s.words) for s in pending)
        chunks.append(Chunk(
            id=len(chunks),
            text=" ".join(s.text for s in pending),
            sentences=list(pending),
            start_word_index=next_word_index,
            end_word_index=next_word_index + word_count - 1,
            status=ChunkStatus.pending,
        ))
        next_word_index += word_count
        pending = []
        pending_chars = 0

    for sentence in document.sentences:
        if pending and pending_chars + len(sentence.text) > max_chars:
            _finalize()
        pending.append(sentence)
        pending_chars += len(sentence.text)

    _finalize()
    return chunks
