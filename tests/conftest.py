"""Shared test fixtures for the readalong_sync test suite.

WHY: Chunking, alignment and time-to-word mapping all need small documents
whose word texts are known exactly. Building them by hand (rather than via
the segmenter) keeps those tests independent of Unicode segmentation.

HOW: A factory fixture turns nested lists of word texts into a Document
with sentence texts rebuilt the same way the segmenter does. Named
fixtures provide the two-sentence sample used across the timing tests.

RULES:
- Word texts carry their trailing space, as segmenter output does
- Sentence texts come from reconstruct_text(), never hand-written
- The sample chunk text is exactly "Hello world. Bye now."
"""

from typing import Callable, List

import pytest

from readalong_sync.core.chunker import create_chunks
from readalong_sync.core.ir import Document, RecognizedWord, Sentence, Word
from readalong_sync.core.segmenter import reconstruct_text

SAMPLE_WORDS: List[List[str]] = [
    ["Hello ", "world."],
    ["Bye ", "now."],
]


def _build_document(sentences: List[List[str]]) -> Document:
    built = []
    for s_index, texts in enumerate(sentences):
        words = [Word(text=t, index=i) for i, t in enumerate(texts)]
        built.append(Sentence(text=reconstruct_text(words), words=words, index=s_index))
    return Document(full_text=" ".join(s.text for s in built), sentences=built)


@pytest.fixture
def make_document() -> Callable[[List[List[str]]], Document]:
    """Factory: nested word texts → Document."""
    return _build_document


@pytest.fixture
def sample_document() -> Document:
    """Two sentences, four words: "Hello world. Bye now." """
    return _build_document(SAMPLE_WORDS)


@pytest.fixture
def sample_chunk(sample_document):
    """The whole sample document as one chunk (global words 0-3)."""
    chunks = create_chunks(sample_document)
    assert len(chunks) == 1
    return chunks[0]


@pytest.fixture
def split_chunks(sample_document):
    """The sample document as two one-sentence chunks."""
    chunks = create_chunks(sample_document, max_chars=12)
    assert len(chunks) == 2
    return chunks


@pytest.fixture
def make_recognized() -> Callable[..., List[RecognizedWord]]:
    """Factory: (word, start, end) tuples → RecognizedWord list."""
    def _make(data):
        return [RecognizedWord(word=w, start=s, end=e, conf=1.0) for w, s, e in data]
    return _make
