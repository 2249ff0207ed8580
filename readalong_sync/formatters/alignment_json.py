"""Alignment map JSON formatter.

WHY: The highlighting collaborator and debugging tools need the document
structure with global word indices, current timing, and the chunk layout
in a portable form.

HOW: Serializes sentences and words (with sentence-local and global
indices and any timing the aligner or mapper wrote), plus the chunk word
ranges produced by create_chunks(). The output is validated against
ALIGNMENT_SCHEMA with jsonschema before returning.

RULES:
- Untimed words carry null start/end/confidence
- Sentence timing is rolled up from word timing before serializing
- Chunks list sentence indices and inclusive global word ranges
- Output suffix: "-alignment.json"
- Validate output against the schema before returning; raise on failure
"""

from __future__ import annotations

import json
from typing import Any, Dict, List

import jsonschema

from readalong_sync.core.chunker import create_chunks
from readalong_sync.core.ir import Document
from readalong_sync.formatters.base import BaseFormatter, FormatterOutput

_NULLABLE_NUMBER = {"type": ["number", "null"]}

ALIGNMENT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["full_text", "word_count", "sentences", "chunks"],
    "properties": {
        "full_text": {"type": "string"},
        "word_count": {"type": "integer", "minimum": 0},
        "sentences": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["index", "text", "first_word_index", "start", "end", "words"],
                "properties": {
                    "index": {"type": "integer", "minimum": 0},
                    "text": {"type": "string"},
                    "first_word_index": {"type": "integer", "minimum": 0},
                    "start": _NULLABLE_NUMBER,
                    "end": _NULLABLE_NUMBER,
                    "words": {
                        "type": "array",
                        "minItems": 1,
                        "items": {
                            "type": "object",
                            "required": ["index", "global_index", "text",
                                         "start", "end", "confidence"],
                            "properties": {
                                "index": {"type": "integer", "minimum": 0},
                                "global_index": {"type": "integer", "minimum": 0},
                                "text": {"type": "string"},
                                "start": _NULLABLE_NUMBER,
                                "end": _NULLABLE_NUMBER,
                                "confidence": _NULLABLE_NUMBER,
                            },
                        },
                    },
                },
            },
        },
        "chunks": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id", "start_word_index", "end_word_index",
                             "sentence_indices", "char_count"],
                "properties": {
                    "id": {"type": "integer", "minimum": 0},
                    "start_word_index": {"type": "integer", "minimum": 0},
                    "end_word_index": {"type": "integer", "minimum": 0},
                    "sentence_indices": {"type": "array", "items": {"type": "integer"}},
                    "char_count": {"type": "integer", "minimum": 0},
                },
            },
        },
    },
}


def document_to_dict(document: Document, max_chars: int) -> Dict[str, Any]:
    """Build the JSON-ready dict for a document (see ALIGNMENT_SCHEMA)."""
    document.refresh_sentence_timing()
    offsets = document.sentence_offsets()

    sentences: List[Dict[str, Any]] = []
    for sentence, offset in zip(document.sentences, offsets):
        sentences.append({
            "index": sentence.index,
            "text": sentence.text,
            "first_word_index": offset,
            "start": sentence.start,
            "end": sentence.end,
            "words": [
                {
                    "index": word.index,
                    "global_index": offset + i,
                    "text": word.text,
                    "start": word.start,
                    "end": word.end,
                    "confidence": word.confidence,
                }
                for i, word in enumerate(sentence.words)
            ],
        })

    chunks = [
        {
            "id": chunk.id,
            "start_word_index": chunk.start_word_index,
            "end_word_index": chunk.end_word_index,
            "sentence_indices": [s.index for s in chunk.sentences],
            "char_count": len(chunk.text),
        }
        for chunk in create_chunks(document, max_chars)
    ]

    return {
        "full_text": document.full_text,
        "word_count": document.word_count,
        "sentences": sentences,
        "chunks": chunks,
    }


class AlignmentJsonFormatter(BaseFormatter):
    """Formatter that writes the timed alignment map as JSON."""

    @property
    def name(self) -> str:
        return "Alignment JSON"

    def format(self, document: Document) -> list[FormatterOutput]:
        """Serialize the document.

        Raises:
            jsonschema.ValidationError: If the generated JSON does not
                conform to ALIGNMENT_SCHEMA.
        """
        output = document_to_dict(document, self.max_chars)
        jsonschema.validate(instance=output, schema=ALIGNMENT_SCHEMA)
        content = json.dumps(output, indent=2, ensure_ascii=False)
        return [
            FormatterOutput(
                suffix="-alignment.json",
                content=content,
                media_type="application/json",
            )
        ]
