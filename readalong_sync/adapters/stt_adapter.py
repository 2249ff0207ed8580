"""Adapter: speech-to-text results to RecognizedWord batches.

WHY: The aligner takes RecognizedWord objects, but recognizers report
words in their own shapes — a streaming recognizer's final result
({"result": [{"word", "start", "end", "conf"}]}) or a batch
transcription's word timestamps ([{"word", "startTime", "endTime"}]).

HOW: Walk the entries, pull the fields each shape uses, and skip entries
that are missing fields or carry non-numeric times.

RULES:
- Entry order is preserved (it is the spoken order)
- Malformed entries are skipped and logged at DEBUG, never raised
- Batch timestamps carry no confidence; a fixed value is used
"""

from __future__ import annotations

import logging
from typing import Any, List

from readalong_sync.core.ir import RecognizedWord

logger = logging.getLogger(__name__)


def _entries(payload: Any, key: str) -> List[Any]:
    if isinstance(payload, dict):
        payload = payload.get(key)
    return payload if isinstance(payload, list) else []


def from_recognizer_result(result: Any) -> List[RecognizedWord]:
    """Convert one streaming recognizer result into recognized words."""
    words: List[RecognizedWord] = []
    for entry in _entries(result, "result"):
        try:
            words.append(RecognizedWord(
                word=str(entry["word"]),
                start=float(entry["start"]),
                end=float(entry["end"]),
                conf=float(entry.get("conf", 1.0)),
            ))
        except (KeyError, TypeError, ValueError, AttributeError):
            logger.debug("Skipping malformed recognizer entry: %r", entry)
    return words


def from_word_timestamps(timestamps: Any, confidence: float = 1.0) -> List[RecognizedWord]:
    """Convert batch transcription word timestamps into recognized words."""
    words: List[RecognizedWord] = []
    for entry in _entries(timestamps, "timestamps"):
        try:
            words.append(RecognizedWord(
                word=str(entry["word"]),
                start=float(entry["startTime"]),
                end=float(entry["endTime"]),
                conf=confidence,
            ))
        except (KeyError, TypeError, ValueError, AttributeError):
            logger.debug("Skipping malformed word timestamp: %r", entry)
    return words
