"""Adapter modules for converting between collaborator payloads and the IR.

WHY: TTS and STT collaborators speak their providers' JSON shapes. The
core only understands IR dataclasses (TimingMetadata, RecognizedWord).
Adapters bridge these so the core never learns provider formats.

HOW: Each adapter module provides conversion functions from raw payloads
to IR objects, validating the payload and degrading to "nothing" when it
is unusable.

RULES:
- Adapters are pure data transformations — no I/O
- Each adapter lives in its own module under this package
- Malformed payloads never raise; unknown provider keys do
"""

from readalong_sync.adapters.stt_adapter import from_recognizer_result, from_word_timestamps
from readalong_sync.adapters.timing_adapter import attach_timing, parse_timing

__all__ = [
    "attach_timing",
    "from_recognizer_result",
    "from_word_timestamps",
    "parse_timing",
]
