"""Adapter: raw TTS provider timing payloads to TimingMetadata.

WHY: The TTS client hands back whatever JSON its provider returned —
per-character alignment objects, SSML mark timepoints, or grapheme time
ranges. The time-to-word mapper only understands the TimingMetadata
variants, and a malformed payload must degrade to "no timing" rather
than crash playback.

HOW: Each provider shape has a JSON Schema. Payloads are validated with
jsonschema, then converted into the matching frozen dataclass. Providers
are registered by key in PROVIDER_PARSERS so attach_timing() can stay
provider-agnostic.

RULES:
- Invalid or missing payloads return None and are logged as warnings
- Timepoints are sorted by time (stable) before use
- Separator counting per provider comes from config.PROVIDER_COUNTS_SEPARATORS
- An unknown provider key is caller misuse → ValueError
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

import jsonschema

from readalong_sync.config import PROVIDER_COUNTS_SEPARATORS
from readalong_sync.core.ir import (
    CharacterTimes,
    Chunk,
    ChunkStatus,
    GraphemeRanges,
    NamedMarks,
    Timepoint,
    TimingMetadata,
)

logger = logging.getLogger(__name__)

CHARACTER_ALIGNMENT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["character_start_times_seconds"],
    "properties": {
        "characters": {"type": "array", "items": {"type": "string"}},
        "character_start_times_seconds": {"type": "array", "items": {"type": "number"}},
        "character_end_times_seconds": {"type": "array", "items": {"type": "number"}},
    },
}

TIMEPOINTS_SCHEMA: Dict[str, Any] = {
    "type": "array",
    "items": {
        "type": "object",
        "required": ["markName", "timeSeconds"],
        "properties": {
            "markName": {"type": "string"},
            "timeSeconds": {"type": "number"},
        },
    },
}

GRAPHEME_ALIGNMENT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["graph_times"],
    "properties": {
        "graph_chars": {"type": "array", "items": {"type": "string"}},
        "graph_times": {
            "type": "array",
            "items": {
                "type": "array",
                "items": {"type": "number"},
                "minItems": 2,
                "maxItems": 2,
            },
        },
    },
}


def _is_valid(payload: Any, schema: Dict[str, Any], label: str) -> bool:
    if payload is None:
        logger.warning("No %s timing payload", label)
        return False
    try:
        jsonschema.validate(instance=payload, schema=schema)
    except jsonschema.ValidationError as exc:
        logger.warning("Malformed %s timing payload: %s", label, exc.message)
        return False
    return True


def parse_character_alignment(payload: Any, count_separators: bool = True) -> Optional[CharacterTimes]:
    """Per-character alignment object → CharacterTimes (or None)."""
    if not _is_valid(payload, CHARACTER_ALIGNMENT_SCHEMA, "character"):
        return None
    return CharacterTimes(
        start_times=tuple(float(t) for t in payload["character_start_times_seconds"]),
        end_times=tuple(float(t) for t in payload.get("character_end_times_seconds", [])),
        count_separators=count_separators,
    )


def parse_timepoints(payload: Any) -> Optional[NamedMarks]:
    """SSML mark timepoints → NamedMarks (or None).

    Accepts the bare timepoint list or an object with a "timepoints" key.
    """
    if isinstance(payload, dict) and "timepoints" in payload:
        payload = payload["timepoints"]
    if not _is_valid(payload, TIMEPOINTS_SCHEMA, "timepoint"):
        return None
    ordered = sorted(payload, key=lambda tp: tp["timeSeconds"])
    return NamedMarks(timepoints=tuple(
        Timepoint(name=tp["markName"], time_s=float(tp["timeSeconds"])) for tp in ordered
    ))


def parse_grapheme_alignment(payload: Any, count_separators: bool = False) -> Optional[GraphemeRanges]:
    """Grapheme time ranges → GraphemeRanges (or None)."""
    if not _is_valid(payload, GRAPHEME_ALIGNMENT_SCHEMA, "grapheme"):
        return None
    return GraphemeRanges(
        ranges=tuple((float(start), float(end)) for start, end in payload["graph_times"]),
        count_separators=count_separators,
    )


PROVIDER_PARSERS: Dict[str, Callable[[Any], Optional[TimingMetadata]]] = {
    "elevenlabs": lambda p: parse_character_alignment(
        p, PROVIDER_COUNTS_SEPARATORS["elevenlabs"]),
    "google": parse_timepoints,
    "resemble": lambda p: parse_grapheme_alignment(
        p, PROVIDER_COUNTS_SEPARATORS["resemble"]),
}
"""Provider key → payload parser."""


def parse_timing(provider: str, payload: Any) -> Optional[TimingMetadata]:
    """Parse a payload with the parser registered for provider.

    Raises:
        ValueError: If the provider key is not registered.
    """
    key = provider.strip().lower()
    if key not in PROVIDER_PARSERS:
        available = ", ".join(sorted(PROVIDER_PARSERS))
        raise ValueError("Unknown provider '{}'. Available providers: {}".format(provider, available))
    return PROVIDER_PARSERS[key](payload)


def attach_timing(chunk: Chunk, provider: str, payload: Any, audio_handle: Any = None) -> bool:
    """Store a resolved TTS response on its chunk.

    WHY: The TTS client resolves chunks asynchronously; this is the one
    place that turns its raw response into chunk state the mapper can use.

    RULES:
    - Usable timing → alignment_metadata set, status ready, error cleared
    - Unusable timing → status error with a message; audio_handle still kept
    - Returns True when the chunk is ready

    Raises:
        ValueError: If the provider key is not registered.
    """
    chunk.audio_handle = audio_handle
    timing = parse_timing(provider, payload)
    if timing is None:
        chunk.alignment_metadata = None
        chunk.status = ChunkStatus.error
        chunk.error = "Unusable {} timing metadata".format(provider)
        return False

    chunk.alignment_metadata = timing
    chunk.status = ChunkStatus.ready
    chunk.error = None
    return True
