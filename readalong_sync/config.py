"""Configuration constants, abbreviation lists, and .env loading.

WHY: The chunk size, the aligner thresholds, and the abbreviation list are
empirically chosen values with no derivation behind them. Keeping them as
plain data in one place makes them easy to find, tune, and override
without touching the algorithms.

HOW: python-dotenv loads the .env file on import. Numeric settings are
read through env_int(), which rejects malformed or out-of-range values
with a clear error. Lookup tables are module-level sets and dicts.

RULES:
- Every numeric default can be overridden via a READALONG_* variable
- Malformed overrides raise ValueError on import, never silently fall back
- ABBREVIATIONS entries include their trailing period and are case-sensitive
- PROVIDER_COUNTS_SEPARATORS says whether a provider's per-character
  stream contains the whitespace between words
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()


def env_int(name: str, default: int, minimum: int = 0) -> int:
    """Read an integer setting from the environment.

    WHY: A typo in .env (e.g. READALONG_MAX_CHARS=2k5) should fail loudly
    at startup rather than produce oddly sized TTS requests later.

    RULES:
    - Unset or blank variable → default
    - Non-integer value → ValueError naming the variable
    - Value below minimum → ValueError naming the variable
    """
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(
            "{} must be an integer, got {!r}. Fix the value in the .env file.".format(name, raw)
        ) from None
    if value < minimum:
        raise ValueError("{} must be >= {}, got {}.".format(name, minimum, value))
    return value


# ---------------------------------------------------------------------------
# Chunking and alignment defaults
# ---------------------------------------------------------------------------

DEFAULT_MAX_CHARS = env_int("READALONG_MAX_CHARS", 2500, minimum=1)
"""Batch limit for one TTS request, in characters of sentence text."""

ALIGNER_SEARCH_WINDOW = env_int("READALONG_SEARCH_WINDOW", 10, minimum=1)
"""How many reference words past the cursor the aligner may look ahead."""

ALIGNER_MAX_DISTANCE = env_int("READALONG_MAX_DISTANCE", 2, minimum=0)
"""Largest edit distance still accepted as a match."""

# ---------------------------------------------------------------------------
# Synthesized-markup defaults
# ---------------------------------------------------------------------------

MARK_PREFIX = os.getenv("READALONG_MARK_PREFIX", "word_")
"""Prefix of the SSML mark placed before each word, followed by its ordinal."""

SENTENCE_BREAK_MS = env_int("READALONG_SENTENCE_BREAK_MS", 300)
"""Pause inserted after each sentence in generated SSML."""

# ---------------------------------------------------------------------------
# Segmentation
# ---------------------------------------------------------------------------

ABBREVIATIONS: frozenset[str] = frozenset({
    # Titles and honorifics
    "Mr.", "Mrs.", "Ms.", "Dr.", "Prof.", "Jr.", "Sr.", "St.", "Rev.", "Hon.",
    "Capt.", "Col.", "Gen.", "Lt.", "Sgt.", "Cmdr.", "Adm.", "Maj.",
    "Sen.", "Rep.", "Gov.", "Pres.", "Supt.",
    # Months
    "Jan.", "Feb.", "Mar.", "Apr.", "Jun.", "Jul.", "Aug.",
    "Sep.", "Sept.", "Oct.", "Nov.", "Dec.",
})
"""Tokens that end with a period but do not end a sentence."""

# ---------------------------------------------------------------------------
# Provider timing conventions
# ---------------------------------------------------------------------------

PROVIDER_COUNTS_SEPARATORS: dict[str, bool] = {
    "elevenlabs": True,
    "resemble": False,
}
"""Whether each per-character/per-grapheme provider counts whitespace."""
