"""Online fuzzy alignment of recognized speech to reference words.

WHY: A person reading aloud rarely matches the page exactly. Words get
skipped, misrecognized, or padded with fillers ("um"), yet the highlight
must stay on the right reference word while recognition results stream
in. A full edit-distance alignment is too slow for live batches and
over-corrects genuine paraphrasing, so the aligner does a bounded
look-ahead instead.

HOW: The aligner keeps a cursor into the flattened reference words. For
each recognized word it compares the cleaned text against the next
search_window reference words using a bounded Levenshtein distance
(rapidfuzz with a score cutoff). The earliest candidate with the lowest
distance wins; an exact match stops the scan. A win within max_distance
writes timing onto that reference word and moves the cursor past it.

RULES:
- Cleaning: lowercase, strip surrounding whitespace and a fixed punctuation
  set that includes en and em dashes ("result—" matches "result")
- The cursor never moves backwards until reset()
- Reference words jumped over by a match keep no timing ("not yet spoken")
- Unmatched recognized words are discarded without side effects
- align() returns the last match index of the call, or -1
- Not safe for concurrent calls on one instance; callers serialize batches
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence

from rapidfuzz.distance import Levenshtein

from readalong_sync.config import ALIGNER_MAX_DISTANCE, ALIGNER_SEARCH_WINDOW
from readalong_sync.core.ir import Document, RecognizedWord, Word

logger = logging.getLogger(__name__)

_STRIP_TABLE = str.maketrans("", "", ".,/#!$%^&*;:{}=-_`~()?\"'“”‘’[]<>–—")


def clean_word(text: str) -> str:
    """Normalize a word for comparison: lowercase, no punctuation or spacing."""
    return text.lower().translate(_STRIP_TABLE).strip()


class Aligner:
    """Stateful incremental aligner for one recording session.

    Args:
        search_window: Number of reference words past the cursor to consider.
        max_distance: Largest edit distance accepted as a match.
    """

    def __init__(
        self,
        search_window: int = ALIGNER_SEARCH_WINDOW,
        max_distance: int = ALIGNER_MAX_DISTANCE,
    ) -> None:
        if search_window < 1:
            raise ValueError("search_window must be >= 1, got {}".format(search_window))
        if max_distance < 0:
            raise ValueError("max_distance must be >= 0, got {}".format(max_distance))
        self.search_window = search_window
        self.max_distance = max_distance
        self._cursor = 0

    @property
    def cursor(self) -> int:
        return self._cursor

    def reset(self) -> None:
        """Start a new session: the next batch is matched from the first word."""
        self._cursor = 0

    def align(self, reference: Sequence[Word], recognized: Sequence[RecognizedWord]) -> int:
        """Align a batch of recognized words, writing timing onto reference words.

        Args:
            reference: The flattened reference words of the active document.
            recognized: The next batch of recognized words, in spoken order.

        Returns:
            Index (into reference) of the last word matched during this call,
            or -1 if nothing matched.
        """
        def _assign(index: int, rec: RecognizedWord) -> None:
            word = reference[index]
            word.start = rec.start
            word.end = rec.end
            word.confidence = rec.conf

        return self._run([w.text for w in reference], recognized, _assign)

    def align_document(self, document: Document, recognized: Sequence[RecognizedWord]) -> int:
        """Same as align() but writes timing through the Document's mutation API.

        Returns:
            Global word index of the last word matched, or -1.
        """
        def _assign(index: int, rec: RecognizedWord) -> None:
            document.set_word_timing(index, rec.start, rec.end, rec.conf)

        return self._run([w.text for w in document.words()], recognized, _assign)

    def _run(
        self,
        reference_texts: List[str],
        recognized: Sequence[RecognizedWord],
        assign: Callable[[int, RecognizedWord], None],
    ) -> int:
        cleaned_reference = [clean_word(t) for t in reference_texts]
        last_match = -1

        for rec in recognized:
            if self._cursor >= len(cleaned_reference):
                break

            target = clean_word(rec.word)
            if not target:
                logger.debug("Ignoring recognized token with no letters: %r", rec.word)
                continue

            match = self._best_candidate(target, cleaned_reference)
            if match is None:
                logger.debug("Unmatched recognized word %r (insertion/filler)", rec.word)
                continue

            if match > self._cursor:
                logger.debug("Skipped %d reference word(s) before index %d",
                             match - self._cursor, match)

            assign(match, rec)
            self._cursor = match + 1
            last_match = match

        return last_match

    def _best_candidate(self, target: str, cleaned_reference: List[str]) -> Optional[int]:
        """Index of the closest reference word inside the window, if close enough."""
        best_index: Optional[int] = None
        best_distance = self.max_distance + 1
        window_end = min(self._cursor + self.search_window, len(cleaned_reference))

        for index in range(self._cursor, window_end):
            candidate = cleaned_reference[index]
            if not candidate:
                continue
            distance = Levenshtein.distance(target, candidate, score_cutoff=self.max_distance)
            if distance < best_distance:
                best_distance = distance
                best_index = index
            if distance == 0:
                break

        return best_index
