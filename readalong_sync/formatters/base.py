"""Abstract base formatter and output container.

WHY: Every output consumes the same Document but produces different file
content — a timed alignment map for the highlighter, per-chunk SSML for a
mark-based TTS provider, per-sentence text for synthetic speech. A common
interface lets the CLI run any of them generically.

HOW: BaseFormatter is an ABC with a ``name`` property and a ``format()``
method. FormatterOutput is a plain dataclass bundling a file suffix with
its content and MIME type.

RULES:
- Subclasses MUST implement ``name`` and ``format()``
- ``format()`` returns a list — the SSML formatter returns one file per chunk
- ``suffix`` starts with a hyphen, e.g. ``"-alignment.json"``
- The caller is responsible for prepending the source filename stem
- max_chars is the chunk budget for formatters that chunk the document
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from readalong_sync.config import DEFAULT_MAX_CHARS
from readalong_sync.core.ir import Document


@dataclass
class FormatterOutput:
    """One output file produced by a formatter.

    Attributes:
        suffix: File suffix appended to the source stem,
                e.g. ``"-alignment.json"`` → ``"article-alignment.json"``.
        content: The file content as a string (JSON, SSML, plain text)
                 or bytes.
        media_type: MIME type for the content, e.g. ``"application/json"``.
    """

    suffix: str
    content: str | bytes
    media_type: str


class BaseFormatter(ABC):
    """Abstract base for all output formatters.

    To add a new output format:
    1. Create a new file in formatters/
    2. Subclass BaseFormatter
    3. Implement format() and name
    4. Register in FORMATTERS dict in formatters/__init__.py
    """

    def __init__(self, max_chars: int = DEFAULT_MAX_CHARS) -> None:
        self.max_chars = max_chars

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'SSML Word Marks'."""

    @abstractmethod
    def format(self, document: Document) -> list[FormatterOutput]:
        """Convert the Document into one or more output files.

        Args:
            document: The segmented (and possibly timed) document.

        Returns:
            List of FormatterOutput objects, each containing a file suffix,
            content string/bytes, and MIME type.
        """
