"""Core IR and synchronization algorithms.

WHY: The core package holds the part every reading mode shares — the
word-indexed document and the four algorithms that build and time it.
These are consumed by adapters, formatters and the CLI and must stay
free of I/O.

HOW: ir.py defines the data structures, segmenter.py builds a Document
from raw text, chunker.py packs it into TTS-sized chunks, aligner.py
times words from live speech recognition, and timing.py maps provider
timing metadata to global word indices.

RULES:
- Everything here is synchronous, pure data in / data out
- The global word index is the flattening of sentences[].words[]
- No-match results are sentinels (-1 / None), never exceptions
"""
