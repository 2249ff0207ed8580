"""Command-line interface for the read-along synchronization core.

WHY: The core is a library for a reading UI, but its pipeline steps —
segmenting extracted text, laying out TTS chunks, aligning a recorded
reading, and resolving provider timing to a word — are worth running by
hand when debugging a page that highlights the wrong word.

HOW: argparse with three subcommands. ``segment`` runs the segmenter and
saves formatter outputs next to the input (or to --output-dir). ``align``
feeds recognized-word batches from a JSON file through the Aligner and
saves the timed alignment JSON. ``locate`` attaches one provider's timing
payload to a chunk and prints the global word index at a playback time.
Status messages go to stderr; results meant for piping go to stdout.

RULES:
- Input files are read as UTF-8 text
- --formats: comma-separated formatter keys (default: all registered)
- Output naming: {stem}{suffix}, numeric suffix for conflicts (-alignment-2.json)
- ValueError / OSError / JSON errors → "Error: ..." on stderr, exit code 1
- --verbose turns on DEBUG logging for the core modules
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional, Tuple

from readalong_sync.adapters.stt_adapter import from_recognizer_result, from_word_timestamps
from readalong_sync.adapters.timing_adapter import PROVIDER_PARSERS, attach_timing
from readalong_sync.config import ALIGNER_MAX_DISTANCE, ALIGNER_SEARCH_WINDOW, DEFAULT_MAX_CHARS
from readalong_sync.core.aligner import Aligner
from readalong_sync.core.chunker import create_chunks
from readalong_sync.core.ir import Document, RecognizedWord
from readalong_sync.core.segmenter import segment
from readalong_sync.core.timing import word_index_at_time
from readalong_sync.formatters import FORMATTERS
from readalong_sync.formatters.alignment_json import AlignmentJsonFormatter
from readalong_sync.formatters.base import FormatterOutput


def _status(msg: str) -> None:
    """Print a status message to stderr (stdout stays pipeable)."""
    print(msg, file=sys.stderr, flush=True)


def _resolve_output_path(stem: str, suffix: str, output_dir: Path) -> Path:
    """Resolve the output file path, adding numeric suffix on conflict.

    RULES:
    - First attempt: {stem}{suffix} (e.g. article-alignment.json)
    - Conflict: counter inserted before the extension (article-alignment-2.json)
    - Counter starts at 2 and increments
    """
    base_path = output_dir / "{}{}".format(stem, suffix)
    if not base_path.exists():
        return base_path

    dot_idx = suffix.rfind(".")
    if dot_idx > 0:
        suffix_name = suffix[:dot_idx]
        suffix_ext = suffix[dot_idx:]
    else:
        suffix_name = suffix
        suffix_ext = ""

    counter = 2
    while True:
        candidate = output_dir / "{}{}-{}{}".format(stem, suffix_name, counter, suffix_ext)
        if not candidate.exists():
            return candidate
        counter += 1


def _save_output(output: FormatterOutput, stem: str, output_dir: Path) -> Path:
    path = _resolve_output_path(stem, output.suffix, output_dir)
    if isinstance(output.content, bytes):
        path.write_bytes(output.content)
    else:
        path.write_text(output.content, encoding="utf-8")
    return path


def _read_document(input_file: str) -> Tuple[Path, Document]:
    """Read and segment a UTF-8 text file. Returns (path, document)."""
    input_path = Path(input_file).resolve()
    if not input_path.is_file():
        raise ValueError("File not found: {}".format(input_path))
    document = segment(input_path.read_text(encoding="utf-8"))
    _status("Segmented {}: {} sentences, {} words".format(
        input_path.name, len(document.sentences), document.word_count))
    return input_path, document


def _read_json(path: str) -> Any:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def _output_dir(args: argparse.Namespace, input_path: Path) -> Path:
    output_dir = Path(args.output_dir).resolve() if args.output_dir else input_path.parent
    if not output_dir.is_dir():
        raise ValueError("Output directory does not exist: {}".format(output_dir))
    return output_dir


def _format_keys(formats: Optional[str]) -> List[str]:
    if not formats:
        return list(FORMATTERS.keys())
    keys = [f.strip() for f in formats.split(",") if f.strip()]
    for key in keys:
        if key not in FORMATTERS:
            available = ", ".join(sorted(FORMATTERS.keys()))
            raise ValueError("Unknown format '{}'. Available formats: {}".format(key, available))
    return keys


def _parse_batch(batch: Any) -> List[RecognizedWord]:
    entries = batch.get("result", batch.get("timestamps")) if isinstance(batch, dict) else batch
    if isinstance(entries, list) and entries and isinstance(entries[0], dict) \
            and "startTime" in entries[0]:
        return from_word_timestamps(entries)
    return from_recognizer_result(entries)


def load_recognized_batches(payload: Any) -> List[List[RecognizedWord]]:
    """Split a recognized-words JSON payload into aligner batches.

    Accepted shapes: a list of batches (each a list of word entries or a
    {"result": [...]} object), a single {"result": [...]} object, or one
    flat list of word entries.
    """
    if isinstance(payload, list) and payload and all(
            isinstance(b, list) or (isinstance(b, dict) and ("result" in b or "timestamps" in b))
            for b in payload):
        return [_parse_batch(b) for b in payload]
    return [_parse_batch(payload)]


def _run_segment(args: argparse.Namespace) -> None:
    input_path, document = _read_document(args.input_file)
    output_dir = _output_dir(args, input_path)

    saved_files: List[Path] = []
    for key in _format_keys(args.formats):
        formatter = FORMATTERS[key](max_chars=args.max_chars)
        _status("  Running {} formatter...".format(formatter.name))
        for output in formatter.format(document):
            saved_path = _save_output(output, input_path.stem, output_dir)
            saved_files.append(saved_path)
            _status("  Saved: {}".format(saved_path.name))

    _status("Done! Saved {} file(s) to {}".format(len(saved_files), output_dir))


def _run_align(args: argparse.Namespace) -> None:
    input_path, document = _read_document(args.input_file)
    output_dir = _output_dir(args, input_path)
    batches = load_recognized_batches(_read_json(args.recognized))

    aligner = Aligner(search_window=args.search_window, max_distance=args.max_distance)
    last_match = -1
    for number, batch in enumerate(batches, start=1):
        matched = aligner.align_document(document, batch)
        if matched != -1:
            last_match = matched
        _status("  Batch {}: {} word(s), last match {}".format(number, len(batch), matched))

    timed = sum(1 for w in document.words() if w.has_timing)
    _status("Timed {} of {} words".format(timed, document.word_count))

    for output in AlignmentJsonFormatter(max_chars=args.max_chars).format(document):
        saved_path = _save_output(output, input_path.stem, output_dir)
        _status("  Saved: {}".format(saved_path.name))

    print(last_match)


def _run_locate(args: argparse.Namespace) -> None:
    _, document = _read_document(args.input_file)
    chunks = create_chunks(document, args.max_chars)
    if not 0 <= args.chunk < len(chunks):
        raise ValueError("Chunk {} out of range (document has {} chunks)".format(
            args.chunk, len(chunks)))

    chunk = chunks[args.chunk]
    if not attach_timing(chunk, args.provider, _read_json(args.timing)):
        _status("  Warning: {}".format(chunk.error))

    index = word_index_at_time(chunk, chunk.alignment_metadata, args.time)
    if index is None:
        print("none")
        return
    print(index)
    _status("  Word {}: {!r}".format(index, document.word_at(index).text.strip()))


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser (separate from main() for testability)."""
    parser = argparse.ArgumentParser(
        prog="readalong_sync",
        description="Segment page text, lay out TTS chunks, align recorded readings, "
                    "and map provider timing to words.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log core decisions (skipped words, unmatched words) at DEBUG level.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("input_file", help="Path to a UTF-8 text file with the page text.")
    common.add_argument(
        "--max-chars",
        type=int,
        default=DEFAULT_MAX_CHARS,
        help="Character budget per TTS chunk (default: %(default)s).",
    )

    seg = subparsers.add_parser("segment", parents=[common],
                                help="Segment text and save formatter outputs.")
    seg.add_argument(
        "--formats",
        default=None,
        help="Comma-separated list of output formats. "
             "Available: {}. Default: all.".format(", ".join(sorted(FORMATTERS.keys()))),
    )
    seg.add_argument("--output-dir", default=None,
                     help="Directory to save output files (default: same as input file).")
    seg.set_defaults(handler=_run_segment)

    align = subparsers.add_parser("align", parents=[common],
                                  help="Align recognized-word batches to the text.")
    align.add_argument("recognized", help="JSON file with recognized-word batches.")
    align.add_argument("--output-dir", default=None,
                       help="Directory to save the alignment JSON (default: same as input file).")
    align.add_argument("--search-window", type=int, default=ALIGNER_SEARCH_WINDOW,
                       help="Reference words to look ahead (default: %(default)s).")
    align.add_argument("--max-distance", type=int, default=ALIGNER_MAX_DISTANCE,
                       help="Largest edit distance accepted as a match (default: %(default)s).")
    align.set_defaults(handler=_run_align)

    locate = subparsers.add_parser("locate", parents=[common],
                                   help="Print the global word index at a playback time.")
    locate.add_argument("timing", help="JSON file with the provider's timing payload.")
    locate.add_argument("--provider", required=True, choices=sorted(PROVIDER_PARSERS),
                        help="Provider whose payload shape the timing file uses.")
    locate.add_argument("--time", type=float, required=True,
                        help="Playback time in seconds within the chunk's audio.")
    locate.add_argument("--chunk", type=int, default=0,
                        help="Chunk id the timing belongs to (default: %(default)s).")
    locate.set_defaults(handler=_run_locate)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``python -m readalong_sync`` and the console script.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        args.handler(args)
    except (ValueError, OSError) as e:
        # json.JSONDecodeError is a ValueError
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
