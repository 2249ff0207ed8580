"""Read-along synchronization core — word-indexed text kept in step with audio.

WHY: A reading UI highlights the word being spoken, whether the audio is
synthesized by a TTS provider that returns timing metadata or read live by
a person whose speech is transcribed by an STT engine. Both need one stable
mapping between the page text and a time axis, under noisy, partial input.

HOW: Segment text into sentences and words (core.segmenter), pack them
into TTS-sized chunks (core.chunker), time words from live recognition
(core.aligner) or from provider timing (core.timing). Adapters turn
provider payloads into the IR; formatters write the IR out.

RULES:
- All components consume the same Document IR and global word index
- The core does no I/O and never raises on data
- Provider and recognizer formats live in adapters, not in the core
"""

__version__ = "0.1.0"
