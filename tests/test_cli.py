"""Tests for the command-line interface.

WHY: The CLI wires the pipeline end to end: segmentation, chunking,
alignment, provider timing and the formatters. These tests run it the
way a developer would when debugging a page.

HOW: main() is called with explicit argv against files in tmp_path.
stdout carries results, stderr carries status.

RULES:
- Output files land next to the input unless --output-dir is given
- Errors exit with code 1 and an "Error:" message on stderr
"""

import json

import pytest

from readalong_sync.cli import _resolve_output_path, build_parser, load_recognized_batches, main

TEXT = "Mr. Smith goes to Washington. He stays for a week."


@pytest.fixture
def text_file(tmp_path):
    path = tmp_path / "article.txt"
    path.write_text(TEXT, encoding="utf-8")
    return path


class TestSegmentCommand:
    """segment: formatter outputs saved beside the input."""

    def test_all_formats(self, text_file, capsys):
        main(["segment", str(text_file)])
        names = sorted(p.name for p in text_file.parent.iterdir())
        assert "article-alignment.json" in names
        assert "article-sentences.txt" in names
        assert "article-chunk-000.ssml" in names
        assert "Segmented article.txt: 2 sentences, 10 words" in capsys.readouterr().err

    def test_selected_format(self, text_file):
        main(["segment", str(text_file), "--formats", "plain_text"])
        assert not (text_file.parent / "article-alignment.json").exists()
        lines = (text_file.parent / "article-sentences.txt").read_text(encoding="utf-8")
        assert lines.splitlines() == ["Mr. Smith goes to Washington.", "He stays for a week."]

    def test_output_dir(self, text_file, tmp_path):
        out = tmp_path / "out"
        out.mkdir()
        main(["segment", str(text_file), "--formats", "plain_text", "--output-dir", str(out)])
        assert (out / "article-sentences.txt").exists()

    def test_conflict_gets_counter(self, text_file):
        main(["segment", str(text_file), "--formats", "plain_text"])
        main(["segment", str(text_file), "--formats", "plain_text"])
        assert (text_file.parent / "article-sentences-2.txt").exists()

    def test_max_chars_splits_ssml(self, text_file):
        main(["segment", str(text_file), "--formats", "ssml_marks", "--max-chars", "30"])
        assert (text_file.parent / "article-chunk-001.ssml").exists()


class TestAlignCommand:
    """align: recognized batches → timed alignment JSON."""

    def test_batches(self, text_file, tmp_path, capsys):
        recognized = tmp_path / "rec.json"
        recognized.write_text(json.dumps([
            {"result": [
                {"word": "mister", "start": 0.0, "end": 0.3, "conf": 0.7},
                {"word": "smith", "start": 0.3, "end": 0.7, "conf": 0.9},
            ]},
            {"result": [
                {"word": "goes", "start": 0.7, "end": 0.9, "conf": 0.9},
                {"word": "washington", "start": 1.1, "end": 1.8, "conf": 0.95},
            ]},
        ]), encoding="utf-8")

        main(["align", str(text_file), str(recognized)])

        assert capsys.readouterr().out.strip() == "4"
        data = json.loads((tmp_path / "article-alignment.json").read_text(encoding="utf-8"))
        words = data["sentences"][0]["words"]
        assert words[1]["start"] == 0.3
        assert words[3]["start"] is None
        assert words[4]["end"] == 1.8

    def test_word_timestamps_shape(self, text_file, tmp_path, capsys):
        recognized = tmp_path / "rec.json"
        recognized.write_text(json.dumps({"timestamps": [
            {"word": "Mr.", "startTime": 0.0, "endTime": 0.3},
        ]}), encoding="utf-8")
        main(["align", str(text_file), str(recognized)])
        assert capsys.readouterr().out.strip() == "0"


class TestLocateCommand:
    """locate: provider timing → global word index."""

    def _marks(self, tmp_path, count):
        path = tmp_path / "timing.json"
        path.write_text(json.dumps({"timepoints": [
            {"markName": "word_{}".format(i), "timeSeconds": i * 0.5} for i in range(count)
        ]}), encoding="utf-8")
        return path

    def test_marks(self, text_file, tmp_path, capsys):
        timing = self._marks(tmp_path, 10)
        main(["locate", str(text_file), str(timing), "--provider", "google", "--time", "1.2"])
        assert capsys.readouterr().out.strip() == "2"

    def test_second_chunk_is_global(self, text_file, tmp_path, capsys):
        timing = self._marks(tmp_path, 5)
        main(["locate", str(text_file), str(timing), "--provider", "google",
              "--time", "0.6", "--chunk", "1", "--max-chars", "30"])
        assert capsys.readouterr().out.strip() == "6"

    def test_before_first_anchor(self, text_file, tmp_path, capsys):
        timing = self._marks(tmp_path, 10)
        main(["locate", str(text_file), str(timing), "--provider", "google", "--time", "-1"])
        assert capsys.readouterr().out.strip() == "none"

    def test_malformed_timing_warns(self, text_file, tmp_path, capsys):
        timing = tmp_path / "timing.json"
        timing.write_text(json.dumps({"nope": []}), encoding="utf-8")
        main(["locate", str(text_file), str(timing), "--provider", "elevenlabs", "--time", "1"])
        captured = capsys.readouterr()
        assert captured.out.strip() == "none"
        assert "Unusable elevenlabs timing metadata" in captured.err

    def test_chunk_out_of_range(self, text_file, tmp_path, capsys):
        timing = self._marks(tmp_path, 1)
        with pytest.raises(SystemExit) as exc:
            main(["locate", str(text_file), str(timing), "--provider", "google",
                  "--time", "0", "--chunk", "3"])
        assert exc.value.code == 1
        assert "out of range" in capsys.readouterr().err


class TestErrors:
    """Caller mistakes exit with code 1."""

    def test_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["segment", str(tmp_path / "missing.txt")])
        assert exc.value.code == 1
        assert "File not found" in capsys.readouterr().err

    def test_unknown_format(self, text_file, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["segment", str(text_file), "--formats", "srt"])
        assert exc.value.code == 1
        assert "Unknown format 'srt'" in capsys.readouterr().err

    def test_invalid_json(self, text_file, tmp_path, capsys):
        bad = tmp_path / "bad.json"
        bad.write_text("{not json", encoding="utf-8")
        with pytest.raises(SystemExit) as exc:
            main(["align", str(text_file), str(bad)])
        assert exc.value.code == 1

    def test_missing_subcommand(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestHelpers:
    """Output naming and recognized-batch loading."""

    def test_resolve_output_path(self, tmp_path):
        assert _resolve_output_path("a", "-x.json", tmp_path).name == "a-x.json"
        (tmp_path / "a-x.json").write_text("{}")
        assert _resolve_output_path("a", "-x.json", tmp_path).name == "a-x-2.json"

    def test_flat_list_is_one_batch(self):
        batches = load_recognized_batches([{"word": "hi", "start": 0, "end": 1}])
        assert len(batches) == 1
        assert batches[0][0].word == "hi"

    def test_list_of_lists(self):
        batches = load_recognized_batches([
            [{"word": "a", "start": 0, "end": 1}],
            [{"word": "b", "start": 1, "end": 2}],
        ])
        assert [len(b) for b in batches] == [1, 1]
