"""
Tests for the command-line shell.
"""

import json

from termlens import cli


def test_define_exits_cleanly(capsys):
    assert cli.main(["--define", "react"]) == 0


def test_export_glossary_to_file(tmp_path):
    output = tmp_path / "glossary.json"

    assert cli.main(["--export-glossary", "json", "--output", str(output)]) == 0

    assert json.loads(output.read_text(encoding="utf-8"))["react"].startswith("A JavaScript library")


def test_annotate_file_writes_highlighted_html(tmp_path):
    note = tmp_path / "note.html"
    note.write_text("<p>I use React and javascript daily.</p>", encoding="utf-8")
    output = tmp_path / "note.annotated.html"

    assert cli.main(["--annotate", str(note), "--output", str(output)]) == 0

    annotated = output.read_text(encoding="utf-8")
    assert 'data-term="react"' in annotated
    assert 'data-term="javascript"' in annotated


def test_annotate_plain_text_file(tmp_path):
    note = tmp_path / "note.txt"
    note.write_text("Cloud computing & APIs\n\nsecond line\n", encoding="utf-8")

    annotated = cli.TermLensCLI().annotate_file(str(note))

    assert annotated.startswith("<p>")
    assert 'data-term="cloud computing"' in annotated
    assert "&amp;" in annotated


def test_annotate_missing_file(tmp_path):
    assert cli.main(["--annotate", str(tmp_path / "missing.html")]) == 1


def test_custom_glossary(tmp_path):
    glossary = tmp_path / "terms.yaml"
    glossary.write_text('kubernetes: "Container orchestration"\n', encoding="utf-8")

    tool = cli.TermLensCLI()
    assert tool.catalog.lookup("kubernetes") is None

    assert cli.main(["--glossary", str(glossary), "--define", "kubernetes"]) == 0
