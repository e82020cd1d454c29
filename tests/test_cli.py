"""
Tests for the pdf-structure command line.
"""

import json

import pytest

from pdf_structure import cli


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("PDF_STRUCTURE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("PDF_STRUCTURE_RELATED_TEXT_ORDER", raising=False)


def test_extract_json(sample_pdf, tmp_path, capsys):
    output = tmp_path / "out" / "images"

    exit_code = cli.main(["extract", str(sample_pdf), "-o", str(output), "--json"])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload[0]["pageImages"][0]["filename"] == "image-1.png"
    assert (output / "image-1.png").exists()


def test_extract_summary(sample_pdf, tmp_path, capsys):
    exit_code = cli.main(["extract", str(sample_pdf), "-o", str(tmp_path / "images")])

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "2 pages, 1 images" in out
    assert "image-1.png" in out


def test_extract_save_result(sample_pdf, tmp_path):
    exit_code = cli.main(["extract", str(sample_pdf), "-o", str(tmp_path / "images"), "--save-result"])

    assert exit_code == 0
    saved = list((tmp_path / "data" / "sample" / "extraction").glob("sample_*.json"))
    assert len(saved) == 1


def test_related_order_option(sample_pdf, tmp_path, capsys):
    exit_code = cli.main(
        ["extract", str(sample_pdf), "-o", str(tmp_path / "images"), "--json", "--related-order", "distance"]
    )

    assert exit_code == 0
    related = json.loads(capsys.readouterr().out)[0]["pageImages"][0]["relatedText"]
    assert sorted(related) == sorted(["1. How to program", "AA-FFF222 - AY"])


def test_text(sample_pdf, capsys):
    assert cli.main(["text", str(sample_pdf), "--json"]) == 0
    assert json.loads(capsys.readouterr().out) == ["1. How to programAA-FFF222 - AY", "Second page"]


def test_text_plain(sample_pdf, capsys):
    assert cli.main(["text", str(sample_pdf)]) == 0
    out = capsys.readouterr().out
    assert "--- Page 2 ---\nSecond page" in out


def test_missing_document_exit_code(tmp_path, capsys):
    exit_code = cli.main(["text", str(tmp_path / "missing.pdf")])

    assert exit_code == 1
    assert "not found" in capsys.readouterr().err


def test_usage_error():
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["extract"])
    assert exc_info.value.code == 2


def test_serve_runs_uvicorn(monkeypatch):
    calls = {}

    def fake_run(app, host, port):
        calls.update(app=app, host=host, port=port)

    monkeypatch.setattr(cli.uvicorn, "run", fake_run)

    assert cli.main(["serve", "--port", "9000"]) == 0
    assert calls["host"] == "0.0.0.0"
    assert calls["port"] == 9000
    assert calls["app"].title == "PDF Structure Service"
