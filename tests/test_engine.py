"""
End-to-end tests against real PDFs built with PyMuPDF.
"""

import fitz  # PyMuPDF
import pytest

from pdf_structure import (
    ColorModel,
    DocumentExtractor,
    DocumentOpenError,
    FitzEngine,
    PageAccessError,
)


@pytest.fixture
def engine():
    return FitzEngine()


class TestFitzEngineOpen:
    def test_missing_file(self, engine, tmp_path):
        with pytest.raises(DocumentOpenError, match="not found"):
            engine.open(tmp_path / "missing.pdf")

    def test_garbage_file(self, engine, tmp_path):
        path = tmp_path / "garbage.pdf"
        path.write_bytes(b"this is not a pdf at all")

        with pytest.raises(DocumentOpenError):
            engine.open(path)

    def test_encrypted_file(self, engine, tmp_path):
        path = tmp_path / "locked.pdf"
        doc = fitz.open()
        doc.new_page().insert_text((72, 72), "secret", fontsize=12)
        doc.save(
            str(path),
            encryption=fitz.PDF_ENCRYPT_AES_256,
            user_pw="user",
            owner_pw="owner",
        )
        doc.close()

        with pytest.raises(DocumentOpenError, match="encrypted"):
            engine.open(path)

    def test_page_count(self, engine, sample_pdf):
        with engine.open(sample_pdf) as doc:
            assert doc.page_count == 2


class TestFitzDocument:
    def test_glyphs(self, engine, sample_pdf):
        with engine.open(sample_pdf) as doc:
            glyphs = doc.page_glyphs(1)

        assert "".join(g.text for g in glyphs) == "Second page"
        assert all(g.page_index == 1 for g in glyphs)
        assert all(g.bbox.top <= g.bbox.bottom for g in glyphs)

    def test_glyph_coordinates_top_left_origin(self, engine, sample_pdf):
        with engine.open(sample_pdf) as doc:
            glyphs = doc.page_glyphs(0)

        first_line = [g for g in glyphs if g.bbox.bottom < 120]
        second_line = [g for g in glyphs if g.bbox.top > 220]
        assert first_line and second_line

    def test_images(self, engine, sample_pdf):
        with engine.open(sample_pdf) as doc:
            images = doc.page_images(0)
            assert len(images) == 1
            pixels = images[0].load_pixels()

        box = images[0].bbox
        assert (box.left, box.top, box.right, box.bottom) == pytest.approx((72, 120, 272, 220))
        assert (pixels.width, pixels.height) == (20, 10)
        assert pixels.color_model == ColorModel.RGB
        assert len(pixels.samples) == pixels.expected_size

    def test_page_without_images(self, engine, sample_pdf):
        with engine.open(sample_pdf) as doc:
            assert doc.page_images(1) == []

    def test_page_out_of_range(self, engine, sample_pdf):
        with engine.open(sample_pdf) as doc:
            with pytest.raises(PageAccessError):
                doc.page_glyphs(5)


class TestEndToEnd:
    def test_full_extraction(self, sample_pdf, images_dir):
        result = DocumentExtractor().extract_text_and_images(sample_pdf, images_dir)

        payload = result.to_payload()
        assert payload[0]["pageTextLines"] == ["1. How to program", "AA-FFF222 - AY"]
        assert payload[1] == {"pageImages": [], "pageTextLines": ["Second page"]}

        image = payload[0]["pageImages"][0]
        assert image["filename"] == "image-1.png"
        assert image["relatedText"] == ["1. How to program", "AA-FFF222 - AY"]
        written = images_dir / "image-1.png"
        assert image["fileSizeBytes"] == written.stat().st_size
        assert written.read_bytes().startswith(b"\x89PNG")
        assert result.diagnostics == []

    def test_png_pixels_preserved(self, sample_pdf, images_dir):
        DocumentExtractor().extract_text_and_images(sample_pdf, images_dir)

        pix = fitz.Pixmap(str(images_dir / "image-1.png"))
        assert (pix.width, pix.height) == (20, 10)
        assert pix.pixel(0, 0) == (200, 30, 30)

    def test_text_only(self, sample_pdf, images_dir):
        result = DocumentExtractor().extract_text(sample_pdf)

        assert result.pages == ["1. How to programAA-FFF222 - AY", "Second page"]
        assert list(images_dir.iterdir()) == []


class TestGlyphExtractionSkipsImages:
    def test_no_image_blocks_decoded(self, engine, sample_pdf, monkeypatch):
        """Reading glyphs never pulls embedded image data."""
        image_blocks = []
        original_get_text = fitz.Page.get_text

        def recording_get_text(page, option="text", **kwargs):
            raw = original_get_text(page, option, **kwargs)
            if option == "rawdict":
                image_blocks.extend(b for b in raw["blocks"] if b.get("type") == 1)
            return raw

        monkeypatch.setattr(fitz.Page, "get_text", recording_get_text)

        with engine.open(sample_pdf) as doc:
            glyphs = doc.page_glyphs(0)

        assert glyphs
        assert image_blocks == []
