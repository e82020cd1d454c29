"""
Pytest fixtures for pdf_structure tests.

Synthetic geometry goes through ``FakeEngine`` / ``FakeDocument``, which
implement the engine protocol without parsing any PDF. ``sample_pdf`` builds
a small real document with PyMuPDF for the end-to-end tests.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

import fitz  # PyMuPDF
import pytest

from pdf_structure import (
    BoundingBox,
    ColorModel,
    DocumentOpenError,
    Glyph,
    ImageObject,
    PageAccessError,
    PixelBuffer,
)


# =============================================================================
# GEOMETRY HELPERS
# =============================================================================


def glyphs_for(
    text: str,
    x: float = 72.0,
    top: float = 100.0,
    char_width: float = 5.0,
    height: float = 10.0,
    page_index: int = 0,
) -> list[Glyph]:
    """One glyph per character, laid out left to right without gaps."""
    glyphs = []
    for i, ch in enumerate(text):
        left = x + i * char_width
        glyphs.append(
            Glyph(
                text=ch,
                bbox=BoundingBox(left, top, left + char_width, top + height),
                page_index=page_index,
            )
        )
    return glyphs


def rgb_pixels(width: int = 2, height: int = 2, value: int = 0) -> PixelBuffer:
    return PixelBuffer(
        samples=bytes([value % 256]) * (width * height * 3),
        width=width,
        height=height,
        color_model=ColorModel.RGB,
    )


def image_at(top: float, bottom: float, value: int = 0, left: float = 72.0, right: float = 272.0) -> ImageObject:
    return ImageObject(
        bbox=BoundingBox(left, top, right, bottom),
        loader=lambda: rgb_pixels(value=value),
    )


def broken_image_at(top: float, bottom: float) -> ImageObject:
    def _fail() -> PixelBuffer:
        raise ValueError("corrupt image stream")

    return ImageObject(bbox=BoundingBox(72.0, top, 272.0, bottom), loader=_fail)


# =============================================================================
# FAKE ENGINE
# =============================================================================


@dataclass
class FakePage:
    glyphs: list[Glyph] = field(default_factory=list)
    images: list[ImageObject] = field(default_factory=list)


class FakeDocument:
    def __init__(self, pages: list[Union[FakePage, Exception]]):
        self.pages = pages
        self.closed = False

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def _page(self, page_index: int) -> FakePage:
        page = self.pages[page_index]
        if isinstance(page, Exception):
            raise PageAccessError(page_index + 1, page)
        return page

    def page_glyphs(self, page_index: int) -> list[Glyph]:
        return list(self._page(page_index).glyphs)

    def page_images(self, page_index: int) -> list[ImageObject]:
        return list(self._page(page_index).images)

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> "FakeDocument":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class FakeEngine:
    def __init__(self, pages: list[Union[FakePage, Exception]], fail_open: bool = False):
        self.pages = pages
        self.fail_open = fail_open
        self.opened: list[FakeDocument] = []

    def open(self, path) -> FakeDocument:
        if self.fail_open:
            raise DocumentOpenError(str(path), reason="is corrupted or unreadable")
        doc = FakeDocument(self.pages)
        self.opened.append(doc)
        return doc


class FakeEncoder:
    """Deterministic stand-in for PNG encoding."""

    def __init__(self, fail_on_value: int | None = None):
        self.fail_on_value = fail_on_value

    def encode(self, pixels: PixelBuffer) -> bytes:
        if self.fail_on_value is not None and pixels.samples[:1] == bytes([self.fail_on_value]):
            raise ValueError("encoder failure")
        return b"FAKEPNG" + pixels.samples


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers installed by setup_logging() so they never outlive a test."""
    yield
    logger = logging.getLogger("pdf_structure")
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def images_dir(tmp_path: Path) -> Path:
    path = tmp_path / "images"
    path.mkdir()
    return path


@pytest.fixture
def four_page_pages() -> list[FakePage]:
    """
    Four pages modelled on a typical manual:

    1. one image between a heading and a code line
    2. a table-like list without images
    3. a long text followed by an image
    4. two images, each surrounded by short lines
    """
    page1 = FakePage(
        glyphs=(
            glyphs_for("1.", x=72, top=100)
            + glyphs_for("How to program", x=90, top=100)
            + glyphs_for("AA-FFF222 - AY", top=230)
            + glyphs_for("TSCode V1.2", top=400)
        ),
        images=[image_at(120, 220, value=1)],
    )
    page2 = FakePage(
        glyphs=(
            glyphs_for("List of required items", top=100)
            + glyphs_for("N.", x=72, top=120)
            + glyphs_for("Index", x=100, top=120)
            + glyphs_for("Item", x=160, top=120)
            + glyphs_for("1.", x=72, top=140)
            + glyphs_for("A", x=100, top=140)
            + glyphs_for("TSCode version 1.2", x=160, top=140)
        ),
    )
    page3 = FakePage(
        glyphs=(
            glyphs_for("What is Lorem Ipsum?", top=100)
            + glyphs_for("is a treatise on the theory of ethics.", top=300)
            + glyphs_for("See animal below.", top=320)
        ),
        images=[image_at(340, 600, value=2)],
    )
    page4 = FakePage(
        glyphs=(
            glyphs_for("What is it?", top=100)
            + glyphs_for("Probably this is electricity:", top=120)
            + glyphs_for("Some text here and there", top=330)
            + glyphs_for("Here is a key", top=350)
        ),
        images=[image_at(140, 300, value=3), image_at(380, 500, value=4)],
    )
    return [page1, page2, page3, page4]


@pytest.fixture
def sample_pdf(tmp_path: Path) -> Path:
    """A real two-page PDF: text, one image, text; then a text-only page."""
    path = tmp_path / "sample.pdf"
    doc = fitz.open()

    page = doc.new_page()
    page.insert_text((72, 100), "1. How to program", fontsize=12)
    pix = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, 20, 10), False)
    pix.set_rect(pix.irect, (200, 30, 30))
    page.insert_image(fitz.Rect(72, 120, 272, 220), pixmap=pix)
    page.insert_text((72, 240), "AA-FFF222 - AY", fontsize=12)

    page = doc.new_page()
    page.insert_text((72, 100), "Second page", fontsize=12)

    doc.save(str(path))
    doc.close()
    return path
