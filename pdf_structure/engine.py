"""
PDF Engine Adapter

Narrow capability interface over the PDF engine plus the PyMuPDF (fitz)
implementation. The structuring logic only talks to ``PDFEngine`` /
``EngineDocument``, so it can be driven by synthetic geometry in tests.

Usage:
    engine = FitzEngine()
    with engine.open("document.pdf") as doc:
        for page_index in range(doc.page_count):
            glyphs = doc.page_glyphs(page_index)
            images = doc.page_images(page_index)
"""

from __future__ import annotations

import logging
from functools import partial
from pathlib import Path
from typing import Protocol

import fitz  # PyMuPDF

from .exceptions import DocumentOpenError, PageAccessError
from .models import BoundingBox, ColorModel, Glyph, ImageObject, PixelBuffer

logger = logging.getLogger(__name__)

_COLOR_MODELS = {1: ColorModel.GRAY, 3: ColorModel.RGB, 4: ColorModel.CMYK}

# rawdict without embedded image data; images are decoded lazily through xrefs
_GLYPH_FLAGS = fitz.TEXTFLAGS_RAWDICT & ~fitz.TEXT_PRESERVE_IMAGES


class EngineDocument(Protocol):
    """An opened document. Not safe for concurrent use."""

    @property
    def page_count(self) -> int: ...

    def page_glyphs(self, page_index: int) -> list[Glyph]: ...

    def page_images(self, page_index: int) -> list[ImageObject]: ...

    def close(self) -> None: ...

    def __enter__(self) -> "EngineDocument": ...

    def __exit__(self, *exc_info) -> None: ...


class PDFEngine(Protocol):
    def open(self, path: str | Path) -> EngineDocument: ...


class FitzDocument:
    """``EngineDocument`` backed by a ``fitz.Document``."""

    def __init__(self, doc: fitz.Document, path: str):
        self._doc = doc
        self.path = path

    @property
    def page_count(self) -> int:
        return len(self._doc)

    def page_glyphs(self, page_index: int) -> list[Glyph]:
        try:
            page = self._doc[page_index]
            raw = page.get_text("rawdict", flags=_GLYPH_FLAGS)
        except Exception as exc:
            raise PageAccessError(page_index + 1, exc) from exc

        glyphs: list[Glyph] = []
        for block in raw.get("blocks", []):
            if block.get("type") != 0:  # Text blocks only
                continue
            for line in block.get("lines", []):
                for span in line.get("spans", []):
                    for char in span.get("chars", []):
                        glyphs.append(
                            Glyph(
                                text=char.get("c", ""),
                                bbox=BoundingBox.from_tuple(char["bbox"]),
                                page_index=page_index,
                            )
                        )
        return glyphs

    def page_images(self, page_index: int) -> list[ImageObject]:
        try:
            page = self._doc[page_index]
            infos = page.get_image_info(xrefs=True)
        except Exception as exc:
            raise PageAccessError(page_index + 1, exc) from exc

        images = []
        for idx, info in enumerate(infos):
            images.append(
                ImageObject(
                    bbox=BoundingBox.from_tuple(info["bbox"]),
                    loader=partial(self._load_pixels, info.get("xref", 0)),
                    index=idx,
                    page_index=page_index,
                )
            )
        return images

    def _load_pixels(self, xref: int) -> PixelBuffer:
        if not xref:
            raise ValueError("inline image has no xref and cannot be decoded")

        pix = fitz.Pixmap(self._doc, xref)
        components = pix.n - pix.alpha
        if pix.colorspace is None or components not in _COLOR_MODELS:
            raise ValueError(f"unsupported image colorspace (xref {xref}, n={pix.n})")

        return PixelBuffer(
            samples=bytes(pix.samples),
            width=pix.width,
            height=pix.height,
            color_model=_COLOR_MODELS[components],
            alpha=bool(pix.alpha),
        )

    def close(self) -> None:
        self._doc.close()

    def __enter__(self) -> "FitzDocument":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class FitzEngine:
    """Opens PDF documents with PyMuPDF."""

    def open(self, path: str | Path) -> FitzDocument:
        path = str(path)
        if not Path(path).is_file():
            raise DocumentOpenError(path, reason="not found")

        try:
            doc = fitz.open(path)
        except Exception as exc:
            raise DocumentOpenError(path, reason="is corrupted or unreadable", original_error=exc) from exc

        if not doc.is_pdf:
            doc.close()
            raise DocumentOpenError(path, reason="is not a PDF")
        if doc.needs_pass:
            doc.close()
            raise DocumentOpenError(path, reason="is encrypted")

        logger.debug(f"Opened {path} ({len(doc)} pages)")
        return FitzDocument(doc, path)
