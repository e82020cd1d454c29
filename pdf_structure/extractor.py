"""
PDF Structure Extractor - Document Orchestrator

Turns a PDF into per-page structured content:
1. Glyph line aggregation (reading-ordered text lines)
2. Image extraction (PNG files with document-global numbering)
3. Spatial linking (nearest text lines per image)

Two modes:
- full extraction: text lines + images with related text
- text-only extraction: one flattened text block per page, no image work

Usage:
    from pdf_structure import DocumentExtractor

    extractor = DocumentExtractor()
    result = extractor.extract_text_and_images("document.pdf", "images/")

    for page in result.pages:
        print(page.page_text_lines)
        for image in page.page_images:
            print(image.filename, image.related_text)

Async entry points (the pipeline runs in a worker thread):
    pages = await extract_text_and_images("document.pdf", "images/")
    texts = await extract_text("document.pdf")
"""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Any, Callable, Optional

from .encoder import PixelEncoder, PngEncoder
from .engine import EngineDocument, FitzEngine, PDFEngine
from .exceptions import OutputDirectoryError, PageAccessError, format_error_chain
from .image_extractor import ImageExtractor
from .line_aggregator import LineAggregator
from .linker import TextImageLinker
from .models import (
    Diagnostic,
    DiagnosticKind,
    DocumentResult,
    LayoutConfig,
    PageResult,
    TextLine,
    TextResult,
)

logger = logging.getLogger(__name__)


class DocumentExtractor:
    """
    Orchestrates page iteration for one document at a time.

    An instance holds no per-document state: the image counter lives in the
    call, so one extractor may serve several documents in parallel threads as
    long as each call writes to its own output directory.
    """

    def __init__(
        self,
        engine: Optional[PDFEngine] = None,
        encoder: Optional[PixelEncoder] = None,
        config: Optional[LayoutConfig] = None,
    ):
        """
        Initialize the extractor.

        Args:
            engine: PDF engine (PyMuPDF by default)
            encoder: Pixel encoder (PNG via PyMuPDF by default)
            config: Layout configuration
        """
        self.config = config or LayoutConfig()
        self.engine = engine or FitzEngine()
        self.aggregator = LineAggregator(self.config)
        self.image_extractor = ImageExtractor(encoder or PngEncoder(), self.config)
        self.linker = TextImageLinker(self.config)

    def extract_text_and_images(
        self,
        document_path: str | Path,
        output_dir: str | Path,
        progress_callback: Optional[Callable[[int, int, str], None]] = None,
    ) -> DocumentResult:
        """
        Extract text lines and images with related text from a document.

        Args:
            document_path: Path to the PDF file
            output_dir: Existing directory receiving ``image-<n>.png`` files
            progress_callback: Optional callback(current_page, total_pages, status)

        Returns:
            DocumentResult with one PageResult per readable page

        Raises:
            OutputDirectoryError: output_dir does not exist
            DocumentOpenError: the document cannot be opened
        """
        output_dir = Path(output_dir)
        if not output_dir.is_dir():
            raise OutputDirectoryError(str(output_dir))

        start_time = time.time()
        logger.info(f"Starting extraction: {document_path}")

        pages: list[PageResult] = []
        diagnostics: list[Diagnostic] = []
        counter = self.image_extractor.initial_counter()

        with self.engine.open(document_path) as doc:
            total_pages = doc.page_count
            logger.info(f"Document has {total_pages} pages")

            for page_index in range(total_pages):
                page_number = page_index + 1
                try:
                    lines = self._page_lines(doc, page_index)
                    image_objects = doc.page_images(page_index)
                except PageAccessError as e:
                    self._record_page_failure(e, diagnostics)
                    continue

                extracted = self.image_extractor.extract_page(
                    image_objects, counter, output_dir, page_number
                )
                counter = extracted.counter
                diagnostics.extend(extracted.diagnostics)

                pages.append(
                    PageResult(
                        page_number=page_number,
                        page_images=self.linker.link(extracted.images, lines),
                        page_text_lines=[line.text for line in lines],
                    )
                )
                logger.debug(
                    f"Page {page_number}: {len(lines)} lines, "
                    f"{len(extracted.images)}/{len(image_objects)} images"
                )
                if progress_callback:
                    progress_callback(page_number, total_pages, f"Page {page_number} done")

        result = DocumentResult(
            source_file=str(document_path),
            images_dir=str(output_dir),
            pages=pages,
            diagnostics=diagnostics,
        )

        if diagnostics:
            logger.warning(f"{len(diagnostics)} pages/images skipped")
        logger.info(
            f"Extraction complete in {time.time() - start_time:.1f}s: "
            f"{len(pages)} pages, {result.total_images} images"
        )
        return result

    def extract_text(self, document_path: str | Path) -> TextResult:
        """
        Extract one flattened text block per page (raw join, no image work).

        Raises:
            DocumentOpenError: the document cannot be opened
        """
        logger.info(f"Starting text extraction: {document_path}")

        texts: list[str] = []
        page_numbers: list[int] = []
        diagnostics: list[Diagnostic] = []

        with self.engine.open(document_path) as doc:
            for page_index in range(doc.page_count):
                try:
                    lines = self._page_lines(doc, page_index)
                except PageAccessError as e:
                    self._record_page_failure(e, diagnostics)
                    continue
                texts.append(self.aggregator.flatten(lines))
                page_numbers.append(page_index + 1)

        return TextResult(
            source_file=str(document_path),
            pages=texts,
            page_numbers=page_numbers,
            diagnostics=diagnostics,
        )

    def _page_lines(self, doc: EngineDocument, page_index: int) -> list[TextLine]:
        return self.aggregator.aggregate(doc.page_glyphs(page_index))

    @staticmethod
    def _record_page_failure(error: PageAccessError, diagnostics: list[Diagnostic]) -> None:
        logger.warning(f"Skipping page {error.page_number}: {format_error_chain(error)}")
        diagnostics.append(
            Diagnostic(
                kind=DiagnosticKind.PAGE_ACCESS,
                page_number=error.page_number,
                message=str(error),
            )
        )


# =============================================================================
# ASYNC ENTRY POINTS
# =============================================================================


async def extract_text_and_images(
    document_path: str | Path,
    output_dir: str | Path,
    config: Optional[LayoutConfig] = None,
) -> list[dict[str, Any]]:
    """
    Extract text lines and images; returns the ``{pageTextLines, pageImages}`` payload.

    The output directory must already exist.
    """
    extractor = DocumentExtractor(config=config)
    result = await asyncio.to_thread(extractor.extract_text_and_images, document_path, output_dir)
    return result.to_payload()


async def extract_text(
    document_path: str | Path,
    config: Optional[LayoutConfig] = None,
) -> list[str]:
    """Extract one flattened text string per page."""
    extractor = DocumentExtractor(config=config)
    result = await asyncio.to_thread(extractor.extract_text, document_path)
    return result.pages
