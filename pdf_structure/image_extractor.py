"""
Image Extraction Module

Encodes the embedded images of a page as PNG and writes them to disk under
document-global sequential names (``image-1.png``, ``image-2.png``, ...).

The running counter is passed in and returned explicitly, so independent
documents never share numbering state. A failing image consumes its number,
is logged and recorded, and extraction continues with the next image.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from .encoder import PixelEncoder, PngEncoder
from .exceptions import ImageExtractionError, format_error_chain
from .models import Diagnostic, DiagnosticKind, ExtractedImage, ImageObject, LayoutConfig

logger = logging.getLogger(__name__)


@dataclass
class PageImages:
    """Images extracted from one page plus the counter to continue from."""

    images: list[ExtractedImage]
    counter: int
    diagnostics: list[Diagnostic] = field(default_factory=list)


class ImageExtractor:
    """
    Extracts and persists page images.

    Usage:
        extractor = ImageExtractor(PngEncoder())
        page = extractor.extract_page(image_objects, counter=0, output_dir="images", page_number=1)
        counter = page.counter
    """

    def __init__(
        self,
        encoder: Optional[PixelEncoder] = None,
        config: Optional[LayoutConfig] = None,
    ):
        """
        Initialize the image extractor.

        Args:
            encoder: Lossless encoder for raw pixel buffers (PNG by default).
            config: Layout configuration holding the filename template.
        """
        self.encoder = encoder or PngEncoder()
        self.config = config or LayoutConfig()

    def initial_counter(self) -> int:
        """Counter value before the first image of a document."""
        return self.config.image_start_index - 1

    def extract_page(
        self,
        image_objects: Iterable[ImageObject],
        counter: int,
        output_dir: str | Path,
        page_number: int,
    ) -> PageImages:
        """
        Extract all images of a single page in page order.

        Args:
            image_objects: Image placements as exposed by the engine.
            counter: Last identifier consumed so far in this document.
            output_dir: Existing directory receiving the PNG files.
            page_number: 1-indexed page number (for diagnostics).

        Returns:
            PageImages with the extracted images and the updated counter.
        """
        output_dir = Path(output_dir)
        images: list[ExtractedImage] = []
        diagnostics: list[Diagnostic] = []

        for image_object in image_objects:
            counter += 1
            try:
                images.append(self._extract_one(image_object, counter, output_dir, page_number))
            except ImageExtractionError as e:
                logger.warning(format_error_chain(e))
                diagnostics.append(
                    Diagnostic(
                        kind=DiagnosticKind.IMAGE_EXTRACTION,
                        page_number=page_number,
                        image_id=counter,
                        message=str(e),
                    )
                )

        return PageImages(images=images, counter=counter, diagnostics=diagnostics)

    def _extract_one(
        self,
        image_object: ImageObject,
        image_id: int,
        output_dir: Path,
        page_number: int,
    ) -> ExtractedImage:
        filename = self.config.image_filename(image_id)
        try:
            pixels = image_object.load_pixels()
            data = self.encoder.encode(pixels)
            self._write_atomic(output_dir / filename, data)
        except Exception as e:
            raise ImageExtractionError(image_id, page_number, e) from e

        logger.debug(f"Saved {filename} ({len(data)} bytes)")
        return ExtractedImage(
            image_id=image_id,
            filename=filename,
            file_size_bytes=len(data),
            bbox=image_object.bbox.as_tuple(),
        )

    @staticmethod
    def _write_atomic(path: Path, data: bytes) -> None:
        """Write ``data`` to ``path`` completely or not at all."""
        tmp_path = path.with_name(f".{path.name}.part")
        try:
            with open(tmp_path, "wb") as f:
                f.write(data)
            os.replace(tmp_path, path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise
