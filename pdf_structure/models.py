"""
Data Models for PDF Page Structuring.

This module defines the data structures that flow through the pipeline:

1. ENGINE PRIMITIVES: glyphs, image placements and pixel buffers as produced
   by the PDF engine (transient, frozen dataclasses)
2. LAYOUT: reconstructed text lines
3. RESULTS: extracted images, page results and document results
   (pydantic models, serialisable to the external JSON shape)

Architecture:
    PDF → [Engine] → Glyph[] + ImageObject[]
                        ↓
          [Aggregator] → TextLine[]
                        ↓
          [Extractor]  → ExtractedImage[]   (files on disk)
                        ↓
          [Linker]     → ExtractedImage.related_text
                        ↓
                    PageResult → DocumentResult

Coordinates follow PyMuPDF: origin at the top-left corner of the page,
y grows downwards, so ``top <= bottom``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


# =============================================================================
# ENUMS
# =============================================================================


class ColorModel(str, Enum):
    """Color model of a decoded pixel buffer."""

    GRAY = "gray"
    RGB = "rgb"
    CMYK = "cmyk"

    @property
    def components(self) -> int:
        return {"gray": 1, "rgb": 3, "cmyk": 4}[self.value]


class RelatedTextOrder(str, Enum):
    """
    Order in which the chosen related lines are emitted.

    READING: top-to-bottom, as the lines appear on the page
    DISTANCE: nearest line first
    """

    READING = "reading"
    DISTANCE = "distance"


class DiagnosticKind(str, Enum):
    PAGE_ACCESS = "page_access"
    IMAGE_EXTRACTION = "image_extraction"


# =============================================================================
# ENGINE PRIMITIVES
# =============================================================================


@dataclass(frozen=True)
class BoundingBox:
    """Page-local rectangle (left, top, right, bottom)."""

    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def center_y(self) -> float:
        return (self.top + self.bottom) / 2

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.left, self.top, self.right, self.bottom)

    @classmethod
    def from_tuple(cls, bbox: tuple) -> "BoundingBox":
        x0, y0, x1, y1 = bbox
        # Normalise flipped rectangles so top <= bottom and left <= right
        return cls(
            left=min(x0, x1),
            top=min(y0, y1),
            right=max(x0, x1),
            bottom=max(y0, y1),
        )


@dataclass(frozen=True)
class Glyph:
    """A single rendered character on a page."""

    text: str
    bbox: BoundingBox
    page_index: int = 0


@dataclass(frozen=True)
class PixelBuffer:
    """Raw decoded image samples, row-major, ``components + alpha`` bytes per pixel."""

    samples: bytes
    width: int
    height: int
    color_model: ColorModel
    alpha: bool = False

    @property
    def expected_size(self) -> int:
        return self.width * self.height * (self.color_model.components + int(self.alpha))


@dataclass(frozen=True)
class ImageObject:
    """
    An embedded image placement as exposed by the PDF engine.

    Pixels are fetched lazily through ``loader`` so that a corrupt image
    only fails when the extractor asks for it.
    """

    bbox: BoundingBox
    loader: Callable[[], PixelBuffer]
    index: int = 0
    page_index: int = 0

    def load_pixels(self) -> PixelBuffer:
        return self.loader()


# =============================================================================
# LAYOUT
# =============================================================================


@dataclass(frozen=True)
class TextLine:
    """
    A reconstructed horizontal line of text.

    ``text`` is the line-preserving join (gaps become single spaces),
    ``raw_text`` the raw concatenation join of the same glyphs.
    """

    text: str
    raw_text: str
    y: float
    top: float
    bottom: float
    left: float
    page_index: int = 0
    line_index: int = 0


# =============================================================================
# CONFIGURATION
# =============================================================================


class LayoutConfig(BaseModel):
    """
    Tuning knobs for line clustering, image naming and text linking.

    Defaults suit text-layer PDFs exported from word processors and LaTeX.
    """

    line_tolerance: float = Field(
        0.0,
        ge=0.0,
        le=20.0,
        description="Extra points added above and below a line band when matching glyph centres",
    )
    word_gap_ratio: float = Field(
        0.3,
        gt=0.0,
        le=5.0,
        description="Gap (relative to mean neighbouring glyph width) that counts as a word break",
    )
    max_related_lines: int = Field(
        2,
        ge=1,
        le=10,
        description="Maximum number of related text lines per image",
    )
    related_text_order: RelatedTextOrder = Field(
        RelatedTextOrder.READING,
        description="Emit related lines in reading order or nearest first",
    )
    image_filename_template: str = Field(
        "image-{index}.png",
        description="Filename template for extracted images",
    )
    image_start_index: int = Field(
        1,
        ge=0,
        description="Identifier assigned to the first image of a document",
    )

    @field_validator("image_filename_template")
    @classmethod
    def _template_has_index(cls, value: str) -> str:
        if "{index}" not in value:
            raise ValueError("image_filename_template must contain '{index}'")
        if "/" in value or "\\" in value:
            raise ValueError("image_filename_template must be a plain filename")
        return value

    def image_filename(self, index: int) -> str:
        return self.image_filename_template.format(index=index)


# =============================================================================
# RESULTS
# =============================================================================


class Diagnostic(BaseModel):
    """A recovered page- or image-level failure."""

    kind: DiagnosticKind
    page_number: int = Field(..., ge=1)
    image_id: Optional[int] = None
    message: str

    model_config = ConfigDict(frozen=True)


class ExtractedImage(BaseModel):
    """
    A persisted image with its document-global identifier.

    The bounding box is kept for linking only and never serialised.
    """

    image_id: int = Field(..., ge=0, exclude=True)
    filename: str
    file_size_bytes: int = Field(..., ge=0, alias="fileSizeBytes")
    related_text: list[str] = Field(default_factory=list, alias="relatedText")
    bbox: Optional[tuple[float, float, float, float]] = Field(None, exclude=True)

    model_config = ConfigDict(populate_by_name=True)

    @property
    def box(self) -> Optional[BoundingBox]:
        return BoundingBox(*self.bbox) if self.bbox else None


class PageResult(BaseModel):
    """Images and text lines of a single page."""

    page_number: int = Field(..., ge=1, exclude=True)
    page_images: list[ExtractedImage] = Field(default_factory=list, alias="pageImages")
    page_text_lines: list[str] = Field(default_factory=list, alias="pageTextLines")

    model_config = ConfigDict(populate_by_name=True)


class DocumentResult(BaseModel):
    """
    Complete result of the full extraction mode.

    ``to_payload()`` yields the external list-of-pages shape; ``save()`` keeps
    page numbers and diagnostics as well.
    """

    source_file: str
    images_dir: str
    pages: list[PageResult] = Field(default_factory=list)
    diagnostics: list[Diagnostic] = Field(default_factory=list)
    extracted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @computed_field
    @property
    def total_images(self) -> int:
        return sum(len(p.page_images) for p in self.pages)

    @property
    def images(self) -> list[ExtractedImage]:
        return [img for page in self.pages for img in page.page_images]

    def get_page(self, page_number: int) -> Optional[PageResult]:
        for page in self.pages:
            if page.page_number == page_number:
                return page
        return None

    # --- Export Methods ---

    def to_payload(self) -> list[dict[str, Any]]:
        """Export pages in the external ``{pageTextLines, pageImages}`` shape."""
        return [page.model_dump(mode="json", by_alias=True) for page in self.pages]

    def to_dict(self) -> dict[str, Any]:
        data = self.model_dump(mode="json")
        # page_number and image_id are excluded from the external shape but
        # needed to reload a saved result
        for page_data, page in zip(data["pages"], self.pages):
            page_data["page_number"] = page.page_number
            for image_data, image in zip(page_data["page_images"], page.page_images):
                image_data["image_id"] = image.image_id
        return data

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=indent)

    def save(self, path: str) -> None:
        """Save the result to a JSON file."""
        Path(path).write_text(self.to_json(), encoding="utf-8")

    @classmethod
    def load(cls, path: str) -> "DocumentResult":
        """Load a result previously written by ``save()``."""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        data.pop("total_images", None)
        return cls.model_validate(data)


class TextResult(BaseModel):
    """Result of the text-only mode: one flattened string per page."""

    source_file: str
    pages: list[str] = Field(default_factory=list)
    page_numbers: list[int] = Field(default_factory=list)
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    def get_full_text(self, separator: str = "\n\n") -> str:
        return separator.join(self.pages)


# =============================================================================
# API MODELS
# =============================================================================


class ExtractRequest(BaseModel):
    pdf_path: str
    output_dir: str
    save_result: bool = False


class ExtractResponse(BaseModel):
    document_id: str
    pages: list[dict[str, Any]]
    diagnostics: list[Diagnostic] = Field(default_factory=list)
    output_path: Optional[str] = None


class ExtractTextRequest(BaseModel):
    pdf_path: str


class ExtractTextResponse(BaseModel):
    document_id: str
    pages: list[str]
    diagnostics: list[Diagnostic] = Field(default_factory=list)
