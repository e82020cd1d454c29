"""
PDF Structure - Page-Content Structuring for PDF Documents

Turns raw PDF page geometry into structured per-page content:
- Reading-ordered text lines reconstructed from glyph positions
- Embedded images saved as ``image-<n>.png`` with document-global numbering
- For each image, the nearest text lines on its page (e.g. captions)

Quick Start:
    from pdf_structure import DocumentExtractor

    extractor = DocumentExtractor()
    result = extractor.extract_text_and_images("document.pdf", "images/")

    for page in result.to_payload():
        print(page["pageTextLines"])
        print(page["pageImages"])

    texts = extractor.extract_text("document.pdf").pages

Async:
    import asyncio
    from pdf_structure import extract_text_and_images, extract_text

    pages = asyncio.run(extract_text_and_images("document.pdf", "images/"))
"""

__version__ = "1.0.0"

# Orchestrator and async entry points
from .extractor import DocumentExtractor, extract_text, extract_text_and_images

# Components
from .line_aggregator import LineAggregator
from .image_extractor import ImageExtractor, PageImages
from .linker import TextImageLinker
from .engine import EngineDocument, FitzDocument, FitzEngine, PDFEngine
from .encoder import PixelEncoder, PngEncoder

# Data models
from .models import (
    # Enums
    ColorModel,
    RelatedTextOrder,
    DiagnosticKind,
    # Engine primitives
    BoundingBox,
    Glyph,
    PixelBuffer,
    ImageObject,
    TextLine,
    # Results
    Diagnostic,
    ExtractedImage,
    PageResult,
    DocumentResult,
    TextResult,
    # Configuration
    LayoutConfig,
)
from .config import ExtractorConfig

# Exceptions
from .exceptions import (
    ExtractionError,
    DocumentOpenError,
    OutputDirectoryError,
    PageAccessError,
    ImageExtractionError,
    is_recoverable,
    format_error_chain,
)

__all__ = [
    "__version__",
    # Orchestrator
    "DocumentExtractor",
    "extract_text_and_images",
    "extract_text",
    # Components
    "LineAggregator",
    "ImageExtractor",
    "PageImages",
    "TextImageLinker",
    "EngineDocument",
    "FitzDocument",
    "FitzEngine",
    "PDFEngine",
    "PixelEncoder",
    "PngEncoder",
    # Enums
    "ColorModel",
    "RelatedTextOrder",
    "DiagnosticKind",
    # Primitives
    "BoundingBox",
    "Glyph",
    "PixelBuffer",
    "ImageObject",
    "TextLine",
    # Results
    "Diagnostic",
    "ExtractedImage",
    "PageResult",
    "DocumentResult",
    "TextResult",
    # Configuration
    "LayoutConfig",
    "ExtractorConfig",
    # Exceptions
    "ExtractionError",
    "DocumentOpenError",
    "OutputDirectoryError",
    "PageAccessError",
    "ImageExtractionError",
    "is_recoverable",
    "format_error_chain",
]
