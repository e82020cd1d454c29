"""
Custom Exceptions for PDF Page Structuring.

This module defines the exception hierarchy used by the page-structuring
pipeline. Only document-level errors reach the caller; page- and image-level
errors are recovered locally and recorded as diagnostics on the result.

Exception Hierarchy:
    ExtractionError (base)
    ├── DocumentOpenError       (fatal: input cannot be opened as a PDF)
    ├── OutputDirectoryError    (fatal: image directory missing)
    ├── PageAccessError         (recovered: one page is skipped)
    └── ImageExtractionError    (recovered: one image is skipped)

Usage:
    from pdf_structure.exceptions import DocumentOpenError, ExtractionError

    try:
        result = extractor.extract_text_and_images("document.pdf", "images/")
    except DocumentOpenError as e:
        print(f"Cannot open {e.path}: {e}")
    except ExtractionError as e:
        print(f"Extraction failed: {e}")
"""

from __future__ import annotations

from typing import Optional


# =============================================================================
# BASE EXCEPTION
# =============================================================================


class ExtractionError(Exception):
    """
    Base exception for all extraction-related errors.

    Attributes:
        message: Human-readable error description
        details: Additional technical details (optional)
    """

    def __init__(
        self,
        message: str = "An extraction error occurred",
        details: Optional[str] = None,
    ):
        self.message = message
        self.details = details

        full_message = message
        if details:
            full_message = f"{message} | Details: {details}"

        super().__init__(full_message)


# =============================================================================
# DOCUMENT-LEVEL ERRORS (fatal)
# =============================================================================


class DocumentOpenError(ExtractionError):
    """
    Raised when the input cannot be opened as a PDF document.

    Covers missing files, corrupt data, non-PDF input and encrypted
    documents.

    Attributes:
        path: Path to the document
        original_error: The underlying error from the PDF library
    """

    def __init__(
        self,
        path: str,
        reason: str = "cannot be opened",
        original_error: Optional[Exception] = None,
    ):
        self.path = path
        self.original_error = original_error
        details = str(original_error) if original_error else None
        super().__init__(
            message=f"PDF document {reason}: {path}",
            details=details,
        )


class OutputDirectoryError(ExtractionError):
    """
    Raised when the image output directory does not exist.

    The extraction call never creates the directory itself.
    """

    def __init__(self, path: str):
        self.path = path
        super().__init__(message=f"Image output directory does not exist: {path}")


# =============================================================================
# RECOVERABLE ERRORS
# =============================================================================


class PageAccessError(ExtractionError):
    """
    Raised when the geometry of a single page cannot be retrieved.

    The orchestrator catches it, skips the page and records a diagnostic.

    Attributes:
        page_number: The page that failed (1-indexed)
        original_error: The underlying error from the PDF library
    """

    def __init__(
        self,
        page_number: int,
        original_error: Optional[Exception] = None,
    ):
        self.page_number = page_number
        self.original_error = original_error
        details = str(original_error) if original_error else None
        super().__init__(
            message=f"Failed to read geometry of page {page_number}",
            details=details,
        )


class ImageExtractionError(ExtractionError):
    """
    Raised when one image cannot be decoded, encoded or written.

    Attributes:
        image_id: Identifier consumed by the failed image
        page_number: Page holding the image (1-indexed)
        original_error: The underlying error
    """

    def __init__(
        self,
        image_id: int,
        page_number: int,
        original_error: Optional[Exception] = None,
    ):
        self.image_id = image_id
        self.page_number = page_number
        self.original_error = original_error
        details = str(original_error) if original_error else None
        super().__init__(
            message=f"Failed to extract image {image_id} on page {page_number}",
            details=details,
        )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def is_recoverable(error: Exception) -> bool:
    """Check if an error only affects a single page or image."""
    return isinstance(error, (PageAccessError, ImageExtractionError))


def format_error_chain(error: Exception) -> str:
    """
    Format an exception and its chain for logging.

    Returns a multi-line string showing the error hierarchy.
    """
    lines = []
    current = error
    depth = 0

    while current is not None:
        prefix = "  " * depth + ("└─ " if depth > 0 else "")
        lines.append(f"{prefix}{type(current).__name__}: {current}")

        if getattr(current, "original_error", None) is not None:
            current = current.original_error
            depth += 1
        elif current.__cause__:
            current = current.__cause__
            depth += 1
        else:
            break

    return "\n".join(lines)
