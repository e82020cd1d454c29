"""
PNG Encoding

Lossless encoding of raw pixel buffers, using PyMuPDF pixmaps.
CMYK buffers are converted to RGB first since PNG has no CMYK mode.
"""

from __future__ import annotations

from typing import Protocol

import fitz  # PyMuPDF

from .models import ColorModel, PixelBuffer


class PixelEncoder(Protocol):
    def encode(self, pixels: PixelBuffer) -> bytes: ...


class PngEncoder:
    """Encodes ``PixelBuffer`` objects as PNG bytes."""

    _COLORSPACES = {
        ColorModel.GRAY: fitz.csGRAY,
        ColorModel.RGB: fitz.csRGB,
        ColorModel.CMYK: fitz.csCMYK,
    }

    def encode(self, pixels: PixelBuffer) -> bytes:
        if pixels.width <= 0 or pixels.height <= 0:
            raise ValueError(f"invalid image dimensions {pixels.width}x{pixels.height}")
        if len(pixels.samples) != pixels.expected_size:
            raise ValueError(
                f"pixel buffer holds {len(pixels.samples)} bytes, "
                f"expected {pixels.expected_size}"
            )

        pix = fitz.Pixmap(
            self._COLORSPACES[pixels.color_model],
            pixels.width,
            pixels.height,
            pixels.samples,
            pixels.alpha,
        )
        if pixels.color_model is ColorModel.CMYK:
            pix = fitz.Pixmap(fitz.csRGB, pix)

        return pix.tobytes("png")
