"""
Spatial Text-Image Linking

Attaches to every extracted image the text lines closest to it on the same
page, e.g. a figure caption below or a heading above.

Distance metric (vertical only):
    0                               line band overlaps the image band
    image.top - line.y              line lies above the image
    line.y - image.bottom           line lies below the image

Ties prefer the line above the image, then the line below, then reading order.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from .models import BoundingBox, ExtractedImage, LayoutConfig, RelatedTextOrder, TextLine

logger = logging.getLogger(__name__)


def vertical_distance(line: TextLine, box: BoundingBox) -> float:
    """Vertical distance between a text line and an image box."""
    if line.top <= box.bottom and line.bottom >= box.top:
        return 0.0
    if line.y < box.top:
        return box.top - line.y
    return max(line.y - box.bottom, 0.0)


class TextImageLinker:
    """
    Selects the related text lines for each image of a page.

    Usage:
        linker = TextImageLinker(LayoutConfig(max_related_lines=2))
        images = linker.link(page_images, page_lines)
    """

    def __init__(self, config: Optional[LayoutConfig] = None):
        self.config = config or LayoutConfig()

    def link(
        self,
        images: Sequence[ExtractedImage],
        lines: Sequence[TextLine],
    ) -> list[ExtractedImage]:
        """Return copies of ``images`` with ``related_text`` filled in."""
        linked = []
        for image in images:
            related = self.related_lines(image.box, lines) if image.box else []
            linked.append(image.model_copy(update={"related_text": [line.text for line in related]}))
        return linked

    def related_lines(self, box: BoundingBox, lines: Sequence[TextLine]) -> list[TextLine]:
        """Pick the nearest lines to ``box``, ordered by the configured policy."""
        if not lines:
            return []

        def rank(line: TextLine) -> tuple[float, int, int]:
            below = 0 if line.y <= box.center_y else 1
            return (vertical_distance(line, box), below, line.line_index)

        chosen = sorted(lines, key=rank)[: self.config.max_related_lines]

        if self.config.related_text_order is RelatedTextOrder.READING:
            chosen.sort(key=lambda line: line.line_index)

        logger.debug(
            f"Image at y={box.top:.1f}-{box.bottom:.1f} linked to lines "
            f"{[line.line_index for line in chosen]}"
        )
        return chosen
