"""
Glyph Line Aggregation

Groups the glyphs of one page into reading-ordered text lines.

Clustering works on vertical bands: glyphs are visited top to bottom and
each one joins the line whose band contains its vertical centre, otherwise it
opens a new line. Two text joins are built over the same clustering:

- line-preserving join (``TextLine.text``): a single space is inserted where
  the horizontal gap between neighbouring glyphs exceeds
  ``word_gap_ratio`` times their mean width
- raw concatenation join (``TextLine.raw_text``): glyph text appended as-is,
  used for the flattened page text of the text-only mode
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, Optional

from .models import Glyph, LayoutConfig, TextLine

logger = logging.getLogger(__name__)


def is_blank(text: str) -> bool:
    """True if ``text`` holds no visible character."""
    return not any(ch.isprintable() and not ch.isspace() for ch in text)


@dataclass
class _LineCluster:
    top: float
    bottom: float
    glyphs: list[Glyph] = field(default_factory=list)

    @property
    def center(self) -> float:
        return (self.top + self.bottom) / 2

    def accepts(self, glyph: Glyph, tolerance: float) -> bool:
        y = glyph.bbox.center_y
        if self.top - tolerance <= y <= self.bottom + tolerance:
            return True
        # Small glyphs seen first (superscripts, punctuation) must not split a line
        return glyph.bbox.top - tolerance <= self.center <= glyph.bbox.bottom + tolerance

    def add(self, glyph: Glyph) -> None:
        self.glyphs.append(glyph)
        self.top = min(self.top, glyph.bbox.top)
        self.bottom = max(self.bottom, glyph.bbox.bottom)


class LineAggregator:
    """
    Reconstructs text lines from unordered glyph geometry.

    Usage:
        aggregator = LineAggregator(LayoutConfig())
        lines = aggregator.aggregate(glyphs)
        page_text = aggregator.flatten(lines)
    """

    def __init__(self, config: Optional[LayoutConfig] = None):
        self.config = config or LayoutConfig()

    def aggregate(self, glyphs: Iterable[Glyph]) -> list[TextLine]:
        glyphs = list(glyphs)
        if not glyphs:
            return []

        clusters = self._cluster(glyphs)

        lines: list[TextLine] = []
        for cluster in clusters:
            ordered = sorted(cluster.glyphs, key=lambda g: (g.bbox.left, g.bbox.top))
            visible = [g for g in ordered if not is_blank(g.text)]
            if not visible:
                continue  # whitespace-only line

            lines.append(
                TextLine(
                    text=self.join_line(ordered),
                    raw_text=self.join_raw(ordered),
                    y=cluster.center,
                    top=cluster.top,
                    bottom=cluster.bottom,
                    left=visible[0].bbox.left,
                    page_index=ordered[0].page_index,
                )
            )

        lines.sort(key=lambda line: (line.y, line.left))
        logger.debug(f"{len(glyphs)} glyphs grouped into {len(lines)} lines")
        return [replace(line, line_index=idx) for idx, line in enumerate(lines)]

    def _cluster(self, glyphs: list[Glyph]) -> list[_LineCluster]:
        tolerance = self.config.line_tolerance
        clusters: list[_LineCluster] = []

        for glyph in sorted(glyphs, key=lambda g: (g.bbox.center_y, g.bbox.left)):
            y = glyph.bbox.center_y
            candidates = [c for c in clusters if c.accepts(glyph, tolerance)]
            if candidates:
                target = min(candidates, key=lambda c: abs(c.center - y))
                target.add(glyph)
            else:
                cluster = _LineCluster(top=glyph.bbox.top, bottom=glyph.bbox.bottom)
                cluster.add(glyph)
                clusters.append(cluster)

        return clusters

    # --- Text joins ---

    def join_line(self, glyphs: list[Glyph]) -> str:
        """Line-preserving join over glyphs sorted left to right."""
        parts: list[str] = []
        previous: Optional[Glyph] = None
        pending_space = False

        for glyph in glyphs:
            if is_blank(glyph.text):
                if previous is not None:
                    pending_space = True
                continue
            if previous is not None and (pending_space or self._is_word_gap(previous, glyph)):
                parts.append(" ")
            parts.append(glyph.text)
            previous = glyph
            pending_space = False

        return " ".join("".join(parts).split())

    @staticmethod
    def join_raw(glyphs: list[Glyph]) -> str:
        """Raw concatenation join: no separators are inserted."""
        parts = []
        for glyph in glyphs:
            for ch in glyph.text:
                if ch.isspace():
                    parts.append(" ")
                elif ch.isprintable():
                    parts.append(ch)
        return "".join(parts).strip()

    def _is_word_gap(self, left: Glyph, right: Glyph) -> bool:
        gap = right.bbox.left - left.bbox.right
        mean_width = (left.bbox.width + right.bbox.width) / 2
        if mean_width <= 0:
            return gap > 0
        return gap > self.config.word_gap_ratio * mean_width

    @staticmethod
    def flatten(lines: Iterable[TextLine]) -> str:
        """Page text for the text-only mode: raw joins without line breaks."""
        return "".join(line.raw_text for line in lines)
