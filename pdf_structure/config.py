from dataclasses import dataclass, field
import os

from .models import LayoutConfig


@dataclass
class ExtractorConfig:
    data_dir: str = "data/pdf_structure"
    layout: LayoutConfig = field(default_factory=LayoutConfig)

    @classmethod
    def from_env(cls) -> "ExtractorConfig":
        def _float(name: str, default: float) -> float:
            value = os.environ.get(name)
            return float(value) if value else default

        defaults = LayoutConfig()
        layout = LayoutConfig(
            line_tolerance=_float("PDF_STRUCTURE_LINE_TOLERANCE", defaults.line_tolerance),
            word_gap_ratio=_float("PDF_STRUCTURE_WORD_GAP_RATIO", defaults.word_gap_ratio),
            related_text_order=os.environ.get(
                "PDF_STRUCTURE_RELATED_TEXT_ORDER", defaults.related_text_order.value
            ),
        )
        return cls(
            data_dir=os.environ.get("PDF_STRUCTURE_DATA_DIR", cls.data_dir),
            layout=layout,
        )
