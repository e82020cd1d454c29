from pathlib import Path
from typing import Optional, Callable

from .config import ExtractorConfig
from .extractor import DocumentExtractor
from .models import DocumentResult, TextResult
from .storage import ResultStorage


class ExtractionService:
    def __init__(self, config: ExtractorConfig | None = None):
        self.config = config or ExtractorConfig()
        self.extractor = DocumentExtractor(config=self.config.layout)
        self.storage = ResultStorage(self.config.data_dir)

    def extract(
        self,
        pdf_path: str,
        output_dir: str | Path,
        progress_callback: Optional[Callable[[int, int, str], None]] = None,
    ) -> DocumentResult:
        return self.extractor.extract_text_and_images(
            pdf_path, output_dir, progress_callback=progress_callback
        )

    def extract_text(self, pdf_path: str) -> TextResult:
        return self.extractor.extract_text(pdf_path)

    def extract_and_save(
        self,
        pdf_path: str,
        output_dir: str | Path,
        progress_callback: Optional[Callable[[int, int, str], None]] = None,
    ) -> tuple[DocumentResult, str, str]:
        result = self.extract(pdf_path, output_dir, progress_callback=progress_callback)
        paths = self.storage.save(result)
        return result, paths.document_id, str(paths.extraction_file)
