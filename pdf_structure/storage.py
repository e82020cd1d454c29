"""
Result persistence for the service layer.

Saved results live outside the image directory:

    <data_dir>/<document_id>/extraction/<document_id>_<utc timestamp>.json

Every save gets its own file; repeated saves of one document never
overwrite each other.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from .models import DocumentResult

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S_%f"


@dataclass
class ResultPaths:
    document_id: str
    extraction_dir: Path
    extraction_file: Path


class ResultStorage:
    def __init__(self, data_dir: str):
        self.data_dir = Path(data_dir)

    def build_paths(self, source_file: str) -> ResultPaths:
        """Pick a result file for ``source_file`` that does not exist yet."""
        document_id = Path(source_file).stem
        extraction_dir = self.data_dir / document_id / "extraction"
        extraction_dir.mkdir(parents=True, exist_ok=True)

        stem = f"{document_id}_{datetime.now(timezone.utc).strftime(TIMESTAMP_FORMAT)}"
        extraction_file = extraction_dir / f"{stem}.json"
        suffix = 1
        while extraction_file.exists():
            extraction_file = extraction_dir / f"{stem}_{suffix}.json"
            suffix += 1

        return ResultPaths(
            document_id=document_id,
            extraction_dir=extraction_dir,
            extraction_file=extraction_file,
        )

    def save(self, result: DocumentResult) -> ResultPaths:
        paths = self.build_paths(result.source_file)
        result.save(str(paths.extraction_file))
        return paths

