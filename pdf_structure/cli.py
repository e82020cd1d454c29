#!/usr/bin/env python3
"""
PDF Structure CLI

Extracts reading-ordered text lines and images with related text from PDFs.

Usage:
    pdf-structure extract input.pdf -o images/
    pdf-structure extract input.pdf -o images/ --json --save-result
    pdf-structure text input.pdf
    pdf-structure serve --port 8001

Environment (optional, also read from a .env file):
    PDF_STRUCTURE_DATA_DIR: Directory for saved result JSON files
    PDF_STRUCTURE_LINE_TOLERANCE: Line band tolerance in points
    PDF_STRUCTURE_WORD_GAP_RATIO: Word gap threshold relative to glyph width
    PDF_STRUCTURE_RELATED_TEXT_ORDER: "reading" or "distance"
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import uvicorn
from dotenv import load_dotenv

from .app import create_app
from .config import ExtractorConfig
from .exceptions import ExtractionError
from .logging_config import setup_logging
from .models import DocumentResult, RelatedTextOrder
from .service import ExtractionService

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pdf-structure",
        description="Extract text lines and images with related text from PDF documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s extract document.pdf -o images/
  %(prog)s extract document.pdf -o images/ --json
  %(prog)s text document.pdf
        """
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show debug output"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    extract = subparsers.add_parser("extract", help="Extract text lines and images")
    extract.add_argument("pdf_path", type=Path, help="Path to the PDF file")
    extract.add_argument(
        "-o", "--output",
        type=Path,
        default=Path("images"),
        help="Image output directory, created if missing (default: images)"
    )
    extract.add_argument(
        "--related-order",
        choices=[order.value for order in RelatedTextOrder],
        default=None,
        help="Order of related text lines (default: reading)"
    )
    extract.add_argument(
        "--save-result",
        action="store_true",
        help="Also save the result as JSON under the data directory"
    )
    extract.add_argument(
        "--json",
        action="store_true",
        help="Print the result payload as JSON"
    )

    text = subparsers.add_parser("text", help="Extract flattened text per page")
    text.add_argument("pdf_path", type=Path, help="Path to the PDF file")
    text.add_argument(
        "--json",
        action="store_true",
        help="Print the pages as a JSON list"
    )

    serve = subparsers.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--host", default="0.0.0.0", help="Server host")
    serve.add_argument("--port", type=int, default=8001, help="Server port")

    return parser


def print_summary(result: DocumentResult) -> None:
    """Print a per-page summary of a full extraction."""
    print(f"\n{result.source_file}: {len(result.pages)} pages, {result.total_images} images")
    for page in result.pages:
        print(f"\nPage {page.page_number} ({len(page.page_text_lines)} lines)")
        for image in page.page_images:
            related = " | ".join(image.related_text) or "-"
            print(f"  {image.filename} ({image.file_size_bytes} bytes): {related}")
    for diagnostic in result.diagnostics:
        print(f"  ! page {diagnostic.page_number}: {diagnostic.message}")


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    load_dotenv()
    args = build_parser().parse_args(argv)

    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO, stream=sys.stderr)

    config = ExtractorConfig.from_env()
    if getattr(args, "related_order", None):
        config.layout = config.layout.model_copy(
            update={"related_text_order": RelatedTextOrder(args.related_order)}
        )
    if args.command == "serve":
        uvicorn.run(create_app(config), host=args.host, port=args.port)
        return 0

    service = ExtractionService(config=config)

    try:
        if args.command == "extract":
            args.output.mkdir(parents=True, exist_ok=True)
            if args.save_result:
                result, _, output_path = service.extract_and_save(str(args.pdf_path), args.output)
                logger.info(f"Result saved to {output_path}")
            else:
                result = service.extract(str(args.pdf_path), args.output)

            if args.json:
                print(json.dumps(result.to_payload(), ensure_ascii=False, indent=2))
            else:
                print_summary(result)
        else:
            text_result = service.extract_text(str(args.pdf_path))
            if args.json:
                print(json.dumps(text_result.pages, ensure_ascii=False, indent=2))
            else:
                for page_number, text in zip(text_result.page_numbers, text_result.pages):
                    print(f"--- Page {page_number} ---\n{text}")
    except ExtractionError as e:
        logger.error(str(e))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
