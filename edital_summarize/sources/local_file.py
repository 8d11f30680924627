"""Local notice loading."""

import logging
from pathlib import Path

import fitz  # PyMuPDF

from ..summarize.schema import RawDocument

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = {".txt", ".md", ".pdf"}


class DocumentLoadError(Exception):
    """Raised when a document cannot be read."""


def extract_pdf_text(file_path: Path) -> str:
    """Extract text from a PDF page by page, pages separated by a newline."""
    try:
        doc = fitz.open(file_path)
    except Exception as e:
        raise DocumentLoadError(f"Failed to open PDF {file_path}: {e}") from e

    try:
        pages = [page.get_text() or "" for page in doc]
    finally:
        doc.close()

    logger.debug("Extracted %d pages from %s", len(pages), file_path)
    return "\n".join(page.rstrip("\n") for page in pages)


def load_document(file_path: Path, exam_name: str | None = None) -> RawDocument:
    """Load a notice from a .txt, .md or .pdf file."""
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    suffix = file_path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ValueError(
            f"Unsupported file type: {file_path.suffix}. "
            f"Supported: {', '.join(sorted(SUPPORTED_SUFFIXES))}"
        )

    if suffix == ".pdf":
        text = extract_pdf_text(file_path)
    else:
        text = file_path.read_text(encoding="utf-8")

    return RawDocument(
        content=text,
        file_name=file_path.name,
        file_type=suffix.lstrip("."),
        exam_name=exam_name or file_path.stem,
    )
