"""Source modules for loading notices."""

from .local_file import DocumentLoadError, extract_pdf_text, load_document

__all__ = ["DocumentLoadError", "extract_pdf_text", "load_document"]
