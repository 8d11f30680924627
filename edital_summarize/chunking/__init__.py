"""Document chunking modules."""

from .titles import StructuralError, chunk_document, detect_heading, generate_summary_preview

__all__ = ["StructuralError", "chunk_document", "detect_heading", "generate_summary_preview"]
