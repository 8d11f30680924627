"""Chunking and summarization of exam notices."""

__version__ = "0.1.0"
