"""Entry points for processing exam notices.

Upload handlers, routes and the CLI call these functions only. The model is
passed in explicitly; each call is an independent run that shares nothing
with other runs.
"""

import logging

from .chunking import chunk_document
from .summarize import extraction
from .summarize.batch import summarize_chunks
from .summarize.client import Deadline, SummaryModel, remaining_time
from .summarize.composer import compose_smart_summary
from .summarize.schema import (
    CargoAnalysisResult,
    ConteudoProgramatico,
    GeneratedChunk,
    RawDocument,
    SmartSummary,
)

logger = logging.getLogger(__name__)


def _deadline(timeout: float | None) -> Deadline | None:
    return Deadline(timeout) if timeout is not None else None


def process_document(
    raw_text: str,
    file_name: str,
    file_type: str,
    exam_name: str,
    *,
    model: SummaryModel,
    timeout: float | None = None,
) -> SmartSummary:
    """
    Chunk a notice by its titles and summarize every section.

    Model failures degrade individual batches or the overall summary to local
    fallbacks; this function always returns a complete SmartSummary.

    Args:
        raw_text: Full document text
        file_name: Name of the uploaded file, used as the document name
        file_type: File type of the upload (e.g. "pdf")
        exam_name: Name of the exam the notice belongs to
        model: Model adapter used for every call of this run
        timeout: Optional time budget in seconds for the whole run
    """
    document = RawDocument(
        content=raw_text, file_name=file_name, file_type=file_type, exam_name=exam_name
    )
    deadline = _deadline(timeout)

    chunks = chunk_document(document.content)
    logger.info("Chunked %s into %d sections", document.file_name, len(chunks))

    items = summarize_chunks(chunks, model, deadline=deadline)
    summary = compose_smart_summary(items, document.file_name, model, deadline)

    logger.info("Generated summary for %s with %d sections", file_name, summary.total_sections)
    return summary


def analyze_cargos(
    raw_text: str,
    file_name: str,
    exam_name: str,
    *,
    model: SummaryModel,
    timeout: float | None = None,
) -> CargoAnalysisResult:
    """
    Determine the cargos a notice offers.

    Raises:
        ModelError: If the model call fails or its reply is unusable
    """
    document = RawDocument(content=raw_text, file_name=file_name, file_type="", exam_name=exam_name)
    return extraction.analyze_cargos(document, model, _deadline(timeout))


def extract_curriculum(
    raw_text: str,
    cargo_name: str,
    exam_name: str,
    *,
    model: SummaryModel,
    timeout: float | None = None,
) -> ConteudoProgramatico:
    """
    Extract the curriculum for one cargo.

    Raises:
        ModelError: If the model call fails or its reply is unusable
    """
    document = RawDocument(content=raw_text, file_name="", file_type="", exam_name=exam_name)
    return extraction.extract_curriculum(document, cargo_name, model, _deadline(timeout))


def generate_intelligent_chunks(
    raw_text: str,
    file_name: str,
    file_type: str,
    exam_name: str,
    *,
    model: SummaryModel,
    max_chunks: int = 50,
    timeout: float | None = None,
) -> list[GeneratedChunk]:
    """
    Let the model cut the notice into titled chunks with summaries and keywords.

    Raises:
        ModelError: If the model call fails or its reply is unusable
    """
    document = RawDocument(
        content=raw_text, file_name=file_name, file_type=file_type, exam_name=exam_name
    )
    chunks = model.generate_chunks(
        document, max_chunks=max_chunks, timeout=remaining_time(_deadline(timeout))
    )
    logger.info("Model generated %d chunks for %s", len(chunks), file_name)
    return chunks
