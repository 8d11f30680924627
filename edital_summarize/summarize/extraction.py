"""Cargo analysis and curriculum extraction.

Neither task has a local fallback: a failed model call propagates as
ModelError so the caller can report it instead of showing a guess.
"""

import logging

from .client import (
    CargoAnalysisRequest,
    CurriculumRequest,
    Deadline,
    SummaryModel,
    remaining_time,
)
from .schema import CargoAnalysisResult, ConteudoProgramatico, RawDocument

logger = logging.getLogger(__name__)


def analyze_cargos(
    document: RawDocument,
    model: SummaryModel,
    deadline: Deadline | None = None,
) -> CargoAnalysisResult:
    """Find out whether the notice offers one or several cargos."""
    logger.info("Analyzing cargos for %s", document.file_name)
    request = CargoAnalysisRequest(
        content=document.content,
        file_name=document.file_name,
        exam_name=document.exam_name,
    )
    result = model.analyze_cargos(request, timeout=remaining_time(deadline))
    logger.info(
        "Cargo analysis for %s: %s",
        document.file_name,
        "single cargo" if result.has_single_cargo else f"{result.total_cargos} cargos",
    )
    return result


def extract_curriculum(
    document: RawDocument,
    cargo_name: str,
    model: SummaryModel,
    deadline: Deadline | None = None,
) -> ConteudoProgramatico:
    """Extract the subjects and topics required for one cargo."""
    if not cargo_name.strip():
        raise ValueError("cargo_name must not be empty")

    logger.info("Extracting curriculum for cargo %r", cargo_name)
    request = CurriculumRequest(
        content=document.content,
        cargo_name=cargo_name,
        exam_name=document.exam_name,
    )
    result = model.extract_curriculum(request, timeout=remaining_time(deadline))
    logger.info("Extracted %d disciplinas for %r", len(result.disciplinas), cargo_name)
    return result
