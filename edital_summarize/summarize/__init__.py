"""Summarization modules."""

from .batch import BATCH_SIZE, summarize_chunks
from .client import (
    Deadline,
    ModelClient,
    ModelError,
    ModelSettings,
    ParseFailure,
    RequestFailure,
    SummaryModel,
)
from .composer import compose_overall_summary, compose_smart_summary
from .extraction import analyze_cargos, extract_curriculum
from .render import render_curriculum_markdown, render_markdown
from .schema import (
    CargoAnalysisResult,
    ConteudoProgramatico,
    Disciplina,
    GeneratedChunk,
    RawDocument,
    SmartSummary,
    SummaryItem,
    TitleChunk,
)

__all__ = [
    "BATCH_SIZE",
    "CargoAnalysisResult",
    "ConteudoProgramatico",
    "Deadline",
    "Disciplina",
    "GeneratedChunk",
    "ModelClient",
    "ModelError",
    "ModelSettings",
    "ParseFailure",
    "RawDocument",
    "RequestFailure",
    "SmartSummary",
    "SummaryItem",
    "SummaryModel",
    "TitleChunk",
    "analyze_cargos",
    "compose_overall_summary",
    "compose_smart_summary",
    "extract_curriculum",
    "render_curriculum_markdown",
    "render_markdown",
    "summarize_chunks",
]
