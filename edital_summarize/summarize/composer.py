"""Overall document summary composed from section summaries."""

import logging
from datetime import datetime

from .client import Deadline, ModelError, SummaryModel, remaining_time
from .prompts import DIGEST_SUMMARY_CHARS
from .schema import SmartSummary, SummaryItem

logger = logging.getLogger(__name__)

PRINCIPAL_LEVEL = 2


def build_digest(items: list[SummaryItem]) -> str:
    """One line per principal section: title and the start of its summary."""
    return "\n".join(
        f"- {item.title}: {item.summary[:DIGEST_SUMMARY_CHARS]}..."
        for item in items
        if item.level <= PRINCIPAL_LEVEL
    )


def fallback_overall_summary(items: list[SummaryItem], document_name: str) -> str:
    return (
        f"Este documento contém {len(items)} seções organizadas hierarquicamente, "
        f"abordando diversos aspectos do edital {document_name}."
    )


def compose_overall_summary(
    items: list[SummaryItem],
    document_name: str,
    model: SummaryModel,
    deadline: Deadline | None = None,
) -> str:
    """Ask the model for an executive summary; never returns an empty string."""
    try:
        return model.summarize_overall(
            document_name, build_digest(items), timeout=remaining_time(deadline)
        )
    except ModelError as e:
        logger.warning("Overall summary fell back to the template: %s", e)
        return fallback_overall_summary(items, document_name)


def compose_smart_summary(
    items: list[SummaryItem],
    document_name: str,
    model: SummaryModel,
    deadline: Deadline | None = None,
) -> SmartSummary:
    return SmartSummary(
        document_name=document_name,
        overall_summary=compose_overall_summary(items, document_name, model, deadline),
        total_sections=len(items),
        summary_items=items,
        generated_at=datetime.now(),
    )
