"""Batched section summarization with a deterministic local fallback."""

import logging
import re
from collections import Counter

from .client import Deadline, ModelError, SummaryModel, remaining_time
from .schema import SectionSummary, SummaryItem, TitleChunk

logger = logging.getLogger(__name__)

BATCH_SIZE = 3
FALLBACK_SENTENCES = 2
FALLBACK_KEYWORDS = 5

STOP_WORDS = frozenset(
    """
    o a os as de da do das dos em no na nos nas para com por que se é foi são será
    pelo pela pelos pelas como mais este esta estes estas deste desta isso essa esse
    seus suas sobre entre quando também após cada serão deverá deverão poderá ser
    """.split()
)

_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_WORD = re.compile(r"\b[a-záàâãéêíóôõúüç]{4,}\b")


def first_sentences(content: str, count: int = FALLBACK_SENTENCES) -> str:
    """Return the first sentences of a text, skipping fragments of 10 chars or less."""
    sentences = [
        " ".join(s.split()) for s in _SENTENCE_SPLIT.split(content) if len(s.strip()) > 10
    ]
    if not sentences:
        return " ".join(content.split())[:200]
    return ". ".join(sentences[:count]) + "."


def top_keywords(content: str, limit: int = FALLBACK_KEYWORDS) -> list[str]:
    """Most frequent content words, ties kept in order of first appearance."""
    words = (w for w in _WORD.findall(content.lower()) if w not in STOP_WORDS)
    return [word for word, _ in Counter(words).most_common(limit)]


def fallback_item(chunk: TitleChunk) -> SummaryItem:
    """Summarize a chunk locally, without the model."""
    return SummaryItem(
        id=f"summary_{chunk.id}",
        title=chunk.title,
        level=chunk.level,
        summary=first_sentences(chunk.content) or chunk.title,
        key_points=top_keywords(chunk.content),
        importance="medium",
        parent_id=chunk.parent_id,
        original_chunk_id=chunk.id,
    )


def _to_item(chunk: TitleChunk, section: SectionSummary) -> SummaryItem:
    return SummaryItem(
        id=f"summary_{chunk.id}",
        title=chunk.title,
        level=chunk.level,
        summary=section.summary,
        key_points=list(section.key_points),
        importance=section.importance,
        parent_id=chunk.parent_id,
        original_chunk_id=chunk.id,
    )


def summarize_batch(
    batch: list[TitleChunk],
    model: SummaryModel,
    deadline: Deadline | None = None,
) -> list[SummaryItem]:
    """
    Summarize one batch with a single model call.

    Entries of the reply map to chunks by position. Positions the reply does
    not cover, or the whole batch when the call fails, are summarized locally.
    """
    try:
        sections = model.summarize_batch(batch, timeout=remaining_time(deadline))
    except ModelError as e:
        logger.warning("Batch of %d chunks fell back to local summaries: %s", len(batch), e)
        return [fallback_item(chunk) for chunk in batch]

    if len(sections) < len(batch):
        logger.warning(
            "Model returned %d summaries for %d chunks; filling the rest locally",
            len(sections),
            len(batch),
        )

    items = []
    for index, chunk in enumerate(batch):
        if index < len(sections):
            items.append(_to_item(chunk, sections[index]))
        else:
            items.append(fallback_item(chunk))
    return items


def summarize_chunks(
    chunks: list[TitleChunk],
    model: SummaryModel,
    batch_size: int = BATCH_SIZE,
    deadline: Deadline | None = None,
) -> list[SummaryItem]:
    """
    Produce one SummaryItem per chunk, in chunk order.

    Batches run one after another; a failed batch only degrades its own chunks.
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be positive, got {batch_size}")

    items: list[SummaryItem] = []
    total_batches = (len(chunks) + batch_size - 1) // batch_size

    for start in range(0, len(chunks), batch_size):
        batch = chunks[start : start + batch_size]
        logger.debug("Summarizing batch %d/%d", start // batch_size + 1, total_batches)
        items.extend(summarize_batch(batch, model, deadline))

    return items
