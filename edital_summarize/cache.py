"""Caching utilities for document analysis results."""

import hashlib
import json
import re
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .summarize.schema import CargoAnalysisResult, ConteudoProgramatico, SmartSummary

SUMMARY = "summary"
CARGOS = "cargos"


def get_cache_key(text: str, *context: str) -> str:
    """
    Generate cache key from document content.

    Context values (file name, exam name, model) that shape the prompt or the
    stored result are part of the key, so the same text under another name or
    model is cached separately.
    """
    payload = "\x1f".join((text, *context))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:16]


def get_cache_dir() -> Path:
    """Get the cache directory path."""
    cache_dir = Path.home() / ".cache" / "edital-summarize"
    cache_dir.mkdir(parents=True, exist_ok=True)
    return cache_dir


def curriculum_cache_type(cargo_name: str) -> str:
    """Cache type for one cargo's curriculum, safe to use in a file name."""
    slug = re.sub(r"[^\w]+", "-", cargo_name.casefold()).strip("-")
    return f"curriculum-{slug}"


def _get_cache_path(cache_key: str, cache_type: str) -> Path:
    """Get path to cache file."""
    return get_cache_dir() / f"{cache_key}_{cache_type}.json"


def load_cached(cache_key: str, cache_type: str) -> dict[str, Any] | None:
    """Load cached data if it exists."""
    cache_file = _get_cache_path(cache_key, cache_type)
    if cache_file.exists():
        try:
            return json.loads(cache_file.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            return None
    return None


def save_to_cache(cache_key: str, cache_type: str, data: dict[str, Any]) -> None:
    """Save data to cache."""
    cache_file = _get_cache_path(cache_key, cache_type)
    cache_file.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")


def load_summary(cache_key: str) -> SmartSummary | None:
    """Load cached SmartSummary; stale or corrupt entries count as misses."""
    data = load_cached(cache_key, SUMMARY)
    if not data:
        return None
    try:
        return SmartSummary.model_validate(data)
    except ValidationError:
        return None


def save_summary(cache_key: str, summary: SmartSummary) -> None:
    save_to_cache(cache_key, SUMMARY, summary.model_dump(mode="json", by_alias=True))


def load_cargo_analysis(cache_key: str) -> CargoAnalysisResult | None:
    data = load_cached(cache_key, CARGOS)
    if not data:
        return None
    try:
        return CargoAnalysisResult.model_validate(data)
    except ValidationError:
        return None


def save_cargo_analysis(cache_key: str, result: CargoAnalysisResult) -> None:
    save_to_cache(cache_key, CARGOS, result.model_dump(mode="json", by_alias=True))


def load_curriculum(cache_key: str, cargo_name: str) -> ConteudoProgramatico | None:
    data = load_cached(cache_key, curriculum_cache_type(cargo_name))
    if not data:
        return None
    try:
        return ConteudoProgramatico.model_validate(data)
    except ValidationError:
        return None


def save_curriculum(cache_key: str, cargo_name: str, curriculum: ConteudoProgramatico) -> None:
    save_to_cache(
        cache_key,
        curriculum_cache_type(cargo_name),
        curriculum.model_dump(mode="json", by_alias=True),
    )


def clear_cache(cache_key: str | None = None) -> int:
    """
    Clear cache entries.

    Args:
        cache_key: If provided, clear only entries for this key.
                   If None, clear all cache.

    Returns:
        Number of files deleted
    """
    cache_dir = get_cache_dir()
    pattern = f"{cache_key}_*.json" if cache_key else "*.json"
    count = 0

    for cache_file in cache_dir.glob(pattern):
        cache_file.unlink()
        count += 1

    return count


def list_cached() -> list[dict[str, Any]]:
    """List cached documents, one entry per cache key."""
    cache_dir = get_cache_dir()
    entries: dict[str, dict[str, Any]] = {}

    for cache_file in sorted(cache_dir.glob("*_*.json")):
        cache_key, _, cache_type = cache_file.stem.partition("_")
        entry = entries.setdefault(
            cache_key,
            {"cache_key": cache_key, "document_name": "", "types": []},
        )
        entry["types"].append(cache_type)

        if cache_type == SUMMARY:
            try:
                data = json.loads(cache_file.read_text(encoding="utf-8"))
                entry["document_name"] = data.get("documentName", "")
            except json.JSONDecodeError:
                pass

    return list(entries.values())


def get_cache_stats() -> dict[str, Any]:
    """Get cache statistics."""
    cache_dir = get_cache_dir()

    files = list(cache_dir.glob("*.json"))
    summary_files = list(cache_dir.glob(f"*_{SUMMARY}.json"))
    cargo_files = list(cache_dir.glob(f"*_{CARGOS}.json"))
    curriculum_files = list(cache_dir.glob("*_curriculum-*.json"))

    return {
        "cache_dir": str(cache_dir),
        "summary_count": len(summary_files),
        "cargo_count": len(cargo_files),
        "curriculum_count": len(curriculum_files),
        "total_size_kb": sum(f.stat().st_size for f in files) / 1024,
    }
