"""Tests for caching utilities."""

from datetime import datetime
from pathlib import Path

import pytest

from edital_summarize.cache import (
    clear_cache,
    curriculum_cache_type,
    get_cache_dir,
    get_cache_key,
    get_cache_stats,
    list_cached,
    load_cargo_analysis,
    load_curriculum,
    load_summary,
    save_cargo_analysis,
    save_curriculum,
    save_summary,
)
from edital_summarize.summarize.schema import (
    CargoAnalysisResult,
    ConteudoProgramatico,
    Disciplina,
    SmartSummary,
    SummaryItem,
)


@pytest.fixture(autouse=True)
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Use a temp dir as HOME so the cache lives there."""
    monkeypatch.setenv("HOME", str(tmp_path))
    return tmp_path


def _summary(name: str = "edital.pdf") -> SmartSummary:
    return SmartSummary(
        document_name=name,
        overall_summary="Resumo geral.",
        total_sections=1,
        summary_items=[
            SummaryItem(
                id="summary_chunk_0",
                title="Das Inscrições",
                level=1,
                summary="Inscrições pela internet.",
                key_points=["internet"],
                importance="high",
                original_chunk_id="chunk_0",
            )
        ],
        generated_at=datetime(2024, 3, 1, 12, 0),
    )


def _cargos() -> CargoAnalysisResult:
    return CargoAnalysisResult(
        has_single_cargo=False, cargos=["Analista", "Técnico"], total_cargos=2
    )


class TestCacheKeys:
    """Tests for cache key generation."""

    def test_content_cache_key(self) -> None:
        key = get_cache_key("Edital nº 1")
        assert len(key) == 16  # SHA256 truncated to 16 chars
        assert key.isalnum()

    def test_key_changes_with_content(self) -> None:
        assert get_cache_key("Content A") != get_cache_key("Content B")

    def test_key_stable(self) -> None:
        assert get_cache_key("Edital") == get_cache_key("Edital")

    def test_context_changes_key(self) -> None:
        base = get_cache_key("Edital", "a.pdf", "TRT", "deepseek/deepseek-r1")
        assert base != get_cache_key("Edital", "b.pdf", "TRT", "deepseek/deepseek-r1")
        assert base != get_cache_key("Edital", "a.pdf", "TRF", "deepseek/deepseek-r1")
        assert base != get_cache_key("Edital", "a.pdf", "TRT", "openai/gpt-4o")
        assert base == get_cache_key("Edital", "a.pdf", "TRT", "deepseek/deepseek-r1")

    def test_curriculum_type(self) -> None:
        assert curriculum_cache_type("Analista Judiciário / TI") == "curriculum-analista-judiciário-ti"

    def test_cache_dir_under_home(self, home: Path) -> None:
        assert get_cache_dir() == home / ".cache" / "edital-summarize"


class TestSummaryCache:
    """Tests for summary caching."""

    def test_save_and_load(self) -> None:
        save_summary("abc123", _summary())

        loaded = load_summary("abc123")
        assert loaded == _summary()

    def test_stored_with_camel_case_keys(self) -> None:
        save_summary("abc123", _summary())
        text = (get_cache_dir() / "abc123_summary.json").read_text(encoding="utf-8")
        assert '"documentName"' in text
        assert '"summaryItems"' in text

    def test_load_missing(self) -> None:
        assert load_summary("nonexistent") is None

    def test_corrupt_entry_is_a_miss(self) -> None:
        (get_cache_dir() / "abc123_summary.json").write_text("{not json", encoding="utf-8")
        assert load_summary("abc123") is None

    def test_stale_entry_is_a_miss(self) -> None:
        (get_cache_dir() / "abc123_summary.json").write_text('{"title": "x"}', encoding="utf-8")
        assert load_summary("abc123") is None


class TestAnalysisCache:
    """Tests for cargo and curriculum caching."""

    def test_cargo_analysis(self) -> None:
        save_cargo_analysis("abc123", _cargos())
        assert load_cargo_analysis("abc123") == _cargos()

    def test_curriculum_per_cargo(self) -> None:
        curriculum = ConteudoProgramatico(
            cargo="Analista",
            disciplinas=[Disciplina(nome="Português", topicos=["Crase"])],
        )
        save_curriculum("abc123", "Analista", curriculum)

        assert load_curriculum("abc123", "Analista") == curriculum
        assert load_curriculum("abc123", "Técnico") is None


class TestClearCache:
    """Tests for cache clearing."""

    def test_clear_specific_key(self) -> None:
        save_summary("key1", _summary())
        save_cargo_analysis("key1", _cargos())
        save_summary("key2", _summary())

        count = clear_cache("key1")
        assert count == 2

        assert load_summary("key1") is None
        assert load_summary("key2") is not None

    def test_clear_all(self) -> None:
        save_summary("key1", _summary())
        save_summary("key2", _summary())

        assert clear_cache() == 2
        assert load_summary("key1") is None
        assert load_summary("key2") is None


class TestCacheStats:
    """Tests for cache statistics."""

    def test_get_stats(self) -> None:
        save_summary("key1", _summary())
        save_cargo_analysis("key1", _cargos())
        save_curriculum("key1", "Analista", ConteudoProgramatico(cargo="Analista", disciplinas=[]))

        stats = get_cache_stats()
        assert stats["summary_count"] == 1
        assert stats["cargo_count"] == 1
        assert stats["curriculum_count"] == 1
        assert stats["total_size_kb"] > 0


class TestListCached:
    """Tests for listing cached entries."""

    def test_list_entries(self) -> None:
        save_summary("key1", _summary("edital-trt.pdf"))
        save_cargo_analysis("key1", _cargos())
        save_cargo_analysis("key2", _cargos())

        entries = list_cached()
        assert len(entries) == 2

        first = next(e for e in entries if e["cache_key"] == "key1")
        assert first["document_name"] == "edital-trt.pdf"
        assert sorted(first["types"]) == ["cargos", "summary"]

        second = next(e for e in entries if e["cache_key"] == "key2")
        assert second["document_name"] == ""
        assert second["types"] == ["cargos"]

    def test_empty(self) -> None:
        assert list_cached() == []
