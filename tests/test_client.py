"""Tests for the model client adapter."""

import json
from unittest.mock import MagicMock

import pytest
from openai import OpenAIError

from edital_summarize.summarize.client import (
    CargoAnalysisRequest,
    CurriculumRequest,
    ModelClient,
    ModelError,
    ModelSettings,
    ParseFailure,
    RequestFailure,
    extract_json_object,
)
from edital_summarize.summarize.schema import RawDocument, TitleChunk


def _response(content: str | None) -> MagicMock:
    response = MagicMock()
    response.choices = [MagicMock(message=MagicMock(content=content))]
    return response


def _client(*contents: str | None) -> tuple[ModelClient, MagicMock]:
    openai_client = MagicMock()
    openai_client.chat.completions.create.side_effect = [_response(c) for c in contents]
    return ModelClient(openai_client, model="test-model"), openai_client


def _chunk(index: int, content: str = "Conteúdo da seção.") -> TitleChunk:
    return TitleChunk(id=f"chunk_{index}", title=f"Seção {index}", content=content, level=1)


def _summaries(*importances: str) -> str:
    return json.dumps(
        {
            "summaries": [
                {
                    "section": i + 1,
                    "summary": f"Resumo {i + 1}",
                    "keyPoints": ["ponto"],
                    "importance": importance,
                }
                for i, importance in enumerate(importances)
            ]
        }
    )


class TestExtractJsonObject:
    """Tests for JSON extraction from free-form replies."""

    def test_plain_json(self) -> None:
        assert extract_json_object('{"a": 1}') == {"a": 1}

    def test_surrounding_prose(self) -> None:
        text = 'Claro! Aqui está o resultado:\n{"a": {"b": [1, 2]}}\nEspero ter ajudado.'
        assert extract_json_object(text) == {"a": {"b": [1, 2]}}

    def test_code_fence(self) -> None:
        text = '```json\n{"a": "x"}\n```'
        assert extract_json_object(text) == {"a": "x"}

    def test_braces_inside_strings(self) -> None:
        assert extract_json_object('{"a": "texto com } chave"}') == {"a": "texto com } chave"}

    def test_skips_unbalanced_candidates(self) -> None:
        text = 'Use {chaves} assim: {"a": 1}'
        assert extract_json_object(text) == {"a": 1}

    def test_ignores_reasoning_block(self) -> None:
        text = '<think>talvez {"a": 0}</think>{"a": 2}'
        assert extract_json_object(text) == {"a": 2}

    def test_first_object_wins(self) -> None:
        assert extract_json_object('{"a": 1} {"a": 2}') == {"a": 1}

    def test_no_json(self) -> None:
        with pytest.raises(ParseFailure):
            extract_json_object("Não consegui analisar o documento.")


class TestModelSettings:
    """Tests for environment configuration."""

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENROUTER_API_KEY", "sk-or-test")
        monkeypatch.setenv("EDITAL_SUMMARIZE_MODEL", "deepseek/deepseek-chat")
        monkeypatch.delenv("OPENROUTER_BASE_URL", raising=False)

        settings = ModelSettings.from_env()
        assert settings.api_key == "sk-or-test"
        assert settings.model == "deepseek/deepseek-chat"
        assert settings.base_url == "https://openrouter.ai/api/v1"

    def test_explicit_model_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EDITAL_SUMMARIZE_MODEL", "deepseek/deepseek-chat")
        assert ModelSettings.from_env("openai/gpt-4o").model == "openai/gpt-4o"

    def test_missing_api_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)

        with pytest.raises(ModelError, match="OPENROUTER_API_KEY"):
            ModelClient.from_env()

    def test_client_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENROUTER_API_KEY", "sk-or-test")
        client = ModelClient.from_env("deepseek/deepseek-r1")
        assert client.model == "deepseek/deepseek-r1"


class TestRequests:
    """Tests for request construction and transport errors."""

    def test_single_request_without_retry(self) -> None:
        openai_client = MagicMock()
        openai_client.chat.completions.create.side_effect = OpenAIError("connection reset")
        client = ModelClient(openai_client)

        with pytest.raises(RequestFailure):
            client.summarize_batch([_chunk(0)])
        assert openai_client.chat.completions.create.call_count == 1

    def test_timeout_is_forwarded(self) -> None:
        client, openai_client = _client(_summaries("high"))
        client.summarize_batch([_chunk(0)], timeout=12.5)

        assert openai_client.chat.completions.create.call_args.kwargs["timeout"] == 12.5

    def test_no_timeout_by_default(self) -> None:
        client, openai_client = _client(_summaries("high"))
        client.summarize_batch([_chunk(0)])

        assert "timeout" not in openai_client.chat.completions.create.call_args.kwargs

    def test_exhausted_deadline_skips_request(self) -> None:
        client, openai_client = _client(_summaries("high"))

        with pytest.raises(RequestFailure, match="deadline"):
            client.summarize_batch([_chunk(0)], timeout=0)
        openai_client.chat.completions.create.assert_not_called()

    def test_empty_reply(self) -> None:
        client, _ = _client("")
        with pytest.raises(ParseFailure):
            client.summarize_batch([_chunk(0)])


class TestSummarizeBatch:
    """Tests for batch summarization requests."""

    def test_parses_summaries(self) -> None:
        client, _ = _client("Segue o JSON:\n" + _summaries("high", "LOW"))
        sections = client.summarize_batch([_chunk(0), _chunk(1)])

        assert [s.summary for s in sections] == ["Resumo 1", "Resumo 2"]
        assert [s.importance for s in sections] == ["high", "low"]
        assert sections[0].key_points == ["ponto"]

    def test_request_settings(self) -> None:
        client, openai_client = _client(_summaries("medium"))
        client.summarize_batch([_chunk(0)])

        kwargs = openai_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["max_tokens"] == 2000
        assert kwargs["temperature"] == 0.3
        assert kwargs["messages"][0]["role"] == "system"

    def test_prompt_labels_and_truncates_chunks(self) -> None:
        client, openai_client = _client(_summaries("medium", "medium"))
        client.summarize_batch([_chunk(0, "x" * 1500), _chunk(1, "curto")])

        prompt = openai_client.chat.completions.create.call_args.kwargs["messages"][1]["content"]
        assert "=== SEÇÃO 1: Seção 0 ===" in prompt
        assert "=== SEÇÃO 2: Seção 1 ===" in prompt
        assert "x" * 1000 + "..." in prompt
        assert "x" * 1001 not in prompt

    def test_free_text_importance_fails(self) -> None:
        client, _ = _client(_summaries("crítica"))
        with pytest.raises(ParseFailure):
            client.summarize_batch([_chunk(0)])

    def test_missing_key_points_fails(self) -> None:
        reply = json.dumps({"summaries": [{"summary": "Resumo", "importance": "high"}]})
        client, _ = _client(reply)
        with pytest.raises(ParseFailure):
            client.summarize_batch([_chunk(0)])

    def test_one_bad_entry_fails_whole_reply(self) -> None:
        reply = json.loads(_summaries("high", "low"))
        reply["summaries"][1]["keyPoints"] = "não é lista"
        client, _ = _client(json.dumps(reply))
        with pytest.raises(ParseFailure):
            client.summarize_batch([_chunk(0), _chunk(1)])


class TestAnalyzeCargos:
    """Tests for cargo analysis requests."""

    request = CargoAnalysisRequest(content="Edital", file_name="edital.pdf", exam_name="TRT")

    def test_multiple_cargos(self) -> None:
        reply = {
            "hasSingleCargo": False,
            "cargos": ["Analista Judiciário", "Técnico Judiciário"],
            "totalCargos": 2,
            "explicacao": "Dois cargos no quadro de vagas.",
        }
        client, _ = _client(json.dumps(reply))
        result = client.analyze_cargos(self.request)

        assert result.has_single_cargo is False
        assert result.total_cargos == 2
        assert result.cargos == ["Analista Judiciário", "Técnico Judiciário"]
        assert result.cargo_name is None
        assert result.explanation == "Dois cargos no quadro de vagas."

    def test_single_cargo(self) -> None:
        reply = {"hasSingleCargo": True, "cargoName": "Auditor Fiscal", "totalCargos": 1}
        client, _ = _client(json.dumps(reply))
        result = client.analyze_cargos(self.request)

        assert result.has_single_cargo is True
        assert result.cargo_name == "Auditor Fiscal"
        assert result.cargos is None
        assert result.total_cargos == 1

    def test_single_cargo_named_in_list(self) -> None:
        reply = {"hasSingleCargo": True, "cargos": ["Auditor Fiscal"]}
        client, _ = _client(json.dumps(reply))
        result = client.analyze_cargos(self.request)

        assert result.cargo_name == "Auditor Fiscal"
        assert result.cargos is None

    def test_total_follows_distinct_names(self) -> None:
        reply = {
            "hasSingleCargo": False,
            "cargos": ["Analista", "Técnico", "analista"],
            "totalCargos": 5,
        }
        client, _ = _client(json.dumps(reply))
        result = client.analyze_cargos(self.request)

        assert result.cargos == ["Analista", "Técnico"]
        assert result.total_cargos == 2

    def test_inconsistent_single_cargo_fails(self) -> None:
        reply = {"hasSingleCargo": True, "cargos": ["Analista", "Técnico"]}
        client, _ = _client(json.dumps(reply))
        with pytest.raises(ParseFailure):
            client.analyze_cargos(self.request)

    def test_multiple_without_names_fails(self) -> None:
        client, _ = _client(json.dumps({"hasSingleCargo": False, "totalCargos": 3}))
        with pytest.raises(ParseFailure):
            client.analyze_cargos(self.request)

    def test_string_boolean_fails(self) -> None:
        reply = {"hasSingleCargo": "false", "cargos": ["Analista", "Técnico"]}
        client, _ = _client(json.dumps(reply))
        with pytest.raises(ParseFailure):
            client.analyze_cargos(self.request)

    def test_missing_flag_fails(self) -> None:
        client, _ = _client(json.dumps({"cargos": ["Analista", "Técnico"]}))
        with pytest.raises(ParseFailure):
            client.analyze_cargos(self.request)

    def test_prompt_truncated_to_prefix(self) -> None:
        reply = {"hasSingleCargo": True, "cargoName": "Auditor"}
        client, openai_client = _client(json.dumps(reply))
        client.analyze_cargos(CargoAnalysisRequest("a" * 5000, "edital.pdf", "Receita"))

        kwargs = openai_client.chat.completions.create.call_args.kwargs
        prompt = kwargs["messages"][1]["content"]
        assert "a" * 4000 + "..." in prompt
        assert "a" * 4001 not in prompt
        assert kwargs["max_tokens"] == 1000
        assert kwargs["temperature"] == 0.1

    def test_same_input_same_answer(self) -> None:
        reply = json.dumps({"hasSingleCargo": False, "cargos": ["Analista", "Técnico"]})
        client, _ = _client(reply, reply)

        first = client.analyze_cargos(self.request)
        second = client.analyze_cargos(self.request)
        assert first.has_single_cargo == second.has_single_cargo


class TestExtractCurriculum:
    """Tests for curriculum extraction requests."""

    def test_parses_disciplinas(self) -> None:
        reply = {
            "cargo": "Analista Judiciário",
            "disciplinas": [
                {"nome": "Língua Portuguesa", "topicos": ["Ortografia", "Crase"]},
                {"nome": "Direito Constitucional", "topicos": ["Direitos fundamentais"]},
            ],
        }
        client, _ = _client(json.dumps(reply))
        result = client.extract_curriculum(
            CurriculumRequest("Edital", "Analista Judiciário", "TRT")
        )

        assert result.cargo == "Analista Judiciário"
        assert [d.nome for d in result.disciplinas] == [
            "Língua Portuguesa",
            "Direito Constitucional",
        ]
        assert result.disciplinas[0].topicos == ["Ortografia", "Crase"]

    def test_request_settings(self) -> None:
        reply = {"cargo": "Analista", "disciplinas": []}
        client, openai_client = _client(json.dumps(reply))
        client.extract_curriculum(CurriculumRequest("b" * 7000, "Analista", "TRT"))

        kwargs = openai_client.chat.completions.create.call_args.kwargs
        prompt = kwargs["messages"][1]["content"]
        assert '"Analista"' in prompt
        assert "b" * 6000 + "..." in prompt
        assert "b" * 6001 not in prompt
        assert kwargs["max_tokens"] == 3000

    def test_missing_disciplinas_fails(self) -> None:
        client, _ = _client(json.dumps({"cargo": "Analista"}))
        with pytest.raises(ParseFailure):
            client.extract_curriculum(CurriculumRequest("Edital", "Analista", "TRT"))

    def test_topics_must_be_strings(self) -> None:
        reply = {"cargo": "Analista", "disciplinas": [{"nome": "Português", "topicos": [1, 2]}]}
        client, _ = _client(json.dumps(reply))
        with pytest.raises(ParseFailure):
            client.extract_curriculum(CurriculumRequest("Edital", "Analista", "TRT"))


class TestSummarizeOverall:
    """Tests for overall summary requests."""

    def test_returns_text(self) -> None:
        client, openai_client = _client("  O edital regula o concurso do TRT.  ")
        text = client.summarize_overall("edital.pdf", "- Seção: resumo...")

        assert text == "O edital regula o concurso do TRT."
        kwargs = openai_client.chat.completions.create.call_args.kwargs
        assert kwargs["max_tokens"] == 300
        assert "- Seção: resumo..." in kwargs["messages"][1]["content"]

    def test_strips_reasoning(self) -> None:
        client, _ = _client("<think>vou resumir</think>\nResumo final.")
        assert client.summarize_overall("doc", "- a: b...") == "Resumo final."

    def test_only_reasoning_fails(self) -> None:
        client, _ = _client("<think>vou resumir</think>")
        with pytest.raises(ParseFailure):
            client.summarize_overall("doc", "- a: b...")


class TestGenerateChunks:
    """Tests for model-driven chunk generation."""

    document = RawDocument(
        content="Conteúdo do edital", file_name="edital.pdf", file_type="pdf", exam_name="TRT"
    )

    def test_parses_chunks(self) -> None:
        reply = {
            "chunks": [
                {
                    "id": "chunk_001",
                    "content": "Cargos e vagas",
                    "title": "Cargos",
                    "summary": "Lista de cargos",
                    "keywords": ["cargo", "vaga"],
                },
                {
                    "id": "chunk_002",
                    "content": "Datas",
                    "title": "Cronograma",
                    "summary": "Datas do concurso",
                    "keywords": ["data"],
                    "chunkIndex": 7,
                },
            ],
            "totalChunks": 2,
        }
        client, openai_client = _client(json.dumps(reply))
        chunks = client.generate_chunks(self.document, max_chunks=10)

        assert [c.title for c in chunks] == ["Cargos", "Cronograma"]
        assert [c.chunk_index for c in chunks] == [0, 7]
        kwargs = openai_client.chat.completions.create.call_args.kwargs
        assert kwargs["max_tokens"] == 4000
        assert "no máximo 10 chunks" in kwargs["messages"][1]["content"]

    def test_missing_chunks_fails(self) -> None:
        client, _ = _client(json.dumps({"totalChunks": 0}))
        with pytest.raises(ParseFailure):
            client.generate_chunks(self.document)
