"""Adapter for the chat-completion model used by every analysis task."""

import json
import logging
import os
import re
import time
from dataclasses import dataclass
from typing import Any, Protocol

from openai import OpenAI, OpenAIError
from pydantic import BaseModel, ValidationError

from .prompts import (
    BATCH_SECTION,
    BATCH_SUMMARY_PROMPT,
    BATCH_SUMMARY_SYSTEM,
    CARGO_ANALYSIS_PROMPT,
    CARGO_ANALYSIS_SYSTEM,
    CARGO_CONTENT_CHARS,
    CHUNK_GENERATION_CHARS,
    CHUNK_GENERATION_PROMPT,
    CHUNK_GENERATION_SYSTEM,
    CHUNK_PREVIEW_CHARS,
    CURRICULUM_CONTENT_CHARS,
    CURRICULUM_PROMPT,
    CURRICULUM_SYSTEM,
    OVERALL_SUMMARY_PROMPT,
    OVERALL_SUMMARY_SYSTEM,
    truncate,
)
from .schema import (
    BatchSummaryReply,
    CargoAnalysisReply,
    CargoAnalysisResult,
    ChunkGenerationReply,
    ConteudoProgramatico,
    CurriculumReply,
    Disciplina,
    GeneratedChunk,
    RawDocument,
    SectionSummary,
    TitleChunk,
)

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "deepseek/deepseek-r1"
DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"

# Completion ceilings per task
CHUNK_GENERATION_MAX_TOKENS = 4000
CARGO_ANALYSIS_MAX_TOKENS = 1000
CURRICULUM_MAX_TOKENS = 3000
BATCH_SUMMARY_MAX_TOKENS = 2000
OVERALL_SUMMARY_MAX_TOKENS = 300

EXTRACTION_TEMPERATURE = 0.1
SUMMARY_TEMPERATURE = 0.3

_THINK_BLOCK = re.compile(r"<think>.*?</think>", re.DOTALL)


class ModelError(Exception):
    """Raised when a model call cannot produce a usable result."""


class RequestFailure(ModelError):
    """The request did not complete: network error, timeout or error status."""


class ParseFailure(ModelError):
    """The reply had no JSON object, or required fields were missing or mistyped."""


@dataclass
class ModelSettings:
    """Connection settings for the model endpoint."""

    api_key: str | None = None
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL

    @classmethod
    def from_env(cls, model: str | None = None) -> "ModelSettings":
        """Read settings from the environment; an explicit model wins."""
        return cls(
            api_key=os.environ.get("OPENROUTER_API_KEY") or os.environ.get("OPENAI_API_KEY"),
            base_url=os.environ.get("OPENROUTER_BASE_URL", DEFAULT_BASE_URL),
            model=model or os.environ.get("EDITAL_SUMMARIZE_MODEL", DEFAULT_MODEL),
        )


@dataclass
class CargoAnalysisRequest:
    content: str
    file_name: str
    exam_name: str


@dataclass
class CurriculumRequest:
    content: str
    cargo_name: str
    exam_name: str


class Deadline:
    """Time budget shared by the calls of one processing run."""

    def __init__(self, seconds: float) -> None:
        self._expires_at = time.monotonic() + seconds

    def remaining(self) -> float:
        return max(0.0, self._expires_at - time.monotonic())


def remaining_time(deadline: Deadline | None) -> float | None:
    """Per-request timeout for a call made under an optional deadline."""
    return deadline.remaining() if deadline is not None else None


class SummaryModel(Protocol):
    """Capability interface the pipeline depends on instead of a transport."""

    def summarize_batch(
        self, chunks: list[TitleChunk], timeout: float | None = None
    ) -> list[SectionSummary]: ...

    def analyze_cargos(
        self, request: CargoAnalysisRequest, timeout: float | None = None
    ) -> CargoAnalysisResult: ...

    def extract_curriculum(
        self, request: CurriculumRequest, timeout: float | None = None
    ) -> ConteudoProgramatico: ...

    def summarize_overall(
        self, document_name: str, digest: str, timeout: float | None = None
    ) -> str: ...

    def generate_chunks(
        self, document: RawDocument, max_chunks: int = 50, timeout: float | None = None
    ) -> list[GeneratedChunk]: ...


def strip_reasoning(text: str) -> str:
    """Drop <think> blocks emitted by reasoning models."""
    return _THINK_BLOCK.sub("", text)


def _strip_code_fence(text: str) -> str:
    """Remove markdown code fence from text."""
    text = text.strip()
    if text.startswith("```markdown"):
        text = text[11:]
    elif text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def extract_json_object(text: str) -> dict[str, Any]:
    """
    Return the first complete JSON object found in free-form model output.

    Raises:
        ParseFailure: If the text contains no JSON object
    """
    text = strip_reasoning(text)
    decoder = json.JSONDecoder()
    start = text.find("{")

    while start != -1:
        try:
            value, _ = decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            pass
        else:
            if isinstance(value, dict):
                return value
        start = text.find("{", start + 1)

    raise ParseFailure("response does not contain a JSON object")


def _parse_reply(text: str, reply_type: type[BaseModel]) -> Any:
    data = extract_json_object(text)
    try:
        return reply_type.model_validate(data)
    except ValidationError as e:
        raise ParseFailure(f"invalid {reply_type.__name__}: {e}") from e


def _unique(names: list[str]) -> list[str]:
    seen: set[str] = set()
    result = []
    for name in names:
        name = name.strip()
        key = name.casefold()
        if name and key not in seen:
            seen.add(key)
            result.append(name)
    return result


def _to_cargo_result(reply: CargoAnalysisReply) -> CargoAnalysisResult:
    """Build a consistent result from the reply, or fail the whole parse."""
    cargos = _unique(reply.cargos or [])
    cargo_name = (reply.cargo_name or "").strip()

    if reply.has_single_cargo:
        if not cargo_name and len(cargos) == 1:
            cargo_name = cargos[0]
        if not cargo_name or len(cargos) > 1:
            raise ParseFailure("single-cargo reply without exactly one cargo name")
        return CargoAnalysisResult(
            has_single_cargo=True,
            cargo_name=cargo_name,
            total_cargos=1,
            explanation=reply.explicacao,
        )

    if len(cargos) < 2:
        raise ParseFailure("multi-cargo reply must list at least two cargos")
    return CargoAnalysisResult(
        has_single_cargo=False,
        cargos=cargos,
        total_cargos=len(cargos),
        explanation=reply.explicacao,
    )


class ModelClient:
    """
    Single point of contact with the chat-completion endpoint.

    Each operation builds its prompt, sends exactly one request and either
    returns a fully validated result or raises ModelError. The client keeps
    no per-call state, so one instance can serve concurrent runs.
    """

    def __init__(self, client: OpenAI, model: str = DEFAULT_MODEL) -> None:
        self._client = client
        self.model = model

    @classmethod
    def from_settings(cls, settings: ModelSettings) -> "ModelClient":
        if not settings.api_key:
            raise ModelError(
                "OPENROUTER_API_KEY environment variable not set. "
                "Set it with: export OPENROUTER_API_KEY='sk-or-...'"
            )
        # Retries are the caller's decision; the SDK would otherwise retry silently.
        client = OpenAI(api_key=settings.api_key, base_url=settings.base_url, max_retries=0)
        return cls(client, model=settings.model)

    @classmethod
    def from_env(cls, model: str | None = None) -> "ModelClient":
        return cls.from_settings(ModelSettings.from_env(model))

    def _complete(
        self,
        system: str,
        user: str,
        max_tokens: int,
        temperature: float,
        timeout: float | None = None,
    ) -> str:
        """Send one chat completion request and return the reply text."""
        if timeout is not None and timeout <= 0:
            raise RequestFailure("deadline exceeded before the request was sent")

        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if timeout is not None:
            kwargs["timeout"] = timeout

        try:
            response = self._client.chat.completions.create(**kwargs)
        except OpenAIError as e:
            raise RequestFailure(f"model request failed: {e}") from e

        if not response.choices:
            raise ParseFailure("response has no choices")
        content = response.choices[0].message.content
        if not content or not content.strip():
            raise ParseFailure("empty response from model")
        return content

    def summarize_batch(
        self, chunks: list[TitleChunk], timeout: float | None = None
    ) -> list[SectionSummary]:
        """Summarize a batch of chunks; entries are positional, one per chunk."""
        sections = "\n\n".join(
            BATCH_SECTION.format(
                index=index,
                title=chunk.title,
                content=truncate(chunk.content.strip(), CHUNK_PREVIEW_CHARS),
            )
            for index, chunk in enumerate(chunks, start=1)
        )
        reply = self._complete(
            BATCH_SUMMARY_SYSTEM,
            BATCH_SUMMARY_PROMPT.format(sections=sections),
            max_tokens=BATCH_SUMMARY_MAX_TOKENS,
            temperature=SUMMARY_TEMPERATURE,
            timeout=timeout,
        )
        return _parse_reply(reply, BatchSummaryReply).summaries

    def analyze_cargos(
        self, request: CargoAnalysisRequest, timeout: float | None = None
    ) -> CargoAnalysisResult:
        """Determine whether the notice offers one or several cargos."""
        prompt = CARGO_ANALYSIS_PROMPT.format(
            file_name=request.file_name,
            exam_name=request.exam_name,
            content=truncate(request.content, CARGO_CONTENT_CHARS),
        )
        reply = self._complete(
            CARGO_ANALYSIS_SYSTEM,
            prompt,
            max_tokens=CARGO_ANALYSIS_MAX_TOKENS,
            temperature=EXTRACTION_TEMPERATURE,
            timeout=timeout,
        )
        return _to_cargo_result(_parse_reply(reply, CargoAnalysisReply))

    def extract_curriculum(
        self, request: CurriculumRequest, timeout: float | None = None
    ) -> ConteudoProgramatico:
        """Extract the subjects and topics required for one cargo."""
        prompt = CURRICULUM_PROMPT.format(
            cargo_name=request.cargo_name,
            exam_name=request.exam_name,
            content=truncate(request.content, CURRICULUM_CONTENT_CHARS),
        )
        reply = self._complete(
            CURRICULUM_SYSTEM,
            prompt,
            max_tokens=CURRICULUM_MAX_TOKENS,
            temperature=EXTRACTION_TEMPERATURE,
            timeout=timeout,
        )
        parsed = _parse_reply(reply, CurriculumReply)
        return ConteudoProgramatico(
            cargo=parsed.cargo,
            disciplinas=[
                Disciplina(nome=d.nome, topicos=list(d.topicos)) for d in parsed.disciplinas
            ],
        )

    def summarize_overall(
        self, document_name: str, digest: str, timeout: float | None = None
    ) -> str:
        """Write an executive summary from a digest of the principal sections."""
        reply = self._complete(
            OVERALL_SUMMARY_SYSTEM,
            OVERALL_SUMMARY_PROMPT.format(document_name=document_name, digest=digest),
            max_tokens=OVERALL_SUMMARY_MAX_TOKENS,
            temperature=SUMMARY_TEMPERATURE,
            timeout=timeout,
        )
        text = _strip_code_fence(strip_reasoning(reply))
        if not text:
            raise ParseFailure("overall summary reply has no text")
        return text

    def generate_chunks(
        self, document: RawDocument, max_chunks: int = 50, timeout: float | None = None
    ) -> list[GeneratedChunk]:
        """Ask the model to cut the document into titled, summarized chunks."""
        prompt = CHUNK_GENERATION_PROMPT.format(
            file_name=document.file_name,
            file_type=document.file_type,
            exam_name=document.exam_name,
            content=truncate(document.content, CHUNK_GENERATION_CHARS),
            max_chunks=max_chunks,
        )
        reply = self._complete(
            CHUNK_GENERATION_SYSTEM,
            prompt,
            max_tokens=CHUNK_GENERATION_MAX_TOKENS,
            temperature=EXTRACTION_TEMPERATURE,
            timeout=timeout,
        )
        parsed = _parse_reply(reply, ChunkGenerationReply)
        return [
            GeneratedChunk(
                id=chunk.id,
                content=chunk.content,
                title=chunk.title,
                summary=chunk.summary,
                keywords=list(chunk.keywords),
                chunk_index=chunk.chunk_index if chunk.chunk_index is not None else index,
            )
            for index, chunk in enumerate(parsed.chunks[:max_chunks])
        ]
