"""Pydantic schemas for chunks, summaries and structured model output."""

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

Importance = Literal["high", "medium", "low"]


@dataclass(frozen=True)
class RawDocument:
    """Full text of an uploaded notice."""

    content: str
    file_name: str
    file_type: str
    exam_name: str


class _Record(BaseModel):
    """Immutable record serialized with camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class TitleChunk(_Record):
    """A title-anchored span of document text."""

    id: str
    title: str
    content: str
    level: int = Field(ge=1)
    parent_id: str | None = None


class SummaryItem(_Record):
    """Summary of a single TitleChunk."""

    id: str
    title: str
    level: int
    summary: str
    key_points: list[str]
    importance: Importance
    parent_id: str | None = None
    original_chunk_id: str


class SmartSummary(_Record):
    """Hierarchical summary of a whole document."""

    document_name: str
    overall_summary: str
    total_sections: int
    summary_items: list[SummaryItem]
    generated_at: datetime


class CargoAnalysisResult(_Record):
    """Positions offered by a notice."""

    has_single_cargo: bool
    cargo_name: str | None = None
    cargos: list[str] | None = None
    total_cargos: int
    explanation: str = ""

    @model_validator(mode="after")
    def check_cargo_fields(self) -> "CargoAnalysisResult":
        if self.has_single_cargo:
            if not self.cargo_name or self.cargos is not None:
                raise ValueError("single-cargo result must carry cargoName only")
        elif not self.cargos or self.cargo_name is not None:
            raise ValueError("multi-cargo result must carry a non-empty cargos list only")
        return self


class Disciplina(_Record):
    """A subject and its topics."""

    nome: str
    topicos: list[str]


class ConteudoProgramatico(_Record):
    """Curriculum required for one cargo."""

    cargo: str
    disciplinas: list[Disciplina]


class GeneratedChunk(_Record):
    """Chunk produced by the model-driven chunk generation task."""

    id: str
    content: str
    title: str
    summary: str
    keywords: list[str]
    chunk_index: int


# Wire contracts: what the model must return for each task.


class _Reply(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SectionSummary(_Reply):
    """One entry of a batch summary reply."""

    summary: StrictStr = Field(min_length=1)
    key_points: list[StrictStr]
    importance: Importance

    @field_validator("importance", mode="before")
    @classmethod
    def normalize_importance(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class BatchSummaryReply(_Reply):
    summaries: list[SectionSummary]


class CargoAnalysisReply(_Reply):
    has_single_cargo: StrictBool
    cargo_name: StrictStr | None = None
    cargos: list[StrictStr] | None = None
    total_cargos: StrictInt | None = None
    explicacao: StrictStr = ""


class DisciplinaReply(_Reply):
    nome: StrictStr = Field(min_length=1)
    topicos: list[StrictStr]


class CurriculumReply(_Reply):
    cargo: StrictStr = Field(min_length=1)
    disciplinas: list[DisciplinaReply]


class GeneratedChunkReply(_Reply):
    id: StrictStr
    content: StrictStr
    title: StrictStr
    summary: StrictStr = ""
    keywords: list[StrictStr] = []
    chunk_index: StrictInt | None = None


class ChunkGenerationReply(_Reply):
    chunks: list[GeneratedChunkReply]
    total_chunks: StrictInt | None = None
