"""Title-based chunking for exam notices.

Splits notice text into sections anchored on the notice's own headings
("CAPÍTULO I", "1.2 DAS INSCRIÇÕES", "CRONOGRAMA", ...). Title lines are
removed from the chunk contents; every other character of the input ends up
in exactly one chunk, in reading order.
"""

import logging
import re
from dataclasses import dataclass, field

from ..summarize.schema import TitleChunk

logger = logging.getLogger(__name__)

PREAMBLE_TITLE = "Preâmbulo"
FALLBACK_TITLE = "Documento"

_UPPER = "A-ZÁÀÂÃÉÊÍÓÔÕÚÜÇ"

STRUCTURAL_PATTERN = re.compile(
    r"^(CAP[ÍI]TULO|T[ÍI]TULO|PARTE|SE[ÇC][ÃA]O|ANEXO|AP[ÊE]NDICE)"
    r"(?:\s+([IVXLC]+|\d+|[ÚU]NICO))?\b"
    r"\s*[-–—:.]*\s*(.*)$",
    re.IGNORECASE,
)
NUMBERED_PATTERN = re.compile(rf"^(\d{{1,3}}(?:\.\d{{1,3}})*)(\.|\))?\s+([{_UPPER}].*)$")
UPPER_LINE_PATTERN = re.compile(rf"^[{_UPPER}][{_UPPER}\s\-–—/(),ºª]*$")
UPPER_COLON_PATTERN = re.compile(rf"^([{_UPPER}][{_UPPER}\s\-–—]{{4,}}):$")
DATE_PATTERN = re.compile(r"^(\d{1,2}/\d{1,2}/\d{2,4}|\d{4}-\d{1,2}-\d{1,2})")
SECTION_KEYWORD_PATTERN = re.compile(
    r"^(DISPOSI[ÇC][ÕO]ES\s+(GERAIS|FINAIS|PRELIMINARES)|CRONOGRAMA|INSCRI[ÇC][ÕO]ES|REQUISITOS"
    r"|RECURSOS|IMPUGNA[ÇC][ÕO]ES|ATRIBUI[ÇC][ÕO]ES|REMUNERA[ÇC][ÃA]O|DOCUMENTA[ÇC][ÃA]O"
    r"|CONTE[ÚU]DO\s+PROGRAM[ÁA]TICO|HOMOLOGA[ÇC][ÃA]O|RESULTADO(\s+FINAL)?)\s*:?$",
    re.IGNORECASE,
)
# "Das Inscrições", "Do Cargo": article plus a capitalized word, no sentence punctuation.
ARTICLE_HEADING_PATTERN = re.compile(rf"^D[AaOo][Ss]?\s+[{_UPPER}][^.!?;:,]*$")

# Raw depth of each structural keyword; numbered headings use 1 + number of parts.
_STRUCTURAL_DEPTH = {
    "capitulo": 1,
    "titulo": 1,
    "parte": 1,
    "secao": 2,
    "anexo": 2,
    "apendice": 2,
}

_COMMON_WORDS = {
    "a", "o", "as", "os", "um", "uma", "uns", "umas",
    "de", "da", "do", "das", "dos", "em", "na", "no", "nas", "nos", "por", "para",
}  # fmt: skip

MAX_NUMBERED_TITLE_WORDS = 12
MAX_ARTICLE_TITLE_WORDS = 8


class StructuralError(Exception):
    """Raised when no title line can be recognized in a document."""


@dataclass
class _Heading:
    title: str
    depth: int
    # Structural keyword with no descriptive text, e.g. a bare "CAPÍTULO I".
    bare: bool = False
    numbered: bool = False


@dataclass
class _Section:
    heading: _Heading | None
    lines: list[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(self.lines)


def _fold(word: str) -> str:
    return (
        word.lower()
        .replace("í", "i")
        .replace("ç", "c")
        .replace("ã", "a")
        .replace("ê", "e")
    )


def clean_title(text: str) -> str:
    """Normalize a heading into a display title."""
    text = re.sub(r"\s+", " ", text).strip(" -–—:.;")
    if text and text == text.upper():
        text = text.title()
    return text


def is_valid_title_text(text: str) -> bool:
    """Reject heading candidates that look like data or running prose."""
    text = text.strip()
    if len(text) < 2 or len(text) > 150:
        return False

    digits = sum(ch.isdigit() for ch in text)
    if digits > len(text) * 0.3:
        return False

    special = sum(not (ch.isalnum() or ch.isspace() or ch in "-–—()[]") for ch in text)
    if special > len(text) * 0.2:
        return False

    words = text.lower().split()
    common = sum(word in _COMMON_WORDS for word in words)
    if len(words) > 8 and common > len(words) * 0.4:
        return False

    return True


def detect_heading(line: str) -> _Heading | None:
    """Return the heading a line represents, or None for body text."""
    stripped = line.strip()
    if len(stripped) < 3 or len(stripped) > 200 or DATE_PATTERN.match(stripped):
        return None

    match = STRUCTURAL_PATTERN.match(stripped)
    if match:
        keyword, numeral, rest = match.group(1), match.group(2), match.group(3).strip()
        # Without a numeral only an upper-case keyword counts ("ANEXO", not "Parte do valor").
        if numeral is None and keyword != keyword.upper():
            return None
        if numeral is not None and numeral.isalpha() and numeral != numeral.upper():
            return None
        if rest and rest[0].islower():
            return None
        depth = _STRUCTURAL_DEPTH[_fold(keyword)]
        if not rest:
            label = f"{keyword.capitalize()} {numeral.upper()}" if numeral else keyword.capitalize()
            return _Heading(title=label, depth=depth, bare=True)
        if is_valid_title_text(rest):
            return _Heading(title=clean_title(rest), depth=depth)
        return None

    match = NUMBERED_PATTERN.match(stripped)
    if match:
        number, terminator, rest = match.groups()
        parts = number.split(".")
        # A lone integer needs "1." or "1)" so that counts like "10 Vagas" stay body text.
        if len(parts) == 1 and terminator is None:
            return None
        if len(rest.split()) > MAX_NUMBERED_TITLE_WORDS or not is_valid_title_text(rest):
            return None
        return _Heading(title=clean_title(rest), depth=len(parts) + 1, numbered=True)

    match = UPPER_COLON_PATTERN.match(stripped)
    if match:
        return _Heading(title=clean_title(match.group(1)), depth=3)

    if SECTION_KEYWORD_PATTERN.match(stripped) and is_valid_title_text(stripped):
        return _Heading(title=clean_title(stripped), depth=2)

    if (
        ARTICLE_HEADING_PATTERN.match(stripped)
        and len(stripped.split()) <= MAX_ARTICLE_TITLE_WORDS
        and is_valid_title_text(stripped)
    ):
        return _Heading(title=clean_title(stripped), depth=2)

    if UPPER_LINE_PATTERN.match(stripped) and len(stripped) <= 120:
        letters = sum(ch.isalpha() for ch in stripped)
        if letters >= 5 and is_valid_title_text(stripped):
            return _Heading(title=clean_title(stripped), depth=2)

    return None


def _split_sections(text: str) -> list[_Section]:
    """Group lines under the heading that precedes them."""
    sections = [_Section(heading=None)]

    for line in text.splitlines(keepends=True):
        heading = detect_heading(line)
        if heading is None:
            sections[-1].lines.append(line)
            continue

        current = sections[-1]
        if (
            current.heading is not None
            and current.heading.bare
            and not heading.numbered
            and not current.text.strip()
        ):
            # "CAPÍTULO I" followed by "DAS DISPOSIÇÕES GERAIS" names a single section;
            # a numbered heading opens a subsection instead.
            current.heading = _Heading(
                title=f"{current.heading.title} - {heading.title}",
                depth=current.heading.depth,
            )
            continue

        sections.append(_Section(heading=heading))

    if len(sections) == 1:
        raise StructuralError("no title lines recognized")

    preamble = sections[0]
    if preamble.text.strip():
        return sections

    sections[1].lines[:0] = preamble.lines
    return sections[1:]


def _infer_title(text: str) -> str:
    for line in text.splitlines():
        if line.strip():
            return clean_title(line)[:80] or FALLBACK_TITLE
    return FALLBACK_TITLE


def chunk_document(text: str) -> list[TitleChunk]:
    """
    Split document text into title-anchored chunks.

    Levels and parents follow heading depth: the parent of a chunk is the
    nearest preceding chunk with a shallower heading, and a chunk without an
    enclosing heading is at level 1. Text before the first heading becomes a
    level-1 preamble chunk.

    When no heading is recognized the whole document is returned as a single
    level-1 chunk.
    """
    try:
        sections = _split_sections(text)
    except StructuralError as e:
        logger.info("Falling back to a single chunk: %s", e)
        return [TitleChunk(id="chunk_0", title=_infer_title(text), content=text, level=1)]

    chunks: list[TitleChunk] = []
    # (depth, chunk id, level) of the currently open headings
    open_headings: list[tuple[int, str, int]] = []

    for index, section in enumerate(sections):
        chunk_id = f"chunk_{index}"

        if section.heading is None:
            chunks.append(
                TitleChunk(id=chunk_id, title=PREAMBLE_TITLE, content=section.text, level=1)
            )
            continue

        depth = section.heading.depth
        while open_headings and open_headings[-1][0] >= depth:
            open_headings.pop()

        parent = open_headings[-1] if open_headings else None
        level = parent[2] + 1 if parent else 1
        chunks.append(
            TitleChunk(
                id=chunk_id,
                title=section.heading.title,
                content=section.text,
                level=level,
                parent_id=parent[1] if parent else None,
            )
        )
        open_headings.append((depth, chunk_id, level))

    logger.debug("Split document into %d chunks", len(chunks))
    return chunks


def generate_summary_preview(document_name: str, chunks: list[TitleChunk]) -> str:
    """Render an indented outline of the chunks with a short content preview."""
    lines = [f"SUMÁRIO: {document_name}", ""]

    for chunk in chunks:
        indent = "  " * (chunk.level - 1)
        content = " ".join(chunk.content.split())
        preview = content[:100] + ("..." if len(content) > 100 else "")
        lines.append(f"{indent}• {chunk.title}")
        if preview:
            lines.append(f"{indent}  {preview}")
        lines.append("")

    return "\n".join(lines)
