"""Markdown rendering of summaries."""

from .schema import ConteudoProgramatico, SmartSummary

IMPORTANCE_LABELS = {"high": "Alta", "medium": "Média", "low": "Baixa"}


def render_markdown(summary: SmartSummary) -> str:
    lines = [
        f"# {summary.document_name}",
        "",
        "## Resumo geral",
        "",
        summary.overall_summary,
        "",
        f"## Seções ({summary.total_sections})",
        "",
    ]

    for item in summary.summary_items:
        # Levels below the section heading nest under it, capped at h6
        heading = "#" * min(item.level + 2, 6)
        lines.append(f"{heading} {item.title}")
        lines.append("")
        lines.append(f"*Importância: {IMPORTANCE_LABELS[item.importance]}*")
        lines.append("")
        lines.append(item.summary)
        if item.key_points:
            lines.append("")
            lines.extend(f"- {point}" for point in item.key_points)
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"


def render_curriculum_markdown(curriculum: ConteudoProgramatico) -> str:
    lines = [f"# Conteúdo programático: {curriculum.cargo}", ""]
    for disciplina in curriculum.disciplinas:
        lines.append(f"## {disciplina.nome}")
        lines.append("")
        lines.extend(f"- {topico}" for topico in disciplina.topicos)
        lines.append("")
    return "\n".join(lines).rstrip() + "\n"
