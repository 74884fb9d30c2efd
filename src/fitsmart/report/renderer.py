"""
Plain-text routine report.

Lays out a finished audit as fixed-width pages: title, profile summary,
score, summary and safety paragraphs, warm-up list and a three-column
modifications table. Content is grouped into blocks that never straddle a
page break unless a single block is taller than a page. Every page ends
with a footer; pages are separated by form feeds.
"""

import textwrap
from itertools import zip_longest
from typing import List, Sequence

from ..models.analysis import BiomechanicalAnalysis
from ..models.profile import UserProfile

REPORT_TITLE = "FitSmart AI - Informe de Rutina"
FOOTER_TEXT = "Generado por FitSmart AI"
PAGE_WIDTH = 90
PAGE_HEIGHT = 56  # body lines per page, footer excluded
PAGE_SEPARATOR = "\f\n"

# Ejercicio Recomendado | Sets/Reps | Motivo del Cambio
TABLE_COLUMNS = (("Ejercicio Recomendado", 30), ("Sets/Reps", 14), ("Motivo del Cambio", 42))
COLUMN_GAP = "  "

Block = List[str]


def _wrap(text: str, width: int, indent: str = "") -> List[str]:
    lines = textwrap.wrap(text or "", width=width, initial_indent=indent, subsequent_indent=indent)
    return lines or [indent.rstrip()]


def _paragraph(heading: str, text: str, width: int) -> Block:
    return [heading, *_wrap(text, width), ""]


def _table_row(cells: Sequence[str]) -> Block:
    wrapped = [
        textwrap.wrap(cell or "", width=col_width) or [""]
        for cell, (_, col_width) in zip(cells, TABLE_COLUMNS)
    ]
    lines = []
    for parts in zip_longest(*wrapped, fillvalue=""):
        line = COLUMN_GAP.join(
            part.ljust(col_width) for part, (_, col_width) in zip(parts, TABLE_COLUMNS)
        )
        lines.append(line.rstrip())
    return lines


def build_blocks(analysis: BiomechanicalAnalysis, profile: UserProfile, width: int = PAGE_WIDTH) -> List[Block]:
    """Report content as keep-together blocks, in layout order."""
    blocks: List[Block] = [
        [REPORT_TITLE, "=" * len(REPORT_TITLE), ""],
        [
            f"Objetivo: {profile.goal} | Nivel: {profile.experience}",
            f"Usuario: {profile.age} años | {profile.gender}",
            "",
            f"Puntuación de Rutina: {analysis.score}/100",
            "",
        ],
        _paragraph("Resumen:", analysis.summary, width),
        _paragraph("Seguridad Biomecánica:", analysis.safety_assessment, width),
    ]

    if analysis.warm_up_recommendations:
        blocks.append(["Calentamiento Recomendado:"])
        for warm_up in analysis.warm_up_recommendations:
            blocks.append([
                f"  • {warm_up.name} ({warm_up.dosage})",
                *_wrap(warm_up.description, width - 4, indent="    "),
            ])
        blocks.append([""])

    header = _table_row([title for title, _ in TABLE_COLUMNS])
    rule = COLUMN_GAP.join("-" * col_width for _, col_width in TABLE_COLUMNS)
    blocks.append(header + [rule])
    for mod in analysis.modifications:
        blocks.append(_table_row([mod.recommended, f"{mod.sets} x {mod.reps}", mod.reason]))

    return blocks


def paginate(blocks: Sequence[Block], page_height: int = PAGE_HEIGHT) -> List[Block]:
    """Pack blocks into pages, breaking before a block that would overflow."""
    pages: List[Block] = [[]]
    for block in blocks:
        page = pages[-1]
        if page and len(page) + len(block) > page_height:
            page = []
            pages.append(page)
        for line in block:
            if len(page) >= page_height:
                page = []
                pages.append(page)
            page.append(line)
    return pages


def render_report(
    analysis: BiomechanicalAnalysis,
    profile: UserProfile,
    page_height: int = PAGE_HEIGHT,
    width: int = PAGE_WIDTH,
) -> str:
    """Render the audit report as paginated plain text."""
    pages = paginate(build_blocks(analysis, profile, width), page_height)
    total = len(pages)
    rendered = []
    for number, page in enumerate(pages, start=1):
        body = page + [""] * (page_height - len(page))
        footer = f"{FOOTER_TEXT} | {number}/{total}"
        rendered.append("\n".join(body + [footer]) + "\n")
    return PAGE_SEPARATOR.join(rendered)
