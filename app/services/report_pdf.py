from datetime import datetime
from io import BytesIO
from pathlib import Path

import fitz

from app.core.models import RADAR_AXES, AnalysisResult
from config.logger import logger
from config.settings import config

_TITLE_SIZE = 22
_SUBTITLE_SIZE = 10
_HEADING_SIZE = 14
_BODY_SIZE = 11
_META_SIZE = 9
_LEADING = 1.45
_PAGE_WIDTH = 595
_PAGE_HEIGHT = 842
_MARGIN_X = 50
_MARGIN_TOP = 60
_MARGIN_BOTTOM = 60
_INDENT = 8
_META_COLOR = (0.35, 0.35, 0.35)
_TEXT_COLOR = (0.1, 0.1, 0.1)
_RULE_COLOR = (0.75, 0.75, 0.75)
_ALERT_COLOR = (0.72, 0.11, 0.11)

_UNICODE_FONT = "china-s"

DISCLAIMER = (
    "AI support tool only. This report does not provide a diagnosis. "
    "In an emergency, call your local emergency number."
)


def _build_sections(result: AnalysisResult) -> list[tuple[str, list[str]]]:
    sections: list[tuple[str, list[str]]] = [
        ("Chief Complaint", [result.chief_complaint]),
        ("Symptom Analysis", [result.symptom_analysis]),
    ]
    optional = [
        ("Trend Analysis", result.timeline_analysis),
        ("Voice Transcript Summary", result.voice_summary),
        ("Visual Findings", result.visual_observations),
        ("Visual Comparison", result.image_comparison),
        ("Safe Medicine ID", result.medicine_analysis),
    ]
    sections.extend((title, [text]) for title, text in optional if text)

    radar = result.health_radar
    sections.append(
        ("Health Radar", [f"{axis.capitalize()}: {getattr(radar, axis):g}/100" for axis in RADAR_AXES])
    )
    if result.differentials:
        sections.append(("Differential Considerations", list(result.differentials)))
    if result.home_care:
        sections.append(("Recommended Action", list(result.home_care)))

    soap = result.soap
    sections.append(
        (
            "Clinician SOAP Note",
            [
                f"S - Subjective: {soap.subjective}",
                f"O - Objective: {soap.objective}",
                f"A - Assessment: {soap.assessment}",
                f"P - Plan: {soap.plan}",
            ],
        )
    )
    return sections


def _needs_unicode_font(text: str) -> bool:
    # Base-14 fonts only carry Latin-1 glyphs
    return any(ord(ch) > 0xFF for ch in text)


def _pick_font(primary: str, probe: str, fallback: str) -> str:
    try:
        fitz.get_text_length(probe, fontname=primary, fontsize=_BODY_SIZE)
        return primary
    except Exception:
        logger.warning(f"Font {primary} unavailable, falling back to {fallback}")
        return fallback


def _pick_fonts(texts: list[str]) -> dict[str, str]:
    """Chooses fonts by content: base-14 Times/Helvetica, or one Unicode font for everything."""
    if _needs_unicode_font("\n".join(texts)):
        font = _pick_font(_UNICODE_FONT, "中文", "helv")
        return {"title": font, "body": font, "meta": font}
    return {
        "title": _pick_font("tibo", "Title", "helv"),
        "body": _pick_font("tiro", "Body", "helv"),
        "meta": _pick_font("helv", "Meta", "tiro"),
    }


def _split_long_word(word: str, width: float, fontname: str, fontsize: float) -> list[str]:
    pieces = []
    while fitz.get_text_length(word, fontname=fontname, fontsize=fontsize) > width and len(word) > 1:
        cut = len(word) - 1
        while cut > 1 and fitz.get_text_length(word[:cut], fontname=fontname, fontsize=fontsize) > width:
            cut -= 1
        pieces.append(word[:cut])
        word = word[cut:]
    pieces.append(word)
    return pieces


def wrap_text(text: str, width: float, fontname: str, fontsize: float) -> list[str]:
    """Greedy word wrap measured with the output font; words wider than a line are split."""
    lines: list[str] = []
    for paragraph in text.splitlines() or [""]:
        current = ""
        for word in paragraph.split():
            candidate = f"{current} {word}" if current else word
            if fitz.get_text_length(candidate, fontname=fontname, fontsize=fontsize) <= width:
                current = candidate
                continue
            if current:
                lines.append(current)
            *full, current = _split_long_word(word, width, fontname, fontsize)
            lines.extend(full)
        lines.append(current)
    return lines


def build_report_pdf_bytes(result: AnalysisResult, report_id: str) -> bytes:
    created_at = datetime.now().strftime("%Y-%m-%d %H:%M")
    report_no = (report_id or "").strip()[:12] or "N/A"
    sections = _build_sections(result)
    fonts = _pick_fonts(
        [
            result.triage_reasoning,
            *result.red_flags,
            *(title for title, _ in sections),
            *(item for _, items in sections for item in items),
        ]
    )

    doc = fitz.open()
    page = doc.new_page(width=_PAGE_WIDTH, height=_PAGE_HEIGHT)
    y = _MARGIN_TOP
    text_width = _PAGE_WIDTH - _MARGIN_X * 2

    def ensure_space(need: float) -> None:
        nonlocal page, y
        if y + need <= _PAGE_HEIGHT - _MARGIN_BOTTOM:
            return
        page = doc.new_page(width=_PAGE_WIDTH, height=_PAGE_HEIGHT)
        y = _MARGIN_TOP

    def write(
        text: str,
        fontsize: float,
        role: str = "body",
        *,
        indent: float = 0,
        color: tuple[float, float, float] = _TEXT_COLOR,
    ) -> None:
        # Line by line, so long text continues on the next page instead of being clipped
        nonlocal y
        line_height = fontsize * _LEADING
        for line in wrap_text(text, text_width - indent, fonts[role], fontsize):
            ensure_space(line_height)
            page.insert_text(
                fitz.Point(_MARGIN_X + indent, y + fontsize),
                line,
                fontname=fonts[role],
                fontsize=fontsize,
                color=color,
            )
            y += line_height

    def draw_rule(width: float = 0.6) -> None:
        page.draw_line(
            fitz.Point(_MARGIN_X, y),
            fitz.Point(_PAGE_WIDTH - _MARGIN_X, y),
            color=_RULE_COLOR,
            width=width,
        )

    write("NeuroScanX Clinical Report", _TITLE_SIZE, "title")
    y += 6
    write(f"Generated at: {created_at}    Report ID: {report_no}", _SUBTITLE_SIZE, "meta", color=_META_COLOR)
    y += 8
    draw_rule(0.8)
    y += 14

    write(f"Triage Level: {result.triage_level.value}", _HEADING_SIZE, "title")
    y += 4
    write(result.triage_reasoning, _BODY_SIZE)
    y += 14

    if result.red_flags:
        # Keep a heading together with at least its first line
        ensure_space(_HEADING_SIZE * _LEADING + _BODY_SIZE * _LEADING)
        write("Red Flags", _HEADING_SIZE, "title", color=_ALERT_COLOR)
        y += 4
        for flag in result.red_flags:
            write(f"! {flag}", _BODY_SIZE, indent=_INDENT, color=_ALERT_COLOR)
        y += 12

    for section_title, items in sections:
        ensure_space(_HEADING_SIZE * _LEADING + 12 + _BODY_SIZE * _LEADING)
        write(section_title, _HEADING_SIZE, "title")
        y += 2
        draw_rule()
        y += 6
        bulleted = len(items) > 1
        for item in items:
            write(f"- {item}" if bulleted else item, _BODY_SIZE, indent=_INDENT)
        y += 12

    write(DISCLAIMER, _META_SIZE, "meta", color=_META_COLOR)

    for i, p in enumerate(doc, start=1):
        footer = f"Page {i} of {doc.page_count}"
        footer_width = fitz.get_text_length(footer, fontname=fonts["meta"], fontsize=_META_SIZE)
        p.insert_text(
            fitz.Point((_PAGE_WIDTH - footer_width) / 2, _PAGE_HEIGHT - 24),
            footer,
            fontname=fonts["meta"],
            fontsize=_META_SIZE,
            color=_META_COLOR,
        )

    buffer = BytesIO()
    doc.save(buffer)
    doc.close()
    return buffer.getvalue()


def export_report_pdf(result: AnalysisResult, report_id: str, output_dir: Path | None = None) -> str:
    """Writes the report PDF to disk and returns its path for download."""
    output_dir = output_dir or config.TEMP_DIR
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / f"neuroscanx_report_{report_id}.pdf"
    output_path.write_bytes(build_report_pdf_bytes(result, report_id))
    logger.info(f"Report PDF exported to {output_path}")
    return str(output_path)
