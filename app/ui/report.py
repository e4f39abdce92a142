import math
from datetime import date
from html import escape

from app.core.models import RADAR_AXES, AnalysisResult, HealthRadar, TriageLevel

RADAR_SIZE = 220
RADAR_RADIUS = 80
RADAR_LABELS = ("Hydration", "Fatigue", "Stress", "Inflamm.", "Severity")
RADAR_GRID_LEVELS = (25, 50, 75, 100)

FONT_STACK = "system-ui, -apple-system, sans-serif"

TRIAGE_BADGE_STYLES: dict[TriageLevel, dict[str, str]] = {
    TriageLevel.LOW: {"color": "#15803d", "bg_color": "#dcfce7", "border": "#86efac"},
    TriageLevel.MEDIUM: {"color": "#a16207", "bg_color": "#fef9c3", "border": "#fde047"},
    TriageLevel.HIGH: {"color": "#c2410c", "bg_color": "#ffedd5", "border": "#fdba74"},
    TriageLevel.CRITICAL: {"color": "#b91c1c", "bg_color": "#fee2e2", "border": "#f87171"},
}


def triage_badge_style(level: TriageLevel) -> dict[str, str]:
    return TRIAGE_BADGE_STYLES[level]


# Radar geometry


def radar_point(
    value: float,
    index: int,
    total: int = len(RADAR_AXES),
    center: float = RADAR_SIZE / 2,
    radius: float = RADAR_RADIUS,
) -> tuple[float, float]:
    """Maps a 0-100 score on axis `index` to plot coordinates; axis 0 points up."""
    angle = (math.pi * 2 * index) / total - math.pi / 2
    r = (value / 100) * radius
    return center + r * math.cos(angle), center + r * math.sin(angle)


def radar_polygon(radar: HealthRadar) -> list[tuple[float, float]]:
    return [radar_point(getattr(radar, axis), i) for i, axis in enumerate(RADAR_AXES)]


def _points_attr(points: list[tuple[float, float]]) -> str:
    return " ".join(f"{x:.2f},{y:.2f}" for x, y in points)


def render_radar_svg(radar: HealthRadar) -> str:
    center = RADAR_SIZE / 2
    total = len(RADAR_AXES)
    grid = "".join(
        f'<polygon points="{_points_attr([radar_point(level, i) for i in range(total)])}" '
        f'fill="none" stroke="#cbd5e1" stroke-width="1" />'
        for level in RADAR_GRID_LEVELS
    )
    axes = ""
    for i in range(total):
        x, y = radar_point(100, i)
        axes += f'<line x1="{center}" y1="{center}" x2="{x:.2f}" y2="{y:.2f}" stroke="#cbd5e1" stroke-width="1" />'

    points = radar_polygon(radar)
    dots = "".join(f'<circle cx="{x:.2f}" cy="{y:.2f}" r="4" fill="#0ea5e9" />' for x, y in points)
    labels = ""
    for i, label in enumerate(RADAR_LABELS):
        x, y = radar_point(125, i)
        labels += (
            f'<text x="{x:.2f}" y="{y:.2f}" text-anchor="middle" font-size="10" '
            f'font-weight="700" fill="#64748b">{label.upper()}</text>'
        )

    return f"""
    <svg width="{RADAR_SIZE}" height="{RADAR_SIZE}" viewBox="0 0 {RADAR_SIZE} {RADAR_SIZE}" style="overflow: visible;">
        {grid}
        {axes}
        <polygon points="{_points_attr(points)}" fill="rgba(14, 165, 233, 0.4)" stroke="#38bdf8" stroke-width="2" />
        {dots}
        {labels}
    </svg>
    """


def render_radar_card(radar: HealthRadar) -> str:
    return f"""
    <div style="
        display: flex;
        flex-direction: column;
        align-items: center;
        border: 1px solid #e5e7eb;
        border-radius: 16px;
        padding: 24px 16px 16px;
        background-color: #ffffff;
        font-family: {FONT_STACK};
    ">
        {render_radar_svg(radar)}
        <div style="margin-top: 12px; font-size: 12px; color: #0284c7; letter-spacing: 2px; text-transform: uppercase;">
            Biometric Radar
        </div>
    </div>
    """


# Cards and sections


def render_triage_badge(level: TriageLevel) -> str:
    style = triage_badge_style(level)
    return f"""
    <span style="
        display: inline-flex;
        align-items: center;
        gap: 8px;
        padding: 6px 16px;
        border: 2px solid {style['border']};
        border-radius: 8px;
        background-color: {style['bg_color']};
        color: {style['color']};
        font-weight: 700;
        font-size: 14px;
        letter-spacing: 1px;
        text-transform: uppercase;
    "><span style="width: 10px; height: 10px; border-radius: 50%; background-color: {style['color']};"></span>{level.value} Priority</span>
    """


def render_overview(result: AnalysisResult, report_id: str, report_date: date | None = None) -> str:
    report_date = report_date or date.today()
    return f"""
    <div style="
        border: 1px solid #e5e7eb;
        border-radius: 16px;
        padding: 24px;
        background-color: #ffffff;
        font-family: {FONT_STACK};
    ">
        <div style="display: flex; justify-content: space-between; align-items: center; flex-wrap: wrap; gap: 12px; margin-bottom: 20px;">
            <div>
                <div style="font-size: 26px; font-weight: 700; color: #0f172a;">Analysis Report</div>
                <div style="font-size: 12px; color: #64748b; font-family: monospace; text-transform: uppercase;">
                    ID: {escape(report_id)} &bull; {report_date.isoformat()}
                </div>
            </div>
            {render_triage_badge(result.triage_level)}
        </div>
        <div style="border: 1px solid #e2e8f0; border-radius: 12px; padding: 16px; background-color: #f8fafc;">
            <div style="font-size: 12px; font-weight: 700; color: #0284c7; text-transform: uppercase; margin-bottom: 8px;">
                AI Clinical Reasoning
            </div>
            <div style="color: #334155; line-height: 1.6; font-size: 14px;">{escape(result.triage_reasoning)}</div>
        </div>
    </div>
    """


def render_red_flags(red_flags: list[str]) -> str:
    if not red_flags:
        return ""

    items = "".join(
        f"""
        <div style="display: flex; gap: 10px; align-items: start; padding: 10px 12px; background-color: #ffffff; border: 1px solid #fecaca; border-radius: 8px;">
            <span style="margin-top: 6px; width: 8px; height: 8px; border-radius: 50%; background-color: #ef4444; flex-shrink: 0;"></span>
            <span style="color: #991b1b; font-size: 14px; font-weight: 500;">{escape(flag)}</span>
        </div>
        """
        for flag in red_flags
    )
    return f"""
    <div style="
        border-left: 4px solid #ef4444;
        border-radius: 12px;
        padding: 20px;
        background-color: #fef2f2;
        font-family: {FONT_STACK};
    ">
        <div style="font-size: 13px; font-weight: 700; color: #dc2626; letter-spacing: 1px; text-transform: uppercase; margin-bottom: 12px;">
            ⚠️ Critical Alerts Detected
        </div>
        <div style="display: grid; grid-template-columns: repeat(auto-fit, minmax(240px, 1fr)); gap: 10px;">
            {items}
        </div>
    </div>
    """


def format_feature_card(title: str, content: str, accent: str, emoji: str = "", note: str = "") -> str:
    display_title = f"{emoji} {title}" if emoji else title
    note_html = (
        f'<div style="margin-top: 8px; padding-top: 8px; border-top: 1px solid #e5e7eb; font-size: 11px; color: {accent};">{note}</div>'
        if note
        else ""
    )
    return f"""
    <div style="
        border: 1px solid #e5e7eb;
        border-top: 3px solid {accent};
        border-radius: 12px;
        padding: 16px;
        background-color: #ffffff;
        font-family: {FONT_STACK};
    ">
        <div style="font-size: 12px; font-weight: 700; color: {accent}; text-transform: uppercase; margin-bottom: 10px;">{display_title}</div>
        <div style="color: #475569; font-size: 14px; line-height: 1.6;">{escape(content)}</div>
        {note_html}
    </div>
    """


def render_feature_cards(result: AnalysisResult) -> str:
    cards = []
    if result.timeline_analysis:
        cards.append(format_feature_card("Trend Analysis", result.timeline_analysis, "#0d9488", "📈"))
    if result.image_comparison:
        cards.append(format_feature_card("Visual Comparison", result.image_comparison, "#4f46e5", "🗂️"))
    if result.medicine_analysis:
        cards.append(
            format_feature_card(
                "Safe Medicine ID",
                result.medicine_analysis,
                "#9333ea",
                "💊",
                note="*Tentative ID only. Verify with pharmacist.*",
            )
        )
    if not cards:
        return ""
    return f"""
    <div style="display: grid; grid-template-columns: repeat(auto-fit, minmax(260px, 1fr)); gap: 16px;">
        {''.join(cards)}
    </div>
    """


def _section(title: str, content: str) -> str:
    return f"""
    <div style="margin-bottom: 24px;">
        <div style="font-size: 12px; font-weight: 700; color: #0284c7; text-transform: uppercase; margin-bottom: 8px;">{title}</div>
        <div style="color: #334155; font-size: 14px; line-height: 1.75;">{escape(content)}</div>
    </div>
    """


def render_patient_summary(result: AnalysisResult) -> str:
    left = _section("Chief Complaint", result.chief_complaint)
    if result.visual_observations:
        left += _section("Visual Findings", result.visual_observations)
    left += _section("Symptom Breakdown", result.symptom_analysis)

    differentials = "".join(
        f"""
        <div style="display: flex; gap: 10px; align-items: center; padding: 12px; margin-bottom: 8px; border: 1px solid #e2e8f0; border-radius: 10px; background-color: #f8fafc; font-size: 14px; color: #334155;">
            <span style="width: 8px; height: 8px; border-radius: 50%; background-color: #0ea5e9;"></span>{escape(diff)}
        </div>
        """
        for diff in result.differentials
    )
    home_care = "".join(
        f"""
        <div style="display: flex; gap: 10px; align-items: start; padding: 12px; margin-bottom: 8px; border: 1px solid #bae6fd; border-radius: 10px; background-color: #f0f9ff; font-size: 14px; color: #334155;">
            <span style="color: #0ea5e9;">✓</span>{escape(item)}
        </div>
        """
        for item in result.home_care
    )

    return f"""
    <div style="display: grid; grid-template-columns: repeat(auto-fit, minmax(300px, 1fr)); gap: 32px; font-family: {FONT_STACK};">
        <div>{left}</div>
        <div>
            <div style="font-size: 12px; font-weight: 700; color: #64748b; text-transform: uppercase; margin-bottom: 12px;">Differential Considerations</div>
            {differentials}
            <div style="font-size: 12px; font-weight: 700; color: #64748b; text-transform: uppercase; margin: 24px 0 12px;">Recommended Action</div>
            {home_care}
        </div>
    </div>
    """


def _soap_section(title: str, content: str) -> str:
    return f"""
    <div style="padding: 20px; border: 1px solid #e2e8f0; border-radius: 12px; background-color: #f8fafc;">
        <div style="font-weight: 700; color: #0284c7; padding-bottom: 8px; margin-bottom: 10px; border-bottom: 1px solid #e2e8f0;">{title}</div>
        <div style="white-space: pre-line; line-height: 1.6; color: #475569;">{escape(content)}</div>
    </div>
    """


def render_soap_note(result: AnalysisResult) -> str:
    voice = ""
    if result.voice_summary:
        voice = f"""
        <div style="padding: 16px; margin-bottom: 24px; border: 1px solid #c7d2fe; border-radius: 12px; background-color: #eef2ff;">
            <div style="font-size: 12px; font-weight: 700; color: #4f46e5; text-transform: uppercase; margin-bottom: 8px;">🎙️ Voice Transcript Summary</div>
            <div style="line-height: 1.6;">{escape(result.voice_summary)}</div>
        </div>
        """

    soap = result.soap
    return f"""
    <div style="font-family: monospace; font-size: 14px; color: #334155;">
        {voice}
        <div style="display: grid; grid-template-columns: repeat(auto-fit, minmax(300px, 1fr)); gap: 24px;">
            {_soap_section("S - Subjective", soap.subjective)}
            {_soap_section("O - Objective", soap.objective)}
            {_soap_section("A - Assessment", soap.assessment)}
            {_soap_section("P - Plan", soap.plan)}
        </div>
    </div>
    """


def format_error_banner(message: str | None) -> str:
    if not message:
        return ""
    return f"""
    <div style="
        padding: 14px 16px;
        border-radius: 12px;
        background-color: #fee2e2;
        border: 1px solid #fecaca;
        color: #b91c1c;
        font-family: {FONT_STACK};
        font-size: 14px;
    ">
        <span style="font-weight: 600;">●</span> {escape(message)}
    </div>
    """
