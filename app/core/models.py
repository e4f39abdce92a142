from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class TriageLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"

    @property
    def urgency(self) -> int:
        """Ordinal urgency, 0 for Low up to 3 for Critical."""
        return list(TriageLevel).index(self)


class WireModel(BaseModel):
    """Base for models that travel over the model boundary with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class SoapNote(WireModel):
    subjective: str
    objective: str
    assessment: str
    plan: str


RADAR_MIN = 0
RADAR_MAX = 100


class HealthRadar(WireModel):
    # 100 is best hydration; for every other axis 100 is the worst
    hydration: float = Field(..., ge=RADAR_MIN, le=RADAR_MAX)
    fatigue: float = Field(..., ge=RADAR_MIN, le=RADAR_MAX)
    stress: float = Field(..., ge=RADAR_MIN, le=RADAR_MAX)
    inflammation: float = Field(..., ge=RADAR_MIN, le=RADAR_MAX)
    severity: float = Field(..., ge=RADAR_MIN, le=RADAR_MAX)


RADAR_AXES: tuple[str, ...] = ("hydration", "fatigue", "stress", "inflammation", "severity")

OPTIONAL_FINDINGS: tuple[str, ...] = (
    "timeline_analysis",
    "voice_summary",
    "visual_observations",
    "image_comparison",
    "medicine_analysis",
)


class AnalysisResult(WireModel):
    chief_complaint: str
    symptom_analysis: str
    differentials: list[str]
    triage_level: TriageLevel
    triage_reasoning: str
    red_flags: list[str]
    home_care: list[str]
    soap: SoapNote
    health_radar: HealthRadar

    # Present only when the matching input modality was supplied
    timeline_analysis: str | None = None
    voice_summary: str | None = None
    visual_observations: str | None = None
    image_comparison: str | None = None
    medicine_analysis: str | None = None

    @field_validator(*OPTIONAL_FINDINGS, mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ImageAttachment(BaseModel):
    file_path: str
    mime_type: str | None = None


class EncodedImage(BaseModel):
    mime_type: str
    data: str

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


class AnalysisRequest(BaseModel):
    symptoms: str = ""
    history: str = ""
    voice_transcript: str = ""
    images: list[ImageAttachment] = Field(default_factory=list)


class AnalysisPayload(BaseModel):
    system_instruction: str
    parts: list[dict]
    response_schema: dict
    temperature: float


class View(str, Enum):
    LANDING = "landing"
    LOGIN = "login"
    SIGNUP = "signup"
    DASHBOARD = "dashboard"
    RESULTS = "results"


class AppState(BaseModel):
    view: View = View.LANDING
    analyzing: bool = False
    error: str | None = None
    is_dark: bool = True
    user_email: str | None = None
    result: AnalysisResult | None = None
    # Tags the latest analysis cycle; also the id printed on its report
    report_id: str | None = None
