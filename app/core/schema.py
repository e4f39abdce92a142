"""Output contract for the triage model call.

The model is forced to answer with exactly this JSON shape. OpenAI strict
structured output requires every property to be listed under ``required``, so
the optional findings are declared as nullable strings instead of being left
out; ``null`` (or an empty string) means "not applicable".
"""

from app.core.models import RADAR_AXES, RADAR_MAX, RADAR_MIN, TriageLevel

SCHEMA_NAME = "triage_analysis"

REQUIRED_FIELDS: tuple[str, ...] = (
    "chiefComplaint",
    "symptomAnalysis",
    "differentials",
    "triageLevel",
    "triageReasoning",
    "redFlags",
    "homeCare",
    "soap",
    "healthRadar",
)

OPTIONAL_FIELDS: tuple[str, ...] = (
    "timelineAnalysis",
    "voiceSummary",
    "visualObservations",
    "imageComparison",
    "medicineAnalysis",
)

RADAR_DESCRIPTIONS: dict[str, str] = {
    "hydration": "0-100 score (100 is best hydration)",
    "fatigue": "0-100 score (100 is max fatigue)",
    "stress": "0-100 score (100 is max stress)",
    "inflammation": "0-100 score (100 is max inflammation)",
    "severity": "0-100 score (100 is max severity)",
}

_STRING = {"type": "string"}
_STRING_LIST = {"type": "array", "items": {"type": "string"}}


def _optional_string(description: str) -> dict:
    return {"type": ["string", "null"], "description": description}


SOAP_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "subjective": _STRING,
        "objective": _STRING,
        "assessment": _STRING,
        "plan": _STRING,
    },
    "required": ["subjective", "objective", "assessment", "plan"],
    "additionalProperties": False,
}

HEALTH_RADAR_SCHEMA: dict = {
    "type": "object",
    "properties": {
        axis: {
            "type": "number",
            "minimum": RADAR_MIN,
            "maximum": RADAR_MAX,
            "description": RADAR_DESCRIPTIONS[axis],
        }
        for axis in RADAR_AXES
    },
    "required": list(RADAR_AXES),
    "additionalProperties": False,
}

ANALYSIS_RESPONSE_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "chiefComplaint": _STRING,
        "timelineAnalysis": _optional_string("Trends based on history/timeline text."),
        "voiceSummary": _optional_string(
            "Clinical summary derived specifically from voice transcript."
        ),
        "visualObservations": _optional_string("Analysis of the primary image."),
        "imageComparison": _optional_string(
            "Comparison between primary and secondary image if both exist."
        ),
        "medicineAnalysis": _optional_string(
            "Safe category identification of medication if present."
        ),
        "symptomAnalysis": _STRING,
        "healthRadar": HEALTH_RADAR_SCHEMA,
        "differentials": _STRING_LIST,
        "triageLevel": {"type": "string", "enum": [level.value for level in TriageLevel]},
        "triageReasoning": _STRING,
        "redFlags": _STRING_LIST,
        "homeCare": _STRING_LIST,
        "soap": SOAP_SCHEMA,
    },
    "required": [*REQUIRED_FIELDS, *OPTIONAL_FIELDS],
    "additionalProperties": False,
}


def get_response_schema() -> dict:
    return ANALYSIS_RESPONSE_SCHEMA


def response_text_format(schema: dict | None = None) -> dict:
    """Wraps the schema as an OpenAI Responses API ``text`` parameter."""
    return {
        "format": {
            "type": "json_schema",
            "name": SCHEMA_NAME,
            "schema": schema or ANALYSIS_RESPONSE_SCHEMA,
            "strict": True,
        }
    }
