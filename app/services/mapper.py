from pydantic import ValidationError

from app.core.errors import EmptyResponseError, ResponseDecodeError, ResponseSchemaError
from app.core.models import AnalysisResult
from config.logger import logger


def _describe(errors: list[dict], limit: int = 3) -> str:
    parts = []
    for err in errors[:limit]:
        location = ".".join(str(p) for p in err.get("loc", ())) or "<root>"
        parts.append(f"{location}: {err.get('msg', 'invalid')}")
    if len(errors) > limit:
        parts.append(f"... and {len(errors) - limit} more")
    return "; ".join(parts)


def parse_analysis_response(text: str | None) -> AnalysisResult:
    """Parses the raw model reply into an AnalysisResult.

    The reply is re-validated against the same contract used to request it.
    Validation is strict, so values of the wrong type are rejected instead of
    coerced. Blank optional findings come back as None.
    """
    if text is None or not text.strip():
        raise EmptyResponseError("No response received from the analysis model.")

    try:
        result = AnalysisResult.model_validate_json(text, strict=True)
    except ValidationError as e:
        errors = e.errors()
        if any(err.get("type") == "json_invalid" for err in errors):
            logger.error(f"Model reply is not valid JSON ({len(text)} chars)")
            raise ResponseDecodeError("The analysis reply was not valid JSON.") from e
        detail = _describe(errors)
        logger.error(f"Model reply does not match the analysis contract: {detail}")
        raise ResponseSchemaError(f"The analysis reply did not match the expected format ({detail}).") from e

    logger.info(f"Parsed analysis result: triage={result.triage_level.value}")
    return result
