from app.core.models import AnalysisPayload, AnalysisRequest, EncodedImage
from app.core.schema import get_response_schema
from config.logger import logger
from config.prompts import (
    HISTORY_LABEL,
    SYMPTOMS_LABEL,
    VOICE_LABEL,
    get_analysis_instruction,
    get_system_instruction,
)
from config.settings import config


def has_submittable_input(symptoms: str | None, voice_transcript: str | None, image_count: int) -> bool:
    """A submission needs symptom text, a voice transcript or at least one image."""
    return bool(
        (symptoms and symptoms.strip())
        or (voice_transcript and voice_transcript.strip())
        or image_count > 0
    )


def compose_prompt_text(symptoms: str, history: str = "", voice_transcript: str = "") -> str:
    prompt_text = f'{SYMPTOMS_LABEL}: "{symptoms.strip()}"\n'
    if history and history.strip():
        prompt_text += f'{HISTORY_LABEL}: "{history.strip()}"\n'
    if voice_transcript and voice_transcript.strip():
        prompt_text += f'{VOICE_LABEL}: "{voice_transcript.strip()}"\n'

    prompt_text += f"\n{get_analysis_instruction()}"
    return prompt_text


def image_part(image: EncodedImage) -> dict:
    return {
        "type": "input_image",
        "image_url": image.data_url,
        "detail": config.IMAGE_DETAIL,
    }


def text_part(text: str) -> dict:
    return {"type": "input_text", "text": text}


def build_payload(request: AnalysisRequest, encoded_images: list[EncodedImage]) -> AnalysisPayload:
    """Builds the request: images in input order, then one composed text block."""
    parts: list[dict] = [image_part(img) for img in encoded_images]
    parts.append(
        text_part(compose_prompt_text(request.symptoms, request.history, request.voice_transcript))
    )

    logger.info(
        f"Composed analysis payload: {len(encoded_images)} image part(s), "
        f"history={bool(request.history.strip())}, voice={bool(request.voice_transcript.strip())}"
    )
    return AnalysisPayload(
        system_instruction=get_system_instruction(),
        parts=parts,
        response_schema=get_response_schema(),
        temperature=config.ANALYSIS_TEMPERATURE,
    )
