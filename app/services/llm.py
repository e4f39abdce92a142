import asyncio
import json

from openai import AsyncOpenAI

from app.core.errors import ConfigurationError
from app.core.interfaces import LLMProvider
from app.core.models import AnalysisPayload
from app.core.schema import response_text_format
from config.logger import logger
from config.settings import config

MOCK_ANALYSIS_REPLY: dict = {
    "chiefComplaint": "Fever with a spreading rash over three days.",
    "timelineAnalysis": "Fever started on day 1 and a rash appeared on day 3; the course is worsening.",
    "voiceSummary": None,
    "visualObservations": None,
    "imageComparison": None,
    "medicineAnalysis": None,
    "symptomAnalysis": (
        "Persistent fever followed by a maculopapular rash suggests a systemic process. "
        "No breathing difficulty or neck stiffness reported."
    ),
    "healthRadar": {
        "hydration": 55,
        "fatigue": 70,
        "stress": 40,
        "inflammation": 65,
        "severity": 60,
    },
    "differentials": ["Viral exanthem", "Drug reaction", "Scarlet fever"],
    "triageLevel": "Medium",
    "triageReasoning": "Fever with a new rash warrants an in-person review within 24 hours.",
    "redFlags": ["Rash that does not fade under pressure", "Stiff neck or confusion"],
    "homeCare": ["Stay hydrated", "Rest", "Monitor temperature every 4 hours"],
    "soap": {
        "subjective": "Patient reports fever since day 1 and rash since day 3.",
        "objective": "No images supplied; findings based on self-report.",
        "assessment": "Febrile exanthem, etiology undetermined.",
        "plan": "Clinical review within 24h; escalate if red flags appear.",
    },
}


class MockLLM(LLMProvider):
    def __init__(self, reply: str | None = None) -> None:
        self.reply = reply if reply is not None else json.dumps(MOCK_ANALYSIS_REPLY)
        self.last_payload: AnalysisPayload | None = None

    async def generate(self, payload: AnalysisPayload) -> str | None:
        logger.info(f"MockLLM: Analyzing {len(payload.parts)} part(s)...")
        self.last_payload = payload
        await asyncio.sleep(1)
        return self.reply


class OpenAILLM(LLMProvider):
    def __init__(self, client: AsyncOpenAI | None = None) -> None:
        # No timeout and no retries: the call runs until the service answers or fails
        self.client = client or AsyncOpenAI(
            api_key=config.OPENAI_API_KEY, timeout=None, max_retries=0
        )

    async def generate(self, payload: AnalysisPayload) -> str | None:
        if not config.OPENAI_API_KEY:
            raise ConfigurationError("OPENAI_API_KEY is not configured.")

        logger.info(
            f"OpenAILLM: Sending request to {config.LLM_MODEL} with {len(payload.parts)} part(s)"
        )
        response = await self.client.responses.create(
            model=config.LLM_MODEL,
            instructions=payload.system_instruction,
            input=[{"role": "user", "content": payload.parts}],  # type: ignore[arg-type]
            text=response_text_format(payload.response_schema),  # type: ignore[arg-type]
            temperature=payload.temperature,
        )

        logger.info("OpenAILLM: Received response")
        return response.output_text


def get_llm_provider() -> LLMProvider:
    if config.USE_MOCK_SERVICES:
        return MockLLM()
    return OpenAILLM()
