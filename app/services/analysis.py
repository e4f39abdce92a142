from app.core.interfaces import LLMProvider
from app.core.models import AnalysisRequest, AnalysisResult
from app.services.composer import build_payload
from app.services.llm import get_llm_provider
from app.services.mapper import parse_analysis_response
from app.services.media import encode_images, select_images
from config.logger import logger
from config.settings import config


class TriageAnalysisService:
    def __init__(self, llm: LLMProvider | None = None) -> None:
        self._llm = llm or get_llm_provider()
        logger.info(f"TriageAnalysisService initialized. Use Mock: {config.USE_MOCK_SERVICES}")

    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """Runs one request/response cycle: encode, compose, call, parse."""
        images = select_images(request.images)
        logger.info(
            f"Starting analysis: symptoms={len(request.symptoms)} chars, images={len(images)}"
        )

        encoded = await encode_images(images)
        payload = build_payload(request, encoded)
        reply = await self._llm.generate(payload)
        result = parse_analysis_response(reply)

        logger.info("Analysis completed.")
        return result


def get_analysis_service() -> TriageAnalysisService:
    return TriageAnalysisService()
