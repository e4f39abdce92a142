import asyncio

from deepgram import DeepgramClient
from openai import AsyncOpenAI

from app.core.interfaces import STTProvider
from config.logger import logger
from config.settings import config


def append_voice_segment(symptoms: str, transcript: str, segment: str | None) -> tuple[str, str]:
    """Appends one finalised voice segment to both the symptom text and the transcript."""
    segment = (segment or "").strip()
    if not segment:
        return symptoms, transcript

    new_transcript = f"{transcript} {segment}".strip() if transcript else segment
    new_symptoms = f"{symptoms} {segment}" if symptoms else segment
    return new_symptoms, new_transcript


class MockSTT(STTProvider):
    async def transcribe_raw(self, audio_path: str) -> str:
        logger.info(f"MockSTT: Transcribing raw {audio_path}")
        await asyncio.sleep(1)
        return "I have had a fever since Monday and a rash appeared on my arms yesterday."


class DeepgramSTT(STTProvider):
    def __init__(self) -> None:
        self.client = DeepgramClient(api_key=config.DEEPGRAM_API_KEY)

    async def transcribe_raw(self, audio_path: str) -> str:
        logger.info(f"DeepgramSTT: Transcribing raw {audio_path}")

        with open(audio_path, "rb") as audio_file:
            buffer_data = audio_file.read()

        # Run synchronous Deepgram call in executor to avoid blocking the event loop
        loop = asyncio.get_running_loop()
        response = await loop.run_in_executor(
            None,
            lambda: self.client.listen.v1.media.transcribe_file(
                request=buffer_data,
                model=config.DEEPGRAM_MODEL,
                smart_format=True,
                punctuate=True,
            ),
        )

        results = response.results
        if not results or not results.channels:
            logger.warning("No results or channels in response")
            return ""
        return results.channels[0].alternatives[0].transcript


class OpenAI_STT(STTProvider):
    def __init__(self) -> None:
        self.client = AsyncOpenAI(api_key=config.OPENAI_API_KEY)

    async def transcribe_raw(self, audio_path: str) -> str:
        logger.info(f"OpenAI_STT: Transcribing raw {audio_path} with model {config.STT_MODEL}")
        with open(audio_path, "rb") as audio_file:
            transcript = await self.client.audio.transcriptions.create(
                model=config.STT_MODEL, file=audio_file
            )
        return transcript.text


def get_stt_provider() -> STTProvider:
    if config.USE_MOCK_SERVICES:
        return MockSTT()
    if config.DEEPGRAM_API_KEY:
        return DeepgramSTT()
    return OpenAI_STT()
