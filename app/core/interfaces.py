from abc import ABC, abstractmethod

from app.core.models import AnalysisPayload


class STTProvider(ABC):
    @abstractmethod
    async def transcribe_raw(self, audio_path: str) -> str:
        """Transcribes one recorded voice segment to plain text."""


class LLMProvider(ABC):
    @abstractmethod
    async def generate(self, payload: AnalysisPayload) -> str | None:
        """Sends one structured multimodal request and returns the raw reply text."""


class AuthProvider(ABC):
    @abstractmethod
    def verify(self, email: str, password: str) -> str | None:
        """Returns the authenticated identity, or None when the credentials are rejected."""
