"""Shared fixtures for NeuroScanX tests."""

import copy
import json
import os

# Keep the suite hermetic: no network providers are built at import time.
os.environ["USE_MOCK_SERVICES"] = "true"

import pytest  # noqa: E402

from app.core.interfaces import AuthProvider, LLMProvider  # noqa: E402
from app.core.models import AnalysisPayload, AnalysisResult, AppState, View  # noqa: E402
from app.services.analysis import TriageAnalysisService  # noqa: E402
from app.services.auth import SimulatedAuthProvider  # noqa: E402
from app.services.llm import MOCK_ANALYSIS_REPLY  # noqa: E402
from app.services.session import TriageSession  # noqa: E402


class FakeLLM(LLMProvider):
    """Returns a fixed reply (or raises) and records every payload it receives."""

    def __init__(self, reply: str | None = None, error: Exception | None = None, on_call=None):
        self.reply = reply
        self.error = error
        self.on_call = on_call
        self.payloads: list[AnalysisPayload] = []

    @property
    def calls(self) -> int:
        return len(self.payloads)

    async def generate(self, payload: AnalysisPayload) -> str | None:
        self.payloads.append(payload)
        if self.on_call is not None:
            self.on_call()
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def reply_dict() -> dict:
    return copy.deepcopy(MOCK_ANALYSIS_REPLY)


@pytest.fixture
def reply_text(reply_dict) -> str:
    return json.dumps(reply_dict)


@pytest.fixture
def analysis_result(reply_text) -> AnalysisResult:
    return AnalysisResult.model_validate_json(reply_text)


@pytest.fixture
def image_files(tmp_path) -> list[str]:
    paths = []
    for name, content in (
        ("current.png", b"\x89PNG\r\n\x1a\nfirst"),
        ("previous.jpg", b"\xff\xd8\xffsecond"),
        ("pills.webp", b"RIFFthird"),
    ):
        path = tmp_path / name
        path.write_bytes(content)
        paths.append(str(path))
    return paths


@pytest.fixture
def fake_llm(reply_text) -> FakeLLM:
    return FakeLLM(reply=reply_text)


@pytest.fixture
def auth() -> AuthProvider:
    return SimulatedAuthProvider()


@pytest.fixture
def make_session(auth):
    def _make(llm: LLMProvider) -> TriageSession:
        return TriageSession(analysis=TriageAnalysisService(llm=llm), auth=auth)

    return _make


@pytest.fixture
def dashboard_state() -> AppState:
    return AppState(view=View.DASHBOARD, user_email="jane@example.com")


@pytest.fixture
def make_llm():
    return FakeLLM
