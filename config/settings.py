import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).parent.parent


class AppConfig(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "neuroscanx"
    LOG_LEVEL: str = "INFO"

    # Server
    SERVER_HOST: str = "0.0.0.0"
    PORT: int = 7860
    CONCURRENCY_LIMIT: int = 4

    # Models
    OPENAI_API_KEY: str = Field(default="")
    DEEPGRAM_API_KEY: str = Field(default="")

    DEEPGRAM_MODEL: str = "nova-3"

    LLM_MODEL: str = "gpt-4.1"
    STT_MODEL: str = "gpt-4o-transcribe"

    # Analysis request
    ANALYSIS_TEMPERATURE: float = 0.3
    MAX_IMAGES: int = 2
    IMAGE_DETAIL: str = "high"

    # Mocking
    USE_MOCK_SERVICES: bool = False

    # Application Paths
    TEMP_DIR: Path = BASE_DIR / "_temp"


config = AppConfig()

# Ensure temp dir exists
os.makedirs(config.TEMP_DIR, exist_ok=True)
