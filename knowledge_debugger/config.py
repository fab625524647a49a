"""Configuration from .env file."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Without a key the generator runs in mock mode.
    OPENAI_API_KEY: str | None = None
    OPENAI_MODEL: str = "gpt-4.1-mini"
    LOG_LEVEL: str = "INFO"

    YOUTUBE_OEMBED_URL: str = "https://www.youtube.com/oembed"
    HTTP_TIMEOUT: float = 10.0

    # Assessment policy. A domain is finished after REQUIRED_QUESTIONS correct answers.
    REQUIRED_QUESTIONS: int = 5
    MASTERED_THRESHOLD: float = 0.8
    COMPLETED_THRESHOLD: float = 0.6
    DEFAULT_DIFFICULTY: float = 50.0

    # Extra attempts when the generator returns malformed content.
    GENERATION_RETRIES: int = 2

    REPORTS_PATH: str = "data/reports.json"

    class Config:
        env_file = ".env"


settings = Settings()
