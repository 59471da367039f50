"""Runtime configuration read from the environment (.env supported)."""

import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

DENIED_FALLBACK_CITY = "Dubai"
UNSUPPORTED_FALLBACK_CITY = "London"


@dataclass(frozen=True)
class Settings:
    openweather_api_key: str = ""
    openweather_base_url: str = "https://api.openweathermap.org"
    timeout_s: float = 10.0
    anthropic_api_key: str | None = None
    summary_model: str = "claude-sonnet-4-6"
    summary_max_tokens: int = 300
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build Settings from environment variables after loading .env.

        The .env file is looked up from the working directory upwards.
        Variables already set in the environment take precedence.
        """
        load_dotenv(find_dotenv(usecwd=True))
        return cls(
            openweather_api_key=os.getenv("OPENWEATHER_API_KEY", "").strip(),
            openweather_base_url=os.getenv(
                "OPENWEATHER_BASE_URL", "https://api.openweathermap.org"
            ).rstrip("/"),
            timeout_s=float(os.getenv("WEATHER_TIMEOUT_S", "10")),
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY") or None,
            summary_model=os.getenv("SUMMARY_MODEL", "claude-sonnet-4-6"),
            summary_max_tokens=int(os.getenv("SUMMARY_MAX_TOKENS", "300")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
