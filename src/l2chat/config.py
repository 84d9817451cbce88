"""
Runtime configuration, read from the environment (and a local .env file).
"""
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv
from platformdirs import user_data_dir

APP_NAME = "l2"
DEFAULT_MODEL = "google/gemini-2.5-flash"
DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"


class ConfigurationError(Exception):
    """Startup cannot continue: missing credentials or bundled resources."""


@dataclass(frozen=True)
class Settings:
    api_key: str
    model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL
    home: Path = Path(user_data_dir(APP_NAME))
    log_level: str = "INFO"

    queue_size: int = 100
    tick_interval: float = 0.05
    summary_timeout: float = 10.0
    max_history_display: int = 10
    verbatim_window: int = 10
    fallback_window: int = 5

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "Settings":
        if load_env_file:
            load_dotenv()

        api_key = os.getenv("OPENROUTER", "").strip()
        if not api_key:
            raise ConfigurationError(
                "OPENROUTER is not set; put your API key in the environment or a .env file"
            )

        home = os.getenv("L2_HOME")
        return cls(
            api_key=api_key,
            model=os.getenv("L2_MODEL", DEFAULT_MODEL),
            base_url=os.getenv("L2_BASE_URL", DEFAULT_BASE_URL),
            home=Path(home).expanduser() if home else Path(user_data_dir(APP_NAME)),
            log_level=os.getenv("L2_LOG_LEVEL", "INFO"),
        )
