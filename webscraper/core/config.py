import os
from pathlib import Path
from typing import Dict, Any, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from webscraper.core.constants import (
    CYCLE_HISTORY_SIZE,
    DEFAULT_NAVIGATION_TIMEOUT,
    DEFAULT_OUTPUT_FILE,
    DEFAULT_RENDER_TIMEOUT,
    DEFAULT_RETRY_WAIT,
    DEFAULT_SCRAPE_INTERVAL,
    DEFAULT_TIMEOUT_ATTEMPTS,
    DEFAULT_USER_AGENT,
)
from webscraper.core.errors import ConfigurationError
from webscraper.core.logging import log
from webscraper.utils.file_io import read_json


class ScraperSettings(BaseModel):
    """Runtime tunables of one scraper instance. Times are in seconds."""

    model_config = ConfigDict(frozen=True)

    scrape_interval: float = Field(default=DEFAULT_SCRAPE_INTERVAL, gt=0)
    render_timeout: float = Field(default=DEFAULT_RENDER_TIMEOUT, gt=0)
    navigation_timeout: float = Field(default=DEFAULT_NAVIGATION_TIMEOUT, gt=0)
    timeout_attempts: int = Field(default=DEFAULT_TIMEOUT_ATTEMPTS, ge=1)
    retry_wait: float = Field(default=DEFAULT_RETRY_WAIT, ge=0)
    output: Path = Path(DEFAULT_OUTPUT_FILE)
    captures_dir: Optional[Path] = None
    headless: bool = True
    user_agent: str = DEFAULT_USER_AGENT
    history_size: int = Field(default=CYCLE_HISTORY_SIZE, ge=1)


class SettingsManager:
    """Loads scraper settings from defaults, an optional JSON file and the environment."""

    ENV_PREFIX = "WEBSCRAPER_"
    ENV_KEYS = (
        "scrape_interval",
        "render_timeout",
        "navigation_timeout",
        "timeout_attempts",
        "retry_wait",
        "output",
        "captures_dir",
        "headless",
        "user_agent",
        "history_size",
    )

    DEFAULT_SETTINGS: Dict[str, Any] = ScraperSettings().model_dump()

    @classmethod
    def _env_overrides(cls) -> Dict[str, Any]:
        overrides = {}
        for key in cls.ENV_KEYS:
            value = os.environ.get(f"{cls.ENV_PREFIX}{key.upper()}")
            if value is not None and value != "":
                overrides[key] = value
        return overrides

    @classmethod
    def load_settings(cls, path: Optional[Path] = None, **overrides: Any) -> ScraperSettings:
        """Merge defaults < settings file < environment < explicit overrides."""
        settings = cls.DEFAULT_SETTINGS.copy()
        if path is not None:
            file_settings = read_json(Path(path))
            if not isinstance(file_settings, dict):
                raise ConfigurationError(f"Settings file {path} must contain a JSON object")
            unknown = set(file_settings) - set(settings)
            if unknown:
                log(f"Ignoring unknown settings: {', '.join(sorted(unknown))}", level="warning")
            settings.update({k: v for k, v in file_settings.items() if k in settings})
        settings.update(cls._env_overrides())
        settings.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return ScraperSettings(**settings)
        except ValidationError as e:
            errors = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
            raise ConfigurationError("Invalid scraper settings", errors=errors)

    @staticmethod
    def validate_url(url: str) -> str:
        """Robust URL validation using urllib.parse."""
        try:
            parsed = urlparse(url)
            if not (parsed.scheme in ("http", "https") and parsed.netloc):
                raise ValueError(f"Invalid URL: '{url}' - Must be http/https with a valid domain.")
            return url
        except Exception as e:
            if isinstance(e, ValueError):
                raise
            raise ValueError(f"URL parsing failed: {e}")
