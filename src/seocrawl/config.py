from dotenv import load_dotenv
from dataclasses import dataclass
from typing import Optional
from pathlib import Path
import json
import os

from seocrawl.constants import (
    DEFAULT_BATCH_DELAY_SECONDS,
    DEFAULT_BATCH_SIZE,
    DEFAULT_CALL_TIMEOUT_SECONDS,
    DEFAULT_LLM_MAX_RETRIES,
    DEFAULT_LLM_MODEL,
    DEFAULT_LLM_PROVIDER,
    DEFAULT_LOAD_SHED_FACTOR,
    DEFAULT_TARGET_PAGE_COUNT,
)

load_dotenv()  # Loads variables from .env file


class Settings:
    """
    Manages application settings loaded from environment variables.
    """
    LLM_API_KEY = os.getenv("LLM_API_KEY")
    GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY")  # Fallback key for the gemini provider
    LLM_MODEL = os.getenv("LLM_MODEL", DEFAULT_LLM_MODEL)
    LLM_PROVIDER = os.getenv("LLM_PROVIDER", DEFAULT_LLM_PROVIDER)
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    @property
    def api_key(self) -> Optional[str]:
        if self.LLM_API_KEY:
            return self.LLM_API_KEY
        if self.LLM_PROVIDER == "gemini":
            return self.GOOGLE_API_KEY
        return None


settings = Settings()


@dataclass
class CrawlConfig:
    """Configuration for a crawl."""
    target_page_count: int = DEFAULT_TARGET_PAGE_COUNT
    batch_size: int = DEFAULT_BATCH_SIZE
    batch_delay_seconds: float = DEFAULT_BATCH_DELAY_SECONDS
    load_shed_factor: float = DEFAULT_LOAD_SHED_FACTOR
    call_timeout_seconds: Optional[float] = DEFAULT_CALL_TIMEOUT_SECONDS

    # LLM collaborators
    llm_api_key: Optional[str] = None
    llm_model: str = DEFAULT_LLM_MODEL
    llm_provider: str = DEFAULT_LLM_PROVIDER
    llm_max_retries: int = DEFAULT_LLM_MAX_RETRIES

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "CrawlConfig":
        """Load configuration from environment variables.

        Crawl settings use the SEOCRAWL_ prefix, e.g. SEOCRAWL_BATCH_SIZE=10.
        A SEOCRAWL_CALL_TIMEOUT_SECONDS of 0 disables the per-call timeout.

        Returns:
            CrawlConfig: Configuration instance with values from environment
        """
        timeout = float(os.getenv("SEOCRAWL_CALL_TIMEOUT_SECONDS", str(DEFAULT_CALL_TIMEOUT_SECONDS)))
        return cls(
            target_page_count=int(os.getenv("SEOCRAWL_TARGET_PAGE_COUNT", str(DEFAULT_TARGET_PAGE_COUNT))),
            batch_size=int(os.getenv("SEOCRAWL_BATCH_SIZE", str(DEFAULT_BATCH_SIZE))),
            batch_delay_seconds=float(os.getenv("SEOCRAWL_BATCH_DELAY_SECONDS", str(DEFAULT_BATCH_DELAY_SECONDS))),
            load_shed_factor=float(os.getenv("SEOCRAWL_LOAD_SHED_FACTOR", str(DEFAULT_LOAD_SHED_FACTOR))),
            call_timeout_seconds=timeout if timeout > 0 else None,
            llm_api_key=settings.api_key,
            llm_model=os.getenv("LLM_MODEL", DEFAULT_LLM_MODEL),
            llm_provider=os.getenv("LLM_PROVIDER", DEFAULT_LLM_PROVIDER),
            llm_max_retries=int(os.getenv("LLM_MAX_RETRIES", str(DEFAULT_LLM_MAX_RETRIES))),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )

    @classmethod
    def from_file(cls, path: str) -> "CrawlConfig":
        """Load configuration from a JSON configuration file.

        Values may sit at the top level or under a "crawl" key. A missing
        file yields the defaults.

        Args:
            path: Path to JSON configuration file

        Returns:
            CrawlConfig with values from file
        """
        config = cls()
        file_path = Path(path)

        if not file_path.exists():
            return config

        with open(file_path, 'r') as f:
            data = json.load(f)

        crawl_config = data.get('crawl', data)

        for field_name in config.__dataclass_fields__:
            if field_name in crawl_config:
                setattr(config, field_name, crawl_config[field_name])

        return config

    def validate(self) -> None:
        """Check that the values describe a runnable crawl.

        Raises:
            ValueError: If a value is out of range
        """
        if self.target_page_count < 1:
            raise ValueError("target_page_count must be >= 1")
        if self.batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        if self.batch_delay_seconds < 0:
            raise ValueError("batch_delay_seconds must be >= 0")
        if self.load_shed_factor <= 0:
            raise ValueError("load_shed_factor must be > 0")
        if self.call_timeout_seconds is not None and self.call_timeout_seconds <= 0:
            raise ValueError("call_timeout_seconds must be > 0 or None")

    def to_dict(self) -> dict:
        """Convert configuration to dictionary, without the API key.

        Returns:
            Dictionary of configuration values
        """
        return {
            field_name: getattr(self, field_name)
            for field_name in self.__dataclass_fields__
            if field_name != "llm_api_key"
        }
