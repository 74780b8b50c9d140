"""
Runtime configuration.
Values come from the environment (optionally a .env file). Missing credentials are
allowed at start-up; the features that need them raise ConfigurationError on use.
"""

import os
import sys
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from loguru import logger


def _float_env(name: str, default: float) -> float:
	value = os.getenv(name)
	return float(value) if value else default


def _int_env(name: str, default: int) -> int:
	value = os.getenv(name)
	return int(value) if value else default


@dataclass(frozen=True)
class Settings:
	tmdb_api_key: Optional[str] = None  # TMDB v3 api key
	openai_api_key: Optional[str] = None  # OpenAI key for extraction and vibe mapping
	openai_model: str = "gpt-4o-mini"
	tmdb_timeout_s: float = 3.5  # per-attempt timeout
	tmdb_attempts: int = 2  # attempts per TMDB request
	log_level: str = "INFO"

	@classmethod
	def from_env(cls) -> "Settings":
		"""Read settings, loading a .env file from the working directory if present."""
		load_dotenv()
		return cls(
			tmdb_api_key=os.getenv("TMDB_API_KEY") or None,
			# legacy deployments used a lowercase variable name
			openai_api_key=os.getenv("OPENAI_API_KEY") or os.getenv("open_api_key") or None,
			openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
			tmdb_timeout_s=_float_env("TMDB_TIMEOUT_S", 3.5),
			tmdb_attempts=_int_env("TMDB_ATTEMPTS", 2),
			log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
		)


def configure_logging(level: str = "INFO") -> None:
	"""Route loguru output to stderr at the given level."""
	logger.remove()
	logger.add(sys.stderr, level=level)
