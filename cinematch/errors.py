"""
Error types raised by the AI search pipeline.
Each maps to one propagation rule: page-level failures are absorbed by the
catalog client, everything else reaches the API layer.
"""

from typing import Optional


class CineMatchError(Exception):
	"""Base class for all pipeline errors."""


class ConfigurationError(CineMatchError):
	"""A required external credential (TMDB or OpenAI key) is missing."""


class UpstreamHttpError(CineMatchError):
	"""The catalog API answered a single page request with a non-2xx status."""

	def __init__(self, status: int, body: str, url: Optional[str] = None):
		self.status = status  # HTTP status code from TMDB
		self.body = body  # raw response text for the server log
		self.url = url  # request URL (api key stripped)
		super().__init__(f"TMDB responded {status}: {body[:200]}")


class TransientNetworkError(CineMatchError):
	"""A catalog request timed out or the connection failed after every retry."""


class ParseError(CineMatchError):
	"""The language model answered with something that is not a JSON object."""


class ValidationError(CineMatchError, ValueError):
	"""The caller supplied an unusable input (e.g. an empty query)."""

	def __init__(self, message: str, code: str = "invalid_input"):
		self.code = code  # machine-readable code returned to clients
		super().__init__(message)
