"""
TMDB API client for the AI search path.

Uses an injected httpx.AsyncClient with api_key query authentication. Every request
gets a hard per-attempt timeout and a bounded retry with exponential back-off.
Multi-page fetches run concurrently and are best-effort: a failed page is logged
and dropped without failing its siblings.
"""

import asyncio
import math
from typing import Any, Dict, Iterable, List, Optional

import httpx
from loguru import logger

from .errors import ConfigurationError, TransientNetworkError, UpstreamHttpError
from .models import Movie
from .vocabulary import (
	DEFAULT_WATCH_REGION,
	GENRE_ID_TO_NAME,
	PROVIDER_NAMES,
	TMDB_BASE_URL,
	TMDB_IMAGE_BASE,
)

DEFAULT_ATTEMPTS = 2
DEFAULT_BASE_DELAY = 0.2  # seconds; doubles on each retry
DEFAULT_TIMEOUT = 3.5  # seconds per attempt

DISCOVER_PATH = "/discover/movie"
SEARCH_PATH = "/search/movie"


def to_movie(record: Dict[str, Any]) -> Movie:
	"""Map one TMDB result onto a candidate Movie."""
	poster_path = record.get("poster_path")
	release_date = record.get("release_date") or ""
	year_part = release_date.split("-")[0]
	vote_average = float(record.get("vote_average") or 0.0)
	return Movie(
		id=f"tmdb_{record.get('id')}",
		title=record.get("title") or "",
		poster_url=f"{TMDB_IMAGE_BASE}{poster_path}" if poster_path else "",
		genres=[GENRE_ID_TO_NAME[gid] for gid in record.get("genre_ids") or [] if gid in GENRE_ID_TO_NAME],
		year=int(year_part) if year_part.isdigit() else 0,
		overview=record.get("overview") or "",
		rating=math.floor(vote_average * 10 + 0.5) / 10,  # one decimal, halves round up
	)


def to_movies(records: Iterable[Dict[str, Any]]) -> List[Movie]:
	"""Candidates for every record that has a poster; the rest are dropped."""
	return [to_movie(r) for r in records if r.get("poster_path")]


class TmdbClient:
	"""Thin async wrapper over the TMDB endpoints the search pipeline needs."""

	def __init__(
		self,
		http: httpx.AsyncClient,
		api_key: Optional[str],
		base_url: str = TMDB_BASE_URL,
		attempts: int = DEFAULT_ATTEMPTS,
		base_delay: float = DEFAULT_BASE_DELAY,
		timeout: float = DEFAULT_TIMEOUT,
	):
		self.http = http
		self.api_key = api_key
		self.base_url = base_url.rstrip("/")
		self.attempts = max(1, attempts)
		self.base_delay = base_delay
		self.timeout = timeout

	@property
	def configured(self) -> bool:
		return bool(self.api_key)

	def _require_key(self) -> str:
		if not self.api_key:
			raise ConfigurationError("TMDB_API_KEY is missing in the server environment")
		return self.api_key

	async def fetch_with_retry(self, path: str, params: Dict[str, str]) -> httpx.Response:
		"""
		GET a TMDB path, retrying transport failures and timeouts.
		HTTP error statuses are returned to the caller, not retried.
		Raises TransientNetworkError once every attempt has failed.
		"""
		url = f"{self.base_url}{path}"
		query = {**params, "api_key": self._require_key()}
		last_error: Optional[BaseException] = None

		for attempt in range(self.attempts):
			try:
				return await asyncio.wait_for(self.http.get(url, params=query), timeout=self.timeout)
			except (httpx.TransportError, asyncio.TimeoutError) as exc:
				last_error = exc
				if attempt == self.attempts - 1:
					break
				delay = self.base_delay * (2 ** attempt)
				logger.warning(
					f"[TMDB] {path} failed (attempt {attempt + 1}/{self.attempts}): {exc!r}; retrying in {delay:.2f}s"
				)
				await asyncio.sleep(delay)

		raise TransientNetworkError(f"TMDB request to {path} failed after {self.attempts} attempts") from last_error

	async def _results_page(self, path: str, params: Dict[str, str], page: int) -> List[Dict[str, Any]]:
		"""Raw results of one page; a non-2xx answer is logged and yields an empty page."""
		page_params = {**params, "page": str(page)}
		logger.debug(f"[TMDB] GET {path} params={page_params}")
		response = await self.fetch_with_retry(path, page_params)
		if not response.is_success:
			error = UpstreamHttpError(response.status_code, response.text, url=path)
			logger.error(f"[TMDB] {path} page {page}: {error}")
			return []
		return response.json().get("results") or []

	async def discover_page(self, params: Dict[str, str], page: int) -> List[Dict[str, Any]]:
		return await self._results_page(DISCOVER_PATH, params, page)

	async def search_page(self, params: Dict[str, str], page: int) -> List[Dict[str, Any]]:
		return await self._results_page(SEARCH_PATH, params, page)

	async def _fan_out(self, path: str, params: Dict[str, str], pages: int) -> List[Dict[str, Any]]:
		self._require_key()  # a missing key fails the whole operation, not each page
		tasks = [self._results_page(path, params, page) for page in range(1, pages + 1)]
		outcomes = await asyncio.gather(*tasks, return_exceptions=True)

		records: List[Dict[str, Any]] = []
		failed = 0
		for page, outcome in enumerate(outcomes, 1):
			if isinstance(outcome, BaseException):
				failed += 1
				logger.warning(f"[TMDB] {path} page {page} dropped: {outcome!r}")
				continue
			records.extend(outcome)
		if failed:
			logger.warning(f"[TMDB] {path} pages failed: {failed}/{pages}")
		return records

	async def discover(self, params: Dict[str, str], pages: int) -> List[Dict[str, Any]]:
		"""All records from discover pages 1..pages, in page order."""
		return await self._fan_out(DISCOVER_PATH, params, pages)

	async def search(self, params: Dict[str, str], pages: int = 2) -> List[Dict[str, Any]]:
		"""All records from title-search pages 1..pages, in page order."""
		return await self._fan_out(SEARCH_PATH, params, pages)

	async def watch_providers(self, tmdb_id: int, region: str = DEFAULT_WATCH_REGION) -> List[str]:
		"""
		Subscription streaming providers for one title in a region.
		Only whitelisted providers are returned, under their display names.
		Lookup failures are absorbed and give an empty list.
		"""
		path = f"/movie/{tmdb_id}/watch/providers"
		try:
			response = await self.fetch_with_retry(path, {})
		except TransientNetworkError as exc:
			logger.warning(f"[TMDB] Provider lookup for {tmdb_id} failed: {exc}")
			return []
		if not response.is_success:
			logger.error(f"[TMDB] {UpstreamHttpError(response.status_code, response.text, url=path)}")
			return []

		providers: List[str] = []
		try:
			entry = (response.json().get("results") or {}).get(region.upper()) or {}
			for item in entry.get("flatrate") or []:
				name = PROVIDER_NAMES.get(item.get("provider_name", ""))
				if name and name not in providers:
					providers.append(name)
		except (ValueError, AttributeError) as exc:  # non-JSON body or unexpected shape
			logger.warning(f"[TMDB] Unreadable provider payload for {tmdb_id}: {exc!r}")
			return []
		return providers
