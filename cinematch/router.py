"""
AI search router.
Turns a free-text request into ranked TMDB candidates: heuristic parse, LLM
extraction, merge, path choice, retrieval with a fixed fallback ladder, and mood
re-ranking. Results are returned in one batch or streamed as NDJSON events.
"""

import json
from dataclasses import dataclass
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Tuple

from loguru import logger

from .llm_extractor import LlmIntentExtractor
from .merge import merge_intents
from .models import Movie, ParsedQuery
from .mood_filter import apply_mood_filter, filter_by_year, mood_filters, sort_by_closest_year
from .query_builder import (
	DISCOVER,
	SEARCH,
	SEARCH_PAGE_COUNT,
	DiscoverOptions,
	build_discover_params,
	build_search_params,
	choose_path,
	discover_page_count,
	encode_params,
	score_paths,
)
from .query_parser import QueryParser
from .tmdb_client import TmdbClient, to_movies

MIN_RESULTS = 10  # the ladder keeps relaxing until at least this many remain
STREAM_MAX_RESULTS = 100  # cap on movies emitted over one stream
STREAM_MAX_PAGES = 5  # discover pages read while streaming
STREAM_BATCH_SIZE = 20  # batch size when re-sorted results are streamed

# Fallback labels reported in debug output
SEARCH_TO_DISCOVER = "search_to_discover"
DROP_YEAR_KEEP_LANGUAGE = "drop_year_keep_language"
DISCOVER_TO_SEARCH = "discover_to_search"

PageFetcher = Callable[[Dict[str, str], int], Awaitable[List[Dict[str, Any]]]]


@dataclass
class SearchOutcome:
	"""Final answer of a non-streaming search."""
	kind: str  # "factual" or "vibe"
	movies: List[Movie]
	debug: Dict[str, Any]
	mood: Optional[str] = None  # app category, set for vibe outcomes

	def to_payload(self) -> Dict[str, Any]:
		payload: Dict[str, Any] = {
			"type": self.kind,
			"movies": [m.to_dict() for m in self.movies],
			"debug": self.debug,
		}
		if self.mood:
			payload["mood"] = self.mood
		return payload


@dataclass
class _Attempt:
	"""Movies from one retrieval plus the query string that produced them."""
	movies: List[Movie]
	params: str = ""


def encode_event(event: Dict[str, Any]) -> str:
	"""One NDJSON line."""
	return json.dumps(event) + "\n"


class SearchRouter:
	"""
	High-level AI search API.
	Collaborators are injected so tests can substitute fakes for TMDB and OpenAI.
	"""

	def __init__(
		self,
		catalog: TmdbClient,
		extractor: LlmIntentExtractor,
		parser: Optional[QueryParser] = None,
	):
		self.catalog = catalog
		self.extractor = extractor
		self.parser = parser or QueryParser()

	async def interpret(self, query: str) -> Tuple[ParsedQuery, Dict[str, Any]]:
		"""
		Heuristic parse followed by LLM extraction, merged.
		The LLM call must finish first because every query built later depends on it.
		"""
		heuristic = self.parser.parse(query)  # raises ValidationError on empty input
		llm = await self.extractor.extract(query)
		merged = merge_intents(heuristic, llm)

		debug: Dict[str, Any] = {
			"query": query,
			"llm": llm.to_dict(),
			"parsed": merged.to_dict(),
			"path_scores": score_paths(merged),
		}
		logger.info(f"[Router] query='{query}' | path={choose_path(merged)} | parsed={merged}")
		return merged, debug

	# Retrieval primitives

	async def _run_discover(self, parsed: ParsedQuery, options: DiscoverOptions = DiscoverOptions()) -> _Attempt:
		params = build_discover_params(parsed, options)
		encoded = encode_params(params)
		logger.debug(f"[Router] discover {encoded}")
		records = await self.catalog.discover(params, discover_page_count(parsed))
		return _Attempt(to_movies(records), encoded)

	async def _run_search(self, parsed: ParsedQuery) -> _Attempt:
		params = build_search_params(parsed)
		if not params:
			return _Attempt([], "")
		encoded = encode_params(params)
		logger.debug(f"[Router] search {encoded}")
		records = await self.catalog.search(params, SEARCH_PAGE_COUNT)
		return _Attempt(to_movies(records), encoded)

	# Batch search

	async def search(self, query: str) -> SearchOutcome:
		"""Interpret the query and resolve it to a ranked candidate list."""
		merged, debug = await self.interpret(query)
		return await self.resolve(merged, debug)

	async def resolve(self, merged: ParsedQuery, debug: Dict[str, Any]) -> SearchOutcome:
		"""
		Run the chosen path and walk the fallback ladder.
		Each rung runs at most once:
		search -> discover when a title search comes up short;
		relaxed vote floor; then, for an exact year, either drop the year and sort by
		closeness, or widen the year window and finally try a title search.
		"""
		path = choose_path(merged)
		year = merged.year
		fallback: Optional[str] = None

		if path == SEARCH:
			attempt = await self._run_search(merged)
			movies = filter_by_year(attempt.movies, year)
			if len(movies) < MIN_RESULTS:
				fallback = SEARCH_TO_DISCOVER
				attempt = await self._run_discover(merged)
				movies = attempt.movies
		else:
			attempt = await self._run_discover(merged)
			movies = attempt.movies
		last_params = attempt.params

		if path == DISCOVER or fallback == SEARCH_TO_DISCOVER:
			movies = filter_by_year(movies, year)
			if len(movies) < MIN_RESULTS:
				relaxed = await self._run_discover(merged, DiscoverOptions(relax_vote_count=True))
				last_params = relaxed.params
				movies = filter_by_year(relaxed.movies, year)

				if len(movies) < MIN_RESULTS and year:
					if not movies:
						dropped = await self._run_discover(
							merged,
							DiscoverOptions(relax_vote_count=True, ignore_year=True, ignore_latest_window=True),
						)
						last_params = dropped.params
						movies = sort_by_closest_year(dropped.movies, year)
						fallback = DROP_YEAR_KEEP_LANGUAGE
					else:
						widened = await self._run_discover(merged, DiscoverOptions(relax_vote_count=True, widen_year=True))
						last_params = widened.params
						movies = filter_by_year(widened.movies, year)
						if len(movies) < MIN_RESULTS and merged.title_candidate:
							fallback = DISCOVER_TO_SEARCH
							searched = await self._run_search(merged)
							last_params = searched.params
							movies = filter_by_year(searched.movies, year)

		movies, applied = apply_mood_filter(merged, movies)

		debug.update({
			"path": path,
			"params": last_params,
			"fallback": fallback,
			"mood_filters": applied.to_dict(),
			"counts": {"filtered": len(movies)},
		})
		logger.info(f"[Router] path={path} fallback={fallback} returned={len(movies)}")

		if not movies and merged.subjective:
			mood = await self.extractor.classify_vibe(merged.raw)
			logger.info(f"[Router] No catalog matches for a vibe request; category={mood}")
			return SearchOutcome(kind="vibe", movies=[], debug=debug, mood=mood)
		return SearchOutcome(kind="factual", movies=movies, debug=debug)

	# Streaming

	async def stream(self, merged: ParsedQuery, debug: Dict[str, Any]) -> AsyncIterator[Dict[str, Any]]:
		"""
		Yield a meta event, then batch events, then exactly one done event.
		Failures after the stream has started are logged and still end with done,
		whose count equals the number of movies already emitted.
		"""
		emitted = 0
		meta_sent = False
		applied, _ = mood_filters(merged.mood_tags)
		path = choose_path(merged)

		def meta(params: str, **extra: Any) -> Dict[str, Any]:
			return {
				"type": "meta",
				"debug": {**debug, **extra, "path": path, "params": params, "mood_filters": applied.to_dict()},
			}

		try:
			if path == SEARCH:
				params = build_search_params(merged)
				meta_sent = True
				yield meta(encode_params(params))
				async for batch in self._stream_pages(self.catalog.search_page, params, merged, SEARCH_PAGE_COUNT):
					emitted += len(batch["movies"])
					yield batch
			else:
				params = build_discover_params(merged)
				first_page = await self.catalog.discover_page(params, 1)

				if not first_page and merged.year:
					dropped = build_discover_params(merged, DiscoverOptions(ignore_year=True, ignore_latest_window=True))
					meta_sent = True
					yield meta(encode_params(dropped), fallback=DROP_YEAR_KEEP_LANGUAGE)
					collected = await self._collect_discover(dropped, merged)
					ranked = sort_by_closest_year(collected, merged.year)[:STREAM_MAX_RESULTS]
					for i in range(0, len(ranked), STREAM_BATCH_SIZE):
						chunk = ranked[i:i + STREAM_BATCH_SIZE]
						emitted += len(chunk)
						yield {"type": "batch", "movies": [m.to_dict() for m in chunk]}
				else:
					meta_sent = True
					yield meta(encode_params(params))
					async for batch in self._stream_pages(
						self.catalog.discover_page, params, merged, STREAM_MAX_PAGES, first_page=first_page
					):
						emitted += len(batch["movies"])
						yield batch
		except Exception as exc:
			logger.exception(f"[Router] stream error after {emitted} movies: {exc}")
			if not meta_sent:
				yield meta("", error="stream_failed")
		yield {"type": "done", "count": emitted}

	async def _stream_pages(
		self,
		fetch: PageFetcher,
		params: Dict[str, str],
		merged: ParsedQuery,
		max_pages: int,
		first_page: Optional[List[Dict[str, Any]]] = None,
	) -> AsyncIterator[Dict[str, Any]]:
		"""Page by page: map, mood-filter, cap at STREAM_MAX_RESULTS; stop on an empty page."""
		total = 0
		for page in range(1, max_pages + 1):
			records = first_page if page == 1 and first_page is not None else await fetch(params, page)
			if not records:
				break
			movies, _ = apply_mood_filter(merged, to_movies(records))
			movies = movies[:STREAM_MAX_RESULTS - total]
			total += len(movies)
			if movies:
				yield {"type": "batch", "movies": [m.to_dict() for m in movies]}
			if total >= STREAM_MAX_RESULTS:
				break

	async def _collect_discover(self, params: Dict[str, str], merged: ParsedQuery) -> List[Movie]:
		"""Read discover pages sequentially until empty or enough movies, then mood-filter."""
		movies: List[Movie] = []
		for page in range(1, STREAM_MAX_PAGES + 1):
			records = await self.catalog.discover_page(params, page)
			if not records:
				break
			movies.extend(to_movies(records))
			if len(movies) >= STREAM_MAX_RESULTS:
				break
		ranked, _ = apply_mood_filter(merged, movies)
		return ranked
