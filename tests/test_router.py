"""Unit tests for the search router: fallback ladder, vibe outcome and NDJSON streaming."""

from typing import Any, Callable, Dict, List

import pytest

from conftest import fake_openai

from cinematch.llm_extractor import LlmIntentExtractor
from cinematch.router import (
	DISCOVER_TO_SEARCH,
	DROP_YEAR_KEEP_LANGUAGE,
	SEARCH_TO_DISCOVER,
	STREAM_MAX_RESULTS,
	SearchRouter,
	encode_event,
)

Records = List[Dict[str, Any]]


class StubCatalog:
	"""Records every call; answers come from per-endpoint callables."""

	def __init__(
		self,
		discover_fn: Callable[[Dict[str, str], int], Records] = lambda params, page: [],
		search_fn: Callable[[Dict[str, str], int], Records] = lambda params, page: [],
	):
		self.discover_fn = discover_fn
		self.search_fn = search_fn
		self.calls: List[tuple] = []

	async def discover(self, params, pages):
		self.calls.append(("discover", dict(params), pages))
		return [r for page in range(1, pages + 1) for r in self.discover_fn(params, page)]

	async def search(self, params, pages=2):
		self.calls.append(("search", dict(params), pages))
		return [r for page in range(1, pages + 1) for r in self.search_fn(params, page)]

	async def discover_page(self, params, page):
		self.calls.append(("discover_page", dict(params), page))
		return self.discover_fn(params, page)

	async def search_page(self, params, page):
		self.calls.append(("search_page", dict(params), page))
		return self.search_fn(params, page)

	def count(self, kind: str) -> int:
		return sum(1 for c in self.calls if c[0] == kind)


def make_router(catalog: StubCatalog, *llm_answers: str) -> SearchRouter:
	# "{}" means the model had no opinion on any field
	return SearchRouter(catalog, LlmIntentExtractor(fake_openai(*(llm_answers or ("{}",)))))


def page_of(record_factory, page: int, n: int = 20, **overrides) -> Records:
	return [record_factory(page * 100 + i, **overrides) for i in range(n)]


@pytest.mark.asyncio
async def test_title_search_with_enough_results(records):
	catalog = StubCatalog(search_fn=lambda params, page: records(8, start=page * 10))
	outcome = await make_router(catalog).search("Inception")
	assert outcome.kind == "factual"
	assert len(outcome.movies) == 16
	assert outcome.debug["path"] == "search"
	assert outcome.debug["fallback"] is None
	assert catalog.count("discover") == 0
	assert catalog.calls[0][1] == {"query": "inception"}


@pytest.mark.asyncio
async def test_short_title_search_falls_back_to_discover(records):
	catalog = StubCatalog(
		discover_fn=lambda params, page: records(20, start=page * 100),
		search_fn=lambda params, page: records(2, start=page) if page == 1 else [],
	)
	outcome = await make_router(catalog).search("Inception")
	assert outcome.debug["fallback"] == SEARCH_TO_DISCOVER
	assert catalog.count("search") == 1
	assert catalog.count("discover") == 1
	assert len(outcome.movies) == 100


@pytest.mark.asyncio
async def test_empty_year_drops_year_and_sorts_by_closeness(record_factory):
	def discover_fn(params, page):
		if "primary_release_date.gte" in params or page > 1:
			return []
		return [
			record_factory(1, genre_ids=[53], release_date="2010-01-01"),
			record_factory(2, genre_ids=[53], release_date="2016-01-01"),
			record_factory(3, genre_ids=[53], release_date="2014-06-01"),
		]

	catalog = StubCatalog(discover_fn=discover_fn)
	outcome = await make_router(catalog).search("korean thriller 2015")
	assert outcome.debug["fallback"] == DROP_YEAR_KEEP_LANGUAGE
	assert [m.year for m in outcome.movies] == [2016, 2014, 2010]
	assert catalog.count("discover") == 3
	assert "with_original_language=ko" in outcome.debug["params"]
	assert "vote_count.gte=10" in outcome.debug["params"]
	assert "primary_release_date" not in outcome.debug["params"]


@pytest.mark.asyncio
async def test_sparse_year_widens_then_stops_without_title(record_factory):
	catalog = StubCatalog(
		discover_fn=lambda params, page: [record_factory(page, release_date="2015-02-02")] if page == 1 else []
	)
	outcome = await make_router(catalog).search("thriller 2015")
	assert catalog.count("discover") == 3  # strict, relaxed votes, widened year
	assert catalog.count("search") == 0
	assert outcome.debug["fallback"] is None
	assert [m.year for m in outcome.movies] == [2015]
	widened = catalog.calls[-1][1]
	assert widened["primary_release_date.gte"] == "2014-01-01"


@pytest.mark.asyncio
async def test_ladder_ends_with_title_search(record_factory):
	catalog = StubCatalog(
		discover_fn=lambda params, page: [record_factory(1, release_date="2015-02-02")] if page == 1 else [],
		search_fn=lambda params, page: [record_factory(page + 50, release_date="2015-07-07")],
	)
	outcome = await make_router(catalog).search('"night crawler" thriller 2015')
	assert outcome.debug["fallback"] == DISCOVER_TO_SEARCH
	assert catalog.count("discover") == 3
	assert catalog.count("search") == 1
	assert len(catalog.calls) == 4
	assert [m.id for m in outcome.movies] == ["tmdb_51", "tmdb_52"]


@pytest.mark.asyncio
async def test_empty_vibe_request_maps_to_category():
	catalog = StubCatalog()
	outcome = await make_router(catalog, "{}", "light_and_fun").search("something cozy")
	assert outcome.kind == "vibe"
	assert outcome.mood == "light_and_fun"
	assert outcome.movies == []
	assert catalog.count("discover") == 2  # strict and relaxed only, no year to drop
	payload = outcome.to_payload()
	assert payload["type"] == "vibe" and payload["mood"] == "light_and_fun"


@pytest.mark.asyncio
async def test_mood_filter_applied_to_results(record_factory):
	catalog = StubCatalog(discover_fn=lambda params, page: [
		record_factory(1, genre_ids=[35]),
		record_factory(2, genre_ids=[27, 10751]),
		record_factory(3, genre_ids=[27]),
	] if page == 1 else [])
	outcome = await make_router(catalog).search("scary stuff")
	assert [m.id for m in outcome.movies] == ["tmdb_3", "tmdb_1"]
	assert "Family" in outcome.debug["mood_filters"]["exclude"]


async def collect(router: SearchRouter, query: str) -> List[Dict[str, Any]]:
	merged, debug = await router.interpret(query)
	return [event async for event in router.stream(merged, debug)]


def assert_stream_shape(events):
	assert events[0]["type"] == "meta"
	assert events[-1]["type"] == "done"
	assert all(e["type"] == "batch" for e in events[1:-1])
	emitted = sum(len(e["movies"]) for e in events[1:-1])
	assert events[-1]["count"] == emitted
	return emitted


@pytest.mark.asyncio
async def test_stream_discover_pages(record_factory):
	catalog = StubCatalog(discover_fn=lambda params, page: page_of(record_factory, page) if page <= 3 else [])
	events = await collect(make_router(catalog), "korean thriller")
	assert assert_stream_shape(events) == 60
	assert events[0]["debug"]["path"] == "discover"
	assert catalog.count("discover_page") == 4  # pages 1-3 plus the empty page 4


@pytest.mark.asyncio
async def test_stream_caps_total(record_factory):
	catalog = StubCatalog(discover_fn=lambda params, page: page_of(record_factory, page, n=30))
	events = await collect(make_router(catalog), "korean thriller")
	assert assert_stream_shape(events) == STREAM_MAX_RESULTS


@pytest.mark.asyncio
async def test_stream_search_path(record_factory):
	catalog = StubCatalog(search_fn=lambda params, page: page_of(record_factory, page, n=5))
	events = await collect(make_router(catalog), "Inception")
	assert assert_stream_shape(events) == 10
	assert events[0]["debug"]["params"] == "query=inception"


@pytest.mark.asyncio
async def test_stream_drop_year_batches(record_factory):
	def discover_fn(params, page):
		if "primary_release_date.gte" in params or page > 2:
			return []
		return page_of(record_factory, page, n=15, genre_ids=[53])

	catalog = StubCatalog(discover_fn=discover_fn)
	events = await collect(make_router(catalog), "korean thriller 2015")
	assert events[0]["debug"]["fallback"] == DROP_YEAR_KEEP_LANGUAGE
	assert assert_stream_shape(events) == 30
	assert [len(e["movies"]) for e in events[1:-1]] == [20, 10]


@pytest.mark.asyncio
async def test_stream_failure_mid_stream_still_ends_with_done(record_factory):
	def discover_fn(params, page):
		if page == 2:
			raise RuntimeError("upstream went away")
		return page_of(record_factory, page)

	events = await collect(make_router(StubCatalog(discover_fn=discover_fn)), "korean thriller")
	assert assert_stream_shape(events) == 20


@pytest.mark.asyncio
async def test_stream_failure_before_meta():
	def discover_fn(params, page):
		raise RuntimeError("no catalog")

	events = await collect(make_router(StubCatalog(discover_fn=discover_fn)), "korean thriller")
	assert [e["type"] for e in events] == ["meta", "done"]
	assert events[0]["debug"]["error"] == "stream_failed"
	assert events[-1]["count"] == 0


def test_encode_event_is_one_line():
	line = encode_event({"type": "done", "count": 3})
	assert line.endswith("\n") and line.count("\n") == 1


@pytest.mark.asyncio
async def test_closing_stream_stops_fetching_pages(record_factory):
	# Closing only stops later pages; a page request already in flight is not cancelled
	catalog = StubCatalog(discover_fn=lambda params, page: page_of(record_factory, page))
	router = make_router(catalog)
	merged, debug = await router.interpret("korean thriller")
	events = router.stream(merged, debug)
	assert (await events.__anext__())["type"] == "meta"
	assert (await events.__anext__())["type"] == "batch"
	await events.aclose()
	assert catalog.count("discover_page") == 1
