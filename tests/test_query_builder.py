"""Unit tests for path selection and TMDB parameter construction."""

from datetime import date

from cinematch.models import Intent, ParsedQuery, YearRange
from cinematch.query_builder import (
	DISCOVER,
	NARROW_PAGE_COUNT,
	SEARCH,
	WIDE_PAGE_COUNT,
	DiscoverOptions,
	build_discover_params,
	build_search_params,
	choose_path,
	discover_page_count,
	encode_params,
	score_paths,
)

TODAY = date(2024, 8, 31)


def pq(**fields) -> ParsedQuery:
	return ParsedQuery(raw="q", **fields)


def test_search_only_without_filters():
	assert choose_path(pq(title_candidate="inception")) == SEARCH
	assert choose_path(pq(title_candidate="inception", year=2010)) == DISCOVER
	assert choose_path(pq(title_candidate="heat", language="hi")) == DISCOVER
	assert choose_path(pq()) == DISCOVER


def test_moods_alone_do_not_block_search():
	assert choose_path(pq(title_candidate="some title", mood_tags=("dark",))) == SEARCH


def test_default_sort_and_vote_floor():
	params = build_discover_params(pq(), today=TODAY)
	assert params == {"sort_by": "popularity.desc", "vote_count.gte": "10"}


def test_top_intent_sort_and_relaxation():
	top = pq(intent=Intent(top=True))
	assert build_discover_params(top, today=TODAY)["sort_by"] == "vote_average.desc"
	assert build_discover_params(top, today=TODAY)["vote_count.gte"] == "100"
	relaxed = build_discover_params(top, DiscoverOptions(relax_vote_count=True), today=TODAY)
	assert relaxed["vote_count.gte"] == "10"


def test_latest_window_clamps_day():
	params = build_discover_params(pq(intent=Intent(latest=True)), today=TODAY)
	assert params["sort_by"] == "primary_release_date.desc"
	assert params["primary_release_date.gte"] == "2023-02-28"
	assert params["primary_release_date.lte"] == "2024-08-31"
	ignored = build_discover_params(pq(intent=Intent(latest=True)), DiscoverOptions(ignore_latest_window=True), today=TODAY)
	assert "primary_release_date.gte" not in ignored


def test_year_range_overrides_latest_window():
	params = build_discover_params(pq(intent=Intent(latest=True), year_range=YearRange(1990, 1999)), today=TODAY)
	assert params["primary_release_date.gte"] == "1990-01-01"
	assert params["primary_release_date.lte"] == "1999-12-31"


def test_exact_year_window_and_options():
	parsed = pq(year=2010)
	strict = build_discover_params(parsed, today=TODAY)
	assert (strict["primary_release_date.gte"], strict["primary_release_date.lte"]) == ("2010-01-01", "2010-12-31")
	widened = build_discover_params(parsed, DiscoverOptions(widen_year=True), today=TODAY)
	assert widened["primary_release_date.gte"] == "2009-01-01"
	dropped = build_discover_params(parsed, DiscoverOptions(ignore_year=True), today=TODAY)
	assert "primary_release_date.gte" not in dropped and "primary_release_date.lte" not in dropped


def test_language_region_and_genres():
	params = build_discover_params(
		pq(language="ko", region="KR", include_genres=("Thriller", "Crime"), exclude_genres=("Horror",)),
		today=TODAY,
	)
	assert params["with_original_language"] == "ko"
	assert params["region"] == "KR"
	assert params["with_genres"] == "53,80"
	assert params["without_genres"] == "27"


def test_page_counts():
	assert discover_page_count(pq()) == WIDE_PAGE_COUNT
	assert discover_page_count(pq(year=2001)) == NARROW_PAGE_COUNT
	assert discover_page_count(pq(region="IN")) == NARROW_PAGE_COUNT


def test_search_params():
	assert build_search_params(pq()) == {}
	assert build_search_params(pq(title_candidate="heat")) == {"query": "heat"}
	assert build_search_params(pq(title_candidate="heat", year=1995)) == {"query": "heat", "year": "1995"}


def test_encode_params():
	assert encode_params({"query": "the matrix", "year": "1999"}) == "query=the+matrix&year=1999"


def test_path_scores_explain_routing():
	scores = score_paths(pq(title_candidate="heat", tokens=("heat",)))
	assert scores["search"] == 3
	scores = score_paths(pq(year_range=YearRange(1990, 1999), mood_tags=("sad",), subjective=True))
	assert scores["discover"] == 2
	assert scores["mood"] == 2
