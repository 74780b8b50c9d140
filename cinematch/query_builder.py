"""
Path selection and TMDB query construction.
Decides between title search and filter-based discover, and turns a merged
ParsedQuery into the upstream query parameters for either path.
"""

import calendar  # month lengths for the trailing "latest" window
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Dict, Optional
from urllib.parse import urlencode

from .models import ParsedQuery
from .vocabulary import GENRE_NAME_TO_ID

SEARCH = "search"
DISCOVER = "discover"

LATEST_WINDOW_MONTHS = 18  # "latest" without a year looks back this far
TOP_VOTE_FLOOR = 100  # minimum votes for "top rated" requests
DEFAULT_VOTE_FLOOR = 10  # minimum votes otherwise (and when relaxed)
NARROW_PAGE_COUNT = 2  # pages fetched when a year/language/region filter is present
WIDE_PAGE_COUNT = 5  # pages fetched for open-ended discover queries
SEARCH_PAGE_COUNT = 2  # pages fetched on the title search path


@dataclass(frozen=True)
class DiscoverOptions:
	"""Relaxations applied by the fallback ladder; the default is the strict query."""
	relax_vote_count: bool = False  # drop the "top" vote floor to the default
	widen_year: bool = False  # start an exact-year window one year earlier
	ignore_year: bool = False  # drop the year/range window entirely
	ignore_latest_window: bool = False  # drop the trailing 18-month window


def choose_path(parsed: ParsedQuery) -> str:
	"""Title search only when there are no filters and a title guess exists."""
	if not parsed.has_filters and parsed.title_candidate:
		return SEARCH
	return DISCOVER


def score_paths(parsed: ParsedQuery) -> Dict[str, int]:
	"""
	Rough affinity of the query for each retrieval style.
	Reported in debug output to explain routing; choose_path makes the decision.
	"""
	search = discover = mood = 0
	if parsed.title_candidate:
		search += 2
	if len(parsed.tokens) <= 3 and not (
		parsed.language or parsed.include_genres or parsed.year or parsed.year_range or parsed.mood_tags
	):
		search += 1
	if parsed.intent.top or parsed.intent.latest or parsed.intent.award:
		discover += 1
	if parsed.year or parsed.year_range:
		discover += 2
	if parsed.language:
		discover += 1
	if parsed.include_genres:
		discover += 2
	if parsed.exclude_genres:
		discover += 1
	if parsed.subjective or parsed.mood_tags:
		mood += 2
	if not (parsed.year or parsed.year_range or parsed.language or parsed.include_genres):
		mood += 1
	return {"search": search, "discover": discover, "mood": mood}


def _months_back(today: date, months: int) -> date:
	total = today.year * 12 + (today.month - 1) - months
	year, month = divmod(total, 12)
	month += 1
	day = min(today.day, calendar.monthrange(year, month)[1])  # 31st -> last day of a shorter month
	return date(year, month, day)


def _genre_ids(names) -> str:
	return ",".join(str(GENRE_NAME_TO_ID[g]) for g in (names or ()) if g in GENRE_NAME_TO_ID)


def build_discover_params(
	parsed: ParsedQuery,
	options: DiscoverOptions = DiscoverOptions(),
	today: Optional[date] = None,
) -> Dict[str, str]:
	"""Query parameters for /discover/movie (page and api_key are added by the client)."""
	intent = parsed.intent
	if intent.top:
		sort_by = "vote_average.desc"
	elif intent.latest:
		sort_by = "primary_release_date.desc"
	else:
		sort_by = "popularity.desc"
	vote_floor = TOP_VOTE_FLOOR if intent.top and not options.relax_vote_count else DEFAULT_VOTE_FLOOR

	params: Dict[str, str] = {"sort_by": sort_by, "vote_count.gte": str(vote_floor)}

	if parsed.language:
		params["with_original_language"] = parsed.language
	if parsed.region:
		params["region"] = parsed.region

	include_ids = _genre_ids(parsed.include_genres)
	if include_ids:
		params["with_genres"] = include_ids
	exclude_ids = _genre_ids(parsed.exclude_genres)
	if exclude_ids:
		params["without_genres"] = exclude_ids

	if intent.latest and not options.ignore_latest_window:
		today = today or datetime.now(timezone.utc).date()
		params["primary_release_date.gte"] = _months_back(today, LATEST_WINDOW_MONTHS).isoformat()
		params["primary_release_date.lte"] = today.isoformat()

	# An explicit year or range overrides the latest window
	if not options.ignore_year and parsed.year_range:
		params["primary_release_date.gte"] = f"{parsed.year_range.start}-01-01"
		params["primary_release_date.lte"] = f"{parsed.year_range.end}-12-31"
	elif not options.ignore_year and parsed.year:
		start = parsed.year - 1 if options.widen_year else parsed.year
		params["primary_release_date.gte"] = f"{start}-01-01"
		params["primary_release_date.lte"] = f"{parsed.year}-12-31"

	return params


def discover_page_count(parsed: ParsedQuery) -> int:
	"""Narrow filters rarely fill five pages, so fetch fewer."""
	if parsed.year or parsed.year_range or parsed.language or parsed.region:
		return NARROW_PAGE_COUNT
	return WIDE_PAGE_COUNT


def build_search_params(parsed: ParsedQuery) -> Dict[str, str]:
	"""Query parameters for /search/movie; empty when there is no title guess."""
	if not parsed.title_candidate:
		return {}
	params = {"query": parsed.title_candidate}
	if parsed.year:
		params["year"] = str(parsed.year)
	return params


def encode_params(params: Dict[str, str]) -> str:
	"""The upstream query string as reported in debug output."""
	return urlencode(params)
