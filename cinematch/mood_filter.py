"""
Mood re-ranking module.
Drops candidates whose genres clash with the active moods and orders the rest by
how well their genres and text match those moods. Also holds the year helpers
used by the fallback ladder.
"""

from typing import Iterable, List, Optional, Set, Tuple

from .models import MoodFilters, Movie, ParsedQuery
from .vocabulary import MOOD_RULES

GENRE_POINTS = 3  # per candidate genre found in the include union
KEYWORD_POINTS = 2  # per mood keyword found in title + overview


def _ordered_union(groups: Iterable[Iterable[str]]) -> Tuple[str, ...]:
	seen: List[str] = []
	for group in groups:
		for item in group:
			if item not in seen:
				seen.append(item)
	return tuple(seen)


def mood_filters(tags: Optional[Iterable[str]]) -> Tuple[MoodFilters, Tuple[str, ...]]:
	"""
	Union the rules of every known tag.
	Returns the include/exclude genre unions and the keyword union.
	"""
	rules = [MOOD_RULES[t] for t in (tags or ()) if t in MOOD_RULES]
	filters = MoodFilters(
		include=_ordered_union(r.include for r in rules),
		exclude=_ordered_union(r.exclude for r in rules),
	)
	return filters, _ordered_union(r.keywords for r in rules)


def mood_score(movie: Movie, include: Set[str], keywords: Iterable[str]) -> int:
	"""3 points per matching genre plus 2 per keyword found in title/overview."""
	score = GENRE_POINTS * sum(1 for g in movie.genres if g in include)
	haystack = f"{movie.title} {movie.overview}".lower()
	score += KEYWORD_POINTS * sum(1 for kw in keywords if kw in haystack)
	return score


def apply_mood_filter(parsed: ParsedQuery, movies: List[Movie]) -> Tuple[List[Movie], MoodFilters]:
	"""
	Exclude clashing genres, then stable-sort by descending mood score.
	With no mood tags the list is returned untouched.
	"""
	if not parsed.mood_tags:
		return movies, MoodFilters()

	filters, keywords = mood_filters(parsed.mood_tags)
	exclude = set(filters.exclude)
	include = set(filters.include)

	kept = [m for m in movies if not exclude.intersection(m.genres)]
	# sorted() is stable, so equal scores keep their upstream order
	ranked = sorted(kept, key=lambda m: mood_score(m, include, keywords), reverse=True)
	return ranked, filters


def filter_by_year(movies: List[Movie], year: Optional[int]) -> List[Movie]:
	"""Keep only the requested release year; no year means no filtering."""
	if not year:
		return movies
	return [m for m in movies if m.year == year]


def sort_by_closest_year(movies: List[Movie], target_year: int) -> List[Movie]:
	"""Nearest release year first; ties prefer the later year, then the higher rating."""
	return sorted(movies, key=lambda m: (abs(m.year - target_year), -m.year, -m.rating))
