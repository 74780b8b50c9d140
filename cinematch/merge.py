"""
Merging of heuristic and LLM intent.
The LLM value wins for a field whenever it is present and normalizes to something
usable; otherwise the heuristic value is kept. Free-text genres, languages and
moods coming back from the model are mapped onto the closed vocabularies first.
"""

from typing import Callable, Dict, Iterable, List, Optional, Tuple, TypeVar

from loguru import logger  # console logging
from rapidfuzz import fuzz, process  # fuzzy genre matching

from .llm_extractor import year_or_none
from .models import Intent, LlmExtract, ParsedQuery, YearRange
from .query_parser import expand_mood_tags
from .vocabulary import (
	GENRE_KEYWORDS,
	GENRE_NAME_TO_ID,
	LANGUAGE_KEYWORDS,
	LANGUAGE_TO_REGION,
	LLM_MOOD_PHRASES,
	MOOD_RULES,
)

T = TypeVar("T")

GENRE_FUZZY_THRESHOLD = 88  # minimum rapidfuzz ratio for a misspelled genre

_GENRES_BY_LOWER: Dict[str, str] = {name.lower(): name for name in GENRE_NAME_TO_ID}
_GENRE_CHOICES: List[str] = sorted(_GENRES_BY_LOWER)
_LANGUAGE_CODES = frozenset(LANGUAGE_KEYWORDS.values())


def prefer(llm_value: Optional[T], heuristic_value: Optional[T]) -> Optional[T]:
	"""The single reducer behind every merged field: LLM value if present, else heuristic."""
	return llm_value if llm_value is not None else heuristic_value


def normalize_language(value: Optional[str]) -> Optional[str]:
	"""Map a language name or code onto a supported ISO 639-1 code."""
	if not value:
		return None
	v = value.lower().strip()
	if v in LANGUAGE_KEYWORDS:
		return LANGUAGE_KEYWORDS[v]
	if v in _LANGUAGE_CODES:
		return v
	return None


def infer_region(language: Optional[str]) -> Optional[str]:
	if not language:
		return None
	return LANGUAGE_TO_REGION.get(language)


def normalize_region(value: Optional[str]) -> Optional[str]:
	"""Accept only two-letter region codes from the model."""
	if not value:
		return None
	v = value.strip().upper()
	return v if len(v) == 2 and v.isalpha() else None


def _canonical_genre(raw: str) -> Optional[str]:
	g = raw.lower().strip()
	if g in _GENRES_BY_LOWER:  # exact canonical name
		return _GENRES_BY_LOWER[g]
	if g in GENRE_KEYWORDS:  # user phrasing ("sci-fi", "romantic")
		return GENRE_KEYWORDS[g]
	match = process.extractOne(g, _GENRE_CHOICES, scorer=fuzz.ratio)
	if match and match[1] >= GENRE_FUZZY_THRESHOLD:
		logger.debug(f"[Merge] Genre fuzzy match: '{raw}' -> '{match[0]}' (score={match[1]:.0f})")
		return _GENRES_BY_LOWER[match[0]]
	return None


def normalize_genres(values: Optional[Iterable[str]]) -> Optional[Tuple[str, ...]]:
	"""Canonical genre names in input order; None when nothing maps."""
	if not values:
		return None
	out: List[str] = []
	for raw in values:
		name = _canonical_genre(raw)
		if name and name not in out:
			out.append(name)
	return tuple(out) or None


def _mood_for_phrase(phrase: str) -> Optional[str]:
	v = phrase.lower().strip()
	for triggers, tag in LLM_MOOD_PHRASES:
		if any(t in v for t in triggers):
			return tag
	if v in MOOD_RULES:
		return v
	return None


def normalize_mood_tags(values: Optional[Iterable[str]]) -> Optional[Tuple[str, ...]]:
	"""Canonical, expanded mood tags for the model's free-text phrases."""
	if not values:
		return None
	tags: List[str] = []
	for raw in values:
		tag = _mood_for_phrase(raw)
		if tag and tag not in tags:
			tags.append(tag)
	return tuple(expand_mood_tags(tags)) or None


def _llm_title(llm: LlmExtract) -> Optional[str]:
	if llm.title:
		return llm.title
	if llm.keywords:
		return " ".join(llm.keywords)
	return None


def _llm_year_range(llm: LlmExtract) -> Optional[YearRange]:
	"""The model's range, only when both ends are plausible release years."""
	yr = llm.year_range
	if yr is None or year_or_none(yr.start) is None or year_or_none(yr.end) is None:
		return None
	return yr


# Field name -> how to pull the already-normalized LLM value for it
_LLM_FIELDS: Dict[str, Callable[[LlmExtract], object]] = {
	"year": lambda llm: year_or_none(llm.year),
	"year_range": _llm_year_range,
	"include_genres": lambda llm: normalize_genres(llm.include_genres),
	"exclude_genres": lambda llm: normalize_genres(llm.exclude_genres),
	"mood_tags": lambda llm: normalize_mood_tags(llm.mood_tags),
	"title_candidate": _llm_title,
}


def merge_intents(heuristic: ParsedQuery, llm: LlmExtract) -> ParsedQuery:
	"""
	Combine both readings of a query.
	raw, tokens and the subjective flag always come from the heuristic parse.
	"""
	merged = {name: prefer(pull(llm), getattr(heuristic, name)) for name, pull in _LLM_FIELDS.items()}

	language = normalize_language(prefer(llm.language, heuristic.language))
	merged["language"] = language
	merged["region"] = prefer(normalize_region(llm.region), infer_region(language))

	merged["intent"] = Intent(
		top=bool(prefer(llm.intent.top, heuristic.intent.top)),
		latest=bool(prefer(llm.intent.latest, heuristic.intent.latest)),
		award=bool(prefer(llm.intent.award, heuristic.intent.award)),
	)
	return heuristic.with_changes(**merged)
