"""
Query parsing module.
Extracts years, decades, languages, genres, mood tags, intent flags and a title guess
from natural language movie requests using keyword tables and regex only.
No external calls are made here; the LLM extraction lives in llm_extractor.py.
"""

import re  # regex for year/decade/exclusion extraction
from typing import Iterable, List, Optional, Tuple  # type annotations

from loguru import logger  # console logging

from .errors import ValidationError  # raised for empty input
from .models import Intent, ParsedQuery, YearRange  # structured query representation
from .vocabulary import (
	AWARD_KEYWORDS,
	DECADE_WORDS,
	GENERIC_WORDS,
	GENRE_KEYWORDS,
	GENRE_TO_MOODS,
	LANGUAGE_KEYWORDS,
	LANGUAGE_TO_REGION,
	LATEST_KEYWORDS,
	MOOD_EXPANSIONS,
	MOOD_RULES,
	MOOD_TRIGGERS,
	SUBJECTIVE_KEYWORDS,
	TITLE_HINTS,
	TOP_KEYWORDS,
)


# Pre-compiled regex patterns for year expressions
RE_DECADE_SHORT = re.compile(r"\b(\d{2})s\b")  # 90s, 00s
RE_RANGE = re.compile(r"\b(?:19|20)\d{2}\s*-\s*(?:19|20)\d{2}\b")  # 1999-2005
RE_DECADE_FULL = re.compile(r"\b(?:19|20)\d0s\b")  # 1990s
RE_YEAR = re.compile(r"\b(?:19|20)\d{2}\b")  # 1994
RE_YEAR_TOKEN = re.compile(r"^(?:19|20)\d{2}$")  # a token that is only a year
RE_QUOTED = re.compile(r"\"([^\"]+)\"|'([^']+)'")  # "title" or 'title'
RE_NON_TOKEN = re.compile(r"[^a-z0-9\s]")  # punctuation stripped before tokenizing

# Per-keyword exclusion patterns: "no horror", "without romance"
_EXCLUSION_PATTERNS: Tuple[Tuple[re.Pattern, str], ...] = tuple(
	(re.compile(rf"\b(?:not|no|without)\s+{re.escape(kw)}\b", re.I), name)
	for kw, name in GENRE_KEYWORDS.items()
)

# Tokens that describe filters or intent rather than a title
_NON_TITLE_TOKENS = (
	GENERIC_WORDS | TOP_KEYWORDS | LATEST_KEYWORDS | AWARD_KEYWORDS
	| frozenset(LANGUAGE_KEYWORDS) | frozenset(GENRE_KEYWORDS)
)


def _push(out: List[str], value: str) -> None:
	"""Append while keeping first-seen order and uniqueness."""
	if value not in out:
		out.append(value)


def parse_year_range(text: str) -> Tuple[Optional[int], Optional[YearRange]]:
	"""
	Return (year, range) for the first year expression found.
	Priority: decade words, "90s", "1999-2005", "1990s", a single year.
	At most one of the two values is set.
	"""
	q = text.lower()
	for word, start in DECADE_WORDS:
		if word in q:
			return None, YearRange(start, start + 9)

	m = RE_DECADE_SHORT.search(q)
	if m:
		two = int(m.group(1))
		start = 2000 + two if two <= 29 else 1900 + two  # 00-29 -> 2000s, 30-99 -> 1900s
		return None, YearRange(start, start + 9)

	m = RE_RANGE.search(q)
	if m:
		first, last = int(m.group(0)[:4]), int(m.group(0)[-4:])
		return None, YearRange(min(first, last), max(first, last))

	m = RE_DECADE_FULL.search(q)
	if m:
		start = int(m.group(0)[:4])
		return None, YearRange(start, start + 9)

	m = RE_YEAR.search(q)
	if m:
		return int(m.group(0)), None
	return None, None


def expand_mood_tags(tags: Iterable[str]) -> List[str]:
	"""
	Close a tag list over MOOD_EXPANSIONS, keeping first-seen order.
	Direct implications of the input tags come first, then theirs, and so on;
	the visited check keeps this finite even if the table ever gains a cycle.
	"""
	out: List[str] = []
	for tag in tags:
		_push(out, tag)
	i = 0
	while i < len(out):
		for implied in MOOD_EXPANSIONS.get(out[i], ()):
			_push(out, implied)
		i += 1
	return out


def detect_mood_tags(text: str) -> List[str]:
	"""Match the ordered trigger table against the text, then expand."""
	q = text.lower()
	tags: List[str] = []
	for tag, triggers in MOOD_TRIGGERS:
		if any(t in q for t in triggers):
			_push(tags, tag)
	return expand_mood_tags(tags)


def extract_excluded_genres(text: str) -> List[str]:
	"""Genres negated with "not", "no" or "without"."""
	q = text.lower()
	out: List[str] = []
	for pattern, name in _EXCLUSION_PATTERNS:
		if pattern.search(q):
			_push(out, name)
	return out


def is_mood_keyword(value: str) -> bool:
	"""True when a string is (or contains) a mood word and so cannot be a title."""
	v = value.lower()
	if v in MOOD_RULES:
		return True
	return any(kw in v for kw in SUBJECTIVE_KEYWORDS)


def tokenize(text: str) -> List[str]:
	"""Lowercase, replace punctuation with spaces, split on whitespace."""
	return RE_NON_TOKEN.sub(" ", text.lower()).split()


class QueryParser:
	"""
	Parses natural language queries into a structured ParsedQuery.
	Uses regex for year expressions and fixed keyword tables for genres, languages,
	moods and intent. Output list fields are None when nothing was found.
	"""

	def parse(self, query: str) -> ParsedQuery:
		"""Main entry: produce a ParsedQuery from a raw string."""
		if not query or not query.strip():  # empty input guard
			raise ValidationError("Query cannot be empty", code="missing_query")

		q = query.lower()  # keyword tables are all lowercase
		logger.debug(f"[Parser] Input query: '{query}'")

		# 1) Years and decades
		year, year_range = parse_year_range(q)

		# 2) Language (first keyword wins) and the region it implies
		language = self._extract_language(q)
		region = LANGUAGE_TO_REGION.get(language) if language else None

		# 3) Genres to include (every keyword hit) and to exclude (negated keywords)
		include_genres: List[str] = []
		for kw, name in GENRE_KEYWORDS.items():
			if kw in q:
				_push(include_genres, name)
		exclude_genres = extract_excluded_genres(q)

		# 4) Moods from triggers, plus moods implied by requested genres
		mood_tags = detect_mood_tags(q)
		for genre in include_genres:
			for tag in GENRE_TO_MOODS.get(genre, ()):
				_push(mood_tags, tag)
		mood_tags = expand_mood_tags(mood_tags)

		# 5) Intent triple and vibe flag
		intent = Intent(
			top=any(kw in q for kw in TOP_KEYWORDS),
			latest=any(kw in q for kw in LATEST_KEYWORDS),
			award=any(kw in q for kw in AWARD_KEYWORDS),
		)
		subjective = any(kw in q for kw in SUBJECTIVE_KEYWORDS)

		# 6) Title guess from what is left
		tokens = tokenize(q)
		title_candidate = self._title_candidate(query, q, tokens)

		parsed = ParsedQuery(
			raw=query,
			tokens=tuple(tokens),
			year=year,
			year_range=year_range,
			language=language,
			region=region,
			include_genres=tuple(include_genres) or None,
			exclude_genres=tuple(exclude_genres) or None,
			mood_tags=tuple(mood_tags) or None,
			intent=intent,
			title_candidate=title_candidate,
			subjective=subjective,
		)
		logger.debug(
			"[Parser] Parsed | year={} range={} lang={} include={} exclude={} moods={} intent={} title={!r} subjective={}",
			parsed.year, parsed.year_range, parsed.language, parsed.include_genres,
			parsed.exclude_genres, parsed.mood_tags, parsed.intent, parsed.title_candidate, parsed.subjective,
		)
		return parsed

	def _extract_language(self, q: str) -> Optional[str]:
		for kw, code in LANGUAGE_KEYWORDS.items():
			if kw in q:
				logger.debug(f"[Parser] Language match: '{kw}' -> '{code}'")
				return code
		return None

	def _title_candidate(self, query: str, q: str, tokens: List[str]) -> Optional[str]:
		"""
		Best guess at a literal title.
		Prefers a quoted span, then the whole query when a title hint is present,
		then 2..4 leftover tokens (or a single token of 4+ characters).
		"""
		candidate: Optional[str] = None
		quoted = RE_QUOTED.search(q)
		if quoted:
			candidate = (quoted.group(1) or quoted.group(2) or "").strip() or None
		elif any(hint in q for hint in TITLE_HINTS):
			candidate = query.strip()
		else:
			cleaned = [t for t in tokens if not RE_YEAR_TOKEN.match(t) and t not in _NON_TITLE_TOKENS]
			count = len(cleaned)
			single_ok = count == 1 and len(cleaned[0]) >= 4
			if (count >= 2 or single_ok) and count <= 4:
				candidate = " ".join(cleaned)
			logger.debug(f"[Parser] Title tokens: {cleaned}")

		if candidate and is_mood_keyword(candidate):
			logger.debug(f"[Parser] Dropping title candidate '{candidate}' (mood keyword)")
			return None
		return candidate
