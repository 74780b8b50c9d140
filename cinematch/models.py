"""
Data models for the CineMatch AI search pipeline.
Defines the structures that flow from query parsing to the ranked candidate list.
"""

# Import dataclass to define simple "record-like" classes without boilerplate
from dataclasses import asdict, dataclass, field, replace  # generated __init__/__eq__, copy-with-changes
# Import typing helpers for precise and self-documenting types
from typing import Any, Dict, List, Optional, Tuple  # containers and optional values


@dataclass(frozen=True)
class YearRange:
	"""Inclusive release-year window, always normalized so start <= end."""
	start: int  # first year included
	end: int  # last year included


@dataclass(frozen=True)
class Intent:
	"""
	The superlative/temporal/award framing of a request.
	Flags are independent: "latest top rated oscar winners" sets all three.
	"""
	top: bool = False  # wants best/highest rated
	latest: bool = False  # wants recent releases
	award: bool = False  # wants award winners


@dataclass(frozen=True)
class ParsedQuery:
	"""
	Structured intent extracted from one free-text request.
	List-valued fields are None when no signal was found; they are never empty tuples,
	so callers can tell "no opinion" apart from "explicitly nothing".
	"""
	raw: str  # the original text the user typed
	tokens: Tuple[str, ...] = ()  # lowercased alphanumeric tokens of the query
	year: Optional[int] = None  # exact release year
	year_range: Optional[YearRange] = None  # decade or explicit span
	language: Optional[str] = None  # ISO 639-1 original language
	region: Optional[str] = None  # ISO 3166-1 region inferred from language
	include_genres: Optional[Tuple[str, ...]] = None  # canonical genres to require
	exclude_genres: Optional[Tuple[str, ...]] = None  # canonical genres to drop
	mood_tags: Optional[Tuple[str, ...]] = None  # canonical, already-expanded mood tags
	intent: Intent = field(default_factory=Intent)  # top/latest/award triple
	title_candidate: Optional[str] = None  # best guess at a literal title
	subjective: bool = False  # reads as a vibe request rather than a factual one

	@property
	def has_filters(self) -> bool:
		"""True when any year, language or genre narrowing is present."""
		return bool(self.year or self.year_range or self.language or self.include_genres)

	def with_changes(self, **changes: Any) -> "ParsedQuery":
		"""Return a copy with the given fields replaced."""
		return replace(self, **changes)

	def to_dict(self) -> Dict[str, Any]:
		"""JSON-friendly representation used in debug payloads."""
		return asdict(self)


@dataclass(frozen=True)
class LlmIntent:
	"""Intent flags as returned by the language model; each may be missing."""
	top: Optional[bool] = None
	latest: Optional[bool] = None
	award: Optional[bool] = None


@dataclass(frozen=True)
class LlmExtract:
	"""
	Best-effort structured extraction returned by the language model.
	Every field is independently nullable and fields are not cross-checked
	(a region may arrive without a language).
	"""
	title: Optional[str] = None
	keywords: Optional[Tuple[str, ...]] = None
	year: Optional[int] = None
	year_range: Optional[YearRange] = None
	language: Optional[str] = None
	region: Optional[str] = None
	include_genres: Optional[Tuple[str, ...]] = None
	exclude_genres: Optional[Tuple[str, ...]] = None
	mood_tags: Optional[Tuple[str, ...]] = None
	intent: LlmIntent = field(default_factory=LlmIntent)

	def to_dict(self) -> Dict[str, Any]:
		return asdict(self)


@dataclass
class Movie:
	"""
	A candidate title returned to the client.
	Built from one TMDB record; poster_url is never empty for returned candidates.
	"""
	id: str  # stable identifier, "tmdb_<id>"
	title: str  # display title as provided by TMDB
	poster_url: str  # absolute poster image URL
	genres: List[str]  # canonical genre names
	year: int  # release year (0 when unknown)
	overview: str  # synopsis text
	rating: float  # vote average rounded to one decimal
	category: str = "latest"  # app category tag shown on the card
	ott_providers: List[str] = field(default_factory=list)  # streaming providers, empty for ad hoc results

	def to_dict(self) -> Dict[str, Any]:
		"""Serialize with the field names the swipe deck client reads."""
		return {
			"id": self.id,
			"title": self.title,
			"poster_url": self.poster_url,
			"genre": list(self.genres),
			"year": self.year,
			"overview": self.overview,
			"imdb_rating": self.rating,
			"mood": self.category,
			"ott_providers": list(self.ott_providers),
		}


@dataclass(frozen=True)
class MoodRule:
	"""How one mood tag biases results: genres to favour, genres to drop, and text cues."""
	include: Tuple[str, ...]  # genres earning +3 each
	exclude: Tuple[str, ...]  # genres removing a candidate outright
	keywords: Tuple[str, ...]  # phrases earning +2 each when found in title/overview


@dataclass(frozen=True)
class MoodFilters:
	"""The genre unions actually applied by the mood filter, reported in debug output."""
	include: Tuple[str, ...] = ()
	exclude: Tuple[str, ...] = ()

	def to_dict(self) -> Dict[str, List[str]]:
		return {"include": list(self.include), "exclude": list(self.exclude)}
