"""
LLM-backed intent extraction.
Asks a chat model to fill the same schema the heuristic parser produces, and maps
pure vibe requests onto one of the app's fixed categories.
"""

import json  # decode the model's JSON answer
import math  # reject NaN/Infinity years
from typing import Any, Optional, Tuple

from loguru import logger  # console logging
from openai import AsyncOpenAI  # async chat-completions client

from .errors import ConfigurationError, ParseError
from .models import LlmExtract, LlmIntent, YearRange
from .vocabulary import DEFAULT_VIBE_CATEGORY, VIBE_CATEGORIES

MIN_YEAR = 1900  # release years outside this window are discarded
MAX_YEAR = 2100


EXTRACTION_PROMPT = """Extract structured movie search intent as JSON. Return ONLY valid JSON.

Schema:
{
  "title": string | null,
  "keywords": string[],
  "year": number | null,
  "yearRange": {"start": number, "end": number} | null,
  "language": string | null,      // ISO 639-1 if possible, else language name
  "region": string | null,        // ISO 3166-1 if possible
  "includeGenres": string[],      // genre names like Comedy, Thriller
  "excludeGenres": string[],
  "moodTags": string[],           // mood/emotion tags like sad, dark, intense, feel_good, uplifting
  "intent": {"top": boolean, "latest": boolean, "award": boolean}
}

Rules:
- If decade is mentioned (e.g., 90s), set yearRange.
- If exact year, set year.
- If title is explicit, set title.
- Populate keywords with remaining meaningful tokens.
- Map emotional adjectives to moodTags when possible.
- Use empty arrays when none.
- Do not include extra fields."""

VIBE_PROMPT = """Map this movie request to the closest mood. Return ONLY the mood key, nothing else.

Available moods:
- light_and_fun: feel-good, easy watches, cheerful, uplifting
- imdb_top: critically acclaimed, masterpieces, best ever made
- oscar: award-winning, prestige cinema
- srk: Shah Rukh Khan films
- latest: new releases, trending
- gritty_thrillers: dark, tense, edge-of-your-seat, slow burn, atmospheric
- quick_watches: short movies, under 90 minutes
- reality_and_drama: reality TV, bingeable drama
- whats_viral: what everyone is talking about"""


def _str_or_none(value: Any) -> Optional[str]:
	if isinstance(value, str) and value.strip():
		return value.strip()
	return None


def _int_or_none(value: Any) -> Optional[int]:
	# bool is an int subclass; a stray true/false is not a year
	if isinstance(value, bool):
		return None
	if isinstance(value, int):
		return value
	if isinstance(value, float) and math.isfinite(value):
		return int(value)
	if isinstance(value, str) and value.strip().isdigit():
		return int(value.strip())
	return None


def year_or_none(value: Any) -> Optional[int]:
	"""A release year within MIN_YEAR..MAX_YEAR, else None."""
	year = _int_or_none(value)
	if year is None or not MIN_YEAR <= year <= MAX_YEAR:
		return None
	return year


def _bool_or_none(value: Any) -> Optional[bool]:
	return value if isinstance(value, bool) else None


def _str_list(value: Any) -> Optional[Tuple[str, ...]]:
	"""Keep non-empty strings; an empty or malformed list means "no opinion"."""
	if not isinstance(value, list):
		return None
	items = tuple(v.strip() for v in value if isinstance(v, str) and v.strip())
	return items or None


def _year_range(value: Any) -> Optional[YearRange]:
	if not isinstance(value, dict):
		return None
	start, end = year_or_none(value.get("start")), year_or_none(value.get("end"))
	if start is None or end is None:
		return None
	return YearRange(min(start, end), max(start, end))


def extract_from_json(data: dict) -> LlmExtract:
	"""Coerce the model's JSON object into an LlmExtract, nulling anything malformed."""
	intent = data.get("intent") if isinstance(data.get("intent"), dict) else {}
	return LlmExtract(
		title=_str_or_none(data.get("title")),
		keywords=_str_list(data.get("keywords")),
		year=year_or_none(data.get("year")),
		year_range=_year_range(data.get("yearRange")),
		language=_str_or_none(data.get("language")),
		region=_str_or_none(data.get("region")),
		include_genres=_str_list(data.get("includeGenres")),
		exclude_genres=_str_list(data.get("excludeGenres")),
		mood_tags=_str_list(data.get("moodTags")),
		intent=LlmIntent(
			top=_bool_or_none(intent.get("top")),
			latest=_bool_or_none(intent.get("latest")),
			award=_bool_or_none(intent.get("award")),
		),
	)


class LlmIntentExtractor:
	"""
	Wraps an injected AsyncOpenAI client.
	A None client means no OpenAI credential is configured: extraction then fails
	with ConfigurationError and vibe classification returns the default category.
	"""

	def __init__(self, client: Optional[AsyncOpenAI], model: str = "gpt-4o-mini"):
		self.client = client
		self.model = model

	@property
	def configured(self) -> bool:
		return self.client is not None

	async def extract(self, query: str) -> LlmExtract:
		"""Return the model's structured reading of the query."""
		if self.client is None:
			raise ConfigurationError("OPENAI_API_KEY is missing in the server environment")

		completion = await self.client.chat.completions.create(
			model=self.model,
			temperature=0,
			max_tokens=220,
			messages=[
				{"role": "system", "content": EXTRACTION_PROMPT},
				{"role": "user", "content": query},
			],
		)
		raw = (completion.choices[0].message.content or "").strip()
		try:
			data = json.loads(raw)
		except json.JSONDecodeError as e:
			raise ParseError(f"LLM returned invalid JSON: {raw[:200]}") from e
		if not isinstance(data, dict):
			raise ParseError(f"LLM returned a non-object JSON value: {raw[:200]}")

		extract = extract_from_json(data)
		logger.debug(f"[LLM] Extracted for '{query}': {extract}")
		return extract

	async def classify_vibe(self, query: str) -> str:
		"""Map a pure vibe request to an app category; unknown answers use the default."""
		if self.client is None:
			logger.info(f"[LLM] No OpenAI client configured; using default category '{DEFAULT_VIBE_CATEGORY}'")
			return DEFAULT_VIBE_CATEGORY

		completion = await self.client.chat.completions.create(
			model=self.model,
			temperature=0,
			max_tokens=60,
			messages=[
				{"role": "system", "content": VIBE_PROMPT},
				{"role": "user", "content": query},
			],
		)
		mood = (completion.choices[0].message.content or "").strip()
		if mood not in VIBE_CATEGORIES:
			logger.debug(f"[LLM] Unknown vibe category '{mood}', falling back to '{DEFAULT_VIBE_CATEGORY}'")
			return DEFAULT_VIBE_CATEGORY
		return mood
