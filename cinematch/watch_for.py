"""
"Watch for" phrases: one short hook per movie card, written by the LLM.
"""

import json
from typing import Any, Dict, List, Optional

from loguru import logger
from openai import AsyncOpenAI

from .errors import ConfigurationError, ParseError, ValidationError

MAX_MOVIES = 15  # cap on movies sent per request

SYSTEM_PROMPT = (
	"You are a movie expert AI. Provide exactly one strong, engaging word or short phrase "
	"describing why someone should watch the specific movie."
)

USER_PROMPT = """For each of the following movies, provide EXACTLY ONE word (or a very short 2-3 word phrase maximum) describing the best element, theme, or reason to watch it.

Be creative and insightful. Do not just repeat the genre. Use strong, exciting adjectives or nouns.
Examples: "Mind-Bending", "Stunning Visuals", "Heartbreaking", "Adrenaline", "Slow Burn", "Cozy", "Gritty Realism", "Laughs", "Nostalgia", "Pure Vibes", "Chaos".

Return ONLY a JSON object mapping the movie ID to the short phrase.
Example:
{{
  "123": "Mind-Bending",
  "456": "Pure Vibes"
}}

Movies:
{movies}"""


class WatchForGenerator:
	def __init__(self, client: Optional[AsyncOpenAI], model: str = "gpt-4o-mini"):
		self.client = client
		self.model = model

	async def generate(self, movies: List[Dict[str, Any]]) -> Dict[str, str]:
		"""Map movie id -> short phrase for up to MAX_MOVIES movies."""
		if self.client is None:
			raise ConfigurationError("OpenAI API key missing")
		if not movies:
			raise ValidationError("Invalid or empty movies array provided", code="invalid_movies")

		limited = [
			{
				"id": m.get("id"),
				"title": m.get("title"),
				"overview": m.get("overview") or "No synopsis available",
			}
			for m in movies[:MAX_MOVIES]
		]
		completion = await self.client.chat.completions.create(
			model=self.model,
			temperature=0.7,
			max_tokens=300,
			response_format={"type": "json_object"},
			messages=[
				{"role": "system", "content": SYSTEM_PROMPT},
				{"role": "user", "content": USER_PROMPT.format(movies=json.dumps(limited, indent=2))},
			],
		)
		raw = completion.choices[0].message.content or "{}"
		try:
			result = json.loads(raw)
		except json.JSONDecodeError as e:
			raise ParseError(f"watch-for response is not JSON: {raw[:200]}") from e
		if not isinstance(result, dict):
			raise ParseError("watch-for response is not a JSON object")

		logger.debug(f"[WatchFor] Generated {len(result)} phrases for {len(limited)} movies")
		return {str(k): str(v) for k, v in result.items()}
