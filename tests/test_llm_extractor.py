"""Unit tests for LLM extraction, vibe classification and watch-for phrases (fake OpenAI client)."""

import json

import pytest

from conftest import fake_openai

from cinematch.errors import ConfigurationError, ParseError, ValidationError
from cinematch.llm_extractor import LlmIntentExtractor, extract_from_json
from cinematch.models import YearRange
from cinematch.watch_for import WatchForGenerator


def test_extract_from_json_coerces_fields():
	extract = extract_from_json({
		"title": "  ",
		"keywords": ["inception", "", 3],
		"year": True,
		"yearRange": {"start": 2005, "end": 1999},
		"language": "English",
		"includeGenres": ["Sci-Fi"],
		"excludeGenres": [],
		"moodTags": "dark",
		"intent": {"top": True, "latest": "yes"},
	})
	assert extract.title is None
	assert extract.keywords == ("inception",)
	assert extract.year is None
	assert extract.year_range == YearRange(1999, 2005)
	assert extract.language == "English"
	assert extract.include_genres == ("Sci-Fi",)
	assert extract.exclude_genres is None
	assert extract.mood_tags is None
	assert (extract.intent.top, extract.intent.latest, extract.intent.award) == (True, None, None)


@pytest.mark.asyncio
async def test_extract_calls_model_deterministically():
	client = fake_openai(json.dumps({"title": "Heat", "year": 1995, "intent": {"award": False}}))
	extract = await LlmIntentExtractor(client).extract("heat 1995")
	assert extract.title == "Heat"
	assert extract.year == 1995
	assert extract.intent.award is False
	kwargs = client.chat.completions.create.call_args.kwargs
	assert kwargs["temperature"] == 0
	assert kwargs["messages"][1] == {"role": "user", "content": "heat 1995"}


@pytest.mark.asyncio
async def test_extract_rejects_non_json():
	with pytest.raises(ParseError):
		await LlmIntentExtractor(fake_openai("Sure! Here is the JSON")).extract("q")
	with pytest.raises(ParseError):
		await LlmIntentExtractor(fake_openai("[1, 2]")).extract("q")


@pytest.mark.asyncio
async def test_extract_requires_client():
	extractor = LlmIntentExtractor(None)
	assert extractor.configured is False
	with pytest.raises(ConfigurationError):
		await extractor.extract("q")


@pytest.mark.asyncio
async def test_classify_vibe():
	assert await LlmIntentExtractor(fake_openai(" gritty_thrillers\n")).classify_vibe("tense stuff") == "gritty_thrillers"
	assert await LlmIntentExtractor(fake_openai("no idea")).classify_vibe("q") == "imdb_top"
	assert await LlmIntentExtractor(None).classify_vibe("q") == "imdb_top"


@pytest.mark.asyncio
async def test_watch_for_caps_movies_and_stringifies_keys():
	client = fake_openai(json.dumps({"1": "Mind-Bending", "2": "Cozy"}))
	movies = [{"id": i, "title": f"M{i}", "overview": None} for i in range(1, 21)]
	phrases = await WatchForGenerator(client).generate(movies)
	assert phrases == {"1": "Mind-Bending", "2": "Cozy"}

	kwargs = client.chat.completions.create.call_args.kwargs
	prompt = kwargs["messages"][1]["content"]
	assert '"id": 15' in prompt and '"id": 16' not in prompt
	assert "No synopsis available" in prompt
	assert kwargs["response_format"] == {"type": "json_object"}


@pytest.mark.asyncio
async def test_watch_for_errors():
	with pytest.raises(ConfigurationError):
		await WatchForGenerator(None).generate([{"id": 1}])
	with pytest.raises(ValidationError):
		await WatchForGenerator(fake_openai("{}")).generate([])
	with pytest.raises(ParseError):
		await WatchForGenerator(fake_openai("not json")).generate([{"id": 1, "title": "x"}])


def test_implausible_years_are_dropped():
	extract = extract_from_json({"year": 19995, "yearRange": {"start": 0, "end": 99999}})
	assert extract.year is None
	assert extract.year_range is None
	assert extract_from_json({"year": "1899"}).year is None
	assert extract_from_json({"year": 2100.0}).year == 2100
	assert extract_from_json({"yearRange": {"start": 1990, "end": 2200}}).year_range is None
