"""Shared pytest fixtures: movie/record factories and a fake OpenAI client."""

import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Callable, Dict, List
from unittest.mock import AsyncMock

import pytest

# Ensure project root is importable when tests run from repository root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))

from cinematch.models import Movie


def chat_completion(content: str) -> SimpleNamespace:
	"""Shape of an openai chat completion, reduced to what the pipeline reads."""
	return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def fake_openai(*contents: str) -> SimpleNamespace:
	"""Client whose chat.completions.create returns the given contents in order."""
	create = AsyncMock(side_effect=[chat_completion(c) for c in contents])
	return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


@pytest.fixture
def movie_factory() -> Callable[..., Movie]:
	"""Build a Movie with optional overrides."""

	def _factory(**overrides: Any) -> Movie:
		data: Dict[str, Any] = {
			"id": "tmdb_1",
			"title": "Untitled",
			"poster_url": "https://image.tmdb.org/t/p/w500/p.jpg",
			"genres": ["Drama"],
			"year": 2000,
			"overview": "",
			"rating": 7.0,
		}
		data.update(overrides)
		return Movie(**data)

	return _factory


@pytest.fixture
def record_factory() -> Callable[..., Dict[str, Any]]:
	"""Build a raw TMDB result record."""

	def _factory(tmdb_id: int, **overrides: Any) -> Dict[str, Any]:
		record: Dict[str, Any] = {
			"id": tmdb_id,
			"title": f"Movie {tmdb_id}",
			"poster_path": f"/poster{tmdb_id}.jpg",
			"genre_ids": [18],
			"release_date": "2010-05-01",
			"overview": "",
			"vote_average": 7.0,
		}
		record.update(overrides)
		return record

	return _factory


@pytest.fixture
def records(record_factory) -> Callable[..., List[Dict[str, Any]]]:
	"""n records with consecutive ids starting at `start`."""

	def _records(n: int, start: int = 1, **overrides: Any) -> List[Dict[str, Any]]:
		return [record_factory(i, **overrides) for i in range(start, start + n)]

	return _records
