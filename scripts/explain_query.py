"""
Explain how a free-text query would be routed.

This script:
1) Parses the query with the heuristic parser (no network)
2) Shows the chosen path and the path affinity scores
3) Shows the TMDB discover/search parameters that would be sent
4) With --live, runs the full router (LLM + TMDB) and prints the outcome

Usage:
    python -m scripts.explain_query "sad movies from the 90s"
    python -m scripts.explain_query --live "top rated korean thrillers"
"""

import argparse  # command line flags
import asyncio  # run the live router
import json  # pretty-print payloads

import httpx
from loguru import logger  # console logging
from openai import AsyncOpenAI

from cinematch.config import Settings, configure_logging
from cinematch.llm_extractor import LlmIntentExtractor
from cinematch.query_builder import (
	build_discover_params,
	build_search_params,
	choose_path,
	discover_page_count,
	encode_params,
	score_paths,
)
from cinematch.query_parser import QueryParser
from cinematch.router import SearchRouter
from cinematch.tmdb_client import TmdbClient


def explain_offline(query: str) -> None:
	parsed = QueryParser().parse(query)  # heuristic only
	logger.info("=" * 60)
	logger.info(f"Query      : {query}")
	logger.info("=" * 60)
	logger.info(f"Year       : {parsed.year}")
	logger.info(f"Year range : {parsed.year_range}")
	logger.info(f"Language   : {parsed.language} (region {parsed.region})")
	logger.info(f"Genres     : +{parsed.include_genres} -{parsed.exclude_genres}")
	logger.info(f"Moods      : {parsed.mood_tags}")
	logger.info(f"Intent     : {parsed.intent}")
	logger.info(f"Title      : {parsed.title_candidate!r}")
	logger.info(f"Subjective : {parsed.subjective}")
	logger.info(f"Path       : {choose_path(parsed)} (scores {score_paths(parsed)})")
	logger.info(f"Discover   : {encode_params(build_discover_params(parsed))} x{discover_page_count(parsed)} pages")
	logger.info(f"Search     : {encode_params(build_search_params(parsed)) or '-'}")


async def explain_live(query: str, settings: Settings) -> None:
	async with httpx.AsyncClient() as http:
		openai_client = AsyncOpenAI(api_key=settings.openai_api_key) if settings.openai_api_key else None
		router = SearchRouter(
			TmdbClient(http, settings.tmdb_api_key, attempts=settings.tmdb_attempts, timeout=settings.tmdb_timeout_s),
			LlmIntentExtractor(openai_client, model=settings.openai_model),
		)
		outcome = await router.search(query)
		logger.info(f"\nOutcome: {outcome.kind} with {len(outcome.movies)} movies")
		for i, m in enumerate(outcome.movies[:10], 1):
			logger.info(f"  {i}. {m.title} ({m.year}) [{m.rating}] - {', '.join(m.genres[:3])}")
		logger.info(json.dumps({k: v for k, v in outcome.debug.items() if k != "llm"}, indent=2, default=str))


def main():
	ap = argparse.ArgumentParser(description="Explain how a movie query is parsed and routed.")
	ap.add_argument("query", help="free-text movie request")
	ap.add_argument("--live", action="store_true", help="also run the full router against OpenAI and TMDB")
	args = ap.parse_args()

	settings = Settings.from_env()
	configure_logging(settings.log_level)

	explain_offline(args.query)
	if args.live:
		asyncio.run(explain_live(args.query, settings))


if __name__ == '__main__':
	main()
