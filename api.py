"""
FastAPI server exposing the CineMatch AI search API.
Endpoints:
- GET /health: basic health check with credential status
- POST /api/ai-search: free-text movie search; ?stream=1 streams NDJSON events
- POST /api/watch-for: one short "watch for" phrase per movie card
- GET /api/movies/{tmdb_id}/providers: streaming providers for a title

Startup builds the shared HTTP and OpenAI clients once and wires them into the
search router; handlers reach them through dependency functions so tests can
substitute fakes.

Run: uvicorn api:app --reload
"""

from contextlib import asynccontextmanager  # lifespan hook
from typing import Any, List, Optional  # precise typing for clarity

# Async HTTP client shared by every TMDB call
import httpx
# FastAPI primitives and Pydantic request models
from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse, StreamingResponse
from openai import AsyncOpenAI  # async OpenAI client
from pydantic import BaseModel

# Import loguru for simple, structured console logging
from loguru import logger

# Internal modules: configuration, errors, and the search pipeline
from cinematch.config import Settings, configure_logging
from cinematch.errors import CineMatchError, ConfigurationError, ValidationError
from cinematch.llm_extractor import LlmIntentExtractor
from cinematch.router import SearchRouter, encode_event
from cinematch.tmdb_client import TmdbClient
from cinematch.vocabulary import DEFAULT_VIBE_CATEGORY, DEFAULT_WATCH_REGION
from cinematch.watch_for import WatchForGenerator

GENERIC_FAILURE = "Something went wrong while searching. Please try again."  # client-facing 500 message

NDJSON_HEADERS = {
	"Cache-Control": "no-cache, no-transform",  # proxies must not buffer or rewrite the stream
	"Connection": "keep-alive",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
	"""Build shared clients on startup and close them on shutdown."""
	settings = Settings.from_env()  # env + optional .env
	configure_logging(settings.log_level)  # stderr sink at the configured level

	http = httpx.AsyncClient()  # pooled connections to TMDB
	openai_client = AsyncOpenAI(api_key=settings.openai_api_key) if settings.openai_api_key else None  # None = not configured

	catalog = TmdbClient(http, settings.tmdb_api_key, attempts=settings.tmdb_attempts, timeout=settings.tmdb_timeout_s)
	app.state.catalog = catalog
	app.state.router = SearchRouter(catalog, LlmIntentExtractor(openai_client, model=settings.openai_model))
	app.state.watch_for = WatchForGenerator(openai_client, model=settings.openai_model)

	logger.info(
		f"[API] Startup complete | tmdb_configured={catalog.configured} openai_configured={openai_client is not None}"
	)
	yield
	# Gracefully close pooled connections on shutdown
	await http.aclose()
	if openai_client is not None:
		await openai_client.close()


# Instantiate the FastAPI application with metadata
app = FastAPI(title="CineMatch AI Search API", version="1.0.0", lifespan=lifespan)


# Dependency accessors (overridden in tests)
def get_router(request: Request) -> SearchRouter:
	return request.app.state.router


def get_catalog(request: Request) -> TmdbClient:
	return request.app.state.catalog


def get_watch_for(request: Request) -> WatchForGenerator:
	return request.app.state.watch_for


# Pydantic models for request bodies
class AiSearchRequest(BaseModel):
	query: Optional[str] = None  # free-text request; validated in the handler so a blank one is a 400


class WatchForMovie(BaseModel):
	id: Any  # movie id as the client knows it
	title: Optional[str] = None
	overview: Optional[str] = None


class WatchForRequest(BaseModel):
	movies: Optional[List[WatchForMovie]] = None


@app.get("/health")
async def health(catalog: TmdbClient = Depends(get_catalog), router: SearchRouter = Depends(get_router)):
	"""Return minimal health info for liveness/readiness probes."""
	return {
		"status": "ok",  # constant indicator
		"tmdb_configured": catalog.configured,  # False means every search will fail
		"openai_configured": router.extractor.configured,  # False means extraction fails, vibe falls back
	}


@app.post("/api/ai-search")
async def ai_search(
	body: Optional[AiSearchRequest] = None,
	stream: Optional[str] = Query(None, description="'1' streams NDJSON events"),
	router: SearchRouter = Depends(get_router),
):
	"""Interpret a free-text request and return (or stream) ranked candidates."""
	raw_query = body.query if body else None  # no body at all counts as a missing query
	query = raw_query or ""
	if not query.strip():  # empty input is a client error, not a failure
		logger.debug("[API] /api/ai-search rejected: missing query")
		return JSONResponse(
			status_code=400,
			content={"type": "vibe", "mood": DEFAULT_VIBE_CATEGORY, "debug": {"query": raw_query, "error": "missing_query"}},
		)

	try:
		if stream == "1":
			# Interpretation happens before the stream opens so its failures are plain 500s
			merged, debug = await router.interpret(query)

			async def ndjson():
				async for event in router.stream(merged, debug):  # always ends with a done event
					yield encode_event(event)

			return StreamingResponse(ndjson(), media_type="application/x-ndjson", headers=NDJSON_HEADERS)

		outcome = await router.search(query)  # full ladder + mood ranking
		logger.info(f"[API] /api/ai-search served {len(outcome.movies)} movies ({outcome.kind})")
		return outcome.to_payload()
	except Exception as e:
		# Specific cause stays in the server log; the client gets a generic message
		logger.exception(f"[API] /api/ai-search failed for query='{query}': {e}")
		return JSONResponse(
			status_code=500,
			content={"type": "error", "error": "ai_search_failed", "message": GENERIC_FAILURE},
		)


@app.post("/api/watch-for")
async def watch_for(body: WatchForRequest, generator: WatchForGenerator = Depends(get_watch_for)):
	"""Short hook phrases keyed by movie id."""
	movies = [m.model_dump() for m in (body.movies or [])]
	try:
		phrases = await generator.generate(movies)
	except ValidationError as e:
		return JSONResponse(status_code=400, content={"error": str(e)})
	except ConfigurationError as e:
		logger.error(f"[API] /api/watch-for unavailable: {e}")
		return JSONResponse(status_code=500, content={"error": "OpenAI API key missing"})
	except Exception as e:
		logger.exception(f"[API] /api/watch-for failed: {e}")
		return JSONResponse(status_code=500, content={"error": "Failed to generate watch-for phrases"})
	return {"watchFor": phrases}


@app.get("/api/movies/{tmdb_id}/providers")
async def providers(
	tmdb_id: int,
	region: str = Query(DEFAULT_WATCH_REGION, min_length=2, max_length=2),
	catalog: TmdbClient = Depends(get_catalog),
):
	"""Whitelisted subscription providers for one title in a region."""
	try:
		names = await catalog.watch_providers(tmdb_id, region=region)
	except CineMatchError as e:
		logger.error(f"[API] provider lookup for {tmdb_id} unavailable: {e}")
		return JSONResponse(status_code=500, content={"error": "providers_unavailable"})
	return {"id": f"tmdb_{tmdb_id}", "region": region.upper(), "providers": names}
