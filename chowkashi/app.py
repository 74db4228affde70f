from __future__ import annotations

import logging
import os
import uuid
from collections.abc import Awaitable

from fastapi import Depends, FastAPI, HTTPException, Request
from pydantic import ValidationError
from starlette.middleware.sessions import SessionMiddleware

from .analytics.aggregator import compute_analytics
from .analytics.store import get_events
from .datastore.catalog import fetch_categories, fetch_languages
from .geo.models import Coordinates
from .location.geocoder import geocode_address
from .location.resolver import LocationResolver
from .search.cache import clear_cache_on_location_change, get_cache_stats
from .search.config import DEFAULT_SEARCH_CONFIG
from .search.enhancement import enhance_query
from .search.models import (
    EnhanceRequest,
    EnhanceResponse,
    PostalCodeSearchRequest,
    ResolveLocationRequest,
    ResolveLocationResponse,
    SearchRequest,
    SearchResponse,
)
from .search.pipeline import run_search
from .search.postal import InvalidPostalCode, PostalCodeSearch
from .search.query_processing import DEFAULT_CATEGORIES
from .storage.local_state import LocalState, build_local_state
from .storage.models import CustomCategories, LocalNote, LocalReview, NotificationPrompt

logger = logging.getLogger(__name__)

app = FastAPI(title="Chowkashi Search API", version="1.0.0")
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("SESSION_SECRET", "chowkashi-secret-change-in-production"),
)

_local_state = build_local_state()


def get_local_state() -> LocalState:
    return _local_state


# ── Session helpers ──────────────────────────────────────────────────────


def _session_key(request: Request) -> str:
    key = request.session.get("session_key")
    if not key:
        key = uuid.uuid4().hex
        request.session["session_key"] = key
    return key


def _last_location(request: Request) -> Coordinates | None:
    raw = request.session.get("last_location")
    if not raw:
        return None
    try:
        return Coordinates(**raw)
    except (TypeError, ValidationError):
        logger.warning("Dropping malformed session location %r", raw)
        request.session.pop("last_location", None)
        return None


def _remember_location(request: Request, location: Coordinates | None) -> None:
    if location is not None:
        request.session["last_location"] = location.model_dump()


def _invalid_postal_code(exc: InvalidPostalCode) -> HTTPException:
    return HTTPException(status_code=422, detail={"title": exc.title, "description": exc.description})


async def _search(request: Request, body: SearchRequest) -> SearchResponse:
    response = await run_search(
        body,
        session_key=_session_key(request),
        previous_location=_last_location(request),
        geocode=geocode_address,
    )
    if not response.superseded:
        _remember_location(request, response.user_location)
    return response


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata(state: LocalState = Depends(get_local_state)) -> dict:
    backend_categories = fetch_categories()
    categories: list[str] = []
    for name in [*DEFAULT_CATEGORIES, *backend_categories, *state.custom_categories()]:
        if name not in categories:
            categories.append(name)
    return {
        "categories": categories,
        "default_categories": DEFAULT_CATEGORIES,
        "custom_categories": state.custom_categories(),
        "languages": fetch_languages(),
        "sort_options": ["rating", "distance", "reviewCount", "newest"],
    }


# ── Search endpoints ─────────────────────────────────────────────────────


@app.post("/search", response_model=SearchResponse)
async def search(body: SearchRequest, request: Request) -> SearchResponse:
    try:
        return await _search(request, body)
    except InvalidPostalCode as exc:
        raise _invalid_postal_code(exc) from exc


@app.post("/search/postal-code", response_model=SearchResponse)
async def postal_code_search(body: PostalCodeSearchRequest, request: Request) -> SearchResponse:
    def by_postal_code(code: str) -> Awaitable[SearchResponse]:
        return _search(
            request,
            SearchRequest(postal_code=code, filters=body.filters, user_location=body.user_location),
        )

    postal = PostalCodeSearch(by_postal_code)
    try:
        pending = postal.clear() if body.clear else postal.submit(body.postal_code)
    except InvalidPostalCode as exc:
        raise _invalid_postal_code(exc) from exc
    return await pending


@app.post("/search/enhance", response_model=EnhanceResponse)
async def enhance(body: EnhanceRequest, request: Request) -> EnhanceResponse:
    location = None
    if body.near_me:
        location = body.device.coordinates if body.device else None
        location = location or _last_location(request)
    enhanced = await enhance_query(body.query, body.near_me, location)
    return EnhanceResponse(original=body.query, enhanced=enhanced)


# ── Location endpoints ───────────────────────────────────────────────────


@app.post("/location/resolve", response_model=ResolveLocationResponse)
async def resolve_location(body: ResolveLocationRequest, request: Request) -> ResolveLocationResponse:
    def on_resolved(label: str) -> None:
        request.session["location_label"] = label

    resolver = LocationResolver(geocode=geocode_address, on_resolved=on_resolved)
    resolved = await resolver.resolve(body.text, body.device)

    cache_cleared = clear_cache_on_location_change(
        _last_location(request),
        resolved.coordinates,
        DEFAULT_SEARCH_CONFIG.location_change_threshold_km,
    )
    _remember_location(request, resolved.coordinates)
    return ResolveLocationResponse(
        coordinates=resolved.coordinates,
        label=resolved.label,
        notice=resolved.notice,
        cache_cleared=cache_cleared,
    )


# ── Operational endpoints ────────────────────────────────────────────────


@app.get("/cache/stats")
def cache_stats() -> dict:
    return get_cache_stats()


@app.get("/analytics")
def analytics() -> dict:
    return compute_analytics(get_events())


# ── Local state endpoints ────────────────────────────────────────────────


@app.get("/local/categories", response_model=CustomCategories)
def get_custom_categories(state: LocalState = Depends(get_local_state)) -> CustomCategories:
    return CustomCategories(categories=state.custom_categories())


@app.put("/local/categories", response_model=CustomCategories)
def put_custom_categories(
    body: CustomCategories,
    state: LocalState = Depends(get_local_state),
) -> CustomCategories:
    return CustomCategories(categories=state.set_custom_categories(body.categories))


@app.get("/local/businesses/{business_id}/reviews")
def get_local_reviews(business_id: str, state: LocalState = Depends(get_local_state)) -> list[dict]:
    return state.reviews(business_id)


@app.post("/local/businesses/{business_id}/reviews")
def add_local_review(
    business_id: str,
    body: LocalReview,
    state: LocalState = Depends(get_local_state),
) -> list[dict]:
    return state.add_review(business_id, body.model_dump(mode="json"))


@app.get("/local/businesses/{business_id}/notes")
def get_local_notes(business_id: str, state: LocalState = Depends(get_local_state)) -> list[dict]:
    return state.notes(business_id)


@app.post("/local/businesses/{business_id}/notes")
def add_local_note(
    business_id: str,
    body: LocalNote,
    state: LocalState = Depends(get_local_state),
) -> list[dict]:
    return state.add_note(business_id, body.model_dump(mode="json"))


@app.get("/local/notification-prompt", response_model=NotificationPrompt)
def get_notification_prompt(state: LocalState = Depends(get_local_state)) -> NotificationPrompt:
    return NotificationPrompt(dismissed=state.notification_prompt_dismissed())


@app.post("/local/notification-prompt", response_model=NotificationPrompt)
def set_notification_prompt(
    body: NotificationPrompt,
    state: LocalState = Depends(get_local_state),
) -> NotificationPrompt:
    state.set_notification_prompt_dismissed(body.dismissed)
    return NotificationPrompt(dismissed=state.notification_prompt_dismissed())
