from __future__ import annotations

import asyncio

import httpx

from chowkashi.geo.models import Coordinates
from chowkashi.location.config import GeocoderConfig
from chowkashi.location.geocoder import geocode_address
from chowkashi.location.resolver import (
    NEAR_ME_LABEL,
    GeolocationError,
    LocationResolver,
    reported_position,
)
from chowkashi.search.models import DeviceReading, GeolocationErrorCode

CONFIG = GeocoderConfig(base_url="https://geocoder.test/search", user_agent="chowkashi-tests", enabled=True)
DEVICE = DeviceReading(coordinates=Coordinates(lat=12.9716, lng=77.5946))


def _geocode_with(handler) -> Coordinates | None:
    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await geocode_address("Koramangala, Bengaluru", CONFIG, client)

    return asyncio.run(go())


# ── Geocoder ─────────────────────────────────────────────────────────────


def test_geocode_parses_first_result():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["params"] = dict(request.url.params)
        seen["agent"] = request.headers["user-agent"]
        return httpx.Response(200, json=[{"lat": "12.9352", "lon": "77.6245"}, {"lat": "0", "lon": "0"}])

    assert _geocode_with(handler) == Coordinates(lat=12.9352, lng=77.6245)
    assert seen["params"]["q"] == "Koramangala, Bengaluru"
    assert seen["params"]["format"] == "json"
    assert seen["params"]["limit"] == "1"
    assert seen["agent"] == "chowkashi-tests"


def test_geocode_empty_result_returns_none():
    assert _geocode_with(lambda request: httpx.Response(200, json=[])) is None


def test_geocode_http_error_returns_none():
    assert _geocode_with(lambda request: httpx.Response(503)) is None


def test_geocode_malformed_payload_returns_none():
    assert _geocode_with(lambda request: httpx.Response(200, json=[{"display_name": "x"}])) is None
    assert _geocode_with(lambda request: httpx.Response(200, text="<html>")) is None


def test_geocode_network_error_returns_none():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    assert _geocode_with(handler) is None


def test_geocode_disabled_skips_request():
    config = GeocoderConfig(enabled=False)
    assert asyncio.run(geocode_address("Indiranagar", config)) is None


# ── Resolver ─────────────────────────────────────────────────────────────


def _resolver(result: Coordinates | None = None):
    labels: list[str] = []
    queries: list[str] = []

    async def geocode(text: str):
        queries.append(text)
        return result

    return LocationResolver(geocode=geocode, on_resolved=labels.append), labels, queries


def test_device_reading_resolves_near_me():
    resolver, labels, _ = _resolver()
    resolved = asyncio.run(resolver.resolve(None, DEVICE))
    assert resolved.coordinates == DEVICE.coordinates
    assert resolved.label == NEAR_ME_LABEL
    assert labels == ["Near me"]


def test_near_me_text_delegates_to_device():
    resolver, labels, queries = _resolver()
    resolved = asyncio.run(resolver.resolve("  Current Location ", DEVICE))
    assert resolved.coordinates == DEVICE.coordinates
    assert queries == []
    assert labels == ["Near me"]


def test_text_is_geocoded_and_label_is_literal_input():
    target = Coordinates(lat=12.9784, lng=77.6408)
    resolver, labels, queries = _resolver(target)
    resolved = asyncio.run(resolver.resolve("Indiranagar", None))
    assert resolved.coordinates == target
    assert queries == ["Indiranagar"]
    assert labels == ["Indiranagar"]


def test_failed_geocode_gives_notice():
    resolver, labels, _ = _resolver(None)
    resolved = asyncio.run(resolver.resolve("Atlantis", None))
    assert resolved.coordinates is None
    assert "Atlantis" in resolved.notice
    assert labels == []


def test_permission_denied_returns_notice_without_retry():
    resolver, labels, _ = _resolver()
    reading = DeviceReading(error=GeolocationErrorCode.permission_denied)
    resolved = asyncio.run(resolver.resolve("near me", reading))
    assert resolved.coordinates is None
    assert resolved.notice == "Location access denied by user"
    assert labels == []


def test_missing_device_reading_is_unsupported():
    provider = reported_position(None)
    try:
        asyncio.run(provider())
    except GeolocationError as exc:
        assert exc.code == GeolocationErrorCode.unsupported
    else:
        raise AssertionError("expected GeolocationError")
