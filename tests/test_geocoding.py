"""Tests for address geocoding and Location construction."""

from __future__ import annotations

import logging
from types import SimpleNamespace
from typing import Any

import httpx
import pytest

from weather_resolver.exceptions import GeocodingError
from weather_resolver.geocoding import GeocodeResult, NominatimGeocoder, build_location

MATCH: dict[str, Any] = {
    "lat": "37.3349",
    "lon": "-122.009",
    "address": {
        "town": "Cupertino",
        "state": "California",
        "postcode": "95014",
        "country_code": "us",
    },
}


def _geocoder(handler: Any) -> NominatimGeocoder:
    settings = SimpleNamespace(
        geocoder_base_url="https://nominatim.example.org",
        geocoder_user_agent="weather-resolver-tests/0.1",
        geocoder_country_codes="us,ca",
        weather_timeout_seconds=5.0,
    )
    return NominatimGeocoder(
        settings=settings,
        logger=logging.getLogger("test_geocoding"),
        transport=httpx.MockTransport(handler),
    )


def test_geocode_normalizes_match() -> None:
    seen: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[MATCH])

    with _geocoder(_handler) as geocoder:
        result = geocoder.geocode("  1 Apple Park Way,   Cupertino ")

    assert result == GeocodeResult(
        latitude=37.3349,
        longitude=-122.009,
        postal_code="95014",
        city="Cupertino",
        state="California",
        country="US",
    )
    params = seen[0].url.params
    assert params["q"] == "1 Apple Park Way, Cupertino"
    assert params["countrycodes"] == "us,ca"
    assert seen[0].headers["User-Agent"] == "weather-resolver-tests/0.1"


@pytest.mark.parametrize("payload", [[], {"error": "x"}, [{"lat": "nan-ish"}]])
def test_unresolvable_payloads_raise(payload: Any) -> None:
    with _geocoder(lambda request: httpx.Response(200, json=payload)) as geocoder:
        with pytest.raises(GeocodingError, match="Could not resolve"):
            geocoder.geocode("Nowhere")


def test_http_error_raises() -> None:
    with _geocoder(lambda request: httpx.Response(503, text="busy")) as geocoder:
        with pytest.raises(GeocodingError, match="status 503"):
            geocoder.geocode("Cupertino")


def test_empty_address_raises_without_request() -> None:
    calls: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=[MATCH])

    with _geocoder(_handler) as geocoder:
        with pytest.raises(GeocodingError):
            geocoder.geocode("   ")
    assert calls == []


def test_build_location_copies_geocode_fields() -> None:
    result = GeocodeResult(
        latitude=1.5, longitude=2.5, postal_code="12345", city="Cupertino", state="CA"
    )

    location = build_location("loc-1", "1 Infinite Loop", result)

    assert location.has_coordinates()
    assert location.location_id == "loc-1"
    assert location.address == "1 Infinite Loop"
    assert location.city == "Cupertino"
    assert location.state == "CA"
    assert location.postal_code == "12345"
    assert location.country is None
