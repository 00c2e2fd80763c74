"""Address geocoding through a Nominatim-compatible search endpoint."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel

from .config import Settings
from .exceptions import GeocodingError
from .models import Location
from .redaction import sanitize_text


class GeocodeResult(BaseModel):
    """Coordinates and administrative fields for one resolved address."""

    latitude: float
    longitude: float
    postal_code: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None


class NominatimGeocoder:
    """Resolve free-form addresses to coordinates plus postal/admin fields."""

    search_endpoint = "/search"

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self.logger = logger
        self._client = httpx.Client(
            base_url=str(settings.geocoder_base_url).rstrip("/"),
            timeout=settings.weather_timeout_seconds,
            headers={
                "Accept": "application/json",
                "User-Agent": settings.geocoder_user_agent,
            },
            transport=transport,
        )

    def __enter__(self) -> NominatimGeocoder:
        return self

    def __exit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def geocode(self, address: str) -> GeocodeResult:
        """Return the best match for `address` or raise GeocodingError."""
        query = " ".join(address.split())
        if not query:
            raise GeocodingError("Could not resolve an empty address.")

        params = {
            "q": query,
            "format": "jsonv2",
            "addressdetails": 1,
            "limit": 1,
            "countrycodes": self.settings.geocoder_country_codes,
        }
        try:
            response = self._client.get(self.search_endpoint, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise GeocodingError(
                f"Could not resolve {query!r}: geocoder returned status "
                f"{exc.response.status_code}: {sanitize_text(exc.response.text[:300])}"
            ) from exc
        except httpx.HTTPError as exc:
            raise GeocodingError(
                f"Could not resolve {query!r}: {sanitize_text(str(exc))}"
            ) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise GeocodingError(f"Could not resolve {query!r}: non-JSON response.") from exc

        if not isinstance(payload, list) or not payload or not isinstance(payload[0], dict):
            raise GeocodingError(f"Could not resolve {query!r}: no matches.")
        return self._normalize(query, payload[0])

    def _normalize(self, query: str, match: dict[str, Any]) -> GeocodeResult:
        try:
            lat = float(match["lat"])
            lon = float(match["lon"])
        except (KeyError, TypeError, ValueError) as exc:
            raise GeocodingError(f"Could not resolve {query!r}: match has no coordinates.") from exc

        details = match.get("address")
        if not isinstance(details, dict):
            details = {}
        city = next(
            (details[k] for k in ("city", "town", "village", "hamlet") if details.get(k)),
            None,
        )
        country = details.get("country_code")
        self.logger.info("Geocoded address to (%s, %s)", lat, lon)
        return GeocodeResult(
            latitude=lat,
            longitude=lon,
            postal_code=details.get("postcode"),
            city=city,
            state=details.get("state"),
            country=country.upper() if isinstance(country, str) else None,
        )


def build_location(location_id: str, address: str | None, result: GeocodeResult) -> Location:
    """Build a Location from a geocode result."""
    return Location(
        location_id=location_id,
        address=address,
        latitude=result.latitude,
        longitude=result.longitude,
        postal_code=result.postal_code,
        city=result.city,
        state=result.state,
        country=result.country,
    )
