"""Cache key and upstream query derivation for resolved locations.

Postal-code keys are preferred so that nearby addresses which geocode to slightly
different coordinates still share one cache entry. Coordinates are rendered with
their exact stored representation; rounding here would merge distinct places.
"""

from __future__ import annotations

from .exceptions import LocationNotResolvedError
from .models import Location

CACHE_KEY_PREFIX = "weather"


def _postal_code(location: Location) -> str | None:
    if location.postal_code and location.postal_code.strip():
        return location.postal_code.strip()
    return None


def _coordinates(location: Location) -> tuple[str, str]:
    if not location.has_coordinates():
        raise LocationNotResolvedError(
            f"Location {location.location_id} has neither postal code nor coordinates."
        )
    return repr(location.latitude), repr(location.longitude)


def derive_cache_key(location: Location) -> str:
    """Return the secondary-cache key for a location."""
    postal_code = _postal_code(location)
    if postal_code is not None:
        return f"{CACHE_KEY_PREFIX}/zipcode/{postal_code}"
    lat, lon = _coordinates(location)
    return f"{CACHE_KEY_PREFIX}/coordinates/{lat}_{lon}"


def derive_query_param(location: Location) -> str:
    """Return the upstream `q` parameter: postal code, else 'lat,lon'."""
    postal_code = _postal_code(location)
    if postal_code is not None:
        return postal_code
    lat, lon = _coordinates(location)
    return f"{lat},{lon}"
