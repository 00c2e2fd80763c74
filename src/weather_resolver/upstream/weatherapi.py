"""WeatherAPI.com (api.weatherapi.com) upstream client implementation."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..config import Settings
from ..exceptions import UpstreamError
from ..models import ObservationData
from ..redaction import sanitize_text
from .base import UpstreamClient


class WeatherAPIClient(UpstreamClient):
    """Fetches current conditions and today's high/low from WeatherAPI.com.

    One attempt per call. Retry policy, if any, belongs to whoever calls the
    resolver.
    """

    provider_name = "weatherapi"
    forecast_endpoint = "/forecast.json"

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self.logger = logger
        self._api_key = settings.weather_api_key
        self._client = httpx.Client(
            base_url=str(settings.weather_api_base_url).rstrip("/"),
            timeout=settings.weather_timeout_seconds,
            headers={
                "Accept": "application/json",
                "User-Agent": "weather-resolver/0.1",
            },
            transport=transport,
        )

    def __enter__(self) -> WeatherAPIClient:
        return self

    def __exit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    def fetch_live(self, query: str) -> ObservationData:
        """Fetch current conditions for a postal code or 'lat,lon' query."""
        if not self.is_configured:
            raise UpstreamError("Weather API key not configured.", category="not_configured")

        params = {
            "key": self._api_key,
            "q": query,
            "days": 1,
            "aqi": "no",
            "alerts": "no",
        }
        try:
            response = self._client.get(self.forecast_endpoint, params=params)
        except httpx.TimeoutException as exc:
            raise UpstreamError(
                f"Weather API request timed out: {type(exc).__name__}",
                category="timeout",
            ) from exc
        except httpx.HTTPError as exc:
            # Connection refused, DNS and protocol failures have no status code.
            raise UpstreamError(
                f"Weather API request failed: {sanitize_text(str(exc))}",
                category="unexpected_status",
            ) from exc

        status = response.status_code
        if status == 200:
            self.logger.info("Fetched weather from %s", self.provider_name)
            return self._parse_observation(self._json_body(response))
        if status == 401:
            raise UpstreamError("Invalid API key", category="invalid_credential", status_code=401)
        if status == 429:
            raise UpstreamError("API rate limit exceeded", category="rate_limited", status_code=429)
        raise UpstreamError(
            f"Unexpected API response: {status} {sanitize_text(response.text[:300])}".rstrip(),
            category="unexpected_status",
            status_code=status,
        )

    def _json_body(self, response: httpx.Response) -> dict[str, Any]:
        try:
            payload = response.json()
        except ValueError:
            self.logger.warning("Weather API returned a non-JSON body with status 200.")
            return {}
        if not isinstance(payload, dict):
            self.logger.warning(
                "Weather API returned unexpected payload type %s.", type(payload).__name__
            )
            return {}
        return payload

    def _parse_observation(self, body: dict[str, Any]) -> ObservationData:
        # Missing leaves become None; partial data is still a successful fetch.
        today = self._dig(body, "forecast", "forecastday", 0, "day")
        return ObservationData(
            current_temp=self._as_float(self._dig(body, "current", "temp_f")),
            conditions=self._as_str(self._dig(body, "current", "condition", "text")),
            high_temp=self._as_float(self._dig(today, "maxtemp_f")),
            low_temp=self._as_float(self._dig(today, "mintemp_f")),
        )

    @staticmethod
    def _dig(value: Any, *path: str | int) -> Any:
        current = value
        for step in path:
            if isinstance(step, int):
                if not isinstance(current, list) or len(current) <= step:
                    return None
            elif not isinstance(current, dict):
                return None
            current = current[step] if isinstance(step, int) else current.get(step)
        return current

    @staticmethod
    def _as_str(value: Any) -> str | None:
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None

    @staticmethod
    def _as_float(value: Any) -> float | None:
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return float(value)
        return None
