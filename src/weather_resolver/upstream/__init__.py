"""Upstream weather provider integrations."""

from .base import UpstreamClient
from .weatherapi import WeatherAPIClient

__all__ = [
    "UpstreamClient",
    "WeatherAPIClient",
]
