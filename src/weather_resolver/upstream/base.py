"""Provider-agnostic upstream weather interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..models import ObservationData


class UpstreamClient(ABC):
    """Base contract for the live weather provider used as the last tier."""

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """True when a credential is available for live requests."""

    @abstractmethod
    def fetch_live(self, query: str) -> ObservationData:
        """Fetch current conditions for `query`; raises UpstreamError on failure."""

    @abstractmethod
    def close(self) -> None:
        """Release provider resources."""
