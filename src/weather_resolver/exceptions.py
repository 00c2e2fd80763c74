"""Application exception classes."""


class ConfigError(Exception):
    """Raised when configuration is invalid or incomplete."""


class UpstreamError(Exception):
    """Raised for upstream weather API failures with category/status metadata."""

    def __init__(
        self,
        message: str,
        *,
        category: str = "unexpected_status",
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.category = category
        self.status_code = status_code


class CacheError(Exception):
    """Raised when the secondary cache backend cannot be read or written."""


class RecordStoreError(Exception):
    """Raised when reading or writing the authoritative record store fails."""


class GeocodingError(Exception):
    """Raised when an address cannot be resolved to coordinates."""


class LocationNotResolvedError(Exception):
    """Raised when a location without coordinates is used where they are required."""
