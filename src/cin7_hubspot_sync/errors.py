"""Sync exceptions."""


class SyncError(RuntimeError):
    """Base error. Fatal when it escapes run_sync; writers collect it per record."""


class ConfigError(SyncError):
    """Missing or invalid configuration (env vars, destination schema)."""


class Cin7Error(SyncError):
    """Non-success or unreadable response from the Cin7 API."""


class HubSpotError(SyncError):
    """Non-success or unreadable response from the HubSpot API."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
