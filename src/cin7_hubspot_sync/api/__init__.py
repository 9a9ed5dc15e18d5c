"""HTTP surface: HubSpot webhook receiver and the sync trigger."""

from cin7_hubspot_sync.api.app import create_app

__all__ = ["create_app"]
