"""HubSpot CRM v3 client for order objects."""

from .client import HubSpotClient

__all__ = ["HubSpotClient"]
