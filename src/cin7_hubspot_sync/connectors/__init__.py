"""API connectors for the two ends of the sync."""

from cin7_hubspot_sync.connectors.cin7 import Cin7Connector
from cin7_hubspot_sync.connectors.hubspot import HubSpotClient

__all__ = ["Cin7Connector", "HubSpotClient"]
