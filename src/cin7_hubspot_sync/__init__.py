"""Cin7 to HubSpot order sync and HubSpot webhook verification."""

__version__ = "0.1.0"
