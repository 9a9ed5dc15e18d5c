"""Cin7 Omni sales-order connector."""

from .connector import Cin7Connector, build_where, extract_records

__all__ = ["Cin7Connector", "build_where", "extract_records"]
