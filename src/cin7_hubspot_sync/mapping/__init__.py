"""Field mapping: candidate properties, then live-schema filter."""

from cin7_hubspot_sync.mapping.fields import FieldMap, FieldRule, first_value
from cin7_hubspot_sync.mapping.mapper import (
    build_candidate_properties,
    build_upsert_inputs,
    pick_existing_properties,
)

__all__ = [
    "FieldMap",
    "FieldRule",
    "build_candidate_properties",
    "build_upsert_inputs",
    "first_value",
    "pick_existing_properties",
]
