"""Two-stage mapping: build the full candidate mapping, then intersect with the live schema."""

import logging
from collections.abc import Iterable
from typing import Any, Optional

from cin7_hubspot_sync.mapping.fields import FORMAT_ERRORS, FieldMap, is_empty, order_id
from cin7_hubspot_sync.models.order import SourceOrder, UpsertInput

logger = logging.getLogger(__name__)


def build_candidate_properties(
    order: SourceOrder,
    field_map: FieldMap,
    context: dict[str, Any],
) -> dict[str, Any]:
    """
    Every property the field map can fill for this order.
    Absent, null and empty-string values are left out (HubSpot rejects
    empty writes for some property types).
    """
    candidates: dict[str, Any] = {}
    for rule in field_map.rules:
        value = rule.resolve(order.data, context)
        if not is_empty(value):
            candidates[rule.property] = value
    return candidates


def pick_existing_properties(schema: set[str], candidates: dict[str, Any]) -> dict[str, Any]:
    """Keep only properties the destination currently defines; unknown keys are dropped, not created."""
    return {k: v for k, v in candidates.items() if k in schema and not is_empty(v)}


def build_upsert_inputs(
    orders: Iterable[SourceOrder],
    schema: set[str],
    field_map: FieldMap,
    *,
    unique_property: str,
    currency: str = "USD",
    synced_at: str = "",
    errors: Optional[list[str]] = None,
) -> list[UpsertInput]:
    """
    Map deduplicated orders to upsert inputs keyed on the Cin7 id.
    An order whose values a template cannot render is left out; the message
    is appended to errors when given.
    """
    inputs: list[UpsertInput] = []
    for order in orders:
        oid = order_id(order)
        context = {"order_id": oid, "currency": currency, "synced_at": synced_at}
        try:
            candidates = build_candidate_properties(order, field_map, context)
        except FORMAT_ERRORS as e:
            logger.warning("Mapping failed for order %s: %s", oid, e)
            if errors is not None:
                errors.append(f"{oid}: mapping failed: {e}")
            continue
        candidates[unique_property] = oid
        inputs.append(UpsertInput(id=oid, properties=pick_existing_properties(schema, candidates)))
    return inputs
