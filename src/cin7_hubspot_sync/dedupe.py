"""Deduplicate fetched orders by Cin7 id."""

import logging
from collections.abc import Iterable

from cin7_hubspot_sync.mapping.fields import order_id
from cin7_hubspot_sync.models.order import SourceOrder

logger = logging.getLogger(__name__)


def dedupe_orders(orders: Iterable[SourceOrder]) -> tuple[list[SourceOrder], int]:
    """
    One order per Cin7 id, first occurrence wins.
    Returns (prepared, skipped); orders with no extractable id are skipped,
    later duplicates are dropped without counting.
    """
    seen: set[str] = set()
    prepared: list[SourceOrder] = []
    skipped = 0
    for order in orders:
        oid = order_id(order)
        if not oid:
            skipped += 1
            continue
        if oid in seen:
            continue
        seen.add(oid)
        prepared.append(order)

    logger.info("Prepared %d orders (%d skipped without id)", len(prepared), skipped)
    return prepared, skipped
