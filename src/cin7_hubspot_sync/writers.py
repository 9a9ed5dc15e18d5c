"""HubSpot writers: batch upsert (default) and search-then-create/update (fallback).

Writers never abort the run. A failed write is recorded as an error
message and processing moves on to the next record or batch.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from typing import Any, TypeVar

import httpx

from cin7_hubspot_sync.connectors.hubspot import HubSpotClient
from cin7_hubspot_sync.errors import SyncError
from cin7_hubspot_sync.models.order import UpsertInput
from cin7_hubspot_sync.models.summary import WriteResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


def chunk(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    for i in range(0, len(items), size):
        yield items[i : i + size]


def _record_error(result: WriteResult, message: str) -> None:
    logger.warning("Write failed: %s", message)
    result.errors.append(message)


class BaseWriter(ABC):
    """Writes upsert inputs to HubSpot and counts the outcome."""

    def __init__(self, client: HubSpotClient, id_property: str):
        self._client = client
        self._id_property = id_property

    @abstractmethod
    def write(self, inputs: Sequence[UpsertInput]) -> WriteResult:
        pass


class BatchUpsertWriter(BaseWriter):
    """
    Idempotent batch upsert keyed on the unique property.
    A malformed item fails its whole batch; errors are reported per batch.
    """

    def __init__(self, client: HubSpotClient, id_property: str, batch_size: int = 100):
        super().__init__(client, id_property)
        self._batch_size = batch_size

    def write(self, inputs: Sequence[UpsertInput]) -> WriteResult:
        result = WriteResult()
        for n, batch in enumerate(chunk(inputs, self._batch_size), start=1):
            try:
                response = self._client.batch_upsert(self._id_property, list(batch))
            except (SyncError, httpx.HTTPError) as e:
                _record_error(result, f"batch {n} ({len(batch)} orders): {e}")
                continue
            self._count(result, n, response)
        return result

    def _count(self, result: WriteResult, n: int, response: dict[str, Any]) -> None:
        for item in response.get("results") or []:
            result.upserted += 1
            if item.get("new"):
                result.created += 1
            else:
                result.updated += 1
        # 207 multi-status responses list the failed items separately
        for err in response.get("errors") or []:
            _record_error(result, f"batch {n}: {err.get('message') or err}")


class SearchThenWriteWriter(BaseWriter):
    """
    Search by unique property, then update the match or create a new order.
    Two calls per record and not atomic; assumes one sync run at a time.
    """

    def write(self, inputs: Sequence[UpsertInput]) -> WriteResult:
        result = WriteResult()
        for item in inputs:
            try:
                existing_id = self._client.find_id_by_property(self._id_property, item.id)
                if existing_id:
                    self._client.update(existing_id, item.properties)
                    result.updated += 1
                else:
                    self._client.create(item.properties)
                    result.created += 1
            except (SyncError, httpx.HTTPError) as e:
                _record_error(result, f"{item.id}: {e}")
        return result


def make_writer(
    mode: str,
    client: HubSpotClient,
    id_property: str,
    *,
    batch_size: int = 100,
) -> BaseWriter:
    """Writer for the configured upsert mode ("batch" or "search")."""
    if mode == "batch":
        return BatchUpsertWriter(client, id_property, batch_size=batch_size)
    if mode == "search":
        return SearchThenWriteWriter(client, id_property)
    raise ValueError(f"Unknown upsert mode: {mode}. Available: ['batch', 'search']")
