"""Data models for source orders, upsert inputs and run summaries."""

from cin7_hubspot_sync.models.order import SourceOrder, UpsertInput
from cin7_hubspot_sync.models.summary import FailedRun, SyncSummary, WriteResult

__all__ = ["FailedRun", "SourceOrder", "SyncSummary", "UpsertInput", "WriteResult"]
