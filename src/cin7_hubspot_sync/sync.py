"""Sync orchestration: fetch Cin7 orders -> dedupe -> map -> filter by schema -> upsert."""

import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Optional

import httpx

from cin7_hubspot_sync.config import SyncConfig, iso_timestamp
from cin7_hubspot_sync.connectors import Cin7Connector, HubSpotClient
from cin7_hubspot_sync.dedupe import dedupe_orders
from cin7_hubspot_sync.errors import ConfigError, SyncError
from cin7_hubspot_sync.mapping import FieldMap, build_upsert_inputs
from cin7_hubspot_sync.models.summary import FailedRun, SyncSummary
from cin7_hubspot_sync.writers import make_writer

logger = logging.getLogger(__name__)


def load_field_map(config: SyncConfig) -> FieldMap:
    """Field map from CIN7_FIELD_MAP_PATH if set, else the shipped table."""
    if config.field_map_path:
        return FieldMap.from_yaml(config.field_map_path, config.unique_property)
    return FieldMap.default(config.unique_property)


def require_unique_property(schema: set[str], unique_property: str) -> None:
    if unique_property not in schema:
        raise ConfigError(
            f'Missing HubSpot Order property "{unique_property}". Create it in HubSpot '
            "(Orders properties) as single-line text (unique), then rerun."
        )


def run_sync(
    config: SyncConfig,
    *,
    cin7: Optional[Cin7Connector] = None,
    hubspot: Optional[HubSpotClient] = None,
    field_map: Optional[FieldMap] = None,
    now: Optional[datetime] = None,
) -> SyncSummary:
    """
    Run one sync. Fatal errors (config, Cin7 failure, schema fetch, missing
    unique property) raise; per-batch/per-record write failures are collected
    in the summary. Connectors built here are closed before returning;
    injected ones belong to the caller.
    """
    now = now or datetime.now(timezone.utc)
    if field_map is None:
        field_map = load_field_map(config)

    owned: list = []
    if cin7 is None:
        cin7 = Cin7Connector.from_config(config)
        owned.append(cin7)
    if hubspot is None:
        hubspot = HubSpotClient.from_config(config)
        owned.append(hubspot)
    try:
        return _sync(config, cin7, hubspot, field_map, now)
    finally:
        for connector in owned:
            connector.close()


def _sync(
    config: SyncConfig,
    cin7: Cin7Connector,
    hubspot: HubSpotClient,
    field_map: FieldMap,
    now: datetime,
) -> SyncSummary:
    started_at = iso_timestamp(now)
    since = config.resolve_since(now)
    logger.info(
        "Cin7 sync started since=%s rows=%d max_pages=%d forced_since=%s mode=%s",
        since,
        config.rows,
        config.max_pages,
        bool(config.force_since),
        config.upsert_mode,
    )

    schema = hubspot.get_property_names()
    require_unique_property(schema, config.unique_property)
    logger.debug(
        "Mapped properties missing from HubSpot schema: %s",
        sorted(set(field_map.properties()) - schema),
    )

    orders = cin7.fetch_sales_orders(
        since,
        fields=config.cin7_fields,
        rows=config.rows,
        max_pages=config.max_pages,
    )
    prepared, skipped = dedupe_orders(orders)

    mapping_errors: list[str] = []
    inputs = build_upsert_inputs(
        prepared,
        schema,
        field_map,
        unique_property=config.unique_property,
        currency=config.currency_code,
        synced_at=started_at,
        errors=mapping_errors,
    )
    writer = make_writer(
        config.upsert_mode,
        hubspot,
        config.unique_property,
        batch_size=config.batch_size,
    )
    result = writer.write(inputs)
    result.errors[:0] = mapping_errors

    summary = SyncSummary.from_run(
        started_at=started_at,
        finished_at=iso_timestamp(),
        since=since,
        fetched=len(orders),
        prepared=len(prepared),
        skipped=skipped,
        result=result,
    )
    logger.info(
        "Cin7 sync complete fetched=%d prepared=%d created=%d updated=%d skipped=%d errors=%d",
        summary.cin7_count,
        summary.prepared,
        summary.created,
        summary.updated,
        summary.skipped,
        summary.errors_count,
    )
    return summary


def run_from_env(
    environ: Optional[Mapping[str, str]] = None,
    **overrides,
) -> tuple[bool, dict]:
    """
    Build config from the environment, run once, and return (ok, payload).
    Fatal failures become a minimal {"ok": false, "error": ...} payload.
    overrides replace individual SyncConfig fields (CLI flags).
    """
    try:
        config = SyncConfig.from_env(environ)
        if overrides:
            config = config.model_copy(update=overrides)
        summary = run_sync(config)
    except (SyncError, httpx.HTTPError) as e:
        logger.error("Cin7 sync failed: %s", e)
        return False, FailedRun(error=str(e)).to_json()
    return True, summary.to_json()
