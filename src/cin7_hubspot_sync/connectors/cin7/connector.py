"""Cin7 sales-order connector (paginated listing, Basic auth)."""

import json
import logging
from collections.abc import Sequence
from typing import Any, Optional

import httpx

from cin7_hubspot_sync.errors import Cin7Error
from cin7_hubspot_sync.models.order import SourceOrder

from .constants import DEFAULT_FIELDS, INVOICE_DATE, RESULT_KEYS

logger = logging.getLogger(__name__)


def build_where(since: str) -> str:
    """Filter expression: invoiced on/after the cutoff, never-invoiced orders excluded."""
    return f"{INVOICE_DATE} >= '{since}' AND {INVOICE_DATE} IS NOT NULL"


def extract_records(payload: Any) -> list[dict[str, Any]]:
    """Accept a bare list or a mapping wrapping the list in items/results."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in RESULT_KEYS:
            records = payload.get(key)
            if records:
                return list(records)
    return []


class Cin7Connector:
    """
    Reads sales orders from the Cin7 REST API.
    Any non-success response is fatal for the run: partial data is never used.
    """

    DEFAULT_HEADERS = {
        "Accept": "application/json",
        "User-Agent": "cin7-hubspot-sync/0.1",
    }

    def __init__(
        self,
        base_url: str,
        path: str,
        username: str,
        key: str,
        client: Optional[httpx.Client] = None,
    ):
        self._url = base_url.rstrip("/") + "/" + path.lstrip("/")
        self._client = client or httpx.Client(timeout=30.0, headers=self.DEFAULT_HEADERS)
        self._auth = httpx.BasicAuth(username, key)

    @classmethod
    def from_config(cls, config, client: Optional[httpx.Client] = None) -> "Cin7Connector":
        return cls(
            base_url=config.cin7_base_url,
            path=config.cin7_path,
            username=config.cin7_username,
            key=config.cin7_key,
            client=client,
        )

    def close(self) -> None:
        self._client.close()

    def _get_json(self, params: dict[str, Any]) -> Any:
        resp = self._client.get(
            self._url,
            params=params,
            headers=self.DEFAULT_HEADERS,
            auth=self._auth,
        )
        text = resp.text
        if not resp.is_success:
            raise Cin7Error(f"Cin7 error {resp.status_code}: {text}")
        if not text:
            return {}
        try:
            return json.loads(text)
        except ValueError as e:
            raise Cin7Error(f"Cin7 returned invalid JSON: {e}") from e

    def fetch_page(
        self,
        page: int,
        since: str,
        *,
        fields: Sequence[str] = DEFAULT_FIELDS,
        rows: int = 250,
    ) -> list[dict[str, Any]]:
        """Fetch one page (1-based) of orders invoiced since the cutoff."""
        params = {
            "where": build_where(since),
            "fields": ",".join(fields),
            "order": INVOICE_DATE,
            "rows": rows,
            "page": page,
        }
        return extract_records(self._get_json(params))

    def fetch_sales_orders(
        self,
        since: str,
        *,
        fields: Sequence[str] = DEFAULT_FIELDS,
        rows: int = 250,
        max_pages: int = 50,
    ) -> list[SourceOrder]:
        """
        Page through the listing until an empty page or max_pages requests.
        The cap bounds runtime when the API never stops returning full pages.
        """
        orders: list[SourceOrder] = []
        for page in range(1, max_pages + 1):
            logger.info("Fetching Cin7 page %d", page)
            records = self.fetch_page(page, since, fields=fields, rows=rows)
            if not records:
                break
            orders.extend(SourceOrder(data=r) for r in records if isinstance(r, dict))
        else:
            logger.warning("Stopped at max_pages=%d; later orders not fetched", max_pages)

        logger.info("Fetched %d orders from Cin7", len(orders))
        return orders
