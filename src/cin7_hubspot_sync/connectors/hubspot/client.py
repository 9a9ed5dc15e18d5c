"""HubSpot CRM v3 client: property schema, search, create/update, batch upsert."""

import json
import logging
from typing import Any, Optional

import httpx

from cin7_hubspot_sync.errors import HubSpotError
from cin7_hubspot_sync.models.order import UpsertInput

logger = logging.getLogger(__name__)


class HubSpotClient:
    """
    Thin wrapper over the CRM objects API for one object type (orders by default).
    Every non-success response raises HubSpotError; callers decide whether
    that is fatal (schema fetch) or collected (writes).
    """

    BASE_URL = "https://api.hubapi.com"

    def __init__(
        self,
        token: str,
        *,
        base_url: str = BASE_URL,
        object_type: str = "orders",
        client: Optional[httpx.Client] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._object_type = object_type
        self._client = client or httpx.Client(timeout=30.0)
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    @classmethod
    def from_config(cls, config, client: Optional[httpx.Client] = None) -> "HubSpotClient":
        return cls(config.hubspot_token, base_url=config.hubspot_base_url, client=client)

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, body: Optional[dict] = None) -> dict[str, Any]:
        logger.debug("HubSpot %s %s", method, path)
        resp = self._client.request(
            method,
            self._base_url + path,
            headers=self._headers,
            json=body,
        )
        text = resp.text
        if not resp.is_success:
            raise HubSpotError(f"HubSpot error {resp.status_code}: {text}", resp.status_code)
        if not text:
            return {}
        try:
            return json.loads(text)
        except ValueError as e:
            raise HubSpotError(f"HubSpot returned invalid JSON: {e}", resp.status_code) from e

    def get_property_names(self) -> set[str]:
        """Internal names of every property currently defined on the object type."""
        data = self._request("GET", f"/crm/v3/properties/{self._object_type}")
        return {p["name"] for p in data.get("results") or [] if p.get("name")}

    def find_id_by_property(self, property_name: str, value: str) -> Optional[str]:
        """Object id whose property equals value, or None."""
        body = {
            "filterGroups": [
                {
                    "filters": [
                        {"propertyName": property_name, "operator": "EQ", "value": value},
                    ]
                }
            ],
            "properties": [property_name],
            "limit": 1,
        }
        data = self._request("POST", f"/crm/v3/objects/{self._object_type}/search", body)
        results = data.get("results") or []
        if not results:
            return None
        return results[0].get("id") or None

    def create(self, properties: dict[str, Any]) -> dict[str, Any]:
        return self._request(
            "POST", f"/crm/v3/objects/{self._object_type}", {"properties": properties}
        )

    def update(self, object_id: str, properties: dict[str, Any]) -> dict[str, Any]:
        return self._request(
            "PATCH",
            f"/crm/v3/objects/{self._object_type}/{object_id}",
            {"properties": properties},
        )

    def batch_upsert(self, id_property: str, inputs: list[UpsertInput]) -> dict[str, Any]:
        """
        Create-or-update up to 100 objects keyed on a unique property.
        Each result carries new=true when the object was created.
        """
        body = {
            "inputs": [
                {"idProperty": id_property, "id": i.id, "properties": i.properties}
                for i in inputs
            ]
        }
        return self._request(
            "POST", f"/crm/v3/objects/{self._object_type}/batch/upsert", body
        )
