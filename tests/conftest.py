"""Pytest fixtures for cin7-hubspot-sync tests."""

import json
from typing import Any, Optional

import httpx
import pytest

from cin7_hubspot_sync.config import SyncConfig
from cin7_hubspot_sync.connectors import Cin7Connector, HubSpotClient

UNIQUE_PROPERTY = "cin7_order_id"

BASE_ENV = {
    "HUBSPOT_PRIVATE_APP_TOKEN": "pat-test-token",
    "CIN7_USERNAME": "cin7user",
    "CIN7_KEY": "cin7key",
    "CIN7_BASE_URL": "https://api.cin7.test/api/v1/",
    "CIN7_SALES_ORDERS_PATH": "/SalesOrders",
}


def make_order(i: int, **overrides: Any) -> dict[str, Any]:
    """Cin7 sales order as returned by the listing endpoint."""
    order = {
        "id": 5000 + i,
        "reference": f"SO-{5000 + i}",
        "invoiceDate": "2026-10-17T09:30:00Z",
        "stage": "Dispatched",
        "deliveryFirstName": "Ada",
        "deliveryLastName": "Lovelace",
        "deliveryCompany": "",
        "deliveryAddress1": "12 Analytical Way",
        "deliveryAddress2": "",
        "deliveryCity": "Portland",
        "deliveryState": "OR",
        "deliveryPostalCode": "97201",
        "deliveryCountry": "US",
        "billingCompany": "Engines Ltd",
        "freightTotal": 12.5,
        "productTotal": 100.0,
        "total": 112.5,
    }
    order.update(overrides)
    return order


class FakeCin7:
    """
    Cin7 listing endpoint. Serves the given pages in order, then empty pages.
    With forever set, every page is full (an API that never stops paginating).
    """

    def __init__(
        self,
        pages: Optional[list[list[dict]]] = None,
        *,
        forever: Optional[list[dict]] = None,
        wrap: Optional[str] = None,
        status_code: int = 200,
    ):
        self.pages = pages or []
        self.forever = forever
        self.wrap = wrap
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, text="Unauthorized: bad API key")
        page = int(request.url.params["page"])
        if self.forever is not None:
            records = self.forever
        else:
            records = self.pages[page - 1] if page <= len(self.pages) else []
        payload: Any = {self.wrap: records} if self.wrap else records
        return httpx.Response(200, json=payload)

    def connector(self) -> Cin7Connector:
        return Cin7Connector(
            base_url=BASE_ENV["CIN7_BASE_URL"],
            path=BASE_ENV["CIN7_SALES_ORDERS_PATH"],
            username=BASE_ENV["CIN7_USERNAME"],
            key=BASE_ENV["CIN7_KEY"],
            client=httpx.Client(transport=httpx.MockTransport(self.handler)),
        )


class FakeHubSpot:
    """
    In-memory HubSpot orders API: property schema, search, create/update and
    batch upsert. fail_batches (1-based) and fail_ids make writes return 400.
    """

    def __init__(
        self,
        properties: set[str],
        *,
        existing: Optional[dict[str, str]] = None,
        fail_batches: tuple[int, ...] = (),
        fail_ids: tuple[str, ...] = (),
        schema_status: int = 200,
    ):
        self.properties = set(properties)
        self.existing = dict(existing or {})
        self.fail_batches = set(fail_batches)
        self.fail_ids = set(fail_ids)
        self.schema_status = schema_status
        self.requests: list[httpx.Request] = []
        self.batches: list[list[dict]] = []
        self.created: list[dict] = []
        self.updated: list[tuple[str, dict]] = []
        self._next_id = 9000

    def _new_id(self) -> str:
        self._next_id += 1
        return str(self._next_id)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        body = json.loads(request.content) if request.content else None

        if request.method == "GET" and path == "/crm/v3/properties/orders":
            if self.schema_status != 200:
                return httpx.Response(self.schema_status, text="Authentication credentials not found")
            return httpx.Response(
                200, json={"results": [{"name": n} for n in sorted(self.properties)]}
            )

        if request.method == "POST" and path == "/crm/v3/objects/orders/batch/upsert":
            self.batches.append(body["inputs"])
            if len(self.batches) in self.fail_batches:
                return httpx.Response(
                    400, json={"status": "error", "message": "Property values were not valid"}
                )
            results = []
            for item in body["inputs"]:
                is_new = item["id"] not in self.existing
                if is_new:
                    self.existing[item["id"]] = self._new_id()
                results.append(
                    {"id": self.existing[item["id"]], "new": is_new, "properties": item["properties"]}
                )
            return httpx.Response(200, json={"status": "COMPLETE", "results": results})

        if request.method == "POST" and path == "/crm/v3/objects/orders/search":
            value = body["filterGroups"][0]["filters"][0]["value"]
            if value in self.existing:
                return httpx.Response(200, json={"total": 1, "results": [{"id": self.existing[value]}]})
            return httpx.Response(200, json={"total": 0, "results": []})

        if request.method == "POST" and path == "/crm/v3/objects/orders":
            props = body["properties"]
            if props.get(UNIQUE_PROPERTY) in self.fail_ids:
                return httpx.Response(400, text="Property values were not valid")
            self.created.append(props)
            new_id = self._new_id()
            self.existing[props.get(UNIQUE_PROPERTY)] = new_id
            return httpx.Response(201, json={"id": new_id, "properties": props})

        if request.method == "PATCH" and path.startswith("/crm/v3/objects/orders/"):
            object_id = path.rsplit("/", 1)[1]
            props = body["properties"]
            if props.get(UNIQUE_PROPERTY) in self.fail_ids:
                return httpx.Response(400, text="Property values were not valid")
            self.updated.append((object_id, props))
            return httpx.Response(200, json={"id": object_id, "properties": props})

        return httpx.Response(404, text="Not found")

    def client(self) -> HubSpotClient:
        return HubSpotClient(
            "pat-test-token",
            client=httpx.Client(transport=httpx.MockTransport(self.handler)),
        )


@pytest.fixture
def env() -> dict[str, str]:
    """Minimal valid environment for a sync run."""
    return dict(BASE_ENV)


@pytest.fixture
def config(env: dict[str, str]) -> SyncConfig:
    """SyncConfig built from the minimal environment."""
    return SyncConfig.from_env(env)


@pytest.fixture
def fake_cin7():
    """Factory for a fake Cin7 listing endpoint."""
    return FakeCin7


@pytest.fixture
def fake_hubspot():
    """Factory for a fake HubSpot orders API."""
    return FakeHubSpot


@pytest.fixture
def order_factory():
    """Factory for Cin7 order dicts."""
    return make_order
