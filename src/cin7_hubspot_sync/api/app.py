"""FastAPI application: webhook verification, sync trigger, health check.

Routes:
- POST /api/hubspot/webhook                  signed HubSpot webhook (401 on bad timestamp/signature)
- GET  /api/hubspot/webhook                  plain-text liveness ("OK")
- GET  /api/hubspot/webhook/cin7-daily-sync  run one sync, JSON summary (500 on fatal error)
- GET  /health                               JSON liveness
"""

import logging
from collections.abc import Mapping
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from cin7_hubspot_sync import __version__, sync
from cin7_hubspot_sync.config import webhook_secret
from cin7_hubspot_sync.webhook import (
    INVALID_TIMESTAMP,
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
    decode_request_uri,
    timestamp_is_fresh,
    verify_request,
)

logger = logging.getLogger(__name__)

SERVICE_NAME = "cin7-hubspot-sync"
WEBHOOK_PATH = "/api/hubspot/webhook"
SYNC_PATH = "/api/hubspot/webhook/cin7-daily-sync"


def request_uri(request: Request) -> str:
    """Decoded path + query of the request as received (before routing)."""
    raw_path = request.scope.get("raw_path")
    if raw_path:
        path = raw_path.split(b"?", 1)[0].decode("latin-1")
    else:
        path = request.url.path
    query = request.scope.get("query_string", b"").decode("latin-1")
    return decode_request_uri(path, query)


def create_app(environ: Optional[Mapping[str, str]] = None) -> FastAPI:
    """
    Build the app. environ replaces os.environ for configuration lookups;
    each sync request reads its configuration fresh.
    """
    app = FastAPI(title="Cin7 HubSpot Sync", version=__version__)

    @app.get("/health")
    async def health():
        return {"status": "ok", "service": SERVICE_NAME}

    @app.get(WEBHOOK_PATH)
    async def webhook_ping():
        return PlainTextResponse("OK")

    @app.post(WEBHOOK_PATH)
    async def hubspot_webhook(request: Request):
        """Receive a HubSpot webhook; only verified requests get 200."""
        signature = request.headers.get(SIGNATURE_HEADER, "")
        timestamp = request.headers.get(TIMESTAMP_HEADER, "")

        if not timestamp_is_fresh(timestamp):
            logger.warning("HubSpot webhook rejected: invalid timestamp %r", timestamp)
            return PlainTextResponse(INVALID_TIMESTAMP, status_code=401)

        secret = webhook_secret(environ)
        if not secret:
            logger.error("HUBSPOT_CLIENT_SECRET not set; cannot verify webhooks")
            return PlainTextResponse("Missing HUBSPOT_CLIENT_SECRET", status_code=500)

        body = await request.body()
        result = verify_request(
            secret,
            request.method,
            request_uri(request),
            body,
            signature,
            timestamp,
        )
        if not result.ok:
            return PlainTextResponse(result.reason, status_code=401)

        return JSONResponse({"ok": True})

    @app.get(SYNC_PATH)
    def cin7_daily_sync():
        """Run one Cin7 -> HubSpot sync (blocking; served from the threadpool)."""
        ok, payload = sync.run_from_env(environ)
        return JSONResponse(payload, status_code=200 if ok else 500)

    return app


app = create_app()
