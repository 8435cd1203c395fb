"""Health and Prometheus metrics endpoints."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from aiohttp import web
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from bot.transport import ChatTransport
from core.logger import get_logger
from services.entry_store import EntryStore
from utils.metrics import gather_host_metrics

logger = get_logger(__name__)

STORE_KEY = web.AppKey("store", EntryStore)
TRANSPORT_KEY = web.AppKey("transport", object)


async def metrics_handler(request: web.Request) -> web.Response:
    return web.Response(body=generate_latest(), headers={"Content-Type": CONTENT_TYPE_LATEST})


async def health_handler(request: web.Request) -> web.Response:
    health = {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": {
            "database": "unknown",
            "transport": "not_configured",
        },
        "host": gather_host_metrics(),
    }
    is_healthy = True

    try:
        await request.app[STORE_KEY].ping()
        health["checks"]["database"] = "ok"
    except Exception as e:
        health["checks"]["database"] = "error"
        is_healthy = False
        logger.error(f"Database health check failed: {e}")

    if request.app[TRANSPORT_KEY] is not None:
        health["checks"]["transport"] = "ok"

    if not is_healthy:
        health["status"] = "degraded"
    return web.json_response(health, status=200 if is_healthy else 503)


def create_app(store: EntryStore, transport: Optional[ChatTransport] = None) -> web.Application:
    app = web.Application()
    app[STORE_KEY] = store
    app[TRANSPORT_KEY] = transport
    app.router.add_get("/metrics", metrics_handler)
    app.router.add_get("/health", health_handler)
    return app


async def start_web_server(app: web.Application, host: str, port: int) -> web.AppRunner:
    """Serve ``app`` in the running loop; the caller cleans up the runner."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    logger.info(f"🚀 Metrics server started on http://{host}:{port}")
    return runner
