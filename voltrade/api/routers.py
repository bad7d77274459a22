"""Internal API routers — /status, /market, /trades, /analysis, /control endpoints.

No business logic.  Reads from and delegates to the injected driver.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

logger = logging.getLogger("voltrade")
router = APIRouter()

# ── Shared state (set during app startup) ────────────────────────────────

_driver = None  # Set via configure_routers()


def configure_routers(driver) -> None:
    """Inject the ``SimulationDriver`` (or duck-type for tests)."""
    global _driver  # noqa: PLW0603
    _driver = driver


def _require_driver():
    if _driver is None:
        raise HTTPException(status_code=503, detail="Simulation not configured")
    return _driver


# ── Read endpoints ───────────────────────────────────────────────────────


@router.get("/status")
async def get_status():
    """Return the ledger snapshot plus equity / win-rate metrics."""
    return _require_driver().status()


@router.get("/market")
async def get_market(limit: int = Query(default=60, ge=1, le=500)):
    """Return the chart history, oldest first."""
    points = _require_driver().engine.ctx.price_points()[-limit:]
    return {"points": [p.to_dict() for p in points], "total": len(points)}


@router.get("/trades")
async def get_trades(
    limit: int = Query(default=20, ge=1, le=500),
    type: Optional[str] = Query(default=None),
):
    """Return recent trade log entries, newest first."""
    if type is not None and type.upper() not in ("BUY", "SELL"):
        raise HTTPException(status_code=422, detail="type must be BUY or SELL")
    return _require_driver().engine.ctx.trade_log.get_trades(
        limit=limit, type_filter=type,
    )


@router.get("/strategy/insight")
async def get_strategy_insight():
    """Return the checks the strategy evaluated on the latest tick."""
    strategy = _require_driver().engine.strategy
    return {"insight": getattr(strategy, "last_insight", {})}


@router.get("/analysis")
async def get_analysis():
    """Return the latest advisory text and its status."""
    return _require_driver().analyst.snapshot()


# ── Control endpoints ────────────────────────────────────────────────────


@router.post("/control/start")
async def post_start():
    driver = _require_driver()
    driver.start()
    return {"status": "ok", "running": driver.is_running}


@router.post("/control/pause")
async def post_pause():
    driver = _require_driver()
    driver.pause()
    return {"status": "ok", "running": driver.is_running}


@router.post("/control/reset")
async def post_reset():
    driver = _require_driver()
    driver.reset()
    return {"status": "ok", "running": driver.is_running}


@router.post("/analysis/refresh")
async def post_refresh_analysis():
    """Request a new advisory; returns immediately with the cell state."""
    driver = _require_driver()
    driver.request_analysis()
    return driver.analyst.snapshot()
