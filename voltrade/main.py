"""VolTrade — application entry point.

Boots the FastAPI internal server and provides the CLI entry point for
served and headless simulation runs.
"""

import logging

from fastapi import FastAPI

from voltrade.api.routers import router

app = FastAPI(title="VolTrade Internal API", version="0.1.0")
app.include_router(router)

logger = logging.getLogger("voltrade")


@app.get("/health")
async def health():
    """Liveness probe."""
    return {"status": "ok"}


# ── CLI ──────────────────────────────────────────────────────────────────


def _run_cli() -> None:
    """Parse CLI arguments and dispatch to the appropriate mode."""
    import argparse
    import asyncio

    from voltrade.api.routers import configure_routers
    from voltrade.config import load_config
    from voltrade.driver import SimulationDriver

    parser = argparse.ArgumentParser(description="VolTrade volatility breakout simulator")
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Run a fixed number of ticks without the API server",
    )
    parser.add_argument(
        "--ticks",
        type=int,
        default=500,
        help="Ticks to run in headless mode (default: 500)",
    )
    parser.add_argument(
        "--fast",
        action="store_true",
        help="Headless mode: do not wait between ticks",
    )
    parser.add_argument(
        "--autostart",
        action="store_true",
        help="Server mode: start ticking immediately",
    )
    args = parser.parse_args()

    config = load_config()
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    driver = SimulationDriver(config)
    configure_routers(driver)

    if args.headless:
        asyncio.run(_run_headless(driver, args.ticks, 0.0 if args.fast else None))
    else:
        asyncio.run(_run_server(driver, config.api_port, args.autostart))


async def _run_server(driver, port: int, autostart: bool) -> None:
    """Serve the API; the driver ticks on the same event loop."""
    import uvicorn

    uvi_config = uvicorn.Config(
        app,
        host="0.0.0.0",
        port=port,
        log_level="info",
    )
    server = uvicorn.Server(uvi_config)

    if autostart:
        driver.start()

    logger.info("API available at http://localhost:%d", port)
    try:
        await server.serve()
    finally:
        driver.pause()
        logger.info("VolTrade stopped.")


async def _run_headless(driver, ticks: int, interval: float | None) -> None:
    """Run *ticks* ticks, wait for pending advisories, print the summary."""
    from voltrade.cli.dashboard import print_status

    logger.info("Starting headless simulation for %d ticks.", ticks)
    await driver.run(ticks, interval=interval)
    await driver.analyst.wait_idle()
    print_status(driver.status(), driver.analyst.snapshot())


if __name__ == "__main__":
    _run_cli()
