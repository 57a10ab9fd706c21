# File: tests/conftest.py
import asyncio
import dataclasses
from typing import Dict, List

import pytest
import pytest_asyncio
from aiohttp import web

from app.config import DEFAULT_COMPARISON_CONFIG, ComparisonConfig
from app.models.progress import ProgressTracker

#: seconds the "slow" handler sleeps, well above FAST_CONFIG.probe_timeout
SLOW_SLEEP: float = 1.0

#: redirect map of the fake new site (path -> location)
REDIRECTS: Dict[str, str] = {
    "/y": "/z",
    "/old-news": "/news/",
    "/retired": "/home",          # catch-all landing page, not linked anywhere
    "/hop1": "/hop2",
    "/hop2": "/z",
    "/broken": "/nowhere",        # target answers 404
    "/loop": "/loop",
    "/same": "/same/",            # trailing-slash only
    "/old-home": "/",             # moved to the site root
}

#: paths the fake new site serves with 200
PAGES = {"/", "/x", "/z", "/news/", "/home", "/same/"}


@pytest.fixture()
def fast_config() -> ComparisonConfig:
    """Comparison config with short timeouts and no settle delay."""
    return dataclasses.replace(
        DEFAULT_COMPARISON_CONFIG,
        probe_timeout=0.3,
        settle_delay=0.0,
        max_redirects=5,
    )


@pytest.fixture()
def events() -> List[dict]:
    """Collected event dicts of a progress tracker."""
    return []


@pytest.fixture()
def tracker(events) -> ProgressTracker:
    """Progress tracker that records every event into ``events``."""
    return ProgressTracker(callback=events.append)


def _build_new_site() -> web.Application:
    async def handler(request: web.Request) -> web.StreamResponse:
        path = request.path
        if path == "/slow":
            await asyncio.sleep(SLOW_SLEEP)
            return web.Response(text="too late")
        if path in REDIRECTS:
            raise web.HTTPFound(REDIRECTS[path])
        if path in PAGES:
            return web.Response(text=f"page {path}")
        raise web.HTTPNotFound()

    app = web.Application()
    app.router.add_route("GET", "/{tail:.*}", handler)
    return app


@pytest_asyncio.fixture()
async def new_site() -> str:
    """Serve the fake new site on a free local port, yield its base URL."""
    runner = web.AppRunner(_build_new_site())
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    host, port = runner.addresses[0][:2]
    try:
        yield f"http://{host}:{port}"
    finally:
        await runner.cleanup()
