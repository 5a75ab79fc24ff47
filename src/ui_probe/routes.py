"""Route table and discovery.

The application under test may mount its auth pages anywhere (``/login``,
``/auth/sign-in``, ``/#/signin``). Discovery starts from the home page and
follows the visible navigation affordances to find out.

``RouteTable`` is an immutable snapshot; discovery returns a new one.
``RouteCache`` runs discovery once per origin and hands the same snapshot to
every later caller.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, replace
from typing import Dict, Optional, Tuple

import anyio

from ui_probe.browser import Browser
from ui_probe.config import settings
from ui_probe.errors import BrowserActionError
from ui_probe.prober import CandidateProber, Found
from ui_probe.selectors import Intent, candidates_for

logger = logging.getLogger(__name__)

ROUTE_NAMES = ("home", "login", "signup", "dashboard")

# upper bound per candidate while looking for login/signup links
DISCOVERY_PROBE_TIMEOUT = 1.0


@dataclass(frozen=True)
class RouteTable:
    """Logical route name to concrete path."""

    home: str = "/"
    login: str = "/login"
    signup: str = "/signup"
    dashboard: str = "/dashboard"

    def get(self, name: str) -> str:
        if name not in ROUTE_NAMES:
            raise KeyError(f"Unknown route '{name}'. Known routes: {', '.join(ROUTE_NAMES)}")
        return getattr(self, name)

    def with_route(self, name: str, path: str) -> "RouteTable":
        """Return a copy with ``name`` pointing at ``path``."""
        if name not in ROUTE_NAMES:
            raise KeyError(f"Unknown route '{name}'. Known routes: {', '.join(ROUTE_NAMES)}")
        if not path:
            raise ValueError(f"Route '{name}' cannot be empty")
        return replace(self, **{name: path})

    def as_dict(self) -> Dict[str, str]:
        return asdict(self)


DEFAULT_ROUTES = RouteTable()

# (route name, intent that navigates there)
_DISCOVERABLE: Tuple[Tuple[str, Intent], ...] = (
    ("login", Intent.NAV_TO_LOGIN),
    ("signup", Intent.NAV_TO_SIGNUP),
)


class RouteDiscoverer:
    """Follows login/signup affordances from the home page and records their paths."""

    def __init__(self, browser: Browser, prober: CandidateProber, probe_timeout: Optional[float] = None) -> None:
        self.browser = browser
        self.prober = prober
        self.probe_timeout = probe_timeout if probe_timeout is not None else min(prober.default_timeout, DISCOVERY_PROBE_TIMEOUT)

    async def _discover_one(self, base: RouteTable, name: str, intent: Intent) -> Optional[str]:
        await self.browser.goto(base.home)
        result = await self.prober.probe(candidates_for(intent), self.probe_timeout, label=str(intent))
        if not isinstance(result, Found):
            logger.warning(f"No {name} affordance found on {base.home}; keeping default {base.get(name)}")
            return None
        await result.locator.click()
        await self.browser.wait_for_settle()
        path = self.browser.path
        logger.info(f"Discovered {name} route: {path} (via {result.strategy})")
        return path

    async def discover(self, base: RouteTable = DEFAULT_ROUTES) -> RouteTable:
        """Return ``base`` with every discoverable route updated.

        Entries are only overwritten, never removed. A route whose affordance
        cannot be found or followed keeps its value from ``base``.
        """
        routes = base
        for name, intent in _DISCOVERABLE:
            try:
                path = await self._discover_one(base, name, intent)
            except BrowserActionError as exc:
                logger.warning(f"Discovery of {name} failed ({exc}); keeping default {base.get(name)}")
                continue
            if path:
                routes = routes.with_route(name, path)
        return routes


class RouteCache:
    """Single-writer cache of discovered routes, keyed by origin.

    The first caller for an origin runs discovery while holding the lock;
    everyone else waits and then reads the stored snapshot.
    """

    def __init__(self, base: RouteTable = DEFAULT_ROUTES) -> None:
        self.base = base
        self._lock = anyio.Lock()
        self._tables: Dict[str, RouteTable] = {}

    def peek(self, origin: Optional[str] = None) -> Optional[RouteTable]:
        return self._tables.get(origin or settings.base_url)

    async def get(self, browser: Browser, prober: Optional[CandidateProber] = None) -> RouteTable:
        origin = settings.base_url
        async with self._lock:
            cached = self._tables.get(origin)
            if cached is not None:
                return cached
            discoverer = RouteDiscoverer(browser, prober or CandidateProber(browser.page))
            table = await discoverer.discover(self.base)
            self._tables[origin] = table
            logger.info(f"Route table for {origin}: {table.as_dict()}")
            return table

    def reset(self) -> None:
        self._tables.clear()


route_cache = RouteCache()
