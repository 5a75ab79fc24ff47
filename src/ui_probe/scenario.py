"""Test scenario: compose discovery, actions and verification into one verdict.

A scenario owns one page (and therefore one isolated browser context) and
runs strictly sequentially. Its lifecycle::

    NOT_STARTED -> ROUTES_DISCOVERED -> ACTIONS_IN_FLIGHT -> VERIFIED (passed/failed)
                                                          -> ABORTED  (skipped)

Exceptions raised inside ``async with Scenario(...)`` are mapped to a verdict:
a missing precondition is a skip, a probe or verification that was expected
to succeed is a failure. Configuration errors and a dead browser are not
verdicts and propagate.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from ui_probe.actions import ActionExecutor
from ui_probe.browser import Browser
from ui_probe.config import settings
from ui_probe.errors import (
    BrowserActionError,
    BrowserUnavailable,
    ConfigurationError,
    ElementNotFound,
    ScenarioSkipped,
    UnexpectedApplicationState,
    VerificationTimeout,
)
from ui_probe.prober import CandidateProber, Found
from ui_probe.routes import RouteCache, RouteTable, route_cache
from ui_probe.selectors import Intent
from ui_probe.verifier import OutcomeVerifier

if TYPE_CHECKING:
    from playwright.async_api import Page

logger = logging.getLogger(__name__)

_FAILURES = (ElementNotFound, VerificationTimeout, UnexpectedApplicationState, BrowserActionError, AssertionError)


class Verdict(Enum):
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


class ScenarioState(Enum):
    NOT_STARTED = "not_started"
    ROUTES_DISCOVERED = "routes_discovered"
    ACTIONS_IN_FLIGHT = "actions_in_flight"
    VERIFIED = "verified"
    ABORTED = "aborted"


@dataclass
class ScenarioResult:
    name: str
    verdict: Verdict
    state: ScenarioState
    diagnostic: str = ""
    notes: List[str] = field(default_factory=list)

    def summary(self) -> str:
        text = f"{self.name}: {self.verdict.value}"
        if self.diagnostic:
            text += f" - {self.diagnostic}"
        if self.notes:
            text += "\n" + "\n".join(f"  note: {n}" for n in self.notes)
        return text


class Scenario:
    """Async context manager around one end-to-end check.

    Usage::

        async with Scenario("valid login", page) as sc:
            await sc.browser.goto(sc.routes.login)
            await sc.actions.fill_field(Intent.EMAIL_FIELD, email)
            ...
        assert sc.result.verdict is Verdict.PASSED

    Args:
        name: Human readable scenario name used in logs and results
        page: Page in the scenario's own browser context
        routes: Use this table instead of discovering routes
        cache: Shared route cache consulted by ``discover_routes()``
        discover: Discover routes on entry (ignored when ``routes`` is given)
    """

    def __init__(
        self,
        name: str,
        page: Page,
        routes: Optional[RouteTable] = None,
        cache: Optional[RouteCache] = None,
        discover: bool = True,
        probe_timeout: Optional[float] = None,
        verify_timeout: Optional[float] = None,
    ) -> None:
        self.name = name
        self.browser = Browser(page)
        self.prober = CandidateProber(page, probe_timeout if probe_timeout is not None else settings.probe_timeout)
        self.actions = ActionExecutor(self.browser, self.prober)
        self.verifier = OutcomeVerifier(
            page,
            default_timeout=verify_timeout if verify_timeout is not None else settings.verify_timeout,
        )
        self.cache = cache if cache is not None else route_cache
        self._discover = discover
        self._routes = routes
        self.state = ScenarioState.ROUTES_DISCOVERED if routes is not None else ScenarioState.NOT_STARTED
        self.notes: List[str] = []
        self.result: Optional[ScenarioResult] = None

    @property
    def page(self) -> Page:
        return self.browser.page

    @property
    def routes(self) -> RouteTable:
        if self._routes is None:
            raise RuntimeError(f"Scenario '{self.name}' has no routes yet; call discover_routes() first")
        return self._routes

    async def discover_routes(self) -> RouteTable:
        """Fetch the route table through the shared cache, once per scenario."""
        if self._routes is None:
            self._routes = await self.cache.get(self.browser, self.prober)
            self.state = ScenarioState.ROUTES_DISCOVERED
        return self._routes

    def skip(self, precondition: str) -> None:
        raise ScenarioSkipped(precondition=precondition)

    def note(self, message: str) -> None:
        """Record a best-effort observation that does not change the verdict."""
        logger.warning(f"[{self.name}] {message}")
        self.notes.append(message)

    async def precondition(self, intent: Intent, timeout: Optional[float] = None) -> Found:
        """Probe ``intent`` and skip the scenario when it cannot be found."""
        result = await self.prober.probe_intent(intent, timeout)
        if not result:
            self.skip(f"{intent} not available on {self.browser.path}")
        return result

    async def __aenter__(self) -> "Scenario":
        logger.info(f"Scenario '{self.name}' starting")
        if self._routes is None and self._discover:
            await self.discover_routes()
        self.state = ScenarioState.ACTIONS_IN_FLIGHT
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if exc is None:
            self._finish(Verdict.PASSED, ScenarioState.VERIFIED)
            return False
        if isinstance(exc, ScenarioSkipped):
            self._finish(Verdict.SKIPPED, ScenarioState.ABORTED, str(exc))
            return True
        if isinstance(exc, (ConfigurationError, BrowserUnavailable)):
            self._finish(Verdict.FAILED, ScenarioState.ABORTED, str(exc))
            return False
        if isinstance(exc, _FAILURES):
            self._finish(Verdict.FAILED, ScenarioState.VERIFIED, str(exc) or type(exc).__name__)
            return True
        self._finish(Verdict.FAILED, ScenarioState.ABORTED, f"{type(exc).__name__}: {exc}")
        return False

    def _finish(self, verdict: Verdict, state: ScenarioState, diagnostic: str = "") -> None:
        self.state = state
        self.result = ScenarioResult(
            name=self.name,
            verdict=verdict,
            state=state,
            diagnostic=diagnostic,
            notes=list(self.notes),
        )
        log = logger.info if verdict is not Verdict.FAILED else logger.error
        log(f"Scenario {self.result.summary()}")
