"""Outcome verifier: decide whether an action worked from redundant signals.

Applications report outcomes differently (a redirect, a toast, an ARIA
alert, a form that disappears), and usually only one of those happens. A
verification therefore succeeds as soon as *any* signal in the set is true,
and fails when the shared deadline passes without one.

All signals are re-checked on every tick of a bounded poll loop. A tick that
is still running when the deadline passes is cancelled and counts as false,
so a slow check can never stretch a verification past its timeout.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Awaitable, Callable, Optional, Sequence, Tuple
from urllib.parse import urlparse

import anyio

from ui_probe.errors import BrowserUnavailable, UnexpectedApplicationState, VerificationTimeout
from ui_probe.locators import ByText, Strategy, TextMatch
from ui_probe.prober import is_browser_gone
from ui_probe.selectors import Intent, candidates_for

if TYPE_CHECKING:
    from playwright.async_api import Page

    from ui_probe.routes import RouteTable

logger = logging.getLogger(__name__)

DEFAULT_VERIFY_TIMEOUT = 10.0
POLL_INTERVAL = 0.1


async def _visible_now(page: Page, strategy: Strategy) -> bool:
    return await strategy.resolve(page).is_visible()


class Signal:
    """One independently checkable condition."""

    async def check(self, page: Page) -> bool:
        raise NotImplementedError

    def describe(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.describe()


@dataclass(frozen=True)
class UrlMatches(Signal):
    """Current URL path matches a regex."""

    pattern: str
    label: str = ""

    async def check(self, page: Page) -> bool:
        return re.search(self.pattern, urlparse(page.url).path, re.IGNORECASE) is not None

    def describe(self) -> str:
        return self.label or f"url path matches /{self.pattern}/"


@dataclass(frozen=True)
class UrlExcludes(Signal):
    """Current URL path does not match a regex."""

    pattern: str
    label: str = ""

    async def check(self, page: Page) -> bool:
        return re.search(self.pattern, urlparse(page.url).path, re.IGNORECASE) is None

    def describe(self) -> str:
        return self.label or f"url path does not match /{self.pattern}/"


@dataclass(frozen=True)
class IntentVisible(Signal):
    """Any catalog candidate for ``intent`` is visible right now."""

    intent: Intent

    async def check(self, page: Page) -> bool:
        for strategy in candidates_for(self.intent):
            if await _visible_now(page, strategy):
                return True
        return False

    def describe(self) -> str:
        return f"{self.intent} visible"


@dataclass(frozen=True)
class LocatorVisible(Signal):
    """A single strategy resolves to a visible element."""

    strategy: Strategy

    async def check(self, page: Page) -> bool:
        return await _visible_now(page, self.strategy)

    def describe(self) -> str:
        return f"{self.strategy} visible"


def TextVisible(text: TextMatch) -> LocatorVisible:
    return LocatorVisible(ByText(text))


@dataclass(frozen=True)
class LocatorGone(Signal):
    """A single strategy no longer resolves to a visible element."""

    strategy: Strategy

    async def check(self, page: Page) -> bool:
        return not await _visible_now(page, self.strategy)

    def describe(self) -> str:
        return f"{self.strategy} gone"


def TextGone(text: TextMatch) -> LocatorGone:
    return LocatorGone(ByText(text))


@dataclass(frozen=True)
class ElementGone(Signal):
    """No candidate for ``intent`` is visible any more."""

    intent: Intent

    async def check(self, page: Page) -> bool:
        return not await IntentVisible(self.intent).check(page)

    def describe(self) -> str:
        return f"{self.intent} gone"


@dataclass(frozen=True)
class Condition(Signal):
    """Arbitrary async predicate over the page."""

    description: str
    predicate: Callable[[Page], Awaitable[bool]] = field(compare=False)

    async def check(self, page: Page) -> bool:
        return bool(await self.predicate(page))

    def describe(self) -> str:
        return self.description


@dataclass
class Verification:
    """Outcome of ``OutcomeVerifier.verify``; truthy when a signal matched."""

    matched: Optional[Signal]
    checked: Tuple[str, ...]
    elapsed: float

    def __bool__(self) -> bool:
        return self.matched is not None


class OutcomeVerifier:
    """Polls sets of signals against one page."""

    def __init__(self, page: Page, interval: float = POLL_INTERVAL, default_timeout: Optional[float] = None) -> None:
        self._page = page
        self.interval = interval
        self.default_timeout = default_timeout if default_timeout is not None else DEFAULT_VERIFY_TIMEOUT

    async def _check(self, signal: Signal) -> bool:
        try:
            return await signal.check(self._page)
        except BrowserUnavailable:
            raise
        except Exception as exc:
            if is_browser_gone(exc):
                raise BrowserUnavailable(message=str(exc)) from exc
            logger.debug(f"Signal '{signal}' could not be evaluated: {exc}")
            return False

    async def _first_true(self, signals: Sequence[Signal]) -> Optional[Signal]:
        for signal in signals:
            if await self._check(signal):
                return signal
        return None

    async def _tick(self, signals: Sequence[Signal], deadline: float) -> Optional[Signal]:
        """One pass over ``signals``, abandoned at ``deadline``."""
        matched = None
        with anyio.move_on_after(max(deadline - anyio.current_time(), 0)) as scope:
            matched = await self._first_true(signals)
        if scope.cancelled_caught:
            logger.debug("Signal checks still running at the deadline; tick counted as false")
        return matched

    async def verify(self, signals: Sequence[Signal], timeout: Optional[float] = None) -> Verification:
        """Wait until any signal is true or ``timeout`` seconds pass."""
        if not signals:
            raise ValueError("verify() needs at least one signal")
        timeout = timeout if timeout is not None else self.default_timeout
        checked = tuple(s.describe() for s in signals)
        start = anyio.current_time()
        deadline = start + timeout

        while True:
            matched = await self._tick(signals, deadline)
            now = anyio.current_time()
            if matched is not None:
                logger.debug(f"Verified '{matched}' after {now - start:.2f}s")
                return Verification(matched=matched, checked=checked, elapsed=now - start)
            if now >= deadline:
                logger.debug(f"None of {list(checked)} within {timeout:.1f}s")
                return Verification(matched=None, checked=checked, elapsed=now - start)
            await anyio.sleep(min(self.interval, deadline - now))

    async def verify_absence(self, signals: Sequence[Signal], timeout: Optional[float] = None) -> bool:
        """True when no signal turns true during the whole window.

        Best effort: a signal whose element never existed counts as absent.
        """
        if not signals:
            return True
        timeout = timeout if timeout is not None else self.default_timeout
        deadline = anyio.current_time() + timeout
        while True:
            present = await self._tick(signals, deadline)
            if present is not None:
                logger.debug(f"Expected absence but '{present}' is true")
                return False
            now = anyio.current_time()
            if now >= deadline:
                return True
            await anyio.sleep(min(self.interval, deadline - now))

    async def require(self, signals: Sequence[Signal], timeout: Optional[float] = None, context: str = "") -> Signal:
        """Like ``verify`` but raise ``VerificationTimeout`` on failure."""
        result = await self.verify(signals, timeout)
        if not result:
            raise VerificationTimeout(
                signals=result.checked,
                timeout=timeout if timeout is not None else self.default_timeout,
                context=context,
            )
        return result.matched

    async def expect_state(self, signal: Signal, expectation: str = "") -> None:
        """Check ``signal`` once and raise ``UnexpectedApplicationState`` if false."""
        if not await self._check(signal):
            raise UnexpectedApplicationState(
                expectation=expectation or signal.describe(),
                observed=f"url {self._page.url}",
            )


# ---- standard signal sets -------------------------------------------------------

def path_pattern(*paths: str) -> str:
    """Regex matching any of ``paths`` as a whole path segment sequence."""
    unique = []
    for path in paths:
        stripped = path.strip("/")
        if stripped and stripped not in unique:
            unique.append(stripped)
    alternatives = "|".join(re.escape(p) for p in unique)
    return rf"/({alternatives})(/|$)"


def login_pattern(routes: RouteTable) -> str:
    return path_pattern(routes.login, "login", "signin")


def signup_pattern(routes: RouteTable) -> str:
    return path_pattern(routes.signup, "signup", "register")


def authenticated_signals(routes: RouteTable, email: Optional[str] = None) -> Tuple[Signal, ...]:
    signals: Tuple[Signal, ...] = (
        UrlExcludes(login_pattern(routes), label="url no longer on login"),
        IntentVisible(Intent.LOGOUT),
        IntentVisible(Intent.DASHBOARD_TEXT),
        IntentVisible(Intent.AUTHENTICATED_INDICATOR),
    )
    if email:
        signals += (TextVisible(email),)
    return signals


def authenticated_ui_signals(email: Optional[str] = None) -> Tuple[Signal, ...]:
    """Authenticated indicators that do not depend on the URL."""
    signals: Tuple[Signal, ...] = (
        IntentVisible(Intent.LOGOUT),
        IntentVisible(Intent.DASHBOARD_TEXT),
        IntentVisible(Intent.AUTHENTICATED_INDICATOR),
    )
    if email:
        signals += (TextVisible(email),)
    return signals


def login_rejected_signals(routes: RouteTable) -> Tuple[Signal, ...]:
    return (
        IntentVisible(Intent.ALERT),
        UrlMatches(login_pattern(routes), label="still on login path"),
    )


def access_denied_signals(routes: RouteTable) -> Tuple[Signal, ...]:
    return (
        UrlMatches(path_pattern(routes.login, "login", "signin", "auth"), label="redirected to login"),
        IntentVisible(Intent.LOGIN_FORM),
        IntentVisible(Intent.ACCESS_DENIED),
    )


def signup_rejected_signals(routes: RouteTable) -> Tuple[Signal, ...]:
    return (
        IntentVisible(Intent.DUPLICATE_EMAIL_ERROR),
        UrlMatches(signup_pattern(routes), label="still on signup path"),
        IntentVisible(Intent.SIGNUP_FORM),
    )


def signup_accepted_signals(routes: RouteTable) -> Tuple[Signal, ...]:
    return (
        IntentVisible(Intent.SUCCESS_INDICATOR),
        TextVisible(re.compile(r"account.*created|registration.*successful|welcome|check.*email|verify.*email", re.IGNORECASE)),
        UrlExcludes(signup_pattern(routes), label="redirected away from signup"),
    )
