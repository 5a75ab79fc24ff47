"""Candidate prober: try locator strategies in order until one resolves.

Each candidate gets its own bounded visibility wait. A candidate that times
out, or whose evaluation raises (malformed selector, detached element), simply
did not match and the next one is tried. Only a closed page/context/browser is
treated as a real failure, because no later candidate could succeed either.

Usage::

    prober = CandidateProber(page)
    result = await prober.probe_intent(Intent.SUBMIT)
    if result:
        await result.locator.click()
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Sequence, Tuple, Union

from playwright.async_api import TimeoutError as PlaywrightTimeout

from ui_probe.errors import BrowserUnavailable
from ui_probe.locators import Root, Strategy
from ui_probe.selectors import Intent, candidates_for

if TYPE_CHECKING:
    from playwright.async_api import Locator, Page

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT = 1.0

_CLOSED_MARKERS = ("has been closed", "target closed", "browser has disconnected")


@dataclass(frozen=True)
class Found:
    """A candidate resolved to a visible element."""

    index: int
    strategy: Strategy
    locator: Locator

    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True)
class NotFound:
    """A single candidate did not resolve."""

    reason: str

    def __bool__(self) -> bool:
        return False


@dataclass(frozen=True)
class Exhausted:
    """Every candidate in the list was tried without a match."""

    tried: Tuple[str, ...]

    def __bool__(self) -> bool:
        return False


Resolution = Union[Found, NotFound]
ProbeResult = Union[Found, Exhausted]


def is_browser_gone(exc: BaseException) -> bool:
    message = str(exc).lower()
    return any(marker in message for marker in _CLOSED_MARKERS)


async def evaluate(page: Page, strategy: Strategy, index: int, timeout: float) -> Resolution:
    """Evaluate one candidate with a visibility wait of ``timeout`` seconds."""
    try:
        locator = strategy.resolve(page)
        await locator.wait_for(state="visible", timeout=timeout * 1000)
    except PlaywrightTimeout:
        return NotFound(f"not visible within {timeout:.1f}s")
    except Exception as exc:
        if is_browser_gone(exc):
            raise BrowserUnavailable(message=str(exc)) from exc
        first_line = str(exc).strip().splitlines()[0] if str(exc).strip() else type(exc).__name__
        return NotFound(first_line)
    return Found(index=index, strategy=strategy, locator=locator)


class CandidateProber:
    """Evaluates ordered candidate lists against one page."""

    def __init__(self, page: Page, default_timeout: Optional[float] = None) -> None:
        self._page = page
        self.default_timeout = default_timeout if default_timeout is not None else DEFAULT_PROBE_TIMEOUT

    @property
    def page(self) -> Page:
        return self._page

    async def probe(
        self,
        candidates: Sequence[Strategy],
        per_candidate_timeout: Optional[float] = None,
        label: str = "",
    ) -> ProbeResult:
        """Return the first visible candidate, or ``Exhausted``.

        Args:
            candidates: Strategies in priority order
            per_candidate_timeout: Visibility budget per candidate in seconds
            label: Name used in log lines (usually the intent)
        """
        timeout = per_candidate_timeout if per_candidate_timeout is not None else self.default_timeout
        tried = []
        for index, strategy in enumerate(candidates):
            resolution = await evaluate(self._page, strategy, index, timeout)
            if isinstance(resolution, Found):
                logger.debug(f"{label or 'probe'}: candidate {index} ({strategy}) matched")
                return resolution
            logger.debug(f"{label or 'probe'}: candidate {index} ({strategy}) did not match: {resolution.reason}")
            tried.append(strategy.describe())
        return Exhausted(tried=tuple(tried))

    async def probe_intent(self, intent: Intent, timeout: Optional[float] = None) -> ProbeResult:
        return await self.probe(candidates_for(intent), timeout, label=str(intent))

    async def first_attached(
        self,
        candidates: Sequence[Strategy],
        label: str = "",
        root: Optional[Root] = None,
    ) -> ProbeResult:
        """Return the first candidate whose element is in the DOM.

        Does not wait for visibility. Row action buttons are often only shown
        on hover, so presence is the useful check for them. With ``root`` the
        candidates are resolved inside that locator instead of the whole page.
        """
        scope = root if root is not None else self._page
        tried = []
        for index, strategy in enumerate(candidates):
            try:
                locator = strategy.resolve(scope)
                count = await locator.count()
            except Exception as exc:
                if is_browser_gone(exc):
                    raise BrowserUnavailable(message=str(exc)) from exc
                count = 0
            if count > 0:
                logger.debug(f"{label or 'probe'}: candidate {index} ({strategy}) is attached")
                return Found(index=index, strategy=strategy, locator=locator)
            tried.append(strategy.describe())
        return Exhausted(tried=tuple(tried))
