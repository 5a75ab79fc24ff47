"""Action executor: fill, click and submit through the selector catalog.

Retrying happens across candidates only. Once a candidate matched, the action
on it is performed exactly once and any error propagates to the scenario.
"""
from __future__ import annotations

import logging
from typing import Optional

import anyio

from ui_probe.browser import Browser
from ui_probe.errors import ElementNotFound
from ui_probe.locators import Root
from ui_probe.prober import CandidateProber, Found
from ui_probe.selectors import Intent, candidates_for

logger = logging.getLogger(__name__)

MENU_OPEN_DELAY = 0.5


class ActionExecutor:
    """Performs one unit of interaction per call against a probed element."""

    def __init__(self, browser: Browser, prober: CandidateProber, probe_timeout: Optional[float] = None) -> None:
        self.browser = browser
        self.prober = prober
        self.probe_timeout = probe_timeout

    async def locate(self, intent: Intent, timeout: Optional[float] = None) -> Found:
        """Probe ``intent`` and return the match, raising ``ElementNotFound``."""
        result = await self.prober.probe(
            candidates_for(intent),
            timeout if timeout is not None else self.probe_timeout,
            label=str(intent),
        )
        if not result:
            raise ElementNotFound(intent=str(intent), tried=result.tried)
        return result

    async def fill_field(self, intent: Intent, value: str, timeout: Optional[float] = None) -> Found:
        """Clear the field behind ``intent`` and type ``value`` into it."""
        found = await self.locate(intent, timeout)
        await found.locator.clear()
        await found.locator.fill(value)
        logger.debug(f"Filled {intent} via {found.strategy}")
        return found

    async def invoke(self, intent: Intent, timeout: Optional[float] = None) -> Found:
        """Click the control behind ``intent`` and wait for the app to settle."""
        found = await self.locate(intent, timeout)
        await found.locator.click()
        await self.browser.wait_for_settle()
        logger.debug(f"Invoked {intent} via {found.strategy}")
        return found

    async def invoke_with_fallback_submit(self, field_intent: Intent, timeout: Optional[float] = None) -> Optional[Found]:
        """Submit the current form, pressing Enter in ``field_intent`` if no submit control exists.

        Returns the submit match, or None when the Enter fallback was used.
        """
        try:
            return await self.invoke(Intent.SUBMIT, timeout)
        except ElementNotFound as exc:
            logger.info(f"No submit control found ({exc}); pressing Enter in {field_intent}")
        field = await self.locate(field_intent, timeout)
        await field.locator.press("Enter")
        await self.browser.wait_for_settle()
        return None

    async def open_menu(
        self,
        trigger: Intent,
        item: Intent,
        timeout: Optional[float] = None,
        root: Optional[Root] = None,
    ) -> Found:
        """Open a menu via ``trigger`` and invoke ``item`` inside it.

        ``root`` limits the trigger search to one container, such as a table row.
        The menu itself is searched page-wide since menus usually render in a portal.
        """
        opened = await self.prober.first_attached(candidates_for(trigger), label=str(trigger), root=root)
        if not opened:
            raise ElementNotFound(intent=str(trigger), tried=opened.tried)
        await opened.locator.click()
        await anyio.sleep(MENU_OPEN_DELAY)
        return await self.invoke(item, timeout)

    async def try_fill(self, intent: Intent, value: str, timeout: Optional[float] = None) -> bool:
        """Fill an optional field. Returns False when the field does not exist."""
        try:
            await self.fill_field(intent, value, timeout)
        except ElementNotFound:
            logger.info(f"Optional {intent} not present, leaving it empty")
            return False
        return True

    async def try_invoke(self, intent: Intent, timeout: Optional[float] = None) -> bool:
        """Invoke an optional control. Returns False when it does not exist."""
        try:
            await self.invoke(intent, timeout)
        except ElementNotFound:
            return False
        return True

    async def is_enabled(self, intent: Intent, timeout: Optional[float] = None) -> bool:
        found = await self.locate(intent, timeout)
        return await found.locator.is_enabled()
