"""Thin wrapper around a Playwright page for navigation and settling."""
from __future__ import annotations

import logging
import os
from typing import Any, Dict
from urllib.parse import urlparse

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, TimeoutError as PlaywrightTimeout

from ui_probe.config import settings
from ui_probe.errors import BrowserActionError

logger = logging.getLogger(__name__)

# Bound on waiting for network quiescence after an interaction. Apps that
# keep a websocket or long-poll open never go idle, so this must stay short.
SETTLE_TIMEOUT_MS = 5000


class Browser:
    """Convenience wrapper over one Playwright page."""

    def __init__(self, page: Page) -> None:
        self._page = page

    @property
    def page(self) -> Page:
        return self._page

    @property
    def url(self) -> str:
        return self._page.url

    @property
    def path(self) -> str:
        """Path component of the current URL (``/`` for an empty path)."""
        return urlparse(self._page.url).path or "/"

    async def reset(self) -> None:
        """Navigate to about:blank."""
        await self._page.goto("about:blank")

    async def goto(self, path: str, wait_until: str = "networkidle", timeout: int = 30000) -> Dict[str, Any]:
        """Navigate to ``path`` (relative to the configured origin) or an absolute URL.

        Args:
            path: Path like ``/login`` or a full URL
            wait_until: Wait strategy - "networkidle", "domcontentloaded", or "load"
            timeout: Timeout in milliseconds

        Note: "networkidle" times out on pages with long-polling/WebSocket
              connections; in that case the navigation is retried with
              "domcontentloaded".
        """
        url = settings.url(path)
        try:
            response = await self._page.goto(url, wait_until=wait_until, timeout=timeout)
        except PlaywrightTimeout as exc:
            if wait_until != "networkidle":
                raise BrowserActionError(name="goto", payload={"url": url, "wait_until": wait_until}, message=str(exc))
            logger.debug(f"networkidle timed out for {url}, retrying with domcontentloaded")
            try:
                response = await self._page.goto(url, wait_until="domcontentloaded", timeout=timeout)
            except PlaywrightError as retry_exc:
                raise BrowserActionError(name="goto", payload={"url": url, "wait_until": "domcontentloaded"}, message=str(retry_exc))
        except PlaywrightError as exc:
            raise BrowserActionError(name="goto", payload={"url": url, "wait_until": wait_until}, message=str(exc))
        return {"url": self._page.url, "status": response.status if response else None}

    async def wait_for_settle(self, timeout: int = SETTLE_TIMEOUT_MS) -> bool:
        """Wait until the network is idle. Returns False when it never quiesced."""
        try:
            await self._page.wait_for_load_state("networkidle", timeout=timeout)
            return True
        except PlaywrightTimeout:
            logger.debug(f"Network did not go idle within {timeout}ms on {self.path}")
            await self._page.wait_for_load_state("domcontentloaded")
            return False

    async def clear_session(self) -> None:
        """Drop cookies and web storage for the current context."""
        await self._page.context.clear_cookies()
        try:
            await self._page.evaluate("() => { localStorage.clear(); sessionStorage.clear(); }")
        except PlaywrightError as exc:
            # about:blank and some error pages deny storage access
            logger.debug(f"Could not clear web storage on {self.url}: {exc}")

    async def screenshot(self, name: str) -> str:
        """Save a full-page PNG under ``SCREENSHOT_DIR`` (default ``screenshots``)."""
        screenshot_dir = settings.screenshot_dir or "screenshots"
        os.makedirs(screenshot_dir, exist_ok=True)
        path = os.path.join(screenshot_dir, f"{name}.png")
        try:
            await self._page.screenshot(path=path, type="png", full_page=True)
        except PlaywrightError as exc:
            raise BrowserActionError(name="screenshot", payload={"name": name}, message=str(exc))
        logger.info(f"Saved screenshot {path}")
        return path
