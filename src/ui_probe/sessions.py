"""Browser launch and isolated sessions.

``PlaywrightClient`` owns the Playwright driver and one browser process.
``SessionManager`` hands out isolated ``BrowserContext``s on top of it, one
per scenario or actor, so cookies and storage never leak between them.

Usage::

    async with PlaywrightClient() as client:
        async with SessionManager(client.browser) as manager:
            admin = await manager.admin_session()
            guest = await manager.anonymous_session()
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, TypedDict

import httpx
from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from ui_probe.config import settings
from ui_probe.errors import TargetUnreachable
from ui_probe.routes import RouteCache

logger = logging.getLogger(__name__)


class ViewportSize(TypedDict):
    width: int
    height: int


class PlaywrightClient:
    """In-process Playwright browser.

    Example:
        async with PlaywrightClient() as client:
            page = await client.new_page()
            await page.goto("https://example.com")
    """

    def __init__(
        self,
        browser_type: Optional[str] = None,
        headless: Optional[bool] = None,
        timeout: Optional[int] = None,
    ) -> None:
        """
        Args:
            browser_type: chromium, firefox or webkit (default from PLAYWRIGHT_BROWSER)
            headless: Run headless (default from PLAYWRIGHT_HEADLESS)
            timeout: Default Playwright timeout in milliseconds (default from UI_ACTION_TIMEOUT)
        """
        self.browser_type = browser_type or settings.browser_type
        self.headless = headless if headless is not None else settings.playwright_headless
        self.timeout = timeout if timeout is not None else settings.action_timeout_ms

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    async def __aenter__(self) -> "PlaywrightClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def connect(self) -> None:
        """Launch the browser and open a default context and page."""
        self._playwright = await async_playwright().start()
        if self.browser_type == "firefox":
            launcher = self._playwright.firefox
        elif self.browser_type == "webkit":
            launcher = self._playwright.webkit
        else:
            launcher = self._playwright.chromium
        self._browser = await launcher.launch(headless=self.headless)
        logger.debug(f"Launched {self.browser_type} (headless={self.headless})")

        self._context = await self.new_context()
        self._page = await self._context.new_page()

    async def new_page(self) -> Page:
        if not self._context:
            raise RuntimeError("Client not connected. Use 'async with' or call connect()")
        return await self._context.new_page()

    async def new_context(self, **kwargs: Any) -> BrowserContext:
        """Create a context with the client's default timeout applied."""
        if not self._browser:
            raise RuntimeError("Client not connected. Use 'async with' or call connect()")
        context = await self._browser.new_context(**kwargs)
        context.set_default_timeout(self.timeout)
        return context

    async def close(self) -> None:
        """Close page, context, browser and driver, in that order."""
        if self._page:
            await self._page.close()
            self._page = None
        if self._context:
            await self._context.close()
            self._context = None
        if self._browser:
            await self._browser.close()
            self._browser = None
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

    @property
    def browser(self) -> Browser:
        if not self._browser:
            raise RuntimeError("Client not connected")
        return self._browser

    @property
    def context(self) -> BrowserContext:
        if not self._context:
            raise RuntimeError("Client not connected")
        return self._context

    @property
    def page(self) -> Page:
        if not self._page:
            raise RuntimeError("Client not connected or page not created")
        return self._page


@dataclass
class SessionHandle:
    """Handle to one isolated browser session."""

    session_id: str
    context: BrowserContext
    page: Page
    role: str  # 'admin', 'user', 'anonymous'
    email: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        return f"SessionHandle(id={self.session_id}, role={self.role}, email={self.email})"


class SessionManager:
    """Creates and tracks isolated browser contexts.

    Each session gets its own ``BrowserContext``: separate cookies, storage and
    authentication state. Sessions are closed together on exit.
    """

    DEFAULT_VIEWPORT: ViewportSize = {"width": 1280, "height": 720}
    DEFAULT_LOCALE = "en-US"

    def __init__(
        self,
        browser: Browser,
        base_url: Optional[str] = None,
        viewport: Optional[ViewportSize] = None,
        locale: str = DEFAULT_LOCALE,
        timeout: Optional[int] = None,
        routes_cache: Optional[RouteCache] = None,
    ) -> None:
        self.browser = browser
        self.base_url = base_url or settings.base_url
        self.viewport: ViewportSize = viewport or self.DEFAULT_VIEWPORT
        self.locale = locale
        self.timeout = timeout if timeout is not None else settings.action_timeout_ms
        self.routes_cache = routes_cache
        self.sessions: Dict[str, SessionHandle] = {}
        self._counter = 0

    async def __aenter__(self) -> "SessionManager":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close_all()

    async def create_session(
        self,
        role: str,
        session_id: Optional[str] = None,
        viewport: Optional[ViewportSize] = None,
    ) -> SessionHandle:
        """Create a new isolated session.

        Args:
            role: Session role ('admin', 'user', 'anonymous')
            session_id: Custom session ID (auto-generated if not provided)
            viewport: Custom viewport size (uses default if not provided)
        """
        if session_id is None:
            self._counter += 1
            session_id = f"{role}_{self._counter}"
        if session_id in self.sessions:
            raise ValueError(f"Session {session_id} already exists")

        context = await self.browser.new_context(
            viewport=viewport if viewport is not None else self.viewport,
            locale=self.locale,
            base_url=self.base_url,
        )
        context.set_default_timeout(self.timeout)
        page = await context.new_page()

        handle = SessionHandle(session_id=session_id, context=context, page=page, role=role)
        self.sessions[session_id] = handle
        logger.debug(f"Created session: {handle}")
        return handle

    def get_session(self, session_id: str) -> Optional[SessionHandle]:
        return self.sessions.get(session_id)

    async def close_session(self, session_id: str) -> None:
        handle = self.sessions.pop(session_id, None)
        if handle is None:
            return
        try:
            await handle.context.close()
            logger.debug(f"Closed session: {handle}")
        except Exception as e:
            logger.warning(f"Error closing session {session_id}: {e}")

    async def close_all(self) -> None:
        for session_id in list(self.sessions.keys()):
            await self.close_session(session_id)

    async def anonymous_session(self) -> SessionHandle:
        """Create a fresh unauthenticated session."""
        return await self.create_session("anonymous")

    async def admin_session(self, credentials: Optional[Tuple[str, str]] = None) -> SessionHandle:
        """Get or create the logged-in admin session.

        Raises ``ConfigurationError`` before opening a context when the admin
        credentials are not configured.
        """
        if "admin" in self.sessions:
            return self.sessions["admin"]
        email, password = credentials or settings.require_admin()
        handle = await self.create_session("admin", "admin")
        handle.email = email
        await self._login(handle, email, password)
        return handle

    async def user_session(self, email: str, password: str) -> SessionHandle:
        """Create a session logged in as an arbitrary user."""
        handle = await self.create_session("user")
        handle.email = email
        await self._login(handle, email, password)
        return handle

    async def _login(self, handle: SessionHandle, email: str, password: str) -> None:
        from ui_probe.scenario import Scenario
        from ui_probe.workflows import login

        sc = Scenario(f"{handle.session_id} login", handle.page, cache=self.routes_cache)
        await sc.discover_routes()
        handle.metadata["routes"] = sc.routes
        await login(sc, email, password)
        logger.debug(f"Session {handle.session_id} logged in as {email}")

    @property
    def session_count(self) -> int:
        return len(self.sessions)

    def list_sessions(self) -> List[str]:
        return list(self.sessions.keys())


async def check_target(base_url: Optional[str] = None, timeout: float = 10.0) -> int:
    """Fail fast when the application under test is not listening.

    Any HTTP status counts as reachable; only connection-level failures raise
    ``TargetUnreachable``.
    """
    url = base_url or settings.base_url
    try:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
            response = await client.get(url)
    except httpx.HTTPError as exc:
        raise TargetUnreachable(url=url, message=str(exc) or type(exc).__name__) from exc
    logger.debug(f"Preflight {url} -> {response.status_code}")
    return response.status_code
