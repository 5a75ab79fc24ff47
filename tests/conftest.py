"""Shared fixtures: an in-memory stand-in for the async Playwright page.

``FakePage`` holds a flat list of ``FakeElement``s. Locators built through
``get_by_role``/``get_by_text``/``get_by_label``/``get_by_placeholder`` and
``locator(css)`` match elements by the same fields, so strategies from the
selector catalog resolve against it exactly as they would against a browser.
CSS matching is literal: an element answers to the selector strings listed in
its ``css`` field. A locator built from another locator only sees elements
whose ``within`` is the element that outer locator resolves to.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Pattern, Tuple, Union
from urllib.parse import urlparse

import anyio
import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeout

from ui_probe.config import settings

TextMatch = Union[str, Pattern[str]]

CLOSED_MESSAGE = "Target page, context or browser has been closed"


def pytest_configure(config):
    config.addinivalue_line("markers", "e2e: end-to-end scenario against a live application (needs UI_BASE_URL)")
    config.addinivalue_line("markers", "auth: authentication flows")
    config.addinivalue_line("markers", "crud: entity create/update/delete flows")
    config.addinivalue_line("markers", "smoke: quick checks suitable for every deploy")
    # live logs for runs against an application, unless --log-cli-level was given
    if settings.base_url_explicit and config.getoption("log_cli_level") is None:
        config.option.log_cli_level = settings.log_level


def pytest_collection_modifyitems(config, items):
    if settings.base_url_explicit:
        return
    skip_e2e = pytest.mark.skip(reason="UI_BASE_URL not set; end-to-end scenarios need a running application")
    for item in items:
        if "e2e" in item.keywords:
            item.add_marker(skip_e2e)


def _text_matches(expected: TextMatch, actual: Optional[str], exact: bool = False) -> bool:
    if actual is None:
        return False
    if isinstance(expected, re.Pattern):
        return expected.search(actual) is not None
    normalized = " ".join(actual.split())
    if exact:
        return normalized == expected
    return expected.lower() in normalized.lower()


@dataclass
class FakeElement:
    role: Optional[str] = None
    name: Optional[str] = None
    text: Optional[str] = None
    label: Optional[str] = None
    placeholder: Optional[str] = None
    css: Tuple[str, ...] = ()
    visible: bool = True
    enabled: bool = True
    value: str = ""
    raises: Optional[Exception] = None
    on_click: Optional[Callable[["FakePage"], Any]] = None
    on_press: Optional[Callable[["FakePage", str], Any]] = None
    # enclosing element, for locators built inside another locator
    within: Optional["FakeElement"] = None


@dataclass(frozen=True)
class _Query:
    kind: str
    value: Any = None
    name: Any = None
    exact: bool = False

    def matches(self, el: FakeElement) -> bool:
        if self.kind == "role":
            if el.role != self.value:
                return False
            return self.name is None or _text_matches(self.name, el.name or el.text, self.exact)
        if self.kind == "text":
            return _text_matches(self.value, el.text, self.exact)
        if self.kind == "label":
            return _text_matches(self.value, el.label, self.exact)
        if self.kind == "placeholder":
            return _text_matches(self.value, el.placeholder, self.exact)
        if self.kind == "css":
            return self.value in el.css
        raise AssertionError(f"unknown query kind {self.kind}")


class FakeLocator:
    def __init__(
        self,
        page: "FakePage",
        query: _Query,
        index: Optional[int] = None,
        has_text: Optional[TextMatch] = None,
        scope: Optional["FakeLocator"] = None,
    ):
        self._page = page
        self._query = query
        self._index = index
        self._has_text = has_text
        self._scope = scope

    # ---- composition -------------------------------------------------------------
    @property
    def first(self) -> "FakeLocator":
        return FakeLocator(self._page, self._query, 0, self._has_text, self._scope)

    def nth(self, index: int) -> "FakeLocator":
        return FakeLocator(self._page, self._query, index, self._has_text, self._scope)

    def filter(self, has_text: Optional[TextMatch] = None) -> "FakeLocator":
        return FakeLocator(self._page, self._query, self._index, has_text, self._scope)

    def _child(self, query: _Query) -> "FakeLocator":
        return FakeLocator(self._page, query, scope=self)

    def get_by_role(self, role: str, name: Optional[TextMatch] = None, exact: bool = False) -> "FakeLocator":
        return self._child(_Query("role", role, name, exact))

    def get_by_text(self, text: TextMatch, exact: bool = False) -> "FakeLocator":
        return self._child(_Query("text", text, exact=exact))

    def get_by_label(self, text: TextMatch, exact: bool = False) -> "FakeLocator":
        return self._child(_Query("label", text, exact=exact))

    def get_by_placeholder(self, text: TextMatch, exact: bool = False) -> "FakeLocator":
        return self._child(_Query("placeholder", text, exact=exact))

    def locator(self, selector: str) -> "FakeLocator":
        return self._child(_Query("css", selector))

    # ---- resolution --------------------------------------------------------------
    def _matches(self) -> List[FakeElement]:
        if self._page.closed:
            raise PlaywrightError(CLOSED_MESSAGE)
        pool = self._page.elements
        if self._scope is not None:
            container = self._scope._element()
            pool = [el for el in pool if container is not None and el.within is container]
        found = [el for el in pool if self._query.matches(el)]
        if self._has_text is not None:
            found = [el for el in found if _text_matches(self._has_text, el.text)]
        for el in found:
            if el.raises is not None:
                raise el.raises
        return found

    def _element(self) -> Optional[FakeElement]:
        found = self._matches()
        index = self._index or 0
        return found[index] if index < len(found) else None

    async def _require(self) -> FakeElement:
        el = self._element()
        if el is None or not el.visible:
            raise PlaywrightTimeout(f"Timeout exceeded waiting for {self._query}")
        return el

    # ---- Playwright surface --------------------------------------------------------
    async def count(self) -> int:
        found = self._matches()
        if self._index is None:
            return len(found)
        return 1 if self._index < len(found) else 0

    async def is_visible(self) -> bool:
        el = self._element()
        return el is not None and el.visible

    async def is_enabled(self) -> bool:
        return (await self._require()).enabled

    async def wait_for(self, state: str = "visible", timeout: Optional[float] = None) -> None:
        assert state == "visible"
        deadline = anyio.current_time() + (timeout or 0) / 1000
        while True:
            if await self.is_visible():
                return
            if anyio.current_time() >= deadline:
                raise PlaywrightTimeout(f"Timeout {timeout}ms exceeded waiting for {self._query}")
            await anyio.sleep(0.005)

    async def click(self) -> None:
        el = await self._require()
        self._page.log.append(("click", el.name or el.text or el.css))
        if el.on_click is not None:
            el.on_click(self._page)

    async def fill(self, value: str) -> None:
        el = await self._require()
        el.value = value
        self._page.log.append(("fill", value))

    async def clear(self) -> None:
        el = await self._require()
        el.value = ""
        self._page.log.append(("clear", el.name or el.label or el.css))

    async def press(self, key: str) -> None:
        el = await self._require()
        self._page.log.append(("press", key))
        if el.on_press is not None:
            el.on_press(self._page, key)

    async def text_content(self) -> Optional[str]:
        el = await self._require()
        return el.text

    async def scroll_into_view_if_needed(self) -> None:
        await self._require()


@dataclass
class FakeResponse:
    status: int = 200


class FakeContext:
    def __init__(self, page: "FakePage"):
        self._page = page
        self.cookies_cleared = 0

    async def clear_cookies(self) -> None:
        self.cookies_cleared += 1


class FakePage:
    """Minimal async Page: elements, a URL and navigation hooks."""

    def __init__(self, origin: str = "http://app.test"):
        self.origin = origin
        self.url = f"{origin}/"
        self.elements: List[FakeElement] = []
        self.log: List[Tuple[str, Any]] = []
        self.navigations: List[str] = []
        self.routes: Dict[str, Callable[["FakePage"], Any]] = {}
        self.navigation_error: Optional[Exception] = None
        self.closed = False
        self.context = FakeContext(self)

    # ---- test helpers --------------------------------------------------------------
    def add(self, **kwargs: Any) -> FakeElement:
        el = FakeElement(**kwargs)
        self.elements.append(el)
        return el

    def set_path(self, path: str) -> None:
        self.url = f"{self.origin}{path}"

    @property
    def path(self) -> str:
        return urlparse(self.url).path

    def on(self, path: str, handler: Callable[["FakePage"], Any]) -> None:
        """Run ``handler`` whenever ``path`` is navigated to."""
        self.routes[path] = handler

    # ---- Playwright surface --------------------------------------------------------
    def get_by_role(self, role: str, name: Optional[TextMatch] = None, exact: bool = False) -> FakeLocator:
        return FakeLocator(self, _Query("role", role, name, exact))

    def get_by_text(self, text: TextMatch, exact: bool = False) -> FakeLocator:
        return FakeLocator(self, _Query("text", text, exact=exact))

    def get_by_label(self, text: TextMatch, exact: bool = False) -> FakeLocator:
        return FakeLocator(self, _Query("label", text, exact=exact))

    def get_by_placeholder(self, text: TextMatch, exact: bool = False) -> FakeLocator:
        return FakeLocator(self, _Query("placeholder", text, exact=exact))

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, _Query("css", selector))

    async def goto(self, url: str, wait_until: str = "load", timeout: Optional[float] = None) -> FakeResponse:
        if self.closed:
            raise PlaywrightError(CLOSED_MESSAGE)
        if self.navigation_error is not None:
            raise self.navigation_error
        self.url = url
        path = urlparse(url).path or "/"
        self.navigations.append(path)
        handler = self.routes.get(path)
        if handler is not None:
            handler(self)
        return FakeResponse()

    async def wait_for_load_state(self, state: str = "load", timeout: Optional[float] = None) -> None:
        if self.closed:
            raise PlaywrightError(CLOSED_MESSAGE)

    async def evaluate(self, script: str) -> None:
        self.log.append(("evaluate", script))

    async def screenshot(self, path: str, **kwargs: Any) -> bytes:
        with open(path, "wb") as fh:
            fh.write(b"\x89PNG")
        return b""


@pytest.fixture
def page() -> FakePage:
    return FakePage()
