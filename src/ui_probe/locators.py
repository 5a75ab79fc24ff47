"""Locator strategies: one concrete way of finding the element behind an intent.

Each strategy is an immutable value that knows how to turn itself into a
Playwright ``Locator`` for a given page. Strategies never touch the DOM on
their own; evaluating the locator (visibility, clicking) is the prober's job.

Usage::

    strategy = ByRole("button", rx(r"log in|sign in"))
    locator = strategy.resolve(page)   # page.get_by_role(...).first
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, ClassVar, Optional, Pattern, Union

if TYPE_CHECKING:
    from playwright.async_api import Locator, Page

TextMatch = Union[str, Pattern[str]]

# a page, or a locator to search inside of
Root = Union["Page", "Locator"]


class StrategyKind(Enum):
    ROLE = "role"
    TEXT = "text"
    ATTRIBUTE = "attribute"
    STRUCTURE = "structure"


def rx(pattern: str) -> Pattern[str]:
    """Case-insensitive regex, the default for fuzzy name matching."""
    return re.compile(pattern, re.IGNORECASE)


def text_repr(value: TextMatch) -> str:
    if isinstance(value, re.Pattern):
        flags = "i" if value.flags & re.IGNORECASE else ""
        return f"/{value.pattern}/{flags}"
    return repr(value)


class Strategy:
    """Base class for locator strategies."""

    kind: ClassVar[StrategyKind]
    nth: Optional[int] = None

    def build(self, page: Root) -> Locator:
        raise NotImplementedError

    def resolve(self, page: Root) -> Locator:
        """Return a locator narrowed to a single element."""
        locator = self.build(page)
        if self.nth is not None:
            return locator.nth(self.nth)
        return locator.first

    def describe(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.describe()


@dataclass(frozen=True)
class ByRole(Strategy):
    """ARIA role with an optional accessible name."""

    kind: ClassVar[StrategyKind] = StrategyKind.ROLE

    role: str
    name: Optional[TextMatch] = None
    exact: bool = False
    nth: Optional[int] = None

    def build(self, page: Root) -> Locator:
        if self.name is None:
            return page.get_by_role(self.role)
        if isinstance(self.name, re.Pattern):
            return page.get_by_role(self.role, name=self.name)
        return page.get_by_role(self.role, name=self.name, exact=self.exact)

    def describe(self) -> str:
        if self.name is None:
            return f"role={self.role}"
        return f"role={self.role}[name={text_repr(self.name)}]"


@dataclass(frozen=True)
class ByText(Strategy):
    """Visible text content."""

    kind: ClassVar[StrategyKind] = StrategyKind.TEXT

    text: TextMatch
    exact: bool = False
    nth: Optional[int] = None

    def build(self, page: Root) -> Locator:
        if isinstance(self.text, re.Pattern):
            return page.get_by_text(self.text)
        return page.get_by_text(self.text, exact=self.exact)

    def describe(self) -> str:
        mode = "exact" if self.exact else "text"
        return f"{mode}={text_repr(self.text)}"


@dataclass(frozen=True)
class ByLabel(Strategy):
    """Form control associated with a label (``<label>`` or ``aria-label``)."""

    kind: ClassVar[StrategyKind] = StrategyKind.ATTRIBUTE

    text: TextMatch
    nth: Optional[int] = None

    def build(self, page: Root) -> Locator:
        return page.get_by_label(self.text)

    def describe(self) -> str:
        return f"label={text_repr(self.text)}"


@dataclass(frozen=True)
class ByPlaceholder(Strategy):
    """Input whose placeholder matches."""

    kind: ClassVar[StrategyKind] = StrategyKind.ATTRIBUTE

    text: TextMatch
    nth: Optional[int] = None

    def build(self, page: Root) -> Locator:
        return page.get_by_placeholder(self.text)

    def describe(self) -> str:
        return f"placeholder={text_repr(self.text)}"


@dataclass(frozen=True)
class ByAttribute(Strategy):
    """Attribute selector such as ``input[name="password"]`` or ``[data-testid*="logout"]``."""

    kind: ClassVar[StrategyKind] = StrategyKind.ATTRIBUTE

    css: str
    nth: Optional[int] = None

    def build(self, page: Root) -> Locator:
        return page.locator(self.css)

    def describe(self) -> str:
        index = f" nth={self.nth}" if self.nth is not None else ""
        return f"attr={self.css}{index}"


@dataclass(frozen=True)
class ByStructure(Strategy):
    """Structural CSS, optionally narrowed to elements containing some text.

    These are the most brittle candidates and belong at the end of a list.
    """

    kind: ClassVar[StrategyKind] = StrategyKind.STRUCTURE

    css: str
    has_text: Optional[TextMatch] = None
    nth: Optional[int] = None

    def build(self, page: Root) -> Locator:
        locator = page.locator(self.css)
        if self.has_text is not None:
            locator = locator.filter(has_text=self.has_text)
        return locator

    def describe(self) -> str:
        if self.has_text is None:
            suffix = ""
        else:
            suffix = f" has-text {text_repr(self.has_text)}"
        index = f" nth={self.nth}" if self.nth is not None else ""
        return f"css={self.css}{suffix}{index}"
