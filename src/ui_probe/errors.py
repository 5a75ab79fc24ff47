"""Error taxonomy for probing, acting and verifying against a live UI.

Only exhaustion of a whole candidate list, a verification timeout or an
explicit state assertion become scenario-level failures. Individual candidate
misses never surface as exceptions (see ``ui_probe.prober``).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence


class ProbeError(Exception):
    """Base class for every error raised by ui_probe."""


@dataclass(eq=False)
class ConfigurationError(ProbeError):
    """Required external configuration is missing. Fatal for the whole run."""

    missing: List[str]
    hint: str = "Copy .env.sample to .env and fill in the credentials."

    def __str__(self) -> str:
        names = ", ".join(self.missing)
        return f"Missing required configuration: {names}. {self.hint}"


@dataclass(eq=False)
class BrowserActionError(ProbeError):
    """Raised when a browser operation fails."""

    name: str
    payload: Dict[str, Any]
    message: str

    def __str__(self) -> str:  # pragma: no cover - human readable helper
        return f"{self.name} failed ({self.message}) with payload={self.payload}"


@dataclass(eq=False)
class BrowserUnavailable(ProbeError):
    """The page, context or browser went away while probing."""

    message: str

    def __str__(self) -> str:
        return f"Browser is no longer available: {self.message}"


@dataclass(eq=False)
class ElementNotFound(ProbeError):
    """Every candidate for an intent was tried and none matched."""

    intent: str
    tried: Sequence[str] = field(default_factory=list)

    def __str__(self) -> str:
        tried = "; ".join(self.tried) or "no candidates"
        return f"No element found for intent '{self.intent}' (tried: {tried})"


@dataclass(eq=False)
class VerificationTimeout(ProbeError):
    """No verification signal became true inside the time budget."""

    signals: Sequence[str]
    timeout: float
    context: str = ""

    def __str__(self) -> str:
        checked = "; ".join(self.signals)
        prefix = f"{self.context}: " if self.context else ""
        return f"{prefix}none of [{checked}] became true within {self.timeout:.1f}s"


@dataclass(eq=False)
class UnexpectedApplicationState(ProbeError):
    """An explicit assertion about the current application state failed."""

    expectation: str
    observed: str = ""

    def __str__(self) -> str:
        if self.observed:
            return f"Expected {self.expectation}, observed {self.observed}"
        return f"Expected {self.expectation}"


@dataclass(eq=False)
class ScenarioSkipped(ProbeError):
    """A precondition for exercising the behaviour could not be established."""

    precondition: str

    def __str__(self) -> str:
        return f"Precondition not met: {self.precondition}"


@dataclass(eq=False)
class TargetUnreachable(ProbeError):
    """The application under test did not answer the preflight request."""

    url: str
    message: str

    def __str__(self) -> str:
        return f"Application at {self.url} is not reachable: {self.message}"
