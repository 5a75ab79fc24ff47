"""Shared configuration for probing a target web application.

Configuration comes from environment variables, with a ``.env`` file as
fallback (see ``ui_probe.env_defaults``):

- ``UI_BASE_URL``: origin of the application under test
- ``ADMIN_EMAIL`` / ``ADMIN_PASSWORD``: required for authenticated scenarios
- ``PLAYWRIGHT_HEADLESS`` / ``PLAYWRIGHT_BROWSER``: browser launch options
- ``UI_PROBE_TIMEOUT``: per-candidate probe budget in seconds
- ``UI_VERIFY_TIMEOUT``: verification window in seconds
- ``UI_ACTION_TIMEOUT``: Playwright default timeout in milliseconds
- ``UI_ENTITY_PATH``: list page of the CRUD entity resource
- ``UI_ALLOW_WRITES``: set to 0 to skip scenarios that create or delete records

Credentials are only checked when a scenario needs them: call
``settings.require_admin()`` before the first browser interaction so a missing
value aborts the run instead of failing halfway through a login form.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from copy import deepcopy
from dataclasses import dataclass
from typing import Iterator, Tuple
from urllib.parse import urljoin

from ui_probe import env_defaults
from ui_probe.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:5173"


def _flag(value: str | None, default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() not in {"0", "false", "no", "off"}


@dataclass
class UiTargetProfile:
    """Concrete origin + credentials for one application under test."""

    name: str
    base_url: str
    admin_email: str | None
    admin_password: str | None
    allow_writes: bool = True
    entity_path: str = "/items"


class UiTestConfig:
    """Configuration read from the environment (and ``.env``) at construction.

    Construction never fails; missing credentials are reported by
    ``require_admin()`` so that catalog or unit tests can import the package
    without a target application.
    """

    def __init__(self) -> None:
        self.reload()

    def reload(self) -> None:
        """Re-read every value from the environment."""
        env_defaults.clear_cache()
        getenv = env_defaults.getenv

        self.base_url_explicit: bool = bool(getenv("UI_BASE_URL"))
        self.playwright_headless: bool = _flag(getenv("PLAYWRIGHT_HEADLESS"), True)
        self.browser_type: str = (getenv("PLAYWRIGHT_BROWSER") or "chromium").lower()
        self.probe_timeout: float = float(getenv("UI_PROBE_TIMEOUT", "1.0"))
        self.verify_timeout: float = float(getenv("UI_VERIFY_TIMEOUT", "10.0"))
        self.action_timeout_ms: int = int(getenv("UI_ACTION_TIMEOUT", "30000"))
        self.screenshot_dir: str | None = getenv("SCREENSHOT_DIR")
        self.log_level: str = (getenv("UI_LOG_LEVEL") or "INFO").upper()

        primary = UiTargetProfile(
            name="primary",
            base_url=getenv("UI_BASE_URL", DEFAULT_BASE_URL),
            admin_email=getenv("ADMIN_EMAIL"),
            admin_password=getenv("ADMIN_PASSWORD"),
            allow_writes=_flag(getenv("UI_ALLOW_WRITES"), True),
            entity_path=getenv("UI_ENTITY_PATH", "/items"),
        )
        self._active: UiTargetProfile = primary
        logger.debug(f"Loaded configuration for {primary.base_url} (headless={self.playwright_headless})")

    # ---- active profile helpers -------------------------------------------------
    @property
    def base_url(self) -> str:
        return self._active.base_url

    @property
    def admin_email(self) -> str | None:
        return self._active.admin_email

    @property
    def admin_password(self) -> str | None:
        return self._active.admin_password

    @property
    def allow_writes(self) -> bool:
        return self._active.allow_writes

    @property
    def entity_path(self) -> str:
        return self._active.entity_path

    @property
    def profile(self) -> UiTargetProfile:
        return self._active

    def require_admin(self) -> Tuple[str, str]:
        """Return ``(email, password)`` or raise ``ConfigurationError``."""
        missing = []
        if not self.admin_email:
            missing.append("ADMIN_EMAIL")
        if not self.admin_password:
            missing.append("ADMIN_PASSWORD")
        if missing:
            raise ConfigurationError(missing=missing)
        return self.admin_email, self.admin_password

    @contextmanager
    def use_profile(self, profile: UiTargetProfile) -> Iterator[UiTargetProfile]:
        """Temporarily switch the active profile.

        A copy is activated so mutations made by a test never leak back into
        the caller's profile object.
        """
        previous = self._active
        self._active = deepcopy(profile)
        try:
            yield self._active
        finally:
            self._active = previous

    # ---- utility helpers --------------------------------------------------------
    def url(self, path: str) -> str:
        """Return an absolute URL for the provided path."""
        if path.startswith(("http://", "https://")):
            return path
        return urljoin(self.base_url.rstrip("/") + "/", path.lstrip("/"))


# Singleton instance - reads the environment on first import
settings = UiTestConfig()
