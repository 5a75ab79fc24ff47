"""Fixtures for scenarios that drive a live application.

Every scenario opens its own browser context through ``SessionManager``. The
route table is discovered once per origin and shared through ``route_cache``.

``run_scenario`` wraps ``Scenario`` and turns its verdict into a pytest
outcome: skipped scenarios are reported as skips, failed ones as failures
carrying the scenario diagnostic.
"""
from contextlib import asynccontextmanager

import httpx
import pytest
import pytest_asyncio

from ui_probe.config import settings
from ui_probe.data import UserData, create_sample_user
from ui_probe.errors import ConfigurationError
from ui_probe.routes import route_cache
from ui_probe.scenario import Scenario, ScenarioResult, Verdict
from ui_probe.sessions import PlaywrightClient, SessionManager
from ui_probe.verifier import signup_accepted_signals
from ui_probe.workflows import signup


def report(result: ScenarioResult) -> None:
    if result.verdict is Verdict.SKIPPED:
        pytest.skip(result.summary())
    if result.verdict is Verdict.FAILED:
        pytest.fail(result.summary(), pytrace=False)


@pytest.fixture(scope="session")
def admin_credentials():
    """Admin credentials plus a reachability check, once per run.

    A missing credential or a target that does not answer stops the whole run
    before any browser is launched.
    """
    try:
        credentials = settings.require_admin()
    except ConfigurationError as exc:
        pytest.exit(str(exc), returncode=2)
    try:
        with httpx.Client(timeout=10.0, follow_redirects=True) as client:
            client.get(settings.base_url)
    except httpx.HTTPError as exc:
        pytest.exit(f"Application at {settings.base_url} is not reachable: {exc}", returncode=2)
    return credentials


@pytest.fixture
def require_writes():
    if not settings.allow_writes:
        pytest.skip("UI_ALLOW_WRITES=0; scenario creates or deletes records")


@pytest_asyncio.fixture()
async def playwright_client(admin_credentials):
    async with PlaywrightClient() as client:
        yield client


@pytest_asyncio.fixture()
async def session_manager(playwright_client):
    """Isolated browser contexts, all closed after the test."""
    async with SessionManager(playwright_client.browser, routes_cache=route_cache) as manager:
        yield manager


@pytest_asyncio.fixture()
async def anonymous_page(session_manager):
    handle = await session_manager.anonymous_session()
    return handle.page


@pytest_asyncio.fixture()
async def admin_page(session_manager, admin_credentials):
    handle = await session_manager.admin_session(admin_credentials)
    return handle.page


@pytest.fixture
def run_scenario():
    """Return an async context manager running one ``Scenario``.

    Usage::

        async with run_scenario("valid login", page) as sc:
            await submit_login_form(sc, email, password)
    """

    @asynccontextmanager
    async def _run(name, page, **kwargs):
        sc = Scenario(name, page, cache=route_cache, **kwargs)
        async with sc:
            yield sc
        report(sc.result)

    return _run


@pytest_asyncio.fixture()
async def registered_user(session_manager, run_scenario, require_writes) -> UserData:
    """A freshly signed-up account in its own context."""
    user = create_sample_user()
    handle = await session_manager.anonymous_session()
    async with run_scenario("register fixture user", handle.page) as sc:
        await signup(sc, user)
        await sc.verifier.require(signup_accepted_signals(sc.routes), context="signup of fixture user")
    await session_manager.close_session(handle.session_id)
    return user
