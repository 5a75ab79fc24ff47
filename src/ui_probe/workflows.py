"""Reusable workflows for auth and entity coverage.

Each workflow drives a ``Scenario`` through one user-level task (log in, sign
up, log out, create a record). Missing optional affordances are handled here;
anything the task cannot do without is either a skip (``sc.skip``) or an
error raised to the scenario.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional, Tuple

from ui_probe.config import settings
from ui_probe.data import EntityData, UserData
from ui_probe.errors import BrowserActionError, ElementNotFound, UnexpectedApplicationState
from ui_probe.locators import ByStructure, ByText
from ui_probe.prober import Found
from ui_probe.routes import RouteTable
from ui_probe.scenario import Scenario
from ui_probe.selectors import Intent
from ui_probe.verifier import (
    IntentVisible,
    Signal,
    TextVisible,
    access_denied_signals,
    authenticated_signals,
)

logger = logging.getLogger(__name__)

FORM_FIELD_TIMEOUT = 5.0
ACCESS_CHECK_TIMEOUT = 2.0

PROTECTED_PATHS: Tuple[str, ...] = ("/profile", "/settings", "/admin", "/users", "/items", "/notes", "/tasks")

# list rows in tables and ARIA grids
ROW_SELECTOR = 'tr, [role="row"]'


def protected_paths(routes: RouteTable) -> Tuple[str, ...]:
    """Paths that should require a session, dashboard first."""
    return (routes.dashboard,) + tuple(p for p in PROTECTED_PATHS if p != routes.dashboard)


async def alert_text(sc: Scenario, timeout: float = 0.5) -> Optional[str]:
    """Text of the first visible ARIA alert, if any."""
    found = await sc.prober.probe_intent(Intent.ALERT, timeout)
    if not isinstance(found, Found):
        return None
    text = await found.locator.text_content()
    return (text or "").strip() or None


# ---- authentication --------------------------------------------------------------

async def submit_login_form(sc: Scenario, email: str, password: str) -> None:
    """Open the login route, fill both fields and submit."""
    await sc.browser.goto(sc.routes.login, wait_until="domcontentloaded")
    await sc.actions.fill_field(Intent.EMAIL_FIELD, email, FORM_FIELD_TIMEOUT)
    await sc.actions.fill_field(Intent.PASSWORD_FIELD, password, FORM_FIELD_TIMEOUT)
    await sc.actions.invoke_with_fallback_submit(Intent.PASSWORD_FIELD)


async def login(sc: Scenario, email: str, password: str, timeout: Optional[float] = None) -> Signal:
    """Log in and wait until the UI looks authenticated.

    Returns the signal that confirmed the session. When none shows up, the
    ARIA alert text (if the app rendered one) is put into the raised
    ``UnexpectedApplicationState``.
    """
    logger.info(f"Logging in as {email}")
    await submit_login_form(sc, email, password)
    result = await sc.verifier.verify(authenticated_signals(sc.routes, email), timeout)
    if result:
        logger.info(f"Logged in as {email} ({result.matched})")
        return result.matched

    message = await alert_text(sc)
    raise UnexpectedApplicationState(
        expectation=f"authenticated session for {email}",
        observed=f"login failed with error: {message}" if message else f"still on {sc.browser.path}, no authenticated UI",
    )


async def open_signup_form(sc: Scenario) -> None:
    """Reach the signup form from the home page, or directly via its route.

    Skips the scenario when the app has no signup form at all.
    """
    await sc.browser.goto(sc.routes.home)
    if not await sc.actions.try_invoke(Intent.NAV_TO_SIGNUP):
        logger.info(f"No signup affordance on {sc.routes.home}; opening {sc.routes.signup}")
        await sc.browser.goto(sc.routes.signup)
    await sc.precondition(Intent.EMAIL_FIELD, FORM_FIELD_TIMEOUT)


async def fill_signup_form(sc: Scenario, user: UserData) -> None:
    await sc.actions.try_fill(Intent.FULL_NAME_FIELD, user.full_name)
    await sc.actions.fill_field(Intent.EMAIL_FIELD, user.email)
    await sc.actions.fill_field(Intent.PASSWORD_FIELD, user.password)
    await sc.actions.try_fill(Intent.CONFIRM_PASSWORD_FIELD, user.password)


async def signup(sc: Scenario, user: UserData) -> None:
    """Open the signup form, fill it for ``user`` and submit."""
    logger.info(f"Signing up {user.email}")
    await open_signup_form(sc)
    await fill_signup_form(sc, user)
    await sc.actions.invoke_with_fallback_submit(Intent.PASSWORD_FIELD)


async def logout(sc: Scenario, email: Optional[str] = None) -> str:
    """Log out through the UI, falling back to clearing the session.

    Returns how the session was ended: ``"control"``, ``"menu"`` or ``"cleared"``.
    """
    if await sc.actions.try_invoke(Intent.LOGOUT):
        return "control"

    try:
        await sc.actions.open_menu(Intent.USER_MENU, Intent.LOGOUT)
        return "menu"
    except ElementNotFound as exc:
        logger.debug(f"User menu logout unavailable: {exc}")

    if email:
        trigger = await sc.prober.probe([ByText(email)], label="email menu trigger")
        if isinstance(trigger, Found):
            await trigger.locator.click()
            if await sc.actions.try_invoke(Intent.LOGOUT):
                return "menu"

    sc.note("Could not find a logout control; cleared cookies and storage instead")
    await sc.browser.clear_session()
    return "cleared"


async def probe_protected_routes(
    sc: Scenario,
    paths: Optional[Iterable[str]] = None,
    timeout: float = ACCESS_CHECK_TIMEOUT,
) -> Optional[str]:
    """Visit protected paths in order and return the first one that denies access."""
    for path in paths if paths is not None else protected_paths(sc.routes):
        try:
            await sc.browser.goto(path)
        except BrowserActionError as exc:
            logger.info(f"Could not open {path}: {exc}")
            continue
        result = await sc.verifier.verify(access_denied_signals(sc.routes), timeout)
        if result:
            logger.info(f"Access to {path} denied ({result.matched})")
            return path
        logger.info(f"{path} did not deny access (now on {sc.browser.path})")
    return None


# ---- settings / account ---------------------------------------------------------

async def open_settings(sc: Scenario, settings_path: str = "/settings") -> None:
    """Reach the account settings page; skip when the app has none."""
    await sc.browser.goto(settings_path)
    if await sc.verifier.verify([IntentVisible(Intent.SETTINGS_HEADING)], timeout=3.0):
        return
    await sc.browser.goto(sc.routes.dashboard)
    if not await sc.actions.try_invoke(Intent.NAV_TO_SETTINGS):
        try:
            await sc.actions.open_menu(Intent.USER_MENU, Intent.NAV_TO_SETTINGS)
        except ElementNotFound:
            sc.skip("no settings page or settings navigation found")
    await sc.precondition(Intent.SETTINGS_HEADING, FORM_FIELD_TIMEOUT)


async def update_profile(sc: Scenario, full_name: str) -> None:
    """Change the display name on the settings page and save."""
    if await sc.actions.try_invoke(Intent.EDIT_PROFILE):
        logger.info("Opened profile edit mode")
    if not await sc.actions.try_fill(Intent.FULL_NAME_FIELD, full_name, FORM_FIELD_TIMEOUT):
        sc.skip("no editable name field in settings")
    await sc.actions.invoke(Intent.SAVE)


async def delete_account(sc: Scenario) -> None:
    """Delete the logged-in account via the settings danger zone."""
    danger = await sc.prober.probe_intent(Intent.DANGER_ZONE)
    if isinstance(danger, Found):
        await danger.locator.scroll_into_view_if_needed()
    found = await sc.precondition(Intent.DELETE_ACCOUNT)
    await found.locator.click()
    await confirm_dialog(sc)


# ---- entity CRUD ----------------------------------------------------------------

async def open_entity_list(sc: Scenario) -> None:
    await sc.browser.goto(settings.entity_path)


async def open_create_form(sc: Scenario) -> None:
    """Click the create control and wait for the entity form."""
    found = await sc.precondition(Intent.CREATE_ENTITY)
    await found.locator.click()
    await sc.browser.wait_for_settle()
    await sc.precondition(Intent.TITLE_FIELD, FORM_FIELD_TIMEOUT)


async def fill_entity_form(sc: Scenario, entity: EntityData) -> None:
    await sc.actions.fill_field(Intent.TITLE_FIELD, entity.title)
    await sc.actions.try_fill(Intent.DESCRIPTION_FIELD, entity.description)


async def save_entity_form(sc: Scenario) -> None:
    await sc.actions.invoke(Intent.SAVE)


def entity_row(text: str) -> ByStructure:
    """The list row whose text contains ``text``."""
    return ByStructure(ROW_SELECTOR, has_text=text)


async def open_row_menu(sc: Scenario, item: Intent, row_text: Optional[str] = None) -> None:
    """Open a row's action menu and choose ``item`` (edit/delete).

    With ``row_text`` only the row containing that text is used, so records
    owned by other scenarios are never touched. Without it the first row
    with a menu is used.
    """
    try:
        if row_text is None:
            await sc.actions.open_menu(Intent.ROW_ACTIONS, item)
        else:
            row = entity_row(row_text).resolve(sc.page)
            await sc.actions.open_menu(Intent.ROW_MENU_BUTTON, item, root=row)
    except ElementNotFound as exc:
        target = f" for '{row_text}'" if row_text else ""
        sc.skip(f"row action '{item}'{target} not available: {exc}")


async def confirm_dialog(sc: Scenario, timeout: float = FORM_FIELD_TIMEOUT) -> None:
    """Wait for a confirmation dialog and accept it."""
    await sc.verifier.require([IntentVisible(Intent.DIALOG)], timeout, context="confirmation dialog")
    await sc.actions.invoke(Intent.CONFIRM_DIALOG)


def entity_listed(entity: EntityData) -> Signal:
    return TextVisible(entity.title)


# ---- user administration ---------------------------------------------------------

async def open_user_admin(sc: Scenario, admin_path: str = "/admin") -> None:
    """Reach the admin user list; skip when the application has none."""
    await sc.browser.goto(admin_path)
    if await sc.actions.try_invoke(Intent.NAV_TO_USERS):
        await sc.browser.wait_for_settle()
    else:
        logger.info(f"No user management link on {admin_path}, looking for the list in place")
    await sc.precondition(Intent.USER_LIST, FORM_FIELD_TIMEOUT)


async def search_list(sc: Scenario, text: str) -> bool:
    """Type ``text`` into the list's search box when there is one."""
    if not await sc.actions.try_fill(Intent.SEARCH_FIELD, text):
        return False
    await sc.browser.wait_for_settle()
    return True
