"""Selector catalog: semantic intents mapped to ordered locator candidates.

Candidates are listed from most to least stable. Role and label queries come
first, attribute selectors next, structural CSS last. The prober stops at the
first candidate that resolves, so order is the whole contract here.

The catalog is static for the lifetime of the process. ``candidates_for``
raises ``KeyError`` for an intent without an entry; that is a configuration
defect and ``tests/test_selectors.py`` guards against it.
"""
from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Tuple

from ui_probe.locators import (
    ByAttribute,
    ByLabel,
    ByPlaceholder,
    ByRole,
    ByStructure,
    ByText,
    Strategy,
    rx,
)


class Intent(str, Enum):
    # form fields
    EMAIL_FIELD = "email field"
    PASSWORD_FIELD = "password field"
    CONFIRM_PASSWORD_FIELD = "confirm password field"
    FULL_NAME_FIELD = "full name field"
    TITLE_FIELD = "title field"
    DESCRIPTION_FIELD = "description field"
    SEARCH_FIELD = "search field"

    # actions
    SUBMIT = "submit action"
    SAVE = "save action"
    LOGOUT = "logout action"
    USER_MENU = "user menu"
    NAV_TO_LOGIN = "navigate to login"
    NAV_TO_SIGNUP = "navigate to signup"
    NAV_TO_SETTINGS = "navigate to settings"
    NAV_TO_USERS = "navigate to users"
    CREATE_ENTITY = "create entity action"
    ROW_ACTIONS = "row actions menu"
    ROW_MENU_BUTTON = "menu button inside a row"
    EDIT_ENTRY = "edit menu entry"
    DELETE_ENTRY = "delete menu entry"
    CONFIRM_DIALOG = "confirm dialog action"
    CANCEL_DIALOG = "cancel dialog action"
    EDIT_PROFILE = "edit profile action"
    DELETE_ACCOUNT = "delete account action"

    # indicators
    DIALOG = "dialog"
    ALERT = "alert"
    ERROR_INDICATOR = "error indicator"
    SUCCESS_INDICATOR = "success indicator"
    LOADING_INDICATOR = "loading indicator"
    ACCESS_DENIED = "access denied indicator"
    DUPLICATE_EMAIL_ERROR = "duplicate email error"
    LOGIN_FORM = "login form"
    SIGNUP_FORM = "signup form"
    AUTHENTICATED_INDICATOR = "authenticated indicator"
    DASHBOARD_TEXT = "dashboard text"
    SETTINGS_HEADING = "settings heading"
    DANGER_ZONE = "danger zone"
    USER_LIST = "user list"

    def __str__(self) -> str:
        return self.value


_SUBMIT_NAMES = rx(r"log in|sign in|submit|continue|sign up|create account|register")
_LOGOUT_NAMES = rx(r"log ?out|sign ?out")
_CREATE_NAMES = rx(r"^\s*(\+\s*)?(add|create|new)\b")

_CATALOG: Dict[Intent, Tuple[Strategy, ...]] = {
    Intent.EMAIL_FIELD: (
        ByRole("textbox", rx(r"email")),
        ByLabel(rx(r"email")),
        ByPlaceholder(rx(r"email")),
        ByAttribute('input[type="email"]'),
        ByAttribute('input[name="email"]'),
    ),
    Intent.PASSWORD_FIELD: (
        ByAttribute('input[name="password"]'),
        ByLabel(rx(r"^password$")),
        ByRole("textbox", rx(r"^password$")),
        ByAttribute('input[type="password"]', nth=0),
    ),
    Intent.CONFIRM_PASSWORD_FIELD: (
        ByAttribute('input[name="confirm_password"]'),
        ByAttribute('input[name="confirmPassword"]'),
        ByLabel(rx(r"^confirm password$")),
        ByRole("textbox", rx(r"^confirm password$")),
        ByAttribute('input[name*="confirm"]'),
        ByAttribute('input[type="password"]', nth=1),
    ),
    Intent.FULL_NAME_FIELD: (
        ByRole("textbox", rx(r"full name|^name$")),
        ByPlaceholder(rx(r"full name|name")),
        ByAttribute('input[name="full_name"]'),
        ByAttribute('input[name="fullName"]'),
        ByAttribute('input[name="name"]'),
    ),
    Intent.TITLE_FIELD: (
        ByRole("textbox", "Title"),
        ByLabel(rx(r"^title")),
        ByAttribute('input[name="title"]'),
        ByAttribute('input[id="title"]'),
        ByAttribute('input[placeholder*="title" i]'),
    ),
    Intent.DESCRIPTION_FIELD: (
        ByRole("textbox", "Description"),
        ByLabel(rx(r"^description")),
        ByAttribute('textarea[name="description"]'),
        ByAttribute('input[name="description"]'),
        ByAttribute('textarea[id="description"]'),
    ),
    Intent.SEARCH_FIELD: (
        ByRole("searchbox"),
        ByPlaceholder(rx(r"search|filter")),
        ByAttribute('input[type="search"]'),
        ByAttribute('input[name*="search" i], input[name="q"]'),
    ),
    Intent.SUBMIT: (
        ByRole("button", _SUBMIT_NAMES),
        ByAttribute('button[type="submit"]'),
        ByAttribute('input[type="submit"]'),
    ),
    Intent.SAVE: (
        ByRole("button", rx(r"^\s*save( changes)?\s*$")),
        ByRole("button", rx(r"update")),
        ByStructure('[role="dialog"] button[type="submit"]'),
        ByAttribute('button[type="submit"]'),
        ByStructure(".save-btn, .btn-save"),
    ),
    Intent.LOGOUT: (
        ByRole("button", _LOGOUT_NAMES),
        ByRole("link", _LOGOUT_NAMES),
        ByRole("menuitem", _LOGOUT_NAMES),
        ByText(rx(r"^\s*(log ?out|sign out)\s*$")),
        ByAttribute('[data-testid*="logout"], [data-cy*="logout"]'),
        ByStructure("button, a", has_text=_LOGOUT_NAMES),
    ),
    Intent.USER_MENU: (
        ByAttribute('[aria-label*="user" i], [aria-label*="account" i], [aria-label*="profile" i]'),
        ByStructure(".user-menu, .account-menu, .profile-menu"),
        ByAttribute('[data-testid*="user"]'),
    ),
    Intent.NAV_TO_LOGIN: (
        ByText("Sign in"),
        ByText("Log in"),
        ByText("Login"),
        ByAttribute('a[href*="login"]'),
        ByStructure("button", has_text="Sign in"),
        ByStructure("button", has_text="Log in"),
    ),
    Intent.NAV_TO_SIGNUP: (
        ByText("Sign up"),
        ByText("Create account"),
        ByText("Register"),
        ByAttribute('a[href*="signup"]'),
        ByAttribute('a[href*="register"]'),
        ByStructure("button", has_text="Sign up"),
        ByStructure("button", has_text="Create account"),
    ),
    Intent.NAV_TO_SETTINGS: (
        ByRole("link", rx(r"settings")),
        ByText("Settings", exact=True),
        ByAttribute('a[href*="settings"]'),
        ByStructure("button", has_text="Settings"),
    ),
    Intent.NAV_TO_USERS: (
        ByRole("link", rx(r"^\s*(users|user management|members)\s*$")),
        ByText("User Management"),
        ByText("Users", exact=True),
        ByText("Members", exact=True),
        ByAttribute('a[href*="users"]'),
        ByStructure("button", has_text="Users"),
        ByAttribute('[data-testid*="users"], [data-cy*="users"]'),
    ),
    Intent.CREATE_ENTITY: (
        ByRole("button", _CREATE_NAMES),
        ByRole("link", _CREATE_NAMES),
        ByAttribute('button[aria-label*="add" i], button[aria-label*="create" i]'),
        ByAttribute('[data-testid*="add"], [data-testid*="create"]'),
        ByStructure("button", has_text="+"),
    ),
    Intent.ROW_ACTIONS: (
        ByStructure('table button[data-scope="menu"][data-part="trigger"]'),
        ByStructure('tbody button[aria-haspopup="menu"]'),
        ByStructure('tr button[data-scope="menu"]'),
        ByStructure('td button[aria-haspopup="menu"]'),
        ByStructure('[role="cell"] button[data-scope="menu"]'),
        ByStructure("tbody button:has(svg)"),
        ByStructure("tr button:has(svg)"),
    ),
    # resolved inside one row, so no table-level prefixes
    Intent.ROW_MENU_BUTTON: (
        ByStructure('button[data-scope="menu"][data-part="trigger"]'),
        ByStructure('button[aria-haspopup="menu"]'),
        ByRole("button", rx(r"actions|options|more|menu")),
        ByStructure('button[data-scope="menu"]'),
        ByStructure("button:has(svg)"),
    ),
    Intent.EDIT_ENTRY: (
        ByRole("menuitem", rx(r"edit")),
        ByStructure('[role="menu"] button, [role="menu"] a', has_text=rx(r"edit")),
        ByRole("button", rx(r"^\s*edit( item)?\s*$")),
        ByRole("link", rx(r"^\s*edit( item)?\s*$")),
    ),
    Intent.DELETE_ENTRY: (
        ByRole("menuitem", rx(r"delete")),
        ByStructure('[role="menu"] button, [role="menu"] a', has_text=rx(r"delete")),
        ByRole("button", rx(r"^\s*delete( item)?\s*$")),
        ByRole("link", rx(r"^\s*delete( item)?\s*$")),
    ),
    Intent.CONFIRM_DIALOG: (
        ByStructure('[role="alertdialog"] button', has_text=rx(r"delete|confirm|yes")),
        ByStructure('[role="dialog"] button', has_text=rx(r"delete|confirm|yes")),
        ByStructure('[role="alertdialog"] button[class*="danger"], [role="dialog"] button[class*="danger"]'),
        ByStructure('[role="dialog"] button[type="submit"]'),
        ByRole("button", rx(r"^\s*(confirm|yes, delete|permanently delete|delete)\s*$")),
    ),
    Intent.CANCEL_DIALOG: (
        ByStructure('[role="dialog"] button, [role="alertdialog"] button', has_text=rx(r"cancel|close")),
        ByRole("button", rx(r"^\s*(cancel|close)\s*$")),
    ),
    Intent.EDIT_PROFILE: (
        ByRole("button", rx(r"^\s*edit")),
        ByRole("link", rx(r"^\s*edit")),
        ByAttribute('button[aria-label*="edit" i]'),
        ByStructure(".edit-btn, .btn-edit"),
        ByAttribute('[data-testid*="edit"]'),
    ),
    Intent.DELETE_ACCOUNT: (
        ByRole("button", rx(r"(delete|close|deactivate)( my)? account")),
        ByAttribute('[data-testid*="delete-account"]'),
        ByStructure(".danger-zone button"),
        ByStructure('button[class*="danger"]'),
    ),
    Intent.DIALOG: (
        ByRole("dialog"),
        ByRole("alertdialog"),
        ByStructure(".modal, .chakra-modal"),
    ),
    Intent.ALERT: (
        ByRole("alert"),
    ),
    Intent.ERROR_INDICATOR: (
        ByRole("alert"),
        ByStructure(".error, .alert-error, .field-error, .validation-error, .text-red-500, .text-danger"),
        ByText(rx(r"error|invalid|required|must be")),
    ),
    Intent.SUCCESS_INDICATOR: (
        ByStructure(".alert-success, .success, .toast-success, .text-green-500, .text-success"),
        ByText(rx(r"success|created|updated|saved|deleted|removed")),
    ),
    Intent.LOADING_INDICATOR: (
        ByAttribute('[aria-busy="true"]'),
        ByStructure(".loading, .spinner"),
        ByText(rx(r"loading|please wait")),
    ),
    Intent.ACCESS_DENIED: (
        ByText(rx(r"access.*denied|unauthorized|forbidden|not.*authorized|login.*required")),
        ByText(rx(r"please.*log ?in|sign.*in.*required")),
        ByStructure('[role="alert"]', has_text=rx(r"access|login|auth")),
    ),
    Intent.DUPLICATE_EMAIL_ERROR: (
        ByText(rx(r"already.*exists|email.*taken|user.*exists|already.*registered|email.*in.*use")),
        ByStructure('[role="alert"]', has_text=rx(r"already|exists|taken|in use")),
        ByStructure(".error, .field-error, .validation-error, .text-red-500, .text-danger"),
    ),
    Intent.LOGIN_FORM: (
        ByStructure("form", has_text=rx(r"log ?in|sign ?in")),
        ByStructure('form:has(input[type="password"])'),
        ByStructure('form:has(input[type="email"])'),
    ),
    Intent.SIGNUP_FORM: (
        ByStructure('form:has(input[name*="confirm"])'),
        ByStructure('form:has(input[type="password"] ~ input[type="password"])'),
        ByStructure("form", has_text=rx(r"sign ?up|create account|register")),
    ),
    Intent.AUTHENTICATED_INDICATOR: (
        ByRole("button", _LOGOUT_NAMES),
        ByRole("heading", rx(r"dashboard")),
        ByRole("link", rx(r"dashboard")),
        ByText(rx(r"profile")),
        ByAttribute('[data-testid*="user"]'),
        ByStructure(".user-menu, .account-menu"),
    ),
    Intent.DASHBOARD_TEXT: (
        ByRole("heading", rx(r"dashboard")),
        ByText(rx(r"dashboard")),
    ),
    Intent.SETTINGS_HEADING: (
        ByRole("heading", rx(r"settings")),
        ByText(rx(r"settings")),
    ),
    Intent.DANGER_ZONE: (
        ByText(rx(r"danger zone")),
        ByStructure(".danger-zone"),
        ByAttribute('[data-testid*="danger"]'),
        ByRole("button", rx(r"delete( my)? account")),
    ),
    Intent.USER_LIST: (
        ByRole("table"),
        ByStructure(".users-table, .user-list"),
        ByStructure('[role="table"], [role="grid"]'),
        ByText(rx(r"@[\w-]+\.[a-z]{2,}")),
    ),
}

CATALOG: Mapping[Intent, Tuple[Strategy, ...]] = MappingProxyType(_CATALOG)


def candidates_for(intent: Intent) -> Tuple[Strategy, ...]:
    """Ordered candidates for ``intent``, most preferred first."""
    return CATALOG[intent]
