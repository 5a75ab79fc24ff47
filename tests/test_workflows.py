import pytest

from ui_probe import actions as actions_module
from ui_probe.data import create_sample_entity, create_sample_user
from ui_probe.errors import UnexpectedApplicationState
from ui_probe.routes import DEFAULT_ROUTES
from ui_probe.scenario import Scenario, Verdict
from ui_probe.selectors import Intent
from ui_probe import workflows

pytestmark = pytest.mark.asyncio


@pytest.fixture(autouse=True)
def no_menu_delay(monkeypatch):
    monkeypatch.setattr(actions_module, "MENU_OPEN_DELAY", 0)


def make(page):
    return Scenario("workflow", page, routes=DEFAULT_ROUTES, probe_timeout=0.02, verify_timeout=0.2)


def login_page(page, on_submit):
    def render(p):
        p.elements.clear()
        p.add(role="textbox", name="Email")
        p.add(css=('input[name="password"]',), label="Password")
        p.add(role="button", name="Sign in", on_click=on_submit)

    page.on("/login", render)


async def test_login_succeeds_on_redirect(page):
    def submit(p):
        p.elements.clear()
        p.set_path("/dashboard")

    login_page(page, submit)
    sc = make(page)
    matched = await workflows.login(sc, "admin@example.com", "secret")
    assert matched.describe() == "url no longer on login"
    assert page.elements == []


async def test_login_succeeds_on_logout_control_without_redirect(page):
    def submit(p):
        p.add(role="button", name="Log out")

    login_page(page, submit)
    matched = await workflows.login(make(page), "admin@example.com", "secret")
    assert matched.describe() == "logout action visible"


async def test_login_failure_surfaces_alert_text(page):
    login_page(page, lambda p: p.add(role="alert", text=" Invalid email or password "))
    with pytest.raises(UnexpectedApplicationState) as excinfo:
        await workflows.login(make(page), "admin@example.com", "wrong")
    assert "Invalid email or password" in str(excinfo.value)


async def test_login_failure_without_alert(page):
    login_page(page, lambda p: None)
    with pytest.raises(UnexpectedApplicationState) as excinfo:
        await workflows.login(make(page), "admin@example.com", "wrong")
    assert "still on /login" in str(excinfo.value)


async def test_logout_prefers_visible_control(page):
    page.add(role="button", name="Sign out")
    sc = make(page)
    assert await workflows.logout(sc) == "control"
    assert sc.notes == []


async def test_logout_through_user_menu(page):
    item = page.add(role="menuitem", name="Log out", visible=False)
    page.add(css=(".user-menu, .account-menu, .profile-menu",), on_click=lambda p: setattr(item, "visible", True))
    sc = make(page)
    assert await workflows.logout(sc) == "menu"


async def test_logout_falls_back_to_clearing_session(page):
    sc = make(page)
    assert await workflows.logout(sc, email="admin@example.com") == "cleared"
    assert page.context.cookies_cleared == 1
    assert page.log[-1][0] == "evaluate"
    assert len(sc.notes) == 1


async def test_probe_protected_routes_returns_first_denied(page):
    page.on("/dashboard", lambda p: None)
    page.on("/profile", lambda p: p.set_path("/login"))
    sc = make(page)
    denied = await workflows.probe_protected_routes(sc, timeout=0.05)
    assert denied == "/profile"
    assert page.navigations[:2] == ["/dashboard", "/profile"]


async def test_probe_protected_routes_none_denied(page):
    sc = make(page)
    assert await workflows.probe_protected_routes(sc, ["/items"], timeout=0.05) is None


async def test_protected_paths_start_with_dashboard():
    paths = workflows.protected_paths(DEFAULT_ROUTES)
    assert paths[0] == "/dashboard"
    assert "/tasks" in paths
    assert len(paths) == len(set(paths))


async def test_signup_falls_back_to_signup_route(page):
    def render_signup(p):
        p.elements.clear()
        p.add(role="textbox", name="Full name")
        p.add(role="textbox", name="Email")
        p.add(css=('input[name="password"]',))
        p.add(css=('input[name="confirm_password"]',))
        p.add(role="button", name="Create account")

    page.on("/signup", render_signup)
    user = create_sample_user()
    await workflows.signup(make(page), user)
    assert "/signup" in page.navigations
    values = [e.value for e in page.elements]
    assert values[:4] == [user.full_name, user.email, user.password, user.password]
    assert page.log[-1] == ("click", "Create account")


async def test_signup_without_form_skips(page):
    sc = make(page)
    async with sc:
        await workflows.signup(sc, create_sample_user())
    assert sc.result.verdict is Verdict.SKIPPED


async def test_create_entity_flow(page):
    def open_form(p):
        p.add(role="textbox", name="Title")
        p.add(role="textbox", name="Description")
        p.add(role="button", name="Save")

    page.add(role="button", name="Add item", on_click=open_form)
    entity = create_sample_entity("item", title="Quarterly report")
    sc = make(page)
    async with sc:
        await workflows.open_create_form(sc)
        await workflows.fill_entity_form(sc, entity)
        await workflows.save_entity_form(sc)
    assert sc.result.verdict is Verdict.PASSED
    assert page.elements[1].value == "Quarterly report"
    assert page.elements[2].value == entity.description


async def test_create_entity_without_button_skips(page):
    sc = make(page)
    async with sc:
        await workflows.open_create_form(sc)
    assert sc.result.verdict is Verdict.SKIPPED


async def test_row_menu_and_confirm_dialog(page):
    deleted = []

    def show_dialog(p):
        p.add(role="alertdialog")
        p.add(css=('[role="alertdialog"] button',), text="Delete", on_click=lambda q: deleted.append(True))

    item = page.add(role="menuitem", name="Delete", visible=False, on_click=show_dialog)
    page.add(css=('tbody button[aria-haspopup="menu"]',), on_click=lambda p: setattr(item, "visible", True))
    sc = make(page)
    async with sc:
        await workflows.open_row_menu(sc, Intent.DELETE_ENTRY)
        await workflows.confirm_dialog(sc, timeout=0.2)
    assert sc.result.verdict is Verdict.PASSED
    assert deleted == [True]


async def test_row_menu_missing_skips(page):
    sc = make(page)
    async with sc:
        await workflows.open_row_menu(sc, Intent.EDIT_ENTRY)
    assert sc.result.verdict is Verdict.SKIPPED


async def test_row_menu_uses_the_row_with_matching_text(page):
    edited = []
    item = page.add(role="menuitem", name="Edit", visible=False, on_click=lambda p: edited.append(True))

    def open_with(label):
        def opener(p):
            p.log.append(("opened", label))
            item.visible = True
        return opener

    for title in ("Someone else's record", "Quarterly report 17", "Another record"):
        row = page.add(css=('tr, [role="row"]',), text=title)
        page.add(css=('button[aria-haspopup="menu"]',), name=f"menu {title}", within=row, on_click=open_with(title))
    sc = make(page)
    async with sc:
        await workflows.open_row_menu(sc, Intent.EDIT_ENTRY, row_text="Quarterly report 17")
    assert sc.result.verdict is Verdict.PASSED
    assert ("opened", "Quarterly report 17") in page.log
    assert ("opened", "Someone else's record") not in page.log
    assert edited == [True]


async def test_row_menu_for_missing_row_skips(page):
    row = page.add(css=('tr, [role="row"]',), text="Someone else's record")
    page.add(css=('button[aria-haspopup="menu"]',), within=row)
    sc = make(page)
    async with sc:
        await workflows.open_row_menu(sc, Intent.DELETE_ENTRY, row_text="Quarterly report 17")
    assert sc.result.verdict is Verdict.SKIPPED
    assert "Quarterly report 17" in sc.result.diagnostic


async def test_user_admin_follows_users_link(page):
    def users(p):
        p.set_path("/admin/users")
        p.add(role="table")
        p.add(role="searchbox")

    page.on("/admin", lambda p: p.add(role="link", name="Users", on_click=users))
    sc = make(page)
    async with sc:
        await workflows.open_user_admin(sc)
        assert await workflows.search_list(sc, "new.user@example.com")
    assert sc.result.verdict is Verdict.PASSED
    assert page.path == "/admin/users"
    assert ("fill", "new.user@example.com") in page.log


async def test_user_admin_without_user_list_skips(page):
    page.on("/admin", lambda p: p.add(role="heading", name="Admin"))
    sc = make(page)
    async with sc:
        await workflows.open_user_admin(sc)
    assert sc.result.verdict is Verdict.SKIPPED


async def test_search_list_without_search_box(page):
    assert await workflows.search_list(make(page), "anyone") is False
