import pytest
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from config.settings import BrowserConfig
from modules.browser import (
    ACCOUNT_READY_SCRIPT,
    PDF_OPTIONS,
    TAB_READY_SCRIPT,
    TABLES_READY_SCRIPT,
    AccountNotFoundError,
    PortfolioBrowser,
)


class FakePage:
    """Records Playwright page calls; ``evaluate`` replays canned results."""

    def __init__(self, evaluate_results=None, timeout_on=()):
        self.evaluate_results = list(evaluate_results or [])
        self.timeout_on = set(timeout_on)
        self.calls = []

    def _maybe_timeout(self, name):
        if name in self.timeout_on:
            raise PlaywrightTimeoutError(f"{name}: Timeout 10ms exceeded.")

    def evaluate(self, script, arg=None):
        self.calls.append(("evaluate", arg))
        return self.evaluate_results.pop(0) if self.evaluate_results else None

    def goto(self, url, wait_until=None, timeout=None):
        self.calls.append(("goto", url, wait_until, timeout))

    def wait_for_url(self, url, wait_until=None, timeout=None):
        self.calls.append(("wait_for_url", url, wait_until, timeout))
        self._maybe_timeout("wait_for_url")

    def wait_for_function(self, expression, arg=None, timeout=None):
        self.calls.append(("wait_for_function", expression, arg, timeout))
        self._maybe_timeout("wait_for_function")

    def wait_for_load_state(self, state=None, timeout=None):
        self.calls.append(("wait_for_load_state", state))

    def pdf(self, path=None, **options):
        self.calls.append(("pdf", path, options))

    def names(self):
        return [call[0] for call in self.calls]


def _browser(page) -> PortfolioBrowser:
    browser = PortfolioBrowser(browser_config=BrowserConfig(
        headless=True, timeout_ms=5000, navigation_wait_ms=10000, render_timeout_ms=2000,
    ))
    browser._page = page
    return browser


def _waits(page):
    return [call for call in page.calls if call[0] == "wait_for_function"]


def test_account_click_with_href_waits_for_that_url() -> None:
    page = FakePage([{"success": True, "tag": "A", "href": "https://site/portfolio/p_1/view"}])
    result = _browser(page).open_account("p_1", "")

    assert result.follows_link is True
    assert page.names() == ["evaluate", "wait_for_url", "wait_for_function"]
    assert page.calls[1] == (
        "wait_for_url", "https://site/portfolio/p_1/view", "domcontentloaded", 10000
    )
    assert page.calls[2][1] == TABLES_READY_SCRIPT


def test_account_navigation_timeout_is_logged_and_run_continues() -> None:
    page = FakePage(
        [{"success": True, "tag": "A", "href": "https://site/portfolio/p_1/view"}],
        timeout_on={"wait_for_url"},
    )
    result = _browser(page).open_account("p_1", "")

    assert result.success is True
    assert page.names()[-1] == "wait_for_function"


def test_account_click_without_href_does_not_wait_for_navigation() -> None:
    page = FakePage([{"success": True, "tag": "BUTTON", "href": None}])
    _browser(page).open_account("", "Brokerage")
    assert "wait_for_url" not in page.names()


def test_missing_account_raises_when_required() -> None:
    page = FakePage([{"success": False}])
    with pytest.raises(AccountNotFoundError):
        _browser(page).open_account("p_1", "")


def test_missing_account_only_warns_when_optional() -> None:
    page = FakePage([{"success": False}])
    result = _browser(page).open_account("p_1", "", any_element=True, required=False)

    assert result.success is False
    assert page.names() == ["evaluate"]
    assert page.calls[0][1] == ["p_1", None, True]


def test_open_portfolios_waits_for_account_link() -> None:
    page = FakePage()
    _browser(page).open_portfolios("https://site/portfolios/", "p_1", "")

    assert page.calls[0] == ("goto", "https://site/portfolios/", "domcontentloaded", 5000)
    wait = _waits(page)[0]
    assert wait[1] == ACCOUNT_READY_SCRIPT
    assert wait[2] == ["p_1", None]


def test_open_portfolios_without_account_text_only_navigates() -> None:
    page = FakePage()
    _browser(page).open_portfolios("https://site/portfolios/")
    assert page.names() == ["goto"]


def test_wait_until_turns_timeout_into_false() -> None:
    page = FakePage(timeout_on={"wait_for_function"})
    assert _browser(page).wait_until("() => false", "nothing") is False

    page = FakePage()
    assert _browser(page).wait_until("() => true", "something", timeout_ms=50) is True
    assert page.calls[0][3] == 50


def test_select_tab_missing_returns_false_without_waiting() -> None:
    page = FakePage(["<tr><td>AAPL</td></tr>", {"success": False}])
    assert _browser(page).select_tab("Fundamentals") is False
    assert _waits(page) == []


def test_select_tab_waits_for_content_to_differ_from_previous_tab() -> None:
    page = FakePage([
        None, {"success": True, "tag": "BUTTON"},
        "<tr><td>AAPL</td><td>150</td></tr>", {"success": True, "tag": "BUTTON"},
    ])
    browser = _browser(page)

    assert browser.select_tab("Summary") is True
    assert browser.select_tab("Holdings") is True

    waits = _waits(page)
    assert [w[1] for w in waits] == [TAB_READY_SCRIPT, TAB_READY_SCRIPT]
    assert waits[0][2] == ["Summary", None]
    assert waits[1][2] == ["Holdings", "<tr><td>AAPL</td><td>150</td></tr>"]


def test_select_tab_render_timeout_still_reports_tab_found() -> None:
    page = FakePage(["<tr></tr>", {"success": True}], timeout_on={"wait_for_function"})
    assert _browser(page).select_tab("Holdings") is True


def test_save_pdf_uses_a4_with_margins(tmp_path) -> None:
    page = FakePage()
    path = _browser(page).save_pdf(tmp_path / "print.pdf")

    assert path == tmp_path / "print.pdf"
    name, target, options = page.calls[0]
    assert target == str(tmp_path / "print.pdf")
    assert options == PDF_OPTIONS
    assert options["format"] == "A4"
    assert options["margin"]["left"] == "20px"


def test_stop_without_start_is_harmless() -> None:
    browser = PortfolioBrowser(browser_config=BrowserConfig(headless=True))
    browser.stop()
    with pytest.raises(RuntimeError):
        browser.page


def test_headless_follows_config() -> None:
    assert PortfolioBrowser(browser_config=BrowserConfig(headless=False)).headless is False
