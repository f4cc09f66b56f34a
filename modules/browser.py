"""
Portfolio Capture - Browser Session

Playwright-driven Chromium session: cookie injection, navigation to the
portfolios page, account selection, tab activation, and page captures
(screenshot, PDF, rendered HTML).
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

from playwright.sync_api import (
    sync_playwright,
    Browser,
    BrowserContext,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
)

from config.settings import BrowserConfig, get_config
from modules.element_locator import (
    AccountLinkLocator,
    ClickResult,
    ElementLocator,
    PrintButtonLocator,
    TabLocator,
    find_tab_candidates,
)
from modules.table_merger import TABLE_SELECTOR

# Module logger
browser_logger = logging.getLogger("portfolio_capture.browser")

PDF_OPTIONS = {
    "format": "A4",
    "print_background": True,
    "margin": {"top": "20px", "right": "20px", "bottom": "20px", "left": "20px"},
}

# Readiness predicates
ACCOUNT_READY_SCRIPT = """([identifier, name]) =>
    Array.from(document.querySelectorAll('a, button, [role="button"]')).some((el) => {
        const text = el.textContent || '';
        return (identifier && text.includes(identifier)) || (name && text.includes(name));
    })"""
TABLES_READY_SCRIPT = f"() => document.querySelectorAll('{TABLE_SELECTOR}').length > 0"
TABLE_SNAPSHOT_SCRIPT = f"""() => {{
    const table = document.querySelector('{TABLE_SELECTOR}');
    return table ? table.innerHTML : null;
}}"""
# Ready once the clicked tab reports itself selected, or the first table
# differs from its pre-click snapshot
TAB_READY_SCRIPT = f"""([name, before]) => {{
    const tables = document.querySelectorAll('{TABLE_SELECTOR}');
    if (tables.length === 0) return false;
    const selected = Array.from(document.querySelectorAll('[aria-selected="true"]'))
        .some((el) => (el.textContent || '').trim() === name);
    return selected || before === null || tables[0].innerHTML !== before;
}}"""


class AccountNotFoundError(RuntimeError):
    """No link or button on the portfolios page matched the account."""


class PortfolioBrowser:
    """
    Chromium session for the portfolios site.

    Used as a context manager so the browser is always closed:

        with PortfolioBrowser() as browser:
            browser.add_cookies(cookies)
            browser.open_portfolios(url)
    """

    def __init__(self,
                 browser_config: Optional[BrowserConfig] = None,
                 tab_locator: Optional[ElementLocator] = None,
                 print_locator: Optional[ElementLocator] = None):
        self.config = browser_config or get_config().browser
        self.tab_locator = tab_locator or TabLocator()
        self.print_locator = print_locator or PrintButtonLocator()
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------
    def start(self) -> None:
        """Start Playwright and open a page with no fixed viewport."""
        if self._browser:
            return

        self._playwright = sync_playwright().start()
        self._browser = self._playwright.chromium.launch(
            headless=self.config.headless,
            args=self.config.launch_args,
            timeout=self.config.timeout_ms,
        )
        self._context = self._browser.new_context(no_viewport=True)
        self._page = self._context.new_page()
        self._page.set_default_navigation_timeout(self.config.timeout_ms)
        browser_logger.info(f"Started Chromium (headless={self.config.headless})")

    def stop(self) -> None:
        """Close the browser and stop Playwright."""
        if self._browser:
            self._browser.close()
            self._playwright.stop()
            self._browser = None
            self._context = None
            self._page = None
            browser_logger.info("Stopped Chromium")

    def __enter__(self) -> "PortfolioBrowser":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    @property
    def page(self) -> Page:
        if self._page is None:
            raise RuntimeError("Browser not started")
        return self._page

    # -------------------------------------------------------------------------
    # Session setup
    # -------------------------------------------------------------------------
    def add_cookies(self, cookies: list[dict[str, Any]]) -> int:
        """Inject converted cookies into the browser context."""
        self._context.add_cookies(cookies)
        browser_logger.info(f"Loaded {len(cookies)} cookies")
        return len(cookies)

    @property
    def headless(self) -> bool:
        return self.config.headless

    def open_portfolios(self, url: str, identifier: str = "", name: str = "") -> None:
        """Navigate to the portfolios page and wait for the account link to render."""
        browser_logger.info(f"Navigating to {url}...")
        self.page.goto(url, wait_until="domcontentloaded", timeout=self.config.timeout_ms)
        if identifier or name:
            self.wait_until(ACCOUNT_READY_SCRIPT, "account link",
                            arg=[identifier or None, name or None])

    def open_account(self, identifier: str, name: str,
                     any_element: bool = False,
                     required: bool = True) -> ClickResult:
        """
        Click the account link matching ``identifier`` or ``name``.

        Raises:
            AccountNotFoundError: when nothing matches and ``required`` is set.
        """
        browser_logger.info(f"Looking for account: {identifier or name}...")
        locator = AccountLinkLocator(identifier=identifier, name=name, any_element=any_element)
        result = locator.activate(self.page)

        if not result.success:
            message = "Could not find account. Check ACCOUNT_IDENTIFIER and ACCOUNT_NAME in .env"
            if required:
                raise AccountNotFoundError(message)
            browser_logger.warning(message)
            return result

        browser_logger.info("Clicked on account, waiting for navigation...")
        if result.follows_link:
            try:
                self.page.wait_for_url(
                    result.href,
                    wait_until="domcontentloaded",
                    timeout=self.config.navigation_wait_ms,
                )
            except PlaywrightTimeoutError:
                browser_logger.info("Navigation wait timed out, continuing...")

        self.wait_until(TABLES_READY_SCRIPT, "portfolio tables")
        return result

    # -------------------------------------------------------------------------
    # Page interaction
    # -------------------------------------------------------------------------
    def wait_until(self, predicate: str, description: str,
                   arg: Any = None,
                   timeout_ms: Optional[int] = None) -> bool:
        """
        Poll ``predicate`` in the page until it is truthy.

        A timeout is logged and reported as False, never raised.
        """
        try:
            self.page.wait_for_function(
                predicate, arg=arg, timeout=timeout_ms or self.config.render_timeout_ms
            )
            return True
        except PlaywrightTimeoutError:
            browser_logger.warning(f"Timed out waiting for {description}, continuing...")
            return False

    def select_tab(self, tab_name: str) -> bool:
        """Activate a tab by its visible label and wait for its table to replace the last one."""
        before = self.page.evaluate(TABLE_SNAPSHOT_SCRIPT)
        result = self.tab_locator.activate(self.page, tab_name)
        if not result.success:
            return False
        self.wait_until(TAB_READY_SCRIPT, f"{tab_name} tables", arg=[tab_name, before])
        return True

    def click_print(self) -> ClickResult:
        """Click the site's own Print control, if there is one."""
        result = self.print_locator.activate(self.page, "Print")
        if result.success:
            self.page.wait_for_load_state("domcontentloaded")
        return result

    def tab_candidates(self, names) -> list[dict]:
        return find_tab_candidates(self.page, names)

    def scroll_to_top(self) -> None:
        self.page.evaluate("() => window.scrollTo(0, 0)")

    def content(self) -> str:
        """Rendered HTML of the current page."""
        return self.page.content()

    # -------------------------------------------------------------------------
    # Captures
    # -------------------------------------------------------------------------
    def screenshot(self, path: Path, full_page: bool = False) -> Path:
        self.page.screenshot(path=str(path), full_page=full_page)
        browser_logger.info(f"Saved screenshot: {Path(path).name}")
        return Path(path)

    def save_pdf(self, path: Path) -> Path:
        """Print the page to an A4 PDF with backgrounds and 20px margins."""
        self.page.pdf(path=str(path), **PDF_OPTIONS)
        browser_logger.info(f"Saved PDF: {Path(path).name}")
        return Path(path)
