"""
Portfolio Capture - Run Recipes

Sequential browser recipes built on PortfolioBrowser:
- capture: per-tab screenshots, merged JSON, and a PDF of the Summary tab
- parse:   merged JSON only, with tab diagnostics
- print:   PDF of the account page via the site's Print control
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from dataclasses import replace
from typing import Callable, Optional

from config.settings import Config, get_config
from modules.artifacts import ArtifactWriter, long_timestamp
from modules.browser import PortfolioBrowser
from modules.cookies import load_cookies
from modules.enrichment import NewsScraper, QuoteClient, enrich_portfolio
from modules.table_merger import PortfolioData, TableMerger

# Module logger
capture_logger = logging.getLogger("portfolio_capture.runner")

PARSE_OUTPUT_NAME = "portfolio-data.json"
PARSE_SCREENSHOT_NAME = "portfolio_page.png"


class PortfolioCapture:
    """Orchestrates one run against the portfolios site."""

    def __init__(self,
                 config: Optional[Config] = None,
                 browser_factory: Optional[Callable[..., PortfolioBrowser]] = None,
                 quote_client: Optional[QuoteClient] = None,
                 news_scraper: Optional[NewsScraper] = None):
        self.config = config or get_config()
        self.browser_factory = browser_factory or self._launch_browser
        self.quote_client = quote_client
        self.news_scraper = news_scraper

    def _launch_browser(self, headless: Optional[bool] = None) -> PortfolioBrowser:
        """Browser from config; ``headless`` overrides the configured mode."""
        browser_config = self.config.browser
        if headless is not None and headless != browser_config.headless:
            browser_config = replace(browser_config, headless=headless)
        return PortfolioBrowser(browser_config=browser_config)

    # -------------------------------------------------------------------------
    # Shared steps
    # -------------------------------------------------------------------------
    def _open_session(self, browser: PortfolioBrowser) -> None:
        """Cookies, then the portfolios landing page."""
        cookies = load_cookies(self.config.portal.cookie_path)
        browser.add_cookies(cookies)
        account = self.config.account
        browser.open_portfolios(self.config.portal.portfolios_url, account.identifier, account.name)

    def _open_account(self, browser: PortfolioBrowser, required: bool = True, **kwargs):
        account = self.config.account
        return browser.open_account(account.identifier, account.name, required=required, **kwargs)

    def _scrape_tabs(self, browser: PortfolioBrowser,
                     writer: Optional[ArtifactWriter] = None) -> TableMerger:
        """Click each tab in order, extract its tables, merge by symbol."""
        merger = TableMerger()

        for tab_name in self.config.portal.tabs:
            capture_logger.info(f"Processing {tab_name} tab...")

            if not browser.select_tab(tab_name):
                capture_logger.info(f"Could not find {tab_name} tab, skipping...")
                continue

            if writer is not None:
                writer.record(browser.screenshot(writer.screenshot_path(tab_name)))

            found = merger.merge_html(tab_name, browser.content())
            capture_logger.info(f"Found {found} rows in {tab_name} tab")

        return merger

    def _enrich(self, portfolio: PortfolioData) -> None:
        if self.quote_client is None and self.news_scraper is None:
            return
        enrich_portfolio(portfolio, quotes=self.quote_client, news=self.news_scraper)

    def _save_summary_pdf(self, browser: PortfolioBrowser, writer: ArtifactWriter) -> None:
        """Back to the Summary tab, then print. Failure is only a warning."""
        try:
            browser.select_tab("Summary")
            browser.scroll_to_top()
            writer.record(browser.save_pdf(writer.pdf_path))
        except Exception as e:
            capture_logger.warning(f"Could not generate PDF - {e}")
            capture_logger.warning("Continuing with other outputs...")

    def _log_summary(self, merger: TableMerger) -> None:
        capture_logger.info(f"Parsed {len(merger.data)} symbols")
        capture_logger.info("Symbols found:")
        for symbol, count in merger.field_counts().items():
            capture_logger.info(f"  {symbol}: {count} fields")

    # -------------------------------------------------------------------------
    # Recipes
    # -------------------------------------------------------------------------
    def capture(self) -> PortfolioData:
        """Screenshots, merged JSON, and a PDF, all sharing one timestamp."""
        writer = ArtifactWriter(self.config.portal.output_dir)

        with self.browser_factory() as browser:
            self._open_session(browser)
            self._open_account(browser)
            browser.scroll_to_top()

            writer.ensure_dir()
            capture_logger.info(f"Using timestamp: {writer.timestamp}")
            writer.record(browser.screenshot(writer.screenshot_path("before")))

            merger = self._scrape_tabs(browser, writer)
            self._enrich(merger.data)

            writer.write_json(merger.data)
            self._log_summary(merger)

            capture_logger.info("Preparing to generate PDF...")
            if browser.headless:
                self._save_summary_pdf(browser, writer)

        if not browser.headless:
            # Chromium only prints to PDF when headless
            capture_logger.info("Reopening the account headless for the PDF...")
            try:
                with self.browser_factory(headless=True) as pdf_browser:
                    self._open_session(pdf_browser)
                    self._open_account(pdf_browser)
                    self._save_summary_pdf(pdf_browser, writer)
            except Exception as e:
                capture_logger.warning(f"Could not generate PDF - {e}")
                capture_logger.warning("Continuing with other outputs...")

        capture_logger.info("=== Capture Complete ===")
        capture_logger.info(f"All files saved to: {writer.output_dir}/")
        for path in writer.written:
            capture_logger.info(f"  - {path.name}")

        return merger.data

    def parse(self) -> PortfolioData:
        """Merged JSON only; logs which tab-like elements the page offers."""
        writer = ArtifactWriter(self.config.portal.output_dir)

        with self.browser_factory() as browser:
            self._open_session(browser)
            self._open_account(browser)
            browser.scroll_to_top()

            writer.ensure_dir()
            writer.record(browser.screenshot(writer.path(PARSE_SCREENSHOT_NAME)))

            candidates = browser.tab_candidates(self.config.portal.tab_candidates)
            capture_logger.info(f"Found potential tabs: {json.dumps(candidates, indent=2)}")

            merger = self._scrape_tabs(browser)
            self._enrich(merger.data)

            output = writer.write_json(merger.data, writer.path(PARSE_OUTPUT_NAME))
            capture_logger.info(f"Saved portfolio data to: {output}")
            self._log_summary(merger)

        return merger.data

    def print_page(self) -> Path:
        """PDF of the account page, named with a second-resolution timestamp."""
        writer = ArtifactWriter(self.config.portal.output_dir, timestamp=long_timestamp())

        with self.browser_factory(headless=True) as browser:
            self._open_session(browser)

            writer.ensure_dir()
            browser.screenshot(writer.path("debug_before_click.png"), full_page=True)

            html = browser.content()
            account = self.config.account
            has_account = bool(
                (account.identifier and account.identifier in html)
                or (account.name and account.name in html)
            )
            capture_logger.info(f"Page contains account identifier: {has_account}")

            clicked = self._open_account(browser, required=False, any_element=True)
            if clicked.success:
                try:
                    browser.screenshot(writer.path("debug_after_click.png"), full_page=True)
                except Exception as e:
                    capture_logger.warning(f"Could not take screenshot: {e}")

            capture_logger.info("Looking for Print button...")
            printed = browser.click_print()
            if printed.success:
                capture_logger.info("Found and clicked Print button")
            else:
                capture_logger.warning("Could not find Print button, will generate PDF anyway")

            filepath = writer.path(f"portfolio_{writer.timestamp}.pdf")
            capture_logger.info(f"Saving PDF to {filepath}...")
            browser.save_pdf(filepath)

        capture_logger.info(f"Successfully saved portfolio to: {filepath.name}")
        return filepath


def build_capture(config: Optional[Config] = None,
                  fetch_quotes: Optional[bool] = None,
                  fetch_news: Optional[bool] = None) -> PortfolioCapture:
    """PortfolioCapture with enrichment sources chosen from config or overrides."""
    config = config or get_config()
    want_quotes = config.enrichment.fetch_quotes if fetch_quotes is None else fetch_quotes
    want_news = config.enrichment.fetch_news if fetch_news is None else fetch_news

    return PortfolioCapture(
        config=config,
        quote_client=QuoteClient() if want_quotes else None,
        news_scraper=NewsScraper(config.enrichment) if want_news else None,
    )
