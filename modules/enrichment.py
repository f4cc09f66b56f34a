"""
Portfolio Capture - Symbol Enrichment

Optional per-symbol lookups merged into portfolio entries:
- Quote data from Yahoo Finance (yfinance)
- Recent news articles (yfinance listing, article text via requests)

Failures never propagate: the missing data is replaced with an
``{"error": message}`` placeholder.
"""
from __future__ import annotations

import random
import logging
from typing import Any, Optional

import requests
import yfinance as yf
from bs4 import BeautifulSoup

from config.settings import EnrichmentConfig, get_config
from modules.table_merger import PortfolioData

# Module logger
enrich_logger = logging.getLogger("portfolio_capture.enrichment")

QUOTE_KEY = "yahooFinanceData"
NEWS_KEY = "news"

QUOTE_FIELDS = (
    "symbol",
    "shortName",
    "longName",
    "currency",
    "exchange",
    "quoteType",
    "regularMarketPrice",
    "regularMarketChange",
    "regularMarketChangePercent",
    "regularMarketDayHigh",
    "regularMarketDayLow",
    "regularMarketVolume",
    "previousClose",
    "open",
    "marketCap",
    "trailingPE",
    "forwardPE",
    "dividendYield",
    "fiftyTwoWeekHigh",
    "fiftyTwoWeekLow",
)


def error_placeholder(error: Exception | str) -> dict[str, str]:
    return {"error": str(error)}


# -----------------------------------------------------------------------------
# Quotes
# -----------------------------------------------------------------------------
class QuoteClient:
    """Looks up a quote snapshot for a ticker."""

    def fetch(self, symbol: str) -> dict[str, Any]:
        try:
            info = yf.Ticker(symbol).info or {}
        except Exception as e:
            enrich_logger.warning(f"Quote lookup failed for {symbol}: {e}")
            return error_placeholder(e)

        if not info:
            return error_placeholder(f"No quote data for {symbol}")

        quote = {key: info[key] for key in QUOTE_FIELDS if info.get(key) is not None}
        if "regularMarketPrice" not in quote and info.get("currentPrice") is not None:
            quote["regularMarketPrice"] = info["currentPrice"]
        return quote


# -----------------------------------------------------------------------------
# News
# -----------------------------------------------------------------------------
def _news_item_fields(item: dict) -> tuple[str, Optional[str]]:
    """
    Title and link of a yfinance news item.

    Newer yfinance releases nest these under ``content``.
    """
    content = item.get("content")
    if isinstance(content, dict):
        title = content.get("title", "")
        link = None
        for key in ("canonicalUrl", "clickThroughUrl"):
            url_info = content.get(key)
            if isinstance(url_info, dict) and url_info.get("url"):
                link = url_info["url"]
                break
        return title, link
    return item.get("title", ""), item.get("link")


class NewsScraper:
    """Lists recent articles for a ticker and fetches their body text."""

    def __init__(self, enrichment_config: Optional[EnrichmentConfig] = None):
        self.config = enrichment_config or get_config().enrichment
        self.session = requests.Session()
        self._setup_session()

    def _setup_session(self) -> None:
        """Configure session with headers."""
        user_agent = random.choice(self.config.user_agents)
        self.session.headers.update({
            "User-Agent": user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
            "Connection": "keep-alive",
        })

    def list_articles(self, symbol: str) -> list[dict[str, str]]:
        """Up to ``max_articles`` title/link pairs, newest first."""
        items = yf.Ticker(symbol).news or []
        articles = []
        for item in items:
            title, link = _news_item_fields(item)
            if not link:
                continue
            articles.append({"title": title, "link": link})
            if len(articles) >= self.config.max_articles:
                break
        return articles

    def fetch_article(self, url: str) -> str:
        """Paragraph text of an article page."""
        response = self.session.get(url, timeout=self.config.request_timeout)
        response.raise_for_status()
        return self.parse_article(response.text)

    def parse_article(self, html: str) -> str:
        soup = BeautifulSoup(html, "lxml")
        container = soup.find("article") or soup.body or soup
        paragraphs = [p.get_text(" ", strip=True) for p in container.find_all("p")]
        text = "\n".join(p for p in paragraphs if p)
        limit = self.config.max_article_chars
        if limit and len(text) > limit:
            text = text[:limit]
        return text

    def fetch(self, symbol: str) -> list[dict[str, str]] | dict[str, str]:
        try:
            articles = self.list_articles(symbol)
        except Exception as e:
            enrich_logger.warning(f"News listing failed for {symbol}: {e}")
            return error_placeholder(e)

        results = []
        for article in articles:
            try:
                content = self.fetch_article(article["link"])
            except requests.RequestException as e:
                enrich_logger.warning(f"Could not fetch article {article['link']}: {e}")
                content = f"Error: {e}"
            results.append({**article, "content": content})

        enrich_logger.info(f"{symbol}: {len(results)} news articles")
        return results


# -----------------------------------------------------------------------------
# Portfolio enrichment
# -----------------------------------------------------------------------------
def enrich_portfolio(portfolio: PortfolioData,
                     quotes: Optional[QuoteClient] = None,
                     news: Optional[NewsScraper] = None) -> PortfolioData:
    """
    Add quote and/or news data to every entry, one symbol at a time.

    Passing ``None`` for a source skips it.
    """
    for symbol, entry in portfolio.items():
        if quotes is not None:
            enrich_logger.info(f"Fetching quote for {symbol}...")
            entry[QUOTE_KEY] = quotes.fetch(symbol)
        if news is not None:
            enrich_logger.info(f"Fetching news for {symbol}...")
            entry[NEWS_KEY] = news.fetch(symbol)
    return portfolio
