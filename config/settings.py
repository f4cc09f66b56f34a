"""
Portfolio Capture - Configuration Settings

Centralized configuration management with environment variable loading
for browser options, account matching, output paths, and enrichment.
"""
from __future__ import annotations

import os
import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
BASE_DIR = Path(__file__).parent.parent

# Load from project root .env file
_env_path = BASE_DIR / ".env"
if _env_path.exists():
    load_dotenv(_env_path)

DEFAULT_COOKIE_PATH = BASE_DIR / "cookie.json"
DEFAULT_OUTPUT_DIR = BASE_DIR / "portfolio"

# -----------------------------------------------------------------------------
# Logging Configuration
# -----------------------------------------------------------------------------
LOG_FORMAT = "[%(asctime)s] %(levelname)s [%(name)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format=LOG_FORMAT,
    datefmt=LOG_DATE_FORMAT
)

logger = logging.getLogger("portfolio_capture")


def env_flag(name: str, default: bool = False) -> bool:
    """Read a bool-as-string environment variable ("true"/"1"/"yes")."""
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("true", "1", "yes", "on")


def env_int(name: str, default: int) -> int:
    """Read an integer environment variable, falling back on bad input."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid integer for {name}: {raw!r}, using {default}")
        return default


# -----------------------------------------------------------------------------
# Browser Configuration
# -----------------------------------------------------------------------------
@dataclass
class BrowserConfig:
    """Chromium launch and timeout settings."""
    headless: bool = field(default_factory=lambda: env_flag("PUPPETEER_HEADLESS"))
    # Milliseconds, applied to launch and page navigation
    timeout_ms: int = field(default_factory=lambda: env_int("PUPPETEER_TIMEOUT", 60000))
    # After an account click that follows a link
    navigation_wait_ms: int = 10000
    # Readiness predicates (tables rendered, body populated)
    render_timeout_ms: int = 15000
    launch_args: list[str] = field(default_factory=lambda: [
        "--no-sandbox",
        "--disable-setuid-sandbox",
        "--disable-dev-shm-usage",
        "--disable-accelerated-2d-canvas",
        "--disable-gpu",
    ])


# -----------------------------------------------------------------------------
# Account Configuration
# -----------------------------------------------------------------------------
@dataclass
class AccountConfig:
    """Text fragments used to find the target account link."""
    identifier: str = field(default_factory=lambda: os.getenv("ACCOUNT_IDENTIFIER", ""))
    name: str = field(default_factory=lambda: os.getenv("ACCOUNT_NAME", ""))

    def validate(self) -> bool:
        """Check if at least one account matcher is configured."""
        if not self.identifier and not self.name:
            logger.warning("Neither ACCOUNT_IDENTIFIER nor ACCOUNT_NAME is configured")
            return False
        return True


# -----------------------------------------------------------------------------
# Portal Configuration
# -----------------------------------------------------------------------------
@dataclass
class PortalConfig:
    """Portfolio site, tab order, and file locations."""
    portfolios_url: str = field(
        default_factory=lambda: os.getenv("PORTFOLIO_URL", "https://finance.yahoo.com/portfolios/")
    )
    tabs: tuple[str, ...] = ("Summary", "Holdings", "Fundamentals")
    # Names logged by the parse recipe when listing tab candidates
    tab_candidates: tuple[str, ...] = ("Summary", "Holdings", "Fundamentals", "Performance")
    cookie_path: Path = field(
        default_factory=lambda: Path(os.getenv("COOKIE_FILE", str(DEFAULT_COOKIE_PATH)))
    )
    output_dir: Path = field(
        default_factory=lambda: Path(os.getenv("PORTFOLIO_OUTPUT_DIR", str(DEFAULT_OUTPUT_DIR)))
    )


# -----------------------------------------------------------------------------
# Enrichment Configuration
# -----------------------------------------------------------------------------
@dataclass
class EnrichmentConfig:
    """Optional quote and news lookups per symbol."""
    fetch_quotes: bool = field(default_factory=lambda: env_flag("FETCH_QUOTES"))
    fetch_news: bool = field(default_factory=lambda: env_flag("FETCH_NEWS"))
    max_articles: int = 5
    request_timeout: int = 30
    # Articles whose body text is longer are truncated
    max_article_chars: Optional[int] = 5000

    # User agents for rotation
    user_agents: list[str] = field(default_factory=lambda: [
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    ])


# -----------------------------------------------------------------------------
# Global Config Instance
# -----------------------------------------------------------------------------
@dataclass
class Config:
    """Main configuration container."""
    browser: BrowserConfig = field(default_factory=BrowserConfig)
    account: AccountConfig = field(default_factory=AccountConfig)
    portal: PortalConfig = field(default_factory=PortalConfig)
    enrichment: EnrichmentConfig = field(default_factory=EnrichmentConfig)

    def validate_all(self) -> dict[str, bool]:
        """Validate the configuration groups that can be misconfigured."""
        return {
            "account": self.account.validate(),
            "cookies": self.portal.cookie_path.exists(),
        }


# Singleton config instance
config = Config()


def get_config() -> Config:
    """Get the global configuration instance."""
    return config
