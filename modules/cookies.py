"""
Portfolio Capture - Cookie Loader

Reads a browser-extension cookie export (JSON array) and converts each
entry into the cookie format Playwright's ``BrowserContext.add_cookies``
expects.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

# Module logger
cookie_logger = logging.getLogger("portfolio_capture.cookies")

SAME_SITE_MAP = {
    "no_restriction": "None",
    "lax": "Lax",
    "strict": "Strict",
}


class CookieFileError(RuntimeError):
    """Cookie file missing, unreadable, or not a JSON array of objects."""


def convert_cookie(cookie: dict[str, Any]) -> dict[str, Any]:
    """Translate one exported cookie into a Playwright cookie dict."""
    return {
        "name": cookie.get("name"),
        "value": cookie.get("value"),
        "domain": cookie.get("domain"),
        "path": cookie.get("path"),
        "expires": cookie.get("expirationDate") or -1,
        "httpOnly": bool(cookie.get("httpOnly") or False),
        "secure": bool(cookie.get("secure") or False),
        "sameSite": SAME_SITE_MAP.get(cookie.get("sameSite"), "None"),
    }


def load_cookies(cookie_path: Path) -> list[dict[str, Any]]:
    """
    Load and convert every cookie in ``cookie_path``.

    Raises:
        CookieFileError: if the file cannot be read or parsed.
    """
    cookie_path = Path(cookie_path)
    cookie_logger.info(f"Loading cookies from {cookie_path}...")

    try:
        with open(cookie_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise CookieFileError(f"Could not read cookie file {cookie_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise CookieFileError(f"Cookie file {cookie_path} is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise CookieFileError(f"Cookie file {cookie_path} must contain a JSON array")

    cookies = []
    for index, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise CookieFileError(f"Cookie #{index} in {cookie_path} is not an object")
        cookies.append(convert_cookie(entry))

    return cookies
