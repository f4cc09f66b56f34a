"""
Portfolio Capture - Element Locators

Strategies that find an element by its visible text and click it inside
the page. Each strategy owns its in-page script, so selector heuristics
can be swapped without touching extraction or merge logic.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

# Module logger
locator_logger = logging.getLogger("portfolio_capture.element_locator")


@dataclass
class ClickResult:
    """Outcome of a locate-and-click attempt."""
    success: bool
    tag: Optional[str] = None
    href: Optional[str] = None
    text: Optional[str] = None

    @property
    def follows_link(self) -> bool:
        """True when the clicked element carried an href worth waiting on."""
        return bool(self.success and self.href)

    @classmethod
    def from_page(cls, raw: Any) -> "ClickResult":
        """Build from the plain object returned by ``page.evaluate``."""
        if isinstance(raw, bool):
            return cls(success=raw)
        if not isinstance(raw, dict):
            return cls(success=False)
        href = raw.get("href") or None
        return cls(
            success=bool(raw.get("success")),
            tag=raw.get("tag"),
            href=href,
            text=raw.get("text"),
        )


class ElementLocator:
    """Base strategy: evaluate ``script`` in the page with ``args``."""

    script: str = ""

    def arguments(self, target: str) -> Any:
        return target

    def activate(self, page, target: str) -> ClickResult:
        result = ClickResult.from_page(page.evaluate(self.script, self.arguments(target)))
        locator_logger.debug(f"{type(self).__name__}({target!r}) -> {result}")
        return result


# -----------------------------------------------------------------------------
# Tabs
# -----------------------------------------------------------------------------
TAB_CLICK_SCRIPT = """(name) => {
    const isClickable = (node) =>
        node.tagName === 'BUTTON' ||
        node.tagName === 'A' ||
        node.getAttribute('role') === 'tab' ||
        node.getAttribute('role') === 'button' ||
        !!node.onclick ||
        window.getComputedStyle(node).cursor === 'pointer';

    for (const el of Array.from(document.querySelectorAll('*'))) {
        if ((el.textContent || '').trim() !== name) continue;
        let clickable = el;
        for (let i = 0; i < 3 && clickable; i++) {
            if (isClickable(clickable)) {
                clickable.click();
                return { success: true, tag: clickable.tagName };
            }
            clickable = clickable.parentElement;
        }
        el.click();
        return { success: true, tag: el.tagName };
    }
    return { success: false };
}"""


class TabLocator(ElementLocator):
    """
    Exact-text match, then walk up to three ancestors for something
    clickable. With no clickable ancestor the matched element itself is
    clicked, which may be a no-op on the real site.
    """

    script = TAB_CLICK_SCRIPT


# -----------------------------------------------------------------------------
# Account link
# -----------------------------------------------------------------------------
ACCOUNT_CLICK_SCRIPT = """([identifier, name, anyElement]) => {
    const matches = (text) =>
        (identifier && text.includes(identifier)) || (name && text.includes(name));

    for (const link of Array.from(document.querySelectorAll('a, button, [role="button"]'))) {
        if (matches(link.textContent || '')) {
            link.click();
            return { success: true, tag: link.tagName, href: link.href || null };
        }
    }

    if (anyElement) {
        for (const el of Array.from(document.querySelectorAll('*'))) {
            const text = el.textContent || '';
            if (matches(text)) {
                el.click();
                return { success: true, tag: el.tagName, text: text.substring(0, 50) };
            }
        }
    }
    return { success: false };
}"""


class AccountLinkLocator(ElementLocator):
    """
    Substring match of the account identifier or name against links and
    buttons. ``any_element`` widens the search to every element.
    """

    script = ACCOUNT_CLICK_SCRIPT

    def __init__(self, identifier: str = "", name: str = "", any_element: bool = False):
        self.identifier = identifier
        self.name = name
        self.any_element = any_element

    def arguments(self, target: str) -> Any:
        return [self.identifier or None, self.name or None, self.any_element]

    def activate(self, page, target: str = "") -> ClickResult:
        if not self.identifier and not self.name:
            locator_logger.warning("No account identifier or name to match")
            return ClickResult(success=False)
        return super().activate(page, target or self.identifier or self.name)


# -----------------------------------------------------------------------------
# Print button
# -----------------------------------------------------------------------------
PRINT_CLICK_SCRIPT = """(label) => {
    const lower = label.toLowerCase();
    for (const btn of Array.from(document.querySelectorAll('button, a, [role="button"]'))) {
        const text = (btn.textContent || '').trim();
        const ariaLabel = btn.getAttribute('aria-label') || '';
        const title = btn.getAttribute('title') || '';
        if (text.includes(label) ||
            ariaLabel.includes(label) || ariaLabel.includes(lower) ||
            title.includes(label) || title.includes(lower)) {
            btn.click();
            return { success: true, tag: btn.tagName, text: text };
        }
    }
    return { success: false };
}"""


class PrintButtonLocator(ElementLocator):
    """Text, aria-label, or title containing "Print"."""

    script = PRINT_CLICK_SCRIPT

    def activate(self, page, target: str = "Print") -> ClickResult:
        return super().activate(page, target)


# -----------------------------------------------------------------------------
# Diagnostics
# -----------------------------------------------------------------------------
TAB_CANDIDATES_SCRIPT = """(names) => {
    const found = [];
    for (const el of Array.from(document.querySelectorAll('*'))) {
        const raw = el.textContent || '';
        if (names.includes(raw)) {
            found.push({
                tag: el.tagName,
                text: raw.trim(),
                className: typeof el.className === 'string' ? el.className : '',
                role: el.getAttribute('role'),
                type: el.getAttribute('type'),
            });
        }
    }
    return found;
}"""


def find_tab_candidates(page, names) -> list[dict]:
    """List elements whose untrimmed text content is exactly one of ``names``."""
    return page.evaluate(TAB_CANDIDATES_SCRIPT, list(names)) or []
