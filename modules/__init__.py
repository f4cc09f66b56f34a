# Portfolio Capture - Modules Package
"""
Modules for the portfolio capture tool.

- table_merger: HTML table extraction and symbol-keyed merge
- cookies: cookie export loading and conversion
- element_locator: find-and-click strategies by visible text
- browser: Playwright Chromium session
- artifacts: timestamped output files and JSON writer
- enrichment: quote and news lookups per symbol
- portfolio_capture: capture, parse, and print recipes

Note: Install the browser with: pip install playwright && playwright install chromium
"""
