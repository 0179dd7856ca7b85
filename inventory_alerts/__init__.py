"""
Inventory alerts package.

This package contains modules for polling product pages, evaluating
stock match rules, persisting the tracked items to YAML, notifying
Telegram and coordinating the polling loop.  See README.md for details.
"""

__version__ = "0.1.0"

__all__ = [
    "config",
    "matcher",
    "store",
    "notifier",
    "scraper",
    "main",
    "utils",
]
