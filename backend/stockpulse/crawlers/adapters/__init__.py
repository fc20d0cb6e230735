"""Platform-specific crawler implementations.

Each adapter module implements a class inheriting from BaseCrawler.
"""

from .eastmoney import EastmoneyCrawler
from .xueqiu import XueqiuCrawler, derive_symbol

__all__ = [
    "EastmoneyCrawler",
    "XueqiuCrawler",
    "derive_symbol",
]
