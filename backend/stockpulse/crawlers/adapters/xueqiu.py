"""Xueqiu (雪球) stock discussion crawler.

Uses the JSON search endpoint behind the symbol timeline. The endpoint
expects an exchange-prefixed symbol (SZ002085, SH600519, BJ430047) and
answers anti-bot challenges with an HTML page instead of JSON.
"""

import json
from typing import Any, Dict, List, Optional

import httpx
import structlog

from stockpulse.crawlers.base import BaseCrawler, PageResult, Platform


logger = structlog.get_logger(__name__)

# Shenzhen: 000xxx, 001xxx, 002xxx, 003xxx, 300xxx
SZ_PREFIXES = frozenset({"000", "001", "002", "003", "300"})
# Shanghai: 600xxx, 601xxx, 603xxx, 605xxx, 688xxx
SH_PREFIXES = frozenset({"600", "601", "603", "605", "688"})
# Beijing: 4xxxxx, 8xxxxx
BJ_LEADING_DIGITS = frozenset({"4", "8"})


def derive_symbol(code: str) -> str:
    """Prefix an A-share code with its exchange.

    Examples:
        derive_symbol("002085") -> "SZ002085"
        derive_symbol("600519") -> "SH600519"
        derive_symbol("430047") -> "BJ430047"
        derive_symbol("999999") -> "999999" (logged as unrecognized)
    """
    # Beijing only needs the first digit, so it is checked first
    if code[:1] in BJ_LEADING_DIGITS:
        return f"BJ{code}"

    prefix = code[:3]
    if prefix in SZ_PREFIXES:
        return f"SZ{code}"
    if prefix in SH_PREFIXES:
        return f"SH{code}"

    logger.warning("unrecognized_stock_prefix", prefix=prefix, code=code)
    return code


class XueqiuCrawler(BaseCrawler):
    """Crawler for https://xueqiu.com symbol discussions."""

    platform = Platform.XUEQIU
    delay = 1000  # Xueqiu rate-limits harder than Guba

    API_URL = "https://xueqiu.com/query/v1/symbol/search/status.json"
    PAGE_SIZE = 10

    default_headers = {
        "accept": "application/json, text/plain, */*",
        "accept-language": "zh-CN,zh;q=0.9,en;q=0.8",
        "cache-control": "no-cache",
        "pragma": "no-cache",
        "referer": "https://xueqiu.com/",
        "sec-fetch-dest": "empty",
        "sec-fetch-mode": "cors",
        "sec-fetch-site": "same-origin",
    }

    def build_url(self, stock_code: str, page: int) -> str:
        params = {
            "count": str(self.PAGE_SIZE),
            "comment": "0",  # posts only, no replies
            "symbol": derive_symbol(stock_code),
            "hl": "0",
            "source": "all",
            "sort": "time",
            "page": str(page),
            "q": "",
            "type": "11",  # 11 = posts
        }
        return str(httpx.URL(self.API_URL, params=params))

    def parse(self, body: str, page: int) -> PageResult:
        if body.strip().startswith("<"):
            self.logger.warning("anti_bot_challenge", page=page, preview=body.strip()[:200])
            return PageResult.failure(page, "anti-bot challenge (HTML response)")

        try:
            data = json.loads(body)
        except json.JSONDecodeError as e:
            return PageResult.failure(page, f"response is not valid JSON: {e.msg}")

        posts = self._extract_posts(data)
        if posts is None:
            self.logger.warning("unexpected_response_shape", page=page, preview=body[:200])
            return PageResult.failure(page, "unexpected response shape")
        return PageResult.success(page, posts)

    @staticmethod
    def _extract_posts(data: Any) -> Optional[List[Dict[str, Any]]]:
        """Xueqiu answers {list: [...], count, page, maxPage}."""
        if not isinstance(data, dict) or not isinstance(data.get("list"), list):
            return None
        return [p for p in data["list"] if isinstance(p, dict)]
