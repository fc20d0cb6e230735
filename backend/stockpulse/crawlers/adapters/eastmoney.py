"""Eastmoney Guba (东方财富股吧) forum crawler.

Listing pages are server-rendered HTML with the post list embedded as a
JavaScript assignment: ``var article_list = {...};``. The crawler pulls
that object out of the page and returns its ``re`` list.
"""

import json
import re
from typing import Any, Dict, List

from stockpulse.crawlers.base import BaseCrawler, PageResult, Platform


ARTICLE_LIST_PATTERN = re.compile(
    r"var\s+article_list\s*=\s*(\{.*?\});\s*var", re.DOTALL
)


class EastmoneyCrawler(BaseCrawler):
    """Crawler for https://guba.eastmoney.com stock forums."""

    platform = Platform.EASTMONEY
    delay = 500

    BASE_URL = "https://guba.eastmoney.com"

    default_headers = {
        "accept": (
            "text/html,application/xhtml+xml,application/xml;q=0.9,"
            "image/avif,image/webp,image/apng,*/*;q=0.8"
        ),
        "accept-language": "zh-CN,zh;q=0.9",
        "cache-control": "no-cache",
        "pragma": "no-cache",
        "sec-fetch-dest": "document",
        "sec-fetch-mode": "navigate",
        "sec-fetch-site": "same-site",
        "sec-fetch-user": "?1",
        "upgrade-insecure-requests": "1",
    }

    def build_url(self, stock_code: str, page: int) -> str:
        """Page 1 has no page suffix: list,002085.html vs list,002085_2.html."""
        if page == 1:
            return f"{self.BASE_URL}/list,{stock_code}.html"
        return f"{self.BASE_URL}/list,{stock_code}_{page}.html"

    def parse(self, body: str, page: int) -> PageResult:
        match = ARTICLE_LIST_PATTERN.search(body)
        if not match:
            # Layout drift or a captcha page, not an exception
            return PageResult.failure(page, "article_list marker not found")

        try:
            data = json.loads(match.group(1))
        except json.JSONDecodeError as e:
            return PageResult.failure(page, f"article_list is not valid JSON: {e.msg}")

        return PageResult.success(page, self._extract_posts(data))

    @staticmethod
    def _extract_posts(data: Any) -> List[Dict[str, Any]]:
        if not isinstance(data, dict):
            return []
        posts = data.get("re") or []
        return [p for p in posts if isinstance(p, dict)]
