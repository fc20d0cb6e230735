"""Tests for the platform crawlers (Eastmoney Guba, Xueqiu).

HTTP is served by httpx.MockTransport so no request leaves the process.
"""

import json

import httpx
import pytest
from structlog.testing import capture_logs

from stockpulse.crawlers.adapters import EastmoneyCrawler, XueqiuCrawler, derive_symbol
from stockpulse.crawlers.base import CrawlerConfig, PageResult, Platform


def guba_page(payload) -> str:
    return (
        "<html><head><script>"
        f"var article_list = {json.dumps(payload, ensure_ascii=False)};"
        "var other_thing = 1;"
        "</script></head><body></body></html>"
    )


def crawler_with(crawler_cls, handler, cookie: str = ""):
    config = CrawlerConfig(
        headers={"user-agent": "pytest"},
        cookie=cookie,
        timeout=5,
        transport=httpx.MockTransport(handler),
    )
    return crawler_cls(config)


# ============================================================================
# TESTS: EXCHANGE PREFIX DERIVATION
# ============================================================================

class TestDeriveSymbol:
    """Tests for derive_symbol()."""

    @pytest.mark.parametrize(
        "code, expected",
        [
            ("002085", "SZ002085"),
            ("000001", "SZ000001"),
            ("300750", "SZ300750"),
            ("600519", "SH600519"),
            ("688981", "SH688981"),
            ("430047", "BJ430047"),
            ("830799", "BJ830799"),
        ],
    )
    def test_known_prefixes(self, code, expected):
        assert derive_symbol(code) == expected

    def test_unmatched_prefix_passes_through(self):
        with capture_logs() as logs:
            symbol = derive_symbol("999999")

        assert symbol == "999999"
        warnings = [e for e in logs if e["event"] == "unrecognized_stock_prefix"]
        assert len(warnings) == 1
        assert warnings[0]["log_level"] == "warning"
        assert warnings[0]["code"] == "999999"

    def test_known_prefix_logs_nothing(self):
        with capture_logs() as logs:
            derive_symbol("600519")

        assert logs == []

    def test_beijing_rule_checked_first(self):
        # "4" and "8" decide on the first digit alone
        assert derive_symbol("400000") == "BJ400000"


# ============================================================================
# TESTS: EASTMONEY
# ============================================================================

class TestEastmoneyCrawler:
    """Tests for the forum-HTML crawler."""

    def test_static_configuration(self):
        crawler = EastmoneyCrawler()
        assert crawler.platform == Platform.EASTMONEY
        assert crawler.delay == 500

    def test_build_url_first_page_has_no_suffix(self):
        crawler = EastmoneyCrawler()
        assert crawler.build_url("002085", 1) == "https://guba.eastmoney.com/list,002085.html"
        assert crawler.build_url("002085", 3) == "https://guba.eastmoney.com/list,002085_3.html"

    def test_parse_extracts_embedded_list(self):
        crawler = EastmoneyCrawler()
        body = guba_page({"re": [{"post_id": 1}, {"post_id": 2}], "count": 2})

        result = crawler.parse(body, page=1)

        assert result.ok
        assert [r["post_id"] for r in result.records] == [1, 2]

    def test_parse_missing_marker_is_soft_failure(self):
        crawler = EastmoneyCrawler()

        result = crawler.parse("<html><body>验证码</body></html>", page=2)

        assert not result.ok
        assert result.records == []
        assert "marker" in result.error

    def test_parse_without_re_field_is_empty_success(self):
        crawler = EastmoneyCrawler()

        result = crawler.parse(guba_page({"count": 0}), page=1)

        assert result.ok
        assert result.records == []

    def test_parse_invalid_json_is_soft_failure(self):
        crawler = EastmoneyCrawler()
        body = "<script>var article_list = {re: [};var x = 1;</script>"

        result = crawler.parse(body, page=1)

        assert not result.ok

    async def test_fetch_page_sends_configured_headers(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["cookie"] = request.headers.get("cookie")
            seen["user-agent"] = request.headers.get("user-agent")
            return httpx.Response(200, text=guba_page({"re": [{"post_id": 7}]}))

        crawler = crawler_with(EastmoneyCrawler, handler, cookie="qgqp_b_id=abc")

        result = await crawler.fetch_page("002085", 2)

        assert result.ok
        assert result.records == [{"post_id": 7}]
        assert seen["url"] == "https://guba.eastmoney.com/list,002085_2.html"
        assert seen["cookie"] == "qgqp_b_id=abc"
        assert seen["user-agent"] == "pytest"

    async def test_fetch_page_http_error_is_soft_failure(self):
        crawler = crawler_with(EastmoneyCrawler, lambda request: httpx.Response(503))

        result = await crawler.fetch_page("002085", 1)

        assert isinstance(result, PageResult)
        assert not result.ok
        assert "503" in result.error

    async def test_health_check(self):
        crawler = crawler_with(
            EastmoneyCrawler,
            lambda request: httpx.Response(200, text=guba_page({"re": []})),
        )
        assert await crawler.health_check("002085") is True


# ============================================================================
# TESTS: XUEQIU
# ============================================================================

class TestXueqiuCrawler:
    """Tests for the JSON-API crawler."""

    def test_static_configuration(self):
        crawler = XueqiuCrawler()
        assert crawler.platform == Platform.XUEQIU
        assert crawler.delay == 1000

    def test_build_url_uses_fixed_params_and_symbol(self):
        crawler = XueqiuCrawler()

        url = httpx.URL(crawler.build_url("600519", 3))

        assert url.host == "xueqiu.com"
        assert url.path == "/query/v1/symbol/search/status.json"
        assert url.params["symbol"] == "SH600519"
        assert url.params["page"] == "3"
        assert url.params["count"] == "10"
        assert url.params["sort"] == "time"
        assert url.params["type"] == "11"
        assert url.params["q"] == ""

    def test_parse_list(self):
        crawler = XueqiuCrawler()
        body = json.dumps({"list": [{"id": 1}, {"id": 2}], "count": 2, "page": 1})

        result = crawler.parse(body, page=1)

        assert result.ok
        assert [r["id"] for r in result.records] == [1, 2]

    def test_parse_html_is_anti_bot_soft_failure(self):
        crawler = XueqiuCrawler()

        result = crawler.parse("  <!DOCTYPE html><html>请完成验证</html>", page=1)

        assert not result.ok
        assert "anti-bot" in result.error

    def test_parse_unexpected_shape(self):
        crawler = XueqiuCrawler()

        result = crawler.parse(json.dumps({"error_code": "400016"}), page=1)

        assert not result.ok

    def test_parse_non_json(self):
        crawler = XueqiuCrawler()

        result = crawler.parse("not json at all", page=1)

        assert not result.ok

    async def test_fetch_page_challenge_response(self):
        crawler = crawler_with(
            XueqiuCrawler,
            lambda request: httpx.Response(200, text="<html><script>challenge()</script></html>"),
        )

        result = await crawler.fetch_page("002085", 1)

        assert not result.ok
        assert result.records == []

    @pytest.mark.parametrize(
        "error_cls",
        [httpx.ConnectError, httpx.ReadTimeout],
    )
    async def test_transport_error_is_single_attempt(self, error_cls):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.url)
            raise error_cls("unreachable", request=request)

        crawler = crawler_with(XueqiuCrawler, handler)

        result = await crawler.fetch_page("600519", 1)

        assert len(calls) == 1
        assert not result.ok
        assert result.records == []
        assert error_cls.__name__ in result.error

    async def test_fetch_page_success(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["symbol"] == "SZ002085"
            return httpx.Response(200, json={"list": [{"id": 42, "text": "hi"}]})

        crawler = crawler_with(XueqiuCrawler, handler, cookie="xq_a_token=t")

        result = await crawler.fetch_page("002085", 1)

        assert result.ok
        assert result.records[0]["id"] == 42
