"""Map platform-native post records onto CanonicalPost.

Each platform gets one pure mapping function. normalize() dispatches on the
platform tag. Missing source fields fall back to defaults ("" / 0 /
ANONYMOUS_NICKNAME) so no None leaks into the canonical entity, except for
``content`` which is genuinely optional.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Mapping, Optional, Union

import structlog

from stockpulse.core.exceptions import UnsupportedPlatformError
from stockpulse.crawlers.base import (
    ANONYMOUS_NICKNAME,
    Author,
    CanonicalPost,
    Platform,
    make_post_id,
)

logger = structlog.get_logger(__name__)


# Eastmoney publishes China Standard Time without an offset
SOURCE_TZ = timezone(timedelta(hours=8), name="UTC+08:00")

XUEQIU_TITLE_FALLBACK_CHARS = 50

_LOCAL_TIME_PATTERN = re.compile(
    r"^(\d{4})-(\d{1,2})-(\d{1,2})[ T](\d{1,2}):(\d{2})(?::(\d{2})(?:\.\d+)?)?$"
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_local_time(
    value: Optional[str],
    tz: timezone = SOURCE_TZ,
    now: Optional[datetime] = None,
) -> datetime:
    """Parse a local "YYYY-MM-DD HH:MM:SS" string into an aware UTC datetime.

    Falls back to ``now`` and logs a warning when the value is empty or
    malformed. Never raises.

    Example:
        "2026-01-06 17:46:04" -> 2026-01-06T09:46:04+00:00
    """
    fallback = now or _utcnow()
    if not value:
        logger.warning("timestamp_missing", fallback=fallback.isoformat())
        return fallback

    match = _LOCAL_TIME_PATTERN.match(str(value).strip())
    if not match:
        logger.warning("timestamp_parse_failed", value=value)
        return fallback

    year, month, day, hour, minute, second = (int(g or 0) for g in match.groups())
    try:
        local = datetime(year, month, day, hour, minute, second, tzinfo=tz)
    except ValueError:
        logger.warning("timestamp_parse_failed", value=value)
        return fallback
    return local.astimezone(timezone.utc)


def from_epoch_millis(
    value: Union[int, float, str, None],
    now: Optional[datetime] = None,
) -> datetime:
    """Convert epoch milliseconds into an aware UTC datetime, or ``now``."""
    fallback = now or _utcnow()
    if value is None or value == "":
        return fallback
    try:
        millis = int(float(value))
        return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        logger.warning("epoch_parse_failed", value=value)
        return fallback


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _as_count(value: Any) -> int:
    """Coerce a counter to a non-negative int; junk becomes 0."""
    try:
        count = int(value)
    except (TypeError, ValueError):
        return 0
    return max(count, 0)


def _require_native_id(raw: Mapping[str, Any], key: str, platform: str) -> str:
    native_id = _as_str(raw.get(key)).strip()
    if not native_id:
        raise ValueError(f"{platform} record has no '{key}'")
    return native_id


def normalize_eastmoney(raw: Mapping[str, Any], now: Optional[datetime] = None) -> CanonicalPost:
    """Convert an entry of Guba's ``article_list.re`` into a CanonicalPost."""
    now = now or _utcnow()
    native_id = _require_native_id(raw, "post_id", Platform.EASTMONEY.value)

    return CanonicalPost(
        id=make_post_id(Platform.EASTMONEY.value, native_id),
        title=_as_str(raw.get("post_title")),
        content=None,  # listing pages carry no body
        author=Author(
            id=_as_str(raw.get("user_id")),
            nickname=_as_str(raw.get("user_nickname")) or ANONYMOUS_NICKNAME,
        ),
        stock_code=_as_str(raw.get("stockbar_code")),
        publish_time=parse_local_time(raw.get("post_publish_time"), now=now),
        click_count=_as_count(raw.get("post_click_count")),
        comment_count=_as_count(raw.get("post_comment_count")),
        source=Platform.EASTMONEY.value,
        raw_data=dict(raw),
        created_at=now,
    )


def normalize_xueqiu(raw: Mapping[str, Any], now: Optional[datetime] = None) -> CanonicalPost:
    """Convert an entry of Xueqiu's ``list`` into a CanonicalPost."""
    now = now or _utcnow()
    native_id = _require_native_id(raw, "id", Platform.XUEQIU.value)

    text = _as_str(raw.get("text"))
    title = _as_str(raw.get("title")) or text[:XUEQIU_TITLE_FALLBACK_CHARS]
    content = text or _as_str(raw.get("description")) or None

    user = raw.get("user")
    if not isinstance(user, Mapping):
        user = {}

    return CanonicalPost(
        id=make_post_id(Platform.XUEQIU.value, native_id),
        title=title,
        content=content,
        author=Author(
            id=_as_str(user.get("id")),
            nickname=_as_str(user.get("screen_name")) or ANONYMOUS_NICKNAME,
        ),
        stock_code=_as_str(raw.get("symbol")),
        publish_time=from_epoch_millis(raw.get("created_at"), now=now),
        click_count=_as_count(raw.get("view_count")),
        comment_count=_as_count(raw.get("reply_count")),
        source=Platform.XUEQIU.value,
        raw_data=dict(raw),
        created_at=now,
    )


NORMALIZERS: Dict[str, Callable[..., CanonicalPost]] = {
    Platform.EASTMONEY.value: normalize_eastmoney,
    Platform.XUEQIU.value: normalize_xueqiu,
}


def normalize(
    raw: Mapping[str, Any],
    platform: Union[Platform, str],
    now: Optional[datetime] = None,
) -> CanonicalPost:
    """Dispatch a raw record to its platform's mapping function.

    Raises:
        UnsupportedPlatformError: If no mapping function exists for platform
        ValueError: If the record has no native id
    """
    key = platform.value if isinstance(platform, Platform) else str(platform)
    mapper = NORMALIZERS.get(key)
    if mapper is None:
        raise UnsupportedPlatformError(key, NORMALIZERS.keys())
    return mapper(raw, now=now)
