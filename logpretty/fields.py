"""Field formatters: one pure function per rendered field.

Every formatter accepts absent input and returns None when there is nothing
to show, so callers can filter parts instead of checking each field.
"""

import math
import re
from datetime import datetime
from http import HTTPStatus
from typing import Any, Callable, Mapping

from logpretty.records import ErrorInfo, HttpMessage
from logpretty.styles import Style, Styler
from logpretty.useragent import UserAgentInfo

Dumper = Callable[[Mapping[str, Any]], str]
UserAgentParser = Callable[[str], UserAgentInfo]

# Tier name → inclusive upper threshold, ascending
LEVELS = {
    "trace": 10,
    "debug": 20,
    "info": 30,
    "warn": 40,
    "error": 50,
    "fatal": 60,
}

LEVEL_STYLES = {
    "trace": Style.NEUTRAL,
    "debug": Style.NEUTRAL,
    "info": Style.ACCENT_1,
    "warn": Style.ACCENT_2,
    "error": Style.ALERT,
    "fatal": Style.ALERT,
}

LEVEL_WIDTH = 5

SAFE_METHODS = frozenset({"GET", "HEAD"})

REDACTED_HEADERS = frozenset({
    # connection / framing
    "date", "host", "connection", "keep-alive", "content-length",
    "content-encoding", "content-type", "transfer-encoding", "origin",
    "user-agent", "etag",
    # negotiation
    "accept", "accept-encoding", "accept-language", "accept-ranges",
    # CORS
    "access-control-allow-origin", "access-control-allow-credentials",
    "access-control-allow-headers", "access-control-allow-methods",
    "access-control-expose-headers", "access-control-max-age",
    "access-control-request-headers", "access-control-request-method",
    # DNT / proxies
    "dnt", "forwarded", "x-forwarded-for", "x-forwarded-host",
    "x-forwarded-port", "x-forwarded-proto", "x-real-ip",
    # cookies
    "cookie", "set-cookie",
    # caching
    "cache-control", "pragma", "expires", "last-modified",
    "if-modified-since", "if-none-match", "vary", "age",
    # CSP / hardening
    "content-security-policy", "content-security-policy-report-only",
    "x-content-security-policy", "x-webkit-csp", "x-content-type-options",
    "x-frame-options", "x-xss-protection", "strict-transport-security",
    "x-powered-by",
    # APM vendors
    "x-newrelic-app-data", "x-newrelic-id", "x-newrelic-transaction",
    "newrelic", "traceparent", "tracestate", "x-datadog-trace-id",
    "x-datadog-parent-id", "x-datadog-sampling-priority", "x-datadog-origin",
})

REFERER_MAX_LENGTH = 63
REFERER_KEEP = 60
ELLIPSIS = "..."

SEPARATOR = "; "

_LEADING_INT_RE = re.compile(r"^\s*\+?(\d+)")


def join_parts(parts, sep: str = " ") -> str | None:
    """Join the non-empty parts, or None if nothing is left."""
    present = [p for p in parts if p]
    return sep.join(present) if present else None


# ---------------------------------------------------------------------------
# Summary line fields
# ---------------------------------------------------------------------------


def _to_datetime(value: Any) -> datetime | None:
    """Epoch milliseconds or ISO 8601 → local datetime."""
    if isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return dt.astimezone() if dt.tzinfo else dt
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        return datetime.fromtimestamp(value / 1000)
    except (OverflowError, OSError, ValueError):
        return None


def format_time(value: Any) -> str | None:
    """Render HH:MM:SS.mmm in local time."""
    if value is None:
        return None
    dt = _to_datetime(value)
    if dt is None:
        return None
    return f"{dt:%H:%M:%S}.{dt.microsecond // 1000:03d}"


def format_origin(hostname: str | None, pid: int | None) -> str | None:
    if hostname is None and pid is None:
        return None
    return f"{hostname or ''}{'' if pid is None else f'#{pid}'}"


def resolve_level_name(level: int | float) -> str | None:
    """First tier whose threshold is >= level; None above the last tier."""
    for name, threshold in LEVELS.items():
        if level <= threshold:
            return name
    return None


def format_level(level: int | float | None, style: Styler) -> str | None:
    if level is None or isinstance(level, bool) or not isinstance(level, (int, float)):
        return None
    if isinstance(level, float) and math.isnan(level):
        return None

    name = resolve_level_name(level)
    if name is None:
        text, tag = _format_number(level), Style.ALERT
    else:
        text, tag = name, LEVEL_STYLES[name]
    padding = " " * max(0, LEVEL_WIDTH - len(text))
    return style(text, tag) + padding


def format_name(name: str | None, style: Styler) -> str | None:
    if not name:
        return None
    return ":".join(style(part, Style.LABEL) for part in name.split(":"))


def is_short_message(message: str, limit: int) -> bool:
    return len(message) <= limit and "\n" not in message


def format_message(message: str | None, style: Styler) -> str | None:
    if not message:
        return None
    return style(message, Style.HIGHLIGHT)


def _format_number(value: int | float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_duration(duration: Any, style: Styler) -> str | None:
    if isinstance(duration, bool) or not isinstance(duration, (int, float)):
        return None
    if not math.isfinite(duration):
        return None
    return _format_number(duration) + style("ms", Style.DE_EMPHASIS)


# ---------------------------------------------------------------------------
# HTTP fields
# ---------------------------------------------------------------------------


def format_bytes(size: int, style: Styler) -> str:
    """Bytes below 1024 as B, otherwise rounded half-up to kB."""
    if size < 1024:
        return f"{size}" + style("B", Style.DE_EMPHASIS)
    return f"{math.floor(size / 1024 + 0.5)}" + style("kB", Style.DE_EMPHASIS)


def get_content_length(headers: Mapping[str, Any] | None) -> int | None:
    """Leading integer of the content-length header, if any."""
    if not headers:
        return None
    value = headers.get("content-length")
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    match = _LEADING_INT_RE.match(str(value))
    if not match:
        return None
    return int(match.group(1))


def format_method(method: str | None, style: Styler) -> str | None:
    if not method:
        return None
    tag = Style.ACCENT_1 if method.upper() in SAFE_METHODS else Style.ACCENT_2
    return style(method, tag)


def format_status_code(status_code: int | None, style: Styler) -> str | None:
    if status_code is None:
        return None
    if status_code >= 500:
        tag = Style.ALERT
    elif status_code >= 400:
        tag = Style.WARNING
    else:
        tag = Style.SUCCESS
    return style(str(status_code), tag)


def reason_phrase(status_code: int | None) -> str | None:
    if status_code is None:
        return None
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return None


def format_content(headers: Mapping[str, Any] | None, style: Styler) -> str | None:
    """content-type; content-encoding; size. Missing parts are skipped."""
    if not headers:
        return None
    parts = []
    for key in ("content-type", "content-encoding"):
        value = headers.get(key)
        if value:
            parts.append(style(str(value), Style.DE_EMPHASIS))
    length = get_content_length(headers)
    if length is not None:
        parts.append(format_bytes(length, style))
    return join_parts(parts, SEPARATOR)


def describe_user_agent(ua_string: str | None, parse_ua: UserAgentParser) -> str | None:
    if not ua_string:
        return None
    info = parse_ua(ua_string)
    if not info.recognized:
        return ua_string
    return join_parts([info.agent, info.os, info.device], SEPARATOR) or ua_string


def format_remote_address(address: str | None, port: int | None) -> str | None:
    if not address:
        return None
    return address if port is None else f"{address}:{port}"


def format_remote(
    message: HttpMessage,
    headers: Mapping[str, Any] | None,
    parse_ua: UserAgentParser,
) -> str | None:
    """User agent description; remote address."""
    ua_string = (headers or {}).get("user-agent")
    return join_parts([
        describe_user_agent(str(ua_string) if ua_string else None, parse_ua),
        format_remote_address(message.remote_address, message.remote_port),
    ], SEPARATOR)


def redact_headers(headers: Mapping[str, Any]) -> dict[str, Any]:
    """Drop redacted headers and shorten long referers."""
    kept = {}
    for key, value in headers.items():
        if key in REDACTED_HEADERS:
            continue
        if key == "referer" and isinstance(value, str) and len(value) > REFERER_MAX_LENGTH:
            value = value[:REFERER_KEEP] + ELLIPSIS
        kept[key] = value
    return kept


def format_headers(headers: Mapping[str, Any] | None, dump: Dumper) -> str | None:
    if not headers:
        return None
    kept = redact_headers(headers)
    if not kept:
        return None
    return dump(kept)


# ---------------------------------------------------------------------------
# Error and metadata
# ---------------------------------------------------------------------------


def format_error(err: ErrorInfo | None, dump: Dumper) -> str | None:
    """Stack trace if present, else 'Error: <message>', then any extra props."""
    if err is None:
        return None
    if err.stack:
        head = err.stack.rstrip("\n")
    elif err.message or err.name:
        head = f"Error: {err.message or err.name}"
    else:
        head = "Error"
    return join_parts([head, format_metadata(err.extra, dump)], "\n")


def format_metadata(metadata: Mapping[str, Any] | None, dump: Dumper) -> str | None:
    if not metadata:
        return None
    return dump(metadata)
