"""Record model and line classifier: frozen dataclasses built from JSON lines."""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from logpretty.headers import parse_header

logger = logging.getLogger(__name__)

# Keys with a dedicated rendering; everything else is metadata
RESERVED_KEYS = frozenset({
    "v", "src", "level", "time", "name", "hostname", "pid",
    "msg", "duration", "req", "res", "err",
})

ERROR_KEYS = frozenset({"stack", "message", "name"})


def _number(value: Any) -> int | float | None:
    """Return value if it is a JSON number (bools excluded), else None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def _integer(value: Any) -> int | None:
    number = _number(value)
    if number is None:
        return None
    try:
        return int(number)
    except (ValueError, OverflowError):
        # NaN / Infinity
        return None


def _string(value: Any) -> str | None:
    return value if isinstance(value, str) else None


@dataclass(frozen=True)
class HttpMessage:
    method: str | None = None
    url: str | None = None
    remote_address: str | None = None
    remote_port: int | None = None
    status_code: int | None = None
    headers: Mapping[str, Any] | None = None
    raw_header: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "HttpMessage":
        url = None
        for key in ("originalUrl", "url", "path"):
            if isinstance(data.get(key), str):
                url = data[key]
                break

        headers = data.get("headers")
        if not isinstance(headers, dict):
            headers = None

        return cls(
            method=_string(data.get("method")),
            url=url,
            remote_address=_string(data.get("remoteAddress")),
            remote_port=_integer(data.get("remotePort")),
            status_code=_integer(data.get("statusCode")),
            headers=headers,
            raw_header=_string(data.get("header")),
        )

    def get_headers(self) -> dict[str, Any] | None:
        """Pre-parsed headers win; otherwise run the raw blob through the parser."""
        if self.headers is not None:
            return {str(k).lower(): v for k, v in self.headers.items()}
        if self.raw_header is not None:
            return parse_header(self.raw_header)
        return None


@dataclass(frozen=True)
class ErrorInfo:
    stack: str | None = None
    message: str | None = None
    name: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_value(cls, value: Any) -> "ErrorInfo | None":
        if isinstance(value, str):
            return cls(message=value)
        if not isinstance(value, dict):
            return None
        return cls(
            stack=_string(value.get("stack")),
            message=_string(value.get("message")),
            name=_string(value.get("name")),
            extra={k: v for k, v in value.items() if k not in ERROR_KEYS},
        )


@dataclass(frozen=True)
class LogRecord:
    time: int | float | str | None = None
    hostname: str | None = None
    pid: int | None = None
    level: int | float | None = None
    name: str | None = None
    msg: str | None = None
    duration: int | float | None = None
    req: HttpMessage | None = None
    res: HttpMessage | None = None
    err: ErrorInfo | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "LogRecord":
        """Build a record from a decoded JSON object. Wrongly-typed fields become None."""
        time = data.get("time")
        if _number(time) is None and not isinstance(time, str):
            time = None

        msg = data.get("msg")
        if msg is not None and not isinstance(msg, str):
            msg = str(msg)

        req = data.get("req")
        res = data.get("res")

        return cls(
            time=time,
            hostname=_string(data.get("hostname")),
            pid=_integer(data.get("pid")),
            level=_number(data.get("level")),
            name=_string(data.get("name")),
            msg=msg,
            duration=_number(data.get("duration")),
            req=HttpMessage.from_dict(req) if isinstance(req, dict) else None,
            res=HttpMessage.from_dict(res) if isinstance(res, dict) else None,
            err=ErrorInfo.from_value(data.get("err")),
            metadata={k: v for k, v in data.items() if k not in RESERVED_KEYS},
        )


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Parsed:
    record: LogRecord


@dataclass(frozen=True)
class NotJson:
    line: bytes


def try_parse_json(line: bytes) -> dict | None:
    """Decode and parse one line. Returns None instead of raising."""
    # ValueError covers bad UTF-8, JSONDecodeError and the int digit limit
    try:
        data = json.loads(line.decode("utf-8"))
    except (ValueError, RecursionError) as e:
        logger.debug("Line looks like JSON but failed to parse: %s", e)
        return None
    if not isinstance(data, dict):
        return None
    return data


def classify(line: bytes) -> Parsed | NotJson:
    """Lines whose first byte is '{' are tried as JSON; everything else is text."""
    if line[:1] == b"{":
        data = try_parse_json(line)
        if data is not None:
            return Parsed(LogRecord.from_dict(data))
    return NotJson(line)
