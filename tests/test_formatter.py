"""Tests for logpretty/formatter.py"""

from datetime import datetime

import pytest

from logpretty.formatter import RecordFormatter, indent
from logpretty.records import LogRecord
from logpretty.styles import ANSI, CODES, RESET, Style
from logpretty.useragent import UserAgentInfo


def _time(ms: int) -> str:
    dt = datetime.fromtimestamp(ms / 1000)
    return f"{dt:%H:%M:%S}.{dt.microsecond // 1000:03d}"


def _record(**data) -> LogRecord:
    return LogRecord.from_dict(data)


class TestIndent:
    def test_every_line_prefixed(self):
        assert indent("a\nb") == "  a\n  b"

    def test_custom_prefix(self):
        assert indent("a", prefix="> ") == "> a"


class TestSummaryLine:
    def test_short_message_inline(self, formatter):
        out = formatter.format(_record(time=1000, level=30, msg="hello"))
        assert out == f"{_time(1000)} info  hello\n"

    def test_all_summary_fields(self, formatter):
        out = formatter.format(_record(
            time=1500, hostname="web-1", pid=42, level=50,
            name="http:server", msg="request failed", duration=12,
        ))
        assert out == f"{_time(1500)} web-1#42 error http:server request failed 12ms\n"

    def test_level_padding_not_left_dangling(self, formatter):
        assert formatter.format(_record(level=30)) == "info\n"
        assert formatter.format(_record(level=70)) == "70\n"

    def test_short_message_trailing_spaces_kept(self, formatter):
        assert formatter.format(_record(level=30, msg="ready  ")) == "info  ready  \n"

    def test_level_padding_trimmed_in_color(self, fake_dump, fake_ua):
        formatter = RecordFormatter(styler=ANSI, dumper=fake_dump, user_agent_parser=fake_ua)
        out = formatter.format(_record(level=30))
        assert out == f"{CODES[Style.ACCENT_1]}info{RESET}\n"

    def test_empty_record(self, formatter):
        assert formatter.format(_record()) == "\n"

    def test_empty_message_omitted(self, formatter):
        assert formatter.format(_record(level=40, msg="", duration=3)) == "warn  3ms\n"


class TestDetailBlock:
    def test_long_message_indented_verbatim(self, formatter):
        out = formatter.format(_record(level=30, msg="line one\n  line two"))
        assert out == "info\n  line one\n    line two\n"

    def test_message_over_threshold(self, formatter):
        msg = "x" * 61
        assert formatter.format(_record(msg=msg)) == f"\n  {msg}\n"

    def test_threshold_is_configurable(self, fake_dump, fake_ua):
        formatter = RecordFormatter(dumper=fake_dump, user_agent_parser=fake_ua,
                                    short_message_length=5)
        assert formatter.format(_record(msg="hello!")) == "\n  hello!\n"
        assert formatter.format(_record(msg="hello")) == "hello\n"

    def test_metadata(self, formatter):
        out = formatter.format(_record(level=30, msg="hi", user="bob", v=0, src="x"))
        assert out == "info  hi\n  user: bob\n"

    def test_error_with_stack(self, formatter):
        out = formatter.format(_record(
            level=50, msg="oops",
            err={"message": "boom", "stack": "Error: boom\n    at main (app.js:1:1)"},
        ))
        assert out == "error oops\n  Error: boom\n      at main (app.js:1:1)\n"

    def test_error_without_stack(self, formatter):
        out = formatter.format(_record(err={"message": "boom", "code": "E1"}))
        assert out == "\n  Error: boom\n  code: E1\n"

    def test_detail_order(self, formatter):
        out = formatter.format(_record(
            msg="x" * 70,
            req={"method": "GET", "url": "/"},
            res={"statusCode": 200},
            err="boom",
            extra=1,
        ))
        assert out == "\n  " + "x" * 70 + "\n  GET /\n  200 OK\n  Error: boom\n  extra: 1\n"


class TestRequest:
    def test_full_request(self, fake_dump):
        ua = lambda s: UserAgentInfo(recognized=True, agent="Chrome 120", os="Mac OS X 10.15.7")
        formatter = RecordFormatter(dumper=fake_dump, user_agent_parser=ua)
        out = formatter.format(_record(req={
            "method": "GET",
            "url": "/users",
            "remoteAddress": "10.0.0.1",
            "remotePort": 5555,
            "headers": {
                "User-Agent": "Mozilla/5.0",
                "Content-Type": "application/json",
                "Content-Length": "512",
                "Host": "example.com",
                "X-Request-Id": "abc",
            },
        }))
        assert out == (
            "\n"
            "  GET /users application/json; 512B\n"
            "    Chrome 120; Mac OS X 10.15.7; 10.0.0.1:5555\n"
            "    x-request-id: abc\n"
        )

    def test_bare_request(self, formatter):
        out = formatter.format(_record(req={"method": "POST", "url": "/login"}))
        assert out == "\n  POST /login\n"

    def test_request_from_raw_header(self, formatter):
        out = formatter.format(_record(req={
            "method": "GET",
            "url": "/",
            "header": "GET / HTTP/1.1\r\nHost: example.com\r\nX-Trace: t1\r\n\r\n",
        }))
        assert out == "\n  GET /\n    x-trace: t1\n"

    def test_url_is_emphasized(self, fake_dump, fake_ua):
        formatter = RecordFormatter(styler=ANSI, dumper=fake_dump, user_agent_parser=fake_ua)
        out = formatter.format(_record(req={"method": "GET", "url": "/users"}))
        assert f"{CODES[Style.EMPHASIS]}/users{RESET}" in out
        assert f"{CODES[Style.ACCENT_1]}GET{RESET}" in out


class TestResponse:
    def test_server_error_with_size(self, fake_dump, fake_ua):
        formatter = RecordFormatter(styler=ANSI, dumper=fake_dump, user_agent_parser=fake_ua)
        out = formatter.format(_record(res={
            "statusCode": 500,
            "headers": {"content-length": "2048"},
        }))
        response_line = out.split("\n")[1]
        assert f"{CODES[Style.ALERT]}500{RESET}" in response_line
        assert "Internal Server Error" in response_line
        assert f"2{CODES[Style.DE_EMPHASIS]}kB{RESET}" in response_line
        assert out.endswith("\n") and not out.endswith("\n\n")

    def test_server_error_plain(self, formatter):
        out = formatter.format(_record(res={
            "statusCode": 500,
            "headers": {"content-length": "2048"},
        }))
        assert out == "\n  500 Internal Server Error 2kB\n"

    def test_raw_header_blob(self, formatter):
        out = formatter.format(_record(res={
            "statusCode": 200,
            "header": (
                "HTTP/1.1 200 OK\r\n"
                "Content-Type: text/html\r\n"
                "Content-Length: 10\r\n"
                "X-Cache: HIT\r\n"
                "\r\n"
            ),
        }))
        assert out == "\n  200 OK text/html; 10B\n    x-cache: HIT\n"

    def test_malformed_raw_header_omits_headers(self, formatter):
        out = formatter.format(_record(res={"statusCode": 200, "header": "garbage"}))
        assert out == "\n  200 OK\n"

    def test_unknown_status_has_no_phrase(self, formatter):
        out = formatter.format(_record(res={"statusCode": 599}))
        assert out == "\n  599\n"


class TestWithYamlDump:
    def test_nested_metadata(self, fake_ua):
        formatter = RecordFormatter(user_agent_parser=fake_ua)
        out = formatter.format(_record(level=30, msg="hi", job={"id": 7, "tags": ["a", "b"]}))
        assert out == "info  hi\n  job:\n    id: 7\n    tags:\n    - a\n    - b\n"


@pytest.mark.parametrize("data", [
    {},
    {"msg": "hi"},
    {"msg": "a\nb\n\n"},
    {"err": {"stack": "trace\n\n"}},
    {"res": {"statusCode": 200, "headers": {"x-a": "1"}}},
])
def test_exactly_one_trailing_newline(formatter, data):
    out = formatter.format(_record(**data))
    assert out.endswith("\n")
    assert not out.endswith("\n\n")
