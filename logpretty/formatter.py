"""Record formatter: composes field formatters into the multi-line rendering.

Layout:

    12:30:01.123 web-1#4242 info  http:server request done 12ms
      GET /users 512B
        Chrome 120; Mac OS X 10.15.7; Mac; 10.0.0.1
        x-request-id: abc
      200 OK application/json; 2kB
      extra: value
"""

from logpretty import fields
from logpretty.dump import dump as yaml_dump
from logpretty.fields import Dumper, UserAgentParser, join_parts
from logpretty.records import HttpMessage, LogRecord
from logpretty.styles import PLAIN, Style, Styler
from logpretty.useragent import parse_user_agent

INDENT = "  "
DEFAULT_SHORT_MESSAGE_LENGTH = 60


def indent(text: str, prefix: str = INDENT) -> str:
    """Prefix every line of text."""
    return "\n".join(prefix + line for line in text.split("\n"))


class RecordFormatter:
    """Render LogRecords as styled text.

    Styling, structured dumping and user-agent parsing are injected so
    plain output (and tests) can swap them out.
    """

    def __init__(
        self,
        styler: Styler = PLAIN,
        dumper: Dumper = yaml_dump,
        user_agent_parser: UserAgentParser = parse_user_agent,
        short_message_length: int = DEFAULT_SHORT_MESSAGE_LENGTH,
    ):
        self.style = styler
        self.dump = dumper
        self.parse_ua = user_agent_parser
        self.short_message_length = short_message_length

    def format(self, record: LogRecord) -> str:
        """Render one record; the result always ends in exactly one newline."""
        message = record.msg or ""
        short = fields.is_short_message(message, self.short_message_length)

        level = fields.format_level(record.level, self.style)
        trailing = [
            fields.format_name(record.name, self.style),
            fields.format_message(message, self.style) if short else None,
            fields.format_duration(record.duration, self.style),
        ]
        # Level padding only aligns what follows it
        if level and not any(trailing):
            level = level.rstrip(" ")
        summary = join_parts([
            fields.format_time(record.time),
            fields.format_origin(record.hostname, record.pid),
            level,
            *trailing,
        ]) or ""

        details = join_parts([
            None if short else message.rstrip("\n"),
            self.format_request(record.req),
            self.format_response(record.res),
            fields.format_error(record.err, self.dump),
            fields.format_metadata(record.metadata, self.dump),
        ], "\n")

        if details:
            return f"{summary}\n{indent(details)}\n"
        return f"{summary}\n"

    # ------------------------------------------------------------------
    # HTTP sections
    # ------------------------------------------------------------------

    def format_request(self, req: HttpMessage | None) -> str | None:
        if req is None:
            return None
        headers = req.get_headers()
        url = self.style(req.url, Style.EMPHASIS) if req.url else None
        first = join_parts([
            fields.format_method(req.method, self.style),
            url,
            fields.format_content(headers, self.style),
        ])
        rest = join_parts([
            fields.format_remote(req, headers, self.parse_ua),
            fields.format_headers(headers, self.dump),
        ], "\n")
        return self._section(first, rest)

    def format_response(self, res: HttpMessage | None) -> str | None:
        if res is None:
            return None
        headers = res.get_headers()
        phrase = fields.reason_phrase(res.status_code)
        first = join_parts([
            fields.format_status_code(res.status_code, self.style),
            self.style(phrase, Style.DE_EMPHASIS) if phrase else None,
            fields.format_content(headers, self.style),
        ])
        rest = fields.format_headers(headers, self.dump)
        return self._section(first, rest)

    @staticmethod
    def _section(first: str | None, rest: str | None) -> str | None:
        if first and rest:
            return f"{first}\n{indent(rest)}"
        return first or rest
