"""Shared pytest fixtures for the logpretty test suite."""

import pytest

from logpretty.formatter import RecordFormatter
from logpretty.styles import PLAIN
from logpretty.useragent import UserAgentInfo


def _dump(data) -> str:
    return "\n".join(f"{k}: {v}" for k, v in sorted(data.items()))


@pytest.fixture()
def fake_dump():
    """Flat 'key: value' dump, one line per key."""
    return _dump


@pytest.fixture()
def fake_ua():
    """User-agent parser that never recognizes anything."""
    return lambda ua_string: UserAgentInfo(recognized=False)


@pytest.fixture()
def formatter(fake_dump, fake_ua) -> RecordFormatter:
    """Plain-text formatter with deterministic collaborators."""
    return RecordFormatter(styler=PLAIN, dumper=fake_dump, user_agent_parser=fake_ua)


@pytest.fixture()
def sample_record_line() -> bytes:
    return b'{"time":1000,"hostname":"web-1","pid":42,"level":30,"msg":"hello","user":"bob"}'
