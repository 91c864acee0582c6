"""User-agent decomposition backed by the ``user-agents`` package."""

from dataclasses import dataclass

import user_agents

UNKNOWN = "Other"


@dataclass(frozen=True)
class UserAgentInfo:
    recognized: bool
    agent: str | None = None
    os: str | None = None
    device: str | None = None


def _join_version(family: str, version: str) -> str | None:
    if not family or family == UNKNOWN:
        return None
    return f"{family} {version}" if version else family


def parse_user_agent(ua_string: str) -> UserAgentInfo:
    """Split a UA string into agent name + major version, OS and device."""
    ua = user_agents.parse(ua_string)
    if ua.browser.family == UNKNOWN:
        return UserAgentInfo(recognized=False)

    major = str(ua.browser.version[0]) if ua.browser.version else ""
    return UserAgentInfo(
        recognized=True,
        agent=_join_version(ua.browser.family, major),
        os=_join_version(ua.os.family, ua.os.version_string),
        device=None if ua.device.family == UNKNOWN else ua.device.family,
    )
