"""Structured key/value dump rendered as block-style YAML."""

from typing import Any, Mapping

import yaml


def dump(data: Mapping[str, Any]) -> str:
    """Render a mapping as YAML with sorted keys and no trailing newline."""
    text = yaml.safe_dump(
        dict(data),
        default_flow_style=False,
        sort_keys=True,
        allow_unicode=True,
    )
    return text.rstrip("\n")
