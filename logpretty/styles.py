"""Semantic style tags and the ANSI styler that renders them."""

from enum import Enum


class Style(Enum):
    NEUTRAL = "neutral"
    ACCENT_1 = "accent-1"
    ACCENT_2 = "accent-2"
    ALERT = "alert"
    SUCCESS = "success"
    WARNING = "warning"
    EMPHASIS = "emphasis"
    DE_EMPHASIS = "de-emphasis"
    LABEL = "label"
    HIGHLIGHT = "highlight"


# ANSI codes
CODES = {
    Style.NEUTRAL: "\033[37m",      # white
    Style.ACCENT_1: "\033[34m",     # blue
    Style.ACCENT_2: "\033[35m",     # magenta
    Style.ALERT: "\033[41;30m",     # black on red
    Style.SUCCESS: "\033[32m",      # green
    Style.WARNING: "\033[33m",      # yellow
    Style.EMPHASIS: "\033[1m",      # bold
    Style.DE_EMPHASIS: "\033[2m",   # dim
    Style.LABEL: "\033[36m",        # cyan
    Style.HIGHLIGHT: "\033[33m",    # yellow
}
RESET = "\033[0m"


class Styler:
    """Wrap text in the escape sequence for a style tag.

    A disabled styler returns text unchanged, so plain output is just a
    Styler(enabled=False).
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    def __call__(self, text: str, tag: Style) -> str:
        if not self.enabled or not text:
            return text
        return f"{CODES[tag]}{text}{RESET}"


PLAIN = Styler(enabled=False)
ANSI = Styler(enabled=True)
