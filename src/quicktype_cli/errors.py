"""Exception hierarchy shared by the aggregation pipeline and the CLI."""

from __future__ import annotations


class QuicktypeError(Exception):
    """Base class for every fatal condition of one invocation."""


class ConfigurationError(QuicktypeError):
    """Invalid option combination, detected before any I/O."""


class UnsupportedInvocationError(ConfigurationError):
    """The positional sources do not form a supported shape."""


class JsonDecodeError(QuicktypeError):
    """A source did not contain exactly one well-formed JSON value."""


class SourceResolutionError(QuicktypeError):
    """A source could not be opened or fetched."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"Could not read {source}: {reason}")
        self.source = source
        self.reason = reason


class GrammarError(QuicktypeError):
    """URL grammar expansion failed."""


class RenderError(QuicktypeError):
    """The rendering engine reported an error outcome."""
