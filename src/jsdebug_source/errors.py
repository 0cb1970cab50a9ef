from __future__ import annotations


class JsDebugSourceError(Exception):
    """Base exception for jsdebug-source."""


class SourceParseError(JsDebugSourceError):
    """Raised when JavaScript text does not parse cleanly."""

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(f"{message} ({line}:{column})")
        self.message = message
        self.line = line
        self.column = column


class JavaScriptSyntaxError(SourceParseError):
    """Syntax error surfaced for display; returned rather than raised."""


class SourceMapBuildError(JsDebugSourceError):
    """Raised when a mapping cannot be added to a source map being built."""


class SourceMapDecodeError(JsDebugSourceError):
    """Raised when source map JSON cannot be decoded."""
