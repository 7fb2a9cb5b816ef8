"""Exception types raised by the WKB/EWKB codec.

Decode failures derive from :class:`WkbDecodeError`; failures raised by a
geometry factory while building a node derive from :class:`ConstructionError`
instead, so callers can tell a malformed byte stream apart from a well-formed
stream that describes a geometry the model refuses to build.
"""

from __future__ import annotations

from typing import Any, Optional


class WkbError(ValueError):
    """Base exception for geowkb errors."""

    def __init__(
        self,
        message: str,
        offset: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        """Initialize the error.

        Args:
            message: Primary error message.
            offset: Byte offset at which the problem was detected, if known.
            details: Optional dictionary with additional error details.
        """
        super().__init__(message)
        self.message = message
        self.offset = offset
        self.details = details or {}

    def __str__(self) -> str:
        if self.offset is not None:
            return f"{self.message} (at offset {self.offset})"
        return self.message


class WkbDecodeError(WkbError):
    """The byte stream is not a valid WKB/EWKB encoding."""


class TruncatedInputError(WkbDecodeError):
    """Fewer bytes remain than a read (or a declared element count) requires."""

    def __init__(self, needed: int, remaining: int, offset: int):
        super().__init__(
            f"truncated input: need {needed} bytes, {remaining} left",
            offset=offset,
            details={"needed": needed, "remaining": remaining},
        )
        self.needed = needed
        self.remaining = remaining


class UnsupportedGeometryTypeError(WkbDecodeError):
    def __init__(self, type_code: int, offset: Optional[int] = None):
        super().__init__(
            f"unsupported geometry type code {type_code} (0x{type_code:08x})",
            offset=offset,
            details={"type_code": type_code},
        )
        self.type_code = type_code


class InvalidByteOrderError(WkbDecodeError):
    def __init__(self, marker: int, offset: int):
        super().__init__(
            f"invalid byte order marker {marker}, expected 0 or 1",
            offset=offset,
            details={"marker": marker},
        )
        self.marker = marker


class TrailingDataError(WkbDecodeError):
    """Bytes remain after the top-level geometry was fully decoded."""

    def __init__(self, trailing: int, offset: int):
        super().__init__(
            f"{trailing} trailing byte(s) after geometry",
            offset=offset,
            details={"trailing": trailing},
        )
        self.trailing = trailing


class NestingTooDeepError(WkbDecodeError):
    def __init__(self, max_depth: int, offset: int):
        super().__init__(
            f"geometry nesting exceeds max_depth={max_depth}",
            offset=offset,
            details={"max_depth": max_depth},
        )
        self.max_depth = max_depth


class InvalidHexError(WkbDecodeError):
    """Hex text input is not an even-length run of ASCII hex digits."""


class UnexpectedGeometryTypeError(WkbError):
    """A typed entry point (e.g. ``Point.from_wkb``) decoded another kind."""


class EncodeError(WkbError):
    """The geometry cannot be represented in the requested dialect."""


class ConstructionError(WkbError):
    """A geometry factory rejected the decoded structure."""
