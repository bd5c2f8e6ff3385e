"""Exception hierarchy for CPER validation failures."""

from __future__ import annotations


class CperError(Exception):
    """Base exception for all cperlib errors."""

    def __init__(self, message: str, offset: int | None = None) -> None:
        self.offset = offset
        super().__init__(message)


class ValidationError(CperError):
    """The error status block failed structural validation and must be rejected."""


class HeaderError(ValidationError):
    """A top-level length or offset in the status block header is invalid."""


class MalformedHeaderError(HeaderError):
    """Header lengths/offsets are inconsistent with each other."""


class TruncatedError(ValidationError):
    """A section claims more bytes than remain, or bytes are left over."""
