"""Decode, validate and render UEFI Common Platform Error Records (CPER).

Implements the ACPI generic error status block walk and the processor
generic, platform memory and PCI Express section formats of UEFI
Appendix N.
"""

from cperlib.estatus import ValidatedStatus, check, check_header, iter_sections
from cperlib.exceptions import (
    CperError,
    HeaderError,
    MalformedHeaderError,
    TruncatedError,
    ValidationError,
)
from cperlib.record_id import RecordIdGenerator, next_record_id
from cperlib.render import decode, render, render_lines

__version__ = "0.1.0"

__all__ = [
    "CperError",
    "HeaderError",
    "MalformedHeaderError",
    "RecordIdGenerator",
    "TruncatedError",
    "ValidatedStatus",
    "ValidationError",
    "check",
    "check_header",
    "decode",
    "iter_sections",
    "next_record_id",
    "render",
    "render_lines",
]
