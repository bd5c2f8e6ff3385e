"""Section type dispatch.

Known section formats are keyed by their UEFI section type GUID. Anything not
in ``SECTION_FORMATS`` is an unknown section: its GUID is reported and its
payload is left undecoded (no size check is applied to it).
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from dataclasses import dataclass

from cperlib.models import SectionBody, SectionKind, SectionReport
from cperlib.sections import memory, pcie, processor
from cperlib.sections.memory import DimmLookup
from cperlib.types import (
    CPER_SEC_PCIE,
    CPER_SEC_PLATFORM_MEM,
    CPER_SEC_PROC_GENERIC,
    MEM_ERR_SIZE,
    PCIE_SIZE,
    PROC_GENERIC_SIZE,
)


@dataclass(frozen=True)
class SectionFormat:
    """How to decode and render one known section type."""

    kind: SectionKind
    title: str
    size: int
    decode: Callable[[bytes], SectionBody]
    render: Callable[[SectionReport, str], list[str]]


SECTION_FORMATS: dict[uuid.UUID, SectionFormat] = {
    CPER_SEC_PROC_GENERIC: SectionFormat(
        SectionKind.PROC_GENERIC, "general processor error",
        PROC_GENERIC_SIZE, processor.decode, processor.render,
    ),
    CPER_SEC_PLATFORM_MEM: SectionFormat(
        SectionKind.PLATFORM_MEM, "memory error",
        MEM_ERR_SIZE, memory.decode, memory.render,
    ),
    CPER_SEC_PCIE: SectionFormat(
        SectionKind.PCIE, "PCIe error",
        PCIE_SIZE, pcie.decode, pcie.render,
    ),
}

_FORMATS_BY_KIND = {fmt.kind: fmt for fmt in SECTION_FORMATS.values()}


def lookup_format(section_type: uuid.UUID) -> SectionFormat | None:
    """Return the format registered for *section_type*, or None if unknown."""
    return SECTION_FORMATS.get(section_type)


def format_for_kind(kind: SectionKind) -> SectionFormat | None:
    return _FORMATS_BY_KIND.get(kind)


__all__ = [
    "DimmLookup",
    "SECTION_FORMATS",
    "SectionFormat",
    "format_for_kind",
    "lookup_format",
]
