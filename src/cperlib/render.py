"""Decode a validated status block and render it as diagnostic text lines.

Output is line oriented, one field per line, ``"<prefix><field>: <value>"``.
Each nesting level adds ``INDENT_SP`` to the prefix:

    <pfx>event severity: fatal
    <pfx> Error 0, type: fatal
    <pfx>  section_type: PCIe error
    <pfx>  port_type: 4, root port

Rendering only ever works on a ``ValidatedStatus``. Raw bytes passed to
``render()`` or ``render_lines()`` are run through ``check()`` first, so a
malformed blob raises ``ValidationError`` instead of producing output.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator

from cperlib.estatus import Section, ValidatedStatus, check, iter_sections
from cperlib.models import (
    ErrorStatusReport,
    SectionKind,
    SectionReport,
    SectionStatus,
)
from cperlib.sections import format_for_kind, lookup_format
from cperlib.sections.memory import DimmLookup, resolve_dimm
from cperlib.types import (
    FRU_TEXT_LEN,
    INDENT_SP,
    BlockStatus,
    SectionValid,
    Severity,
    severity_str,
)
from cperlib.utils.logging import get_logger

logger = get_logger(__name__)

LineSink = Callable[[str], None]

Blob = bytes | bytearray | memoryview


def _fru_text(raw: bytes) -> str:
    return raw[:FRU_TEXT_LEN].split(b"\x00", 1)[0].decode("ascii", errors="replace")


def decode_section(
    section: Section,
    dimm_lookup: DimmLookup | None = None,
) -> SectionReport:
    """Decode one section of a validated status block."""
    hdr = section.header
    report = SectionReport(
        index=section.index,
        severity=hdr.error_severity,
        section_type=hdr.section_type,
        kind=SectionKind.UNKNOWN,
        status=SectionStatus.UNKNOWN_TYPE,
        error_data_length=hdr.error_data_length,
        revision=hdr.revision,
        flags=hdr.flags,
    )
    if hdr.validation_bits & SectionValid.FRU_ID:
        report.fru_id = hdr.fru_id
    if hdr.validation_bits & SectionValid.FRU_TEXT:
        report.fru_text = _fru_text(hdr.fru_text)

    fmt = lookup_format(hdr.section_type)
    if fmt is None:
        return report

    report.kind = fmt.kind
    if len(section.payload) < fmt.size:
        logger.warning(
            "section_too_small",
            index=section.index,
            kind=fmt.kind.value,
            length=len(section.payload),
            required=fmt.size,
        )
        report.status = SectionStatus.TOO_SMALL
        return report

    body = fmt.decode(section.payload)
    if fmt.kind is SectionKind.PLATFORM_MEM:
        body = resolve_dimm(body, dimm_lookup)
    report.body = body
    report.status = SectionStatus.DECODED
    return report


def decode(
    status: ValidatedStatus,
    *,
    dimm_lookup: DimmLookup | None = None,
) -> ErrorStatusReport:
    """Decode every section of a validated status block into a report model."""
    if not isinstance(status, ValidatedStatus):
        raise TypeError(
            f"decode() requires a ValidatedStatus from check(), "
            f"got {type(status).__name__}"
        )
    hdr = status.header
    return ErrorStatusReport(
        block_status=hdr.block_status,
        error_severity=hdr.error_severity,
        data_length=hdr.data_length,
        raw_data_offset=hdr.raw_data_offset,
        raw_data_length=hdr.raw_data_length,
        entry_count=hdr.entry_count,
        uncorrectable_valid=bool(hdr.block_status & BlockStatus.UNCORRECTABLE_VALID),
        correctable_valid=bool(hdr.block_status & BlockStatus.CORRECTABLE_VALID),
        multiple_uncorrectable=bool(hdr.block_status & BlockStatus.MULTIPLE_UNCORRECTABLE),
        multiple_correctable=bool(hdr.block_status & BlockStatus.MULTIPLE_CORRECTABLE),
        sections=[decode_section(s, dimm_lookup) for s in iter_sections(status)],
    )


def _section_lines(section: SectionReport, pfx: str) -> Iterator[str]:
    yield f"{pfx}Error {section.index}, type: {severity_str(section.severity)}"
    if section.fru_id is not None:
        yield f"{pfx}fru_id: {section.fru_id}"
    if section.fru_text is not None:
        yield f"{pfx}fru_text: {section.fru_text}"

    newpfx = pfx + INDENT_SP
    fmt = format_for_kind(section.kind)
    if fmt is None:
        yield f"{newpfx}section type: unknown, {section.section_type}"
        return

    yield f"{newpfx}section_type: {fmt.title}"
    if section.status is SectionStatus.TOO_SMALL:
        yield f"{newpfx}error section length is too small"
        return
    yield from fmt.render(section, newpfx)


def report_lines(report: ErrorStatusReport, prefix: str = "") -> Iterator[str]:
    """Yield the diagnostic text lines for a decoded report."""
    if report.error_severity == Severity.CORRECTED:
        yield (
            f"{prefix}It has been corrected by h/w "
            f"and requires no further action"
        )
    yield f"{prefix}event severity: {severity_str(report.error_severity)}"
    newpfx = prefix + INDENT_SP
    for section in report.sections:
        yield from _section_lines(section, newpfx)


def _validated(status: ValidatedStatus | Blob) -> ValidatedStatus:
    if isinstance(status, ValidatedStatus):
        return status
    if isinstance(status, (bytes, bytearray, memoryview)):
        return check(status)
    raise TypeError(
        f"expected ValidatedStatus or bytes, got {type(status).__name__}"
    )


def render(
    status: ValidatedStatus | Blob,
    prefix: str,
    sink: LineSink,
    *,
    dimm_lookup: DimmLookup | None = None,
) -> None:
    """Render a status block line by line into *sink*.

    Args:
        status: Result of ``check()``. Raw bytes are validated first.
        prefix: Text put in front of every line (e.g. a log level tag).
        sink: Called once per output line, without a trailing newline.
        dimm_lookup: Resolves a memory device handle to ``(bank, device)``.

    Raises:
        ValidationError: *status* was raw bytes that failed ``check()``.
    """
    report = decode(_validated(status), dimm_lookup=dimm_lookup)
    for line in report_lines(report, prefix):
        sink(line)


def render_lines(
    status: ValidatedStatus | Blob,
    prefix: str = "",
    *,
    dimm_lookup: DimmLookup | None = None,
) -> list[str]:
    """Return the lines ``render()`` would emit."""
    lines: list[str] = []
    render(status, prefix, lines.append, dimm_lookup=dimm_lookup)
    return lines
