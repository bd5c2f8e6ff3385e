"""Generic error status block parsing and structural validation.

A generic error status block (ACPI §18.3.2.7.1) is a 20-byte header followed
by ``data_length`` bytes of generic error data entries. Each entry is a
72-byte descriptor immediately followed by ``error_data_length`` bytes of
section payload.

``check()`` is the only gate through which a blob becomes trusted: it returns
a ``ValidatedStatus`` recording where every section lies, and nothing else in
the package accepts section offsets from any other source.
"""

from __future__ import annotations

import struct
import uuid
from collections.abc import Iterator
from dataclasses import InitVar, dataclass

from cperlib.exceptions import MalformedHeaderError, TruncatedError
from cperlib.types import (
    BLOCK_STATUS_ENTRY_COUNT_MASK,
    BLOCK_STATUS_ENTRY_COUNT_SHIFT,
    GENERIC_DATA_SIZE,
    GENERIC_STATUS_SIZE,
)
from cperlib.utils.logging import get_logger

logger = get_logger(__name__)

_STATUS_STRUCT = struct.Struct("<IIIII")
_DATA_STRUCT = struct.Struct("<16sIHBBI16s20sQ")
_ERROR_DATA_LENGTH_OFFSET = 24

assert _STATUS_STRUCT.size == GENERIC_STATUS_SIZE
assert _DATA_STRUCT.size == GENERIC_DATA_SIZE

# Only check() may construct a ValidatedStatus
_CHECKED = object()


@dataclass(frozen=True)
class GenericStatus:
    """Parsed generic error status block header (20 bytes)."""

    block_status: int
    raw_data_offset: int
    raw_data_length: int
    data_length: int
    error_severity: int

    @property
    def entry_count(self) -> int:
        """Error data entry count from ``block_status`` bits [13:4]."""
        return (
            self.block_status >> BLOCK_STATUS_ENTRY_COUNT_SHIFT
        ) & BLOCK_STATUS_ENTRY_COUNT_MASK


@dataclass(frozen=True)
class GenericErrorData:
    """Parsed generic error data entry descriptor (72 bytes)."""

    section_type: uuid.UUID
    error_severity: int
    revision: int
    validation_bits: int
    flags: int
    error_data_length: int
    fru_id: uuid.UUID
    fru_text: bytes
    timestamp: int


@dataclass(frozen=True)
class Section:
    """One section of a validated status block."""

    index: int
    offset: int
    header: GenericErrorData
    payload: bytes


@dataclass(frozen=True)
class ValidatedStatus:
    """A status block that passed ``check()``.

    Holds an immutable copy of the blob and the descriptor offsets found
    while walking it. Instances cannot be built directly; call ``check()``.
    """

    data: bytes
    header: GenericStatus
    section_offsets: tuple[int, ...]
    _token: InitVar[object] = None

    def __post_init__(self, _token: object) -> None:
        if _token is not _CHECKED:
            raise TypeError("ValidatedStatus can only be created by check()")

    @property
    def section_count(self) -> int:
        return len(self.section_offsets)


def parse_status_header(data: bytes) -> GenericStatus:
    """Parse the 20-byte generic error status block header."""
    if len(data) < GENERIC_STATUS_SIZE:
        raise MalformedHeaderError(
            f"Status block header requires {GENERIC_STATUS_SIZE} bytes, "
            f"got {len(data)}",
            offset=0,
        )
    return GenericStatus(*_STATUS_STRUCT.unpack_from(data, 0))


def parse_error_data(data: bytes, offset: int = 0) -> GenericErrorData:
    """Parse a 72-byte generic error data entry descriptor at *offset*."""
    if len(data) - offset < GENERIC_DATA_SIZE:
        raise TruncatedError(
            f"Error data entry requires {GENERIC_DATA_SIZE} bytes, "
            f"got {max(0, len(data) - offset)}",
            offset=offset,
        )
    (
        section_type,
        error_severity,
        revision,
        validation_bits,
        flags,
        error_data_length,
        fru_id,
        fru_text,
        timestamp,
    ) = _DATA_STRUCT.unpack_from(data, offset)
    return GenericErrorData(
        section_type=uuid.UUID(bytes_le=section_type),
        error_severity=error_severity,
        revision=revision,
        validation_bits=validation_bits,
        flags=flags,
        error_data_length=error_data_length,
        fru_id=uuid.UUID(bytes_le=fru_id),
        fru_text=fru_text,
        timestamp=timestamp,
    )


def check_header(blob: bytes | bytearray | memoryview) -> None:
    """Check the status block header's length/offset invariants.

    Sections are not walked. Raises ``MalformedHeaderError`` when:
      - the blob is shorter than the 20-byte header;
      - ``data_length`` is nonzero but smaller than one entry descriptor;
      - raw data is present and ``raw_data_offset`` overlaps the entries.
    """
    status = parse_status_header(bytes(blob[:GENERIC_STATUS_SIZE]))

    if status.data_length and status.data_length < GENERIC_DATA_SIZE:
        raise MalformedHeaderError(
            f"data_length {status.data_length} is smaller than one "
            f"error data entry ({GENERIC_DATA_SIZE})",
            offset=12,
        )
    if (
        status.raw_data_length
        and status.raw_data_offset < GENERIC_STATUS_SIZE + status.data_length
    ):
        raise MalformedHeaderError(
            f"raw_data_offset {status.raw_data_offset} overlaps error data "
            f"ending at {GENERIC_STATUS_SIZE + status.data_length}",
            offset=4,
        )


def check(blob: bytes | bytearray | memoryview) -> ValidatedStatus:
    """Fully validate a status block and return it as a ``ValidatedStatus``.

    Runs ``check_header()``, then walks the entry list bounds-checking every
    descriptor's ``error_data_length`` against the bytes left in
    ``data_length``. The walk must consume ``data_length`` exactly. Payload
    contents are not decoded.

    Raises:
        MalformedHeaderError: header invariant violated.
        TruncatedError: an entry overruns ``data_length``, bytes are left
            over after the last entry, or the blob is shorter than
            its header declares.
    """
    data = bytes(blob)
    check_header(data)
    status = parse_status_header(data)

    end = GENERIC_STATUS_SIZE + status.data_length
    if len(data) < end:
        raise TruncatedError(
            f"Status block declares {end} bytes, buffer holds {len(data)}",
            offset=len(data),
        )

    offsets: list[int] = []
    offset = GENERIC_STATUS_SIZE
    remaining = status.data_length
    while remaining >= GENERIC_DATA_SIZE:
        (gedata_len,) = struct.unpack_from(
            "<I", data, offset + _ERROR_DATA_LENGTH_OFFSET,
        )
        if gedata_len > remaining - GENERIC_DATA_SIZE:
            raise TruncatedError(
                f"Section {len(offsets)} claims {gedata_len} payload bytes, "
                f"only {remaining - GENERIC_DATA_SIZE} remain",
                offset=offset,
            )
        offsets.append(offset)
        offset += GENERIC_DATA_SIZE + gedata_len
        remaining -= GENERIC_DATA_SIZE + gedata_len
    if remaining:
        raise TruncatedError(
            f"{remaining} trailing bytes after the last error data entry",
            offset=offset,
        )

    logger.debug(
        "estatus_checked",
        data_length=status.data_length,
        sections=len(offsets),
    )
    return ValidatedStatus(
        data=data,
        header=status,
        section_offsets=tuple(offsets),
        _token=_CHECKED,
    )


def iter_sections(status: ValidatedStatus) -> Iterator[Section]:
    """Yield every section of a validated status block in descriptor order."""
    for index, offset in enumerate(status.section_offsets):
        header = parse_error_data(status.data, offset)
        start = offset + GENERIC_DATA_SIZE
        yield Section(
            index=index,
            offset=offset,
            header=header,
            payload=status.data[start:start + header.error_data_length],
        )
