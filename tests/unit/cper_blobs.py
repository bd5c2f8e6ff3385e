"""Byte builders for generic error status blocks used across the unit tests."""

from __future__ import annotations

import struct
import uuid

from cperlib.types import (
    CPER_SEC_PCIE,
    CPER_SEC_PLATFORM_MEM,
    CPER_SEC_PROC_GENERIC,
)

UNKNOWN_SECTION = uuid.UUID("00112233-4455-6677-8899-aabbccddeeff")

_STATUS = struct.Struct("<IIIII")
_GDATA = struct.Struct("<16sIHBBI16s20sQ")
_PROC = struct.Struct("<QBBBBBBHQ128sQQQQQ")
_MEM = struct.Struct("<QQQQHHHHHHHHQQQBBHHH")
_PCIE = struct.Struct("<QIBB2sHHI16sIIHH60s96s")
_PCIE_DEVICE_ID = struct.Struct("<HH3sBBHBBHB")


def build_gdata(
    section_type: uuid.UUID,
    payload: bytes = b"",
    *,
    severity: int = 0,
    validation_bits: int = 0,
    fru_id: uuid.UUID | None = None,
    fru_text: bytes = b"",
    error_data_length: int | None = None,
) -> bytes:
    """Build a 72-byte generic error data entry followed by *payload*."""
    length = len(payload) if error_data_length is None else error_data_length
    header = _GDATA.pack(
        section_type.bytes_le,
        severity,
        0x0300,
        validation_bits,
        0,
        length,
        (fru_id or uuid.UUID(int=0)).bytes_le,
        fru_text[:20].ljust(20, b"\x00"),
        0,
    )
    return header + payload


def build_estatus(
    sections: bytes = b"",
    *,
    severity: int = 0,
    data_length: int | None = None,
    raw_data_offset: int = 0,
    raw_data_length: int = 0,
    block_status: int = 0,
) -> bytes:
    """Build a generic error status block header followed by *sections*."""
    length = len(sections) if data_length is None else data_length
    return _STATUS.pack(
        block_status, raw_data_offset, raw_data_length, length, severity,
    ) + sections


def build_proc(
    valid: int,
    *,
    proc_type: int = 0,
    proc_isa: int = 0,
    error_type: int = 0,
    operation: int = 0,
    flags: int = 0,
    level: int = 0,
    cpu_version: int = 0,
    brand: bytes = b"",
    proc_id: int = 0,
    target_addr: int = 0,
    requestor_id: int = 0,
    responder_id: int = 0,
    ip: int = 0,
) -> bytes:
    """Build a 192-byte processor generic section payload."""
    return _PROC.pack(
        valid, proc_type, proc_isa, error_type, operation, flags, level, 0,
        cpu_version, brand, proc_id, target_addr, requestor_id, responder_id, ip,
    )


def build_mem(
    valid: int,
    *,
    error_status: int = 0,
    physical_addr: int = 0,
    physical_addr_mask: int = 0,
    node: int = 0,
    card: int = 0,
    module: int = 0,
    bank: int = 0,
    device: int = 0,
    row: int = 0,
    column: int = 0,
    bit_pos: int = 0,
    requestor_id: int = 0,
    responder_id: int = 0,
    target_id: int = 0,
    error_type: int = 0,
    rank: int = 0,
    mem_array_handle: int = 0,
    mem_dev_handle: int = 0,
) -> bytes:
    """Build an 80-byte platform memory error section payload."""
    return _MEM.pack(
        valid, error_status, physical_addr, physical_addr_mask,
        node, card, module, bank, device, row, column, bit_pos,
        requestor_id, responder_id, target_id, error_type, 0, rank,
        mem_array_handle, mem_dev_handle,
    )


def build_pcie_device_id(
    *,
    vendor_id: int = 0,
    device_id: int = 0,
    class_code: bytes = b"\x00\x00\x00",
    function: int = 0,
    device: int = 0,
    segment: int = 0,
    bus: int = 0,
    secondary_bus: int = 0,
    slot: int = 0,
) -> bytes:
    return _PCIE_DEVICE_ID.pack(
        vendor_id, device_id, class_code, function, device,
        segment, bus, secondary_bus, slot, 0,
    )


def build_aer(
    *,
    uncor_status: int = 0,
    uncor_mask: int = 0,
    uncor_severity: int = 0,
    header_log: tuple[int, int, int, int] = (0, 0, 0, 0),
) -> bytes:
    """Build a 96-byte AER capability register block."""
    aer = bytearray(96)
    struct.pack_into("<III", aer, 4, uncor_status, uncor_mask, uncor_severity)
    struct.pack_into("<4I", aer, 28, *header_log)
    return bytes(aer)


def build_pcie(
    valid: int,
    *,
    port_type: int = 0,
    version: tuple[int, int] = (0, 0),
    command: int = 0,
    status: int = 0,
    device_id: bytes | None = None,
    serial: tuple[int, int] = (0, 0),
    bridge: tuple[int, int] = (0, 0),
    capability: bytes = b"",
    aer: bytes | None = None,
) -> bytes:
    """Build a 208-byte PCIe error section payload. *version* is (major, minor)."""
    major, minor = version
    return _PCIE.pack(
        valid, port_type, minor, major, b"\x00\x00", command, status, 0,
        device_id or bytes(16), serial[0], serial[1], bridge[0], bridge[1],
        capability, aer or bytes(96),
    )


__all__ = [
    "CPER_SEC_PCIE",
    "CPER_SEC_PLATFORM_MEM",
    "CPER_SEC_PROC_GENERIC",
    "UNKNOWN_SECTION",
    "build_aer",
    "build_estatus",
    "build_gdata",
    "build_mem",
    "build_pcie",
    "build_pcie_device_id",
    "build_proc",
]
