"""Processor generic error section decode and render."""

from __future__ import annotations

import struct

from cperlib.bits import format_bits
from cperlib.models import ProcessorGenericSection, SectionReport
from cperlib.types import (
    PROC_ERROR_TYPE_STRS,
    PROC_FLAG_STRS,
    PROC_GENERIC_SIZE,
    PROC_ISA_STRS,
    PROC_OP_STRS,
    PROC_TYPE_STRS,
    ProcValid,
    table_str,
)

# validation_bits, proc_type, proc_isa, proc_error_type, operation, flags,
# level, reserved, cpu_version, cpu_brand[128], proc_id, target_addr,
# requestor_id, responder_id, ip
_PROC_STRUCT = struct.Struct("<QBBBBBBHQ128sQQQQQ")

assert _PROC_STRUCT.size == PROC_GENERIC_SIZE


def _brand_str(raw: bytes) -> str:
    return raw.split(b"\x00", 1)[0].decode("ascii", errors="replace")


def decode(payload: bytes) -> ProcessorGenericSection:
    """Decode a processor generic section, keeping only validated fields."""
    (
        valid,
        proc_type,
        proc_isa,
        proc_error_type,
        operation,
        flags,
        level,
        _reserved,
        cpu_version,
        cpu_brand,
        proc_id,
        target_addr,
        requestor_id,
        responder_id,
        ip,
    ) = _PROC_STRUCT.unpack_from(payload, 0)

    def gated(bit: ProcValid, value):
        return value if valid & bit else None

    return ProcessorGenericSection(
        validation_bits=valid,
        proc_type=gated(ProcValid.TYPE, proc_type),
        proc_isa=gated(ProcValid.ISA, proc_isa),
        proc_error_type=gated(ProcValid.ERROR_TYPE, proc_error_type),
        operation=gated(ProcValid.OPERATION, operation),
        flags=gated(ProcValid.FLAGS, flags),
        level=gated(ProcValid.LEVEL, level),
        cpu_version=gated(ProcValid.VERSION, cpu_version),
        brand_info=_brand_str(cpu_brand) if valid & ProcValid.BRAND_INFO else None,
        proc_id=gated(ProcValid.ID, proc_id),
        target_addr=gated(ProcValid.TARGET_ADDRESS, target_addr),
        requestor_id=gated(ProcValid.REQUESTOR_ID, requestor_id),
        responder_id=gated(ProcValid.RESPONDER_ID, responder_id),
        ip=gated(ProcValid.IP, ip),
    )


def render(section: SectionReport, pfx: str) -> list[str]:
    proc: ProcessorGenericSection = section.body
    lines: list[str] = []

    if proc.proc_type is not None:
        lines.append(
            f"{pfx}processor_type: {proc.proc_type}, "
            f"{table_str(PROC_TYPE_STRS, proc.proc_type)}"
        )
    if proc.proc_isa is not None:
        lines.append(
            f"{pfx}processor_isa: {proc.proc_isa}, "
            f"{table_str(PROC_ISA_STRS, proc.proc_isa)}"
        )
    if proc.proc_error_type is not None:
        lines.append(f"{pfx}error_type: 0x{proc.proc_error_type:02x}")
        lines.extend(format_bits(pfx, proc.proc_error_type, PROC_ERROR_TYPE_STRS))
    if proc.operation is not None:
        lines.append(
            f"{pfx}operation: {proc.operation}, "
            f"{table_str(PROC_OP_STRS, proc.operation)}"
        )
    if proc.flags is not None:
        lines.append(f"{pfx}flags: 0x{proc.flags:02x}")
        lines.extend(format_bits(pfx, proc.flags, PROC_FLAG_STRS))
    if proc.level is not None:
        lines.append(f"{pfx}level: {proc.level}")
    if proc.cpu_version is not None:
        lines.append(f"{pfx}version_info: 0x{proc.cpu_version:016x}")
    if proc.brand_info is not None:
        lines.append(f"{pfx}brand_info: {proc.brand_info}")
    if proc.proc_id is not None:
        lines.append(f"{pfx}processor_id: 0x{proc.proc_id:016x}")
    if proc.target_addr is not None:
        lines.append(f"{pfx}target_address: 0x{proc.target_addr:016x}")
    if proc.requestor_id is not None:
        lines.append(f"{pfx}requestor_id: 0x{proc.requestor_id:016x}")
    if proc.responder_id is not None:
        lines.append(f"{pfx}responder_id: 0x{proc.responder_id:016x}")
    if proc.ip is not None:
        lines.append(f"{pfx}IP: 0x{proc.ip:016x}")
    return lines
