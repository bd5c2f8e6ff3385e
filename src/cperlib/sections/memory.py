"""Platform memory error section decode and render.

DIMM names are not part of the record: the section only carries the SMBIOS
type 17 handle of the memory device. Callers resolve it through a
``DimmLookup`` (for example a DMI table walker) that returns the
``(bank_locator, device_locator)`` pair, or ``None`` when the handle is unknown.
"""

from __future__ import annotations

import struct
from collections.abc import Callable

from cperlib.models import MemoryErrorSection, SectionReport
from cperlib.types import MEM_ERR_SIZE, MEM_ERR_TYPE_STRS, MemValid, table_str
from cperlib.utils.logging import get_logger

logger = get_logger(__name__)

DimmLookup = Callable[[int], tuple[str, str] | None]

# validation_bits, error_status, physical_addr, physical_addr_mask,
# node, card, module, bank, device, row, column, bit_pos,
# requestor_id, responder_id, target_id, error_type, reserved, rank,
# mem_array_handle, mem_dev_handle
_MEM_STRUCT = struct.Struct("<QQQQHHHHHHHHQQQBBHHH")

assert _MEM_STRUCT.size == MEM_ERR_SIZE

# (field name, validation bit) in payload order after validation_bits
_FIELDS: tuple[tuple[str | None, MemValid], ...] = (
    ("error_status", MemValid.ERROR_STATUS),
    ("physical_addr", MemValid.PA),
    ("physical_addr_mask", MemValid.PA_MASK),
    ("node", MemValid.NODE),
    ("card", MemValid.CARD),
    ("module", MemValid.MODULE),
    ("bank", MemValid.BANK),
    ("device", MemValid.DEVICE),
    ("row", MemValid.ROW),
    ("column", MemValid.COLUMN),
    ("bit_pos", MemValid.BIT_POSITION),
    ("requestor_id", MemValid.REQUESTOR_ID),
    ("responder_id", MemValid.RESPONDER_ID),
    ("target_id", MemValid.TARGET_ID),
    ("error_type", MemValid.ERROR_TYPE),
    (None, MemValid(0)),  # reserved
    ("rank", MemValid.RANK_NUMBER),
    ("mem_array_handle", MemValid.CARD_HANDLE),
    ("mem_dev_handle", MemValid.MODULE_HANDLE),
)


def decode(payload: bytes) -> MemoryErrorSection:
    """Decode a memory error section, keeping only validated fields."""
    valid, *values = _MEM_STRUCT.unpack_from(payload, 0)
    fields = {
        name: value
        for (name, bit), value in zip(_FIELDS, values)
        if name is not None and valid & bit
    }
    return MemoryErrorSection(validation_bits=valid, **fields)


def resolve_dimm(
    mem: MemoryErrorSection,
    dimm_lookup: DimmLookup | None,
) -> MemoryErrorSection:
    """Return *mem* with its DIMM bank/device names filled in, if resolvable."""
    if mem.mem_dev_handle is None or dimm_lookup is None:
        return mem
    location = dimm_lookup(mem.mem_dev_handle)
    if location is None:
        logger.debug("dimm_lookup_miss", handle=mem.mem_dev_handle)
        return mem
    bank, device = location
    return mem.model_copy(update={"dimm_bank": bank, "dimm_device": device})


def render(section: SectionReport, pfx: str) -> list[str]:
    mem: MemoryErrorSection = section.body
    lines: list[str] = []

    if mem.error_status is not None:
        lines.append(f"{pfx}error_status: 0x{mem.error_status:016x}")
    if mem.physical_addr is not None:
        lines.append(f"{pfx}physical_address: 0x{mem.physical_addr:016x}")
    if mem.physical_addr_mask is not None:
        lines.append(
            f"{pfx}physical_address_mask: 0x{mem.physical_addr_mask:016x}"
        )
    for name in ("node", "card", "module", "rank", "bank", "device", "row", "column"):
        value = getattr(mem, name)
        if value is not None:
            lines.append(f"{pfx}{name}: {value}")
    if mem.bit_pos is not None:
        lines.append(f"{pfx}bit_position: {mem.bit_pos}")
    for name in ("requestor_id", "responder_id", "target_id"):
        value = getattr(mem, name)
        if value is not None:
            lines.append(f"{pfx}{name}: 0x{value:016x}")
    if mem.error_type is not None:
        lines.append(
            f"{pfx}error_type: {mem.error_type}, "
            f"{table_str(MEM_ERR_TYPE_STRS, mem.error_type)}"
        )
    if mem.mem_array_handle is not None:
        lines.append(f"{pfx}card_handle: 0x{mem.mem_array_handle:04x}")
    if mem.mem_dev_handle is not None:
        if mem.dimm_bank is not None and mem.dimm_device is not None:
            lines.append(f"{pfx}DIMM location: {mem.dimm_bank} {mem.dimm_device}")
        else:
            lines.append(f"{pfx}DIMM DMI handle: 0x{mem.mem_dev_handle:04x}")
    return lines
