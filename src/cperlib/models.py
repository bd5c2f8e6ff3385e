"""Decoded views of a generic error status block and its sections.

Every optional field is ``None`` unless the record's validation bits mark it
as meaningful.
"""

from __future__ import annotations

import uuid
from enum import Enum

from pydantic import BaseModel, Field


class SectionKind(str, Enum):
    """Section payload formats understood by the decoder."""

    PROC_GENERIC = "proc_generic"
    PLATFORM_MEM = "platform_mem"
    PCIE = "pcie"
    UNKNOWN = "unknown"


class SectionStatus(str, Enum):
    """Outcome of decoding one section's payload."""

    DECODED = "decoded"
    TOO_SMALL = "too_small"
    UNKNOWN_TYPE = "unknown_type"


class ProcessorGenericSection(BaseModel):
    """Processor generic error section (UEFI N.2.4.1)."""

    validation_bits: int
    proc_type: int | None = None
    proc_isa: int | None = None
    proc_error_type: int | None = None
    operation: int | None = None
    flags: int | None = None
    level: int | None = None
    cpu_version: int | None = None
    brand_info: str | None = None
    proc_id: int | None = None
    target_addr: int | None = None
    requestor_id: int | None = None
    responder_id: int | None = None
    ip: int | None = None


class MemoryErrorSection(BaseModel):
    """Platform memory error section (UEFI N.2.5)."""

    validation_bits: int
    error_status: int | None = None
    physical_addr: int | None = None
    physical_addr_mask: int | None = None
    node: int | None = None
    card: int | None = None
    module: int | None = None
    rank: int | None = None
    bank: int | None = None
    device: int | None = None
    row: int | None = None
    column: int | None = None
    bit_pos: int | None = None
    requestor_id: int | None = None
    responder_id: int | None = None
    target_id: int | None = None
    error_type: int | None = None
    mem_array_handle: int | None = None
    mem_dev_handle: int | None = None
    # Filled in from the DIMM lookup when mem_dev_handle resolves
    dimm_bank: str | None = None
    dimm_device: str | None = None


class PcieDeviceId(BaseModel):
    """Location and identity of the PCIe device that reported the error."""

    vendor_id: int
    device_id: int
    class_code: tuple[int, int, int]
    function: int
    device: int
    segment: int
    bus: int
    secondary_bus: int
    slot: int


class PcieAerInfo(BaseModel):
    """Raw AER capability registers; interpretation is left to the consumer."""

    uncor_status: int
    uncor_mask: int
    uncor_severity: int
    header_log: tuple[int, int, int, int]


class PcieErrorSection(BaseModel):
    """PCI Express error section (UEFI N.2.7)."""

    validation_bits: int
    port_type: int | None = None
    version_major: int | None = None
    version_minor: int | None = None
    command: int | None = None
    status: int | None = None
    device_id: PcieDeviceId | None = None
    serial_lower: int | None = None
    serial_upper: int | None = None
    bridge_secondary_status: int | None = None
    bridge_control: int | None = None
    capability: str | None = None  # hex dump of the 60-byte capability structure
    aer_info: PcieAerInfo | None = None


SectionBody = ProcessorGenericSection | MemoryErrorSection | PcieErrorSection


class SectionReport(BaseModel):
    """One generic error data entry and its decoded payload."""

    index: int
    severity: int
    section_type: uuid.UUID
    kind: SectionKind
    status: SectionStatus
    error_data_length: int
    revision: int = 0
    flags: int = 0
    fru_id: uuid.UUID | None = None
    fru_text: str | None = None
    body: SectionBody | None = None


class ErrorStatusReport(BaseModel):
    """Decoded generic error status block."""

    block_status: int
    error_severity: int
    data_length: int
    raw_data_offset: int
    raw_data_length: int
    entry_count: int
    uncorrectable_valid: bool = False
    correctable_valid: bool = False
    multiple_uncorrectable: bool = False
    multiple_correctable: bool = False
    sections: list[SectionReport] = Field(default_factory=list)
