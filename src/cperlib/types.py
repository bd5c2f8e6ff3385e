"""CPER section identifiers, validation bits, structure sizes and string tables.

References:
  - UEFI Specification 2.4, Appendix N (Common Platform Error Record)
  - ACPI 6.x §18.3.2.7 (Generic Error Status Block / Generic Error Data Entry)
"""

from __future__ import annotations

import uuid
from enum import IntEnum, IntFlag


# Each nesting level of rendered output is indented by one of these
INDENT_SP = " "

# Maximum column width of a flag line produced by format_bits()
BITS_LINE_WIDTH = 80

# acpi_generic_status: block_status, raw_data_offset, raw_data_length,
# data_length, error_severity (5 x u32)
GENERIC_STATUS_SIZE = 20

# acpi_generic_data v3: section_type(16) severity(4) revision(2)
# validation_bits(1) flags(1) error_data_length(4) fru_id(16) fru_text(20)
# timestamp(8)
GENERIC_DATA_SIZE = 72

FRU_TEXT_LEN = 20

# Fixed payload sizes of the known section formats
PROC_GENERIC_SIZE = 192
MEM_ERR_SIZE = 80
PCIE_SIZE = 208

# Slot number lives in bits [15:3] of the PCIe device_id.slot field
PCIE_SLOT_SHIFT = 3


class Severity(IntEnum):
    """Error severity shared by the status block and each section."""

    RECOVERABLE = 0
    FATAL = 1
    CORRECTED = 2
    INFO = 3


SEVERITY_STRS = (
    "recoverable",
    "fatal",
    "corrected",
    "info",
)


def severity_str(severity: int) -> str:
    """Return the display name of a severity, "unknown" when out of range."""
    return table_str(SEVERITY_STRS, severity)


def table_str(table: tuple[str, ...], index: int) -> str:
    """Look up *index* in a fixed string table without running off its end."""
    if 0 <= index < len(table):
        return table[index]
    return "unknown"


class BlockStatus(IntFlag):
    """Generic Error Status Block ``block_status`` bits (ACPI §18.3.2.7.1)."""

    UNCORRECTABLE_VALID = 0x1
    CORRECTABLE_VALID = 0x2
    MULTIPLE_UNCORRECTABLE = 0x4
    MULTIPLE_CORRECTABLE = 0x8


BLOCK_STATUS_ENTRY_COUNT_SHIFT = 4
BLOCK_STATUS_ENTRY_COUNT_MASK = 0x3FF


class SectionValid(IntFlag):
    """Generic Error Data Entry validation bits."""

    FRU_ID = 0x1
    FRU_TEXT = 0x2


# =============================================================================
# Section type GUIDs (UEFI Appendix N, stored little-endian in the record)
# =============================================================================

CPER_SEC_PROC_GENERIC = uuid.UUID("9876ccad-47b4-4bdb-b65e-16f193c4f3db")
CPER_SEC_PLATFORM_MEM = uuid.UUID("a5bc1114-6f64-4ede-b863-3e83ed7c83b1")
CPER_SEC_PCIE = uuid.UUID("d995e954-bbc1-430f-ad91-b44dcb3c6f35")


# =============================================================================
# Processor generic error section (UEFI N.2.4.1)
# =============================================================================

class ProcValid(IntFlag):
    TYPE = 0x0001
    ISA = 0x0002
    ERROR_TYPE = 0x0004
    OPERATION = 0x0008
    FLAGS = 0x0010
    LEVEL = 0x0020
    VERSION = 0x0040
    BRAND_INFO = 0x0080
    ID = 0x0100
    TARGET_ADDRESS = 0x0200
    REQUESTOR_ID = 0x0400
    RESPONDER_ID = 0x0800
    IP = 0x1000


PROC_TYPE_STRS = (
    "IA32/X64",
    "IA64",
)

PROC_ISA_STRS = (
    "IA32",
    "IA64",
    "X64",
)

PROC_ERROR_TYPE_STRS = (
    "cache error",
    "TLB error",
    "bus error",
    "micro-architectural error",
)

PROC_OP_STRS = (
    "unknown or generic",
    "data read",
    "data write",
    "instruction execution",
)

PROC_FLAG_STRS = (
    "restartable",
    "precise IP",
    "overflow",
    "corrected",
)


# =============================================================================
# Platform memory error section (UEFI N.2.5)
# =============================================================================

class MemValid(IntFlag):
    ERROR_STATUS = 0x0001
    PA = 0x0002
    PA_MASK = 0x0004
    NODE = 0x0008
    CARD = 0x0010
    MODULE = 0x0020
    BANK = 0x0040
    DEVICE = 0x0080
    ROW = 0x0100
    COLUMN = 0x0200
    BIT_POSITION = 0x0400
    REQUESTOR_ID = 0x0800
    RESPONDER_ID = 0x1000
    TARGET_ID = 0x2000
    ERROR_TYPE = 0x4000
    RANK_NUMBER = 0x8000
    CARD_HANDLE = 0x10000
    MODULE_HANDLE = 0x20000


MEM_ERR_TYPE_STRS = (
    "unknown",
    "no error",
    "single-bit ECC",
    "multi-bit ECC",
    "single-symbol chipkill ECC",
    "multi-symbol chipkill ECC",
    "master abort",
    "target abort",
    "parity error",
    "watchdog timeout",
    "invalid address",
    "mirror Broken",
    "memory sparing",
    "scrub corrected error",
    "scrub uncorrected error",
    "physical memory map-out event",
)


# =============================================================================
# PCI Express error section (UEFI N.2.7)
# =============================================================================

class PcieValid(IntFlag):
    PORT_TYPE = 0x01
    VERSION = 0x02
    COMMAND_STATUS = 0x04
    DEVICE_ID = 0x08
    SERIAL_NUMBER = 0x10
    BRIDGE_CONTROL_STATUS = 0x20
    CAPABILITY = 0x40
    AER_INFO = 0x80


PCIE_PORT_TYPE_STRS = (
    "PCIe end point",
    "legacy PCI end point",
    "unknown",
    "unknown",
    "root port",
    "upstream switch port",
    "downstream switch port",
    "PCIe to PCI/PCI-X bridge",
    "PCI/PCI-X to PCIe bridge",
    "root complex integrated endpoint device",
    "root complex event collector",
)

# Offsets inside the 96-byte aer_info blob (struct aer_capability_regs)
AER_UNCOR_STATUS_OFFSET = 4
AER_UNCOR_MASK_OFFSET = 8
AER_UNCOR_SEVERITY_OFFSET = 12
AER_HEADER_LOG_OFFSET = 28
