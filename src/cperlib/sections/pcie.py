"""PCI Express error section decode and render.

The AER block is surfaced as raw register values only. It is printed only for
sections whose severity is fatal: for non-fatal errors the OS AER driver
reports the same registers itself, so printing them here would duplicate it.
"""

from __future__ import annotations

import struct

from cperlib.models import (
    PcieAerInfo,
    PcieDeviceId,
    PcieErrorSection,
    SectionReport,
)
from cperlib.types import (
    AER_HEADER_LOG_OFFSET,
    AER_UNCOR_MASK_OFFSET,
    AER_UNCOR_SEVERITY_OFFSET,
    AER_UNCOR_STATUS_OFFSET,
    PCIE_PORT_TYPE_STRS,
    PCIE_SIZE,
    PCIE_SLOT_SHIFT,
    PcieValid,
    Severity,
    table_str,
)

# validation_bits, port_type, version{minor, major, reserved[2]},
# command, status, reserved, device_id[16], serial{lower, upper},
# bridge{secondary_status, control}, capability[60], aer_info[96]
_PCIE_STRUCT = struct.Struct("<QIBB2sHHI16sIIHH60s96s")

# vendor_id, device_id, class_code[3], function, device, segment, bus,
# secondary_bus, slot, reserved
_DEVICE_ID_STRUCT = struct.Struct("<HH3sBBHBBHB")

assert _PCIE_STRUCT.size == PCIE_SIZE
assert _DEVICE_ID_STRUCT.size == 16


def _decode_device_id(raw: bytes) -> PcieDeviceId:
    (
        vendor_id,
        device_id,
        class_code,
        function,
        device,
        segment,
        bus,
        secondary_bus,
        slot,
        _reserved,
    ) = _DEVICE_ID_STRUCT.unpack(raw)
    return PcieDeviceId(
        vendor_id=vendor_id,
        device_id=device_id,
        class_code=tuple(class_code),
        function=function,
        device=device,
        segment=segment,
        bus=bus,
        secondary_bus=secondary_bus,
        slot=slot >> PCIE_SLOT_SHIFT,
    )


def _decode_aer(raw: bytes) -> PcieAerInfo:
    return PcieAerInfo(
        uncor_status=struct.unpack_from("<I", raw, AER_UNCOR_STATUS_OFFSET)[0],
        uncor_mask=struct.unpack_from("<I", raw, AER_UNCOR_MASK_OFFSET)[0],
        uncor_severity=struct.unpack_from("<I", raw, AER_UNCOR_SEVERITY_OFFSET)[0],
        header_log=struct.unpack_from("<4I", raw, AER_HEADER_LOG_OFFSET),
    )


def decode(payload: bytes) -> PcieErrorSection:
    """Decode a PCIe error section, keeping only validated fields."""
    (
        valid,
        port_type,
        minor,
        major,
        _version_reserved,
        command,
        status,
        _reserved,
        device_id,
        serial_lower,
        serial_upper,
        bridge_secondary_status,
        bridge_control,
        capability,
        aer_info,
    ) = _PCIE_STRUCT.unpack_from(payload, 0)

    pcie = PcieErrorSection(validation_bits=valid)
    if valid & PcieValid.PORT_TYPE:
        pcie.port_type = port_type
    if valid & PcieValid.VERSION:
        pcie.version_major = major
        pcie.version_minor = minor
    if valid & PcieValid.COMMAND_STATUS:
        pcie.command = command
        pcie.status = status
    if valid & PcieValid.DEVICE_ID:
        pcie.device_id = _decode_device_id(device_id)
    if valid & PcieValid.SERIAL_NUMBER:
        pcie.serial_lower = serial_lower
        pcie.serial_upper = serial_upper
    if valid & PcieValid.BRIDGE_CONTROL_STATUS:
        pcie.bridge_secondary_status = bridge_secondary_status
        pcie.bridge_control = bridge_control
    if valid & PcieValid.CAPABILITY:
        pcie.capability = capability.hex()
    if valid & PcieValid.AER_INFO:
        pcie.aer_info = _decode_aer(aer_info)
    return pcie


def render(section: SectionReport, pfx: str) -> list[str]:
    pcie: PcieErrorSection = section.body
    lines: list[str] = []

    if pcie.port_type is not None:
        lines.append(
            f"{pfx}port_type: {pcie.port_type}, "
            f"{table_str(PCIE_PORT_TYPE_STRS, pcie.port_type)}"
        )
    if pcie.version_major is not None:
        lines.append(f"{pfx}version: {pcie.version_major}.{pcie.version_minor}")
    if pcie.command is not None:
        lines.append(
            f"{pfx}command: 0x{pcie.command:04x}, status: 0x{pcie.status:04x}"
        )
    if pcie.device_id is not None:
        dev = pcie.device_id
        lines.append(
            f"{pfx}device_id: {dev.segment:04x}:{dev.bus:02x}:"
            f"{dev.device:02x}.{dev.function:x}"
        )
        lines.append(f"{pfx}slot: {dev.slot}")
        lines.append(f"{pfx}secondary_bus: 0x{dev.secondary_bus:02x}")
        lines.append(
            f"{pfx}vendor_id: 0x{dev.vendor_id:04x}, device_id: 0x{dev.device_id:04x}"
        )
        lines.append(f"{pfx}class_code: {bytes(dev.class_code).hex()}")
    if pcie.serial_lower is not None:
        lines.append(
            f"{pfx}serial number: 0x{pcie.serial_lower:04x}, "
            f"0x{pcie.serial_upper:04x}"
        )
    if pcie.bridge_control is not None:
        lines.append(
            f"{pfx}bridge: secondary_status: 0x{pcie.bridge_secondary_status:04x}, "
            f"control: 0x{pcie.bridge_control:04x}"
        )
    if pcie.aer_info is not None and section.severity == Severity.FATAL:
        aer = pcie.aer_info
        lines.append(
            f"{pfx}aer_uncor_status: 0x{aer.uncor_status:08x}, "
            f"aer_uncor_mask: 0x{aer.uncor_mask:08x}"
        )
        lines.append(f"{pfx}aer_uncor_severity: 0x{aer.uncor_severity:08x}")
        lines.append(
            f"{pfx}TLP Header: " + " ".join(f"{dw:08x}" for dw in aer.header_log)
        )
    return lines
