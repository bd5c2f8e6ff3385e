"""Unit tests for the PCI Express error section."""

from __future__ import annotations

from cper_blobs import build_aer, build_pcie, build_pcie_device_id
from cperlib.models import SectionKind, SectionReport, SectionStatus
from cperlib.sections import pcie
from cperlib.types import CPER_SEC_PCIE, PcieValid, Severity

_AER = build_aer(
    uncor_status=0x0010_0000,
    uncor_mask=0x0040_0000,
    uncor_severity=0x0006_2030,
    header_log=(0x4A00_0001, 0x0100_000F, 0xFEE0_0000, 0x0000_0000),
)


def _report(payload: bytes, severity: int = Severity.FATAL) -> SectionReport:
    return SectionReport(
        index=0,
        severity=severity,
        section_type=CPER_SEC_PCIE,
        kind=SectionKind.PCIE,
        status=SectionStatus.DECODED,
        error_data_length=len(payload),
        body=pcie.decode(payload),
    )


class TestPcieDecode:
    """Test validation-bit gating of PCIe fields."""

    def test_device_id_block(self):
        dev = build_pcie_device_id(
            vendor_id=0x8086, device_id=0x2030, class_code=b"\x06\x04\x00",
            function=1, device=0x1C, segment=0, bus=0x3A, secondary_bus=0x3B,
            slot=5 << 3,
        )
        sec = pcie.decode(build_pcie(PcieValid.DEVICE_ID, device_id=dev))
        assert sec.device_id.vendor_id == 0x8086
        assert sec.device_id.class_code == (0x06, 0x04, 0x00)
        assert sec.device_id.slot == 5
        assert sec.device_id.bus == 0x3A
        assert sec.port_type is None

    def test_aer_decoded_when_valid(self):
        sec = pcie.decode(build_pcie(PcieValid.AER_INFO, aer=_AER))
        assert sec.aer_info.uncor_status == 0x0010_0000
        assert sec.aer_info.uncor_mask == 0x0040_0000
        assert sec.aer_info.uncor_severity == 0x0006_2030
        assert sec.aer_info.header_log == (0x4A00_0001, 0x0100_000F, 0xFEE0_0000, 0)

    def test_aer_absent_without_bit(self):
        assert pcie.decode(build_pcie(0, aer=_AER)).aer_info is None

    def test_capability_hex(self):
        sec = pcie.decode(build_pcie(PcieValid.CAPABILITY, capability=b"\x10\x00\x02\x00"))
        assert sec.capability.startswith("10000200")
        assert len(sec.capability) == 120


class TestPcieRender:
    """Test PCIe section text output."""

    def test_all_fields_fatal(self):
        dev = build_pcie_device_id(
            vendor_id=0x8086, device_id=0x2030, class_code=b"\x06\x04\x00",
            function=1, device=0x1C, segment=0x0001, bus=0x3A,
            secondary_bus=0x3B, slot=5 << 3,
        )
        payload = build_pcie(
            0xFF,
            port_type=4, version=(1, 1), command=0x0547, status=0x4010,
            device_id=dev, serial=(0x1234, 0xABCD), bridge=(0x0000, 0x0003),
            aer=_AER,
        )
        assert pcie.render(_report(payload), "  ") == [
            "  port_type: 4, root port",
            "  version: 1.1",
            "  command: 0x0547, status: 0x4010",
            "  device_id: 0001:3a:1c.1",
            "  slot: 5",
            "  secondary_bus: 0x3b",
            "  vendor_id: 0x8086, device_id: 0x2030",
            "  class_code: 060400",
            "  serial number: 0x1234, 0xabcd",
            "  bridge: secondary_status: 0x0000, control: 0x0003",
            "  aer_uncor_status: 0x00100000, aer_uncor_mask: 0x00400000",
            "  aer_uncor_severity: 0x00062030",
            "  TLP Header: 4a000001 0100000f fee00000 00000000",
        ]

    def test_aer_hidden_when_not_fatal(self):
        payload = build_pcie(PcieValid.AER_INFO, aer=_AER)
        for severity in (Severity.RECOVERABLE, Severity.CORRECTED, Severity.INFO, 7):
            assert pcie.render(_report(payload, severity), "") == []

    def test_reserved_port_types(self):
        for port_type in (2, 3, 11, 0xFFFFFFFF):
            payload = build_pcie(PcieValid.PORT_TYPE, port_type=port_type)
            assert pcie.render(_report(payload), "") == [
                f"port_type: {port_type}, unknown",
            ]

    def test_version_major_minor_order(self):
        payload = build_pcie(PcieValid.VERSION, version=(3, 0))
        assert pcie.render(_report(payload), "") == ["version: 3.0"]
