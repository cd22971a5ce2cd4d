# tests/test_pci_sub_collector.py
"""
Tests for PCI parsing, classification and GPU identity merging.
"""

import pytest

from hwinventory.collectors.sub_collectors.pci_sub_collector import (
    PciSubCollector,
    classify,
    normalize_bus_id,
    parse_lspci,
    parse_lspci_line,
    parse_nvidia_gpus,
)
from hwinventory.models import SERIAL_REQUIRES_VENDOR_TOOL, DegradationKind, PciInventory
from hwinventory.utils.text_parsing import UNKNOWN

from conftest import FakeConnector
import sample_output as sample


class TestParsing:
    """lspci line parsing and classification"""

    def test_full_line(self):
        device = parse_lspci_line(
            "0000:3b:00.0 3D controller [0302]: NVIDIA Corporation GA100 [A100 PCIe 40GB] [10de:20f1] (rev a1)"
        )
        assert device.slot == '0000:3b:00.0'
        assert device.class_name == '3D controller'
        assert device.class_code == '0302'
        assert device.vendor_device == '10de:20f1'
        assert device.description == 'NVIDIA Corporation GA100 [A100 PCIe 40GB]'
        assert device.category == 'graphics'

    def test_categories(self):
        devices = parse_lspci(sample.LSPCI)
        assert [(d.slot[5:], d.category) for d in devices] == [
            ('00:00.0', 'other'),
            ('00:17.0', 'storage'),
            ('03:00.0', 'graphics'),
            ('3b:00.0', 'graphics'),
            ('5e:00.0', 'network'),
            ('af:00.0', 'network'),
            ('d8:00.0', 'network'),
            ('d9:00.0', 'storage'),
        ]

    def test_line_without_ids(self):
        device = parse_lspci_line("00:02.0 VGA compatible controller: Intel Corporation HD Graphics 630")
        assert device.slot == '00:02.0'
        assert device.class_name == 'VGA compatible controller'
        assert device.class_code == UNKNOWN
        assert device.description == 'Intel Corporation HD Graphics 630'
        assert device.category == 'graphics'

    @pytest.mark.parametrize("class_code,text,expected", [
        ('0300', 'whatever', 'graphics'),
        ('0207', 'Infiniband controller', 'network'),
        ('0104', 'RAID bus controller', 'storage'),
        (UNKNOWN, 'Ethernet controller', 'network'),
        (UNKNOWN, 'Serial Attached SCSI controller', 'storage'),
        (UNKNOWN, 'Display controller', 'graphics'),
        (UNKNOWN, 'USB controller', 'other'),
        (UNKNOWN, 'Processing accelerators: Habana Labs', 'other'),
    ])
    def test_classify(self, class_code, text, expected):
        assert classify(class_code, text) == expected

    def test_blank_lines_skipped(self):
        assert parse_lspci("\n\n") == []
        assert parse_lspci(None) == []


class TestGpuIdentity:
    """nvidia-smi parsing and bus id normalization"""

    @pytest.mark.parametrize("bus_id,expected", [
        ('00000000:3B:00.0', '0000:3b:00.0'),
        ('0000:3b:00.0', '0000:3b:00.0'),
        ('3B:00.0', '0000:3b:00.0'),
        ('', UNKNOWN),
    ])
    def test_normalize_bus_id(self, bus_id, expected):
        assert normalize_bus_id(bus_id) == expected

    def test_parse_nvidia_gpus(self):
        (gpu,) = parse_nvidia_gpus(sample.NVIDIA_SMI_GPUS)
        assert gpu.name == 'NVIDIA A100-PCIE-40GB'
        assert gpu.uuid == 'GPU-5f1b0c9e-1234-5678-9abc-def012345678'
        assert gpu.slot == '0000:3b:00.0'
        assert gpu.serial == '1321020012345'
        assert gpu.source == 'nvidia-smi'

    def test_serial_not_available(self):
        (gpu,) = parse_nvidia_gpus("Tesla T4, GPU-abc, 00000000:AF:00.0, [N/A]\n")
        assert gpu.serial == UNKNOWN

    def test_malformed_rows_skipped(self):
        assert parse_nvidia_gpus("No devices were found\n") == []


class TestPciSubCollector:
    """Tests for PciSubCollector"""

    def test_gpus_merged(self, populated_host, make_caps):
        inventory = PciSubCollector(populated_host, make_caps('lspci', 'nvidia-smi')).collect()

        assert len(inventory.devices) == 8
        assert [(g.slot, g.source) for g in inventory.gpus] == [
            ('0000:3b:00.0', 'nvidia-smi'),
            ('0000:03:00.0', 'lspci'),
        ]
        aspeed = inventory.gpus[1]
        assert aspeed.name == 'ASPEED Technology, Inc. ASPEED Graphics Family'
        assert aspeed.uuid == UNKNOWN
        assert aspeed.serial_note == SERIAL_REQUIRES_VENDOR_TOOL
        assert inventory.gpus[0].serial_note is None

    def test_without_nvidia_smi(self, populated_host, make_caps):
        inventory = PciSubCollector(populated_host, make_caps('lspci')).collect()

        assert [g.source for g in inventory.gpus] == ['lspci', 'lspci']
        assert all(g.serial == UNKNOWN for g in inventory.gpus)
        assert not any(cmd.startswith('nvidia-smi') for cmd in populated_host.executed)

    def test_without_lspci(self, make_caps):
        collector = PciSubCollector(FakeConnector(), make_caps())
        assert collector.collect() == PciInventory()
        assert collector.warnings[0].kind == DegradationKind.TOOL_MISSING
