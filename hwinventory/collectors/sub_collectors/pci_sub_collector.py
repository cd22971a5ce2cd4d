# hwinventory/collectors/sub_collectors/pci_sub_collector.py
"""
PCI Sub-Collector
Enumerates PCI functions, classifies them and builds the GPU list with
nvidia-smi as the authoritative identity source.
"""

import re
from typing import Dict, List, Optional

from ...models import SERIAL_REQUIRES_VENDOR_TOOL, GpuDevice, PciDevice, PciInventory
from ...utils.text_parsing import UNKNOWN, clean_value
from .base_sub_collector import SubCollector

# 0000:3b:00.0 3D controller [0302]: NVIDIA Corporation GA100 [A100 PCIe 40GB] [10de:20f1] (rev a1)
LSPCI_LINE_RE = re.compile(
    r'^(?P<slot>\S+)\s+(?P<class_name>.+?)\s+\[(?P<class_code>[0-9a-fA-F]{4})\]:\s+'
    r'(?P<description>.*?)\s+\[(?P<ids>[0-9a-fA-F]{4}:[0-9a-fA-F]{4})\]'
    r'(?:\s+\(rev\s+\w+\))?(?:\s+\(prog-if.*\))?\s*$'
)

CLASS_PREFIX_CATEGORIES = {
    '03': 'graphics',
    '02': 'network',
    '01': 'storage',
}

CATEGORY_KEYWORDS = [
    ('graphics', ('vga', '3d', 'display')),
    ('network', ('ethernet', 'network', 'infiniband')),
    ('storage', ('sata', 'sas', 'raid', 'nvme', 'scsi', 'non-volatile', 'mass storage')),
]

NVIDIA_GPU_QUERY = "--query-gpu=name,uuid,pci.bus_id,serial --format=csv,noheader"


def classify(class_code: str, text: str) -> str:
    """Category by class code prefix, else by keyword in the class/description text"""
    if class_code != UNKNOWN:
        category = CLASS_PREFIX_CATEGORIES.get(class_code[:2])
        if category:
            return category
    lowered = text.lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(re.search(rf'\b{re.escape(k)}\b', lowered) for k in keywords):
            return category
    return 'other'


def parse_lspci_line(line: str) -> Optional[PciDevice]:
    line = line.strip()
    if not line:
        return None

    match = LSPCI_LINE_RE.match(line)
    if match:
        device = PciDevice(
            slot=match.group('slot'),
            class_name=match.group('class_name').strip(),
            class_code=match.group('class_code').lower(),
            vendor_device=match.group('ids').lower(),
            description=match.group('description').strip(),
        )
        device.category = classify(device.class_code, device.class_name)
        return device

    # Numeric IDs missing (old lspci): keep slot and text, classify by keyword
    slot, _, rest = line.partition(' ')
    class_name, _, description = rest.partition(':')
    device = PciDevice(
        slot=slot,
        class_name=clean_value(class_name),
        description=clean_value(description),
    )
    device.category = classify(device.class_code, rest)
    return device


def parse_lspci(text: Optional[str]) -> List[PciDevice]:
    devices = []
    for line in (text or '').splitlines():
        device = parse_lspci_line(line)
        if device:
            devices.append(device)
    return devices


def normalize_bus_id(bus_id: str) -> str:
    """nvidia-smi '00000000:3B:00.0' -> lspci '0000:3b:00.0'"""
    bus_id = clean_value(bus_id).lower()
    if bus_id == UNKNOWN:
        return bus_id
    parts = bus_id.split(':')
    if len(parts) == 2:
        parts.insert(0, '0000')
    if len(parts) != 3:
        return bus_id
    domain = parts[0][-4:].rjust(4, '0')
    return f"{domain}:{parts[1]}:{parts[2]}"


def parse_nvidia_gpus(text: Optional[str]) -> List[GpuDevice]:
    gpus = []
    for line in (text or '').splitlines():
        fields = [f.strip() for f in line.split(',')]
        if len(fields) != 4:
            continue
        name, uuid, bus_id, serial = fields
        gpus.append(GpuDevice(
            slot=normalize_bus_id(bus_id),
            name=clean_value(name),
            uuid=clean_value(uuid),
            serial=clean_value(serial),
            source='nvidia-smi',
        ))
    return gpus


class PciSubCollector(SubCollector):
    """Parses 'lspci -Dnn' and merges vendor GPU identity over the PCI view"""

    def get_section_name(self) -> str:
        return "pci"

    def default_record(self) -> PciInventory:
        return PciInventory()

    def collect(self) -> PciInventory:
        self.log_start()

        devices = parse_lspci(self.run_tool('lspci', '-Dnn', target='pci devices'))
        gpus = self._collect_gpus(devices)

        self.log_end(len(devices))
        return PciInventory(devices=devices, gpus=gpus)

    def _collect_gpus(self, devices: List[PciDevice]) -> List[GpuDevice]:
        gpus: List[GpuDevice] = []
        if self.caps.has('nvidia-smi'):
            output = self.run_tool('nvidia-smi', NVIDIA_GPU_QUERY, target='gpu identity')
            gpus = parse_nvidia_gpus(output)
            self.logger.debug(f"nvidia-smi reported {len(gpus)} GPUs")

        claimed: Dict[str, GpuDevice] = {gpu.slot: gpu for gpu in gpus}
        for device in devices:
            if device.category != 'graphics' or device.slot in claimed:
                continue
            gpus.append(GpuDevice(
                slot=device.slot,
                name=device.description,
                uuid=UNKNOWN,
                serial=UNKNOWN,
                source='lspci',
                serial_note=SERIAL_REQUIRES_VENDOR_TOOL,
            ))
        return gpus
