# hwinventory/models.py
"""
Typed records produced by the section collectors.

Every field has a value: anything a collector could not determine holds
the UNKNOWN sentinel, so a document is always complete and serializable.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, Union

from .utils.text_parsing import UNKNOWN

SERIAL_REQUIRES_VENDOR_TOOL = "not obtainable without vendor tool"
NO_RAID_DETECTED = "no RAID detected"


class DegradationKind:
    """Non-fatal failure kinds; each degrades fields to UNKNOWN"""
    TOOL_MISSING = "ToolMissing"
    PERMISSION_DENIED = "PermissionDenied"
    PARSE_MISS = "ParseMiss"
    TIMEOUT = "Timeout"


@dataclass
class CollectionWarning:
    section: str
    kind: str
    target: str
    message: str

    def __str__(self):
        return f"[{self.section}] {self.kind} ({self.target}): {self.message}"


class Record:
    """Mixin giving records a plain-dict view"""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# System / CPU

@dataclass
class BiosInfo(Record):
    vendor: str = UNKNOWN
    version: str = UNKNOWN
    date: str = UNKNOWN


@dataclass
class SystemIdentity(Record):
    vendor: str = UNKNOWN
    product: str = UNKNOWN
    serial: str = UNKNOWN
    uuid: str = UNKNOWN
    bios: BiosInfo = field(default_factory=BiosInfo)


@dataclass
class CpuProfile(Record):
    architecture: str = UNKNOWN
    model: str = UNKNOWN
    cpus: str = UNKNOWN
    cores_per_socket: str = UNKNOWN
    sockets: str = UNKNOWN
    max_mhz: str = UNKNOWN


# Memory

@dataclass
class DimmRecord(Record):
    size: str = UNKNOWN
    type: str = UNKNOWN
    speed: str = UNKNOWN
    manufacturer: str = UNKNOWN
    serial: str = UNKNOWN
    locator: str = UNKNOWN
    bank_locator: str = UNKNOWN
    part_number: str = UNKNOWN
    form_factor: str = UNKNOWN
    rank: str = UNKNOWN
    configured_speed: str = UNKNOWN


@dataclass
class MemorySummary(Record):
    total: str = UNKNOWN
    max_supported: str = UNKNOWN
    dominant_type: str = UNKNOWN


@dataclass
class MemoryInventory(Record):
    summary: MemorySummary = field(default_factory=MemorySummary)
    dimms: List[DimmRecord] = field(default_factory=list)


# Storage

@dataclass
class DiskRecord(Record):
    device: str = UNKNOWN
    model: str = UNKNOWN
    serial: str = UNKNOWN
    firmware: str = UNKNOWN
    capacity: str = UNKNOWN
    rotation: Union[int, str] = UNKNOWN
    raid_member: bool = False
    transport: str = UNKNOWN
    sources: Dict[str, str] = field(default_factory=dict)


@dataclass
class RaidArray(Record):
    name: str = UNKNOWN
    level: str = UNKNOWN
    state: str = UNKNOWN
    members: List[str] = field(default_factory=list)
    detail: str = UNKNOWN


@dataclass
class HardwareRaid(Record):
    tool: str = UNKNOWN
    output: str = UNKNOWN


@dataclass
class RaidStatus(Record):
    mdstat: str = UNKNOWN
    arrays: List[RaidArray] = field(default_factory=list)
    hardware: HardwareRaid = field(default_factory=HardwareRaid)
    detected: bool = False
    summary: str = NO_RAID_DETECTED


# PCI / GPU

@dataclass
class PciDevice(Record):
    slot: str = UNKNOWN
    class_name: str = UNKNOWN
    class_code: str = UNKNOWN
    vendor_device: str = UNKNOWN
    description: str = UNKNOWN
    category: str = "other"


@dataclass
class GpuDevice(Record):
    slot: str = UNKNOWN
    name: str = UNKNOWN
    uuid: str = UNKNOWN
    serial: str = UNKNOWN
    source: str = UNKNOWN
    serial_note: Optional[str] = None


@dataclass
class PciInventory(Record):
    devices: List[PciDevice] = field(default_factory=list)
    gpus: List[GpuDevice] = field(default_factory=list)


# Interconnects

@dataclass
class EthernetInterface(Record):
    name: str = UNKNOWN
    mac: str = UNKNOWN
    driver: str = UNKNOWN
    firmware: str = UNKNOWN


@dataclass
class EthernetDevice(Record):
    slot: str = UNKNOWN
    description: str = UNKNOWN
    kind: str = "NIC"
    class_code: str = UNKNOWN
    interfaces: List[EthernetInterface] = field(default_factory=list)


@dataclass
class InfinibandPort(Record):
    port: str = UNKNOWN
    state: str = UNKNOWN
    phys_state: str = UNKNOWN
    rate: str = UNKNOWN
    link_layer: str = UNKNOWN


@dataclass
class InfinibandHca(Record):
    name: str = UNKNOWN
    hca_type: str = UNKNOWN
    firmware: str = UNKNOWN
    node_description: str = UNKNOWN
    board_id: str = UNKNOWN
    ports: List[InfinibandPort] = field(default_factory=list)


@dataclass
class NvLink(Record):
    link_id: str = UNKNOWN
    peer: str = UNKNOWN
    bandwidth: str = UNKNOWN
    state: str = UNKNOWN


@dataclass
class NvSwitch(Record):
    index: str = UNKNOWN
    uuid: str = UNKNOWN
    family: str = UNKNOWN
    model: str = UNKNOWN
    firmware: str = UNKNOWN
    links: List[NvLink] = field(default_factory=list)


@dataclass
class NetworkInterface(Record):
    name: str = UNKNOWN
    state: str = UNKNOWN
    addresses: List[str] = field(default_factory=list)


@dataclass
class Interconnects(Record):
    ethernet: List[EthernetDevice] = field(default_factory=list)
    infiniband: List[InfinibandHca] = field(default_factory=list)
    nvswitch: List[NvSwitch] = field(default_factory=list)
    network: List[NetworkInterface] = field(default_factory=list)


@dataclass(frozen=True)
class CanonicalDocument:
    """Root aggregate of one run; built once by the assembler"""
    system: SystemIdentity
    cpu: CpuProfile
    memory: MemoryInventory
    disks: List[DiskRecord]
    raid: RaidStatus
    pci: PciInventory
    interconnects: Interconnects
    warnings: List[CollectionWarning] = field(default_factory=list)
