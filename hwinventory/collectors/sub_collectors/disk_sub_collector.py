# hwinventory/collectors/sub_collectors/disk_sub_collector.py
"""
Disk Sub-Collector
Collects physical block devices with SMART identity, capacity, media type
and RAID membership. Every field is resolved through an ordered fallback chain.
"""

import re
from typing import Dict, List, Optional, Union

from ...connectors.base_connector import CommandResult
from ...models import DegradationKind, DiskRecord
from ...utils.fallback import FallbackChain, any_signal
from ...utils.text_parsing import UNKNOWN, clean_value, extract_field, iter_pairs
from ...utils.units import format_bytes, normalize_size, parse_rotation
from .base_sub_collector import SubCollector

SYS_BLOCK = '/sys/block'

# Whole disks only: partitions (sda1, nvme0n1p1), loop, ram, dm-*, md*, sr* never match
DISK_NAME_RE = re.compile(r'^(?:sd[a-z]+|hd[a-z]+|vd[a-z]+|xvd[a-z]+|nvme\d+n\d+)$')

SMART_MODEL_LABELS = ['Device Model', 'Model Number', 'Product']
SMART_SERIAL_LABELS = ['Serial Number', 'Serial number']
SMART_FIRMWARE_LABELS = ['Firmware Version', 'Revision']
SMART_CAPACITY_LABELS = ['User Capacity', 'Total NVM Capacity', 'Namespace 1 Size/Capacity']


def is_physical_disk(name: str) -> bool:
    return DISK_NAME_RE.match(name) is not None


def smartctl_accept(result: CommandResult) -> bool:
    """smartctl exit status is a bitmask; only bits 0-1 mean the query itself failed"""
    if result.timed_out or not result.output.strip():
        return False
    return result.exit_code >= 0 and (result.exit_code & 0b11) == 0


class DiskSubCollector(SubCollector):
    """
    Walks /sys/block and builds one DiskRecord per physical disk.

    Source priority per field:
        identity:  smartctl -> udev properties -> sysfs
        capacity:  smartctl -> blockdev -> sysfs sector count
        rotation:  smartctl -> NVMe name -> sysfs rotational flag -> hdparm (ATA)
        raid:      kernel md holders OR udev raid_member OR mdadm superblock
    """

    def get_section_name(self) -> str:
        return "disks"

    def default_record(self) -> List[DiskRecord]:
        return []

    def collect(self) -> List[DiskRecord]:
        self.log_start()

        names = [name for name in self.connector.list_dir(SYS_BLOCK) if is_physical_disk(name)]
        if not names:
            names = self._lsblk_disks()
        if not names:
            self.warn(DegradationKind.PARSE_MISS, SYS_BLOCK, "no physical block devices found")

        disks = [self._collect_disk(name) for name in names]

        self.log_end(len(disks))
        return disks

    def _lsblk_disks(self) -> List[str]:
        output = self.run_tool('lsblk', '-dn -o NAME,TYPE', target='block devices')
        names = []
        for line in (output or '').splitlines():
            parts = line.split()
            if len(parts) == 2 and parts[1] == 'disk' and is_physical_disk(parts[0]):
                names.append(parts[0])
        return sorted(names)

    def _collect_disk(self, name: str) -> DiskRecord:
        device = f"/dev/{name}"
        udev = self._udev_properties(device)
        transport = self._transport(name, udev)
        smart = self._smart_info(device, transport)

        record = DiskRecord(device=device, transport=transport)
        sources: Dict[str, str] = {}

        chains = {
            'model': FallbackChain(f"{name}.model", [
                ('smartctl', lambda: extract_field(smart, SMART_MODEL_LABELS)),
                ('udev', lambda: self._udev_value(udev, 'ID_MODEL')),
                ('sysfs', lambda: self.read_sysfs(f"{SYS_BLOCK}/{name}/device/model")),
            ]),
            'serial': FallbackChain(f"{name}.serial", [
                ('smartctl', lambda: extract_field(smart, SMART_SERIAL_LABELS)),
                ('udev', lambda: self._udev_value(udev, 'ID_SERIAL_SHORT', 'ID_SERIAL')),
            ]),
            'firmware': FallbackChain(f"{name}.firmware", [
                ('smartctl', lambda: extract_field(smart, SMART_FIRMWARE_LABELS)),
                ('udev', lambda: self._udev_value(udev, 'ID_REVISION')),
                ('sysfs', lambda: self.read_sysfs(f"{SYS_BLOCK}/{name}/device/firmware_rev")),
            ]),
            'capacity': FallbackChain(f"{name}.capacity", [
                ('smartctl', lambda: normalize_size(extract_field(smart, SMART_CAPACITY_LABELS))),
                ('blockdev', lambda: self._blockdev_size(device)),
                ('sysfs', lambda: self._sysfs_size(name)),
            ]),
            'rotation': FallbackChain(f"{name}.rotation", [
                ('smartctl', lambda: parse_rotation(extract_field(smart, 'Rotation Rate'))),
                ('nvme', lambda: 'SSD' if name.startswith('nvme') else None),
                ('sysfs', lambda: self._sysfs_rotational(name)),
                ('hdparm', lambda: self._hdparm_rotation(device, transport)),
            ]),
        }

        for field_name, chain in chains.items():
            result = chain.resolve()
            setattr(record, field_name, result.value)
            if result.resolved:
                sources[field_name] = result.source
            elif smart is not None and field_name != 'rotation':
                self.warn(DegradationKind.PARSE_MISS, f"{device} {field_name}", "no source reported this field")

        record.raid_member, fired = any_signal(f"{name}.raid_member", [
            ('kernel', lambda: self._kernel_md_member(name)),
            ('udev', lambda: udev.get('ID_FS_TYPE', '').endswith('_raid_member')),
            ('mdadm', lambda: self._mdadm_superblock(device)),
        ])
        if fired:
            sources['raid_member'] = '+'.join(fired)

        record.sources = sources
        return record

    # Identity sources

    def _smart_info(self, device: str, transport: str) -> Optional[str]:
        if transport == 'nvme':
            args = f"-i -d nvme {device}"
        elif transport == 'usb':
            # USB bridges need SAT pass-through to reach the drive
            args = f"-i -d sat {device}"
        else:
            args = f"-i {device}"
        return self.run_tool('smartctl', args, privileged=True, target=f"{device} identity",
                             accept=smartctl_accept)

    def _udev_properties(self, device: str) -> Dict[str, str]:
        output = self.run_tool('udevadm', f"info --query=property --name={device}", quiet=True)
        return dict(iter_pairs(output, separator='='))

    def _udev_value(self, udev: Dict[str, str], *keys: str) -> str:
        for key in keys:
            value = clean_value(udev.get(key))
            if value != UNKNOWN:
                return value.replace('_', ' ').strip()
        return UNKNOWN

    def _transport(self, name: str, udev: Dict[str, str]) -> str:
        if name.startswith('nvme'):
            return 'nvme'
        return clean_value(udev.get('ID_BUS'))

    # Capacity sources

    def _blockdev_size(self, device: str) -> Optional[str]:
        output = self.run_tool('blockdev', f"--getsize64 {device}", privileged=True, quiet=True)
        if output is None or not output.strip().isdigit():
            return None
        size = int(output.strip())
        return format_bytes(size) if size else None

    def _sysfs_size(self, name: str) -> Optional[str]:
        sectors = self.read_sysfs(f"{SYS_BLOCK}/{name}/size")
        if not sectors.isdigit() or int(sectors) == 0:
            return None
        # sysfs always counts 512-byte sectors regardless of the logical block size
        return format_bytes(int(sectors) * 512)

    # Rotation sources

    def _sysfs_rotational(self, name: str) -> Optional[str]:
        flag = self.read_sysfs(f"{SYS_BLOCK}/{name}/queue/rotational")
        if flag == '0':
            return 'SSD'
        # '1' is also reported by many USB bridges and virtual disks; keep probing
        return None

    def _hdparm_rotation(self, device: str, transport: str) -> Optional[Union[int, str]]:
        if transport != 'ata':
            return None
        output = self.run_tool('hdparm', f"-I {device}", privileged=True, quiet=True)
        return parse_rotation(extract_field(output, 'Nominal Media Rotation Rate'))

    # RAID membership signals

    def _kernel_md_member(self, name: str) -> bool:
        base = f"{SYS_BLOCK}/{name}"
        if self.connector.path_exists(f"{base}/md"):
            return True
        # md holders on the disk itself or on any of its partitions
        candidates = [base] + [
            f"{base}/{entry}" for entry in self.connector.list_dir(base) if entry.startswith(name)
        ]
        for path in candidates:
            if any(holder.startswith('md') for holder in self.connector.list_dir(f"{path}/holders")):
                return True
        return False

    def _mdadm_superblock(self, device: str) -> bool:
        output = self.run_tool('mdadm', f"--examine {device}", privileged=True, quiet=True)
        if not output:
            return False
        return 'Magic' in output or 'Raid Level' in output
