# hwinventory/collectors/sub_collectors/raid_sub_collector.py
"""
RAID Sub-Collector
Collects Linux software RAID state and the configuration dump of the first
hardware RAID vendor CLI found on the host.
"""

import re
from typing import List, Optional

from ...models import NO_RAID_DETECTED, HardwareRaid, RaidArray, RaidStatus
from ...utils.text_parsing import UNKNOWN, extract_field, is_unknown
from .base_sub_collector import SubCollector

MDSTAT_PATH = '/proc/mdstat'

ARRAY_LINE_RE = re.compile(r'^(md\d+)\s*:\s*(.*)$')
MEMBER_RE = re.compile(r'^([\w-]+)\[\d+\]')
RAID_LEVELS = ('linear', 'multipath', 'faulty')

# Priority order: the first installed tool wins
HARDWARE_RAID_TOOLS = [
    ('storcli64', '/call show'),
    ('storcli', '/call show'),
    ('perccli64', '/call show'),
    ('perccli', '/call show'),
    ('ssacli', 'ctrl all show config'),
    ('hpssacli', 'ctrl all show config'),
    ('arcconf', 'GETCONFIG 1'),
    ('MegaCli64', '-LDInfo -Lall -aALL'),
    ('MegaCli', '-LDInfo -Lall -aALL'),
]


def parse_mdstat(text: Optional[str]) -> List[RaidArray]:
    """
    Parse the array lines of /proc/mdstat, e.g.

        md0 : active raid1 sdb1[1] sda1[0]
        md127 : inactive sdc[0](S)
    """
    arrays = []
    if not text:
        return arrays

    for line in text.splitlines():
        match = ARRAY_LINE_RE.match(line)
        if not match:
            continue

        tokens = match.group(2).split()
        array = RaidArray(name=match.group(1))
        if tokens:
            array.state = tokens.pop(0)
        # "(read-only)" / "(auto-read-only)" qualifies the state
        if tokens and tokens[0].startswith('('):
            array.state = f"{array.state} {tokens.pop(0)}"
        if tokens and (tokens[0].startswith('raid') or tokens[0] in RAID_LEVELS):
            array.level = tokens.pop(0)

        for token in tokens:
            member = MEMBER_RE.match(token)
            if member:
                array.members.append(member.group(1))
        arrays.append(array)

    return arrays


class RaidSubCollector(SubCollector):
    """
    Reads /proc/mdstat verbatim, enriches each md array with 'mdadm --detail'
    and probes vendor RAID CLIs. Finding nothing is a normal outcome.
    """

    def get_section_name(self) -> str:
        return "raid"

    def default_record(self) -> RaidStatus:
        return RaidStatus()

    def collect(self) -> RaidStatus:
        self.log_start()

        mdstat = self.connector.read_file(MDSTAT_PATH)
        if mdstat is None:
            # md driver not loaded; no software RAID possible
            self.logger.debug(f"{MDSTAT_PATH} not readable")

        arrays = parse_mdstat(mdstat)
        for array in arrays:
            self._add_detail(array)

        hardware = self._probe_hardware_raid()

        status = RaidStatus(
            mdstat=mdstat.rstrip() if mdstat and mdstat.strip() else UNKNOWN,
            arrays=arrays,
            hardware=hardware,
        )
        # An installed controller CLI that failed to answer proves nothing
        status.detected = bool(arrays) or not is_unknown(hardware.output)
        status.summary = self._summarize(status)

        self.log_end(len(arrays))
        return status

    def _add_detail(self, array: RaidArray):
        if not self.caps.has('mdadm'):
            return
        detail = self.run_tool('mdadm', f"--detail /dev/{array.name}", privileged=True,
                               target=f"/dev/{array.name}")
        if not detail:
            return
        array.detail = detail.strip()
        if is_unknown(array.level):
            array.level = extract_field(detail, 'Raid Level')
        state = extract_field(detail, 'State')
        if not is_unknown(state):
            array.state = state

    def _probe_hardware_raid(self) -> HardwareRaid:
        for tool, args in HARDWARE_RAID_TOOLS:
            if not self.caps.has(tool):
                continue
            self.logger.info(f"Using hardware RAID tool {tool}")
            output = self.run_tool(tool, args, privileged=True, target=f"{tool} configuration")
            return HardwareRaid(tool=tool, output=output.strip() if output and output.strip() else UNKNOWN)
        return HardwareRaid()

    def _summarize(self, status: RaidStatus) -> str:
        if not status.detected:
            return NO_RAID_DETECTED
        parts = []
        if status.arrays:
            names = ', '.join(f"{a.name} ({a.level})" for a in status.arrays)
            parts.append(f"software: {names}")
        if not is_unknown(status.hardware.tool):
            failed = is_unknown(status.hardware.output)
            parts.append(f"hardware: {status.hardware.tool}" + (" (query failed)" if failed else ""))
        return '; '.join(parts)
