# hwinventory/collectors/sub_collectors/memory_sub_collector.py
"""
Memory Sub-Collector
Collects per-slot DIMM details from the DMI table and derives the memory summary.
"""

from collections import Counter
from typing import Iterable, List, Optional, Tuple

from ...models import DegradationKind, DimmRecord, MemoryInventory, MemorySummary
from ...utils.fallback import FallbackChain
from ...utils.text_parsing import UNKNOWN, TextBlock, extract_field, is_unknown, split_blocks
from ...utils.units import format_bytes, normalize_size, normalize_transfer_rate, parse_size
from .base_sub_collector import SubCollector

MEMORY_DEVICE_HEADER = 'Memory Device'
MEMORY_ARRAY_HEADER = 'Physical Memory Array'
DMI_MEMORY_HEADERS = (MEMORY_DEVICE_HEADER, MEMORY_ARRAY_HEADER)


def parse_dimm(block: TextBlock) -> Optional[Tuple[DimmRecord, int]]:
    """
    Build a DimmRecord from one 'Memory Device' block.

    Returns:
        (record, size in bytes), or None for an empty or unparseable slot
    """
    size_bytes = parse_size(block.field('Size'))
    if not size_bytes:
        return None

    record = DimmRecord(
        size=format_bytes(size_bytes),
        type=block.field('Type'),
        speed=normalize_transfer_rate(block.field('Speed')),
        manufacturer=block.field('Manufacturer'),
        serial=block.field('Serial Number'),
        locator=block.field('Locator'),
        bank_locator=block.field('Bank Locator'),
        part_number=block.field('Part Number'),
        form_factor=block.field('Form Factor'),
        rank=block.field('Rank'),
        configured_speed=normalize_transfer_rate(
            block.field(['Configured Memory Speed', 'Configured Clock Speed'])
        ),
    )
    return record, size_bytes


def dominant_type(types: Iterable[str]) -> str:
    """Most common known type; ties go to the type seen first in slot order"""
    counts = Counter(t for t in types if not is_unknown(t))
    if not counts:
        return UNKNOWN
    return counts.most_common(1)[0][0]


def max_array_capacity(blocks: List[TextBlock]) -> Optional[int]:
    """Sum of 'Maximum Capacity' over system-memory arrays (one per socket)"""
    total = 0
    for block in blocks:
        if block.header != MEMORY_ARRAY_HEADER:
            continue
        use = block.field('Use')
        if not is_unknown(use) and use != 'System Memory':
            continue
        total += parse_size(block.field('Maximum Capacity')) or 0
    return total or None


class MemorySubCollector(SubCollector):
    """
    Splits 'dmidecode -t memory' into per-slot blocks, keeps populated slots
    and aggregates capacity and dominant module type.
    """

    def get_section_name(self) -> str:
        return "memory"

    def default_record(self) -> MemoryInventory:
        return MemoryInventory()

    def collect(self) -> MemoryInventory:
        self.log_start()

        dump = self.run_tool('dmidecode', '-t memory', privileged=True, target='memory devices')
        if dump is None:
            self.log_end(0)
            return MemoryInventory()

        blocks = split_blocks(dump, DMI_MEMORY_HEADERS)

        dimms = []
        total_bytes = 0
        for block in blocks:
            if block.header != MEMORY_DEVICE_HEADER:
                continue
            parsed = parse_dimm(block)
            if parsed is None:
                self.logger.debug(f"Skipping empty slot {block.field('Locator')}")
                continue
            record, size_bytes = parsed
            dimms.append(record)
            total_bytes += size_bytes

        if not dimms:
            self.warn(DegradationKind.PARSE_MISS, 'memory devices', "no populated memory slots found in DMI output")

        max_supported = FallbackChain('memory.max_supported', [
            ('dmi_array', lambda: self._format_optional(max_array_capacity(blocks))),
            ('lshw', self._lshw_capacity),
        ]).resolve().value

        summary = MemorySummary(
            total=format_bytes(total_bytes) if dimms else UNKNOWN,
            max_supported=max_supported,
            dominant_type=dominant_type(d.type for d in dimms),
        )

        self.log_end(len(dimms))
        return MemoryInventory(summary=summary, dimms=dimms)

    def _format_optional(self, size: Optional[int]) -> Optional[str]:
        return format_bytes(size) if size else None

    def _lshw_capacity(self) -> str:
        if not self.caps.has('lshw'):
            return UNKNOWN
        output = self.run_tool('lshw', '-class memory', privileged=True, target='memory capacity')
        return normalize_size(extract_field(output, 'capacity'))
