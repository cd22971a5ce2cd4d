# hwinventory/collectors/sub_collectors/__init__.py
"""
Sub-collectors for the inventory engine.
Each sub-collector is responsible for one section of the hardware document.
"""

from .base_sub_collector import SubCollector
from .system_sub_collector import SystemSubCollector
from .cpu_sub_collector import CpuSubCollector
from .memory_sub_collector import MemorySubCollector
from .disk_sub_collector import DiskSubCollector
from .raid_sub_collector import RaidSubCollector
from .pci_sub_collector import PciSubCollector
from .interconnect_sub_collector import InterconnectSubCollector

__all__ = [
    'SubCollector',
    'SystemSubCollector',
    'CpuSubCollector',
    'MemorySubCollector',
    'DiskSubCollector',
    'RaidSubCollector',
    'PciSubCollector',
    'InterconnectSubCollector'
]
