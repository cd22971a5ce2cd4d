from .assembler import CanonicalAssembler
from .capability_detector import CapabilityDetector, HostCapabilities, PrivilegeMode
from .main_collector import InventoryCollector

__all__ = [
    'CanonicalAssembler',
    'CapabilityDetector',
    'HostCapabilities',
    'PrivilegeMode',
    'InventoryCollector'
]
