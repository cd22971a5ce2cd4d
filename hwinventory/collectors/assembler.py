# hwinventory/collectors/assembler.py
"""
Canonical Assembler
Merges the section records into one frozen document and exposes the flat
(namespaced) and tree (hierarchical) views. Views are structural
re-projections only; nothing is recomputed here.
"""

from typing import Any, Dict, List

from ..models import (
    CanonicalDocument,
    CollectionWarning,
    CpuProfile,
    DiskRecord,
    Interconnects,
    MemoryInventory,
    PciInventory,
    RaidStatus,
    SystemIdentity,
)


class CanonicalAssembler:
    """Builds the CanonicalDocument once all collectors have returned"""

    def assemble(self, sections: Dict[str, Any], warnings: List[CollectionWarning] = None) -> CanonicalDocument:
        """
        Args:
            sections: Section name -> typed record, as returned by the sub-collectors
            warnings: Every degradation recorded during the run

        Returns:
            Frozen CanonicalDocument; missing sections get their all-unknown default
        """
        return CanonicalDocument(
            system=sections.get('system') or SystemIdentity(),
            cpu=sections.get('cpu') or CpuProfile(),
            memory=sections.get('memory') or MemoryInventory(),
            disks=list(sections.get('disks') or []),
            raid=sections.get('raid') or RaidStatus(),
            pci=sections.get('pci') or PciInventory(),
            interconnects=sections.get('interconnects') or Interconnects(),
            warnings=list(warnings or []),
        )

    @staticmethod
    def _disks(disks: List[DiskRecord]) -> List[Dict[str, Any]]:
        return [disk.to_dict() for disk in disks]

    def flat_view(self, document: CanonicalDocument) -> Dict[str, Any]:
        """{system, cpu, ram{summary, dimms}, storage{disks, raid}, pci, gpus, interconnects}"""
        memory = document.memory.to_dict()
        pci = document.pci.to_dict()
        return {
            'system': document.system.to_dict(),
            'cpu': document.cpu.to_dict(),
            'ram': {
                'summary': memory['summary'],
                'dimms': memory['dimms'],
            },
            'storage': {
                'disks': self._disks(document.disks),
                'raid': document.raid.to_dict(),
            },
            'pci': pci['devices'],
            'gpus': pci['gpus'],
            'interconnects': document.interconnects.to_dict(),
        }

    def tree_view(self, document: CanonicalDocument) -> Dict[str, Any]:
        """{hardware{system, cpu, memory, storage, pci{devices, gpus}}, interconnects}"""
        return {
            'hardware': {
                'system': document.system.to_dict(),
                'cpu': document.cpu.to_dict(),
                'memory': document.memory.to_dict(),
                'storage': {
                    'disks': self._disks(document.disks),
                    'raid': document.raid.to_dict(),
                },
                'pci': document.pci.to_dict(),
            },
            'interconnects': document.interconnects.to_dict(),
        }
