# hwinventory/reporting/report_formatter.py
"""
Human-readable text report.
Renders the canonical document as numbered sections of column-aligned tables.
"""

import io
from typing import Iterable, List, Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from ..models import CanonicalDocument
from ..utils.text_parsing import UNKNOWN


def _table(title: Optional[str], columns: Sequence[str]) -> Table:
    table = Table(box=box.SIMPLE_HEAVY, title=title, title_justify='left', show_edge=False)
    for column in columns:
        table.add_column(column, overflow='fold')
    return table


def _row(table: Table, *values):
    # Text cells: tool output routinely contains [brackets] that rich would parse as markup
    table.add_row(*(Text(str(value)) for value in values))


def _field_table(rows: Iterable[Sequence[str]]) -> Table:
    table = _table(None, ["Field", "Value"])
    table.columns[0].style = "bold"
    for label, value in rows:
        _row(table, label, value)
    return table


def _header(console: Console, title: str):
    console.print()
    console.print(Text(title, style="bold"))
    console.print(Text("-" * len(title)))


def _none(console: Console, message: str):
    console.print(f"  {message}")


class ReportFormatter:
    """Renders sections 1-8 of the text report"""

    def __init__(self, console: Console = None):
        self.console = console or Console()

    def render(self, document: CanonicalDocument):
        self._system(document)
        self._cpu(document)
        self._memory(document)
        self._disks(document)
        self._raid(document)
        self._pci(document)
        self._gpus(document)
        self._interconnects(document)

    def _system(self, document: CanonicalDocument):
        _header(self.console, "1. System Information")
        system = document.system
        self.console.print(_field_table([
            ("Vendor", system.vendor),
            ("Product", system.product),
            ("Serial", system.serial),
            ("UUID", system.uuid),
            ("BIOS Vendor", system.bios.vendor),
            ("BIOS Version", system.bios.version),
            ("BIOS Date", system.bios.date),
        ]))

    def _cpu(self, document: CanonicalDocument):
        _header(self.console, "2. CPU Information")
        cpu = document.cpu
        self.console.print(_field_table([
            ("Model", cpu.model),
            ("Architecture", cpu.architecture),
            ("CPU Count", cpu.cpus),
            ("Cores / Socket", cpu.cores_per_socket),
            ("Sockets", cpu.sockets),
            ("Max MHz", cpu.max_mhz),
        ]))

    def _memory(self, document: CanonicalDocument):
        _header(self.console, "3. Memory Information")
        summary = document.memory.summary
        self.console.print(_field_table([
            ("Total Installed", summary.total),
            ("Maximum Supported", summary.max_supported),
            ("Dominant Type", summary.dominant_type),
        ]))
        if not document.memory.dimms:
            _none(self.console, "No populated DIMM slots reported")
            return
        table = _table("DIMMs", ["Locator", "Size", "Type", "Speed", "Manufacturer", "Part Number", "Serial"])
        for dimm in document.memory.dimms:
            _row(table, dimm.locator, dimm.size, dimm.type, dimm.speed,
                 dimm.manufacturer, dimm.part_number, dimm.serial)
        self.console.print(table)

    def _disks(self, document: CanonicalDocument):
        _header(self.console, "4. Disk Information")
        if not document.disks:
            _none(self.console, "No physical disks found")
            return
        table = _table(None, ["Device", "Model", "Serial", "Firmware", "Capacity", "Rotation", "Transport", "RAID"])
        for disk in document.disks:
            rotation = f"{disk.rotation} rpm" if isinstance(disk.rotation, int) else disk.rotation
            _row(table, disk.device, disk.model, disk.serial, disk.firmware, disk.capacity,
                 rotation, disk.transport, "yes" if disk.raid_member else "no")
        self.console.print(table)

    def _raid(self, document: CanonicalDocument):
        _header(self.console, "5. RAID Information")
        raid = document.raid
        self.console.print(Text(f"  {raid.summary}"))
        if raid.arrays:
            table = _table("Software arrays", ["Array", "Level", "State", "Members"])
            for array in raid.arrays:
                _row(table, array.name, array.level, array.state, ' '.join(array.members) or UNKNOWN)
            self.console.print(table)
        if raid.hardware.output != UNKNOWN:
            self.console.print(Text(f"Hardware RAID ({raid.hardware.tool})", style="bold"))
            self.console.print(Text(raid.hardware.output))

    def _pci(self, document: CanonicalDocument):
        _header(self.console, "6. PCI Devices")
        if not document.pci.devices:
            _none(self.console, "No PCI devices reported")
            return
        table = _table(None, ["Slot", "Category", "Class", "IDs", "Description"])
        for device in document.pci.devices:
            _row(table, device.slot, device.category, device.class_name,
                 device.vendor_device, device.description)
        self.console.print(table)

    def _gpus(self, document: CanonicalDocument):
        _header(self.console, "7. GPUs")
        if not document.pci.gpus:
            _none(self.console, "No GPUs found")
            return
        table = _table(None, ["Slot", "Name", "UUID", "Serial", "Source"])
        for gpu in document.pci.gpus:
            serial = gpu.serial_note if gpu.serial_note else gpu.serial
            _row(table, gpu.slot, gpu.name, gpu.uuid, serial, gpu.source)
        self.console.print(table)

    def _interconnects(self, document: CanonicalDocument):
        _header(self.console, "8. Interconnects")
        interconnects = document.interconnects

        if interconnects.ethernet:
            table = _table("Ethernet / DPU", ["Slot", "Kind", "Interface", "MAC", "Driver", "Firmware", "Description"])
            for device in interconnects.ethernet:
                rows = device.interfaces or [None]
                for iface in rows:
                    _row(table, device.slot, device.kind, *self._interface_cells(iface), device.description)
            self.console.print(table)
        else:
            _none(self.console, "No Ethernet devices found")

        if interconnects.infiniband:
            table = _table("InfiniBand", ["HCA", "Type", "Firmware", "Port", "State", "Phys State", "Rate", "Link Layer"])
            for hca in interconnects.infiniband:
                for port in hca.ports or [None]:
                    if port is None:
                        _row(table, hca.name, hca.hca_type, hca.firmware, '-', '-', '-', '-', '-')
                        continue
                    _row(table, hca.name, hca.hca_type, hca.firmware, port.port, port.state,
                         port.phys_state, port.rate, port.link_layer)
            self.console.print(table)

        if interconnects.nvswitch:
            table = _table("NVSwitch", ["Index", "Model", "Firmware", "UUID", "Links"])
            for switch in interconnects.nvswitch:
                _row(table, switch.index, switch.model, switch.firmware, switch.uuid, str(len(switch.links)))
            self.console.print(table)

        if interconnects.network:
            table = _table("Network interfaces", ["Interface", "State", "Addresses"])
            for iface in interconnects.network:
                _row(table, iface.name, iface.state, ' '.join(iface.addresses))
            self.console.print(table)

    @staticmethod
    def _interface_cells(iface) -> List[str]:
        if iface is None:
            return ['-', '-', '-', '-']
        return [iface.name, iface.mac, iface.driver, iface.firmware]


def render_text(document: CanonicalDocument, width: int = 160) -> str:
    """Plain-text rendering (no color), e.g. for files and tests"""
    buffer = io.StringIO()
    console = Console(file=buffer, width=width, color_system=None, force_terminal=False)
    ReportFormatter(console).render(document)
    return buffer.getvalue()
