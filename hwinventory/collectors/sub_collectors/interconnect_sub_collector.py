# hwinventory/collectors/sub_collectors/interconnect_sub_collector.py
"""
Interconnect Sub-Collector
Collects high-speed fabric topology: Ethernet NICs and DPUs, InfiniBand HCAs,
NVSwitch/NVLink and the addresses of the host's network interfaces.
"""

import re
from typing import Callable, List, Optional

from ...models import (
    DegradationKind,
    EthernetDevice,
    EthernetInterface,
    InfinibandHca,
    InfinibandPort,
    Interconnects,
    NetworkInterface,
    NvLink,
    NvSwitch,
)
from ...utils.fallback import FallbackChain
from ...utils.text_parsing import UNKNOWN, clean_value, extract_field, strip_state_prefix
from .base_sub_collector import SubCollector
from .pci_sub_collector import parse_lspci

PCI_DEVICES_PATH = '/sys/bus/pci/devices'
NET_CLASS_PATH = '/sys/class/net'
INFINIBAND_CLASS_PATH = '/sys/class/infiniband'

DPU_KEYWORDS = ('bluefield', 'dpu', 'pensando', 'ipu', 'data processing', 'fungible')

# Ethernet, InfiniBand, "other network"; any other 02xx class is an offload device
PLAIN_NETWORK_CLASSES = ('0200', '0207', '0280')

NVSWITCH_QUERY = "nvswitch --query-switch=index,uuid,family,model,firmware --format=csv,noheader"
NVLINK_QUERY = "nvswitch --query-link=switch_index,link_id,peer,bandwidth,state --format=csv,noheader"


def device_kind(description: str, class_code: str) -> str:
    """NIC or DPU for one network-class PCI function"""
    lowered = description.lower()
    if any(re.search(rf'\b{re.escape(k)}\b', lowered) for k in DPU_KEYWORDS):
        return 'DPU'
    if class_code.startswith('02') and class_code not in PLAIN_NETWORK_CLASSES:
        return 'DPU'
    return 'NIC'


def _port_sort_key(port: str):
    return (0, int(port)) if port.isdigit() else (1, port)


def _csv_rows(text: Optional[str]) -> List[List[str]]:
    rows = []
    for line in (text or '').splitlines():
        if not line.strip():
            continue
        rows.append([clean_value(f) for f in line.split(',')])
    return rows


class InterconnectSubCollector(SubCollector):
    """
    Runs four independent sub-walks. A failing sub-walk yields an empty list
    and a warning; the others still complete.
    """

    def get_section_name(self) -> str:
        return "interconnects"

    def default_record(self) -> Interconnects:
        return Interconnects()

    def collect(self) -> Interconnects:
        self.log_start()

        interconnects = Interconnects(
            ethernet=self._safe_walk('ethernet', self._collect_ethernet),
            infiniband=self._safe_walk('infiniband', self._collect_infiniband),
            nvswitch=self._safe_walk('nvswitch', self._collect_nvswitch),
            network=self._safe_walk('network', self._collect_network),
        )

        self.log_end(
            len(interconnects.ethernet) + len(interconnects.infiniband) + len(interconnects.nvswitch)
        )
        return interconnects

    def _safe_walk(self, name: str, walk: Callable[[], list]) -> list:
        try:
            return walk()
        except Exception as e:
            self.logger.error(f"{name} walk failed: {e}")
            self.warn(DegradationKind.PARSE_MISS, name, f"walk failed: {e}")
            return []

    # Ethernet / DPU

    def _collect_ethernet(self) -> List[EthernetDevice]:
        output = self.run_tool('lspci', '-Dnn', target='network devices')
        devices = []
        for pci in parse_lspci(output):
            if pci.category != 'network':
                continue
            device = EthernetDevice(
                slot=pci.slot,
                description=pci.description,
                kind=device_kind(f"{pci.class_name} {pci.description}", pci.class_code),
                class_code=pci.class_code,
            )
            for ifname in self.connector.list_dir(f"{PCI_DEVICES_PATH}/{pci.slot}/net"):
                device.interfaces.append(self._collect_interface(pci.slot, ifname))
            devices.append(device)
        return devices

    def _collect_interface(self, slot: str, ifname: str) -> EthernetInterface:
        driver = self.connector.link_basename(f"{NET_CLASS_PATH}/{ifname}/device/driver")
        firmware = FallbackChain(f"{ifname}.firmware", [
            ('ethtool', lambda: self._ethtool_firmware(ifname)),
            ('sysfs', lambda: self._rdma_firmware(slot)),
        ]).resolve().value
        return EthernetInterface(
            name=ifname,
            mac=self.read_sysfs(f"{NET_CLASS_PATH}/{ifname}/address"),
            driver=driver or UNKNOWN,
            firmware=firmware,
        )

    def _ethtool_firmware(self, ifname: str) -> str:
        output = self.run_tool('ethtool', f"-i {ifname}", target=f"{ifname} driver info")
        return extract_field(output, 'firmware-version')

    def _rdma_firmware(self, slot: str) -> str:
        for rdma_dev in self.connector.list_dir(f"{PCI_DEVICES_PATH}/{slot}/infiniband"):
            value = self.read_sysfs(f"{PCI_DEVICES_PATH}/{slot}/infiniband/{rdma_dev}/fw_ver")
            if value != UNKNOWN:
                return value
        return UNKNOWN

    # InfiniBand

    def _collect_infiniband(self) -> List[InfinibandHca]:
        if not self.connector.path_exists(INFINIBAND_CLASS_PATH):
            self.warn(DegradationKind.TOOL_MISSING, 'infiniband',
                      f"InfiniBand subsystem not present ({INFINIBAND_CLASS_PATH} missing)")
            return []

        hcas = []
        for name in self.connector.list_dir(INFINIBAND_CLASS_PATH):
            base = f"{INFINIBAND_CLASS_PATH}/{name}"
            hca = InfinibandHca(
                name=name,
                hca_type=self.read_sysfs(f"{base}/hca_type"),
                firmware=self.read_sysfs(f"{base}/fw_ver"),
                node_description=self.read_sysfs(f"{base}/node_desc"),
                board_id=self.read_sysfs(f"{base}/board_id"),
            )
            for port in sorted(self.connector.list_dir(f"{base}/ports"), key=_port_sort_key):
                port_base = f"{base}/ports/{port}"
                hca.ports.append(InfinibandPort(
                    port=port,
                    state=strip_state_prefix(self.read_sysfs(f"{port_base}/state")),
                    phys_state=strip_state_prefix(self.read_sysfs(f"{port_base}/phys_state")),
                    rate=self.read_sysfs(f"{port_base}/rate"),
                    link_layer=self.read_sysfs(f"{port_base}/link_layer"),
                ))
            hcas.append(hca)
        if not hcas:
            self.logger.debug("No InfiniBand HCAs present")
        return hcas

    # NVSwitch / NVLink

    def _collect_nvswitch(self) -> List[NvSwitch]:
        if not self.caps.has('nvidia-smi'):
            self.warn(DegradationKind.TOOL_MISSING, 'nvidia-smi', "nvidia-smi is not installed")
            return []
        if not self.caps.supports('nvswitch'):
            self.warn(DegradationKind.TOOL_MISSING, 'nvswitch', "nvidia-smi lacks NVSwitch query support")
            return []

        switches = {}
        for row in _csv_rows(self.run_tool('nvidia-smi', NVSWITCH_QUERY, target='nvswitch inventory')):
            if len(row) != 5:
                self.warn(DegradationKind.PARSE_MISS, 'nvswitch inventory', f"unexpected row {row}")
                continue
            index, uuid, family, model, firmware = row
            switches[index] = NvSwitch(index=index, uuid=uuid, family=family, model=model, firmware=firmware)

        for row in _csv_rows(self.run_tool('nvidia-smi', NVLINK_QUERY, target='nvswitch topology')):
            if len(row) != 5:
                self.warn(DegradationKind.PARSE_MISS, 'nvswitch topology', f"unexpected row {row}")
                continue
            switch_index, link_id, peer, bandwidth, state = row
            switch = switches.get(switch_index)
            if switch is None:
                self.warn(DegradationKind.PARSE_MISS, f"nvlink {switch_index}/{link_id}",
                          f"link references unknown switch {switch_index}")
                continue
            switch.links.append(NvLink(link_id=link_id, peer=peer, bandwidth=bandwidth, state=state))

        return list(switches.values())

    # Network addresses

    def _collect_network(self) -> List[NetworkInterface]:
        output = self.run_tool('ip', '-br addr', target='network interfaces')
        interfaces = []
        for line in (output or '').splitlines():
            tokens = line.split()
            if len(tokens) < 2:
                continue
            # veth peers print as "eth0@if5"
            name = tokens[0].split('@')[0]
            if name == 'lo':
                continue
            interfaces.append(NetworkInterface(name=name, state=tokens[1], addresses=tokens[2:]))
        return interfaces
