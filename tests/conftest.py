# tests/conftest.py
"""
Shared fixtures: a fake host connector serving canned command output and a
fake sysfs tree, plus capability tables for driving sub-collectors directly.
"""

from typing import Dict, Iterable, List, Optional, Union

import pytest

from hwinventory.collectors.capability_detector import HostCapabilities, PrivilegeMode
from hwinventory.config.settings import DEFAULT_REQUIRED_TOOLS
from hwinventory.connectors.base_connector import CommandResult, HostConnector

import sample_output as sample


class FakeConnector(HostConnector):
    """
    In-memory host.

    commands: exact command line -> output string or CommandResult;
              anything else fails with exit code 127
    files:    path -> content (parent directories are implied)
    dirs:     extra (possibly empty) directories
    links:    symlink path -> resolved target
    tools:    names reported as installed by which()
    """

    def __init__(self, commands: Dict[str, Union[str, CommandResult]] = None,
                 files: Dict[str, str] = None, dirs: Iterable[str] = (),
                 links: Dict[str, str] = None, tools: Iterable[str] = ()):
        self.commands = dict(commands or {})
        self.files = dict(files or {})
        self.dirs = set(dirs)
        self.links = dict(links or {})
        self.tools = set(tools)
        self.executed: List[str] = []
        self.terminated = False
        self.closed = False

    def execute_command(self, command: str, timeout: int = None, log_command: bool = True) -> CommandResult:
        self.executed.append(command)
        response = self.commands.get(command)
        if response is None:
            return CommandResult(False, error=f"sh: 1: {command.split()[0]}: not found",
                                 exit_code=127, command=command)
        if isinstance(response, CommandResult):
            return response
        return CommandResult(True, output=response, command=command)

    def _all_paths(self) -> List[str]:
        return list(self.files) + list(self.dirs) + list(self.links)

    def read_file(self, path: str) -> Optional[str]:
        return self.files.get(path)

    def list_dir(self, path: str) -> List[str]:
        prefix = path.rstrip('/') + '/'
        names = {p[len(prefix):].split('/')[0] for p in self._all_paths() if p.startswith(prefix)}
        return sorted(names)

    def path_exists(self, path: str) -> bool:
        prefix = path.rstrip('/') + '/'
        return any(p == path or p.startswith(prefix) for p in self._all_paths())

    def read_link(self, path: str) -> Optional[str]:
        return self.links.get(path)

    def which(self, tool: str) -> bool:
        return tool in self.tools

    def terminate_all(self):
        self.terminated = True

    def close(self):
        self.closed = True


def failed(error: str = '', exit_code: int = 1, output: str = '', timed_out: bool = False) -> CommandResult:
    """A failing CommandResult for FakeConnector.commands"""
    return CommandResult(False, output=output, error=error, exit_code=exit_code, timed_out=timed_out)


@pytest.fixture
def make_caps():
    """Factory for capability tables; root privilege unless stated otherwise"""
    def _make(*tools: str, privilege: str = PrivilegeMode.ROOT, features: Dict[str, bool] = None):
        return HostCapabilities(
            tools={tool: True for tool in tools},
            privilege=privilege,
            required_tools=list(DEFAULT_REQUIRED_TOOLS),
            features=dict(features or {}),
        )
    return _make


@pytest.fixture
def bare_host():
    """Root shell with no diagnostic tools and an empty sysfs"""
    return FakeConnector(commands={'id -u': '0\n'})


@pytest.fixture
def populated_host():
    """A GPU server with every tool installed and a representative sysfs tree"""
    tools = DEFAULT_REQUIRED_TOOLS + ['udevadm', 'mdadm', 'ethtool', 'nvidia-smi', 'storcli64']
    dmi = {
        'system-manufacturer': 'Supermicro',
        'system-product-name': 'SYS-4029GP-TRT',
        'system-serial-number': 'S123456789',
        'system-uuid': '00000000-0000-0000-0000-ac1f6b000001',
        'bios-vendor': 'American Megatrends Inc.',
        'bios-version': '3.4',
        'bios-release-date': '10/15/2021',
    }
    commands = {f"dmidecode -s {keyword}": f"{value}\n" for keyword, value in dmi.items()}
    commands.update({
        'id -u': '0\n',
        'nvidia-smi -h': 'nvidia-smi\n    nvswitch    Display NVSwitch information\n',
        'dmidecode -t memory': sample.DMIDECODE_MEMORY,
        'lscpu': sample.LSCPU,
        'smartctl -i /dev/sda': sample.SMARTCTL_SATA,
        'smartctl -i -d nvme /dev/nvme0n1': sample.SMARTCTL_NVME,
        'udevadm info --query=property --name=/dev/sda': 'ID_BUS=ata\nID_FS_TYPE=linux_raid_member\n',
        'mdadm --examine /dev/sda': sample.MDADM_EXAMINE,
        'mdadm --detail /dev/md0': sample.MDADM_DETAIL_MD0,
        'storcli64 /call show': 'Controller = 0\nStatus = Success\n',
        'lspci -Dnn': sample.LSPCI,
        'nvidia-smi --query-gpu=name,uuid,pci.bus_id,serial --format=csv,noheader': sample.NVIDIA_SMI_GPUS,
        'ethtool -i ens1f0': sample.ETHTOOL_MLX,
        'nvidia-smi nvswitch --query-switch=index,uuid,family,model,firmware --format=csv,noheader':
            sample.NVSWITCH_INVENTORY,
        'nvidia-smi nvswitch --query-link=switch_index,link_id,peer,bandwidth,state --format=csv,noheader':
            sample.NVSWITCH_LINKS,
        'ip -br addr': sample.IP_BRIEF,
    })
    files = {
        '/proc/mdstat': sample.MDSTAT,
        '/sys/block/sda/size': '7814037168\n',
        '/sys/block/sda/queue/rotational': '1\n',
        '/sys/block/nvme0n1/size': '1953525168\n',
        '/sys/block/nvme0n1/queue/rotational': '0\n',
        '/sys/class/net/ens1f0/address': 'b8:ce:f6:00:00:01\n',
        '/sys/class/infiniband/mlx5_1/fw_ver': '20.31.1014\n',
        '/sys/class/infiniband/mlx5_1/node_desc': 'gpu01 HCA-1\n',
        '/sys/class/infiniband/mlx5_1/hca_type': 'MT4123\n',
        '/sys/class/infiniband/mlx5_1/board_id': 'MT_0000000223\n',
        '/sys/class/infiniband/mlx5_1/ports/1/state': '4: ACTIVE\n',
        '/sys/class/infiniband/mlx5_1/ports/1/phys_state': '5: LinkUp\n',
        '/sys/class/infiniband/mlx5_1/ports/1/rate': '200 Gb/sec (4X HDR)\n',
        '/sys/class/infiniband/mlx5_1/ports/1/link_layer': 'InfiniBand\n',
    }
    dirs = [
        '/sys/block/loop0',
        '/sys/block/dm-0',
        '/sys/block/sr0',
        '/sys/block/md0',
        '/sys/block/sda/sda1/holders/md0',
        '/sys/bus/pci/devices/0000:5e:00.0/net/ens1f0',
    ]
    links = {
        '/sys/class/net/ens1f0/device/driver': '/sys/bus/pci/drivers/mlx5_core',
    }
    return FakeConnector(commands=commands, files=files, dirs=dirs, links=links, tools=tools)
