# hwinventory/collectors/sub_collectors/cpu_sub_collector.py
"""
CPU Sub-Collector
Collects CPU topology: architecture, model, logical CPUs, cores, sockets, max clock.
"""

from typing import Optional

from ...models import CpuProfile
from ...utils.fallback import FallbackChain
from ...utils.text_parsing import UNKNOWN, extract_field, iter_pairs
from ...utils.units import normalize_frequency
from .base_sub_collector import SubCollector

CPUINFO_PATH = '/proc/cpuinfo'
MAX_FREQ_PATH = '/sys/devices/system/cpu/cpu0/cpufreq/cpuinfo_max_freq'
ARCH_PATH = '/proc/sys/kernel/arch'


class CpuSubCollector(SubCollector):
    """
    Parses lscpu; /proc/cpuinfo and cpufreq attributes fill in when lscpu
    is missing or leaves a field blank.
    """

    def get_section_name(self) -> str:
        return "cpu"

    def default_record(self) -> CpuProfile:
        return CpuProfile()

    def collect(self) -> CpuProfile:
        self.log_start()

        lscpu = self.run_tool('lscpu', target='cpu topology')
        self._cpuinfo = None

        profile = CpuProfile(
            architecture=FallbackChain('cpu.architecture', [
                ('lscpu', lambda: extract_field(lscpu, 'Architecture')),
                ('procfs', lambda: self.read_sysfs(ARCH_PATH)),
            ]).resolve().value,
            model=FallbackChain('cpu.model', [
                ('lscpu', lambda: extract_field(lscpu, 'Model name')),
                ('cpuinfo', lambda: extract_field(self._read_cpuinfo(), 'model name')),
            ]).resolve().value,
            cpus=FallbackChain('cpu.cpus', [
                ('lscpu', lambda: extract_field(lscpu, 'CPU(s)')),
                ('cpuinfo', self._cpuinfo_processor_count),
            ]).resolve().value,
            cores_per_socket=FallbackChain('cpu.cores_per_socket', [
                ('lscpu', lambda: extract_field(lscpu, 'Core(s) per socket')),
                ('cpuinfo', lambda: extract_field(self._read_cpuinfo(), 'cpu cores')),
            ]).resolve().value,
            sockets=FallbackChain('cpu.sockets', [
                ('lscpu', lambda: extract_field(lscpu, 'Socket(s)')),
                ('cpuinfo', self._cpuinfo_socket_count),
            ]).resolve().value,
            max_mhz=FallbackChain('cpu.max_mhz', [
                ('lscpu', lambda: normalize_frequency(extract_field(lscpu, 'CPU max MHz'))),
                ('cpufreq', self._cpufreq_max),
            ]).resolve().value,
        )

        self.log_end()
        return profile

    def _read_cpuinfo(self) -> Optional[str]:
        if self._cpuinfo is None:
            self._cpuinfo = self.connector.read_file(CPUINFO_PATH) or ''
        return self._cpuinfo

    def _cpuinfo_processor_count(self) -> Optional[str]:
        count = sum(1 for key, _ in iter_pairs(self._read_cpuinfo()) if key == 'processor')
        return str(count) if count else None

    def _cpuinfo_socket_count(self) -> Optional[str]:
        sockets = {value for key, value in iter_pairs(self._read_cpuinfo()) if key == 'physical id'}
        return str(len(sockets)) if sockets else None

    def _cpufreq_max(self) -> str:
        khz = self.read_sysfs(MAX_FREQ_PATH)
        if khz == UNKNOWN or not khz.isdigit():
            return UNKNOWN
        return normalize_frequency(f"{int(khz)} kHz")
