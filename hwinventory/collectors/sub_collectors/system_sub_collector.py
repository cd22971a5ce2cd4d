# hwinventory/collectors/sub_collectors/system_sub_collector.py
"""
System Sub-Collector
Collects system and BIOS identity from the DMI table.
"""

from typing import Optional

from ...models import BiosInfo, SystemIdentity
from ...utils.fallback import FallbackChain
from ...utils.text_parsing import UNKNOWN, clean_value
from .base_sub_collector import SubCollector

DMI_ID_PATH = '/sys/class/dmi/id'

# field -> (dmidecode -s keyword, /sys/class/dmi/id attribute)
IDENTITY_SOURCES = {
    'vendor': ('system-manufacturer', 'sys_vendor'),
    'product': ('system-product-name', 'product_name'),
    'serial': ('system-serial-number', 'product_serial'),
    'uuid': ('system-uuid', 'product_uuid'),
    'bios_vendor': ('bios-vendor', 'bios_vendor'),
    'bios_version': ('bios-version', 'bios_version'),
    'bios_date': ('bios-release-date', 'bios_date'),
}


class SystemSubCollector(SubCollector):
    """
    Uses 'dmidecode -s' per keyword, falling back to the kernel's DMI
    attributes (serial and UUID there are readable by root only).
    """

    def get_section_name(self) -> str:
        return "system"

    def default_record(self) -> SystemIdentity:
        return SystemIdentity()

    def collect(self) -> SystemIdentity:
        self.log_start()

        values = {}
        for name, (keyword, attribute) in IDENTITY_SOURCES.items():
            chain = FallbackChain(f"system.{name}", [
                ('dmidecode', lambda k=keyword: self._dmidecode_string(k)),
                ('sysfs', lambda a=attribute: self.read_sysfs(f"{DMI_ID_PATH}/{a}")),
            ])
            values[name] = chain.resolve().value

        identity = SystemIdentity(
            vendor=values['vendor'],
            product=values['product'],
            serial=values['serial'],
            uuid=values['uuid'],
            bios=BiosInfo(
                vendor=values['bios_vendor'],
                version=values['bios_version'],
                date=values['bios_date']
            )
        )

        self.log_end()
        return identity

    def _dmidecode_string(self, keyword: str) -> Optional[str]:
        output = self.run_tool('dmidecode', f"-s {keyword}", privileged=True, target=keyword)
        if output is None:
            return None
        # Comment lines appear when the DMI table is partially unreadable
        lines = [line for line in output.splitlines() if line.strip() and not line.startswith('#')]
        if not lines:
            return UNKNOWN
        return clean_value(lines[0])
