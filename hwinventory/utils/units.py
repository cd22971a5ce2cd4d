# hwinventory/utils/units.py
"""
Unit normalization for sizes, clock frequencies and transfer rates.

Sizes are carried as byte counts internally and rendered with binary
prefixes ("16 GiB"). DMI and lshw print binary quantities with decimal
labels ("16 GB" meaning 16 GiB), so size parsing treats K/M/G/T as 1024-based.
"""

import re
from typing import Optional, Union

from .text_parsing import UNKNOWN, clean_value

BINARY_UNITS = ['B', 'KiB', 'MiB', 'GiB', 'TiB', 'PiB', 'EiB']

_PREFIX_EXPONENT = {'': 0, 'K': 1, 'M': 2, 'G': 3, 'T': 4, 'P': 5, 'E': 6}

_BYTES_RE = re.compile(r'^([\d,]+)\s*(?:bytes\b|\[)', re.IGNORECASE)
_SIZE_RE = re.compile(r'^([\d.]+)\s*([KMGTPE]?)(?:i?B|i)?$', re.IGNORECASE)
_FREQ_RE = re.compile(r'^([\d.]+)\s*([KMG]?)(?:Hz)?$', re.IGNORECASE)
_RATE_RE = re.compile(r'^([\d.]+)\s*(MT/s|MHz|GT/s)?$', re.IGNORECASE)
_RPM_RE = re.compile(r'^(\d+)\s*rpm$', re.IGNORECASE)


def parse_size(value: Optional[str]) -> Optional[int]:
    """
    Parse a size string into bytes.

    Accepts "16 GB", "16384 MB", "64GiB", "1,000,204,886,016 bytes [1.00 TB]"
    and plain byte counts. Returns None for placeholders such as
    "No Module Installed" or anything unparseable.
    """
    value = clean_value(value)
    if value == UNKNOWN:
        return None

    match = _BYTES_RE.match(value)
    if match:
        return int(match.group(1).replace(',', ''))

    if value.isdigit():
        return int(value)

    match = _SIZE_RE.match(value)
    if not match:
        return None

    try:
        number = float(match.group(1))
    except ValueError:
        return None
    exponent = _PREFIX_EXPONENT[match.group(2).upper()]
    return int(round(number * (1024 ** exponent)))


def format_bytes(size: Optional[Union[int, float]]) -> str:
    """Render a byte count with binary prefixes: 17179869184 -> '16 GiB'"""
    if size is None or size < 0:
        return UNKNOWN

    value = float(size)
    unit_index = 0
    while value >= 1024 and unit_index < len(BINARY_UNITS) - 1:
        value /= 1024
        unit_index += 1

    if value == int(value):
        number = str(int(value))
    else:
        number = f"{value:.2f}".rstrip('0').rstrip('.')
    return f"{number} {BINARY_UNITS[unit_index]}"


def normalize_size(value: Optional[str]) -> str:
    """Any tool-reported size string -> binary human units, or unknown"""
    size = parse_size(value)
    if not size:
        return UNKNOWN
    return format_bytes(size)


def _format_number(number: float) -> str:
    if number == int(number):
        return str(int(number))
    return f"{number:.2f}".rstrip('0').rstrip('.')


def normalize_frequency(value: Optional[str]) -> str:
    """Clock frequency -> 'N MHz'. Bare numbers are taken as MHz (lscpu)."""
    value = clean_value(value)
    if value == UNKNOWN:
        return UNKNOWN

    match = _FREQ_RE.match(value.replace(' ', ''))
    if not match:
        return UNKNOWN

    number = float(match.group(1))
    prefix = match.group(2).upper()
    if prefix == 'G':
        number *= 1000
    elif prefix == 'K':
        number /= 1000
    elif prefix == '' and value.lower().endswith('hz') and not value.lower().endswith('mhz'):
        number /= 1_000_000

    return f"{_format_number(number)} MHz"


def normalize_transfer_rate(value: Optional[str]) -> str:
    """
    Memory speed -> 'N MT/s'. Older DMI tables label transfer rates as MHz;
    the figure is the same, only the unit label differs.
    """
    value = clean_value(value)
    if value == UNKNOWN:
        return UNKNOWN

    match = _RATE_RE.match(value)
    if not match:
        return UNKNOWN

    number = float(match.group(1))
    if number <= 0:
        return UNKNOWN
    if (match.group(2) or '').upper() == 'GT/S':
        number *= 1000
    return f"{_format_number(number)} MT/s"


def parse_rotation(value: Optional[str]) -> Optional[Union[int, str]]:
    """'7200 rpm' -> 7200, 'Solid State Device' -> 'SSD', otherwise None"""
    value = clean_value(value)
    if value == UNKNOWN:
        return None
    if 'solid state' in value.lower():
        return 'SSD'
    match = _RPM_RE.match(value)
    if match:
        rpm = int(match.group(1))
        return rpm if rpm > 0 else None
    if value.isdigit() and int(value) > 0:
        return int(value)
    return None
