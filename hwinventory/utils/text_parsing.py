# hwinventory/utils/text_parsing.py
"""
Field extraction and block tokenizing for free-text tool output.

Tools such as dmidecode, lscpu, smartctl and udevadm print "Label: value"
lines. extract_field() pulls one value out of such text; split_blocks()
turns a multi-record dump into labeled blocks on an explicit header rule.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Pattern, Sequence, Tuple, Union

UNKNOWN = "unknown"

# Vendor filler strings that carry no information
PLACEHOLDER_VALUES = {
    '',
    'unknown',
    'not specified',
    'not provided',
    'not available',
    'not present',
    'to be filled by o.e.m.',
    'default string',
    'none',
    'n/a',
    '[n/a]',
    'no asset tag',
}

Label = Union[str, Pattern]
LabelSpec = Union[Label, Sequence[Label]]


def is_unknown(value) -> bool:
    return value is None or value == UNKNOWN


def clean_value(value: Optional[str]) -> str:
    """Trim a raw value and map vendor placeholders to the unknown sentinel"""
    if value is None:
        return UNKNOWN
    value = value.strip()
    if value.lower() in PLACEHOLDER_VALUES:
        return UNKNOWN
    return value


def _labels(label: LabelSpec) -> List[Label]:
    if isinstance(label, (str, re.Pattern)):
        return [label]
    return list(label)


def _key_matches(key: str, label: Label) -> bool:
    if isinstance(label, re.Pattern):
        return label.fullmatch(key) is not None
    return key == label


def iter_pairs(text: Optional[str], separator: str = ':') -> List[Tuple[str, str]]:
    """All "key<sep>value" pairs of a text, in document order"""
    pairs = []
    if not text or not isinstance(text, str):
        return pairs
    for line in text.splitlines():
        stripped = line.strip()
        if separator not in stripped:
            continue
        key, value = stripped.split(separator, 1)
        pairs.append((key.strip(), value.strip()))
    return pairs


def extract_field(text: Optional[str], label: LabelSpec, separator: str = ':') -> str:
    """
    Return the value of the first line whose key matches label.

    Args:
        text: Raw tool output (None and non-strings are tolerated)
        label: Exact key, compiled regex (full match on the key) or a
            sequence of alternatives; the first matching line in document
            order wins regardless of which alternative matched
        separator: Key/value separator

    Returns:
        Trimmed value, or UNKNOWN when nothing matches
    """
    labels = _labels(label)
    for key, value in iter_pairs(text, separator):
        if any(_key_matches(key, candidate) for candidate in labels):
            return clean_value(value)
    return UNKNOWN


@dataclass
class TextBlock:
    """One record of a multi-record dump, e.g. a single DMI 'Memory Device'"""
    header: str
    text: str

    def field(self, label: LabelSpec) -> str:
        return extract_field(self.text, label)


def split_blocks(text: Optional[str], headers: Sequence[str]) -> List[TextBlock]:
    """
    Split a dump into blocks. A block starts at a line whose stripped
    content equals one of headers and runs until the next header line.
    Text before the first header is discarded.
    """
    blocks = []
    if not text or not isinstance(text, str):
        return blocks

    header_set = set(headers)
    current_header = None
    current_lines: List[str] = []

    for line in text.splitlines():
        stripped = line.strip()
        if stripped in header_set:
            if current_header is not None:
                blocks.append(TextBlock(current_header, '\n'.join(current_lines)))
            current_header = stripped
            current_lines = []
        elif current_header is not None:
            current_lines.append(line)

    if current_header is not None:
        blocks.append(TextBlock(current_header, '\n'.join(current_lines)))

    return blocks


def strip_state_prefix(value: Optional[str]) -> str:
    """'4: ACTIVE' -> 'ACTIVE' (sysfs InfiniBand state files)"""
    value = clean_value(value)
    if value == UNKNOWN:
        return value
    match = re.match(r'^\d+:\s*(.+)$', value)
    return match.group(1).strip() if match else value
