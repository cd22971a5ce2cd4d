"""
Parsing, unit normalization, fallback and logging helpers shared by all collectors
"""

from .text_parsing import UNKNOWN, extract_field, split_blocks, TextBlock, is_unknown, clean_value
from .units import parse_size, format_bytes, normalize_size, normalize_frequency, normalize_transfer_rate
from .fallback import FallbackChain, FallbackResult, any_signal

__all__ = [
    'UNKNOWN',
    'extract_field',
    'split_blocks',
    'TextBlock',
    'is_unknown',
    'clean_value',
    'parse_size',
    'format_bytes',
    'normalize_size',
    'normalize_frequency',
    'normalize_transfer_rate',
    'FallbackChain',
    'FallbackResult',
    'any_signal'
]
