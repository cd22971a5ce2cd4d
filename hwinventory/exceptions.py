# hwinventory/exceptions.py
"""
Fatal errors for the hardware inventory engine.
Degraded sections never raise; only the conditions below stop a run.
"""

from typing import List


class InventoryError(Exception):
    """Base class for fatal inventory errors"""


class ConfigError(InventoryError):
    """Configuration file is unreadable or invalid"""


class MissingToolsError(InventoryError):
    """Strict mode found required tools (or root privilege) missing"""

    def __init__(self, missing: List[str]):
        self.missing = list(missing)
        super().__init__(
            f"Missing required tools: {', '.join(self.missing)}"
        )


class CollectionCancelled(InventoryError):
    """The run was cancelled; partial results are discarded"""
