# hwinventory/collectors/sub_collectors/base_sub_collector.py
"""
Base class for all section sub-collectors.
Sub-collectors focus on one hardware section (memory, disks, PCI, etc.)
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional
import logging

from ...connectors.base_connector import CommandResult, HostConnector
from ...models import CollectionWarning, DegradationKind
from ...utils.text_parsing import UNKNOWN, clean_value
from ..capability_detector import HostCapabilities

_PERMISSION_MARKERS = (
    'permission denied',
    'must be root',
    'operation not permitted',
    'password is required',
    'a terminal is required',
    'superuser',
)


def classify_failure(result: CommandResult) -> str:
    """Map a failed command to a degradation kind"""
    if result.timed_out:
        return DegradationKind.TIMEOUT
    if result.exit_code == 126:
        return DegradationKind.PERMISSION_DENIED
    error_text = f"{result.error}\n{result.output}".lower()
    if any(marker in error_text for marker in _PERMISSION_MARKERS):
        return DegradationKind.PERMISSION_DENIED
    # 127 (not found) and any other failure: the tool is unusable for this call
    return DegradationKind.TOOL_MISSING


class SubCollector(ABC):
    """
    Abstract base class for all sub-collectors.

    Sub-collectors are lightweight components that collect one section:
    - Receive an already-connected HostConnector and the capability table
    - Return a typed record by value (never a shared document)
    - Degrade fields to UNKNOWN and record a warning instead of raising
    - Are orchestrated by InventoryCollector
    """

    def __init__(self, connector: HostConnector, capabilities: HostCapabilities,
                 system_name: str = 'localhost', command_timeout: int = None):
        """
        Initialize sub-collector

        Args:
            connector: Already-connected HostConnector instance
            capabilities: Capability table from CapabilityDetector
            system_name: Name of the host being inventoried
            command_timeout: Per-call timeout (connector default if None)
        """
        self.connector = connector
        self.caps = capabilities
        self.system_name = system_name
        self.command_timeout = command_timeout
        self.warnings: List[CollectionWarning] = []
        self.logger = logging.getLogger(f"collector.{self.__class__.__name__}")

    @abstractmethod
    def collect(self) -> Any:
        """
        Collect the section.

        Returns:
            The section's typed record
        """
        pass

    @abstractmethod
    def get_section_name(self) -> str:
        """
        Get the name of the section this sub-collector produces.

        Returns:
            String name for the section in the canonical document
        """
        pass

    @abstractmethod
    def default_record(self) -> Any:
        """All-unknown record used when collection fails outright"""
        pass

    def warn(self, kind: str, target: str, message: str):
        """Record a degrade-to-unknown outcome on the diagnostic channel"""
        warning = CollectionWarning(self.get_section_name(), kind, target, message)
        if warning in self.warnings:
            return
        self.warnings.append(warning)
        self.logger.warning(str(warning))

    def run_tool(self, tool: str, args: str = '', privileged: bool = False, target: str = None,
                 quiet: bool = False, accept: Callable[[CommandResult], bool] = None) -> Optional[str]:
        """
        Run a diagnostic tool, degrading to None on any failure.

        Args:
            tool: Executable name as listed in the capability table
            args: Argument string
            privileged: Prefix with 'sudo -n' when elevation is available
            target: What the output is for (used in warnings)
            quiet: Expected-to-fail probe; failures are logged at debug only
            accept: Custom success test for tools with bitmask exit codes

        Returns:
            Command output, or None
        """
        target = target or tool
        if not self.caps.has(tool):
            if not quiet:
                self.warn(DegradationKind.TOOL_MISSING, tool, f"{tool} is not installed")
            return None

        prefix = self.caps.sudo_prefix if privileged else ''
        command = f"{prefix}{tool} {args}".strip()
        result = self.connector.execute_command(command, timeout=self.command_timeout)

        ok = accept(result) if accept else result.success
        if ok:
            return result.output

        kind = classify_failure(result)
        if quiet and kind != DegradationKind.TIMEOUT:
            self.logger.debug(f"{command} exited {result.exit_code}")
            return None

        detail = (result.error or '').strip().split('\n')[0] or f"exit code {result.exit_code}"
        self.warn(kind, target, f"'{command}' failed: {detail}")
        return None

    def read_sysfs(self, path: str) -> str:
        """Read a one-value kernel attribute file; UNKNOWN when absent"""
        content = self.connector.read_file(path)
        if content is None:
            return UNKNOWN
        return clean_value(content)

    def log_start(self):
        """Log the start of collection"""
        self.logger.info(f"Starting {self.get_section_name()} collection for {self.system_name}")

    def log_end(self, item_count: int = None):
        """Log the end of collection"""
        if item_count is not None:
            self.logger.info(f"Completed {self.get_section_name()} collection: {item_count} items")
        else:
            self.logger.info(f"Completed {self.get_section_name()} collection")

    def log_error(self, error: Exception):
        """Log collection error"""
        self.logger.error(f"Failed to collect {self.get_section_name()}: {error}")
