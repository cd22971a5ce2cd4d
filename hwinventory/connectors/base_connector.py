# hwinventory/connectors/base_connector.py
"""
Base interface for host connectors.
A connector runs diagnostic commands and reads kernel pseudo-files
(sysfs/procfs) on the host being inventoried.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional
import posixpath


# Extra directories searched when probing for admin tools as a normal user
SBIN_PATHS = "/usr/local/sbin:/usr/sbin:/sbin"


@dataclass
class CommandResult:
    """Result of command execution"""
    success: bool
    output: str = ""
    error: str = ""
    exit_code: int = 0
    execution_time: float = 0.0
    command: str = ""
    timed_out: bool = False


class HostConnector(ABC):
    """
    Abstract host access used by the capability detector and all sub-collectors.
    """

    timeout: int = 30

    @abstractmethod
    def execute_command(self, command: str, timeout: int = None, log_command: bool = True) -> CommandResult:
        """
        Execute a shell command on the host.

        Args:
            command: Command line to execute
            timeout: Per-call timeout in seconds (connector default if None)
            log_command: Whether to log the command being executed

        Returns:
            CommandResult: never raises for command failures or timeouts
        """
        pass

    @abstractmethod
    def read_file(self, path: str) -> Optional[str]:
        """Read a text file, returning None when it is absent or unreadable"""
        pass

    @abstractmethod
    def list_dir(self, path: str) -> List[str]:
        """Sorted entry names of a directory, [] when absent"""
        pass

    @abstractmethod
    def path_exists(self, path: str) -> bool:
        pass

    @abstractmethod
    def read_link(self, path: str) -> Optional[str]:
        """Resolved target of a symlink, None when not a link"""
        pass

    def which(self, tool: str) -> bool:
        """Check if a command is available on the host"""
        result = self.execute_command(
            f"PATH=\"$PATH:{SBIN_PATHS}\"; export PATH; command -v {tool} >/dev/null 2>&1",
            log_command=False
        )
        return result.success

    def establish_sudo(self) -> bool:
        """Prime the sudo credential cache; only meaningful with a terminal"""
        return False

    def terminate_all(self):
        """Kill in-flight commands (used on cancellation)"""
        pass

    def link_basename(self, path: str) -> Optional[str]:
        """Final component of a symlink target, e.g. the bound driver name"""
        target = self.read_link(path)
        if not target:
            return None
        return posixpath.basename(target.rstrip('/'))

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
