# hwinventory/collectors/capability_detector.py
"""
Host Capability Detection
Detects which diagnostic tools are installed and what privilege level is available.
"""

from typing import Dict, List
from dataclasses import dataclass, field
import logging

from ..connectors.base_connector import HostConnector
from ..exceptions import MissingToolsError
from ..models import CollectionWarning, DegradationKind


class PrivilegeMode:
    ROOT = "root"
    ELEVATABLE = "elevatable"
    NONE = "none"


ROOT_PRIVILEGE = "root privilege"


@dataclass
class HostCapabilities:
    """Capability table consumed by every sub-collector"""

    tools: Dict[str, bool] = field(default_factory=dict)
    privilege: str = PrivilegeMode.NONE
    required_tools: List[str] = field(default_factory=list)

    # Optional tool features, e.g. nvidia-smi advertising NVSwitch queries
    features: Dict[str, bool] = field(default_factory=dict)

    def has(self, tool: str) -> bool:
        return self.tools.get(tool, False)

    def supports(self, feature: str) -> bool:
        return self.features.get(feature, False)

    @property
    def missing_tools(self) -> List[str]:
        return [tool for tool, present in self.tools.items() if not present]

    @property
    def missing_required(self) -> List[str]:
        return [tool for tool in self.required_tools if not self.has(tool)]

    @property
    def sudo_prefix(self) -> str:
        return "sudo -n " if self.privilege == PrivilegeMode.ELEVATABLE else ""

    def warnings(self) -> List[CollectionWarning]:
        """Structured warning list for absent tools and missing privilege"""
        warnings = [
            CollectionWarning('capabilities', DegradationKind.TOOL_MISSING, tool, f"{tool} is not installed")
            for tool in self.missing_tools
        ]
        if self.privilege == PrivilegeMode.NONE:
            warnings.append(CollectionWarning(
                'capabilities', DegradationKind.PERMISSION_DENIED, ROOT_PRIVILEGE,
                "not running as root and sudo is not available without a password"
            ))
        return warnings


class CapabilityDetector:
    """
    Detects host capabilities through a connector.
    All detection methods are non-invasive and read-only.
    """

    def __init__(self, connector: HostConnector, required_tools: List[str],
                 optional_tools: List[str] = None, interactive_sudo: bool = False):
        """
        Initialize capability detector

        Args:
            connector: Connected HostConnector instance
            required_tools: Tools whose absence is fatal in strict mode
            optional_tools: Tools probed but never fatal
            interactive_sudo: Prompt once for sudo credentials before collection
        """
        self.connector = connector
        self.logger = logging.getLogger('capability_detector')
        self.required_tools = list(required_tools)
        self.optional_tools = [t for t in (optional_tools or []) if t not in self.required_tools]
        self.interactive_sudo = interactive_sudo

    def detect_all(self) -> HostCapabilities:
        """
        Run all detection checks and return the capability table

        Returns:
            HostCapabilities: Detected capabilities
        """
        self.logger.info("Starting host capability detection")
        caps = HostCapabilities(required_tools=list(self.required_tools))

        for tool in self.required_tools + self.optional_tools:
            caps.tools[tool] = self.connector.which(tool)

        caps.privilege = self._detect_privilege()

        if caps.has('nvidia-smi'):
            caps.features['nvswitch'] = self._detect_nvswitch_support()

        self._log_detection_summary(caps)
        return caps

    def _detect_privilege(self) -> str:
        """Determine privilege mode without prompting unless configured to"""
        result = self.connector.execute_command("id -u", log_command=False)
        if result.success and result.output.strip() == "0":
            self.logger.info("Running as root")
            return PrivilegeMode.ROOT

        result = self.connector.execute_command("sudo -n true", log_command=False)
        if result.success:
            self.logger.info("Passwordless sudo available")
            return PrivilegeMode.ELEVATABLE

        if self.interactive_sudo and self.connector.establish_sudo():
            self.logger.info("sudo credentials cached for this run")
            return PrivilegeMode.ELEVATABLE

        return PrivilegeMode.NONE

    def _detect_nvswitch_support(self) -> bool:
        """nvidia-smi advertises the nvswitch subcommand in its help text"""
        result = self.connector.execute_command("nvidia-smi -h", log_command=False)
        supported = result.success and 'nvswitch' in result.output.lower()
        if supported:
            self.logger.info("Detected nvidia-smi NVSwitch query support")
        return supported

    def check_strict(self, caps: HostCapabilities):
        """
        Strict-mode pre-run check.

        Raises:
            MissingToolsError: listing every missing required tool (and root
                privilege when it cannot be obtained)
        """
        missing = caps.missing_required
        if caps.privilege == PrivilegeMode.NONE:
            missing.append(ROOT_PRIVILEGE)
        if missing:
            self.logger.error(f"Strict mode: missing {', '.join(missing)}")
            raise MissingToolsError(missing)

    def _log_detection_summary(self, caps: HostCapabilities):
        """Log summary of detected capabilities"""
        self.logger.info("=" * 60)
        self.logger.info("Capability Detection Summary:")
        self.logger.info(f"  Privilege: {caps.privilege}")

        present = [tool for tool, ok in caps.tools.items() if ok]
        if present:
            self.logger.info(f"  Tools: {', '.join(present)}")

        # Optional tools are often legitimately absent (e.g. RAID vendor CLIs)
        for warning in caps.warnings():
            if warning.target in caps.required_tools or warning.target == ROOT_PRIVILEGE:
                self.logger.warning(str(warning))
            else:
                self.logger.info(str(warning))

        self.logger.info("=" * 60)
