# hwinventory/config/settings.py
"""
Configuration management for hardware inventory runs.
"""

import yaml
from pathlib import Path
from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field, fields
import logging

from ..exceptions import ConfigError


DEFAULT_REQUIRED_TOOLS = ['dmidecode', 'lscpu', 'lsblk', 'smartctl', 'lspci', 'ip']

DEFAULT_OPTIONAL_TOOLS = [
    'lshw', 'udevadm', 'blockdev', 'hdparm', 'mdadm', 'ethtool', 'nvidia-smi',
    # Hardware RAID CLIs, in probe priority order
    'storcli64', 'storcli', 'perccli64', 'perccli', 'ssacli', 'hpssacli',
    'arcconf', 'MegaCli64', 'MegaCli'
]


@dataclass
class ConnectionConfig:
    """Target host; host=None inventories the local machine"""
    host: Optional[str] = None
    port: int = 22
    username: str = 'root'
    ssh_key_path: Optional[str] = None
    password: Optional[str] = None
    timeout: int = 30

    @property
    def is_remote(self) -> bool:
        return bool(self.host)


@dataclass
class CollectionConfig:
    """Collection behavior configuration"""
    strict: bool = False
    command_timeout: int = 30
    max_workers: int = 0  # 0 = one worker per collector
    interactive_sudo: bool = False
    required_tools: List[str] = field(default_factory=lambda: list(DEFAULT_REQUIRED_TOOLS))
    optional_tools: List[str] = field(default_factory=lambda: list(DEFAULT_OPTIONAL_TOOLS))

    def __post_init__(self):
        if self.command_timeout <= 0:
            raise ConfigError("collection.command_timeout must be positive")
        if self.max_workers < 0:
            raise ConfigError("collection.max_workers cannot be negative")


@dataclass
class LoggingSettings:
    """Diagnostic channel configuration"""
    log_level: str = 'WARNING'
    log_to_file: bool = False
    log_dir: str = 'logs'


class ConfigManager:
    """Loads the YAML configuration, falling back to defaults when no file exists"""

    def __init__(self, config_file: str = None):
        self.logger = logging.getLogger('config_manager')

        if config_file:
            self.config_file = Path(config_file)
            if not self.config_file.exists():
                raise ConfigError(f"Config file not found: {self.config_file}")
        else:
            self.config_file = self._find_config_file()

        self.connection = ConnectionConfig()
        self.collection = CollectionConfig()
        self.logging = LoggingSettings()

        if self.config_file:
            self._load_config()

    def _find_config_file(self) -> Optional[Path]:
        """Find configuration file in standard locations"""
        possible_locations = [
            Path('config/hwinventory.yml'),
            Path.home() / '.config' / 'hwinventory' / 'hwinventory.yml',
            Path('/etc/hwinventory/hwinventory.yml')
        ]

        for location in possible_locations:
            if location.exists():
                self.logger.info(f"Found config file at {location}")
                return location

        self.logger.debug("No config file found, using defaults")
        return None

    def _load_config(self):
        """Load configuration from file"""
        try:
            with open(self.config_file, 'r') as f:
                config_data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load configuration {self.config_file}: {e}") from e

        if not isinstance(config_data, dict):
            raise ConfigError(f"Configuration root must be a mapping: {self.config_file}")

        self.connection = self._build(ConnectionConfig, config_data.get('connection'))
        self.collection = self._build(CollectionConfig, config_data.get('collection'))
        self.logging = self._build(LoggingSettings, config_data.get('logging'))

        self.logger.info(f"Loaded configuration from {self.config_file}")

    def _build(self, config_class, data: Optional[Dict[str, Any]]):
        if data is None:
            return config_class()
        if not isinstance(data, dict):
            raise ConfigError(f"Section for {config_class.__name__} must be a mapping")

        known = {f.name for f in fields(config_class)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown {config_class.__name__} keys: {', '.join(sorted(unknown))}")

        try:
            return config_class(**data)
        except TypeError as e:
            raise ConfigError(f"Invalid {config_class.__name__}: {e}") from e

    def apply_overrides(self, **overrides):
        """Apply command-line overrides; None values are ignored"""
        for key, value in overrides.items():
            if value is None:
                continue
            for section in (self.connection, self.collection, self.logging):
                if hasattr(section, key):
                    setattr(section, key, value)
                    break
            else:
                raise ConfigError(f"Unknown configuration override: {key}")
        # re-run validation on the collection section
        self.collection.__post_init__()


def initialize_config(config_file: str = None) -> ConfigManager:
    """Create a configuration manager from a specific or discovered config file"""
    return ConfigManager(config_file)
