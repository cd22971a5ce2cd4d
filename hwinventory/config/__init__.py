from .settings import (
    ConfigManager,
    ConnectionConfig,
    CollectionConfig,
    LoggingSettings,
    initialize_config
)

__all__ = [
    'ConfigManager',
    'ConnectionConfig',
    'CollectionConfig',
    'LoggingSettings',
    'initialize_config'
]
