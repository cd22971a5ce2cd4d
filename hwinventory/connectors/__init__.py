"""
Host connectors: run diagnostic commands and read kernel pseudo-files,
either on the local machine or on one remote host over SSH.
"""

from .base_connector import CommandResult, HostConnector
from .local_connector import LocalConnector
from .ssh_connector import SSHConnector

__all__ = [
    'CommandResult',
    'HostConnector',
    'LocalConnector',
    'SSHConnector'
]
