#!/usr/bin/env python3
"""
Hardware inventory command line entry point
"""

import argparse
import json
import sys
from typing import List, Optional

from rich.console import Console

from . import __version__
from .collectors import CanonicalAssembler, InventoryCollector
from .config.settings import ConfigManager, ConnectionConfig, initialize_config
from .connectors import HostConnector, LocalConnector, SSHConnector
from .exceptions import CollectionCancelled, ConfigError, InventoryError, MissingToolsError
from .reporting import ReportFormatter
from .utils.logging_config import get_logger, setup_logging

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_MISSING_TOOLS = 2
EXIT_CANCELLED = 130

logger = get_logger('hwinventory')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='hwinventory',
        description='Inventory the hardware of a Linux host: system/BIOS, CPU, memory, '
                    'disks, RAID, PCI/GPU and interconnects.'
    )
    output = parser.add_mutually_exclusive_group()
    output.add_argument('--json', action='store_true',
                        help='Print the flat namespaced JSON document')
    output.add_argument('--json-tree', action='store_true',
                        help='Print the hierarchical JSON document')
    parser.add_argument('--strict', action='store_true',
                        help='Fail (exit 2) when required tools or root privilege are missing')
    parser.add_argument('--config', metavar='FILE',
                        help='YAML configuration file')
    parser.add_argument('--host', help='Inventory a remote host over SSH')
    parser.add_argument('--port', type=int, help='SSH port')
    parser.add_argument('--user', dest='username', help='SSH username')
    parser.add_argument('--key', dest='ssh_key_path', metavar='PATH', help='SSH private key')
    parser.add_argument('--timeout', dest='command_timeout', type=int, metavar='SECONDS',
                        help='Per-command timeout')
    parser.add_argument('--debug', action='store_true',
                        help='Enable debug logging')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def load_config(args: argparse.Namespace) -> ConfigManager:
    config = initialize_config(args.config)
    config.apply_overrides(
        host=args.host,
        port=args.port,
        username=args.username,
        ssh_key_path=args.ssh_key_path,
        command_timeout=args.command_timeout,
        strict=True if args.strict else None,
    )
    return config


def create_connector(connection: ConnectionConfig, command_timeout: int) -> HostConnector:
    """Local subprocess connector, or a connected SSH connector for --host"""
    if not connection.is_remote:
        return LocalConnector(timeout=command_timeout)

    connector = SSHConnector(
        host=connection.host,
        port=connection.port,
        username=connection.username,
        password=connection.password,
        ssh_key_path=connection.ssh_key_path,
        timeout=connection.timeout
    )
    if not connector.connect():
        raise InventoryError(f"Failed to establish SSH connection to {connection.host}")
    # Channel timeouts follow the per-command setting once connected
    connector.timeout = command_timeout
    return connector


def render(document, args: argparse.Namespace):
    """Write the requested view to stdout"""
    assembler = CanonicalAssembler()
    if args.json:
        print(json.dumps(assembler.flat_view(document), indent=2))
    elif args.json_tree:
        print(json.dumps(assembler.tree_view(document), indent=2))
    else:
        ReportFormatter(Console()).render(document)


def run(argv: Optional[List[str]] = None) -> int:
    """Run one inventory and return the process exit status"""
    args = build_parser().parse_args(argv)
    setup_logging(enable_debug=args.debug)

    try:
        config = load_config(args)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_ERROR

    setup_logging(
        log_level=config.logging.log_level,
        enable_debug=args.debug,
        log_to_file=config.logging.log_to_file,
        log_dir=config.logging.log_dir
    )

    if config.connection.is_remote and config.collection.interactive_sudo:
        logger.info("interactive_sudo applies to local runs only, ignoring it for remote host")
        config.collection.interactive_sudo = False

    connector = None
    try:
        connector = create_connector(config.connection, config.collection.command_timeout)
        collector = InventoryCollector(connector, config.collection)
        document = collector.collect()
    except MissingToolsError as e:
        logger.error(str(e))
        for tool in e.missing:
            print(f"missing: {tool}", file=sys.stderr)
        return EXIT_MISSING_TOOLS
    except CollectionCancelled:
        logger.error("Inventory cancelled")
        return EXIT_CANCELLED
    except KeyboardInterrupt:
        logger.error("Inventory cancelled")
        return EXIT_CANCELLED
    except InventoryError as e:
        logger.error(str(e))
        return EXIT_ERROR
    except Exception as e:
        logger.exception(f"Unexpected error during inventory: {e}")
        return EXIT_ERROR
    finally:
        if connector:
            connector.close()

    render(document, args)

    if document.warnings:
        logger.warning(f"Inventory completed with {len(document.warnings)} degraded fields or sections")
    return EXIT_OK


def main():
    sys.exit(run())


if __name__ == "__main__":
    main()
