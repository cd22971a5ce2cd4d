# hwinventory/utils/logging_config.py
"""
Logging setup for inventory runs.
stdout is reserved for the report or JSON document, so every handler here
writes to stderr or to a log file.
"""

import logging
import logging.handlers
import sys
from pathlib import Path

CONSOLE_FORMAT = '%(levelname)s: %(message)s'
FILE_FORMAT = '%(asctime)s [%(threadName)s] %(name)s %(levelname)s: %(message)s'

LOG_FILE = 'hwinventory.log'
LOG_FILE_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 3

# Namespaces that follow --debug; paramiko stays at WARNING regardless
COMPONENT_LOGGERS = ('collector', 'connector', 'hwinventory')


def _level(name: str, enable_debug: bool) -> int:
    if enable_debug:
        return logging.DEBUG
    return getattr(logging, name.upper(), logging.WARNING)


class LoggingConfig:
    """Configures the root logger for one inventory run"""

    @staticmethod
    def setup_logging(log_level='WARNING', enable_debug=False, log_to_file=False, log_dir='logs'):
        """
        Install the stderr handler and, when requested, a rotating run log.

        Args:
            log_level: Console threshold ('DEBUG', 'INFO', 'WARNING', 'ERROR')
            enable_debug: Force DEBUG everywhere, including the command trace
            log_to_file: Also keep a rotating log under log_dir
            log_dir: Directory for the run log
        """
        console_level = _level(log_level, enable_debug)

        root = logging.getLogger()
        root.handlers.clear()

        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setLevel(console_level)
        stderr_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        root.addHandler(stderr_handler)

        if log_to_file:
            directory = Path(log_dir)
            directory.mkdir(parents=True, exist_ok=True)
            run_log = logging.handlers.RotatingFileHandler(
                directory / LOG_FILE, maxBytes=LOG_FILE_BYTES, backupCount=LOG_FILE_BACKUPS
            )
            # The file always gets the per-command trace at INFO or finer
            run_log.setLevel(min(console_level, logging.INFO))
            run_log.setFormatter(logging.Formatter(FILE_FORMAT))
            root.addHandler(run_log)

        root.setLevel(min(h.level for h in root.handlers))

        for name in COMPONENT_LOGGERS:
            logging.getLogger(name).setLevel(logging.DEBUG if enable_debug else logging.INFO)
        logging.getLogger('paramiko').setLevel(logging.WARNING)

    @staticmethod
    def get_logger(name):
        return logging.getLogger(name)


def setup_logging(log_level='WARNING', enable_debug=False, log_to_file=False, log_dir='logs'):
    LoggingConfig.setup_logging(log_level, enable_debug, log_to_file, log_dir)


def get_logger(name):
    return LoggingConfig.get_logger(name)
