# hwinventory/connectors/ssh_connector.py
"""
SSH connector for inventorying a remote host.
Diagnostic commands and sysfs reads go over one paramiko session; every
remote command runs with the admin sbin directories on PATH and the C locale.
"""

import paramiko
import shlex
import socket
import threading
import time
from typing import Any, Dict, List, Optional, Set
from pathlib import Path
import logging

from .base_connector import CommandResult, HostConnector, SBIN_PATHS

REMOTE_PREAMBLE = f"PATH=\"$PATH:{SBIN_PATHS}\"; export PATH LC_ALL=C; "


class SSHConnector(HostConnector):
    """
    Runs inventory commands on a remote machine.
    Key-based authentication is preferred; a password is only sent when no key is configured.
    """

    def __init__(self, host: str, port: int = 22, username: str = 'root',
                 password: str = None, ssh_key_path: str = None, timeout: int = 30):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.ssh_key_path = ssh_key_path
        self.timeout = timeout

        self.client = None
        self.logger = logging.getLogger(f'connector.ssh.{host}')
        self._open_channels: Set[paramiko.Channel] = set()
        self._channel_lock = threading.Lock()
        self._stopped = threading.Event()

    def _auth_params(self) -> Optional[Dict[str, Any]]:
        """paramiko connect() keywords, or None when no usable credential exists"""
        params = {
            'hostname': self.host,
            'port': self.port,
            'username': self.username,
            'timeout': self.timeout,
        }
        if self.ssh_key_path:
            key_file = Path(self.ssh_key_path).expanduser()
            if key_file.exists():
                params['key_filename'] = str(key_file)
                return params
            self.logger.warning(f"SSH key {key_file} does not exist")
            if not self.password:
                return None
        if self.password:
            params['password'] = self.password
        return params

    def connect(self) -> bool:
        """Open the session; False (with the reason logged) on any failure"""
        params = self._auth_params()
        if params is None:
            return False

        client = paramiko.SSHClient()
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        try:
            client.connect(**params)
        except paramiko.AuthenticationException:
            self.logger.error(f"{self.username}@{self.host}: authentication rejected")
            return False
        except socket.timeout:
            self.logger.error(f"{self.host}:{self.port}: connection timed out after {self.timeout}s")
            return False
        except (paramiko.SSHException, OSError) as e:
            self.logger.error(f"{self.host}:{self.port}: {e}")
            return False

        self.client = client
        self.logger.info(f"Connected to {self.username}@{self.host}:{self.port}")
        return True

    def close(self):
        if self.client:
            self.client.close()
            self.client = None
            self.logger.debug(f"Disconnected from {self.host}")

    def execute_command(self, command: str, timeout: int = None, log_command: bool = True) -> CommandResult:
        if not self.client:
            return CommandResult(False, error=f"not connected to {self.host}", exit_code=-1, command=command)
        if self._stopped.is_set():
            return CommandResult(False, error="inventory run cancelled", exit_code=-1, command=command)

        timeout = timeout or self.timeout
        if log_command:
            self.logger.debug(f"[{self.host}] {command}")

        started = time.time()
        channel = None
        try:
            stdin, stdout, stderr = self.client.exec_command(REMOTE_PREAMBLE + command, timeout=timeout)
            channel = stdout.channel
            self._track(channel)
            stdin.close()

            output = stdout.read().decode('utf-8', errors='replace')
            error = stderr.read().decode('utf-8', errors='replace')
            exit_code = channel.recv_exit_status()
        except socket.timeout:
            elapsed = time.time() - started
            if channel is not None:
                channel.close()
            message = f"'{_shorten(command)}' exceeded {timeout}s"
            self.logger.warning(f"[{self.host}] {message}")
            return CommandResult(False, error=message, exit_code=-1, execution_time=elapsed,
                                 command=command, timed_out=True)
        except (paramiko.SSHException, OSError) as e:
            elapsed = time.time() - started
            self.logger.error(f"[{self.host}] '{_shorten(command)}' could not run: {e}")
            return CommandResult(False, error=str(e), exit_code=-1, execution_time=elapsed, command=command)
        finally:
            if channel is not None:
                self._untrack(channel)

        elapsed = time.time() - started
        if exit_code != 0 and log_command:
            reason = error.strip().splitlines()[0] if error.strip() else "no stderr"
            self.logger.debug(f"[{self.host}] '{_shorten(command)}' exited {exit_code} ({reason})")
        return CommandResult(exit_code == 0, output=output, error=error, exit_code=exit_code,
                             execution_time=elapsed, command=command)

    def read_file(self, path: str) -> Optional[str]:
        result = self.execute_command(f"cat {shlex.quote(path)} 2>/dev/null", log_command=False)
        return result.output if result.success else None

    def list_dir(self, path: str) -> List[str]:
        result = self.execute_command(f"ls -1A {shlex.quote(path)} 2>/dev/null", log_command=False)
        if not result.success:
            return []
        return sorted(name.strip() for name in result.output.splitlines() if name.strip())

    def path_exists(self, path: str) -> bool:
        return self.execute_command(f"test -e {shlex.quote(path)}", log_command=False).success

    def read_link(self, path: str) -> Optional[str]:
        quoted = shlex.quote(path)
        result = self.execute_command(f"test -L {quoted} && readlink -f {quoted}", log_command=False)
        target = result.output.strip() if result.success else ''
        return target or None

    def terminate_all(self):
        self._stopped.set()
        with self._channel_lock:
            channels = list(self._open_channels)
        for channel in channels:
            channel.close()
        if channels:
            self.logger.info(f"Closed {len(channels)} in-flight remote commands on {self.host}")

    def _track(self, channel):
        with self._channel_lock:
            self._open_channels.add(channel)

    def _untrack(self, channel):
        with self._channel_lock:
            self._open_channels.discard(channel)

    def __enter__(self):
        if not self.connect():
            raise ConnectionError(f"Failed to connect to {self.host}")
        return self


def _shorten(command: str, limit: int = 80) -> str:
    return command if len(command) <= limit else command[:limit - 3] + "..."
