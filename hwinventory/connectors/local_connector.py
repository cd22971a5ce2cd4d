# hwinventory/connectors/local_connector.py
"""
Local connector: runs diagnostic commands through subprocess and reads
sysfs/procfs directly from the local filesystem.
"""

import logging
import os
import signal
import shutil
import subprocess
import threading
import time
from pathlib import Path
from typing import List, Optional, Set

from .base_connector import CommandResult, HostConnector, SBIN_PATHS

# Seconds between cancellation checks while a command runs
POLL_INTERVAL = 0.2
# Seconds a killed command gets to exit and release its pipes
KILL_GRACE = 1.0


class LocalConnector(HostConnector):
    """
    Connector for the machine the inventory runs on.
    Every command runs in its own process so a hung tool can be killed.
    """

    def __init__(self, timeout: int = 30):
        self.timeout = timeout
        self.logger = logging.getLogger('connector.local')
        self._env = dict(os.environ)
        self._env['PATH'] = f"{self._env.get('PATH', '')}:{SBIN_PATHS}"
        self._env['LC_ALL'] = 'C'
        self._processes: Set[subprocess.Popen] = set()
        self._lock = threading.Lock()
        self._cancelled = threading.Event()

    def execute_command(self, command: str, timeout: int = None, log_command: bool = True) -> CommandResult:
        if self._cancelled.is_set():
            return CommandResult(False, error="Run cancelled", exit_code=-1, command=command)

        if timeout is None:
            timeout = self.timeout

        if log_command:
            self.logger.debug(f"Executing: {command}")

        start_time = time.time()
        try:
            process = subprocess.Popen(
                command,
                shell=True,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                env=self._env,
                start_new_session=True
            )
        except OSError as e:
            return CommandResult(False, error=str(e), exit_code=127, command=command)

        with self._lock:
            self._processes.add(process)

        try:
            # terminate_all() may have run between the check above and registration
            if self._cancelled.is_set():
                self._stop(process)
                return CommandResult(False, error="Run cancelled", exit_code=-1, command=command)

            deadline = start_time + timeout
            while True:
                try:
                    stdout, stderr = process.communicate(timeout=POLL_INTERVAL)
                    break
                except subprocess.TimeoutExpired:
                    if self._cancelled.is_set():
                        self._stop(process)
                        return CommandResult(False, error="Run cancelled", exit_code=-1,
                                             execution_time=time.time() - start_time, command=command)
                    if time.time() >= deadline:
                        self._stop(process)
                        execution_time = time.time() - start_time
                        self.logger.warning(
                            f"Command '{command}' timed out after {execution_time:.2f}s (timeout: {timeout}s)")
                        return CommandResult(
                            False,
                            error=f"Timed out after {timeout}s",
                            exit_code=-1,
                            execution_time=execution_time,
                            command=command,
                            timed_out=True
                        )
        finally:
            with self._lock:
                self._processes.discard(process)

        execution_time = time.time() - start_time
        output = stdout.decode('utf-8', errors='replace')
        error = stderr.decode('utf-8', errors='replace')

        if process.returncode == 0:
            self.logger.debug(f"Command '{command}' completed successfully in {execution_time:.2f}s")
        else:
            self.logger.debug(f"Command '{command}' failed with exit code {process.returncode}")

        return CommandResult(
            success=process.returncode == 0,
            output=output,
            error=error,
            exit_code=process.returncode,
            execution_time=execution_time,
            command=command
        )

    def read_file(self, path: str) -> Optional[str]:
        try:
            return Path(path).read_text(errors='replace')
        except OSError:
            return None

    def list_dir(self, path: str) -> List[str]:
        try:
            return sorted(os.listdir(path))
        except OSError:
            return []

    def path_exists(self, path: str) -> bool:
        return os.path.exists(path)

    def read_link(self, path: str) -> Optional[str]:
        if not os.path.islink(path):
            return None
        try:
            return os.path.realpath(path)
        except OSError:
            return None

    def which(self, tool: str) -> bool:
        return shutil.which(tool, path=self._env['PATH']) is not None

    def establish_sudo(self) -> bool:
        """Run 'sudo -v' once with the terminal attached so the user can authenticate"""
        if not shutil.which('sudo', path=self._env['PATH']):
            return False
        self.logger.info("Requesting sudo credentials for privileged diagnostics")
        try:
            return subprocess.run(['sudo', '-v'], check=False).returncode == 0
        except OSError as e:
            self.logger.warning(f"sudo validation failed: {e}")
            return False

    def terminate_all(self):
        """
        Cancel the run: SIGTERM every in-flight command group. Each command's
        own thread sees the flag within POLL_INTERVAL and finishes the kill.
        """
        self._cancelled.set()
        with self._lock:
            processes = list(self._processes)
        for process in processes:
            self._signal_group(process, signal.SIGTERM)
        if processes:
            self.logger.info(f"Terminated {len(processes)} in-flight commands")

    def _signal_group(self, process: subprocess.Popen, sig: int):
        try:
            os.killpg(process.pid, sig)
        except (ProcessLookupError, PermissionError):
            if process.poll() is None:
                process.send_signal(sig)

    def _stop(self, process: subprocess.Popen):
        """
        Kill a command and drain its pipes without blocking on them.

        SIGTERM goes first because sudo relays it to the root-owned tool;
        SIGKILL only reaches the user-owned processes in the group. A
        descendant that escaped both still holds the pipes open, so after
        KILL_GRACE they are closed instead of read to EOF.
        """
        self._signal_group(process, signal.SIGTERM)
        try:
            process.wait(timeout=KILL_GRACE)
        except subprocess.TimeoutExpired:
            pass
        self._signal_group(process, signal.SIGKILL)

        try:
            process.communicate(timeout=KILL_GRACE)
        except subprocess.TimeoutExpired:
            self.logger.debug(f"Abandoning output of pid {process.pid}: pipes held by an escaped descendant")
            process.stdout.close()
            process.stderr.close()
            try:
                process.wait(timeout=KILL_GRACE)
            except subprocess.TimeoutExpired:
                self.logger.warning(f"pid {process.pid} survived SIGKILL")
