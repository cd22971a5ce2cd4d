# tests/test_connectors.py
"""
Tests for the local and SSH host connectors.
"""

import shutil
import socket
import subprocess
import threading
import time
from unittest.mock import MagicMock

import pytest

from hwinventory.connectors import LocalConnector, SSHConnector

needs_setsid = pytest.mark.skipif(shutil.which('setsid') is None, reason="setsid not installed")


class TestLocalConnector:
    """Runs real commands through /bin/sh"""

    @pytest.fixture
    def connector(self):
        return LocalConnector(timeout=5)

    def test_success(self, connector):
        result = connector.execute_command("echo hello")
        assert result.success
        assert result.output == "hello\n"
        assert result.exit_code == 0

    def test_failure(self, connector):
        result = connector.execute_command("echo oops >&2; exit 3")
        assert not result.success
        assert result.exit_code == 3
        assert result.error == "oops\n"

    def test_command_not_found(self, connector):
        result = connector.execute_command("definitely-not-a-real-tool-xyz")
        assert result.exit_code == 127

    def test_timeout(self, connector):
        result = connector.execute_command("sleep 5", timeout=1)
        assert result.timed_out
        assert not result.success

    def test_locale_is_fixed(self, connector):
        assert connector.execute_command("echo $LC_ALL").output.strip() == "C"

    def test_files(self, connector, tmp_path):
        (tmp_path / 'size').write_text("976773168\n")
        (tmp_path / 'holders').mkdir()
        (tmp_path / 'driver').symlink_to(tmp_path / 'holders')

        assert connector.read_file(str(tmp_path / 'size')) == "976773168\n"
        assert connector.read_file(str(tmp_path / 'absent')) is None
        assert connector.list_dir(str(tmp_path)) == ['driver', 'holders', 'size']
        assert connector.list_dir(str(tmp_path / 'absent')) == []
        assert connector.path_exists(str(tmp_path / 'holders'))
        assert connector.link_basename(str(tmp_path / 'driver')) == 'holders'
        assert connector.read_link(str(tmp_path / 'size')) is None

    def test_which(self, connector):
        assert connector.which('sh')
        assert not connector.which('definitely-not-a-real-tool-xyz')

    def test_terminate_all_blocks_new_commands(self, connector):
        connector.terminate_all()
        result = connector.execute_command("echo hello")
        assert not result.success
        assert result.output == ""

    @needs_setsid
    def test_timeout_bounded_when_descendant_escapes_group(self):
        """A child outside the process group (like a root tool under sudo) keeps the pipes open"""
        connector = LocalConnector(timeout=1)
        started = time.time()
        result = connector.execute_command("setsid sleep 6")
        elapsed = time.time() - started

        assert result.timed_out
        assert elapsed < 4

    @needs_setsid
    def test_cancel_bounded_when_descendant_escapes_group(self):
        connector = LocalConnector(timeout=30)
        results = []
        worker = threading.Thread(target=lambda: results.append(connector.execute_command("setsid sleep 6")))

        started = time.time()
        worker.start()
        time.sleep(0.5)
        connector.terminate_all()
        worker.join(timeout=10)
        elapsed = time.time() - started

        assert not worker.is_alive()
        assert elapsed < 4
        assert not results[0].success
        assert results[0].error == "Run cancelled"

    def test_cancel_while_spawning(self, connector, monkeypatch):
        """terminate_all() landing between the cancel check and process registration"""
        real_popen = subprocess.Popen

        def popen_then_cancel(*args, **kwargs):
            process = real_popen(*args, **kwargs)
            connector.terminate_all()
            return process

        monkeypatch.setattr(subprocess, 'Popen', popen_then_cancel)
        started = time.time()
        result = connector.execute_command("sleep 5")

        assert not result.success
        assert result.error == "Run cancelled"
        assert time.time() - started < 3


def _channel_streams(output=b'', error=b'', exit_code=0):
    channel = MagicMock()
    channel.recv_exit_status.return_value = exit_code
    stdout = MagicMock()
    stdout.read.return_value = output
    stdout.channel = channel
    stderr = MagicMock()
    stderr.read.return_value = error
    return MagicMock(), stdout, stderr


class TestSSHConnector:
    """SSHConnector over a mocked paramiko client"""

    @pytest.fixture
    def connector(self):
        connector = SSHConnector('gpu01', timeout=5)
        connector.client = MagicMock()
        return connector

    def test_not_connected(self):
        result = SSHConnector('gpu01').execute_command('lscpu')
        assert not result.success
        assert result.exit_code == -1

    def test_execute(self, connector):
        connector.client.exec_command.return_value = _channel_streams(b'Architecture: x86_64\n')
        result = connector.execute_command('lscpu')

        assert result.success
        assert result.output == 'Architecture: x86_64\n'
        sent = connector.client.exec_command.call_args[0][0]
        assert sent.endswith('; lscpu')
        assert '/usr/sbin' in sent
        assert 'LC_ALL=C' in sent

    def test_exit_status(self, connector):
        connector.client.exec_command.return_value = _channel_streams(error=b'sh: 1: lshw: not found\n',
                                                                      exit_code=127)
        result = connector.execute_command('lshw -class memory')
        assert not result.success
        assert result.exit_code == 127

    def test_timeout(self, connector):
        stdin, stdout, stderr = _channel_streams()
        stdout.read.side_effect = socket.timeout()
        connector.client.exec_command.return_value = (stdin, stdout, stderr)

        result = connector.execute_command('smartctl -i /dev/sda')
        assert result.timed_out
        stdout.channel.close.assert_called_once()

    def test_read_file(self, connector):
        connector.client.exec_command.return_value = _channel_streams(b'ACTIVE\n')
        assert connector.read_file('/sys/class/infiniband/mlx5_0/ports/1/state') == 'ACTIVE\n'
        assert "cat /sys/class/infiniband/mlx5_0/ports/1/state" in connector.client.exec_command.call_args[0][0]

    def test_list_dir(self, connector):
        connector.client.exec_command.return_value = _channel_streams(b'sdb\nsda\nloop0\n')
        assert connector.list_dir('/sys/block') == ['loop0', 'sda', 'sdb']

    def test_read_link(self, connector):
        connector.client.exec_command.return_value = _channel_streams(b'/sys/bus/pci/drivers/mlx5_core\n')
        assert connector.link_basename('/sys/class/net/ens1f0/device/driver') == 'mlx5_core'

    def test_terminate_all(self, connector):
        connector.terminate_all()
        result = connector.execute_command('lscpu')
        assert not result.success
        connector.client.exec_command.assert_not_called()

    def test_close(self, connector):
        client = connector.client
        connector.close()
        client.close.assert_called_once()
        assert connector.client is None
