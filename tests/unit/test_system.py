"""Tests for host introspection helpers."""

import socket
from collections import namedtuple
from unittest.mock import patch

from tgbot_helpers.services.system import (
    ipv4_addresses,
    list_log_files,
    os_uptime,
    read_last_lines,
)

Address = namedtuple("Address", "family address")


def test_ipv4_addresses_skip_loopback_and_ipv6():
    interfaces = {
        "lo": [Address(socket.AF_INET, "127.0.0.1")],
        "eth0": [
            Address(socket.AF_INET, "10.0.0.2"),
            Address(socket.AF_INET6, "fe80::1"),
            Address(socket.AF_INET, "10.0.0.3"),
        ],
    }
    with patch("tgbot_helpers.services.system.psutil.net_if_addrs", return_value=interfaces):
        assert ipv4_addresses() == ["eth0 10.0.0.2", "eth0:1 10.0.0.3"]


def test_os_uptime_uses_boot_time():
    with patch("tgbot_helpers.services.system.psutil.boot_time", return_value=1000.0), patch(
        "tgbot_helpers.services.system.time.time", return_value=1600.0
    ):
        assert os_uptime() == 600.0


def test_read_last_lines(tmp_path):
    log = tmp_path / "bot.log"
    log.write_text("\n".join(f"line {i}" for i in range(20)) + "\n")

    assert read_last_lines(log, 2) == "line 18\nline 19"
    assert read_last_lines(log, 0) == ""


def test_list_log_files(tmp_path):
    (tmp_path / "b.log").write_text("b")
    (tmp_path / "a.log").write_text("a")
    (tmp_path / ".hidden").write_text("h")
    (tmp_path / "sub").mkdir()

    assert list_log_files(str(tmp_path)) == [f"{tmp_path}/a.log", f"{tmp_path}/b.log"]
    assert list_log_files([str(tmp_path / "missing")]) == []
