"""Host introspection used by the operator commands.

Wraps psutil for uptime and network interfaces, and reads the tail of log
files.
"""

import ipaddress
import logging
import socket
import time
from collections import deque
from pathlib import Path

import psutil

logger = logging.getLogger(__name__)


def os_uptime() -> float:
    """Get the seconds elapsed since the host booted."""
    return time.time() - psutil.boot_time()


def ipv4_addresses() -> list[str]:
    """List external IPv4 addresses of the host.

    Loopback addresses are skipped. Interfaces with several addresses get an
    alias index, e.g. ``eth0:1``.

    Returns:
        Lines of the form '<interface> <address>'.
    """
    lines: list[str] = []
    for name, addresses in psutil.net_if_addrs().items():
        alias = 0
        for address in addresses:
            if address.family != socket.AF_INET:
                continue
            if ipaddress.ip_address(address.address).is_loopback:
                continue

            lines.append(f"{name}{':' + str(alias) if alias else ''} {address.address}")
            alias += 1
    return lines


def read_last_lines(path: str | Path, count: int = 10) -> str:
    """Read the last lines of a text file.

    Args:
        path: File to read.
        count: Number of lines.

    Returns:
        The lines joined with newlines, empty for an empty file.
    """
    with open(path, encoding="utf-8", errors="replace") as f:
        lines = deque(f, maxlen=max(count, 0))
    return "".join(lines).rstrip("\n")


def list_log_files(paths: str | list[str]) -> list[str]:
    """List the visible files in one or several log directories.

    Args:
        paths: Directory or directories to scan.

    Returns:
        File paths sorted by name within each directory.
    """
    files: list[str] = []
    for directory in [paths] if isinstance(paths, str) else paths:
        try:
            entries = sorted(Path(directory).iterdir())
        except OSError as e:
            logger.warning(f"Cannot list log directory {directory}: {e}")
            continue
        files.extend(
            f"{directory}/{entry.name}"
            for entry in entries
            if entry.is_file() and not entry.name.startswith(".")
        )
    return files
