"""Common administration routines built on top of `SshCommand`.

Builders return command specifications; routines such as `reboot` drive
anything implementing the `Execute` protocol.
"""

import asyncio
import logging
import socket
from ipaddress import IPv4Address, IPv6Address, ip_address
from typing import TYPE_CHECKING

from spurs.errors import SpursError
from spurs.models import SshCommand, SSHHost, cmd
from spurs.utils import centos, ubuntu
from spurs.utils.shell import quote_arg

if TYPE_CHECKING:
    from spurs.protocols import Execute

logger = logging.getLogger(__name__)

REBOOT_SETTLE_SECONDS = 10


def get_host_ip(addr: str) -> tuple[IPv4Address | IPv6Address, int]:
    """Resolve `host:port` to `(ip, port)`.

    Raises:
        socket.gaierror: If the host cannot be resolved
    """
    host = SSHHost.parse(addr)
    info = socket.getaddrinfo(host.hostname, host.port, type=socket.SOCK_STREAM)
    sockaddr = info[0][4]
    return ip_address(sockaddr[0]), int(sockaddr[1])


def add_to_group(user: str, group: str) -> SshCommand:
    """Add `user` to the supplementary `group`. Requires `sudo`."""
    return cmd("sudo usermod -aG {} {}", quote_arg(group), quote_arg(user))


def swapon(device: str) -> SshCommand:
    """Enable swapping on `device`. Requires `sudo`."""
    return cmd("sudo swapon {}", quote_arg(device))


def swapoff(device: str) -> SshCommand:
    """Disable swapping on `device`. Requires `sudo`."""
    return cmd("sudo swapoff {}", quote_arg(device))


def set_hostname(name: str) -> SshCommand:
    """Set the machine's hostname. Requires `sudo`."""
    return cmd("sudo hostnamectl set-hostname {}", quote_arg(name))


def install_packages(os_family: str, pkgs: list[str]) -> SshCommand:
    """Install `pkgs` with the package manager of `os_family`.

    Args:
        os_family: "ubuntu"/"debian" or "centos"/"rhel"/"amazon"

    Raises:
        ValueError: If the OS family is not known
    """
    family = os_family.lower()
    if family in ("ubuntu", "debian"):
        return ubuntu.apt_install(pkgs)
    if family in ("centos", "rhel", "amazon", "fedora"):
        return centos.yum_install(pkgs)
    raise ValueError(f"Unsupported OS family: {os_family}")


async def reboot(
    shell: "Execute",
    *,
    dry_run: bool = False,
    settle_seconds: float = REBOOT_SETTLE_SECONDS,
) -> None:
    """Reboot the remote and wait for it to come back. Requires `sudo`.

    The reboot command itself is expected to lose the connection, so its
    outcome is ignored.
    """
    try:
        await shell.execute(SshCommand("sudo reboot").allow_error().dry_run(dry_run))
    except SpursError as e:
        logger.debug("Ignoring error from reboot command: %s", e)

    if not dry_run:
        # The machine will not have gone down yet if we reconnect immediately
        await asyncio.sleep(settle_seconds)
        await shell.reconnect()

    await shell.execute(SshCommand("whoami").dry_run(dry_run))
