"""Command builders for Ubuntu and other Debian-based distros."""

from spurs.models import SshCommand, cmd


def dpkg_install(pkg: str) -> SshCommand:
    """Install the given .deb package via `dpkg`. Requires `sudo`."""
    return cmd("sudo dpkg -i {}", pkg)


def apt_install(pkgs: list[str]) -> SshCommand:
    """Install the given packages via `apt-get install`. Requires `sudo`."""
    return cmd("sudo apt-get -y install {}", " ".join(pkgs))
