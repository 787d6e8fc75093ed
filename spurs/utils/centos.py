"""Command builders for CentOS, RHEL, Amazon Linux and related distros."""

from spurs.models import SshCommand, cmd


def rpm_install(pkg: str) -> SshCommand:
    """Install the given .rpm package via `rpm`. Requires `sudo`."""
    return cmd("sudo rpm -ivh {}", pkg)


def yum_install(pkgs: list[str]) -> SshCommand:
    """Install the given packages via `yum install`. Requires `sudo`."""
    return cmd("sudo yum install -y {}", " ".join(pkgs))
