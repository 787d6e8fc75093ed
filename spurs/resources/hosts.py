"""Hosts resource for listing configured SSH hosts."""

import asyncio

from spurs.services import get_config


async def _is_reachable(hostname: str, port: int, timeout: float) -> bool:
    try:
        _, writer = await asyncio.wait_for(
            asyncio.open_connection(hostname, port),
            timeout=timeout,
        )
    except (TimeoutError, OSError):
        return False
    writer.close()
    await writer.wait_closed()
    return True


async def list_hosts_resource() -> str:
    """List SSH hosts from the SSH config with reachability status."""
    hosts = get_config().get_hosts()
    if not hosts:
        return "No SSH hosts configured."

    names = sorted(hosts)
    reachable = await asyncio.gather(
        *(_is_reachable(hosts[n].hostname, hosts[n].port, 2.0) for n in names)
    )

    lines = ["Available SSH Hosts", "=" * 40, ""]
    for name, online in zip(names, reachable):
        host = hosts[name]
        status = "online" if online else "offline"
        lines.append(f"[{'✓' if online else '✗'}] {name} ({status})")
        lines.append(f"    SSH:  {host.user}@{host.hostname}:{host.port}")
    return "\n".join(lines)
