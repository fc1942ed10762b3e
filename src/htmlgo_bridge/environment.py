"""Runtime environment classification for the converter page."""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from typing import Literal

Environment = Literal["local", "prod", "production"]

OVERRIDES: frozenset[str] = frozenset({"prod", "local"})
DEV_PORTS: frozenset[str] = frozenset({"3000", "5000", "8000", "8080"})
DEV_MARKERS: tuple[str, ...] = ("dev.", "-dev")
PREVIEW_HOST_SUFFIX = "vercel.app"
PREVIEW_MARKERS: tuple[str, ...] = ("preview", "dev-")


@dataclass(frozen=True, slots=True)
class HostIdentity:
    hostname: str = "localhost"
    port: str | int | None = None


def _is_private_address(hostname: str) -> bool:
    if hostname == "localhost":
        return True
    try:
        address = ipaddress.ip_address(hostname.strip("[]"))
    except ValueError:
        return False
    return address.is_loopback or address.is_private


def _has_dev_marker(hostname: str) -> bool:
    if any(marker in hostname for marker in DEV_MARKERS):
        return True
    return PREVIEW_HOST_SUFFIX in hostname and any(marker in hostname for marker in PREVIEW_MARKERS)


def resolve_environment(override: str | None, host: HostIdentity) -> Environment:
    """Classify the runtime as ``"local"`` or ``"production"``.

    An explicit ``"prod"`` or ``"local"`` override is returned verbatim.
    """

    if override in OVERRIDES:
        return override  # type: ignore[return-value]
    hostname = (host.hostname or "").lower()
    port = "" if host.port is None else str(host.port)
    if _is_private_address(hostname) or port in DEV_PORTS or _has_dev_marker(hostname):
        return "local"
    return "production"


__all__ = ["DEV_MARKERS", "DEV_PORTS", "Environment", "HostIdentity", "resolve_environment"]
