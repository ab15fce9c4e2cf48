# cloudreg/domain/services.py
from __future__ import annotations

import ipaddress
from urllib.parse import urlencode

from cloudreg.domain.entities import CloudProvider


def resolve_provider(hint: str | None, default: CloudProvider) -> CloudProvider | None:
    """
    Map the caller's provider hint onto a CloudProvider tag.
    No hint -> the deployment default. Unknown hint -> None.
    """
    if hint is None or not hint.strip():
        return default
    try:
        return CloudProvider(hint.strip().lower())
    except ValueError:
        return None


def build_service_url(scheme: str, service_name: str, service_id: int) -> str:
    """
    Zypper plugin service URL, e.g.
    plugin:/susecloud?credentials=SLES_x86_64&path=/services/42
    """
    query = urlencode(
        {"credentials": service_name, "path": f"/services/{service_id}"}, safe="/"
    )
    return f"plugin:/{scheme}?{query}"


def _normalized_ip(value: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address:
    ip = ipaddress.ip_address(value.strip())
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        return ip.ipv4_mapped
    return ip


def same_address(a: str, b: str) -> bool:
    """
    True if both strings name the same IP address, regardless of how it is
    written (IPv6 case/compression, IPv4-mapped IPv6). Anything that does not
    parse as an IP address never matches.
    """
    try:
        return _normalized_ip(a) == _normalized_ip(b)
    except ValueError:
        return False
