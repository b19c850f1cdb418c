"""
Rate limiting for the Inkwell API.

The shared limiter keys requests by the real client IP. X-Forwarded-For is
only honoured when the direct peer is a configured trusted proxy, so
clients cannot spoof their way around the limits.
"""
import ipaddress
import os

from fastapi import Request
from slowapi import Limiter


def parse_trusted_proxies() -> set[str]:
    """
    Parse trusted proxy IPs from INKWELL_TRUSTED_PROXIES.

    Comma-separated list of IPs or CIDR ranges, e.g.
    INKWELL_TRUSTED_PROXIES="10.0.0.1,172.16.0.0/30"

    Returns:
        Set of trusted IP addresses (CIDR ranges expanded to hosts).
    """
    proxy_config = os.getenv("INKWELL_TRUSTED_PROXIES", "")

    trusted = set()
    for proxy in proxy_config.split(","):
        proxy = proxy.strip()
        if not proxy:
            continue

        if "/" in proxy:
            try:
                network = ipaddress.ip_network(proxy, strict=False)
            except ValueError:
                # Invalid CIDR, skip
                continue
            trusted.update(str(ip) for ip in network.hosts())
        else:
            trusted.add(proxy)

    return trusted


_TRUSTED_PROXIES: set[str] | None = None


def get_trusted_proxies() -> set[str]:
    """Get cached trusted proxies, parsing on first access."""
    global _TRUSTED_PROXIES
    if _TRUSTED_PROXIES is None:
        _TRUSTED_PROXIES = parse_trusted_proxies()
    return _TRUSTED_PROXIES


def get_real_client_ip(request: Request) -> str:
    """
    Get the client IP address to rate limit on.

    Behind a trusted proxy, the rightmost X-Forwarded-For entry that is not
    itself a trusted proxy is the client that reached our edge.

    Args:
        request: The incoming request.

    Returns:
        The client IP address.
    """
    direct_client_ip = request.client.host if request.client else "unknown"
    trusted_proxies = get_trusted_proxies()

    if direct_client_ip not in trusted_proxies:
        return direct_client_ip

    x_forwarded_for = request.headers.get("X-Forwarded-For")
    if not x_forwarded_for:
        return direct_client_ip

    ips = [ip.strip() for ip in x_forwarded_for.split(",")]
    for ip in reversed(ips):
        if ip and ip not in trusted_proxies:
            return ip

    # All IPs in chain are trusted proxies, use the leftmost (original source)
    return ips[0] if ips else direct_client_ip


limiter = Limiter(
    key_func=get_real_client_ip,
    enabled=os.getenv("INKWELL_RATE_LIMIT_ENABLED", "true").lower() == "true",
)
