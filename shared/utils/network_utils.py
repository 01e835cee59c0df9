import ipaddress

from fastapi import Request


def parse_ip(host: str | None) -> ipaddress.IPv4Address | ipaddress.IPv6Address | None:
    if not host:
        return None
    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return None
    # Dual stack sockets report IPv4 callers as ::ffff:a.b.c.d
    if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped:
        return address.ipv4_mapped
    return address


def is_local_request(request: Request) -> bool:
    """
    Whether the caller is on this machine.

    True for loopback clients, and for clients whose address is the one the server is listening on.
    Unknown or non IP client hosts (e.g. Starlette's TestClient "testclient") are never local.
    """
    remote = parse_ip(request.client.host if request.client else None)
    if remote is None:
        return False
    if remote.is_loopback:
        return True
    server = request.scope.get("server")
    if server:
        return remote == parse_ip(server[0])
    return False
