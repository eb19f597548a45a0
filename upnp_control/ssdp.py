"""
SSDP (Simple Service Discovery Protocol) search for UPnP devices.

This module sends multicast M-SEARCH requests and collects the responses
into SSDPResponse objects carrying the search type and the location of the
device description. It is the default discovery source for
upnp_control.device.search().

Key components:
- SSDPResponse: One discovery response with parsed headers
- SSDP: Discovery client with a search(*targets) method
- parse_response(): Header parsing for raw response datagrams

Example usage:
    from upnp_control.ssdp import SSDP

    for response in SSDP(timeout=3.0).search("urn:schemas-upnp-org:device:MediaServer:1"):
        print(f"Found {response.type} at {response.location}")
"""

import logging
import socket
import time
from typing import Dict, List, Set, Tuple

logger = logging.getLogger(__name__)

# SSDP multicast configuration
SSDP_MCAST_ADDR = "239.255.255.250"
SSDP_PORT = 1900

SEARCH_ALL = "ssdp:all"


class SSDPResponse:
    """A response to an SSDP M-SEARCH request.

    Attributes:
        type (str): Search Target (ST) of the response, usually a URN
        location (str): URL of the device description document
        usn (str): Unique Service Name
        server (str): Server header value if present
    """

    def __init__(self, type: str, location: str, usn: str = "", server: str = ""):
        self.type = type
        self.location = location
        self.usn = usn
        self.server = server

    def __repr__(self) -> str:
        return f"SSDPResponse(type={self.type!r}, usn={self.usn!r}, location={self.location!r})"


def parse_response(data: bytes) -> Dict[str, str]:
    """Parse a raw UDP response into a lowercase-header dictionary.

    Returns an empty dict for datagrams that are not HTTP responses.
    """
    text = data.decode("utf-8", errors="ignore")
    lines = text.split("\r\n")
    if not lines[0].upper().startswith("HTTP/"):
        return {}

    headers = {}
    for line in lines[1:]:
        if ":" in line:
            k, v = line.split(":", 1)
            headers[k.strip().lower()] = v.strip()
    return headers


def build_search_request(target: str, mx: int) -> bytes:
    """Return an M-SEARCH request datagram for ``target`` advertising ``mx`` seconds."""
    return (
        "M-SEARCH * HTTP/1.1\r\n"
        f"HOST: {SSDP_MCAST_ADDR}:{SSDP_PORT}\r\n"
        'MAN: "ssdp:discover"\r\n'
        f"MX: {mx}\r\n"
        f"ST: {target}\r\n\r\n"
    ).encode("utf-8")


class SSDP:
    """Multicast search client.

    Args:
        timeout: Listen window per search target in seconds
        mx: Maximum wait (MX) advertised in M-SEARCH requests in seconds
        ttl: Multicast TTL for outgoing requests
    """

    def __init__(self, timeout: float = 2.0, mx: int = 1, ttl: int = 2):
        self.timeout = timeout
        self.mx = mx
        self.ttl = ttl

    def _open_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, self.ttl)
            sock.bind(("0.0.0.0", 0))
            sock.settimeout(self.timeout)
        except OSError:
            sock.close()
            raise
        return sock

    def search(self, *targets: str) -> List[SSDPResponse]:
        """Search for ``targets`` (all devices and services when none are given).

        Returns:
            Responses in arrival order, without repeated (location, USN) pairs.
        """
        if not targets:
            targets = (SEARCH_ALL,)

        responses: List[SSDPResponse] = []
        seen: Set[Tuple[str, str]] = set()

        with self._open_socket() as sock:
            for target in targets:
                try:
                    sock.sendto(build_search_request(target, self.mx), (SSDP_MCAST_ADDR, SSDP_PORT))
                except OSError as err:
                    logger.warning("M-SEARCH for %s failed: %s", target, err)
                    continue

                start = time.monotonic()
                while time.monotonic() - start < self.timeout:
                    try:
                        data, addr = sock.recvfrom(65535)
                    except socket.timeout:
                        break
                    except OSError as err:
                        logger.warning("Receiving SSDP responses for %s failed: %s", target, err)
                        break
                    headers = parse_response(data)
                    location = headers.get("location")
                    if not location:
                        logger.debug("Ignoring response without location from %s", addr[0])
                        continue
                    usn = headers.get("usn", "")
                    key = (location, usn)
                    if key in seen:
                        continue
                    seen.add(key)
                    responses.append(
                        SSDPResponse(
                            type=headers.get("st", target),
                            location=location,
                            usn=usn,
                            server=headers.get("server", ""),
                        )
                    )

        logger.debug("SSDP search found %d responses", len(responses))
        return responses
