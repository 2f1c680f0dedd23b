"""Minimal SSDP (UPnP discovery) client.

Sends one M-SEARCH request to the SSDP multicast group and collects the
unicast replies until the socket stays quiet for the configured timeout.
Retrying is left to the caller.
"""

import logging
import platform
import re
import socket
from dataclasses import dataclass, field

from core.errors import CommError, ConfigurationError

logger = logging.getLogger(__name__)

MULTICAST_ADDRESS = '239.255.255.250'
MULTICAST_PORT = 1900
RESPONSE_STATUS_LINE = 'HTTP/1.1 200 OK'

SEARCH_TARGET_ALL = 'ssdp:all'
SEARCH_TARGET_ROOTDEVICE = 'upnp:rootdevice'

USER_AGENT_PRODUCT = 'hue_control/0.1'

HEADER_PATTERN = re.compile(r'([^\x00-\x1f\x7f :]+):\s*(.*)')
RECEIVE_BUFFER_SIZE = 8192


@dataclass
class SsdpResponse:
    """A single search reply: where it came from and its headers.

    Header names are stored upper-cased, in the order they were received.
    """
    address: str
    headers: dict[str, str] = field(default_factory=dict)

    def get_header(self, name: str) -> str | None:
        return self.headers.get(name.upper())

    def set_header(self, name: str, value: str):
        self.headers[name.upper()] = value

    def __str__(self):
        lines = [f"Response from: {self.address}"]
        lines.extend(f"{name}: {value}" for name, value in self.headers.items())
        return '\n'.join(lines)


def build_search_message(search_target: str, max_wait: int) -> bytes:
    """Build the M-SEARCH datagram.

    Args:
        search_target: Value for the ST header
        max_wait: Value for the MX header (seconds a device may delay its reply)
    """
    user_agent = f"{platform.system()}/{platform.release()} UPnP/1.1 {USER_AGENT_PRODUCT}"
    return (
        'M-SEARCH * HTTP/1.1\r\n'
        f'HOST: {MULTICAST_ADDRESS}:{MULTICAST_PORT}\r\n'
        'MAN: "ssdp:discover"\r\n'
        f'MX: {max_wait}\r\n'
        f'ST: {search_target}\r\n'
        f'USER-AGENT: {user_agent}\r\n'
        '\r\n'
    ).encode('utf-8')


def parse_response(data: bytes, address: str) -> SsdpResponse | None:
    """Parse a search reply.

    Lines starting with whitespace continue the previous header and are
    appended to its value, space separated. A header name seen twice gets
    its values joined with a comma (RFC 2616 section 4.2).

    Returns:
        SsdpResponse, or None if the datagram is not a "200 OK" reply
    """
    message = data.decode('utf-8', errors='replace')
    if not message.startswith(RESPONSE_STATUS_LINE + '\r\n'):
        return None

    response = SsdpResponse(address)
    continuation_header = None
    for line in re.split(r'[\r\n]+', message[len(RESPONSE_STATUS_LINE) + 2:]):
        if continuation_header is not None and line[:1] in (' ', '\t'):
            existing = response.get_header(continuation_header)
            response.set_header(continuation_header, f"{existing} {line.strip()}" if existing else line.strip())
            continue

        match = HEADER_PATTERN.fullmatch(line)
        if not match:
            continuation_header = None
            continue

        name, value = match.group(1), match.group(2)
        existing = response.get_header(name)
        if existing is not None:
            value = f"{existing},{value}" if existing.strip() else value
        response.set_header(name, value)
        continuation_header = name

    return response


def open_search_socket(ttl: int, timeout: float, socket_factory=socket.socket) -> socket.socket:
    """Create the UDP socket used for a search.

    Raises:
        ConfigurationError: If the socket can not be created or configured
    """
    try:
        sock = socket_factory(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
    except OSError as e:
        raise ConfigurationError(f"Can not create discovery socket: {e}") from e

    steps = (
        ('set socket timeout', lambda: sock.settimeout(timeout)),
        ('bind discovery socket', lambda: sock.bind(('', 0))),
        ('join multicast group ' + MULTICAST_ADDRESS, lambda: sock.setsockopt(
            socket.IPPROTO_IP, socket.IP_ADD_MEMBERSHIP,
            socket.inet_aton(MULTICAST_ADDRESS) + socket.inet_aton('0.0.0.0'))),
        (f'set TTL {ttl}', lambda: sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, ttl)),
    )
    for description, step in steps:
        try:
            step()
        except OSError as e:
            sock.close()
            raise ConfigurationError(f"Can not {description}: {e}") from e
    return sock


def search(search_target: str = SEARCH_TARGET_ROOTDEVICE, max_wait: int = 2,
           socket_timeout_ms: int = 2000, ttl: int = 2,
           socket_factory=socket.socket) -> list[SsdpResponse]:
    """Send a search request and return all well-formed replies.

    Devices may delay their reply by up to ``max_wait`` seconds, so the
    socket waits that long plus ``socket_timeout_ms`` for each datagram.
    A timeout with no replies at all is a normal, empty result.

    Args:
        search_target: ST header value
        max_wait: MX header value in seconds
        socket_timeout_ms: Additional quiet time to wait for replies
        ttl: Multicast time to live
        socket_factory: Callable creating the socket (for tests)

    Returns:
        List of parsed replies in arrival order

    Raises:
        ConfigurationError: On socket setup failure
        CommError: If receiving fails for a reason other than the timeout
    """
    timeout = max_wait + socket_timeout_ms / 1000
    sock = open_search_socket(ttl, timeout, socket_factory)
    result = []
    try:
        try:
            sock.sendto(build_search_message(search_target, max_wait), (MULTICAST_ADDRESS, MULTICAST_PORT))
        except OSError as e:
            raise ConfigurationError(f"Can not send search request: {e}") from e
        logger.debug("SSDP search request sent for %s", search_target)

        while True:
            try:
                data, (address, _port) = sock.recvfrom(RECEIVE_BUFFER_SIZE)
            except socket.timeout:
                break
            except OSError as e:
                raise CommError(f"Problem receiving search responses: {e}") from e

            logger.debug("SSDP response from %s:\n%s", address, data.decode('utf-8', errors='replace'))
            response = parse_response(data, address)
            if response is None:
                logger.debug("Response from %s is not a proper search reply, ignoring it", address)
                continue
            result.append(response)
    finally:
        sock.close()

    return result
