"""Bridge discovery on the local network.

Runs SSDP searches for UPnP root devices and keeps the responders that are
Hue bridges: the reply must carry a uuid USN and an IpBridge SERVER header,
and the device description at LOCATION must name a "Philips hue bridge"
model. Searches repeat with growing timeouts until a round finds something.
"""

import logging
import re
from dataclasses import dataclass, field
from xml.etree import ElementTree

import requests

from core import ssdp

logger = logging.getLogger(__name__)

# The UDN, optionally followed by ::<type> as in a rootdevice reply
USN_PATTERN = re.compile(r'(uuid:[-\w]+)(?:::.*)?')
BRIDGE_SERVER_MARKER = 'IpBridge'
MODEL_NAME_PATTERN = re.compile(r'.*philips\s+hue\s+bridge.*', re.IGNORECASE | re.DOTALL)
MAX_ATTEMPTS = 4


@dataclass
class DiscoveryResult:
    """Bridges found by discover(), plus the errors met on the way.

    An error for one responder never stops the others from being checked,
    so unrelated UPnP devices can not hide a bridge.
    """
    bridges: list = field(default_factory=list)
    errors: list[Exception] = field(default_factory=list)
    attempts: int = 0

    @property
    def last_error(self) -> Exception | None:
        return self.errors[-1] if self.errors else None

    def __iter__(self):
        return iter(self.bridges)

    def __len__(self):
        return len(self.bridges)


def _local_name(tag: str) -> str:
    return tag.rsplit('}', 1)[-1]


def parse_description(document: str | bytes) -> str | None:
    """Extract the base URL from a UPnP device description.

    Returns:
        The URLBase text if a ``device`` element has a modelName matching
        "philips hue bridge", otherwise None
    """
    root = ElementTree.fromstring(document)
    for parent in root.iter():
        if _local_name(parent.tag) != 'device':
            continue
        for child in parent:
            if _local_name(child.tag) == 'modelName' and MODEL_NAME_PATTERN.fullmatch(child.text or ''):
                for element in root.iter():
                    if _local_name(element.tag) == 'URLBase' and element.text:
                        return element.text.strip()
                return None
    return None


def fetch_description(location: str, timeout: float = 5.0) -> bytes:
    """Download a device description document."""
    response = requests.get(location, timeout=timeout)
    response.raise_for_status()
    return response.content


def bridge_url_for(response: ssdp.SsdpResponse, fetch=fetch_description, timeout: float = 5.0) -> str | None:
    """Check a search reply and return the bridge base URL, or None."""
    server = response.get_header('SERVER')
    if not server or BRIDGE_SERVER_MARKER not in server:
        return None
    location = response.get_header('LOCATION')
    if not location or not location.endswith('.xml'):
        return None
    return parse_description(fetch(location, timeout))


def discover(attempts: int = 3, search=ssdp.search, fetch=fetch_description,
             settings=None) -> DiscoveryResult:
    """Find Hue bridges on the local network.

    Runs up to min(4, max(1, attempts)) search rounds. Round n waits
    1+n seconds (MX) plus 500+n*1500 ms, and the first round that finds
    a bridge ends the search.

    Args:
        attempts: Number of search rounds before giving up
        search: SSDP search function (for tests)
        fetch: Description download function (for tests)
        settings: HueSettings for the created bridges and HTTP timeouts

    Returns:
        DiscoveryResult with one unauthenticated HueBridge per bridge UDN
    """
    # Import here to avoid circular dependency (core.bridge uses discover())
    from core.bridge import HueBridge
    from core.config import HueSettings

    settings = settings or HueSettings()
    result = DiscoveryResult()
    found: dict[str, str] = {}
    seen: set[str] = set()
    max_attempts = min(MAX_ATTEMPTS, max(1, attempts))

    while not found and result.attempts < max_attempts:
        round_number = result.attempts
        responses = search(ssdp.SEARCH_TARGET_ROOTDEVICE, max_wait=1 + round_number,
                           socket_timeout_ms=500 + round_number * 1500)
        result.attempts += 1

        for response in responses:
            match = USN_PATTERN.fullmatch(response.get_header('USN') or '')
            if not match or match.group(1) in seen:
                continue
            usn = match.group(1)
            try:
                url_base = bridge_url_for(response, fetch, settings.description_timeout)
            except Exception as e:
                # Not marked as seen, a later reply for this UDN is checked again
                result.errors.append(e)
                logger.info("Exception when checking %s (%s): %s", response.address, usn, e)
                continue
            seen.add(usn)
            if url_base:
                logger.debug("Found bridge %s at %s", usn, url_base)
                found[usn] = url_base
            else:
                logger.debug("%s at %s is not a Hue bridge", usn, response.address)

    result.bridges = [HueBridge(url_base, udn=usn, settings=settings) for usn, url_base in found.items()]
    return result
