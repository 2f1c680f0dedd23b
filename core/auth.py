"""
Authentication module for Hue Bridge.

Handles credential (username) validation and the link button handshake:
an existing username is probed with a full sync first, otherwise a
create-user request is repeated until the link button on the bridge is
pressed or the wait budget runs out.
"""

import logging
import random
import re
import time

from core.cache import complete_sync
from core.errors import CommError, ValidationError

logger = logging.getLogger(__name__)

CREDENTIAL_PATTERN = re.compile(r'\s*[-_a-zA-Z0-9]{10,40}\s*')

# Bridge error type for "link button not pressed"
LINK_BUTTON_NOT_PRESSED = 101


def validate_credential(username: str | None) -> str | None:
    """Check a username before it is used in any request.

    Args:
        username: Candidate username, surrounding whitespace is ignored

    Returns:
        The trimmed username, or None if none was given

    Raises:
        ValidationError: If the username is not 10-40 characters of -_a-zA-Z0-9
    """
    if username is None:
        return None
    if not CREDENTIAL_PATTERN.fullmatch(username):
        raise ValidationError(
            "A username must be 10-40 characters long and may only contain the characters -,_,a-z,A-Z,0-9")
    return username.strip()


def equal_enough(a: str | None, b: str | None) -> bool:
    """Two usernames are equal if both are effectively empty or both are the same."""
    a_empty = a is None or not a.strip()
    b_empty = b is None or not b.strip()
    if a_empty or b_empty:
        return a_empty and b_empty
    return a == b


def request_username(bridge, username_to_try: str | None) -> dict:
    """Send one create-user request.

    Uses the transport directly since no username is set yet. Transport
    failures are logged and reported as an empty response.

    Returns:
        The first response entry (``{"success": ...}`` or ``{"error": ...}``)
    """
    body = {'devicetype': bridge.settings.device_type}
    if username_to_try is not None and len(username_to_try.strip()) >= 10:
        body['username'] = username_to_try.strip()

    try:
        response = bridge.transport.request('POST', '/api', body)
    except CommError as e:
        logger.warning("Create user request to %s failed: %s", bridge.base_url, e)
        return {}
    return response[0] if response else {}


def authenticate(bridge, username_to_try: str | None, wait_for_grant: bool,
                 sleep=time.sleep, clock=time.monotonic) -> bool:
    """Authenticate bridge with username_to_try, creating the user if needed.

    Steps:
    1. Already authenticated with an equal-enough username: done.
    2. A non-empty username is probed with a full sync; success means it is
       already registered. The bridge answers create-user for an existing
       user with the same 101 error as for a missing link button press, so
       this probe is the only way to tell them apart.
    3. Otherwise create-user is requested. On error 101 and wait_for_grant
       the request repeats about once a second for up to
       settings.grant_wait_seconds. Any other error type stops waiting.
    4. Once authenticated, an initial full sync runs if none has happened.

    Args:
        bridge: HueBridge to authenticate
        username_to_try: Username to use or register (None lets the bridge pick)
        wait_for_grant: Whether to keep polling until the link button is pressed
        sleep: Sleep function (for tests)
        clock: Monotonic clock in seconds (for tests)

    Returns:
        True if the bridge is authenticated

    Raises:
        ValidationError: If username_to_try is malformed
        CommError: If the initial sync after authenticating fails
    """
    validate_credential(username_to_try)

    if not bridge.is_authenticated() or not equal_enough(bridge.username, username_to_try):
        if not equal_enough(None, username_to_try):
            try:
                complete_sync(bridge, username_to_try)
                bridge.authenticated = True
                logger.debug("Username accepted by %s", bridge.base_url)
            except CommError as e:
                logger.debug("Username probe on %s failed: %s", bridge.base_url, e)

        if not bridge.is_authenticated():
            _poll_for_grant(bridge, username_to_try, wait_for_grant, sleep, clock)

    if bridge.is_authenticated() and not bridge.initial_sync_done:
        complete_sync(bridge, bridge.username)

    return bridge.is_authenticated()


def _poll_for_grant(bridge, username_to_try, wait_for_grant, sleep, clock):
    start = clock()
    while True:
        response = request_username(bridge, username_to_try)
        success = response.get('success')
        error = response.get('error')

        if isinstance(success, dict) and 'username' in success:
            bridge.username = success['username']
            bridge.authenticated = True
            logger.debug("New username granted by %s", bridge.base_url)
            return

        if isinstance(error, dict) and 'type' in error and error['type'] != LINK_BUTTON_NOT_PRESSED:
            logger.warning("Got unexpected error on create user: %s", error)
            return

        if not wait_for_grant or clock() - start > bridge.settings.grant_wait_seconds:
            return
        sleep(0.9 + random.random() * 0.1)
