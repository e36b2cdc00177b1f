"""
Protocol version negotiation.

Runs once per connection, straight after connecting. The client announces the
version it would like to speak, the server replies with its own, and the lower
of the two is used for every payload on that connection. Servers older than
protocol 1 never answer; a forced version is the only way to talk to them.
"""

import logging
from typing import Optional

from ..io import OpenRGBClient
from ..exceptions import OpenRGBNegotiationError, OpenRGBTimeoutError
from .codec import encode_u32, decode_u32
from .types import Command, Const


def preferred_protocol_version(forced: Optional[int] = None) -> int:
    return forced if forced is not None else Const.CLIENT_PROTOCOL_VERSION


def resolve_protocol_version(server_version: Optional[int], forced: Optional[int] = None) -> int:
    """Pick the effective version. server_version is None when the server never answered."""
    if server_version is None:
        if forced is not None:
            return forced
        raise OpenRGBNegotiationError("Server did not report its protocol version and no version was forced")
    return min(server_version, preferred_protocol_version(forced))


async def negotiate_protocol_version(client: OpenRGBClient,
                                     forced: Optional[int] = None,
                                     timeout: float = Const.NEGOTIATION_TIMEOUT,
                                     logger: Optional[logging.Logger] = None) -> int:
    logger = logger or logging.getLogger(__name__)
    preferred = preferred_protocol_version(forced)
    try:
        payload = await client.request(0, Command.REQUEST_PROTOCOL_VERSION, encode_u32(preferred), timeout=timeout)
        server_version = decode_u32(payload)
    except OpenRGBTimeoutError:
        logger.warning(f"Server did not answer the protocol version request within {timeout}s")
        server_version = None
    version = resolve_protocol_version(server_version, forced)
    logger.info(f"Using protocol version {version} (client {preferred}, server {server_version if server_version is not None else 'unknown'})")
    return version
