#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
The hello handshake that learns a device's id and stamp.

Before any command can be sent, the client must know the 4-byte device id
and the 4-byte stamp of the device, since both are echoed into the header of
every request. They are obtained by sending the unauthenticated 32-byte hello
packet and reading bytes 8-15 of the reply. No checksum or payload of the
reply is examined.

The identity is never cached; every top-level operation performs its own
handshake.
"""

from __future__ import annotations

from .internal_types import *
from .pkg_logging import logger
from .constants import MIN_HELLO_REPLY_LENGTH
from .config import MiioConfig, DEFAULT_CONFIG
from .exceptions import DiscoveryError
from .packet import MiioPacket, build_hello_packet

class DeviceIdentity:
    """The (device id, stamp) pair returned by a hello handshake."""

    device_id: bytes
    """The opaque 4-byte device id"""

    stamp: bytes
    """The opaque 4-byte stamp supplied by the device"""

    def __init__(self, device_id: bytes, stamp: bytes):
        self.device_id = device_id
        self.stamp = stamp

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DeviceIdentity):
            return NotImplemented
        return self.device_id == other.device_id and self.stamp == other.stamp

    def __hash__(self) -> int:
        return hash((self.device_id, self.stamp))

    def __str__(self) -> str:
        return f"DeviceIdentity(device_id={self.device_id.hex()}, stamp={self.stamp.hex()})"

    def __repr__(self) -> str:
        return str(self)

def discover(host: str, config: Optional[MiioConfig]=None) -> DeviceIdentity:
    """Performs a hello handshake with the device at host.

    Raises DiscoveryError if the transport cannot be opened, the hello cannot be
    sent, no reply arrives within config.discovery_timeout, or the reply is
    shorter than 16 bytes.
    """
    if config is None:
        config = DEFAULT_CONFIG
    hello = build_hello_packet()
    try:
        with config.open_transport(host, config.discovery_timeout) as transport:
            logger.debug(f"Sending hello to {host}:{config.port}")
            transport.send(hello)
            reply = MiioPacket(transport.receive(config.max_datagram_size))
    except OSError as e:
        raise DiscoveryError(f"hello exchange with {host}:{config.port} failed: {e}") from e
    if len(reply) < MIN_HELLO_REPLY_LENGTH:
        raise DiscoveryError(f"hello response too short ({len(reply)} bytes)")
    identity = DeviceIdentity(reply.device_id, reply.stamp)
    logger.debug(f"Discovered {host}: {identity}")
    return identity
