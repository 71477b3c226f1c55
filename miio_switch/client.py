#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
miIO command exchange -- the public operations of this package:

  1. set_switch(host, token, on) turns a smart plug on or off
  2. get_switch(host, token) returns the live on/off state of a smart plug
  3. send_command(host, token, request) sends any other miIO command

Every call is stateless: it validates the token, performs a fresh hello
handshake, encrypts and frames the JSON command, sends it on a new UDP
transport and, where a reply is required, decrypts and decodes it. Nothing is
retried and nothing is kept between calls, so calls may be made concurrently
from multiple threads.
"""

from __future__ import annotations

from .internal_types import *
from .pkg_logging import logger
from .config import MiioConfig, DEFAULT_CONFIG
from .crypto import parse_token, encrypt, decrypt
from .discovery import DeviceIdentity, discover
from .exceptions import TransportError, ReplyTooShortError
from .messages import MiioRequest, MiioResponse
from .packet import MiioPacket, build_packet

def build_command_packet(token: bytes, identity: DeviceIdentity, request: MiioRequest) -> bytes:
    """Encrypts request with token and frames it for the device identified by identity."""
    encrypted = encrypt(request.encode(), token)
    return build_packet(token, identity.device_id, identity.stamp, encrypted)

def decode_reply(reply: bytes, token: bytes) -> MiioResponse:
    """Strips the header from a reply datagram, decrypts the payload, and parses the JSON response.

    Raises ReplyTooShortError, CryptoError or DecodeError.
    """
    packet = MiioPacket(reply)
    if not packet.has_full_header:
        raise ReplyTooShortError(len(packet))
    plaintext = decrypt(packet.payload, token)
    return MiioResponse.decode(plaintext)

def _exchange(host: str, packet: bytes, reply_required: bool, config: MiioConfig) -> Optional[bytes]:
    """Sends packet on a new transport and reads at most one reply.

    If reply_required is False, a failed or timed-out read is ignored and None
    is returned; devices do not always acknowledge commands.
    """
    try:
        transport = config.open_transport(host, config.command_timeout)
    except OSError as e:
        raise TransportError(f"opening transport to {host}:{config.port}: {e}") from e
    with transport:
        try:
            transport.send(packet)
        except OSError as e:
            raise TransportError(f"sending command to {host}:{config.port}: {e}") from e
        try:
            return transport.receive(config.max_datagram_size)
        except OSError as e:
            if reply_required:
                raise TransportError(f"reading response: {e}") from e
            logger.debug(f"Ignoring missing reply from {host}: {e}")
            return None

def send_command(
        host: str,
        token: str,
        request: MiioRequest,
        reply_required: bool=True,
        config: Optional[MiioConfig]=None
      ) -> Optional[MiioResponse]:
    """Sends a single miIO command to the device at host and returns its decoded response.

    Parameters:
        host:            The device IP address or host name.
        token:           The 32-character hex device token.
        request:         The command to send.
        reply_required:  If False, a missing reply is not an error and the reply,
                           if any, is discarded; None is returned.
        config:          Ports, timeouts and transport. Defaults to DEFAULT_CONFIG.
    """
    if config is None:
        config = DEFAULT_CONFIG
    token_bytes = parse_token(token)
    identity = discover(host, config)
    packet = build_command_packet(token_bytes, identity, request)
    logger.debug(f"Sending {request} to {host} ({identity})")
    reply = _exchange(host, packet, reply_required, config)
    if not reply_required or reply is None:
        return None
    response = decode_reply(reply, token_bytes)
    logger.debug(f"Received {response} from {host}")
    return response

def set_switch(host: str, token: str, on: bool, config: Optional[MiioConfig]=None) -> None:
    """Turns the smart plug at host on or off.

    Succeeds as soon as the command is sent; the device's acknowledgement, if
    any, is read and discarded.
    """
    send_command(host, token, MiioRequest.set_power(on), reply_required=False, config=config)

def get_switch(host: str, token: str, config: Optional[MiioConfig]=None) -> bool:
    """Returns True if the smart plug at host is on, False otherwise."""
    response = send_command(host, token, MiioRequest.get_power(), config=config)
    assert not response is None
    return response.power_state

class MiioSwitch:
    """A convenience wrapper binding a host and token. It holds no session state;
       each method is an independent exchange."""

    host: str
    token: str
    config: MiioConfig

    def __init__(self, host: str, token: str, config: Optional[MiioConfig]=None):
        parse_token(token)
        self.host = host
        self.token = token
        self.config = DEFAULT_CONFIG if config is None else config

    def turn_on(self) -> None:
        set_switch(self.host, self.token, True, config=self.config)

    def turn_off(self) -> None:
        set_switch(self.host, self.token, False, config=self.config)

    def is_on(self) -> bool:
        return get_switch(self.host, self.token, config=self.config)

    def discover(self) -> DeviceIdentity:
        return discover(self.host, self.config)

    def __str__(self) -> str:
        return f"MiioSwitch({self.host})"

    def __repr__(self) -> str:
        return str(self)
