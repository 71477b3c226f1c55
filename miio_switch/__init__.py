# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Package miio_switch controls Xiaomi Mi smart plugs over the local miIO protocol.

miIO is the UDP protocol (port 54321) that Xiaomi devices speak on the local
network. Every request is a 32-byte header followed by a JSON command that is
encrypted with AES-128-CBC; the key and IV are derived from the device's
16-byte token, and the header carries an MD5 checksum keyed by the same token.
Before a command can be sent, an unauthenticated "hello" packet must be
exchanged to learn the device id and stamp that go in the header.

No cloud account is required; only the device address and its token.
"""

from .version import __version__

from .internal_types import Jsonable, JsonableDict

from .exceptions import (
    MiioError,
    InvalidTokenError,
    DiscoveryError,
    EncodingError,
    CryptoError,
    TransportError,
    ReplyTooShortError,
    DecodeError,
    NoPowerStateError,
  )

from .crypto import parse_token, derive_key_iv, encrypt, decrypt
from .packet import MiioPacket, build_packet, build_hello_packet
from .messages import MiioRequest, MiioResponse
from .transport import UdpTransport
from .config import MiioConfig, DEFAULT_CONFIG
from .discovery import DeviceIdentity, discover
from .client import MiioSwitch, set_switch, get_switch, send_command, build_command_packet
from .constants import MIIO_PORT

__all__ = [
    '__version__',
    'Jsonable', 'JsonableDict',
    'MiioError', 'InvalidTokenError', 'DiscoveryError', 'EncodingError', 'CryptoError',
    'TransportError', 'ReplyTooShortError', 'DecodeError', 'NoPowerStateError',
    'parse_token', 'derive_key_iv', 'encrypt', 'decrypt',
    'MiioPacket', 'build_packet', 'build_hello_packet',
    'MiioRequest', 'MiioResponse',
    'UdpTransport',
    'MiioConfig', 'DEFAULT_CONFIG',
    'DeviceIdentity', 'discover',
    'MiioSwitch', 'set_switch', 'get_switch', 'send_command', 'build_command_packet',
    'MIIO_PORT',
]
