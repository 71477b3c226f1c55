#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Framing of miIO packets.

All packets sent to or received from a device have a 32-byte header
followed by an optional encrypted payload. All integers are big-endian:

    offset  size  field
    0       2     magic (21 31)
    2       2     total packet length, including the header
    4       4     reserved (zero on packets built here)
    8       4     device id
    12      4     stamp
    16      16    checksum
    32      N     encrypted payload

The checksum is MD5(header[0:16] + token + encrypted payload).

The hello packet used for discovery is a header with length 0x0020
and every byte after the length set to 0xff.
"""

from __future__ import annotations

import struct

from .internal_types import *
from .constants import (
    PACKET_MAGIC,
    HEADER_LENGTH,
    CHECKSUM_OFFSET,
    DEVICE_ID_OFFSET,
    STAMP_OFFSET,
    HELLO_FILLER_BYTE,
  )
from .crypto import md5

_HEADER_PREFIX = struct.Struct('>2sHI4s4s')

def build_packet(token: bytes, device_id: bytes, stamp: bytes, encrypted_payload: bytes) -> bytes:
    """Frames an encrypted payload into a miIO packet addressed to device_id/stamp.

    The checksum is computed once every other header field is in place.
    """
    if len(device_id) != 4:
        raise ValueError(f"device id must be 4 bytes: {device_id.hex(' ')}")
    if len(stamp) != 4:
        raise ValueError(f"stamp must be 4 bytes: {stamp.hex(' ')}")
    total_length = HEADER_LENGTH + len(encrypted_payload)
    header_prefix = _HEADER_PREFIX.pack(PACKET_MAGIC, total_length, 0, device_id, stamp)
    checksum = md5(header_prefix + token + encrypted_payload)
    return header_prefix + checksum + encrypted_payload

def build_hello_packet() -> bytes:
    """Returns the fixed 32-byte unauthenticated hello packet."""
    return PACKET_MAGIC + struct.pack('>H', HEADER_LENGTH) + bytes([HELLO_FILLER_BYTE] * (HEADER_LENGTH - 4))

class MiioPacket:
    """
    A read-only view of a raw miIO datagram received from a device.

    Fields are read at their fixed header offsets; nothing is validated
    beyond what the accessors need.
    """

    raw_data: bytes
    """The raw datagram contents"""

    def __init__(self, raw_data: bytes):
        self.raw_data = raw_data

    def __str__(self) -> str:
        return f"MiioPacket({self.raw_data.hex(' ')})"

    def __repr__(self) -> str:
        return str(self)

    def __len__(self) -> int:
        return len(self.raw_data)

    @property
    def magic(self) -> bytes:
        return self.raw_data[0:2]

    @property
    def length(self) -> int:
        """The total packet length as stated in the header"""
        return struct.unpack('>H', self.raw_data[2:4])[0]

    @property
    def device_id(self) -> bytes:
        """The 4-byte device id"""
        return self.raw_data[DEVICE_ID_OFFSET:DEVICE_ID_OFFSET + 4]

    @property
    def stamp(self) -> bytes:
        """The 4-byte stamp"""
        return self.raw_data[STAMP_OFFSET:STAMP_OFFSET + 4]

    @property
    def checksum(self) -> bytes:
        return self.raw_data[CHECKSUM_OFFSET:HEADER_LENGTH]

    @property
    def payload(self) -> bytes:
        """The encrypted payload following the 32-byte header. b'' if there is none."""
        return self.raw_data[HEADER_LENGTH:]

    @property
    def has_full_header(self) -> bool:
        return len(self.raw_data) >= HEADER_LENGTH
