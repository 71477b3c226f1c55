# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Constants used by this package"""

MIIO_PORT = 54321
"""The UDP port on which miIO devices listen for requests."""

PACKET_MAGIC = b'\x21\x31'
"""The two magic bytes at the start of every miIO packet."""

HEADER_LENGTH = 32
"""The length of the fixed miIO packet header, in bytes."""

CHECKSUM_OFFSET = 16
"""The offset of the 16-byte MD5 checksum within the header."""

DEVICE_ID_OFFSET = 8
"""The offset of the 4-byte device id within the header."""

STAMP_OFFSET = 12
"""The offset of the 4-byte stamp within the header."""

MIN_HELLO_REPLY_LENGTH = 16
"""A hello reply must at least contain the device id and stamp."""

HELLO_FILLER_BYTE = 0xff
"""The filler byte used for bytes 4-31 of a hello packet."""

TOKEN_LENGTH = 16
"""The length of a device token, in bytes. On the wire it is 32 hex characters."""

AES_BLOCK_SIZE = 16
"""AES block size in bytes, used for PKCS7 padding."""

DEFAULT_CONNECT_TIMEOUT = 5.0
"""Seconds allowed for opening the UDP transport to a device."""

DEFAULT_DISCOVERY_TIMEOUT = 5.0
"""Seconds to wait for the reply to a hello packet."""

DEFAULT_COMMAND_TIMEOUT = 3.0
"""I/O deadline, in seconds, for sending a command and reading its reply."""

MAX_DATAGRAM_SIZE = 1024
"""Receive buffer size for a single reply datagram."""

COMMAND_ID = 1
"""The request id used for every command; there is never more than one outstanding."""
