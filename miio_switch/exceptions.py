#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Exceptions defined by this package"""

class MiioError(Exception):
  """Base class for all error exceptions defined by this package.

  Every subclass records the protocol phase that produced it in the
  class attribute `phase`, and the specific failure in `reason`.
  """
  phase: str = "unknown"
  reason: str

  def __init__(self, reason: str):
    self.reason = reason
    super().__init__(f"{self.phase}: {reason}")

class InvalidTokenError(MiioError):
  """The device token is not 32 hexadecimal characters."""
  phase = "decoding token"

class DiscoveryError(MiioError):
  """The hello handshake failed (socket error, timeout or short reply)."""
  phase = "discovery"

class EncodingError(MiioError):
  """The JSON command could not be serialized."""
  phase = "encoding command"

class CryptoError(MiioError):
  """The cipher could not be constructed, or ciphertext is not block aligned."""
  phase = "crypto"

class TransportError(MiioError):
  """The command transport could not be opened, written or (for queries) read."""
  phase = "command"

class ReplyTooShortError(MiioError):
  """A mandatory reply was shorter than the packet header."""
  phase = "decoding response"

  length: int

  def __init__(self, length: int):
    self.length = length
    super().__init__(f"response too short ({length} bytes)")

class DecodeError(MiioError):
  """The decrypted reply is not a well-formed JSON response."""
  phase = "decoding response"

class NoPowerStateError(MiioError):
  """The reply carried an empty result, so no power state is known."""
  phase = "decoding response"

  def __init__(self, reason: str="no power state in response"):
    super().__init__(reason)
