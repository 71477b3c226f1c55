# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Storage of device tokens in the system keyring, for use by the command-line tool."""

from typing import Optional

import keyring

from .crypto import parse_token

DEFAULT_KEYRING_SERVICE = "miio-switch"

class KeyringTokenStore:
  _keyring_service: str

  def __init__(self, keyring_service: Optional[str]=None):
    self._keyring_service = DEFAULT_KEYRING_SERVICE if keyring_service is None else keyring_service

  @property
  def keyring_service(self) -> str:
    return self._keyring_service

  def get_token(self, host: str) -> str:
    result = keyring.get_password(self._keyring_service, host)
    if result is None:
      raise KeyError(f"KeyringTokenStore: service '{self._keyring_service}', host '{host}' has no stored token")
    return result

  def set_token(self, host: str, token: str):
    parse_token(token)
    keyring.set_password(self._keyring_service, host, token)

  def delete_token(self, host: str):
    keyring.delete_password(self._keyring_service, host)

  def token_exists(self, host: str) -> bool:
    try:
      self.get_token(host)
    except KeyError:
      return False

    return True
