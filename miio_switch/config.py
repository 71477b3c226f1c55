#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Configuration of ports, timeouts and transport used by a miIO exchange."""

from __future__ import annotations

import os

from .internal_types import *
from .constants import (
    MIIO_PORT,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_DISCOVERY_TIMEOUT,
    DEFAULT_COMMAND_TIMEOUT,
    MAX_DATAGRAM_SIZE,
  )
from .transport import UdpTransport

TransportFactory = Callable[[str, int, float], UdpTransport]
"""A callable (host, port, connect_timeout) that opens a transport. Test doubles
   need only provide the methods of UdpTransport that are used."""

class MiioConfig:
    """Settings applied to every exchange. Instances are never mutated by this package."""

    port: int = MIIO_PORT
    """The device UDP port."""

    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    """Seconds allowed to open each transport."""

    discovery_timeout: float = DEFAULT_DISCOVERY_TIMEOUT
    """I/O deadline, in seconds, for the hello exchange."""

    command_timeout: float = DEFAULT_COMMAND_TIMEOUT
    """I/O deadline, in seconds, for the command exchange."""

    max_datagram_size: int = MAX_DATAGRAM_SIZE
    """Receive buffer size for a reply datagram."""

    transport_factory: TransportFactory = UdpTransport
    """Opens the transport for each phase."""

    def __init__(
            self,
            port: Optional[int]=None,
            connect_timeout: Optional[float]=None,
            discovery_timeout: Optional[float]=None,
            command_timeout: Optional[float]=None,
            max_datagram_size: Optional[int]=None,
            transport_factory: Optional[TransportFactory]=None,
          ) -> None:
        if not port is None:
            self.port = port
        if not connect_timeout is None:
            self.connect_timeout = connect_timeout
        if not discovery_timeout is None:
            self.discovery_timeout = discovery_timeout
        if not command_timeout is None:
            self.command_timeout = command_timeout
        if not max_datagram_size is None:
            self.max_datagram_size = max_datagram_size
        if not transport_factory is None:
            self.transport_factory = transport_factory

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]]=None, **kwargs: Any) -> MiioConfig:
        """Creates a config with overrides taken from MIIO_PORT, MIIO_CONNECT_TIMEOUT,
           MIIO_DISCOVERY_TIMEOUT and MIIO_COMMAND_TIMEOUT. Unset or empty variables
           keep their defaults. Keyword arguments that are not None take precedence.
        """
        if environ is None:
            environ = os.environ

        def env_value(name: str, convert: Callable[[str], Any]) -> Any:
            value = environ.get(name, '').strip()
            if value == '':
                return None
            try:
                return convert(value)
            except ValueError as e:
                raise ValueError(f"Invalid value for environment variable {name}: {value!r}") from e

        settings: Dict[str, Any] = dict(
            port=env_value('MIIO_PORT', int),
            connect_timeout=env_value('MIIO_CONNECT_TIMEOUT', float),
            discovery_timeout=env_value('MIIO_DISCOVERY_TIMEOUT', float),
            command_timeout=env_value('MIIO_COMMAND_TIMEOUT', float),
          )
        settings.update((k, v) for k, v in kwargs.items() if not v is None)
        return cls(**settings)

    def open_transport(self, host: str, timeout: float) -> UdpTransport:
        """Opens a transport to host with the connect timeout, then applies the I/O deadline."""
        transport = self.transport_factory(host, self.port, self.connect_timeout)
        try:
            transport.set_timeout(timeout)
        except BaseException:
            transport.close()
            raise
        return transport

    def __str__(self) -> str:
        return (f"MiioConfig(port={self.port}, connect_timeout={self.connect_timeout}, "
                f"discovery_timeout={self.discovery_timeout}, command_timeout={self.command_timeout})")

    def __repr__(self) -> str:
        return str(self)

DEFAULT_CONFIG = MiioConfig()
"""The config used when None is passed to a public operation."""
