"""Connectivity signals checked before issuing recognition requests."""

import socket
from dataclasses import dataclass
from typing import Protocol


class ConnectivityProbe(Protocol):
    """Reports whether the device currently has network access."""

    def is_online(self) -> bool:
        """Return True when requests can be attempted."""


@dataclass
class StaticConnectivity(ConnectivityProbe):
    """Fixed connectivity signal."""

    online: bool = True

    def is_online(self) -> bool:
        return self.online


@dataclass
class SocketConnectivity(ConnectivityProbe):
    """Treats a successful TCP connect to a known host as online."""

    host: str
    port: int
    timeout_seconds: float = 2.0

    def is_online(self) -> bool:
        """Try a short TCP connection to the configured host."""
        try:
            with socket.create_connection(
                (self.host, self.port), timeout=self.timeout_seconds
            ):
                return True
        except OSError:
            return False
