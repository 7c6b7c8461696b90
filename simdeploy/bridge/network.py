"""Network reachability check for internal deploy targets."""

from __future__ import annotations

import logging
import socket
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class NetworkCheck(Protocol):
    def is_reachable(self) -> bool: ...


class DnsNetworkCheck:
    """Reachable when a host that only resolves on the internal network resolves.

    Being on VPN (or on campus) is what makes the internal hostname resolvable.
    """

    def __init__(self, host: str) -> None:
        self._host = host

    @property
    def host(self) -> str:
        return self._host

    def is_reachable(self) -> bool:
        try:
            socket.gethostbyname(self._host)
        except OSError as exc:
            logger.warning("Cannot resolve %s: %s", self._host, exc)
            return False
        return True
