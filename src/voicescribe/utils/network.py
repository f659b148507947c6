"""Lightweight network reachability probe."""

import socket

from .logger import get_logger

logger = get_logger(__name__)

PROBE_HOST = "1.1.1.1"
PROBE_PORT = 443


def is_online(timeout: float = 0.3, host: str = PROBE_HOST, port: int = PROBE_PORT) -> bool:
    """
    Return False only when the network is known to be unreachable.

    A probe that merely times out counts as online.
    """
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except socket.timeout:
        logger.debug("Network probe timed out, assuming online")
        return True
    except OSError as e:
        logger.info(f"Network unreachable: {e}")
        return False
