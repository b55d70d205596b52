"""Configuration management for mcast-rpc.

This module provides the configuration class that integrates with Django
settings, allowing the multicast endpoint, datagram limits and logging
behaviour to be configured without code changes.
"""

from __future__ import annotations

from dataclasses import dataclass

from django.conf import settings

#: Largest datagram read from the socket in one call.
MAX_READ_BYTES = 8042

DEFAULT_MULTICAST_GROUP = "239.255.42.42"
DEFAULT_PORT = 8042


@dataclass
class RpcConfig:
    """Main configuration for mcast-rpc.

    Attributes
    ----------
    multicast_group : str
        IPv4 multicast group servers join and clients send to.
    port : int
        UDP port shared by the group.
    interface : str
        Address of the local interface used to join the group
        (``"0.0.0.0"`` lets the kernel choose).
    max_datagram_size : int
        Maximum number of bytes read per datagram (default: 8042).
    multicast_ttl : int
        Time-to-live of datagrams sent by the client (default: 1, local
        network only).
    client_timeout : float
        Seconds the client waits for responses (default: 1.0).
    log_rpc_params : bool
        Whether to log RPC method parameters (may contain PII).

    Examples
    --------
    Get configuration from Django settings::

        config = RpcConfig.from_settings()
        if config.log_rpc_params:
            logger.debug("RPC params: %s", params)
    """

    multicast_group: str = DEFAULT_MULTICAST_GROUP
    port: int = DEFAULT_PORT
    interface: str = "0.0.0.0"  # noqa: S104
    max_datagram_size: int = MAX_READ_BYTES
    multicast_ttl: int = 1
    client_timeout: float = 1.0
    log_rpc_params: bool = False

    @classmethod
    def from_settings(cls) -> RpcConfig:
        """Load configuration from Django settings.

        Reads configuration from Django settings under the MCAST_RPC key.
        Falls back to default values if Django settings are not configured.

        Returns
        -------
        RpcConfig
            Configuration instance with values from settings or defaults.

        Examples
        --------
        In Django settings.py::

            MCAST_RPC = {
                'MULTICAST_GROUP': '239.1.2.3',
                'PORT': 9000,
                'LOG_RPC_PARAMS': True,
            }
        """
        if not settings.configured:
            return cls()

        config = getattr(settings, "MCAST_RPC", {})

        return cls(
            multicast_group=config.get("MULTICAST_GROUP", cls.multicast_group),
            port=config.get("PORT", cls.port),
            interface=config.get("INTERFACE", cls.interface),
            max_datagram_size=config.get("MAX_DATAGRAM_SIZE", cls.max_datagram_size),
            multicast_ttl=config.get("MULTICAST_TTL", cls.multicast_ttl),
            client_timeout=config.get("CLIENT_TIMEOUT", cls.client_timeout),
            log_rpc_params=config.get("LOG_RPC_PARAMS", cls.log_rpc_params),
        )


# Global configuration instance
_config: RpcConfig | None = None


def get_config() -> RpcConfig:
    """Get the global RPC configuration instance.

    On first call the configuration is loaded from Django settings;
    subsequent calls return the cached instance.

    Returns
    -------
    RpcConfig
        The global configuration instance.

    Notes
    -----
    Changes to Django settings after the first call will not be reflected
    until :func:`reset_config` is called.
    """
    global _config  # noqa: PLW0603
    if _config is None:
        _config = RpcConfig.from_settings()
    return _config


def reset_config() -> None:
    """Reset the global configuration cache.

    This function is primarily useful for testing, where you may want
    to reload configuration between tests.
    """
    global _config  # noqa: PLW0603
    _config = None
