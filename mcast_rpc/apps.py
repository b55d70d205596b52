"""Django application configuration for mcast-rpc."""

from __future__ import annotations

import logging

from django.apps import AppConfig

logger = logging.getLogger("mcast_rpc")


class McastRpcConfig(AppConfig):
    """Django app configuration for mcast-rpc.

    Installing the app is optional; it only loads and reports the
    configuration when Django starts.

    Examples
    --------
    Add to INSTALLED_APPS in settings.py::

        INSTALLED_APPS = [
            ...
            'mcast_rpc',
            ...
        ]
    """

    name = "mcast_rpc"
    verbose_name = "Multicast JSON-RPC"

    def ready(self) -> None:
        """Load the configuration early to catch any issues."""
        from mcast_rpc.config import get_config

        config = get_config()

        logger.info(
            "mcast-rpc initialized: MULTICAST_GROUP=%s, PORT=%d, "
            "MAX_DATAGRAM_SIZE=%d",
            config.multicast_group,
            config.port,
            config.max_datagram_size,
        )

        if config.log_rpc_params:
            logger.warning(
                "LOG_RPC_PARAMS is enabled - RPC parameters will be logged. "
                "This may expose sensitive information (PII, credentials). "
                "Only enable in development environments."
            )
