"""Service layer owning the process-wide route dispatcher."""

import threading
from typing import Optional

from baassist.core.config import Config
from baassist.core.dispatcher import RouteDispatcher
from baassist.core.logging import get_logger
from baassist.core.provider_factory import create_client_from_config

logger = get_logger("baassist.web.services")


class AnalystService:
    """
    Holds the dispatcher for the lifetime of the server process.

    The dispatcher (and its completion client) is built on first use from
    ``Config.load()`` and closed by ``shutdown()`` at process exit.
    """

    _dispatcher: Optional[RouteDispatcher] = None
    _lock = threading.Lock()

    @classmethod
    def get_dispatcher(cls) -> RouteDispatcher:
        """
        Return the dispatcher, creating it on first use.

        Raises:
            ValueError: If no completion provider can be configured
        """
        with cls._lock:
            if cls._dispatcher is None:
                config = Config.load()
                client = create_client_from_config(config)
                cls._dispatcher = RouteDispatcher(client, bounds_policy=config.bounds_policy)
                logger.info(
                    f"Dispatcher ready: {client.provider}/{client.model}",
                    context={"provider": client.provider, "model": client.model},
                )
            return cls._dispatcher

    @classmethod
    def set_dispatcher(cls, dispatcher: Optional[RouteDispatcher]) -> None:
        """Install an explicitly constructed dispatcher (or clear it)."""
        with cls._lock:
            cls._dispatcher = dispatcher

    @classmethod
    def shutdown(cls) -> None:
        """Close the dispatcher's client and forget it."""
        with cls._lock:
            dispatcher, cls._dispatcher = cls._dispatcher, None
        if dispatcher is not None:
            dispatcher.close()
