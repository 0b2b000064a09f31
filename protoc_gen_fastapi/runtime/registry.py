"""
Service implementation registry used by generated route modules.
"""

import logging

logger = logging.getLogger(__name__)


class ServiceNotRegistered(LookupError):
    pass


class ServerRegistry:
    """
    Maps fully-qualified service names ("shop.Order") to the object serving them.

    A service has at most one active implementation: binding a service again
    replaces the previous implementation. Binding is meant to happen once, at
    application start-up. bind() is not synchronized; do not call it
    concurrently for the same service.
    """

    def __init__(self):
        self._servers = {}

    def bind(self, service_name: str, server) -> None:
        previous = self._servers.get(service_name)
        if previous is not None and previous is not server:
            logger.info(f"Replacing implementation of {service_name}: {type(previous).__name__} -> {type(server).__name__}")
        self._servers[service_name] = server

    def lookup(self, service_name: str):
        try:
            return self._servers[service_name]
        except KeyError:
            raise ServiceNotRegistered(f"no implementation registered for service '{service_name}'") from None

    def unbind(self, service_name: str) -> None:
        self._servers.pop(service_name, None)

    def services(self) -> list:
        return sorted(self._servers)

    def __contains__(self, service_name: str) -> bool:
        return service_name in self._servers

    def __len__(self) -> int:
        return len(self._servers)


# Process-wide registry used when a registration function gets no explicit one
default_registry = ServerRegistry()
