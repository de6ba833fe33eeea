from typing import Callable, Optional

from neo4j import Address, AsyncDriver, AsyncGraphDatabase, basic_auth

from bolt_proxy.common.logger import get_logger
from bolt_proxy.common.settings import Settings

logger = get_logger("driver")

DriverFactory = Callable[[Settings], AsyncDriver]


def pinned_resolver(host: str, port: int):
    """Builds a resolver that maps every address to ``host:port``.

    Used when the platform's default resolution picks a path that cannot
    reach the database (for example an IPv6 address on an IPv4-only host).
    """
    def _resolve(_address):
        yield Address((host, port))
    return _resolve


def create_driver(settings: Settings) -> AsyncDriver:
    """Creates the process-wide async driver from settings."""
    resolver: Optional[Callable] = None
    if settings.neo4j_host:
        resolver = pinned_resolver(settings.neo4j_host, settings.bolt_port)
        logger.info(f"Pinning Bolt addresses to {settings.neo4j_host}:{settings.bolt_port}")

    kwargs = {"connection_timeout": settings.connection_timeout_sec}
    if resolver is not None:
        kwargs["resolver"] = resolver

    return AsyncGraphDatabase.driver(
        settings.neo4j_uri,
        auth=basic_auth(settings.neo4j_user, settings.neo4j_password),
        **kwargs,
    )
