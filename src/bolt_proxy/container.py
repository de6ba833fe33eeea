from typing import Optional

from neo4j import AsyncDriver

from bolt_proxy.common.logger import get_logger
from bolt_proxy.common.settings import Settings
from bolt_proxy.driver import DriverFactory, create_driver
from bolt_proxy.services import QueryService, HealthService, DiagnosticsService

logger = get_logger("container")


class Container:
    """Owns the process-wide driver and the services built on it."""

    def __init__(self, settings: Settings, driver_factory: Optional[DriverFactory] = None):
        self.settings = settings
        self.driver: AsyncDriver = (driver_factory or create_driver)(settings)
        self._closed = False

        self.query = QueryService(
            self.driver,
            database=settings.neo4j_database,
            timeout=settings.query_timeout_sec,
        )
        self.health = HealthService(self.driver, timeout=settings.driver_probe_timeout_sec)
        self.diagnostics = DiagnosticsService(settings, self.driver)

    @property
    def closed(self) -> bool:
        return self._closed

    async def aclose(self) -> None:
        """Closes the driver and its pooled connections. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        logger.info("Closing Neo4j driver")
        await self.driver.close()
