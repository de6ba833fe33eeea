from neo4j import AsyncDriver

from bolt_proxy.probes import ProbeResult, probe_driver


class HealthService:
    def __init__(self, driver: AsyncDriver, timeout: float = 10.0):
        self.driver = driver
        self.timeout = timeout

    async def health_check(self) -> ProbeResult:
        """Full driver connectivity check used by GET /health."""
        return await probe_driver(self.driver, timeout=self.timeout)
