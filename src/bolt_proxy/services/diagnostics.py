from neo4j import AsyncDriver

from bolt_proxy.common.settings import Settings
from bolt_proxy.probes import ProbeResult, probe_driver, probe_tcp, probe_tls


class DiagnosticsService:
    """Layered connectivity checks against the configured Bolt host."""

    def __init__(self, settings: Settings, driver: AsyncDriver):
        self.settings = settings
        self.driver = driver

    @property
    def host(self) -> str:
        return self.settings.probe_host

    @property
    def port(self) -> int:
        return self.settings.bolt_port

    async def check_bolt(self) -> ProbeResult:
        return await probe_tcp(self.host, self.port, timeout=self.settings.tcp_probe_timeout_sec)

    async def check_tls(self) -> ProbeResult:
        return await probe_tls(self.host, self.port, timeout=self.settings.tls_probe_timeout_sec)

    async def check_driver(self) -> ProbeResult:
        return await probe_driver(self.driver, timeout=self.settings.driver_probe_timeout_sec)
