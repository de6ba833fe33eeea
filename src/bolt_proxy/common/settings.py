from typing import List, Optional
from urllib.parse import urlsplit

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env into os.environ
load_dotenv()


class Settings(BaseSettings):
    """Proxy configuration settings backed by environment variables."""

    neo4j_uri: str = Field(default="neo4j+s://localhost", validation_alias="NEO4J_URI")
    neo4j_user: str = Field(default="neo4j", validation_alias="NEO4J_USER")
    neo4j_password: str = Field(default="", validation_alias="NEO4J_PASSWORD")
    neo4j_database: str = Field(default="neo4j", validation_alias="NEO4J_DB")
    neo4j_host: Optional[str] = Field(
        default=None,
        validation_alias="NEO4J_HOST",
        description="Explicit host every Bolt address resolves to (e.g. to force IPv4)."
    )
    bolt_port: int = Field(default=7687, validation_alias="BOLT_PORT")

    origin_allow_list: str = Field(
        default="",
        validation_alias="ORIGIN_ALLOW_LIST",
        description="Comma-separated list of origins allowed to call the proxy."
    )

    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=3000, validation_alias="PORT")

    connection_timeout_sec: float = Field(
        default=8.0,
        validation_alias="NEO4J_CONNECTION_TIMEOUT_SEC",
        description="Driver connection timeout, so failures return quickly."
    )
    tcp_probe_timeout_sec: float = Field(default=4.0, validation_alias="TCP_PROBE_TIMEOUT_SEC")
    tls_probe_timeout_sec: float = Field(default=6.0, validation_alias="TLS_PROBE_TIMEOUT_SEC")
    driver_probe_timeout_sec: float = Field(default=10.0, validation_alias="DRIVER_PROBE_TIMEOUT_SEC")
    query_timeout_sec: float = Field(
        default=30.0,
        validation_alias="QUERY_TIMEOUT_SEC",
        description="Upper bound for a single POST /query execution."
    )

    max_body_bytes: int = Field(
        default=2 * 1024 * 1024,  # 2 MB
        validation_alias="MAX_BODY_BYTES",
    )

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_json: bool = Field(default=False, validation_alias="LOG_JSON")

    observability_exporter: str = Field(
        default="none",
        validation_alias="OBSERVABILITY_EXPORTER",
        description="Exporter for metrics: 'none', 'console', 'otlp'."
    )
    otlp_endpoint: Optional[str] = Field(
        default=None,
        validation_alias="OTEL_EXPORTER_OTLP_ENDPOINT",
        description="Endpoint for OTLP exporter (e.g. http://localhost:4317)."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def allowed_origins(self) -> List[str]:
        return [o.strip() for o in self.origin_allow_list.split(",") if o.strip()]

    @property
    def probe_host(self) -> str:
        """Host used by the diagnostic probes and the driver resolver."""
        if self.neo4j_host:
            return self.neo4j_host
        return urlsplit(self.neo4j_uri).hostname or "localhost"
