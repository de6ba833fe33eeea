from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .common.errors import ErrorCode
from .common.logger import configure_logging, get_logger
from .common.metrics import configure_metrics
from .common.settings import Settings
from .container import Container
from .driver import DriverFactory
from .middleware import BodySizeLimitMiddleware, OriginGuardMiddleware, RequestContextMiddleware
from .models.query import QueryResponse
from .routes import debug, health, query

logger = get_logger("bolt_proxy")


def create_app(
    settings: Optional[Settings] = None,
    driver_factory: Optional[DriverFactory] = None,
) -> FastAPI:
    settings = settings or Settings()
    configure_logging(level=settings.log_level, json_format=settings.log_json)
    configure_metrics(settings.observability_exporter, settings.otlp_endpoint)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not settings.neo4j_password:
            # Not fatal: queries fail at first use instead.
            logger.warning("Missing NEO4J_PASSWORD env var")

        container = Container(settings, driver_factory=driver_factory)
        app.state.container = container
        logger.info(
            f"Neo4j Bolt proxy ready: URI={settings.neo4j_uri} "
            f"DB={settings.neo4j_database} HOST={settings.probe_host}"
        )
        try:
            yield
        finally:
            await container.aclose()

    app = FastAPI(
        title="Neo4j Bolt Proxy",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.include_router(health.router)
    app.include_router(query.router)
    app.include_router(debug.router, prefix="/debug")

    @app.exception_handler(RequestValidationError)
    async def invalid_request(request: Request, exc: RequestValidationError):
        logger.info(f"Rejected invalid request body: {exc.errors()}")
        envelope = QueryResponse.failure(ErrorCode.INVALID_REQUEST.value, "Request body must be a JSON object.")
        return JSONResponse(status_code=400, content=envelope.model_dump())

    # Starlette wraps in reverse order: the last one added runs first.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_body_bytes)
    app.add_middleware(OriginGuardMiddleware, allowed_origins=settings.allowed_origins)
    app.add_middleware(RequestContextMiddleware)

    return app

