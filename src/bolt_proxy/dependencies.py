from fastapi import Depends, Request

from bolt_proxy.container import Container
from bolt_proxy.services import QueryService, HealthService, DiagnosticsService


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_query_service(
    container: Container = Depends(get_container),
) -> QueryService:
    return container.query


def get_health_service(
    container: Container = Depends(get_container),
) -> HealthService:
    return container.health


def get_diagnostics_service(
    container: Container = Depends(get_container),
) -> DiagnosticsService:
    return container.diagnostics
