
from .query import QueryService
from .health import HealthService
from .diagnostics import DiagnosticsService


__all__ = [
    "QueryService",
    "HealthService",
    "DiagnosticsService",
]
