from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from typing import Annotated

from bolt_proxy.dependencies import get_diagnostics_service
from bolt_proxy.probes import ProbeResult
from bolt_proxy.services import DiagnosticsService

router = APIRouter(tags=["debug"])

DiagnosticsSvc = Annotated[DiagnosticsService, Depends(get_diagnostics_service)]


def _failure_status(result: ProbeResult) -> int:
    return 504 if result.timed_out else 502


@router.get("/bolt")
async def bolt(service: DiagnosticsSvc):
    result = await service.check_bolt()
    if result.ok:
        return {"connect": True}
    return JSONResponse(
        status_code=_failure_status(result),
        content={"connect": False, "error": result.error},
    )


@router.get("/tls")
async def tls(service: DiagnosticsSvc):
    result = await service.check_tls()
    if result.ok:
        return {"ok": True, "info": result.info}
    return JSONResponse(
        status_code=_failure_status(result),
        content={"ok": False, "error": result.error},
    )


@router.get("/driver")
async def driver(service: DiagnosticsSvc):
    result = await service.check_driver()
    if result.ok:
        return {"ok": True}
    return JSONResponse(status_code=502, content={"ok": False, "error": result.error})
