from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from typing import Annotated

from bolt_proxy.dependencies import get_health_service
from bolt_proxy.services import HealthService

router = APIRouter()

HealthSvc = Annotated[HealthService, Depends(get_health_service)]


@router.get("/health")
async def health_check(
    service: HealthSvc,
):
    result = await service.health_check()
    if result.ok:
        return {"ok": True}
    return JSONResponse(status_code=502, content={"ok": False, "error": result.error})
