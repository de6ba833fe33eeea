from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from typing import Annotated

from bolt_proxy.models.query import QueryRequest, QueryResponse
from bolt_proxy.dependencies import get_query_service
from bolt_proxy.services import QueryService

router = APIRouter()

QuerySvc = Annotated[QueryService, Depends(get_query_service)]


@router.post("/query", response_model=QueryResponse)
async def execute_query(
    payload: QueryRequest,
    service: QuerySvc,
):
    response = await service.execute_query(payload)
    if not response.ok:
        return JSONResponse(status_code=400, content=response.model_dump())
    return response
