"""
Detainee search APIs. Every search is written to the search log.
"""
from typing import List
from fastapi import APIRouter, Depends

from auth.dependencies import RequestContext, require_search
from schemas.detainee import AdvancedSearchRequest, DetaineeResponse, SimpleSearchRequest
from services.detainee_service import DetaineeService, SearchCriteria
from routers.detainees import detainee_payload


router = APIRouter(prefix="/api/search", tags=["search"])


@router.post("", response_model=List[DetaineeResponse])
async def search_by_cedula(
    body: SimpleSearchRequest,
    ctx: RequestContext = Depends(require_search)
):
    """Exact lookup by cedula; "12345678" and "V-12345678" are equivalent."""
    results = DetaineeService.search(ctx.db, ctx.user, SearchCriteria(cedula=body.cedula))
    return [detainee_payload(d) for d in results]


@router.post("/advanced", response_model=List[DetaineeResponse])
async def advanced_search(
    body: AdvancedSearchRequest,
    ctx: RequestContext = Depends(require_search)
):
    """
    Search by any combination of cedula, fullName, state, municipality and
    parish. fullName matches a case-insensitive substring; the rest match
    exactly. At least one field is required.
    """
    criteria = SearchCriteria(
        cedula=body.cedula,
        full_name=body.full_name,
        state=body.state,
        municipality=body.municipality,
        parish=body.parish,
    )
    results = DetaineeService.search(ctx.db, ctx.user, criteria, advanced=True)
    return [detainee_payload(d) for d in results]
