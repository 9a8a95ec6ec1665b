"""
기간 마감 라우트

GET /api/period-lock - 현재 마감일
PUT /api/period-lock - 기간 마감 (마감일은 앞으로만 이동)
"""

from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from web.dependencies import get_ledger_service, get_ledger_service_write
from web.models.responses import ActionResponse, envelope_response
from web.services.ledger_service import LedgerService

router = APIRouter(prefix="/api/period-lock", tags=["Period Lock"])


@router.get("", response_model=ActionResponse)
async def get_period_lock(
    service: LedgerService = Depends(get_ledger_service),
) -> JSONResponse:
    """현재 마감일 조회 (없으면 null)"""
    return envelope_response(await service.get_period_lock())


@router.put("", response_model=ActionResponse)
async def close_period(
    payload: dict[str, Any] = Body(..., examples=[{"through_date": "2024-01-31"}]),
    service: LedgerService = Depends(get_ledger_service_write),
) -> JSONResponse:
    """기간 마감

    기존 마감일과 같거나 이전 날짜면 409.
    """
    return envelope_response(await service.close_period(payload))
