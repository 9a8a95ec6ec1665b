"""
설정 / 액션 라우트

GET  /api/settings           - 표시 설정 (날짜 형식, 통화 기호, 타임존)
POST /api/actions/{action}   - 이름으로 액션 실행 (플러그인 호스트용)
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Path
from fastapi.responses import JSONResponse

from web.dependencies import get_ledger_service, get_ledger_service_write
from web.models.responses import ActionResponse, envelope_response
from web.services.ledger_service import LedgerService

router = APIRouter(prefix="/api", tags=["Settings"])


@router.get("/settings", response_model=ActionResponse)
async def get_settings(
    service: LedgerService = Depends(get_ledger_service),
) -> JSONResponse:
    """표시 설정 조회"""
    return envelope_response(await service.get_settings())


@router.post("/actions/{action}", response_model=ActionResponse)
async def run_action(
    action: str = Path(..., description="액션 이름 (createAccount, getTrialBalance 등)"),
    payload: dict[str, Any] | None = Body(default=None),
    service: LedgerService = Depends(get_ledger_service_write),
) -> JSONResponse:
    """액션 실행

    요청/응답 본문은 envelope 그대로.
    """
    return envelope_response(await service.dispatch(action, payload))
