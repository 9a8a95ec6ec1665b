"""
보고서 라우트

시산표 / 계정별 원장 / 재무상태표 / 손익계산서 API
"""

from typing import Any

from fastapi import APIRouter, Depends, Path, Query
from fastapi.responses import JSONResponse

from core.ledger.types import MAX_ROW_ID
from web.dependencies import get_ledger_service
from web.models.responses import ActionResponse, envelope_response
from web.services.ledger_service import LedgerService

router = APIRouter(prefix="/api/reports", tags=["Reports"])


def _present(**params: Any) -> dict[str, Any]:
    return {key: value for key, value in params.items() if value is not None}


@router.get("/trial-balance", response_model=ActionResponse)
async def get_trial_balance(
    as_of: str | None = Query(default=None, description="기준일 (포함)"),
    service: LedgerService = Depends(get_ledger_service),
) -> JSONResponse:
    """시산표"""
    result = await service.get_trial_balance(_present(as_of=as_of))
    return envelope_response(result)


@router.get("/ledger/{account_id}", response_model=ActionResponse)
async def get_ledger(
    account_id: int = Path(..., ge=1, le=MAX_ROW_ID, description="계정 ID"),
    start_date: str | None = Query(default=None, description="시작일 (포함)"),
    end_date: str | None = Query(default=None, description="종료일 (포함)"),
    running_balance: bool = Query(default=False, description="누적 잔액 포함"),
    service: LedgerService = Depends(get_ledger_service),
) -> JSONResponse:
    """계정별 원장 (최신순)"""
    result = await service.get_ledger(
        _present(
            account_id=account_id,
            start_date=start_date,
            end_date=end_date,
            include_running_balance=running_balance,
        )
    )
    return envelope_response(result)


@router.get("/balance-sheet", response_model=ActionResponse)
async def get_balance_sheet(
    as_of: str | None = Query(default=None, description="기준일 (포함)"),
    service: LedgerService = Depends(get_ledger_service),
) -> JSONResponse:
    """재무상태표"""
    result = await service.get_balance_sheet(_present(as_of=as_of))
    return envelope_response(result)


@router.get("/profit-loss", response_model=ActionResponse)
async def get_profit_loss(
    start_date: str | None = Query(default=None, description="시작일 (포함)"),
    end_date: str | None = Query(default=None, description="종료일 (포함)"),
    service: LedgerService = Depends(get_ledger_service),
) -> JSONResponse:
    """손익계산서"""
    result = await service.get_profit_loss(_present(start_date=start_date, end_date=end_date))
    return envelope_response(result)
