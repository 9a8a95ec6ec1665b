"""
계정과목 라우트

계정 생성 / 수정 / 조회 / 삭제 API
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Path, Query
from fastapi.responses import JSONResponse

from core.ledger.types import MAX_ROW_ID
from web.dependencies import get_ledger_service, get_ledger_service_write
from web.models.responses import ActionResponse, envelope_response
from web.services.ledger_service import LedgerService

router = APIRouter(prefix="/api/accounts", tags=["Accounts"])


@router.post("", response_model=ActionResponse, status_code=201)
async def create_account(
    payload: dict[str, Any] = Body(..., examples=[{"code": "1000", "name": "Cash", "type": "Asset"}]),
    service: LedgerService = Depends(get_ledger_service_write),
) -> JSONResponse:
    """계정 생성"""
    result = await service.create_account(payload)
    return envelope_response(result, success_status=201)


@router.get("", response_model=ActionResponse)
async def list_accounts(
    code: str | None = Query(default=None, description="코드 부분 일치"),
    name: str | None = Query(default=None, description="이름 부분 일치"),
    type: str | None = Query(default=None, description="계정 유형"),
    service: LedgerService = Depends(get_ledger_service),
) -> JSONResponse:
    """계정 목록 (코드 오름차순)"""
    filters = {"code": code, "name": name, "type": type}
    result = await service.list_accounts(
        {key: value for key, value in filters.items() if value is not None}
    )
    return envelope_response(result)


@router.get("/{account_id}", response_model=ActionResponse)
async def get_account(
    account_id: int = Path(..., ge=1, le=MAX_ROW_ID, description="계정 ID"),
    service: LedgerService = Depends(get_ledger_service),
) -> JSONResponse:
    """계정 조회"""
    result = await service.get_account({"id": account_id})
    return envelope_response(result)


@router.patch("/{account_id}", response_model=ActionResponse)
async def update_account(
    account_id: int = Path(..., ge=1, le=MAX_ROW_ID, description="계정 ID"),
    payload: dict[str, Any] | None = Body(default=None),
    service: LedgerService = Depends(get_ledger_service_write),
) -> JSONResponse:
    """계정 수정

    전달된 필드만 변경. parent_id: null 이면 최상위 계정으로 이동.
    """
    result = await service.update_account({**(payload or {}), "id": account_id})
    return envelope_response(result)


@router.delete("/{account_id}", response_model=ActionResponse)
async def delete_account(
    account_id: int = Path(..., ge=1, le=MAX_ROW_ID, description="계정 ID"),
    service: LedgerService = Depends(get_ledger_service_write),
) -> JSONResponse:
    """계정 삭제 (하위 계정 포함)

    자신 또는 하위 계정에 분개 라인이 있으면 409.
    """
    result = await service.delete_account({"id": account_id})
    return envelope_response(result)
