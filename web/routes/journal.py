"""
분개 라우트

분개 생성 / 삭제 / 조회 / 검색 API
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Path, Query
from fastapi.responses import JSONResponse

from core.ledger.types import MAX_ROW_ID
from web.dependencies import get_ledger_service, get_ledger_service_write
from web.models.responses import ActionResponse, envelope_response
from web.services.ledger_service import LedgerService

router = APIRouter(prefix="/api/journal-entries", tags=["Journal"])


@router.post("", response_model=ActionResponse, status_code=201)
async def create_journal_entry(
    payload: dict[str, Any] = Body(...),
    service: LedgerService = Depends(get_ledger_service_write),
) -> JSONResponse:
    """분개 생성

    차변 합계 == 대변 합계 > 0, 라인 2개 이상.
    마감된 날짜면 409.
    """
    result = await service.create_journal_entry(payload)
    return envelope_response(result, success_status=201)


@router.get("", response_model=ActionResponse)
async def search_journal_entries(
    start_date: str | None = Query(default=None, description="시작일 (포함)"),
    end_date: str | None = Query(default=None, description="종료일 (포함)"),
    reference: str | None = Query(default=None, description="참조 번호 부분 일치"),
    description: str | None = Query(default=None, description="적요 부분 일치"),
    service: LedgerService = Depends(get_ledger_service),
) -> JSONResponse:
    """분개 검색 (최신순)"""
    filters = {
        "start_date": start_date,
        "end_date": end_date,
        "reference": reference,
        "description": description,
    }
    result = await service.search_journal_entries(
        {key: value for key, value in filters.items() if value is not None}
    )
    return envelope_response(result)


@router.get("/{entry_id}", response_model=ActionResponse)
async def get_journal_entry(
    entry_id: int = Path(..., ge=1, le=MAX_ROW_ID, description="분개 ID"),
    service: LedgerService = Depends(get_ledger_service),
) -> JSONResponse:
    """분개 조회 (라인 포함)"""
    result = await service.get_journal_entry({"id": entry_id})
    return envelope_response(result)


@router.get("/{entry_id}/details", response_model=ActionResponse)
async def get_journal_entry_details(
    entry_id: int = Path(..., ge=1, le=MAX_ROW_ID, description="분개 ID"),
    service: LedgerService = Depends(get_ledger_service),
) -> JSONResponse:
    """분개 상세 조회"""
    result = await service.get_journal_entry_details({"id": entry_id})
    return envelope_response(result)


@router.delete("/{entry_id}", response_model=ActionResponse)
async def delete_journal_entry(
    entry_id: int = Path(..., ge=1, le=MAX_ROW_ID, description="분개 ID"),
    service: LedgerService = Depends(get_ledger_service_write),
) -> JSONResponse:
    """분개 삭제 (마감된 날짜면 409)"""
    result = await service.delete_journal_entry({"id": entry_id})
    return envelope_response(result)
