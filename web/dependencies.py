"""
의존성 주입

FastAPI의 Depends를 사용한 의존성 관리.
요청마다 DB 연결을 열고, 그 연결을 LedgerService에 주입한다.
"""

from typing import AsyncGenerator

from fastapi import Depends

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import LedgerSettings, get_settings
from web.services.ledger_service import LedgerService


def get_app_settings() -> LedgerSettings:
    """애플리케이션 설정 반환"""
    return get_settings().ledger


async def get_db(
    settings: LedgerSettings = Depends(get_app_settings),
) -> AsyncGenerator[SQLiteAdapter, None]:
    """DB 세션 반환 (읽기 전용)

    조회 / 보고서 용.
    """
    async with SQLiteAdapter(settings.db_path, readonly=True) as db:
        yield db


async def get_db_write(
    settings: LedgerSettings = Depends(get_app_settings),
) -> AsyncGenerator[SQLiteAdapter, None]:
    """DB 세션 반환 (쓰기 가능)

    계정 / 분개 / 기간 마감 변경 시 사용.
    """
    async with SQLiteAdapter(settings.db_path, readonly=False) as db:
        yield db


def get_ledger_service(
    db: SQLiteAdapter = Depends(get_db),
    settings: LedgerSettings = Depends(get_app_settings),
) -> LedgerService:
    """조회용 LedgerService"""
    return LedgerService(db, display=settings.display)


def get_ledger_service_write(
    db: SQLiteAdapter = Depends(get_db_write),
    settings: LedgerSettings = Depends(get_app_settings),
) -> LedgerService:
    """변경용 LedgerService"""
    return LedgerService(db, display=settings.display)
