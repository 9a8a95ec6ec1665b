"""
기간 마감 관리 (Period Lock Manager)

단일 마감일(through_date)을 관리.
- 초기 상태: 마감 없음 (제한 없음)
- 마감일은 단조 증가: 더 이른 날짜(또는 같은 날짜)로 되돌릴 수 없음
- 마감일 이하 날짜의 분개 생성/삭제는 모두 거부

상태 전이:
- UNLOCKED → LOCKED(d): set_lock(d)
- LOCKED(d1) → LOCKED(d2): d2 > d1 인 경우만
- 자동 해제 없음
"""

import logging
from datetime import date

from adapters.interfaces import ILedgerStorage
from core.ledger.errors import ConflictError, ValidationError
from core.ledger.models import PeriodLock
from core.utils.dates import now_utc, parse_iso_date

logger = logging.getLogger(__name__)


class PeriodLockManager:
    """기간 마감 관리자

    Args:
        db: Ledger 저장소
    """

    def __init__(self, db: ILedgerStorage):
        self.db = db

    async def get_lock(self) -> PeriodLock | None:
        """현재 마감 정보 (없으면 None)"""
        row = await self.db.fetchone(
            "SELECT through_date, updated_at FROM period_lock WHERE id = 1"
        )
        return PeriodLock.from_row(row) if row else None

    async def get_through_date(self) -> str | None:
        """현재 마감일 'YYYY-MM-DD' (없으면 None)"""
        lock = await self.get_lock()
        return lock.through_date if lock else None

    async def set_lock(self, through_date: date | str) -> PeriodLock:
        """기간 마감 (마감일 설정)

        Args:
            through_date: 이 날짜까지(포함) 분개 변경 금지

        Raises:
            ValidationError: 날짜 형식 오류 (InvalidDate)
            ConflictError: 기존 마감일이 같거나 이후 (LockAlreadyLater)
        """
        new_date = _parse_lock_date(through_date)

        async with self.db.transaction():
            current = await self.get_through_date()
            if current is not None and current >= new_date:
                raise ConflictError(
                    "Period already locked through this date or later",
                    code="LockAlreadyLater",
                    details={"existing_lock_date": current, "through_date": new_date},
                )

            lock = PeriodLock(through_date=new_date, updated_at=now_utc().isoformat())
            await self.db.execute(
                """
                INSERT INTO period_lock (id, through_date, updated_at)
                VALUES (1, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    through_date = excluded.through_date,
                    updated_at = excluded.updated_at
                """,
                (lock.through_date, lock.updated_at),
            )

        logger.info(
            f"기간 마감: {new_date}까지",
            extra={"previous": current, "through_date": new_date},
        )
        return lock

    async def assert_writable(self, entry_date: date | str) -> None:
        """분개 일자가 마감되지 않았는지 확인

        마감 없음 또는 entry_date > 마감일 이면 통과.

        Raises:
            ConflictError: 마감된 기간 (PeriodLocked)
        """
        target = _parse_lock_date(entry_date)
        current = await self.get_through_date()
        if current is None:
            return

        # ISO 날짜 문자열은 사전순 = 날짜순
        if target <= current:
            raise ConflictError(
                f"Write operations are locked through {current}",
                code="PeriodLocked",
                details={"date": target, "locked_through": current},
            )


def _parse_lock_date(value: date | str) -> str:
    try:
        return parse_iso_date(value).isoformat()
    except ValueError as e:
        raise ValidationError(
            str(e),
            code="InvalidDate",
            details={"date": str(value)},
        ) from e
