"""
분개 엔진 (Journal Engine)

journal_entries / journal_lines 의 유일한 소유자.
분개는 라인과 함께 하나의 단위로 생성/삭제되며 수정 연산은 없다.

생성 검증 순서 (하나의 트랜잭션 안에서):
1. 기간 마감 확인 (PeriodLockManager.assert_writable)
2. 라인 2개 이상
3. 각 라인은 debit / credit 중 정확히 하나만 양수
4. 참조 계정 전부 존재 (누락된 id를 모두 보고)
5. 차변 합계 == 대변 합계 > 0 (정확히 일치, 허용 오차 없음)
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Sequence

from adapters.interfaces import ILedgerStorage
from core.ledger.accounts import chunked, placeholders
from core.ledger.errors import ConflictError, NotFoundError, ValidationError
from core.ledger.models import (
    JournalEntry,
    JournalEntryWithLines,
    JournalLine,
    LineInput,
    exact_sum,
    format_amount,
)
from core.ledger.period_lock import PeriodLockManager
from core.ledger.types import MIN_JOURNAL_LINES
from core.utils.dates import now_utc, parse_iso_date

logger = logging.getLogger(__name__)


def parse_entry_date(value: date | str, field_name: str = "date") -> str:
    """분개 일자 검증 후 'YYYY-MM-DD' 반환

    Raises:
        ValidationError: 날짜 형식 오류 (InvalidDate)
    """
    try:
        return parse_iso_date(value).isoformat()
    except ValueError as e:
        raise ValidationError(
            str(e),
            code="InvalidDate",
            details={field_name: str(value)},
        ) from e


def escape_like(value: str) -> str:
    """LIKE 패턴용 이스케이프 (% _ \\)"""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class JournalEngine:
    """분개 엔진

    Args:
        db: Ledger 저장소
        period_lock: 기간 마감 관리자 (None이면 같은 저장소로 생성)

    사용 예시:
    ```python
    journal = JournalEngine(db)
    result = await journal.create_entry(
        "2024-01-15",
        [
            LineInput(account_id=cash.id, debit=Decimal("100")),
            LineInput(account_id=sales.id, credit=Decimal("100")),
        ],
        description="Cash sale",
    )
    ```
    """

    def __init__(
        self,
        db: ILedgerStorage,
        period_lock: PeriodLockManager | None = None,
    ):
        self.db = db
        self.period_lock = period_lock or PeriodLockManager(db)

    # =====================================
    # 생성
    # =====================================

    async def create_entry(
        self,
        entry_date: date | str,
        lines: Sequence[LineInput],
        description: str | None = None,
        reference: str | None = None,
    ) -> JournalEntryWithLines:
        """분개 생성 (헤더 + 라인, 원자적)

        어느 단계에서든 실패하면 전체 롤백되어 일부만 저장된 분개는 보이지 않음.

        Returns:
            저장된 분개와 라인 (입력 순서)

        Raises:
            ValidationError: InvalidDate / TooFewLines / InvalidLine
            ConflictError: PeriodLocked / AccountsNotFound / Unbalanced
        """
        entry_date = parse_entry_date(entry_date)

        async with self.db.transaction():
            await self.period_lock.assert_writable(entry_date)

            self._validate_lines(lines)

            missing = await self._missing_account_ids([line.account_id for line in lines])
            if missing:
                raise ConflictError(
                    "One or more accounts do not exist",
                    code="AccountsNotFound",
                    details={"missing_account_ids": missing},
                )

            total_debit, total_credit = self._validate_balance(lines)

            entry_id = await self.db.insert(
                """
                INSERT INTO journal_entries (date, description, reference, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (entry_date, description, reference, now_utc().isoformat()),
            )

            for line in lines:
                await self.db.insert(
                    """
                    INSERT INTO journal_lines (journal_entry_id, account_id, debit, credit)
                    VALUES (?, ?, ?, ?)
                    """,
                    (
                        entry_id,
                        line.account_id,
                        format_amount(line.debit),
                        format_amount(line.credit),
                    ),
                )

            result = await self.get_entry(entry_id)

        logger.info(
            f"분개 생성: id={entry_id} date={entry_date} amount={format_amount(total_debit)}",
            extra={
                "entry_id": entry_id,
                "line_count": len(lines),
                "total_debit": format_amount(total_debit),
                "total_credit": format_amount(total_credit),
            },
        )
        return result

    @staticmethod
    def _validate_lines(lines: Sequence[LineInput]) -> None:
        if len(lines) < MIN_JOURNAL_LINES:
            raise ValidationError(
                f"A journal entry needs at least {MIN_JOURNAL_LINES} lines",
                code="TooFewLines",
                details={"line_count": len(lines)},
            )

        invalid = [index for index, line in enumerate(lines) if not line.is_one_sided()]
        if invalid:
            raise ValidationError(
                "Each line must have either a debit or credit amount, but not both",
                code="InvalidLine",
                details={"line_indexes": invalid},
            )

    @staticmethod
    def _validate_balance(lines: Sequence[LineInput]) -> tuple[Decimal, Decimal]:
        total_debit = exact_sum(line.debit for line in lines)
        total_credit = exact_sum(line.credit for line in lines)

        if total_debit != total_credit or total_debit <= 0:
            raise ConflictError(
                "Total debits must equal total credits and be greater than zero",
                code="Unbalanced",
                details={
                    "total_debit": format_amount(total_debit),
                    "total_credit": format_amount(total_credit),
                },
            )
        return total_debit, total_credit

    async def _missing_account_ids(self, account_ids: list[int]) -> list[int]:
        """존재하지 않는 계정 id (입력 순서, 중복 제거)"""
        unique_ids = list(dict.fromkeys(account_ids))
        existing: set[int] = set()
        for chunk in chunked(unique_ids):
            rows = await self.db.fetchall(
                f"SELECT id FROM accounts WHERE id IN ({placeholders(len(chunk))})",
                tuple(chunk),
            )
            existing.update(row["id"] for row in rows)
        return [account_id for account_id in unique_ids if account_id not in existing]

    # =====================================
    # 삭제
    # =====================================

    async def delete_entry(self, entry_id: int) -> JournalEntry:
        """분개 삭제 (라인은 CASCADE로 함께 삭제)

        Returns:
            삭제된 분개 헤더

        Raises:
            NotFoundError: 분개 없음
            ConflictError: 분개 일자가 마감됨 (PeriodLocked)
        """
        async with self.db.transaction():
            entry = await self._fetch_entry(entry_id)
            if entry is None:
                raise self._not_found(entry_id)

            await self.period_lock.assert_writable(entry.date)

            await self.db.execute(
                "DELETE FROM journal_entries WHERE id = ?",
                (entry_id,),
            )

        logger.info(
            f"분개 삭제: id={entry_id} date={entry.date}",
            extra={"entry_id": entry_id},
        )
        return entry

    # =====================================
    # 조회
    # =====================================

    async def get_entry(self, entry_id: int) -> JournalEntryWithLines:
        """분개 단건 조회 (라인은 id 오름차순)

        Raises:
            NotFoundError: 분개 없음
        """
        result = await self._fetch_with_lines(entry_id)
        if result is None:
            raise self._not_found(entry_id)
        return result

    async def search_entries(
        self,
        start_date: date | str | None = None,
        end_date: date | str | None = None,
        reference: str | None = None,
        description: str | None = None,
    ) -> list[JournalEntry]:
        """분개 검색

        - 날짜 범위는 양 끝 포함
        - reference / description은 부분 일치
        - 정렬: 날짜 내림차순, 같은 날짜는 id 내림차순 (최신순)
        """
        conditions: list[str] = []
        params: list[Any] = []

        if start_date:
            conditions.append("date >= ?")
            params.append(parse_entry_date(start_date, "start_date"))

        if end_date:
            conditions.append("date <= ?")
            params.append(parse_entry_date(end_date, "end_date"))

        if reference:
            conditions.append("reference LIKE ? ESCAPE '\\'")
            params.append(f"%{escape_like(reference)}%")

        if description:
            conditions.append("description LIKE ? ESCAPE '\\'")
            params.append(f"%{escape_like(description)}%")

        sql = "SELECT * FROM journal_entries"
        if conditions:
            sql += " WHERE " + " AND ".join(conditions)
        sql += " ORDER BY date DESC, id DESC"

        rows = await self.db.fetchall(sql, tuple(params))
        return [JournalEntry.from_row(row) for row in rows]

    # =====================================
    # 내부 헬퍼
    # =====================================

    async def _fetch_entry(self, entry_id: int) -> JournalEntry | None:
        row = await self.db.fetchone(
            "SELECT * FROM journal_entries WHERE id = ?",
            (entry_id,),
        )
        return JournalEntry.from_row(row) if row else None

    async def _fetch_with_lines(self, entry_id: int) -> JournalEntryWithLines | None:
        entry = await self._fetch_entry(entry_id)
        if entry is None:
            return None

        rows = await self.db.fetchall(
            "SELECT * FROM journal_lines WHERE journal_entry_id = ? ORDER BY id ASC",
            (entry_id,),
        )
        return JournalEntryWithLines(
            entry=entry,
            lines=[JournalLine.from_row(row) for row in rows],
        )

    @staticmethod
    def _not_found(entry_id: int) -> NotFoundError:
        return NotFoundError(
            "Journal entry not found",
            code="NotFound",
            details={"id": entry_id},
        )
