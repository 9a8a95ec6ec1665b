"""PeriodLockManager 통합 테스트"""

from decimal import Decimal

import pytest

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.ledger import (
    AccountManager,
    ConflictError,
    JournalEngine,
    LineInput,
    PeriodLockManager,
    ValidationError,
)


class TestPeriodLockManager:
    """기간 마감 상태 전이"""

    @pytest.mark.asyncio
    async def test_initially_unlocked(self, ledger_db: SQLiteAdapter) -> None:
        lock = PeriodLockManager(ledger_db)

        assert await lock.get_lock() is None
        assert await lock.get_through_date() is None
        # 마감 없음 → 모든 날짜 쓰기 가능
        await lock.assert_writable("1900-01-01")

    @pytest.mark.asyncio
    async def test_set_lock(self, ledger_db: SQLiteAdapter) -> None:
        lock = PeriodLockManager(ledger_db)

        result = await lock.set_lock("2024-01-20")

        assert result.through_date == "2024-01-20"
        assert result.updated_at is not None
        assert await lock.get_through_date() == "2024-01-20"
        assert await lock.get_lock() == result

    @pytest.mark.asyncio
    async def test_lock_moves_forward(self, ledger_db: SQLiteAdapter) -> None:
        lock = PeriodLockManager(ledger_db)
        await lock.set_lock("2024-01-20")

        await lock.set_lock("2024-02-29")

        assert await lock.get_through_date() == "2024-02-29"
        rows = await ledger_db.fetchall("SELECT * FROM period_lock")
        assert len(rows) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("new_date", ["2024-01-19", "2024-01-20"])
    async def test_lock_cannot_move_back(self, ledger_db: SQLiteAdapter, new_date: str) -> None:
        """같거나 이전 날짜는 거부 (단조 증가)"""
        lock = PeriodLockManager(ledger_db)
        await lock.set_lock("2024-01-20")

        with pytest.raises(ConflictError) as exc_info:
            await lock.set_lock(new_date)

        assert exc_info.value.code == "LockAlreadyLater"
        assert exc_info.value.details["existing_lock_date"] == "2024-01-20"
        assert await lock.get_through_date() == "2024-01-20"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad_date", ["2024-13-01", "20240120", "yesterday"])
    async def test_invalid_date(self, ledger_db: SQLiteAdapter, bad_date: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await PeriodLockManager(ledger_db).set_lock(bad_date)

        assert exc_info.value.code == "InvalidDate"

    @pytest.mark.asyncio
    async def test_assert_writable_boundary(self, ledger_db: SQLiteAdapter) -> None:
        """마감일 당일은 거부, 다음 날은 허용"""
        lock = PeriodLockManager(ledger_db)
        await lock.set_lock("2024-01-20")

        with pytest.raises(ConflictError) as exc_info:
            await lock.assert_writable("2024-01-20")
        assert exc_info.value.code == "PeriodLocked"
        assert exc_info.value.details == {"date": "2024-01-20", "locked_through": "2024-01-20"}

        await lock.assert_writable("2024-01-21")


class TestLockScenario:
    """마감 후 분개 생성 시나리오"""

    @pytest.mark.asyncio
    async def test_lock_blocks_earlier_entries(self, ledger_db: SQLiteAdapter) -> None:
        accounts = AccountManager(ledger_db)
        cash = await accounts.create("1000", "Cash", "Asset")
        sales = await accounts.create("4000", "Sales", "Income")
        journal = JournalEngine(ledger_db)
        lines = [
            LineInput(account_id=cash.id, debit=Decimal("100")),
            LineInput(account_id=sales.id, credit=Decimal("100")),
        ]

        await PeriodLockManager(ledger_db).set_lock("2024-01-20")

        with pytest.raises(ConflictError) as exc_info:
            await journal.create_entry("2024-01-10", lines)
        assert exc_info.value.code == "PeriodLocked"

        created = await journal.create_entry("2024-01-25", lines)
        assert created.entry.date == "2024-01-25"

        entries = await journal.search_entries()
        assert [e.date for e in entries] == ["2024-01-25"]
