"""
복식부기 스키마 초기화

Web / 스크립트 시작 시 자동으로 Ledger 테이블과 인덱스 생성.
CREATE IF NOT EXISTS 패턴으로 안전하게 동작.

테이블:
- accounts: 계정과목 (parent_id로 트리 구성)
- journal_entries: 분개 헤더
- journal_lines: 분개 라인 (분개 삭제 시 CASCADE)
- period_lock: 기간 마감일 (단일 행, id = 1)

금액(debit/credit)은 Decimal 문자열(TEXT)로 저장하고
집계는 Python Decimal로 수행 (부동소수점 오차 없음).
"""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)

LEDGER_TABLES: tuple[str, ...] = (
    "accounts",
    "journal_entries",
    "journal_lines",
    "period_lock",
)


async def init_ledger_schema(db: "SQLiteAdapter") -> None:
    """Ledger 스키마 초기화 (테이블 + 인덱스)

    이미 존재하는 경우 안전하게 건너뜀 (IF NOT EXISTS).

    Args:
        db: 연결된 SQLiteAdapter 인스턴스 (쓰기 가능)
    """
    await _create_ledger_tables(db)
    await _create_ledger_indexes(db)
    await db.commit()
    logger.info("Ledger 스키마 초기화 완료")


async def _create_ledger_tables(db: "SQLiteAdapter") -> None:
    """Ledger 테이블 생성"""

    # accounts 테이블
    await db.execute("""
        CREATE TABLE IF NOT EXISTS accounts (
            id               INTEGER PRIMARY KEY AUTOINCREMENT,
            code             TEXT NOT NULL UNIQUE CHECK (length(code) > 0),
            name             TEXT NOT NULL,
            type             TEXT NOT NULL
                             CHECK (type IN ('Asset','Liability','Equity','Income','Expense')),
            parent_id        INTEGER NULL,
            created_at       TEXT NOT NULL DEFAULT (datetime('now')),
            FOREIGN KEY (parent_id) REFERENCES accounts(id) ON DELETE CASCADE
        )
    """)

    # journal_entries 테이블
    await db.execute("""
        CREATE TABLE IF NOT EXISTS journal_entries (
            id               INTEGER PRIMARY KEY AUTOINCREMENT,
            date             TEXT NOT NULL,
            description      TEXT,
            reference        TEXT,
            created_at       TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    # journal_lines 테이블
    await db.execute("""
        CREATE TABLE IF NOT EXISTS journal_lines (
            id               INTEGER PRIMARY KEY AUTOINCREMENT,
            journal_entry_id INTEGER NOT NULL,
            account_id       INTEGER NOT NULL,
            debit            TEXT NOT NULL DEFAULT '0',
            credit           TEXT NOT NULL DEFAULT '0',
            FOREIGN KEY (journal_entry_id) REFERENCES journal_entries(id) ON DELETE CASCADE,
            FOREIGN KEY (account_id) REFERENCES accounts(id) ON DELETE RESTRICT
        )
    """)

    # period_lock 테이블 (단일 행)
    await db.execute("""
        CREATE TABLE IF NOT EXISTS period_lock (
            id               INTEGER PRIMARY KEY CHECK (id = 1),
            through_date     TEXT NOT NULL,
            updated_at       TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    logger.debug("Ledger 테이블 생성 완료")


async def _create_ledger_indexes(db: "SQLiteAdapter") -> None:
    """조회/집계용 인덱스 생성"""
    await db.execute("CREATE INDEX IF NOT EXISTS idx_accounts_parent ON accounts(parent_id)")
    await db.execute("CREATE INDEX IF NOT EXISTS idx_accounts_type ON accounts(type)")
    await db.execute("CREATE INDEX IF NOT EXISTS idx_journal_entries_date ON journal_entries(date)")
    await db.execute("CREATE INDEX IF NOT EXISTS idx_journal_lines_entry ON journal_lines(journal_entry_id)")
    await db.execute("CREATE INDEX IF NOT EXISTS idx_journal_lines_account ON journal_lines(account_id)")
