"""
복식부기 (Double-Entry Bookkeeping) 코어

계정과목 트리, 분개, 기간 마감, 보고서를 관리.
모든 컴포넌트는 생성 시 저장소(ILedgerStorage)를 주입받는다.

사용 예시:
```python
from core.ledger import AccountManager, JournalEngine, LineInput, ReportingEngine

accounts = AccountManager(db)
cash = await accounts.create("1000", "Cash", "Asset")
sales = await accounts.create("4000", "Sales", "Income")

journal = JournalEngine(db)
await journal.create_entry(
    "2024-01-15",
    [
        LineInput(account_id=cash.id, debit=Decimal("100")),
        LineInput(account_id=sales.id, credit=Decimal("100")),
    ],
)

tb = await ReportingEngine(db).trial_balance()
```
"""

from core.ledger.accounts import UNSET, AccountManager
from core.ledger.errors import (
    ConflictError,
    LedgerError,
    NotFoundError,
    ReferentialBlockError,
    ValidationError,
)
from core.ledger.journal import JournalEngine
from core.ledger.models import (
    Account,
    JournalEntry,
    JournalEntryWithLines,
    JournalLine,
    LineInput,
    PeriodLock,
)
from core.ledger.period_lock import PeriodLockManager
from core.ledger.reports import (
    AccountTotals,
    BalanceSheet,
    LedgerReport,
    ProfitLoss,
    ReportingEngine,
    TrialBalance,
)
from core.ledger.schema import init_ledger_schema
from core.ledger.types import STARTER_CHART, AccountType, JournalSide

__all__ = [
    # 핵심 클래스
    "AccountManager",
    "JournalEngine",
    "PeriodLockManager",
    "ReportingEngine",
    "init_ledger_schema",
    # 모델
    "Account",
    "JournalEntry",
    "JournalEntryWithLines",
    "JournalLine",
    "LineInput",
    "PeriodLock",
    "AccountTotals",
    "TrialBalance",
    "LedgerReport",
    "BalanceSheet",
    "ProfitLoss",
    # 예외
    "LedgerError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "ReferentialBlockError",
    # Enum / 상수
    "AccountType",
    "JournalSide",
    "STARTER_CHART",
    "UNSET",
]
