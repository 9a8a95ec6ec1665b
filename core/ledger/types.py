"""
복식부기 타입 정의

AccountType 등 Ledger 시스템에서 사용하는 Enum / 상수 정의
"""

from enum import Enum


class AccountType(str, Enum):
    """계정 유형

    복식부기의 5대 계정 유형.
    str을 상속하여 JSON 직렬화 가능.
    """

    ASSET = "Asset"  # 자산
    LIABILITY = "Liability"  # 부채
    EQUITY = "Equity"  # 자본
    INCOME = "Income"  # 수익
    EXPENSE = "Expense"  # 비용


class JournalSide(str, Enum):
    """분개 방향 (차변/대변)"""

    DEBIT = "DEBIT"  # 차변 (자산 증가, 비용 증가)
    CREDIT = "CREDIT"  # 대변 (부채/자본/수익 증가)


# 재무상태표 (Balance Sheet) 구성 유형
BALANCE_SHEET_TYPES: tuple[AccountType, ...] = (
    AccountType.ASSET,
    AccountType.LIABILITY,
    AccountType.EQUITY,
)

# 손익계산서 (Profit & Loss) 구성 유형
PROFIT_LOSS_TYPES: tuple[AccountType, ...] = (
    AccountType.INCOME,
    AccountType.EXPENSE,
)

# 분개 최소 라인 수
MIN_JOURNAL_LINES = 2

# SQLite INTEGER PRIMARY KEY 최대값
MAX_ROW_ID = 2**63 - 1


# 초기 계정과목표 (scripts/init_db.py --seed 에서 사용)
STARTER_CHART: list[tuple[str, str, str, str | None]] = [
    # (code, name, type, parent_code)
    ("1000", "Assets", "Asset", None),
    ("1100", "Cash", "Asset", "1000"),
    ("1200", "Accounts Receivable", "Asset", "1000"),
    ("2000", "Liabilities", "Liability", None),
    ("2100", "Accounts Payable", "Liability", "2000"),
    ("3000", "Equity", "Equity", None),
    ("3100", "Owner Capital", "Equity", "3000"),
    ("3200", "Retained Earnings", "Equity", "3000"),
    ("4000", "Income", "Income", None),
    ("4100", "Sales", "Income", "4000"),
    ("5000", "Expenses", "Expense", None),
    ("5100", "Rent", "Expense", "5000"),
    ("5200", "Salaries", "Expense", "5000"),
]
