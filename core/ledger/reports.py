"""
보고서 엔진 (Reporting Engine)

읽기 전용 집계:
- 시산표 (Trial Balance)
- 계정별 원장 (Ledger)
- 재무상태표 (Balance Sheet)
- 손익계산서 (Profit & Loss)

각 보고서는 db.snapshot() 안에서 실행되어 하나의 커밋 상태만 본다.
금액 합계는 SQL SUM(부동소수점)이 아닌 Python Decimal로 계산.
빈 장부에서도 오류 없이 0으로 채워진 보고서를 반환.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Iterable

from adapters.interfaces import ILedgerStorage
from core.ledger.errors import NotFoundError
from core.ledger.journal import parse_entry_date
from core.ledger.models import (
    ZERO,
    Account,
    JournalEntry,
    JournalLine,
    exact_diff,
    exact_sum,
    format_amount,
    to_decimal,
)
from core.ledger.types import BALANCE_SHEET_TYPES, AccountType

logger = logging.getLogger(__name__)


# =========================================================================
# 보고서 구조체
# =========================================================================


@dataclass(frozen=True)
class AccountTotals:
    """계정별 차변/대변 합계"""

    account: Account
    total_debit: Decimal = ZERO
    total_credit: Decimal = ZERO
    line_count: int = 0

    @property
    def net(self) -> Decimal:
        """debit - credit"""
        return exact_diff(self.total_debit, self.total_credit)

    @property
    def has_activity(self) -> bool:
        return self.line_count > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "account_id": self.account.id,
            "code": self.account.code,
            "name": self.account.name,
            "type": self.account.type.value,
            "parent_id": self.account.parent_id,
            "total_debit": format_amount(self.total_debit),
            "total_credit": format_amount(self.total_credit),
            "net": format_amount(self.net),
        }


def _sum_debit(rows: Iterable[AccountTotals]) -> Decimal:
    return exact_sum(row.total_debit for row in rows)


def _sum_credit(rows: Iterable[AccountTotals]) -> Decimal:
    return exact_sum(row.total_credit for row in rows)


@dataclass(frozen=True)
class TrialBalance:
    """시산표"""

    rows: list[AccountTotals] = field(default_factory=list)
    as_of: str | None = None

    @property
    def total_debit(self) -> Decimal:
        return _sum_debit(self.rows)

    @property
    def total_credit(self) -> Decimal:
        return _sum_credit(self.rows)

    @property
    def difference(self) -> Decimal:
        """차변 합계 - 대변 합계 (균형 분개만 있으면 항상 0)"""
        return exact_diff(self.total_debit, self.total_credit)

    def to_dict(self) -> dict[str, Any]:
        return {
            "as_of": self.as_of,
            "rows": [row.to_dict() for row in self.rows],
            "total_debit": format_amount(self.total_debit),
            "total_credit": format_amount(self.total_credit),
            "difference": format_amount(self.difference),
        }


@dataclass(frozen=True)
class LedgerRow:
    """원장 한 줄 (라인 + 분개 헤더)"""

    line: JournalLine
    entry: JournalEntry
    running_balance: Decimal | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "line": self.line.to_dict(),
            "entry": self.entry.to_dict(),
        }
        if self.running_balance is not None:
            result["running_balance"] = format_amount(self.running_balance)
        return result


@dataclass(frozen=True)
class LedgerReport:
    """계정별 원장 (최신순)"""

    account: Account
    rows: list[LedgerRow] = field(default_factory=list)
    start_date: str | None = None
    end_date: str | None = None

    @property
    def total_debit(self) -> Decimal:
        return exact_sum(row.line.debit for row in self.rows)

    @property
    def total_credit(self) -> Decimal:
        return exact_sum(row.line.credit for row in self.rows)

    def to_dict(self) -> dict[str, Any]:
        return {
            "account": self.account.to_dict(),
            "start_date": self.start_date,
            "end_date": self.end_date,
            "rows": [row.to_dict() for row in self.rows],
            "total_debit": format_amount(self.total_debit),
            "total_credit": format_amount(self.total_credit),
            "net": format_amount(exact_diff(self.total_debit, self.total_credit)),
        }


@dataclass(frozen=True)
class ParentSubtotal:
    """부모 계정 아래 직계 자식 계정 합계"""

    parent: Account
    child_ids: list[int]
    total_debit: Decimal = ZERO
    total_credit: Decimal = ZERO

    @property
    def net(self) -> Decimal:
        return exact_diff(self.total_debit, self.total_credit)

    def to_dict(self) -> dict[str, Any]:
        return {
            "parent_id": self.parent.id,
            "code": self.parent.code,
            "name": self.parent.name,
            "child_ids": self.child_ids,
            "total_debit": format_amount(self.total_debit),
            "total_credit": format_amount(self.total_credit),
            "net": format_amount(self.net),
        }


@dataclass(frozen=True)
class ReportGroup:
    """유형별 계정 묶음 (재무상태표 / 손익계산서 공용)

    parent_subtotals는 재무상태표에서만 채운다. 손익계산서는 None.
    """

    type: AccountType
    accounts: list[AccountTotals] = field(default_factory=list)
    parent_subtotals: list[ParentSubtotal] | None = None

    @property
    def total_debit(self) -> Decimal:
        return _sum_debit(self.accounts)

    @property
    def total_credit(self) -> Decimal:
        return _sum_credit(self.accounts)

    @property
    def net(self) -> Decimal:
        return exact_diff(self.total_debit, self.total_credit)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "type": self.type.value,
            "accounts": [row.to_dict() for row in self.accounts],
            "total_debit": format_amount(self.total_debit),
            "total_credit": format_amount(self.total_credit),
            "net": format_amount(self.net),
        }
        if self.parent_subtotals is not None:
            result["parent_subtotals"] = [sub.to_dict() for sub in self.parent_subtotals]
        return result


@dataclass(frozen=True)
class BalanceSheet:
    """재무상태표 (Asset / Liability / Equity)"""

    assets: ReportGroup
    liabilities: ReportGroup
    equity: ReportGroup
    as_of: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "as_of": self.as_of,
            "assets": self.assets.to_dict(),
            "liabilities": self.liabilities.to_dict(),
            "equity": self.equity.to_dict(),
        }


@dataclass(frozen=True)
class ProfitLoss:
    """손익계산서 (Income / Expense)"""

    income: ReportGroup
    expenses: ReportGroup
    start_date: str | None = None
    end_date: str | None = None

    @property
    def total_income(self) -> Decimal:
        """수익은 대변 잔액이 양수"""
        return exact_diff(self.income.total_credit, self.income.total_debit)

    @property
    def total_expenses(self) -> Decimal:
        """비용은 차변 잔액이 양수"""
        return exact_diff(self.expenses.total_debit, self.expenses.total_credit)

    @property
    def net_income(self) -> Decimal:
        return exact_diff(self.total_income, self.total_expenses)

    def to_dict(self) -> dict[str, Any]:
        return {
            "start_date": self.start_date,
            "end_date": self.end_date,
            "income": self.income.to_dict(),
            "expenses": self.expenses.to_dict(),
            "total_income": format_amount(self.total_income),
            "total_expenses": format_amount(self.total_expenses),
            "net_income": format_amount(self.net_income),
        }


# =========================================================================
# 보고서 엔진
# =========================================================================


class ReportingEngine:
    """보고서 엔진

    Args:
        db: Ledger 저장소

    사용 예시:
    ```python
    reports = ReportingEngine(db)
    tb = await reports.trial_balance()
    assert tb.difference == 0
    ```
    """

    def __init__(self, db: ILedgerStorage):
        self.db = db

    # =====================================
    # 시산표
    # =====================================

    async def trial_balance(self, as_of: date | str | None = None) -> TrialBalance:
        """시산표

        모든 계정 (라인이 없는 계정은 0) / 계정 코드 오름차순.

        Args:
            as_of: 이 날짜(포함)까지의 분개만 집계. None이면 전체.
        """
        as_of_str = parse_entry_date(as_of, "as_of") if as_of else None

        async with self.db.snapshot():
            accounts = await self._accounts()
            totals = await self._totals_by_account(end_date=as_of_str)

        rows = [self._account_totals(account, totals) for account in accounts]
        return TrialBalance(rows=rows, as_of=as_of_str)

    # =====================================
    # 계정별 원장
    # =====================================

    async def ledger(
        self,
        account_id: int,
        start_date: date | str | None = None,
        end_date: date | str | None = None,
        include_running_balance: bool = False,
    ) -> LedgerReport:
        """계정별 원장

        정렬: 날짜 내림차순 → 분개 id 내림차순 → 라인 id 내림차순.
        누적 잔액은 조회 범위의 가장 오래된 행부터 debit - credit을 더해
        계산한 뒤, 최신순으로 다시 보여준다. 범위 시작 전 잔액은 포함하지 않음.

        Raises:
            NotFoundError: 계정 없음 (AccountNotFound)
        """
        start = parse_entry_date(start_date, "start_date") if start_date else None
        end = parse_entry_date(end_date, "end_date") if end_date else None

        conditions = ["l.account_id = ?"]
        params: list[Any] = [account_id]
        if start:
            conditions.append("e.date >= ?")
            params.append(start)
        if end:
            conditions.append("e.date <= ?")
            params.append(end)

        async with self.db.snapshot():
            row = await self.db.fetchone(
                "SELECT * FROM accounts WHERE id = ?",
                (account_id,),
            )
            if row is None:
                raise NotFoundError(
                    f"Account with id {account_id} does not exist",
                    code="AccountNotFound",
                    details={"account_id": account_id},
                )
            account = Account.from_row(row)

            rows = await self.db.fetchall(
                f"""
                SELECT
                    l.id AS line_id, l.journal_entry_id, l.account_id, l.debit, l.credit,
                    e.id AS entry_id, e.date, e.description, e.reference, e.created_at
                FROM journal_lines l
                JOIN journal_entries e ON e.id = l.journal_entry_id
                WHERE {" AND ".join(conditions)}
                ORDER BY e.date ASC, e.id ASC, l.id ASC
                """,
                tuple(params),
            )

        # 오래된 순으로 조회한 뒤 누적하고 뒤집는다
        ledger_rows: list[LedgerRow] = []
        balance = ZERO
        for r in rows:
            line = JournalLine(
                id=r["line_id"],
                journal_entry_id=r["journal_entry_id"],
                account_id=r["account_id"],
                debit=to_decimal(r["debit"]),
                credit=to_decimal(r["credit"]),
            )
            entry = JournalEntry(
                id=r["entry_id"],
                date=r["date"],
                description=r["description"],
                reference=r["reference"],
                created_at=r["created_at"],
            )
            running: Decimal | None = None
            if include_running_balance:
                balance = exact_sum((balance, line.net))
                running = balance
            ledger_rows.append(LedgerRow(line=line, entry=entry, running_balance=running))

        ledger_rows.reverse()
        return LedgerReport(
            account=account,
            rows=ledger_rows,
            start_date=start,
            end_date=end,
        )

    # =====================================
    # 재무상태표
    # =====================================

    async def balance_sheet(self, as_of: date | str | None = None) -> BalanceSheet:
        """재무상태표

        Asset / Liability / Equity 별 모든 계정 합계.
        직계 자식 중 하나라도 분개 라인이 있는 부모 계정은 parent_subtotals에 포함.
        """
        as_of_str = parse_entry_date(as_of, "as_of") if as_of else None

        async with self.db.snapshot():
            accounts = await self._accounts()
            totals = await self._totals_by_account(end_date=as_of_str)

        by_id = {account.id: account for account in accounts}
        groups = {
            account_type: self._group(account_type, accounts, totals, by_id, with_subtotals=True)
            for account_type in BALANCE_SHEET_TYPES
        }
        return BalanceSheet(
            assets=groups[AccountType.ASSET],
            liabilities=groups[AccountType.LIABILITY],
            equity=groups[AccountType.EQUITY],
            as_of=as_of_str,
        )

    # =====================================
    # 손익계산서
    # =====================================

    async def profit_loss(
        self,
        start_date: date | str | None = None,
        end_date: date | str | None = None,
    ) -> ProfitLoss:
        """손익계산서

        날짜 범위(양 끝 포함, 각각 생략 가능) 안의 분개만 집계.
        net_income = (수익 credit - debit) - (비용 debit - credit)
        """
        start = parse_entry_date(start_date, "start_date") if start_date else None
        end = parse_entry_date(end_date, "end_date") if end_date else None

        async with self.db.snapshot():
            accounts = await self._accounts()
            totals = await self._totals_by_account(start_date=start, end_date=end)

        by_id = {account.id: account for account in accounts}
        result = ProfitLoss(
            income=self._group(AccountType.INCOME, accounts, totals, by_id),
            expenses=self._group(AccountType.EXPENSE, accounts, totals, by_id),
            start_date=start,
            end_date=end,
        )

        logger.debug(
            f"손익계산서: {start or '-'} ~ {end or '-'} net={format_amount(result.net_income)}",
        )
        return result

    # =====================================
    # 내부 헬퍼
    # =====================================

    async def _accounts(self) -> list[Account]:
        rows = await self.db.fetchall("SELECT * FROM accounts ORDER BY code ASC")
        return [Account.from_row(row) for row in rows]

    async def _totals_by_account(
        self,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> dict[int, tuple[Decimal, Decimal, int]]:
        """계정별 (debit 합계, credit 합계, 라인 수)"""
        conditions: list[str] = []
        params: list[Any] = []
        if start_date:
            conditions.append("e.date >= ?")
            params.append(start_date)
        if end_date:
            conditions.append("e.date <= ?")
            params.append(end_date)

        sql = """
            SELECT l.account_id, l.debit, l.credit
            FROM journal_lines l
            JOIN journal_entries e ON e.id = l.journal_entry_id
        """
        if conditions:
            sql += " WHERE " + " AND ".join(conditions)

        rows = await self.db.fetchall(sql, tuple(params))

        debit: dict[int, Decimal] = defaultdict(lambda: ZERO)
        credit: dict[int, Decimal] = defaultdict(lambda: ZERO)
        count: dict[int, int] = defaultdict(int)
        for row in rows:
            account_id = row["account_id"]
            debit[account_id] = exact_sum((debit[account_id], to_decimal(row["debit"])))
            credit[account_id] = exact_sum((credit[account_id], to_decimal(row["credit"])))
            count[account_id] += 1

        return {
            account_id: (debit[account_id], credit[account_id], count[account_id])
            for account_id in count
        }

    @staticmethod
    def _account_totals(
        account: Account,
        totals: dict[int, tuple[Decimal, Decimal, int]],
    ) -> AccountTotals:
        total_debit, total_credit, line_count = totals.get(account.id, (ZERO, ZERO, 0))
        return AccountTotals(
            account=account,
            total_debit=total_debit,
            total_credit=total_credit,
            line_count=line_count,
        )

    def _group(
        self,
        account_type: AccountType,
        accounts: list[Account],
        totals: dict[int, tuple[Decimal, Decimal, int]],
        by_id: dict[int, Account],
        with_subtotals: bool = False,
    ) -> ReportGroup:
        rows = [
            self._account_totals(account, totals)
            for account in accounts
            if account.type == account_type
        ]
        if not with_subtotals:
            return ReportGroup(type=account_type, accounts=rows)

        children: dict[int, list[AccountTotals]] = defaultdict(list)
        for row in rows:
            if row.account.parent_id is not None:
                children[row.account.parent_id].append(row)

        subtotals: list[ParentSubtotal] = []
        for parent_id, child_rows in children.items():
            if not any(child.has_activity for child in child_rows):
                continue
            subtotals.append(
                ParentSubtotal(
                    parent=by_id[parent_id],
                    child_ids=[child.account.id for child in child_rows],
                    total_debit=_sum_debit(child_rows),
                    total_credit=_sum_credit(child_rows),
                )
            )
        subtotals.sort(key=lambda sub: sub.parent.code)

        return ReportGroup(type=account_type, accounts=rows, parent_subtotals=subtotals)
