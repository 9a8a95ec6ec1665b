"""ReportingEngine 통합 테스트"""

from decimal import Decimal

import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.ledger import (
    Account,
    AccountManager,
    AccountType,
    JournalEngine,
    LineInput,
    NotFoundError,
    ReportingEngine,
    ValidationError,
)


async def _post(
    db: SQLiteAdapter,
    date: str,
    debit: Account,
    credit: Account,
    amount: str,
) -> int:
    created = await JournalEngine(db).create_entry(
        date,
        [
            LineInput(account_id=debit.id, debit=Decimal(amount)),
            LineInput(account_id=credit.id, credit=Decimal(amount)),
        ],
    )
    return created.entry.id


@pytest_asyncio.fixture
async def chart(ledger_db: SQLiteAdapter) -> dict[str, Account]:
    """자산 부모(1000) 아래 Cash / Bank + 부채 / 자본 / 수익 / 비용"""
    accounts = AccountManager(ledger_db)
    assets = await accounts.create("1000", "Assets", "Asset")
    return {
        "assets": assets,
        "cash": await accounts.create("1100", "Cash", "Asset", assets.id),
        "bank": await accounts.create("1200", "Bank", "Asset", assets.id),
        "loan": await accounts.create("2000", "Loan", "Liability"),
        "capital": await accounts.create("3000", "Capital", "Equity"),
        "sales": await accounts.create("4000", "Sales", "Income"),
        "rent": await accounts.create("5000", "Rent", "Expense"),
    }


class TestTrialBalance:
    """시산표"""

    @pytest.mark.asyncio
    async def test_cash_sale(self, ledger_db: SQLiteAdapter) -> None:
        """Cash 차변 100 / Sales 대변 100"""
        accounts = AccountManager(ledger_db)
        cash = await accounts.create("1000", "Cash", "Asset")
        sales = await accounts.create("4000", "Sales", "Income")
        await _post(ledger_db, "2024-01-15", cash, sales, "100")

        tb = await ReportingEngine(ledger_db).trial_balance()

        nets = {row.account.code: row.net for row in tb.rows}
        assert nets == {"1000": Decimal("100"), "4000": Decimal("-100")}
        assert tb.total_debit == tb.total_credit == Decimal("100")
        assert tb.difference == 0

    @pytest.mark.asyncio
    async def test_empty_ledger(self, ledger_db: SQLiteAdapter) -> None:
        tb = await ReportingEngine(ledger_db).trial_balance()

        assert tb.rows == []
        assert tb.difference == 0
        assert tb.to_dict()["total_debit"] == "0"

    @pytest.mark.asyncio
    async def test_inactive_accounts_are_zero(
        self,
        ledger_db: SQLiteAdapter,
        chart: dict[str, Account],
    ) -> None:
        """라인이 없는 계정도 0으로 포함, 코드 순"""
        tb = await ReportingEngine(ledger_db).trial_balance()

        assert [row.account.code for row in tb.rows] == [
            "1000", "1100", "1200", "2000", "3000", "4000", "5000"
        ]
        assert all(row.net == 0 for row in tb.rows)

    @pytest.mark.asyncio
    async def test_as_of(self, ledger_db: SQLiteAdapter, chart: dict[str, Account]) -> None:
        await _post(ledger_db, "2024-01-10", chart["cash"], chart["capital"], "500")
        await _post(ledger_db, "2024-02-10", chart["cash"], chart["sales"], "70")

        reports = ReportingEngine(ledger_db)
        january = await reports.trial_balance(as_of="2024-01-31")
        boundary = await reports.trial_balance(as_of="2024-02-10")

        assert january.as_of == "2024-01-31"
        assert {r.account.code: r.net for r in january.rows}["1100"] == Decimal("500")
        assert {r.account.code: r.net for r in boundary.rows}["1100"] == Decimal("570")
        assert january.difference == boundary.difference == 0

    @pytest.mark.asyncio
    async def test_totals_beyond_default_precision(
        self,
        ledger_db: SQLiteAdapter,
        chart: dict[str, Account],
    ) -> None:
        """28자리를 넘는 합계도 반올림 없이 집계"""
        large = "10000000000000000000000000000"
        await _post(ledger_db, "2024-01-10", chart["cash"], chart["sales"], large)
        await _post(ledger_db, "2024-01-11", chart["cash"], chart["sales"], "0.01")

        tb = await ReportingEngine(ledger_db).trial_balance()

        expected = Decimal("10000000000000000000000000000.01")
        nets = {row.account.code: row.net for row in tb.rows}
        assert nets["1100"] == expected
        assert nets["4000"] == expected.copy_negate()
        assert tb.total_debit == expected
        assert tb.total_credit == expected
        assert tb.difference == 0
        assert tb.to_dict()["total_debit"] == "10000000000000000000000000000.01"

        report = await ReportingEngine(ledger_db).ledger(
            chart["cash"].id,
            include_running_balance=True,
        )
        assert report.rows[0].running_balance == expected

    @pytest.mark.asyncio
    async def test_invalid_as_of(self, ledger_db: SQLiteAdapter) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await ReportingEngine(ledger_db).trial_balance(as_of="31/01/2024")

        assert exc_info.value.code == "InvalidDate"


class TestLedger:
    """계정별 원장"""

    @pytest.mark.asyncio
    async def test_order_and_running_balance(
        self,
        ledger_db: SQLiteAdapter,
        chart: dict[str, Account],
    ) -> None:
        """최신순 정렬, 누적 잔액은 오래된 행부터"""
        first = await _post(ledger_db, "2024-01-10", chart["cash"], chart["capital"], "500")
        second = await _post(ledger_db, "2024-01-20", chart["rent"], chart["cash"], "200")
        third = await _post(ledger_db, "2024-01-20", chart["cash"], chart["sales"], "50")

        report = await ReportingEngine(ledger_db).ledger(
            chart["cash"].id,
            include_running_balance=True,
        )

        assert [row.entry.id for row in report.rows] == [third, second, first]
        assert [row.running_balance for row in report.rows] == [
            Decimal("350"),
            Decimal("300"),
            Decimal("500"),
        ]
        assert report.total_debit == Decimal("550")
        assert report.total_credit == Decimal("200")

    @pytest.mark.asyncio
    async def test_without_running_balance(
        self,
        ledger_db: SQLiteAdapter,
        chart: dict[str, Account],
    ) -> None:
        await _post(ledger_db, "2024-01-10", chart["cash"], chart["capital"], "500")

        report = await ReportingEngine(ledger_db).ledger(chart["cash"].id)

        assert report.rows[0].running_balance is None
        assert "running_balance" not in report.to_dict()["rows"][0]

    @pytest.mark.asyncio
    async def test_date_range(self, ledger_db: SQLiteAdapter, chart: dict[str, Account]) -> None:
        """범위 밖 행 제외, 누적 잔액은 범위 시작부터"""
        await _post(ledger_db, "2024-01-10", chart["cash"], chart["capital"], "500")
        inside = await _post(ledger_db, "2024-02-05", chart["cash"], chart["sales"], "30")
        await _post(ledger_db, "2024-03-01", chart["cash"], chart["sales"], "40")

        report = await ReportingEngine(ledger_db).ledger(
            chart["cash"].id,
            start_date="2024-02-01",
            end_date="2024-02-29",
            include_running_balance=True,
        )

        assert [row.entry.id for row in report.rows] == [inside]
        assert report.rows[0].running_balance == Decimal("30")
        assert report.start_date == "2024-02-01"

    @pytest.mark.asyncio
    async def test_account_not_found(self, ledger_db: SQLiteAdapter) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            await ReportingEngine(ledger_db).ledger(404)

        assert exc_info.value.code == "AccountNotFound"
        assert exc_info.value.details == {"account_id": 404}

    @pytest.mark.asyncio
    async def test_account_without_lines(
        self,
        ledger_db: SQLiteAdapter,
        chart: dict[str, Account],
    ) -> None:
        report = await ReportingEngine(ledger_db).ledger(chart["loan"].id)

        assert report.rows == []
        assert report.account == chart["loan"]


class TestBalanceSheet:
    """재무상태표"""

    @pytest.mark.asyncio
    async def test_groups_and_parent_subtotals(
        self,
        ledger_db: SQLiteAdapter,
        chart: dict[str, Account],
    ) -> None:
        await _post(ledger_db, "2024-01-10", chart["cash"], chart["capital"], "500")
        await _post(ledger_db, "2024-01-11", chart["bank"], chart["loan"], "300")

        sheet = await ReportingEngine(ledger_db).balance_sheet()

        assert sheet.assets.type is AccountType.ASSET
        assert [row.account.code for row in sheet.assets.accounts] == ["1000", "1100", "1200"]
        assert sheet.assets.net == Decimal("800")
        assert sheet.liabilities.net == Decimal("-300")
        assert sheet.equity.net == Decimal("-500")

        assert len(sheet.assets.parent_subtotals) == 1
        subtotal = sheet.assets.parent_subtotals[0]
        assert subtotal.parent == chart["assets"]
        assert subtotal.child_ids == [chart["cash"].id, chart["bank"].id]
        assert subtotal.net == Decimal("800")
        assert sheet.liabilities.parent_subtotals == []

    @pytest.mark.asyncio
    async def test_no_subtotal_without_activity(
        self,
        ledger_db: SQLiteAdapter,
        chart: dict[str, Account],
    ) -> None:
        """자식 계정에 라인이 없으면 부모 소계 없음"""
        sheet = await ReportingEngine(ledger_db).balance_sheet()

        assert sheet.assets.parent_subtotals == []
        assert sheet.assets.net == 0

    @pytest.mark.asyncio
    async def test_excludes_income_statement_accounts(
        self,
        ledger_db: SQLiteAdapter,
        chart: dict[str, Account],
    ) -> None:
        sheet = await ReportingEngine(ledger_db).balance_sheet()

        codes = [
            row.account.code
            for group in (sheet.assets, sheet.liabilities, sheet.equity)
            for row in group.accounts
        ]
        assert "4000" not in codes
        assert "5000" not in codes

    @pytest.mark.asyncio
    async def test_as_of(self, ledger_db: SQLiteAdapter, chart: dict[str, Account]) -> None:
        await _post(ledger_db, "2024-01-10", chart["cash"], chart["capital"], "500")
        await _post(ledger_db, "2024-03-10", chart["cash"], chart["capital"], "100")

        sheet = await ReportingEngine(ledger_db).balance_sheet(as_of="2024-01-31")

        assert sheet.assets.net == Decimal("500")
        assert sheet.to_dict()["as_of"] == "2024-01-31"


class TestProfitLoss:
    """손익계산서"""

    @pytest.mark.asyncio
    async def test_net_income(self, ledger_db: SQLiteAdapter, chart: dict[str, Account]) -> None:
        await _post(ledger_db, "2024-01-15", chart["cash"], chart["sales"], "1000")
        await _post(ledger_db, "2024-01-20", chart["rent"], chart["cash"], "400")

        pl = await ReportingEngine(ledger_db).profit_loss()

        assert pl.total_income == Decimal("1000")
        assert pl.total_expenses == Decimal("400")
        assert pl.net_income == Decimal("600")
        assert pl.to_dict()["net_income"] == "600"

    @pytest.mark.asyncio
    async def test_date_range(self, ledger_db: SQLiteAdapter, chart: dict[str, Account]) -> None:
        await _post(ledger_db, "2023-12-31", chart["cash"], chart["sales"], "999")
        await _post(ledger_db, "2024-01-01", chart["cash"], chart["sales"], "100")
        await _post(ledger_db, "2024-01-31", chart["rent"], chart["cash"], "30")
        await _post(ledger_db, "2024-02-01", chart["rent"], chart["cash"], "999")

        pl = await ReportingEngine(ledger_db).profit_loss(
            start_date="2024-01-01",
            end_date="2024-01-31",
        )

        assert pl.total_income == Decimal("100")
        assert pl.total_expenses == Decimal("30")
        assert pl.net_income == Decimal("70")

    @pytest.mark.asyncio
    async def test_no_parent_subtotals(
        self,
        ledger_db: SQLiteAdapter,
        chart: dict[str, Account],
    ) -> None:
        """부모 소계는 재무상태표에만 있음"""
        accounts = AccountManager(ledger_db)
        revenue = await accounts.create("4100", "Revenue", "Income")
        services = await accounts.create("4110", "Services", "Income", revenue.id)
        await _post(ledger_db, "2024-01-10", chart["cash"], services, "120")

        engine = ReportingEngine(ledger_db)
        pl = await engine.profit_loss()
        sheet = await engine.balance_sheet()

        assert pl.income.parent_subtotals is None
        assert pl.expenses.parent_subtotals is None
        assert "parent_subtotals" not in pl.to_dict()["income"]
        assert pl.total_income == Decimal("120")
        assert len(sheet.to_dict()["assets"]["parent_subtotals"]) == 1

    @pytest.mark.asyncio
    async def test_loss(self, ledger_db: SQLiteAdapter, chart: dict[str, Account]) -> None:
        await _post(ledger_db, "2024-01-20", chart["rent"], chart["cash"], "250.50")

        pl = await ReportingEngine(ledger_db).profit_loss()

        assert pl.net_income == Decimal("-250.50")

    @pytest.mark.asyncio
    async def test_empty_ledger(self, ledger_db: SQLiteAdapter) -> None:
        pl = await ReportingEngine(ledger_db).profit_loss()

        assert pl.income.accounts == []
        assert pl.net_income == 0
