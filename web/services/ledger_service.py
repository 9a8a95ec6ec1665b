"""
Ledger 서비스 (액션 경계)

연산마다 하나의 액션을 제공.
- 입력: 일반 dict (Pydantic 요청 모델로 디코딩)
- 출력: {"success": True, "data": ...} 또는 {"success": False, "message", "details"}

비즈니스 규칙 위반(LedgerError), 입력 오류(pydantic.ValidationError),
저장소 오류(aiosqlite.Error)는 모두 여기서 실패 envelope로 변환되며
이 경계를 넘어 예외가 전파되지 않는다.
"""

import logging
from typing import Any, Awaitable, Callable, Mapping, TypeVar

import aiosqlite
from pydantic import BaseModel
from pydantic import ValidationError as InputValidationError

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import DisplaySettings
from core.ledger import (
    UNSET,
    AccountManager,
    JournalEngine,
    LedgerError,
    LineInput,
    PeriodLockManager,
    ReportingEngine,
)
from web.models.requests import (
    AccountCreateRequest,
    AccountIdRequest,
    AccountListRequest,
    AccountUpdateRequest,
    AsOfRequest,
    ClosePeriodRequest,
    DateRangeRequest,
    JournalEntryCreateRequest,
    JournalEntryIdRequest,
    JournalSearchRequest,
    LedgerReportRequest,
)
from web.models.responses import fail, ok

logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT", bound=BaseModel)

Payload = Mapping[str, Any] | None


def _input_errors(error: InputValidationError) -> list[dict[str, Any]]:
    """pydantic 오류를 JSON 직렬화 가능한 형태로 정리"""
    return [
        {
            "loc": [str(part) for part in err["loc"]],
            "msg": err["msg"],
            "type": err["type"],
        }
        for err in error.errors()
    ]


class LedgerService:
    """Ledger 액션 서비스

    Args:
        db: SQLite 어댑터 (연결된 상태)
        display: 표시 설정 (getSettings 응답)

    사용 예시:
    ```python
    service = LedgerService(db)
    result = await service.create_account({"code": "1000", "name": "Cash", "type": "Asset"})
    if result["success"]:
        account_id = result["data"]["id"]
    ```
    """

    # 액션 이름 → 메서드 이름
    ACTIONS: dict[str, str] = {
        "createAccount": "create_account",
        "updateAccount": "update_account",
        "getAccount": "get_account",
        "listAccounts": "list_accounts",
        "deleteAccount": "delete_account",
        "createJournalEntry": "create_journal_entry",
        "deleteJournalEntry": "delete_journal_entry",
        "getJournalEntry": "get_journal_entry",
        "getJournalEntryDetails": "get_journal_entry_details",
        "searchJournalEntries": "search_journal_entries",
        "getPeriodLock": "get_period_lock",
        "closePeriod": "close_period",
        "getTrialBalance": "get_trial_balance",
        "getLedger": "get_ledger",
        "getBalanceSheet": "get_balance_sheet",
        "getProfitLoss": "get_profit_loss",
        "getSettings": "get_settings",
    }

    def __init__(self, db: SQLiteAdapter, display: DisplaySettings | None = None):
        self.db = db
        self.display = display or DisplaySettings()
        self.accounts = AccountManager(db)
        self.period_lock = PeriodLockManager(db)
        self.journal = JournalEngine(db, self.period_lock)
        self.reports = ReportingEngine(db)

    async def dispatch(self, action: str, payload: Payload = None) -> dict[str, Any]:
        """이름으로 액션 실행 (플러그인 호스트 / CLI 용)"""
        method_name = self.ACTIONS.get(action)
        if method_name is None:
            logger.warning(f"알 수 없는 액션: {action}")
            return fail(
                f"Unknown action: {action}",
                {"kind": "ValidationError", "code": "UnknownAction", "action": action},
            )
        handler: Callable[[Payload], Awaitable[dict[str, Any]]] = getattr(self, method_name)
        return await handler(payload)

    async def _run(
        self,
        action: str,
        request_model: type[RequestT] | None,
        payload: Payload,
        handler: Callable[[RequestT], Awaitable[Any]],
    ) -> dict[str, Any]:
        """입력 디코딩 → 핸들러 실행 → envelope 변환"""
        try:
            request = (
                request_model.model_validate(dict(payload or {}))
                if request_model is not None
                else None
            )
            data = await handler(request)  # type: ignore[arg-type]
        except InputValidationError as e:
            errors = _input_errors(e)
            logger.warning(
                f"{action} 입력 오류: {len(errors)}건",
                extra={"action": action, "errors": errors},
            )
            return fail(
                "Invalid input",
                {"kind": "ValidationError", "code": "InvalidInput", "errors": errors},
            )
        except LedgerError as e:
            logger.warning(
                f"{action} 거부: {e.message}",
                extra={"action": action, "error_kind": e.kind, "error_code": e.code},
            )
            return fail(e.message, e.to_details())
        except aiosqlite.Error as e:
            logger.error(
                f"{action} 저장소 오류: {e}",
                exc_info=True,
                extra={"action": action},
            )
            return fail(
                "Storage failure",
                {"kind": "StorageError", "code": type(e).__name__},
            )
        return ok(data)

    # =====================================
    # 계정
    # =====================================

    async def create_account(self, payload: Payload = None) -> dict[str, Any]:
        async def handle(req: AccountCreateRequest) -> dict[str, Any]:
            account = await self.accounts.create(req.code, req.name, req.type, req.parent_id)
            return account.to_dict()

        return await self._run("createAccount", AccountCreateRequest, payload, handle)

    async def update_account(self, payload: Payload = None) -> dict[str, Any]:
        async def handle(req: AccountUpdateRequest) -> dict[str, Any]:
            fields = req.model_fields_set
            account = await self.accounts.update(
                req.id,
                code=req.code if "code" in fields else UNSET,
                name=req.name if "name" in fields else UNSET,
                account_type=req.type if "type" in fields else UNSET,
                parent_id=req.parent_id if "parent_id" in fields else UNSET,
            )
            return account.to_dict()

        return await self._run("updateAccount", AccountUpdateRequest, payload, handle)

    async def get_account(self, payload: Payload = None) -> dict[str, Any]:
        async def handle(req: AccountIdRequest) -> dict[str, Any]:
            return (await self.accounts.get(req.id)).to_dict()

        return await self._run("getAccount", AccountIdRequest, payload, handle)

    async def list_accounts(self, payload: Payload = None) -> dict[str, Any]:
        async def handle(req: AccountListRequest) -> list[dict[str, Any]]:
            accounts = await self.accounts.list(
                code_contains=req.code,
                name_contains=req.name,
                account_type=req.type,
            )
            return [account.to_dict() for account in accounts]

        return await self._run("listAccounts", AccountListRequest, payload, handle)

    async def delete_account(self, payload: Payload = None) -> dict[str, Any]:
        async def handle(req: AccountIdRequest) -> dict[str, Any]:
            deleted_ids = await self.accounts.delete(req.id)
            return {"deleted_ids": deleted_ids}

        return await self._run("deleteAccount", AccountIdRequest, payload, handle)

    # =====================================
    # 분개
    # =====================================

    async def create_journal_entry(self, payload: Payload = None) -> dict[str, Any]:
        async def handle(req: JournalEntryCreateRequest) -> dict[str, Any]:
            lines = [
                LineInput(account_id=line.account_id, debit=line.debit, credit=line.credit)
                for line in req.lines
            ]
            result = await self.journal.create_entry(
                req.date,
                lines,
                description=req.description,
                reference=req.reference,
            )
            return result.to_dict()

        return await self._run("createJournalEntry", JournalEntryCreateRequest, payload, handle)

    async def delete_journal_entry(self, payload: Payload = None) -> dict[str, Any]:
        async def handle(req: JournalEntryIdRequest) -> dict[str, Any]:
            await self.journal.delete_entry(req.id)
            return {"deleted": True}

        return await self._run("deleteJournalEntry", JournalEntryIdRequest, payload, handle)

    async def get_journal_entry(self, payload: Payload = None) -> dict[str, Any]:
        async def handle(req: JournalEntryIdRequest) -> dict[str, Any]:
            return (await self.journal.get_entry(req.id)).to_dict()

        return await self._run("getJournalEntry", JournalEntryIdRequest, payload, handle)

    async def get_journal_entry_details(self, payload: Payload = None) -> dict[str, Any]:
        """getJournalEntry와 동일 (분개 + 라인)"""

        async def handle(req: JournalEntryIdRequest) -> dict[str, Any]:
            return (await self.journal.get_entry(req.id)).to_dict()

        return await self._run("getJournalEntryDetails", JournalEntryIdRequest, payload, handle)

    async def search_journal_entries(self, payload: Payload = None) -> dict[str, Any]:
        async def handle(req: JournalSearchRequest) -> list[dict[str, Any]]:
            entries = await self.journal.search_entries(
                start_date=req.start_date,
                end_date=req.end_date,
                reference=req.reference,
                description=req.description,
            )
            return [entry.to_dict() for entry in entries]

        return await self._run("searchJournalEntries", JournalSearchRequest, payload, handle)

    # =====================================
    # 기간 마감
    # =====================================

    async def get_period_lock(self, payload: Payload = None) -> dict[str, Any]:
        async def handle(_: None) -> dict[str, Any]:
            return {"through_date": await self.period_lock.get_through_date()}

        return await self._run("getPeriodLock", None, payload, handle)

    async def close_period(self, payload: Payload = None) -> dict[str, Any]:
        async def handle(req: ClosePeriodRequest) -> dict[str, Any]:
            lock = await self.period_lock.set_lock(req.through_date)
            return {"locked_through": lock.through_date}

        return await self._run("closePeriod", ClosePeriodRequest, payload, handle)

    # =====================================
    # 보고서
    # =====================================

    async def get_trial_balance(self, payload: Payload = None) -> dict[str, Any]:
        async def handle(req: AsOfRequest) -> dict[str, Any]:
            return (await self.reports.trial_balance(as_of=req.as_of)).to_dict()

        return await self._run("getTrialBalance", AsOfRequest, payload, handle)

    async def get_ledger(self, payload: Payload = None) -> dict[str, Any]:
        async def handle(req: LedgerReportRequest) -> dict[str, Any]:
            report = await self.reports.ledger(
                req.account_id,
                start_date=req.start_date,
                end_date=req.end_date,
                include_running_balance=req.include_running_balance,
            )
            return report.to_dict()

        return await self._run("getLedger", LedgerReportRequest, payload, handle)

    async def get_balance_sheet(self, payload: Payload = None) -> dict[str, Any]:
        async def handle(req: AsOfRequest) -> dict[str, Any]:
            return (await self.reports.balance_sheet(as_of=req.as_of)).to_dict()

        return await self._run("getBalanceSheet", AsOfRequest, payload, handle)

    async def get_profit_loss(self, payload: Payload = None) -> dict[str, Any]:
        async def handle(req: DateRangeRequest) -> dict[str, Any]:
            report = await self.reports.profit_loss(
                start_date=req.start_date,
                end_date=req.end_date,
            )
            return report.to_dict()

        return await self._run("getProfitLoss", DateRangeRequest, payload, handle)

    # =====================================
    # 설정
    # =====================================

    async def get_settings(self, payload: Payload = None) -> dict[str, Any]:
        async def handle(_: None) -> dict[str, str]:
            return self.display.to_dict()

        return await self._run("getSettings", None, payload, handle)
