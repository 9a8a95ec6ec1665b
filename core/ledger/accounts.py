"""
계정과목 관리 (Account Hierarchy Manager)

accounts 테이블의 유일한 소유자.
- 코드 중복 방지
- parent_id 트리(forest) 유지: 어떤 계정도 자기 자신의 조상이 될 수 없음
- 하위 계정 집합 계산 (BFS)
- 분개 라인이 없는 경우에만 하위 계정까지 한 번에 삭제
"""

from __future__ import annotations

import logging
from typing import Any, Iterator, Sequence

from adapters.interfaces import ILedgerStorage
from core.ledger.errors import (
    ConflictError,
    NotFoundError,
    ReferentialBlockError,
    ValidationError,
)
from core.ledger.models import Account
from core.ledger.types import AccountType
from core.utils.dates import now_utc

logger = logging.getLogger(__name__)

# IN (...) 절 하나에 넣을 최대 파라미터 수 (SQLite 기본 한도 999 이하)
IN_CLAUSE_CHUNK = 500


class _Unset:
    """update()에서 '변경 안 함'과 'None으로 변경'을 구분하기 위한 표식"""

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


def chunked(ids: Sequence[int], size: int = IN_CLAUSE_CHUNK) -> Iterator[list[int]]:
    """id 목록을 IN 절 크기로 분할"""
    for start in range(0, len(ids), size):
        yield list(ids[start:start + size])


def placeholders(count: int) -> str:
    """IN 절 플레이스홀더 문자열 (?, ?, ?)"""
    return ", ".join("?" for _ in range(count))


def parse_account_type(value: AccountType | str) -> AccountType:
    """계정 유형 파싱

    Raises:
        ValidationError: 5대 유형이 아닌 값
    """
    try:
        return AccountType(value)
    except ValueError as e:
        valid_types = [t.value for t in AccountType]
        raise ValidationError(
            f"Invalid account type: {value!r}",
            code="InvalidType",
            details={"type": str(value), "valid_types": valid_types},
        ) from e


class AccountManager:
    """계정과목 관리자

    Args:
        db: Ledger 저장소 (SQLiteAdapter)

    사용 예시:
    ```python
    accounts = AccountManager(db)
    cash = await accounts.create("1000", "Cash", AccountType.ASSET)
    deleted_ids = await accounts.delete(cash.id)
    ```
    """

    def __init__(self, db: ILedgerStorage):
        self.db = db

    # =====================================
    # 생성 / 수정
    # =====================================

    async def create(
        self,
        code: str,
        name: str,
        account_type: AccountType | str,
        parent_id: int | None = None,
    ) -> Account:
        """계정 생성

        새 id는 아직 누구의 조상도 아니므로 순환 검사는 필요 없음.

        Raises:
            ValidationError: 빈 코드 / 잘못된 유형
            NotFoundError: parent_id가 존재하지 않음 (ParentNotFound)
            ConflictError: 코드 중복 (DuplicateCode)
        """
        self._require_code(code)
        account_type = parse_account_type(account_type)

        async with self.db.transaction():
            if parent_id is not None and not await self.exists(parent_id):
                raise NotFoundError(
                    f"Parent account with id {parent_id} does not exist",
                    code="ParentNotFound",
                    details={"parent_id": parent_id},
                )

            if await self._id_by_code(code) is not None:
                raise ConflictError(
                    f"Account with code {code} already exists",
                    code="DuplicateCode",
                    details={"account_code": code},
                )

            account_id = await self.db.insert(
                """
                INSERT INTO accounts (code, name, type, parent_id, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (code, name, account_type.value, parent_id, now_utc().isoformat()),
            )
            account = await self.get(account_id)

        logger.info(
            f"계정 생성: {code} {name}",
            extra={"account_id": account_id, "type": account_type.value},
        )
        return account

    async def update(
        self,
        account_id: int,
        *,
        code: str = UNSET,
        name: str = UNSET,
        account_type: AccountType | str = UNSET,
        parent_id: int | None = UNSET,
    ) -> Account:
        """계정 수정

        전달된 필드만 변경. parent_id=None은 최상위 계정으로 이동.

        Raises:
            ValidationError: 변경 사항 없음 (NoChanges) / 빈 코드 / 잘못된 유형
            NotFoundError: 계정 없음 (NotFound) / 부모 없음 (ParentNotFound)
            ConflictError: DuplicateCode / SelfParent / CyclicParent
        """
        changes: dict[str, Any] = {}
        if code is not UNSET:
            self._require_code(code)
            changes["code"] = code
        if name is not UNSET:
            changes["name"] = name
        if account_type is not UNSET:
            changes["type"] = parse_account_type(account_type).value
        if parent_id is not UNSET:
            changes["parent_id"] = parent_id

        if not changes:
            raise ValidationError(
                "No updates provided",
                code="NoChanges",
                details={"id": account_id},
            )

        async with self.db.transaction():
            if not await self.exists(account_id):
                raise self._not_found(account_id)

            if "code" in changes:
                row = await self.db.fetchone(
                    "SELECT id FROM accounts WHERE code = ? AND id != ?",
                    (changes["code"], account_id),
                )
                if row is not None:
                    raise ConflictError(
                        f"Account with code {changes['code']} already exists",
                        code="DuplicateCode",
                        details={"account_code": changes["code"]},
                    )

            new_parent = changes.get("parent_id")
            if new_parent is not None:
                await self._check_parent(account_id, new_parent)

            assignments = ", ".join(f"{column} = ?" for column in changes)
            await self.db.execute(
                f"UPDATE accounts SET {assignments} WHERE id = ?",
                (*changes.values(), account_id),
            )
            account = await self.get(account_id)

        logger.info(
            f"계정 수정: id={account_id}",
            extra={"account_id": account_id, "fields": sorted(changes)},
        )
        return account

    async def _check_parent(self, account_id: int, parent_id: int) -> None:
        """새 부모 지정이 트리 구조를 깨지 않는지 검사"""
        if parent_id == account_id:
            raise ConflictError(
                "An account cannot be its own parent",
                code="SelfParent",
                details={"id": account_id, "parent_id": parent_id},
            )

        if not await self.exists(parent_id):
            raise NotFoundError(
                f"Parent account with id {parent_id} does not exist",
                code="ParentNotFound",
                details={"parent_id": parent_id},
            )

        # 자신의 하위 계정을 부모로 지정하면 순환이 생김
        descendants = await self.descendant_ids(account_id)
        if parent_id in descendants:
            raise ConflictError(
                f"Account {parent_id} is a descendant of account {account_id}",
                code="CyclicParent",
                details={"id": account_id, "parent_id": parent_id},
            )

    # =====================================
    # 조회
    # =====================================

    async def get(self, account_id: int) -> Account:
        """계정 단건 조회

        Raises:
            NotFoundError: 계정 없음
        """
        account = await self._fetch(account_id)
        if account is None:
            raise self._not_found(account_id)
        return account

    async def exists(self, account_id: int) -> bool:
        """계정 존재 여부"""
        row = await self.db.fetchone(
            "SELECT 1 FROM accounts WHERE id = ?",
            (account_id,),
        )
        return row is not None

    async def list(
        self,
        code_contains: str | None = None,
        name_contains: str | None = None,
        account_type: AccountType | str | None = None,
    ) -> list[Account]:
        """계정 목록 조회 (코드 오름차순)

        code / name은 대소문자를 구분하는 부분 일치 (LIKE는 대소문자 무시이므로 instr 사용).
        type은 완전 일치. None인 필터는 조건 없음.
        """
        sql = "SELECT * FROM accounts WHERE 1 = 1"
        params: list[Any] = []

        if code_contains:
            sql += " AND instr(code, ?) > 0"
            params.append(code_contains)

        if name_contains:
            sql += " AND instr(name, ?) > 0"
            params.append(name_contains)

        if account_type:
            sql += " AND type = ?"
            params.append(parse_account_type(account_type).value)

        sql += " ORDER BY code ASC"

        rows = await self.db.fetchall(sql, tuple(params))
        return [Account.from_row(row) for row in rows]

    async def descendant_ids(self, account_id: int) -> list[int]:
        """하위 계정 id 전체 (BFS 순서, 자기 자신 제외)

        parent_id 관계를 너비 우선으로 따라 내려가며 수집.
        """
        descendants: list[int] = []
        seen: set[int] = {account_id}
        frontier: list[int] = [account_id]

        while frontier:
            next_frontier: list[int] = []
            for chunk in chunked(frontier):
                rows = await self.db.fetchall(
                    f"SELECT id FROM accounts WHERE parent_id IN ({placeholders(len(chunk))}) "
                    "ORDER BY id",
                    tuple(chunk),
                )
                for row in rows:
                    child_id = row["id"]
                    if child_id in seen:
                        continue
                    seen.add(child_id)
                    descendants.append(child_id)
                    next_frontier.append(child_id)
            frontier = next_frontier

        return descendants

    # =====================================
    # 삭제
    # =====================================

    async def delete(self, account_id: int) -> list[int]:
        """계정과 모든 하위 계정 삭제

        자신 또는 하위 계정 중 하나라도 분개 라인에서 참조되면 거부.
        삭제는 하나의 트랜잭션으로 수행.

        Returns:
            삭제된 id 목록 ({account_id} ∪ 하위 계정)

        Raises:
            NotFoundError: 계정 없음
            ReferentialBlockError: 분개 라인이 존재 (HasJournalLines)
        """
        async with self.db.transaction():
            if not await self.exists(account_id):
                raise self._not_found(account_id)

            all_ids = [account_id, *await self.descendant_ids(account_id)]

            referenced = await self._referenced_ids(all_ids)
            if referenced:
                raise ReferentialBlockError(
                    "Cannot delete account with journal entries or its descendants",
                    code="HasJournalLines",
                    details={"id": account_id, "referenced_account_ids": referenced},
                )

            for chunk in chunked(all_ids):
                await self.db.execute(
                    f"DELETE FROM accounts WHERE id IN ({placeholders(len(chunk))})",
                    tuple(chunk),
                )

        logger.info(
            f"계정 삭제: id={account_id} (하위 포함 {len(all_ids)}건)",
            extra={"account_id": account_id, "deleted_ids": all_ids},
        )
        return all_ids

    async def _referenced_ids(self, account_ids: list[int]) -> list[int]:
        """분개 라인에서 참조 중인 계정 id"""
        referenced: set[int] = set()
        for chunk in chunked(account_ids):
            rows = await self.db.fetchall(
                f"SELECT DISTINCT account_id FROM journal_lines "
                f"WHERE account_id IN ({placeholders(len(chunk))})",
                tuple(chunk),
            )
            referenced.update(row["account_id"] for row in rows)
        return sorted(referenced)

    # =====================================
    # 내부 헬퍼
    # =====================================

    async def _fetch(self, account_id: int) -> Account | None:
        row = await self.db.fetchone(
            "SELECT * FROM accounts WHERE id = ?",
            (account_id,),
        )
        return Account.from_row(row) if row else None

    async def _id_by_code(self, code: str) -> int | None:
        row = await self.db.fetchone(
            "SELECT id FROM accounts WHERE code = ?",
            (code,),
        )
        return row["id"] if row else None

    @staticmethod
    def _require_code(code: str) -> None:
        if not code or not code.strip():
            raise ValidationError(
                "Account code must not be empty",
                code="InvalidCode",
                details={"account_code": code},
            )

    @staticmethod
    def _not_found(account_id: int) -> NotFoundError:
        return NotFoundError(
            f"Account with id {account_id} does not exist",
            code="NotFound",
            details={"id": account_id},
        )
