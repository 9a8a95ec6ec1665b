"""
Ledger 도메인 모델

테이블별 타입 있는 행 구조체.
DB 행(aiosqlite.Row)은 from_row()에서만 해석하고,
그 밖의 코드에는 항상 이 dataclass만 전달된다.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import MAX_PREC, Decimal, Inexact, InvalidOperation, Rounded, localcontext
from typing import Any, Iterable, Mapping

from core.ledger.types import AccountType, JournalSide

ZERO = Decimal("0")


def exact_sum(values: Iterable[Decimal]) -> Decimal:
    """Decimal 합계 (반올림 없음)

    기본 context(28자리)에서는 큰 금액이 조용히 반올림되므로
    최대 정밀도 + Inexact/Rounded trap 안에서 더한다.
    """
    with localcontext() as ctx:
        ctx.prec = MAX_PREC
        ctx.traps[Inexact] = True
        ctx.traps[Rounded] = True
        total = ZERO
        for value in values:
            total += value
        return total


def exact_diff(left: Decimal, right: Decimal) -> Decimal:
    """left - right (반올림 없음)"""
    return exact_sum((left, right.copy_negate()))


def to_decimal(value: Decimal | int | str | float | None) -> Decimal:
    """금액을 Decimal로 변환

    float는 str()을 거쳐 변환하여 이진 표현 오차를 피한다.
    None은 0으로 간주.

    Raises:
        ValueError: 숫자로 해석할 수 없는 값
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        value = str(value)
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError) as e:
        raise ValueError(f"Invalid amount: {value!r}") from e


def format_amount(value: Decimal) -> str:
    """저장/응답용 금액 문자열 (지수 표기 없음)"""
    return format(value, "f")


@dataclass(frozen=True)
class Account:
    """계정 (accounts 테이블)"""

    id: int
    code: str
    name: str
    type: AccountType
    parent_id: int | None = None
    created_at: str | None = None

    @staticmethod
    def from_row(row: Mapping[str, Any]) -> Account:
        return Account(
            id=row["id"],
            code=row["code"],
            name=row["name"],
            type=AccountType(row["type"]),
            parent_id=row["parent_id"],
            created_at=row["created_at"],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "type": self.type.value,
            "parent_id": self.parent_id,
            "created_at": self.created_at,
        }


@dataclass(frozen=True)
class JournalEntry:
    """분개 헤더 (journal_entries 테이블)

    date는 'YYYY-MM-DD' 문자열.
    """

    id: int
    date: str
    description: str | None = None
    reference: str | None = None
    created_at: str | None = None

    @staticmethod
    def from_row(row: Mapping[str, Any]) -> JournalEntry:
        return JournalEntry(
            id=row["id"],
            date=row["date"],
            description=row["description"],
            reference=row["reference"],
            created_at=row["created_at"],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "description": self.description,
            "reference": self.reference,
            "created_at": self.created_at,
        }


@dataclass(frozen=True)
class JournalLine:
    """분개 라인 (journal_lines 테이블)

    debit / credit 중 정확히 하나만 0보다 크다.
    """

    id: int
    journal_entry_id: int
    account_id: int
    debit: Decimal = ZERO
    credit: Decimal = ZERO

    @property
    def side(self) -> JournalSide:
        """차변/대변 방향"""
        return JournalSide.DEBIT if self.debit > 0 else JournalSide.CREDIT

    @property
    def net(self) -> Decimal:
        """debit - credit"""
        return exact_diff(self.debit, self.credit)

    @staticmethod
    def from_row(row: Mapping[str, Any]) -> JournalLine:
        return JournalLine(
            id=row["id"],
            journal_entry_id=row["journal_entry_id"],
            account_id=row["account_id"],
            debit=to_decimal(row["debit"]),
            credit=to_decimal(row["credit"]),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "journal_entry_id": self.journal_entry_id,
            "account_id": self.account_id,
            "debit": format_amount(self.debit),
            "credit": format_amount(self.credit),
            "side": self.side.value,
        }


@dataclass(frozen=True)
class JournalEntryWithLines:
    """분개 + 라인 묶음"""

    entry: JournalEntry
    lines: list[JournalLine] = field(default_factory=list)

    @property
    def total_debit(self) -> Decimal:
        return exact_sum(line.debit for line in self.lines)

    @property
    def total_credit(self) -> Decimal:
        return exact_sum(line.credit for line in self.lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "entry": self.entry.to_dict(),
            "lines": [line.to_dict() for line in self.lines],
        }


@dataclass(frozen=True)
class LineInput:
    """분개 생성 요청의 라인 (아직 저장 전)"""

    account_id: int
    debit: Decimal = ZERO
    credit: Decimal = ZERO

    def is_one_sided(self) -> bool:
        """debit / credit 중 정확히 하나만 양수이고 나머지는 0"""
        if self.debit < 0 or self.credit < 0:
            return False
        return (self.debit > 0) != (self.credit > 0)


@dataclass(frozen=True)
class PeriodLock:
    """기간 마감 (period_lock 테이블, 단일 행)"""

    through_date: str
    updated_at: str | None = None

    @staticmethod
    def from_row(row: Mapping[str, Any]) -> PeriodLock:
        return PeriodLock(
            through_date=row["through_date"],
            updated_at=row["updated_at"],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "through_date": self.through_date,
            "updated_at": self.updated_at,
        }
