"""
요청 스키마 (Pydantic)

액션 입력 데이터 검증 (형태/타입/범위).
비즈니스 규칙(균형, 마감, 계정 존재 등)은 core.ledger에서 검사하고
여기서는 이미 타입이 정해진 값만 넘긴다.
"""

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.ledger.types import MAX_ROW_ID, AccountType
from core.utils.dates import ISO_DATE_PATTERN

DATE_PATTERN = ISO_DATE_PATTERN.pattern

# 'YYYY-MM-DD' (존재하지 않는 날짜는 core에서 InvalidDate)
IsoDate = Annotated[str, Field(pattern=DATE_PATTERN, description="날짜 (YYYY-MM-DD)")]

# 음수가 아닌 금액 (정수부 14자리 + 소수부 6자리 이내)
Amount = Annotated[
    Decimal,
    Field(ge=0, max_digits=20, decimal_places=6, description="금액 (0 이상)"),
]

# 행 ID (SQLite INTEGER 범위)
AccountId = Annotated[int, Field(ge=1, le=MAX_ROW_ID, description="계정 ID")]
EntryId = Annotated[int, Field(ge=1, le=MAX_ROW_ID, description="분개 ID")]


class LedgerRequest(BaseModel):
    """공통 설정: 알 수 없는 필드 거부"""

    model_config = ConfigDict(extra="forbid")


# =========================================================================
# 계정
# =========================================================================


class AccountCreateRequest(LedgerRequest):
    """계정 생성 요청"""

    code: str = Field(..., min_length=1, description="계정 코드 (고유)")
    name: str = Field(..., min_length=1, description="계정 이름")
    type: AccountType = Field(..., description="계정 유형")
    parent_id: AccountId | None = None

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "examples": [
                {"code": "1100", "name": "Cash", "type": "Asset", "parent_id": 1},
            ]
        },
    )


class AccountUpdateRequest(LedgerRequest):
    """계정 수정 요청

    전달된 필드만 변경. parent_id: null 은 최상위로 이동.
    """

    id: AccountId
    code: str | None = Field(default=None, min_length=1, description="새 계정 코드")
    name: str | None = Field(default=None, min_length=1, description="새 계정 이름")
    type: AccountType | None = Field(default=None, description="새 계정 유형")
    parent_id: AccountId | None = None

    @field_validator("code", "name", "type")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("must not be null")
        return value


class AccountIdRequest(LedgerRequest):
    """계정 ID 요청 (조회 / 삭제)"""

    id: AccountId


class AccountListRequest(LedgerRequest):
    """계정 목록 필터"""

    code: str | None = Field(default=None, description="코드 부분 일치 (대소문자 구분)")
    name: str | None = Field(default=None, description="이름 부분 일치 (대소문자 구분)")
    type: AccountType | None = Field(default=None, description="유형 완전 일치")


# =========================================================================
# 분개
# =========================================================================


class JournalLineRequest(LedgerRequest):
    """분개 라인 (debit / credit 중 하나만 양수)"""

    account_id: AccountId
    debit: Amount = Decimal("0")
    credit: Amount = Decimal("0")


class JournalEntryCreateRequest(LedgerRequest):
    """분개 생성 요청"""

    date: IsoDate
    description: str | None = Field(default=None, description="적요")
    reference: str | None = Field(default=None, description="참조 번호")
    lines: list[JournalLineRequest] = Field(..., description="분개 라인 (2개 이상)")

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "examples": [
                {
                    "date": "2024-01-15",
                    "description": "Cash sale",
                    "reference": "INV-001",
                    "lines": [
                        {"account_id": 1, "debit": "100.00"},
                        {"account_id": 2, "credit": "100.00"},
                    ],
                }
            ]
        },
    )


class JournalEntryIdRequest(LedgerRequest):
    """분개 ID 요청 (조회 / 삭제)"""

    id: EntryId


class JournalSearchRequest(LedgerRequest):
    """분개 검색 조건 (모두 선택)"""

    start_date: IsoDate | None = None
    end_date: IsoDate | None = None
    reference: str | None = Field(default=None, description="참조 번호 부분 일치")
    description: str | None = Field(default=None, description="적요 부분 일치")


# =========================================================================
# 기간 마감
# =========================================================================


class ClosePeriodRequest(LedgerRequest):
    """기간 마감 요청"""

    through_date: IsoDate


# =========================================================================
# 보고서
# =========================================================================


class AsOfRequest(LedgerRequest):
    """기준일 보고서 (시산표 / 재무상태표)"""

    as_of: IsoDate | None = None


class LedgerReportRequest(LedgerRequest):
    """계정별 원장 요청"""

    account_id: AccountId
    start_date: IsoDate | None = None
    end_date: IsoDate | None = None
    include_running_balance: bool = Field(default=False, description="누적 잔액 포함 여부")


class DateRangeRequest(LedgerRequest):
    """기간 보고서 (손익계산서)"""

    start_date: IsoDate | None = None
    end_date: IsoDate | None = None
