"""
Web 모델 패키지

Pydantic 스키마 정의
"""

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
    JournalLineRequest,
    JournalSearchRequest,
    LedgerReportRequest,
)
from web.models.responses import (
    ActionResponse,
    HealthResponse,
    envelope_response,
    fail,
    http_status,
    ok,
)

__all__ = [
    # Requests
    "AccountCreateRequest",
    "AccountIdRequest",
    "AccountListRequest",
    "AccountUpdateRequest",
    "AsOfRequest",
    "ClosePeriodRequest",
    "DateRangeRequest",
    "JournalEntryCreateRequest",
    "JournalEntryIdRequest",
    "JournalLineRequest",
    "JournalSearchRequest",
    "LedgerReportRequest",
    # Responses
    "ActionResponse",
    "HealthResponse",
    "envelope_response",
    "fail",
    "http_status",
    "ok",
]
