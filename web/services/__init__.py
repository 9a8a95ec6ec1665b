"""
Web 서비스 패키지

액션 경계 (입력 디코딩 + envelope 변환)
"""

from web.services.ledger_service import LedgerService

__all__ = [
    "LedgerService",
]
