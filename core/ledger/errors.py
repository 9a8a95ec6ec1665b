"""
Ledger 예외 정의

비즈니스 규칙 위반은 모두 LedgerError 하위 예외로 발생.
kind: 오류 종류 (ValidationError / NotFound / Conflict / ReferentialBlock)
code: 위반한 규칙 이름 (DuplicateCode, PeriodLocked 등)

예외는 각 Manager/Engine 안에서만 발생하고,
액션 경계(LedgerService)에서 {success: false, ...} 응답으로 변환된다.
"""

from typing import Any


class LedgerError(Exception):
    """Ledger 비즈니스 규칙 위반 (기본 클래스)"""

    kind: str = "LedgerError"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code or self.kind
        self.details = details or {}
        super().__init__(message)

    def to_details(self) -> dict[str, Any]:
        """응답 envelope의 details 필드"""
        return {**self.details, "kind": self.kind, "code": self.code}


class ValidationError(LedgerError):
    """입력 형태/범위 오류 (비즈니스 로직 실행 전)"""

    kind = "ValidationError"


class NotFoundError(LedgerError):
    """대상 id가 존재하지 않음"""

    kind = "NotFound"


class ConflictError(LedgerError):
    """현재 상태와 충돌

    중복 코드, 자기 참조, 잠긴 기간, 불균형 분개, 존재하지 않는 계정 참조 등.
    """

    kind = "Conflict"


class ReferentialBlockError(LedgerError):
    """참조 중인 분개 라인 때문에 삭제 불가"""

    kind = "ReferentialBlock"
