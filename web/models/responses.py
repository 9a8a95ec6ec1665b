"""
응답 스키마 (Pydantic)

모든 액션은 같은 envelope를 반환:
- 성공: {"success": true, "data": ...}
- 실패: {"success": false, "message": "...", "details": {"kind": ..., "code": ..., ...}}
"""

from typing import Any

from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

# 실패 kind → HTTP 상태 코드
STATUS_BY_KIND: dict[str, int] = {
    "ValidationError": 422,
    "NotFound": 404,
    "Conflict": 409,
    "ReferentialBlock": 409,
    "StorageError": 500,
}


class ActionResponse(BaseModel):
    """액션 응답 envelope"""

    success: bool = Field(..., description="성공 여부")
    data: Any = Field(default=None, description="결과 데이터 (성공 시)")
    message: str | None = Field(default=None, description="오류 메시지 (실패 시)")
    details: dict[str, Any] | None = Field(default=None, description="오류 상세 (실패 시)")


class HealthResponse(BaseModel):
    """헬스 체크 응답"""

    status: str = Field(default="ok", description="서비스 상태")
    database: str = Field(..., description="DB 파일 경로")
    version: str = Field(..., description="API 버전")


def ok(data: Any) -> dict[str, Any]:
    """성공 envelope"""
    return {"success": True, "data": data}


def fail(message: str, details: dict[str, Any]) -> dict[str, Any]:
    """실패 envelope"""
    return {"success": False, "message": message, "details": details}


def http_status(envelope: dict[str, Any]) -> int:
    """envelope에 맞는 HTTP 상태 코드"""
    if envelope.get("success"):
        return 200
    kind = (envelope.get("details") or {}).get("kind")
    return STATUS_BY_KIND.get(kind, 400)


def envelope_response(envelope: dict[str, Any], success_status: int = 200) -> JSONResponse:
    """envelope를 JSONResponse로 변환 (본문은 항상 envelope 그대로)"""
    status_code = success_status if envelope.get("success") else http_status(envelope)
    return JSONResponse(status_code=status_code, content=envelope)
