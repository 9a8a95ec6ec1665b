"""
어댑터 인터페이스 정의

Protocol 기반으로 정의하여 의존성 주입 및 Mock 교체 가능.
Ledger 코어의 각 컴포넌트는 생성 시 이 Protocol을 만족하는
저장소를 주입받는다 (모듈 전역 연결 없음).
"""

from contextlib import AbstractAsyncContextManager
from typing import Any, Protocol, Sequence, runtime_checkable


@runtime_checkable
class ILedgerStorage(Protocol):
    """Ledger 저장소 인터페이스

    accounts / journal_entries / journal_lines / period_lock 네 개의
    테이블에 대한 실행, 조회, 트랜잭션 원시 연산을 제공.
    동시 쓰기 직렬화와 경합 재시도는 구현체(저장소)의 책임.
    """

    @property
    def in_transaction(self) -> bool:
        """트랜잭션 진행 여부"""
        ...

    async def execute(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> Any:
        """SQL 실행 (UPDATE / DELETE 등)"""
        ...

    async def insert(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> int:
        """INSERT 실행

        Returns:
            새 행의 id
        """
        ...

    async def fetchone(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> Sequence[Any] | None:
        """단일 행 조회 (컬럼 이름으로 접근 가능한 행)"""
        ...

    async def fetchall(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> list[Any]:
        """전체 행 조회"""
        ...

    def transaction(self) -> AbstractAsyncContextManager[Any]:
        """쓰기 트랜잭션 (성공 시 커밋, 예외 시 롤백)"""
        ...

    def snapshot(self) -> AbstractAsyncContextManager[Any]:
        """일관된 읽기 스냅샷"""
        ...
