"""
SQLite 어댑터

WAL 모드로 SQLite 연결 관리.
Web과 CLI 스크립트가 동시에 접근 가능하도록 설정.

Ledger 코어는 이 어댑터만을 통해 DB에 접근한다.
(execute / insert / fetchone / fetchall / transaction / snapshot)
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

import aiosqlite

from core.constants import PROJECT_ROOT

logger = logging.getLogger(__name__)

# 동시 쓰기 경합 시 대기 시간 (밀리초). 재시도는 SQLite가 담당.
BUSY_TIMEOUT_MS = 30000


def resolve_db_path(db_file: Path | str) -> Path:
    """DB 파일 경로 정규화

    상대 경로는 프로젝트 루트 기준으로 해석.

    Args:
        db_file: DB 파일 경로 (절대 또는 상대)

    Returns:
        절대 경로 (Path 타입)
    """
    path = Path(db_file)
    if path.is_absolute():
        return path
    return PROJECT_ROOT / path


async def create_connection(
    db_path: Path | str,
    readonly: bool = False,
) -> aiosqlite.Connection:
    """SQLite 연결 생성 (WAL 모드)

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부

    Returns:
        aiosqlite 연결 객체
    """
    # pathlib.Path를 문자열로 변환
    db_path_str = str(db_path)

    # 디렉토리가 없으면 생성
    db_dir = Path(db_path).parent
    db_dir.mkdir(parents=True, exist_ok=True)

    # 연결 생성
    if readonly:
        # 읽기 전용 모드
        conn = await aiosqlite.connect(f"file:{db_path_str}?mode=ro", uri=True)
    else:
        conn = await aiosqlite.connect(db_path_str)

    # 컬럼 이름으로 접근 가능한 Row
    conn.row_factory = aiosqlite.Row

    # WAL 모드 설정 (읽기 전용 연결은 모드 변경 불가)
    if not readonly:
        await conn.execute("PRAGMA journal_mode=WAL")

    # 동시 접근 설정
    await conn.execute(f"PRAGMA busy_timeout={BUSY_TIMEOUT_MS}")

    # 외래 키 제약 활성화 (journal_lines → accounts RESTRICT, CASCADE 삭제)
    await conn.execute("PRAGMA foreign_keys=ON")

    logger.info(
        "SQLite 연결 생성",
        extra={"db_path": db_path_str, "readonly": readonly},
    )

    return conn


class SQLiteAdapter:
    """SQLite 어댑터

    WAL 모드로 SQLite 연결 관리.
    트랜잭션 / 스냅샷 컨텍스트 매니저 제공.

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부 (Web 조회용)

    사용 예시:
    ```python
    adapter = SQLiteAdapter(db_path)
    await adapter.connect()

    async with adapter.transaction():
        entry_id = await adapter.insert("INSERT INTO ...", (...))

    await adapter.close()
    ```
    """

    def __init__(self, db_path: Path | str, readonly: bool = False):
        self.db_path = Path(db_path)
        self.readonly = readonly
        self._conn: aiosqlite.Connection | None = None
        self._tx_depth = 0

    @property
    def is_connected(self) -> bool:
        """연결 상태 확인"""
        return self._conn is not None

    @property
    def in_transaction(self) -> bool:
        """트랜잭션 진행 여부"""
        return self._tx_depth > 0

    async def connect(self) -> None:
        """연결 생성"""
        if self._conn is not None:
            return

        self._conn = await create_connection(self.db_path, self.readonly)

    async def close(self) -> None:
        """연결 종료"""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            self._tx_depth = 0
            logger.info("SQLite 연결 종료")

    def _require_conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError("Not connected to database")
        return self._conn

    async def execute(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> aiosqlite.Cursor:
        """SQL 실행"""
        conn = self._require_conn()

        if parameters:
            return await conn.execute(sql, parameters)
        return await conn.execute(sql)

    async def executemany(
        self,
        sql: str,
        parameters: list[tuple[Any, ...]],
    ) -> aiosqlite.Cursor:
        """SQL 다중 실행"""
        conn = self._require_conn()

        return await conn.executemany(sql, parameters)

    async def insert(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> int:
        """INSERT 실행 후 새 행의 rowid 반환"""
        cursor = await self.execute(sql, parameters)
        row_id = cursor.lastrowid
        await cursor.close()
        if row_id is None:
            raise RuntimeError("INSERT did not produce a row id")
        return row_id

    async def fetchone(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> aiosqlite.Row | None:
        """단일 행 조회"""
        cursor = await self.execute(sql, parameters)
        row = await cursor.fetchone()
        await cursor.close()
        return row

    async def fetchall(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> list[aiosqlite.Row]:
        """전체 행 조회"""
        cursor = await self.execute(sql, parameters)
        rows = await cursor.fetchall()
        await cursor.close()
        return list(rows)

    async def commit(self) -> None:
        """커밋"""
        if self._conn is not None:
            await self._conn.commit()

    async def rollback(self) -> None:
        """롤백"""
        if self._conn is not None:
            await self._conn.rollback()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """쓰기 트랜잭션 컨텍스트 매니저

        BEGIN IMMEDIATE로 쓰기 락을 먼저 획득하여
        검증(조회) → 쓰기 사이에 다른 writer가 끼어들 수 없음.
        성공 시 자동 커밋, 예외 시 자동 롤백.

        이미 트랜잭션 안에서 호출되면 바깥 트랜잭션에 합류
        (커밋/롤백은 가장 바깥 블록이 담당).

        사용 예시:
        ```python
        async with adapter.transaction():
            await adapter.execute("INSERT INTO ...")
            # 성공 시 자동 커밋
        ```
        """
        conn = self._require_conn()

        if self._tx_depth > 0:
            self._tx_depth += 1
            try:
                yield conn
            finally:
                self._tx_depth -= 1
            return

        await conn.execute("BEGIN IMMEDIATE")
        self._tx_depth = 1
        try:
            yield conn
            await conn.commit()
        except BaseException:
            await conn.rollback()
            raise
        finally:
            self._tx_depth = 0

    @asynccontextmanager
    async def snapshot(self) -> AsyncIterator[aiosqlite.Connection]:
        """읽기 스냅샷 컨텍스트 매니저

        하나의 보고서가 여러 쿼리를 실행해도 동일한 커밋 상태를 보도록
        읽기 트랜잭션(BEGIN DEFERRED)으로 묶는다. 쓰기 트랜잭션 안에서는
        그대로 합류.
        """
        conn = self._require_conn()

        if self._tx_depth > 0:
            yield conn
            return

        await conn.execute("BEGIN")
        self._tx_depth = 1
        try:
            yield conn
        finally:
            self._tx_depth = 0
            await conn.rollback()

    async def table_exists(self, table_name: str) -> bool:
        """테이블 존재 여부 확인"""
        result = await self.fetchone(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
            (table_name,),
        )
        return result is not None

    async def get_table_info(self, table_name: str) -> list[dict[str, Any]]:
        """테이블 정보 조회"""
        rows = await self.fetchall(f"PRAGMA table_info({table_name})")

        columns = []
        for row in rows:
            columns.append({
                "cid": row[0],
                "name": row[1],
                "type": row[2],
                "notnull": bool(row[3]),
                "default_value": row[4],
                "pk": bool(row[5]),
            })

        return columns

    # -------------------------------------------------------------------------
    # 컨텍스트 매니저
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> "SQLiteAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
