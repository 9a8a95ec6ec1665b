"""
SQLite 어댑터 테스트

SQLiteAdapter 및 관련 함수 테스트.
"""

from pathlib import Path

import aiosqlite
import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import (
    SQLiteAdapter,
    create_connection,
    resolve_db_path,
)
from core.constants import PROJECT_ROOT
from core.ledger.schema import LEDGER_TABLES, init_ledger_schema


class TestResolveDbPath:
    """resolve_db_path 테스트"""

    def test_relative_path(self) -> None:
        """상대 경로는 프로젝트 루트 기준"""
        path = resolve_db_path("data/ledger.db")

        assert path == PROJECT_ROOT / "data" / "ledger.db"
        assert isinstance(path, Path)

    def test_absolute_path(self, tmp_path: Path) -> None:
        """절대 경로는 그대로"""
        db_path = tmp_path / "abs.db"

        assert resolve_db_path(db_path) == db_path
        assert resolve_db_path(str(db_path)) == db_path


class TestCreateConnection:
    """create_connection 테스트"""

    @pytest.mark.asyncio
    async def test_create_connection(self, tmp_path: Path) -> None:
        """연결 생성"""
        db_path = tmp_path / "test.db"

        conn = await create_connection(db_path)

        assert conn is not None

        # WAL 모드 확인
        cursor = await conn.execute("PRAGMA journal_mode")
        row = await cursor.fetchone()
        assert row[0].upper() == "WAL"

        await conn.close()

    @pytest.mark.asyncio
    async def test_foreign_keys_enabled(self, tmp_path: Path) -> None:
        """외래 키 제약 활성화"""
        conn = await create_connection(tmp_path / "fk.db")

        cursor = await conn.execute("PRAGMA foreign_keys")
        row = await cursor.fetchone()
        assert row[0] == 1

        await conn.close()

    @pytest.mark.asyncio
    async def test_row_factory(self, tmp_path: Path) -> None:
        """컬럼 이름으로 접근 가능한 Row"""
        conn = await create_connection(tmp_path / "row.db")

        cursor = await conn.execute("SELECT 1 AS answer")
        row = await cursor.fetchone()
        assert row["answer"] == 1

        await conn.close()

    @pytest.mark.asyncio
    async def test_creates_parent_directory(self, tmp_path: Path) -> None:
        """부모 디렉토리 생성"""
        db_path = tmp_path / "subdir" / "test.db"

        conn = await create_connection(db_path)

        assert db_path.parent.exists()

        await conn.close()


class TestSQLiteAdapter:
    """SQLiteAdapter 테스트"""

    @pytest_asyncio.fixture
    async def adapter(self, tmp_path: Path) -> SQLiteAdapter:
        """어댑터 픽스처"""
        db_path = tmp_path / "test.db"
        adapter = SQLiteAdapter(db_path)
        await adapter.connect()
        yield adapter
        await adapter.close()

    @pytest.mark.asyncio
    async def test_connect_and_close(self, tmp_path: Path) -> None:
        """연결 및 종료"""
        db_path = tmp_path / "test.db"
        adapter = SQLiteAdapter(db_path)

        assert adapter.is_connected is False

        await adapter.connect()
        assert adapter.is_connected is True

        await adapter.close()
        assert adapter.is_connected is False

    @pytest.mark.asyncio
    async def test_not_connected_raises(self, tmp_path: Path) -> None:
        """연결 전 실행 시 에러"""
        adapter = SQLiteAdapter(tmp_path / "never.db")

        with pytest.raises(RuntimeError):
            await adapter.fetchone("SELECT 1")

    @pytest.mark.asyncio
    async def test_execute(self, adapter: SQLiteAdapter) -> None:
        """SQL 실행"""
        await adapter.execute(
            "CREATE TABLE test (id INTEGER PRIMARY KEY, name TEXT)"
        )
        await adapter.execute(
            "INSERT INTO test (name) VALUES (?)",
            ("테스트",),
        )
        await adapter.commit()

        row = await adapter.fetchone("SELECT name FROM test WHERE id = 1")
        assert row["name"] == "테스트"

    @pytest.mark.asyncio
    async def test_insert_returns_row_id(self, adapter: SQLiteAdapter) -> None:
        """INSERT 후 새 id 반환"""
        await adapter.execute("CREATE TABLE ids (id INTEGER PRIMARY KEY AUTOINCREMENT, v TEXT)")
        await adapter.commit()

        async with adapter.transaction():
            first = await adapter.insert("INSERT INTO ids (v) VALUES (?)", ("a",))
            second = await adapter.insert("INSERT INTO ids (v) VALUES (?)", ("b",))

        assert first == 1
        assert second == 2

    @pytest.mark.asyncio
    async def test_fetchall(self, adapter: SQLiteAdapter) -> None:
        """전체 조회"""
        await adapter.execute("CREATE TABLE items (value TEXT)")
        await adapter.executemany(
            "INSERT INTO items (value) VALUES (?)",
            [("A",), ("B",), ("C",)],
        )
        await adapter.commit()

        rows = await adapter.fetchall("SELECT value FROM items ORDER BY value")

        assert isinstance(rows, list)
        assert [row["value"] for row in rows] == ["A", "B", "C"]

    @pytest.mark.asyncio
    async def test_transaction_commit(self, adapter: SQLiteAdapter) -> None:
        """트랜잭션 커밋"""
        await adapter.execute("CREATE TABLE tx_test (id INTEGER)")
        await adapter.commit()

        async with adapter.transaction() as conn:
            assert adapter.in_transaction is True
            await conn.execute("INSERT INTO tx_test (id) VALUES (1)")
            await conn.execute("INSERT INTO tx_test (id) VALUES (2)")

        assert adapter.in_transaction is False
        rows = await adapter.fetchall("SELECT id FROM tx_test")
        assert len(rows) == 2

    @pytest.mark.asyncio
    async def test_transaction_rollback(self, adapter: SQLiteAdapter) -> None:
        """트랜잭션 롤백"""
        await adapter.execute("CREATE TABLE tx_test2 (id INTEGER)")
        await adapter.commit()

        with pytest.raises(ValueError):
            async with adapter.transaction() as conn:
                await conn.execute("INSERT INTO tx_test2 (id) VALUES (1)")
                raise ValueError("의도적 에러")

        rows = await adapter.fetchall("SELECT id FROM tx_test2")
        assert len(rows) == 0
        assert adapter.in_transaction is False

    @pytest.mark.asyncio
    async def test_nested_transaction_joins_outer(self, adapter: SQLiteAdapter) -> None:
        """중첩 트랜잭션은 바깥 트랜잭션에 합류 (바깥 실패 시 전체 롤백)"""
        await adapter.execute("CREATE TABLE nested (id INTEGER)")
        await adapter.commit()

        with pytest.raises(ValueError):
            async with adapter.transaction():
                await adapter.execute("INSERT INTO nested (id) VALUES (1)")
                async with adapter.transaction():
                    await adapter.execute("INSERT INTO nested (id) VALUES (2)")
                raise ValueError("바깥에서 실패")

        rows = await adapter.fetchall("SELECT id FROM nested")
        assert rows == []

    @pytest.mark.asyncio
    async def test_snapshot_is_read_only_scope(self, adapter: SQLiteAdapter) -> None:
        """스냅샷 종료 후 트랜잭션 상태 해제"""
        await adapter.execute("CREATE TABLE snap (id INTEGER)")
        await adapter.execute("INSERT INTO snap (id) VALUES (1)")
        await adapter.commit()

        async with adapter.snapshot():
            assert adapter.in_transaction is True
            rows = await adapter.fetchall("SELECT id FROM snap")

        assert len(rows) == 1
        assert adapter.in_transaction is False

    @pytest.mark.asyncio
    async def test_table_exists(self, adapter: SQLiteAdapter) -> None:
        """테이블 존재 확인"""
        assert await adapter.table_exists("nonexistent") is False

        await adapter.execute("CREATE TABLE existing (id INTEGER)")
        await adapter.commit()

        assert await adapter.table_exists("existing") is True

    @pytest.mark.asyncio
    async def test_context_manager(self, tmp_path: Path) -> None:
        """컨텍스트 매니저"""
        db_path = tmp_path / "ctx_test.db"

        async with SQLiteAdapter(db_path) as adapter:
            assert adapter.is_connected is True
            await adapter.execute("CREATE TABLE ctx (id INTEGER)")

        # 컨텍스트 종료 후 연결 해제 확인
        assert adapter.is_connected is False


class TestInitLedgerSchema:
    """init_ledger_schema 테스트"""

    @pytest.mark.asyncio
    async def test_creates_tables(self, tmp_path: Path) -> None:
        """스키마 초기화 - 테이블 생성"""
        async with SQLiteAdapter(tmp_path / "schema_test.db") as adapter:
            await init_ledger_schema(adapter)

            for table in LEDGER_TABLES:
                assert await adapter.table_exists(table) is True

    @pytest.mark.asyncio
    async def test_idempotent(self, tmp_path: Path) -> None:
        """스키마 초기화 멱등성 (여러 번 실행 가능)"""
        async with SQLiteAdapter(tmp_path / "idempotent_test.db") as adapter:
            await init_ledger_schema(adapter)
            await init_ledger_schema(adapter)

            assert await adapter.table_exists("accounts") is True

    @pytest.mark.asyncio
    async def test_journal_lines_schema(self, tmp_path: Path) -> None:
        """journal_lines 스키마 확인"""
        async with SQLiteAdapter(tmp_path / "lines_schema.db") as adapter:
            await init_ledger_schema(adapter)

            columns = await adapter.get_table_info("journal_lines")
            column_names = [c["name"] for c in columns]

            assert column_names == ["id", "journal_entry_id", "account_id", "debit", "credit"]

    @pytest.mark.asyncio
    async def test_account_code_unique(self, tmp_path: Path) -> None:
        """accounts.code UNIQUE 제약조건"""
        async with SQLiteAdapter(tmp_path / "unique_test.db") as adapter:
            await init_ledger_schema(adapter)

            await adapter.execute(
                "INSERT INTO accounts (code, name, type) VALUES ('1000', 'Cash', 'Asset')"
            )
            await adapter.commit()

            with pytest.raises(aiosqlite.IntegrityError):
                await adapter.execute(
                    "INSERT INTO accounts (code, name, type) VALUES ('1000', 'Other', 'Asset')"
                )

    @pytest.mark.asyncio
    async def test_period_lock_single_row(self, tmp_path: Path) -> None:
        """period_lock은 id = 1 한 행만 허용"""
        async with SQLiteAdapter(tmp_path / "lock_test.db") as adapter:
            await init_ledger_schema(adapter)

            with pytest.raises(aiosqlite.IntegrityError):
                await adapter.execute(
                    "INSERT INTO period_lock (id, through_date) VALUES (2, '2024-01-01')"
                )
