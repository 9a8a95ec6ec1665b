"""
pytest 공통 fixture 정의

임시 DB (Ledger 스키마 포함) 및 설정 파일 fixture
"""

import tempfile
from pathlib import Path
from typing import AsyncGenerator, Iterator

import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import Settings
from core.ledger import init_ledger_schema


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest_asyncio.fixture
async def ledger_db(tmp_path: Path) -> AsyncGenerator[SQLiteAdapter, None]:
    """Ledger 스키마가 생성된 임시 DB"""
    adapter = SQLiteAdapter(tmp_path / "test_ledger.db")
    await adapter.connect()
    await init_ledger_schema(adapter)
    yield adapter
    await adapter.close()


@pytest.fixture(autouse=True)
def reset_settings() -> Iterator[None]:
    """Settings 싱글턴 초기화 (테스트 간 격리)"""
    Settings.reset()
    yield
    Settings.reset()


@pytest.fixture
def temp_settings_file(temp_dir: Path) -> Path:
    """테스트용 settings.yaml 파일 생성"""
    settings_content = """# 테스트용 settings.yaml
database:
  file: data/test_ledger.db

display:
  date_format: "%d/%m/%Y"
  currency_symbol: "$"
  timezone: "UTC-05:00"

web:
  host: 0.0.0.0
  port: 9000
"""
    settings_path = temp_dir / "settings.yaml"
    settings_path.write_text(settings_content, encoding="utf-8")
    return settings_path


@pytest.fixture
def temp_settings_file_invalid_timezone(temp_dir: Path) -> Path:
    """잘못된 timezone의 settings.yaml 파일 생성"""
    settings_path = temp_dir / "settings_invalid_tz.yaml"
    settings_path.write_text(
        'display:\n  timezone: "Lagos"\n',
        encoding="utf-8",
    )
    return settings_path
