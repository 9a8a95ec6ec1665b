"""
Ledger DB 초기화

스키마(테이블 + 인덱스)를 생성하고, 선택적으로 기본 계정과목표를 등록.
이미 존재하는 테이블 / 계정 코드는 건너뛰므로 여러 번 실행해도 안전.

사용법:
    python -m scripts.init_db
    python -m scripts.init_db --seed
    python -m scripts.init_db --db data/other.db --seed
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# 프로젝트 루트를 Python 경로에 추가
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from adapters.db.sqlite_adapter import SQLiteAdapter, resolve_db_path
from core.config.loader import get_settings
from core.ledger import STARTER_CHART, AccountManager, init_ledger_schema
from core.logging import setup_logging

logger = logging.getLogger(__name__)


async def seed_starter_chart(db: SQLiteAdapter) -> list[str]:
    """기본 계정과목표 등록

    부모 계정이 먼저 오도록 정렬된 STARTER_CHART 순서대로 생성.
    같은 코드가 이미 있으면 건너뜀.

    Returns:
        새로 생성된 계정 코드 목록
    """
    accounts = AccountManager(db)
    ids_by_code = {account.code: account.id for account in await accounts.list()}
    created: list[str] = []

    for code, name, account_type, parent_code in STARTER_CHART:
        if code in ids_by_code:
            logger.info(f"계정 건너뜀 (이미 존재): {code} {name}")
            continue

        parent_id = ids_by_code.get(parent_code) if parent_code else None
        account = await accounts.create(code, name, account_type, parent_id)
        ids_by_code[code] = account.id
        created.append(code)

    return created


async def main(db_file: str | None, seed: bool) -> None:
    db_path = resolve_db_path(db_file) if db_file else get_settings().db_path

    async with SQLiteAdapter(db_path) as db:
        await init_ledger_schema(db)

        if seed:
            created = await seed_starter_chart(db)
            logger.info(f"기본 계정과목 {len(created)}건 생성")

    logger.info(f"DB 초기화 완료: {db_path}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Ledger DB 초기화")
    parser.add_argument(
        "--db",
        default=None,
        help="DB 파일 경로 (기본: settings.yaml의 database.file)",
    )
    parser.add_argument(
        "--seed",
        action="store_true",
        help="기본 계정과목표 등록",
    )
    args = parser.parse_args()

    setup_logging("cli")
    asyncio.run(main(args.db, args.seed))
