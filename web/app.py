"""
FastAPI 애플리케이션

라우터 등록 및 앱 설정.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import get_settings
from core.ledger import init_ledger_schema
from core.logging import setup_logging
from web.models.responses import fail
from web.routes import accounts, health, journal, periods, reports, settings

# 로깅 설정 (콘솔 + 파일)
setup_logging("web")

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """앱 생명주기 관리"""
    ledger_settings = get_settings().ledger

    # 시작 시 - DB 스키마 자동 초기화
    async with SQLiteAdapter(ledger_settings.db_path) as db:
        await init_ledger_schema(db)

    logger.info(f"Web: Ledger DB 준비 완료 ({ledger_settings.db_path})")
    yield


app = FastAPI(
    title="Ledger API",
    description="복식부기 장부 API (계정과목, 분개, 기간 마감, 보고서)",
    version=health.API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS 설정 (개발용)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """경로/쿼리/본문 형식 오류도 envelope로 응답"""
    errors = [
        {
            "loc": [str(part) for part in err.get("loc", ())],
            "msg": err.get("msg", ""),
            "type": err.get("type", ""),
        }
        for err in exc.errors()
    ]
    logger.warning(
        f"요청 형식 오류: {request.method} {request.url.path}",
        extra={"errors": errors},
    )
    return JSONResponse(
        status_code=422,
        content=fail(
            "Invalid input",
            {"kind": "ValidationError", "code": "InvalidInput", "errors": errors},
        ),
    )


# =========================================================================
# API 라우터 등록
# =========================================================================

app.include_router(health.router)
app.include_router(accounts.router)
app.include_router(journal.router)
app.include_router(periods.router)
app.include_router(reports.router)
app.include_router(settings.router)


@app.get("/", include_in_schema=False)
async def home() -> RedirectResponse:
    """홈페이지 (API 문서로 리다이렉트)"""
    return RedirectResponse(url="/docs")
