"""
Web 진입점

실행 방법:
    python -m web
    python -m web --port 8080 --reload
"""

import argparse

import uvicorn

from core.config.loader import get_settings

if __name__ == "__main__":
    ledger_settings = get_settings().ledger

    parser = argparse.ArgumentParser(description="Ledger API 서버")
    parser.add_argument("--host", default=ledger_settings.web_host, help="바인드 주소")
    parser.add_argument("--port", type=int, default=ledger_settings.web_port, help="포트")
    parser.add_argument("--reload", action="store_true", help="코드 변경 시 자동 재시작 (개발용)")
    args = parser.parse_args()

    uvicorn.run(
        "web.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
    )
