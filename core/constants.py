"""
하드코딩 상수 - 변경될 일이 거의 없는 고정값

중요: 경로는 반드시 pathlib.Path 사용 (Windows/Linux 크로스 플랫폼)
"""

from pathlib import Path


# 프로젝트 루트 (이 파일 기준 2단계 상위: core/constants.py → 프로젝트 루트)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent


class Defaults:
    """기본값 상수"""

    DATABASE_FILE: str = "data/ledger.db"

    # 표시 설정 (settings.yaml의 display 섹션 기본값)
    DATE_FORMAT: str = "%Y-%m-%d"
    CURRENCY_SYMBOL: str = "₦"
    TIMEZONE: str = "UTC+1"

    WEB_HOST: str = "127.0.0.1"
    WEB_PORT: int = 8000


class Paths:
    """프로젝트 경로 상수 (pathlib 사용 - OS 독립적)"""

    # 디렉토리
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    DATA_DIR: Path = PROJECT_ROOT / "data"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"
    WEB_LOGS_DIR: Path = LOGS_DIR / "web"
    CLI_LOGS_DIR: Path = LOGS_DIR / "cli"

    # 설정 파일
    SETTINGS_FILE: Path = CONFIG_DIR / "settings.yaml"

    # DB 파일
    DEFAULT_DB: Path = PROJECT_ROOT / Defaults.DATABASE_FILE


class EnvVars:
    """환경 변수 이름"""

    DATABASE_FILE: str = "LEDGER_DATABASE_FILE"
