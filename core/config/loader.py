"""
설정 로더

settings.yaml 로드 및 Ledger 설정 생성.
파일이 없으면 모든 항목이 기본값(core.constants.Defaults).
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from core.constants import PROJECT_ROOT, Defaults, EnvVars, Paths
from core.utils.dates import parse_utc_offset


@dataclass(frozen=True)
class DisplaySettings:
    """표시 설정 (getSettings 액션 응답)"""

    date_format: str = Defaults.DATE_FORMAT
    currency_symbol: str = Defaults.CURRENCY_SYMBOL
    timezone: str = Defaults.TIMEZONE

    def to_dict(self) -> dict[str, str]:
        return {
            "date_format": self.date_format,
            "currency_symbol": self.currency_symbol,
            "timezone": self.timezone,
        }


@dataclass(frozen=True)
class LedgerSettings:
    """애플리케이션 설정 (settings.yaml에서 로드)

    불변 데이터 구조로 설정 변경 방지
    """

    database_file: str = Defaults.DATABASE_FILE
    display: DisplaySettings = field(default_factory=DisplaySettings)
    web_host: str = Defaults.WEB_HOST
    web_port: int = Defaults.WEB_PORT

    @property
    def db_path(self) -> Path:
        """DB 파일 경로 (상대 경로는 프로젝트 루트 기준)"""
        path = Path(self.database_file)
        if not path.is_absolute():
            path = PROJECT_ROOT / path
        return path


class SettingsLoadError(Exception):
    """Settings 로드 실패 예외"""

    pass


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise SettingsLoadError(f"settings.yaml의 '{name}' 섹션은 매핑이어야 합니다")
    return value


def load_settings(path: Path | None = None) -> LedgerSettings:
    """settings.yaml 파일 로드

    Args:
        path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        LedgerSettings 인스턴스 (파일이 없으면 기본값)

    Raises:
        SettingsLoadError: 형식이 잘못된 경우
    """
    if path is None:
        path = Paths.SETTINGS_FILE

    data: dict[str, Any] = {}
    if path.exists():
        try:
            content = path.read_text(encoding="utf-8")
            loaded = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise SettingsLoadError(f"settings.yaml 파싱 실패: {e}") from e

        if loaded is not None and not isinstance(loaded, dict):
            raise SettingsLoadError("settings.yaml 최상위는 매핑이어야 합니다")
        data = loaded or {}

    database = _section(data, "database")
    display = _section(data, "display")
    web = _section(data, "web")

    timezone_name = str(display.get("timezone", Defaults.TIMEZONE))
    try:
        parse_utc_offset(timezone_name)
    except ValueError as e:
        raise SettingsLoadError(f"유효하지 않은 timezone입니다: '{timezone_name}'") from e

    try:
        web_port = int(web.get("port", Defaults.WEB_PORT))
    except (TypeError, ValueError) as e:
        raise SettingsLoadError(f"유효하지 않은 web.port입니다: {web.get('port')!r}") from e

    # 환경 변수가 파일 설정보다 우선
    database_file = os.environ.get(EnvVars.DATABASE_FILE) or str(
        database.get("file", Defaults.DATABASE_FILE)
    )

    return LedgerSettings(
        database_file=database_file,
        display=DisplaySettings(
            date_format=str(display.get("date_format", Defaults.DATE_FORMAT)),
            currency_symbol=str(display.get("currency_symbol", Defaults.CURRENCY_SYMBOL)),
            timezone=timezone_name,
        ),
        web_host=str(web.get("host", Defaults.WEB_HOST)),
        web_port=web_port,
    )


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    settings.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "Settings | None" = None
    _settings: LedgerSettings | None = None

    def __new__(cls, settings_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings_path: Path | None = None) -> None:
        if self._settings is None:
            type(self)._settings = load_settings(settings_path)

    @property
    def ledger(self) -> LedgerSettings:
        assert self._settings is not None
        return self._settings

    @property
    def db_path(self) -> Path:
        """DB 경로"""
        return self.ledger.db_path

    @property
    def display(self) -> DisplaySettings:
        """표시 설정"""
        return self.ledger.display

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._settings = None


def get_settings(settings_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환

    Args:
        settings_path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 싱글턴 인스턴스
    """
    return Settings(settings_path)
