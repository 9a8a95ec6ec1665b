"""
날짜 유틸리티

분개 일자 / 기간 마감일은 'YYYY-MM-DD' 달력 날짜로 저장.
ISO 문자열은 사전순 비교 = 날짜순 비교이므로 SQL에서도 그대로 비교 가능.
"""

import re
from datetime import date, datetime, timedelta, timezone

# 엄격한 ISO 날짜 형식 (2024-01-15)
ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# 표시용 타임존 표기 (UTC, UTC+1, UTC-05:30)
UTC_OFFSET_PATTERN = re.compile(r"^UTC(?:([+-])(\d{1,2})(?::?(\d{2}))?)?$")


def parse_iso_date(value: date | str) -> date:
    """달력 날짜 파싱

    Args:
        value: date 객체 또는 'YYYY-MM-DD' 문자열

    Returns:
        date 객체

    Raises:
        ValueError: 형식이 잘못되었거나 존재하지 않는 날짜 (2024-02-30 등)

    Example:
        >>> parse_iso_date("2024-01-15")
        datetime.date(2024, 1, 15)
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not ISO_DATE_PATTERN.match(value):
        raise ValueError(f"Invalid date: {value!r} (expected YYYY-MM-DD)")
    return date.fromisoformat(value)


def to_iso_date(value: date | str) -> str:
    """달력 날짜를 저장용 'YYYY-MM-DD' 문자열로 변환"""
    return parse_iso_date(value).isoformat()


def now_utc() -> datetime:
    """현재 UTC 시간 반환 (타임존 명시)"""
    return datetime.now(timezone.utc)


def parse_utc_offset(value: str) -> timezone:
    """'UTC+1' 형식의 표시용 타임존 파싱

    Args:
        value: UTC, UTC+1, UTC-05:30 등

    Returns:
        고정 오프셋 timezone

    Raises:
        ValueError: 형식 오류 또는 ±14시간 초과
    """
    match = UTC_OFFSET_PATTERN.match(value.strip())
    if match is None:
        raise ValueError(f"Invalid timezone: {value!r} (expected UTC±H[:MM])")

    sign, hours, minutes = match.groups()
    if sign is None:
        return timezone.utc

    offset = timedelta(hours=int(hours), minutes=int(minutes or 0))
    if offset > timedelta(hours=14):
        raise ValueError(f"Invalid timezone: {value!r} (offset out of range)")
    return timezone(-offset if sign == "-" else offset, name=value.strip())
