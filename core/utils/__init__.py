"""
유틸리티 패키지

날짜 파싱, 타임존 처리 등 공통 유틸리티
"""

from core.utils.dates import (
    ISO_DATE_PATTERN,
    now_utc,
    parse_iso_date,
    parse_utc_offset,
    to_iso_date,
)

__all__ = [
    "ISO_DATE_PATTERN",
    "now_utc",
    "parse_iso_date",
    "parse_utc_offset",
    "to_iso_date",
]
