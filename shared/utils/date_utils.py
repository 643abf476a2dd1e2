"""
날짜 관련 유틸리티
"""
from datetime import date, datetime
from typing import Optional


class DateUtils:
    """날짜 유틸리티 클래스"""

    # 메일/수동 입력에서 보이는 유효기간 표기
    _expiry_formats = (
        '%Y-%m-%d',
        '%d-%m-%Y',
        '%d/%m/%Y',
        '%d.%m.%Y',
        '%d %b %Y',
        '%d %B %Y',
        '%b %d, %Y',
        '%B %d, %Y',
    )

    @classmethod
    def parse_expiry(cls, text: Optional[str]) -> Optional[date]:
        """유효기간 문자열을 날짜로 변환 (인식 불가 시 None)"""
        if not text:
            return None

        cleaned = text.strip()
        for fmt in cls._expiry_formats:
            try:
                return datetime.strptime(cleaned, fmt).date()
            except ValueError:
                continue
        return None

    @classmethod
    def is_expired(cls, text: Optional[str], today: Optional[date] = None) -> bool:
        """유효기간 경과 여부 (날짜를 해석할 수 없으면 False)"""
        expiry = cls.parse_expiry(text)
        if expiry is None:
            return False
        return expiry < (today or date.today())
