"""
금액 문자열 파싱 유틸리티
바우처 금액과 페이지 잔액 표기(₹ 1,000.00 등)를 Decimal로 변환
"""
import re
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

# 통화 기호, 천 단위 구분자, 공백 제거
_STRIP_PATTERN = re.compile(r'[₹$€£,\s]|Rs\.?|INR', re.IGNORECASE)

ZERO = Decimal('0')


def parse_amount(text: Optional[Union[str, int, float, Decimal]]) -> Optional[Decimal]:
    """금액 텍스트를 Decimal로 변환. 해석할 수 없으면 None"""
    if text is None:
        return None

    if isinstance(text, Decimal):
        value = text
    elif isinstance(text, (int, float)):
        value = Decimal(str(text))
    else:
        cleaned = _STRIP_PATTERN.sub('', str(text))
        if not cleaned:
            return None
        try:
            value = Decimal(cleaned)
        except InvalidOperation:
            return None

    if not value.is_finite():
        return None
    return value


def amount_or_zero(text: Optional[Union[str, int, float, Decimal]]) -> Decimal:
    """집계용 금액 변환 - 해석 불가 또는 음수는 0으로 취급"""
    value = parse_amount(text)
    if value is None or value < ZERO:
        return ZERO
    return value


def format_amount(value: Decimal) -> str:
    """소수점 둘째 자리까지 표기"""
    return f"{value:.2f}"
