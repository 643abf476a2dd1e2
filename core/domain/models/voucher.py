"""
바우처 도메인 모델
"""
from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from shared.utils.amount_utils import amount_or_zero


class VoucherStatus(Enum):
    """바우처 상태"""
    AVAILABLE = "AVAILABLE"
    REDEEMED = "REDEEMED"
    ERROR = "ERROR"

    @classmethod
    def parse(cls, raw: Optional[str]) -> 'VoucherStatus':
        """저장된 상태 문자열 변환 (값이 없으면 AVAILABLE)"""
        if not raw:
            return cls.AVAILABLE
        return cls(str(raw).upper())


# 이전 버전 저장 데이터의 키 이름
_LEGACY_KEYS = {
    'code': 'VoucherCode',
    'pin': 'VoucherPin',
    'value': 'VoucherValue',
    'expiry': 'VoucherExpiry',
}


@dataclass
class VoucherRecord:
    """바우처 엔티티 - code가 카테고리 내 자연키"""
    code: str
    pin: Optional[str] = None
    value: str = ""
    expiry: Optional[str] = None
    status: VoucherStatus = VoucherStatus.AVAILABLE

    @property
    def amount(self) -> Decimal:
        """금액 (해석 불가 시 0)"""
        return amount_or_zero(self.value)

    def is_redeemed(self) -> bool:
        return self.status == VoucherStatus.REDEEMED

    def is_eligible(self) -> bool:
        """등록 시도 대상 여부 - REDEEMED가 아니면 모두 대상 (ERROR 재시도 포함)"""
        return self.status != VoucherStatus.REDEEMED

    def mark_redeemed(self) -> None:
        self.status = VoucherStatus.REDEEMED

    def mark_error(self) -> None:
        if self.is_redeemed():
            raise ValueError(f"이미 등록 완료된 바우처입니다: {self.code}")
        self.status = VoucherStatus.ERROR

    def as_available(self) -> 'VoucherRecord':
        """AVAILABLE 상태의 사본"""
        return replace(self, status=VoucherStatus.AVAILABLE)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'code': self.code,
            'pin': self.pin,
            'value': self.value,
            'expiry': self.expiry,
            'status': self.status.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'VoucherRecord':
        """딕셔너리에서 VoucherRecord 생성 (이전 키 이름도 허용)"""
        def pick(key: str) -> Any:
            if key in data:
                return data[key]
            return data.get(_LEGACY_KEYS[key])

        code = pick('code')
        if not code:
            raise ValueError(f"바우처 코드가 없습니다: {data}")

        value = pick('value')
        return cls(
            code=str(code),
            pin=pick('pin'),
            value="" if value is None else str(value),
            expiry=pick('expiry'),
            status=VoucherStatus.parse(data.get('status')),
        )


@dataclass
class VoucherStats:
    """카테고리별 금액 집계"""
    available_value: Decimal = Decimal('0')
    redeemed_value: Decimal = Decimal('0')
    failed_value: Decimal = Decimal('0')
    counts: Dict[VoucherStatus, int] = field(
        default_factory=lambda: {status: 0 for status in VoucherStatus}
    )

    @property
    def total_count(self) -> int:
        return sum(self.counts.values())

    @classmethod
    def from_vouchers(cls, vouchers: Iterable[VoucherRecord]) -> 'VoucherStats':
        stats = cls()
        for voucher in vouchers:
            stats.counts[voucher.status] += 1
            if voucher.status == VoucherStatus.AVAILABLE:
                stats.available_value += voucher.amount
            elif voucher.status == VoucherStatus.REDEEMED:
                stats.redeemed_value += voucher.amount
            else:
                stats.failed_value += voucher.amount
        return stats


def select_eligible(vouchers: List[VoucherRecord]) -> List[VoucherRecord]:
    """원장 순서를 유지한 채 등록 대상 바우처 선택"""
    return [voucher for voucher in vouchers if voucher.is_eligible()]
