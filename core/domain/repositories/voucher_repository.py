"""
바우처 저장소 인터페이스
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

from ..models.voucher import VoucherRecord


@dataclass
class AddVouchersResult:
    """바우처 추가 결과"""
    added: int
    duplicates: int


class VoucherRepository(ABC):
    """카테고리별 바우처 원장 접근 인터페이스"""

    @abstractmethod
    async def get_vouchers(self, category: str) -> List[VoucherRecord]:
        """원장 조회 (없으면 빈 리스트)"""
        pass

    @abstractmethod
    async def save_vouchers(self, category: str, vouchers: List[VoucherRecord]) -> None:
        """원장 전체 교체"""
        pass

    @abstractmethod
    async def add_vouchers(self, category: str, new_vouchers: List[VoucherRecord]) -> AddVouchersResult:
        """중복 코드를 제외하고 원장 끝에 추가"""
        pass

    @abstractmethod
    async def clear_vouchers(self, category: str) -> None:
        """원장 비우기"""
        pass

    @abstractmethod
    async def list_categories(self) -> List[str]:
        """원장이 있는 카테고리 목록"""
        pass
