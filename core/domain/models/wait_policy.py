"""
대기 정책 도메인 모델
페이지 스크립트 초기화, 잔액 반영, 바우처 간 간격 등 환경에 따라 조정되는 대기 시간
"""
import asyncio
import random
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Awaitable, Callable, Dict


@dataclass(frozen=True)
class WaitPolicy:
    """대기 정책"""
    reload_settle_seconds: float = 0.5
    verification_delay_seconds: float = 3.0
    between_vouchers_seconds: float = 5.0
    between_vouchers_jitter_seconds: float = 2.0
    balance_tolerance: Decimal = Decimal('0.01')
    sleep: Callable[[float], Awaitable[Any]] = field(default=asyncio.sleep, compare=False, repr=False)
    jitter: Callable[[float, float], float] = field(default=random.uniform, compare=False, repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WaitPolicy':
        """딕셔너리에서 WaitPolicy 생성"""
        return cls(
            reload_settle_seconds=float(data.get('reload_settle_seconds', 0.5)),
            verification_delay_seconds=float(data.get('verification_delay_seconds', 3.0)),
            between_vouchers_seconds=float(data.get('between_vouchers_seconds', 5.0)),
            between_vouchers_jitter_seconds=float(data.get('between_vouchers_jitter_seconds', 2.0)),
            balance_tolerance=Decimal(str(data.get('balance_tolerance', '0.01'))),
        )

    @classmethod
    def immediate(cls) -> 'WaitPolicy':
        """대기 없는 정책 (테스트/디버그용)"""
        return cls(
            reload_settle_seconds=0,
            verification_delay_seconds=0,
            between_vouchers_seconds=0,
            between_vouchers_jitter_seconds=0,
        )

    async def settle_after_reload(self) -> None:
        await self._wait(self.reload_settle_seconds)

    async def before_verification(self) -> None:
        await self._wait(self.verification_delay_seconds)

    async def between_vouchers(self) -> None:
        """사람처럼 보이도록 무작위 간격 추가"""
        delay = self.between_vouchers_seconds
        if self.between_vouchers_jitter_seconds > 0:
            delay += self.jitter(0, self.between_vouchers_jitter_seconds)
        await self._wait(delay)

    async def _wait(self, seconds: float) -> None:
        if seconds > 0:
            await self.sleep(seconds)
