"""브랜드 페이지 전략 표준 인터페이스"""

from abc import ABC, abstractmethod
from typing import Optional

from playwright.async_api import Locator, Page, TimeoutError

from core.domain.models.brand import BrandConfig
from core.domain.models.submission import BALANCE_UNAVAILABLE, SubmissionResult
from shared.utils.amount_utils import parse_amount
from utils.optimized_logger import ErrorCode, OptimizedLogger


class BrandStrategy(ABC):
    """브랜드별 바우처 제출/잔액 조회 전략

    요소를 찾지 못하는 등 페이지 내부 문제는 실패 결과로 반환하고,
    그 외 Playwright 오류(브라우저 종료, 통신 오류 등)는 그대로 전파한다.
    """

    supports_balance = False

    def __init__(self, brand_config: BrandConfig, logger: Optional[OptimizedLogger] = None):
        self.brand_config = brand_config
        self.logger = logger or OptimizedLogger(f"{brand_config.brand_id}_strategy", brand_config.name)

    @abstractmethod
    async def submit(self, page: Page, code: str, pin: Optional[str] = None) -> SubmissionResult:
        """바우처 코드/PIN 입력 후 제출"""
        pass

    async def read_balance(self, page: Page) -> float:
        """현재 잔액 조회 (조회 불가 시 BALANCE_UNAVAILABLE)"""
        return BALANCE_UNAVAILABLE

    @property
    def selector_timeout_ms(self) -> float:
        return self.brand_config.get_timing('selector_timeout', 5.0) * 1000

    async def _find_visible(self, page: Page, key: str) -> Optional[Locator]:
        """설정된 셀렉터의 요소가 보일 때까지 대기 (없으면 None)"""
        selector = self.brand_config.get_selector(key)
        if not selector:
            self.logger.log_warning(f"셀렉터 설정 없음: {key}")
            return None

        locator = page.locator(selector).first
        try:
            await locator.wait_for(state='visible', timeout=self.selector_timeout_ms)
            return locator
        except TimeoutError:
            self.logger.log_info(f"요소를 찾을 수 없음 ({key}: {selector})")
            return None

    async def _pause(self, page: Page, timing_key: str, default: float) -> None:
        seconds = self.brand_config.get_timing(timing_key, default)
        if seconds > 0:
            await page.wait_for_timeout(seconds * 1000)

    async def _read_amount(self, page: Page, key: str) -> float:
        """요소 텍스트에서 금액 추출 (₹ 1,000 → 1000.0)"""
        element = await self._find_visible(page, key)
        if element is None:
            self.logger.log_error(ErrorCode.FAIL_BALANCE, "잔액조회", "잔액 요소를 찾을 수 없음")
            return BALANCE_UNAVAILABLE

        try:
            text = (await element.inner_text()).strip()
        except TimeoutError:
            self.logger.log_error(ErrorCode.FAIL_BALANCE, "잔액조회", "잔액 텍스트 읽기 시간 초과")
            return BALANCE_UNAVAILABLE

        amount = parse_amount(text)
        if amount is None:
            self.logger.log_error(ErrorCode.FAIL_BALANCE, "잔액조회", f"잔액 파싱 실패: {text!r}")
            return BALANCE_UNAVAILABLE
        return float(amount)
