"""Myntra 바우처 전략"""

from typing import Optional

from playwright.async_api import Page, TimeoutError

from adapters.brand_strategy import BrandStrategy
from core.domain.models.submission import SubmissionResult
from utils.optimized_logger import ErrorCode


class MyntraStrategy(BrandStrategy):
    """Myntra Credit 페이지 기프트카드 등록

    1. 'Add Gift Card' 버튼으로 입력 폼 열기
    2. 카드 번호/PIN 입력
    3. 최종 등록 버튼 클릭
    """

    supports_balance = True

    async def submit(self, page: Page, code: str, pin: Optional[str] = None) -> SubmissionResult:
        if not pin:
            return SubmissionResult.fail(f"바우처 {code}의 PIN이 없습니다")

        try:
            open_button = await self._find_visible(page, 'open_form_button')
            if open_button is None:
                return SubmissionResult.fail("기프트카드 추가 버튼을 찾을 수 없습니다")
            await open_button.click()
            await self._pause(page, 'form_open_delay', 1.0)

            code_input = await self._find_visible(page, 'code_input')
            pin_input = await self._find_visible(page, 'pin_input')
            if code_input is None or pin_input is None:
                return SubmissionResult.fail("버튼 클릭 후 바우처 입력란을 찾을 수 없습니다")

            await code_input.fill(code)
            await pin_input.fill(pin)
            await self._pause(page, 'fill_delay', 0.5)

            submit_button = await self._find_visible(page, 'submit_button')
            if submit_button is None:
                return SubmissionResult.fail("최종 등록 버튼을 찾을 수 없습니다")
            await submit_button.click()

        except TimeoutError as e:
            self.logger.log_error(ErrorCode.FAIL_SUBMIT, "바우처제출", str(e))
            return SubmissionResult.fail(f"페이지 요소 조작 시간 초과: {e}")

        self.logger.log_success("바우처제출", code)
        return SubmissionResult.ok(f"바우처 {code} 제출 완료")

    async def read_balance(self, page: Page) -> float:
        return await self._read_amount(page, 'balance')
