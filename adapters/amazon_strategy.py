"""Amazon 바우처 전략"""

from typing import Optional

from playwright.async_api import Page, TimeoutError

from adapters.brand_strategy import BrandStrategy
from core.domain.models.submission import SubmissionResult
from utils.optimized_logger import ErrorCode


class AmazonStrategy(BrandStrategy):
    """Amazon Pay 기프트카드 등록 - PIN 없음, 잔액 검증 미지원"""

    async def submit(self, page: Page, code: str, pin: Optional[str] = None) -> SubmissionResult:
        try:
            code_input = await self._find_visible(page, 'code_input')
            add_button = await self._find_visible(page, 'submit_button')
            if code_input is None or add_button is None:
                return SubmissionResult.fail("기프트카드 입력란 또는 등록 버튼을 찾을 수 없습니다")

            await code_input.fill(code)
            await add_button.click()

        except TimeoutError as e:
            self.logger.log_error(ErrorCode.FAIL_SUBMIT, "바우처제출", str(e))
            return SubmissionResult.fail(f"페이지 요소 조작 시간 초과: {e}")

        self.logger.log_success("바우처제출", code)
        return SubmissionResult.ok(f"바우처 {code} 제출 완료")
