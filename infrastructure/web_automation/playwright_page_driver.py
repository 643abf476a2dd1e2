from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional

from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    TimeoutError,
    async_playwright,
)

from core.domain.models.wait_policy import WaitPolicy
from core.domain.repositories.page_driver import PageDriver
from shared.exceptions.automation_exceptions import PageDriverException, PageReloadException
from utils.optimized_logger import ErrorCode, OptimizedLogger


class PlaywrightPageDriver(PageDriver):
    """Playwright 페이지 드라이버

    로그인 세션을 재사용하기 위해 브라우저 프로필(user_data_dir)로 persistent context를 열거나,
    cdp_url이 설정된 경우 이미 실행 중인 Chrome에 연결한다.
    """

    def __init__(self, playwright_config: Dict[str, Any], wait_policy: WaitPolicy,
                 logger: Optional[OptimizedLogger] = None, ready_selector: Optional[str] = None):
        self.playwright_config = playwright_config
        self.wait_policy = wait_policy
        self.logger = logger or OptimizedLogger("page_driver", "driver")
        self.ready_selector = ready_selector
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None
        self._owns_context = True

    @property
    def timeout(self) -> int:
        return int(self.playwright_config.get('timeout', 30000))

    @property
    def load_state(self) -> str:
        return self.playwright_config.get('load_state', 'load')

    async def start(self) -> None:
        """브라우저/컨텍스트 초기화"""
        try:
            self.playwright = await async_playwright().start()

            cdp_url = self.playwright_config.get('cdp_url')
            if cdp_url:
                # 이미 로그인된 사용자 브라우저에 연결 - 종료 시 브라우저는 닫지 않음
                self.browser = await self.playwright.chromium.connect_over_cdp(cdp_url, timeout=self.timeout)
                self._owns_context = False
                self.context = self.browser.contexts[0] if self.browser.contexts else await self.browser.new_context()
                self.page = self.context.pages[0] if self.context.pages else await self.context.new_page()
            else:
                user_data_dir = Path(self.playwright_config.get('user_data_dir', '~/.voucher_loader/browser_profile')).expanduser()
                user_data_dir.mkdir(parents=True, exist_ok=True)
                viewport = self.playwright_config.get('viewport', {'width': 1280, 'height': 800})

                self.context = await self.playwright.chromium.launch_persistent_context(
                    str(user_data_dir),
                    headless=self.playwright_config.get('headless', False),
                    slow_mo=self.playwright_config.get('slow_mo', 0),
                    viewport=viewport,
                    args=self.playwright_config.get('args', []),
                )
                self.page = self.context.pages[0] if self.context.pages else await self.context.new_page()

            self.page.set_default_timeout(self.timeout)
            self.page.set_default_navigation_timeout(self.timeout)

            self.logger.log_info("[성공] 브라우저 초기화 완료")

        except PlaywrightError as e:
            self.logger.log_error(ErrorCode.FAIL_SETUP, "브라우저초기화", str(e))
            await self.cleanup()
            raise PageDriverException(f"브라우저 초기화 실패: {e}")

    async def open(self, url: str) -> None:
        """시작 페이지로 이동"""
        self._require_page()
        try:
            await self.page.goto(url, wait_until=self.load_state, timeout=self.timeout)
        except PlaywrightError as e:
            self.logger.log_error(ErrorCode.FAIL_PAGE, "페이지이동", str(e))
            raise PageDriverException(f"페이지 이동 실패 ({url}): {e}")

    @property
    def current_url(self) -> Optional[str]:
        if self.page is None or self.page.is_closed():
            return None
        return self.page.url

    async def reload_and_wait(self) -> None:
        """새로고침 → 로드 완료 → (준비 셀렉터) → 안정화 대기"""
        self._require_page()
        try:
            await self.page.reload(wait_until=self.load_state, timeout=self.timeout)
            if self.ready_selector:
                await self.page.wait_for_selector(self.ready_selector, timeout=self.timeout)
        except TimeoutError as e:
            self.logger.log_error(ErrorCode.FAIL_RELOAD, "새로고침", f"시간 초과: {e}")
            raise PageReloadException(f"페이지 새로고침 시간 초과: {e}")
        except PlaywrightError as e:
            self.logger.log_error(ErrorCode.FAIL_RELOAD, "새로고침", str(e))
            raise PageReloadException(f"페이지 새로고침 실패: {e}")

        await self.wait_policy.settle_after_reload()

    async def invoke(self, action: Callable[..., Awaitable[Any]], *args: Any) -> Any:
        """페이지를 첫 인자로 전략 액션 실행"""
        self._require_page()
        try:
            return await action(self.page, *args)
        except PlaywrightError as e:
            name = getattr(action, '__qualname__', repr(action))
            self.logger.log_error(ErrorCode.FAIL_DRIVER, "액션실행", f"{name}: {e}")
            raise PageDriverException(f"페이지 액션 실행 실패 ({name}): {e}")

    def _require_page(self) -> None:
        if self.page is None or self.page.is_closed():
            raise PageDriverException("열린 페이지가 없습니다")

    async def cleanup(self) -> None:
        """리소스 정리"""
        try:
            if self._owns_context and self.context:
                await self.context.close()
            if self.browser and self._owns_context:
                await self.browser.close()
            if self.playwright:
                await self.playwright.stop()
        except PlaywrightError as e:
            self.logger.log_warning(f"정리 중 경고: {str(e)}")
        finally:
            self.page = None
            self.context = None
            self.browser = None
            self.playwright = None

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.cleanup()
