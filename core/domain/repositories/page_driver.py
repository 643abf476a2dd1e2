"""
페이지 드라이버 인터페이스
"""
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Optional


class PageDriver(ABC):
    """현재 열린 페이지에 대한 새로고침/액션 실행 인터페이스

    액션이 반환하는 실패 결과(SubmissionResult.success == False)는 정상 결과이고,
    통신/실행 자체가 실패한 경우에만 PageDriverException을 발생시킨다.
    """

    @property
    @abstractmethod
    def current_url(self) -> Optional[str]:
        """현재 페이지 URL"""
        pass

    @abstractmethod
    async def reload_and_wait(self) -> None:
        """페이지 새로고침 후 로드 완료까지 대기 (실패 시 PageReloadException)"""
        pass

    @abstractmethod
    async def invoke(self, action: Callable[..., Awaitable[Any]], *args: Any) -> Any:
        """페이지를 첫 인자로 액션 실행 (실패 시 PageDriverException)"""
        pass
