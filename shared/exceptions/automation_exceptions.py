"""
자동화 관련 커스텀 예외
"""


class AutomationException(Exception):
    """자동화 기본 예외"""
    pass


class ConfigurationException(AutomationException):
    """설정 관련 예외"""
    pass


class UnknownBrandException(AutomationException):
    """등록되지 않은 브랜드 예외"""
    pass


class WrongPageException(AutomationException):
    """현재 페이지가 바우처 등록 페이지가 아닌 경우"""

    def __init__(self, message: str, outcome=None):
        super().__init__(message)
        self.outcome = outcome


class PageDriverException(AutomationException):
    """페이지 통신/스크립트 실행 실패 예외 (실행 전체 중단 대상)"""
    pass


class PageReloadException(PageDriverException):
    """페이지 새로고침 실패 예외"""
    pass


class StorageException(AutomationException):
    """바우처 저장소 읽기/쓰기 예외"""
    pass
