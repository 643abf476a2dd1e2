"""
알림 서비스
"""
from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional


class NotificationLevel(Enum):
    """알림 수준"""
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


class NotificationService(ABC):
    """알림 서비스 인터페이스 - 전송 실패를 호출자에게 전파하지 않는다"""

    @abstractmethod
    async def notify(self, message: str, level: NotificationLevel = NotificationLevel.INFO,
                     duration_hint: Optional[float] = None) -> None:
        """사용자 알림 전송"""
        pass


class CompositeNotificationService(NotificationService):
    """여러 알림 서비스로 동일한 메시지 전송"""

    def __init__(self, services: List[NotificationService]):
        self.services = list(services)

    async def notify(self, message: str, level: NotificationLevel = NotificationLevel.INFO,
                     duration_hint: Optional[float] = None) -> None:
        for service in self.services:
            await service.notify(message, level, duration_hint)
