"""
로그 알림 어댑터
"""
from typing import Optional

from infrastructure.logging.structured_logger import StructuredLogger
from infrastructure.notifications.notification_service import NotificationLevel, NotificationService


class LogNotificationAdapter(NotificationService):
    """알림 메시지를 구조화 로그로 남기는 어댑터 (CLI 기본 알림)"""

    def __init__(self, logger: StructuredLogger):
        self.logger = logger

    async def notify(self, message: str, level: NotificationLevel = NotificationLevel.INFO,
                     duration_hint: Optional[float] = None) -> None:
        extra = {"level": level.value}
        if duration_hint is not None:
            extra["duration"] = duration_hint

        if level == NotificationLevel.ERROR:
            self.logger.error(message, extra=extra)
        else:
            self.logger.info(message, extra=extra)
