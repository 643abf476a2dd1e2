"""
텔레그램 알림 어댑터
"""
import asyncio
import aiohttp
from typing import Dict, Any, Optional

from infrastructure.notifications.notification_service import NotificationLevel, NotificationService
from infrastructure.logging.structured_logger import StructuredLogger


_LEVEL_PREFIX = {
    NotificationLevel.INFO: "ℹ️",
    NotificationLevel.SUCCESS: "✅",
    NotificationLevel.ERROR: "❌",
}

_LEVEL_ORDER = [NotificationLevel.INFO, NotificationLevel.SUCCESS, NotificationLevel.ERROR]


class TelegramAdapter(NotificationService):
    """텔레그램 알림 어댑터"""

    def __init__(self, telegram_config: Dict[str, Any], logger: StructuredLogger):
        self.bot_token = telegram_config['bot_token']
        self.chat_id = telegram_config['chat_id']
        self.max_retries = telegram_config.get('max_retries', 3)
        self.retry_delay = telegram_config.get('retry_delay', 1.0)
        self.min_level = NotificationLevel(telegram_config.get('min_level', 'info'))
        self.logger = logger

        self.base_url = f"https://api.telegram.org/bot{self.bot_token}"

    def should_send(self, level: NotificationLevel) -> bool:
        """최소 알림 수준 이상인지 확인"""
        return _LEVEL_ORDER.index(level) >= _LEVEL_ORDER.index(self.min_level)

    def format_message(self, message: str, level: NotificationLevel) -> str:
        return f"{_LEVEL_PREFIX[level]} {message}"

    async def notify(self, message: str, level: NotificationLevel = NotificationLevel.INFO,
                     duration_hint: Optional[float] = None) -> None:
        """알림 전송 (결과는 로그로만 남김)"""
        if not self.should_send(level):
            return
        await self._send_message(self.format_message(message, level))

    async def _send_message(self, message: str) -> bool:
        """메시지 전송 (재시도 포함)"""
        for attempt in range(self.max_retries):
            try:
                async with aiohttp.ClientSession() as session:
                    url = f"{self.base_url}/sendMessage"
                    data = {
                        'chat_id': self.chat_id,
                        'text': message,
                    }

                    async with session.post(url, data=data) as response:
                        if response.status == 200:
                            self.logger.debug("텔레그램 알림 전송 성공")
                            return True
                        else:
                            error_text = await response.text()
                            self.logger.warning(
                                f"텔레그램 알림 전송 실패 (시도 {attempt + 1}/{self.max_retries})",
                                extra={"status": response.status, "error": error_text}
                            )

            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                self.logger.warning(
                    f"텔레그램 알림 전송 예외 (시도 {attempt + 1}/{self.max_retries}): {str(e)}"
                )

            if attempt < self.max_retries - 1:
                await asyncio.sleep(self.retry_delay)

        self.logger.error("텔레그램 알림 전송 최종 실패")
        return False
