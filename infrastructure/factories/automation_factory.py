"""
자동화 컴포넌트 팩토리
"""
from typing import Dict, Optional

from adapters.brand_registry import BrandRegistry, build_brand_registry
from core.application.use_cases.redeem_vouchers_use_case import RedeemVouchersUseCase
from core.domain.repositories.voucher_repository import VoucherRepository
from infrastructure.config.config_manager import ConfigManager
from infrastructure.logging.structured_logger import StructuredLogger
from infrastructure.notifications.log_notification_adapter import LogNotificationAdapter
from infrastructure.notifications.notification_service import (
    CompositeNotificationService, NotificationService
)
from infrastructure.notifications.telegram_adapter import TelegramAdapter
from infrastructure.storage.json_voucher_store import JsonVoucherStore
from infrastructure.web_automation.playwright_page_driver import PlaywrightPageDriver
from utils.optimized_logger import OptimizedLogger


class AutomationFactory:
    """자동화 컴포넌트 팩토리"""

    def __init__(self, config_manager: ConfigManager):
        self.config_manager = config_manager
        self._loggers: Dict[str, StructuredLogger] = {}
        self._notification_service: Optional[NotificationService] = None
        self._voucher_repository: Optional[VoucherRepository] = None
        self._brand_registry: Optional[BrandRegistry] = None

    def create_logger(self, name: str) -> StructuredLogger:
        """로거 생성"""
        if name not in self._loggers:
            log_config = self.config_manager.get_logging_config()
            self._loggers[name] = StructuredLogger(name, log_config)
        return self._loggers[name]

    def create_notification_service(self) -> NotificationService:
        """알림 서비스 생성 (텔레그램 설정이 있으면 로그 + 텔레그램)"""
        if self._notification_service is None:
            services = [LogNotificationAdapter(self.create_logger("notification"))]
            telegram_config = self.config_manager.get_telegram_config()
            if telegram_config:
                services.append(TelegramAdapter(telegram_config, self.create_logger("telegram")))
            self._notification_service = services[0] if len(services) == 1 else CompositeNotificationService(services)
        return self._notification_service

    def create_voucher_repository(self) -> VoucherRepository:
        """바우처 저장소 생성"""
        if self._voucher_repository is None:
            self._voucher_repository = JsonVoucherStore(
                path=self.config_manager.get_storage_path(),
                logger=self.create_logger("voucher_store"),
                notification_service=self.create_notification_service()
            )
        return self._voucher_repository

    def create_brand_registry(self) -> BrandRegistry:
        """브랜드 레지스트리 생성"""
        if self._brand_registry is None:
            self._brand_registry = build_brand_registry(self.config_manager)
        return self._brand_registry

    def create_page_driver(self, brand_id: str) -> PlaywrightPageDriver:
        """브랜드별 페이지 드라이버 생성"""
        brand_config = self.config_manager.get_brand_config(brand_id)
        return PlaywrightPageDriver(
            playwright_config=self.config_manager.get_playwright_config(),
            wait_policy=self.config_manager.get_wait_policy(),
            logger=OptimizedLogger("page_driver", brand_config.name),
            ready_selector=brand_config.ready_selector
        )

    def create_redeem_vouchers_use_case(self, page_driver: PlaywrightPageDriver) -> RedeemVouchersUseCase:
        """바우처 등록 유스케이스 생성"""
        return RedeemVouchersUseCase(
            voucher_repository=self.create_voucher_repository(),
            page_driver=page_driver,
            brand_registry=self.create_brand_registry(),
            notification_service=self.create_notification_service(),
            logger=self.create_logger("use_case"),
            wait_policy=self.config_manager.get_wait_policy()
        )
