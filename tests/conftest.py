"""Shared fixtures and fakes for the test suite."""
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pytest

from adapters.brand_registry import BrandRegistry
from core.application.use_cases.redeem_vouchers_use_case import RedeemVouchersUseCase
from core.domain.models.brand import BrandDescriptor
from core.domain.models.submission import BALANCE_UNAVAILABLE, SubmissionResult
from core.domain.models.voucher import VoucherRecord, VoucherStatus
from core.domain.models.wait_policy import WaitPolicy
from core.domain.repositories.page_driver import PageDriver
from infrastructure.logging.structured_logger import StructuredLogger
from infrastructure.notifications.notification_service import NotificationLevel, NotificationService
from infrastructure.storage.json_voucher_store import JsonVoucherStore
from shared.exceptions.automation_exceptions import PageReloadException

MYNTRA_SITE = "https://www.myntra.com/"
MYNTRA_LOAD = "https://www.myntra.com/my/myntracredit"


class FakeNotifier(NotificationService):
    def __init__(self):
        self.messages: List[Tuple[str, NotificationLevel]] = []

    async def notify(self, message, level=NotificationLevel.INFO, duration_hint=None):
        self.messages.append((message, level))

    def of_level(self, level: NotificationLevel) -> List[str]:
        return [message for message, msg_level in self.messages if msg_level == level]


class FakeStrategy:
    """Scripted brand strategy: per-code submit results and a queue of balance readings."""

    def __init__(self, supports_balance=False, balances=None, results=None, raise_on=None):
        self.supports_balance = supports_balance
        self.balances = list(balances or [])
        self.results: Dict[str, SubmissionResult] = dict(results or {})
        self.raise_on: Dict[str, Exception] = dict(raise_on or {})
        self.submitted: List[Tuple[str, Optional[str]]] = []
        self.balance_reads = 0

    async def submit(self, page, code, pin=None):
        self.submitted.append((code, pin))
        if code in self.raise_on:
            raise self.raise_on[code]
        return self.results.get(code, SubmissionResult.ok(f"Voucher {code} submitted."))

    async def read_balance(self, page):
        self.balance_reads += 1
        if not self.balances:
            return BALANCE_UNAVAILABLE
        return self.balances.pop(0)


class FakePageDriver(PageDriver):
    def __init__(self, url: Optional[str] = MYNTRA_LOAD, reload_failures=()):
        self.url = url
        self.page = object()
        self.reloads = 0
        self.invocations: List[str] = []
        self.reload_failures = set(reload_failures)

    @property
    def current_url(self):
        return self.url

    async def reload_and_wait(self):
        self.reloads += 1
        if self.reloads in self.reload_failures:
            raise PageReloadException("reload timed out")

    async def invoke(self, action, *args: Any):
        self.invocations.append(action.__name__)
        return await action(self.page, *args)

    @property
    def call_count(self) -> int:
        return self.reloads + len(self.invocations)


class RecordingStore(JsonVoucherStore):
    """JsonVoucherStore that keeps a snapshot of every saved ledger."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.saves: List[List[Tuple[str, VoucherStatus]]] = []

    async def save_vouchers(self, category, vouchers):
        self.saves.append([(v.code, v.status) for v in vouchers])
        await super().save_vouchers(category, vouchers)


def voucher(code, value="50", status=VoucherStatus.AVAILABLE, pin="123456", expiry=None):
    return VoucherRecord(code=code, pin=pin, value=value, expiry=expiry, status=status)


def myntra_descriptor(strategy) -> BrandDescriptor:
    return BrandDescriptor(
        brand_id="myntra",
        name="Myntra",
        site_url=MYNTRA_SITE,
        load_url=MYNTRA_LOAD,
        strategy=strategy,
    )


@pytest.fixture
def logger():
    return StructuredLogger("tests", {"level": "DEBUG"})


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def store_path(tmp_path) -> Path:
    return tmp_path / "vouchers.json"


@pytest.fixture
def store(store_path, logger, notifier):
    return RecordingStore(store_path, logger, notifier)


@pytest.fixture
def make_use_case(store, notifier, logger):
    def _make(strategy, driver=None, registry=None):
        driver = driver or FakePageDriver()
        registry = registry or BrandRegistry([myntra_descriptor(strategy)])
        use_case = RedeemVouchersUseCase(
            voucher_repository=store,
            page_driver=driver,
            brand_registry=registry,
            notification_service=notifier,
            logger=logger,
            wait_policy=WaitPolicy.immediate(),
        )
        return use_case, driver
    return _make


async def seed(store: RecordingStore, category: str, records: List[VoucherRecord]) -> None:
    await store.save_vouchers(category, records)
    store.saves.clear()
