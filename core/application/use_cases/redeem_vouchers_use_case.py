"""
바우처 등록 유스케이스
"""
import inspect
from decimal import Decimal
from typing import Awaitable, Callable, Optional, Set, Tuple, Union

from ..dto.redemption_dto import RedemptionRequest, RedemptionSummary, RunOutcome, RunPhase, RunProgress
from core.domain.models.brand import BrandDescriptor
from core.domain.models.submission import is_balance_available
from core.domain.models.voucher import VoucherRecord, VoucherStatus, select_eligible
from core.domain.models.wait_policy import WaitPolicy
from core.domain.repositories.page_driver import PageDriver
from core.domain.repositories.voucher_repository import VoucherRepository
from adapters.brand_registry import BrandRegistry
from infrastructure.logging.structured_logger import StructuredLogger
from infrastructure.notifications.notification_service import NotificationLevel, NotificationService
from shared.exceptions.automation_exceptions import (
    PageDriverException, StorageException, UnknownBrandException, WrongPageException
)
from shared.utils.amount_utils import format_amount


ProgressCallback = Callable[[RunProgress], Union[None, Awaitable[None]]]

# 실행 중인 카테고리 (같은 원장에 대한 동시 실행 방지)
_active_runs: Set[str] = set()


class ProgressCallbackError(Exception):
    """진행 콜백에서 발생한 예외"""
    pass


class RedeemVouchersUseCase:
    """바우처 등록 유스케이스

    원장 순서대로 한 번에 하나씩 바우처를 제출하고, 바우처마다 결과를 즉시 저장한다.
    페이지 내부 실패는 해당 바우처만 ERROR 처리하고 계속 진행하며,
    드라이버 통신 실패는 실행 전체를 중단한다.
    """

    def __init__(self,
                 voucher_repository: VoucherRepository,
                 page_driver: PageDriver,
                 brand_registry: BrandRegistry,
                 notification_service: NotificationService,
                 logger: StructuredLogger,
                 wait_policy: Optional[WaitPolicy] = None):
        self._voucher_repository = voucher_repository
        self._page_driver = page_driver
        self._brand_registry = brand_registry
        self._notification_service = notification_service
        self._logger = logger
        self._wait_policy = wait_policy or WaitPolicy()

    async def execute(self, request: RedemptionRequest,
                      on_progress: Optional[ProgressCallback] = None) -> RedemptionSummary:
        """바우처 등록 유스케이스 실행"""
        try:
            brand = self._brand_registry.get(request.brand_id)
        except UnknownBrandException as e:
            return await self._reject(request, RunOutcome.UNKNOWN_BRAND, str(e))

        category = brand.brand_id
        if category in _active_runs:
            return await self._reject(
                request, RunOutcome.ALREADY_RUNNING, f"{brand.name} 바우처 등록이 이미 진행 중입니다."
            )

        try:
            self._check_page(brand)
        except WrongPageException as e:
            return await self._reject(request, e.outcome, str(e))

        _active_runs.add(category)
        try:
            summary, emit_done = await self._run(request, brand, on_progress)
            if emit_done:
                await self._emit_final(on_progress, summary, RunPhase.DONE)
        finally:
            _active_runs.discard(category)

        # 잠금 해제 후 대기 상태로 복귀 (UI의 등록 버튼 재활성화 시점)
        if emit_done:
            await self._emit_final(on_progress, summary, RunPhase.IDLE)
        return summary

    def _check_page(self, brand: BrandDescriptor) -> None:
        """현재 페이지 위치 확인 (사이트 → 등록 페이지 순)"""
        url = self._page_driver.current_url
        if not brand.is_on_site(url):
            raise WrongPageException(
                f"{brand.name} 웹사이트로 이동한 뒤 다시 시도해 주세요.", RunOutcome.WRONG_SITE
            )
        if not brand.is_on_load_page(url):
            raise WrongPageException(
                f"{brand.name} 바우처 등록 페이지를 연 뒤 다시 시도해 주세요.", RunOutcome.WRONG_PAGE
            )

    async def _run(self, request: RedemptionRequest, brand: BrandDescriptor,
                   on_progress: Optional[ProgressCallback]) -> Tuple[RedemptionSummary, bool]:
        category = brand.brand_id
        ledger = await self._voucher_repository.get_vouchers(category)
        eligible = select_eligible(ledger)
        total = len(eligible)

        if not eligible:
            self._logger.info(f"[{category}] 등록할 바우처 없음", extra={"ledger": len(ledger)})
            await self._notify(f"{brand.name}에 등록할 바우처가 없습니다.", NotificationLevel.INFO)
            return self._summary(request, category, RunOutcome.NOTHING_TO_DO), True

        try:
            await self._emit(on_progress, RunProgress(category, RunPhase.RELOADING, total=total))
            await self._page_driver.reload_and_wait()
        except ProgressCallbackError as e:
            await self._abort_notice(category, None, e)
            return self._summary(request, category, RunOutcome.ABORTED, eligible=total,
                                 error_message=str(e)), False
        except PageDriverException as e:
            self._logger.error(f"[{category}] 새로고침 실패: {e}")
            await self._notify("페이지가 정상적으로 새로고침되지 않았습니다. 다시 시도해 주세요.",
                               NotificationLevel.ERROR)
            return self._summary(request, category, RunOutcome.RELOAD_FAILED, eligible=total,
                                 error_message=str(e)), True

        self._logger.info(f"[{category}] 바우처 등록 시작", extra={"eligible": total, "ledger": len(ledger)})
        await self._notify(f"{brand.name} 바우처 {total}건 등록을 시작합니다...", NotificationLevel.INFO)

        outcome = RunOutcome.COMPLETED
        error_message = None
        emit_done = True
        attempted = successful = failed = 0

        for index, voucher in enumerate(eligible, start=1):
            try:
                await self._emit(on_progress, RunProgress(
                    category, RunPhase.SUBMITTING, index, total, successful, failed
                ))
            except ProgressCallbackError as e:
                await self._abort_notice(category, voucher, e)
                outcome, error_message, emit_done = RunOutcome.ABORTED, str(e), False
                break

            attempted += 1
            try:
                status = await self._redeem_one(brand, voucher)
            except StorageException:
                raise
            except Exception as e:
                # 드라이버 통신 실패: 현재 바우처만 ERROR로 저장하고 나머지는 다음 실행으로 넘김
                if voucher.is_redeemed():
                    successful += 1
                else:
                    voucher.mark_error()
                    failed += 1
                await self._voucher_repository.save_vouchers(category, ledger)
                await self._abort_notice(category, voucher, e)
                outcome, error_message = RunOutcome.ABORTED, str(e)
                break

            if status == VoucherStatus.REDEEMED:
                successful += 1
            else:
                failed += 1

            await self._voucher_repository.save_vouchers(category, ledger)

            try:
                await self._emit(on_progress, RunProgress(
                    category, RunPhase.SUBMITTING, index, total, successful, failed
                ))
            except ProgressCallbackError as e:
                await self._abort_notice(category, voucher, e)
                outcome, error_message, emit_done = RunOutcome.ABORTED, str(e), False
                break

            if index < total:
                try:
                    await self._wait_policy.between_vouchers()
                    await self._page_driver.reload_and_wait()
                except PageDriverException as e:
                    await self._abort_notice(category, None, e)
                    outcome, error_message = RunOutcome.ABORTED, str(e)
                    break

        self._logger.info(
            f"[{category}] 바우처 등록 종료",
            extra={"outcome": outcome.value, "attempted": attempted,
                   "successful": successful, "failed": failed}
        )
        await self._notify(
            f"바우처 등록 완료. 성공: {successful}, 실패: {failed}.", NotificationLevel.INFO, 8
        )

        summary = self._summary(
            request, category, outcome, eligible=total, attempted=attempted,
            successful=successful, failed=failed, error_message=error_message
        )
        return summary, emit_done

    async def _redeem_one(self, brand: BrandDescriptor, voucher: VoucherRecord) -> VoucherStatus:
        """바우처 한 건 제출 및 잔액 검증 후 상태 결정"""
        strategy = brand.strategy
        code = voucher.code

        balance_before: Optional[Decimal] = None
        if brand.supports_balance:
            raw_before = await self._page_driver.invoke(strategy.read_balance)
            if is_balance_available(raw_before):
                balance_before = Decimal(str(raw_before))
            else:
                await self._notify(
                    f"바우처 적용 전 {brand.name} 잔액을 확인할 수 없어 검증을 건너뜁니다.",
                    NotificationLevel.INFO
                )

        result = await self._page_driver.invoke(strategy.submit, code, voucher.pin)

        if result is None or not result.success:
            voucher.mark_error()
            message = result.message if result is not None else "알 수 없는 오류가 발생했습니다."
            self._logger.warning(f"[{brand.brand_id}] 바우처 제출 실패", extra={"code": code, "message": message})
            await self._notify(f"바우처 {code} 등록 실패: {message}", NotificationLevel.ERROR, 6)
            return voucher.status

        if balance_before is None:
            voucher.mark_redeemed()
            return voucher.status

        await self._wait_policy.before_verification()
        raw_after = await self._page_driver.invoke(strategy.read_balance)

        if not is_balance_available(raw_after):
            voucher.mark_redeemed()
            await self._notify(
                f"바우처 {code}는 제출되었지만 잔액 변동을 확인하지 못했습니다. 직접 확인해 주세요.",
                NotificationLevel.INFO, 8
            )
            return voucher.status

        delta = Decimal(str(raw_after)) - balance_before
        expected = voucher.amount
        if abs(delta - expected) < self._wait_policy.balance_tolerance:
            voucher.mark_redeemed()
        else:
            voucher.mark_error()
            self._logger.warning(
                f"[{brand.brand_id}] 잔액 검증 불일치",
                extra={"code": code, "expected": str(expected), "observed": str(delta)}
            )
            await self._notify(
                f"바우처 {code}가 적용되었지만 잔액 검증에 실패했습니다. "
                f"예상: {format_amount(expected)}, 실제: {format_amount(delta)}",
                NotificationLevel.ERROR, 8
            )
        return voucher.status

    async def _emit(self, on_progress: Optional[ProgressCallback], progress: RunProgress) -> None:
        if on_progress is None:
            return
        try:
            result = on_progress(progress)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            raise ProgressCallbackError(f"진행 콜백 오류: {e}") from e

    async def _emit_final(self, on_progress: Optional[ProgressCallback], summary: RedemptionSummary,
                          phase: RunPhase) -> None:
        """실행 종료 후 상태 전달 - 결과가 이미 확정되었으므로 콜백 오류는 로그만 남김"""
        try:
            await self._emit(on_progress, RunProgress(
                summary.brand_id, phase, summary.attempted, summary.eligible,
                summary.successful, summary.failed
            ))
        except ProgressCallbackError as e:
            self._logger.warning(f"[{summary.brand_id}] {phase.value} 상태 전달 실패: {e}")

    async def _abort_notice(self, category: str, voucher: Optional[VoucherRecord], error: Exception) -> None:
        """실행 중단 로그 및 알림"""
        code = voucher.code if voucher else None
        self._logger.error(
            f"[{category}] 심각한 오류로 바우처 등록 중단: {error}",
            extra={"code": code, "error_type": type(error).__name__}
        )
        if code:
            message = f"바우처 {code} 처리 중 심각한 오류가 발생하여 중단합니다."
        else:
            message = "바우처 등록 중 심각한 오류가 발생하여 중단합니다."
        await self._notify(message, NotificationLevel.ERROR, 8)

    async def _reject(self, request: RedemptionRequest, outcome: RunOutcome, message: str) -> RedemptionSummary:
        """사전 조건 실패 - 원장/페이지를 건드리지 않고 종료"""
        self._logger.warning(f"[{request.brand_id}] 바우처 등록 거부: {message}", extra={"outcome": outcome.value})
        await self._notify(message, NotificationLevel.ERROR)
        return self._summary(request, request.brand_id, outcome, error_message=message)

    async def _notify(self, message: str, level: NotificationLevel, duration: Optional[float] = None) -> None:
        await self._notification_service.notify(message, level, duration)

    def _summary(self, request: RedemptionRequest, brand_id: str, outcome: RunOutcome, **counts) -> RedemptionSummary:
        return RedemptionSummary(request_id=request.request_id, brand_id=brand_id, outcome=outcome, **counts)

