"""Tests for the voucher redemption orchestrator."""
import json

import pytest

from adapters.brand_registry import BrandRegistry
from conftest import FakePageDriver, FakeStrategy, MYNTRA_SITE, myntra_descriptor, seed, voucher
from core.application.dto.redemption_dto import RedemptionRequest, RunOutcome, RunPhase
from core.application.use_cases import redeem_vouchers_use_case
from core.domain.models.submission import BALANCE_UNAVAILABLE, SubmissionResult
from core.domain.models.voucher import VoucherStatus
from infrastructure.notifications.notification_service import NotificationLevel
from shared.exceptions.automation_exceptions import PageDriverException, StorageException


def statuses(records):
    return {record.code: record.status for record in records}


async def test_balance_delta_matching_value_marks_redeemed(make_use_case, store):
    await seed(store, "myntra", [voucher("A", value="50")])
    strategy = FakeStrategy(supports_balance=True, balances=[100, 150])
    use_case, _ = make_use_case(strategy)

    summary = await use_case.execute(RedemptionRequest(brand_id="myntra"))

    assert summary.outcome == RunOutcome.COMPLETED
    assert summary.successful == 1 and summary.failed == 0
    assert statuses(await store.get_vouchers("myntra")) == {"A": VoucherStatus.REDEEMED}


async def test_balance_mismatch_marks_error_with_expected_and_observed(make_use_case, store, notifier):
    await seed(store, "myntra", [voucher("A", value="50")])
    strategy = FakeStrategy(supports_balance=True, balances=[100, 120])
    use_case, _ = make_use_case(strategy)

    summary = await use_case.execute(RedemptionRequest(brand_id="myntra"))

    assert summary.failed == 1
    assert statuses(await store.get_vouchers("myntra")) == {"A": VoucherStatus.ERROR}
    errors = notifier.of_level(NotificationLevel.ERROR)
    assert any("50.00" in message and "20.00" in message for message in errors)


async def test_only_non_redeemed_vouchers_are_attempted_in_ledger_order(make_use_case, store):
    await seed(store, "myntra", [
        voucher("A"),
        voucher("B", status=VoucherStatus.REDEEMED),
        voucher("C", status=VoucherStatus.ERROR),
    ])
    strategy = FakeStrategy()
    use_case, _ = make_use_case(strategy)

    summary = await use_case.execute(RedemptionRequest(brand_id="myntra"))

    assert [code for code, _ in strategy.submitted] == ["A", "C"]
    assert summary.eligible == 2
    result = await store.get_vouchers("myntra")
    assert [record.code for record in result] == ["A", "B", "C"]
    assert statuses(result) == {
        "A": VoucherStatus.REDEEMED,
        "B": VoucherStatus.REDEEMED,
        "C": VoucherStatus.REDEEMED,
    }


@pytest.mark.parametrize("url, outcome", [
    ("https://mail.google.com/mail/u/0/", RunOutcome.WRONG_SITE),
    (MYNTRA_SITE + "shop/men", RunOutcome.WRONG_PAGE),
    (None, RunOutcome.WRONG_SITE),
])
async def test_wrong_page_location_touches_nothing(make_use_case, store, notifier, url, outcome):
    await seed(store, "myntra", [voucher("A")])
    strategy = FakeStrategy()
    use_case, driver = make_use_case(strategy, driver=FakePageDriver(url=url))

    summary = await use_case.execute(RedemptionRequest(brand_id="myntra"))

    assert summary.outcome == outcome
    assert driver.call_count == 0
    assert store.saves == []
    assert statuses(await store.get_vouchers("myntra")) == {"A": VoucherStatus.AVAILABLE}
    assert notifier.of_level(NotificationLevel.ERROR)


async def test_unknown_brand_short_circuits(make_use_case, store):
    await seed(store, "myntra", [voucher("A")])
    use_case, driver = make_use_case(FakeStrategy())

    summary = await use_case.execute(RedemptionRequest(brand_id="flipkart"))

    assert summary.outcome == RunOutcome.UNKNOWN_BRAND
    assert not summary.success
    assert driver.call_count == 0
    assert store.saves == []


async def test_nothing_eligible_exits_without_reload(make_use_case, store, notifier):
    await seed(store, "myntra", [voucher("A", status=VoucherStatus.REDEEMED)])
    use_case, driver = make_use_case(FakeStrategy())

    summary = await use_case.execute(RedemptionRequest(brand_id="myntra"))

    assert summary.outcome == RunOutcome.NOTHING_TO_DO
    assert summary.success
    assert driver.reloads == 0
    assert notifier.of_level(NotificationLevel.INFO)


async def test_initial_reload_failure_aborts_before_any_voucher(make_use_case, store):
    await seed(store, "myntra", [voucher("A"), voucher("B")])
    strategy = FakeStrategy()
    use_case, driver = make_use_case(strategy, driver=FakePageDriver(reload_failures={1}))

    summary = await use_case.execute(RedemptionRequest(brand_id="myntra"))

    assert summary.outcome == RunOutcome.RELOAD_FAILED
    assert strategy.submitted == []
    assert store.saves == []


async def test_rejected_submission_is_recorded_and_run_continues(make_use_case, store, notifier):
    await seed(store, "myntra", [voucher("A"), voucher("B")])
    strategy = FakeStrategy(results={"A": SubmissionResult.fail("Invalid gift card")})
    use_case, _ = make_use_case(strategy)

    summary = await use_case.execute(RedemptionRequest(brand_id="myntra"))

    assert summary.outcome == RunOutcome.COMPLETED
    assert (summary.successful, summary.failed) == (1, 1)
    assert statuses(await store.get_vouchers("myntra")) == {
        "A": VoucherStatus.ERROR,
        "B": VoucherStatus.REDEEMED,
    }
    assert any("Invalid gift card" in message for message in notifier.of_level(NotificationLevel.ERROR))


async def test_driver_failure_aborts_and_leaves_remaining_untouched(make_use_case, store, notifier):
    await seed(store, "myntra", [voucher("A"), voucher("B"), voucher("C")])
    strategy = FakeStrategy(raise_on={"B": PageDriverException("Target page, context or browser has been closed")})
    use_case, _ = make_use_case(strategy)

    summary = await use_case.execute(RedemptionRequest(brand_id="myntra"))

    assert summary.outcome == RunOutcome.ABORTED
    assert summary.aborted and not summary.success
    assert summary.attempted == 2
    assert [code for code, _ in strategy.submitted] == ["A", "B"]
    assert statuses(await store.get_vouchers("myntra")) == {
        "A": VoucherStatus.REDEEMED,
        "B": VoucherStatus.ERROR,
        "C": VoucherStatus.AVAILABLE,
    }
    assert any("B" in message for message in notifier.of_level(NotificationLevel.ERROR))


async def test_ledger_is_persisted_after_every_voucher(make_use_case, store):
    await seed(store, "myntra", [voucher("A"), voucher("B"), voucher("C")])
    strategy = FakeStrategy(results={"B": SubmissionResult.fail("Already used")})
    use_case, driver = make_use_case(strategy)

    await use_case.execute(RedemptionRequest(brand_id="myntra"))

    assert store.saves == [
        [("A", VoucherStatus.REDEEMED), ("B", VoucherStatus.AVAILABLE), ("C", VoucherStatus.AVAILABLE)],
        [("A", VoucherStatus.REDEEMED), ("B", VoucherStatus.ERROR), ("C", VoucherStatus.AVAILABLE)],
        [("A", VoucherStatus.REDEEMED), ("B", VoucherStatus.ERROR), ("C", VoucherStatus.REDEEMED)],
    ]
    # initial reload plus one between each pair of vouchers
    assert driver.reloads == 3


async def test_unavailable_balance_before_skips_verification(make_use_case, store, notifier):
    await seed(store, "myntra", [voucher("A")])
    strategy = FakeStrategy(supports_balance=True, balances=[BALANCE_UNAVAILABLE])
    use_case, _ = make_use_case(strategy)

    await use_case.execute(RedemptionRequest(brand_id="myntra"))

    assert strategy.balance_reads == 1
    assert statuses(await store.get_vouchers("myntra")) == {"A": VoucherStatus.REDEEMED}
    assert notifier.of_level(NotificationLevel.INFO)


async def test_unavailable_balance_after_trusts_submission(make_use_case, store, notifier):
    await seed(store, "myntra", [voucher("A")])
    strategy = FakeStrategy(supports_balance=True, balances=[100, -1])
    use_case, _ = make_use_case(strategy)

    summary = await use_case.execute(RedemptionRequest(brand_id="myntra"))

    assert summary.successful == 1
    assert statuses(await store.get_vouchers("myntra")) == {"A": VoucherStatus.REDEEMED}
    assert any("A" in message for message in notifier.of_level(NotificationLevel.INFO))


async def test_brand_without_balance_support_never_reads_balance(make_use_case, store):
    await seed(store, "myntra", [voucher("A"), voucher("B")])
    strategy = FakeStrategy(supports_balance=False, balances=[100, 150])
    use_case, driver = make_use_case(strategy)

    summary = await use_case.execute(RedemptionRequest(brand_id="myntra"))

    assert summary.successful == 2
    assert strategy.balance_reads == 0
    assert "read_balance" not in driver.invocations


async def test_progress_is_streamed_through_callback(make_use_case, store):
    await seed(store, "myntra", [voucher("A"), voucher("B")])
    use_case, _ = make_use_case(FakeStrategy())
    seen = []
    locked_at_idle = []

    async def on_progress(progress):
        seen.append((progress.phase, progress.index, progress.total))
        if progress.phase == RunPhase.IDLE:
            locked_at_idle.append("myntra" in redeem_vouchers_use_case._active_runs)

    summary = await use_case.execute(RedemptionRequest(brand_id="myntra"), on_progress=on_progress)

    assert summary.outcome == RunOutcome.COMPLETED
    assert seen[0] == (RunPhase.RELOADING, 0, 2)
    assert (RunPhase.SUBMITTING, 1, 2) in seen
    assert (RunPhase.SUBMITTING, 2, 2) in seen
    assert [phase for phase, _, _ in seen[-2:]] == [RunPhase.DONE, RunPhase.IDLE]
    assert locked_at_idle == [False]


async def test_failing_progress_callback_aborts_without_downgrading_status(make_use_case, store):
    await seed(store, "myntra", [voucher("A"), voucher("B")])
    strategy = FakeStrategy()
    use_case, _ = make_use_case(strategy)

    def on_progress(progress):
        if progress.phase == RunPhase.SUBMITTING and progress.successful == 1:
            raise RuntimeError("ui went away")

    summary = await use_case.execute(RedemptionRequest(brand_id="myntra"), on_progress=on_progress)

    assert summary.outcome == RunOutcome.ABORTED
    assert [code for code, _ in strategy.submitted] == ["A"]
    assert statuses(await store.get_vouchers("myntra")) == {
        "A": VoucherStatus.REDEEMED,
        "B": VoucherStatus.AVAILABLE,
    }


async def test_reload_failure_between_vouchers_aborts_run(make_use_case, store):
    await seed(store, "myntra", [voucher("A"), voucher("B")])
    strategy = FakeStrategy()
    use_case, _ = make_use_case(strategy, driver=FakePageDriver(reload_failures={2}))

    summary = await use_case.execute(RedemptionRequest(brand_id="myntra"))

    assert summary.outcome == RunOutcome.ABORTED
    assert statuses(await store.get_vouchers("myntra")) == {
        "A": VoucherStatus.REDEEMED,
        "B": VoucherStatus.AVAILABLE,
    }


async def test_storage_failure_propagates_and_releases_lock(make_use_case, store):
    await seed(store, "myntra", [voucher("A")])
    use_case, _ = make_use_case(FakeStrategy())

    async def broken_save(category, vouchers):
        raise StorageException("disk full")

    original_save = store.save_vouchers
    store.save_vouchers = broken_save
    with pytest.raises(StorageException):
        await use_case.execute(RedemptionRequest(brand_id="myntra"))

    store.save_vouchers = original_save
    summary = await use_case.execute(RedemptionRequest(brand_id="myntra"))
    assert summary.outcome == RunOutcome.COMPLETED


async def test_concurrent_run_for_same_brand_is_rejected(make_use_case, store):
    await seed(store, "myntra", [voucher("A")])
    use_case, _ = make_use_case(FakeStrategy())
    nested = []

    async def on_progress(progress):
        if progress.phase == RunPhase.RELOADING:
            nested.append(await use_case.execute(RedemptionRequest(brand_id="myntra")))

    summary = await use_case.execute(RedemptionRequest(brand_id="myntra"), on_progress=on_progress)

    assert summary.outcome == RunOutcome.COMPLETED
    assert nested[0].outcome == RunOutcome.ALREADY_RUNNING


async def test_brand_lookup_is_case_insensitive(make_use_case, store):
    await seed(store, "myntra", [voucher("A")])
    strategy = FakeStrategy()
    registry = BrandRegistry([myntra_descriptor(strategy)])
    use_case, _ = make_use_case(strategy, registry=registry)

    summary = await use_case.execute(RedemptionRequest(brand_id="Myntra"))

    assert summary.brand_id == "myntra"
    assert summary.successful == 1


async def test_unreadable_ledger_entries_survive_a_run(make_use_case, store, store_path):
    store_path.write_text(json.dumps({"myntra_vouchers": [
        {"code": "A", "pin": "1", "value": "50", "status": "AVAILABLE"},
        {"code": "X", "pin": "2", "value": "40", "status": "PENDING"},
        {"pin": "3", "value": "30"},
    ]}), encoding="utf-8")
    strategy = FakeStrategy()
    use_case, _ = make_use_case(strategy)

    summary = await use_case.execute(RedemptionRequest(brand_id="myntra"))

    assert summary.successful == 1
    assert [code for code, _ in strategy.submitted] == ["A"]
    entries = json.loads(store_path.read_text(encoding="utf-8"))["myntra_vouchers"]
    assert entries == [
        {"code": "A", "pin": "1", "value": "50", "expiry": None, "status": "REDEEMED"},
        {"code": "X", "pin": "2", "value": "40", "status": "PENDING"},
        {"pin": "3", "value": "30"},
    ]
