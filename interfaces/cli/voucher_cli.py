"""
바우처 자동 등록 CLI

사용 예:
    voucher-loader brands
    voucher-loader add myntra --code 6001220328073412 --pin 174057 --value 1000
    voucher-loader list myntra
    voucher-loader redeem myntra
    voucher-loader clear myntra --yes
"""
import argparse
import asyncio
import sys
from typing import List, Optional

from core.application.dto.redemption_dto import RedemptionRequest, RunProgress
from core.domain.models.voucher import VoucherRecord, VoucherStats
from infrastructure.config.config_manager import ConfigManager
from infrastructure.factories.automation_factory import AutomationFactory
from shared.exceptions.automation_exceptions import AutomationException
from shared.utils.amount_utils import format_amount
from shared.utils.date_utils import DateUtils


# 전역 팩토리 (한 프로세스에서 한 번만 설정 로드)
_automation_factory = None


def get_automation_factory() -> AutomationFactory:
    """자동화 팩토리 싱글톤 조회"""
    global _automation_factory

    if _automation_factory is None:
        _automation_factory = AutomationFactory(ConfigManager())

    return _automation_factory


def format_voucher_table(vouchers: List[VoucherRecord]) -> str:
    """원장 표 형식 출력 문자열"""
    if not vouchers:
        return "등록된 바우처가 없습니다."

    header = f"{'Code':<20} {'Pin':<8} {'Value':>10} {'Expiry':<12} Status"
    lines = [header, "-" * len(header)]
    for voucher in vouchers:
        expiry = voucher.expiry or 'N/A'
        if DateUtils.is_expired(voucher.expiry):
            expiry += ' (만료)'
        lines.append(
            f"{voucher.code:<20} {voucher.pin or 'N/A':<8} {voucher.value or 'N/A':>10} "
            f"{expiry:<12} {voucher.status.value}"
        )
    return "\n".join(lines)


def format_stats(stats: VoucherStats) -> str:
    return (
        f"Available: ₹{format_amount(stats.available_value)} | "
        f"Redeemed: ₹{format_amount(stats.redeemed_value)} | "
        f"Failed: ₹{format_amount(stats.failed_value)}"
    )


def print_progress(progress: RunProgress) -> None:
    print(f"[{progress.brand_id}] {progress.label()}")


async def cmd_brands(factory: AutomationFactory, args) -> int:
    registry = factory.create_brand_registry()
    for brand_id in registry.supported_brands():
        brand = registry.get(brand_id)
        balance = "잔액검증" if brand.supports_balance else "-"
        print(f"{brand.brand_id:<10} {brand.load_url}  {balance}")
    return 0


async def cmd_list(factory: AutomationFactory, args) -> int:
    repository = factory.create_voucher_repository()
    vouchers = await repository.get_vouchers(args.category)
    print(format_voucher_table(vouchers))
    print(format_stats(VoucherStats.from_vouchers(vouchers)))
    return 0


async def cmd_add(factory: AutomationFactory, args) -> int:
    repository = factory.create_voucher_repository()
    voucher = VoucherRecord(code=args.code.strip(), pin=args.pin, value=args.value, expiry=args.expiry)
    result = await repository.add_vouchers(args.category, [voucher])
    return 0 if result.added else 1


async def cmd_clear(factory: AutomationFactory, args) -> int:
    if not args.yes:
        print(f"{args.category} 바우처를 모두 삭제하려면 --yes 옵션을 지정하세요.")
        return 1
    await factory.create_voucher_repository().clear_vouchers(args.category)
    return 0


async def cmd_redeem(factory: AutomationFactory, args) -> int:
    brand = factory.create_brand_registry().get(args.brand)

    async with factory.create_page_driver(brand.brand_id) as driver:
        await driver.open(args.url or brand.load_url)
        use_case = factory.create_redeem_vouchers_use_case(driver)
        summary = await use_case.execute(RedemptionRequest(brand_id=brand.brand_id), on_progress=print_progress)

    print(
        f"결과: {summary.outcome.value} - 대상 {summary.eligible}건, "
        f"성공 {summary.successful}건, 실패 {summary.failed}건"
    )
    return 0 if summary.success else 1


COMMANDS = {
    'brands': cmd_brands,
    'list': cmd_list,
    'add': cmd_add,
    'clear': cmd_clear,
    'redeem': cmd_redeem,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='voucher-loader', description='기프트카드/바우처 자동 등록')
    subparsers = parser.add_subparsers(dest='command', required=True)

    subparsers.add_parser('brands', help='지원 브랜드 목록')

    list_parser = subparsers.add_parser('list', help='바우처 목록 및 금액 집계')
    list_parser.add_argument('category')

    add_parser = subparsers.add_parser('add', help='바우처 수동 추가')
    add_parser.add_argument('category')
    add_parser.add_argument('--code', required=True)
    add_parser.add_argument('--pin')
    add_parser.add_argument('--value', default='')
    add_parser.add_argument('--expiry')

    clear_parser = subparsers.add_parser('clear', help='카테고리 바우처 전체 삭제')
    clear_parser.add_argument('category')
    clear_parser.add_argument('--yes', action='store_true')

    redeem_parser = subparsers.add_parser('redeem', help='등록 페이지에서 바우처 자동 등록')
    redeem_parser.add_argument('brand')
    redeem_parser.add_argument('--url', help='시작 URL (기본: 브랜드 바우처 등록 페이지)')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    handler = COMMANDS[args.command]
    try:
        return asyncio.run(handler(get_automation_factory(), args))
    except AutomationException as e:
        print(f"[실패] {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
