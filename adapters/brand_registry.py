"""브랜드 레지스트리"""

from typing import Dict, Iterable, List, Type

from adapters.amazon_strategy import AmazonStrategy
from adapters.brand_strategy import BrandStrategy
from adapters.myntra_strategy import MyntraStrategy
from core.domain.models.brand import BrandDescriptor
from infrastructure.config.config_manager import ConfigManager
from shared.exceptions.automation_exceptions import UnknownBrandException


# 브랜드 ID와 전략 클래스 매핑
BRAND_STRATEGY_CLASSES: Dict[str, Type[BrandStrategy]] = {
    'myntra': MyntraStrategy,
    'amazon': AmazonStrategy,
}


class BrandRegistry:
    """브랜드 ID → BrandDescriptor 조회 테이블"""

    def __init__(self, descriptors: Iterable[BrandDescriptor] = ()):
        self._descriptors: Dict[str, BrandDescriptor] = {}
        for descriptor in descriptors:
            self.register(descriptor)

    def register(self, descriptor: BrandDescriptor) -> None:
        self._descriptors[descriptor.brand_id.lower()] = descriptor

    def get(self, brand_id: str) -> BrandDescriptor:
        """브랜드 조회 (미등록 시 UnknownBrandException)"""
        descriptor = self._descriptors.get((brand_id or '').lower())
        if descriptor is None:
            raise UnknownBrandException(
                f"지원하지 않는 브랜드입니다: {brand_id}. 지원 브랜드: {self.supported_brands()}"
            )
        return descriptor

    def is_supported(self, brand_id: str) -> bool:
        return (brand_id or '').lower() in self._descriptors

    def supported_brands(self) -> List[str]:
        """지원하는 브랜드 목록 반환"""
        return list(self._descriptors.keys())


def build_brand_registry(config_manager: ConfigManager) -> BrandRegistry:
    """설정 파일과 전략 클래스 매핑으로 레지스트리 생성"""
    registry = BrandRegistry()
    for brand_id, strategy_class in BRAND_STRATEGY_CLASSES.items():
        brand_config = config_manager.get_brand_config(brand_id)
        registry.register(BrandDescriptor(
            brand_id=brand_config.brand_id,
            name=brand_config.name,
            site_url=brand_config.site_url,
            load_url=brand_config.load_url,
            strategy=strategy_class(brand_config),
        ))
    return registry
