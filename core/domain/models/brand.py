"""
브랜드 도메인 모델
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class BrandConfig:
    """브랜드 설정"""
    brand_id: str
    name: str
    site_url: str
    load_url: str
    selectors: Dict[str, Any] = field(default_factory=dict)
    timing: Dict[str, Any] = field(default_factory=dict)
    ready_selector: Optional[str] = None

    def get_selector(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """셀렉터 키로 실제 셀렉터 조회"""
        return self.selectors.get(key, default)

    def get_timing(self, key: str, default: float) -> float:
        """타이밍 값 조회 (초 단위)"""
        return float(self.timing.get(key, default))


@dataclass(frozen=True)
class BrandDescriptor:
    """브랜드 정보 + 페이지 전략 (프로세스 시작 시 한 번 생성)"""
    brand_id: str
    name: str
    site_url: str
    load_url: str
    strategy: Any

    @property
    def supports_balance(self) -> bool:
        return bool(getattr(self.strategy, 'supports_balance', False))

    def is_on_site(self, url: Optional[str]) -> bool:
        return bool(url) and url.startswith(self.site_url)

    def is_on_load_page(self, url: Optional[str]) -> bool:
        return bool(url) and url.startswith(self.load_url)
