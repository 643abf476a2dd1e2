"""
설정 관리자
"""
import yaml
from typing import Dict, Any, List, Optional
from pathlib import Path

from core.domain.models.brand import BrandConfig
from core.domain.models.wait_policy import WaitPolicy
from shared.exceptions.automation_exceptions import ConfigurationException
from utils.environment import load_environment_config


class ConfigManager:
    """설정 관리자"""

    def __init__(self, config_dir: str = None, environment: Optional[Dict[str, Any]] = None):
        if config_dir is None:
            config_dir = Path(__file__).parent

        self.config_dir = Path(config_dir)
        self.environment = load_environment_config() if environment is None else environment
        self.base_config = self._load_base_config()
        self._brand_configs: Dict[str, BrandConfig] = {}

    def _load_yaml(self, path: Path) -> Dict[str, Any]:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationException(f"설정 파일 형식 오류: {path}: {e}")
        return data or {}

    def _load_base_config(self) -> Dict[str, Any]:
        """기본 설정 로드"""
        base_config_path = self.config_dir / "base_config.yaml"
        if not base_config_path.exists():
            raise ConfigurationException(f"기본 설정 파일을 찾을 수 없습니다: {base_config_path}")
        return self._load_yaml(base_config_path)

    def _env(self, section: str, key: str) -> Any:
        return (self.environment.get(section) or {}).get(key)

    def _brand_config_path(self, brand_id: str) -> Path:
        return self.config_dir / "brand_configs" / f"{brand_id.lower()}_brand_config.yaml"

    def get_supported_brand_ids(self) -> List[str]:
        """설정 파일이 있는 브랜드 ID 목록"""
        brand_dir = self.config_dir / "brand_configs"
        if not brand_dir.exists():
            return []
        suffix = "_brand_config.yaml"
        return sorted(path.name[:-len(suffix)] for path in brand_dir.glob(f"*{suffix}"))

    def get_brand_config(self, brand_id: str) -> BrandConfig:
        """브랜드 설정 조회"""
        key = brand_id.lower()
        if key not in self._brand_configs:
            self._brand_configs[key] = self._load_brand_config(key)
        return self._brand_configs[key]

    def _load_brand_config(self, brand_id: str) -> BrandConfig:
        """브랜드별 설정 로드"""
        config_path = self._brand_config_path(brand_id)

        if not config_path.exists():
            raise ConfigurationException(f"브랜드 설정 파일을 찾을 수 없습니다: {config_path}")

        config_data = self._load_yaml(config_path)

        try:
            brand = config_data['brand']
            return BrandConfig(
                brand_id=brand['id'].lower(),
                name=brand.get('name', brand['id']),
                site_url=brand['site_url'],
                load_url=brand['load_url'],
                selectors=config_data.get('selectors', {}),
                timing=config_data.get('timing', {}),
                ready_selector=config_data.get('ready_selector'),
            )
        except KeyError as e:
            raise ConfigurationException(f"브랜드 설정 항목 누락 ({config_path}): {e}")

    def get_wait_policy(self) -> WaitPolicy:
        """대기 정책 조회"""
        return WaitPolicy.from_dict(self.base_config.get('wait_policy', {}))

    def get_playwright_config(self) -> Dict[str, Any]:
        """Playwright 설정 조회 (환경 변수 우선)"""
        config = dict(self.base_config.get('playwright', {}))

        headless = self._env('PLAYWRIGHT', 'HEADLESS')
        if headless is not None:
            config['headless'] = headless
        user_data_dir = self._env('PLAYWRIGHT', 'USER_DATA_DIR')
        if user_data_dir:
            config['user_data_dir'] = user_data_dir
        cdp_url = self._env('PLAYWRIGHT', 'CDP_URL')
        if cdp_url:
            config['cdp_url'] = cdp_url

        return config

    def get_telegram_config(self) -> Optional[Dict[str, Any]]:
        """텔레그램 설정 조회 (비활성 또는 토큰 없음이면 None)"""
        config = dict(self.base_config.get('telegram') or {})

        bot_token = self._env('TELEGRAM', 'BOT_TOKEN')
        if bot_token:
            config['bot_token'] = bot_token
        chat_id = self._env('TELEGRAM', 'CHAT_ID')
        if chat_id:
            config['chat_id'] = chat_id

        if not config.get('enabled', False):
            return None
        if not config.get('bot_token') or not config.get('chat_id'):
            return None
        return config

    def get_logging_config(self) -> Dict[str, Any]:
        """로깅 설정 조회"""
        config = dict(self.base_config.get('logging', {}))
        level = self._env('LOGGING', 'LEVEL')
        if level:
            config['level'] = level
        return config

    def get_storage_path(self) -> Path:
        """바우처 저장 파일 경로 (상대 경로는 설정 디렉터리 기준)"""
        raw = self._env('STORAGE', 'PATH') or self.base_config.get('storage', {}).get('path', 'vouchers.json')
        path = Path(raw).expanduser()
        if not path.is_absolute():
            path = self.config_dir / path
        return path
