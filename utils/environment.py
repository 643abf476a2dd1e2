"""
환경 변수 관리 유틸리티
"""
import os
from typing import Dict, Any, Optional
from dotenv import load_dotenv


def _env_bool(name: str) -> Optional[bool]:
    raw = os.getenv(name)
    if raw is None or raw == '':
        return None
    return raw.lower() in ('1', 'true', 'yes')


def _env_str(name: str) -> Optional[str]:
    raw = os.getenv(name)
    return raw if raw else None


def load_environment_config() -> Dict[str, Any]:
    """
    환경 설정을 로드합니다.
    로컬 환경에서는 config/environment.local 파일을,
    그 외에는 환경 변수를 그대로 사용합니다.
    값이 없는 항목은 None으로 두어 YAML 설정을 덮어쓰지 않습니다.
    """

    environment = os.getenv('ENVIRONMENT', 'local')

    if environment == 'local':
        # 로컬 환경 설정 파일 로드
        env_file = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'config', 'environment.local')
        if os.path.exists(env_file):
            load_dotenv(env_file)

    return {
        'ENVIRONMENT': os.getenv('ENVIRONMENT', 'local'),

        'STORAGE': {
            'PATH': _env_str('VOUCHER_STORE_PATH'),
        },

        'TELEGRAM': {
            'BOT_TOKEN': _env_str('TELEGRAM_BOT_TOKEN'),
            'CHAT_ID': _env_str('TELEGRAM_CHAT_ID'),
        },

        'PLAYWRIGHT': {
            'HEADLESS': _env_bool('PLAYWRIGHT_HEADLESS'),
            'USER_DATA_DIR': _env_str('PLAYWRIGHT_USER_DATA_DIR'),
            'CDP_URL': _env_str('PLAYWRIGHT_CDP_URL'),
        },

        'LOGGING': {
            'LEVEL': _env_str('LOG_LEVEL'),
        }
    }
