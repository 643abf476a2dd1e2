"""
구조화된 로거
"""
import logging
import json
import os
from typing import Dict, Any, Optional


class StructuredLogger:
    """구조화된 로깅을 위한 로거"""

    def __init__(self, name: str, log_config: Optional[Dict[str, Any]] = None):
        log_config = log_config or {}
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, str(log_config.get('level', 'INFO')).upper(), logging.INFO))

        # 기존 핸들러 제거
        for handler in self.logger.handlers[:]:
            self.logger.removeHandler(handler)

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(log_config.get(
            'format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )))
        self.logger.addHandler(console_handler)

        log_file = log_config.get('file')
        if log_file:
            # CLI 실행 기록 보관용
            path = os.path.expanduser(log_file)
            os.makedirs(os.path.dirname(path) or '.', exist_ok=True)
            file_handler = logging.FileHandler(path, encoding='utf-8')
            file_handler.setFormatter(console_handler.formatter)
            self.logger.addHandler(file_handler)

    def _format_message(self, message: str, extra: Optional[Dict[str, Any]] = None) -> str:
        """메시지 포맷팅"""
        if extra:
            # 구조화된 데이터를 JSON으로 추가
            structured_data = json.dumps(extra, ensure_ascii=False, default=str)
            return f"{message} | {structured_data}"
        return message

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """정보 로그"""
        self.logger.info(self._format_message(message, extra))

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """경고 로그"""
        self.logger.warning(self._format_message(message, extra))

    def error(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """에러 로그"""
        self.logger.error(self._format_message(message, extra))

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """디버그 로그"""
        self.logger.debug(self._format_message(message, extra))
