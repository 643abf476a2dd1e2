"""
브랜드 전략/페이지 드라이버용 경량 로거

주요 기능:
1. 환경별 로그 레벨 자동 설정 (프로덕션: WARNING, 개발: INFO)
2. 간소화된 에러 코드 시스템
3. 사용자 알림과 로그 기록 분리
"""

import logging
import os
from typing import Optional, Dict, Any
from enum import Enum


class ErrorCode(Enum):
    """간소화된 에러 코드 시스템"""
    FAIL_PAGE = "FAIL_PAGE"           # 페이지 이동 실패
    FAIL_RELOAD = "FAIL_RELOAD"       # 페이지 새로고침 실패
    FAIL_SUBMIT = "FAIL_SUBMIT"       # 바우처 제출 실패
    FAIL_BALANCE = "FAIL_BALANCE"     # 잔액 조회 실패
    FAIL_DRIVER = "FAIL_DRIVER"       # 브라우저 통신/실행 오류
    FAIL_SETUP = "FAIL_SETUP"         # 설정/초기화 실패


class OptimizedLogger:
    """환경별 로그 레벨을 적용하는 로거"""

    def __init__(self, name: str, brand_name: str = ""):
        self.logger = logging.getLogger(name)
        self.brand_name = brand_name
        self.environment = os.getenv('ENVIRONMENT', 'development')

        # 환경별 로그 레벨 자동 설정
        if self.environment == 'production':
            self.logger.setLevel(logging.WARNING)
        else:
            self.logger.setLevel(logging.INFO)

        # 중복 핸들러 방지: 이미 핸들러가 있으면 추가하지 않음
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

        # 부모 로거로의 전파 방지 (중복 출력 방지)
        self.logger.propagate = False

    def should_log_info(self) -> bool:
        """개발 환경에서만 INFO 로그를 기록할지 여부 반환"""
        return self.environment != 'production'

    def log_error(self, error_code, step: str, details: Optional[str] = None) -> Dict[str, Any]:
        """
        에러 로그 기록

        에러 라인에는 코드만 남기고 상세 내용은 개발 환경에서만 별도 라인으로 기록한다.
        반환값은 알림 메시지 작성에 사용할 수 있는 요약 정보.
        """
        code_value = error_code.value if hasattr(error_code, 'value') else str(error_code)

        self.logger.error(f"[{self.brand_name}][{step}] {code_value}")

        if details and self.should_log_info():
            self.logger.info(f"[{self.brand_name}][{step}] Details: {details}")

        return {
            "brand": self.brand_name,
            "step": step,
            "code": code_value,
            "message": details
        }

    def log_success(self, step: str, details: Optional[str] = None) -> None:
        """성공 로그 기록"""
        if not self.should_log_info():
            return

        log_message = f"[{self.brand_name}][{step}] SUCCESS"
        if details:
            log_message += f" - {details}"
        self.logger.info(log_message)

    def log_info(self, message: str) -> None:
        """정보 로그 기록 (개발 환경에서만)"""
        if self.should_log_info():
            self.logger.info(f"[{self.brand_name}] {message}")

    def log_warning(self, message: str) -> None:
        """경고 로그 기록"""
        self.logger.warning(f"[{self.brand_name}] {message}")
