"""
바우처 제출 결과 도메인 모델
"""
from dataclasses import dataclass

# 잔액 조회 실패를 나타내는 값 (음수는 모두 조회 불가로 취급)
BALANCE_UNAVAILABLE = -1.0


@dataclass(frozen=True)
class SubmissionResult:
    """브랜드 페이지에서의 바우처 제출 결과"""
    success: bool
    message: str = ""

    @classmethod
    def ok(cls, message: str = "") -> 'SubmissionResult':
        return cls(success=True, message=message)

    @classmethod
    def fail(cls, message: str) -> 'SubmissionResult':
        return cls(success=False, message=message)


def is_balance_available(balance) -> bool:
    """잔액 조회 결과가 유효한지 확인"""
    return balance is not None and balance >= 0
