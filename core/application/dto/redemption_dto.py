"""
바우처 등록 관련 데이터 전송 객체
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class RunPhase(Enum):
    """실행 단계"""
    IDLE = "idle"
    RELOADING = "reloading"
    SUBMITTING = "submitting"
    DONE = "done"


class RunOutcome(Enum):
    """실행 결과"""
    COMPLETED = "completed"
    NOTHING_TO_DO = "nothing_to_do"
    UNKNOWN_BRAND = "unknown_brand"
    ALREADY_RUNNING = "already_running"
    WRONG_SITE = "wrong_site"
    WRONG_PAGE = "wrong_page"
    RELOAD_FAILED = "reload_failed"
    ABORTED = "aborted"


@dataclass
class RedemptionRequest:
    """바우처 등록 요청 DTO"""
    brand_id: str
    request_id: Optional[str] = None
    requested_at: Optional[datetime] = None

    def __post_init__(self):
        if self.requested_at is None:
            self.requested_at = datetime.now()
        if self.request_id is None:
            self.request_id = f"{self.brand_id}_{int(self.requested_at.timestamp())}"


@dataclass(frozen=True)
class RunProgress:
    """진행 상황 (진행 콜백으로 전달되는 읽기 전용 값)"""
    brand_id: str
    phase: RunPhase
    index: int = 0
    total: int = 0
    successful: int = 0
    failed: int = 0

    def label(self) -> str:
        """버튼 텍스트 형태의 표기"""
        if self.phase == RunPhase.RELOADING:
            return "페이지 새로고침 중..."
        if self.phase == RunPhase.SUBMITTING:
            return f"등록 중... ({self.index}/{self.total})"
        if self.phase == RunPhase.DONE:
            return f"완료 - 성공 {self.successful}, 실패 {self.failed}"
        return "대기"


@dataclass
class RedemptionSummary:
    """바우처 등록 결과 DTO"""
    request_id: str
    brand_id: str
    outcome: RunOutcome
    eligible: int = 0
    attempted: int = 0
    successful: int = 0
    failed: int = 0
    error_message: Optional[str] = None
    completed_at: Optional[datetime] = None

    def __post_init__(self):
        if self.completed_at is None:
            self.completed_at = datetime.now()

    @property
    def success(self) -> bool:
        return self.outcome in (RunOutcome.COMPLETED, RunOutcome.NOTHING_TO_DO)

    @property
    def aborted(self) -> bool:
        return self.outcome == RunOutcome.ABORTED
