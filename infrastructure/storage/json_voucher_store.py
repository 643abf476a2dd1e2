"""
JSON 파일 기반 바우처 저장소
"""
import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from core.domain.models.voucher import VoucherRecord
from core.domain.repositories.voucher_repository import AddVouchersResult, VoucherRepository
from infrastructure.logging.structured_logger import StructuredLogger
from infrastructure.notifications.notification_service import NotificationLevel, NotificationService
from shared.exceptions.automation_exceptions import StorageException

_KEY_SUFFIX = "_vouchers"


def storage_key(category: str) -> str:
    """카테고리별 저장 키 (예: myntra_vouchers)"""
    return f"{category.lower()}{_KEY_SUFFIX}"


class JsonVoucherStore(VoucherRepository):
    """하나의 JSON 문서에 카테고리별 원장을 저장

    쓰기는 같은 디렉터리의 임시 파일에 기록한 뒤 os.replace로 교체한다.
    """

    def __init__(self, path: Path, logger: StructuredLogger,
                 notification_service: Optional[NotificationService] = None):
        self.path = Path(path)
        self.logger = logger
        self.notification_service = notification_service
        self._lock = asyncio.Lock()

    def _read_document(self) -> Dict[str, Any]:
        """저장 문서 전체 읽기 (파일이 없으면 빈 문서)"""
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageException(f"바우처 저장 파일을 읽을 수 없습니다: {self.path}: {e}")
        if not isinstance(document, dict):
            raise StorageException(f"바우처 저장 파일 형식이 올바르지 않습니다: {self.path}")
        return document

    def _write_document(self, document: Dict[str, Any]) -> None:
        fd = None
        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=str(self.path.parent))
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                fd = None
                json.dump(document, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
            tmp_path = None
        except (OSError, TypeError, ValueError) as e:
            raise StorageException(f"바우처 저장 실패: {self.path}: {e}")
        finally:
            if fd is not None:
                os.close(fd)
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)

    def _split_entries(self, document: Dict[str, Any],
                       category: str) -> Tuple[List[VoucherRecord], List[Tuple[int, Any]]]:
        """원장 항목을 해석된 레코드와 해석할 수 없는 원본 항목(위치 포함)으로 분리"""
        records = []
        unreadable = []
        for position, raw in enumerate(document.get(storage_key(category)) or []):
            try:
                records.append(VoucherRecord.from_dict(raw))
            except (ValueError, TypeError, AttributeError) as e:
                self.logger.warning(f"[{category}] 해석할 수 없는 바우처 항목 보존", extra={"error": str(e)})
                unreadable.append((position, raw))
        return records, unreadable

    @staticmethod
    def _merge_entries(records: List[VoucherRecord], unreadable: List[Tuple[int, Any]]) -> List[Any]:
        """해석할 수 없는 원본 항목을 원래 위치에 다시 끼워 넣기"""
        entries = [record.to_dict() for record in records]
        for position, raw in unreadable:
            entries.insert(min(position, len(entries)), raw)
        return entries

    @staticmethod
    def _raw_code(raw: Any) -> Optional[str]:
        if not isinstance(raw, dict):
            return None
        code = raw.get('code', raw.get('VoucherCode'))
        return None if code is None else str(code)

    async def _in_thread(self, func, *args):
        """파일 입출력은 스레드 풀에서 실행"""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    async def get_vouchers(self, category: str) -> List[VoucherRecord]:
        try:
            document = await self._in_thread(self._read_document)
        except StorageException as e:
            self.logger.error(f"[{category}] 바우처 조회 실패: {e}")
            return []
        records, _ = self._split_entries(document, category)
        return records

    async def save_vouchers(self, category: str, vouchers: List[VoucherRecord]) -> None:
        """원장 교체 - 해석할 수 없는 기존 항목은 그대로 남긴다 (삭제는 clear_vouchers만)"""
        async with self._lock:
            document = await self._in_thread(self._read_document)
            _, unreadable = self._split_entries(document, category)
            document[storage_key(category)] = self._merge_entries(vouchers, unreadable)
            await self._in_thread(self._write_document, document)
        self.logger.debug(
            f"[{category}] 원장 저장 완료",
            extra={"count": len(vouchers), "preserved": len(unreadable)}
        )

    async def add_vouchers(self, category: str, new_vouchers: List[VoucherRecord]) -> AddVouchersResult:
        try:
            async with self._lock:
                document = await self._in_thread(self._read_document)
                existing, unreadable = self._split_entries(document, category)
                known_codes = {voucher.code for voucher in existing}
                known_codes.update(code for code in (self._raw_code(raw) for _, raw in unreadable) if code)

                accepted = []
                for voucher in new_vouchers:
                    if voucher.code in known_codes:
                        continue
                    known_codes.add(voucher.code)
                    accepted.append(voucher.as_available())

                result = AddVouchersResult(added=len(accepted), duplicates=len(new_vouchers) - len(accepted))
                if accepted:
                    document[storage_key(category)] = self._merge_entries(existing + accepted, unreadable)
                    await self._in_thread(self._write_document, document)
        except StorageException:
            await self._notify("바우처 저장 중 오류가 발생했습니다.", NotificationLevel.ERROR)
            raise

        self.logger.info(
            f"[{category}] 바우처 추가",
            extra={"added": result.added, "duplicates": result.duplicates}
        )

        if result.added == 0:
            message = f"{category}에 추가할 새 바우처가 없습니다."
            if result.duplicates > 0:
                message += f" 중복 {result.duplicates}건은 무시되었습니다."
            await self._notify(message, NotificationLevel.INFO)
        else:
            message = f"{category}에 새 바우처 {result.added}건이 추가되었습니다!"
            if result.duplicates > 0:
                message += f"\n중복 {result.duplicates}건은 무시되었습니다."
            await self._notify(message, NotificationLevel.SUCCESS)

        return result

    async def clear_vouchers(self, category: str) -> None:
        """해석할 수 없는 항목까지 포함해 원장 전체 삭제"""
        async with self._lock:
            document = await self._in_thread(self._read_document)
            document[storage_key(category)] = []
            await self._in_thread(self._write_document, document)
        self.logger.info(f"[{category}] 원장 초기화")
        await self._notify(f"{category} 바우처가 모두 삭제되었습니다.", NotificationLevel.SUCCESS)

    async def list_categories(self) -> List[str]:
        try:
            document = await self._in_thread(self._read_document)
        except StorageException as e:
            self.logger.error(f"카테고리 조회 실패: {e}")
            return []
        return sorted(key[:-len(_KEY_SUFFIX)] for key in document if key.endswith(_KEY_SUFFIX))

    async def _notify(self, message: str, level: NotificationLevel) -> None:
        if self.notification_service:
            await self.notification_service.notify(message, level)
