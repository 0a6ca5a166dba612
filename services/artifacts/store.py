# services/artifacts/store.py
"""
요청 1건 동안만 존재하는 임시 파일(QR PNG) 디렉터리 관리.
파일명은 시간 기반 토큰 + pid + 시퀀스로 만들어 동시 요청 간 충돌을 막는다.
"""

from __future__ import annotations
import itertools, logging, os, time
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class QrArtifact(BaseModel):
    file_path: Path
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ArtifactStore:
    def __init__(self, directory: str | Path, prefix: str = "qr", suffix: str = ".png"):
        self.directory = Path(directory)
        self.prefix = prefix
        self.suffix = suffix
        self._seq = itertools.count()

    def ensure_directory(self) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        return self.directory

    def allocate_path(self) -> QrArtifact:
        """파일은 만들지 않고 경로만 예약한다."""
        token = f"{time.time_ns() // 1_000_000}-{os.getpid()}-{next(self._seq)}"
        path = self.directory / f"{self.prefix}-{token}{self.suffix}"
        return QrArtifact(file_path=path)

    def remove(self, path: str | Path) -> bool:
        path = Path(path)
        try:
            path.unlink()
        except FileNotFoundError:
            # 렌더링 도중 실패한 경우 파일이 없을 수 있음
            logger.warning("artifact already absent: %s", path)
            return False
        except OSError:
            logger.exception("failed to remove artifact %s", path)
            return False
        logger.debug("artifact removed: %s", path)
        return True
