# services/email/pipeline.py
"""
QR 메일 파이프라인: 검증 → 경로 할당 → QR 렌더 → 메일 구성 → 전송 → 파일 삭제.
할당된 파일은 성공/실패와 무관하게 정확히 한 번 삭제를 시도한다.
"""

from __future__ import annotations
import logging

from services.artifacts.store import ArtifactStore
from services.errors import RequestError
from services.qr import encoder
from . import composer
from .dispatcher import MailDispatcher
from .schemas import DeliveryResult, EmailRequest

logger = logging.getLogger(__name__)


class QrMailPipeline:
    def __init__(self, store: ArtifactStore, dispatcher: MailDispatcher, sender: str):
        self.store = store
        self.dispatcher = dispatcher
        self.sender = sender

    def send_qr_email(self, request: EmailRequest) -> DeliveryResult:
        # 수신자 검증이 파일 할당보다 먼저
        if not request.to:
            raise RequestError("Missing recipient email")

        artifact = self.store.allocate_path()
        try:
            encoder.render(request.qr_url, artifact.file_path)
            message = composer.compose(str(request.to), artifact.file_path, sender=self.sender)
            return self.dispatcher.send(message)
        finally:
            self.store.remove(artifact.file_path)
