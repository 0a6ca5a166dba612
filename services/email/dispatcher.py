# services/email/dispatcher.py
"""
SMTP 릴레이로 ComposedMessage 를 전송한다.
587 포트 STARTTLS (기본) 또는 465 SSL. 전송 실패는 모두 SendError 로 변환.
"""

from __future__ import annotations
import logging, ssl
from email.message import EmailMessage
from email.utils import make_msgid
from smtplib import (
    SMTP, SMTP_SSL, SMTPAuthenticationError, SMTPException,
    SMTPRecipientsRefused, SMTPSenderRefused,
)

from config import SmtpSettings
from services.errors import SendError
from .schemas import ComposedMessage, DeliveryResult

logger = logging.getLogger(__name__)


def build_mime(message: ComposedMessage, message_id: str) -> EmailMessage:
    """text / (html + 인라인 이미지) 구조의 multipart 메시지 생성"""
    att = message.attachment
    try:
        data = att.path.read_bytes()
    except OSError as e:
        raise SendError(f"cannot read attachment {att.path}: {e}") from e

    msg = EmailMessage()
    msg["From"] = message.sender
    msg["To"] = message.recipient
    msg["Subject"] = message.subject
    msg["Message-ID"] = message_id
    msg.set_content(message.text)
    msg.add_alternative(message.html, subtype="html")

    # html 파트를 multipart/related 로 바꾸고 이미지를 cid 로 붙인다
    html_part = msg.get_payload()[-1]
    maintype, subtype = att.mime_type.split("/", 1)
    html_part.add_related(
        data, maintype=maintype, subtype=subtype,
        cid=f"<{att.cid}>", filename=att.filename, disposition="inline",
    )
    return msg


class MailDispatcher:
    def __init__(self, settings: SmtpSettings):
        self.settings = settings

    def _message_id(self, sender: str) -> str:
        domain = sender.rsplit("@", 1)[-1] if "@" in sender else None
        return make_msgid(domain=domain)

    def _deliver(self, server: SMTP, msg: EmailMessage) -> None:
        if self.settings.username:
            server.login(self.settings.username, self.settings.password)
        server.send_message(msg)

    def send(self, message: ComposedMessage) -> DeliveryResult:
        s = self.settings
        message_id = self._message_id(message.sender)
        msg = build_mime(message, message_id)
        context = ssl.create_default_context()

        try:
            if s.security.upper() == "SSL":
                # e.g. Gmail 465
                with SMTP_SSL(s.host, s.port, timeout=s.timeout, context=context) as server:
                    self._deliver(server, msg)
            else:
                # STARTTLS e.g. Gmail 587
                with SMTP(s.host, s.port, timeout=s.timeout) as server:
                    server.ehlo()
                    server.starttls(context=context)
                    server.ehlo()
                    self._deliver(server, msg)
        except SMTPAuthenticationError as e:
            raise SendError(f"SMTP authentication failed: {e.smtp_code} {e.smtp_error!r}") from e
        except SMTPRecipientsRefused as e:
            raise SendError(f"Recipient refused: {', '.join(e.recipients)}") from e
        except SMTPSenderRefused as e:
            raise SendError(f"Sender refused: {e.sender}") from e
        except SMTPException as e:
            raise SendError(f"SMTP error: {e}") from e
        except OSError as e:
            raise SendError(f"SMTP connection to {s.host}:{s.port} failed: {e}") from e

        logger.info("mail sent to=%s subject=%s message_id=%s", message.recipient, message.subject, message_id)
        return DeliveryResult(success=True, message_id=message_id)
