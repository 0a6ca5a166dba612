"""
Tests for SMTP delivery.
"""

from smtplib import SMTPAuthenticationError, SMTPRecipientsRefused, SMTPServerDisconnected
from unittest.mock import patch

import pytest

from services.email import composer
from services.email.dispatcher import MailDispatcher, build_mime
from services.errors import SendError

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake"


@pytest.fixture
def message(tmp_path):
    path = tmp_path / "qr-1.png"
    path.write_bytes(PNG_BYTES)
    return composer.compose("a@b.com", path, sender="noreply@example.com")


@pytest.fixture
def mock_smtp():
    with patch("services.email.dispatcher.SMTP") as smtp_cls:
        server = smtp_cls.return_value
        server.__enter__.return_value = server
        yield smtp_cls


def _sent_message(smtp_cls):
    server = smtp_cls.return_value
    server.send_message.assert_called_once()
    return server.send_message.call_args[0][0]


class TestBuildMime:

    def test_inline_image_part_carries_content_id(self, message):
        mime = build_mime(message, "<id@example.com>")

        images = [p for p in mime.walk() if p.get_content_type() == "image/png"]
        assert len(images) == 1
        assert images[0]["Content-ID"] == "<qrcode>"
        assert images[0].get_content_disposition() == "inline"
        assert images[0].get_content() == PNG_BYTES

    def test_html_is_related_to_image(self, message):
        mime = build_mime(message, "<id@example.com>")

        related = [p for p in mime.walk() if p.get_content_type() == "multipart/related"]
        assert len(related) == 1
        html = related[0].get_body(preferencelist=("html",))
        assert 'src="cid:qrcode"' in html.get_content()

    def test_headers(self, message):
        mime = build_mime(message, "<id@example.com>")

        assert mime["From"] == "noreply@example.com"
        assert mime["To"] == "a@b.com"
        assert mime["Subject"] == "Welcome to Our Platform!"
        assert mime["Message-ID"] == "<id@example.com>"

    def test_missing_attachment_file_raises_send_error(self, tmp_path):
        msg = composer.compose("a@b.com", tmp_path / "gone.png", sender="noreply@example.com")

        with pytest.raises(SendError):
            build_mime(msg, "<id@example.com>")


class TestSend:

    def test_starttls_login_and_send(self, smtp_settings, message, mock_smtp):
        result = MailDispatcher(smtp_settings).send(message)

        mock_smtp.assert_called_once_with("smtp.test.local", 587, timeout=10.0)
        server = mock_smtp.return_value
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("noreply@example.com", "app-password")
        assert result.success is True
        assert result.message_id == _sent_message(mock_smtp)["Message-ID"]
        assert result.message_id.endswith("@example.com>")

    def test_ssl_mode_uses_smtp_ssl(self, smtp_settings, message):
        smtp_settings.security = "SSL"
        smtp_settings.port = 465

        with patch("services.email.dispatcher.SMTP_SSL") as ssl_cls, \
             patch("services.email.dispatcher.SMTP") as plain_cls:
            server = ssl_cls.return_value
            server.__enter__.return_value = server
            MailDispatcher(smtp_settings).send(message)

        plain_cls.assert_not_called()
        server.send_message.assert_called_once()

    def test_authentication_rejected(self, smtp_settings, message, mock_smtp):
        mock_smtp.return_value.login.side_effect = SMTPAuthenticationError(535, b"bad credentials")

        with pytest.raises(SendError, match="authentication failed"):
            MailDispatcher(smtp_settings).send(message)

    def test_recipient_rejected(self, smtp_settings, message, mock_smtp):
        mock_smtp.return_value.send_message.side_effect = SMTPRecipientsRefused(
            {"a@b.com": (550, b"no such user")}
        )

        with pytest.raises(SendError, match="a@b.com"):
            MailDispatcher(smtp_settings).send(message)

    def test_connection_failure(self, smtp_settings, message, mock_smtp):
        mock_smtp.side_effect = ConnectionRefusedError("refused")

        with pytest.raises(SendError, match="connection"):
            MailDispatcher(smtp_settings).send(message)

    def test_other_smtp_errors(self, smtp_settings, message, mock_smtp):
        mock_smtp.return_value.send_message.side_effect = SMTPServerDisconnected("gone")

        with pytest.raises(SendError):
            MailDispatcher(smtp_settings).send(message)
