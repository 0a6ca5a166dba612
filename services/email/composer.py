# services/email/composer.py
"""
환영 메일 구성. HTML 본문의 <img src="cid:..."> 와 첨부파일의 Content-ID 는
반드시 같은 값이어야 이미지가 본문에 인라인으로 표시된다.
그래서 둘은 compose() 한 곳에서만 함께 만든다.
"""

from __future__ import annotations
from pathlib import Path
from string import Template

from .schemas import ComposedMessage, InlineAttachment

QR_CID = "qrcode"
QR_FILENAME = "qrcode.png"
WELCOME_SUBJECT = "Welcome to Our Platform!"

WELCOME_HTML = Template("""\
<!DOCTYPE html>
<html>
<head>
    <style>
        .container {
            max-width: 600px;
            margin: auto;
            padding: 20px;
            font-family: Arial, sans-serif;
            background-color: #ffffff;
        }
        .header {
            background: #4F46E5;
            color: white;
            padding: 20px;
            text-align: center;
            border-radius: 10px;
            margin-bottom: 20px;
        }
        .content {
            margin: 20px 0;
            line-height: 1.6;
            color: #333333;
        }
        .qr-section {
            text-align: center;
            margin: 20px 0;
            padding: 20px;
            background-color: #f8f9fa;
            border-radius: 10px;
        }
    </style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1>Welcome! &#128640;</h1>
        </div>
        <div class="content">
            <p>Thank you for joining us!</p>
            <div class="qr-section">
                <img src="cid:${cid}" alt="QR Code" style="width: 200px; height: 200px;"/>
                <p style="color: #666; margin-top: 10px;">Scan to access your dashboard</p>
            </div>
        </div>
    </div>
</body>
</html>
""")

WELCOME_TEXT = (
    "Welcome!\n\n"
    "Thank you for joining us!\n"
    "Scan the attached QR code to access your dashboard."
)


def compose(
    recipient: str,
    artifact_path: str | Path,
    sender: str,
    subject: str = WELCOME_SUBJECT,
) -> ComposedMessage:
    return ComposedMessage(
        sender=sender,
        recipient=recipient,
        subject=subject,
        html=WELCOME_HTML.substitute(cid=QR_CID),
        text=WELCOME_TEXT,
        attachment=InlineAttachment(
            filename=QR_FILENAME,
            path=Path(artifact_path),
            cid=QR_CID,
        ),
    )
