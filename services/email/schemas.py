# services/email/schemas.py
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from config import QR_FALLBACK_URL


class EmailRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    to: Optional[EmailStr] = None
    qr_url: str = Field(default=QR_FALLBACK_URL, alias="qrUrl")

    @field_validator("to", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("qr_url", mode="before")
    @classmethod
    def _fallback_url(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return QR_FALLBACK_URL
        return v


class InlineAttachment(BaseModel):
    filename: str
    path: Path
    cid: str
    mime_type: str = "image/png"


class ComposedMessage(BaseModel):
    sender: str
    recipient: str
    subject: str = Field(..., min_length=1)
    html: str
    text: str
    attachment: InlineAttachment


class DeliveryResult(BaseModel):
    success: bool
    message_id: Optional[str] = None
