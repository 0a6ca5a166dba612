# config.py
"""
프로젝트 전체에서 공통으로 쓰는
 - 환경 변수 (.env) 로딩
 - SMTP / QR / 블록체인 설정 상수 정의
"""

from __future__ import annotations
from pathlib import Path
from typing import Optional
import os

from dotenv import load_dotenv
from pydantic import BaseModel

# 로컬 개발 시 .env 파일 로드
load_dotenv()


def _optional_float(name: str) -> Optional[float]:
    raw = os.getenv(name, "").strip()
    return float(raw) if raw else None


# --- SMTP (이메일 발송) 관련 ---
SMTP_HOST: str = os.getenv("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT: int = int(os.getenv("SMTP_PORT", 587)) # 기본값 587 (STARTTLS)
SMTP_USER: str = os.getenv("EMAIL_USER", "")
SMTP_PASS: str = os.getenv("EMAIL_PASSWORD", "")
SMTP_FROM: str = os.getenv("SMTP_FROM", SMTP_USER)  # 표시 From (없으면 USER)
SMTP_SECURITY: str = os.getenv("SMTP_SECURITY", "TLS") # "TLS" | "SSL"
SMTP_TIMEOUT: float = float(os.getenv("SMTP_TIMEOUT", 10))

# --- QR 코드 관련 ---
QR_DIR: Path = Path(os.getenv("QR_DIR", "/tmp/qr-codes"))
QR_FALLBACK_URL: str = os.getenv("QR_FALLBACK_URL", "https://yourwebsite.com")

# --- 블록체인 (컨트랙트 호출) 관련 ---
RPC_URL: str = os.getenv("RPC_URL", "")
PRIVATE_KEY: str = os.getenv("PRIVATE_KEY", "")
CONTRACT_ADDRESS: str = os.getenv("CONTRACT_ADDRESS", "")
LEDGER_GAS_LIMIT: int = int(os.getenv("LEDGER_GAS_LIMIT", 7_000_000))
LEDGER_CONFIRM_TIMEOUT: Optional[float] = _optional_float("LEDGER_CONFIRM_TIMEOUT") # 미설정 시 무제한 대기
LEDGER_POLL_INTERVAL: float = float(os.getenv("LEDGER_POLL_INTERVAL", 0.5))

# --- 서버 ---
CORS_ORIGINS: list[str] = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
PORT: int = int(os.getenv("PORT", 3000))


# ────────────────────────────────────────────────────────────────
# 컴포넌트에 주입되는 설정 묶음

class SmtpSettings(BaseModel):
    host: str
    port: int = 587
    username: str = ""
    password: str = ""
    sender: str = ""
    security: str = "TLS"
    timeout: float = 10.0


class LedgerSettings(BaseModel):
    rpc_url: str
    private_key: str
    contract_address: str
    gas_limit: int = 7_000_000
    confirm_timeout: Optional[float] = None
    poll_interval: float = 0.5


def smtp_settings() -> SmtpSettings:
    return SmtpSettings(
        host=SMTP_HOST,
        port=SMTP_PORT,
        username=SMTP_USER,
        password=SMTP_PASS,
        sender=SMTP_FROM,
        security=SMTP_SECURITY,
        timeout=SMTP_TIMEOUT,
    )


def ledger_settings() -> Optional[LedgerSettings]:
    """RPC_URL / PRIVATE_KEY / CONTRACT_ADDRESS 중 하나라도 없으면 None"""
    if not (RPC_URL and PRIVATE_KEY and CONTRACT_ADDRESS):
        return None
    return LedgerSettings(
        rpc_url=RPC_URL,
        private_key=PRIVATE_KEY,
        contract_address=CONTRACT_ADDRESS,
        gas_limit=LEDGER_GAS_LIMIT,
        confirm_timeout=LEDGER_CONFIRM_TIMEOUT,
        poll_interval=LEDGER_POLL_INTERVAL,
    )
