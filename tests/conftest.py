"""
Pytest configuration and fixtures for all tests.
"""

import os
import tempfile
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

# config.py 가 import 시점에 환경 변수를 읽으므로 먼저 설정
os.environ.setdefault("EMAIL_USER", "noreply@example.com")
os.environ.setdefault("EMAIL_PASSWORD", "app-password")
os.environ.setdefault("SMTP_HOST", "smtp.test.local")
os.environ.setdefault("QR_DIR", tempfile.mkdtemp(prefix="qr-test-"))
os.environ.setdefault("LOG_LEVEL", "INFO")

from config import LedgerSettings, SmtpSettings  # noqa: E402
from services.artifacts.store import ArtifactStore  # noqa: E402

CONTRACT_ADDRESS = "0x" + "12" * 20
SIGNER_ADDRESS = "0x" + "34" * 20
TX_HASH = b"\xab" * 32


@pytest.fixture
def store(tmp_path):
    s = ArtifactStore(tmp_path / "qr-codes")
    s.ensure_directory()
    return s


@pytest.fixture
def smtp_settings():
    return SmtpSettings(
        host="smtp.test.local",
        port=587,
        username="noreply@example.com",
        password="app-password",
        sender="noreply@example.com",
    )


@pytest.fixture
def ledger_settings():
    return LedgerSettings(
        rpc_url="http://localhost:8545",
        private_key="0x" + "01" * 32,
        contract_address=CONTRACT_ADDRESS,
    )


@pytest.fixture
def mock_w3():
    """web3 double: nonce 5, receipt status 1 at block 10."""
    w3 = MagicMock()
    w3.eth.get_transaction_count.return_value = 5
    w3.eth.send_raw_transaction.return_value = TX_HASH
    w3.eth.wait_for_transaction_receipt.return_value = {"status": 1, "blockNumber": 10}
    w3.eth.contract.return_value.functions.postInputProof.return_value.build_transaction.return_value = {
        "to": CONTRACT_ADDRESS, "data": "0x", "gas": 7_000_000,
    }
    return w3


@pytest.fixture
def mock_signer():
    signer = MagicMock()
    signer.address = SIGNER_ADDRESS
    signer.sign_transaction.return_value = SimpleNamespace(raw_transaction=b"\x02signed")
    return signer
