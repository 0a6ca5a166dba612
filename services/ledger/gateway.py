# services/ledger/gateway.py
"""
postInputProof(bytes) 컨트랙트 함수에 증명 데이터를 트랜잭션으로 제출하고
블록에 포함(확정)될 때까지 기다린다.

서명 계정 하나를 여러 요청이 공유하므로 nonce 조회 → 서명 → 전송 구간은
락으로 직렬화한다. 확정 대기는 락 밖에서 수행.
"""

from __future__ import annotations
import logging, re, threading
from typing import Any, Optional

from eth_account import Account
from hexbytes import HexBytes
from web3 import Web3
from web3.exceptions import TimeExhausted, Web3Exception

from config import LedgerSettings
from services.errors import ConfirmationTimeoutError, SubmissionError
from .schemas import TransactionRecord

logger = logging.getLogger(__name__)

POST_INPUT_PROOF_ABI = [
    {
        "inputs": [
            {"internalType": "bytes", "name": "inputProof", "type": "bytes"},
        ],
        "name": "postInputProof",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]

# 노드 거부(수수료 부족, nonce 충돌 등)와 연결 오류
_RPC_ERRORS = (Web3Exception, ValueError, OSError)

# 0x 접두사 + 짝수 자리 hex 만 허용 (바이트를 임의로 보정하지 않는다)
_HEX_PROOF = re.compile(r"0x(?:[0-9a-fA-F]{2})*")


def _proof_bytes(payload: str | bytes) -> HexBytes:
    if isinstance(payload, (bytes, bytearray)):
        return HexBytes(payload)
    if not isinstance(payload, str) or not _HEX_PROOF.fullmatch(payload):
        raise SubmissionError(f"invalid proof payload: {payload!r:.80}")
    return HexBytes(payload)


class LedgerGateway:
    def __init__(self, settings: LedgerSettings, w3: Optional[Web3] = None, signer: Any = None):
        self.settings = settings
        self.w3 = w3 or Web3(Web3.HTTPProvider(settings.rpc_url))
        self.signer = signer or Account.from_key(settings.private_key)
        self.contract = self.w3.eth.contract(
            address=Web3.to_checksum_address(settings.contract_address),
            abi=POST_INPUT_PROOF_ABI,
        )
        self._lock = threading.Lock()

    @property
    def address(self) -> str:
        return self.signer.address

    def submit_proof(self, payload: str | bytes) -> TransactionRecord:
        proof = _proof_bytes(payload)

        with self._lock:
            tx_hash = self._broadcast(proof)
        tx_hex = Web3.to_hex(tx_hash)
        logger.info("proof submitted tx=%s, waiting for confirmation", tx_hex)

        receipt = self._wait(tx_hash)
        if receipt["status"] == 0:
            raise SubmissionError(f"transaction {tx_hex} reverted")

        logger.info("proof confirmed tx=%s block=%s", tx_hex, receipt.get("blockNumber"))
        return TransactionRecord(
            transaction_hash=tx_hex,
            confirmation_status="confirmed",
            block_number=receipt.get("blockNumber"),
        )

    def _broadcast(self, proof: bytes) -> HexBytes:
        try:
            nonce = self.w3.eth.get_transaction_count(self.address, "pending")
            tx = self.contract.functions.postInputProof(proof).build_transaction({
                "from": self.address,
                "nonce": nonce,
                "gas": self.settings.gas_limit,
            })
            signed = self.signer.sign_transaction(tx)
            return HexBytes(self.w3.eth.send_raw_transaction(signed.raw_transaction))
        except _RPC_ERRORS as e:
            raise SubmissionError(f"transaction rejected: {e}") from e

    def _wait(self, tx_hash: HexBytes):
        timeout = self.settings.confirm_timeout
        try:
            return self.w3.eth.wait_for_transaction_receipt(
                tx_hash,
                timeout=timeout if timeout is not None else float("inf"),
                poll_latency=self.settings.poll_interval,
            )
        except TimeExhausted as e:
            raise ConfirmationTimeoutError(
                f"transaction {Web3.to_hex(tx_hash)} not confirmed within {timeout}s"
            ) from e
        except _RPC_ERRORS as e:
            raise SubmissionError(f"confirmation failed: {e}") from e
