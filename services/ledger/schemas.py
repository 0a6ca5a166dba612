# services/ledger/schemas.py
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProofSubmission(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # 컨트랙트가 검증하므로 로컬에서는 구조를 검사하지 않는다
    input_proof: str = Field(..., alias="inputProof")
    handle: Optional[Any] = None


class TransactionRecord(BaseModel):
    transaction_hash: str
    confirmation_status: str
    block_number: Optional[int] = None
