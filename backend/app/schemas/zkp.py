from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Proof(BaseModel):
    pi_a: List[str] = Field(..., min_length=2)
    pi_b: List[List[str]] = Field(..., min_length=2)
    pi_c: List[str] = Field(..., min_length=2)
    protocol: str = "groth16"
    curve: str = "bn128"

    @field_validator("pi_b")
    @classmethod
    def _rows_are_pairs(cls, v: List[List[str]]) -> List[List[str]]:
        for i, row in enumerate(v[:2]):
            if len(row) < 2:
                raise ValueError(f"pi_b[{i}] must contain at least 2 elements")
        return v


class JwtHeader(BaseModel):
    """Decoded JWT header. Only `kid` is used; other claims pass through."""
    model_config = ConfigDict(extra="allow")

    kid: str


class JwtPayload(BaseModel):
    """Decoded JWT payload. `nonce` carries the masked command."""
    model_config = ConfigDict(extra="allow")

    iss: str
    azp: str
    nonce: str


class ProofSubmission(BaseModel):
    """Body of POST /api/submitProofToContract."""
    proof: Proof
    pub_signals: List[str]
    header: JwtHeader
    payload: JwtPayload


class SubmissionResponse(BaseModel):
    message: str
    transactionHash: str
    blockNumber: str


class SubmissionErrorResponse(BaseModel):
    error: str
    message: Optional[str] = None
    stage: Optional[str] = None
    transactionHash: Optional[str] = None
