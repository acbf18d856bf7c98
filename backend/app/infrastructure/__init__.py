"""
ZK-JWT Relayer Infrastructure Module.

Exports the chain-facing components:
    - JwtVerifierService: simulate → submit → confirm for verifyEmailProof
    - BlockchainError: stage-tagged relay failure
    - TransactionResult: tx hash and mined receipt
"""

from app.infrastructure.blockchain.web3_service import (
    BlockchainError,
    JwtVerifierService,
    SubmissionStage,
    TransactionResult,
    get_service,
    load_abi,
)

__all__ = [
    "BlockchainError",
    "JwtVerifierService",
    "SubmissionStage",
    "TransactionResult",
    "get_service",
    "load_abi",
]
