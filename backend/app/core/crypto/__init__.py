"""
ZK-JWT Relayer proof encoding.

Public API:
    - JwtProof:          EmailProof struct passed to verifyEmailProof.
    - build_jwt_proof:   Public signals + Groth16 proof → JwtProof.
    - encode_proof:      ABI-encode (a, b, c) with the pi_b swap.
    - ProofFormatError:  Raised on malformed signals or proof values.
"""

from app.core.crypto.jwt_proof import (
    JwtProof,
    ProofFormatError,
    build_jwt_proof,
    domain_name,
    encode_proof,
    is_code_exist,
    to_bytes32_hex,
    MIN_PUBLIC_SIGNALS,
)

__all__ = [
    "JwtProof",
    "ProofFormatError",
    "build_jwt_proof",
    "domain_name",
    "encode_proof",
    "is_code_exist",
    "to_bytes32_hex",
    "MIN_PUBLIC_SIGNALS",
]
